"""
Payment Service.

Opens checkout sessions and reconciles completed ones into local records.
Reconciliation is idempotent: the gateway's transaction id is unique in
the payments table, and a replayed session returns the stored payment.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from zap_shift.app.core.exceptions import ValidationFailedError
from zap_shift.app.models.parcel import Parcel
from zap_shift.app.models.parcel_enums import DeliveryStatus, PaymentStatus
from zap_shift.app.models.payment import Payment
from zap_shift.app.schemas.payment import CheckoutSessionCreate
from zap_shift.app.services.payment_gateway import StripeGateway
from zap_shift.app.services.tracking import append_tracking_log

logger = logging.getLogger(__name__)

PAID = "paid"


@dataclass
class ReconciliationResult:
    success: bool
    message: Optional[str] = None
    newly_created: bool = False
    payment: Optional[Payment] = None


def to_minor_units(cost: float) -> int:
    """Convert a major-unit amount to cents; fractions of a cent are dropped."""
    return int(float(cost) * 100)


class PaymentService:

    @staticmethod
    async def create_checkout_session(gateway: StripeGateway, data: CheckoutSessionCreate) -> str:
        """Start a hosted checkout for a parcel and return the payer's redirect URL."""
        metadata = {"parcelId": str(data.parcel_id)}
        if data.parcel_name:
            metadata["parcelName"] = data.parcel_name
        if data.tracking_id:
            metadata["trackingId"] = data.tracking_id

        url = await gateway.create_checkout_session(
            unit_amount=to_minor_units(data.cost),
            product_name=f"Please pay for: {data.parcel_name or 'parcel'}",
            customer_email=data.sender_email,
            metadata=metadata,
        )
        logger.info("Checkout session opened for parcel %s", data.parcel_id)
        return url

    @staticmethod
    async def complete_checkout(db: AsyncSession, gateway: StripeGateway, session_id: str) -> ReconciliationResult:
        """
        Reconcile a finished checkout session.

        Flow:
        1. Retrieve the session; unpaid or intent-less sessions change nothing
        2. Idempotency check on the transaction id
        3. Mark the parcel paid (status moves only out of ``parcel_created``)
        4. Insert the payment, plus a ``parcel_paid`` ledger entry when the
           status moved

        A parcel deleted before payment completed does not block the record:
        the payment is stored from the session metadata alone.

        Steps 3 and 4 commit together. If a concurrent call inserts the same
        transaction first, this call rolls back and reports that record.
        """
        session = await gateway.retrieve_session(session_id)
        transaction_id = session.payment_intent

        if not transaction_id:
            return ReconciliationResult(success=False, message="No transaction found for this session")

        if session.payment_status != PAID:
            return ReconciliationResult(success=False, message=f"Payment status is '{session.payment_status}'")

        existing = await _find_by_transaction(db, transaction_id)
        if existing:
            return ReconciliationResult(success=True, payment=existing)

        parcel_id = session.metadata.get("parcelId")
        if not parcel_id or not str(parcel_id).isdigit():
            raise ValidationFailedError("Checkout session carries no parcel id", details={"session_id": session_id})

        parcel_id = int(parcel_id)
        tracking_id = session.metadata.get("trackingId")
        parcel_name = session.metadata.get("parcelName")
        customer_email = session.customer_email
        log_paid = False

        parcel = await db.get(Parcel, parcel_id)
        if parcel is None:
            # Charged payments are recorded even without a parcel
            logger.warning("Payment %s is for parcel %s which no longer exists", transaction_id, parcel_id)
            log_paid = tracking_id is not None
        else:
            tracking_id = tracking_id or parcel.tracking_id
            parcel_name = parcel_name or parcel.parcel_name
            customer_email = customer_email or parcel.sender_email
            parcel.payment_status = PaymentStatus.PAID
            # Only an unpaid parcel moves; driver_assigned -> parcel_paid means a rider declined
            if parcel.delivery_status == DeliveryStatus.PARCEL_CREATED:
                parcel.delivery_status = DeliveryStatus.PARCEL_PAID
                log_paid = True
            else:
                logger.warning(
                    "Payment %s recorded for parcel %s already in %s",
                    transaction_id, parcel.id, parcel.delivery_status.value
                )

        payment = Payment(
            transaction_id=transaction_id,
            parcel_id=parcel_id,
            parcel_name=parcel_name,
            customer_email=customer_email or "",
            amount=session.amount_total / 100,
            currency=session.currency,
            payment_status=session.payment_status,
            tracking_id=tracking_id,
        )
        db.add(payment)
        # The ledger only records a move the parcel actually made
        if log_paid:
            append_tracking_log(db, tracking_id, DeliveryStatus.PARCEL_PAID.value)

        try:
            await db.commit()
        except IntegrityError:
            await db.rollback()
            logger.info("Payment %s was recorded by a concurrent request", transaction_id)
            return ReconciliationResult(success=True, payment=await _find_by_transaction(db, transaction_id))

        await db.refresh(payment)
        logger.info("Payment %s recorded for parcel %s", transaction_id, parcel_id)
        return ReconciliationResult(success=True, newly_created=True, payment=payment)

    @staticmethod
    async def list_payments(db: AsyncSession, customer_email: str) -> List[Payment]:
        result = await db.execute(
            select(Payment)
            .where(Payment.customer_email == customer_email)
            .order_by(Payment.paid_at.desc(), Payment.id.desc())
        )
        return result.scalars().all()


async def _find_by_transaction(db: AsyncSession, transaction_id: str) -> Optional[Payment]:
    result = await db.execute(select(Payment).where(Payment.transaction_id == transaction_id))
    return result.scalar_one_or_none()
