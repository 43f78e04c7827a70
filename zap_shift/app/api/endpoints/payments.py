"""
Payment API Endpoints.

Hosted checkout creation, completion callback and payment history.
"""

from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from zap_shift.app.core.dependencies import get_verified_email
from zap_shift.app.core.exceptions import InsufficientPermissionsError
from zap_shift.app.db.session import get_db
from zap_shift.app.schemas.payment import (
    CheckoutSessionCreate, CheckoutSessionResponse,
    PaymentResponse, PaymentSuccessResponse
)
from zap_shift.app.services.payment_gateway import StripeGateway, get_payment_gateway
from zap_shift.app.services.payments import PaymentService

router = APIRouter(tags=["Payments"])


@router.post("/create-checkout-session", response_model=CheckoutSessionResponse)
async def create_checkout_session(
    checkout: CheckoutSessionCreate,
    gateway: StripeGateway = Depends(get_payment_gateway)
):
    """Open a hosted checkout page for a parcel and return its URL."""
    url = await PaymentService.create_checkout_session(gateway, checkout)
    return CheckoutSessionResponse(url=url)


@router.patch("/payment-success", response_model=PaymentSuccessResponse)
async def payment_success(
    session_id: str = Query(..., min_length=1),
    gateway: StripeGateway = Depends(get_payment_gateway),
    db: AsyncSession = Depends(get_db)
):
    """
    Reconcile a completed checkout session.
    
    Safe to call repeatedly for the same session: only the first call
    records the payment (``newlyCreated``); later calls return it.
    """
    outcome = await PaymentService.complete_checkout(db, gateway, session_id)
    payment = outcome.payment

    return PaymentSuccessResponse(
        success=outcome.success,
        message=outcome.message,
        newly_created=outcome.newly_created,
        transaction_id=payment.transaction_id if payment else None,
        tracking_id=payment.tracking_id if payment else None,
        payment=PaymentResponse.model_validate(payment) if payment else None,
    )


@router.get("/payments", response_model=List[PaymentResponse])
async def list_payments(
    customer_email: Optional[str] = Query(None, alias="customerEmail"),
    email: str = Depends(get_verified_email),
    db: AsyncSession = Depends(get_db)
):
    """
    List the caller's payments, newest first.
    
    Querying another customer's payments is forbidden.
    """
    if customer_email and customer_email != email:
        raise InsufficientPermissionsError("Forbidden access")

    payments = await PaymentService.list_payments(db, email)
    return [PaymentResponse.model_validate(p) for p in payments]
