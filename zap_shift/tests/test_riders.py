"""
Integration tests for Riders.

Tests rider applications, filters, admin approval and delivery stats.
"""

from datetime import datetime, timezone

import pytest
from sqlalchemy import select

from zap_shift.app.models.enums import RiderStatus, UserRole, WorkStatus
from zap_shift.app.models.parcel import Parcel
from zap_shift.app.models.parcel_enums import DeliveryStatus
from zap_shift.app.models.tracking_log import TrackingLog
from zap_shift.app.models.user import User

APPLICATION = {
    "riderEmail": "applicant@zapshift.io",
    "name": "Applicant",
    "phone": "01700000000",
    "riderRegion": "Dhaka",
    "riderDistrict": "Gazipur",
    "nid": "1234567890",
    "bikeRegistration": "DHA-12-3456",
}


# TEST 1: Apply
@pytest.mark.asyncio
async def test_apply_as_rider(client, headers_for):
    response = await client.post("/riders", json=APPLICATION, headers=headers_for("applicant@zapshift.io"))

    assert response.status_code == 201
    data = response.json()
    assert data["inserted"] is True

    rider = await client.get(f"/riders/{data['insertedId']}", headers=headers_for("applicant@zapshift.io"))
    assert rider.json()["status"] == "pending"
    assert rider.json()["workStatus"] == "available"
    assert rider.json()["riderDistrict"] == "Gazipur"


@pytest.mark.asyncio
async def test_duplicate_application(client, headers_for):
    headers = headers_for("applicant@zapshift.io")
    first = await client.post("/riders", json=APPLICATION, headers=headers)
    second = await client.post("/riders", json={**APPLICATION, "riderDistrict": "Khulna"}, headers=headers)

    assert second.status_code == 200
    assert second.json()["inserted"] is False
    assert second.json()["insertedId"] == first.json()["insertedId"]

    rider = await client.get(f"/riders/{first.json()['insertedId']}", headers=headers)
    assert rider.json()["riderDistrict"] == "Gazipur"


@pytest.mark.asyncio
async def test_apply_requires_token(client):
    response = await client.post("/riders", json=APPLICATION)

    assert response.status_code == 401


# TEST 2: List Riders
@pytest.mark.asyncio
async def test_list_riders_filters(client, make_rider, headers_for):
    await make_rider("a@zapshift.io", district="Dhaka")
    await make_rider("b@zapshift.io", district="Dhaka", work_status=WorkStatus.IN_DELIVERY)
    await make_rider("c@zapshift.io", district="Sylhet")
    await make_rider("d@zapshift.io", district="Dhaka", status=RiderStatus.PENDING)

    response = await client.get("/riders", params={
        "status": "approved", "district": "Dhaka", "workStatus": "available"
    }, headers=headers_for("admin@zapshift.io"))

    assert response.status_code == 200
    assert [r["riderEmail"] for r in response.json()] == ["a@zapshift.io"]


@pytest.mark.asyncio
async def test_list_riders_newest_first(client, make_rider, headers_for):
    await make_rider("first@zapshift.io")
    await make_rider("second@zapshift.io")

    response = await client.get("/riders", headers=headers_for("admin@zapshift.io"))

    assert [r["riderEmail"] for r in response.json()] == ["second@zapshift.io", "first@zapshift.io"]


@pytest.mark.asyncio
async def test_get_missing_rider(client, headers_for):
    response = await client.get("/riders/9999", headers=headers_for("admin@zapshift.io"))

    assert response.status_code == 404


# TEST 3: Approval
@pytest.mark.asyncio
async def test_approval_promotes_user(client, make_user, make_rider, admin_headers, db_session):
    user = await make_user("applicant@zapshift.io")
    rider = await make_rider("applicant@zapshift.io", status=RiderStatus.PENDING)

    response = await client.patch(
        f"/riders/{rider.id}",
        json={"status": "approved", "email": "applicant@zapshift.io"},
        headers=admin_headers,
    )

    assert response.status_code == 200
    assert response.json()["status"] == "approved"
    assert response.json()["workStatus"] == "available"

    db_session.expire_all()
    stored = await db_session.scalar(select(User).where(User.id == user.id))
    assert stored.role == UserRole.RIDER


@pytest.mark.asyncio
async def test_rejection_keeps_user_role(client, make_user, make_rider, admin_headers, db_session):
    user = await make_user("applicant@zapshift.io")
    rider = await make_rider("applicant@zapshift.io", status=RiderStatus.PENDING)

    response = await client.patch(f"/riders/{rider.id}", json={"status": "rejected"}, headers=admin_headers)

    assert response.json()["status"] == "rejected"
    db_session.expire_all()
    stored = await db_session.scalar(select(User).where(User.id == user.id))
    assert stored.role == UserRole.USER


@pytest.mark.asyncio
async def test_non_admin_cannot_approve(client, make_user, make_rider, headers_for):
    await make_user("plain@zapshift.io")
    rider = await make_rider("applicant@zapshift.io", status=RiderStatus.PENDING)

    response = await client.patch(
        f"/riders/{rider.id}", json={"status": "approved"}, headers=headers_for("plain@zapshift.io")
    )

    assert response.status_code == 403


@pytest.mark.asyncio
async def test_approve_missing_rider(client, admin_headers):
    response = await client.patch("/riders/9999", json={"status": "approved"}, headers=admin_headers)

    assert response.status_code == 404


# TEST 4: Delete
@pytest.mark.asyncio
async def test_delete_rider(client, make_rider, admin_headers):
    rider = await make_rider("gone@zapshift.io")

    response = await client.delete(f"/riders/{rider.id}", headers=admin_headers)

    assert response.status_code == 200
    assert response.json() == {"deletedCount": 1}
    assert (await client.get(f"/riders/{rider.id}", headers=admin_headers)).status_code == 404


@pytest.mark.asyncio
async def test_delete_rider_requires_admin(client, make_rider, rider_headers):
    rider = await make_rider("other@zapshift.io")

    response = await client.delete(f"/riders/{rider.id}", headers=rider_headers)

    assert response.status_code == 403


# TEST 5: Deliveries Per Day
@pytest.fixture
async def delivered_history(db_session):
    """Three deliveries for rider@zapshift.io across two days, one for someone else."""
    deliveries = [
        ("PRCL-20260301-000001", "rider@zapshift.io", datetime(2026, 3, 2, 9, 0, tzinfo=timezone.utc)),
        ("PRCL-20260301-000002", "rider@zapshift.io", datetime(2026, 3, 2, 18, 30, tzinfo=timezone.utc)),
        ("PRCL-20260301-000003", "rider@zapshift.io", datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)),
        ("PRCL-20260301-000004", "other@zapshift.io", datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)),
    ]
    for tracking_id, rider_email, delivered_at in deliveries:
        db_session.add(Parcel(
            tracking_id=tracking_id,
            sender_email="sender@zapshift.io",
            cost=10,
            delivery_status=DeliveryStatus.PARCEL_DELIVERED,
            rider_email=rider_email,
        ))
        db_session.add(TrackingLog(
            tracking_id=tracking_id,
            status="parcel_delivered",
            details="parcel delivered",
            created_at=delivered_at,
        ))
    # Still in transit; must not be counted
    db_session.add(Parcel(
        tracking_id="PRCL-20260301-000005",
        sender_email="sender@zapshift.io",
        cost=10,
        delivery_status=DeliveryStatus.PARCEL_PICKED_UP,
        rider_email="rider@zapshift.io",
    ))
    await db_session.commit()


@pytest.mark.asyncio
async def test_deliveries_per_day(client, rider_headers, delivered_history):
    response = await client.get("/riders/delivery-per-day", headers=rider_headers)

    assert response.status_code == 200
    assert response.json() == [
        {"day": "01-03-2026", "deliveredCount": 1},
        {"day": "02-03-2026", "deliveredCount": 2},
    ]


@pytest.mark.asyncio
async def test_deliveries_per_day_for_other_rider_forbidden(client, rider_headers, delivered_history):
    response = await client.get(
        "/riders/delivery-per-day", params={"email": "other@zapshift.io"}, headers=rider_headers
    )

    assert response.status_code == 403


@pytest.mark.asyncio
async def test_deliveries_per_day_requires_rider(client, admin_headers):
    response = await client.get("/riders/delivery-per-day", headers=admin_headers)

    assert response.status_code == 403
