"""
API Router.

Aggregates all resource endpoints.
"""

from fastapi import APIRouter
from zap_shift.app.api.endpoints import parcels, payments, riders, tracking, users

router = APIRouter()

router.include_router(users.router)
router.include_router(riders.router)
router.include_router(parcels.router)
router.include_router(payments.router)
router.include_router(tracking.router)
