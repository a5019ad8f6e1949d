"""
API v1 Router.

Aggregates all v1 API endpoints.
"""

from fastapi import APIRouter
from zapshift.app.api.v1.endpoints import (
    auth, users, parcels, riders, payments, trackings
)

router = APIRouter()

router.include_router(auth.router)
router.include_router(users.router)

# Parcel lifecycle
router.include_router(parcels.router)
router.include_router(trackings.router)
router.include_router(payments.router)

# Riders: admin review and the rider's own views
router.include_router(riders.router)
router.include_router(riders.me_router)
