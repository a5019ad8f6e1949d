"""
FastAPI providers for domain services.

Each request gets services bound to its own session and the active settings.
"""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from zapshift.app.core.config import Settings, get_settings
from zapshift.app.db.session import get_db
from zapshift.app.domain.dispatch.assignment_service import RiderAssignmentService
from zapshift.app.domain.dispatch.status_service import DeliveryStatusService
from zapshift.app.domain.payouts.cash_out_service import CashOutService
from zapshift.app.domain.payments.payment_service import PaymentService
from zapshift.app.domain.riders.review_service import RiderReviewService


def get_assignment_service(db: AsyncSession = Depends(get_db)) -> RiderAssignmentService:
    return RiderAssignmentService(db)


def get_status_service(
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings)
) -> DeliveryStatusService:
    return DeliveryStatusService(db, settings)


def get_cash_out_service(
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings)
) -> CashOutService:
    return CashOutService(db, settings)


def get_payment_service(
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings)
) -> PaymentService:
    return PaymentService(db, settings)


def get_review_service(db: AsyncSession = Depends(get_db)) -> RiderReviewService:
    return RiderReviewService(db)
