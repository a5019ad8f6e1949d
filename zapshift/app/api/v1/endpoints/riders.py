"""
Rider API Endpoints.

Rider applications, admin review and the rider's own delivery views.
"""

from fastapi import APIRouter, Depends, status, Query, Path
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func, or_
from typing import Optional

from zapshift.app.core.config import Settings, get_settings
from zapshift.app.db.session import get_db
from zapshift.app.models.rider import Rider
from zapshift.app.models.parcel import Parcel
from zapshift.app.models.rider_enums import RiderStatus, WorkStatus
from zapshift.app.models.parcel_enums import DeliveryStatus, CashOutStatus
from zapshift.app.schemas.rider import (
    RiderApplication, RiderResponse, RiderListResponse, RiderReviewRequest,
    RiderReviewResponse, RiderEarningsResponse
)
from zapshift.app.schemas.parcel import ParcelResponse, ParcelListResponse
from zapshift.app.core.exceptions import DuplicateResourceError
from zapshift.app.core.guards import require_authenticated, require_admin, require_rider
from zapshift.app.domain.dispatch.status_machine import ACTIVE_DELIVERY, COMPLETED
from zapshift.app.domain.payouts.earnings import compute_rider_earning
from zapshift.app.domain.providers import get_review_service
from zapshift.app.domain.riders.review_service import RiderReviewService
from zapshift.app.services.audit import log_event, AuditAction

router = APIRouter(prefix="/riders", tags=["Riders"])
me_router = APIRouter(prefix="/rider", tags=["Rider - Deliveries"])


@router.post("", response_model=RiderResponse, status_code=status.HTTP_201_CREATED)
async def apply_as_rider(
    application: RiderApplication,
    current_user: dict = Depends(require_authenticated),
    db: AsyncSession = Depends(get_db)
):
    """
    Submit a rider application for the caller.

    One application per email; it starts PENDING and IDLE.
    """
    existing = await db.execute(select(Rider.id).where(Rider.email == current_user["email"]))
    if existing.scalar_one_or_none():
        raise DuplicateResourceError(
            "A rider application already exists for this email",
            details={"email": current_user["email"]}
        )

    rider = Rider(
        email=current_user["email"],
        status=RiderStatus.PENDING,
        work_status=WorkStatus.IDLE,
        **application.model_dump()
    )
    db.add(rider)
    await db.commit()
    await db.refresh(rider)

    await log_event(
        db=db,
        action=AuditAction.RIDER_APPLIED,
        actor_email=current_user["email"],
        target_type="rider",
        target_id=rider.id,
        metadata={"district": rider.district}
    )

    return RiderResponse.model_validate(rider)


@router.get("", response_model=RiderListResponse)
async def list_riders(
    rider_status: Optional[RiderStatus] = Query(None, alias="status"),
    admin: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """List riders, optionally by application status (admin only)."""
    query = select(Rider).order_by(Rider.applied_at.desc(), Rider.id.desc())
    if rider_status:
        query = query.where(Rider.status == rider_status)

    riders = (await db.execute(query)).scalars().all()
    return RiderListResponse(
        riders=[RiderResponse.model_validate(r) for r in riders],
        total=len(riders)
    )


@router.get("/available", response_model=RiderListResponse)
async def list_available_riders(
    district: str = Query(..., min_length=1, description="Pickup district"),
    admin: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """Active, idle riders of a district, least recently assigned first (admin only)."""
    query = select(Rider).where(
        Rider.district == district,
        Rider.status == RiderStatus.ACTIVE,
        Rider.work_status == WorkStatus.IDLE
    ).order_by(Rider.last_assigned_at.asc().nulls_first(), Rider.id.asc())

    riders = (await db.execute(query)).scalars().all()
    return RiderListResponse(
        riders=[RiderResponse.model_validate(r) for r in riders],
        total=len(riders)
    )


@router.patch("/{rider_id}/status", response_model=RiderReviewResponse)
async def review_rider(
    rider_id: int = Path(..., description="Rider ID"),
    review: RiderReviewRequest = ...,
    admin: dict = Depends(require_admin),
    service: RiderReviewService = Depends(get_review_service)
):
    """
    Approve or reject a rider (admin only).

    Approval grants the rider role to the user with the rider's email.
    """
    rider, role_granted = await service.review_rider(
        rider_id, RiderStatus(review.status.value), actor_email=admin["email"]
    )
    return RiderReviewResponse(rider=RiderResponse.model_validate(rider), role_granted=role_granted)


@me_router.get("/parcels", response_model=ParcelListResponse)
async def my_active_parcels(
    rider: dict = Depends(require_rider),
    db: AsyncSession = Depends(get_db)
):
    """Parcels the calling rider still has to pick up or deliver."""
    result = await db.execute(
        select(Parcel).where(
            Parcel.assigned_rider_email == rider["email"],
            Parcel.delivery_status.in_(ACTIVE_DELIVERY)
        ).order_by(Parcel.assigned_at.desc(), Parcel.id.desc())
    )
    parcels = result.scalars().all()
    return ParcelListResponse(parcels=[ParcelResponse.model_validate(p) for p in parcels], total=len(parcels))


@me_router.get("/completed-parcels", response_model=ParcelListResponse)
async def my_completed_parcels(
    rider: dict = Depends(require_rider),
    db: AsyncSession = Depends(get_db)
):
    """Parcels the calling rider has delivered, latest first."""
    result = await db.execute(
        select(Parcel).where(
            Parcel.assigned_rider_email == rider["email"],
            Parcel.delivery_status.in_(COMPLETED)
        ).order_by(Parcel.delivered_at.desc(), Parcel.id.desc())
    )
    parcels = result.scalars().all()
    return ParcelListResponse(parcels=[ParcelResponse.model_validate(p) for p in parcels], total=len(parcels))


@me_router.get("/earnings", response_model=RiderEarningsResponse)
async def my_earnings(
    rider: dict = Depends(require_rider),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings)
):
    """
    Earnings summary for the calling rider.

    Cashed-out amounts are summed as stored; pending amounts are what the
    delivered, not yet cashed-out parcels would pay at current rates.
    """
    paid = Parcel.cash_out_status == CashOutStatus.PAID
    result = await db.execute(
        select(
            func.coalesce(func.sum(Parcel.rider_earning), 0),
            func.count(Parcel.id)
        ).where(Parcel.assigned_rider_email == rider["email"], paid)
    )
    cashed_out_total, cashed_out_parcels = result.one()

    pending = await db.execute(
        select(Parcel.cost, Parcel.sender_district, Parcel.receiver_district).where(
            Parcel.assigned_rider_email == rider["email"],
            Parcel.delivery_status == DeliveryStatus.DELIVERED,
            or_(Parcel.cash_out_status.is_(None), ~paid)
        )
    )
    pending_rows = pending.all()
    pending_total = sum(
        compute_rider_earning(cost, sender, receiver, settings)
        for cost, sender, receiver in pending_rows
    )

    return RiderEarningsResponse(
        rider_email=rider["email"],
        cashed_out_total=int(cashed_out_total or 0),
        cashed_out_parcels=cashed_out_parcels,
        pending_total=pending_total,
        pending_parcels=len(pending_rows)
    )
