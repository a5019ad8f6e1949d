"""
Parcel API Endpoints.

Senders book and view parcels; admins assign riders; riders and admins
advance the delivery lifecycle and cash out completed deliveries.
"""

import secrets

from fastapi import APIRouter, Depends, status, Query, Path
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func, update, delete
from typing import Optional

from zapshift.app.db.session import get_db
from zapshift.app.models.parcel import Parcel
from zapshift.app.models.rider import Rider
from zapshift.app.models.parcel_enums import DeliveryStatus, PaymentStatus
from zapshift.app.models.rider_enums import WorkStatus
from zapshift.app.schemas.parcel import (
    ParcelCreate, ParcelResponse, ParcelListResponse, ParcelDeleteResponse,
    RiderAssignmentRequest, StatusUpdateRequest, StatusCountResponse
)
from zapshift.app.core.exceptions import ResourceNotFoundError, InvalidTransitionError
from zapshift.app.core.guards import (
    require_authenticated, require_admin, require_admin_or_rider, is_admin, enforce_parcel_access
)
from zapshift.app.domain.providers import get_assignment_service, get_status_service, get_cash_out_service
from zapshift.app.domain.dispatch.assignment_service import RiderAssignmentService
from zapshift.app.domain.dispatch.status_service import DeliveryStatusService
from zapshift.app.domain.dispatch.status_machine import ACTIVE_DELIVERY
from zapshift.app.domain.payouts.cash_out_service import CashOutService
from zapshift.app.services.audit import log_event, AuditAction

router = APIRouter(prefix="/parcels", tags=["Parcels"])


def generate_tracking_id() -> str:
    return f"ZS-{secrets.token_hex(5).upper()}"


@router.get("", response_model=ParcelListResponse)
async def list_parcels(
    email: Optional[str] = Query(None, description="Owner email (admin only)"),
    delivery_status: Optional[DeliveryStatus] = Query(None),
    payment_status: Optional[PaymentStatus] = Query(None),
    current_user: dict = Depends(require_authenticated),
    db: AsyncSession = Depends(get_db)
):
    """
    List parcels, latest first.

    Non-admin callers always get their own parcels; admins may filter by
    owner email or see all.
    """
    query = select(Parcel)

    if not is_admin(current_user):
        query = query.where(Parcel.user_email == current_user["email"])
    elif email:
        query = query.where(Parcel.user_email == email.strip().lower())

    if delivery_status:
        query = query.where(Parcel.delivery_status == delivery_status)
    if payment_status:
        query = query.where(Parcel.payment_status == payment_status)

    result = await db.execute(query.order_by(Parcel.created_at.desc(), Parcel.id.desc()))
    parcels = result.scalars().all()

    return ParcelListResponse(
        parcels=[ParcelResponse.model_validate(p) for p in parcels],
        total=len(parcels)
    )


@router.get("/status-counts", response_model=StatusCountResponse)
async def parcel_status_counts(
    admin: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """Count parcels per delivery status (admin dashboard)."""
    result = await db.execute(
        select(Parcel.delivery_status, func.count(Parcel.id)).group_by(Parcel.delivery_status)
    )
    counts = {s.value: 0 for s in DeliveryStatus}
    for delivery_status, count in result.all():
        counts[delivery_status.value] = count

    return StatusCountResponse(counts=counts, total=sum(counts.values()))


@router.post("", response_model=ParcelResponse, status_code=status.HTTP_201_CREATED)
async def create_parcel(
    parcel_data: ParcelCreate,
    current_user: dict = Depends(require_authenticated),
    db: AsyncSession = Depends(get_db)
):
    """
    Book a new parcel for the caller.

    The parcel starts NOT_COLLECTED and UNPAID.
    """
    new_parcel = Parcel(
        tracking_id=generate_tracking_id(),
        user_email=current_user["email"],
        delivery_status=DeliveryStatus.NOT_COLLECTED,
        payment_status=PaymentStatus.UNPAID,
        **parcel_data.model_dump()
    )

    db.add(new_parcel)
    await db.commit()
    await db.refresh(new_parcel)

    await log_event(
        db=db,
        action=AuditAction.PARCEL_CREATED,
        actor_email=current_user["email"],
        target_type="parcel",
        target_id=new_parcel.id,
        metadata={"tracking_id": new_parcel.tracking_id, "cost": new_parcel.cost}
    )

    return ParcelResponse.model_validate(new_parcel)


@router.get("/{parcel_id}", response_model=ParcelResponse)
async def get_parcel(
    parcel_id: int = Path(..., description="Parcel ID"),
    current_user: dict = Depends(require_authenticated),
    db: AsyncSession = Depends(get_db)
):
    """Get one parcel (owner, assigned rider or admin)."""
    result = await db.execute(select(Parcel).where(Parcel.id == parcel_id))
    parcel = result.scalar_one_or_none()

    if not parcel:
        raise ResourceNotFoundError("Parcel", parcel_id)

    enforce_parcel_access(parcel, current_user, allow_owner=True)

    return ParcelResponse.model_validate(parcel)


@router.delete("/{parcel_id}", response_model=ParcelDeleteResponse)
async def delete_parcel(
    parcel_id: int = Path(..., description="Parcel ID"),
    admin: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """
    Remove a parcel (admin only).

    A rider still carrying the parcel is set back to IDLE in the same
    transaction. The delete is conditioned on the status that was read, so a
    concurrent status change aborts it instead of freeing the wrong rider.
    """
    result = await db.execute(select(Parcel).where(Parcel.id == parcel_id))
    parcel = result.scalar_one_or_none()

    if not parcel:
        raise ResourceNotFoundError("Parcel", parcel_id)

    tracking_id = parcel.tracking_id
    current = parcel.delivery_status
    rider_id = parcel.assigned_rider_id

    deleted = await db.execute(
        delete(Parcel)
        .where(Parcel.id == parcel_id, Parcel.delivery_status == current)
        .execution_options(synchronize_session=False)
    )
    if deleted.rowcount != 1:
        await db.rollback()
        raise InvalidTransitionError(current.value, "deleted", "parcel was modified concurrently, try again")

    rider_released = False
    if current in ACTIVE_DELIVERY and rider_id is not None:
        released = await db.execute(
            update(Rider)
            .where(Rider.id == rider_id, Rider.work_status == WorkStatus.IN_DELIVERY)
            .values(work_status=WorkStatus.IDLE)
            .execution_options(synchronize_session=False)
        )
        rider_released = released.rowcount == 1

    await log_event(
        db=db,
        action=AuditAction.PARCEL_DELETED,
        actor_email=admin["email"],
        target_type="parcel",
        target_id=parcel_id,
        metadata={
            "tracking_id": tracking_id,
            "delivery_status": current.value,
            "rider_released": rider_released
        },
        commit=False
    )
    await db.commit()

    return ParcelDeleteResponse(parcel_id=parcel_id, deleted=True)


@router.patch("/{parcel_id}/assign-rider", response_model=ParcelResponse)
async def assign_rider(
    parcel_id: int = Path(..., description="Parcel ID"),
    assignment: RiderAssignmentRequest = ...,
    admin: dict = Depends(require_admin),
    service: RiderAssignmentService = Depends(get_assignment_service)
):
    """
    Assign an active, idle rider to a NOT_COLLECTED parcel (admin only).

    Parcel becomes RIDER_ASSIGNED and the rider IN_DELIVERY atomically.
    """
    parcel = await service.assign_rider(parcel_id, assignment.rider_id, actor_email=admin["email"])
    return ParcelResponse.model_validate(parcel)


@router.patch("/{parcel_id}/status", response_model=ParcelResponse)
async def update_delivery_status(
    parcel_id: int = Path(..., description="Parcel ID"),
    body: StatusUpdateRequest = ...,
    current_user: dict = Depends(require_admin_or_rider),
    service: DeliveryStatusService = Depends(get_status_service)
):
    """
    Advance a parcel's delivery status (assigned rider or admin).

    Only forward transitions are accepted; see the lifecycle table.
    """
    parcel = await service.advance_status(
        parcel_id, body.status, caller=current_user, location=body.location
    )
    return ParcelResponse.model_validate(parcel)


@router.patch("/{parcel_id}/cashOut", response_model=ParcelResponse)
async def cash_out_parcel(
    parcel_id: int = Path(..., description="Parcel ID"),
    current_user: dict = Depends(require_admin_or_rider),
    service: CashOutService = Depends(get_cash_out_service)
):
    """Cash out the rider's earning for a delivered parcel (assigned rider or admin)."""
    parcel = await service.cash_out(parcel_id, caller=current_user)
    return ParcelResponse.model_validate(parcel)
