"""
Rider Assignment Service.

Reserves an available rider for a parcel that is waiting for collection.
The parcel and the rider change together in one transaction or not at all.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update

from zapshift.app.core.exceptions import (
    ResourceNotFoundError, ParcelNotAssignableError, RiderUnavailableError
)
from zapshift.app.models.parcel import Parcel
from zapshift.app.models.rider import Rider
from zapshift.app.models.parcel_enums import DeliveryStatus
from zapshift.app.models.rider_enums import RiderStatus, WorkStatus
from zapshift.app.services.audit import log_event, AuditAction
from zapshift.app.services.tracking import add_tracking_event

logger = logging.getLogger("zapshift")


class RiderAssignmentService:

    def __init__(self, db: AsyncSession):
        self.db = db

    async def assign_rider(self, parcel_id: int, rider_id: int, actor_email: Optional[str] = None) -> Parcel:
        """
        Assign a rider to a parcel.

        Flow:
        1. Resolve parcel and rider (404 if either is missing)
        2. Validate parcel is NOT_COLLECTED and rider is ACTIVE and not IN_DELIVERY
        3. Reserve rider with an UPDATE conditioned on those rider fields
        4. Move parcel with an UPDATE conditioned on NOT_COLLECTED
        5. Append tracking + audit entries and commit

        A conditional UPDATE matching no row means a concurrent request won;
        the transaction is rolled back and the matching precondition error raised.

        Raises:
            ResourceNotFoundError, ParcelNotAssignableError, RiderUnavailableError
        """
        parcel = (await self.db.execute(
            select(Parcel).where(Parcel.id == parcel_id)
        )).scalar_one_or_none()
        if not parcel:
            raise ResourceNotFoundError("Parcel", parcel_id)

        rider = (await self.db.execute(
            select(Rider).where(Rider.id == rider_id)
        )).scalar_one_or_none()
        if not rider:
            raise ResourceNotFoundError("Rider", rider_id)

        if parcel.delivery_status != DeliveryStatus.NOT_COLLECTED:
            raise ParcelNotAssignableError(parcel_id, parcel.delivery_status.value)

        if rider.status != RiderStatus.ACTIVE:
            raise RiderUnavailableError(rider_id, f"rider is not approved (status: {rider.status.value})")

        if rider.work_status == WorkStatus.IN_DELIVERY:
            raise RiderUnavailableError(rider_id, "rider is already on a delivery")

        now = datetime.now(timezone.utc)
        rider_name, rider_email = rider.name, rider.email

        # Reserve rider
        reserved = await self.db.execute(
            update(Rider)
            .where(
                Rider.id == rider_id,
                Rider.status == RiderStatus.ACTIVE,
                Rider.work_status != WorkStatus.IN_DELIVERY
            )
            .values(work_status=WorkStatus.IN_DELIVERY, last_assigned_at=now)
            .execution_options(synchronize_session=False)
        )
        if reserved.rowcount != 1:
            await self.db.rollback()
            logger.info("Rider %s reserved concurrently, assignment of parcel %s aborted", rider_id, parcel_id)
            raise RiderUnavailableError(rider_id, "rider was reserved by another assignment")

        # Move parcel
        moved = await self.db.execute(
            update(Parcel)
            .where(
                Parcel.id == parcel_id,
                Parcel.delivery_status == DeliveryStatus.NOT_COLLECTED
            )
            .values(
                delivery_status=DeliveryStatus.RIDER_ASSIGNED,
                assigned_rider_id=rider_id,
                assigned_rider_name=rider_name,
                assigned_rider_email=rider_email,
                assigned_at=now
            )
            .execution_options(synchronize_session=False)
        )
        if moved.rowcount != 1:
            await self.db.rollback()
            current = await self._current_status(parcel_id)
            logger.info("Parcel %s assigned concurrently, rider %s released", parcel_id, rider_id)
            if current is None:
                raise ResourceNotFoundError("Parcel", parcel_id)
            raise ParcelNotAssignableError(parcel_id, current.value)

        add_tracking_event(
            self.db,
            parcel,
            DeliveryStatus.RIDER_ASSIGNED.value,
            updated_by=actor_email,
            message=f"Assigned to rider {rider_name}"
        )
        await log_event(
            db=self.db,
            action=AuditAction.RIDER_ASSIGNED,
            actor_email=actor_email,
            target_type="parcel",
            target_id=parcel_id,
            metadata={"rider_id": rider_id, "rider_email": rider_email},
            commit=False
        )

        await self.db.commit()
        await self.db.refresh(parcel)
        await self.db.refresh(rider)

        logger.info("Parcel %s assigned to rider %s", parcel_id, rider_id)
        return parcel

    async def _current_status(self, parcel_id: int) -> Optional[DeliveryStatus]:
        result = await self.db.execute(
            select(Parcel.delivery_status).where(Parcel.id == parcel_id)
        )
        return result.scalar_one_or_none()
