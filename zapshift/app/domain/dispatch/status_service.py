"""
Delivery Status Service.

Advances a parcel through its lifecycle, stamping pickup/delivery times
and releasing the rider when a delivery completes.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update

from zapshift.app.core.config import Settings
from zapshift.app.core.exceptions import ResourceNotFoundError, InvalidTransitionError
from zapshift.app.core.guards import enforce_parcel_access
from zapshift.app.domain.dispatch.status_machine import can_request, completes_delivery
from zapshift.app.models.parcel import Parcel
from zapshift.app.models.rider import Rider
from zapshift.app.models.parcel_enums import DeliveryStatus
from zapshift.app.models.rider_enums import WorkStatus
from zapshift.app.services.audit import log_event, AuditAction
from zapshift.app.services.tracking import add_tracking_event

logger = logging.getLogger("zapshift")


class DeliveryStatusService:

    def __init__(self, db: AsyncSession, settings: Settings):
        self.db = db
        self.settings = settings

    async def advance_status(
        self,
        parcel_id: int,
        new_status: DeliveryStatus,
        caller: Optional[dict] = None,
        location: Optional[str] = None
    ) -> Parcel:
        """
        Move a parcel to `new_status`.

        The parcel row is updated only if its status is still the one that
        was validated; otherwise the parcel is re-read and the transition
        re-validated, up to settings.status_update_max_retries times.

        Args:
            parcel_id: Parcel to advance
            new_status: Requested status
            caller: Resolved caller; riders may only advance their own parcels
            location: Optional location for the tracking entry

        Raises:
            ResourceNotFoundError, InvalidTransitionError, InsufficientPermissionsError
        """
        actor_email = caller["email"] if caller else None
        current = None

        for _ in range(max(1, self.settings.status_update_max_retries)):
            parcel = (await self.db.execute(
                select(Parcel)
                .where(Parcel.id == parcel_id)
                .execution_options(populate_existing=True)
            )).scalar_one_or_none()
            if not parcel:
                raise ResourceNotFoundError("Parcel", parcel_id)

            if caller is not None:
                enforce_parcel_access(parcel, caller)

            current = parcel.delivery_status
            allowed, reason = can_request(current, new_status)
            if not allowed:
                raise InvalidTransitionError(current.value, new_status.value, reason)

            now = datetime.now(timezone.utc)
            values = {"delivery_status": new_status}
            if new_status == DeliveryStatus.IN_TRANSIT and parcel.picked_up_at is None:
                values["picked_up_at"] = now

            release = completes_delivery(current, new_status)
            if release:
                values["delivered_at"] = now

            result = await self.db.execute(
                update(Parcel)
                .where(Parcel.id == parcel_id, Parcel.delivery_status == current)
                .values(**values)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount != 1:
                # Status changed since it was read
                await self.db.rollback()
                logger.info("Parcel %s changed concurrently, re-reading", parcel_id)
                continue

            rider_id = parcel.assigned_rider_id
            if release and rider_id is not None:
                await self._release_rider(rider_id, parcel_id, now)

            add_tracking_event(self.db, parcel, new_status.value, updated_by=actor_email, location=location)
            await log_event(
                db=self.db,
                action=AuditAction.PARCEL_STATUS_CHANGED,
                actor_email=actor_email,
                target_type="parcel",
                target_id=parcel_id,
                metadata={
                    "from": current.value,
                    "to": new_status.value,
                    "rider_released": release and self.settings.release_rider_on_delivery
                },
                commit=False
            )

            await self.db.commit()
            await self.db.refresh(parcel)

            logger.info("Parcel %s moved %s -> %s", parcel_id, current.value, new_status.value)
            return parcel

        raise InvalidTransitionError(
            current.value if current else "unknown",
            new_status.value,
            "parcel was modified concurrently, try again"
        )

    async def _release_rider(self, rider_id: int, parcel_id: int, now: datetime) -> None:
        """Stamp delivery completion on the rider; free them if the policy says so."""
        values = {"last_delivery_completed_at": now}
        if self.settings.release_rider_on_delivery:
            values["work_status"] = WorkStatus.IDLE

        result = await self.db.execute(
            update(Rider)
            .where(Rider.id == rider_id)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            logger.warning("Rider %s of parcel %s no longer exists, nothing to release", rider_id, parcel_id)
