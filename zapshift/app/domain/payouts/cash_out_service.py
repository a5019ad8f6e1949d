"""
Cash-Out Service.

Computes the rider's earning for a delivered parcel and marks it paid out.
A parcel is paid out at most once.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, or_

from zapshift.app.core.config import Settings
from zapshift.app.core.exceptions import ResourceNotFoundError, NotDeliveredError, AlreadyPaidOutError
from zapshift.app.core.guards import enforce_parcel_access
from zapshift.app.domain.payouts.earnings import compute_rider_earning
from zapshift.app.models.parcel import Parcel
from zapshift.app.models.parcel_enums import DeliveryStatus, CashOutStatus
from zapshift.app.services.audit import log_event, AuditAction

logger = logging.getLogger("zapshift")


class CashOutService:

    def __init__(self, db: AsyncSession, settings: Settings):
        self.db = db
        self.settings = settings

    async def cash_out(self, parcel_id: int, caller: Optional[dict] = None) -> Parcel:
        """
        Pay out the rider for a delivered parcel.

        Raises:
            ResourceNotFoundError: parcel missing
            AlreadyPaidOutError: parcel was already cashed out
            NotDeliveredError: parcel is not DELIVERED
        """
        parcel = (await self.db.execute(
            select(Parcel).where(Parcel.id == parcel_id)
        )).scalar_one_or_none()
        if not parcel:
            raise ResourceNotFoundError("Parcel", parcel_id)

        if caller is not None:
            enforce_parcel_access(parcel, caller)

        if parcel.cash_out_status == CashOutStatus.PAID:
            raise AlreadyPaidOutError(parcel_id)

        if parcel.delivery_status != DeliveryStatus.DELIVERED:
            raise NotDeliveredError(parcel_id, parcel.delivery_status.value)

        earning = compute_rider_earning(
            parcel.cost, parcel.sender_district, parcel.receiver_district, self.settings
        )
        now = datetime.now(timezone.utc)

        result = await self.db.execute(
            update(Parcel)
            .where(
                Parcel.id == parcel_id,
                Parcel.delivery_status == DeliveryStatus.DELIVERED,
                or_(Parcel.cash_out_status.is_(None), Parcel.cash_out_status != CashOutStatus.PAID)
            )
            .values(cash_out_status=CashOutStatus.PAID, cash_out_at=now, rider_earning=earning)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            await self.db.rollback()
            logger.info("Parcel %s changed during cash-out", parcel_id)
            row = (await self.db.execute(
                select(Parcel.delivery_status, Parcel.cash_out_status).where(Parcel.id == parcel_id)
            )).one_or_none()
            if row is None:
                raise ResourceNotFoundError("Parcel", parcel_id)
            if row.cash_out_status == CashOutStatus.PAID:
                raise AlreadyPaidOutError(parcel_id)
            raise NotDeliveredError(parcel_id, row.delivery_status.value)

        await log_event(
            db=self.db,
            action=AuditAction.PARCEL_CASHED_OUT,
            actor_email=caller["email"] if caller else None,
            target_type="parcel",
            target_id=parcel_id,
            metadata={"rider_id": parcel.assigned_rider_id, "rider_earning": earning},
            commit=False
        )

        await self.db.commit()
        await self.db.refresh(parcel)

        logger.info("Parcel %s cashed out, rider earning %s", parcel_id, earning)
        return parcel
