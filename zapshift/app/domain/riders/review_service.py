"""
Rider Review Service.

Admins approve or reject rider applications. Approval also grants the
matching user the rider role.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update

from zapshift.app.core.exceptions import ResourceNotFoundError
from zapshift.app.models.rider import Rider
from zapshift.app.models.user import User
from zapshift.app.models.enums import UserRole
from zapshift.app.models.rider_enums import RiderStatus
from zapshift.app.services.audit import log_event, AuditAction

logger = logging.getLogger("zapshift")


class RiderReviewService:

    def __init__(self, db: AsyncSession):
        self.db = db

    async def review_rider(
        self,
        rider_id: int,
        decision: RiderStatus,
        actor_email: Optional[str] = None
    ) -> tuple[Rider, bool]:
        """
        Record an admin decision on a rider.

        The rider update is the primary effect. When no user matches the
        rider's email the role grant is skipped and logged; the decision is
        still committed.

        Returns:
            (rider, role_granted)

        Raises:
            ResourceNotFoundError: rider missing
            ValueError: decision is not ACTIVE or REJECTED
        """
        if decision not in (RiderStatus.ACTIVE, RiderStatus.REJECTED):
            raise ValueError(f"Unsupported review decision: {decision.value}")

        rider = (await self.db.execute(
            select(Rider).where(Rider.id == rider_id)
        )).scalar_one_or_none()
        if not rider:
            raise ResourceNotFoundError("Rider", rider_id)

        previous_status = rider.status
        rider.status = decision
        rider.reviewed_at = datetime.now(timezone.utc)

        role_granted = False
        if decision == RiderStatus.ACTIVE:
            result = await self.db.execute(
                update(User)
                .where(User.email == rider.email)
                .values(role=UserRole.RIDER)
                .execution_options(synchronize_session=False)
            )
            role_granted = result.rowcount > 0
            if not role_granted:
                logger.warning(
                    "No user matches rider %s email %s, role not granted", rider_id, rider.email
                )

        await log_event(
            db=self.db,
            action=AuditAction.RIDER_APPROVED if decision == RiderStatus.ACTIVE else AuditAction.RIDER_REJECTED,
            actor_email=actor_email,
            target_type="rider",
            target_id=rider_id,
            metadata={
                "previous_status": previous_status.value,
                "rider_email": rider.email,
                "role_granted": role_granted
            },
            commit=False
        )

        await self.db.commit()
        await self.db.refresh(rider)

        return rider, role_granted
