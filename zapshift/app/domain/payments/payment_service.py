"""
Payment Recording Service.

Stores a confirmed payment and marks its parcel as paid in one transaction.
"""

import logging
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError

from zapshift.app.core.config import Settings
from zapshift.app.core.exceptions import (
    ResourceNotFoundError, ParcelAlreadyPaidError, DuplicateResourceError
)
from zapshift.app.core.guards import enforce_parcel_access
from zapshift.app.models.parcel import Parcel
from zapshift.app.models.payment import Payment
from zapshift.app.models.parcel_enums import PaymentStatus
from zapshift.app.services.audit import log_event, AuditAction

logger = logging.getLogger("zapshift")


class PaymentService:

    def __init__(self, db: AsyncSession, settings: Settings):
        self.db = db
        self.settings = settings

    async def record_payment(
        self,
        parcel_id: int,
        amount: int,
        transaction_id: str,
        caller: dict,
        payment_method: str = "card",
        currency: Optional[str] = None
    ) -> Payment:
        """
        Record a processor-confirmed payment for a parcel.

        Raises:
            ResourceNotFoundError: parcel missing
            InsufficientPermissionsError: caller is neither owner nor admin
            ParcelAlreadyPaidError: parcel already paid
            DuplicateResourceError: transaction id already recorded
        """
        parcel = (await self.db.execute(
            select(Parcel).where(Parcel.id == parcel_id)
        )).scalar_one_or_none()
        if not parcel:
            raise ResourceNotFoundError("Parcel", parcel_id)

        enforce_parcel_access(parcel, caller, allow_owner=True)

        if parcel.payment_status == PaymentStatus.PAID:
            raise ParcelAlreadyPaidError(parcel_id)

        duplicate = await self.db.execute(
            select(Payment.id).where(Payment.transaction_id == transaction_id)
        )
        if duplicate.scalar_one_or_none():
            raise DuplicateResourceError(
                f"Transaction '{transaction_id}' is already recorded",
                details={"transaction_id": transaction_id}
            )

        flipped = await self.db.execute(
            update(Parcel)
            .where(Parcel.id == parcel_id, Parcel.payment_status == PaymentStatus.UNPAID)
            .values(payment_status=PaymentStatus.PAID)
            .execution_options(synchronize_session=False)
        )
        if flipped.rowcount != 1:
            await self.db.rollback()
            raise ParcelAlreadyPaidError(parcel_id)

        payment = Payment(
            parcel_id=parcel_id,
            user_email=caller["email"],
            amount=amount,
            currency=currency or self.settings.payment_currency,
            payment_method=payment_method,
            transaction_id=transaction_id
        )
        self.db.add(payment)

        await log_event(
            db=self.db,
            action=AuditAction.PAYMENT_RECORDED,
            actor_email=caller["email"],
            target_type="parcel",
            target_id=parcel_id,
            metadata={"amount": amount, "transaction_id": transaction_id},
            commit=False
        )

        try:
            await self.db.commit()
        except IntegrityError:
            # Unique parcel_id or transaction_id lost a race
            await self.db.rollback()
            raise await self._conflict_error(parcel_id, transaction_id)

        await self.db.refresh(payment)
        logger.info("Payment %s recorded for parcel %s", transaction_id, parcel_id)
        return payment

    async def _conflict_error(self, parcel_id: int, transaction_id: str) -> Exception:
        """Pick the error for a payment insert that hit a unique constraint."""
        taken = await self.db.execute(
            select(Payment.id).where(Payment.transaction_id == transaction_id)
        )
        if taken.scalar_one_or_none():
            logger.info("Transaction %s recorded concurrently", transaction_id)
            return DuplicateResourceError(
                f"Transaction '{transaction_id}' is already recorded",
                details={"transaction_id": transaction_id}
            )
        return ParcelAlreadyPaidError(parcel_id)
