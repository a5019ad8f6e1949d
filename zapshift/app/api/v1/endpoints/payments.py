"""
Payment API Endpoints.

Payment intents for the client checkout and the record of confirmed payments.
"""

from fastapi import APIRouter, Depends, status, Query
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from typing import Optional

from zapshift.app.db.session import get_db
from zapshift.app.models.payment import Payment
from zapshift.app.schemas.payment import (
    PaymentCreate, PaymentResponse, PaymentListResponse,
    PaymentIntentRequest, PaymentIntentResponse
)
from zapshift.app.core.guards import require_authenticated, is_admin
from zapshift.app.domain.providers import get_payment_service
from zapshift.app.domain.payments.payment_service import PaymentService
from zapshift.app.services.payment_gateway import PaymentGateway, get_payment_gateway

router = APIRouter(prefix="/payments", tags=["Payments"])


@router.get("", response_model=PaymentListResponse)
async def list_payments(
    email: Optional[str] = Query(None, description="Payer email (admin only)"),
    current_user: dict = Depends(require_authenticated),
    db: AsyncSession = Depends(get_db)
):
    """Payment history, newest first. Non-admins only see their own."""
    query = select(Payment).order_by(Payment.paid_at.desc(), Payment.id.desc())

    if not is_admin(current_user):
        query = query.where(Payment.user_email == current_user["email"])
    elif email:
        query = query.where(Payment.user_email == email.strip().lower())

    payments = (await db.execute(query)).scalars().all()
    return PaymentListResponse(
        payments=[PaymentResponse.model_validate(p) for p in payments],
        total=len(payments)
    )


@router.post("", response_model=PaymentResponse, status_code=status.HTTP_201_CREATED)
async def record_payment(
    payment: PaymentCreate,
    current_user: dict = Depends(require_authenticated),
    service: PaymentService = Depends(get_payment_service)
):
    """Record a confirmed payment and mark the parcel paid."""
    record = await service.record_payment(
        payment.parcel_id,
        payment.amount,
        payment.transaction_id,
        caller=current_user,
        payment_method=payment.payment_method
    )
    return PaymentResponse.model_validate(record)


@router.post("/create-intent", response_model=PaymentIntentResponse)
async def create_payment_intent(
    request: PaymentIntentRequest,
    current_user: dict = Depends(require_authenticated),
    gateway: PaymentGateway = Depends(get_payment_gateway)
):
    """Create a card payment intent and return its client secret."""
    client_secret = await gateway.create_payment_intent(request.amount_in_cents)
    return PaymentIntentResponse(client_secret=client_secret)
