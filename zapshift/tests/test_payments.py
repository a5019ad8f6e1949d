"""
Payment recording and payment intents.
"""

import pytest
import stripe
from sqlalchemy import select

from conftest import create_parcel, create_user, reload, auth_headers, before_update_of, SENDER_EMAIL
from zapshift.app.main import app
from zapshift.app.core.exceptions import PaymentGatewayError, DuplicateResourceError, ParcelAlreadyPaidError
from zapshift.app.core.config import Settings
from zapshift.app.domain.payments.payment_service import PaymentService
from zapshift.app.core.reliability import CircuitBreaker
from zapshift.app.models.parcel import Parcel
from zapshift.app.models.payment import Payment
from zapshift.app.models.parcel_enums import PaymentStatus
from zapshift.app.services.payment_gateway import PaymentGateway, get_payment_gateway


def payment_body(parcel_id, transaction_id="pi_123", amount=1000):
    return {"parcel_id": parcel_id, "amount": amount, "transaction_id": transaction_id}


@pytest.mark.asyncio
async def test_owner_records_payment(client, db_session, sender_headers, parcel):
    response = await client.post("/v1/payments", json=payment_body(parcel.id), headers=sender_headers)

    assert response.status_code == 201
    data = response.json()
    assert data["parcel_id"] == parcel.id
    assert data["user_email"] == SENDER_EMAIL
    assert data["currency"] == "usd"

    stored = await reload(db_session, Parcel, parcel.id)
    assert stored.payment_status == PaymentStatus.PAID


@pytest.mark.asyncio
async def test_second_payment_for_parcel_is_rejected(client, db_session, sender_headers, parcel):
    await client.post("/v1/payments", json=payment_body(parcel.id), headers=sender_headers)

    response = await client.post(
        "/v1/payments", json=payment_body(parcel.id, transaction_id="pi_456"), headers=sender_headers
    )

    assert response.status_code == 400
    assert response.json()["error_code"] == "ERR_PAYMENT_001"
    payments = (await db_session.execute(select(Payment))).scalars().all()
    assert len(payments) == 1


@pytest.mark.asyncio
async def test_reused_transaction_id_is_rejected(client, db_session, sender_headers, sender):
    first = await create_parcel(db_session)
    second = await create_parcel(db_session)
    await client.post("/v1/payments", json=payment_body(first.id), headers=sender_headers)

    response = await client.post("/v1/payments", json=payment_body(second.id), headers=sender_headers)

    assert response.status_code == 400
    assert response.json()["error_code"] == "ERR_DUPLICATE_001"
    stored = await reload(db_session, Parcel, second.id)
    assert stored.payment_status == PaymentStatus.UNPAID


@pytest.mark.asyncio
async def test_stranger_cannot_pay_for_parcel(client, db_session, parcel):
    await create_user(db_session, "stranger@zapshift.io")

    response = await client.post(
        "/v1/payments", json=payment_body(parcel.id), headers=auth_headers("stranger@zapshift.io")
    )

    assert response.status_code == 403


@pytest.mark.asyncio
async def test_payment_history_is_scoped(client, db_session, admin_headers, sender_headers, parcel):
    other_owner = "other@zapshift.io"
    await create_user(db_session, other_owner)
    other_parcel = await create_parcel(db_session, owner=other_owner)
    await client.post("/v1/payments", json=payment_body(parcel.id), headers=sender_headers)
    await client.post(
        "/v1/payments", json=payment_body(other_parcel.id, "pi_other"), headers=auth_headers(other_owner)
    )

    own = (await client.get("/v1/payments", headers=sender_headers)).json()
    assert [p["transaction_id"] for p in own["payments"]] == ["pi_123"]

    everyone = (await client.get("/v1/payments", headers=admin_headers)).json()
    assert everyone["total"] == 2

    filtered = (await client.get("/v1/payments", params={"email": other_owner}, headers=admin_headers)).json()
    assert [p["transaction_id"] for p in filtered["payments"]] == ["pi_other"]



@pytest.mark.asyncio
async def test_transaction_id_taken_concurrently_is_a_duplicate(
    session_factory, db_session, monkeypatch, sender, parcel
):
    """The unique transaction id catches a payment recorded after the pre-check."""
    caller = {"email": SENDER_EMAIL, "role": "user"}

    async def record_elsewhere():
        async with session_factory() as other:
            other.add(Payment(parcel_id=None, user_email=SENDER_EMAIL, amount=1000, transaction_id="pi_shared"))
            await other.commit()

    async with session_factory() as slow:
        before_update_of(monkeypatch, slow, "parcels", record_elsewhere)

        with pytest.raises(DuplicateResourceError):
            await PaymentService(slow, Settings()).record_payment(parcel.id, 1000, "pi_shared", caller)

    stored = await reload(db_session, Parcel, parcel.id)
    assert stored.payment_status == PaymentStatus.UNPAID


@pytest.mark.asyncio
async def test_parcel_paid_concurrently_is_already_paid(
    session_factory, db_session, monkeypatch, sender, parcel
):
    caller = {"email": SENDER_EMAIL, "role": "user"}

    async def pay_elsewhere():
        async with session_factory() as other:
            await PaymentService(other, Settings()).record_payment(parcel.id, 1000, "pi_first", caller)

    async with session_factory() as slow:
        before_update_of(monkeypatch, slow, "parcels", pay_elsewhere)

        with pytest.raises(ParcelAlreadyPaidError):
            await PaymentService(slow, Settings()).record_payment(parcel.id, 1000, "pi_second", caller)

    payments = (await db_session.execute(select(Payment.transaction_id))).scalars().all()
    assert payments == ["pi_first"]


class FakeGateway:
    def __init__(self):
        self.amounts = []

    async def create_payment_intent(self, amount_in_cents):
        self.amounts.append(amount_in_cents)
        return "pi_fake_secret"


@pytest.mark.asyncio
async def test_create_intent_returns_client_secret(client, sender_headers):
    gateway = FakeGateway()
    app.dependency_overrides[get_payment_gateway] = lambda: gateway

    response = await client.post(
        "/v1/payments/create-intent", json={"amount_in_cents": 1500}, headers=sender_headers
    )

    assert response.status_code == 200
    assert response.json() == {"client_secret": "pi_fake_secret"}
    assert gateway.amounts == [1500]


@pytest.mark.asyncio
async def test_create_intent_rejects_non_positive_amount(client, sender_headers):
    response = await client.post(
        "/v1/payments/create-intent", json={"amount_in_cents": 0}, headers=sender_headers
    )
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_gateway_calls_stripe(mocker):
    create = mocker.patch("stripe.PaymentIntent.create", return_value=mocker.Mock(client_secret="cs_1"))
    gateway = PaymentGateway("sk_test", "usd", CircuitBreaker(failure_threshold=2, reset_timeout=60))

    assert await gateway.create_payment_intent(2500) == "cs_1"
    kwargs = create.call_args.kwargs
    assert kwargs["amount"] == 2500
    assert kwargs["currency"] == "usd"
    assert kwargs["payment_method_types"] == ["card"]


@pytest.mark.asyncio
async def test_gateway_failures_open_circuit(mocker):
    create = mocker.patch(
        "stripe.PaymentIntent.create", side_effect=stripe.APIConnectionError("network down")
    )
    gateway = PaymentGateway("sk_test", "usd", CircuitBreaker(failure_threshold=2, reset_timeout=60))

    for _ in range(2):
        with pytest.raises(PaymentGatewayError):
            await gateway.create_payment_intent(100)

    with pytest.raises(PaymentGatewayError, match="temporarily unavailable"):
        await gateway.create_payment_intent(100)
    assert create.call_count == 2


@pytest.mark.asyncio
async def test_gateway_error_maps_to_502(client, sender_headers, mocker):
    mocker.patch("stripe.PaymentIntent.create", side_effect=stripe.APIConnectionError("network down"))
    gateway = PaymentGateway("sk_test", "usd", CircuitBreaker(failure_threshold=5, reset_timeout=60))
    app.dependency_overrides[get_payment_gateway] = lambda: gateway

    response = await client.post(
        "/v1/payments/create-intent", json={"amount_in_cents": 100}, headers=sender_headers
    )

    assert response.status_code == 502
    assert response.json()["error_code"] == "ERR_GATEWAY_001"
