"""
Authentication and role guard tests.
"""

import pytest
from datetime import timedelta

from conftest import auth_headers
from zapshift.app.core.jwt import create_access_token
from zapshift.app.core.guards import any_of, is_admin, is_rider


@pytest.mark.asyncio
async def test_missing_token_is_401(client):
    response = await client.get("/v1/parcels")

    assert response.status_code == 401
    assert response.json()["error_code"] == "ERR_AUTH_001"


@pytest.mark.asyncio
async def test_invalid_token_is_401(client):
    response = await client.get("/v1/parcels", headers={"Authorization": "Bearer not-a-jwt"})
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_expired_token_is_401(client, sender):
    token = create_access_token({"sub": sender.email}, expires_delta=timedelta(minutes=-1))
    response = await client.get("/v1/parcels", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_token_without_email_is_401(client):
    token = create_access_token({"sub": "no-email"})
    response = await client.get("/v1/parcels", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_logout_revokes_token(client, sender_headers, mock_redis):
    assert (await client.get("/v1/parcels", headers=sender_headers)).status_code == 200

    response = await client.post("/v1/auth/logout", headers=sender_headers)
    assert response.status_code == 200
    assert response.json()["success"] is True

    response = await client.get("/v1/parcels", headers=sender_headers)
    assert response.status_code == 401
    assert "revoked" in response.json()["message"]


@pytest.mark.asyncio
async def test_non_admin_gets_403_on_admin_route(client, sender_headers):
    response = await client.get("/v1/parcels/status-counts", headers=sender_headers)

    assert response.status_code == 403
    assert response.json()["error_code"] == "ERR_PERM_001"


@pytest.mark.asyncio
async def test_unregistered_caller_has_no_role(client):
    headers = auth_headers("stranger@zapshift.io")

    role = await client.get("/v1/users/me/role", headers=headers)
    assert role.json() == {"email": "stranger@zapshift.io", "role": None}

    response = await client.get("/v1/riders", headers=headers)
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_role_comes_from_store_not_token(client, sender):
    # A forged role claim is ignored
    token = create_access_token({"sub": sender.email, "role": "admin"})
    response = await client.get(
        "/v1/parcels/status-counts", headers={"Authorization": f"Bearer {token}"}
    )
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_email_is_normalized(client, admin):
    response = await client.get("/v1/parcels/status-counts", headers=auth_headers("  Admin@ZapShift.io "))
    assert response.status_code == 200


@pytest.mark.asyncio
async def test_dev_token_endpoint(client):
    response = await client.post("/auth/test-token", json={"email": "dev@zapshift.io"})

    assert response.status_code == 200
    token = response.json()["access_token"]
    role = await client.get("/v1/users/me/role", headers={"Authorization": f"Bearer {token}"})
    assert role.json()["email"] == "dev@zapshift.io"


def test_guard_predicates_compose():
    admin = {"email": "a@zapshift.io", "role": "admin"}
    rider = {"email": "r@zapshift.io", "role": "rider"}
    user = {"email": "u@zapshift.io", "role": "user"}
    either = any_of(is_admin, is_rider)

    assert is_admin(admin) and not is_admin(rider)
    assert either(admin) and either(rider)
    assert not either(user)
    assert not either({"email": "x@zapshift.io", "role": None})
