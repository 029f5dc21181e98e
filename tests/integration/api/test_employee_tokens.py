import pytest
from httpx import AsyncClient

from tests.fixtures.employees import ACCESS_CODE


async def login(client: AsyncClient, dispatcher) -> dict:
    response = await client.post("/employee/auth/send-otp", json={
        "en_code": "001",
        "access_code": ACCESS_CODE,
    })
    response = await client.post("/employee/auth/verify-otp", json={
        "session_id": response.json()["session_id"],
        "otp": dispatcher.last_otp,
    })
    assert response.status_code == 200
    return response.json()


@pytest.mark.asyncio
async def test_me_with_access_token(client: AsyncClient, employee, dispatcher):
    tokens = await login(client, dispatcher)

    response = await client.get("/employee/me", headers={
        "Authorization": f"Bearer {tokens['access_token']}"
    })

    assert response.status_code == 200
    data = response.json()
    assert data["id"] == str(employee.id)
    assert data["email"] == "asha.verma@example.com"


@pytest.mark.asyncio
async def test_me_without_token(client: AsyncClient):
    response = await client.get("/employee/me")

    assert response.status_code == 401
    assert response.json()["error"]["code"] == "UNAUTHORIZED"


@pytest.mark.asyncio
async def test_me_with_garbage_token(client: AsyncClient):
    response = await client.get("/employee/me", headers={
        "Authorization": "Bearer invalid_token_here"
    })

    assert response.status_code == 401
    assert response.json()["error"]["code"] == "TOKEN_MALFORMED"


@pytest.mark.asyncio
async def test_me_rejects_refresh_token(client: AsyncClient, employee, dispatcher):
    tokens = await login(client, dispatcher)

    response = await client.get("/employee/me", headers={
        "Authorization": f"Bearer {tokens['refresh_token']}"
    })

    assert response.status_code == 401
    assert response.json()["error"]["code"] == "TOKEN_WRONG_TYPE"


@pytest.mark.asyncio
async def test_refresh(client: AsyncClient, employee, dispatcher):
    tokens = await login(client, dispatcher)

    response = await client.post("/employee/auth/refresh", json={
        "refresh_token": tokens["refresh_token"]
    })

    assert response.status_code == 200
    data = response.json()
    assert data["token_type"] == "Bearer"
    assert data["expires_in"] == 900

    response = await client.get("/employee/me", headers={
        "Authorization": f"Bearer {data['access_token']}"
    })
    assert response.status_code == 200


@pytest.mark.asyncio
async def test_logout_revokes_tokens(client: AsyncClient, employee, dispatcher):
    tokens = await login(client, dispatcher)
    auth = {"Authorization": f"Bearer {tokens['access_token']}"}

    response = await client.post(
        "/employee/auth/logout",
        json={"refresh_token": tokens["refresh_token"]},
        headers=auth,
    )

    assert response.status_code == 200
    assert response.json()["access_token_revoked"] is True
    assert response.json()["refresh_token_revoked"] is True

    response = await client.get("/employee/me", headers=auth)
    assert response.status_code == 401
    assert response.json()["error"]["code"] == "TOKEN_REVOKED"

    response = await client.post("/employee/auth/refresh", json={
        "refresh_token": tokens["refresh_token"]
    })
    assert response.status_code == 401
    assert response.json()["error"]["code"] == "TOKEN_REVOKED"


@pytest.mark.asyncio
async def test_logout_with_refresh_token_only(client: AsyncClient, employee, dispatcher):
    tokens = await login(client, dispatcher)

    response = await client.post(
        "/employee/auth/logout", json={"refresh_token": tokens["refresh_token"]}
    )

    assert response.status_code == 200
    assert response.json()["access_token_revoked"] is False
    assert response.json()["refresh_token_revoked"] is True

    response = await client.post("/employee/auth/refresh", json={
        "refresh_token": tokens["refresh_token"]
    })
    assert response.status_code == 401
    assert response.json()["error"]["code"] == "TOKEN_REVOKED"


@pytest.mark.asyncio
async def test_logout_without_tokens_succeeds(client: AsyncClient):
    response = await client.post("/employee/auth/logout")

    assert response.status_code == 200
    assert response.json()["access_token_revoked"] is False
    assert response.json()["refresh_token_revoked"] is False
