import pytest
from httpx import AsyncClient

from config import ApplicationConfig
from tests.fixtures.employees import ACCESS_CODE

ADMIN_HEADERS = {"X-Admin-API-Key": ApplicationConfig.ADMIN_API_KEY}


@pytest.mark.asyncio
async def test_register_employee_then_login(client: AsyncClient, dispatcher):
    response = await client.post(
        "/employee/auth/register",
        json={
            "en_code": "042",
            "access_code": "QwertYuiop",
            "full_name": "Meera Iyer",
            "email": "meera.iyer@example.com",
            "phone_number": "+91 9123456780",
            "designation": "Analyst",
        },
        headers=ADMIN_HEADERS,
    )

    assert response.status_code == 201
    assert response.json()["employee"]["is_first_login"] is True

    response = await client.post("/employee/auth/check-credentials", json={
        "en_code": "042",
        "access_code": "QwertYuiop",
    })
    assert response.status_code == 200
    assert response.json()["masked_email"] == "m***@example.com"


@pytest.mark.asyncio
async def test_register_duplicate_en_code(client: AsyncClient, employee):
    response = await client.post(
        "/employee/auth/register",
        json={
            "en_code": "001",
            "access_code": "QwertYuiop",
            "full_name": "Someone Else",
            "email": "someone@example.com",
            "phone_number": "+91 9123456780",
            "designation": "Analyst",
        },
        headers=ADMIN_HEADERS,
    )

    assert response.status_code == 409
    assert response.json()["error"]["code"] == "DUPLICATE_EN_CODE"


@pytest.mark.asyncio
async def test_register_requires_admin_key(client: AsyncClient):
    response = await client.post("/employee/auth/register", json={
        "en_code": "042",
        "access_code": "QwertYuiop",
        "full_name": "Meera Iyer",
        "email": "meera.iyer@example.com",
        "phone_number": "+91 9123456780",
        "designation": "Analyst",
    })

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_deactivate_blocks_login(client: AsyncClient, employee):
    response = await client.post(
        f"/admin/employees/{employee.id}/deactivate", headers=ADMIN_HEADERS
    )

    assert response.status_code == 200
    assert response.json()["status"] == "inactive"

    response = await client.post("/employee/auth/send-otp", json={
        "en_code": "001",
        "access_code": ACCESS_CODE,
    })
    assert response.status_code == 403
    assert response.json()["error"]["code"] == "ACCOUNT_INACTIVE"


@pytest.mark.asyncio
async def test_purge_expired_sessions(client: AsyncClient):
    response = await client.post("/admin/otp-sessions/purge", headers=ADMIN_HEADERS)

    assert response.status_code == 200
    assert response.json() == {"deleted": 0}


@pytest.mark.asyncio
async def test_health(client: AsyncClient):
    response = await client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "ok"
