from uuid import uuid4

import pytest

from src.app.services.login_policy import LoginPolicy
from src.app.use_cases.admin import DeactivateEmployeeUseCase, PurgeExpiredSessionsUseCase
from src.app.use_cases.auth import CheckCredentialsUseCase, StartLoginUseCase
from src.app.use_cases.employees import LoadProfileUseCase
from tests.fixtures.employees import ACCESS_CODE


@pytest.mark.asyncio
async def test_check_credentials_returns_masked_contacts(uow, employee, clock):
    result = await CheckCredentialsUseCase(uow, LoginPolicy(), clock=clock).execute(
        "001", ACCESS_CODE
    )

    assert result.is_ok()
    assert result.value.masked_email == "a***@example.com"
    assert result.value.masked_phone == "+91 98***43210"
    assert result.value.is_first_login is True


@pytest.mark.asyncio
async def test_check_credentials_counts_failures(uow, employee, clock):
    result = await CheckCredentialsUseCase(uow, LoginPolicy(), clock=clock).execute(
        "001", "WrongCodeX"
    )

    assert result.error.code == "INVALID_CREDENTIALS"
    assert employee.failed_attempts == 1


@pytest.mark.asyncio
async def test_deactivate_invalidates_pending_session(uow, store, employee, dispatcher, clock):
    started = await StartLoginUseCase(uow, dispatcher, LoginPolicy(), clock=clock).execute(
        "001", ACCESS_CODE
    )

    result = await DeactivateEmployeeUseCase(uow, clock=clock).execute(employee.id)

    assert result.is_ok()
    assert result.value.status == "inactive"
    assert result.value.sessions_invalidated == 1
    assert employee.is_active is False
    assert store.otp_sessions[started.value.session_id].used is True


@pytest.mark.asyncio
async def test_deactivate_unknown_employee(uow, clock):
    result = await DeactivateEmployeeUseCase(uow, clock=clock).execute(uuid4())

    assert result.error.code == "EMPLOYEE_NOT_FOUND"


@pytest.mark.asyncio
async def test_purge_expired_sessions(uow, store, employee, dispatcher, clock):
    await StartLoginUseCase(uow, dispatcher, LoginPolicy(), clock=clock).execute(
        "001", ACCESS_CODE
    )
    clock.advance(minutes=5)

    result = await PurgeExpiredSessionsUseCase(uow, clock=clock).execute()

    assert result.value.deleted == 1
    assert store.otp_sessions == {}


@pytest.mark.asyncio
async def test_load_profile(uow, employee):
    result = await LoadProfileUseCase(uow).execute(employee.id)

    assert result.value.full_name == "Asha Verma"
    assert result.value.en_code == "001"


@pytest.mark.asyncio
async def test_load_profile_of_inactive_employee(uow, employee):
    employee.is_active = False

    result = await LoadProfileUseCase(uow).execute(employee.id)

    assert result.error.code == "ACCOUNT_INACTIVE"
