import asyncio
from datetime import timedelta

import pytest

from src.adapter.services.in_memory_unit_of_work import InMemoryUnitOfWork
from src.app.services.login_policy import LoginPolicy
from src.app.use_cases.auth import StartLoginUseCase
from tests.fixtures.employees import ACCESS_CODE, RecordingDispatcher


def make_use_case(uow, dispatcher, clock):
    return StartLoginUseCase(uow, dispatcher, LoginPolicy(), clock=clock)


@pytest.mark.asyncio
async def test_successful_start_login(uow, store, employee, dispatcher, clock):
    result = await make_use_case(uow, dispatcher, clock).execute("001", ACCESS_CODE)

    assert result.is_ok()
    data = result.value
    assert data.masked_email == "a***@example.com"
    assert data.masked_phone == "+91 98***43210"
    assert data.otp_expiry == clock.now + timedelta(minutes=5)
    assert data.otp_length == 4
    assert data.email_sent and data.sms_sent
    assert data.partial_delivery is False

    otp_session = store.otp_sessions[data.session_id]
    assert otp_session.employee_id == employee.id
    assert otp_session.sent_email and otp_session.sent_sms
    assert dispatcher.last_otp == otp_session.otp_code


@pytest.mark.asyncio
async def test_wrong_access_code_is_invalid_credentials(uow, store, employee, dispatcher, clock):
    result = await make_use_case(uow, dispatcher, clock).execute("001", "WrongCodeX")

    assert result.error.code == "INVALID_CREDENTIALS"
    assert employee.failed_attempts == 1
    assert store.otp_sessions == {}
    assert dispatcher.emails == []


@pytest.mark.asyncio
async def test_unknown_en_code_looks_like_wrong_access_code(uow, employee, dispatcher, clock):
    result = await make_use_case(uow, dispatcher, clock).execute("404", ACCESS_CODE)

    assert result.error.code == "INVALID_CREDENTIALS"
    assert result.error.message == "Invalid credentials"


@pytest.mark.asyncio
async def test_locked_employee(uow, employee, dispatcher, clock):
    employee.failed_attempts = 5
    employee.lock_until = clock.now + timedelta(hours=1)

    result = await make_use_case(uow, dispatcher, clock).execute("001", ACCESS_CODE)

    assert result.error.code == "ACCOUNT_LOCKED"
    assert "locked_until" in result.error.details


@pytest.mark.asyncio
async def test_inactive_employee(uow, employee, dispatcher, clock):
    employee.is_active = False

    result = await make_use_case(uow, dispatcher, clock).execute("001", ACCESS_CODE)

    assert result.error.code == "ACCOUNT_INACTIVE"


@pytest.mark.asyncio
async def test_partial_delivery_still_succeeds(uow, employee, clock):
    dispatcher = RecordingDispatcher(email_ok=False)

    result = await make_use_case(uow, dispatcher, clock).execute("001", ACCESS_CODE)

    assert result.is_ok()
    assert result.value.email_sent is False
    assert result.value.sms_sent is True
    assert result.value.partial_delivery is True


@pytest.mark.asyncio
async def test_no_channel_delivered_invalidates_session(uow, store, employee, clock):
    dispatcher = RecordingDispatcher(email_ok=False, sms_ok=False)

    result = await make_use_case(uow, dispatcher, clock).execute("001", ACCESS_CODE)

    assert result.error.code == "OTP_DELIVERY_FAILED"
    [otp_session] = store.otp_sessions.values()
    assert otp_session.used is True


@pytest.mark.asyncio
async def test_new_login_replaces_previous_session(uow, store, employee, dispatcher, clock):
    use_case = make_use_case(uow, dispatcher, clock)

    first = await use_case.execute("001", ACCESS_CODE)
    second = await use_case.execute("001", ACCESS_CODE)

    assert store.otp_sessions[first.value.session_id].used is True
    assert store.otp_sessions[second.value.session_id].used is False


@pytest.mark.asyncio
async def test_concurrent_logins_leave_one_valid_session(store, employee, dispatcher, clock):
    results = await asyncio.gather(
        make_use_case(InMemoryUnitOfWork(store), dispatcher, clock).execute("001", ACCESS_CODE),
        make_use_case(InMemoryUnitOfWork(store), dispatcher, clock).execute("001", ACCESS_CODE),
    )

    assert all(result.is_ok() for result in results)
    valid = [s for s in store.otp_sessions.values() if s.is_valid(clock.now)]
    assert len(valid) == 1
    assert valid[0].session_token in {result.value.session_id for result in results}
