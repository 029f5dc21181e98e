import pytest

from src.adapter.services.revocation_store import InMemoryRevocationStore
from src.api.utils.jwt import TokenIssuer
from src.app.services.login_policy import LoginPolicy
from src.app.use_cases.auth import CompleteLoginUseCase, ResendOtpUseCase, StartLoginUseCase
from tests.fixtures.employees import ACCESS_CODE, RecordingDispatcher


async def start_session(uow, dispatcher, clock) -> str:
    result = await StartLoginUseCase(uow, dispatcher, LoginPolicy(), clock=clock).execute(
        "001", ACCESS_CODE
    )
    return result.value.session_id


def make_use_case(uow, dispatcher, clock):
    return ResendOtpUseCase(uow, dispatcher, LoginPolicy(), clock=clock)


@pytest.mark.asyncio
async def test_resend_replaces_session(uow, store, employee, dispatcher, clock):
    first_id = await start_session(uow, dispatcher, clock)
    clock.advance(seconds=10)

    result = await make_use_case(uow, dispatcher, clock).execute(first_id)

    assert result.is_ok()
    data = result.value
    assert data.session_id != first_id
    assert data.resend_count == 1
    assert data.masked_email == "a***@example.com"
    assert store.otp_sessions[first_id].used is True
    assert store.otp_sessions[data.session_id].last_resend_at == clock.now
    assert len(dispatcher.emails) == 2


@pytest.mark.asyncio
async def test_second_resend_of_same_session_hits_cooldown(uow, employee, dispatcher, clock):
    first_id = await start_session(uow, dispatcher, clock)
    use_case = make_use_case(uow, dispatcher, clock)

    clock.advance(seconds=10)
    assert (await use_case.execute(first_id)).is_ok()

    clock.advance(seconds=20)
    result = await use_case.execute(first_id)

    assert result.error.code == "RESEND_COOLDOWN"
    assert result.error.details["retry_after_seconds"] == 40


@pytest.mark.asyncio
async def test_resend_of_new_session_waits_for_cooldown(uow, employee, dispatcher, clock):
    first_id = await start_session(uow, dispatcher, clock)
    use_case = make_use_case(uow, dispatcher, clock)

    second = await use_case.execute(first_id)
    too_soon = await use_case.execute(second.value.session_id)
    clock.advance(seconds=60)
    later = await use_case.execute(second.value.session_id)

    assert too_soon.error.code == "RESEND_COOLDOWN"
    assert later.is_ok()
    assert later.value.resend_count == 2


@pytest.mark.asyncio
async def test_expired_session_can_be_resent(uow, employee, dispatcher, clock):
    first_id = await start_session(uow, dispatcher, clock)
    clock.advance(minutes=6)

    result = await make_use_case(uow, dispatcher, clock).execute(first_id)

    assert result.is_ok()


@pytest.mark.asyncio
async def test_verified_session_cannot_be_resent(uow, employee, dispatcher, clock):
    session_id = await start_session(uow, dispatcher, clock)
    issuer = TokenIssuer(
        secret="s", issuer="i", audience="a", revocation_store=InMemoryRevocationStore()
    )
    await CompleteLoginUseCase(uow, issuer, LoginPolicy(), clock=clock).execute(
        session_id, dispatcher.last_otp
    )

    result = await make_use_case(uow, dispatcher, clock).execute(session_id)

    assert result.error.code == "SESSION_INVALID"


@pytest.mark.asyncio
async def test_unknown_session(uow, employee, dispatcher, clock):
    result = await make_use_case(uow, dispatcher, clock).execute("missing")

    assert result.error.code == "SESSION_INVALID"


@pytest.mark.asyncio
async def test_resend_delivery_failure(uow, store, employee, dispatcher, clock):
    first_id = await start_session(uow, dispatcher, clock)

    result = await make_use_case(
        uow, RecordingDispatcher(email_ok=False, sms_ok=False), clock
    ).execute(first_id)

    assert result.error.code == "OTP_DELIVERY_FAILED"
    assert all(s.used for s in store.otp_sessions.values())


@pytest.mark.asyncio
async def test_exhausted_session_cannot_be_resent(uow, store, employee, dispatcher, clock):
    session_id = await start_session(uow, dispatcher, clock)
    store.otp_sessions[session_id].attempts = 3
    clock.advance(seconds=10)

    result = await make_use_case(uow, dispatcher, clock).execute(session_id)

    assert result.error.code == "SESSION_EXHAUSTED"
    assert result.error.details == {"can_resend": False}
    assert len(dispatcher.emails) == 1
    assert store.otp_sessions[session_id].last_resend_at is None


@pytest.mark.asyncio
async def test_exhausted_session_that_expired_can_be_resent(uow, store, employee, dispatcher, clock):
    session_id = await start_session(uow, dispatcher, clock)
    store.otp_sessions[session_id].attempts = 3
    clock.advance(minutes=6)

    result = await make_use_case(uow, dispatcher, clock).execute(session_id)

    assert result.is_ok()
    assert result.value.resend_count == 1
