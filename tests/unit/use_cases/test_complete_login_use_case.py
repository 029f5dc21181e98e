import pytest

from src.adapter.services.revocation_store import InMemoryRevocationStore
from src.api.utils.jwt import TokenIssuer
from src.app.services.login_policy import LoginPolicy
from src.app.use_cases.auth import CompleteLoginUseCase, StartLoginUseCase
from tests.fixtures.employees import ACCESS_CODE


@pytest.fixture
def token_issuer():
    return TokenIssuer(
        secret="unit-test-secret",
        issuer="employee-auth-service",
        audience="employee-portal",
        revocation_store=InMemoryRevocationStore(),
    )


async def start_session(uow, dispatcher, clock) -> str:
    result = await StartLoginUseCase(uow, dispatcher, LoginPolicy(), clock=clock).execute(
        "001", ACCESS_CODE
    )
    return result.value.session_id


def wrong_code(correct: str) -> str:
    return "1000" if correct != "1000" else "1001"


@pytest.mark.asyncio
async def test_successful_complete_login(uow, employee, dispatcher, clock, token_issuer):
    session_id = await start_session(uow, dispatcher, clock)
    use_case = CompleteLoginUseCase(uow, token_issuer, LoginPolicy(), clock=clock)

    result = await use_case.execute(session_id, dispatcher.last_otp)

    assert result.is_ok()
    data = result.value
    assert data.token_type == "Bearer"
    assert data.expires_in == 900
    assert data.employee.id == str(employee.id)
    assert data.employee.is_first_login is False
    assert employee.last_login_at == clock.now

    claims = (await token_issuer.verify_access(data.access_token)).value
    assert claims["employee_id"] == str(employee.id)


@pytest.mark.asyncio
async def test_session_cannot_be_used_twice(uow, employee, dispatcher, clock, token_issuer):
    session_id = await start_session(uow, dispatcher, clock)
    use_case = CompleteLoginUseCase(uow, token_issuer, LoginPolicy(), clock=clock)

    await use_case.execute(session_id, dispatcher.last_otp)
    result = await use_case.execute(session_id, dispatcher.last_otp)

    assert result.error.code == "SESSION_INVALID"


@pytest.mark.asyncio
async def test_wrong_code_reports_remaining_attempts(uow, employee, dispatcher, clock, token_issuer):
    session_id = await start_session(uow, dispatcher, clock)
    use_case = CompleteLoginUseCase(uow, token_issuer, LoginPolicy(), clock=clock)
    bad = wrong_code(dispatcher.last_otp)

    remaining = []
    for _ in range(3):
        result = await use_case.execute(session_id, bad)
        assert result.error.code == "INVALID_OTP"
        remaining.append(result.error.details["attempts_remaining"])

    assert remaining == [2, 1, 0]

    result = await use_case.execute(session_id, dispatcher.last_otp)
    assert result.error.code == "SESSION_EXHAUSTED"
    assert result.error.details == {"can_resend": False}


@pytest.mark.asyncio
async def test_expired_session_can_be_resent(uow, employee, dispatcher, clock, token_issuer):
    session_id = await start_session(uow, dispatcher, clock)
    clock.advance(minutes=5, seconds=1)

    result = await CompleteLoginUseCase(uow, token_issuer, LoginPolicy(), clock=clock).execute(
        session_id, dispatcher.last_otp
    )

    assert result.error.code == "SESSION_EXPIRED"
    assert result.error.details == {"can_resend": True}


@pytest.mark.asyncio
async def test_unknown_session(uow, employee, clock, token_issuer):
    result = await CompleteLoginUseCase(uow, token_issuer, LoginPolicy(), clock=clock).execute(
        "no-such-session", "1234"
    )

    assert result.error.code == "SESSION_INVALID"


@pytest.mark.asyncio
async def test_employee_deactivated_between_steps(uow, employee, dispatcher, clock, token_issuer):
    session_id = await start_session(uow, dispatcher, clock)
    employee.is_active = False

    result = await CompleteLoginUseCase(uow, token_issuer, LoginPolicy(), clock=clock).execute(
        session_id, dispatcher.last_otp
    )

    assert result.error.code == "ACCOUNT_INACTIVE"
