import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlmodel import SQLModel

from .error import ClientError, ServerError

logger = logging.getLogger(__name__)


def _error_body(code: str, message: str, details=None) -> dict:
    error_dict = {"code": code, "message": message}
    if details:
        error_dict["details"] = details
    return {"error": error_dict}


async def handle_client_error(request: Request, exc: ClientError):
    body = _error_body(exc.code, exc.base_error.message, exc.base_error.details)
    logger.warning(f"Client error on {request.url.path}: {body['error']}")
    return JSONResponse(status_code=exc.status_code, content=body)


def _server_error_handler(dev_mode: bool):
    async def handle_server_error(request: Request, exc: ServerError):
        message = exc.base_error.message if dev_mode else "Internal server error"
        logger.error(f"Server error: {exc.code} - {exc.base_error.message}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=_error_body(exc.code, message),
        )

    return handle_server_error


async def handle_unexpected_error(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.url.path}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_error_body("INTERNAL_ERROR", "Internal server error"),
    )


async def run_session_reaper(interval_seconds: int):
    """Periodically delete expired OTP sessions until cancelled."""
    from src.app.use_cases.admin import PurgeExpiredSessionsUseCase
    from src.depends import unit_of_work_scope

    while True:
        await asyncio.sleep(interval_seconds)
        try:
            async with unit_of_work_scope() as uow:
                await PurgeExpiredSessionsUseCase(uow).execute()
        except Exception as exc:
            logger.error(f"OTP session reaper run failed: {exc}")


def create_app(ApplicationConfig) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if ApplicationConfig.STORE_BACKEND == "sql":
            from src.depends import engine

            async with engine.begin() as conn:
                await conn.run_sync(SQLModel.metadata.create_all)

        reaper = None
        if ApplicationConfig.OTP_REAPER_INTERVAL_SECONDS > 0:
            reaper = asyncio.create_task(
                run_session_reaper(ApplicationConfig.OTP_REAPER_INTERVAL_SECONDS)
            )
            logger.info(
                f"OTP session reaper every {ApplicationConfig.OTP_REAPER_INTERVAL_SECONDS}s"
            )

        yield

        if reaper is not None:
            reaper.cancel()
            try:
                await reaper
            except asyncio.CancelledError:
                pass

    app = FastAPI(title="Employee Auth Service", version="0.1.0", lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=ApplicationConfig.CORS_ORIGINS,
        allow_credentials=ApplicationConfig.CORS_ALLOW_CREDENTIALS,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    from src.api.routes import admin, auth, employee, health_check

    app.include_router(health_check.router, tags=["Health"])
    app.include_router(auth.router, tags=["Authentication"])
    app.include_router(employee.router, tags=["Employee"])
    app.include_router(admin.router, tags=["Admin"])

    app.add_exception_handler(ClientError, handle_client_error)
    app.add_exception_handler(ServerError, _server_error_handler(ApplicationConfig.DEV_MODE))
    app.add_exception_handler(Exception, handle_unexpected_error)

    return app
