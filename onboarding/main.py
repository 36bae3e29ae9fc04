from __future__ import annotations

from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from onboarding.api.deps import ServiceContainer, build_container
from onboarding.api.v1.router import router as api_v1_router
from onboarding.config.settings import settings
from onboarding.core.logging import get_logger, setup_logging
from onboarding.core.middleware import register_middlewares
from onboarding.db.init_db import init_db
from onboarding.db.session import SessionLocal, engine
from onboarding.services.common import TransactionError, errors

logger = get_logger(__name__)

# Most specific classes first; the first isinstance match wins
ERROR_STATUS = (
    (errors.NotFoundError, status.HTTP_404_NOT_FOUND),
    (errors.ValidationError, status.HTTP_422_UNPROCESSABLE_ENTITY),
    (errors.ConflictError, status.HTTP_409_CONFLICT),
    (errors.InvalidStateError, status.HTTP_409_CONFLICT),
    (errors.CapacityExceededError, status.HTTP_409_CONFLICT),
    (errors.InvalidSignatureError, status.HTTP_400_BAD_REQUEST),
    (errors.AuthorizationError, status.HTTP_403_FORBIDDEN),
    (errors.ExternalServiceError, status.HTTP_502_BAD_GATEWAY),
)


def status_for(exc: errors.ServiceError) -> int:
    for cls, code in ERROR_STATUS:
        if isinstance(exc, cls):
            return code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def error_body(code: str, message: str, details: Optional[dict] = None) -> dict:
    return {"error": {"code": code, "message": message, "details": details or {}}}


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(errors.ServiceError)
    async def service_error_handler(request: Request, exc: errors.ServiceError) -> JSONResponse:
        http_status = status_for(exc)
        log = logger.error if http_status >= 500 else logger.info
        log(
            "Service error",
            extra={
                "code": exc.code,
                "status_code": http_status,
                "path": request.url.path,
                "error": exc.message,
            },
        )
        return JSONResponse(
            status_code=http_status,
            content=error_body(exc.code, exc.message, exc.details),
        )

    @app.exception_handler(TransactionError)
    async def transaction_error_handler(request: Request, exc: TransactionError) -> JSONResponse:
        logger.error(
            "Transaction failed",
            extra={"path": request.url.path, "error": str(exc)},
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=error_body("transaction_error", "The operation could not be completed"),
        )


def create_app(container: Optional[ServiceContainer] = None) -> FastAPI:
    """
    Application factory for the FastAPI app.

    - Configures title, version, debug mode from Settings.
    - Registers CORS, core middleware, and exception handlers.
    - Includes the versioned API router under /api/v1.
    - On startup creates missing tables and loads the settings registry.

    A prebuilt ``container`` replaces the one wired from settings; its
    registry is still loaded on startup.
    """
    app = FastAPI(
        title=settings.APP_NAME,
        debug=settings.DEBUG,
        version=settings.API_VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS or ["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_middlewares(app)
    register_exception_handlers(app)

    app.include_router(api_v1_router, prefix=settings.API_V1_STR)

    app.state.container = container or build_container(settings, SessionLocal)

    @app.on_event("startup")
    def on_startup() -> None:
        setup_logging()
        if container is None:
            init_db(engine)
        app.state.container.registry.load()
        logger.info(
            "Onboarding service started",
            extra={"environment": settings.ENVIRONMENT, "version": settings.API_VERSION},
        )

    return app


app = create_app()
