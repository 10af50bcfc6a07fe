"""Content Studio Backend: FastAPI application entry point."""

import signal
import uuid
from contextlib import asynccontextmanager

# Logging is configured before the remaining imports: structlog caches the
# processor chain on first use.
from content_studio.core.config import get_settings as _get_settings_early
from content_studio.core.logging import configure_structlog

_early_settings = _get_settings_early()
configure_structlog(
    log_level="DEBUG" if _early_settings.debug else "INFO",
    json_logs=not _early_settings.debug,
)

import structlog

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from content_studio.api.routes import api_router
from content_studio.api.routes.content import _inflight, drain_inflight
from content_studio.core.config import Settings, get_settings
from content_studio.db import create_engine, create_session_factory, create_tables
from content_studio.middleware.correlation import get_correlation_id, setup_correlation_middleware
from content_studio.providers import build_provider
from content_studio.services.demo_service import DemoService
from content_studio.services.generation_service import GenerationService
from content_studio.stores import SqlArtifactStore, SqlBalanceStore, SqlCreditLedger

logger = structlog.get_logger(__name__)


def attach_services(app: FastAPI, settings: Settings, session_factory, provider) -> None:
    """Wire stores, provider and services onto ``app.state``.

    Everything is built once per process; route handlers reach it only
    through the dependencies in ``api.deps``.
    """
    balance_store = SqlBalanceStore(session_factory)

    app.state.session_factory = session_factory
    app.state.balance_store = balance_store
    app.state.provider = provider
    app.state.generation_service = GenerationService(
        balance_store=balance_store,
        artifact_store=SqlArtifactStore(session_factory),
        provider=provider,
        ledger=SqlCreditLedger(session_factory),
        provider_timeout_seconds=settings.generation_timeout_seconds,
        max_debit_attempts=settings.max_debit_attempts,
    )
    app.state.demo_service = DemoService(provider)


def _install_sigterm_drain(app: FastAPI) -> None:
    """Flip ``app.state.shutting_down`` on SIGTERM so /api/health starts returning 503."""
    app.state.shutting_down = False

    def handle_sigterm(signum, frame):
        app.state.shutting_down = True
        logger.info("sigterm_received", action="health_check_503_draining_connections")

    signal.signal(signal.SIGTERM, handle_sigterm)


@asynccontextmanager
async def lifespan(app: FastAPI):
    _install_sigterm_drain(app)

    settings = get_settings()
    logger.info("startup_begin", app_name=settings.app_name, provider=settings.generation_provider)

    engine = create_engine(settings.database_url, echo=settings.debug)
    await create_tables(engine)
    provider = build_provider(settings)
    attach_services(app, settings, create_session_factory(engine), provider)
    logger.info("startup_complete", provider=provider.name)

    try:
        yield
    finally:
        logger.info("shutdown_begin", inflight=len(_inflight))
        cancelled = await drain_inflight(settings.shutdown_drain_seconds)
        logger.info("shutdown_inflight_drained", cancelled=cancelled)
        await provider.close()
        await engine.dispose()
        logger.info("shutdown_complete")


def _error_response(
    request: Request,
    status_code: int,
    detail,
    event: str,
    headers: dict | None = None,
    **log_fields,
) -> JSONResponse:
    """Log ``event`` with request context and return ``{"detail", "debug_id"}``.

    5xx responses are logged at error level, everything else at warning.
    """
    debug_id = str(uuid.uuid4())
    log = logger.error if status_code >= 500 else logger.warning
    log(
        event,
        status_code=status_code,
        debug_id=debug_id,
        correlation_id=get_correlation_id(),
        path=request.url.path,
        method=request.method,
        user_id=getattr(request.state, "user_id", None),
        **log_fields,
    )
    return JSONResponse(
        status_code=status_code,
        content={"detail": detail, "debug_id": debug_id},
        headers=headers,
    )


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """HTTPException (including mapped rejections) with a debug_id."""
    code = exc.detail.get("code") if isinstance(exc.detail, dict) else None
    return _error_response(
        request,
        exc.status_code,
        exc.detail,
        "http_exception",
        headers=getattr(exc, "headers", None),
        rejection=code,
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed request bodies are an ``invalid_request`` (400), not a 422."""
    return _error_response(
        request,
        400,
        {"code": "invalid_request", "message": "Malformed request body"},
        "request_validation_failed",
        errors=exc.errors(),
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Unhandled errors: full traceback in the log, generic 500 to the client."""
    return _error_response(
        request,
        500,
        "Internal server error",
        "unhandled_exception",
        error=str(exc),
        error_type=type(exc).__name__,
        exc_info=exc,
    )


def install_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)


def create_app() -> FastAPI:
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        description="Credit-metered AI content generation",
        version="0.1.0",
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(dict.fromkeys([settings.frontend_url, *settings.clerk_allowed_origins])),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "X-Billing-Warning"],
    )
    # Added last so it runs first on incoming requests
    setup_correlation_middleware(app)

    install_exception_handlers(app)
    app.include_router(api_router, prefix="/api")
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("content_studio.main:app", host="0.0.0.0", port=8000, reload=True)
