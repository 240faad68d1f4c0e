"""
PURPOSE: Main FastAPI application factory and lifecycle management for GH Paylink.

Initializes the FastAPI application with:
- Settings built once and shared through app.state
- Database engine, transaction store, gateway client and ingestion controller
- Payment, transaction and webhook routers (at / and under /api)
- CORS and rate limiting middleware
- Exception handlers mapping the relay's error taxonomy to responses
- Startup (logging, config warnings, schema creation) and shutdown events
"""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from paylink.api import api_router
from paylink.config.settings import Settings, get_settings
from paylink.core.errors import PaylinkError
from paylink.core.rate_limit import configure_limiter
from paylink.db.engine import build_engine, build_session_factory, create_schema
from paylink.services.gateway_client import GatewayClient
from paylink.services.transaction_store import TransactionStore
from paylink.utils.logger import get_logger, setup_logging
from paylink.version import get_version
from paylink.webhook.ingestion import IngestionController
from paylink.webhook.normalizer import PayloadNormalizer


logger = get_logger(__name__)


# ════════════════════════════════════════════════════════════════
# Lifecycle Events
# ════════════════════════════════════════════════════════════════


async def on_startup(app: FastAPI) -> None:
    """
    PURPOSE: Execute startup tasks.

    CALLED BY: FastAPI lifespan startup

    Tasks:
        1. Setup logging with configured level
        2. Warn about missing required configuration (never fatal, so the
           liveness check keeps answering)
        3. Create missing tables when AUTO_CREATE_SCHEMA is on
    """
    settings: Settings = app.state.settings
    setup_logging(settings.LOG_LEVEL)
    logger.info(
        "application_startup_starting",
        version=get_version().get("version"),
        log_level=settings.LOG_LEVEL,
        app_env=settings.APP_ENV,
    )

    for name in settings.get_missing_required():
        logger.warning("required_setting_missing", setting=name)

    engine = app.state.engine
    if engine is not None and settings.AUTO_CREATE_SCHEMA:
        try:
            await create_schema(engine)
        except Exception as e:
            logger.warning("database_schema_setup_skipped", error=str(e))

    logger.info("application_startup_complete")


async def on_shutdown(app: FastAPI) -> None:
    """
    PURPOSE: Release the database connection pool.

    CALLED BY: FastAPI lifespan shutdown
    """
    logger.info("application_shutdown_starting")
    engine = app.state.engine
    if engine is not None:
        await engine.dispose()
        logger.info("database_engine_disposed")
    logger.info("application_shutdown_complete")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    PURPOSE: Manage application lifespan with startup and shutdown events.

    Args:
        app: FastAPI application instance

    Yields:
        None
    """
    await on_startup(app)

    yield

    await on_shutdown(app)


# ════════════════════════════════════════════════════════════════
# Exception Handlers
# ════════════════════════════════════════════════════════════════


async def paylink_exception_handler(request: Request, exc: PaylinkError) -> JSONResponse:
    """
    PURPOSE: Map relay errors to their status code and public message.

    CALLED BY: FastAPI when a route raises a PaylinkError subclass
    """
    logger.warning(
        "request_failed",
        path=request.url.path,
        method=request.method,
        status_code=exc.status_code,
        error_type=type(exc).__name__,
        message=exc.message,
    )
    return JSONResponse(status_code=exc.status_code, content=jsonable_encoder(exc.to_dict()))


async def validation_exception_handler(
    request: Request,
    exc: RequestValidationError
) -> JSONResponse:
    """
    PURPOSE: Handle Pydantic validation errors with consistent JSON response.

    CALLED BY: FastAPI when request validation fails
    """
    logger.warning(
        "request_validation_failed",
        path=request.url.path,
        method=request.method,
        error_count=len(exc.errors())
    )

    safe_errors = jsonable_encoder(
        exc.errors(),
        custom_encoder={
            ValueError: lambda e: str(e),
            Exception: lambda e: str(e),
        },
    )

    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "status": "error",
            "detail": "Request validation failed",
            "errors": safe_errors,
        },
    )


async def general_exception_handler(
    request: Request,
    exc: Exception
) -> JSONResponse:
    """
    PURPOSE: Handle unexpected exceptions with logging and safe error response.

    CALLED BY: FastAPI exception handler middleware
    """
    logger.error(
        "unhandled_exception",
        path=request.url.path,
        method=request.method,
        error=str(exc),
        exception_type=type(exc).__name__
    )

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "status": "error",
            "detail": "Internal server error",
        },
    )


# ════════════════════════════════════════════════════════════════
# FastAPI Application Factory
# ════════════════════════════════════════════════════════════════


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    PURPOSE: Create and configure the FastAPI application.

    CALLED BY: Application entrypoint (uvicorn) and tests

    Args:
        settings: Configuration to use; read from the environment when omitted.

    Returns:
        FastAPI: Configured application. Its components are on app.state:
            settings, engine, transaction_store, gateway_client,
            ingestion_controller.
    """
    settings = settings or get_settings()
    version = get_version().get("version", "unknown")

    app = FastAPI(
        title="GH Paylink",
        description="Flutterwave payment relay",
        version=version,
        lifespan=lifespan,
    )

    # ────────────────────────────────────────────────────────────
    # Components
    # ────────────────────────────────────────────────────────────

    engine = build_engine(settings)
    session_factory = build_session_factory(engine) if engine is not None else None
    store = TransactionStore(session_factory)

    app.state.settings = settings
    app.state.engine = engine
    app.state.transaction_store = store
    app.state.gateway_client = GatewayClient(settings)
    app.state.ingestion_controller = IngestionController(
        settings,
        PayloadNormalizer(settings.DEFAULT_CURRENCY),
        store,
    )

    # ────────────────────────────────────────────────────────────
    # Middleware
    # ────────────────────────────────────────────────────────────

    # Shared process-wide limiter; the latest create_app() sets its flag
    configure_limiter(app, settings.RATE_LIMIT_ENABLED)
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "verif-hash"],
    )

    # ────────────────────────────────────────────────────────────
    # Routes
    # ────────────────────────────────────────────────────────────

    app.include_router(api_router)
    app.include_router(api_router, prefix="/api", include_in_schema=False)

    @app.get("/", tags=["root"], response_class=PlainTextResponse)
    async def root() -> str:
        """
        PURPOSE: Liveness check.

        CALLED BY: Load balancers, hosting health checks
        """
        return "gh-paylink backend running!"

    # ────────────────────────────────────────────────────────────
    # Exception Handlers
    # ────────────────────────────────────────────────────────────

    app.add_exception_handler(PaylinkError, paylink_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)

    logger.info(
        "fastapi_application_created",
        version=version,
        database_configured=engine is not None,
    )

    return app


if __name__ == "__main__":
    """
    PURPOSE: Run the application with Uvicorn.

    Usage:
        python -m paylink.main
        OR
        uvicorn paylink.main:create_app --factory --host 0.0.0.0 --port 3000
    """
    import uvicorn

    run_settings = get_settings()
    uvicorn.run(
        create_app(run_settings),
        host="0.0.0.0",
        port=run_settings.PORT,
        log_level=run_settings.LOG_LEVEL.lower(),
    )
