"""
FastAPI Application

Startup routine for the HTTP service. Run with:

    uvicorn cryptoalert.main:create_app --factory

Settings are loaded and validated first; an invalid configuration raises
ConfigurationError and the server never starts.
"""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from cryptoalert import __version__
from cryptoalert.config import Settings, load_settings
from cryptoalert.database import init_db
from cryptoalert.dependencies import ServiceContainer, build_services
from cryptoalert.routers import alerts, prices, system
from cryptoalert.utils.logger import configure_logging, create_logger

logger = create_logger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    services: Optional[ServiceContainer] = None,
) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        settings: Validated settings (loaded from the environment if omitted)
        services: Pre-built service container (built from settings if omitted)

    Returns:
        FastAPI: Configured application
    """
    if services is not None:
        settings = services.settings
    elif settings is None:
        settings = load_settings()

    configure_logging(settings.log_level, settings.log_path)
    logger.info(f"Starting CryptoAlert: {settings.summary()}")

    if services is None:
        services = build_services(settings)
        init_db(services.engine)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        logger.info("Shutting down CryptoAlert")
        app.state.services.close()

    app = FastAPI(title="CryptoAlert", version=__version__, lifespan=lifespan)
    app.state.services = services

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        fields = sorted({".".join(str(part) for part in err["loc"] if part != "body") or "body" for err in errors})
        logger.info(f"Rejected {request.method} {request.url.path}: invalid {', '.join(fields)}")
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"detail": f"Invalid or missing fields: {', '.join(fields)}"},
        )

    app.include_router(system.router)
    app.include_router(alerts.router)
    app.include_router(prices.router)

    return app
