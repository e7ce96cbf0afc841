"""
MailHog server - FastAPI application

Main entry point. Resolves options, bootstraps the live configuration and
serves the HTTP API and browser UI.
"""

from datetime import UTC, datetime

import uvicorn
from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, ValidationError

from mailhog_server import __version__
from mailhog_server.api.dependencies import get_config
from mailhog_server.api.jim_routes import router as jim_router
from mailhog_server.api.message_routes import router as message_router
from mailhog_server.api.outgoing_routes import router as outgoing_router
from mailhog_server.bootstrap import Config, configure
from mailhog_server.config import Settings, parse_flags
from mailhog_server.errors import FatalConfigError
from mailhog_server.logging import get_logger, setup_logging
from mailhog_server.web import AssetLoader, create_web_router, load_asset

logger = get_logger(__name__)

router = APIRouter(tags=["Health"])


# =============================================================================
# Response Models
# =============================================================================


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str
    time: str
    uptime_seconds: float
    storage: str
    jim_enabled: bool


# =============================================================================
# REST Endpoints
# =============================================================================


@router.get("/health", response_model=HealthResponse)
async def health(request: Request, config: Config = Depends(get_config)) -> HealthResponse:
    """
    Health check endpoint.

    Returns current status, version, uptime and the active storage backend.
    """
    now = datetime.now(UTC)
    uptime = (now - request.app.state.start_time).total_seconds()

    return HealthResponse(
        status="healthy",
        version=__version__,
        time=now.isoformat(),
        uptime_seconds=round(uptime, 2),
        storage=config.storage_type.value,
        jim_enabled=config.monkey is not None,
    )


# =============================================================================
# FastAPI Application
# =============================================================================


def create_app(config: Config, asset: AssetLoader = load_asset) -> FastAPI:
    """
    Create the application around a bootstrapped config.

    Raises:
        FatalConfigError: If the UI templates cannot be loaded
    """
    app = FastAPI(
        title="MailHog",
        description="Web and API based SMTP testing tool",
        version=__version__,
    )
    app.state.config = config
    app.state.start_time = datetime.now(UTC)

    if config.cors_origin:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=[config.cors_origin],
            allow_methods=["*"],
            allow_headers=["*"],
        )

    app.include_router(router)
    app.include_router(jim_router)
    app.include_router(message_router)
    app.include_router(outgoing_router)
    app.include_router(create_web_router(config, asset))

    return app


def run(argv: list[str] | None = None) -> None:
    """
    Command-line entry point.

    Configuration errors are logged and end the process with status 1
    before any listener binds.
    """
    overrides = parse_flags(argv)
    try:
        settings = Settings(**overrides)
    except ValidationError as e:
        setup_logging()
        logger.critical("Invalid configuration: %s", e)
        raise SystemExit(1) from e

    setup_logging(level=settings.log_level, json_output=settings.log_json)
    logger.info("Starting MailHog v%s", __version__)
    logger.debug("Configuration: %s", settings.get_redacted_config())

    try:
        config = configure(settings)
        app = create_app(config)
        host, port = settings.api_host_port
    except (FatalConfigError, ValueError) as e:
        logger.critical("%s", e)
        raise SystemExit(1) from e

    logger.info("Serving API on http://%s:%d", host, port)
    uvicorn.run(app, host=host, port=port, log_config=None)


if __name__ == "__main__":
    run()
