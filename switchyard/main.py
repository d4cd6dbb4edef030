"""Switchyard - FastAPI application for inspecting alert routing."""

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator

import uvicorn
from fastapi import FastAPI, HTTPException, status

from switchyard.config import get_settings
from switchyard.errors import ConfigError
from switchyard.models.api import InhibitTestRequest, RouteTestRequest
from switchyard.router import AlertRouter, NoConfigError

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Global router instance
router: AlertRouter | None = None


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup/shutdown."""
    global router

    settings = get_settings()

    # Configure logging level
    logging.getLogger().setLevel(settings.log_level.upper())

    router = AlertRouter(config_path=settings.config_path)
    try:
        router.reload()
    except FileNotFoundError:
        logger.error(
            f"Config file not found: {settings.config_file}. "
            "Create it or set the SWITCHYARD_CONFIG_FILE environment variable."
        )
    except ConfigError as e:
        logger.error(f"Invalid config {settings.config_file}: {e}")
    except Exception as e:
        logger.exception(f"Failed to load config {settings.config_file}: {e}")

    logger.info("Switchyard started")

    yield

    router = None
    logger.info("Switchyard stopped")


app = FastAPI(
    title="Switchyard",
    description="Alert routing configuration with route and inhibition testing",
    version="0.1.0",
    lifespan=lifespan,
)


def _get_router() -> AlertRouter:
    if not router or router.config is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="No configuration loaded. Check the config file.",
        )
    return router


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "healthy"}


@app.get("/api/v1/status")
async def get_status() -> dict[str, Any]:
    """Show the loaded configuration with secrets redacted."""
    alert_router = _get_router()
    return {
        "config": alert_router.config.dump(),
        "inhibit_rules": [rule.to_dict() for rule in alert_router.config.inhibit_rules],
        "loaded_at": alert_router.loaded_at.isoformat() if alert_router.loaded_at else None,
    }


@app.get("/api/v1/routes")
async def get_routes() -> dict[str, Any]:
    """Show the routing tree."""
    config = _get_router().config
    return {"route": config.route.to_dict()}


@app.post("/api/v1/routes/test")
async def test_routes(request: RouteTestRequest) -> dict[str, Any]:
    """List the routes an alert with the given labels is sent to."""
    alert_router = _get_router()
    try:
        routes = alert_router.find_routes(request.labels)
    except NoConfigError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))

    return {
        "receivers": [route.opts.receiver for route in routes],
        "routes": [
            {
                "key": route.key(),
                **route.opts.to_dict(),
                "group_labels": route.opts.group_labels(request.labels),
            }
            for route in routes
        ],
    }


@app.post("/api/v1/inhibit/test")
async def test_inhibit(request: InhibitTestRequest) -> dict[str, bool]:
    """Check whether the target alert is inhibited by any active alert."""
    alert_router = _get_router()
    try:
        inhibited = alert_router.inhibited(request.target, request.active)
    except NoConfigError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))
    return {"inhibited": inhibited}


@app.post("/-/reload")
def reload_config() -> dict[str, str]:
    """Reload the config file. The current config stays active on failure."""
    if not router:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Router not initialized",
        )
    try:
        router.reload()
    except (ConfigError, OSError, UnicodeDecodeError) as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to reload config: {e}",
        )
    return {"status": "ok"}


def run() -> None:
    """Run the application using uvicorn."""
    settings = get_settings()
    uvicorn.run(
        "switchyard.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
        reload=False,
    )


if __name__ == "__main__":
    run()
