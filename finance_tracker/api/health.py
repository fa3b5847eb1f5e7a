"""
Health check endpoints for monitoring and connectivity verification.
"""

from typing import Any

import structlog
from fastapi import APIRouter, Depends

from .. import __version__
from ..core.clock import utcnow
from ..core.config import Settings, get_settings
from ..database.mongodb import MongoDB
from .dependencies.chat_deps import get_mongodb

logger = structlog.get_logger()

router = APIRouter()


@router.get("/health")
async def health_check(
    mongodb: MongoDB = Depends(get_mongodb),
    settings: Settings = Depends(get_settings),
) -> dict[str, Any]:
    """
    Health check endpoint.

    Reports MongoDB connectivity and whether the LLM provider is configured.
    The LLM provider itself is not called.
    """
    logger.info("Health check requested")

    mongodb_status = await mongodb.health_check()
    healthy = bool(mongodb_status.get("connected", False))

    health_response = {
        "status": "ok" if healthy else "degraded",
        "environment": settings.environment,
        "version": __version__,
        "timestamp": utcnow().isoformat(),
        "dependencies": {"mongodb": mongodb_status},
        "configuration": {
            "llm_configured": bool(settings.openrouter_api_key),
            "llm_model": settings.openrouter_model,
            "database_name": settings.database_name,
        },
    }

    if healthy:
        logger.info("Health check passed", status="healthy")
    else:
        logger.warning(
            "Health check failed",
            status="degraded",
            dependencies=health_response["dependencies"],
        )

    return health_response


@router.get("/health/live")
async def liveness_check() -> dict[str, Any]:
    """Simple check that the application is running."""
    return {"alive": True, "status": "ok"}
