"""
Health endpoint for liveness monitoring.

Reports configuration of the upstream client without calling the upstream itself, so the
check stays fast and independent of catalog availability.
"""

from __future__ import annotations

import sys
from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse

from backend.panstream.core.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(tags=["health"])

APP_VERSION = "0.1.0"


def check_upstream_client(request: Request) -> Dict[str, Any]:
    """Check that the lifespan created the upstream client."""
    orchestrator = getattr(request.app.state, "orchestrator", None)
    if orchestrator is None:
        return {
            "status": "unhealthy",
            "message": "Upstream client not initialised",
        }
    policy = orchestrator.client.default_policy
    return {
        "status": "healthy",
        "message": "Upstream client ready",
        "base_url": orchestrator.client.settings.upstream_base_url,
        "policy": {
            "timeout_seconds": policy.timeout,
            "max_attempts": policy.max_attempts,
            "backoff_seconds": policy.backoff_base,
            "retry_client_errors": policy.retry_client_errors,
        },
    }


@router.get("/health", status_code=status.HTTP_200_OK)
async def health_check(request: Request) -> JSONResponse:
    """Return 200 when the upstream client is ready, 503 otherwise."""
    upstream_check = check_upstream_client(request)
    healthy = upstream_check["status"] == "healthy"

    response_data = {
        "status": "healthy" if healthy else "unhealthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "version": {
            "app": APP_VERSION,
            "python": f"{sys.version_info.major}.{sys.version_info.minor}.{sys.version_info.micro}"
        },
        "upstream_base_url": upstream_check.get("base_url"),
        "components": {
            "upstream_client": upstream_check,
        },
    }

    logger.info("health_check_completed", overall_status=response_data["status"])

    return JSONResponse(
        status_code=status.HTTP_200_OK if healthy else status.HTTP_503_SERVICE_UNAVAILABLE,
        content=response_data,
    )
