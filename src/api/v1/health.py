"""
Health check endpoints.
"""

from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse

from src.api.deps import get_llm_client
from src.core.config import settings
from src.llm.client import LLMClient

router = APIRouter()


@router.get("/health", response_class=PlainTextResponse)
async def health_check() -> str:
    """
    Basic health check endpoint.
    Plain-text "OK" for load balancers.
    """
    return "OK"


@router.get("/health/ready")
async def readiness_check(llm: LLMClient = Depends(get_llm_client)) -> dict[str, Any]:
    """
    Readiness check endpoint.

    The app is ready as soon as it runs; the other checks report which
    optional integrations are configured.
    """
    atlassian = settings.atlassian
    checks = {
        "app": True,
        "llm": llm.is_configured,
        "atlassian": bool(
            atlassian.email
            and atlassian.api_token
            and (atlassian.domain or (atlassian.confluence_base_url and atlassian.jira_base_url))
        ),
        "email": settings.email.is_configured,
    }
    return {
        "status": "ready",
        "app": settings.app_name,
        "environment": settings.app_env,
        "checks": checks,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@router.get("/health/live")
async def liveness_check() -> dict[str, str]:
    """
    Liveness check endpoint.
    Simple check that the application is running.
    """
    return {"status": "alive"}
