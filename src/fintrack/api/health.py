"""Health check endpoints."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, status

from fintrack.core.dependencies import SettingsDep

router = APIRouter(tags=["health"])


@router.get("/health", status_code=status.HTTP_200_OK)
async def health_check() -> dict[str, str]:
    """Check if the service is healthy."""
    return {"status": "healthy", "service": "fintrack"}


@router.get("/ready", status_code=status.HTTP_200_OK)
async def readiness_check(settings: SettingsDep) -> dict[str, Any]:
    """Check if the service is ready to accept requests."""
    return {
        "status": "ready",
        "service": "fintrack",
        "dependencies": {
            "gemini": "configured" if settings.ai_enabled else "not_configured",
            "offline_parser": "available",
        },
    }
