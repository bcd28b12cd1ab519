"""Dependency injection for FastAPI."""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import Depends

from fintrack.core.config import Settings, get_settings
from fintrack.services.gemini import GeminiService
from fintrack.services.transaction_parser import TransactionParser

logger = logging.getLogger(__name__)


def get_gemini_service(
    settings: Annotated[Settings, Depends(get_settings)],
) -> GeminiService | None:
    """Get Gemini service instance, or None when no API key is configured."""
    if not settings.ai_enabled:
        return None
    return GeminiService(settings)


def get_transaction_parser(
    settings: Annotated[Settings, Depends(get_settings)],
    gemini_service: Annotated[GeminiService | None, Depends(get_gemini_service)],
) -> TransactionParser:
    """Get transaction parser wired to the configured AI service."""
    return TransactionParser(
        gemini_service,
        fallback_enabled=settings.offline_fallback_enabled,
    )


# Type aliases for dependency injection
SettingsDep = Annotated[Settings, Depends(get_settings)]
TransactionParserDep = Annotated[TransactionParser, Depends(get_transaction_parser)]
