"""Transaction extraction with an offline fallback."""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING

from google.api_core import exceptions as google_exceptions
from pydantic import ValidationError

from fintrack.models.transaction import ParseResponse
from fintrack.services.offline_parser import parse_offline

if TYPE_CHECKING:
    from fintrack.models.transaction import ParseRequest
    from fintrack.services.gemini import GeminiService

logger = logging.getLogger(__name__)

OFFLINE_NOTE = " (Offline Scan)"

AI_ERRORS = (
    ValueError,
    TypeError,
    ValidationError,
    google_exceptions.GoogleAPIError,
)


class TransactionParseError(Exception):
    """Raised when no extractor could produce a transaction."""


class TransactionParser:
    """Runs AI extraction and falls back to the offline heuristic."""

    def __init__(
        self,
        ai_service: GeminiService | None,
        *,
        fallback_enabled: bool = True,
    ) -> None:
        """Initialize the parser."""
        self.ai_service = ai_service
        self.fallback_enabled = fallback_enabled

    async def parse(self, request: ParseRequest) -> ParseResponse:
        """Extract transactions for ``request``.

        Raises:
            TransactionParseError: If AI extraction failed and there is no
                OCR text to fall back on
        """
        start_time = time.time()

        if self.ai_service is None:
            return self._fallback(
                request, start_time, "AI extraction is not configured"
            )

        try:
            transactions = await self.ai_service.extract_transactions(
                request.ocr_text, request.image_base64
            )
        except AI_ERRORS as e:
            logger.warning("AI extraction failed: %s", e)
            return self._fallback(request, start_time, str(e), cause=e)

        return ParseResponse(
            transactions=transactions,
            source="ai",
            processing_time=time.time() - start_time,
        )

    def parse_offline_text(self, text: str) -> ParseResponse:
        """Run only the offline heuristic."""
        start_time = time.time()
        return ParseResponse(
            transactions=[parse_offline(text)],
            source="offline",
            processing_time=time.time() - start_time,
        )

    def _fallback(
        self,
        request: ParseRequest,
        start_time: float,
        reason: str,
        cause: Exception | None = None,
    ) -> ParseResponse:
        if not self.fallback_enabled or not request.ocr_text.strip():
            msg = f"Unable to parse transaction: {reason}"
            raise TransactionParseError(msg) from cause

        logger.info("Using offline extraction (%s)", reason)
        result = parse_offline(request.ocr_text).with_note(OFFLINE_NOTE)
        return ParseResponse(
            transactions=[result],
            source="offline",
            processing_time=time.time() - start_time,
        )
