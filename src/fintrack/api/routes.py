"""Main API routes."""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, status

from fintrack import __version__
from fintrack.core.dependencies import TransactionParserDep
from fintrack.models import OfflineParseRequest, ParseRequest, ParseResponse
from fintrack.services.transaction_parser import TransactionParseError

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1", tags=["transactions"])


@router.get("/")
async def root() -> dict[str, str]:
    """Root endpoint."""
    return {
        "message": "fintrack API",
        "version": __version__,
        "docs": "/docs",
    }


@router.post("/transactions/parse", response_model=ParseResponse)
async def parse_transactions(
    request: ParseRequest,
    parser: TransactionParserDep,
) -> ParseResponse:
    """Extract transactions from OCR text and/or an image.

    Uses Gemini when configured and falls back to the offline heuristic
    when the AI call fails and OCR text is available.
    """
    try:
        return await parser.parse(request)
    except TransactionParseError as e:
        logger.error("Transaction parsing failed: %s", e)
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=str(e),
        ) from e


@router.post("/transactions/parse/offline", response_model=ParseResponse)
async def parse_transactions_offline(
    request: OfflineParseRequest,
    parser: TransactionParserDep,
) -> ParseResponse:
    """Extract a transaction with the offline heuristic only."""
    return parser.parse_offline_text(request.text)
