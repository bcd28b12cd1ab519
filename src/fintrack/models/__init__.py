"""fintrack models package."""

from .transaction import (
    Category,
    ExtractionResult,
    OfflineParseRequest,
    ParseRequest,
    ParseResponse,
    TransactionType,
)

__all__ = [
    "Category",
    "ExtractionResult",
    "OfflineParseRequest",
    "ParseRequest",
    "ParseResponse",
    "TransactionType",
]
