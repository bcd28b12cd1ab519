"""Services for fintrack."""

from .offline_parser import normalize_text, parse_offline
from .transaction_parser import TransactionParseError, TransactionParser

__all__ = [
    "TransactionParseError",
    "TransactionParser",
    "normalize_text",
    "parse_offline",
]
