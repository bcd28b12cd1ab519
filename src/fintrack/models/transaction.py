"""Models for extracted transaction data."""

from __future__ import annotations

import re
from datetime import UTC, date, datetime
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class TransactionType(str, Enum):
    """Direction of a transaction."""

    INCOME = "INCOME"
    EXPENSE = "EXPENSE"


class Category(str, Enum):
    """Closed set of transaction categories.

    Values are the display labels used across the tracker, which is also
    what the AI provider is asked to return.
    """

    FOOD = "Food & Dining"
    TRANSPORT = "Transportation"
    UTILITIES = "Utilities"
    SHOPPING = "Shopping"
    SALARY = "Salary"
    TRANSFER = "Transfer"
    ENTERTAINMENT = "Entertainment"
    HEALTH = "Health & Fitness"
    OTHER = "Other"


GROUPED_NUMBER = re.compile(r"\d{1,3}(?:[.,]\d{3})+")

DEFAULT_DESCRIPTION = "Scanned from receipt (Offline)"


class ExtractionResult(BaseModel):
    """A best-effort transaction record recovered from free text.

    Identity (id, owner, creation time) is assigned by the storage layer,
    not here.
    """

    amount: Decimal = Field(default=Decimal(0), ge=0, description="Amount in VND")
    type: TransactionType = Field(default=TransactionType.EXPENSE)
    category: Category = Field(default=Category.OTHER)
    description: str = Field(default=DEFAULT_DESCRIPTION, min_length=1)
    date: datetime = Field(
        default_factory=lambda: datetime.now(UTC),
        description="Transaction date-time (UTC)",
    )

    @field_validator("amount", mode="before")
    @classmethod
    def convert_amount_to_decimal(cls, v: Any) -> Decimal:  # noqa: ANN401
        """Convert amount values to Decimal."""
        if isinstance(v, Decimal):
            return v
        if isinstance(v, bool):
            msg = f"Invalid type for amount conversion: {type(v)}"
            raise ValueError(msg)  # noqa: TRY004
        if isinstance(v, int | float):
            try:
                return Decimal(str(v))
            except InvalidOperation as e:
                msg = f"Invalid amount: {v!r}"
                raise ValueError(msg) from e
        if isinstance(v, str):
            cleaned = v.strip()
            if GROUPED_NUMBER.fullmatch(cleaned):
                cleaned = re.sub(r"[.,]", "", cleaned)
            cleaned = re.sub(r"[^\d.\-]", "", cleaned.replace(",", ""))
            try:
                return Decimal(cleaned)
            except InvalidOperation as e:
                msg = f"Invalid amount: {v!r}"
                raise ValueError(msg) from e
        msg = f"Invalid type for amount conversion: {type(v)}"
        raise ValueError(msg)

    @field_validator("date", mode="before")
    @classmethod
    def parse_date(cls, v: Any) -> Any:  # noqa: ANN401
        """Accept date-only values as midnight."""
        if isinstance(v, str) and len(v.strip()) == len("YYYY-MM-DD"):
            v = date.fromisoformat(v.strip())
        if isinstance(v, date) and not isinstance(v, datetime):
            return datetime(v.year, v.month, v.day, tzinfo=UTC)
        return v

    @field_validator("date")
    @classmethod
    def ensure_timezone(cls, v: datetime) -> datetime:
        """Treat naive date-times as UTC."""
        if v.tzinfo is None:
            return v.replace(tzinfo=UTC)
        return v

    def with_note(self, note: str) -> ExtractionResult:
        """Return a copy with ``note`` appended to the description."""
        return self.model_copy(update={"description": self.description + note})

    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "examples": [
                {
                    "amount": 1200000,
                    "type": "INCOME",
                    "category": "Salary",
                    "description": "Income/Salary (Automatic)",
                    "date": "2024-03-15T00:00:00Z",
                }
            ]
        },
    )


class ParseRequest(BaseModel):
    """Request model for transaction extraction."""

    ocr_text: str = Field(default="", description="Raw OCR or notification text")
    image_base64: str | None = Field(
        None,
        description="Base64 image data, bare or as a data: URL",
    )

    @model_validator(mode="after")
    def require_input(self) -> ParseRequest:
        """Ensure there is something to parse."""
        if not self.ocr_text.strip() and not self.image_base64:
            msg = "Either ocr_text or image_base64 is required"
            raise ValueError(msg)
        return self


class OfflineParseRequest(BaseModel):
    """Request model for the offline heuristic."""

    text: str = Field(default="", description="Raw OCR or notification text")


class ParseResponse(BaseModel):
    """Response model for transaction extraction."""

    transactions: list[ExtractionResult] = Field(default_factory=list)
    source: Literal["ai", "offline"] = Field(
        ..., description="Which extractor produced the transactions"
    )
    processing_time: float = Field(..., description="Time taken to process in seconds")
