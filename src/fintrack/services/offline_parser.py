"""Offline transaction extraction from OCR or bank-notification text.

Used when the AI extractor is unavailable. Every stage has a default, so
``parse_offline`` returns a record for any input string and never raises.
The result is a low-confidence suggestion: the caller decides whether a
zero amount or an ``OTHER`` category is acceptable.
"""

from __future__ import annotations

import logging
import re
import unicodedata
from datetime import UTC, datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict

from fintrack.models.transaction import (
    DEFAULT_DESCRIPTION,
    Category,
    ExtractionResult,
    TransactionType,
)

logger = logging.getLogger(__name__)

# Constants
MIN_MONTH, MAX_MONTH = 1, 12
MIN_DAY, MAX_DAY = 1, 31

# 1.200.000 / 500,000đ / 12.604.981 VND
GROUPED_AMOUNT_PATTERN = re.compile(
    r"(?<!\d)\d{1,3}(?:[.,]\d{3})+(?!\d)(?:\s?(?:VND|đ|d|D))?"
)
# Digits glued to a date separator belong to a date, not an amount.
BARE_AMOUNT_PATTERN = re.compile(r"(?<![\d/-])\d{4,10}(?![\d/-])")
DATE_PATTERN = re.compile(r"\b(\d{1,2})[/-](\d{1,2})[/-](\d{4})\b")
COMBINING_MARKS = re.compile(r"[\u0300-\u036f]")
WHITESPACE = re.compile(r"\s+")


class Classification(BaseModel):
    """Resolved type, category and description for a piece of text."""

    model_config = ConfigDict(frozen=True)

    type: TransactionType
    category: Category
    description: str


class ClassificationRule(BaseModel):
    """Keywords (already normalized) that map text to a category."""

    model_config = ConfigDict(frozen=True)

    keywords: tuple[str, ...]
    category: Category
    description: str

    def matches(self, normalized: str) -> bool:
        """Check whether any keyword occurs in the normalized text."""
        return any(keyword in normalized for keyword in self.keywords)


DEFAULT_CLASSIFICATION = Classification(
    type=TransactionType.EXPENSE,
    category=Category.OTHER,
    description=DEFAULT_DESCRIPTION,
)

# "du" and "cong" are deliberately bare: they also hit "duoc", "su dung",
# "cong ty". Narrowing them changes which notifications count as income.
INCOME_RULE = ClassificationRule(
    keywords=(
        "nhan tien",
        "nhan chuyen",
        "chuyen den",
        "tien vao",
        "ghi co",
        "salary",
        "luong",
        "thu nhap",
        "so du",
        "du",
        "cong",
        "tk chinh",
    ),
    category=Category.SALARY,
    description="Income/Salary (Automatic)",
)

# Evaluated top to bottom, first hit wins.
EXPENSE_RULES: tuple[ClassificationRule, ...] = (
    ClassificationRule(
        keywords=(
            "grab",
            "gojek",
            "xanh sm",
            "be group",
            "taxi",
            "xang",
            "petrolimex",
            "gui xe",
            "bai xe",
            "parking",
            "vetc",
        ),
        category=Category.TRANSPORT,
        description="Transport/Fuel (Automatic)",
    ),
    ClassificationRule(
        keywords=(
            "shopee",
            "lazada",
            "tiki",
            "tiktok shop",
            "sieu thi",
            "winmart",
            "coopmart",
            "bach hoa xanh",
            "aeon",
            "lotte mart",
            "circle k",
            "gs25",
            "7-eleven",
            "familymart",
            "ministop",
        ),
        category=Category.SHOPPING,
        description="Shopping (Automatic)",
    ),
    ClassificationRule(
        keywords=(
            "evn",
            "tien dien",
            "tien nuoc",
            "cap nuoc",
            "internet",
            "wifi",
            "viettel",
            "vnpt",
            "fpt telecom",
        ),
        category=Category.UTILITIES,
        description="Utility bill (Automatic)",
    ),
    ClassificationRule(
        keywords=(
            "cafe",
            "ca phe",
            "coffee",
            "highlands",
            "starbucks",
            "phuc long",
            "tra sua",
            "nha hang",
            "quan an",
            "com tam",
            "bun bo",
            "pho bo",
        ),
        category=Category.FOOD,
        description="Food & Drink (Automatic)",
    ),
    ClassificationRule(
        keywords=("chuyen khoan", "chuyen tien", "transfer"),
        category=Category.TRANSFER,
        description="Money transfer (Automatic)",
    ),
)


def normalize_text(text: str) -> str:
    """Lowercase ``text`` and strip Vietnamese diacritics.

    "Lương" and "luong" normalize to the same string. ``đ``/``Đ`` have no
    canonical decomposition, so they are substituted explicitly.
    """
    decomposed = unicodedata.normalize("NFD", text)
    stripped = COMBINING_MARKS.sub("", decomposed)
    stripped = stripped.replace("đ", "d").replace("Đ", "D")
    return WHITESPACE.sub(" ", stripped.lower())


def extract_amount(text: str) -> Decimal:
    """Find the most plausible transaction amount in ``text``.

    Notifications usually carry several numbers (fee, balance, amount), so
    the largest thousands-grouped number wins. Bare 4-10 digit runs are only
    considered when no grouped number exists.
    """
    max_amount = Decimal(0)
    for match in GROUPED_AMOUNT_PATTERN.finditer(text):
        # Decimal, unlike int, has no digit limit on string conversion
        value = Decimal(re.sub(r"\D", "", match.group()))
        if value > max_amount:
            max_amount = value

    if max_amount == 0:
        for match in BARE_AMOUNT_PATTERN.finditer(text):
            value = Decimal(match.group())
            if value > max_amount:
                max_amount = value

    return max_amount


def extract_date(text: str, now: datetime | None = None) -> datetime:
    """Read the first DD/MM/YYYY or DD-MM-YYYY date in ``text``.

    Falls back to ``now`` (current UTC time by default) when there is no
    date, or when it is out of range or not a real calendar date.
    """
    fallback = now if now is not None else datetime.now(UTC)

    match = DATE_PATTERN.search(text)
    if not match:
        return fallback

    day, month, year = (int(group) for group in match.groups())
    if not (MIN_MONTH <= month <= MAX_MONTH and MIN_DAY <= day <= MAX_DAY):
        return fallback

    try:
        return datetime(year, month, day, tzinfo=UTC)
    except ValueError:
        # 31/02 and friends pass the range check
        logger.debug("Discarding impossible date %s", match.group())
        return fallback


def classify(normalized: str) -> Classification:
    """Assign type, category and description to normalized text."""
    if INCOME_RULE.matches(normalized):
        return Classification(
            type=TransactionType.INCOME,
            category=INCOME_RULE.category,
            description=INCOME_RULE.description,
        )

    for rule in EXPENSE_RULES:
        if rule.matches(normalized):
            return Classification(
                type=TransactionType.EXPENSE,
                category=rule.category,
                description=rule.description,
            )

    return DEFAULT_CLASSIFICATION


def parse_offline(text: str, now: datetime | None = None) -> ExtractionResult:
    """Extract a transaction record from ``text`` without any network call."""
    normalized = normalize_text(text)
    classification = classify(normalized)

    result = ExtractionResult(
        amount=extract_amount(text),
        type=classification.type,
        category=classification.category,
        description=classification.description,
        date=extract_date(text, now),
    )

    logger.debug(
        "Offline extraction: amount=%s type=%s category=%s",
        result.amount,
        result.type.value,
        result.category.value,
    )
    return result
