"""Gemini AI service for transaction extraction."""

from __future__ import annotations

import base64
import binascii
import json
import logging
import re
import time
from io import BytesIO
from typing import TYPE_CHECKING, Any

import google.generativeai as genai
from PIL import Image, UnidentifiedImageError

from fintrack.models.transaction import Category, ExtractionResult, TransactionType

if TYPE_CHECKING:
    from fintrack.core.config import Settings

logger = logging.getLogger(__name__)

DATA_URL_PATTERN = re.compile(
    r"^data:([a-zA-Z0-9]+/[a-zA-Z0-9.+-]+);base64,(.+)$", re.DOTALL
)
CODE_FENCE_PATTERN = re.compile(r"^```(?:json)?\s*|\s*```$")


class GeminiService:
    """Service for extracting transactions using Google Gemini AI."""

    def __init__(self, settings: Settings) -> None:
        """Initialize the Gemini service."""
        if not settings.gemini_api_key.strip():
            msg = "Gemini API key is not configured"
            raise ValueError(msg)

        self.settings = settings
        genai.configure(api_key=settings.gemini_api_key)  # type: ignore[attr-defined]

        self.model = genai.GenerativeModel(  # type: ignore[attr-defined]
            model_name=settings.gemini_model,
            generation_config={  # type: ignore[arg-type]
                "temperature": settings.gemini_temperature,
                "max_output_tokens": settings.gemini_max_output_tokens,
                "response_mime_type": "application/json",
            },
        )

    async def extract_transactions(
        self,
        ocr_text: str = "",
        image_base64: str | None = None,
    ) -> list[ExtractionResult]:
        """Extract one transaction per receipt found in the text and/or image.

        Args:
            ocr_text: OCR text recovered on the client, used as a hint
            image_base64: Base64 image, bare or as a ``data:`` URL

        Returns:
            list[ExtractionResult]: One entry per detected receipt

        Raises:
            ValueError: If the image cannot be decoded or the response is unusable
            TypeError: If the response has an unexpected shape
            ValidationError: If an item doesn't match the transaction schema
        """
        start_time = time.time()

        parts: list[Any] = [self._build_extraction_prompt()]
        if ocr_text.strip():
            parts.append(f"OCR text (reference):\n{ocr_text}")
        if image_base64:
            parts.append(self._decode_image(image_base64))

        response = self.model.generate_content(parts)

        if not response.text:
            msg = "No response from Gemini model"
            raise ValueError(msg)

        payload = CODE_FENCE_PATTERN.sub("", response.text.strip())
        try:
            extracted_data = json.loads(payload)
        except json.JSONDecodeError as e:
            msg = f"Failed to parse Gemini response as JSON: {response.text}"
            raise ValueError(msg) from e

        if isinstance(extracted_data, dict):
            extracted_data = [extracted_data]
        if not isinstance(extracted_data, list):
            msg = f"Gemini returned invalid data type: {type(extracted_data)}"
            raise TypeError(msg)

        transactions = []
        for item in extracted_data:
            if not isinstance(item, dict):
                msg = f"Gemini returned invalid list item: {item!r}"
                raise TypeError(msg)
            transactions.append(ExtractionResult(**item))

        logger.info(
            "Extracted %d transaction(s) with Gemini in %.2f seconds",
            len(transactions),
            time.time() - start_time,
        )
        return transactions

    def _decode_image(self, image_base64: str) -> Image.Image:
        """Decode a bare or ``data:`` URL base64 image."""
        match = DATA_URL_PATTERN.match(image_base64.strip())
        raw = match.group(2) if match else image_base64.strip()
        try:
            image = Image.open(BytesIO(base64.b64decode(raw, validate=False)))
            # open() is lazy; truncated data only fails on load
            image.load()
        except (binascii.Error, UnidentifiedImageError, OSError) as e:
            msg = f"Failed to decode image: {e}"
            raise ValueError(msg) from e
        return image

    def _build_extraction_prompt(self) -> str:
        """Build the prompt for multi-receipt transaction extraction."""
        categories = ", ".join(f'"{c.value}"' for c in Category)
        types = "|".join(t.value for t in TransactionType)
        return (
            "You are an expert at reading Vietnamese receipts and bank "
            "notifications.\n\n"
            "The image may contain two or more receipts side by side or "
            "stacked. Separate them by whitespace and alignment and return "
            "one object per receipt.\n\n"
            "For each receipt:\n"
            "1. description: store name plus the kind of purchase\n"
            '2. amount: the largest "Total"/"Tong cong"/"Thanh tien" value; '
            "if none is printed, add up the large price lines\n"
            "3. date: the date on the receipt, or today if none is visible\n\n"
            "Return a JSON array of objects matching this schema:\n"
            "[\n"
            "    {\n"
            '        "amount": "number in VND (required)",\n'
            f'        "type": "{types}",\n'
            f'        "category": "one of {categories}",\n'
            '        "description": "string (required)",\n'
            '        "date": "ISO 8601 date"\n'
            "    }\n"
            "]"
        )
