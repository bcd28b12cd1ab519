"""fintrack CLI interface."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

from pydantic import ValidationError

from fintrack import __version__
from fintrack.core.config import get_settings
from fintrack.core.logging_config import LoggingConfig, setup_logging
from fintrack.models import ParseRequest, ParseResponse
from fintrack.services.gemini import GeminiService
from fintrack.services.transaction_parser import (
    TransactionParseError,
    TransactionParser,
)

logger = logging.getLogger(__name__)

MAX_FILE_SIZE = 1024 * 1024  # 1MB of text is plenty for a receipt


class CLIError(Exception):
    """Base exception for CLI errors."""


class InputError(CLIError):
    """Input text could not be read."""


class FintrackCLI:
    """Main CLI application class."""

    def __init__(self) -> None:
        """Initialize the CLI application."""
        self.settings = get_settings()
        setup_logging(
            LoggingConfig(
                log_level=self.settings.log_level,
                log_format=self.settings.log_format,
            )
        )

    def create_parser_service(self, *, offline: bool) -> TransactionParser:
        """Build the transaction parser for this run."""
        gemini_service = None
        if not offline and self.settings.ai_enabled:
            gemini_service = GeminiService(self.settings)
        return TransactionParser(
            gemini_service,
            fallback_enabled=self.settings.offline_fallback_enabled,
        )

    def read_input(self, text: str | None, file_path: str | None) -> str:
        """Resolve input text from the argument, a file, or stdin."""
        if text is not None and file_path is not None:
            raise InputError("Pass either TEXT or --file, not both")

        if text is not None:
            return text

        if file_path is not None:
            path = Path(file_path)
            if not path.exists():
                raise InputError(f"File not found: {path}")
            if not path.is_file():
                raise InputError(f"Not a file: {path}")
            if path.stat().st_size > MAX_FILE_SIZE:
                raise InputError(f"File too large: {path}")
            try:
                return path.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as e:
                raise InputError(f"Cannot read file {path}: {e}") from e

        if sys.stdin.isatty():
            raise InputError("No input text. Pass TEXT, --file, or pipe via stdin")
        return sys.stdin.read()

    def format_output(self, response: ParseResponse, output_format: str) -> str:
        """Render a parse response as text or JSON."""
        if output_format == "json":
            return json.dumps(
                response.model_dump(mode="json"), indent=2, ensure_ascii=False
            )

        lines = [f"Source: {response.source}"]
        for idx, transaction in enumerate(response.transactions, 1):
            lines.extend(
                [
                    "",
                    f"Transaction {idx}:",
                    f"  Amount: {transaction.amount:,} VND",
                    f"  Type: {transaction.type.value}",
                    f"  Category: {transaction.category.value}",
                    f"  Description: {transaction.description}",
                    f"  Date: {transaction.date.isoformat()}",
                ]
            )
        if not response.transactions:
            lines.append("No transactions found")
        return "\n".join(lines)

    async def parse_command(self, args: argparse.Namespace) -> None:
        """Handle the parse command."""
        text = self.read_input(args.text, args.file)
        parser = self.create_parser_service(offline=args.offline)

        if args.offline:
            response = parser.parse_offline_text(text)
        else:
            try:
                request = ParseRequest(ocr_text=text)
            except ValidationError as e:
                raise InputError("Input text is empty") from e
            response = await parser.parse(request)

        print(self.format_output(response, args.output))  # noqa: T201

    async def status_command(self, args: argparse.Namespace) -> None:  # noqa: ARG002
        """Handle the status command."""
        print(f"fintrack {__version__}")  # noqa: T201
        if self.settings.ai_enabled:
            ai_status = f"enabled ({self.settings.gemini_model})"
        else:
            ai_status = "disabled (set GEMINI_API_KEY)"
        print(f"  AI extraction: {ai_status}")  # noqa: T201
        fallback = "on" if self.settings.offline_fallback_enabled else "off"
        print(f"  Offline fallback: {fallback}")  # noqa: T201


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        description="fintrack CLI - Extract transactions from receipts and bank SMS",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  fintrack parse "Grab thanh toan 45.000d ngay 02/01/2024"
  fintrack parse --file notification.txt --offline
  cat ocr.txt | fintrack parse --output json
        """,
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"fintrack {__version__}",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")
    subparsers.required = True

    parse_parser = subparsers.add_parser(
        "parse",
        help="Extract a transaction from text",
        description="Extract transactions from OCR or notification text",
    )
    parse_parser.add_argument(
        "text",
        nargs="?",
        default=None,
        help="Text to parse (reads stdin when omitted)",
    )
    parse_parser.add_argument(
        "--file",
        type=str,
        default=None,
        help="Read text from a UTF-8 file",
    )
    parse_parser.add_argument(
        "--offline",
        action="store_true",
        help="Use only the offline heuristic (no network)",
    )
    parse_parser.add_argument(
        "--output",
        choices=["text", "json"],
        default="text",
        help="Output format (default: text)",
    )

    subparsers.add_parser(
        "status",
        help="Check configuration",
        description="Show whether AI extraction is configured",
    )

    return parser


async def async_main(argv: list[str] | None = None) -> None:
    """Async main entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    cli = FintrackCLI()

    if args.command == "parse":
        await cli.parse_command(args)
    elif args.command == "status":
        await cli.status_command(args)
    else:
        parser.error(f"Unknown command: {args.command}")


def main() -> None:
    """Main entry point for the CLI."""
    try:
        asyncio.run(async_main())
    except KeyboardInterrupt:
        print("\n\nOperation cancelled by user", file=sys.stderr)  # noqa: T201
        sys.exit(130)
    except (CLIError, TransactionParseError) as e:
        print(f"Error: {e}", file=sys.stderr)  # noqa: T201
        sys.exit(1)
    except Exception as e:
        logger.exception("Fatal error in main")
        print(f"\nFatal error: {e}", file=sys.stderr)  # noqa: T201
        sys.exit(1)


if __name__ == "__main__":
    main()
