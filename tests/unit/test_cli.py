"""Unit tests for the CLI module."""

from __future__ import annotations

import argparse
import io
import json
from datetime import UTC, datetime
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from fintrack.cli import FintrackCLI, InputError, create_parser
from fintrack.models import Category, ExtractionResult, ParseResponse


@pytest.fixture
def cli() -> FintrackCLI:
    """Create a CLI instance."""
    return FintrackCLI()


@pytest.fixture
def sample_response() -> ParseResponse:
    """A parse response with one transaction."""
    return ParseResponse(
        transactions=[
            ExtractionResult(
                amount=1200000,
                category=Category.SHOPPING,
                description="Shopping (Automatic)",
                date=datetime(2024, 3, 15, tzinfo=UTC),
            )
        ],
        source="offline",
        processing_time=0.01,
    )


class TestCLIArgumentParsing:
    """Test CLI argument parsing."""

    def test_create_parser(self) -> None:
        """Test parser creation."""
        assert isinstance(create_parser(), argparse.ArgumentParser)

    def test_parse_command_defaults(self) -> None:
        """Test basic parse command parsing."""
        args = create_parser().parse_args(["parse", "Grab 45.000d"])
        assert args.command == "parse"
        assert args.text == "Grab 45.000d"
        assert args.file is None
        assert args.offline is False
        assert args.output == "text"

    def test_parse_command_all_options(self) -> None:
        """Test parse command with all options."""
        args = create_parser().parse_args(
            ["parse", "--file", "sms.txt", "--offline", "--output", "json"]
        )
        assert args.text is None
        assert args.file == "sms.txt"
        assert args.offline is True
        assert args.output == "json"

    def test_missing_command(self) -> None:
        """Test parser with missing command."""
        with pytest.raises(SystemExit):
            create_parser().parse_args([])

    def test_invalid_output_format(self) -> None:
        """Test parser with invalid output format."""
        with pytest.raises(SystemExit):
            create_parser().parse_args(["parse", "x", "--output", "xml"])


class TestReadInput:
    """Test input resolution."""

    def test_text_argument(self, cli: FintrackCLI) -> None:
        """Test the positional text is used as-is."""
        assert cli.read_input("Grab 45.000d", None) == "Grab 45.000d"

    def test_file(self, cli: FintrackCLI, tmp_path: Path) -> None:
        """Test reading a UTF-8 file."""
        sms = tmp_path / "sms.txt"
        sms.write_text("Lương tháng 3: 15.000.000đ", encoding="utf-8")
        assert cli.read_input(None, str(sms)) == "Lương tháng 3: 15.000.000đ"

    def test_file_not_found(self, cli: FintrackCLI) -> None:
        """Test a missing file."""
        with pytest.raises(InputError, match="File not found"):
            cli.read_input(None, "/nonexistent/sms.txt")

    def test_directory(self, cli: FintrackCLI, tmp_path: Path) -> None:
        """Test a directory instead of a file."""
        with pytest.raises(InputError, match="Not a file"):
            cli.read_input(None, str(tmp_path))

    def test_text_and_file(self, cli: FintrackCLI) -> None:
        """Test both sources at once are rejected."""
        with pytest.raises(InputError, match="not both"):
            cli.read_input("x", "sms.txt")

    def test_stdin(self, cli: FintrackCLI) -> None:
        """Test piped stdin."""
        with patch("fintrack.cli.sys.stdin", io.StringIO("so du 1.000.000")):
            assert cli.read_input(None, None) == "so du 1.000.000"


class TestFormatOutput:
    """Test output rendering."""

    def test_text(self, cli: FintrackCLI, sample_response: ParseResponse) -> None:
        """Test human-readable output."""
        output = cli.format_output(sample_response, "text")
        assert "Source: offline" in output
        assert "Amount: 1,200,000 VND" in output
        assert "Category: Shopping" in output
        assert "Date: 2024-03-15T00:00:00+00:00" in output

    def test_json(self, cli: FintrackCLI, sample_response: ParseResponse) -> None:
        """Test JSON output."""
        data = json.loads(cli.format_output(sample_response, "json"))
        assert data["source"] == "offline"
        assert data["transactions"][0]["category"] == "Shopping"

    def test_empty(self, cli: FintrackCLI) -> None:
        """Test output when the AI found nothing."""
        response = ParseResponse(transactions=[], source="ai", processing_time=0.5)
        assert "No transactions found" in cli.format_output(response, "text")


class TestCommands:
    """Test command handlers."""

    @pytest.mark.asyncio
    async def test_parse_offline(
        self, cli: FintrackCLI, capsys: pytest.CaptureFixture[str]
    ) -> None:
        """Test the offline parse command end to end."""
        args = create_parser().parse_args(
            ["parse", "Highlands Coffee 59.000d", "--offline", "--output", "json"]
        )

        await cli.parse_command(args)

        data = json.loads(capsys.readouterr().out)
        assert data["source"] == "offline"
        assert data["transactions"][0]["category"] == "Food & Dining"

    @pytest.mark.asyncio
    async def test_parse_uses_ai_when_configured(
        self, cli: FintrackCLI, capsys: pytest.CaptureFixture[str]
    ) -> None:
        """Test the online path goes through the transaction parser."""
        parser_service = MagicMock()
        parser_service.parse = AsyncMock(
            return_value=ParseResponse(
                transactions=[ExtractionResult(amount=5000)],
                source="ai",
                processing_time=0.2,
            )
        )
        args = create_parser().parse_args(["parse", "some text"])

        with patch.object(cli, "create_parser_service", return_value=parser_service):
            await cli.parse_command(args)

        assert "Source: ai" in capsys.readouterr().out
        request = parser_service.parse.await_args.args[0]
        assert request.ocr_text == "some text"

    @pytest.mark.asyncio
    async def test_parse_empty_text(self, cli: FintrackCLI) -> None:
        """Test the online path rejects blank input."""
        args = create_parser().parse_args(["parse", "   "])

        with pytest.raises(InputError, match="empty"):
            await cli.parse_command(args)

    @pytest.mark.asyncio
    async def test_status(
        self, cli: FintrackCLI, capsys: pytest.CaptureFixture[str]
    ) -> None:
        """Test the status command prints the configuration."""
        args = create_parser().parse_args(["status"])

        await cli.status_command(args)

        output = capsys.readouterr().out
        assert "AI extraction:" in output
        assert "Offline fallback:" in output
