"""Tests for CLI support utilities."""
import io

import pytest
import typer
from rich.console import Console

from tgscaffold.cli_support import (
    handle_cli_error,
    print_error,
    print_info,
    print_success,
    print_warning,
)
from tgscaffold.core.errors import FetchError


@pytest.fixture
def console():
    return Console(file=io.StringIO(), width=200)


class TestHandleCliError:
    """Test error reporting and exit codes."""

    def test_prints_error_and_exits(self, console):
        with pytest.raises(typer.Exit) as exc_info:
            handle_cli_error(FetchError("Failed to fetch ./mod"), console)

        assert exc_info.value.exit_code == 1
        assert "Error: [fetch] Failed to fetch ./mod" in console.file.getvalue()

    def test_custom_exit_code(self, console):
        with pytest.raises(typer.Exit) as exc_info:
            handle_cli_error(ValueError("bad"), console, exit_code=2)

        assert exc_info.value.exit_code == 2


class TestPrintHelpers:
    """Test message helpers."""

    @pytest.mark.parametrize("helper, prefix", [
        (print_success, "✓"),
        (print_error, "✗"),
        (print_warning, "⚠"),
        (print_info, "ℹ"),
    ])
    def test_prefixes(self, console, helper, prefix):
        helper(console, "message")

        assert console.file.getvalue().strip() == f"{prefix} message"
