"""Tests for logging configuration."""
import logging

import pytest
from rich.logging import RichHandler

from tgscaffold.core.logger import PACKAGE_LOGGER, configure_logging, get_logger


@pytest.fixture(autouse=True)
def reset_logging():
    yield
    configure_logging()


class TestLogging:
    """Test the package logger setup."""

    def test_single_console_handler_on_package_logger(self):
        get_logger("tgscaffold.scaffold.core")
        get_logger("tgscaffold.services.fetcher")

        package = logging.getLogger(PACKAGE_LOGGER)
        assert sum(isinstance(h, RichHandler) for h in package.handlers) == 1
        assert logging.getLogger("tgscaffold.scaffold.core").handlers == []

    def test_verbose_applies_to_module_loggers(self):
        logger = get_logger("tgscaffold.scaffold.scanner")

        configure_logging(verbose=True)
        assert logger.getEffectiveLevel() == logging.DEBUG

        configure_logging(verbose=False)
        assert logger.getEffectiveLevel() == logging.INFO

    def test_log_file_receives_records(self, tmp_path):
        log_file = tmp_path / "logs" / "run.log"

        configure_logging(log_file=log_file)
        get_logger("tgscaffold.test").info("scaffolding started")

        content = log_file.read_text()
        assert "tgscaffold.test | INFO | scaffolding started" in content

    def test_reconfiguring_replaces_file_handler(self, tmp_path):
        configure_logging(log_file=tmp_path / "first.log")
        configure_logging(log_file=tmp_path / "second.log")
        get_logger("tgscaffold.test").info("only in second")

        package = logging.getLogger(PACKAGE_LOGGER)
        assert sum(isinstance(h, logging.FileHandler) for h in package.handlers) == 1
        assert "only in second" not in (tmp_path / "first.log").read_text()
        assert "only in second" in (tmp_path / "second.log").read_text()
