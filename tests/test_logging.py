"""Tests for structured JSON logging."""

import io
import json
import logging

import pytest

from yieldvault.engine.fixed_point import SCALE
from yieldvault.exceptions import DustAmountError, NoSharesError
from yieldvault.logging_config import configure_logging, get_logger


@pytest.fixture
def log_stream():
    stream = io.StringIO()
    configure_logging(level=logging.INFO, stream=stream)
    return stream


def records(stream):
    return [json.loads(line) for line in stream.getvalue().splitlines()]


class TestStructuredLogging:
    """JSON lines with structured extras."""

    def test_get_logger_namespace(self):
        """Loggers live under the yieldvault namespace."""
        assert get_logger("vault").name == "yieldvault.vault"
        assert get_logger("yieldvault.vault").name == "yieldvault.vault"

    def test_deposit_logged(self, vault, fund, log_stream):
        """Deposit emits a JSON line with structured fields."""
        fund("alice", SCALE)
        vault.deposit("alice", SCALE)

        entry = next(r for r in records(log_stream) if r.get("event") == "vault.deposit")
        assert entry["level"] == "INFO"
        assert entry["logger"] == "yieldvault.vault"
        assert entry["holder"] == "alice"
        assert entry["shares"] == SCALE

    def test_rejection_logged_with_code(self, vault, log_stream):
        """Rejected calls log a warning carrying the error code."""
        with pytest.raises(NoSharesError):
            vault.withdraw_all("alice")

        entry = next(r for r in records(log_stream) if r.get("event") == "vault.rejected")
        assert entry["level"] == "WARNING"
        assert entry["code"] == "NO_SHARES"
        assert entry["operation"] == "withdraw_all"

    def test_exception_fields(self, log_stream):
        """Logged exceptions include type, code and traceback."""
        logger = get_logger("test")
        try:
            raise DustAmountError(1, 2 * SCALE)
        except DustAmountError:
            logger.exception("dust")

        entry = records(log_stream)[-1]
        assert entry["exc_type"] == "DustAmountError"
        assert entry["exc_code"] == "DUST_AMOUNT"
        assert "traceback" in entry

    def test_configure_is_idempotent(self, log_stream):
        """Configuring twice keeps a single handler."""
        configure_logging(stream=io.StringIO())
        assert len(logging.getLogger("yieldvault").handlers) == 1
