"""Tests for logging configuration."""

import logging
import os
import unittest
from unittest.mock import patch

from src.utils.logging import PhoneNumberRedactor, configure_logging


def _record(msg: str, *args: object) -> logging.LogRecord:
    return logging.LogRecord("test", logging.INFO, __file__, 1, msg, args, None)


class TestPhoneNumberRedactor(unittest.TestCase):
    """Tests for PhoneNumberRedactor."""

    def setUp(self) -> None:
        """Set up the filter."""
        self.redactor = PhoneNumberRedactor()

    def test_masks_phone_numbers(self) -> None:
        """Test all but the last four digits are hidden."""
        record = _record("Processing message from Alice (15551234567)")

        self.assertTrue(self.redactor.filter(record))
        self.assertEqual(record.getMessage(), "Processing message from Alice (*******4567)")

    def test_keeps_plus_prefix(self) -> None:
        """Test international prefixes are kept."""
        record = _record("recipient=%s", "+447700900123")

        self.redactor.filter(record)

        self.assertEqual(record.getMessage(), "recipient=+********0123")

    def test_leaves_other_numbers_alone(self) -> None:
        """Test short numbers, dates, ids and durations are untouched."""
        message = (
            "Created reminder: id=12345678-1234-4234-8234-123456789012, "
            "due_at=2030-01-01T09:00:00+00:00, elapsed=1234ms, count=42"
        )
        record = _record(message)

        self.redactor.filter(record)

        self.assertEqual(record.getMessage(), message)


class TestConfigureLogging(unittest.TestCase):
    """Tests for configure_logging."""

    def tearDown(self) -> None:
        """Remove the handler installed by the test."""
        logging.getLogger().handlers.clear()

    @patch.dict(os.environ, {"LOG_LEVEL": "debug"}, clear=True)
    def test_single_redacting_handler(self) -> None:
        """Test one stdout handler is installed with the redaction filter."""
        configure_logging()

        root_logger = logging.getLogger()
        self.assertEqual(root_logger.level, logging.DEBUG)
        self.assertEqual(len(root_logger.handlers), 1)
        filters = root_logger.handlers[0].filters
        self.assertTrue(any(isinstance(f, PhoneNumberRedactor) for f in filters))

    @patch.dict(os.environ, {"LOG_REDACT_PHONE_NUMBERS": "false"}, clear=True)
    def test_redaction_can_be_disabled(self) -> None:
        """Test the filter is skipped when redaction is off."""
        configure_logging()

        self.assertEqual(logging.getLogger().handlers[0].filters, [])

    @patch.dict(os.environ, {"LOG_LEVEL": "LOUD"}, clear=True)
    def test_invalid_level(self) -> None:
        """Test an unknown level is rejected."""
        with self.assertRaises(ValueError):
            configure_logging()


if __name__ == "__main__":
    unittest.main()
