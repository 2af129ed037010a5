"""Tests for app.core.logging_config."""

import logging
import unittest

from app.core.logging_config import LOG_DATEFMT, utc_formatter


class TestUtcFormatter(unittest.TestCase):
    """Timestamps carry a Z suffix, so they must be rendered in UTC."""

    def _record(self, created: float) -> logging.LogRecord:
        record = logging.LogRecord("bastion", logging.INFO, __file__, 1, "hello", None, None)
        record.created = created
        return record

    def test_epoch_renders_as_utc(self) -> None:
        formatter = utc_formatter()
        self.assertEqual(formatter.formatTime(self._record(0.0), LOG_DATEFMT), "1970-01-01T00:00:00Z")

    def test_formatted_line_uses_utc_timestamp(self) -> None:
        line = utc_formatter().format(self._record(86400.0))
        self.assertTrue(line.startswith("1970-01-02T00:00:00Z INFO bastion hello"))
