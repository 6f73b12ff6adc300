"""
Unit Tests for Logging and the Exception Hierarchy
"""
import logging

import pytest

from paeds_engines.utils import (
    CatalogIntegrityError,
    EngineCoreError,
    EngineNotFoundError,
    StateSerializationError,
)
from paeds_engines.utils.logging import StructuredFormatter


def _record(msg: str, **extra) -> logging.LogRecord:
    record = logging.LogRecord("paeds_engines.test", logging.INFO, __file__, 1, msg, None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestStructuredFormatter:
    """Line layout and engine context."""

    def test_engine_context_appended(self):
        """engine= and action= are appended from extra."""
        line = StructuredFormatter(use_color=False).format(
            _record("Action completed", engine_id="septic-shock", action_id="sepsis-1-recognize")
        )
        assert line.endswith("Action completed engine=septic-shock action=sepsis-1-recognize")
        assert "INFO" in line
        assert "[paeds_engines.test]" in line

    def test_no_context(self):
        """Plain messages get no suffix and no colour."""
        line = StructuredFormatter(use_color=False).format(_record("Catalog loaded"))
        assert line.endswith("Catalog loaded")
        assert "\033[" not in line

    def test_colour(self):
        """Colour codes wrap the line when enabled."""
        line = StructuredFormatter(use_color=True).format(_record("hello"))
        assert line.startswith("\033[32m")


class TestExceptions:
    """Error codes, bodies and HTTP statuses."""

    def test_not_found_to_dict(self):
        """The error body carries code, message and engine id."""
        err = EngineNotFoundError("x-engine")
        assert err.to_dict() == {
            "error": "ENGINE_NOT_FOUND",
            "message": "Unknown engine: x-engine",
            "details": {"engine_id": "x-engine"},
        }

    def test_serialization_error_defaults(self):
        """Details default to an empty dict."""
        err = StateSerializationError("bad payload")
        assert err.code == "STATE_SERIALIZATION_ERROR"
        assert err.details == {}
        assert str(err) == "bad payload"

    @pytest.mark.parametrize("error,status", [
        (EngineCoreError("generic"), 400),
        (EngineNotFoundError("x-engine"), 404),
        (StateSerializationError("bad payload"), 422),
        (CatalogIntegrityError("broken", engine_id="dup"), 500),
    ])
    def test_http_status(self, error, status):
        """Each error class carries the status the API answers with."""
        assert error.http_status == status

    def test_base_error_body(self):
        """The base error falls back to UNKNOWN_ERROR."""
        assert EngineCoreError("boom").to_dict() == {
            "error": "UNKNOWN_ERROR",
            "message": "boom",
            "details": {},
        }
