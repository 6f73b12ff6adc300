"""
Custom Exception Hierarchy

The state transitions in the engine core never raise: stale or duplicate
UI events are no-ops.  These exceptions belong to the edges of the core:
catalog construction, strict lookups, and state (de)serialisation.
"""
from typing import Optional, Dict, Any


class EngineCoreError(Exception):
    """
    Base for errors raised at the edges of the engine core.

    `code` is a stable machine-readable tag for the bedside client and
    `http_status` is the status the API answers with.
    """

    http_status = 400

    def __init__(
        self,
        message: str,
        code: str = "UNKNOWN_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """JSON error body: {"error": code, "message": ..., "details": {...}}."""
        return {"error": self.code, "message": self.message, "details": self.details}


class EngineNotFoundError(EngineCoreError):
    """An engine id is not present in the catalog."""

    http_status = 404

    def __init__(
        self,
        engine_id: str,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=f"Unknown engine: {engine_id}",
            code="ENGINE_NOT_FOUND",
            details={"engine_id": engine_id, **(details or {})}
        )
        self.engine_id = engine_id


class CatalogIntegrityError(EngineCoreError):
    """The engine catalog violates one of its build-time invariants."""

    http_status = 500

    def __init__(
        self,
        message: str,
        engine_id: str = "unknown",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            code="CATALOG_INTEGRITY_ERROR",
            details={"engine_id": engine_id, **(details or {})}
        )
        self.engine_id = engine_id


class StateSerializationError(EngineCoreError):
    """A serialised manager state could not be restored."""

    http_status = 422

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            code="STATE_SERIALIZATION_ERROR",
            details=details
        )
