"""
Utilities Package - Logging and Exception Handling
"""
from .logging import get_logger, setup_logging
from .exceptions import (
    EngineCoreError,
    EngineNotFoundError,
    CatalogIntegrityError,
    StateSerializationError,
)

__all__ = [
    "get_logger",
    "setup_logging",
    "EngineCoreError",
    "EngineNotFoundError",
    "CatalogIntegrityError",
    "StateSerializationError",
]
