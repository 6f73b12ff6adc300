"""
Structured Logging Configuration

One line per event, tagged with the engine and action it concerns so a
bedside session can be reconstructed from the log alone:

    [2024-03-01T14:31:02+00:00] INFO     [paeds_engines.core.engines.sequencing] Action completed engine=septic-shock action=sepsis-1-recognize
"""
import logging
import sys
from pathlib import Path
from typing import Optional, Tuple
from datetime import datetime, timezone

# Context attributes picked up from `extra=` and appended as key=value
CONTEXT_FIELDS: Tuple[Tuple[str, str], ...] = (
    ("engine_id", "engine"),
    ("action_id", "action"),
)

# Third-party loggers kept at WARNING unless the app itself runs at DEBUG
NOISY_LOGGERS = ("uvicorn.access", "httpx", "httpcore")


class StructuredFormatter(logging.Formatter):
    """Timestamped, level-coloured lines with engine/action context."""

    COLORS = {
        'DEBUG': '\033[36m',     # Cyan
        'INFO': '\033[32m',      # Green
        'WARNING': '\033[33m',   # Yellow
        'ERROR': '\033[31m',     # Red
        'CRITICAL': '\033[35m',  # Magenta
    }
    RESET = '\033[0m'

    def __init__(self, use_color: bool = True):
        super().__init__()
        self.use_color = use_color

    def _context(self, record: logging.LogRecord) -> str:
        parts = [
            f"{label}={getattr(record, attr)}"
            for attr, label in CONTEXT_FIELDS
            if getattr(record, attr, None) is not None
        ]
        return (" " + " ".join(parts)) if parts else ""

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.fromtimestamp(record.created, timezone.utc).isoformat(timespec="seconds")
        line = (
            f"[{timestamp}] {record.levelname:8} [{record.name}] "
            f"{record.getMessage()}{self._context(record)}"
        )
        if self.use_color and record.levelname in self.COLORS:
            line = f"{self.COLORS[record.levelname]}{line}{self.RESET}"

        if record.exc_info:
            line += f"\n{self.formatException(record.exc_info)}"
        return line


def setup_logging(level: str = "INFO", log_file: Optional[str] = None) -> None:
    """
    Configure application-wide logging.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional file path; parent directories are created
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)
    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)
    root_logger.handlers.clear()

    console = logging.StreamHandler(sys.stdout)
    console.setFormatter(StructuredFormatter(use_color=sys.stdout.isatty()))
    root_logger.addHandler(console)

    if log_file:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(path)
        file_handler.setFormatter(StructuredFormatter(use_color=False))
        root_logger.addHandler(file_handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.DEBUG if numeric_level <= logging.DEBUG else logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Logger for a module (pass __name__)."""
    return logging.getLogger(name)
