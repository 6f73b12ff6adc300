"""
Paediatric Emergency Engines - Configuration
============================================
Centralised settings for logging, trigger behaviour and the API server.
Loads overrides from the project-level .env file.
"""

import os
from pathlib import Path
from typing import Optional
from dotenv import load_dotenv

# ── Paths ───────────────────────────────────────────────────────────────
PROJECT_ROOT = Path(__file__).resolve().parent.parent          # repo root
PACKAGE_DIR = Path(__file__).resolve().parent                  # paeds_engines/

# ── Load .env ───────────────────────────────────────────────────────────
load_dotenv(PROJECT_ROOT / ".env")


def _env_bool(name: str, default: bool) -> bool:
    return os.getenv(name, str(default)).strip().lower() in ("1", "true", "yes", "on")


# ── Logging ─────────────────────────────────────────────────────────────
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
LOG_FILE: Optional[str] = os.getenv("LOG_FILE") or None

# ── Trigger behaviour ───────────────────────────────────────────────────
# A protocol the clinician dismissed stays dismissed until reactivated
# explicitly, unless this is switched on.
RETRIGGER_DISMISSED_ENGINES: bool = _env_bool("RETRIGGER_DISMISSED_ENGINES", False)

# Hours-tier conditions fire once this many key indicators are present
TIER2_MIN_INDICATORS: int = int(os.getenv("TIER2_MIN_INDICATORS", "2"))

# ── API server ──────────────────────────────────────────────────────────
API_HOST: str = os.getenv("API_HOST", "0.0.0.0")
API_PORT: int = int(os.getenv("API_PORT", "8000"))
