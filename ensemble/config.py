"""Runtime configuration read from environment variables (and a local .env)."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

load_dotenv()


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name, "")
    try:
        return float(raw) if raw.strip() else default
    except ValueError:
        return default


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name, "")
    try:
        return int(raw) if raw.strip() else default
    except ValueError:
        return default


# Room detector
DETECTOR_TIMEOUT_S = _env_float("ENSEMBLE_DETECTOR_TIMEOUT_S", 60.0)

# Demo analysis canvas
DEMO_IMAGE_WIDTH = _env_int("ENSEMBLE_DEMO_IMAGE_WIDTH", 1600)
DEMO_IMAGE_HEIGHT = _env_int("ENSEMBLE_DEMO_IMAGE_HEIGHT", 1200)

# Fixture catalog override (JSON file); unset means the built-in table
_catalog_path = os.getenv("ENSEMBLE_CATALOG_PATH", "").strip()
CATALOG_PATH: Optional[Path] = Path(_catalog_path).expanduser() if _catalog_path else None

# CLI outputs
OUTPUT_DIR = Path(os.getenv("ENSEMBLE_OUTPUT_DIR", "out")).expanduser()

LOG_LEVEL = os.getenv("ENSEMBLE_LOG_LEVEL", "WARNING").upper()
