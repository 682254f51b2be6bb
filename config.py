"""Central configuration for the EPG SKU allocator.

Values are read from the environment (optionally via a ``.env`` file in the
project root) once at import time, except for the auto-generation kill
switch which is consulted on every call.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from dotenv import load_dotenv

BASE_DIR = Path(__file__).resolve().parent
load_dotenv(dotenv_path=BASE_DIR / ".env", override=False)

# ==========================================================================
# 1. Storage
# ==========================================================================
DATA_DIR = Path(os.getenv("SKU_DATA_DIR", BASE_DIR / "data"))
DB_PATH = DATA_DIR / "sku.sqlite3"
DATABASE_URL = os.getenv("SKU_DATABASE_URL", f"sqlite:///{DB_PATH}")

# ==========================================================================
# 2. SKU format
# ==========================================================================
SKU_PREFIX = "EPG"
SKU_DIGITS = 5
SKU_MAX_SEQUENCE = 10**SKU_DIGITS - 1

CATEGORY_PREFIX_MIN = 2
CATEGORY_PREFIX_MAX = 3
BRAND_PREFIX_LENGTH = 3
DEFAULT_BRAND_PREFIX = os.getenv("SKU_DEFAULT_BRAND_PREFIX", "GEN")

# Collision retries beyond the first attempt.
MAX_SKU_RETRIES = 5

MANUAL_SKU_MIN_LENGTH = 3

# ==========================================================================
# 3. Auto-generation toggle
# ==========================================================================
AUTO_SKU_SETTING_KEY = "disable_auto_sku_generation"
DISABLE_AUTO_SKU_ENV = "DISABLE_AUTO_SKU_GENERATION"


def auto_generation_disabled_by_env() -> bool:
    """Return True when the environment kill switch is set."""
    return os.getenv(DISABLE_AUTO_SKU_ENV, "").strip().lower() in {"true", "1"}


# ==========================================================================
# 4. Flask & logging
# ==========================================================================
SECRET_KEY = os.getenv("SECRET_KEY", "dev")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")


def configure_logging(level: str | None = None) -> None:
    """Configure root logging once for the application."""
    logging.basicConfig(
        level=(level or LOG_LEVEL).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
