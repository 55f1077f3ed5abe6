"""
Settings for the allocation engine.

Values are read from the environment (optionally via a ``.env`` file) once at
import time. Library code never reads these module globals directly; they seed
the explicit settings objects in ``allocation_engine.settings``.
"""

import logging.config
import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

BASE_DIR = Path(__file__).resolve().parent.parent

DEBUG = os.getenv("DEBUG", "False") == "True"

# Configure logging early (before anything logs)
from config.logging import configure_structlog, get_logging_config  # noqa: E402

configure_structlog(debug=DEBUG)

# ============================================================================
# ALLOCATION ENGINE
# ============================================================================

# Display currency used when nothing else is configured
DEFAULT_CURRENCY = os.getenv("ALLOCATION_DEFAULT_CURRENCY", "EUR")

# Deltas within this many currency units are reported as HOLD, and
# percentage groups within this many points of 100 are considered valid
TOLERANCE = os.getenv("ALLOCATION_TOLERANCE", "0.01")

LOG_LEVEL = os.getenv("ALLOCATION_LOG_LEVEL", "DEBUG" if DEBUG else "INFO")

LOGGING = get_logging_config(debug=DEBUG, level=LOG_LEVEL)

logging.config.dictConfig(LOGGING)
