"""Configuration constants, paths, and logging setup."""

import os
import pathlib
import logging

from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# Configure base paths
BASE_DIR = pathlib.Path(__file__).parent.parent.absolute()
OUTPUT_DIR = BASE_DIR / "output"

# ── Raster defaults ─────────────────────────────────────────────────────
DEFAULT_WIDTH = 360
DEFAULT_HEIGHT = 180
DEFAULT_OUTPUT = "boundaries.ser"

# Coordinates are persisted as integers at 1e-7 degree resolution
FIXED_POINT_SCALE = 10_000_000
MAX_LONGITUDE = 180.0
MAX_LATITUDE = 90.0

# ── Region filtering ────────────────────────────────────────────────────
# Region ids dropped by the loader unless overridden. FX (metropolitan
# France) and EU duplicate areas already covered by other regions.
# Set BOUNDARYRASTER_EXCLUDE=FX,EU,... to change the list.
_exclude_env = os.environ.get("BOUNDARYRASTER_EXCLUDE")
if _exclude_env is None:
    EXCLUDED_REGION_IDS = frozenset({"FX", "EU"})
else:
    EXCLUDED_REGION_IDS = frozenset(
        code.strip() for code in _exclude_env.split(",") if code.strip())

# ── Scheduling ──────────────────────────────────────────────────────────
# 0 or 1 = sequential; anything larger = thread pool of that size
DEFAULT_WORKERS = int(os.environ.get("BOUNDARYRASTER_WORKERS", "0") or 0)

# Configure logging
LOG_LEVEL = os.environ.get("BOUNDARYRASTER_LOG_LEVEL", "INFO").upper()
logging.basicConfig(level=LOG_LEVEL, format='%(asctime)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)
