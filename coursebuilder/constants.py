"""Configuration constants, paths, and logging setup."""

import os
import pathlib
import logging

from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# ── Mesh synthesis constants ────────────────────────────────────────────
# Raw elevation values are multiplied by this before becoming world Y.
ELEVATION_SCALE = 0.1

# Terrain UVs repeat the ground texture this many times across the grid.
TEXTURE_TILING = 10.0

# Ribbons float this far above the sampled ground to avoid z-fighting.
RIBBON_LIFT = 0.1

# Inside-out sky sphere enclosing the whole course.
SKY_RADIUS = 500.0

UP_VECTOR = (0.0, 1.0, 0.0)

# ── Resources ───────────────────────────────────────────────────────────
ELEVATION_FILENAME = os.environ.get("COURSEBUILDER_ELEVATION_FILE", "Elevation.json")
VECTOR_FILENAME = os.environ.get("COURSEBUILDER_VECTOR_FILE", "vector.json")

# Configure base paths
BASE_DIR = pathlib.Path(__file__).parent.parent.absolute()
DATA_DIR = pathlib.Path(os.environ.get("COURSEBUILDER_DATA_DIR", BASE_DIR / "data"))
OUTPUT_DIR = pathlib.Path(os.environ.get("COURSEBUILDER_OUTPUT_DIR", BASE_DIR / "output"))

# Configure logging
logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)
