"""Pytest configuration and fixtures for coursebuilder tests."""
import json
import sys
from pathlib import Path

# Add project root to Python path for imports
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

import pytest
import numpy as np

from coursebuilder.loader import parse_vector_overlay
from coursebuilder.models import ElevationGrid


@pytest.fixture
def make_grid():
    """Factory for small synthetic grids.

    Defaults: 4 rows x 5 columns, step 0.5, north-west corner at
    (lon 20, lat 10), height of cell (r, c) = r * 10 + c.
    """
    def _make(lat_points=4, lon_points=5, step=0.5, max_latitude=10.0,
              min_longitude=20.0, heights=None):
        if heights is None:
            heights = [[r * 10.0 + c for c in range(lon_points)]
                       for r in range(lat_points)]
        return ElevationGrid(max_latitude=max_latitude,
                             min_longitude=min_longitude, step=step,
                             lat_points=lat_points, lon_points=lon_points,
                             heights=heights)
    return _make


@pytest.fixture
def grid(make_grid):
    return make_grid()


@pytest.fixture
def elevation_data():
    """Elevation resource matching the default ``grid`` fixture."""
    return {
        "maxLatitude": 10.0,
        "longPoints": 5,
        "step": 0.5,
        "elevationArray": [[r * 10.0 + c for c in range(5)] for r in range(4)],
        "stepLongitudeMeters": 42.0,
        "stepLatitudeMeters": 55.5,
        "latPoints": 4,
        "minLongitude": 20.0,
    }


def _category(*points, attributes=None):
    shapes = []
    for p in points:
        shape = {"Points": p}
        if attributes is not None:
            shape["Attributes"] = attributes
        shapes.append(shape)
    return {"Shapes": {"Shape": shapes}, "ShapeCount": len(shapes)}


@pytest.fixture
def vector_data():
    """Overlay with one shape per kind; the Path lies outside the grid."""
    return {
        "Background": _category("20.25 9.75,21.25 9.75,20.25 9.25",
                                attributes={"Description": 1}),
        "Water": _category("21.25 9.25,22.25 9.25,21.25 8.25"),
        "Tree": _category("20.75 8.75", attributes={"Type": 1, "Size": 2}),
        "Path": _category("30.0 30.0,31.0 31.0"),
        "HoleCount": 1,
        "Holes": {"Hole": [{
            "HoleNumber": 1,
            "Fairway": _category("20.25 9.25,21.25 9.25,20.75 8.75"),
            "Greencenter": _category("21.75 8.75"),
        }]},
    }


@pytest.fixture
def overlay(vector_data):
    return parse_vector_overlay(json.dumps(vector_data))


@pytest.fixture
def resource_files(tmp_path, elevation_data, vector_data):
    """(elevation_path, vector_path) written to a temporary directory."""
    elevation_path = tmp_path / "Elevation.json"
    vector_path = tmp_path / "vector.json"
    elevation_path.write_text(json.dumps(elevation_data))
    vector_path.write_text(json.dumps(vector_data))
    return elevation_path, vector_path


@pytest.fixture
def flat_triangle():
    """Single upward-facing triangle in the XZ plane plus a stray vertex."""
    positions = np.array([[0.0, 0.0, 0.0],
                          [0.0, 0.0, 1.0],
                          [1.0, 0.0, 0.0],
                          [5.0, 5.0, 5.0]], dtype=np.float32)
    indices = np.array([0, 1, 2], dtype=np.uint32)
    return positions, indices
