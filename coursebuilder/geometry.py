"""Point-string parsing and vertex normal estimation."""

import math
import logging
import re

import numpy as np

from .constants import UP_VECTOR
from .models import GeoPoint

logger = logging.getLogger(__name__)

# Plain ASCII decimal: optional sign, digits with an optional fraction,
# optional exponent.  No underscores, no hex, no inf/nan.
_DECIMAL = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?", re.ASCII)


# ── Point strings ───────────────────────────────────────────────────────

def parse_points_string(points_string):
    """Decode ``"lon lat,lon lat,..."`` into a list of GeoPoints.

    Coordinates are separated by spaces; tokens that are not plain
    decimals are ignored.  Groups that do not hold exactly two numbers
    are dropped, so the result may be shorter than the number of groups.
    Empty or garbage input gives an empty list.
    """
    if not points_string:
        return []

    points = []
    for component in points_string.split(','):
        coordinates = []
        for token in component.split(' '):
            if not _DECIMAL.fullmatch(token):
                continue
            value = float(token)
            if math.isfinite(value):
                coordinates.append(value)
        if len(coordinates) == 2:
            points.append(GeoPoint(coordinates[0], coordinates[1]))
    return points


# ── Normals ─────────────────────────────────────────────────────────────

def generate_normals(positions, indices):
    """Smoothed per-vertex normals from a triangle list.

    Each triangle adds its unnormalised face normal
    ``(p1 - p0) x (p2 - p0)`` to its three corners; the sums are then
    normalised.  Vertices with a zero sum (unreferenced, or only touching
    degenerate triangles) get the up vector.

    Parameters
    ----------
    positions : array-like (N, 3)
    indices : array-like, flat or (M, 3)

    Returns
    -------
    np.ndarray (N, 3) float32
    """
    positions = np.asarray(positions, dtype=np.float64).reshape(-1, 3)
    faces = np.asarray(indices, dtype=np.int64).reshape(-1, 3)

    normals = np.zeros_like(positions)
    if len(faces):
        p0 = positions[faces[:, 0]]
        p1 = positions[faces[:, 1]]
        p2 = positions[faces[:, 2]]
        face_normals = np.cross(p1 - p0, p2 - p0)
        for corner in range(3):
            np.add.at(normals, faces[:, corner], face_normals)

    lengths = np.linalg.norm(normals, axis=1)
    nonzero = lengths > 0.0
    normals[nonzero] /= lengths[nonzero, None]
    normals[~nonzero] = UP_VECTOR

    return normals.astype(np.float32)
