"""Overlay feature meshes: flat polygon slabs and ribbon strips.

Both builders map every point through the grid, drop points that fall
outside it, and return None when too little is left to triangulate.
Output vertices are already centred on the origin, matching the
translated terrain.
"""

import logging

import numpy as np

from .constants import RIBBON_LIFT, UP_VECTOR
from .models import MeshBuffer, StyledMesh
from .terrain import anchor_position

logger = logging.getLogger(__name__)


def _project_points(points, grid, height_offset):
    """Centred positions for the in-grid points, in input order."""
    positions = []
    for point in points:
        anchor = anchor_position(point, grid, height_offset)
        if anchor is not None:
            positions.append(anchor)
    return positions


# ── Polygons ────────────────────────────────────────────────────────────

def build_polygon_mesh(points, grid, height_offset, style, layer=0,
                       name="polygon"):
    """Fan-triangulate a closed contour lifted *height_offset* above ground.

    Triangles are ``(0, i, i + 1)``.  This is only correct for convex or
    nearly convex, non-self-intersecting contours; concave outlines can
    produce overlapping or spilled triangles.

    Returns StyledMesh, or None with fewer than 3 in-grid points.
    """
    positions = _project_points(points, grid, height_offset)
    n = len(positions)
    if n < 3:
        logger.debug(f"{name}: {n} valid points, need 3, skipped")
        return None

    i = np.arange(1, n - 1)
    indices = np.column_stack([np.zeros_like(i), i, i + 1]).ravel()

    mesh = MeshBuffer(positions=positions, indices=indices)
    return StyledMesh(mesh=mesh, style=style, layer=layer, name=name)


# ── Ribbons ─────────────────────────────────────────────────────────────

def ribbon_perpendiculars(points):
    """Unit perpendicular (in lon/lat axes) for every point of a polyline.

    Point i uses the direction towards point i + 1 rotated by 90 degrees,
    ``(-dy, dx)``.  Zero-length segments use ``(0, 1)``.  The last point
    has no outgoing segment and reuses its predecessor's perpendicular.
    """
    perpendiculars = []
    for point, nxt in zip(points[:-1], points[1:]):
        direction = np.array([nxt[0] - point[0], nxt[1] - point[1]],
                             dtype=np.float32)
        length = np.linalg.norm(direction)
        if length > 0:
            dx, dy = direction / length
            perpendiculars.append((-dy, dx))
        else:
            perpendiculars.append((np.float32(0.0), np.float32(1.0)))
    if perpendiculars:
        perpendiculars.append(perpendiculars[-1])
    return perpendiculars


def build_ribbon_mesh(points, grid, width, style, layer=0, name="ribbon"):
    """Constant-width strip following a polyline, floating above ground.

    Each in-grid point contributes two vertices offset by ±width/2 along
    its perpendicular.  Out-of-grid points are skipped together with
    their vertex pair, which can shorten the ribbon.

    Returns StyledMesh, or None with fewer than 2 in-grid points.
    """
    points = list(points)
    if len(points) < 2:
        return None

    half_width = np.float32(width) / np.float32(2.0)
    positions = []
    for point, (px, pz) in zip(points, ribbon_perpendiculars(points)):
        base = anchor_position(point, grid, RIBBON_LIFT)
        if base is None:
            continue
        x, y, z = base
        ox, oz = px * half_width, pz * half_width
        positions.append((x + ox, y, z + oz))
        positions.append((x - ox, y, z - oz))

    pairs = len(positions) // 2
    if pairs < 2:
        logger.debug(f"{name}: {pairs} valid points, need 2, skipped")
        return None

    i = np.arange(pairs - 1) * 2
    indices = np.column_stack([i, i + 2, i + 1,
                               i + 1, i + 2, i + 3]).ravel()
    normals = np.tile(np.array(UP_VECTOR, dtype=np.float32), (len(positions), 1))

    mesh = MeshBuffer(positions=positions, indices=indices, normals=normals)
    if mesh.vertex_count == 0 or mesh.triangle_count == 0:
        return None
    return StyledMesh(mesh=mesh, style=style, layer=layer, name=name)
