"""Grid mapping, elevation sampling and base terrain mesh generation.

Provides functions for:
1. Mapping lon/lat points onto fractional elevation-grid cells
2. Nearest-lower-index elevation sampling with out-of-grid rejection
3. Building the base terrain mesh (one vertex per grid cell)
"""

import math
import logging

import numpy as np

from .constants import ELEVATION_SCALE, TEXTURE_TILING
from .geometry import generate_normals
from .layering import TERRAIN_LAYER
from .models import GridCell, MeshBuffer, StyledMesh

logger = logging.getLogger(__name__)


# ── Grid mapping ────────────────────────────────────────────────────────

def map_to_cell(point, grid):
    """Fractional grid position of a (lon, lat) point."""
    lon, lat = point
    return GridCell((lon - grid.min_longitude) / grid.step,
                    (grid.max_latitude - lat) / grid.step)


def _cell_row_col(cell, grid):
    """(row, col) of a cell inside the grid, or None."""
    lon_index, lat_index = cell
    if not (math.isfinite(lon_index) and math.isfinite(lat_index)):
        return None
    # floor, not int(): indices in (-1, 0) must stay outside the grid
    row = math.floor(lat_index)
    col = math.floor(lon_index)
    if 0 <= row < grid.lat_points and 0 <= col < grid.lon_points:
        return row, col
    return None


def cell_is_valid(cell, grid) -> bool:
    return _cell_row_col(cell, grid) is not None


def sample_elevation(cell, grid):
    """Raw elevation of the cell containing *cell*, None outside the grid.

    No interpolation: the value of the nearest lower-index sample is used
    for the whole cell.  Overlay vertices therefore step with the grid
    rather than following the terrain surface exactly.
    """
    row_col = _cell_row_col(cell, grid)
    if row_col is None:
        return None
    row, col = row_col
    return float(grid.heights[row, col])


def world_xz(cell):
    """Pre-centering X/Z for a cell (x = lon index, z = lat index)."""
    return np.float32(cell.lon_index), np.float32(cell.lat_index)


def recenter_offset(grid):
    """Offset subtracted from every X/Z so the grid centre is the origin."""
    return (np.float32(grid.lon_points) / np.float32(2.0),
            np.float32(grid.lat_points) / np.float32(2.0))


def terrain_translation(grid):
    """Scene-node translation that recentres the local terrain mesh."""
    cx, cz = recenter_offset(grid)
    return (-float(cx), 0.0, -float(cz))


def anchor_position(point, grid, height_offset=0.0):
    """Centred world position of *point* at ground level + *height_offset*.

    Returns an (x, y, z) float32 tuple, or None when the point falls
    outside the grid.
    """
    cell = map_to_cell(point, grid)
    elevation = sample_elevation(cell, grid)
    if elevation is None:
        return None
    x, z = world_xz(cell)
    cx, cz = recenter_offset(grid)
    y = (np.float32(elevation) * np.float32(ELEVATION_SCALE)
         + np.float32(height_offset))
    return (x - cx, y, z - cz)


# ── Terrain mesh ────────────────────────────────────────────────────────

def build_terrain_mesh(grid, style=None, layer=None, name="terrain"):
    """Build the base ground mesh from the elevation grid.

    Vertices are laid out row-major (lat outer, lon inner) so vertex
    ``lat * lon_points + lon`` belongs to cell (lat, lon).  Positions are
    in local grid space ``(lon, h * 0.1, lat)``; place the mesh with
    :func:`terrain_translation` to centre it on the origin.

    Returns
    -------
    StyledMesh
    """
    style = style if style is not None else TERRAIN_LAYER.style
    layer = layer if layer is not None else TERRAIN_LAYER.layer
    lat_points, lon_points = grid.lat_points, grid.lon_points

    # ── Vertex positions + UVs: one per grid cell ───────────────
    lat_g, lon_g = np.meshgrid(np.arange(lat_points), np.arange(lon_points),
                               indexing='ij')
    lat_f = lat_g.ravel().astype(np.float32)
    lon_f = lon_g.ravel().astype(np.float32)

    positions = np.empty((lat_points * lon_points, 3), dtype=np.float32)
    positions[:, 0] = lon_f
    positions[:, 1] = (grid.heights.astype(np.float32).ravel()
                       * np.float32(ELEVATION_SCALE))
    positions[:, 2] = lat_f

    uvs = np.empty((lat_points * lon_points, 2), dtype=np.float32)
    uvs[:, 0] = lon_f / np.float32(lon_points) * np.float32(TEXTURE_TILING)
    uvs[:, 1] = lat_f / np.float32(lat_points) * np.float32(TEXTURE_TILING)

    # ── Face indices: 2 triangles per grid quad ─────────────────
    n_rows, n_cols = lat_points - 1, lon_points - 1
    if n_rows > 0 and n_cols > 0:
        row_g, col_g = np.meshgrid(np.arange(n_rows), np.arange(n_cols),
                                   indexing='ij')
        r = row_g.ravel()
        c = col_g.ravel()
        top_left = r * lon_points + c
        top_right = top_left + 1
        bottom_left = (r + 1) * lon_points + c
        bottom_right = bottom_left + 1
        # Wound for +Y normals: tl→bl→tr  and  tr→bl→br
        indices = np.column_stack([top_left, bottom_left, top_right,
                                   top_right, bottom_left, bottom_right]).ravel()
    else:
        indices = np.zeros(0, dtype=np.int64)

    normals = generate_normals(positions, indices)

    mesh = MeshBuffer(positions=positions, indices=indices,
                      normals=normals, uvs=uvs)
    logger.info(f"Terrain grid mesh: {mesh.vertex_count} verts, "
                f"{mesh.triangle_count} faces")
    return StyledMesh(mesh=mesh, style=style, layer=layer, name=name)
