"""Data classes and path management."""

import pathlib
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, NamedTuple, Optional, Tuple

import numpy as np
from shapely.geometry import LineString, Point, Polygon, box

from .constants import OUTPUT_DIR, DATA_DIR


class GridShapeError(ValueError):
    """Elevation heights do not match the declared grid dimensions."""


class MeshBufferError(ValueError):
    """Vertex/index buffers violate the mesh invariants."""


class PathManager:
    """Manage paths relative to the CourseBuilder directory."""

    @staticmethod
    def get_output_path(filename: str) -> pathlib.Path:
        """Get the output file path."""
        return OUTPUT_DIR / filename

    @staticmethod
    def get_data_path(filename: str) -> pathlib.Path:
        """Get the data file path."""
        return DATA_DIR / filename


class GeoPoint(NamedTuple):
    longitude: float
    latitude: float


class GridCell(NamedTuple):
    """Fractional position of a GeoPoint inside the elevation grid."""
    lon_index: float
    lat_index: float


def _readonly(array: np.ndarray) -> np.ndarray:
    array.flags.writeable = False
    return array


@dataclass(frozen=True, eq=False)
class ElevationGrid:
    """Regular lat/lon elevation raster.

    Row 0 sits at ``max_latitude`` and rows walk south; column 0 sits at
    ``min_longitude`` and columns walk east.  ``step`` is the cell size in
    degrees along both axes.
    """
    max_latitude: float
    min_longitude: float
    step: float
    lat_points: int
    lon_points: int
    heights: np.ndarray
    step_longitude_meters: Optional[float] = None
    step_latitude_meters: Optional[float] = None

    def __post_init__(self):
        if self.lat_points < 1 or self.lon_points < 1:
            raise GridShapeError(
                f"Grid needs at least one row and column, got "
                f"{self.lat_points}x{self.lon_points}")
        if not self.step > 0:
            raise GridShapeError(f"Grid step must be positive, got {self.step}")

        rows = self.heights
        if not isinstance(rows, np.ndarray):
            rows = list(rows)
            if len(rows) != self.lat_points:
                raise GridShapeError(
                    f"Expected {self.lat_points} elevation rows, got {len(rows)}")
            for r, row in enumerate(rows):
                if len(row) != self.lon_points:
                    raise GridShapeError(
                        f"Elevation row {r} has {len(row)} values, "
                        f"expected {self.lon_points}")

        heights = np.array(rows, dtype=np.float64)
        if heights.shape != (self.lat_points, self.lon_points):
            raise GridShapeError(
                f"Elevation array shape {heights.shape} does not match "
                f"{self.lat_points}x{self.lon_points} grid")
        object.__setattr__(self, 'heights', _readonly(heights))

    @property
    def min_latitude(self) -> float:
        return self.max_latitude - self.lat_points * self.step

    @property
    def max_longitude(self) -> float:
        return self.min_longitude + self.lon_points * self.step

    def cell_center(self, row: int, col: int) -> GeoPoint:
        """GeoPoint at the centre of cell (row, col)."""
        return GeoPoint(self.min_longitude + (col + 0.5) * self.step,
                        self.max_latitude - (row + 0.5) * self.step)

    def to_polygon(self) -> Polygon:
        """Convert grid coverage to shapely polygon (lon/lat)."""
        return box(self.min_longitude, self.min_latitude,
                   self.max_longitude, self.max_latitude)


@dataclass(frozen=True)
class FeatureShape:
    """One overlay shape: ordered points plus integer attribute codes."""
    points: Tuple[GeoPoint, ...] = ()
    attributes: Mapping[str, int] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, 'points', tuple(GeoPoint(*p) for p in self.points))
        object.__setattr__(self, 'attributes', MappingProxyType(dict(self.attributes)))

    @property
    def first_point(self) -> Optional[GeoPoint]:
        return self.points[0] if self.points else None

    def attribute(self, key: str, default: Optional[int] = None) -> Optional[int]:
        return self.attributes.get(key, default)

    def to_geometry(self, closed: bool = False):
        """Shapely geometry for the shape, or None when it has no points."""
        if not self.points:
            return None
        if len(self.points) == 1:
            return Point(self.points[0])
        if closed and len(self.points) >= 3:
            return Polygon(self.points)
        return LineString(self.points)


@dataclass(frozen=True)
class FeatureCategory:
    name: str
    shapes: Tuple[FeatureShape, ...] = ()
    shape_count: Optional[int] = None

    def __post_init__(self):
        object.__setattr__(self, 'shapes', tuple(self.shapes))


@dataclass(frozen=True)
class Hole:
    """Per-hole features (Perimeter, Fairway, Green, ...)."""
    number: Optional[int] = None
    components: Mapping[str, FeatureCategory] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, 'components', MappingProxyType(dict(self.components)))

    def shapes(self, component: str) -> Tuple[FeatureShape, ...]:
        category = self.components.get(component)
        return category.shapes if category is not None else ()


@dataclass(frozen=True)
class VectorOverlay:
    """Course-wide feature categories plus the list of holes."""
    categories: Mapping[str, FeatureCategory] = field(default_factory=dict)
    holes: Tuple[Hole, ...] = ()
    hole_count: Optional[int] = None

    def __post_init__(self):
        object.__setattr__(self, 'categories', MappingProxyType(dict(self.categories)))
        object.__setattr__(self, 'holes', tuple(self.holes))

    def shapes(self, category: str) -> Tuple[FeatureShape, ...]:
        """Shapes of *category*; empty when the category is absent."""
        found = self.categories.get(category)
        return found.shapes if found is not None else ()


@dataclass(frozen=True, eq=False)
class MeshBuffer:
    """Triangle mesh buffers handed to the renderer.

    ``positions`` is (N, 3) float32, ``normals`` (N, 3) or empty, ``uvs``
    (N, 2) or empty and ``indices`` a flat uint32 array of triangle
    corners.  All arrays are copied and made read-only.
    """
    positions: np.ndarray
    indices: np.ndarray
    normals: Optional[np.ndarray] = None
    uvs: Optional[np.ndarray] = None

    def __post_init__(self):
        positions = np.array(self.positions, dtype=np.float32).reshape(-1, 3)
        n = len(positions)

        raw_indices = np.array(self.indices, dtype=np.int64).ravel()
        if len(raw_indices) % 3 != 0:
            raise MeshBufferError(
                f"Index count {len(raw_indices)} is not a multiple of 3")
        if len(raw_indices) and (raw_indices.min() < 0 or raw_indices.max() >= n):
            raise MeshBufferError(
                f"Triangle index out of range for {n} positions")

        normals = (np.zeros((0, 3), dtype=np.float32) if self.normals is None
                   else np.array(self.normals, dtype=np.float32).reshape(-1, 3))
        uvs = (np.zeros((0, 2), dtype=np.float32) if self.uvs is None
               else np.array(self.uvs, dtype=np.float32).reshape(-1, 2))
        for label, arr in (('normals', normals), ('uvs', uvs)):
            if len(arr) not in (0, n):
                raise MeshBufferError(
                    f"{label} length {len(arr)} does not match {n} positions")

        object.__setattr__(self, 'positions', _readonly(positions))
        object.__setattr__(self, 'indices', _readonly(raw_indices.astype(np.uint32)))
        object.__setattr__(self, 'normals', _readonly(normals))
        object.__setattr__(self, 'uvs', _readonly(uvs))

    @property
    def vertex_count(self) -> int:
        return len(self.positions)

    @property
    def triangle_count(self) -> int:
        return len(self.indices) // 3

    @property
    def faces(self) -> np.ndarray:
        return self.indices.reshape(-1, 3)


@dataclass(frozen=True)
class MaterialStyle:
    color: Tuple[float, float, float, float]  # RGBA, 0-1
    roughness: float = 0.8
    metallic: float = 0.0

    def __post_init__(self):
        color = tuple(float(c) for c in self.color)
        if len(color) == 3:
            color = color + (1.0,)
        object.__setattr__(self, 'color', color)

    @property
    def is_translucent(self) -> bool:
        return self.color[3] < 1.0


@dataclass(frozen=True)
class StyledMesh:
    """Unit handed to the renderer: geometry, material, draw layer."""
    mesh: MeshBuffer
    style: MaterialStyle
    layer: int = 0
    name: str = "mesh"
