"""Elevation / vector-overlay resource loading.

Both resources are JSON documents validated with pydantic and converted
into the read-only :class:`ElevationGrid` and :class:`VectorOverlay`.
Loading runs in a worker thread (``asyncio.to_thread``) and resolves
exactly once: both datasets, or a :class:`ResourceLoadError` whose
message can be shown to the user as-is.
"""

import asyncio
import logging
import pathlib
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, model_validator

from .constants import ELEVATION_FILENAME, VECTOR_FILENAME
from .geometry import parse_points_string
from .models import (ElevationGrid, FeatureCategory, FeatureShape, Hole,
                     PathManager, VectorOverlay)

logger = logging.getLogger(__name__)

COURSE_CATEGORIES = ("Tree", "Clubhouse", "Creek", "Path", "Background",
                     "Bridge", "Water")
HOLE_COMPONENTS = ("Perimeter", "Teebox", "Centralpath", "Green",
                   "Greencenter", "Fairway", "Teeboxcenter")


class ResourceLoadError(Exception):
    """A resource is missing, unreadable or undecodable."""

    def __init__(self, message: str, path=None):
        super().__init__(message)
        self.path = path


# ── Resource schemas ────────────────────────────────────────────────────

class ElevationRecord(BaseModel):
    maxLatitude: float
    longPoints: int
    step: float
    elevationArray: List[List[float]]
    stepLongitudeMeters: Optional[float] = None
    stepLatitudeMeters: Optional[float] = None
    latPoints: int
    minLongitude: float

    @model_validator(mode='after')
    def check_dimensions(self):
        if len(self.elevationArray) != self.latPoints:
            raise ValueError(f"elevationArray has {len(self.elevationArray)} rows, "
                             f"latPoints is {self.latPoints}")
        for r, row in enumerate(self.elevationArray):
            if len(row) != self.longPoints:
                raise ValueError(f"elevationArray row {r} has {len(row)} values, "
                                 f"longPoints is {self.longPoints}")
        return self


class ShapeRecord(BaseModel):
    Attributes: Optional[Dict[str, Any]] = None
    Points: Optional[str] = None


class ShapesRecord(BaseModel):
    Shape: Optional[List[ShapeRecord]] = None


class CategoryRecord(BaseModel):
    Shapes: Optional[ShapesRecord] = None
    ShapeCount: Optional[int] = None


class HoleRecord(BaseModel):
    Perimeter: Optional[CategoryRecord] = None
    Teebox: Optional[CategoryRecord] = None
    Centralpath: Optional[CategoryRecord] = None
    Green: Optional[CategoryRecord] = None
    Greencenter: Optional[CategoryRecord] = None
    Fairway: Optional[CategoryRecord] = None
    Teeboxcenter: Optional[CategoryRecord] = None
    HoleNumber: Optional[int] = None


class HolesRecord(BaseModel):
    Hole: Optional[List[HoleRecord]] = None


class VectorRecord(BaseModel):
    Tree: Optional[CategoryRecord] = None
    Clubhouse: Optional[CategoryRecord] = None
    HoleCount: Optional[int] = None
    Holes: Optional[HolesRecord] = None
    Creek: Optional[CategoryRecord] = None
    Path: Optional[CategoryRecord] = None
    Background: Optional[CategoryRecord] = None
    Bridge: Optional[CategoryRecord] = None
    Water: Optional[CategoryRecord] = None


# ── Conversion ──────────────────────────────────────────────────────────

def _int_attributes(attributes):
    """Keep integer attribute codes only."""
    if not attributes:
        return {}
    return {key: value for key, value in attributes.items()
            if isinstance(value, int) and not isinstance(value, bool)}


def _to_category(name, record):
    if record is None:
        return None
    shape_records = (record.Shapes.Shape or []) if record.Shapes else []
    shapes = tuple(
        FeatureShape(points=parse_points_string(shape.Points),
                     attributes=_int_attributes(shape.Attributes))
        for shape in shape_records)
    return FeatureCategory(name=name, shapes=shapes, shape_count=record.ShapeCount)


def _to_hole(record):
    components = {}
    for name in HOLE_COMPONENTS:
        category = _to_category(name, getattr(record, name))
        if category is not None:
            components[name] = category
    return Hole(number=record.HoleNumber, components=components)


def elevation_from_record(record: ElevationRecord) -> ElevationGrid:
    return ElevationGrid(
        max_latitude=record.maxLatitude,
        min_longitude=record.minLongitude,
        step=record.step,
        lat_points=record.latPoints,
        lon_points=record.longPoints,
        heights=record.elevationArray,
        step_longitude_meters=record.stepLongitudeMeters,
        step_latitude_meters=record.stepLatitudeMeters,
    )


def overlay_from_record(record: VectorRecord) -> VectorOverlay:
    categories = {}
    for name in COURSE_CATEGORIES:
        category = _to_category(name, getattr(record, name))
        if category is not None:
            categories[name] = category
    hole_records = (record.Holes.Hole or []) if record.Holes else []
    return VectorOverlay(categories=categories,
                         holes=tuple(_to_hole(h) for h in hole_records),
                         hole_count=record.HoleCount)


def parse_elevation(data) -> ElevationGrid:
    """Decode elevation JSON (str or bytes).  Raises ValueError."""
    return elevation_from_record(ElevationRecord.model_validate_json(data))


def parse_vector_overlay(data) -> VectorOverlay:
    """Decode vector-overlay JSON (str or bytes).  Raises ValueError."""
    return overlay_from_record(VectorRecord.model_validate_json(data))


# ── File loading ────────────────────────────────────────────────────────

def _load(path, parser):
    path = pathlib.Path(path)
    try:
        return parser(path.read_bytes())
    except (OSError, ValueError) as e:
        logger.error(f"Failed to load {path}: {e}")
        raise ResourceLoadError(f"Failed to load {path.name}", path=path) from e


def load_elevation(path) -> ElevationGrid:
    grid = _load(path, parse_elevation)
    logger.info(f"Elevation grid: {grid.lat_points}x{grid.lon_points}, "
                f"step={grid.step}")
    return grid


def load_vector_overlay(path) -> VectorOverlay:
    overlay = _load(path, parse_vector_overlay)
    n_shapes = sum(len(c.shapes) for c in overlay.categories.values())
    logger.info(f"Vector overlay: {len(overlay.categories)} categories, "
                f"{n_shapes} shapes, {len(overlay.holes)} holes")
    return overlay


@dataclass(frozen=True, eq=False)
class CourseData:
    grid: ElevationGrid
    overlay: VectorOverlay


def load_course_data_sync(elevation_path=None, vector_path=None) -> CourseData:
    """Load both resources; defaults come from the data directory."""
    elevation_path = elevation_path or PathManager.get_data_path(ELEVATION_FILENAME)
    vector_path = vector_path or PathManager.get_data_path(VECTOR_FILENAME)
    grid = load_elevation(elevation_path)
    overlay = load_vector_overlay(vector_path)
    return CourseData(grid=grid, overlay=overlay)


async def load_course_data(elevation_path=None, vector_path=None) -> CourseData:
    """Load both resources in a worker thread."""
    return await asyncio.to_thread(load_course_data_sync,
                                   elevation_path, vector_path)


# ── Load job ────────────────────────────────────────────────────────────

class LoadStatus(str, Enum):
    loading = "loading"
    ready = "ready"
    failed = "failed"


class LoadJob:
    """One-shot background load whose result is published all at once.

    ``data`` stays None until both datasets are available.  If the
    consumer calls :meth:`discard` before the load finishes, the late
    result is dropped.
    """

    def __init__(self, elevation_path=None, vector_path=None):
        self.elevation_path = elevation_path
        self.vector_path = vector_path
        self.status = LoadStatus.loading
        self.error_message: Optional[str] = None
        self.data: Optional[CourseData] = None
        self.discarded = False
        self._started = False

    @property
    def is_loading(self) -> bool:
        return self.status == LoadStatus.loading

    def discard(self) -> None:
        self.discarded = True

    async def run(self) -> Optional[CourseData]:
        # claimed before the first await
        if self._started:
            raise RuntimeError(f"Load job already started ({self.status.value})")
        self._started = True

        try:
            data = await load_course_data(self.elevation_path, self.vector_path)
        except ResourceLoadError as exc:
            if self.discarded:
                logger.info(f"Discarding load failure for torn-down view: {exc}")
                return None
            self.error_message = str(exc)
            self.status = LoadStatus.failed
            return None

        if self.discarded:
            logger.info("Discarding course data for torn-down view")
            return None

        self.data = data
        self.status = LoadStatus.ready
        return data
