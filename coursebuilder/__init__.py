"""CourseBuilder package: 3D golf-course scenes from elevation grids and vector overlays.

Import constants FIRST so logging and the .env configuration are set up
before any other module logs.
"""

from coursebuilder import constants as _constants  # noqa: F401

from coursebuilder.builder import TerrainBuilder
from coursebuilder.glb import export_glb
from coursebuilder.layering import FEATURE_LAYERS, FeatureLayeringPolicy
from coursebuilder.loader import (LoadJob, ResourceLoadError, load_course_data,
                                  load_course_data_sync)
from coursebuilder.models import (ElevationGrid, FeatureShape, GeoPoint,
                                  MaterialStyle, MeshBuffer, StyledMesh,
                                  VectorOverlay)
from coursebuilder.scene import SceneNode, SceneTree
