"""Point markers: anchor placement plus composite marker geometry.

Markers share the grid-validity rule of every other builder: a point
outside the elevation grid produces no marker at all.  Primitive meshes
come from ``trimesh.creation`` (Z-up) and are rotated to Y-up.
"""

import math
import logging
from functools import lru_cache

import trimesh

from .constants import SKY_RADIUS
from .layering import (CANOPY_STYLE, FLAG_STYLE, POLE_STYLE, SKY_LAYER,
                       TRUNK_STYLE)
from .models import MeshBuffer, StyledMesh
from .scene import SceneNode
from .terrain import anchor_position

logger = logging.getLogger(__name__)

# Z-up → Y-up
_Z_TO_Y = trimesh.transformations.rotation_matrix(-math.pi / 2, [1, 0, 0])

POLE_HEIGHT = 5.0
POLE_RADIUS = 0.1
FLAG_EXTENTS = (1.5, 1.0, 0.1)
FLAG_OFFSET = (0.75, 4.5, 0.0)
TRUNK_RADIUS = 0.2


def place_marker(point, grid, offset_height=0.0):
    """Centred anchor ``(x, y, z)`` for a point feature, None outside the grid."""
    return anchor_position(point, grid, offset_height)


# ── Primitive meshes ────────────────────────────────────────────────────

def _to_buffer(mesh):
    return MeshBuffer(positions=mesh.vertices, indices=mesh.faces.ravel(),
                      normals=mesh.vertex_normals)


@lru_cache(maxsize=64)
def cylinder_buffer(radius, height, sections=16):
    """Y-up cylinder centred on the origin."""
    return _to_buffer(trimesh.creation.cylinder(
        radius=radius, height=height, sections=sections, transform=_Z_TO_Y))


@lru_cache(maxsize=64)
def sphere_buffer(radius, subdivisions=2):
    return _to_buffer(trimesh.creation.icosphere(
        subdivisions=subdivisions, radius=radius))


@lru_cache(maxsize=16)
def box_buffer(extents):
    return _to_buffer(trimesh.creation.box(extents=extents))


@lru_cache(maxsize=4)
def inverted_sphere_buffer(radius, subdivisions=3):
    """Sphere seen from the inside: winding reversed, normals inward."""
    sphere = trimesh.creation.icosphere(subdivisions=subdivisions, radius=radius)
    return MeshBuffer(positions=sphere.vertices,
                      indices=sphere.faces[:, ::-1].ravel(),
                      normals=-sphere.vertex_normals)


# ── Composite markers ───────────────────────────────────────────────────

def build_sky_dome(style=None, layer=None, radius=SKY_RADIUS):
    style = style if style is not None else SKY_LAYER.style
    layer = layer if layer is not None else SKY_LAYER.layer
    mesh = StyledMesh(mesh=inverted_sphere_buffer(float(radius)), style=style,
                      layer=layer, name="sky")
    return SceneNode("sky", mesh=mesh)


def build_sphere_marker(point, grid, radius, style, layer=0, name="marker"):
    """Sphere resting on the ground at *point* (lifted by its radius)."""
    anchor = place_marker(point, grid, radius)
    if anchor is None:
        return None
    mesh = StyledMesh(mesh=sphere_buffer(float(radius)), style=style,
                      layer=layer, name=name)
    return SceneNode(name, mesh=mesh, translation=anchor)


def build_tree_marker(point, grid, size=1, layer=0, name="tree",
                      trunk_style=TRUNK_STYLE, canopy_style=CANOPY_STYLE):
    """Trunk cylinder with a sphere canopy, both scaled by the size class."""
    anchor = place_marker(point, grid)
    if anchor is None:
        return None

    trunk_height = 1.0 + size * 0.3
    canopy_radius = 1.0 + size * 0.3

    trunk = SceneNode(
        "trunk",
        mesh=StyledMesh(mesh=cylinder_buffer(TRUNK_RADIUS, trunk_height),
                        style=trunk_style, layer=layer, name=f"{name}_trunk"),
        translation=(0.0, trunk_height / 2, 0.0))
    canopy = SceneNode(
        "canopy",
        mesh=StyledMesh(mesh=sphere_buffer(canopy_radius),
                        style=canopy_style, layer=layer, name=f"{name}_canopy"),
        translation=(0.0, trunk_height + canopy_radius, 0.0))
    return SceneNode(name, translation=anchor, children=(trunk, canopy))


def build_hole_number_marker(number, point, grid, layer=0, name=None,
                             pole_style=POLE_STYLE, flag_style=FLAG_STYLE):
    """Flag pole planted at the green centre of hole *number*."""
    anchor = place_marker(point, grid)
    if anchor is None:
        return None

    name = name or f"hole{number}_marker"
    pole = SceneNode(
        "pole",
        mesh=StyledMesh(mesh=cylinder_buffer(POLE_RADIUS, POLE_HEIGHT),
                        style=pole_style, layer=layer, name=f"{name}_pole"),
        translation=(0.0, POLE_HEIGHT / 2, 0.0))
    flag = SceneNode(
        "flag",
        mesh=StyledMesh(mesh=box_buffer(FLAG_EXTENTS), style=flag_style,
                        layer=layer, name=f"{name}_flag"),
        translation=FLAG_OFFSET)
    return SceneNode(name, translation=anchor, children=(pole, flag))

