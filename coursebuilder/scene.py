"""Immutable scene tree handed to the renderer / exporter."""

import logging
from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np

from .models import StyledMesh

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class SceneNode:
    """Geometry + translation record; children are placed relative to it."""
    name: str
    mesh: Optional[StyledMesh] = None
    translation: Tuple[float, float, float] = (0.0, 0.0, 0.0)
    children: Tuple["SceneNode", ...] = ()

    def __post_init__(self):
        object.__setattr__(self, 'translation',
                           tuple(float(v) for v in self.translation))
        object.__setattr__(self, 'children', tuple(self.children))

    def matrix(self) -> np.ndarray:
        """4x4 local transform."""
        m = np.eye(4)
        m[:3, 3] = self.translation
        return m

    def walk(self, parent_path=None):
        """Yield (path, node, parent_path) depth-first, parents first."""
        path = self.name if parent_path is None else f"{parent_path}/{self.name}"
        yield path, self, parent_path
        for child in self.children:
            yield from child.walk(path)


class SceneTree:
    """Container collecting top-level nodes in draw order.

    Any object with an ``add_child(node)`` method can stand in for it as
    the target of :meth:`TerrainBuilder.build_terrain`.
    """

    def __init__(self):
        self._children = []

    def add_child(self, node: SceneNode) -> None:
        self._children.append(node)

    def clear(self) -> None:
        self._children.clear()

    @property
    def children(self) -> Tuple[SceneNode, ...]:
        return tuple(self._children)

    def __len__(self):
        return len(self._children)

    def __iter__(self):
        return iter(self._children)

    def walk(self):
        for child in self._children:
            yield from child.walk()

    def find(self, name: str) -> Optional[SceneNode]:
        """First top-level node called *name*."""
        for child in self._children:
            if child.name == name:
                return child
        return None

    def meshes(self):
        """All StyledMeshes in the tree, in draw order."""
        return [node.mesh for _, node, _ in self.walk() if node.mesh is not None]
