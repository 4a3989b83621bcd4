"""TerrainBuilder: thin orchestrator that delegates to focused modules."""

import logging
import time

from .features import build_polygon_mesh, build_ribbon_mesh
from .layering import HOLE_SCOPE, FeatureLayeringPolicy, Operation
from .markers import (build_hole_number_marker, build_sky_dome,
                      build_sphere_marker, build_tree_marker)
from .scene import SceneNode, SceneTree
from .terrain import build_terrain_mesh, terrain_translation

logger = logging.getLogger(__name__)


class TerrainBuilder:
    def __init__(self, grid, overlay, policy=None):
        """
        grid: ElevationGrid the whole scene is sampled from.
        overlay: VectorOverlay with the course features.
        policy: FeatureLayeringPolicy; defaults to the standard table.
        """
        self.grid = grid
        self.overlay = overlay
        self.policy = policy or FeatureLayeringPolicy()

    def build_terrain(self, container) -> int:
        """Regenerate every scene node and attach them to *container*.

        *container* only needs an ``add_child(node)`` method.  Nodes are
        attached in draw order.  Returns the number of nodes attached.
        """
        nodes = self.build_nodes()
        for node in nodes:
            container.add_child(node)
        return len(nodes)

    def build_scene(self) -> SceneTree:
        """Build a fresh :class:`SceneTree` for the grid + overlay pair."""
        tree = SceneTree()
        self.build_terrain(tree)
        return tree

    def build_nodes(self):
        t0 = time.perf_counter()
        nodes = []
        skipped = 0
        holes_done = False

        for layer in self.policy:
            if layer.scope == HOLE_SCOPE:
                if not holes_done:
                    hole_nodes, hole_skipped = self._build_holes()
                    nodes.extend(hole_nodes)
                    skipped += hole_skipped
                    holes_done = True
                continue

            if layer.operation == Operation.sky:
                nodes.append(build_sky_dome(layer.style, layer.layer, layer.radius))
                continue
            if layer.operation == Operation.terrain:
                terrain = build_terrain_mesh(self.grid, layer.style, layer.layer)
                nodes.append(SceneNode("terrain", mesh=terrain,
                                       translation=terrain_translation(self.grid)))
                continue

            for index, shape in enumerate(self.overlay.shapes(layer.category)):
                node = self._build_shape(layer, shape,
                                         f"{layer.category.lower()}_{index}")
                if node is None:
                    skipped += 1
                else:
                    nodes.append(node)

        logger.info(f"Built {len(nodes)} scene nodes ({skipped} shapes skipped) "
                    f"in {time.perf_counter() - t0:.2f}s")
        return nodes

    def _build_holes(self):
        nodes = []
        skipped = 0
        hole_layers = self.policy.hole_layers()

        for hole_index, hole in enumerate(self.overlay.holes):
            # numbering by position; HoleNumber may be missing or repeated
            prefix = f"hole{hole_index + 1}"

            for layer in hole_layers:
                if layer.operation == Operation.hole_number:
                    node = self._build_hole_number(hole, layer, f"{prefix}_number")
                    if node is None:
                        skipped += 1
                    else:
                        nodes.append(node)
                    continue

                for index, shape in enumerate(hole.shapes(layer.category)):
                    node = self._build_shape(
                        layer, shape, f"{prefix}_{layer.category.lower()}_{index}")
                    if node is None:
                        skipped += 1
                    else:
                        nodes.append(node)
        return nodes, skipped

    def _build_hole_number(self, hole, layer, name):
        """Flag marker; needs the hole number and a green-centre point."""
        centers = hole.shapes("Greencenter")
        point = centers[0].first_point if centers else None
        if hole.number is None or point is None:
            logger.debug(f"{name}: missing hole number or green centre")
            return None
        return build_hole_number_marker(hole.number, point, self.grid,
                                        layer=layer.layer, name=name,
                                        pole_style=layer.style,
                                        flag_style=layer.accent_style or layer.style)

    def _build_shape(self, layer, shape, name):
        """Geometry for one overlay shape, or None if it was rejected."""
        style = self.policy.style_for(layer, shape)
        op = layer.operation

        if op == Operation.polygon:
            mesh = build_polygon_mesh(shape.points, self.grid, layer.height,
                                      style, layer.layer, name)
            return SceneNode(name, mesh=mesh) if mesh is not None else None

        if op == Operation.ribbon:
            mesh = build_ribbon_mesh(shape.points, self.grid, layer.width,
                                     style, layer.layer, name)
            return SceneNode(name, mesh=mesh) if mesh is not None else None

        point = shape.first_point
        if point is None:
            return None

        if op == Operation.sphere:
            return build_sphere_marker(point, self.grid, layer.radius, style,
                                       layer.layer, name)
        if op == Operation.tree:
            return build_tree_marker(point, self.grid,
                                     size=shape.attribute("Size", 1),
                                     layer=layer.layer, name=name,
                                     trunk_style=style,
                                     canopy_style=layer.accent_style or style)

        logger.warning(f"Unsupported operation {op} for {layer.category}")
        return None
