"""Tests for the TerrainBuilder orchestrator."""

import numpy as np

from coursebuilder.builder import TerrainBuilder
from coursebuilder.models import (FeatureCategory, FeatureShape, Hole,
                                  VectorOverlay)
from coursebuilder.scene import SceneTree

EXPECTED_ORDER = ["sky", "background_0", "terrain", "water_0",
                  "hole1_fairway_0", "hole1_greencenter_0", "hole1_number",
                  "tree_0"]


class RecordingContainer:
    """Minimal host container: anything with add_child()."""

    def __init__(self):
        self.children = []

    def add_child(self, node):
        self.children.append(node)


def _hole(grid, number, with_center=True):
    components = {}
    if with_center:
        components["Greencenter"] = FeatureCategory(
            "Greencenter", shapes=(FeatureShape(points=[grid.cell_center(1, 1)]),))
    return Hole(number=number, components=components)


class TestBuildScene:

    def test_draw_order(self, grid, overlay):
        scene = TerrainBuilder(grid, overlay).build_scene()
        assert [node.name for node in scene] == EXPECTED_ORDER

    def test_out_of_grid_path_is_skipped(self, grid, overlay):
        scene = TerrainBuilder(grid, overlay).build_scene()
        assert scene.find("path_0") is None

    def test_terrain_node_is_recentred(self, grid, overlay):
        terrain = TerrainBuilder(grid, overlay).build_scene().find("terrain")
        assert terrain.translation == (-2.5, 0.0, -2.0)
        assert terrain.mesh.mesh.vertex_count == grid.lat_points * grid.lon_points

    def test_background_colour_from_description(self, grid, overlay):
        background = TerrainBuilder(grid, overlay).build_scene().find("background_0")
        assert background.mesh.style.color == (0.2, 0.4, 0.2, 1.0)
        assert background.mesh.layer == 1

    def test_tree_size_attribute(self, grid, overlay):
        tree = TerrainBuilder(grid, overlay).build_scene().find("tree_0")
        trunk, _ = tree.children
        assert abs(trunk.translation[1] - (1.0 + 2 * 0.3) / 2) < 1e-9

    def test_mesh_layers_follow_table(self, grid, overlay):
        scene = TerrainBuilder(grid, overlay).build_scene()
        layers = [mesh.layer for mesh in scene.meshes()]
        assert layers == sorted(layers)

    def test_empty_overlay(self, grid):
        scene = TerrainBuilder(grid, VectorOverlay()).build_scene()
        assert [node.name for node in scene] == ["sky", "terrain"]


class TestHoleNumber:

    def test_requires_hole_number(self, grid):
        overlay = VectorOverlay(holes=[_hole(grid, None)])
        names = [node.name for node in TerrainBuilder(grid, overlay).build_nodes()]
        assert "hole1_greencenter_0" in names
        assert not any(name.endswith("_number") for name in names)

    def test_requires_green_centre(self, grid):
        overlay = VectorOverlay(holes=[_hole(grid, 4, with_center=False)])
        names = [node.name for node in TerrainBuilder(grid, overlay).build_nodes()]
        assert not any(name.endswith("_number") for name in names)

    def test_hole_prefix_follows_position(self, grid):
        overlay = VectorOverlay(holes=[_hole(grid, None), _hole(grid, 1), _hole(grid, 1)])
        names = [node.name for node in TerrainBuilder(grid, overlay).build_nodes()]
        assert len(names) == len(set(names))
        assert names[2:] == ["hole1_greencenter_0",
                             "hole2_greencenter_0", "hole2_number",
                             "hole3_greencenter_0", "hole3_number"]

    def test_one_marker_per_hole(self, grid):
        overlay = VectorOverlay(holes=[_hole(grid, 1), _hole(grid, 2)])
        names = [node.name for node in TerrainBuilder(grid, overlay).build_nodes()]
        assert names == ["sky", "terrain",
                         "hole1_greencenter_0", "hole1_number",
                         "hole2_greencenter_0", "hole2_number"]


class TestBuildTerrain:

    def test_attaches_to_any_container(self, grid, overlay):
        container = RecordingContainer()
        count = TerrainBuilder(grid, overlay).build_terrain(container)
        assert count == len(container.children) == len(EXPECTED_ORDER)

    def test_scene_tree_container(self, grid, overlay):
        tree = SceneTree()
        TerrainBuilder(grid, overlay).build_terrain(tree)
        assert len(tree) == len(EXPECTED_ORDER)

    def test_rebuild_is_bit_identical(self, grid, overlay):
        builder = TerrainBuilder(grid, overlay)
        first = builder.build_scene()
        second = builder.build_scene()
        a_paths = [path for path, _, _ in first.walk()]
        b_paths = [path for path, _, _ in second.walk()]
        assert a_paths == b_paths
        for a, b in zip(first.meshes(), second.meshes()):
            assert a.name == b.name
            assert a.style == b.style
            assert np.array_equal(a.mesh.positions, b.mesh.positions)
            assert a.mesh.positions.tobytes() == b.mesh.positions.tobytes()
            assert a.mesh.indices.tobytes() == b.mesh.indices.tobytes()
