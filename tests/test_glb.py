"""Tests for GLB export."""

import numpy as np
import pytest
import trimesh

from coursebuilder.builder import TerrainBuilder
from coursebuilder.glb import export_glb, scene_to_trimesh, styled_mesh_to_trimesh
from coursebuilder.models import (FeatureCategory, FeatureShape, Hole,
                                  MaterialStyle, MeshBuffer, StyledMesh,
                                  VectorOverlay)
from coursebuilder.scene import SceneNode, SceneTree


@pytest.fixture
def scene(grid, overlay):
    return TerrainBuilder(grid, overlay).build_scene()


class TestStyledMeshToTrimesh:

    def test_buffers_and_material(self):
        buffer = MeshBuffer(positions=[[0, 0, 0], [0, 0, 1], [1, 0, 0]],
                            indices=[0, 1, 2],
                            normals=[[0, 1, 0]] * 3,
                            uvs=[[0, 0], [0, 1], [1, 0]])
        style = MaterialStyle((0.15, 0.45, 0.75, 0.8), roughness=0.1, metallic=0.3)
        mesh = styled_mesh_to_trimesh(StyledMesh(buffer, style, name="water_0"))
        assert len(mesh.vertices) == 3
        assert len(mesh.faces) == 1
        np.testing.assert_allclose(mesh.vertex_normals, [[0, 1, 0]] * 3)
        material = mesh.visual.material
        assert material.alphaMode == 'BLEND'
        assert material.roughnessFactor == pytest.approx(0.1)
        assert material.metallicFactor == pytest.approx(0.3)
        assert material.doubleSided

    def test_opaque_style(self):
        buffer = MeshBuffer(positions=[[0, 0, 0], [0, 0, 1], [1, 0, 0]],
                            indices=[0, 1, 2])
        mesh = styled_mesh_to_trimesh(
            StyledMesh(buffer, MaterialStyle((1.0, 1.0, 1.0))))
        assert mesh.visual.material.alphaMode == 'OPAQUE'


class TestSceneToTrimesh:

    def test_one_geometry_per_mesh(self, scene):
        glb_scene = scene_to_trimesh(scene)
        assert len(glb_scene.geometry) == len(scene.meshes())
        assert "tree_0/canopy" in glb_scene.geometry

    def test_transforms_are_composed(self, scene):
        glb_scene = scene_to_trimesh(scene)
        tree = scene.find("tree_0")
        canopy = tree.children[1]
        matrix, _ = glb_scene.graph.get("tree_0/canopy")
        expected = np.add(tree.translation, canopy.translation)
        np.testing.assert_allclose(matrix[:3, 3], expected, atol=1e-6)

    def test_terrain_translation_kept(self, scene):
        matrix, _ = scene_to_trimesh(scene).graph.get("terrain")
        np.testing.assert_allclose(matrix[:3, 3], (-2.5, 0.0, -2.0))

    def test_holes_with_repeated_numbers_keep_every_mesh(self, grid):
        def hole(number, row, col):
            center = FeatureCategory("Greencenter", shapes=(
                FeatureShape(points=[grid.cell_center(row, col)]),))
            return Hole(number=number, components={"Greencenter": center})

        overlay = VectorOverlay(holes=[hole(None, 1, 1), hole(1, 2, 3), hole(1, 3, 0)])
        scene = TerrainBuilder(grid, overlay).build_scene()
        glb_scene = scene_to_trimesh(scene)
        assert len(glb_scene.graph.nodes_geometry) == len(scene.meshes())

    def test_duplicate_paths_are_suffixed(self):
        tri = MeshBuffer(positions=[[0, 0, 0], [0, 0, 1], [1, 0, 0]], indices=[0, 1, 2])
        style = MaterialStyle((1, 1, 1))
        tree = SceneTree()
        tree.add_child(SceneNode("dup", mesh=StyledMesh(tri, style)))
        tree.add_child(SceneNode("dup", mesh=StyledMesh(tri, style), translation=(1, 0, 0)))
        glb_scene = scene_to_trimesh(tree)
        assert set(glb_scene.graph.nodes_geometry) == {"dup", "dup~1"}
        matrix, _ = glb_scene.graph.get("dup~1")
        assert matrix[0, 3] == 1.0

    def test_mesh_without_triangles_becomes_empty_node(self):
        flat = MeshBuffer(positions=[[0, 0, 0]], indices=[])
        tree = SceneTree()
        tree.add_child(SceneNode("empty", mesh=StyledMesh(flat, MaterialStyle((1, 1, 1)))))
        glb_scene = scene_to_trimesh(tree)
        assert len(glb_scene.geometry) == 0
        assert "empty" in glb_scene.graph.nodes


class TestExportGlb:

    def test_writes_loadable_file(self, scene, tmp_path):
        path = export_glb(scene, tmp_path / "out" / "course.glb")
        assert path.exists()
        loaded = trimesh.load(str(path), force='scene')
        assert len(loaded.geometry) == len(scene.meshes())
