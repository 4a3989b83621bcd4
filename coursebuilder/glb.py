"""GLB file generation from a built scene tree."""

import logging
import time

import numpy as np
import trimesh

from .models import PathManager

logger = logging.getLogger(__name__)


def _material(style, name):
    return trimesh.visual.material.PBRMaterial(
        name=name,
        baseColorFactor=list(style.color),
        roughnessFactor=style.roughness,
        metallicFactor=style.metallic,
        alphaMode='BLEND' if style.is_translucent else 'OPAQUE',
        doubleSided=True,
    )


def styled_mesh_to_trimesh(styled):
    """Trimesh with the buffers of *styled* and a PBR material."""
    buffer = styled.mesh
    kwargs = {}
    if len(buffer.normals):
        kwargs['vertex_normals'] = np.asarray(buffer.normals, dtype=np.float64)

    # process=False keeps vertex order so normals and UVs stay aligned
    mesh = trimesh.Trimesh(
        vertices=np.asarray(buffer.positions, dtype=np.float64),
        faces=np.asarray(buffer.faces, dtype=np.int64),
        process=False,
        **kwargs)
    uv = np.asarray(buffer.uvs, dtype=np.float64) if len(buffer.uvs) else None
    mesh.visual = trimesh.visual.TextureVisuals(
        uv=uv, material=_material(styled.style, styled.name))
    return mesh


def _unique_frame(path, used):
    """*path*, or *path* with a ``~n`` suffix when another node took it."""
    frame = path
    n = 1
    while frame in used:
        frame = f"{path}~{n}"
        n += 1
    if frame != path:
        logger.warning(f"Duplicate scene node path {path!r} exported as {frame!r}")
    used.add(frame)
    return frame


def scene_to_trimesh(scene):
    """Convert a SceneTree into a ``trimesh.Scene`` with one node per SceneNode.

    Node names are slash-joined paths (``tree_0/canopy``); a repeated path
    gets a ``~n`` suffix so no node overwrites another.  Transforms are
    kept per node; meshes without triangles become empty transform nodes.
    """
    glb_scene = trimesh.Scene()
    base = glb_scene.graph.base_frame
    used = {base}
    skipped = 0

    # (node, parent frame) pairs, parents before children
    stack = [(node, None) for node in reversed(list(scene))]
    while stack:
        node, parent = stack.pop()
        path = node.name if parent is None else f"{parent}/{node.name}"
        frame = _unique_frame(path, used)
        parent_frame = parent if parent is not None else base

        styled = node.mesh
        if styled is None or styled.mesh.triangle_count == 0:
            if styled is not None:
                skipped += 1
                logger.debug(f"{frame}: no triangles, exported as empty node")
            glb_scene.graph.update(frame_from=parent_frame, frame_to=frame,
                                   matrix=node.matrix())
        else:
            glb_scene.add_geometry(styled_mesh_to_trimesh(styled),
                                   node_name=frame,
                                   geom_name=frame,
                                   parent_node_name=parent_frame,
                                   transform=node.matrix())
        stack.extend((child, frame) for child in reversed(node.children))

    if skipped:
        logger.info(f"{skipped} meshes had no triangles")
    return glb_scene


def export_glb(scene, output_path):
    """Write *scene* as binary glTF.  Returns the resolved output path."""
    t0 = time.perf_counter()
    output_path = PathManager.get_output_path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    glb_scene = scene_to_trimesh(scene)
    glb_scene.export(str(output_path), file_type='glb')
    logger.info(f"GLB file generated: {output_path} "
                f"({len(glb_scene.geometry)} meshes, "
                f"{time.perf_counter() - t0:.2f}s)")
    return output_path
