"""
Scene description loader.

Builds the in-memory host model (nodes, meshes, skins, animation clips) from a
YAML or JSON document of the form::

    assets:
      - path: Assets/Characters/Hero.fbx
        meshes:
          HeroMesh:
            position: [[0, 0, 0], ...]
            blend_weights: [[1, 0, 0, 0], ...]
            blend_indices: [[0, 0, 0, 0], ...]
            submeshes: [{topology: triangles, indices: [0, 1, 2]}]
        nodes:
          - name: Hero
            skin: {mesh: HeroMesh, bones: [Hips, Spine]}
            children:
              - {name: Hips, position: [0, 1, 0], children: [{name: Spine}]}
        clips:
          - name: Walk
            length: 1.0
            frame_rate: 30
            curves:
              - {path: Hips, property: local_position.y, keys: [[0, 1.0], [1, 1.1]]}

Rotations are (x, y, z, w). Skins without ``bind_poses`` on their mesh get
bind poses computed from the bones' rest transforms.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Union

import numpy as np

from .mesh import Mesh
from .node import Node
from .skin import Skin
from ..anim.clip import AnimationClip
from ..anim.curve import AnimationCurve, InterpolationType
from ..utils.common import load_document

logger = logging.getLogger(__name__)


class SceneFormatError(ValueError):
    """Raised when a scene description is malformed"""


@dataclass
class SceneAsset:
    path: str
    nodes: List[Node] = field(default_factory=list)
    clips: List[AnimationClip] = field(default_factory=list)
    meshes: Dict[str, Mesh] = field(default_factory=dict)


def load_scene(scene_path: Union[str, Path]) -> List[SceneAsset]:
    """Load a scene description file"""
    if not Path(scene_path).is_file():
        raise FileNotFoundError(f"Scene file not found: {scene_path}")
    return parse_scene(load_document(scene_path))


def parse_scene(data: Dict[str, Any]) -> List[SceneAsset]:
    """Build assets from an already parsed scene description"""
    if not isinstance(data, dict) or not isinstance(data.get("assets"), list):
        raise SceneFormatError("Scene description needs an 'assets' list")
    return [_parse_asset(entry) for entry in data["assets"]]


def _parse_asset(entry: Dict[str, Any]) -> SceneAsset:
    if "path" not in entry:
        raise SceneFormatError("Every asset needs a 'path'")
    asset = SceneAsset(path=str(entry["path"]))

    for name, mesh_data in (entry.get("meshes") or {}).items():
        asset.meshes[name] = _parse_mesh(name, mesh_data)

    skins = []
    for node_data in entry.get("nodes") or []:
        root = _parse_node_tree(node_data, asset, skins)
        asset.nodes.extend(root.iter_preorder())

    roots = [node for node in asset.nodes if node.parent is None]
    for node, skin_data in skins:
        node.skin = _parse_skin(skin_data, node, roots, asset)

    for clip_data in entry.get("clips") or []:
        asset.clips.append(_parse_clip(clip_data))

    logger.debug("Loaded asset %s: %d nodes, %d meshes, %d clips",
                 asset.path, len(asset.nodes), len(asset.meshes), len(asset.clips))
    return asset


def _parse_mesh(name: str, data: Dict[str, Any]) -> Mesh:
    mesh = Mesh(name)
    for attribute in Mesh.ATTRIBUTE_WIDTHS:
        if attribute in data and data[attribute] is not None:
            mesh.set_vertex_attribute(attribute, data[attribute])
    if data.get("bind_poses") is not None:
        mesh.set_bind_poses(data["bind_poses"])
    for submesh in data.get("submeshes") or []:
        mesh.add_submesh(submesh.get("indices", []), submesh.get("topology", "triangles"))
    return mesh


def _parse_node_tree(data: Dict[str, Any], asset: SceneAsset, skins: list) -> Node:
    root = None
    # (node data, parent node)
    stack = [(data, None)]
    while stack:
        node_data, parent = stack.pop()
        node = Node(node_data.get("name", ""), parent=parent)
        node.set_transform(node_data.get("position"), node_data.get("rotation"), node_data.get("scale"))
        if node_data.get("mesh") is not None:
            node.mesh = _lookup_mesh(asset, node_data["mesh"])
        if node_data.get("skin") is not None:
            skins.append((node, node_data["skin"]))
        if root is None:
            root = node
        stack.extend((child, node) for child in reversed(node_data.get("children") or []))
    return root


def _lookup_mesh(asset: SceneAsset, name: str) -> Mesh:
    if name not in asset.meshes:
        raise SceneFormatError(f"{asset.path}: unknown mesh '{name}'")
    return asset.meshes[name]


def _parse_skin(data: Dict[str, Any], owner: Node, roots: List[Node], asset: SceneAsset) -> Skin:
    mesh = _lookup_mesh(asset, data["mesh"]) if data.get("mesh") is not None else None
    bones = []
    for bone_name in data.get("bones") or []:
        bone = next((b for b in (r.find_descendant(bone_name) for r in roots) if b is not None), None)
        if bone is None:
            raise SceneFormatError(f"{asset.path}: skin on '{owner.name}' references unknown bone '{bone_name}'")
        bones.append(bone)

    if mesh is not None and bones and len(mesh.bind_poses) == 0:
        # Rest pose: mesh space -> bone space
        owner_to_world = owner.get_world_matrix()
        mesh.set_bind_poses([np.linalg.inv(bone.get_world_matrix()) @ owner_to_world for bone in bones])
    return Skin(mesh, bones)


def _parse_clip(data: Dict[str, Any]) -> AnimationClip:
    if "name" not in data:
        raise SceneFormatError("Every clip needs a 'name'")
    clip = AnimationClip(
        data["name"],
        length=data.get("length", 0.0),
        frame_rate=data.get("frame_rate", 30.0),
        legacy=bool(data.get("legacy", False)),
    )
    if clip.frame_rate <= 0:
        raise SceneFormatError(f"Clip '{clip.name}' needs a positive frame_rate")

    for curve_data in data.get("curves") or []:
        try:
            interpolation = InterpolationType(curve_data.get("interpolation", "linear"))
        except ValueError:
            raise SceneFormatError(
                f"Clip '{clip.name}': unknown interpolation '{curve_data.get('interpolation')}'"
            ) from None
        keys = [(float(t), float(v)) for t, v in curve_data.get("keys") or []]
        clip.add_curve(curve_data.get("path", ""), curve_data["property"], AnimationCurve(keys, interpolation))

    if "length" not in data:
        clip.update_length_from_curves()
    return clip
