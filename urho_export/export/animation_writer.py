"""
Urho3D animation (.ani) writer.

Two track encodings, never mixed in one file:

- curve tracks: the clip's own transform curves evaluated on a fixed grid, one
  track per animated path with a per-track channel mask;
- skeletal tracks: a scratch copy of the matching skeleton is posed by a
  PoseSampler at every frame and each copied node's local transform recorded.
"""

import logging
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

import numpy as np

from ..anim.clip import ANIMATION_PROPERTIES, AnimationClip, CurveBinding, frame_time, frame_timing
from ..anim.sampler import create_sampler
from ..scene.node import Node
from ..utils.binary_writer import BinaryWriter
from ..utils.common import quaternion_normalize
from ..utils.config import DEFAULTS

logger = logging.getLogger(__name__)

ANIMATION_MAGIC = b"UANI"

TRACK_POSITION = 0x01
TRACK_ROTATION = 0x02
TRACK_SCALE = 0x04
TRACK_ALL = TRACK_POSITION | TRACK_ROTATION | TRACK_SCALE

_POSITION = slice(0, 3)
_ROTATION = slice(3, 7)
_SCALE = slice(7, 10)


@dataclass
class BoneTrack:
    """Samples recorded for one node of the scratch skeleton"""
    node: Node
    keys: List[float] = field(default_factory=list)
    translation: List[np.ndarray] = field(default_factory=list)
    rotation: List[np.ndarray] = field(default_factory=list)
    scale: List[np.ndarray] = field(default_factory=list)

    def sample(self, time: float) -> None:
        self.keys.append(time)
        self.translation.append(self.node.position.copy())
        self.rotation.append(self.node.rotation.copy())
        self.scale.append(self.node.scale.copy())


def get_root_bone_names(clip: AnimationClip) -> List[str]:
    """Distinct first path segments of the clip's bindings, in first-seen order"""
    names = OrderedDict()
    for binding in clip.get_curve_bindings():
        root_name = binding.root_name
        if root_name is not None:
            names[root_name] = None
    return list(names)


def find_root_bone_nodes(skeletons: Sequence[Node], root_bone_name: str) -> List[Node]:
    """
    Nodes matching a root bone name among known skeleton roots

    A skeleton root matches when it is named ``root_bone_name`` itself or has a
    direct child with that name.
    """
    matches = []
    for skeleton in skeletons:
        node = skeleton if skeleton.name == root_bone_name else skeleton.find(root_bone_name)
        if node is not None:
            matches.append(node)
    return matches


def write_animation(writer: BinaryWriter, clip: AnimationClip, skeletons: Sequence[Node],
                    asset_path: str = "", cfg: Optional[dict] = None) -> None:
    """
    Serialize an animation clip

    Legacy clips always use curve tracks. Other clips use skeletal tracks when
    exactly one root bone name is found and exactly one known skeleton matches
    it; anything else falls back to curve tracks with a warning.

    Args:
        writer: Destination writer
        clip: Clip to export
        skeletons: Known skeleton roots of the export session
        asset_path: Source asset path, used in diagnostics
        cfg: Export configuration (defaults when None)
    """
    cfg = cfg if cfg is not None else DEFAULTS

    writer.write_bytes(ANIMATION_MAGIC)
    writer.write_string_sz(clip.name)
    writer.write_float(clip.length)

    if clip.legacy:
        write_curve_tracks(writer, clip)
        return

    root_bones = get_root_bone_names(clip)
    if len(root_bones) != 1:
        logger.warning("%s: Multiple root bones found (%s), falling back to curve export",
                       asset_path, ", ".join(root_bones))
        write_curve_tracks(writer, clip)
        return

    root_nodes = find_root_bone_nodes(skeletons, root_bones[0])
    if len(root_nodes) != 1:
        logger.warning("%s: %d game objects found that match root bone name '%s', falling back to curve export",
                       asset_path, len(root_nodes), root_bones[0])
        write_curve_tracks(writer, clip)
        return

    write_skeletal_tracks(writer, clip, root_nodes[0], cfg)


def group_bindings(clip: AnimationClip) -> "OrderedDict[str, List[CurveBinding]]":
    """
    Recognized transform bindings grouped by path, shallowest path first

    Groups keep first-appearance order among paths of equal length.
    """
    groups: "OrderedDict[str, List[CurveBinding]]" = OrderedDict()
    for binding in clip.get_curve_bindings():
        if binding.property_name in ANIMATION_PROPERTIES:
            groups.setdefault(binding.path, []).append(binding)
    return OrderedDict(sorted(groups.items(), key=lambda item: len(item[0])))


def channel_mask(curves: Sequence[Optional[object]]) -> int:
    mask = 0
    if any(c is not None for c in curves[_POSITION]):
        mask |= TRACK_POSITION
    if any(c is not None for c in curves[_ROTATION]):
        mask |= TRACK_ROTATION
    if any(c is not None for c in curves[_SCALE]):
        mask |= TRACK_SCALE
    return mask


def _evaluate(curves, time, defaults) -> np.ndarray:
    return np.array([
        curve.evaluate(time) if curve is not None else default
        for curve, default in zip(curves, defaults)
    ], dtype=np.float32)


def write_curve_tracks(writer: BinaryWriter, clip: AnimationClip) -> None:
    """Write one track per animated path from direct curve evaluation"""
    groups = group_bindings(clip)
    time_step, frame_count = frame_timing(clip.length, clip.frame_rate)

    writer.write_uint(len(groups))
    for path, bindings in groups.items():
        writer.write_string_sz(bindings[0].short_name)

        curves = []
        for property_name in ANIMATION_PROPERTIES:
            binding = next((b for b in bindings if b.property_name == property_name), None)
            curves.append(binding.curve if binding is not None else None)

        mask = channel_mask(curves)
        writer.write_byte(mask)
        writer.write_int(frame_count)
        for frame in range(frame_count):
            t = frame_time(frame, time_step)
            writer.write_float(t)
            if mask & TRACK_POSITION:
                writer.write_vector3(_evaluate(curves[_POSITION], t, (0.0, 0.0, 0.0)))
            if mask & TRACK_ROTATION:
                w, x, y, z = _evaluate(curves[_ROTATION], t, (1.0, 0.0, 0.0, 0.0))
                writer.write_quaternion(quaternion_normalize(np.array([x, y, z, w], dtype=np.float32)))
            if mask & TRACK_SCALE:
                writer.write_vector3(_evaluate(curves[_SCALE], t, (1.0, 1.0, 1.0)))

        logger.debug("Curve track '%s': mask %d, %d frames", path, mask, frame_count)


def write_skeletal_tracks(writer: BinaryWriter, clip: AnimationClip, root: Node, cfg: dict) -> None:
    """Sample a scratch copy of ``root``'s hierarchy and write one track per node"""
    clones, by_name = root.clone_tree()
    try:
        missing = sorted({
            binding.short_name for binding in clip.get_curve_bindings()
            if binding.path and binding.property_name in ANIMATION_PROPERTIES
            and binding.short_name not in by_name
        })
        if missing:
            logger.warning("Clip '%s' animates nodes missing from skeleton '%s': %s",
                           clip.name, root.name, ", ".join(missing))

        tracks = [BoneTrack(node) for node in clones]
        time_step, frame_count = frame_timing(clip.length, clip.frame_rate)
        with create_sampler(clones[0], clip, cfg) as sampler:
            for frame in range(frame_count):
                t = frame_time(frame, time_step)
                sampler.sample(float(t))
                for track in tracks:
                    track.sample(t)

        writer.write_int(len(tracks))
        for track in tracks:
            writer.write_string_sz(track.node.name or "")
            writer.write_byte(TRACK_ALL)
            writer.write_int(len(track.keys))
            for key, translation, rotation, scale in zip(track.keys, track.translation, track.rotation, track.scale):
                writer.write_float(key)
                writer.write_vector3(translation)
                writer.write_quaternion(rotation)
                writer.write_vector3(scale)
    finally:
        clones[0].destroy()
