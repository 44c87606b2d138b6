from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple
import numpy as np

from .curve import AnimationCurve
from ..scene.node import Node
from ..utils.common import quaternion_normalize


# Transform properties an animation track can carry, in engine channel order
ANIMATION_PROPERTIES = (
    "local_position.x",
    "local_position.y",
    "local_position.z",
    "local_rotation.w",
    "local_rotation.x",
    "local_rotation.y",
    "local_rotation.z",
    "local_scale.x",
    "local_scale.y",
    "local_scale.z",
)

# property -> (node attribute, component index in the stored array)
_PROPERTY_TARGETS: Dict[str, Tuple[str, int]] = {
    "local_position.x": ("position", 0),
    "local_position.y": ("position", 1),
    "local_position.z": ("position", 2),
    "local_rotation.x": ("rotation", 0),
    "local_rotation.y": ("rotation", 1),
    "local_rotation.z": ("rotation", 2),
    "local_rotation.w": ("rotation", 3),
    "local_scale.x": ("scale", 0),
    "local_scale.y": ("scale", 1),
    "local_scale.z": ("scale", 2),
}


@dataclass
class CurveBinding:
    """Binds a curve to one property of the node at ``path``"""
    path: str
    property_name: str
    curve: AnimationCurve

    @property
    def root_name(self) -> Optional[str]:
        """First path segment, or None for an empty path"""
        if not self.path:
            return None
        return self.path.split('/', 1)[0]

    @property
    def short_name(self) -> str:
        """Path tail after the last separator"""
        return self.path[self.path.rfind('/') + 1:]


class AnimationClip:
    """Animation clip made of curve bindings"""

    def __init__(self, name: str, length: float = 0.0, frame_rate: float = 30.0, legacy: bool = False):
        """
        Initialize animation clip

        Args:
            name: Clip name
            length: Clip length in seconds
            frame_rate: Sampling rate in frames per second
            legacy: Whether the clip is evaluated by direct curve sampling
        """
        self.name = name
        self.length = float(length)
        self.frame_rate = float(frame_rate)
        self.legacy = legacy
        self._bindings: List[CurveBinding] = []

    def add_curve(self, path: str, property_name: str, curve: AnimationCurve) -> CurveBinding:
        """
        Bind a curve to a node property

        Args:
            path: Node path relative to the animated root ('' for the root)
            property_name: Property, e.g. 'local_position.x'
            curve: Curve to evaluate

        Returns:
            The new CurveBinding
        """
        binding = CurveBinding(path, property_name, curve)
        self._bindings.append(binding)
        return binding

    def get_curve_bindings(self) -> List[CurveBinding]:
        return list(self._bindings)

    def get_binding_count(self) -> int:
        return len(self._bindings)

    def calculate_length(self) -> float:
        """Maximum end time across all curves"""
        return max((b.curve.get_time_range()[1] for b in self._bindings), default=0.0)

    def update_length_from_curves(self) -> None:
        self.length = self.calculate_length()

    def sample_animation(self, root: Node, time: float) -> None:
        """
        Write every bound property's value at ``time`` into the hierarchy under ``root``

        Paths are resolved relative to ``root``; a path whose first segment is
        the root's own name is resolved from the root itself. Bindings whose
        node or property cannot be found are ignored.

        Args:
            root: Animated hierarchy root
            time: Absolute time in seconds
        """
        rotated = []
        for binding in self._bindings:
            target = _PROPERTY_TARGETS.get(binding.property_name)
            if target is None:
                continue
            node = _resolve(root, binding.path)
            if node is None:
                continue
            attribute, component = target
            values = getattr(node, attribute)
            values[component] = binding.curve.evaluate(time)
            if attribute == "rotation" and node not in rotated:
                rotated.append(node)
        for node in rotated:
            node.rotation = quaternion_normalize(node.rotation)

    def __repr__(self) -> str:
        return (f"AnimationClip(name='{self.name}', length={self.length}s, "
                f"frame_rate={self.frame_rate}, legacy={self.legacy}, bindings={len(self._bindings)})")


def _resolve(root: Node, path: str) -> Optional[Node]:
    node = root.find_path(path)
    if node is None and path:
        head, _, rest = path.partition('/')
        if head == root.name:
            node = root.find_path(rest)
    return node


def frame_timing(length: float, frame_rate: float) -> Tuple[np.float32, int]:
    """
    Fixed sampling grid shared by both track encodings

    Args:
        length: Clip length in seconds
        frame_rate: Frames per second

    Returns:
        Tuple of (float32 time step, number of frames)
    """
    time_step = np.float32(1.0) / np.float32(frame_rate)
    frame_count = 1 + int(np.float32(length) * np.float32(frame_rate))
    return time_step, frame_count


def frame_time(frame: int, time_step: np.float32) -> np.float32:
    return np.float32(frame) * time_step
