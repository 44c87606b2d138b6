"""
Pose samplers used by skeletal animation export.

A sampler drives a hierarchy to the pose an animation clip describes at a given
time. Two strategies share the ``sample(time)`` / ``dispose()`` contract:

- LegacySampler evaluates the clip directly against the hierarchy.
- GraphSampler builds a temporary single-clip playback graph asset, plays it at
  a normalized time and deletes the asset on disposal.
"""

import logging
import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional, Union

from .clip import AnimationClip
from ..scene.node import Node
from ..utils.common import ensure_dir, load_yaml, save_yaml

logger = logging.getLogger(__name__)

TEMP_GRAPH_FILE_NAME = "TempController.controller"


class PoseSampler(ABC):
    """Updates node transforms in place for a clip at a given time"""

    def __init__(self, root: Node, clip: AnimationClip):
        self.root = root
        self.clip = clip

    @abstractmethod
    def sample(self, time: float) -> None:
        """Pose the hierarchy under ``root`` at absolute ``time`` (seconds)."""

    def dispose(self) -> None:
        """Release resources held by the sampler."""

    def __enter__(self) -> 'PoseSampler':
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.dispose()


class LegacySampler(PoseSampler):
    """Direct clip evaluation at an absolute time"""

    def sample(self, time: float) -> None:
        self.clip.sample_animation(self.root, time)


class PlaybackGraph:
    """Single-state playback graph persisted as a small YAML asset"""

    def __init__(self, asset_path: Path, clip: AnimationClip, min_length: float):
        self.asset_path = Path(asset_path)
        self.clip = clip
        self.length = max(clip.length, min_length)
        self.ik_pass = True

    @classmethod
    def create_with_clip(cls, asset_path: Union[str, Path], clip: AnimationClip,
                         min_length: float = 1e-6) -> 'PlaybackGraph':
        """Create the graph and write its asset file"""
        graph = cls(Path(asset_path), clip, min_length)
        ensure_dir(graph.asset_path.parent)
        save_yaml({
            "layers": [{
                "name": "Base Layer",
                "ik_pass": graph.ik_pass,
                "states": [{"name": clip.name, "motion": clip.name, "length": graph.length}],
            }],
        }, graph.asset_path)
        logger.debug("Created playback graph asset %s", graph.asset_path)
        return graph

    def state_name(self) -> str:
        data = load_yaml(self.asset_path)
        return data["layers"][0]["states"][0]["name"]

    def play(self, root: Node, state_name: str, normalized_time: float) -> None:
        """Evaluate ``state_name`` at ``normalized_time`` (fraction of the clip length)"""
        if state_name != self.clip.name:
            raise KeyError(f"Playback graph has no state '{state_name}'")
        self.clip.sample_animation(root, normalized_time * self.length)

    def delete(self) -> None:
        if self.asset_path.exists():
            os.remove(self.asset_path)
            logger.debug("Deleted playback graph asset %s", self.asset_path)


class GraphSampler(PoseSampler):
    """Indirect evaluation through a temporary playback graph"""

    def __init__(self, root: Node, clip: AnimationClip, temp_dir: Union[str, Path],
                 min_length: float = 1e-6):
        super().__init__(root, clip)
        self.graph: Optional[PlaybackGraph] = PlaybackGraph.create_with_clip(
            Path(temp_dir) / TEMP_GRAPH_FILE_NAME, clip, min_length
        )
        self.length = self.graph.length
        try:
            self.state = self.graph.state_name()
        except Exception:
            self.dispose()
            raise

    def sample(self, time: float) -> None:
        if self.graph is None:
            raise RuntimeError("Sampler has already been disposed")
        self.graph.play(self.root, self.state, time / self.length)

    def dispose(self) -> None:
        if self.graph is not None:
            self.graph.delete()
            self.graph = None


def create_sampler(root: Node, clip: AnimationClip, cfg: dict) -> PoseSampler:
    """
    Pick the sampling strategy for a clip

    Args:
        root: Root of the hierarchy to pose
        clip: Clip to sample
        cfg: Export configuration (temp_graph_dir, min_clip_length)

    Returns:
        LegacySampler for legacy clips, GraphSampler otherwise
    """
    if clip.legacy:
        return LegacySampler(root, clip)
    return GraphSampler(root, clip, cfg["temp_graph_dir"], cfg["min_clip_length"])
