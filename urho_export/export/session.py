"""
Export session: one run over a set of source assets.

The session owns everything that must persist across assets for the duration
of a run: which meshes were already written, the skeleton roots animations are
matched against, and where each mesh/animation ended up on disk.
"""

import logging
import os
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Sequence, Tuple, Union

from .animation_writer import write_animation
from .mesh_writer import write_mesh
from .skeleton_builder import build_bones
from ..anim.clip import AnimationClip
from ..scene.node import Node
from ..utils.binary_writer import BinaryWriter
from ..utils.common import ensure_dir, get_safe_file_name
from ..utils.config import default_config

logger = logging.getLogger(__name__)


@dataclass
class AssetContext:
    """A source asset: its project path and the objects it contains"""
    asset_path: str
    content_folder: Path
    nodes: List[Node] = field(default_factory=list)
    clips: List[AnimationClip] = field(default_factory=list)

    def root_nodes(self) -> List[Node]:
        return [node for node in self.nodes if node.parent is None]


class AssetCollection:
    """Registry of output paths keyed by source object identity"""

    def __init__(self):
        self._mesh_paths: Dict[int, Tuple[object, Path]] = {}
        self._animation_paths: Dict[int, Tuple[object, Path]] = {}

    def add_mesh_path(self, mesh, path: Path) -> None:
        self._mesh_paths[id(mesh)] = (mesh, Path(path))

    def get_mesh_path(self, mesh) -> Optional[Path]:
        entry = self._mesh_paths.get(id(mesh))
        return entry[1] if entry is not None else None

    def add_animation_path(self, clip, path: Path) -> None:
        self._animation_paths[id(clip)] = (clip, Path(path))

    def get_animation_path(self, clip) -> Optional[Path]:
        entry = self._animation_paths.get(id(clip))
        return entry[1] if entry is not None else None

    def __len__(self) -> int:
        return len(self._mesh_paths) + len(self._animation_paths)


class ExportSession:
    """Exports meshes and animations of many assets with shared de-duplication"""

    def __init__(self, cfg: Optional[dict] = None, output_dir: Optional[Union[str, Path]] = None):
        """
        Initialize session

        Args:
            cfg: Export configuration (see utils.config); defaults when None
            output_dir: Overrides cfg['output_dir']
        """
        self.cfg = dict(cfg) if cfg is not None else default_config()
        self.output_dir = Path(output_dir if output_dir is not None else self.cfg["output_dir"])
        self.assets = AssetCollection()
        self.skeletons: List[Node] = []
        self._meshes: Dict[int, object] = {}
        self.written_files: List[Path] = []

    # Path policy
    def content_folder(self, asset_path: str) -> Path:
        """Per-asset output folder: <output_dir>/<asset path without suffix>"""
        relative = Path(asset_path.replace('\\', '/'))
        if relative.name:
            relative = relative.with_suffix('')
        parts = [get_safe_file_name(part) for part in relative.parts if part not in ('/', '..', '.')]
        return self.output_dir.joinpath(*parts)

    def create_context(self, asset_path: str, nodes: Sequence[Node] = (),
                       clips: Sequence[AnimationClip] = ()) -> AssetContext:
        return AssetContext(asset_path, self.content_folder(asset_path), list(nodes), list(clips))

    @contextmanager
    def create_file(self, path: Path) -> Iterator[BinaryWriter]:
        """
        Open ``path`` for writing and yield a BinaryWriter

        When the body raises, the partially written file is removed (unless
        cleanup_partial_files is off) and the exception propagates.
        """
        ensure_dir(path.parent)
        with open(path, "wb") as f:
            try:
                yield BinaryWriter(f)
            except BaseException:
                f.close()
                if self.cfg["cleanup_partial_files"] and path.exists():
                    os.remove(path)
                    logger.debug("Removed partial file %s", path)
                raise
        self.written_files.append(path)

    # Export entry points
    def export_assets(self, contexts: Sequence[AssetContext]) -> List[Tuple[str, BaseException]]:
        """
        Export several assets, isolating failures per asset

        Returns:
            List of (asset path, exception) for assets that failed
        """
        failures = []
        for context in contexts:
            try:
                self.export_asset(context)
            except Exception as e:
                logger.exception("%s: export failed", context.asset_path)
                failures.append((context.asset_path, e))
        return failures

    def export_asset(self, context: AssetContext) -> None:
        """Export every mesh under the asset's root nodes, then its animation clips"""
        for root in context.root_nodes():
            self.export_meshes(context, root)
            self.skeletons.append(root)

        prefix = self.cfg["preview_clip_prefix"]
        for clip in context.clips:
            if clip.name is not None and prefix and clip.name.startswith(prefix):
                continue
            self.export_animation(context, clip)

    def export_meshes(self, context: AssetContext, root: Node) -> None:
        for node in root.iter_preorder():
            skin = node.skin
            mesh = skin.mesh if skin is not None else None
            if mesh is None:
                # A skin without a mesh contributes no bones to the plain mesh
                skin = None
                mesh = node.mesh
            if mesh is None or id(mesh) in self._meshes:
                continue
            self._meshes[id(mesh)] = mesh

            path = context.content_folder / (get_safe_file_name(mesh.name) + self.cfg["mesh_extension"])
            self.assets.add_mesh_path(mesh, path)
            if path.exists():
                logger.info("%s: mesh '%s' already exported to %s", context.asset_path, mesh.name, path)
                continue

            with self.create_file(path) as writer:
                write_mesh(writer, mesh, build_bones(skin),
                           bone_weight_threshold=self.cfg["bone_weight_threshold"],
                           duplicate_second_uv_set=self.cfg["duplicate_second_uv_set"])
            logger.info("%s: wrote mesh %s", context.asset_path, path)

    def export_animation(self, context: AssetContext, clip: AnimationClip) -> None:
        path = context.content_folder / (get_safe_file_name(clip.name) + self.cfg["animation_extension"])
        self.assets.add_animation_path(clip, path)
        if path.exists():
            logger.info("%s: animation '%s' already exported to %s", context.asset_path, clip.name, path)
            return

        with self.create_file(path) as writer:
            write_animation(writer, clip, self.skeletons, context.asset_path, self.cfg)
        logger.info("%s: wrote animation %s", context.asset_path, path)

    def is_mesh_exported(self, mesh) -> bool:
        return id(mesh) in self._meshes
