from dataclasses import dataclass, field
from typing import List, Optional
import numpy as np

from ..scene.skin import Skin


@dataclass
class BoneBounds:
    """Bone collision volume in bind space (sphere radius plus box)"""
    radius: float
    min: np.ndarray
    max: np.ndarray


@dataclass
class ExportBone:
    """One entry of the model file's bone table"""
    name: str
    parent_index: int = 0
    position: np.ndarray = field(default_factory=lambda: np.zeros(3, dtype=np.float32))
    rotation: np.ndarray = field(default_factory=lambda: np.array([0.0, 0.0, 0.0, 1.0], dtype=np.float32))  # (x, y, z, w)
    scale: np.ndarray = field(default_factory=lambda: np.ones(3, dtype=np.float32))
    bind_matrix: np.ndarray = field(default_factory=lambda: np.eye(4, dtype=np.float32))  # inverse bind pose
    bounds: Optional[BoneBounds] = None

    def bind_matrix_rows(self) -> np.ndarray:
        """First three rows of the 4x4 bind matrix, row-major (12 floats)"""
        return np.asarray(self.bind_matrix, dtype=np.float32)[:3, :].reshape(-1)


def build_bones(skin: Optional[Skin]) -> List[ExportBone]:
    """
    Linearize a skin's bones into the model bone table

    A bone whose parent is not in the skin's bone list gets parent index 0,
    which also applies to the true root bone.

    Args:
        skin: Skinned mesh component, may be None

    Returns:
        Bone table in the skin's bone order
    """
    if skin is None or not skin.bones:
        return []

    bone_nodes = skin.bones
    bind_poses = skin.mesh.bind_poses if skin.mesh is not None else np.zeros((0, 4, 4))
    bones: List[ExportBone] = []
    for index, node in enumerate(bone_nodes):
        parent_index = 0
        for candidate_index, candidate in enumerate(bone_nodes):
            if node.parent is not None and candidate is node.parent:
                parent_index = candidate_index
                break

        bone = ExportBone(
            name=node.name if node.name is not None else f"bone{index}",
            parent_index=parent_index,
            position=np.asarray(node.position, dtype=np.float32).copy(),
            rotation=np.asarray(node.rotation, dtype=np.float32).copy(),
            scale=np.asarray(node.scale, dtype=np.float32).copy(),
        )
        if index < len(bind_poses):
            bone.bind_matrix = np.asarray(bind_poses[index], dtype=np.float32).copy()
        bones.append(bone)

    return bones
