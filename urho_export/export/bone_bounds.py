"""Per-bone bounding volumes from the vertices each bone influences."""

from typing import List, Optional

import numpy as np

from .skeleton_builder import BoneBounds, ExportBone

# Minimum weight for a vertex to count as influenced by a bone
BONE_WEIGHT_THRESHOLD = 0.01

# Bounding kind written for every bone: sphere and box present
BONE_BOUNDING_SPHERE = 0x01
BONE_BOUNDING_BOX = 0x02
BONE_BOUNDING_KIND = BONE_BOUNDING_SPHERE | BONE_BOUNDING_BOX

FALLBACK_RADIUS = 0.1


def fallback_bounds() -> BoneBounds:
    return BoneBounds(
        radius=float(np.float32(FALLBACK_RADIUS)),
        min=np.full(3, -FALLBACK_RADIUS, dtype=np.float32),
        max=np.full(3, FALLBACK_RADIUS, dtype=np.float32),
    )


def get_bone_vertices(blend_weights: Optional[np.ndarray], blend_indices: Optional[np.ndarray],
                      bone_index: int, threshold: float = BONE_WEIGHT_THRESHOLD) -> np.ndarray:
    """
    Indices of vertices where any of the four slots references ``bone_index``
    with a weight of at least ``threshold``

    Args:
        blend_weights: (N, 4) weights, or None
        blend_indices: (N, 4) bone indices, or None
        bone_index: Bone to select
        threshold: Minimum weight

    Returns:
        Sorted vertex indices
    """
    if blend_weights is None or blend_indices is None or len(blend_weights) == 0:
        return np.zeros(0, dtype=np.int64)
    weights = np.asarray(blend_weights, dtype=np.float32)
    indices = np.asarray(blend_indices)
    used = np.any((indices == bone_index) & (weights >= np.float32(threshold)), axis=1)
    return np.nonzero(used)[0]


def multiply_point(matrix: np.ndarray, points: np.ndarray) -> np.ndarray:
    """Transform (N, 3) points by a 4x4 matrix, including the homogeneous divide"""
    matrix = np.asarray(matrix, dtype=np.float32)
    points = np.asarray(points, dtype=np.float32)
    transformed = points @ matrix[:3, :3].T + matrix[:3, 3]
    w = points @ matrix[3, :3] + matrix[3, 3]
    return (transformed / w[:, None]).astype(np.float32)


def compute_bone_bounds(bone: ExportBone, positions: np.ndarray, blend_weights: Optional[np.ndarray],
                        blend_indices: Optional[np.ndarray], bone_index: int,
                        threshold: float = BONE_WEIGHT_THRESHOLD) -> BoneBounds:
    """
    Bind-space bounds of the vertices a bone influences

    The radius is the larger distance of the box corners ``min`` and ``max``
    from the bind-space origin, not the box diagonal.
    """
    selected = get_bone_vertices(blend_weights, blend_indices, bone_index, threshold)
    if len(selected) == 0:
        return fallback_bounds()

    points = multiply_point(bone.bind_matrix, np.asarray(positions, dtype=np.float32)[selected])
    box_min = points.min(axis=0)
    box_max = points.max(axis=0)
    radius = max(np.linalg.norm(box_max), np.linalg.norm(box_min))
    return BoneBounds(radius=float(np.float32(radius)), min=box_min, max=box_max)


def compute_all_bone_bounds(bones: List[ExportBone], positions: np.ndarray, blend_weights: Optional[np.ndarray],
                            blend_indices: Optional[np.ndarray], threshold: float = BONE_WEIGHT_THRESHOLD) -> None:
    """Fill ``bounds`` of every bone in place"""
    for bone_index, bone in enumerate(bones):
        bone.bounds = compute_bone_bounds(bone, positions, blend_weights, blend_indices, bone_index, threshold)
