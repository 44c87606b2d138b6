"""
Urho3D model (.mdl) writer.

Layout: magic, vertex buffers (always one, interleaved), index buffers (always
one, shared by all submeshes), submesh table, morph targets (none), bone table
and the mesh bounding box.
"""

import logging
from typing import List, Optional, Tuple

import numpy as np

from .bone_bounds import BONE_BOUNDING_KIND, BONE_WEIGHT_THRESHOLD, compute_all_bone_bounds
from .skeleton_builder import ExportBone
from .vertex_stream import build_vertex_streams, interleave
from ..scene.mesh import Mesh
from ..utils.binary_writer import BinaryWriter

logger = logging.getLogger(__name__)

MESH_MAGIC = 0x32444D55  # "UMD2"
VERTEX_BUFFER_COUNT = 1
INDEX_BUFFER_COUNT = 1

# Vertex counts at or above this need 32-bit indices
MAX_16BIT_VERTEX_COUNT = 65536
INDEX_SIZE_16 = 2
INDEX_SIZE_32 = 4

PRIMITIVE_TYPES = {
    'triangles': 0,
    'lines': 1,
    'points': 2,
    'triangle_strip': 3,
    'line_strip': 4,
    'triangle_fan': 5,
}

FLOAT32_MAX = float(np.finfo(np.float32).max)


def primitive_type(topology: str) -> int:
    try:
        return PRIMITIVE_TYPES[topology]
    except KeyError:
        raise ValueError(f"Submesh topology '{topology}' cannot be encoded") from None


def index_size_for(vertex_count: int) -> int:
    return INDEX_SIZE_16 if vertex_count < MAX_16BIT_VERTEX_COUNT else INDEX_SIZE_32


def mesh_bounds(positions: Optional[np.ndarray]) -> Tuple[np.ndarray, np.ndarray]:
    """
    Axis-aligned box over the raw positions

    Returns:
        Tuple of (min, max); with no vertices min is +FLT_MAX and max is -FLT_MAX
    """
    if positions is None or len(positions) == 0:
        return (np.full(3, FLOAT32_MAX, dtype=np.float32),
                np.full(3, -FLOAT32_MAX, dtype=np.float32))
    positions = np.asarray(positions, dtype=np.float32)
    return positions.min(axis=0), positions.max(axis=0)


def write_mesh(writer: BinaryWriter, mesh: Mesh, bones: List[ExportBone],
               bone_weight_threshold: float = BONE_WEIGHT_THRESHOLD,
               duplicate_second_uv_set: bool = True) -> None:
    """
    Serialize a mesh and its bone table

    Args:
        writer: Destination writer
        mesh: Mesh to write
        bones: Bone table from build_bones (may be empty)
        bone_weight_threshold: Minimum weight for a vertex to grow a bone's bounds
        duplicate_second_uv_set: See build_vertex_streams
    """
    positions = mesh.get_vertex_attribute(Mesh.POSITION)
    vertex_count = mesh.get_vertex_count()

    writer.write_uint(MESH_MAGIC)
    writer.write_int(VERTEX_BUFFER_COUNT)

    # Vertex buffer
    streams = build_vertex_streams(mesh, duplicate_second_uv_set)
    writer.write_int(vertex_count)
    writer.write_int(len(streams))
    for stream in streams:
        writer.write_uint(stream.element)
    # Morphable vertex range: start, count
    writer.write_int(0)
    writer.write_int(0)
    writer.write_bytes(interleave(streams, vertex_count))

    # Index buffer
    index_size = index_size_for(vertex_count)
    all_indices = [submesh.indices for submesh in mesh.submeshes]
    total_indices = sum(len(indices) for indices in all_indices)
    writer.write_int(INDEX_BUFFER_COUNT)
    writer.write_int(total_indices)
    writer.write_int(index_size)
    index_dtype = '<u2' if index_size == INDEX_SIZE_16 else '<u4'
    for indices in all_indices:
        writer.write_array(np.asarray(indices, dtype=np.int64).astype(index_dtype))

    # Submeshes: one LOD each, drawing a range of the shared index buffer
    writer.write_int(len(mesh.submeshes))
    index_start = 0
    for submesh in mesh.submeshes:
        writer.write_int(0)  # bone mapping entries
        writer.write_int(1)  # LOD levels
        writer.write_float(0.0)  # LOD distance
        writer.write_int(primitive_type(submesh.topology))
        writer.write_int(0)  # vertex buffer index
        writer.write_int(0)  # index buffer index
        writer.write_int(index_start)
        writer.write_int(submesh.index_count)
        index_start += submesh.index_count

    # Morph targets
    writer.write_int(0)

    # Bones
    if bones:
        compute_all_bone_bounds(
            bones,
            positions if positions is not None else np.zeros((0, 3), dtype=np.float32),
            mesh.get_vertex_attribute(Mesh.BLEND_WEIGHTS),
            mesh.get_vertex_attribute(Mesh.BLEND_INDICES),
            bone_weight_threshold,
        )
    writer.write_int(len(bones))
    for bone in bones:
        writer.write_string_sz(bone.name)
        writer.write_int(bone.parent_index)
        writer.write_vector3(bone.position)
        writer.write_quaternion(bone.rotation)
        writer.write_vector3(bone.scale)
        writer.write_floats(bone.bind_matrix_rows())
        writer.write_byte(BONE_BOUNDING_KIND)
        writer.write_float(bone.bounds.radius)
        writer.write_vector3(bone.bounds.min)
        writer.write_vector3(bone.bounds.max)

    # Bounding box
    box_min, box_max = mesh_bounds(positions)
    writer.write_vector3(box_min)
    writer.write_vector3(box_max)

    logger.debug("Wrote mesh '%s': %d vertices, %d elements, %d indices, %d submeshes, %d bones",
                 mesh.name, vertex_count, len(streams), total_indices, len(mesh.submeshes), len(bones))
