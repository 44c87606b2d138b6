from .vertex_stream import (
    VertexElementType,
    VertexElementSemantic,
    VertexStream,
    build_vertex_streams,
    interleave,
)
from .skeleton_builder import BoneBounds, ExportBone, build_bones
from .bone_bounds import compute_bone_bounds, get_bone_vertices
from .mesh_writer import MESH_MAGIC, write_mesh
from .animation_writer import ANIMATION_MAGIC, write_animation
from .session import AssetCollection, AssetContext, ExportSession
