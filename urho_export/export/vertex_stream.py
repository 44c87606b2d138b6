"""
Vertex attribute streams for the Urho3D model format.

Each stream owns one attribute channel and knows its 32-bit element descriptor
(type in the low byte, semantic in the next byte, semantic index in the third)
and how to write a single vertex. ``interleave`` packs several streams into one
vertex-major buffer producing the same bytes as writing vertex by vertex.
"""

from enum import IntEnum
from typing import List, Sequence

import numpy as np

from ..scene.mesh import Mesh
from ..utils.binary_writer import BinaryWriter


class VertexElementType(IntEnum):
    INT = 0
    FLOAT = 1
    VECTOR2 = 2
    VECTOR3 = 3
    VECTOR4 = 4
    UBYTE4 = 5
    UBYTE4_NORM = 6


class VertexElementSemantic(IntEnum):
    POSITION = 0
    NORMAL = 1
    BINORMAL = 2
    TANGENT = 3
    TEXCOORD = 4
    COLOR = 5
    BLENDWEIGHTS = 6
    BLENDINDICES = 7
    OBJECTINDEX = 8


def element_descriptor(element_type: VertexElementType, semantic: VertexElementSemantic, index: int = 0) -> int:
    return int(element_type) | (int(semantic) << 8) | (int(index) << 16)


class VertexStream:
    """Base class for one vertex attribute channel"""

    element_type = VertexElementType.FLOAT
    components = 1

    def __init__(self, data, semantic: VertexElementSemantic, index: int = 0):
        """
        Args:
            data: Array-like of shape (vertex_count, components)
            semantic: Vertex element semantic
            index: Semantic index (e.g. UV set number)
        """
        self.data = np.asarray(data, dtype=np.float32).reshape(-1, self.components)
        self.semantic = VertexElementSemantic(semantic)
        self.index = index
        self.element = element_descriptor(self.element_type, self.semantic, index)

    def __len__(self) -> int:
        return len(self.data)

    def encoded(self) -> np.ndarray:
        """Per-vertex values exactly as they are stored in the file"""
        return self.data.astype('<f4')

    def write(self, writer: BinaryWriter, index: int) -> None:
        """Write the values of vertex ``index``"""
        writer.write_array(self.encoded()[index])

    def __repr__(self) -> str:
        return (f"{type(self).__name__}(semantic={self.semantic.name}, index={self.index}, "
                f"vertices={len(self)})")


class Vector2Stream(VertexStream):
    element_type = VertexElementType.VECTOR2
    components = 2


class UVStream(Vector2Stream):
    """Texture coordinates with V flipped to the engine's top-left origin"""

    def encoded(self) -> np.ndarray:
        uv = self.data.astype('<f4')
        uv[:, 1] = np.float32(1.0) - uv[:, 1]
        return uv


class Vector3Stream(VertexStream):
    element_type = VertexElementType.VECTOR3
    components = 3


class Vector4Stream(VertexStream):
    element_type = VertexElementType.VECTOR4
    components = 4


class UByte4Stream(VertexStream):
    """Four unsigned bytes; float sources are truncated toward zero, not rounded"""

    element_type = VertexElementType.UBYTE4
    components = 4

    def encoded(self) -> np.ndarray:
        return (np.trunc(self.data).astype(np.int64) & 0xFF).astype(np.uint8)


def interleave(streams: Sequence[VertexStream], vertex_count: int) -> bytes:
    """
    Pack streams into one vertex-major buffer

    Args:
        streams: Streams in declaration order
        vertex_count: Number of vertices to write

    Returns:
        Raw interleaved vertex data
    """
    if not streams:
        return b""
    dtype = np.dtype([
        (f"e{i}", stream.encoded().dtype, (stream.components,))
        for i, stream in enumerate(streams)
    ])
    buffer = np.zeros(vertex_count, dtype=dtype)
    for i, stream in enumerate(streams):
        buffer[f"e{i}"] = stream.encoded()[:vertex_count]
    return buffer.tobytes()


def build_vertex_streams(mesh: Mesh, duplicate_second_uv_set: bool = True) -> List[VertexStream]:
    """
    Declare the vertex streams of a mesh in file order

    Order: position, normal, blend weights + blend indices, tangent, uv0..uv3.
    Missing or empty attributes are skipped.

    Args:
        mesh: Source mesh
        duplicate_second_uv_set: Emit uv2 and uv3 from the uv1 data;
            False uses each set's own data

    Returns:
        List of VertexStream
    """
    streams: List[VertexStream] = []
    if mesh.has_vertex_attribute(Mesh.POSITION):
        streams.append(Vector3Stream(mesh.get_vertex_attribute(Mesh.POSITION), VertexElementSemantic.POSITION))
    if mesh.has_vertex_attribute(Mesh.NORMAL):
        streams.append(Vector3Stream(mesh.get_vertex_attribute(Mesh.NORMAL), VertexElementSemantic.NORMAL))
    if mesh.has_vertex_attribute(Mesh.BLEND_WEIGHTS):
        weights = mesh.get_vertex_attribute(Mesh.BLEND_WEIGHTS)
        indices = mesh.get_vertex_attribute(Mesh.BLEND_INDICES)
        if indices is None or len(indices) != len(weights):
            raise ValueError(f"Mesh '{mesh.name}' has blend weights without matching blend indices")
        streams.append(Vector4Stream(weights, VertexElementSemantic.BLENDWEIGHTS))
        streams.append(UByte4Stream(indices.astype(np.float32), VertexElementSemantic.BLENDINDICES))
    if mesh.has_vertex_attribute(Mesh.TANGENT):
        streams.append(Vector4Stream(mesh.get_vertex_attribute(Mesh.TANGENT), VertexElementSemantic.TANGENT, 0))

    for uv_index, name in enumerate(Mesh.UV_LAYERS):
        if not mesh.has_vertex_attribute(name):
            continue
        source = name
        if duplicate_second_uv_set and uv_index >= 2:
            source = Mesh.UV1
        data = mesh.get_vertex_attribute(source)
        if data is None or len(data) == 0:
            raise ValueError(f"Mesh '{mesh.name}' has {name} but no {source} data to write it from")
        streams.append(UVStream(data, VertexElementSemantic.TEXCOORD, uv_index))

    vertex_count = mesh.get_vertex_count()
    for stream in streams:
        if len(stream) != vertex_count:
            raise ValueError(
                f"Mesh '{mesh.name}': {stream.semantic.name} stream has {len(stream)} values, "
                f"expected {vertex_count}"
            )
    return streams
