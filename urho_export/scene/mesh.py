from typing import List, Optional, Dict
from dataclasses import dataclass, field
import numpy as np


@dataclass
class Submesh:
    """Index range of a mesh drawn with one primitive topology"""
    indices: np.ndarray
    topology: str = 'triangles'

    def __post_init__(self):
        self.indices = np.asarray(self.indices, dtype=np.int64).reshape(-1)

    @property
    def index_count(self) -> int:
        return len(self.indices)


class Mesh:
    """Mesh class for storing geometry, submeshes and bind poses"""

    POSITION = 'position'
    NORMAL = 'normal'
    UV0 = 'uv0'
    UV1 = 'uv1'
    UV2 = 'uv2'
    UV3 = 'uv3'
    TANGENT = 'tangent'
    BLEND_INDICES = 'blend_indices'
    BLEND_WEIGHTS = 'blend_weights'

    UV_LAYERS = (UV0, UV1, UV2, UV3)
    ATTRIBUTE_WIDTHS = {
        POSITION: 3,
        NORMAL: 3,
        UV0: 2,
        UV1: 2,
        UV2: 2,
        UV3: 2,
        TANGENT: 4,
        BLEND_INDICES: 4,
        BLEND_WEIGHTS: 4,
    }

    def __init__(self, name: str = ""):
        """
        Initialize mesh

        Args:
            name: Mesh name
        """
        self.name = name
        self._vertices: Dict[str, np.ndarray] = {}  # eg: {'position': np.ndarray, 'normal': np.ndarray, ...}
        self.submeshes: List[Submesh] = []
        self.bind_poses: np.ndarray = np.zeros((0, 4, 4), dtype=np.float32)  # Inverse bind matrices, one per bone

    # Vertex attribute management
    def set_vertex_attribute(self, name: str, data) -> None:
        """Set vertex attribute data

        Args:
            name: Attribute name (one of the class constants)
            data: Array-like of shape (vertex_count, width)
        """
        if name not in Mesh.ATTRIBUTE_WIDTHS:
            raise ValueError(f"Unknown vertex attribute '{name}'")
        dtype = np.int64 if name == Mesh.BLEND_INDICES else np.float32
        array = np.asarray(data, dtype=dtype)
        self._vertices[name] = array.reshape(-1, Mesh.ATTRIBUTE_WIDTHS[name])

    def get_vertex_attribute(self, name: str) -> Optional[np.ndarray]:
        """Get vertex attribute data

        Args:
            name: Attribute name

        Returns:
            Numpy array or None if attribute doesn't exist
        """
        return self._vertices.get(name)

    def has_vertex_attribute(self, name: str) -> bool:
        """Check if a vertex attribute exists and is not empty"""
        data = self._vertices.get(name)
        return data is not None and len(data) > 0

    def get_vertex_attribute_names(self) -> List[str]:
        return list(self._vertices.keys())

    def has_skinning_data(self) -> bool:
        """Check if mesh has skinning data

        Returns:
            True if bone weights and indices are set
        """
        return self.has_vertex_attribute(Mesh.BLEND_WEIGHTS) and self.has_vertex_attribute(Mesh.BLEND_INDICES)

    def get_vertex_count(self) -> int:
        """Get number of vertices (0 if positions are not set)"""
        position = self._vertices.get(Mesh.POSITION)
        return len(position) if position is not None else 0

    # Submesh management
    def add_submesh(self, indices, topology: str = 'triangles') -> Submesh:
        """
        Append a submesh

        Args:
            indices: Flat index list into this mesh's vertices
            topology: 'triangles', 'lines', 'line_strip', 'points' or 'quads'

        Returns:
            The new Submesh
        """
        submesh = Submesh(indices, topology)
        self.submeshes.append(submesh)
        return submesh

    def get_submesh_count(self) -> int:
        return len(self.submeshes)

    def get_index_count(self) -> int:
        return sum(submesh.index_count for submesh in self.submeshes)

    def set_bind_poses(self, matrices) -> None:
        """Set inverse bind matrices, one 4x4 per skin bone"""
        self.bind_poses = np.asarray(matrices, dtype=np.float32).reshape(-1, 4, 4)

    def __repr__(self) -> str:
        return f"Mesh(name='{self.name}', vertices={self.get_vertex_count()}, submeshes={len(self.submeshes)})"
