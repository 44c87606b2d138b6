from typing import List, Optional

from .mesh import Mesh
from .node import Node


class Skin:
    """Skinned mesh component: a shared mesh plus the bone nodes it is bound to"""

    def __init__(self, mesh: Optional[Mesh], bones: Optional[List[Node]] = None):
        self.mesh = mesh
        # Order matches the mesh's bind poses and blend indices
        self.bones: List[Node] = list(bones) if bones else []

    def get_bone_count(self) -> int:
        return len(self.bones)

    def __repr__(self) -> str:
        mesh_name = self.mesh.name if self.mesh is not None else None
        return f"Skin(mesh='{mesh_name}', bones={len(self.bones)})"
