from typing import Dict, Iterator, List, Optional, Tuple, TYPE_CHECKING
import numpy as np

if TYPE_CHECKING:
    from .mesh import Mesh
    from .skin import Skin


class Node:
    """Transform node of the host scene hierarchy"""

    def __init__(self, name: Optional[str] = "", parent: Optional['Node'] = None):
        """
        Initialize node

        Args:
            name: Node name
            parent: Optional parent node; the node is appended to its children
        """
        self.name = name

        # Local transform data
        self.position: np.ndarray = np.array([0.0, 0.0, 0.0], dtype=np.float32)  # Translation vector
        self.rotation: np.ndarray = np.array([0.0, 0.0, 0.0, 1.0], dtype=np.float32)  # Quaternion (x, y, z, w)
        self.scale: np.ndarray = np.array([1.0, 1.0, 1.0], dtype=np.float32)  # Scale vector

        # Components
        self.mesh: Optional['Mesh'] = None
        self.skin: Optional['Skin'] = None

        # Hierarchy
        self._parent: Optional['Node'] = None
        self.children: List['Node'] = []
        self.destroyed = False
        if parent is not None:
            self.set_parent(parent)

    @property
    def parent(self) -> Optional['Node']:
        """Get parent node reference"""
        return self._parent

    def set_parent(self, parent: Optional['Node']) -> None:
        """
        Re-parent this node, keeping its local transform

        Args:
            parent: New parent, or None to detach
        """
        if self._parent is not None:
            self._parent.children.remove(self)
        self._parent = parent
        if parent is not None:
            parent.children.append(self)

    def set_transform(self, position=None, rotation=None, scale=None) -> None:
        """Set any of the local position, rotation (x, y, z, w) and scale"""
        if position is not None:
            self.position = np.array(position, dtype=np.float32)
        if rotation is not None:
            self.rotation = np.array(rotation, dtype=np.float32)
        if scale is not None:
            self.scale = np.array(scale, dtype=np.float32)

    def find(self, name: str) -> Optional['Node']:
        """
        Find a direct child by name

        Args:
            name: Child name

        Returns:
            First matching child or None
        """
        for child in self.children:
            if child.name == name:
                return child
        return None

    def find_path(self, path: str) -> Optional['Node']:
        """
        Resolve a '/' separated path of child names relative to this node

        Args:
            path: Relative path, '' addresses the node itself

        Returns:
            Addressed node or None if any segment is missing
        """
        node = self
        if not path:
            return node
        for segment in path.split('/'):
            node = node.find(segment)
            if node is None:
                return None
        return node

    def iter_preorder(self) -> Iterator['Node']:
        """Yield this node and all descendants depth-first, parents before children"""
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    def find_descendant(self, name: str) -> Optional['Node']:
        """Find the first node named ``name`` in pre-order, including this node"""
        for node in self.iter_preorder():
            if node.name == name:
                return node
        return None

    def clone_tree(self) -> Tuple[List['Node'], Dict[str, 'Node']]:
        """
        Copy this subtree's names, transforms and structure into new nodes

        Components are not copied. The copy is built with an explicit stack so
        deep rigs do not hit the recursion limit.

        Returns:
            Tuple of (cloned nodes in pre-order with the clone root first,
            name to cloned node lookup keeping the first node of each name)
        """
        clones: List[Node] = []
        by_name: Dict[str, Node] = {}
        stack: List[Tuple[Node, Optional[Node]]] = [(self, None)]
        while stack:
            source, clone_parent = stack.pop()
            clone = Node(source.name, parent=clone_parent)
            clone.position = source.position.copy()
            clone.rotation = source.rotation.copy()
            clone.scale = source.scale.copy()
            clones.append(clone)
            by_name.setdefault(clone.name, clone)
            stack.extend((child, clone) for child in reversed(source.children))
        return clones, by_name

    def destroy(self) -> None:
        """Detach this node from its parent and tear down the whole subtree"""
        self.set_parent(None)
        for node in list(self.iter_preorder()):
            node.destroyed = True
            node.mesh = None
            node.skin = None
        for node in list(self.iter_preorder()):
            node.children = []
            node._parent = None

    def get_transform_matrix(self) -> np.ndarray:
        """
        Get 4x4 local transformation matrix from position, rotation, and scale

        Returns:
            4x4 transformation matrix
        """
        # Create rotation matrix from quaternion
        x, y, z, w = (float(c) for c in self.rotation)
        rot_matrix = np.array([
            [1 - 2*(y*y + z*z), 2*(x*y - w*z), 2*(x*z + w*y), 0],
            [2*(x*y + w*z), 1 - 2*(x*x + z*z), 2*(y*z - w*x), 0],
            [2*(x*z - w*y), 2*(y*z + w*x), 1 - 2*(x*x + y*y), 0],
            [0, 0, 0, 1]
        ])

        # Create scale matrix
        scale_matrix = np.diag([self.scale[0], self.scale[1], self.scale[2], 1.0])

        # Combine: Rotation * Scale
        transform = rot_matrix @ scale_matrix

        # Add translation
        transform[0:3, 3] = self.position

        return transform

    def get_world_matrix(self) -> np.ndarray:
        """Get the 4x4 local-to-world matrix by walking up the parent chain"""
        matrix = self.get_transform_matrix()
        node = self._parent
        while node is not None:
            matrix = node.get_transform_matrix() @ matrix
            node = node._parent
        return matrix

    def __repr__(self) -> str:
        parent_info = f", parent='{self._parent.name}'" if self._parent is not None else ""
        return f"Node(name='{self.name}'{parent_info}, children={len(self.children)})"
