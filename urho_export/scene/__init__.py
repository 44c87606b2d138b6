from .node import Node
from .mesh import Mesh, Submesh
from .skin import Skin
