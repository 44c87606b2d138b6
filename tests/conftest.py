import io
import struct

import numpy as np
import pytest

from urho_export.anim.clip import AnimationClip
from urho_export.anim.curve import AnimationCurve
from urho_export.scene.mesh import Mesh
from urho_export.scene.node import Node
from urho_export.scene.skin import Skin
from urho_export.utils.binary_writer import BinaryWriter
from urho_export.utils.config import default_config


class ByteReader:
    """Reads back the little-endian primitives BinaryWriter produces"""

    def __init__(self, data: bytes):
        self.data = data
        self.offset = 0

    def _unpack(self, fmt):
        values = struct.unpack_from(fmt, self.data, self.offset)
        self.offset += struct.calcsize(fmt)
        return values

    def int32(self):
        return self._unpack("<i")[0]

    def uint32(self):
        return self._unpack("<I")[0]

    def uint16(self):
        return self._unpack("<H")[0]

    def float32(self):
        return self._unpack("<f")[0]

    def byte(self):
        return self._unpack("<B")[0]

    def floats(self, count):
        return list(self._unpack(f"<{count}f"))

    def vector3(self):
        return self.floats(3)

    def quaternion(self):
        """Returns (w, x, y, z) as stored"""
        return self.floats(4)

    def raw(self, size):
        chunk = self.data[self.offset:self.offset + size]
        self.offset += size
        return chunk

    def string_sz(self):
        end = self.data.index(b"\0", self.offset)
        text = self.data[self.offset:end].decode("utf-8")
        self.offset = end + 1
        return text

    @property
    def remaining(self):
        return len(self.data) - self.offset


def f32(value):
    return float(np.float32(value))


@pytest.fixture
def buffer_writer():
    """(BytesIO, BinaryWriter) pair"""
    buffer = io.BytesIO()
    return buffer, BinaryWriter(buffer)


@pytest.fixture
def cfg(tmp_path):
    config = default_config()
    config["output_dir"] = str(tmp_path / "out")
    config["temp_graph_dir"] = str(tmp_path / "temp")
    return config


@pytest.fixture
def arm_rig():
    """Arm -> Shoulder -> Elbow -> Hand, plus a skinned quad bound to Shoulder/Elbow"""
    arm = Node("Arm")
    shoulder = Node("Shoulder", parent=arm)
    elbow = Node("Elbow", parent=shoulder)
    elbow.set_transform(position=[0.0, 1.0, 0.0])
    hand = Node("Hand", parent=elbow)
    hand.set_transform(position=[0.0, 0.5, 0.0])

    mesh = Mesh("ArmMesh")
    mesh.set_vertex_attribute(Mesh.POSITION, [[0, 0, 0], [1, 0, 0], [0, 2, 0], [1, 2, 0]])
    mesh.set_vertex_attribute(Mesh.BLEND_WEIGHTS, [[1, 0, 0, 0], [1, 0, 0, 0], [0.5, 0.5, 0, 0], [1, 0, 0, 0]])
    mesh.set_vertex_attribute(Mesh.BLEND_INDICES, [[0, 0, 0, 0], [0, 0, 0, 0], [0, 1, 0, 0], [1, 0, 0, 0]])
    mesh.add_submesh([0, 1, 2, 2, 1, 3])
    # Shoulder at origin, Elbow one unit up
    elbow_bind = np.eye(4)
    elbow_bind[1, 3] = -1.0
    mesh.set_bind_poses([np.eye(4), elbow_bind])
    arm.skin = Skin(mesh, [shoulder, elbow])
    return arm


def make_clip(name, length, frame_rate, legacy, curves):
    """curves: list of (path, property, [(time, value), ...])"""
    clip = AnimationClip(name, length=length, frame_rate=frame_rate, legacy=legacy)
    for path, property_name, keys in curves:
        clip.add_curve(path, property_name, AnimationCurve(keys))
    return clip
