import json
from pathlib import Path

import numpy as np
import pytest

from urho_export.anim.curve import InterpolationType
from urho_export.export.session import ExportSession
from urho_export.scene.loader import SceneFormatError, load_scene, parse_scene
from urho_export.scene.mesh import Mesh

from conftest import ByteReader

EXAMPLE_SCENE = Path(__file__).resolve().parent.parent / "examples" / "simple_scene.yaml"


def _scene(**asset):
    asset.setdefault("path", "Assets/Test.fbx")
    return {"assets": [asset]}


def test_example_scene_builds_hierarchy_and_skin():
    (asset,) = load_scene(EXAMPLE_SCENE)

    assert asset.path == "Assets/Characters/Arm.fbx"
    assert [n.name for n in asset.nodes] == ["Arm", "Shoulder", "Elbow"]
    arm = asset.nodes[0]
    assert arm.skin.mesh is asset.meshes["ArmMesh"]
    assert [b.name for b in arm.skin.bones] == ["Shoulder", "Elbow"]
    assert asset.meshes["ArmMesh"].get_vertex_count() == 4
    assert asset.meshes["ArmMesh"].get_index_count() == 6

    # Bind poses derived from the rest pose
    bind_poses = asset.meshes["ArmMesh"].bind_poses
    np.testing.assert_allclose(bind_poses[0], np.eye(4), atol=1e-6)
    np.testing.assert_allclose(bind_poses[1][:3, 3], [0.0, -1.0, 0.0], atol=1e-6)


def test_example_scene_clips():
    (asset,) = load_scene(EXAMPLE_SCENE)
    wave, bob = asset.clips

    assert (wave.name, wave.length, wave.frame_rate, wave.legacy) == ("Wave", 1.0, 30, False)
    assert wave.get_binding_count() == 2
    assert bob.legacy
    assert bob.get_curve_bindings()[0].curve.interpolation_type == InterpolationType.CUBIC


def test_example_scene_exports_end_to_end(cfg):
    session = ExportSession(cfg)
    contexts = [session.create_context(a.path, a.nodes, a.clips) for a in load_scene(EXAMPLE_SCENE)]

    assert session.export_assets(contexts) == []

    folder = session.output_dir / "Assets" / "Characters" / "Arm"
    assert sorted(p.name for p in folder.iterdir()) == ["ArmMesh.mdl", "Bob.ani", "Wave.ani"]
    reader = ByteReader((folder / "ArmMesh.mdl").read_bytes())
    assert reader.uint32() == 0x32444D55
    assert reader.int32() == 1
    assert reader.int32() == 4
    # position, normal, blend weights, blend indices, uv0
    assert reader.int32() == 5


def test_json_scene(tmp_path):
    path = tmp_path / "scene.json"
    path.write_text(json.dumps(_scene(nodes=[{"name": "Root", "scale": [2, 2, 2]}])), encoding="utf-8")
    (asset,) = load_scene(path)
    np.testing.assert_allclose(asset.nodes[0].scale, [2.0, 2.0, 2.0])


def test_clip_length_defaults_to_curve_extent():
    (asset,) = parse_scene(_scene(clips=[{
        "name": "Idle",
        "curves": [{"path": "Root", "property": "local_position.x", "keys": [[0, 0], [2.5, 1]]}],
    }]))
    assert asset.clips[0].length == 2.5
    assert asset.clips[0].frame_rate == 30.0


def test_explicit_bind_poses_are_kept():
    bind = np.eye(4)
    bind[0, 3] = 7.0
    (asset,) = parse_scene(_scene(
        meshes={"M": {"position": [[0, 0, 0]], "bind_poses": [bind.tolist()]}},
        nodes=[{"name": "Root", "skin": {"mesh": "M", "bones": ["Root"]}}],
    ))
    np.testing.assert_allclose(asset.meshes["M"].bind_poses[0], bind)


def test_static_mesh_reference():
    (asset,) = parse_scene(_scene(
        meshes={"Box": {"position": [[0, 0, 0], [1, 0, 0], [0, 1, 0]], "submeshes": [{"indices": [0, 1, 2]}]}},
        nodes=[{"name": "Root", "children": [{"name": "Box", "mesh": "Box"}]}],
    ))
    box = asset.nodes[1]
    assert box.mesh is asset.meshes["Box"]
    assert box.mesh.submeshes[0].topology == "triangles"
    assert box.mesh.has_vertex_attribute(Mesh.POSITION)


@pytest.mark.parametrize("data, message", [
    ({"nodes": []}, "assets"),
    ({"assets": [{"nodes": []}]}, "path"),
    (_scene(nodes=[{"name": "Root", "mesh": "Ghost"}]), "unknown mesh 'Ghost'"),
    (_scene(nodes=[{"name": "Root", "skin": {"bones": ["Ghost"]}}]), "unknown bone 'Ghost'"),
    (_scene(clips=[{"length": 1.0}]), "name"),
    (_scene(clips=[{"name": "c", "frame_rate": 0}]), "frame_rate"),
    (_scene(clips=[{"name": "c", "curves": [
        {"path": "R", "property": "local_position.x", "interpolation": "bezier", "keys": []},
    ]}]), "bezier"),
])
def test_malformed_scenes_rejected(data, message):
    with pytest.raises(SceneFormatError, match=message):
        parse_scene(data)


def test_missing_scene_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_scene(tmp_path / "missing.yaml")
