import importlib.util
import sys
from pathlib import Path

import pytest
import yaml

PROJECT_ROOT = Path(__file__).resolve().parent.parent
EXAMPLE_SCENE = PROJECT_ROOT / "examples" / "simple_scene.yaml"


@pytest.fixture
def export_assets():
    spec = importlib.util.spec_from_file_location(
        "export_assets", PROJECT_ROOT / "scripts" / "export_assets.py")
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def _run(export_assets, monkeypatch, *args):
    monkeypatch.setattr(sys, "argv", ["export_assets.py", *map(str, args)])
    return export_assets.main()


def test_main_exports_scene_to_output_dir(export_assets, monkeypatch, tmp_path):
    # Default temp_graph_dir is relative to the working directory
    monkeypatch.chdir(tmp_path)
    out = tmp_path / "out"

    assert _run(export_assets, monkeypatch, "--scene", EXAMPLE_SCENE, "--output-dir", out) == 0

    folder = out / "Assets" / "Characters" / "Arm"
    assert sorted(p.name for p in folder.iterdir()) == ["ArmMesh.mdl", "Bob.ani", "Wave.ani"]


def test_main_returns_non_zero_when_an_asset_fails(export_assets, monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    scene = tmp_path / "scene.yaml"
    scene.write_text(yaml.safe_dump({"assets": [
        {
            "path": "Assets/Broken.fbx",
            "meshes": {"Quads": {
                "position": [[0, 0, 0], [1, 0, 0], [1, 1, 0], [0, 1, 0]],
                "submeshes": [{"topology": "quads", "indices": [0, 1, 2, 3]}],
            }},
            "nodes": [{"name": "Root", "mesh": "Quads"}],
        },
        {
            "path": "Assets/Good.fbx",
            "meshes": {"Tri": {
                "position": [[0, 0, 0], [1, 0, 0], [0, 1, 0]],
                "submeshes": [{"indices": [0, 1, 2]}],
            }},
            "nodes": [{"name": "Root", "mesh": "Tri"}],
        },
    ]}), encoding="utf-8")
    config = tmp_path / "config.yaml"
    config.write_text(yaml.safe_dump({"output_dir": str(tmp_path / "from_config")}), encoding="utf-8")

    assert _run(export_assets, monkeypatch, "--scene", scene, "--config", config) == 1

    assert not (tmp_path / "from_config" / "Assets" / "Broken" / "Quads.mdl").exists()
    assert (tmp_path / "from_config" / "Assets" / "Good" / "Tri.mdl").exists()
