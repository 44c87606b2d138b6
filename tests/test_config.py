import logging
from pathlib import Path

import pytest
import yaml

from urho_export.utils.config import DEFAULTS, default_config, load_config


def _write_config(tmp_path, data):
    path = tmp_path / "config.yaml"
    path.write_text(yaml.safe_dump(data), encoding="utf-8")
    return str(path)


def test_defaults_when_no_path():
    cfg = load_config(None)
    assert cfg == DEFAULTS
    assert cfg is not DEFAULTS
    assert default_config()["bone_weight_threshold"] == 0.01


def test_partial_file_filled_with_defaults(tmp_path, caplog):
    path = _write_config(tmp_path, {"output_dir": "out", "duplicate_second_uv_set": False, "flavour": 1})

    with caplog.at_level(logging.WARNING):
        cfg = load_config(path)

    assert cfg["output_dir"] == "out"
    assert cfg["duplicate_second_uv_set"] is False
    assert cfg["mesh_extension"] == ".mdl"
    assert "Config key 'mesh_extension' not found" in caplog.text
    assert "flavour" in caplog.text


def test_shipped_config_matches_defaults():
    path = Path(__file__).resolve().parent.parent / "configs" / "export_config.yaml"
    assert load_config(str(path)) == DEFAULTS


@pytest.mark.parametrize("key, value", [
    ("bone_weight_threshold", 1.5),
    ("bone_weight_threshold", -0.1),
    ("min_clip_length", 0.0),
    ("mesh_extension", "mdl"),
    ("cleanup_partial_files", "yes"),
])
def test_invalid_values_rejected(tmp_path, key, value):
    with pytest.raises(ValueError, match=key):
        load_config(_write_config(tmp_path, {key: value}))


def test_missing_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(str(tmp_path / "nope.yaml"))
