"""
Configuration loading and validation utilities.
"""

import os
import yaml
import logging
from typing import Optional

logger = logging.getLogger(__name__)

# Default configuration values
DEFAULTS = {
    "output_dir": "./Assets/Urho3D",
    "bone_weight_threshold": 0.01,
    "duplicate_second_uv_set": True,
    "preview_clip_prefix": "__preview__",
    "temp_graph_dir": "./Assets/Urho3DExporter",
    "min_clip_length": 1e-6,
    "mesh_extension": ".mdl",
    "animation_extension": ".ani",
    "cleanup_partial_files": True,
}


def default_config() -> dict:
    """Return a validated copy of the defaults."""
    cfg = dict(DEFAULTS)
    _validate_config(cfg)
    return cfg


def load_config(config_path: Optional[str] = None) -> dict:
    """Load a YAML config file, fill missing keys with defaults, and validate."""
    if config_path is None:
        return default_config()

    if not os.path.isfile(config_path):
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, "r", encoding="utf-8") as f:
        cfg = yaml.safe_load(f) or {}

    # Fill defaults for missing keys
    for key, default_val in DEFAULTS.items():
        if key not in cfg:
            cfg[key] = default_val
            logger.warning("Config key '%s' not found, using default: %s", key, default_val)

    unknown = sorted(set(cfg) - set(DEFAULTS))
    if unknown:
        logger.warning("Ignoring unknown config keys: %s", ", ".join(unknown))

    _validate_config(cfg)
    return cfg


def _validate_config(cfg: dict) -> None:
    """Validate configuration values."""
    threshold = cfg["bone_weight_threshold"]
    if not 0.0 <= threshold <= 1.0:
        raise ValueError(
            f"'bone_weight_threshold' must be within [0, 1], got {threshold}"
        )

    if cfg["min_clip_length"] <= 0:
        raise ValueError(
            f"'min_clip_length' must be positive, got {cfg['min_clip_length']}"
        )

    for key in ["mesh_extension", "animation_extension"]:
        if not str(cfg[key]).startswith("."):
            raise ValueError(f"'{key}' must start with '.', got {cfg[key]!r}")

    for key in ["duplicate_second_uv_set", "cleanup_partial_files"]:
        if not isinstance(cfg[key], bool):
            raise ValueError(f"'{key}' must be a boolean, got {cfg[key]!r}")
