"""Common utility functions for the project."""

import json
import yaml
import numpy as np
from pathlib import Path
from typing import Dict, Any, Optional, Union


# Characters rejected in file names by the most restrictive host file system
INVALID_FILE_NAME_CHARS = frozenset('"<>|:*?\\/\0' + "".join(chr(c) for c in range(1, 32)))

# Smallest positive subnormal float32 (quaternions shorter than this are degenerate)
FLOAT32_EPSILON = float(np.finfo(np.float32).smallest_subnormal)


def load_json(filepath: Union[str, Path]) -> Dict[str, Any]:
    """Load JSON file.

    Args:
        filepath: Path to JSON file

    Returns:
        Dictionary containing JSON data
    """
    with open(filepath, 'r', encoding='utf-8') as f:
        return json.load(f)


def load_yaml(filepath: Union[str, Path]) -> Dict[str, Any]:
    """Load YAML file.

    Args:
        filepath: Path to YAML file

    Returns:
        Dictionary containing YAML data
    """
    with open(filepath, 'r', encoding='utf-8') as f:
        return yaml.safe_load(f)


def save_yaml(data: Dict[str, Any], filepath: Union[str, Path]) -> None:
    """Save data to YAML file.

    Args:
        data: Dictionary to save
        filepath: Path to output YAML file
    """
    with open(filepath, 'w', encoding='utf-8') as f:
        yaml.dump(data, f, default_flow_style=False)


def load_document(filepath: Union[str, Path]) -> Dict[str, Any]:
    """Load a JSON or YAML document, picking the parser from the file suffix."""
    if Path(filepath).suffix.lower() == '.json':
        return load_json(filepath)
    return load_yaml(filepath) or {}


def quaternion_normalize(q: np.ndarray) -> np.ndarray:
    """Normalize a quaternion stored as [qx, qy, qz, qw].

    Degenerate (near zero length) quaternions become identity.

    Args:
        q: Quaternion as [qx, qy, qz, qw]

    Returns:
        Normalized float32 quaternion
    """
    q = np.asarray(q, dtype=np.float32)
    magnitude = np.sqrt(np.dot(q, q))
    if magnitude < FLOAT32_EPSILON:
        return np.array([0.0, 0.0, 0.0, 1.0], dtype=np.float32)
    return (q / magnitude).astype(np.float32)


def get_safe_file_name(name: Optional[str]) -> str:
    """Replace every character that is invalid in a file name with '_'.

    Args:
        name: Asset name, may be None

    Returns:
        File-system safe name ('' for None)
    """
    if name is None:
        return ""
    return "".join('_' if c in INVALID_FILE_NAME_CHARS else c for c in name)


def ensure_dir(directory: Union[str, Path]) -> Path:
    """Ensure directory exists, create if not.

    Args:
        directory: Path to directory

    Returns:
        Path object of the directory
    """
    path = Path(directory)
    path.mkdir(parents=True, exist_ok=True)
    return path
