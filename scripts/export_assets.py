"""
Export entry script: writes Urho3D models and animations for a scene description.

Usage:
    python scripts/export_assets.py --scene examples/simple_scene.yaml
    python scripts/export_assets.py --scene scene.json --config configs/export_config.yaml --output-dir out
"""

import argparse
import logging
import sys
import os

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from urho_export.utils.config import load_config
from urho_export.scene.loader import load_scene
from urho_export.export.session import ExportSession


def main():
    parser = argparse.ArgumentParser(description="Export scene assets to Urho3D model/animation files")
    parser.add_argument(
        "--scene",
        type=str,
        required=True,
        help="Path to YAML or JSON scene description",
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to YAML config file (defaults are used when omitted)",
    )
    parser.add_argument(
        "--output-dir",
        type=str,
        default=None,
        help="Override the config's output_dir",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log every written file",
    )
    args = parser.parse_args()

    # Setup logging
    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    cfg = load_config(args.config)
    assets = load_scene(args.scene)

    session = ExportSession(cfg, output_dir=args.output_dir)
    contexts = [session.create_context(asset.path, asset.nodes, asset.clips) for asset in assets]
    failures = session.export_assets(contexts)

    logging.warning(
        "Exported %d files from %d assets (%d failed)",
        len(session.written_files), len(contexts), len(failures),
    )
    return 1 if failures else 0


if __name__ == "__main__":
    sys.exit(main())
