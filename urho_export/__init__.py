"""
Urho3D Export Module

This module serializes scene assets into the Urho3D binary formats:
- Meshes with skinning data and bone tables (.mdl)
- Skeletal and curve animation clips (.ani)

It also carries the small host scene model the writers consume (nodes,
meshes, skins, animation curves and clips) and an export session that
de-duplicates output across a whole run.
"""

# Host scene model
from .scene import Node, Mesh, Submesh, Skin

# Animation classes
from .anim import (
    AnimationCurve,
    Keyframe,
    InterpolationType,
    AnimationClip,
    CurveBinding,
    PoseSampler,
    LegacySampler,
    GraphSampler,
)

# Writers
from .export import (
    ExportBone,
    build_bones,
    write_mesh,
    write_animation,
    AssetCollection,
    AssetContext,
    ExportSession,
)

# Scene description loader
from .scene.loader import SceneAsset, SceneFormatError, load_scene, parse_scene

# Define public API
__all__ = [
    # Scene
    'Node',
    'Mesh',
    'Submesh',
    'Skin',

    # Animation
    'AnimationCurve',
    'Keyframe',
    'InterpolationType',
    'AnimationClip',
    'CurveBinding',
    'PoseSampler',
    'LegacySampler',
    'GraphSampler',

    # Export
    'ExportBone',
    'build_bones',
    'write_mesh',
    'write_animation',
    'AssetCollection',
    'AssetContext',
    'ExportSession',

    # Loading
    'SceneAsset',
    'SceneFormatError',
    'load_scene',
    'parse_scene',
]

__version__ = '1.0.0'
