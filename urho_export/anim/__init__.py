from .curve import AnimationCurve, Keyframe, InterpolationType
from .clip import ANIMATION_PROPERTIES, AnimationClip, CurveBinding
from .sampler import PoseSampler, LegacySampler, GraphSampler, create_sampler
