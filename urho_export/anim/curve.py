from typing import List, Optional, Sequence, Tuple
from enum import Enum
import numpy as np
from scipy.interpolate import CubicSpline


class InterpolationType(Enum):
    """Enum for keyframe interpolation types"""
    LINEAR = "linear"
    STEP = "step"
    CUBIC = "cubic"


class Keyframe:
    """Keyframe class for storing time-value pairs"""

    def __init__(self, time: float, value: float):
        """
        Initialize keyframe

        Args:
            time: Time in seconds
            value: Scalar channel value
        """
        self.time = float(time)
        self.value = float(value)

    def __repr__(self) -> str:
        return f"Keyframe(time={self.time}, value={self.value})"


class AnimationCurve:
    """Scalar animation curve evaluated at arbitrary times"""

    def __init__(self, keyframes: Optional[Sequence[Tuple[float, float]]] = None,
                 interpolation: InterpolationType = InterpolationType.LINEAR):
        """
        Initialize curve

        Args:
            keyframes: Optional (time, value) pairs
            interpolation: Interpolation used between keys
        """
        self.keyframes: List[Keyframe] = []
        self.interpolation_type = InterpolationType(interpolation)
        self._spline: Optional[CubicSpline] = None
        for time, value in keyframes or ():
            self.add_keyframe(time, value)

    def add_keyframe(self, time: float, value: float) -> None:
        """
        Add a keyframe to the curve

        Args:
            time: Time in seconds
            value: Keyframe value
        """
        self.keyframes.append(Keyframe(time, value))
        # Keep keyframes sorted by time
        self.keyframes.sort(key=lambda k: k.time)
        self._spline = None

    def get_keyframe_count(self) -> int:
        return len(self.keyframes)

    def get_time_range(self) -> Tuple[float, float]:
        """
        Get time range of the curve

        Returns:
            Tuple of (start_time, end_time) or (0, 0) if no keyframes
        """
        if not self.keyframes:
            return (0.0, 0.0)
        return (self.keyframes[0].time, self.keyframes[-1].time)

    def evaluate(self, time: float) -> np.float32:
        """
        Get interpolated value at specific time

        Times outside the key range clamp to the first/last key. A curve with
        no keyframes evaluates to 0.

        Args:
            time: Time in seconds

        Returns:
            Interpolated value as float32
        """
        keys = self.keyframes
        if not keys:
            return np.float32(0.0)

        time = float(time)
        if time <= keys[0].time:
            return np.float32(keys[0].value)
        if time >= keys[-1].time:
            return np.float32(keys[-1].value)

        if self.interpolation_type == InterpolationType.CUBIC and len(keys) > 2:
            return np.float32(self._get_spline()(time))

        # Find surrounding keyframes
        for k1, k2 in zip(keys, keys[1:]):
            if k1.time <= time <= k2.time:
                if self.interpolation_type == InterpolationType.STEP or k2.time == k1.time:
                    return np.float32(k1.value)
                t = (time - k1.time) / (k2.time - k1.time)
                return np.float32(k1.value + (k2.value - k1.value) * t)

        return np.float32(keys[-1].value)

    def _get_spline(self) -> CubicSpline:
        if self._spline is None:
            # CubicSpline needs strictly increasing times; later duplicates win
            unique = {}
            for k in self.keyframes:
                unique[k.time] = k.value
            times = np.array(sorted(unique))
            values = np.array([unique[t] for t in times])
            self._spline = CubicSpline(times, values, bc_type='natural')
        return self._spline

    def __repr__(self) -> str:
        return f"AnimationCurve(keyframes={len(self.keyframes)}, interpolation='{self.interpolation_type.value}')"
