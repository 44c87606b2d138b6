import numpy as np
import pytest

from urho_export.anim.clip import AnimationClip, frame_time, frame_timing
from urho_export.anim.curve import AnimationCurve, InterpolationType
from urho_export.scene.node import Node


def test_linear_interpolation_and_clamping():
    curve = AnimationCurve([(1.0, 10.0), (0.0, 0.0)])
    assert curve.get_time_range() == (0.0, 1.0)
    assert curve.evaluate(0.25) == np.float32(2.5)
    assert curve.evaluate(-1.0) == 0.0
    assert curve.evaluate(5.0) == 10.0


def test_step_interpolation_holds_previous_key():
    curve = AnimationCurve([(0.0, 1.0), (1.0, 2.0)], InterpolationType.STEP)
    assert curve.evaluate(0.99) == 1.0
    assert curve.evaluate(1.0) == 2.0


def test_cubic_interpolation_passes_through_keys():
    curve = AnimationCurve([(0.0, 0.0), (0.5, 1.0), (1.0, 0.0)], "cubic")
    assert curve.evaluate(0.5) == pytest.approx(1.0)
    assert 0.0 < curve.evaluate(0.25) < 1.0


def test_empty_curve_evaluates_to_zero():
    assert AnimationCurve().evaluate(3.0) == 0.0


@pytest.mark.parametrize("length, frame_rate, frames", [
    (1.0, 30.0, 31),
    (0.5, 24.0, 13),
    (0.0, 30.0, 1),
    (2.0, 60.0, 121),
    (0.99, 10.0, 10),
])
def test_frame_timing(length, frame_rate, frames):
    time_step, frame_count = frame_timing(length, frame_rate)
    assert frame_count == frames == 1 + int(np.float32(length) * np.float32(frame_rate))
    assert time_step == np.float32(1.0) / np.float32(frame_rate)
    assert frame_time(frame_count - 1, time_step) == np.float32(frame_count - 1) * time_step


def test_sample_animation_poses_nodes_by_path():
    root = Node("Hips")
    spine = Node("Spine", parent=root)
    clip = AnimationClip("c", length=1.0)
    clip.add_curve("Spine", "local_position.y", AnimationCurve([(0.0, 0.0), (1.0, 2.0)]))
    clip.add_curve("Hips/Spine", "local_scale.x", AnimationCurve([(0.0, 3.0)]))
    clip.add_curve("", "local_rotation.w", AnimationCurve([(0.0, 2.0)]))
    clip.add_curve("Missing", "local_position.x", AnimationCurve([(0.0, 1.0)]))
    clip.add_curve("Spine", "m_IsActive", AnimationCurve([(0.0, 0.0)]))

    clip.sample_animation(root, 0.5)

    np.testing.assert_allclose(spine.position, [0.0, 1.0, 0.0])
    np.testing.assert_allclose(spine.scale, [3.0, 1.0, 1.0])
    # Rotation renormalized after sampling
    np.testing.assert_allclose(root.rotation, [0.0, 0.0, 0.0, 1.0])


def test_clip_length_from_curves():
    clip = AnimationClip("c")
    clip.add_curve("A", "local_position.x", AnimationCurve([(0.0, 0.0), (1.5, 1.0)]))
    clip.add_curve("B", "local_position.x", AnimationCurve([(0.0, 0.0), (0.5, 1.0)]))
    clip.update_length_from_curves()
    assert clip.length == 1.5
    assert [b.root_name for b in clip.get_curve_bindings()] == ["A", "B"]
