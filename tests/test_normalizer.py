import numpy as np
import pytest

from models import NormalizationConfig
from normalizer import (
    LEFT_HIP,
    LEFT_SHOULDER,
    RIGHT_HIP,
    RIGHT_SHOULDER,
    frame_arrays,
    normalize_frame,
)

ALL_ON = NormalizationConfig(center=True, scale=True, rotation=True)


def rotate_y(coords, degrees):
    """Turn the figure about the vertical axis through its mid-hip."""
    theta = np.radians(degrees)
    c, s = np.cos(theta), np.sin(theta)
    rot = np.array([[c, 0.0, -s], [0.0, 1.0, 0.0], [s, 0.0, c]])
    pivot = (coords[LEFT_HIP] + coords[RIGHT_HIP]) / 2
    return (coords - pivot) @ rot.T + pivot


def test_frame_arrays_treats_missing_visibility_as_visible(make_frame, standing_pose):
    frame = make_frame(standing_pose)
    frame.landmarks[0].visibility = None
    coords, vis = frame_arrays(frame)
    assert coords.shape == (33, 3)
    assert vis[0] == 1.0
    assert vis[1] == pytest.approx(0.9)


def test_center_moves_mid_hip_to_origin(standing_pose):
    vis = np.full(33, 0.9)
    out, applied = normalize_frame(
        standing_pose, vis, NormalizationConfig(center=True, scale=False), 0.5
    )
    assert applied
    mid_hip = (out[LEFT_HIP] + out[RIGHT_HIP]) / 2
    np.testing.assert_allclose(mid_hip, 0.0, atol=1e-12)
    # Shape is preserved: only a translation was applied
    np.testing.assert_allclose(out[11] - out[12], standing_pose[11] - standing_pose[12])


def test_scale_gives_unit_torso_length(standing_pose):
    vis = np.full(33, 0.9)
    out, _ = normalize_frame(standing_pose, vis, NormalizationConfig(center=True, scale=True), 0.5)
    mid_hip = (out[LEFT_HIP] + out[RIGHT_HIP]) / 2
    mid_shoulder = (out[LEFT_SHOULDER] + out[RIGHT_SHOULDER]) / 2
    assert np.linalg.norm(mid_shoulder - mid_hip) == pytest.approx(1.0)


def test_scale_cancels_camera_distance(standing_pose):
    vis = np.full(33, 0.9)
    cfg = NormalizationConfig(center=True, scale=True)
    near, _ = normalize_frame(standing_pose * 2.0, vis, cfg, 0.5)
    far, _ = normalize_frame(standing_pose, vis, cfg, 0.5)
    np.testing.assert_allclose(near, far, atol=1e-9)


def test_scale_falls_back_to_hip_width_without_shoulders(standing_pose):
    vis = np.full(33, 0.9)
    vis[[LEFT_SHOULDER, RIGHT_SHOULDER]] = 0.1
    out, applied = normalize_frame(standing_pose, vis, NormalizationConfig(), 0.5)
    assert applied
    assert np.linalg.norm(out[LEFT_HIP] - out[RIGHT_HIP]) == pytest.approx(1.0)


def test_rotation_cancels_facing_direction(standing_pose):
    vis = np.full(33, 0.9)
    turned = rotate_y(standing_pose, 60)
    a, _ = normalize_frame(standing_pose, vis, ALL_ON, 0.5)
    b, _ = normalize_frame(turned, vis, ALL_ON, 0.5)
    np.testing.assert_allclose(a, b, atol=1e-9)


def test_rotation_puts_shoulder_line_on_x_axis(standing_pose):
    vis = np.full(33, 0.9)
    out, _ = normalize_frame(rotate_y(standing_pose, -35), vis, ALL_ON, 0.5)
    axis = out[LEFT_SHOULDER] - out[RIGHT_SHOULDER]
    assert axis[0] > 0
    assert axis[2] == pytest.approx(0.0, abs=1e-12)


def test_hidden_hips_fall_back_to_identity(standing_pose):
    vis = np.full(33, 0.9)
    vis[[LEFT_HIP, RIGHT_HIP]] = 0.2
    out, applied = normalize_frame(standing_pose, vis, ALL_ON, 0.5)
    assert not applied
    np.testing.assert_array_equal(out, standing_pose)
    assert out is not standing_pose


def test_low_visibility_landmarks_are_still_transformed(standing_pose):
    vis = np.full(33, 0.9)
    vis[0] = 0.0
    out, _ = normalize_frame(standing_pose, vis, NormalizationConfig(center=True, scale=False), 0.5)
    assert out.shape == (33, 3)
    mid_hip = (standing_pose[LEFT_HIP] + standing_pose[RIGHT_HIP]) / 2
    np.testing.assert_allclose(out[0], standing_pose[0] - mid_hip)


def test_all_flags_off_is_a_copy(standing_pose):
    vis = np.zeros(33)
    cfg = NormalizationConfig(center=False, scale=False, rotation=False)
    out, applied = normalize_frame(standing_pose, vis, cfg, 0.5)
    assert applied
    np.testing.assert_array_equal(out, standing_pose)
