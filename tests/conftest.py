"""
Shared fixtures: a synthetic 33-landmark standing skeleton and factories
that turn coordinate arrays into PoseFrame sequences.
"""

import numpy as np
import pytest

from models import Landmark, PoseFrame

# Standing figure facing the camera, MediaPipe image coordinates (y down)
STANDING_POSE = np.array([
    [0.50, 0.20, -0.10],   # NOSE
    [0.51, 0.18, -0.09],   # LEFT_EYE_INNER
    [0.52, 0.18, -0.09],   # LEFT_EYE
    [0.53, 0.18, -0.09],   # LEFT_EYE_OUTER
    [0.49, 0.18, -0.09],   # RIGHT_EYE_INNER
    [0.48, 0.18, -0.09],   # RIGHT_EYE
    [0.47, 0.18, -0.09],   # RIGHT_EYE_OUTER
    [0.55, 0.19, -0.02],   # LEFT_EAR
    [0.45, 0.19, -0.02],   # RIGHT_EAR
    [0.52, 0.23, -0.08],   # MOUTH_LEFT
    [0.48, 0.23, -0.08],   # MOUTH_RIGHT
    [0.60, 0.32, 0.00],    # LEFT_SHOULDER
    [0.40, 0.32, 0.00],    # RIGHT_SHOULDER
    [0.66, 0.45, 0.02],    # LEFT_ELBOW
    [0.34, 0.45, 0.02],    # RIGHT_ELBOW
    [0.70, 0.57, -0.02],   # LEFT_WRIST
    [0.30, 0.57, -0.02],   # RIGHT_WRIST
    [0.71, 0.60, -0.03],   # LEFT_PINKY
    [0.29, 0.60, -0.03],   # RIGHT_PINKY
    [0.70, 0.61, -0.04],   # LEFT_INDEX
    [0.30, 0.61, -0.04],   # RIGHT_INDEX
    [0.69, 0.59, -0.04],   # LEFT_THUMB
    [0.31, 0.59, -0.04],   # RIGHT_THUMB
    [0.56, 0.60, 0.00],    # LEFT_HIP
    [0.44, 0.60, 0.00],    # RIGHT_HIP
    [0.57, 0.78, 0.03],    # LEFT_KNEE
    [0.43, 0.78, 0.03],    # RIGHT_KNEE
    [0.57, 0.95, 0.05],    # LEFT_ANKLE
    [0.43, 0.95, 0.05],    # RIGHT_ANKLE
    [0.575, 0.97, 0.07],   # LEFT_HEEL
    [0.425, 0.97, 0.07],   # RIGHT_HEEL
    [0.58, 0.98, -0.02],   # LEFT_FOOT_INDEX
    [0.42, 0.98, -0.02],   # RIGHT_FOOT_INDEX
])


def build_frame(coords, timestamp=0.0, visibility=0.9) -> PoseFrame:
    coords = np.asarray(coords, dtype=float)
    vis = np.broadcast_to(np.asarray(visibility, dtype=float), (len(coords),))
    return PoseFrame(
        timestamp=timestamp,
        landmarks=[
            Landmark(x=x, y=y, z=z, visibility=float(v))
            for (x, y, z), v in zip(coords, vis)
        ],
    )


def arm_raise(step: int) -> np.ndarray:
    """Standing pose with the left arm lifted a little further each step."""
    coords = STANDING_POSE.copy()
    lift = 0.03 * step
    coords[13] += [0.02 * step, -lift, 0.0]
    coords[15] += [0.03 * step, -2 * lift, 0.0]
    coords[17:23:2] += [0.03 * step, -2 * lift, 0.0]
    return coords


@pytest.fixture
def standing_pose():
    return STANDING_POSE.copy()


@pytest.fixture
def make_frame():
    return build_frame


@pytest.fixture
def make_sequence():
    """Factory: n frames of a slow arm raise, spaced interval ms apart."""

    def _make(n, interval=33.0, transform=None, visibility=0.9):
        frames = []
        for i in range(n):
            coords = arm_raise(i % 10)
            if transform is not None:
                coords = transform(coords)
            frames.append(build_frame(coords, timestamp=i * interval, visibility=visibility))
        return frames

    return _make
