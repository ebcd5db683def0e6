import logging

import numpy as np

from errors import InsufficientLandmarks
from models import NormalizationConfig, PoseFrame

logger = logging.getLogger(__name__)

# MediaPipe Pose landmark indices
LANDMARK_NAMES = [
    "NOSE", "LEFT_EYE_INNER", "LEFT_EYE", "LEFT_EYE_OUTER",
    "RIGHT_EYE_INNER", "RIGHT_EYE", "RIGHT_EYE_OUTER",
    "LEFT_EAR", "RIGHT_EAR", "MOUTH_LEFT", "MOUTH_RIGHT",
    "LEFT_SHOULDER", "RIGHT_SHOULDER", "LEFT_ELBOW", "RIGHT_ELBOW",
    "LEFT_WRIST", "RIGHT_WRIST", "LEFT_PINKY", "RIGHT_PINKY",
    "LEFT_INDEX", "RIGHT_INDEX", "LEFT_THUMB", "RIGHT_THUMB",
    "LEFT_HIP", "RIGHT_HIP", "LEFT_KNEE", "RIGHT_KNEE",
    "LEFT_ANKLE", "RIGHT_ANKLE", "LEFT_HEEL", "RIGHT_HEEL",
    "LEFT_FOOT_INDEX", "RIGHT_FOOT_INDEX",
]

NAME_TO_IDX = {name: i for i, name in enumerate(LANDMARK_NAMES)}

LEFT_SHOULDER = NAME_TO_IDX["LEFT_SHOULDER"]
RIGHT_SHOULDER = NAME_TO_IDX["RIGHT_SHOULDER"]
LEFT_HIP = NAME_TO_IDX["LEFT_HIP"]
RIGHT_HIP = NAME_TO_IDX["RIGHT_HIP"]

_MIN_REFERENCE = 1e-6


def frame_arrays(frame: PoseFrame) -> tuple[np.ndarray, np.ndarray]:
    """Split a frame into a (33, 3) coordinate array and a (33,) visibility array.

    A landmark without a visibility value counts as fully visible.
    """
    coords = np.array([[lm.x, lm.y, lm.z] for lm in frame.landmarks], dtype=np.float64)
    visibility = np.array(
        [1.0 if lm.visibility is None else lm.visibility for lm in frame.landmarks],
        dtype=np.float64,
    )
    return coords, visibility


def visible_mask(visibility: np.ndarray, threshold: float) -> np.ndarray:
    return visibility >= threshold


def _require_pair(coords, visible, a: int, b: int, what: str) -> tuple[np.ndarray, np.ndarray]:
    if not (visible[a] and visible[b]):
        raise InsufficientLandmarks(f"{what} not visible")
    return coords[a], coords[b]


def _midpoint(coords, visible, a: int, b: int, what: str) -> np.ndarray:
    p, q = _require_pair(coords, visible, a, b, what)
    return (p + q) / 2


def _scale_reference(coords, visible) -> float:
    """Torso length (mid-shoulder to mid-hip), falling back to hip width."""
    mid_hip = _midpoint(coords, visible, LEFT_HIP, RIGHT_HIP, "hips")
    try:
        mid_shoulder = _midpoint(coords, visible, LEFT_SHOULDER, RIGHT_SHOULDER, "shoulders")
        torso = float(np.linalg.norm(mid_shoulder - mid_hip))
        if torso >= _MIN_REFERENCE:
            return torso
    except InsufficientLandmarks:
        pass
    return float(np.linalg.norm(coords[LEFT_HIP] - coords[RIGHT_HIP]))


def _facing_angle(coords, visible) -> float:
    """Angle of the shoulder (or hip) line in the x-z plane, measured from +x."""
    try:
        left, right = _require_pair(coords, visible, LEFT_SHOULDER, RIGHT_SHOULDER, "shoulders")
    except InsufficientLandmarks:
        left, right = _require_pair(coords, visible, LEFT_HIP, RIGHT_HIP, "hips")
    axis = left - right
    if np.hypot(axis[0], axis[2]) < _MIN_REFERENCE:
        raise InsufficientLandmarks("body axis is vertical")
    return float(np.arctan2(axis[2], axis[0]))


def _rotate_about_y(coords: np.ndarray, angle: float) -> np.ndarray:
    """Rotate points by -angle about the vertical axis."""
    c, s = np.cos(angle), np.sin(angle)
    rot = np.array([
        [c, 0.0, s],
        [0.0, 1.0, 0.0],
        [-s, 0.0, c],
    ])
    return coords @ rot.T


def normalize_frame(
    coords: np.ndarray,
    visibility: np.ndarray,
    normalization: NormalizationConfig,
    visibility_threshold: float,
) -> tuple[np.ndarray, bool]:
    """Move a (33, 3) skeleton into a canonical frame.

    Centers on the mid-hip, divides by torso length and turns the shoulder
    line onto +x, each step gated by the normalization flags. Only visible
    landmarks feed the reference points, but every row is transformed.

    Returns (normalized coords, applied). When the hips are not visible the
    input is returned unchanged with applied=False.
    """
    if not (normalization.center or normalization.scale or normalization.rotation):
        return coords.copy(), True

    visible = visible_mask(visibility, visibility_threshold)
    try:
        mid_hip = _midpoint(coords, visible, LEFT_HIP, RIGHT_HIP, "hips")
    except InsufficientLandmarks as e:
        logger.debug("Identity normalization: %s", e)
        return coords.copy(), False

    out = coords.copy()
    if normalization.center:
        out = out - mid_hip

    if normalization.scale:
        ref = _scale_reference(coords, visible)
        if ref >= _MIN_REFERENCE:
            out = out / ref
        else:
            logger.debug("Skipping scale step: reference distance %.2e", ref)

    if normalization.rotation:
        try:
            out = _rotate_about_y(out, _facing_angle(out, visible))
        except InsufficientLandmarks as e:
            logger.debug("Skipping rotation step: %s", e)

    return out, True
