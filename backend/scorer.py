from dataclasses import dataclass

import numpy as np

from config import ANGLE_DECAY_DEG, POSITION_DECAY
from models import ComparisonConfig
from normalizer import LANDMARK_NAMES, NAME_TO_IDX, visible_mask

# Joint triplets for angle computation: (parent, joint, child)
ANGLE_JOINTS = [
    ("LEFT_SHOULDER", "LEFT_ELBOW", "LEFT_WRIST"),
    ("RIGHT_SHOULDER", "RIGHT_ELBOW", "RIGHT_WRIST"),
    ("LEFT_HIP", "LEFT_SHOULDER", "LEFT_ELBOW"),
    ("RIGHT_HIP", "RIGHT_SHOULDER", "RIGHT_ELBOW"),
    ("LEFT_SHOULDER", "LEFT_HIP", "LEFT_KNEE"),
    ("RIGHT_SHOULDER", "RIGHT_HIP", "RIGHT_KNEE"),
    ("LEFT_HIP", "LEFT_KNEE", "LEFT_ANKLE"),
    ("RIGHT_HIP", "RIGHT_KNEE", "RIGHT_ANKLE"),
]

_ANGLE_IDX = np.array(
    [[NAME_TO_IDX[a], NAME_TO_IDX[b], NAME_TO_IDX[c]] for a, b, c in ANGLE_JOINTS]
)

# Body-part importance for the position score: legs/core highest, face lowest
_FACE = 0.5
_LIMB = 1.0
_CORE = 1.5
LANDMARK_WEIGHTS = np.array([
    _FACE if i <= NAME_TO_IDX["MOUTH_RIGHT"]
    else _CORE if i >= NAME_TO_IDX["LEFT_HIP"] or name.endswith("SHOULDER")
    else _LIMB
    for i, name in enumerate(LANDMARK_NAMES)
])

_MIN_BONE = 1e-6


@dataclass(frozen=True)
class FrameScore:
    position: float
    angular: float
    total: float
    compared_landmarks: int
    compared_joints: int


def joint_angles(coords: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
    """Angle in degrees at the middle joint of every triplet in ANGLE_JOINTS.

    Returns (angles, valid) where valid is False for joints with a
    zero-length bone.
    """
    a = coords[_ANGLE_IDX[:, 0]]
    b = coords[_ANGLE_IDX[:, 1]]
    c = coords[_ANGLE_IDX[:, 2]]
    ba = a - b
    bc = c - b
    n1 = np.linalg.norm(ba, axis=1)
    n2 = np.linalg.norm(bc, axis=1)
    valid = (n1 >= _MIN_BONE) & (n2 >= _MIN_BONE)
    denom = np.where(valid, n1 * n2, 1.0)
    cos_angle = np.clip(np.sum(ba * bc, axis=1) / denom, -1.0, 1.0)
    return np.degrees(np.arccos(cos_angle)), valid


def angle_difference(a, b):
    """Absolute angular difference wrapped to [0, 180]."""
    diff = np.abs(np.asarray(a) - np.asarray(b)) % 360.0
    return np.minimum(diff, 360.0 - diff)


def position_score(ref, cmp, ref_vis, cmp_vis, threshold: float) -> tuple[float, int]:
    """Weighted mean of 100 * exp(-d / POSITION_DECAY) over mutually visible landmarks."""
    both = visible_mask(ref_vis, threshold) & visible_mask(cmp_vis, threshold)
    count = int(both.sum())
    if count == 0:
        return 0.0, 0
    dist = np.linalg.norm(ref[both] - cmp[both], axis=1)
    sims = 100.0 * np.exp(-dist / POSITION_DECAY)
    return float(np.average(sims, weights=LANDMARK_WEIGHTS[both])), count


def angular_score(ref, cmp, ref_vis, cmp_vis, threshold: float) -> tuple[float, int]:
    """Mean of 100 * exp(-diff / ANGLE_DECAY_DEG) over joints comparable in both frames."""
    both = visible_mask(ref_vis, threshold) & visible_mask(cmp_vis, threshold)
    joints_visible = both[_ANGLE_IDX].all(axis=1)
    ref_angles, ref_valid = joint_angles(ref)
    cmp_angles, cmp_valid = joint_angles(cmp)
    usable = joints_visible & ref_valid & cmp_valid
    count = int(usable.sum())
    if count == 0:
        return 0.0, 0
    diff = angle_difference(ref_angles[usable], cmp_angles[usable])
    return float(np.mean(100.0 * np.exp(-diff / ANGLE_DECAY_DEG))), count


def score_frame(ref, cmp, ref_vis, cmp_vis, config: ComparisonConfig) -> FrameScore:
    """Score one aligned pair of normalized frames on a 0-100 scale.

    A sub-score with nothing comparable is 0, so occluded pairs pull the
    sequence score down instead of dropping out.
    """
    threshold = config.visibility_threshold
    pos, n_landmarks = position_score(ref, cmp, ref_vis, cmp_vis, threshold)
    ang, n_joints = angular_score(ref, cmp, ref_vis, cmp_vis, threshold)
    total = config.position_weight * pos + config.angular_weight * ang
    return FrameScore(
        position=pos,
        angular=ang,
        total=float(np.clip(total, 0.0, 100.0)),
        compared_landmarks=n_landmarks,
        compared_joints=n_joints,
    )
