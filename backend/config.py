"""
Shared configuration for the pose comparison backend.
Every value can be overridden through the environment.
"""

import os

_ROOT = os.path.dirname(__file__)


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    return float(raw)


def _env_optional_float(name: str) -> float | None:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return None
    return float(raw)


# Scoring defaults
VISIBILITY_THRESHOLD = _env_float("POSE_VISIBILITY_THRESHOLD", 0.5)
POSITION_DECAY = _env_float("POSE_POSITION_DECAY", 0.5)        # normalized units
ANGLE_DECAY_DEG = _env_float("POSE_ANGLE_DECAY_DEG", 30.0)     # degrees
WEIGHT_TOLERANCE = _env_float("POSE_WEIGHT_TOLERANCE", 1e-6)

# overallScore = FRAME_SCORE_BLEND * mean(frameScores) + TIMING_SCORE_BLEND * timingScore
FRAME_SCORE_BLEND = _env_float("POSE_FRAME_SCORE_BLEND", 0.8)
TIMING_SCORE_BLEND = _env_float("POSE_TIMING_SCORE_BLEND", 0.2)

# Compute budget
MAX_ALIGNED_FRAMES = int(_env_float("POSE_MAX_ALIGNED_FRAMES", 100_000))
COMPARE_TIME_BUDGET = _env_optional_float("POSE_COMPARE_TIME_BUDGET")  # seconds

# Pose extraction
MODEL_PATH = os.environ.get(
    "POSE_MODEL_PATH", os.path.join(_ROOT, "pose_landmarker_lite.task")
)

# Service
CORS_ORIGINS = [o.strip() for o in os.environ.get("POSE_CORS_ORIGINS", "*").split(",") if o.strip()]
LOG_LEVEL = os.environ.get("POSE_LOG_LEVEL", "INFO").upper()
