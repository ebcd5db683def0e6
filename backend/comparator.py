import logging
import time
from typing import Optional

from aggregator import aggregate
from aligner import align_linear
from config import COMPARE_TIME_BUDGET, MAX_ALIGNED_FRAMES, WEIGHT_TOLERANCE
from errors import ComputeBudgetExceededError, InvalidInputError
from models import ComparisonConfig, CompareVideosRequest, PoseFrame, ScoringResult
from normalizer import frame_arrays, normalize_frame
from presets import resolve_config
from scorer import FrameScore, score_frame

logger = logging.getLogger(__name__)


def validate_config(config: ComparisonConfig) -> None:
    total = config.position_weight + config.angular_weight
    if abs(total - 1.0) > WEIGHT_TOLERANCE:
        raise InvalidInputError(
            f"positionWeight + angularWeight must equal 1.0, got {total:.6f}"
        )


def validate_sequence(frames: list[PoseFrame], label: str) -> None:
    if not frames:
        raise InvalidInputError(f"{label} sequence is empty")
    for prev, cur in zip(frames, frames[1:]):
        if cur.timestamp < prev.timestamp:
            raise InvalidInputError(
                f"{label} timestamps decrease ({prev.timestamp} -> {cur.timestamp})"
            )


def compare_sequences(
    reference: list[PoseFrame],
    comparison: list[PoseFrame],
    config: Optional[ComparisonConfig] = None,
    *,
    max_frames: Optional[int] = MAX_ALIGNED_FRAMES,
    time_budget: Optional[float] = COMPARE_TIME_BUDGET,
) -> ScoringResult:
    """Score a comparison sequence against a reference on a 0-100 scale.

    Frames are paired by linear time-warp, normalized per the config, scored
    on landmark position and joint angles, then combined with a timing score.
    Raises InvalidInputError before any scoring work, and
    ComputeBudgetExceededError if max_frames pairs or time_budget seconds
    would be exceeded.
    """
    if config is None:
        config = ComparisonConfig()
    validate_config(config)
    validate_sequence(reference, "Reference")
    validate_sequence(comparison, "Comparison")

    pairs = align_linear(len(reference), len(comparison))
    if max_frames is not None and len(pairs) > max_frames:
        raise ComputeBudgetExceededError(
            f"{len(pairs)} aligned frames exceeds budget of {max_frames}"
        )

    started = time.monotonic()
    pair_scores: list[FrameScore] = []
    skipped = 0
    for ri, ci in pairs:
        if time_budget is not None and time.monotonic() - started > time_budget:
            raise ComputeBudgetExceededError(
                f"Comparison exceeded {time_budget:.1f}s after {len(pair_scores)} frames"
            )
        ref, ref_vis = frame_arrays(reference[ri])
        cmp, cmp_vis = frame_arrays(comparison[ci])
        ref, ref_ok = normalize_frame(ref, ref_vis, config.normalization, config.visibility_threshold)
        cmp, cmp_ok = normalize_frame(cmp, cmp_vis, config.normalization, config.visibility_threshold)
        if not (ref_ok and cmp_ok):
            skipped += 1
        pair_scores.append(score_frame(ref, cmp, ref_vis, cmp_vis, config))

    result = aggregate(pair_scores, reference, comparison)
    logger.info(
        "Compared %d/%d frames over %d pairs: overall %.1f (%d identity-normalized)",
        len(reference), len(comparison), len(pairs), result.overall_score, skipped,
    )
    return result


def compare_videos(store, request: CompareVideosRequest) -> ScoringResult:
    """Resolve both videos by id and compare them."""
    config = resolve_config(request.config, request.preset)
    validate_config(config)
    reference = store.get_video(request.reference_video_id)
    comparison = store.get_video(request.comparison_video_id)
    return compare_sequences(reference.frames, comparison.frames, config)
