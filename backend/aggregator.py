import numpy as np

from config import FRAME_SCORE_BLEND, TIMING_SCORE_BLEND
from models import PoseFrame, ScoreBreakdown, ScoreStatistics, ScoringResult
from scorer import FrameScore


def sequence_duration(frames: list[PoseFrame]) -> float:
    """Last minus first timestamp (ms); 0 for sequences shorter than two frames."""
    if len(frames) < 2:
        return 0.0
    return frames[-1].timestamp - frames[0].timestamp


def timing_score(duration_a: float, duration_b: float) -> float:
    longest = max(duration_a, duration_b)
    if longest <= 0:
        return 100.0  # both zero-length: trivial match
    return 100.0 * min(duration_a, duration_b) / longest


def score_statistics(frame_scores: list[float]) -> ScoreStatistics:
    """Mean, min, max and population variance (ddof=0) of the frame scores."""
    scores = np.asarray(frame_scores, dtype=np.float64)
    return ScoreStatistics(
        mean=float(scores.mean()),
        min=float(scores.min()),
        max=float(scores.max()),
        variance=float(scores.var()),
    )


def aggregate(
    pair_scores: list[FrameScore],
    reference: list[PoseFrame],
    comparison: list[PoseFrame],
) -> ScoringResult:
    frame_scores = [s.total for s in pair_scores]
    stats = score_statistics(frame_scores)
    timing = timing_score(sequence_duration(reference), sequence_duration(comparison))
    overall = FRAME_SCORE_BLEND * stats.mean + TIMING_SCORE_BLEND * timing

    return ScoringResult(
        overall_score=float(np.clip(overall, 0.0, 100.0)),
        frame_scores=frame_scores,
        breakdown=ScoreBreakdown(
            position_score=float(np.mean([s.position for s in pair_scores])),
            angular_score=float(np.mean([s.angular for s in pair_scores])),
            timing_score=timing,
            statistics=stats,
        ),
    )
