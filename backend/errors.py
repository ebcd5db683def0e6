class PoseCompareError(Exception):
    """Base class for every error the comparison backend raises."""


class InvalidInputError(PoseCompareError):
    """Empty or malformed sequence, or an invalid comparison config."""


class InsufficientLandmarks(PoseCompareError):
    """A frame lacks the visible landmarks needed for a reference point or angle.

    Recoverable: callers fall back to an identity transform or a zero sub-score.
    """


class ComputeBudgetExceededError(PoseCompareError):
    """A comparison went over its frame or time budget."""


class VideoNotFoundError(PoseCompareError):
    def __init__(self, video_id: str):
        super().__init__(f"Video not found: {video_id}")
        self.video_id = video_id


class ExtractorUnavailableError(PoseCompareError):
    """Pose extraction cannot run: the extract extra or the model file is missing."""
