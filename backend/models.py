from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field
from pydantic.config import ConfigDict

from config import VISIBILITY_THRESHOLD

NUM_LANDMARKS = 33


class Landmark(BaseModel):
    model_config = ConfigDict(allow_inf_nan=False)

    x: float
    y: float
    z: float
    visibility: Optional[float] = None
    presence: Optional[float] = None


class PoseFrame(BaseModel):
    model_config = ConfigDict(populate_by_name=True, allow_inf_nan=False)

    timestamp: float  # ms
    landmarks: list[Landmark] = Field(min_length=NUM_LANDMARKS, max_length=NUM_LANDMARKS)
    raw_type: Optional[str] = Field(default=None, alias="rawType")


class Video(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    start_time: datetime = Field(alias="startTime")
    end_time: Optional[datetime] = Field(default=None, alias="endTime")
    duration: Optional[float] = None  # ms, set when sealed
    frames: list[PoseFrame] = Field(default_factory=list)


class VideoMetadata(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    start_time: datetime = Field(alias="startTime")
    end_time: Optional[datetime] = Field(default=None, alias="endTime")
    frame_count: int = Field(alias="frameCount")
    duration: Optional[float] = None


class Client(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    client_id: str = Field(alias="clientId")
    last_seen_at: Optional[float] = Field(default=None, alias="lastSeenAt")  # ms epoch


class NormalizationConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    center: bool = True
    scale: bool = True
    rotation: bool = False


class ComparisonConfig(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    normalization: NormalizationConfig = Field(default_factory=NormalizationConfig)
    position_weight: float = Field(default=0.5, ge=0.0, le=1.0, alias="positionWeight")
    angular_weight: float = Field(default=0.5, ge=0.0, le=1.0, alias="angularWeight")
    visibility_threshold: float = Field(
        default=VISIBILITY_THRESHOLD, ge=0.0, le=1.0, alias="visibilityThreshold"
    )


class ScoreStatistics(BaseModel):
    model_config = ConfigDict(frozen=True)

    mean: float
    min: float
    max: float
    variance: float


class ScoreBreakdown(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    position_score: float = Field(alias="positionScore")
    angular_score: float = Field(alias="angularScore")
    timing_score: float = Field(alias="timingScore")
    statistics: ScoreStatistics


class ScoringResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    overall_score: float = Field(alias="overallScore")
    frame_scores: list[float] = Field(alias="frameScores")
    breakdown: ScoreBreakdown


class CompareVideosRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    reference_video_id: str = Field(alias="referenceVideoId")
    comparison_video_id: str = Field(alias="comparisonVideoId")
    config: Optional[ComparisonConfig] = None
    preset: Optional[str] = None  # dance, yoga, sports
