from enum import Enum
from typing import Optional

from errors import InvalidInputError
from models import ComparisonConfig, NormalizationConfig


class Preset(str, Enum):
    DANCE = "dance"
    YOGA = "yoga"
    SPORTS = "sports"


COMPARISON_PRESETS: dict[Preset, ComparisonConfig] = {
    Preset.DANCE: ComparisonConfig(
        normalization=NormalizationConfig(center=True, scale=True, rotation=False),
        position_weight=0.5,
        angular_weight=0.5,
    ),
    # Facing direction varies between takes, so rotation is aligned too
    Preset.YOGA: ComparisonConfig(
        normalization=NormalizationConfig(center=True, scale=True, rotation=True),
        position_weight=0.4,
        angular_weight=0.6,
    ),
    Preset.SPORTS: ComparisonConfig(
        normalization=NormalizationConfig(center=True, scale=True, rotation=False),
        position_weight=0.7,
        angular_weight=0.3,
        visibility_threshold=0.7,
    ),
}


def get_preset(name: str) -> ComparisonConfig:
    try:
        return COMPARISON_PRESETS[Preset(name.lower())]
    except ValueError:
        options = ", ".join(p.value for p in Preset)
        raise InvalidInputError(f"Unknown preset '{name}' (expected one of: {options})") from None


def resolve_config(
    config: Optional[ComparisonConfig] = None,
    preset: Optional[str] = None,
) -> ComparisonConfig:
    """Explicit config wins, then the named preset, then the defaults."""
    if config is not None:
        return config
    if preset is not None:
        return get_preset(preset)
    return ComparisonConfig()


# (lower bound, label, color)
_SCORE_BANDS = [
    (90, "Excellent", "#22c55e"),
    (70, "Good", "#eab308"),
    (50, "Fair", "#f97316"),
]


def score_label(score: float) -> str:
    for bound, label, _ in _SCORE_BANDS:
        if score >= bound:
            return label
    return "Needs Improvement"


def score_color(score: float) -> str:
    for bound, _, color in _SCORE_BANDS:
        if score >= bound:
            return color
    return "#ef4444"
