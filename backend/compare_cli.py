import argparse
import json
import logging
import sys

from pydantic import ValidationError

from comparator import compare_sequences
from errors import PoseCompareError
from models import ComparisonConfig, NormalizationConfig, PoseFrame
from presets import Preset, resolve_config, score_color, score_label


def load_frames(path: str) -> list[PoseFrame]:
    """Load frames from a Video JSON file ({"frames": [...]}) or a bare frame list."""
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    frames = data.get("frames", []) if isinstance(data, dict) else data
    return [PoseFrame.model_validate(frame) for frame in frames]


def build_config(args) -> ComparisonConfig:
    base = resolve_config(preset=args.preset)
    overrides = {}
    if args.no_center or args.no_scale or args.rotation:
        overrides["normalization"] = NormalizationConfig(
            center=base.normalization.center and not args.no_center,
            scale=base.normalization.scale and not args.no_scale,
            rotation=base.normalization.rotation or args.rotation,
        )
    if args.position_weight is not None:
        overrides["position_weight"] = args.position_weight
    if args.angular_weight is not None:
        overrides["angular_weight"] = args.angular_weight
    if args.visibility_threshold is not None:
        overrides["visibility_threshold"] = args.visibility_threshold
    if not overrides:
        return base
    return ComparisonConfig.model_validate({**base.model_dump(), **overrides})


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pose-compare",
        description="Score a comparison pose recording against a reference recording.",
    )
    parser.add_argument("ref_path", help="Reference video JSON file.")
    parser.add_argument("comp_path", help="Comparison video JSON file.")
    parser.add_argument("--preset", choices=[p.value for p in Preset], help="Named comparison preset.")
    parser.add_argument("--no-center", action="store_true", help="Do not center on the mid-hip.")
    parser.add_argument("--no-scale", action="store_true", help="Do not scale by torso length.")
    parser.add_argument("--rotation", action="store_true", help="Align the facing direction.")
    parser.add_argument("--position-weight", type=float)
    parser.add_argument("--angular-weight", type=float)
    parser.add_argument("--visibility-threshold", type=float)
    parser.add_argument("--output", "-o", help="Write the full result as JSON to this path.")
    parser.add_argument("--verbose", "-v", action="store_true")
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)

    try:
        config = build_config(args)
        result = compare_sequences(
            load_frames(args.ref_path), load_frames(args.comp_path), config
        )
    except (FileNotFoundError, json.JSONDecodeError, ValidationError, PoseCompareError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    b = result.breakdown
    print(f"Overall:  {result.overall_score:5.1f}  {score_label(result.overall_score)} ({score_color(result.overall_score)})")
    print(f"Position: {b.position_score:5.1f}")
    print(f"Angular:  {b.angular_score:5.1f}")
    print(f"Timing:   {b.timing_score:5.1f}")
    print(
        f"Frames:   {len(result.frame_scores)} "
        f"(mean {b.statistics.mean:.1f}, min {b.statistics.min:.1f}, "
        f"max {b.statistics.max:.1f}, variance {b.statistics.variance:.1f})"
    )

    if args.output:
        with open(args.output, "w", encoding="utf-8") as f:
            f.write(result.model_dump_json(indent=2, by_alias=True))
        print(f"Result written to {args.output}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
