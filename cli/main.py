"""
cli/main.py
═══════════
Find and display the top-N matching images for a target image, ranked by
precomputed feature vectors.

  Run with:
      python -m cli.main <target_image> <feature_file> <N> <distance_metric>
      image-matcher pic.1016.jpg data/features.csv 3 rgb-hist --display gallery

Exit status
───────────
  0  success
  2  bad arguments / unknown metric / invalid settings
  3  feature file missing or malformed
  4  target not present in the feature file
  5  target image missing, empty or unreadable (checked for every display)
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Optional, Sequence

from pydantic import ValidationError

from cli.schemas import MatchRequest
from config.settings import Settings, get_settings
from frontend.gallery import RENDERERS, GalleryRenderer, get_renderer
from models.matchmaker import MatchingEngine
from models.metrics import get_metric, list_metrics
from utils.data_loader import load_features
from utils.errors import ConfigurationError, MatcherError
from utils.logger import logger, set_log_level


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="image-matcher",
        description="Find the N images most similar to a target image using precomputed feature vectors.",
        epilog=f"distance_metric options: {', '.join(list_metrics())}",
    )
    parser.add_argument("target_image", help="target image filename, as recorded in the feature file")
    parser.add_argument("feature_file", help="CSV of <name>,<v1>,…,<vK> rows")
    parser.add_argument("N", help="number of matches to return (positive integer)")
    parser.add_argument("distance_metric", help="matching method")
    parser.add_argument(
        "--display",
        choices=RENDERERS,
        default="console",
        help="how to present the matches (default: console)",
    )
    parser.add_argument("--image-dir", type=Path, help="directory the image names are resolved against")
    parser.add_argument("--gallery-out", type=Path, help="write the gallery to this file instead of opening a viewer")
    parser.add_argument("--log-level", help="console log level, e.g. DEBUG")
    return parser


def _problems(exc: ValidationError) -> str:
    return "; ".join(
        f"{'.'.join(str(p) for p in err['loc']) or 'input'}: {err['msg']}"
        for err in exc.errors()
    )


def _parse_request(args: argparse.Namespace) -> MatchRequest:
    try:
        return MatchRequest(
            target=args.target_image,
            feature_file=args.feature_file,
            top_n=args.N,
            metric=args.distance_metric,
        )
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid arguments — {_problems(exc)}") from None


def _effective_settings(args: argparse.Namespace) -> Settings:
    try:
        settings = get_settings()
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid settings — {_problems(exc)}") from None
    overrides = {}
    if args.image_dir is not None:
        overrides["image_dir"] = args.image_dir
    if args.gallery_out is not None:
        overrides["gallery_output"] = args.gallery_out
    return settings.model_copy(update=overrides) if overrides else settings


def run(args: argparse.Namespace) -> int:
    if args.log_level:
        try:
            set_log_level(args.log_level)
        except ValueError as exc:
            raise ConfigurationError(f"Invalid log level '{args.log_level}': {exc}") from None

    settings = _effective_settings(args)
    request = _parse_request(args)
    metric = get_metric(request.metric, settings)
    logger.info(
        f"Find similar images for '{request.target}' from feature file {request.feature_file}"
    )
    logger.info(f"Using distance metric: {metric.token} ({metric.description})")

    dataset = load_features(request.feature_file)
    engine = MatchingEngine(dataset, settings)
    result = engine.match(request.target, top_n=request.top_n, metric=metric)

    renderer = get_renderer(args.display, settings)
    GalleryRenderer(image_dir=settings.image_dir).check_target(request.target)
    renderer.render(request.target, result.names, result)
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        return run(args)
    except MatcherError as exc:
        logger.error(str(exc))
        return exc.exit_code


if __name__ == "__main__":
    sys.exit(main())
