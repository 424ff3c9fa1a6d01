"""Estimate the similarity transform aligning two point files."""

from __future__ import annotations

import argparse
import math
import sys
from pathlib import Path
from typing import Optional, Sequence

import yaml
from loguru import logger

from robust_icp.config import RegistrationConfig, load_config
from robust_icp.pipeline import RegistrationPipeline
from robust_icp.utils import load_point_set, save_point_set
from robust_icp.utils.logging import configure_logging


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Robust ICP registration of two 2D point sets")
    parser.add_argument("--config", type=Path, help="Path to registration YAML configuration")
    parser.add_argument("--source", type=Path, required=True, help="Point file to be aligned")
    parser.add_argument("--target", type=Path, required=True, help="Reference point file")
    parser.add_argument("--output-dir", type=Path, help="Directory for the rendered image and aligned points")
    parser.add_argument("--no-render", action="store_true", help="Skip drawing the alignment canvas")
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)
    try:
        cfg = load_config(args.config) if args.config else RegistrationConfig()
    except (ValueError, OSError, yaml.YAMLError) as exc:
        logger.error(f"Invalid configuration {args.config}: {exc}")
        return 1
    if args.no_render:
        cfg.render.enabled = False
    if args.output_dir is not None:
        args.output_dir.mkdir(parents=True, exist_ok=True)
        cfg.render.output_dir = args.output_dir
    configure_logging(cfg.logging)

    try:
        source = load_point_set(args.source)
        target = load_point_set(args.target)
        pipeline = RegistrationPipeline.from_config(cfg)
        output = pipeline.process(source, target)
    except (ValueError, OSError) as exc:
        logger.error(f"Registration failed: {exc}")
        return 1

    transform = output.result.transform
    logger.info(f"Estimated parameters: {transform.parameters}")
    logger.info(
        f"scale={transform.scale:.6f}, rotation={math.degrees(transform.rotation):.4f}deg, "
        f"translation=({transform.translation[0]:.4f}, {transform.translation[1]:.4f})"
    )
    logger.info(f"Final matching error: {output.result.error:.6f} (history={list(output.result.history)})")

    if args.output_dir is not None:
        aligned_path = save_point_set(output.result.state.transformed, args.output_dir / "aligned.csv")
        logger.info(f"Aligned points written to {aligned_path}")
    if output.image_path is not None:
        logger.info(f"Alignment image written to {output.image_path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
