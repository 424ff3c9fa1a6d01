"""High-level orchestration: alignment plus optional rendering and export."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import cv2
import numpy as np
from loguru import logger

from robust_icp.alignment import AlignmentResult, ICPAligner
from robust_icp.config import RegistrationConfig
from robust_icp.geometry import PointSet
from robust_icp.viz import AlignmentRenderer


@dataclass(slots=True)
class PipelineOutput:
    result: AlignmentResult
    canvas: Optional[np.ndarray] = None
    image_path: Optional[Path] = None


class RegistrationPipeline:
    """Runs the aligner and hands its read-only outputs to the renderer."""

    def __init__(
        self,
        config: RegistrationConfig,
        aligner: ICPAligner,
        renderer: Optional[AlignmentRenderer] = None,
    ) -> None:
        self._config = config
        self._aligner = aligner
        self._renderer = renderer

    @classmethod
    def from_config(cls, config: RegistrationConfig) -> "RegistrationPipeline":
        aligner = ICPAligner.from_config(config.alignment)
        renderer = AlignmentRenderer(config.render) if config.render.enabled else None
        logger.info(
            f"Registration pipeline initialized: matcher={aligner.matcher.name}, "
            f"outer_iterations={aligner.outer_iterations}, inner_iterations={aligner.optimizer.iterations}"
        )
        return cls(config=config, aligner=aligner, renderer=renderer)

    @property
    def aligner(self) -> ICPAligner:
        return self._aligner

    def process(self, source: PointSet, target: PointSet) -> PipelineOutput:
        self._aligner.run(source, target)
        result = self._aligner.result

        if self._renderer is None:
            return PipelineOutput(result=result)

        canvas = self._renderer.render(source, target, result.state)
        image_path = None
        output_dir = self._config.render.output_dir
        if output_dir is not None:
            image_path = self._export_canvas(canvas, output_dir)
        return PipelineOutput(result=result, canvas=canvas, image_path=image_path)

    def _export_canvas(self, canvas: np.ndarray, directory: Path) -> Path:
        """Write the canvas as the next numbered PNG for the current settings."""
        directory.mkdir(parents=True, exist_ok=True)
        stem = self._export_stem()
        index = len(list(directory.glob(f"{stem}_*.png")))
        path = directory / f"{stem}_{index:03d}.png"
        if not cv2.imwrite(str(path), canvas):
            raise RuntimeError(f"Failed to write alignment image to {path}")
        logger.debug(f"Saved alignment image to {path}")
        return path

    def _export_stem(self) -> str:
        alignment = self._config.alignment
        opt = alignment.optimizer
        return (
            f"robust_icp_{alignment.outer_iterations}outer_{opt.iterations}inner"
            f"_rate{opt.translation_rate:g}-{opt.rotation_rate:g}"
            f"_step{opt.translation_step:g}-{opt.rotation_step:g}"
        )
