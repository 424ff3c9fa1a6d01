"""Draws an alignment result onto an OpenCV canvas."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

import cv2
import numpy as np

from robust_icp.alignment import AlignmentState
from robust_icp.config import RenderConfig
from robust_icp.geometry import PointSet


@dataclass(slots=True)
class CanvasMapping:
    """Affine map from world coordinates to canvas pixels."""

    scale: float
    offset: Tuple[float, float]
    origin: Tuple[float, float]

    def to_pixels(self, points: PointSet) -> np.ndarray:
        coords = points.as_array()
        pixels = (coords - np.asarray(self.origin)) * self.scale + np.asarray(self.offset)
        return np.rint(pixels).astype(np.int32)


def fit_canvas(point_sets: Tuple[PointSet, ...], width: int, height: int, margin: int) -> CanvasMapping:
    """Scale and translate so every point lands inside the canvas margin."""
    stacked = np.vstack([points.as_array() for points in point_sets if points.size() > 0])
    x_min, y_min = stacked.min(axis=0)
    x_max, y_max = stacked.max(axis=0)
    usable_w = max(1, width - 2 * margin)
    usable_h = max(1, height - 2 * margin)
    span = max(x_max - x_min, y_max - y_min)
    scale = min(usable_w, usable_h) / span if span > 0 else 1.0
    return CanvasMapping(scale=scale, offset=(float(margin), float(margin)), origin=(float(x_min), float(y_min)))


class AlignmentRenderer:
    """Renders source, target, transformed points and their correspondences."""

    def __init__(self, config: RenderConfig) -> None:
        self._config = config

    def render(self, source: PointSet, target: PointSet, state: AlignmentState) -> np.ndarray:
        cfg = self._config
        canvas = np.zeros((cfg.height, cfg.width, 3), dtype=np.uint8)
        mapping = fit_canvas((source, target, state.transformed), cfg.width, cfg.height, cfg.margin_px)

        source_px = mapping.to_pixels(source)
        target_px = mapping.to_pixels(target)
        transformed_px = mapping.to_pixels(state.transformed)
        matched_px = mapping.to_pixels(state.correspondences.matched)

        self._draw_points(canvas, source_px, cfg.source_color_bgr)
        self._draw_points(canvas, target_px, cfg.target_color_bgr)
        self._draw_points(canvas, transformed_px, cfg.transformed_color_bgr)

        color = tuple(int(value) for value in cfg.correspondence_color_bgr)
        for start, moved, matched in zip(source_px, transformed_px, matched_px):
            cv2.arrowedLine(canvas, tuple(map(int, start)), tuple(map(int, moved)), color, cfg.arrow_thickness_px)
            cv2.arrowedLine(canvas, tuple(map(int, moved)), tuple(map(int, matched)), color, cfg.arrow_thickness_px)

        if target.size() > 0:
            x_min, y_min = target_px.min(axis=0)
            x_max, y_max = target_px.max(axis=0)
            box_color = tuple(int(value) for value in cfg.box_color_bgr)
            cv2.rectangle(canvas, (int(x_min), int(y_min)), (int(x_max), int(y_max)), box_color, 1)
        return canvas

    def _draw_points(self, canvas: np.ndarray, pixels: np.ndarray, color_bgr) -> None:
        color = tuple(int(value) for value in color_bgr)
        for x, y in pixels:
            cv2.circle(canvas, (int(x), int(y)), self._config.point_radius_px, color, -1)
