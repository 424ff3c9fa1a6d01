"""Visualization of alignment results."""

from .render import AlignmentRenderer, CanvasMapping, fit_canvas  # noqa: F401
