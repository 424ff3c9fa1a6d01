"""Reading and writing point sets."""

from __future__ import annotations

import json
from pathlib import Path

import numpy as np
import yaml
from loguru import logger

from robust_icp.geometry import PointSet

_TEXT_SUFFIXES = {".csv", ".txt", ".xy"}
_STRUCTURED_SUFFIXES = {".yaml", ".yml", ".json"}


def load_point_set(path: str | Path) -> PointSet:
    """Load a point set from delimited text or a YAML/JSON document.

    Text files hold one ``x, y`` pair per line (comma or whitespace
    separated, ``#`` comments allowed). Structured files hold either a list
    of ``[x, y]`` pairs or a mapping with a ``points`` key.
    """
    path = Path(path)
    suffix = path.suffix.lower()
    if suffix in _TEXT_SUFFIXES:
        coords = _load_text(path)
    elif suffix in _STRUCTURED_SUFFIXES:
        coords = _load_structured(path)
    else:
        raise ValueError(f"Unsupported point file format: {path.suffix}")
    points = PointSet(coords)
    logger.debug(f"Loaded {points.size()} points from {path}")
    return points


def save_point_set(points: PointSet, path: str | Path) -> Path:
    """Write a point set as comma separated ``x,y`` lines."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    np.savetxt(path, points.as_array(), delimiter=",", header="x,y", fmt="%.10g")
    return path


def _load_text(path: Path) -> np.ndarray:
    delimiter = "," if "," in _first_data_line(path) else None
    coords = np.loadtxt(path, delimiter=delimiter, comments="#", ndmin=2, dtype=np.float64)
    if coords.size == 0:
        return np.empty((0, 2), dtype=np.float64)
    return coords


def _load_structured(path: Path) -> np.ndarray:
    with open(path, "r", encoding="utf-8") as handle:
        if path.suffix.lower() == ".json":
            raw = json.load(handle)
        else:
            raw = yaml.safe_load(handle)
    if isinstance(raw, dict):
        raw = raw.get("points")
    if raw is None:
        return np.empty((0, 2), dtype=np.float64)
    if not isinstance(raw, list):
        raise ValueError(f"Expected a list of [x, y] pairs in {path}")
    return np.array(raw, dtype=np.float64)


def _first_data_line(path: Path) -> str:
    """First line that is neither blank nor a ``#`` comment."""
    with open(path, "r", encoding="utf-8") as handle:
        for line in handle:
            stripped = line.split("#", 1)[0].strip()
            if stripped:
                return stripped
    return ""
