"""Nearest-neighbor correspondence search between two point sets."""

from __future__ import annotations

import abc
import math
from dataclasses import dataclass

import numpy as np
from scipy.spatial import KDTree

from robust_icp.errors import NoTargetPointsError, SizeMismatchError
from robust_icp.geometry import PointSet


@dataclass(frozen=True, slots=True)
class CorrespondenceSet:
    """Result of matching every source point to its nearest target point."""

    indices: np.ndarray  # shape (N,), target index per source point
    matched: PointSet  # target points gathered by ``indices``
    distances: np.ndarray  # shape (N,), minimum distance per source point
    error: float  # sum of minimum distances

    def __post_init__(self) -> None:
        if not (len(self.indices) == self.matched.size() == len(self.distances)):
            raise SizeMismatchError(len(self.indices), self.matched.size())
        self.indices.setflags(write=False)
        self.distances.setflags(write=False)

    def size(self) -> int:
        return len(self.indices)

    @classmethod
    def empty(cls) -> "CorrespondenceSet":
        return cls(
            indices=np.empty(0, dtype=np.intp),
            matched=PointSet.empty(),
            distances=np.empty(0, dtype=np.float64),
            error=0.0,
        )


class CorrespondenceMatcher(abc.ABC):
    """Base class for nearest-neighbor strategies.

    Implementations must resolve ties to the smallest target index.
    """

    name: str = ""

    def match(self, transformed_source: PointSet, target: PointSet) -> CorrespondenceSet:
        if target.size() == 0:
            raise NoTargetPointsError()
        if transformed_source.size() == 0:
            return CorrespondenceSet.empty()
        indices, distances = self._nearest(transformed_source, target)
        return CorrespondenceSet(
            indices=indices,
            matched=target.take(indices),
            distances=distances,
            error=float(distances.sum()),
        )

    @abc.abstractmethod
    def _nearest(self, source: PointSet, target: PointSet) -> tuple[np.ndarray, np.ndarray]:
        """Return ``(indices, distances)`` for every source point."""


class BruteForceMatcher(CorrespondenceMatcher):
    """Scans every target point for every source point, O(N*M)."""

    name = "brute_force"

    def _nearest(self, source: PointSet, target: PointSet) -> tuple[np.ndarray, np.ndarray]:
        indices = np.empty(source.size(), dtype=np.intp)
        distances = np.empty(source.size(), dtype=np.float64)
        for i in range(source.size()):
            best_index = -1
            best_distance = math.inf
            for j in range(target.size()):
                distance = source.distance_between(i, j, target)
                # strict comparison keeps the first minimal j
                if distance < best_distance:
                    best_distance = distance
                    best_index = j
            indices[i] = best_index
            distances[i] = best_distance
        return indices, distances


class KDTreeMatcher(CorrespondenceMatcher):
    """KD-tree backed matcher with the same tie-break as the brute-force scan."""

    name = "kdtree"

    def __init__(self, tie_tolerance: float = 1e-12) -> None:
        self._tie_tolerance = tie_tolerance

    def _nearest(self, source: PointSet, target: PointSet) -> tuple[np.ndarray, np.ndarray]:
        tree = KDTree(target.as_array())
        distances, indices = tree.query(source.as_array(), k=1)
        indices = np.asarray(indices, dtype=np.intp)
        distances = np.asarray(distances, dtype=np.float64)

        # The tree returns an arbitrary index among equidistant neighbors.
        target_coords = target.as_array()
        for i, point in enumerate(source.as_array()):
            radius = distances[i] * (1.0 + self._tie_tolerance) + self._tie_tolerance
            candidates = tree.query_ball_point(point, r=radius)
            if len(candidates) <= 1:
                continue
            candidates = np.sort(np.asarray(candidates, dtype=np.intp))
            candidate_distances = np.hypot(*(target_coords[candidates] - point).T)
            best = int(np.argmin(candidate_distances))
            indices[i] = candidates[best]
            distances[i] = candidate_distances[best]
        return indices, distances


_MATCHERS = {
    BruteForceMatcher.name: BruteForceMatcher,
    KDTreeMatcher.name: KDTreeMatcher,
}


def available_matchers() -> list[str]:
    return sorted(_MATCHERS)


def build_matcher(name: str) -> CorrespondenceMatcher:
    """Instantiate a matcher by its configuration name."""
    key = name.lower()
    if key not in _MATCHERS:
        raise ValueError(f"Unsupported matching strategy: {name}")
    return _MATCHERS[key]()
