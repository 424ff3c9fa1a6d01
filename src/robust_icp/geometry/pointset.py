"""Immutable 2D point containers used throughout the registration core."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, Iterator, Sequence, Tuple

import numpy as np

from robust_icp.errors import EmptySourceSetError, SizeMismatchError


@dataclass(frozen=True, slots=True)
class Point:
    """A single 2D coordinate."""

    x: float
    y: float

    def distance_to(self, other: "Point") -> float:
        return math.hypot(self.x - other.x, self.y - other.y)


class PointSet:
    """Ordered, fixed-size collection of 2D points.

    Coordinates live in a read-only ``(N, 2)`` float64 array, so a set can be
    shared freely between the aligner state and its consumers.
    """

    __slots__ = ("_coords",)

    def __init__(self, coords: np.ndarray | Sequence[Sequence[float]]) -> None:
        array = np.array(coords, dtype=np.float64)
        if array.size == 0:
            array = array.reshape(0, 2)
        if array.ndim != 2 or array.shape[1] != 2:
            raise ValueError(f"Expected points shape (N, 2) but got {array.shape}")
        if not np.isfinite(array).all():
            raise ValueError("Point coordinates must be finite")
        array.setflags(write=False)
        self._coords = array

    @classmethod
    def from_points(cls, points: Iterable[Point]) -> "PointSet":
        return cls([(point.x, point.y) for point in points])

    @classmethod
    def empty(cls) -> "PointSet":
        return cls(np.empty((0, 2), dtype=np.float64))

    def size(self) -> int:
        return self._coords.shape[0]

    def __len__(self) -> int:
        return self.size()

    def __getitem__(self, index: int) -> Point:
        x, y = self._coords[index]
        return Point(float(x), float(y))

    def __iter__(self) -> Iterator[Point]:
        for x, y in self._coords:
            yield Point(float(x), float(y))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PointSet):
            return NotImplemented
        return np.array_equal(self._coords, other._coords)

    def __repr__(self) -> str:
        return f"PointSet(size={self.size()})"

    def as_array(self) -> np.ndarray:
        """Return the read-only ``(N, 2)`` coordinate array."""
        return self._coords

    @property
    def xs(self) -> np.ndarray:
        return self._coords[:, 0]

    @property
    def ys(self) -> np.ndarray:
        return self._coords[:, 1]

    def mean_x(self) -> float:
        if self.size() == 0:
            raise EmptySourceSetError()
        return float(self.xs.mean())

    def mean_y(self) -> float:
        if self.size() == 0:
            raise EmptySourceSetError()
        return float(self.ys.mean())

    def distance_between(self, i: int, j: int, other: "PointSet | None" = None) -> float:
        """Euclidean distance between point ``i`` of this set and point ``j`` of ``other``.

        When ``other`` is omitted both indices refer to this set.
        """
        target = self if other is None else other
        dx = self._coords[i, 0] - target._coords[j, 0]
        dy = self._coords[i, 1] - target._coords[j, 1]
        return math.hypot(dx, dy)

    def pairwise_distances(self, other: "PointSet") -> np.ndarray:
        """Per-pair Euclidean distances between two equal-length sets."""
        if self.size() != other.size():
            raise SizeMismatchError(self.size(), other.size())
        return np.hypot(*(self._coords - other._coords).T)

    def distance_to(self, other: "PointSet") -> float:
        """Aggregate distance: the sum of per-pair Euclidean distances.

        The robust loss tuning constant and the optimizer step sizes are
        calibrated against this sum.
        """
        return float(self.pairwise_distances(other).sum())

    def take(self, indices: Sequence[int] | np.ndarray) -> "PointSet":
        """Gather points by index into a new set."""
        return PointSet(self._coords[np.asarray(indices, dtype=np.intp)])

    def bounds(self) -> Tuple[float, float, float, float]:
        """Axis-aligned bounding box ``(x_min, y_min, x_max, y_max)``."""
        if self.size() == 0:
            raise ValueError("Bounding box of an empty point set is undefined")
        x_min, y_min = self._coords.min(axis=0)
        x_max, y_max = self._coords.max(axis=0)
        return float(x_min), float(y_min), float(x_max), float(y_max)
