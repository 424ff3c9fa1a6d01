"""Four-parameter 2D similarity transform."""

from __future__ import annotations

import math
from dataclasses import dataclass, replace
from typing import Tuple

import numpy as np

from robust_icp.geometry.pointset import PointSet

PARAMETER_NAMES: Tuple[str, ...] = ("p0", "p1", "p2", "p3")


@dataclass(frozen=True, slots=True)
class SimilarityTransform:
    """Similarity map parameterized as a perturbation of the identity.

    x' = (1 + p1) * x - p2 * y + p0
    y' = p2 * x + (1 + p1) * y + p3

    p0 and p3 translate; p1 and p2 encode scale and rotation
    (scale = |1 + p1 + i*p2|). All-zero parameters give the identity.
    """

    p0: float = 0.0
    p1: float = 0.0
    p2: float = 0.0
    p3: float = 0.0

    @classmethod
    def identity(cls) -> "SimilarityTransform":
        return cls()

    @classmethod
    def from_translation(cls, dx: float, dy: float) -> "SimilarityTransform":
        return cls(p0=float(dx), p3=float(dy))

    @classmethod
    def from_parameters(cls, parameters) -> "SimilarityTransform":
        p0, p1, p2, p3 = (float(value) for value in parameters)
        return cls(p0, p1, p2, p3)

    @property
    def parameters(self) -> Tuple[float, float, float, float]:
        return (self.p0, self.p1, self.p2, self.p3)

    def parameter(self, index: int) -> float:
        return self.parameters[index]

    def with_parameter(self, index: int, value: float) -> "SimilarityTransform":
        """Return a copy with parameter ``index`` replaced."""
        return replace(self, **{PARAMETER_NAMES[index]: float(value)})

    @property
    def scale(self) -> float:
        return math.hypot(1.0 + self.p1, self.p2)

    @property
    def rotation(self) -> float:
        """Rotation angle in radians."""
        return math.atan2(self.p2, 1.0 + self.p1)

    @property
    def translation(self) -> Tuple[float, float]:
        return (self.p0, self.p3)

    def as_matrix(self) -> np.ndarray:
        """3x3 homogeneous matrix equivalent of this transform."""
        a = 1.0 + self.p1
        b = self.p2
        return np.array(
            [
                [a, -b, self.p0],
                [b, a, self.p3],
                [0.0, 0.0, 1.0],
            ],
            dtype=np.float64,
        )

    def compose(self, other: "SimilarityTransform") -> "SimilarityTransform":
        """Transform equivalent to applying ``other`` first, then ``self``."""
        matrix = self.as_matrix() @ other.as_matrix()
        return SimilarityTransform(
            p0=float(matrix[0, 2]),
            p1=float(matrix[0, 0] - 1.0),
            p2=float(matrix[1, 0]),
            p3=float(matrix[1, 2]),
        )

    def apply(self, points: PointSet) -> PointSet:
        """Map every point of ``points``; the input is left untouched."""
        coords = points.as_array()
        a = 1.0 + self.p1
        b = self.p2
        x = coords[:, 0]
        y = coords[:, 1]
        mapped = np.column_stack((a * x - b * y + self.p0, b * x + a * y + self.p3))
        return PointSet(mapped)

    __call__ = apply
