"""Beaton-Tukey robust loss and the transform cost built on it."""

from __future__ import annotations

from robust_icp.errors import SizeMismatchError
from robust_icp.geometry import PointSet, SimilarityTransform

DEFAULT_TUNING_CONSTANT = 1e7


def beaton_tukey_rho(u: float, a: float = DEFAULT_TUNING_CONSTANT) -> float:
    """Beaton-Tukey biweight loss with tuning constant ``a``.

    Saturates at ``a**2 / 6`` once ``|u|`` exceeds ``a``. Inside the band the
    expansion ``t * (3 - 3t + t**2)`` of ``1 - (1 - t)**3`` is used, with
    ``t = (u/a)**2``, so residuals far below ``a`` do not round to zero.
    """
    if a <= 0:
        raise ValueError(f"Tuning constant must be positive, got {a}")
    ceiling = a * a / 6.0
    if abs(u) > a:
        return ceiling
    t = (u / a) ** 2
    return ceiling * t * (3.0 - 3.0 * t + t * t)


class RobustCostEstimator:
    """Scores a candidate transform against a fixed set of matched targets."""

    def __init__(self, tuning_constant: float = DEFAULT_TUNING_CONSTANT) -> None:
        if tuning_constant <= 0:
            raise ValueError(f"Tuning constant must be positive, got {tuning_constant}")
        self._a = float(tuning_constant)

    @property
    def tuning_constant(self) -> float:
        return self._a

    @property
    def ceiling(self) -> float:
        """Largest value the loss can take."""
        return self._a * self._a / 6.0

    def rho(self, u: float) -> float:
        return beaton_tukey_rho(u, self._a)

    def cost(
        self,
        transform: SimilarityTransform,
        source: PointSet,
        matched_targets: PointSet,
    ) -> float:
        if source.size() != matched_targets.size():
            raise SizeMismatchError(source.size(), matched_targets.size())
        return self.rho(transform.apply(source).distance_to(matched_targets))
