"""Finite-difference coordinate descent over the similarity parameters."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence, Tuple

from loguru import logger

from robust_icp.errors import SizeMismatchError
from robust_icp.geometry import PointSet, SimilarityTransform
from robust_icp.alignment.robust_cost import RobustCostEstimator


@dataclass(frozen=True, slots=True)
class ParameterSchedule:
    """Finite-difference step and learning rate for one parameter."""

    step: float
    rate: float

    def __post_init__(self) -> None:
        if self.step <= 0:
            raise ValueError(f"Finite-difference step must be positive, got {self.step}")
        if self.rate < 0:
            raise ValueError(f"Learning rate must be non-negative, got {self.rate}")


TRANSLATION_SCHEDULE = ParameterSchedule(step=1.0, rate=1e-3)
ROTATION_SCHEDULE = ParameterSchedule(step=1e-3, rate=1e-10)


def default_schedules() -> Tuple[ParameterSchedule, ...]:
    """Translation-like p0/p3 take coarse steps, p1/p2 fine ones."""
    return (TRANSLATION_SCHEDULE, ROTATION_SCHEDULE, ROTATION_SCHEDULE, TRANSLATION_SCHEDULE)


class TransformOptimizer:
    """Sequential coordinate descent with forward-difference gradients.

    Within an iteration parameters are updated in the order p0, p1, p2, p3 and
    each update is visible when the next gradient is estimated. There is no
    convergence test; exactly ``iterations`` sweeps are run.
    """

    def __init__(
        self,
        estimator: RobustCostEstimator | None = None,
        schedules: Sequence[ParameterSchedule] | None = None,
        iterations: int = 1,
    ) -> None:
        if iterations < 0:
            raise ValueError(f"Iteration count must be non-negative, got {iterations}")
        self._estimator = estimator or RobustCostEstimator()
        self._schedules = tuple(schedules) if schedules is not None else default_schedules()
        if len(self._schedules) != 4:
            raise ValueError(f"Expected 4 parameter schedules, got {len(self._schedules)}")
        self._iterations = iterations

    @property
    def estimator(self) -> RobustCostEstimator:
        return self._estimator

    @property
    def schedules(self) -> Tuple[ParameterSchedule, ...]:
        return self._schedules

    @property
    def iterations(self) -> int:
        return self._iterations

    def optimize(
        self,
        initial: SimilarityTransform,
        source: PointSet,
        matched_targets: PointSet,
    ) -> SimilarityTransform:
        if source.size() != matched_targets.size():
            raise SizeMismatchError(source.size(), matched_targets.size())

        current = initial
        for iteration in range(self._iterations):
            start_cost = None
            for k, schedule in enumerate(self._schedules):
                base_cost = self._estimator.cost(current, source, matched_targets)
                if start_cost is None:
                    start_cost = base_cost
                probe = current.with_parameter(k, current.parameter(k) + schedule.step)
                probe_cost = self._estimator.cost(probe, source, matched_targets)
                gradient = (probe_cost - base_cost) / schedule.step
                current = current.with_parameter(k, current.parameter(k) - schedule.rate * gradient)
            # the closing cost is only evaluated when a DEBUG sink is active
            logger.opt(lazy=True).debug(
                "Descent sweep {}: cost {:.6g} -> {:.6g}, parameters={}",
                lambda: iteration,
                lambda: start_cost,
                lambda: self._estimator.cost(current, source, matched_targets),
                lambda: current.parameters,
            )
        return current
