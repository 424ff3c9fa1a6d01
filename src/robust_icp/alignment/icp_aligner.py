"""Robust ICP alignment of a source point set onto a target point set."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import TYPE_CHECKING, List, Optional, Tuple

import numpy as np
from loguru import logger

from robust_icp.alignment.correspondence import (
    BruteForceMatcher,
    CorrespondenceMatcher,
    CorrespondenceSet,
    build_matcher,
)
from robust_icp.alignment.optimizer import ParameterSchedule, TransformOptimizer
from robust_icp.alignment.robust_cost import RobustCostEstimator
from robust_icp.errors import EmptySourceSetError, NoTargetPointsError, SizeMismatchError
from robust_icp.geometry import PointSet, SimilarityTransform

if TYPE_CHECKING:
    from robust_icp.config import AlignmentConfig


@dataclass(frozen=True, slots=True)
class AlignmentState:
    """Snapshot of the loop: transform, source image under it, and correspondences."""

    transform: SimilarityTransform
    transformed: PointSet
    correspondences: CorrespondenceSet
    iteration: int  # outer iterations completed

    def __post_init__(self) -> None:
        if self.correspondences.size() != self.transformed.size():
            raise SizeMismatchError(self.transformed.size(), self.correspondences.size())


@dataclass(frozen=True, slots=True)
class AlignmentResult:
    """Result of an ICP run."""

    transform: SimilarityTransform
    state: AlignmentState
    history: Tuple[float, ...]  # matching error at each outer iteration
    iterations: int
    elapsed_ms: float

    @property
    def error(self) -> float:
        return self.state.correspondences.error


class ICPAligner:
    """Alternates nearest-neighbor matching and robust transform re-estimation.

    Both the outer loop and the optimizer run a fixed number of iterations;
    there is no convergence test.
    """

    def __init__(
        self,
        outer_iterations: int = 2,
        optimizer: Optional[TransformOptimizer] = None,
        matcher: Optional[CorrespondenceMatcher] = None,
    ) -> None:
        """
        Args:
            outer_iterations: Number of match + re-estimate cycles
            optimizer: Transform re-estimation step (defaults to one descent sweep)
            matcher: Correspondence strategy (brute-force scan if None)
        """
        if outer_iterations < 0:
            raise ValueError(f"Outer iteration count must be non-negative, got {outer_iterations}")
        self._outer_iterations = outer_iterations
        self._optimizer = optimizer or TransformOptimizer()
        self._matcher = matcher or BruteForceMatcher()
        self._result: Optional[AlignmentResult] = None

    @classmethod
    def from_config(cls, config: "AlignmentConfig") -> "ICPAligner":
        opt = config.optimizer
        translation = ParameterSchedule(step=opt.translation_step, rate=opt.translation_rate)
        rotation = ParameterSchedule(step=opt.rotation_step, rate=opt.rotation_rate)
        optimizer = TransformOptimizer(
            estimator=RobustCostEstimator(config.robust_loss.tuning_constant),
            schedules=(translation, rotation, rotation, translation),
            iterations=opt.iterations,
        )
        return cls(
            outer_iterations=config.outer_iterations,
            optimizer=optimizer,
            matcher=build_matcher(config.matching.strategy),
        )

    @property
    def outer_iterations(self) -> int:
        return self._outer_iterations

    @property
    def optimizer(self) -> TransformOptimizer:
        return self._optimizer

    @property
    def matcher(self) -> CorrespondenceMatcher:
        return self._matcher

    @staticmethod
    def initial_transform(source: PointSet, target: PointSet) -> SimilarityTransform:
        """Warm start: translate the source mean onto the target mean."""
        return SimilarityTransform.from_translation(
            target.mean_x() - source.mean_x(),
            target.mean_y() - source.mean_y(),
        )

    def run(self, source: PointSet, target: PointSet) -> SimilarityTransform:
        """
        Estimate the similarity mapping ``source`` onto ``target``.

        Args:
            source: Points to be moved
            target: Reference points; may differ in size from ``source``

        Returns:
            The estimated transform. The final state is available through the
            read-only accessors afterwards.
        """
        if source.size() == 0:
            raise EmptySourceSetError()
        if target.size() == 0:
            raise NoTargetPointsError()

        start_time = time.perf_counter()

        transform = self.initial_transform(source, target)
        logger.debug(f"Warm start translation: {transform.translation}")

        state: Optional[AlignmentState] = None
        history: List[float] = []

        for iteration in range(self._outer_iterations):
            transformed = transform.apply(source)
            correspondences = self._matcher.match(transformed, target)
            history.append(correspondences.error)

            transform = self._optimizer.optimize(transform, source, correspondences.matched)
            state = AlignmentState(
                transform=transform,
                transformed=transform.apply(source),
                correspondences=correspondences,
                iteration=iteration + 1,
            )
            logger.debug(
                f"ICP iteration {iteration}: matching error={correspondences.error:.4f}, "
                f"parameters={transform.parameters}"
            )

        if state is None:
            # No outer iterations: report the warm start and its correspondences.
            transformed = transform.apply(source)
            state = AlignmentState(
                transform=transform,
                transformed=transformed,
                correspondences=self._matcher.match(transformed, target),
                iteration=0,
            )

        elapsed_ms = (time.perf_counter() - start_time) * 1000
        self._result = AlignmentResult(
            transform=transform,
            state=state,
            history=tuple(history),
            iterations=self._outer_iterations,
            elapsed_ms=elapsed_ms,
        )
        logger.info(
            f"ICP alignment completed in {elapsed_ms:.1f}ms: error={state.correspondences.error:.4f}, "
            f"iterations={self._outer_iterations}, matcher={self._matcher.name}"
        )
        return transform

    perform = run

    @property
    def result(self) -> AlignmentResult:
        if self._result is None:
            raise RuntimeError("Alignment has not been run yet")
        return self._result

    @property
    def state(self) -> AlignmentState:
        return self.result.state

    @property
    def transform(self) -> SimilarityTransform:
        return self.result.transform

    @property
    def transformed(self) -> PointSet:
        return self.state.transformed

    @property
    def matched(self) -> PointSet:
        return self.state.correspondences.matched

    @property
    def correspondence_indices(self) -> np.ndarray:
        return self.state.correspondences.indices

    @property
    def error(self) -> float:
        return self.state.correspondences.error

    @property
    def history(self) -> Tuple[float, ...]:
        return self.result.history
