"""Tests for the ICP alignment loop."""

from __future__ import annotations

import pytest

from robust_icp.alignment import ICPAligner, KDTreeMatcher, TransformOptimizer
from robust_icp.config import AlignmentConfig
from robust_icp.errors import EmptySourceSetError, NoTargetPointsError
from robust_icp.geometry import PointSet, SimilarityTransform


class RecordingOptimizer(TransformOptimizer):
    def __init__(self) -> None:
        super().__init__()
        self.calls = 0

    def optimize(self, initial, source, matched_targets):
        self.calls += 1
        return super().optimize(initial, source, matched_targets)


def test_warm_start_uses_mean_difference(triangle: PointSet, shifted_triangle: PointSet) -> None:
    initial = ICPAligner.initial_transform(triangle, shifted_triangle)
    assert initial.translation == pytest.approx((5.0, 0.0))
    assert initial.p1 == 0.0
    assert initial.p2 == 0.0


def test_pure_translation_scenario(triangle: PointSet, shifted_triangle: PointSet) -> None:
    aligner = ICPAligner()
    transform = aligner.run(triangle, shifted_triangle)

    assert aligner.correspondence_indices.tolist() == [0, 1, 2]
    assert aligner.error == pytest.approx(0.0, abs=0.05)
    assert transform.parameters == pytest.approx((5.0, 0.0, 0.0, 0.0), abs=0.05)
    assert aligner.matched == shifted_triangle
    assert aligner.transformed == transform.apply(triangle)


def test_identical_sets_map_points_onto_themselves(square: PointSet) -> None:
    aligner = ICPAligner()
    transform = aligner.run(square, square)

    assert aligner.correspondence_indices.tolist() == [0, 1, 2, 3]
    assert transform.parameters == pytest.approx((0.0, 0.0, 0.0, 0.0), abs=0.05)
    assert transform.apply(square).distance_to(square) < 0.2


def test_history_records_each_outer_iteration(triangle: PointSet, shifted_triangle: PointSet) -> None:
    optimizer = RecordingOptimizer()
    aligner = ICPAligner(outer_iterations=3, optimizer=optimizer)
    aligner.run(triangle, shifted_triangle)

    assert optimizer.calls == 3
    assert len(aligner.history) == 3
    assert aligner.history[0] == pytest.approx(0.0)
    assert aligner.state.iteration == 3
    assert aligner.result.iterations == 3


def test_empty_target_fails_before_optimization(triangle: PointSet) -> None:
    optimizer = RecordingOptimizer()
    aligner = ICPAligner(optimizer=optimizer)
    with pytest.raises(NoTargetPointsError):
        aligner.run(triangle, PointSet.empty())
    assert optimizer.calls == 0


def test_empty_source_fails(triangle: PointSet) -> None:
    with pytest.raises(EmptySourceSetError):
        ICPAligner().run(PointSet.empty(), triangle)


def test_accessors_require_a_run() -> None:
    aligner = ICPAligner()
    with pytest.raises(RuntimeError):
        aligner.state
    with pytest.raises(RuntimeError):
        aligner.correspondence_indices


def test_inputs_may_differ_in_size(triangle: PointSet) -> None:
    target = PointSet([(0.0, 0.0), (1.0, 0.0), (0.0, 1.0), (40.0, 40.0)])
    aligner = ICPAligner()
    aligner.run(triangle, target)
    assert aligner.transformed.size() == triangle.size()
    assert aligner.matched.size() == triangle.size()
    assert len(aligner.correspondence_indices) == triangle.size()


def test_zero_outer_iterations_reports_warm_start(triangle: PointSet, shifted_triangle: PointSet) -> None:
    aligner = ICPAligner(outer_iterations=0)
    transform = aligner.run(triangle, shifted_triangle)
    assert transform.parameters == pytest.approx(SimilarityTransform.from_translation(5.0, 0.0).parameters)
    assert aligner.history == ()
    assert aligner.state.iteration == 0
    assert aligner.correspondence_indices.tolist() == [0, 1, 2]


def test_each_run_replaces_state(triangle: PointSet, shifted_triangle: PointSet, square: PointSet) -> None:
    aligner = ICPAligner()
    aligner.run(triangle, shifted_triangle)
    first_state = aligner.state
    aligner.run(square, square)
    assert aligner.state is not first_state
    assert first_state.transformed.size() == 3
    assert aligner.state.transformed.size() == 4


def test_perform_is_run(triangle: PointSet, shifted_triangle: PointSet) -> None:
    assert ICPAligner().perform(triangle, shifted_triangle) == ICPAligner().run(triangle, shifted_triangle)


def test_from_config() -> None:
    config = AlignmentConfig.model_validate(
        {
            "outer_iterations": 4,
            "optimizer": {"iterations": 2, "translation_rate": 5e-4},
            "robust_loss": {"tuning_constant": 1e5},
            "matching": {"strategy": "kdtree"},
        }
    )
    aligner = ICPAligner.from_config(config)
    assert aligner.outer_iterations == 4
    assert aligner.optimizer.iterations == 2
    assert aligner.optimizer.estimator.tuning_constant == 1e5
    assert aligner.optimizer.schedules[0].rate == 5e-4
    assert aligner.optimizer.schedules[1].step == 1e-3
    assert isinstance(aligner.matcher, KDTreeMatcher)
