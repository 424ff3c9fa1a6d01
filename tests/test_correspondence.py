"""Tests for nearest-neighbor correspondence search."""

from __future__ import annotations

import numpy as np
import pytest

from robust_icp.alignment import BruteForceMatcher, KDTreeMatcher, build_matcher
from robust_icp.errors import NoTargetPointsError
from robust_icp.geometry import Point, PointSet, SimilarityTransform

MATCHERS = [BruteForceMatcher, KDTreeMatcher]


@pytest.mark.parametrize("matcher_cls", MATCHERS)
def test_picks_nearer_target(matcher_cls) -> None:
    result = matcher_cls().match(PointSet([(0.0, 0.0)]), PointSet([(10.0, 10.0), (1.0, 0.0)]))
    assert result.indices.tolist() == [1]
    assert result.matched[0] == Point(1.0, 0.0)
    assert result.error == pytest.approx(1.0)


@pytest.mark.parametrize("matcher_cls", MATCHERS)
def test_tie_resolves_to_smaller_index(matcher_cls) -> None:
    source = PointSet([(0.0, 0.0)])
    target = PointSet([(1.0, 0.0), (-1.0, 0.0)])
    assert matcher_cls().match(source, target).indices.tolist() == [0]
    reversed_target = PointSet([(-1.0, 0.0), (1.0, 0.0)])
    result = matcher_cls().match(source, reversed_target)
    assert result.indices.tolist() == [0]
    assert result.matched[0] == Point(-1.0, 0.0)


@pytest.mark.parametrize("matcher_cls", MATCHERS)
def test_empty_target_raises(matcher_cls, triangle: PointSet) -> None:
    with pytest.raises(NoTargetPointsError):
        matcher_cls().match(triangle, PointSet.empty())


@pytest.mark.parametrize("matcher_cls", MATCHERS)
def test_empty_source_yields_empty_set(matcher_cls, triangle: PointSet) -> None:
    result = matcher_cls().match(PointSet.empty(), triangle)
    assert result.size() == 0
    assert result.error == 0.0


def test_mapping_need_not_be_injective() -> None:
    source = PointSet([(0.0, 0.0), (0.1, 0.0), (5.0, 5.0)])
    target = PointSet([(0.0, 0.0), (5.0, 5.0)])
    result = BruteForceMatcher().match(source, target)
    assert result.indices.tolist() == [0, 0, 1]
    assert result.error == pytest.approx(0.1)


def test_error_equals_aggregate_distance_to_matched(triangle: PointSet, shifted_triangle: PointSet) -> None:
    transformed = SimilarityTransform(4.7, 0.01, -0.02, 0.3).apply(triangle)
    result = BruteForceMatcher().match(transformed, shifted_triangle)
    assert result.error == pytest.approx(transformed.distance_to(result.matched))
    np.testing.assert_allclose(result.distances, transformed.pairwise_distances(result.matched))


def test_kdtree_agrees_with_brute_force() -> None:
    rng = np.random.default_rng(7)
    source = PointSet(rng.uniform(-10, 10, size=(40, 2)))
    # integer grid target produces exact ties for integer source points
    grid = PointSet([(x, y) for x in range(-10, 11, 2) for y in range(-10, 11, 2)])
    grid_source = PointSet([(x, y) for x in range(-9, 10, 3) for y in range(-9, 10, 3)])
    for src in (source, grid_source):
        brute = BruteForceMatcher().match(src, grid)
        tree = KDTreeMatcher().match(src, grid)
        assert tree.indices.tolist() == brute.indices.tolist()
        assert tree.error == pytest.approx(brute.error)


def test_correspondence_arrays_are_read_only(triangle: PointSet) -> None:
    result = BruteForceMatcher().match(triangle, triangle)
    with pytest.raises(ValueError):
        result.indices[0] = 2


def test_build_matcher() -> None:
    assert isinstance(build_matcher("brute_force"), BruteForceMatcher)
    assert isinstance(build_matcher("KDTree"), KDTreeMatcher)
    with pytest.raises(ValueError):
        build_matcher("octree")
