"""pytest configuration and fixtures for the robust_icp test suite."""

from __future__ import annotations

import sys

import pytest
from loguru import logger

from robust_icp.geometry import PointSet


@pytest.fixture(autouse=True)
def quiet_logger():
    """Drop loguru output below WARNING while a test runs."""
    logger.remove()
    logger.add(sys.stderr, level="WARNING")
    yield
    logger.remove()


@pytest.fixture
def triangle() -> PointSet:
    return PointSet([(0.0, 0.0), (1.0, 0.0), (0.0, 1.0)])


@pytest.fixture
def shifted_triangle() -> PointSet:
    """The triangle translated by (5, 0)."""
    return PointSet([(5.0, 0.0), (6.0, 0.0), (5.0, 1.0)])


@pytest.fixture
def square() -> PointSet:
    return PointSet([(0.0, 0.0), (2.0, 0.0), (2.0, 2.0), (0.0, 2.0)])
