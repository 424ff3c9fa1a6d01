"""Alignment module for robust ICP registration."""

from .correspondence import (
    BruteForceMatcher,
    CorrespondenceMatcher,
    CorrespondenceSet,
    KDTreeMatcher,
    available_matchers,
    build_matcher,
)
from .icp_aligner import AlignmentResult, AlignmentState, ICPAligner
from .optimizer import ParameterSchedule, TransformOptimizer, default_schedules
from .robust_cost import RobustCostEstimator, beaton_tukey_rho

__all__ = [
    "AlignmentResult",
    "AlignmentState",
    "BruteForceMatcher",
    "CorrespondenceMatcher",
    "CorrespondenceSet",
    "ICPAligner",
    "KDTreeMatcher",
    "ParameterSchedule",
    "RobustCostEstimator",
    "TransformOptimizer",
    "available_matchers",
    "beaton_tukey_rho",
    "build_matcher",
    "default_schedules",
]
