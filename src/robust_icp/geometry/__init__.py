"""Point containers and the similarity transform."""

from .pointset import Point, PointSet  # noqa: F401
from .similarity import PARAMETER_NAMES, SimilarityTransform  # noqa: F401
