"""Robust ICP estimation of 2D similarity transforms."""

from .config import RegistrationConfig, load_config  # noqa: F401
from .errors import (  # noqa: F401
    EmptySourceSetError,
    NoTargetPointsError,
    RegistrationError,
    SizeMismatchError,
)
from .geometry import Point, PointSet, SimilarityTransform  # noqa: F401
from .alignment import ICPAligner  # noqa: F401
from .pipeline import RegistrationPipeline  # noqa: F401
