"""Error types raised by the registration core."""

from __future__ import annotations


class RegistrationError(ValueError):
    """Base class for caller contract violations detected by the core."""


class SizeMismatchError(RegistrationError):
    """Aggregate distance requested between point sets of unequal length."""

    def __init__(self, left: int, right: int) -> None:
        super().__init__(f"Point sets differ in size: {left} != {right}")
        self.left = left
        self.right = right


class NoTargetPointsError(RegistrationError):
    """Nearest-neighbor search requested against an empty target set."""

    def __init__(self) -> None:
        super().__init__("Target point set is empty; nothing to match against")


class EmptySourceSetError(RegistrationError):
    """Alignment requested with zero source points."""

    def __init__(self) -> None:
        super().__init__("Source point set is empty; nothing to align")
