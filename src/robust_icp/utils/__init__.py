"""IO and logging helpers."""

from .point_io import load_point_set, save_point_set  # noqa: F401
