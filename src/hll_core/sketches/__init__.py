"""Register store, estimator and the HyperLogLog sketch."""

from .base import DEFAULT_PRECISION, MAX_PRECISION, MIN_PRECISION, SketchConfig
from .hyperloglog import HyperLogLog
from .registers import RegisterStore

__all__ = [
    "DEFAULT_PRECISION",
    "MAX_PRECISION",
    "MIN_PRECISION",
    "HyperLogLog",
    "RegisterStore",
    "SketchConfig",
]
