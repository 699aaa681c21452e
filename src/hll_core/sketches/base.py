"""Precision configuration shared by the register store, estimator and codec."""

from __future__ import annotations

import math
from dataclasses import dataclass, field

MIN_PRECISION = 4
MAX_PRECISION = 18
DEFAULT_PRECISION = 14
HASH_BITS = 64


@dataclass(frozen=True, slots=True)
class SketchConfig:
    """Immutable precision parameters of a sketch.

    ``precision`` (P) is validated once here; the register count ``m``, the rank
    width ``q`` and the index mask are derived from it and reused by every
    operation instead of being recomputed per call.
    """

    precision: int = DEFAULT_PRECISION
    num_registers: int = field(init=False)
    q: int = field(init=False)
    register_mask: int = field(init=False)

    def __post_init__(self) -> None:
        if isinstance(self.precision, bool) or not isinstance(self.precision, int):
            raise TypeError("precision must be an integer")
        if not MIN_PRECISION <= self.precision <= MAX_PRECISION:
            raise ValueError(
                f"precision ({self.precision}) must be between {MIN_PRECISION} "
                f"and {MAX_PRECISION}"
            )
        num_registers = 1 << self.precision
        object.__setattr__(self, "num_registers", num_registers)
        object.__setattr__(self, "q", HASH_BITS - self.precision)
        object.__setattr__(self, "register_mask", num_registers - 1)

    @property
    def max_rank(self) -> int:
        """Largest value a register can hold (``Q + 1``)."""
        return self.q + 1

    @property
    def max_byte_size(self) -> int:
        return self.num_registers

    @property
    def error_rate(self) -> float:
        return 1.04 / math.sqrt(self.num_registers)
