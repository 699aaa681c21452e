"""Bias-corrected cardinality estimation over a register histogram.

Implements the improved raw estimator from Otmar Ertl, "New cardinality
estimation algorithms for HyperLogLog sketches" (arXiv:1702.01284), the same
formula Redis uses since 5.0.
"""

from __future__ import annotations

import math
from collections.abc import Sequence

from .base import SketchConfig

# Returned when every register is saturated and the denominator collapses to zero.
SATURATED_ESTIMATE = (1 << 64) - 1

_ALPHA_INF = 0.5 / math.log(2)


def sigma(x: float) -> float:
    """Correction term for empty registers, defined on ``[0, 1]``."""
    if x == 1.0:
        return math.inf
    y = 1.0
    z = x
    while True:
        x *= x
        z_prime = z
        z += x * y
        y += y
        if z_prime == z:
            return z


def tau(x: float) -> float:
    """Correction term for registers saturated at ``Q + 1``, defined on ``[0, 1]``."""
    if x == 0.0 or x == 1.0:
        return 0.0
    y = 1.0
    z = 1.0 - x
    while True:
        x = math.sqrt(x)
        z_prime = z
        y *= 0.5
        z -= (1.0 - x) ** 2 * y
        if z_prime == z:
            return z / 3.0


def estimate(histogram: Sequence[int], config: SketchConfig) -> int:
    m = float(config.num_registers)
    q = config.q
    z = m * tau((m - histogram[q + 1]) / m)
    # descending order is part of the estimator's recursive definition
    for value in range(q, 0, -1):
        z += histogram[value]
        z *= 0.5
    z += m * sigma(histogram[0] / m)
    if z == 0.0:
        return SATURATED_ESTIMATE
    # round half away from zero; the ratio is never negative
    return math.floor(_ALPHA_INF * m * m / z + 0.5)
