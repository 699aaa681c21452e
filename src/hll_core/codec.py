"""Lossless variant encoding of a sketch's register store.

A sketch is persisted as one of three variants chosen from its fill ratio:

* ``EmptyVariant`` when no register is populated,
* ``SparseVariant`` listing ``(index, value)`` pairs while at most a third of the
  registers are populated (each pair costs 3 bytes against 1 byte per register in
  the dense form),
* ``FullVariant`` carrying all ``2^P`` register bytes otherwise.

The precision is not part of a variant; the decoder takes it from context.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Literal

from .sketches.base import SketchConfig
from .sketches.hyperloglog import HyperLogLog
from .sketches.registers import RegisterStore

logger = logging.getLogger(__name__)

VariantKind = Literal["empty", "sparse", "full"]


class SketchDecodeError(ValueError):
    """Raised when a serialized sketch cannot be turned back into registers."""


@dataclass(frozen=True, slots=True)
class EmptyVariant:
    kind: Literal["empty"] = field(default="empty", init=False)


@dataclass(frozen=True, slots=True)
class SparseVariant:
    entries: tuple[tuple[int, int], ...]
    kind: Literal["sparse"] = field(default="sparse", init=False)


@dataclass(frozen=True, slots=True)
class FullVariant:
    registers: bytes
    kind: Literal["full"] = field(default="full", init=False)


Variant = EmptyVariant | SparseVariant | FullVariant


def select_kind(non_empty: int, num_registers: int) -> VariantKind:
    if non_empty == 0:
        return "empty"
    if non_empty * 3 <= num_registers:
        return "sparse"
    return "full"


def encode(sketch: HyperLogLog) -> Variant:
    """Pick the cheapest variant for the sketch's current registers."""
    registers = sketch.registers
    num_registers = sketch.number_registers()
    non_empty = num_registers - registers.num_empty_registers()
    kind = select_kind(non_empty, num_registers)
    logger.debug(
        "encoding sketch (p=%d, non_empty=%d) as %s", sketch.precision, non_empty, kind
    )
    if kind == "empty":
        return EmptyVariant()
    if kind == "sparse":
        return SparseVariant(entries=tuple(registers.non_zero()))
    return FullVariant(registers=registers.to_bytes())


def _check_value(value: int, config: SketchConfig) -> None:
    if not 0 <= value <= config.max_rank:
        raise SketchDecodeError(
            f"register value {value} outside [0, {config.max_rank}] for precision "
            f"{config.precision}"
        )


def decode(variant: Variant, config: SketchConfig) -> HyperLogLog:
    """Rebuild a sketch from ``variant``; nothing is built unless it is valid."""
    if isinstance(variant, EmptyVariant):
        return HyperLogLog(config)
    if isinstance(variant, SparseVariant):
        buffer = bytearray(config.num_registers)
        for index, value in variant.entries:
            if not 0 <= index < config.num_registers:
                raise SketchDecodeError(
                    f"sparse index {index} out of range for {config.num_registers} registers"
                )
            _check_value(value, config)
            buffer[index] = value
        return HyperLogLog(config, RegisterStore(config, buffer))
    if isinstance(variant, FullVariant):
        if len(variant.registers) != config.num_registers:
            raise SketchDecodeError(
                f"full variant carries {len(variant.registers)} registers, "
                f"expected {config.num_registers}"
            )
        for value in set(variant.registers):
            _check_value(value, config)
        return HyperLogLog(config, RegisterStore.with_registers(config, variant.registers))
    raise SketchDecodeError(f"unknown sketch variant: {type(variant).__name__}")
