"""HyperLogLog sketch for approximate distinct counting."""

from __future__ import annotations

from collections.abc import Iterable

from ..hashing import DEFAULT_HASHER, MAX_HASH, Hasher, HashableValue
from .base import DEFAULT_PRECISION, SketchConfig
from .estimator import estimate
from .registers import RegisterStore


class HyperLogLog:
    """Fixed-precision HyperLogLog over 64-bit hashes.

    The low ``P`` bits of a hash select a register; the remaining ``Q = 64 - P``
    bits give the rank (1-indexed position of the lowest set bit, capped at
    ``Q + 1``). Registers keep the maximum rank seen, so insertion is idempotent
    and order-independent, and merging is a pointwise maximum.

    Sketches are not thread-safe. For parallel ingestion build one sketch per
    worker and :meth:`merge` them afterwards.
    """

    __slots__ = ("config", "registers")

    def __init__(
        self,
        config: SketchConfig | None = None,
        registers: RegisterStore | None = None,
    ) -> None:
        self.config = config or SketchConfig()
        if registers is None:
            registers = RegisterStore.new(self.config)
        elif registers.config.num_registers != self.config.num_registers:
            raise ValueError("register store does not match sketch precision")
        self.registers = registers

    @classmethod
    def new(cls, precision: int = DEFAULT_PRECISION) -> HyperLogLog:
        return cls(SketchConfig(precision))

    @classmethod
    def with_registers(
        cls, registers: bytes | bytearray, precision: int = DEFAULT_PRECISION
    ) -> HyperLogLog:
        config = SketchConfig(precision)
        return cls(config, RegisterStore.with_registers(config, registers))

    @property
    def precision(self) -> int:
        return self.config.precision

    def add_hash(self, hash_value: int) -> None:
        if not 0 <= hash_value <= MAX_HASH:
            raise ValueError(f"hash value {hash_value} is not an unsigned 64-bit integer")
        config = self.config
        index = hash_value & config.register_mask
        remaining = (hash_value >> config.precision) | (1 << config.q)
        # isolate the lowest set bit; its bit length is the 1-indexed position
        rank = (remaining & -remaining).bit_length()
        self.registers.update_max(index, rank)

    def add_object(self, value: HashableValue, hasher: Hasher | None = None) -> None:
        self.add_hash((hasher or DEFAULT_HASHER).hash(value))

    def add_many(self, values: Iterable[HashableValue], hasher: Hasher | None = None) -> None:
        hash_fn = (hasher or DEFAULT_HASHER).hash
        for value in values:
            self.add_hash(hash_fn(value))

    def merge(self, other: HyperLogLog) -> None:
        if not isinstance(other, HyperLogLog):
            raise TypeError("HyperLogLog can only merge another HyperLogLog.")
        if other.config.num_registers != self.config.num_registers:
            raise ValueError(
                f"Precision mismatch between sketches ({self.precision} != {other.precision})."
            )
        self.registers.merge_max(other.registers)

    def count(self) -> int:
        return estimate(self.registers.histogram(), self.config)

    def error_rate(self) -> float:
        return self.config.error_rate

    def number_registers(self) -> int:
        return self.config.num_registers

    def max_byte_size(self) -> int:
        return self.config.max_byte_size

    def num_empty_registers(self) -> int:
        return self.registers.num_empty_registers()

    def histogram(self) -> list[int]:
        return self.registers.histogram()

    def copy(self) -> HyperLogLog:
        return HyperLogLog(self.config, self.registers.copy())

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, HyperLogLog):
            return NotImplemented
        return self.config == other.config and self.registers == other.registers

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return (
            f"HyperLogLog(precision={self.precision}, "
            f"non_empty={self.number_registers() - self.num_empty_registers()})"
        )
