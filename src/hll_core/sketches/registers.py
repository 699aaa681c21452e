"""Fixed-size register array backing a HyperLogLog sketch."""

from __future__ import annotations

from collections.abc import Iterator

from .base import SketchConfig

HISTOGRAM_SIZE = 64


class RegisterStore:
    """``m = 2^P`` unsigned 8-bit counters, all starting at zero.

    The store never grows or shrinks; values only move upwards through
    :meth:`update_max` and :meth:`merge_max`.
    """

    __slots__ = ("config", "_registers")

    def __init__(self, config: SketchConfig, registers: bytearray | None = None) -> None:
        self.config = config
        if registers is None:
            registers = bytearray(config.num_registers)
        elif len(registers) != config.num_registers:
            raise ValueError(
                f"register buffer has length {len(registers)}, "
                f"expected {config.num_registers} for precision {config.precision}"
            )
        self._registers = registers

    @classmethod
    def new(cls, config: SketchConfig) -> RegisterStore:
        return cls(config)

    @classmethod
    def with_registers(cls, config: SketchConfig, registers: bytes | bytearray) -> RegisterStore:
        """Wrap a copy of ``registers``; the length must equal ``2^P``."""
        return cls(config, bytearray(registers))

    def __len__(self) -> int:
        return len(self._registers)

    def __getitem__(self, index: int) -> int:
        return self._registers[index]

    def __iter__(self) -> Iterator[int]:
        return iter(self._registers)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RegisterStore):
            return NotImplemented
        return self._registers == other._registers

    __hash__ = None  # type: ignore[assignment]

    def update_max(self, index: int, value: int) -> None:
        if value > self._registers[index]:
            self._registers[index] = value

    def merge_max(self, other: RegisterStore) -> None:
        if len(other) != len(self):
            raise ValueError(
                f"cannot merge register stores of different sizes ({len(self)} != {len(other)})"
            )
        self._registers[:] = bytes(map(max, self._registers, other._registers))

    def num_empty_registers(self) -> int:
        return self._registers.count(0)

    def histogram(self) -> list[int]:
        """Number of registers holding each value ``0..63``."""
        return [self._registers.count(value) for value in range(HISTOGRAM_SIZE)]

    def non_zero(self) -> Iterator[tuple[int, int]]:
        """Yield ``(index, value)`` for populated registers in ascending index order."""
        for index, value in enumerate(self._registers):
            if value:
                yield index, value

    def to_bytes(self) -> bytes:
        return bytes(self._registers)

    def copy(self) -> RegisterStore:
        return RegisterStore(self.config, bytearray(self._registers))
