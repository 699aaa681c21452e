"""Factory binding precision, hash strategy and wire format together."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import cast

from . import wire
from .config import SketchSettings
from .hashing import DEFAULT_HASHER, HashableValue, Hasher, build_hasher
from .sketches.base import SketchConfig
from .sketches.hyperloglog import HyperLogLog


@dataclass(slots=True)
class SketchFactory:
    """Produces sketches that are safe to merge with one another.

    Every sketch created or decoded here shares the same precision and hasher,
    which is what makes their registers comparable.
    """

    config: SketchConfig = field(default_factory=SketchConfig)
    hasher: Hasher = DEFAULT_HASHER
    wire_format: wire.WireFormat = "binary"

    @classmethod
    def from_settings(cls, settings: SketchSettings) -> SketchFactory:
        return cls(
            config=SketchConfig(settings.precision),
            hasher=build_hasher(settings.hasher, settings.hash_seed),
            wire_format=cast(wire.WireFormat, settings.wire_format),
        )

    def create(self) -> HyperLogLog:
        return HyperLogLog(self.config)

    def from_values(self, values: Iterable[HashableValue]) -> HyperLogLog:
        sketch = self.create()
        sketch.add_many(values, self.hasher)
        return sketch

    def add(self, sketch: HyperLogLog, value: HashableValue) -> None:
        sketch.add_object(value, self.hasher)

    def union(self, sketches: Iterable[HyperLogLog]) -> HyperLogLog:
        """Merge ``sketches`` into a fresh sketch; any order gives the same result."""
        result = self.create()
        for sketch in sketches:
            result.merge(sketch)
        return result

    def serialize(self, sketch: HyperLogLog) -> bytes:
        return wire.dumps(sketch, self.wire_format)

    def deserialize(self, payload: bytes | str) -> HyperLogLog:
        return wire.loads(payload, self.config, self.wire_format)
