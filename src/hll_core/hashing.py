"""Deterministic 64-bit hashing of typed values for sketch insertion.

The sketch itself only consumes 64-bit integers. Any hasher used to feed a
sketch must keep the same algorithm and seed for the sketch's lifetime, and
across every sketch it will be merged or compared with.
"""

from __future__ import annotations

import hashlib
import struct
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

import xxhash

MAX_HASH = (1 << 64) - 1
DEFAULT_SEED = 0x355E438B4B1478C7
PERSON = b"hll-core"

HashableValue = bytes | bytearray | memoryview | str | int | float

# one-byte type prefixes keep "a" and b"a", or 0 and False, distinct
TAG_BYTES = b"\x00"
TAG_STR = b"\x01"
TAG_BOOL = b"\x02"
TAG_INT = b"\x03"
TAG_FLOAT = b"\x04"


def value_to_bytes(value: HashableValue) -> bytes:
    """Canonical, type-tagged byte form of a supported value."""
    if isinstance(value, (bytes, bytearray, memoryview)):
        return TAG_BYTES + bytes(value)
    if isinstance(value, str):
        return TAG_STR + value.encode("utf-8")
    if isinstance(value, bool):
        return TAG_BOOL + (b"\x01" if value else b"\x00")
    if isinstance(value, int):
        width = max(1, (value.bit_length() + 8) // 8)
        return TAG_INT + value.to_bytes(width, "little", signed=True)
    if isinstance(value, float):
        return TAG_FLOAT + struct.pack("<d", value)
    raise TypeError(f"cannot hash value of type {type(value).__name__}")


@runtime_checkable
class Hasher(Protocol):
    """Capability that maps a value to an unsigned 64-bit hash."""

    def hash(self, value: HashableValue) -> int: ...


@dataclass(frozen=True, slots=True)
class Blake2bHasher:
    """BLAKE2b truncated to 8 bytes, keyed by ``seed``."""

    seed: int = DEFAULT_SEED

    def hash_bytes(self, data: bytes) -> int:
        key = (self.seed & MAX_HASH).to_bytes(8, "little")
        digest = hashlib.blake2b(data, digest_size=8, key=key, person=PERSON).digest()
        return int.from_bytes(digest, "little", signed=False)

    def hash(self, value: HashableValue) -> int:
        return self.hash_bytes(value_to_bytes(value))


@dataclass(frozen=True, slots=True)
class Xxh64Hasher:
    """XXH64 with an explicit seed; considerably faster than BLAKE2b."""

    seed: int = DEFAULT_SEED

    def hash_bytes(self, data: bytes) -> int:
        return xxhash.xxh64(data, seed=self.seed & MAX_HASH).intdigest()

    def hash(self, value: HashableValue) -> int:
        return self.hash_bytes(value_to_bytes(value))


HASHERS: dict[str, type[Blake2bHasher] | type[Xxh64Hasher]] = {
    "blake2b": Blake2bHasher,
    "xxh64": Xxh64Hasher,
}

DEFAULT_HASHER: Hasher = Blake2bHasher()


def build_hasher(name: str, seed: int = DEFAULT_SEED) -> Hasher:
    try:
        hasher_cls = HASHERS[name]
    except KeyError:
        raise KeyError(f"Unknown hasher: {name}") from None
    return hasher_cls(seed=seed)
