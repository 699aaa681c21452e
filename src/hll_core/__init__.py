"""HyperLogLog distinct-count estimation with compact variant serialization."""

from .codec import EmptyVariant, FullVariant, SketchDecodeError, SparseVariant
from .config import AppConfig, SketchSettings
from .factory import SketchFactory
from .hashing import Blake2bHasher, Hasher, Xxh64Hasher
from .sketches import HyperLogLog, SketchConfig

__all__ = [
    "AppConfig",
    "Blake2bHasher",
    "EmptyVariant",
    "FullVariant",
    "Hasher",
    "HyperLogLog",
    "SketchConfig",
    "SketchDecodeError",
    "SketchFactory",
    "SketchSettings",
    "SparseVariant",
    "Xxh64Hasher",
]
