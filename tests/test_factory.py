import pytest

from hll_core import SketchFactory
from hll_core.codec import SketchDecodeError
from hll_core.config import SketchSettings
from hll_core.hashing import Xxh64Hasher
from hll_core.sketches import SketchConfig


def test_from_settings_binds_precision_hasher_and_format() -> None:
    factory = SketchFactory.from_settings(
        SketchSettings(precision=10, hasher="xxh64", hash_seed=5, wire_format="json")
    )
    assert factory.config == SketchConfig(10)
    assert factory.hasher == Xxh64Hasher(seed=5)
    assert factory.wire_format == "json"
    assert factory.create().number_registers() == 1024


def test_worker_sketches_union_equals_single_pass() -> None:
    factory = SketchFactory()
    values = [f"user-{i}" for i in range(6_000)]
    workers = [factory.from_values(values[i::3]) for i in range(3)]
    combined = factory.union(workers)
    assert combined == factory.from_values(values)
    assert factory.union(reversed(workers)) == combined


def test_add_uses_factory_hasher() -> None:
    factory = SketchFactory(hasher=Xxh64Hasher(seed=3))
    sketch = factory.create()
    factory.add(sketch, "alice")
    expected = factory.create()
    expected.add_hash(Xxh64Hasher(seed=3).hash("alice"))
    assert sketch == expected


@pytest.mark.parametrize("wire_format", ["json", "binary"])
def test_serialize_round_trip(wire_format: str) -> None:
    factory = SketchFactory(config=SketchConfig(12), wire_format=wire_format)
    sketch = factory.from_values(range(500))
    assert factory.deserialize(factory.serialize(sketch)) == sketch


def test_deserialize_rejects_payload_from_other_precision() -> None:
    small = SketchFactory(config=SketchConfig(4))
    large = SketchFactory(config=SketchConfig(8))
    payload = small.serialize(small.from_values(range(1_000)))
    with pytest.raises(SketchDecodeError):
        large.deserialize(payload)
