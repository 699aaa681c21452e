"""Transport framings for sketch variants: JSON and compact binary."""

from __future__ import annotations

import base64
import binascii
import logging
import struct
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from . import codec
from .codec import EmptyVariant, FullVariant, SketchDecodeError, SparseVariant, Variant
from .sketches.base import SketchConfig
from .sketches.hyperloglog import HyperLogLog

logger = logging.getLogger(__name__)

WireFormat = Literal["json", "binary"]

TAG_EMPTY = 0
TAG_SPARSE = 1
TAG_FULL = 2

_U32 = struct.Struct("<I")
# sparse entries use 16-bit indices while they fit, 32-bit for P > 16
_ENTRY_U16 = struct.Struct("<HB")
_ENTRY_U32 = struct.Struct("<IB")


class EmptyModel(BaseModel):
    model_config = ConfigDict(extra="forbid", strict=True)

    kind: Literal["empty"] = "empty"


class SparseModel(BaseModel):
    model_config = ConfigDict(extra="forbid", strict=True)

    kind: Literal["sparse"] = "sparse"
    entries: list[tuple[Annotated[int, Field(ge=0)], Annotated[int, Field(ge=0, le=255)]]]


class FullModel(BaseModel):
    model_config = ConfigDict(extra="forbid", strict=True)

    kind: Literal["full"] = "full"
    registers: str = Field(description="Base64-encoded register bytes.")


VariantModel = Annotated[EmptyModel | SparseModel | FullModel, Field(discriminator="kind")]

_VARIANT_ADAPTER: TypeAdapter[EmptyModel | SparseModel | FullModel] = TypeAdapter(VariantModel)


def _reject(message: str) -> SketchDecodeError:
    logger.warning("rejecting sketch payload: %s", message)
    return SketchDecodeError(message)


def variant_to_json(variant: Variant) -> str:
    model: EmptyModel | SparseModel | FullModel
    if isinstance(variant, EmptyVariant):
        model = EmptyModel()
    elif isinstance(variant, SparseVariant):
        model = SparseModel(entries=list(variant.entries))
    else:
        model = FullModel(registers=base64.b64encode(variant.registers).decode("ascii"))
    return model.model_dump_json()


def variant_from_json(payload: str | bytes) -> Variant:
    try:
        model = _VARIANT_ADAPTER.validate_json(payload)
    except ValidationError as exc:
        raise _reject(f"invalid JSON sketch variant ({exc.error_count()} errors)") from exc
    if isinstance(model, EmptyModel):
        return EmptyVariant()
    if isinstance(model, SparseModel):
        return SparseVariant(entries=tuple((index, value) for index, value in model.entries))
    try:
        registers = base64.b64decode(model.registers, validate=True)
    except binascii.Error as exc:
        raise _reject("full variant registers are not valid base64") from exc
    return FullVariant(registers=registers)


def _entry_struct(config: SketchConfig) -> struct.Struct:
    return _ENTRY_U16 if config.num_registers <= 1 << 16 else _ENTRY_U32


def variant_to_bytes(variant: Variant, config: SketchConfig) -> bytes:
    if isinstance(variant, EmptyVariant):
        return bytes([TAG_EMPTY])
    if isinstance(variant, SparseVariant):
        entry = _entry_struct(config)
        parts = [bytes([TAG_SPARSE]), _U32.pack(len(variant.entries))]
        parts.extend(entry.pack(index, value) for index, value in variant.entries)
        return b"".join(parts)
    return bytes([TAG_FULL]) + _U32.pack(len(variant.registers)) + variant.registers


def variant_from_bytes(payload: bytes, config: SketchConfig) -> Variant:
    view = memoryview(payload)
    if not view:
        raise _reject("empty binary payload")
    tag = view[0]
    offset = 1
    try:
        if tag == TAG_EMPTY:
            variant: Variant = EmptyVariant()
        elif tag == TAG_SPARSE:
            (count,) = _U32.unpack_from(view, offset)
            offset += _U32.size
            entry = _entry_struct(config)
            if len(view) - offset != count * entry.size:
                raise _reject(
                    f"sparse payload declares {count} entries but carries "
                    f"{len(view) - offset} bytes"
                )
            entries = tuple(entry.iter_unpack(view[offset:]))
            offset += count * entry.size
            variant = SparseVariant(entries=entries)
        elif tag == TAG_FULL:
            (length,) = _U32.unpack_from(view, offset)
            offset += _U32.size
            if len(view) - offset != length:
                raise _reject(
                    f"full payload declares {length} registers but carries "
                    f"{len(view) - offset} bytes"
                )
            variant = FullVariant(registers=bytes(view[offset:]))
            offset += length
        else:
            raise _reject(f"unknown variant tag {tag}")
    except struct.error as exc:
        raise _reject("truncated binary payload") from exc
    if offset != len(view):
        raise _reject(f"{len(view) - offset} trailing bytes after variant")
    return variant


def dumps(sketch: HyperLogLog, fmt: WireFormat = "binary") -> bytes:
    """Serialize ``sketch`` using the variant chosen for its current fill."""
    variant = codec.encode(sketch)
    if fmt == "json":
        return variant_to_json(variant).encode("utf-8")
    if fmt == "binary":
        return variant_to_bytes(variant, sketch.config)
    raise ValueError(f"Unsupported wire format '{fmt}'. Use json or binary.")


def loads(payload: bytes | str, config: SketchConfig, fmt: WireFormat = "binary") -> HyperLogLog:
    """Inverse of :func:`dumps`; ``config`` supplies the precision."""
    if fmt == "json":
        return codec.decode(variant_from_json(payload), config)
    if fmt == "binary":
        if isinstance(payload, str):
            raise TypeError("binary sketch payloads must be bytes")
        return codec.decode(variant_from_bytes(payload, config), config)
    raise ValueError(f"Unsupported wire format '{fmt}'. Use json or binary.")
