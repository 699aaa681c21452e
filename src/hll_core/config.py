"""Centralised configuration models leveraging Pydantic."""

from __future__ import annotations

import os
import re

from pydantic import BaseModel, Field, field_validator

from .hashing import DEFAULT_SEED, HASHERS
from .sketches.base import DEFAULT_PRECISION, MAX_PRECISION, MIN_PRECISION

PLACEHOLDER_PATTERN = re.compile(r"\{\{([A-Z0-9_]+)\}\}")


def _is_placeholder(value: object) -> bool:
    return isinstance(value, str) and PLACEHOLDER_PATTERN.fullmatch(value.strip()) is not None


def _resolve_int(value: object, placeholder: str, default: int) -> int:
    if value is None or _is_placeholder(value):
        return default
    if isinstance(value, bool):
        raise TypeError(f"{placeholder} must resolve to an integer value")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        # base 0 accepts hexadecimal seeds such as 0x355e438b4b1478c7
        return int(value.strip(), 0)
    raise TypeError(f"{placeholder} must resolve to an integer value")


def _resolve_string(value: object, placeholder: str, default: str) -> str:
    if value is None or _is_placeholder(value):
        return default
    return str(value).strip()


class SketchSettings(BaseModel):
    precision: int = Field(default=DEFAULT_PRECISION)
    hasher: str = Field(default="blake2b")
    hash_seed: int = Field(default=DEFAULT_SEED)
    wire_format: str = Field(default="binary")

    @field_validator("precision", mode="before")
    def _v_precision(cls, v: object) -> int:
        value = _resolve_int(v, "{{HLL_PRECISION}}", DEFAULT_PRECISION)
        if not MIN_PRECISION <= value <= MAX_PRECISION:
            raise ValueError(
                f"{{{{HLL_PRECISION}}}} must be between {MIN_PRECISION} and {MAX_PRECISION}"
            )
        return value

    @field_validator("hasher", mode="before")
    def _v_hasher(cls, v: object) -> str:
        value = _resolve_string(v, "{{HLL_HASHER}}", "blake2b").lower()
        if value not in HASHERS:
            raise ValueError(f"{{{{HLL_HASHER}}}} must be one of {sorted(HASHERS)}")
        return value

    @field_validator("hash_seed", mode="before")
    def _v_hash_seed(cls, v: object) -> int:
        value = _resolve_int(v, "{{HLL_HASH_SEED}}", DEFAULT_SEED)
        if not 0 <= value < 1 << 64:
            raise ValueError("{{HLL_HASH_SEED}} must fit in an unsigned 64-bit integer")
        return value

    @field_validator("wire_format", mode="before")
    def _v_wire_format(cls, v: object) -> str:
        value = _resolve_string(v, "{{HLL_WIRE_FORMAT}}", "binary").lower()
        if value not in {"json", "binary"}:
            raise ValueError("{{HLL_WIRE_FORMAT}} must be one of 'json', 'binary'")
        return value


class AppConfig(BaseModel):
    sketch: SketchSettings = Field(default_factory=SketchSettings)

    @classmethod
    def from_env(cls) -> AppConfig:
        env = os.environ
        sketch_kwargs = {
            "precision": env.get("HLL_PRECISION"),
            "hasher": env.get("HLL_HASHER"),
            "hash_seed": env.get("HLL_HASH_SEED"),
            "wire_format": env.get("HLL_WIRE_FORMAT"),
        }
        payload: dict[str, object] = {}
        if any(value is not None for value in sketch_kwargs.values()):
            payload["sketch"] = {k: v for k, v in sketch_kwargs.items() if v is not None}
        return cls(**payload)
