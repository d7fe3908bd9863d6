# SPDX-License-Identifier: Apache-2.0
# Copyright 2024-2026 CAB Ingénierie / Christophe ABOULICAM
"""Field descriptor tables for struct-shaped values.

Struct-shaped means a dataclass instance, a pydantic model or a named tuple.
For each such type a FieldTable is built once and cached; transformations
only read it.

Response key precedence for a field:
1. explicit ``response`` tag
2. secondary key (``db`` tag on dataclasses, alias on pydantic models),
   unless it is the skip sentinel
3. the lowercased attribute name

A resolved key of ``"-"`` drops the field from responses.

    @dataclass
    class Station:
        id: int
        name: str = response_field(key="title")
        secret: str = response_field(key="-")
        base: Resource = response_field(embed=True)
"""

from __future__ import annotations

import dataclasses
import types
import typing
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Union

from pydantic import BaseModel

SKIP = "-"

RESPONSE_TAG = "response"
DB_TAG = "db"
EMBED_TAG = "embed"


@dataclass(frozen=True)
class FieldDescriptor:
    """Response metadata for one declared field."""

    name: str
    key: str
    exported: bool
    embedded: bool = False
    declared_type: Any = None

    @property
    def skip(self) -> bool:
        return self.key == SKIP


@dataclass(frozen=True)
class FieldTable:
    """All descriptors of a type, plus the two views the transformer walks.

    ``direct`` holds exported, non-skipped, non-embedded fields in declaration
    order. ``embeds`` holds embedded fields in declaration order; their keys
    only fill gaps left by ``direct``.
    """

    fields: tuple[FieldDescriptor, ...]
    direct: tuple[FieldDescriptor, ...]
    embeds: tuple[FieldDescriptor, ...]


def response_key(name: str, response: str | None = None, db: str | None = None) -> str:
    """Resolve the response key for a field from its tags."""
    if response:
        return response
    if db and db != SKIP:
        return db
    return name.lower()


def response_field(
    *,
    key: str | None = None,
    db: str | None = None,
    embed: bool = False,
    **kwargs: Any,
) -> Any:
    """dataclasses.field() carrying response tags in its metadata."""
    metadata = dict(kwargs.pop("metadata", None) or {})
    if key is not None:
        metadata[RESPONSE_TAG] = key
    if db is not None:
        metadata[DB_TAG] = db
    if embed:
        metadata[EMBED_TAG] = True
    return dataclasses.field(metadata=metadata, **kwargs)


def is_struct(value: Any) -> bool:
    """True for instances whose fields can be walked."""
    if isinstance(value, type):
        return False
    if isinstance(value, BaseModel):
        return True
    if dataclasses.is_dataclass(value):
        return True
    return isinstance(value, tuple) and hasattr(type(value), "_fields")


def strip_optional(annotation: Any) -> Any:
    """``X | None`` / ``Optional[X]`` -> ``X``; anything else unchanged."""
    origin = typing.get_origin(annotation)
    if origin is Union or origin is types.UnionType:
        args = [a for a in typing.get_args(annotation) if a is not type(None)]
        if len(args) == 1:
            return args[0]
    return annotation


@lru_cache(maxsize=None)
def field_table(cls: type) -> FieldTable:
    """Build (once per type) the descriptor table for a struct type."""
    if issubclass(cls, BaseModel):
        fields = _model_fields(cls)
    elif dataclasses.is_dataclass(cls):
        fields = _dataclass_fields(cls)
    else:
        fields = _namedtuple_fields(cls)

    return FieldTable(
        fields=fields,
        direct=tuple(f for f in fields if f.exported and not f.embedded and not f.skip),
        embeds=tuple(f for f in fields if f.embedded),
    )


def _type_hints(cls: type) -> dict[str, Any]:
    try:
        return typing.get_type_hints(cls)
    except (NameError, TypeError):
        # Unresolvable forward references; fall back to raw annotations.
        return {}


def _dataclass_fields(cls: type) -> tuple[FieldDescriptor, ...]:
    hints = _type_hints(cls)
    result = []
    for f in dataclasses.fields(cls):
        annotation = hints.get(f.name, f.type if not isinstance(f.type, str) else None)
        result.append(
            FieldDescriptor(
                name=f.name,
                key=response_key(f.name, f.metadata.get(RESPONSE_TAG), f.metadata.get(DB_TAG)),
                exported=not f.name.startswith("_"),
                embedded=bool(f.metadata.get(EMBED_TAG)),
                declared_type=strip_optional(annotation),
            )
        )
    return tuple(result)


def _model_fields(cls: type[BaseModel]) -> tuple[FieldDescriptor, ...]:
    result = []
    for name, info in cls.model_fields.items():
        extra = info.json_schema_extra if isinstance(info.json_schema_extra, dict) else {}
        result.append(
            FieldDescriptor(
                name=name,
                key=response_key(
                    name,
                    extra.get(RESPONSE_TAG),
                    info.serialization_alias or info.alias,
                ),
                exported=not name.startswith("_"),
                embedded=bool(extra.get(EMBED_TAG)),
                declared_type=strip_optional(info.annotation),
            )
        )
    return tuple(result)


def _namedtuple_fields(cls: type) -> tuple[FieldDescriptor, ...]:
    hints = _type_hints(cls)
    return tuple(
        FieldDescriptor(
            name=name,
            key=response_key(name),
            exported=not name.startswith("_"),
            declared_type=strip_optional(hints.get(name)),
        )
        for name in cls._fields
    )


def public_attributes(value: Any) -> dict[str, Any] | None:
    """Public instance attributes of a plain object, in definition order.

    Covers objects that are not struct-shaped but still carry state in
    ``__dict__`` or ``__slots__``. Returns None when there is nothing to walk
    (classes, and objects with neither).
    """
    if isinstance(value, type):
        return None
    if hasattr(value, "__dict__"):
        names = list(vars(value))
    else:
        names = []
        for klass in reversed(type(value).__mro__):
            slots = vars(klass).get("__slots__", ())
            names.extend((slots,) if isinstance(slots, str) else slots)
        if not names:
            return None
    return {
        name: getattr(value, name)
        for name in names
        if not name.startswith("_") and hasattr(value, name)
    }
