# SPDX-License-Identifier: Apache-2.0
# Copyright 2024-2026 CAB Ingénierie / Christophe ABOULICAM
"""Options tree — per-field join/expansion options.

Usually parsed from the ``joins`` request parameter:

    {
      "owner": {"type": "full"},
      "tracks": {"*": {"artist": {}}}
    }

Keys are response keys (or stringified mapping keys). ``"*"`` applies to any
key without an exact entry. A node containing ``"type": "full"`` disables the
customization capabilities for the value at that node and forces full
structural expansion; its children still apply below it.

Malformed trees are rejected when parsed, so a transformation never sees an
unsupported node.
"""

from __future__ import annotations

import json
from collections.abc import Iterator, Mapping
from typing import Any

from .errors import InvalidOptionsError

WILDCARD = "*"
TYPE_KEY = "type"
FULL = "full"


class OptionsTree:
    """Immutable options node."""

    __slots__ = ("_children", "_full")

    def __init__(
        self,
        children: Mapping[str, OptionsTree] | None = None,
        full: bool = False,
    ) -> None:
        self._children: dict[str, OptionsTree] = dict(children or {})
        self._full = full

    # -------------------------------------------------------------------------
    # Construction
    # -------------------------------------------------------------------------

    @classmethod
    def empty(cls) -> OptionsTree:
        return _EMPTY

    @classmethod
    def parse(cls, raw: Any, _path: str = "") -> OptionsTree:
        """Build a tree from decoded JSON (or an existing tree).

        ``None`` means no options. Any node that is not an object raises
        InvalidOptionsError, as does a ``type`` entry other than ``"full"``.
        """
        if raw is None:
            return _EMPTY
        if isinstance(raw, OptionsTree):
            return raw
        if not isinstance(raw, Mapping):
            raise InvalidOptionsError(
                _path or WILDCARD,
                f"Options node for '{_path or '<root>'}' must be an object, "
                f"got {type(raw).__name__}",
            )

        full = False
        children: dict[str, OptionsTree] = {}
        for key, value in raw.items():
            key = str(key)
            child_path = f"{_path}.{key}" if _path else key
            if key == TYPE_KEY and not isinstance(value, Mapping):
                if value != FULL:
                    raise InvalidOptionsError(
                        child_path,
                        f"Unknown options type {value!r} at '{child_path}'",
                    )
                full = True
                continue
            children[key] = cls.parse(value, child_path)

        if not children and not full:
            return _EMPTY
        return cls(children, full=full)

    @classmethod
    def from_json(cls, text: str) -> OptionsTree:
        """Parse a JSON document. json.JSONDecodeError propagates."""
        if not text:
            return _EMPTY
        return cls.parse(json.loads(text))

    # -------------------------------------------------------------------------
    # Lookup
    # -------------------------------------------------------------------------

    @property
    def full(self) -> bool:
        """True when this node forces full expansion."""
        return self._full

    @property
    def is_empty(self) -> bool:
        return not self._children and not self._full

    def sub_options(self, key: str) -> OptionsTree:
        """Options for ``key``: exact entry, else wildcard, else empty."""
        child = self._children.get(key)
        if child is not None:
            return child
        return self._children.get(WILDCARD, _EMPTY)

    def has(self, key: str) -> bool:
        """True when ``key`` was explicitly requested (exact or wildcard)."""
        return key in self._children or WILDCARD in self._children

    def __contains__(self, key: object) -> bool:
        return key in self._children

    def __iter__(self) -> Iterator[str]:
        return iter(self._children)

    def __len__(self) -> int:
        return len(self._children)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, OptionsTree):
            return NotImplemented
        return self._full == other._full and self._children == other._children

    def __hash__(self) -> int:
        return hash((self._full, tuple(sorted(self._children))))

    def __repr__(self) -> str:
        return f"OptionsTree({self.to_dict()!r})"

    def to_dict(self) -> dict[str, Any]:
        """Back to the JSON shape it was parsed from."""
        result: dict[str, Any] = {k: v.to_dict() for k, v in self._children.items()}
        if self._full:
            result[TYPE_KEY] = FULL
        return result


_EMPTY = OptionsTree()
