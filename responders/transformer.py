# SPDX-License-Identifier: Apache-2.0
# Copyright 2024-2026 CAB Ingénierie / Christophe ABOULICAM
"""Response Transformer — turns arbitrary values into a response tree.

The output is built only from dicts, lists and scalars, freshly allocated on
every call; the source value is never mutated (capability hooks may have
their own side effects, such as lazy loading).

Order of operations for one value:
1. None: top-level -> None; nested -> nil-element substitute or None
2. deferred population: lazy_load(), join(options, loader)
3. nested and not "full": capability resolver (element converter, Stringer, error)
4. ResponseConverter substitution
5. shape dispatch: nullable wrapper, struct, enum, mapping, sequence, string,
   scalar, then anything else: public attributes of a plain object, or its text
"""

from __future__ import annotations

from collections.abc import Mapping
from enum import Enum
from typing import Any, Callable

from .capabilities import (
    CollectionResponseConverter,
    Joiner,
    LazyLoader,
    Loader,
    ResponseConverter,
    offers,
)
from .fields import field_table, is_struct, public_attributes, response_key
from .nullable import NO_MATCH, unwrap_nullable
from .options import OptionsTree
from .resolver import UNRESOLVED, CapabilityResolver, is_stringer

# Called with (transformed items, original value) for a top-level sequence.
Constructor = Callable[[list[Any], Any], Any]

_PRIMITIVES = (str, int, float, bool, bytes)


def prefix_domain(text: str, domain: str) -> str:
    """Make a server-relative path absolute on ``domain``.

    "/widgets/1" on "https://api.example.com" -> "https://api.example.com/widgets/1".
    Anything not starting with "/" is left alone, as is everything when
    ``domain`` is empty.
    """
    if domain and text.startswith("/"):
        return domain.rstrip("/") + text
    return text


def _no_loader(value: Any) -> Any:
    return value


def _mapping_key(key: Any) -> str:
    if isinstance(key, Enum):
        return str(key.value)
    return str(key)


class ResponseTransformer:
    """Recursive walker producing serialization-ready response trees.

    ``loader`` is handed to Joiner values so they can fetch their remaining
    fields; the transformer itself never performs I/O.
    """

    def __init__(self, loader: Loader | None = None) -> None:
        self._loader = loader or _no_loader

    def create_response(
        self,
        value: Any,
        options: OptionsTree | Mapping[str, Any] | None = None,
        domain: str = "",
        constructor: Constructor | None = None,
    ) -> Any:
        """Transform ``value`` as the top-level response body."""
        return self.transform(
            value,
            OptionsTree.parse(options),
            domain,
            nested=False,
            constructor=constructor,
        )

    def transform(
        self,
        value: Any,
        options: OptionsTree,
        domain: str = "",
        nested: bool = False,
        declared_type: Any = None,
        constructor: Constructor | None = None,
        _original: Any = None,
    ) -> Any:
        """Transform one value.

        Args:
            value: The value to transform.
            options: Options node that applies to this value.
            domain: Prefix for server-relative string links.
            nested: True for fields, list items and mapping values.
            declared_type: Declared field type, used for None substitutes.
            constructor: Wrapper applied to a top-level sequence result.
        """
        if type(value) in _PRIMITIVES:
            if isinstance(value, str):
                return prefix_domain(value, domain)
            return value

        if value is None:
            if not nested:
                return None
            substitute = CapabilityResolver.resolve_nil(declared_type)
            if substitute is None:
                return None
            return self.transform(substitute, options, domain, nested=True)

        original = value if _original is None else _original

        self._populate(value, options)

        if nested:
            resolved = CapabilityResolver.resolve(value, options)
            if resolved is not UNRESOLVED:
                return self.transform(resolved, options, domain, nested=True)

        if offers(value, ResponseConverter):
            return self.transform(
                value.response_data(),
                options,
                domain,
                nested=nested,
                constructor=constructor,
                _original=original,
            )

        return self._dispatch(value, original, options, domain, nested, constructor)

    # -------------------------------------------------------------------------
    # Shape dispatch
    # -------------------------------------------------------------------------

    def _dispatch(
        self,
        value: Any,
        original: Any,
        options: OptionsTree,
        domain: str,
        nested: bool,
        constructor: Constructor | None,
    ) -> Any:
        unwrapped = unwrap_nullable(value)
        if unwrapped is not NO_MATCH:
            if unwrapped is None:
                return None
            return self.transform(unwrapped, options, domain, nested=True)

        if is_struct(value):
            return self._struct(value, options, domain)

        if isinstance(value, Enum):
            return self.transform(value.value, options, domain, nested=True)

        if isinstance(value, str):
            return prefix_domain(str(value), domain)

        if isinstance(value, Mapping):
            result = {}
            for key, item in value.items():
                key = _mapping_key(key)
                result[key] = self.transform(item, options.sub_options(key), domain, nested=True)
            return result

        if isinstance(value, (list, tuple, set, frozenset)):
            return self._sequence(value, original, options, domain, nested, constructor)

        return self._opaque(value, options, domain)

    def _struct(self, value: Any, options: OptionsTree, domain: str) -> dict[str, Any]:
        table = field_table(type(value))
        response: dict[str, Any] = {}

        for field in table.direct:
            response[field.key] = self.transform(
                getattr(value, field.name),
                options.sub_options(field.key),
                domain,
                nested=True,
                declared_type=field.declared_type,
            )

        # Embedded (promoted) fields only fill keys nobody else claimed.
        for field in table.embeds:
            embedded = getattr(value, field.name)
            if embedded is None:
                continue
            promoted = self.transform(embedded, options, domain, nested=False)
            if not isinstance(promoted, dict):
                continue
            for key, item in promoted.items():
                response.setdefault(key, item)

        return response

    def _opaque(self, value: Any, options: OptionsTree, domain: str) -> Any:
        """Fresh primitive (or mapping) for a value of no known shape."""
        if isinstance(value, (bytes, bytearray, memoryview)):
            return bytes(value)
        if isinstance(value, int):
            return int(value)
        if isinstance(value, float):
            return float(value)
        if isinstance(value, BaseException) or is_stringer(type(value)):
            return self.transform(str(value), options, domain, nested=True)

        attributes = public_attributes(value)
        if attributes is None:
            return str(value)

        result: dict[str, Any] = {}
        for name, item in attributes.items():
            key = response_key(name)
            result[key] = self.transform(item, options.sub_options(key), domain, nested=True)
        return result

    def _sequence(
        self,
        value: Any,
        original: Any,
        options: OptionsTree,
        domain: str,
        nested: bool,
        constructor: Constructor | None,
    ) -> Any:
        top_level = not nested
        items = []
        for element in value:
            if top_level and not options.full and offers(element, CollectionResponseConverter):
                element = element.collection_response()
            items.append(self.transform(element, options, domain, nested=True))

        if top_level and constructor is not None:
            return constructor(items, original)
        return items

    # -------------------------------------------------------------------------
    # Deferred population
    # -------------------------------------------------------------------------

    def _populate(self, value: Any, options: OptionsTree) -> None:
        # str.join / bytes.join would otherwise satisfy the Joiner protocol.
        if isinstance(value, (str, bytes, bytearray)):
            return
        if offers(value, LazyLoader):
            value.lazy_load()
        if offers(value, Joiner):
            value.join(options, self._loader)


_default_transformer = ResponseTransformer()


def create_response(
    value: Any,
    options: OptionsTree | Mapping[str, Any] | None = None,
    domain: str = "",
    constructor: Constructor | None = None,
) -> Any:
    """Transform ``value`` with a transformer that has no loader."""
    return _default_transformer.create_response(value, options, domain, constructor)
