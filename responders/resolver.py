# SPDX-License-Identifier: Apache-2.0
# Copyright 2024-2026 CAB Ingénierie / Christophe ABOULICAM
"""Capability resolver — ordered dispatch over per-type customization hooks.

Applies to nested elements only (fields, list items, mapping values).
Priority:
1. None: NilElementConverter on the declared type, else None
2. ResponseElementConverter
3. Stringer (type defines ``__str__``)
4. Error (exception instance)
5. no match: generic shape dispatch

An options node with ``"type": "full"`` turns off steps 2-4 for that node.
"""

from __future__ import annotations

from enum import Enum
from functools import lru_cache
from typing import Any

from pydantic import BaseModel

from .capabilities import NilElementConverter, ResponseElementConverter, offers
from .options import OptionsTree

# Sentinel: no capability matched, fall through to shape dispatch.
UNRESOLVED = object()

# Modules whose __str__ is a default rendering, not a chosen textual form.
_DEFAULT_STR_MODULES = frozenset({"builtins", "enum"})


@lru_cache(maxsize=None)
def is_stringer(cls: type) -> bool:
    """True when ``cls`` (or a user-level base) defines its own ``__str__``.

    Enum members never qualify: mixed-in enums get ``Enum.__str__`` copied
    into their own class dict, and members render as their value anyway.
    """
    if issubclass(cls, Enum):
        return False
    for klass in cls.__mro__:
        if "__str__" in vars(klass):
            return klass.__module__ not in _DEFAULT_STR_MODULES and klass is not BaseModel
    return False


def has_nil_element(declared_type: Any) -> bool:
    return isinstance(declared_type, type) and offers(declared_type, NilElementConverter)


class CapabilityResolver:
    """Stateless resolver; results still need transforming by the caller."""

    @staticmethod
    def resolve_nil(declared_type: Any = None) -> Any:
        """Substitute for a None element whose declared type may customize it."""
        if has_nil_element(declared_type):
            return declared_type.nil_element_data()
        return None

    @staticmethod
    def resolve(value: Any, options: OptionsTree) -> Any:
        """Return the first capability result, or UNRESOLVED."""
        if options.full:
            return UNRESOLVED
        if offers(value, ResponseElementConverter):
            return value.response_element_data(options)
        if is_stringer(type(value)):
            return str(value)
        if isinstance(value, BaseException):
            return str(value)
        return UNRESOLVED
