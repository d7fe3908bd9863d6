# SPDX-License-Identifier: Apache-2.0
# Copyright 2024-2026 CAB Ingénierie / Christophe ABOULICAM
"""Input parameter parsing helpers.

Framework-agnostic: callers pass the content type, raw body and the decoded
form/query pairs. The HTTP adapter wires these to a starlette request.
"""

from __future__ import annotations

import json
from collections.abc import Iterable
from typing import Any, NamedTuple

from .errors import InvalidParamsError, ParamsParseError

JSON_CONTENT_TYPES = frozenset({"application/json", "text/json"})

PAGE_PARAM = "page"
PAGE_SIZE_PARAM = "pageSize"


class Page(NamedTuple):
    """Offset/limit window derived from page parameters."""
    offset: int
    limit: int


def _media_type(content_type: str | None) -> str:
    """Strip parameters: ``application/json; charset=utf-8`` -> ``application/json``."""
    if not content_type:
        return ""
    return content_type.split(";", 1)[0].strip().lower()


def collapse_pairs(pairs: Iterable[tuple[str, Any]]) -> dict[str, Any]:
    """Group form pairs by key: one value stays a scalar, several become a list."""
    grouped: dict[str, list[Any]] = {}
    for key, value in pairs:
        grouped.setdefault(key, []).append(value)
    return {
        key: values[0] if len(values) == 1 else values
        for key, values in grouped.items()
    }


def parse_params(
    content_type: str | None,
    body: bytes = b"",
    form_items: Iterable[tuple[str, Any]] = (),
) -> dict[str, Any]:
    """Parse request input into a flat parameter mapping.

    JSON bodies must decode to an object. Anything else is treated as form
    data, given as (key, value) pairs.

    Raises:
        ParamsParseError: The JSON body cannot be decoded or is not an object.
    """
    media_type = _media_type(content_type)
    if media_type in JSON_CONTENT_TYPES:
        if not body:
            return {}
        try:
            decoded = json.loads(body)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise ParamsParseError(f"Could not decode JSON body: {e}", media_type) from e
        if not isinstance(decoded, dict):
            raise ParamsParseError(
                f"JSON body must be an object, got {type(decoded).__name__}",
                media_type,
            )
        return decoded

    return collapse_pairs(form_items)


def _to_int(param: str, value: Any) -> int:
    if isinstance(value, bool):
        raise InvalidParamsError(param, f"'{param}' must be an integer")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError as e:
            raise InvalidParamsError(param, f"'{param}' must be an integer") from e
    raise InvalidParamsError(param, f"'{param}' must be an integer")


def parse_page(params: dict[str, Any], default_page_size: int) -> Page:
    """Read ``page`` and ``pageSize`` into an offset/limit window.

    Both must be present; otherwise the first page of ``default_page_size``
    is returned. Pages are 1-based.

    Raises:
        InvalidParamsError: A value is not an integer.
    """
    if PAGE_PARAM not in params or PAGE_SIZE_PARAM not in params:
        return Page(offset=0, limit=default_page_size)

    page_size = _to_int(PAGE_SIZE_PARAM, params[PAGE_SIZE_PARAM])
    page = _to_int(PAGE_PARAM, params[PAGE_PARAM])
    return Page(offset=(page - 1) * page_size, limit=page_size)
