# SPDX-License-Identifier: Apache-2.0
# Copyright 2024-2026 CAB Ingénierie / Christophe ABOULICAM
"""FastAPI / starlette adapter.

Thin glue between a request and the responder core:
- read_params: parse request input once, cached on request.state
- respond: build, encode and return the envelope
- VaryAcceptMiddleware: responses vary on Accept for client caching

Usage:
    app.add_middleware(VaryAcceptMiddleware)

    @app.get("/things/{thing_id}")
    async def get_thing(request: Request, thing_id: int):
        ledger = NotificationLedger()
        return await respond(request, 200, ledger, load_thing(thing_id))
"""

from __future__ import annotations

from typing import Any, Callable
from urllib.parse import parse_qsl

import structlog
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from .codec import DEFAULT_BASE_TYPE, EncapsulatedCodec
from .config import get_settings
from .errors import ResponderError
from .ledger import NotificationLedger
from .options import OptionsTree
from .params import JSON_CONTENT_TYPES, Page, parse_page, parse_params

logger = structlog.get_logger(__name__)

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"


def _media_type(request: Request) -> str:
    return request.headers.get("content-type", "").split(";", 1)[0].strip().lower()


async def read_params(request: Request) -> dict[str, Any]:
    """Parse query string and body into one parameter mapping.

    JSON bodies replace the query string; urlencoded bodies are merged after
    it. Parsed once per request.

    Raises:
        ParamsParseError: The body cannot be decoded.
    """
    cached = getattr(request.state, "responder_params", None)
    if cached is not None:
        return cached

    content_type = request.headers.get("content-type")
    media_type = _media_type(request)
    if media_type in JSON_CONTENT_TYPES:
        params = parse_params(content_type, await request.body())
    else:
        pairs = list(request.query_params.multi_items())
        if media_type == FORM_CONTENT_TYPE:
            body = (await request.body()).decode("utf-8", errors="replace")
            pairs.extend(parse_qsl(body, keep_blank_values=True))
        params = parse_params(content_type, form_items=pairs)

    request.state.responder_params = params
    return params


async def read_page(request: Request, default_page_size: int | None = None) -> Page:
    """Offset/limit from the ``page`` and ``pageSize`` parameters."""
    params = await read_params(request)
    return parse_page(params, default_page_size or get_settings().default_page_size)


def request_domain(request: Request) -> str:
    """Prefix for server-relative links: configured domain, else the request's."""
    configured = get_settings().public_domain
    if configured:
        return configured
    return f"{request.url.scheme}://{request.url.netloc}"


def matched_type(request: Request, codec: EncapsulatedCodec) -> str | None:
    """The first Accept entry the codec can encode, if any."""
    for entry in request.headers.get("accept", "").split(","):
        media_type = entry.split(";", 1)[0].strip()
        if not media_type or not codec.content_type_supported(media_type):
            continue
        if codec.base_type(media_type) == DEFAULT_BASE_TYPE:
            return media_type
    return None


async def respond(
    request: Request,
    status: int,
    ledger: NotificationLedger,
    data: Any,
    page: Page | None = None,
    codec: EncapsulatedCodec | None = None,
) -> Response:
    """Encode ``data`` in the envelope format and wrap it in a Response.

    Request-level failures (unparseable input, malformed joins) never raise:
    the message goes to the ledger and the envelope is sent without a body.
    """
    codec = codec or EncapsulatedCodec()
    media_type = matched_type(request, codec)
    domain = request_domain(request)

    try:
        params = await read_params(request)
    except ResponderError as e:
        logger.warning("request_params_unreadable", error=e.message, path=request.url.path)
        ledger.add_error_message(e.message)
        return _encode_failure(codec, ledger, {}, ledger.failure_status(), domain, media_type)

    try:
        content = codec.marshal(
            data,
            ledger,
            input_params=params,
            status=status,
            domain=domain,
            matched_type=media_type,
            page=page,
        )
    except ResponderError as e:
        logger.warning("response_rejected", code=e.code.value, error=e.message, path=request.url.path)
        ledger.add_error_message(e.message)
        return _encode_failure(codec, ledger, params, e.http_status, domain, None)

    return Response(
        content=content,
        status_code=status,
        media_type=codec.response_content_type(media_type),
    )


def _encode_failure(
    codec: EncapsulatedCodec,
    ledger: NotificationLedger,
    params: dict[str, Any],
    status: int,
    domain: str,
    media_type: str | None,
) -> Response:
    content = codec.marshal(
        None,
        ledger,
        input_params=params,
        status=status,
        domain=domain,
        joins=OptionsTree.empty(),
        matched_type=media_type,
    )
    return Response(
        content=content,
        status_code=status,
        media_type=codec.response_content_type(media_type),
    )


class VaryAcceptMiddleware(BaseHTTPMiddleware):
    """Sets ``Vary: Accept`` on every response."""

    async def dispatch(
        self,
        request: Request,
        call_next: Callable,
    ) -> Response:
        response = await call_next(request)
        response.headers["Vary"] = "Accept"
        return response
