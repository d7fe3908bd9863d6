# SPDX-License-Identifier: Apache-2.0
# Copyright 2024-2026 CAB Ingénierie / Christophe ABOULICAM
"""Encapsulated media type codec.

Encodes responses in the envelope format for
``application/vnd.responders.encapsulated``, optionally suffixed with the
base format (``+json``). JSON is the only base format available. Decoding is
never supported by this format.
"""

from __future__ import annotations

import base64
import json
from collections.abc import Mapping
from typing import Any

import structlog

from .config import Settings, get_settings
from .envelope import Envelope, EnvelopeBuilder
from .errors import UnsupportedMediaTypeError, UnsupportedOperationError
from .ledger import NotificationLedger
from .options import OptionsTree
from .params import Page

logger = structlog.get_logger(__name__)

TYPE_CATEGORY = "application"
DEFAULT_BASE_TYPE = "application/json"
JOINS_PARAM = "joins"


def _encode_bytes(value: Any) -> str:
    # Binary leaves are sent base64-encoded; anything else is a bug upstream.
    if isinstance(value, bytes):
        return base64.b64encode(value).decode("ascii")
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def _serialize(payload: Any) -> bytes:
    """Compact JSON serialization."""
    return json.dumps(payload, separators=(",", ":"), default=_encode_bytes).encode("utf-8")


class EncapsulatedCodec:
    """Marshals values into the envelope format."""

    def __init__(
        self,
        builder: EnvelopeBuilder | None = None,
        settings: Settings | None = None,
    ) -> None:
        self._builder = builder or EnvelopeBuilder()
        self._content_type = (settings or get_settings()).codec_mime_type

    @property
    def content_type(self) -> str:
        return self._content_type

    def content_type_supported(self, content_type: str) -> bool:
        """True for the vendor type, with or without a ``+format`` suffix."""
        media_type = content_type.split(";", 1)[0].strip()
        return media_type.split("+", 1)[0] == self._content_type

    def base_type(self, matched_type: str | None) -> str:
        """Media type of the base encoding named by the ``+format`` suffix."""
        if matched_type and "+" in matched_type:
            suffix = matched_type.split(";", 1)[0].strip().split("+", 1)[1]
            return f"{TYPE_CATEGORY}/{suffix}"
        return DEFAULT_BASE_TYPE

    def response_content_type(self, matched_type: str | None = None) -> str:
        """Content-Type header value for an encoded response."""
        return f"{self._content_type}+{self.base_type(matched_type).split('/', 1)[1]}"

    def options_from(
        self,
        joins: Any = None,
        input_params: Mapping[str, Any] | None = None,
    ) -> OptionsTree:
        """Options tree from explicit joins, else the ``joins`` input parameter.

        An undecodable joins string is logged and ignored. A decodable one with
        a malformed shape raises InvalidOptionsError.
        """
        if joins is None and input_params:
            joins = input_params.get(JOINS_PARAM)
        if joins is None or joins == "":
            return OptionsTree.empty()
        if isinstance(joins, str):
            try:
                return OptionsTree.from_json(joins)
            except json.JSONDecodeError as e:
                logger.warning("joins_options_invalid", error=str(e))
                return OptionsTree.empty()
        return OptionsTree.parse(joins)

    def envelope(
        self,
        value: Any,
        ledger: NotificationLedger,
        input_params: dict[str, Any] | None = None,
        status: int = 200,
        domain: str = "",
        joins: Any = None,
        page: Page | None = None,
    ) -> Envelope:
        return self._builder.build(
            value,
            ledger,
            input_params=input_params,
            status=status,
            domain=domain,
            options=self.options_from(joins, input_params),
            page=page,
        )

    def marshal(
        self,
        value: Any,
        ledger: NotificationLedger,
        input_params: dict[str, Any] | None = None,
        status: int = 200,
        domain: str = "",
        joins: Any = None,
        matched_type: str | None = None,
        page: Page | None = None,
    ) -> bytes:
        """Build the envelope for ``value`` and encode it.

        Raises:
            InvalidOptionsError: The joins options have a malformed shape.
            UnsupportedMediaTypeError: The ``+format`` suffix is not json.
        """
        base_type = self.base_type(matched_type)
        if base_type != DEFAULT_BASE_TYPE:
            raise UnsupportedMediaTypeError(base_type)

        envelope = self.envelope(
            value,
            ledger,
            input_params=input_params,
            status=status,
            domain=domain,
            joins=joins,
            page=page,
        )
        return _serialize(envelope.to_wire())

    def unmarshal(self, data: bytes, target: Any = None) -> Any:
        """Always fails: the envelope format is response-only."""
        raise UnsupportedOperationError("Unmarshal")
