# SPDX-License-Identifier: Apache-2.0
# Copyright 2024-2026 CAB Ingénierie / Christophe ABOULICAM
"""Responders — object-to-response transformation for REST APIs.

Turns arbitrary values into serialization-ready trees (with per-type
customization hooks, join options and domain-relative link rewriting),
collects request notifications in a ledger, and wraps both in a
``{meta, notifications, response}`` envelope.
"""

from .capabilities import (
    CollectionResponseConverter,
    InputReceiver,
    Joiner,
    LazyLoader,
    Locationer,
    NilElementConverter,
    RelatedLinker,
    ResponseConverter,
    ResponseElementConverter,
)
from .codec import EncapsulatedCodec
from .envelope import Envelope, EnvelopeBuilder
from .errors import (
    InvalidOptionsError,
    InvalidParamsError,
    ParamsParseError,
    ResponderError,
    ResponderErrorCode,
    UnsupportedMediaTypeError,
    UnsupportedOperationError,
)
from .fields import response_field
from .ledger import NotificationLedger, Severity
from .nullable import Nullable
from .options import OptionsTree
from .params import Page, parse_page, parse_params
from .transformer import ResponseTransformer, create_response, prefix_domain

__version__ = "0.1.0"
__all__ = [
    # Transformation
    "ResponseTransformer",
    "create_response",
    "prefix_domain",
    "OptionsTree",
    "Nullable",
    "response_field",
    # Capabilities
    "ResponseConverter",
    "ResponseElementConverter",
    "CollectionResponseConverter",
    "NilElementConverter",
    "LazyLoader",
    "Joiner",
    "Locationer",
    "RelatedLinker",
    "InputReceiver",
    # Notifications & envelope
    "NotificationLedger",
    "Severity",
    "Envelope",
    "EnvelopeBuilder",
    "EncapsulatedCodec",
    # Params
    "Page",
    "parse_params",
    "parse_page",
    # Errors
    "ResponderError",
    "ResponderErrorCode",
    "InvalidOptionsError",
    "InvalidParamsError",
    "ParamsParseError",
    "UnsupportedMediaTypeError",
    "UnsupportedOperationError",
]
