# SPDX-License-Identifier: Apache-2.0
# Copyright 2024-2026 CAB Ingénierie / Christophe ABOULICAM
"""Response envelope — final body assembled from tree, ledger and metadata.

Wire shape:
```json
{
  "meta": {"code": 200, "input_params": {},
           "location": "https://host/things/1",
           "links": {"location": "https://host/things/1"}},
  "notifications": {"err": [], "warn": [], "info": []},
  "response": {"id": 1, "title": "x"}
}
```

``location`` and ``links`` are only present for 2xx statuses. They come from
the Locationer / RelatedLinker capabilities of the original top-level value,
not of whatever a ResponseConverter substituted for it.
"""

from __future__ import annotations

from typing import Any

import structlog
from pydantic import BaseModel, ConfigDict, Field

from .capabilities import Locationer, RelatedLinker, offers
from .ledger import NotificationLedger
from .options import OptionsTree
from .params import Page
from .transformer import ResponseTransformer, prefix_domain

logger = structlog.get_logger(__name__)


class Envelope(BaseModel):
    """Immutable envelope, ready for encoding."""

    model_config = ConfigDict(frozen=True)

    code: int = Field(..., description="HTTP-ish status code")
    input_params: dict[str, Any] = Field(default_factory=dict)
    include_location: bool = Field(
        False,
        description="Whether location/links belong in meta (2xx only)",
    )
    location: str | None = Field(
        None,
        description="Absolute location of the resource; None when it has none",
    )
    links: dict[str, str] = Field(default_factory=dict)
    pagination: dict[str, int] | None = None
    notifications: dict[str, Any] = Field(default_factory=dict)
    response: Any = None

    def to_wire(self) -> dict[str, Any]:
        """Convert to the encodable envelope mapping."""
        meta: dict[str, Any] = {
            "code": self.code,
            "input_params": dict(self.input_params),
        }
        if self.include_location:
            meta["location"] = self.location
            meta["links"] = dict(self.links)
        if self.pagination is not None:
            meta["pagination"] = dict(self.pagination)
        return {
            "meta": meta,
            "notifications": self.notifications,
            "response": self.response,
        }


def is_success(status: int) -> bool:
    return 200 <= status < 300


class EnvelopeBuilder:
    """Builds envelopes around transformed response bodies."""

    def __init__(self, transformer: ResponseTransformer | None = None) -> None:
        self._transformer = transformer or ResponseTransformer()

    def build(
        self,
        value: Any,
        ledger: NotificationLedger,
        input_params: dict[str, Any] | None = None,
        status: int = 200,
        domain: str = "",
        options: OptionsTree | dict[str, Any] | None = None,
        page: Page | None = None,
    ) -> Envelope:
        """Transform ``value`` and wrap it with meta and notifications.

        Args:
            value: Original (untransformed) response value.
            ledger: Notifications collected while handling the request.
            input_params: Parsed request parameters, echoed in meta.
            status: Response status code.
            domain: Prefix for server-relative links.
            options: Joins/expansion options.
            page: When given and the body is a list, adds pagination meta.
        """
        pagination: dict[str, int] | None = None

        def record_page(items: list[Any], original: Any) -> list[Any]:
            nonlocal pagination
            pagination = {
                "offset": page.offset,
                "limit": page.limit,
                "returned": len(items),
            }
            return items

        body = self._transformer.create_response(
            value,
            options,
            domain,
            constructor=record_page if page is not None else None,
        )

        location: str | None = None
        links: dict[str, str] = {}
        include_location = is_success(status)
        if include_location:
            location, links = self.links_for(value, domain)

        return Envelope(
            code=status,
            input_params=dict(input_params or {}),
            include_location=include_location,
            location=location,
            links=links,
            pagination=pagination,
            notifications=ledger.to_notifications(),
            response=body,
        )

    @staticmethod
    def links_for(value: Any, domain: str = "") -> tuple[str | None, dict[str, str]]:
        """Absolute location and rel -> link mapping for a value.

        A value without a location yields (None, related links or {}); that is
        reported in meta only, never as a notification.
        """
        links: dict[str, str] = {}
        if offers(value, RelatedLinker):
            for rel, link in value.related_links().items():
                links[rel] = prefix_domain(link, domain)

        if not offers(value, Locationer):
            logger.debug("response_location_missing", value_type=type(value).__name__)
            return None, links

        location = prefix_domain(value.location(), domain)
        links["location"] = location
        return location, links
