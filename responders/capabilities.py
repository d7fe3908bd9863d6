# SPDX-License-Identifier: Apache-2.0
# Copyright 2024-2026 CAB Ingénierie / Christophe ABOULICAM
"""Opt-in capabilities a value type can offer to the response transformer.

Every capability is a structural protocol: a type opts in simply by defining
the method, no base class required. The transformer checks them with
``offers()``, which requires a callable hook, never by type name.

Example:
    @dataclass
    class Track:
        id: int
        title: str
        waveform: list[float]

        def response_element_data(self, options):
            # Inside another response, a track is just a link.
            return f"/tracks/{self.id}"

        def location(self) -> str:
            return f"/tracks/{self.id}"
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable, Protocol, runtime_checkable

if TYPE_CHECKING:
    from .ledger import NotificationLedger
    from .options import OptionsTree

Loader = Callable[[Any], Any]


@runtime_checkable
class ResponseConverter(Protocol):
    """Type that substitutes different data for itself in any response.

    Applies both to the top-level body and to sub-elements. When a type also
    implements ResponseElementConverter, that one wins for sub-elements.
    """

    def response_data(self) -> Any: ...


@runtime_checkable
class ResponseElementConverter(Protocol):
    """Type that converts itself when used as a sub-element of a response.

    Not used when the value is the top-level body. Useful to compress a large
    struct into a summary when it appears in a list or as a field.
    """

    def response_element_data(self, options: OptionsTree) -> Any: ...


@runtime_checkable
class CollectionResponseConverter(Protocol):
    """Type with a different shape when it is an item of a top-level list."""

    def collection_response(self) -> Any: ...


@runtime_checkable
class NilElementConverter(Protocol):
    """Type with a special representation when a field of that type is None.

    ``nil_element_data`` must be callable on the class (classmethod or
    staticmethod), since there is no instance to call it on.
    """

    def nil_element_data(self) -> Any: ...


@runtime_checkable
class LazyLoader(Protocol):
    """Type with members that load lazily; loaded right before responding."""

    def lazy_load(self) -> None: ...


@runtime_checkable
class Joiner(Protocol):
    """Type that pulls extra data into itself according to the options tree.

    ``loader`` is the storage collaborator injected into the transformer;
    it receives a partially populated value and fills in the rest.
    """

    def join(self, options: OptionsTree, loader: Loader) -> None: ...


@runtime_checkable
class Locationer(Protocol):
    """Type that knows its own location, relative to the server root."""

    def location(self) -> str: ...


@runtime_checkable
class RelatedLinker(Protocol):
    """Type that returns rel -> relative link pairs for related values."""

    def related_links(self) -> dict[str, str]: ...


@runtime_checkable
class InputReceiver(Protocol):
    """Type that accepts raw input and records validation failures.

    Used by input-binding collaborators; the transformer never calls it.
    """

    def receive(self, raw: Any, ledger: NotificationLedger) -> None: ...


# Hook method per capability. isinstance() on a runtime-checkable protocol
# only checks that the attribute exists; a plain field named "location" must
# not pass for a Locationer.
_HOOKS: dict[type, str] = {
    ResponseConverter: "response_data",
    ResponseElementConverter: "response_element_data",
    CollectionResponseConverter: "collection_response",
    NilElementConverter: "nil_element_data",
    LazyLoader: "lazy_load",
    Joiner: "join",
    Locationer: "location",
    RelatedLinker: "related_links",
    InputReceiver: "receive",
}


def offers(value: Any, capability: type) -> bool:
    """True when ``value`` (an instance or a class) provides ``capability``."""
    return callable(getattr(value, _HOOKS[capability], None))
