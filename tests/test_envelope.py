# SPDX-License-Identifier: Apache-2.0
# Copyright 2024-2026 CAB Ingénierie / Christophe ABOULICAM
"""Tests for envelope assembly."""

from dataclasses import dataclass

import pydantic
import pytest

from responders.envelope import Envelope, EnvelopeBuilder, is_success
from responders.fields import response_field
from responders.params import Page


@dataclass
class Thing:
    Id: int
    Name: str = response_field(key="title")

    def location(self):
        return f"/things/{self.Id}"


@dataclass
class LinkedThing(Thing):
    def related_links(self):
        return {"owner": "/users/3", "docs": "https://docs.example.com/things"}


@dataclass
class Unplaced:
    id: int


@dataclass
class Teaser:
    id: int

    def location(self):
        return f"/teasers/{self.id}"

    def response_data(self):
        return {"teaser": self.id}


@pytest.fixture
def builder():
    return EnvelopeBuilder()


class TestIsSuccess:
    """Test status classification."""

    def test_ranges(self):
        assert is_success(200) is True
        assert is_success(204) is True
        assert is_success(301) is False
        assert is_success(400) is False
        assert is_success(500) is False


class TestBuild:
    """Test EnvelopeBuilder.build."""

    def test_struct_with_location(self, builder, ledger):
        envelope = builder.build(Thing(Id=1, Name="x"), ledger, status=200, domain="https://h")

        assert envelope.to_wire() == {
            "meta": {
                "code": 200,
                "location": "https://h/things/1",
                "links": {"location": "https://h/things/1"},
                "input_params": {},
            },
            "notifications": {"err": [], "warn": [], "info": []},
            "response": {"id": 1, "title": "x"},
        }

    def test_failure_status_omits_location(self, builder, ledger):
        ledger.add_error_message("not allowed")

        wire = builder.build(Thing(Id=1, Name="x"), ledger, status=403).to_wire()

        assert wire["meta"] == {"code": 403, "input_params": {}}
        assert wire["notifications"]["err"] == ["not allowed"]

    def test_no_location_capability(self, builder, ledger):
        wire = builder.build(Unplaced(id=1), ledger).to_wire()

        assert wire["meta"]["location"] is None
        assert wire["meta"]["links"] == {}

    def test_related_links_prefixed(self, builder, ledger):
        envelope = builder.build(LinkedThing(Id=2, Name="y"), ledger, domain="https://h")

        assert envelope.links == {
            "owner": "https://h/users/3",
            "docs": "https://docs.example.com/things",
            "location": "https://h/things/2",
        }

    def test_location_from_original_value(self, builder, ledger):
        envelope = builder.build(Teaser(id=5), ledger, domain="https://h")

        assert envelope.response == {"teaser": 5}
        assert envelope.location == "https://h/teasers/5"

    def test_input_params_echoed(self, builder, ledger):
        params = {"q": "jazz", "page": "2"}

        envelope = builder.build([], ledger, input_params=params)

        assert envelope.input_params == {"q": "jazz", "page": "2"}

    def test_inputs_in_notifications(self, builder, ledger):
        ledger.set_input_message("email", "is required")

        wire = builder.build(None, ledger, status=400).to_wire()

        assert wire["notifications"]["email"] == "is required"
        assert wire["response"] is None

    def test_options_applied(self, builder, ledger):
        envelope = builder.build({"a": "/x"}, ledger, domain="https://h", options={"a": {}})

        assert envelope.response == {"a": "https://h/x"}


class TestPagination:
    """Test pagination meta."""

    def test_list_body(self, builder, ledger):
        wire = builder.build([1, 2, 3], ledger, page=Page(offset=20, limit=10)).to_wire()

        assert wire["meta"]["pagination"] == {"offset": 20, "limit": 10, "returned": 3}
        assert wire["response"] == [1, 2, 3]

    def test_non_list_body(self, builder, ledger):
        wire = builder.build({"a": 1}, ledger, page=Page(offset=0, limit=10)).to_wire()

        assert "pagination" not in wire["meta"]

    def test_without_page(self, builder, ledger):
        wire = builder.build([1], ledger).to_wire()

        assert "pagination" not in wire["meta"]


class TestEnvelopeModel:
    """Test the envelope model itself."""

    def test_frozen(self):
        envelope = Envelope(code=200)

        with pytest.raises(pydantic.ValidationError):
            envelope.code = 500
