# SPDX-License-Identifier: Apache-2.0
# Copyright 2024-2026 CAB Ingénierie / Christophe ABOULICAM
"""Record input validation failures as per-field ledger messages.

Validation problems are never raised to the client as a fault; every failing
field gets its own input message and checking continues for the rest.
"""

from __future__ import annotations

from pydantic import ValidationError

from .ledger import NotificationLedger

# Field name used when an error is not attached to any field.
ROOT_FIELD = "input"


def error_field(loc: tuple[int | str, ...]) -> str:
    """("owner", "name") -> "owner.name"."""
    if not loc:
        return ROOT_FIELD
    return ".".join(str(part) for part in loc)


def record_validation_error(ledger: NotificationLedger, exc: ValidationError) -> int:
    """Add one input message per validation error. Returns the number recorded."""
    errors = exc.errors()
    for error in errors:
        ledger.set_input_message(error_field(error["loc"]), error["msg"])
    return len(errors)
