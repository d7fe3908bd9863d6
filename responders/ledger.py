# SPDX-License-Identifier: Apache-2.0
# Copyright 2024-2026 CAB Ingénierie / Christophe ABOULICAM
"""Notification ledger — per-request store of response notifications.

Holds three ordered buckets (``err``, ``warn``, ``info``) and a mapping from
input field name to a message. Appends are synchronous and visible
immediately; each message is also handed to the log worker, with no ordering
guarantee on that side.

One ledger belongs to one in-flight request. It is not safe for concurrent
mutation from several threads.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from .log_worker import NOTIFICATIONS_TOTAL, LogDelivery, LogDeliveryWorker, log_worker


class Severity(str, Enum):
    """Notification severities; values are the bucket keys on the wire."""
    ERROR = "err"
    WARNING = "warn"
    INFO = "info"

    @classmethod
    def _missing_(cls, value: object) -> Severity | None:
        # Member names are accepted too: "error", "WARNING".
        if isinstance(value, str):
            return cls.__members__.get(value.upper())
        return None

    @property
    def tag(self) -> str:
        return self.value.upper()


def join_messages(*messages: Any) -> str:
    """Join message parts with single spaces."""
    return " ".join(str(m) for m in messages)


class NotificationLedger:
    """Severity-bucketed message store."""

    def __init__(self, worker: LogDeliveryWorker | None = None) -> None:
        self._buckets: dict[Severity, list[str]] = {s: [] for s in Severity}
        self._inputs: dict[str, str] = {}
        self._worker = worker or log_worker

    def add_message(self, severity: Severity | str, *messages: Any) -> None:
        """Append a message to a bucket and queue it for logging."""
        severity = Severity(severity)
        text = join_messages(*messages)
        self._buckets[severity].append(text)
        NOTIFICATIONS_TOTAL.labels(severity=severity.value).inc()
        self._worker.submit(LogDelivery(tag=severity.tag, text=text))

    def add_error_message(self, *messages: Any) -> None:
        self.add_message(Severity.ERROR, *messages)

    def add_warning_message(self, *messages: Any) -> None:
        self.add_message(Severity.WARNING, *messages)

    def add_info_message(self, *messages: Any) -> None:
        self.add_message(Severity.INFO, *messages)

    def set_input_message(self, field: str, *messages: Any) -> None:
        """Set (overwrite) the message for an input field."""
        self._inputs[field] = join_messages(*messages)

    # -------------------------------------------------------------------------
    # Read accessors (copies; nothing is ever removed)
    # -------------------------------------------------------------------------

    def messages(self, severity: Severity | str) -> list[str]:
        return list(self._buckets[Severity(severity)])

    def errors(self) -> list[str]:
        return self.messages(Severity.ERROR)

    def warnings(self) -> list[str]:
        return self.messages(Severity.WARNING)

    def infos(self) -> list[str]:
        return self.messages(Severity.INFO)

    def num_errors(self) -> int:
        return len(self._buckets[Severity.ERROR])

    def num_warnings(self) -> int:
        return len(self._buckets[Severity.WARNING])

    def num_infos(self) -> int:
        return len(self._buckets[Severity.INFO])

    def input_messages(self) -> dict[str, str]:
        return dict(self._inputs)

    def has_input_messages(self) -> bool:
        return bool(self._inputs)

    def failure_status(self) -> int:
        """Status for a failed response: 400 when an input field is to blame, else 500."""
        return 400 if self._inputs else 500

    def to_notifications(self) -> dict[str, Any]:
        """Wire shape: the three buckets, plus input field messages alongside.

        A field named like a bucket never replaces the bucket.
        """
        notifications: dict[str, Any] = {
            severity.value: list(bucket) for severity, bucket in self._buckets.items()
        }
        for field, message in self._inputs.items():
            notifications.setdefault(field, message)
        return notifications

    def __repr__(self) -> str:
        return (
            f"NotificationLedger(err={self.num_errors()}, warn={self.num_warnings()}, "
            f"info={self.num_infos()}, input={len(self._inputs)})"
        )
