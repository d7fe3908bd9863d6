# SPDX-License-Identifier: Apache-2.0
# Copyright 2024-2026 CAB Ingénierie / Christophe ABOULICAM
"""Ledger log delivery worker.

Every ledger message is also written to the application log. The ledger only
enqueues; a single background thread drains the queue into the sink, so the
request path never waits on logging.

Architecture:
  NotificationLedger.add_message (append & enqueue) → caller continues
                         ↓ (non-blocking)
                 LogDeliveryWorker (drain & write through structlog)

Delivery order relative to the ledger buckets is not guaranteed. A full queue
drops the delivery and counts it.
"""

from __future__ import annotations

import queue
import threading
import time
from dataclasses import dataclass, field
from typing import Callable

import structlog
from prometheus_client import Counter

from .config import get_settings
from .logging_config import LEDGER_EVENT

logger = structlog.get_logger(__name__)

settings = get_settings()
prefix = settings.metrics_prefix

# =============================================================================
# Prometheus Metrics
# =============================================================================

NOTIFICATIONS_TOTAL = Counter(
    f"{prefix}_notifications_total",
    "Total notifications recorded in ledgers",
    ["severity"],
)

LOG_DELIVERIES_DROPPED = Counter(
    f"{prefix}_log_deliveries_dropped_total",
    "Ledger log deliveries dropped because the queue was full",
)


# =============================================================================
# Queue Payload
# =============================================================================

# Ledger severity tag -> structlog method
_LEVELS = {
    "ERR": "error",
    "WARN": "warning",
    "INFO": "info",
}


@dataclass
class LogDelivery:
    """One ledger message waiting to be logged."""
    tag: str  # "ERR", "WARN" or "INFO"
    text: str
    timestamp: float = field(default_factory=time.time)

    @property
    def level(self) -> str:
        return _LEVELS.get(self.tag, "info")


Sink = Callable[[LogDelivery], None]


def structlog_sink(delivery: LogDelivery) -> None:
    """Default sink: write the message through structlog."""
    log = getattr(logger, delivery.level)
    log(LEDGER_EVENT, severity=delivery.tag, text=delivery.text)


# =============================================================================
# Worker
# =============================================================================


class LogDeliveryWorker:
    """Background worker that drains queued deliveries into a sink.

    Starts lazily on first submit; start()/stop() may also be called from an
    application lifespan.
    """

    def __init__(self, sink: Sink | None = None, maxsize: int | None = None) -> None:
        self._sink = sink or structlog_sink
        self._maxsize = maxsize
        self._queue: queue.Queue[LogDelivery | None] | None = None
        self._thread: threading.Thread | None = None
        self._lock = threading.Lock()

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """Start the consumer thread (idempotent)."""
        with self._lock:
            if self.running:
                return
            if self._queue is None:
                self._queue = queue.Queue(
                    maxsize=self._maxsize or get_settings().log_queue_size
                )
            self._thread = threading.Thread(
                target=self._consume_loop,
                name="responders-log-worker",
                daemon=True,
            )
            self._thread.start()
        logger.debug("log_worker_started")

    def stop(self, timeout: float | None = 5.0) -> None:
        """Drain pending deliveries, then stop the consumer thread."""
        with self._lock:
            thread = self._thread
            if thread is None or not thread.is_alive():
                return
            self._queue.put(None)
        thread.join(timeout)
        self._thread = None
        logger.debug("log_worker_stopped")

    def submit(self, delivery: LogDelivery) -> bool:
        """Enqueue without blocking. Returns False when the delivery was dropped."""
        self.start()
        try:
            self._queue.put_nowait(delivery)
        except queue.Full:
            LOG_DELIVERIES_DROPPED.inc()
            return False
        return True

    def flush(self) -> None:
        """Block until every delivery enqueued so far has been processed.

        Returns immediately when the consumer is not running; deliveries left
        behind by a timed-out stop() wait for the next start().
        """
        if self._queue is not None and self.running:
            self._queue.join()

    def _consume_loop(self) -> None:
        """Main consumer loop — drains queue into the sink."""
        while True:
            delivery = self._queue.get()
            try:
                if delivery is None:
                    return
                self._sink(delivery)
            except Exception:
                logger.exception("log_delivery_error", severity=delivery.tag)
            finally:
                self._queue.task_done()


# Singleton instance
log_worker = LogDeliveryWorker()
