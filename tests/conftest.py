# SPDX-License-Identifier: Apache-2.0
# Copyright 2024-2026 CAB Ingénierie / Christophe ABOULICAM
"""Pytest configuration and shared fixtures."""

import pytest

from responders.config import clear_settings_cache
from responders.ledger import NotificationLedger
from responders.log_worker import LogDelivery, LogDeliveryWorker


@pytest.fixture(autouse=True)
def reset_settings():
    """Reset settings cache before each test."""
    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture
def delivered() -> list[LogDelivery]:
    """Deliveries received by the worker sink."""
    return []


@pytest.fixture
def log_worker(delivered):
    """Worker writing into ``delivered`` instead of the application log."""
    worker = LogDeliveryWorker(sink=delivered.append, maxsize=100)
    yield worker
    worker.stop()


@pytest.fixture
def ledger(log_worker) -> NotificationLedger:
    return NotificationLedger(worker=log_worker)
