# SPDX-License-Identifier: Apache-2.0
# Copyright 2024-2026 CAB Ingénierie / Christophe ABOULICAM
"""Structured logging configuration using structlog.

JSON-formatted logs for log shippers, console output for local development.
Ledger notifications reach these logs through the background log worker as
``ledger_message`` events; ``log_ledger_messages=False`` drops them here.
"""

import logging
import sys
from typing import Any

import structlog
from structlog.typing import EventDict, Processor, WrappedLogger

from .config import Settings, get_settings

LEDGER_EVENT = "ledger_message"


def add_app_context(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Add application context to all log entries."""
    settings = get_settings()
    event_dict["service"] = settings.app_name
    event_dict["version"] = settings.app_version
    return event_dict


def drop_ledger_messages(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Discard ledger notification events, keep everything else."""
    if event_dict.get("event") == LEDGER_EVENT:
        raise structlog.DropEvent
    return event_dict


def build_processors(settings: Settings) -> list[Processor]:
    """Processors shared by structlog loggers and foreign (stdlib) records."""
    processors: list[Processor] = [structlog.contextvars.merge_contextvars]
    if not settings.log_ledger_messages:
        processors.append(drop_ledger_messages)
    processors += [
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
        add_app_context,
    ]
    return processors


def configure_logging(settings: Settings | None = None) -> None:
    """Configure structlog and route stdlib logging through the same renderer."""
    settings = settings or get_settings()
    shared_processors = build_processors(settings)

    renderer: Any
    if settings.log_format == "json":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=True)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            *shared_processors,
            structlog.processors.format_exc_info,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=shared_processors,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                renderer,
            ],
        )
    )

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(getattr(logging, settings.log_level))
