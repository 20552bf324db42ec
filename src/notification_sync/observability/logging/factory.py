"""Observability – LoggerFactory."""
from __future__ import annotations

import logging
from typing import Any

import structlog

from notification_sync.observability.logging.processors import TenantProcessor


class LoggerFactory:
    """Configure structlog on top of the stdlib logging tree."""

    @staticmethod
    def configure(level: int = logging.INFO, json: bool = True) -> None:
        """Route structlog through a single root handler.

        ``json=False`` swaps the JSON renderer for structlog's console
        renderer, which is easier to read during local development.
        """
        shared_processors: list[Any] = [
            structlog.contextvars.merge_contextvars,
            TenantProcessor(),
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
        ]

        structlog.configure(
            processors=shared_processors + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
            logger_factory=structlog.stdlib.LoggerFactory(),
            wrapper_class=structlog.stdlib.BoundLogger,
            cache_logger_on_first_use=True,
        )
        renderer: Any = (
            structlog.processors.JSONRenderer() if json else structlog.dev.ConsoleRenderer()
        )
        formatter = structlog.stdlib.ProcessorFormatter(
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                renderer,
            ],
        )
        handler = logging.StreamHandler()
        handler.setFormatter(formatter)
        root = logging.getLogger()
        root.handlers.clear()
        root.addHandler(handler)
        root.setLevel(level)


__all__ = ["LoggerFactory"]
