from __future__ import annotations

from typing import Protocol

import structlog

from src.usage.descriptors import UsageDescriptor

logger = structlog.get_logger()


class ReportingSink(Protocol):
    def record(self, group_id: str, descriptors: frozenset[UsageDescriptor]) -> None: ...


class LoggingSink:
    """Emit one structured log event per usage group."""

    def record(self, group_id: str, descriptors: frozenset[UsageDescriptor]) -> None:
        logger.info(
            "tool_usage_recorded",
            group_id=group_id,
            count=len(descriptors),
            ids=sorted(d.id for d in descriptors),
        )


class MemorySink:
    """Keep the last recorded set per group. Used by the CLI and tests."""

    def __init__(self) -> None:
        self.groups: dict[str, frozenset[UsageDescriptor]] = {}

    def record(self, group_id: str, descriptors: frozenset[UsageDescriptor]) -> None:
        self.groups[group_id] = descriptors
