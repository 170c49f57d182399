"""Tool usage collector: one query per usage category.

Classification is synchronous and side-effect free; the only shared state it
touches is the CatalogCache, which never blocks the caller.
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

import structlog

from src.catalog.cache import CatalogCache
from src.tools.base import ToolState, ToolStateSource
from src.usage.categories import DEFAULT_REGISTRY, Category, CategoryRegistry
from src.usage.descriptors import UsageDescriptor, build_descriptors
from src.usage.predicates import ClassificationContext
from src.usage.sink import ReportingSink

logger = structlog.get_logger()


class ToolUsageCollector:
    def __init__(
        self,
        source: ToolStateSource,
        catalog: CatalogCache,
        registry: CategoryRegistry = DEFAULT_REGISTRY,
    ) -> None:
        self._source = source
        self._catalog = catalog
        self._registry = registry

    @property
    def registry(self) -> CategoryRegistry:
        return self._registry

    def context(self) -> ClassificationContext:
        """Pin the catalog snapshot for one classification pass."""
        return ClassificationContext(
            catalog=self._catalog, plugin_ids=self._catalog.plugin_ids()
        )

    def classify(
        self,
        category: Category,
        states: Sequence[ToolState],
        context: ClassificationContext | None = None,
    ) -> frozenset[UsageDescriptor]:
        """Apply one category to an already-read list of states."""
        context = context or self.context()
        matching = [s for s in states if category.predicate(s, context)]
        return build_descriptors(matching, category.shape)

    def get_usages(self, category: str, workspace: Path) -> frozenset[UsageDescriptor]:
        """Usage descriptors of one category (by name or group id) for a workspace.

        Raises UnknownCategoryError for an unregistered key.
        """
        resolved = self._registry.get(category)
        return self.classify(resolved, self._source.list_tool_states(workspace))

    def all_bundled(self, workspace: Path) -> frozenset[UsageDescriptor]:
        return self.get_usages("all-bundled", workspace)

    def all_listed(self, workspace: Path) -> frozenset[UsageDescriptor]:
        return self.get_usages("all-listed", workspace)

    def enabled_bundled(self, workspace: Path) -> frozenset[UsageDescriptor]:
        return self.get_usages("enabled-bundled", workspace)

    def enabled_listed(self, workspace: Path) -> frozenset[UsageDescriptor]:
        return self.get_usages("enabled-listed", workspace)

    def disabled_bundled(self, workspace: Path) -> frozenset[UsageDescriptor]:
        return self.get_usages("disabled-bundled", workspace)

    def disabled_listed(self, workspace: Path) -> frozenset[UsageDescriptor]:
        return self.get_usages("disabled-listed", workspace)

    def collect(self, workspace: Path) -> dict[str, frozenset[UsageDescriptor]]:
        """All categories from a single read of the tool states, keyed by group id."""
        states = self._source.list_tool_states(workspace)
        context = self.context()
        return {
            category.group_id: self.classify(category, states, context)
            for category in self._registry
        }

    def publish(self, workspace: Path, sink: ReportingSink) -> None:
        groups = self.collect(workspace)
        for group_id, descriptors in groups.items():
            sink.record(group_id, descriptors)
        logger.info(
            "tool_usage_published",
            workspace=str(workspace),
            groups=len(groups),
            descriptors=sum(len(d) for d in groups.values()),
        )
