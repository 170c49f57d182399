"""Usage module: tool classification into reporting categories."""

from src.usage.categories import DEFAULT_CATEGORIES, DEFAULT_REGISTRY, Category, CategoryRegistry
from src.usage.collector import ToolUsageCollector
from src.usage.descriptors import (
    IdentifierShape,
    UsageDescriptor,
    build_descriptors,
    tool_usage_id,
)
from src.usage.predicates import (
    BUNDLED,
    DISABLED,
    ENABLED,
    LISTED,
    ClassificationContext,
    Predicate,
)
from src.usage.sink import LoggingSink, MemorySink, ReportingSink

__all__ = [
    "BUNDLED",
    "Category",
    "CategoryRegistry",
    "ClassificationContext",
    "DEFAULT_CATEGORIES",
    "DEFAULT_REGISTRY",
    "DISABLED",
    "ENABLED",
    "IdentifierShape",
    "LISTED",
    "LoggingSink",
    "MemorySink",
    "Predicate",
    "ReportingSink",
    "ToolUsageCollector",
    "UsageDescriptor",
    "build_descriptors",
    "tool_usage_id",
]
