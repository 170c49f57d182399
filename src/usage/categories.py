from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass

from src.infra.errors import UnknownCategoryError
from src.usage.descriptors import IdentifierShape
from src.usage.predicates import BUNDLED, DISABLED, ENABLED, LISTED, Predicate


@dataclass(frozen=True)
class Category:
    """A named usage rule.

    name: stable category id (``enabled-listed``).
    group_id: reporting key the sink receives (``statistics.enabled.listed.tools``).
    """

    name: str
    group_id: str
    predicate: Predicate
    shape: IdentifierShape = IdentifierShape.plain


DEFAULT_CATEGORIES: tuple[Category, ...] = (
    Category("all-bundled", "statistics.all.bundled.tools", BUNDLED),
    Category("all-listed", "statistics.all.listed.tools", LISTED, IdentifierShape.listed),
    Category("enabled-bundled", "statistics.enabled.bundled.tools", ENABLED & BUNDLED),
    Category(
        "enabled-listed", "statistics.enabled.listed.tools",
        ENABLED & LISTED, IdentifierShape.listed,
    ),
    Category("disabled-bundled", "statistics.disabled.bundled.tools", DISABLED & BUNDLED),
    Category(
        "disabled-listed", "statistics.disabled.listed.tools",
        DISABLED & LISTED, IdentifierShape.listed,
    ),
)


class CategoryRegistry:
    """Static table of categories, looked up by name or group id.

    Built once; no mutation after init, so safe to share across threads.
    """

    def __init__(self, categories: Iterable[Category]) -> None:
        self._by_name: dict[str, Category] = {}
        self._by_group: dict[str, Category] = {}
        for category in categories:
            if category.name in self._by_name:
                raise ValueError(f"Category already registered: {category.name}")
            if category.group_id in self._by_group:
                raise ValueError(f"Group id already registered: {category.group_id}")
            self._by_name[category.name] = category
            self._by_group[category.group_id] = category

    def get(self, key: str) -> Category:
        """Resolve by category name, then by group id. Raises UnknownCategoryError."""
        category = self._by_name.get(key) or self._by_group.get(key)
        if category is None:
            raise UnknownCategoryError(key)
        return category

    def names(self) -> list[str]:
        return list(self._by_name)

    def __iter__(self) -> Iterator[Category]:
        return iter(self._by_name.values())

    def __len__(self) -> int:
        return len(self._by_name)


DEFAULT_REGISTRY = CategoryRegistry(DEFAULT_CATEGORIES)
