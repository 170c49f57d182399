"""Classification predicates over tool states.

A predicate is a first-class value: it wraps ``(state, context) -> bool`` and
composes with ``&``, ``|`` and ``~``. The context carries whatever shared
collaborators a predicate needs: the catalog cache and the catalog ids
pinned for the current pass.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from src.catalog.cache import CatalogCache
    from src.tools.base import ToolState


@dataclass(frozen=True)
class ClassificationContext:
    """Shared collaborators for one classification pass.

    plugin_ids is the catalog read once at the start of the pass, so every
    state in the pass is checked against the same snapshot.
    """

    catalog: CatalogCache
    plugin_ids: frozenset[str] = frozenset()


@dataclass(frozen=True)
class Predicate:
    name: str
    test: Callable[[ToolState, ClassificationContext], bool]

    def __call__(self, state: ToolState, context: ClassificationContext) -> bool:
        return self.test(state, context)

    def __and__(self, other: Predicate) -> Predicate:
        return Predicate(
            f"({self.name} & {other.name})",
            lambda s, c: self(s, c) and other(s, c),
        )

    def __or__(self, other: Predicate) -> Predicate:
        return Predicate(
            f"({self.name} | {other.name})",
            lambda s, c: self(s, c) or other(s, c),
        )

    def __invert__(self) -> Predicate:
        return Predicate(f"~{self.name}", lambda s, c: not self(s, c))

    def __repr__(self) -> str:
        return f"Predicate({self.name})"


def _bundled(state: ToolState, context: ClassificationContext) -> bool:
    return state.origin is not None and state.origin.bundled


def _listed(state: ToolState, context: ClassificationContext) -> bool:
    return context.catalog.is_listed(state.origin, context.plugin_ids)


def _enabled(state: ToolState, context: ClassificationContext) -> bool:
    return state.is_enabled and not state.is_enabled_by_default


def _disabled(state: ToolState, context: ClassificationContext) -> bool:
    return not state.is_enabled and state.is_enabled_by_default


BUNDLED = Predicate("bundled", _bundled)
LISTED = Predicate("listed", _listed)
# User opted in to a tool that is off by default.
ENABLED = Predicate("enabled", _enabled)
# User opted out of a tool that is on by default.
DISABLED = Predicate("disabled", _disabled)
