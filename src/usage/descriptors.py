from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from enum import StrEnum

from src.tools.base import ToolState


class IdentifierShape(StrEnum):
    """How a category renders usage ids.

    plain: ``kind.tool``. listed: ``kind.plugin.tool``, so identical tool ids
    contributed by different repository plugins stay apart.
    """

    plain = "plain"
    listed = "listed"


@dataclass(frozen=True)
class UsageDescriptor:
    id: str


def tool_usage_id(state: ToolState, shape: IdentifierShape = IdentifierShape.plain) -> str:
    """Render the usage id of a state. A listed id requires an origin plugin id."""
    if shape is IdentifierShape.listed:
        plugin_id = state.origin.plugin_id if state.origin is not None else None
        if plugin_id is None:
            raise ValueError(f"listed usage id needs a plugin id: {state.tool_id}")
        return f"{state.tool_kind}.{plugin_id}.{state.tool_id}"
    return f"{state.tool_kind}.{state.tool_id}"


def build_descriptors(
    states: Iterable[ToolState], shape: IdentifierShape = IdentifierShape.plain
) -> frozenset[UsageDescriptor]:
    """Map states to descriptors; equal ids collapse. Empty input → empty set."""
    return frozenset(UsageDescriptor(tool_usage_id(state, shape)) for state in states)
