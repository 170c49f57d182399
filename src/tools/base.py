from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol


@dataclass(frozen=True)
class ToolOrigin:
    """Where a tool came from: the plugin that contributed it.

    bundled: shipped with the base distribution, not user-installed.
    path: install location of the contributing plugin. Only consulted for
    catalog membership (must live under the plugins root).
    """

    plugin_id: str | None = None
    path: Path | None = None
    bundled: bool = False


@dataclass(frozen=True)
class ToolState:
    """Snapshot of one configured tool in a workspace.

    tool_kind is the tool's language/kind and the first segment of every
    usage id. origin=None means "origin unknown": such a tool is excluded
    from every origin-based category.
    """

    tool_id: str
    tool_kind: str
    origin: ToolOrigin | None = None
    is_enabled: bool = False
    is_enabled_by_default: bool = False


class ToolStateSource(Protocol):
    """Supplies the ordered tool states of a workspace.

    Must return a stable snapshot for the duration of one classification pass.
    """

    def list_tool_states(self, workspace: Path) -> Sequence[ToolState]: ...
