"""Tool profile file: the per-workspace source of tool states.

Layout of ``<workspace>/tool-profile.json``::

    {"tools": [{"id": "unused-import", "kind": "python", "enabled": true,
                "enabled_by_default": false,
                "origin": {"plugin_id": "com.acme.lint", "path": "...", "bundled": false}}]}
"""

from __future__ import annotations

from pathlib import Path

import structlog
from pydantic import BaseModel, Field, ValidationError, field_validator

from src.constants import DEFAULT_PROFILE_FILENAME
from src.infra.errors import ToolProfileError
from src.tools.base import ToolOrigin, ToolState

logger = structlog.get_logger()


class OriginEntry(BaseModel):
    plugin_id: str | None = None
    path: Path | None = None
    bundled: bool = False


class ToolEntry(BaseModel):
    id: str
    kind: str
    enabled: bool = False
    enabled_by_default: bool = False
    origin: OriginEntry | None = None

    @field_validator("id", "kind")
    @classmethod
    def _non_empty(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be empty")
        return v

    def to_state(self) -> ToolState:
        origin = None
        if self.origin is not None:
            origin = ToolOrigin(
                plugin_id=self.origin.plugin_id,
                path=self.origin.path,
                bundled=self.origin.bundled,
            )
        return ToolState(
            tool_id=self.id,
            tool_kind=self.kind,
            origin=origin,
            is_enabled=self.enabled,
            is_enabled_by_default=self.enabled_by_default,
        )


class ToolProfile(BaseModel):
    tools: list[ToolEntry] = Field(default_factory=list)


class ProfileToolStateSource:
    """ToolStateSource backed by a JSON profile file inside the workspace.

    Missing file → no tools (empty workspace is not an error).
    Unreadable or malformed file → ToolProfileError.
    """

    def __init__(self, filename: str = DEFAULT_PROFILE_FILENAME) -> None:
        self._filename = filename

    def profile_path(self, workspace: Path) -> Path:
        return workspace / self._filename

    def list_tool_states(self, workspace: Path) -> list[ToolState]:
        path = self.profile_path(workspace)
        if not path.is_file():
            logger.debug("tool_profile_missing", path=str(path))
            return []
        try:
            raw = path.read_text(encoding="utf-8")
        except OSError as e:
            raise ToolProfileError(f"Cannot read tool profile {path}: {e}") from e
        try:
            profile = ToolProfile.model_validate_json(raw)
        except ValidationError as e:
            raise ToolProfileError(f"Invalid tool profile {path}: {e}") from e

        states = [entry.to_state() for entry in profile.tools]
        logger.debug("tool_profile_loaded", path=str(path), tools=len(states))
        return states
