"""Custom exception hierarchy for tool usage statistics.

All application-specific exceptions inherit from ToolStatsError,
which carries an error code for reporting and CLI exit mapping.
"""

from __future__ import annotations


class ToolStatsError(Exception):
    """Base exception for all tool statistics errors."""

    def __init__(self, message: str, *, code: str = "INTERNAL_ERROR") -> None:
        super().__init__(message)
        self.code = code


class CatalogError(ToolStatsError):
    """Errors around the plugin repository catalog."""

    def __init__(self, message: str, *, code: str = "CATALOG_ERROR") -> None:
        super().__init__(message, code=code)


class CatalogFetchError(CatalogError):
    """Catalog download or decoding failed.

    Never escapes CatalogCache: background refresh logs it and keeps
    serving the previous snapshot.
    """

    def __init__(self, message: str) -> None:
        super().__init__(message, code="CATALOG_FETCH_FAILED")


class ToolProfileError(ToolStatsError):
    """Tool profile file exists but cannot be read or validated."""

    def __init__(self, message: str) -> None:
        super().__init__(message, code="TOOL_PROFILE_INVALID")


class UnknownCategoryError(ToolStatsError):
    """Lookup of a category name or group id that is not registered."""

    def __init__(self, key: str) -> None:
        super().__init__(f"Unknown usage category: {key}", code="UNKNOWN_CATEGORY")
        self.key = key
