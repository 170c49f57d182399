"""Project-wide constants shared by config defaults and the catalog cache."""

from __future__ import annotations

CATALOG_STALENESS_SECONDS = 3600  # one hour, see CatalogSettings.staleness_seconds
CATALOG_REFRESH_TIMEOUT_SECONDS = 600
CATALOG_FETCH_TIMEOUT_SECONDS = 30.0

DEFAULT_PROFILE_FILENAME = "tool-profile.json"
