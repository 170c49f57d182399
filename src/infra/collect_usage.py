"""Collect tool usage for a workspace and print it per reporting group.

Run directly: python -m src.infra.collect_usage [--workspace DIR] [--category NAME] [--json]

The catalog cache never blocks: on a cold start "-listed" groups come out
empty while the repository catalog downloads in the background.
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

import structlog

from src.catalog.cache import CatalogCache
from src.catalog.fetcher import RepositoryCatalogFetcher
from src.config.settings import Settings, get_settings
from src.infra.errors import ToolStatsError, UnknownCategoryError
from src.infra.logging import setup_logging
from src.tools.profile import ProfileToolStateSource
from src.usage import MemorySink, ToolUsageCollector

logger = structlog.get_logger()


def build_catalog(settings: Settings) -> CatalogCache:
    fetcher = RepositoryCatalogFetcher(
        settings.catalog.url,
        settings.catalog.cache_path,
        timeout_s=settings.catalog.fetch_timeout_s,
    )
    return CatalogCache(
        fetcher,
        settings.workspace.plugins_path,
        staleness_seconds=settings.catalog.staleness_seconds,
        refresh_timeout_s=settings.catalog.refresh_timeout_s,
    )


def run(argv: list[str] | None = None, settings: Settings | None = None) -> int:
    parser = argparse.ArgumentParser(description="Collect tool usage statistics")
    parser.add_argument(
        "--workspace", type=Path, default=None,
        help="Workspace directory (default: WORKSPACE_PATH)",
    )
    parser.add_argument(
        "--category", default=None,
        help="Only this category (name or group id)",
    )
    parser.add_argument("--json", action="store_true", help="Print a JSON object")
    args = parser.parse_args(argv)

    settings = settings or get_settings()
    workspace = args.workspace or settings.workspace.path
    source = ProfileToolStateSource(settings.workspace.profile_filename)

    with build_catalog(settings) as catalog:
        collector = ToolUsageCollector(source, catalog)
        try:
            if args.category is None:
                sink = MemorySink()
                collector.publish(workspace, sink)
                groups = sink.groups
            else:
                category = collector.registry.get(args.category)
                groups = {category.group_id: collector.get_usages(category.name, workspace)}
        except UnknownCategoryError as e:
            print(str(e), file=sys.stderr)
            return 2
        except ToolStatsError as e:
            logger.error("collect_usage_failed", error=str(e), code=e.code)
            return 1

    report = {group: sorted(d.id for d in descriptors) for group, descriptors in groups.items()}
    if args.json:
        print(json.dumps(report, indent=2))
    else:
        for group, ids in report.items():
            print(f"{group} ({len(ids)})")
            for usage_id in ids:
                print(f"  {usage_id}")
    return 0


def main() -> int:
    settings = get_settings()
    setup_logging(json_output=settings.logging.json_output, log_level=settings.logging.level)
    return run(settings=settings)


if __name__ == "__main__":
    sys.exit(main())
