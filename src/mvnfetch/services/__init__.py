"""Service abstractions for the mvnfetch application."""

from __future__ import annotations

import httpx

from mvnfetch.settings import Settings
from .checksums import ChecksumVerifiedFetcher
from .descriptors import DescriptorFetcher
from .layout import RepositoryLayout
from .versions import VersionResolver, parse_version_info
from .walker import CoordinateCallback, DependencyWalker

__all__ = [
    "ChecksumVerifiedFetcher",
    "DescriptorFetcher",
    "DependencyWalker",
    "RepositoryLayout",
    "VersionResolver",
    "parse_version_info",
    "build_walker",
]


def build_walker(
    client: httpx.AsyncClient,
    settings: Settings,
    *,
    on_coordinate: CoordinateCallback | None = None,
) -> DependencyWalker:
    """Wire the services together for one HTTP client and settings object."""
    layout = RepositoryLayout(settings.base_url)
    fetcher = ChecksumVerifiedFetcher(client, max_concurrency=settings.max_concurrency)
    return DependencyWalker(
        resolver=VersionResolver(fetcher, layout),
        descriptors=DescriptorFetcher(fetcher, layout),
        fetcher=fetcher,
        layout=layout,
        deduplicate=settings.deduplicate,
        on_coordinate=on_coordinate,
    )
