"""Resolution of symbolic versions (``latest``/``release``) via repository metadata."""

from __future__ import annotations

import asyncio
import xml.etree.ElementTree as ET

import structlog

from mvnfetch.errors import MvnFetchError, ResolutionError
from mvnfetch.models import VERSION_LATEST, Coordinate, VersionInfo
from mvnfetch.utils import children, find_path, text_of
from .checksums import ChecksumVerifiedFetcher
from .layout import RepositoryLayout

logger = structlog.get_logger(__name__)


class VersionResolver:
    """Turns a coordinate's version specifier into a concrete version string."""

    def __init__(self, fetcher: ChecksumVerifiedFetcher, layout: RepositoryLayout) -> None:
        self._fetcher = fetcher
        self._layout = layout
        self._metadata: dict[tuple[str, str], asyncio.Task[VersionInfo]] = {}

    async def resolve(self, coord: Coordinate) -> str:
        if not coord.is_symbolic:
            return coord.version

        info = await self.versions(coord)
        if coord.version == VERSION_LATEST:
            version = info.latest
        else:
            version = info.release
        if not version:
            raise ResolutionError(
                f"no {coord.version or 'release'} version published for "
                f"{coord.organization}/{coord.artifact}"
            )
        logger.debug("versions.resolved", coordinate=coord.display_name, version=version)
        return version

    async def versions(self, coord: Coordinate) -> VersionInfo:
        """Return the published version metadata, fetching it at most once per artifact."""
        key = (coord.organization, coord.artifact)
        task = self._metadata.get(key)
        if task is None:
            task = asyncio.ensure_future(self._fetch_versions(coord))
            self._metadata[key] = task
        return await asyncio.shield(task)

    async def _fetch_versions(self, coord: Coordinate) -> VersionInfo:
        url = self._layout.metadata_url(coord)
        logger.debug("versions.fetch", url=url)
        try:
            document = await self._fetcher.fetch_document(url)
        except MvnFetchError as exc:
            raise ResolutionError(f"unable to fetch version metadata from {url}: {exc}") from exc
        try:
            return parse_version_info(document)
        except ET.ParseError as exc:
            raise ResolutionError(f"unable to parse version metadata from {url}: {exc}") from exc


def parse_version_info(document: bytes) -> VersionInfo:
    """Parse a ``maven-metadata.xml`` document."""
    root = ET.fromstring(document)
    versioning = find_path(root, "versioning")
    if versioning is None:
        return VersionInfo()
    listing = find_path(versioning, "versions")
    versions = []
    if listing is not None:
        versions = [item.text.strip() for item in children(listing, "version") if item.text]
    return VersionInfo(
        versions=versions,
        latest=text_of(versioning, "latest"),
        release=text_of(versioning, "release"),
        last_updated=text_of(versioning, "lastUpdated") or None,
    )
