"""Project descriptor (POM) retrieval and runtime dependency extraction."""

from __future__ import annotations

import xml.etree.ElementTree as ET

import structlog

from mvnfetch.errors import DescriptorError, MvnFetchError
from mvnfetch.models import Coordinate, Dependency
from mvnfetch.utils import children, find_path, text_of
from .checksums import ChecksumVerifiedFetcher
from .layout import RepositoryLayout

logger = structlog.get_logger(__name__)


class DescriptorFetcher:
    """Fetches a coordinate's POM and returns the dependencies it needs at runtime."""

    def __init__(self, fetcher: ChecksumVerifiedFetcher, layout: RepositoryLayout) -> None:
        self._fetcher = fetcher
        self._layout = layout

    async def dependencies(self, coord: Coordinate, version: str) -> list[Coordinate]:
        url = self._layout.descriptor_url(coord, version)
        try:
            document = await self._fetcher.fetch_document(url)
        except MvnFetchError as exc:
            raise DescriptorError(f"unable to fetch descriptor {url}: {exc}") from exc
        try:
            entries = self.parse(document)
        except ET.ParseError as exc:
            raise DescriptorError(f"unable to parse descriptor {url}: {exc}") from exc

        deps = [entry.to_coordinate() for entry in entries if entry.is_runtime]
        logger.debug(
            "descriptor.parsed",
            url=url,
            declared=len(entries),
            retained=len(deps),
        )
        return deps

    def parse(self, document: bytes) -> list[Dependency]:
        """Return every well-formed ``project/dependencies/dependency`` entry, unfiltered."""
        root = ET.fromstring(document)
        container = find_path(root, "dependencies")
        if container is None:
            return []
        entries: list[Dependency] = []
        for node in children(container, "dependency"):
            organization = text_of(node, "groupId")
            artifact = text_of(node, "artifactId")
            if not organization or not artifact:
                logger.warning("descriptor.incomplete_entry", group=organization, artifact=artifact)
                continue
            entries.append(
                Dependency(
                    organization=organization,
                    artifact=artifact,
                    version=text_of(node, "version"),
                    optional=text_of(node, "optional").lower() == "true",
                    scope=text_of(node, "scope"),
                )
            )
        return entries
