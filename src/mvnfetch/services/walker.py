"""Depth-first resolution and download of a coordinate and its runtime dependencies."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Callable, Iterable, Sequence

import structlog

from mvnfetch.errors import CycleError
from mvnfetch.models import ArtifactKind, Coordinate, DownloadReport
from .checksums import ChecksumVerifiedFetcher
from .descriptors import DescriptorFetcher
from .layout import RepositoryLayout
from .versions import VersionResolver

logger = structlog.get_logger(__name__)

CoordinateCallback = Callable[[Coordinate], None]
NodeKey = tuple[str, str, str]


class DependencyWalker:
    """Coordinates version resolution, verified downloads and dependency recursion.

    A node's own artifacts are written before its children are resolved. With
    ``deduplicate`` enabled sibling subtrees run concurrently; the first failure
    cancels everything still pending and propagates out of :meth:`download`.

    With ``deduplicate`` enabled, the work for a concrete coordinate (artifact
    downloads and descriptor fetch) happens at most once per walker. Later arrivals
    wait for that work to finish and do not descend again, which also ends cycles.
    Without it every edge is walked in full, one sibling at a time, and a coordinate
    that reappears among its own ancestors raises :class:`CycleError`.
    """

    def __init__(
        self,
        resolver: VersionResolver,
        descriptors: DescriptorFetcher,
        fetcher: ChecksumVerifiedFetcher,
        layout: RepositoryLayout,
        *,
        deduplicate: bool = True,
        on_coordinate: CoordinateCallback | None = None,
    ) -> None:
        self._resolver = resolver
        self._descriptors = descriptors
        self._fetcher = fetcher
        self._layout = layout
        self._deduplicate = deduplicate
        self._on_coordinate = on_coordinate
        self._nodes: dict[NodeKey, asyncio.Task[list[Coordinate]]] = {}

    async def download(
        self, root: Coordinate, dest: Path, kinds: Sequence[ArtifactKind]
    ) -> DownloadReport:
        report = DownloadReport()
        await self._visit(root, dest, tuple(kinds), report, ())
        logger.info(
            "walker.complete",
            root=root.display_name,
            coordinates=len(report.resolved),
            downloaded=report.downloaded_count,
            skipped=report.skipped_count,
        )
        return report

    async def download_all(
        self, roots: Iterable[Coordinate], dest: Path, kinds: Sequence[ArtifactKind]
    ) -> DownloadReport:
        """Walk several roots one after another, sharing the dedup state."""
        report = DownloadReport()
        for root in roots:
            report.merge(await self.download(root, dest, kinds))
        return report

    async def dependencies(self, coord: Coordinate) -> list[Coordinate]:
        """Return the direct runtime dependencies of ``coord`` without downloading anything."""
        version = await self._resolver.resolve(coord)
        return await self._descriptors.dependencies(coord, version)

    async def _visit(
        self,
        coord: Coordinate,
        dest: Path,
        kinds: tuple[ArtifactKind, ...],
        report: DownloadReport,
        path: tuple[NodeKey, ...],
    ) -> None:
        logger.info("walker.visit", coordinate=coord.display_name, depth=len(path))
        if self._on_coordinate is not None:
            self._on_coordinate(coord)

        version = await self._resolver.resolve(coord)
        concrete = coord.with_version(version)

        if self._deduplicate:
            existing = self._nodes.get(concrete.key)
            if existing is not None:
                logger.debug("walker.already_handled", coordinate=concrete.display_name)
                await asyncio.shield(existing)
                return
            task = asyncio.ensure_future(self._process(concrete, dest, kinds, report))
            self._nodes[concrete.key] = task
            deps = await task
        else:
            if concrete.key in path:
                names = ["/".join(key) for key in path] + [concrete.display_name]
                raise CycleError(names)
            deps = await self._process(concrete, dest, kinds, report)

        await self._visit_children(deps, dest, kinds, report, path + (concrete.key,))

    async def _process(
        self,
        coord: Coordinate,
        dest: Path,
        kinds: tuple[ArtifactKind, ...],
        report: DownloadReport,
    ) -> list[Coordinate]:
        report.resolved.append(coord)
        for kind in kinds:
            filename = self._layout.artifact_filename(coord, coord.version, kind)
            url = self._layout.artifact_url(coord, coord.version, kind)
            outcome = await self._fetcher.fetch(dest / filename, url)
            report.outcomes.append(outcome)
        return await self._descriptors.dependencies(coord, coord.version)

    async def _visit_children(
        self,
        deps: list[Coordinate],
        dest: Path,
        kinds: tuple[ArtifactKind, ...],
        report: DownloadReport,
        path: tuple[NodeKey, ...],
    ) -> None:
        if not deps:
            return
        if not self._deduplicate:
            # without the per-coordinate guard, siblings may share destination files
            for dep in deps:
                await self._visit(dep, dest, kinds, report, path)
            return
        tasks = [
            asyncio.ensure_future(self._visit(dep, dest, kinds, report, path)) for dep in deps
        ]
        try:
            await asyncio.gather(*tasks)
        except BaseException:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise
