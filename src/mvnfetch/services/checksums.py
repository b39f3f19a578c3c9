"""Downloads that are only accepted once they match the published SHA-1."""

from __future__ import annotations

import asyncio
import hashlib
import os
from pathlib import Path
from uuid import uuid4

import httpx
import structlog

from mvnfetch.errors import (
    ChecksumFetchError,
    ChecksumMismatchError,
    FetchError,
    FetchStatusError,
)
from mvnfetch.models import FetchOutcome
from mvnfetch.utils import parse_sha1, sha1_file
from .layout import RepositoryLayout

logger = structlog.get_logger(__name__)


class ChecksumVerifiedFetcher:
    """Fetches repository files and verifies them against their ``.sha1`` sidecar.

    Every request goes through a shared semaphore so callers fanning out over a
    dependency graph never have more than ``max_concurrency`` requests in flight.
    """

    def __init__(self, client: httpx.AsyncClient, *, max_concurrency: int = 4) -> None:
        self._client = client
        self._semaphore = asyncio.Semaphore(max_concurrency)

    async def expected_checksum(self, url: str) -> str:
        checksum_url = RepositoryLayout.checksum_url(url)
        async with self._semaphore:
            try:
                response = await self._client.get(checksum_url)
            except httpx.HTTPError as exc:
                raise ChecksumFetchError(f"checksum request failed for {url}: {exc}") from exc
        if response.status_code != httpx.codes.OK:
            raise ChecksumFetchError(f"http status: {response.status_code} ({checksum_url})")
        try:
            return parse_sha1(response.content)
        except ValueError as exc:
            raise ChecksumFetchError(f"malformed checksum for {url}: {exc}") from exc

    async def fetch(self, dst: Path, url: str) -> FetchOutcome:
        """Download ``url`` to ``dst`` unless ``dst`` already matches the checksum."""
        expected = await self.expected_checksum(url)

        if dst.is_file():
            local = await asyncio.to_thread(sha1_file, dst)
            if local == expected:
                logger.debug("fetch.skipped", url=url, path=str(dst))
                return FetchOutcome(
                    url=url, path=dst, checksum=expected, downloaded=False, size=dst.stat().st_size
                )

        temp_path = dst.with_name(f".{dst.name}.{uuid4().hex}.part")
        try:
            size = await self._stream_to(temp_path, url, expected)
            os.replace(temp_path, dst)
        except OSError as exc:
            temp_path.unlink(missing_ok=True)
            raise FetchError(f"unable to write {dst}: {exc}") from exc
        except BaseException:
            temp_path.unlink(missing_ok=True)
            raise

        logger.info("fetch.downloaded", url=url, path=str(dst), bytes=size)
        return FetchOutcome(url=url, path=dst, checksum=expected, downloaded=True, size=size)

    async def fetch_document(self, url: str) -> bytes:
        """Fetch a small document into memory, verifying it the same way."""
        expected = await self.expected_checksum(url)
        async with self._semaphore:
            try:
                response = await self._client.get(url)
            except httpx.HTTPError as exc:
                raise FetchStatusError(url, reason=str(exc)) from exc
        if response.status_code != httpx.codes.OK:
            raise FetchStatusError(url, response.status_code)
        actual = hashlib.sha1(response.content).hexdigest()
        if actual != expected:
            raise ChecksumMismatchError(url, expected, actual)
        return response.content

    async def _stream_to(self, target: Path, url: str, expected: str) -> int:
        digest = hashlib.sha1()
        size = 0
        async with self._semaphore:
            try:
                async with self._client.stream("GET", url) as stream:
                    if stream.status_code != httpx.codes.OK:
                        raise FetchStatusError(url, stream.status_code)
                    with target.open("wb") as fh:
                        async for chunk in stream.aiter_bytes():
                            digest.update(chunk)
                            fh.write(chunk)
                            size += len(chunk)
            except httpx.HTTPError as exc:
                raise FetchStatusError(url, reason=str(exc)) from exc

        actual = digest.hexdigest()
        if actual != expected:
            logger.warning("fetch.checksum_mismatch", url=url, expected=expected, actual=actual)
            raise ChecksumMismatchError(url, expected, actual)
        return size
