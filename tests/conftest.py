from __future__ import annotations

import asyncio
import hashlib
from collections import Counter
from pathlib import Path

import httpx
import pytest

from mvnfetch.services import (
    ChecksumVerifiedFetcher,
    DependencyWalker,
    DescriptorFetcher,
    RepositoryLayout,
    VersionResolver,
)

BASE_URL = "https://repo.test/maven2"


class FakeRepository:
    """In-memory Maven repository served through ``httpx.MockTransport``."""

    def __init__(self, base_url: str = BASE_URL) -> None:
        self.base_url = base_url
        self.files: dict[str, bytes] = {}
        self.requests: list[str] = []
        self.delays: dict[str, float] = {}
        self.failures: dict[str, httpx.HTTPError] = {}
        self.in_flight: Counter[str] = Counter()
        self.peak: Counter[str] = Counter()

    def publish(self, path: str, content: bytes, *, checksum: str | None = None) -> str:
        url = f"{self.base_url}/{path}"
        self.files[url] = content
        self.files[url + ".sha1"] = (checksum or hashlib.sha1(content).hexdigest()).encode()
        return url

    def publish_metadata(self, org: str, artifact: str, versions: list[str], *, latest: str, release: str) -> None:
        listing = "".join(f"<version>{v}</version>" for v in versions)
        document = (
            "<metadata><groupId>{org}</groupId><artifactId>{artifact}</artifactId>"
            "<versioning><latest>{latest}</latest><release>{release}</release>"
            "<versions>{listing}</versions><lastUpdated>20240101000000</lastUpdated>"
            "</versioning></metadata>"
        ).format(org=org, artifact=artifact, latest=latest, release=release, listing=listing)
        self.publish(f"{org.replace('.', '/')}/{artifact}/maven-metadata.xml", document.encode())

    def publish_package(
        self,
        org: str,
        artifact: str,
        version: str,
        *,
        deps: list[dict] | None = None,
        kinds: tuple[str, ...] = ("",),
    ) -> None:
        root = f"{org.replace('.', '/')}/{artifact}/{version}"
        for suffix in kinds:
            content = f"{org}:{artifact}:{version}{suffix}".encode()
            self.publish(f"{root}/{artifact}-{version}{suffix}.jar", content)
        self.publish(f"{root}/{artifact}-{version}.pom", pom(deps or []))

    def count(self, suffix: str) -> int:
        return sum(1 for url in self.requests if url.endswith(suffix))

    def handler(self, request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        self.requests.append(url)
        if url not in self.files:
            return httpx.Response(404, content=b"not found")
        return httpx.Response(200, content=self.files[url])

    async def async_handler(self, request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        if url in self.failures:
            self.requests.append(url)
            raise self.failures[url]
        self.in_flight[url] += 1
        self.peak[url] = max(self.peak[url], self.in_flight[url])
        try:
            if url in self.delays:
                await asyncio.sleep(self.delays[url])
            return self.handler(request)
        finally:
            self.in_flight[url] -= 1


def pom(deps: list[dict], *, namespace: bool = True) -> bytes:
    entries = []
    for dep in deps:
        fields = [f"<groupId>{dep['group']}</groupId>", f"<artifactId>{dep['artifact']}</artifactId>"]
        for key in ("version", "scope", "optional"):
            if key in dep:
                fields.append(f"<{key}>{dep[key]}</{key}>")
        entries.append("<dependency>" + "".join(fields) + "</dependency>")
    xmlns = ' xmlns="http://maven.apache.org/POM/4.0.0"' if namespace else ""
    return (
        f"<project{xmlns}><modelVersion>4.0.0</modelVersion>"
        f"<dependencies>{''.join(entries)}</dependencies></project>"
    ).encode()


@pytest.fixture
def repo() -> FakeRepository:
    return FakeRepository()


@pytest.fixture
def client(repo: FakeRepository):
    return httpx.AsyncClient(transport=httpx.MockTransport(repo.async_handler))


@pytest.fixture
def layout() -> RepositoryLayout:
    return RepositoryLayout(BASE_URL)


@pytest.fixture
def fetcher(client) -> ChecksumVerifiedFetcher:
    return ChecksumVerifiedFetcher(client, max_concurrency=2)


def make_walker(fetcher, layout, **kwargs) -> DependencyWalker:
    return DependencyWalker(
        resolver=VersionResolver(fetcher, layout),
        descriptors=DescriptorFetcher(fetcher, layout),
        fetcher=fetcher,
        layout=layout,
        **kwargs,
    )


def leftover_parts(directory: Path) -> list[Path]:
    return [path for path in directory.iterdir() if path.name.endswith(".part")]
