import pytest

from conftest import pom
from mvnfetch.errors import DescriptorError
from mvnfetch.models import Coordinate
from mvnfetch.services.descriptors import DescriptorFetcher

LIB = Coordinate.parse("org.example/lib/1.0.0")


@pytest.mark.asyncio
async def test_optional_and_non_runtime_entries_are_dropped(repo, fetcher, layout) -> None:
    repo.publish_package(
        "org.example",
        "lib",
        "1.0.0",
        deps=[
            {"group": "g", "artifact": "optional-dep", "version": "1.0", "optional": "true"},
            {"group": "g", "artifact": "test-dep", "version": "1.0", "scope": "test"},
            {"group": "g", "artifact": "runtime-dep", "version": "1.0", "scope": "runtime"},
            {"group": "g", "artifact": "plain-dep", "version": "1.0"},
        ],
    )
    descriptors = DescriptorFetcher(fetcher, layout)

    deps = await descriptors.dependencies(LIB, "1.0.0")

    assert [dep.artifact for dep in deps] == ["runtime-dep", "plain-dep"]
    assert repo.requests[-1] == f"{layout.base_url}/org/example/lib/1.0.0/lib-1.0.0.pom"


@pytest.mark.asyncio
async def test_non_literal_versions_are_cleared(repo, fetcher, layout) -> None:
    repo.publish_package(
        "org.example",
        "lib",
        "1.0.0",
        deps=[
            {"group": "g", "artifact": "pinned", "version": "1.2.3"},
            {"group": "g", "artifact": "placeholder", "version": "${foo.version}"},
            {"group": "g", "artifact": "ranged", "version": "[1.0,2.0)"},
            {"group": "g", "artifact": "unversioned"},
        ],
    )
    descriptors = DescriptorFetcher(fetcher, layout)

    deps = await descriptors.dependencies(LIB, "1.0.0")

    assert [(dep.artifact, dep.version) for dep in deps] == [
        ("pinned", "1.2.3"),
        ("placeholder", ""),
        ("ranged", ""),
        ("unversioned", ""),
    ]


def test_parse_ignores_dependency_management(fetcher, layout) -> None:
    document = (
        b'<project xmlns="http://maven.apache.org/POM/4.0.0">'
        b"<dependencyManagement><dependencies><dependency>"
        b"<groupId>managed</groupId><artifactId>bom</artifactId><version>1</version>"
        b"</dependency></dependencies></dependencyManagement>"
        b"<dependencies><dependency><groupId>g</groupId><artifactId>a</artifactId>"
        b"<optional> true </optional></dependency>"
        b"<dependency><artifactId>no-group</artifactId></dependency></dependencies>"
        b"</project>"
    )
    entries = DescriptorFetcher(fetcher, layout).parse(document)

    assert len(entries) == 1
    assert entries[0].artifact == "a"
    assert entries[0].optional


def test_parse_without_namespace(fetcher, layout) -> None:
    document = pom([{"group": "g", "artifact": "a", "scope": "provided"}], namespace=False)
    entries = DescriptorFetcher(fetcher, layout).parse(document)
    assert entries[0].scope == "provided"
    assert not entries[0].is_runtime


@pytest.mark.asyncio
async def test_missing_descriptor_raises(repo, fetcher, layout) -> None:
    with pytest.raises(DescriptorError):
        await DescriptorFetcher(fetcher, layout).dependencies(LIB, "1.0.0")


@pytest.mark.asyncio
async def test_malformed_descriptor_raises(repo, fetcher, layout) -> None:
    repo.publish("org/example/lib/1.0.0/lib-1.0.0.pom", b"<project><dependencies>")
    with pytest.raises(DescriptorError):
        await DescriptorFetcher(fetcher, layout).dependencies(LIB, "1.0.0")
