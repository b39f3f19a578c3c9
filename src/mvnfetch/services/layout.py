"""URL and filename conventions of a Maven-layout repository."""

from __future__ import annotations

from mvnfetch.models import ArtifactKind, Coordinate

CHECKSUM_SUFFIX = ".sha1"
METADATA_FILENAME = "maven-metadata.xml"
DESCRIPTOR_EXTENSION = "pom"
ARTIFACT_EXTENSION = "jar"


class RepositoryLayout:
    """Builds ``{base}/{org-path}/{artifact}/{version}/...`` style locations."""

    def __init__(self, base_url: str) -> None:
        self._base_url = base_url.rstrip("/")

    @property
    def base_url(self) -> str:
        return self._base_url

    def artifact_root(self, coord: Coordinate) -> str:
        org_path = coord.organization.replace(".", "/")
        return f"{self._base_url}/{org_path}/{coord.artifact}"

    def metadata_url(self, coord: Coordinate) -> str:
        return f"{self.artifact_root(coord)}/{METADATA_FILENAME}"

    def descriptor_url(self, coord: Coordinate, version: str) -> str:
        filename = f"{coord.artifact}-{version}.{DESCRIPTOR_EXTENSION}"
        return f"{self.artifact_root(coord)}/{version}/{filename}"

    def artifact_filename(self, coord: Coordinate, version: str, kind: ArtifactKind) -> str:
        return f"{coord.artifact}-{version}{kind.suffix}.{ARTIFACT_EXTENSION}"

    def artifact_url(self, coord: Coordinate, version: str, kind: ArtifactKind) -> str:
        filename = self.artifact_filename(coord, version, kind)
        return f"{self.artifact_root(coord)}/{version}/{filename}"

    @staticmethod
    def checksum_url(url: str) -> str:
        return url + CHECKSUM_SUFFIX
