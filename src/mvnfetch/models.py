"""Core data models used throughout the mvnfetch application."""

from __future__ import annotations

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from mvnfetch.errors import ParseError
from mvnfetch.utils import normalize_version

VERSION_LATEST = "latest"
VERSION_RELEASE = "release"


class ArtifactKind(str, Enum):
    """The artifact flavours published next to each release."""

    BINARY = "jar"
    SOURCES = "src"
    DOCUMENTATION = "doc"

    @property
    def suffix(self) -> str:
        return _KIND_SUFFIXES[self]

    @classmethod
    def parse_list(cls, value: str) -> list["ArtifactKind"]:
        """Parse a comma-separated list such as ``jar,src`` keeping first-seen order."""
        kinds: list[ArtifactKind] = []
        for token in value.split(","):
            token = token.strip().lower()
            if not token:
                continue
            try:
                kind = cls(token)
            except ValueError:
                raise ValueError(f"invalid type: {token}") from None
            if kind not in kinds:
                kinds.append(kind)
        if not kinds:
            raise ValueError("no artifact types requested")
        return kinds


_KIND_SUFFIXES = {
    ArtifactKind.BINARY: "",
    ArtifactKind.SOURCES: "-sources",
    ArtifactKind.DOCUMENTATION: "-javadoc",
}


class Coordinate(BaseModel):
    """Identity of a package: organization, artifact and (possibly symbolic) version."""

    model_config = ConfigDict(frozen=True)

    organization: str
    artifact: str
    version: str = ""

    @classmethod
    def parse(cls, value: str) -> "Coordinate":
        """Parse ``org/artifact`` or ``org/artifact/version``."""
        parts = value.split("/")
        if len(parts) == 2:
            organization, artifact, version = parts[0], parts[1], ""
        elif len(parts) == 3:
            organization, artifact, version = parts
        else:
            raise ParseError(f"invalid dependency: {value}")
        if not organization or not artifact:
            raise ParseError(f"invalid dependency: {value}")
        return cls(organization=organization, artifact=artifact, version=version)

    @property
    def is_symbolic(self) -> bool:
        return self.version in ("", VERSION_LATEST, VERSION_RELEASE)

    @property
    def display_name(self) -> str:
        return f"{self.organization}/{self.artifact}/{self.version or VERSION_RELEASE}"

    @property
    def key(self) -> tuple[str, str, str]:
        return (self.organization, self.artifact, self.version)

    def with_version(self, version: str) -> "Coordinate":
        return self.model_copy(update={"version": version})

    def __str__(self) -> str:
        return self.display_name


class VersionInfo(BaseModel):
    """Repository-wide version metadata for one organization/artifact pair."""

    versions: list[str] = Field(default_factory=list)
    latest: str = ""
    release: str = ""
    last_updated: str | None = None


class Dependency(BaseModel):
    """A raw ``<dependency>`` entry from a project descriptor."""

    organization: str
    artifact: str
    version: str = ""
    optional: bool = False
    scope: str = ""

    @property
    def is_runtime(self) -> bool:
        return not self.optional and self.scope in ("", "compile", "runtime")

    def to_coordinate(self) -> Coordinate:
        return Coordinate(
            organization=self.organization,
            artifact=self.artifact,
            version=normalize_version(self.version),
        )


class FetchOutcome(BaseModel):
    """Result of a single checksum-verified download."""

    url: str
    path: Path
    checksum: str
    downloaded: bool
    size: int = 0


class DownloadReport(BaseModel):
    """Everything a walk resolved and fetched, in processing order."""

    resolved: list[Coordinate] = Field(default_factory=list)
    outcomes: list[FetchOutcome] = Field(default_factory=list)

    @property
    def downloaded_count(self) -> int:
        return sum(1 for outcome in self.outcomes if outcome.downloaded)

    @property
    def skipped_count(self) -> int:
        return sum(1 for outcome in self.outcomes if not outcome.downloaded)

    def merge(self, other: "DownloadReport") -> None:
        self.resolved.extend(other.resolved)
        self.outcomes.extend(other.outcomes)
