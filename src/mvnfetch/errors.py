"""Exceptions raised by the mvnfetch services."""

from __future__ import annotations


class MvnFetchError(RuntimeError):
    """Base class for every error the resolution engine raises."""


class ParseError(MvnFetchError):
    """Raised when a coordinate string is malformed."""


class ResolutionError(MvnFetchError):
    """Raised when version metadata cannot be fetched or understood."""


class DescriptorError(MvnFetchError):
    """Raised when a project descriptor cannot be fetched or parsed."""


class CycleError(MvnFetchError):
    """Raised when a coordinate depends on itself through its own ancestors."""

    def __init__(self, path: list[str]) -> None:
        super().__init__("dependency cycle: " + " -> ".join(path))
        self.path = path


class FetchError(MvnFetchError):
    """Base class for failures of a single verified fetch."""


class ChecksumFetchError(FetchError):
    """Raised when the published checksum is unavailable or malformed."""


class FetchStatusError(FetchError):
    def __init__(self, url: str, status_code: int | None = None, reason: str | None = None) -> None:
        detail = f"http status: {status_code}" if status_code is not None else reason or "request failed"
        super().__init__(f"{detail} ({url})")
        self.url = url
        self.status_code = status_code


class ChecksumMismatchError(FetchError):
    def __init__(self, url: str, expected: str, actual: str) -> None:
        super().__init__(f"sha1 mismatch on {url} ({expected} vs {actual})")
        self.url = url
        self.expected = expected
        self.actual = actual
