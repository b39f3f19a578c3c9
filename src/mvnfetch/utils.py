"""Utility helpers for checksums, version literals and namespace-free XML lookups."""

from __future__ import annotations

import binascii
import hashlib
import re
import xml.etree.ElementTree as ET
from pathlib import Path

VERSION_PATTERN = re.compile(r"^[.0-9]+$")
SHA1_HEX_LENGTH = 40


def normalize_version(version: str) -> str:
    """Keep plain dotted-numeric versions, clear everything else (ranges, ``${...}``)."""
    if version and VERSION_PATTERN.match(version):
        return version
    return ""


def parse_sha1(body: bytes) -> str:
    """Return the lowercase hex digest at the start of a ``.sha1`` file.

    Raises ``ValueError`` when the body is too short or not hexadecimal.
    """
    text = body.strip()[:SHA1_HEX_LENGTH]
    if len(text) != SHA1_HEX_LENGTH:
        raise ValueError(f"checksum too short: {text!r}")
    try:
        return binascii.unhexlify(text).hex()
    except binascii.Error as exc:
        raise ValueError(f"checksum is not hexadecimal: {text!r}") from exc


def sha1_file(path: Path, chunk_size: int = 65536) -> str:
    digest = hashlib.sha1()
    with path.open("rb") as fh:
        for chunk in iter(lambda: fh.read(chunk_size), b""):
            digest.update(chunk)
    return digest.hexdigest()


def local_name(tag: str) -> str:
    """Strip a ``{namespace}`` prefix from an element tag."""
    return tag.rsplit("}", 1)[-1]


def child(element: ET.Element, name: str) -> ET.Element | None:
    for item in element:
        if local_name(item.tag) == name:
            return item
    return None


def children(element: ET.Element, name: str) -> list[ET.Element]:
    return [item for item in element if local_name(item.tag) == name]


def find_path(element: ET.Element, *names: str) -> ET.Element | None:
    """Walk direct children by local name, ignoring XML namespaces."""
    current: ET.Element | None = element
    for name in names:
        if current is None:
            return None
        current = child(current, name)
    return current


def text_of(element: ET.Element | None, *names: str) -> str:
    target = find_path(element, *names) if element is not None else None
    if target is None or target.text is None:
        return ""
    return target.text.strip()
