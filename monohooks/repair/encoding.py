"""Text rewrites that keep a file's BOM and line-ending style."""

from __future__ import annotations

import codecs
from dataclasses import dataclass
from pathlib import Path

from ..logging import get_logger

_BOM = codecs.BOM_UTF8

logger = get_logger("repair.encoding")


@dataclass(frozen=True)
class EncodingProfile:
    """Byte-order mark presence and newline style sampled from disk."""

    bom: bool = False
    newline: str = "\n"
    mixed: bool = False

    @classmethod
    def from_bytes(cls, data: bytes) -> "EncodingProfile":
        has_bom = data.startswith(_BOM)
        crlf = data.count(b"\r\n")
        lf = data.count(b"\n") - crlf
        newline = "\r\n" if crlf else "\n"
        return cls(bom=has_bom, newline=newline, mixed=bool(crlf and lf))

    @classmethod
    def from_text(cls, text: str) -> "EncodingProfile":
        return cls(bom=False, newline="\r\n" if "\r\n" in text else "\n")

    def encode(self, text: str) -> bytes:
        normalized = text.replace("\r\n", "\n")
        if self.newline == "\r\n":
            normalized = normalized.replace("\n", "\r\n")
        payload = normalized.encode("utf-8")
        return _BOM + payload if self.bom else payload


def read_text(path: Path) -> str:
    """Read UTF-8 text with any BOM stripped and newlines normalised to LF."""
    text = path.read_bytes().decode("utf-8-sig")
    return text.replace("\r\n", "\n")


def write_preserving_encoding(path: Path, content: str) -> bool:
    """Write ``content`` using the file's existing encoding profile.

    New files take their newline style from ``content`` and get no BOM.
    Returns False when the bytes on disk already match and nothing was written.
    """
    existing = path.read_bytes() if path.exists() else None
    if existing is None:
        profile = EncodingProfile.from_text(content)
    else:
        profile = EncodingProfile.from_bytes(existing)
        if profile.mixed:
            logger.warning(
                "%s mixes CRLF and LF line endings; rewriting with CRLF only", path
            )

    payload = profile.encode(content)
    if existing == payload:
        return False
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(payload)
    return True


__all__ = ["EncodingProfile", "read_text", "write_preserving_encoding"]
