"""Tests for the encoding-preserving writer."""

from __future__ import annotations

import codecs
import logging
from pathlib import Path

import pytest

from monohooks.repair.encoding import EncodingProfile, read_text, write_preserving_encoding

BOM = codecs.BOM_UTF8


def test_profile_detects_bom_and_crlf() -> None:
    profile = EncodingProfile.from_bytes(BOM + b'{\r\n  "a": 1\r\n}\r\n')

    assert profile == EncodingProfile(bom=True, newline="\r\n", mixed=False)


def test_profile_flags_mixed_endings() -> None:
    profile = EncodingProfile.from_bytes(b"one\r\ntwo\nthree\n")

    assert profile.newline == "\r\n"
    assert profile.mixed is True


def test_rewrite_keeps_bom_and_crlf(tmp_path: Path) -> None:
    path = tmp_path / "config.json"
    path.write_bytes(BOM + b"first\r\nsecond\r\n")

    changed = write_preserving_encoding(path, "first\nsecond\nthird\n")

    data = path.read_bytes()
    assert changed is True
    assert data.startswith(BOM)
    assert data == BOM + b"first\r\nsecond\r\nthird\r\n"
    assert b"\n" not in data.replace(b"\r\n", b"")


def test_rewrite_keeps_lf_without_bom(tmp_path: Path) -> None:
    path = tmp_path / "config.json"
    path.write_bytes(b"old\n")

    write_preserving_encoding(path, "new\r\nlines\r\n")

    assert path.read_bytes() == b"new\nlines\n"


def test_new_file_takes_style_from_content(tmp_path: Path) -> None:
    crlf = tmp_path / "nested" / "run.bat"
    lf = tmp_path / "plain.txt"

    write_preserving_encoding(crlf, "@echo off\r\nexit\r\n")
    write_preserving_encoding(lf, "a\nb\n")

    assert crlf.read_bytes() == b"@echo off\r\nexit\r\n"
    assert lf.read_bytes() == b"a\nb\n"


def test_identical_bytes_are_not_rewritten(tmp_path: Path) -> None:
    path = tmp_path / "same.txt"
    path.write_bytes(BOM + b"x\r\n")

    assert write_preserving_encoding(path, "x\n") is False


def test_mixed_endings_are_normalised_with_warning(
    tmp_path: Path, caplog: pytest.LogCaptureFixture, monkeypatch: pytest.MonkeyPatch
) -> None:
    path = tmp_path / "mixed.txt"
    path.write_bytes(b"a\r\nb\n")
    monkeypatch.setattr(logging.getLogger("monohooks"), "propagate", True)

    with caplog.at_level(logging.WARNING, logger="monohooks"):
        write_preserving_encoding(path, "a\nb\nc\n")

    assert path.read_bytes() == b"a\r\nb\r\nc\r\n"
    assert "mixes CRLF and LF" in caplog.text


def test_read_text_strips_bom_and_normalises(tmp_path: Path) -> None:
    path = tmp_path / "in.json"
    path.write_bytes(BOM + b"{}\r\n")

    assert read_text(path) == "{}\n"
