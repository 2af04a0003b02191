"""Tests for the subprocess helpers."""

from __future__ import annotations

import io
from pathlib import Path

import pytest

from monohooks.process import run_command


def test_run_command_streams_merged_output(monkeypatch, tmp_path: Path) -> None:
    recorded: dict[str, object] = {}

    class _Process:
        def __init__(self, args, **kwargs) -> None:  # type: ignore[no-untyped-def]
            recorded["args"] = list(args)
            recorded.update(kwargs)
            self.stdout = io.StringIO("NX   Running target lint\nNo projects found\n")

        def __enter__(self) -> "_Process":
            return self

        def __exit__(self, *exc_info) -> None:  # type: ignore[no-untyped-def]
            return None

        def wait(self) -> int:
            return 1

    monkeypatch.setattr("monohooks.process.shutil.which", lambda name, path=None: None)
    monkeypatch.setattr("monohooks.process.subprocess.Popen", _Process)
    sink = io.StringIO()

    result = run_command(["npx", "nx", "run-many"], cwd=tmp_path, stream=sink)

    assert sink.getvalue() == "NX   Running target lint\nNo projects found\n"
    assert result.returncode == 1
    assert result.stdout == sink.getvalue()
    assert result.args == ("npx", "nx", "run-many")
    assert recorded["args"] == ["npx", "nx", "run-many"]
    assert recorded["cwd"] == str(tmp_path)


def test_run_command_rejects_empty_argv(tmp_path: Path) -> None:
    with pytest.raises(ValueError):
        run_command([], cwd=tmp_path)
