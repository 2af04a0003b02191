"""Helper utilities for constructing temporary workspaces in tests."""

from __future__ import annotations

import textwrap
from pathlib import Path
from typing import Mapping

from monohooks.config import MonohooksConfig, load_config


class WorkspaceBuilder:
    """Utility for writing files into a throwaway monorepo root."""

    def __init__(self, tmp_path: Path) -> None:
        self.root = tmp_path / "workspace"
        self.root.mkdir()

    def write(self, files: Mapping[str, str]) -> None:
        """Write `path -> contents` entries into the workspace."""
        for relative, content in files.items():
            path = self.root / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            normalised = textwrap.dedent(content).lstrip("\n")
            path.write_text(normalised, encoding="utf-8")

    def write_bytes(self, relative: str, data: bytes) -> Path:
        path = self.root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
        return path

    def read_bytes(self, relative: str) -> bytes:
        return (self.root / relative).read_bytes()

    def config(self) -> MonohooksConfig:
        """Return the configuration for the workspace as the CLI would load it."""
        return load_config(self.root)

    def path(self) -> Path:
        return self.root


__all__ = ["WorkspaceBuilder"]
