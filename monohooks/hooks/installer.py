"""Writes the Git hook wrapper scripts that call the dispatcher."""

from __future__ import annotations

import os
import stat
import sys
from pathlib import Path
from typing import List

from ..config import MonohooksConfig
from ..logging import get_logger
from ..models import HookKind
from ..repair.encoding import write_preserving_encoding

_TEMPLATE = """#!/usr/bin/env sh
. "$(dirname -- "$0")/_/husky.sh"

# Run the unified hooks system for {kind}
monohooks hook {kind}
"""


def render_hook(kind: HookKind) -> str:
    return _TEMPLATE.format(kind=kind.value)


class HookInstaller:
    """Creates one wrapper per hook kind under the configured hooks directory."""

    def __init__(self, config: MonohooksConfig, *, platform: str = sys.platform) -> None:
        self.config = config
        self.platform = platform
        self.logger = get_logger("hooks.installer")

    @property
    def hooks_dir(self) -> Path:
        return self.config.root / self.config.hooks.directory

    def install(self) -> List[Path]:
        written: List[Path] = []
        for kind in HookKind:
            path = self.hooks_dir / kind.value
            if write_preserving_encoding(path, render_hook(kind)):
                self.logger.info("Created %s hook at %s", kind.value, path)
            else:
                self.logger.debug("%s hook already up to date", kind.value)
            if self.platform != "win32":
                mode = path.stat().st_mode
                os.chmod(path, mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
            written.append(path)
        return written


__all__ = ["HookInstaller", "render_hook"]
