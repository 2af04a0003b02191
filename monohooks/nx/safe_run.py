"""`nx run-many` wrapper that tells empty project sets apart from failures."""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Sequence, TextIO

from ..config import MonohooksConfig
from ..logging import get_logger
from ..process import CommandResult, CommandRunner, run_command


@dataclass(frozen=True)
class RunManyArgs:
    """Target and selector pulled out of run-many flags for diagnostics."""

    target: Optional[str]
    projects: Optional[str]

    @property
    def tag(self) -> Optional[str]:
        if self.projects and self.projects.startswith("tag:"):
            return self.projects[len("tag:") :]
        return None

    @property
    def project_label(self) -> str:
        return self.tag or "matching"

    @property
    def complete(self) -> bool:
        return self.target is not None and self.projects is not None


def parse_run_many_args(args: Sequence[str]) -> RunManyArgs:
    """Extract ``--target`` and ``--projects`` in ``=value`` or separate-value form."""
    target: Optional[str] = None
    projects: Optional[str] = None
    index = 0
    while index < len(args):
        arg = args[index]
        has_next = index + 1 < len(args)
        if arg.startswith("--target="):
            target = arg[len("--target=") :]
        elif arg == "--target" and has_next:
            target = args[index + 1]
            index += 1
        elif arg.startswith("--projects="):
            projects = arg[len("--projects=") :]
        elif arg == "--projects" and has_next:
            projects = args[index + 1]
            index += 1
        index += 1
    return RunManyArgs(target=target, projects=projects)


class SafeRunner:
    """Runs ``nx run-many`` exactly once and maps its outcome to an exit code."""

    def __init__(
        self,
        config: MonohooksConfig,
        *,
        runner: CommandRunner | None = None,
        stdout: TextIO | None = None,
    ) -> None:
        self.config = config
        self._runner = runner or run_command
        self._stdout = stdout
        self.logger = get_logger("nx.safe_run")

    def command_for(self, args: Sequence[str]) -> List[str]:
        return [*self.config.nx.command, "run-many", *args]

    def run(self, args: Sequence[str]) -> int:
        """Invoke run-many with ``args`` and return the exit code to report."""
        passthrough = list(args)
        parsed = parse_run_many_args(passthrough)
        command = self.command_for(passthrough)
        root: Path = self.config.root

        if not parsed.complete:
            self.logger.info("Running nx run-many command")
            result = self._runner(command, cwd=root, capture_output=False)
            return result.returncode

        self.logger.info(
            "Running nx run-many for %s projects with target \"%s\"",
            parsed.project_label,
            parsed.target,
        )
        stream = self._stdout or sys.stdout
        result = self._runner(
            command,
            cwd=root,
            env=_colour_env(stream),
            capture_output=True,
            stream=stream,
        )

        if self._is_empty_selection(result):
            self.logger.info(
                "No %s projects found with target \"%s\".", parsed.project_label, parsed.target
            )
            if result.returncode != 0:
                self.logger.info(
                    "This is expected if you haven't created any %s projects yet.",
                    parsed.project_label,
                )
                return 0
        elif result.returncode != 0:
            self.logger.error(
                "nx run-many failed for %s projects with target \"%s\" (status %d)",
                parsed.project_label,
                parsed.target,
                result.returncode,
            )
        return result.returncode

    def _is_empty_selection(self, result: CommandResult) -> bool:
        if not self.config.safe_run.tolerate_empty:
            return False
        output = result.output
        return any(marker in output for marker in self.config.safe_run.empty_markers)


def _colour_env(stream: TextIO) -> Optional[Dict[str, str]]:
    """Keep Nx colour output when piping through to a terminal."""
    isatty = getattr(stream, "isatty", None)
    if isatty is None or not isatty():
        return None
    return {**os.environ, "FORCE_COLOR": "1"}


__all__ = ["RunManyArgs", "SafeRunner", "parse_run_many_args"]
