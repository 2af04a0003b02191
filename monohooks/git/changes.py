"""Reads changed-file lists from Git for hook dispatch."""

from __future__ import annotations

from pathlib import Path
from typing import List, Sequence

from ..models import HookKind
from ..process import CommandError, CommandRunner, run_command

STAGED_FILES_COMMAND: Sequence[str] = (
    "git",
    "diff",
    "--cached",
    "--name-only",
    "--diff-filter=ACM",
)

MERGED_FILES_COMMAND: Sequence[str] = (
    "git",
    "diff-tree",
    "-r",
    "--name-only",
    "--no-commit-id",
    "ORIG_HEAD",
    "HEAD",
)


class ChangeSource:
    """Produces the file set a hook should act on."""

    def __init__(self, runner: CommandRunner | None = None) -> None:
        self._runner = runner or run_command

    def files_for(self, kind: HookKind, repo: Path) -> List[str]:
        if kind is HookKind.POST_MERGE:
            return self.merged_files(repo)
        return self.staged_files(repo)

    def staged_files(self, repo: Path) -> List[str]:
        return self._list(STAGED_FILES_COMMAND, repo)

    def merged_files(self, repo: Path) -> List[str]:
        return self._list(MERGED_FILES_COMMAND, repo)

    def _list(self, args: Sequence[str], repo: Path) -> List[str]:
        result = self._runner(list(args), cwd=repo, capture_output=True)
        if not result.ok:
            detail = result.stderr.strip() or f"status {result.returncode}"
            raise CommandError(result, f"Unable to list changed files: {detail}")
        return [line.strip() for line in result.stdout.splitlines() if line.strip()]


__all__ = ["ChangeSource", "MERGED_FILES_COMMAND", "STAGED_FILES_COMMAND"]
