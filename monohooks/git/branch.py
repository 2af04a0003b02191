"""Chooses between affected and full pre-push validation from the current branch."""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Sequence

from ..logging import get_logger
from ..models import ValidationMode
from ..process import CommandRunner, run_command

CURRENT_BRANCH_COMMAND: Sequence[str] = ("git", "rev-parse", "--abbrev-ref", "HEAD")

UPSTREAM_COMMAND: Sequence[str] = (
    "git",
    "rev-parse",
    "--abbrev-ref",
    "--symbolic-full-name",
    "@{u}",
)

REMOTE_BRANCHES_COMMAND: Sequence[str] = ("git", "branch", "-r")


class BranchInspector:
    """Base branches validate everything; other branches validate what changed since their base.

    The base is the upstream tracking branch when one is set, otherwise the
    first of ``fallback_bases`` found among the remote branches (the last
    entry when none is).
    """

    def __init__(
        self,
        runner: CommandRunner | None = None,
        *,
        base_branches: Sequence[str] = ("main", "dev", "test"),
        fallback_bases: Sequence[str] = ("origin/dev", "origin/test", "origin/main"),
    ) -> None:
        self._runner = runner or run_command
        self.base_branches = tuple(base_branches)
        self.fallback_bases = tuple(fallback_bases) or ("origin/main",)
        self.logger = get_logger("git.branch")

    def detect(self, repo: Path) -> ValidationMode:
        branch = self._read(CURRENT_BRANCH_COMMAND, repo)
        if not branch:
            self.logger.warning("Could not detect branch, defaulting to full validation")
            return ValidationMode(branch="unknown")

        self.logger.info("Current branch: %s", branch)
        if branch in self.base_branches:
            self.logger.info("On base branch; validating all projects")
            return ValidationMode(branch=branch)

        upstream = self._read(UPSTREAM_COMMAND, repo)
        if upstream and upstream != "@{u}" and "/" in upstream:
            self.logger.info("Comparing against upstream: %s", upstream)
            return ValidationMode(branch=branch, base=upstream)

        remotes = self._read(REMOTE_BRANCHES_COMMAND, repo)
        if remotes is None:
            self.logger.warning("Could not list remote branches, defaulting to full validation")
            return ValidationMode(branch=branch)

        base = self._pick_fallback(remotes)
        self.logger.info("Comparing against: %s", base)
        return ValidationMode(branch=branch, base=base)

    def _pick_fallback(self, remotes: str) -> str:
        # `git branch -r` lists symbolic refs as "origin/HEAD -> origin/main".
        names = {
            line.strip().split(" -> ")[0]
            for line in remotes.splitlines()
            if line.strip()
        }
        for candidate in self.fallback_bases:
            if candidate in names:
                return candidate
        return self.fallback_bases[-1]

    def _read(self, args: Sequence[str], repo: Path) -> Optional[str]:
        try:
            result = self._runner(list(args), cwd=repo, capture_output=True)
        except OSError as exc:
            self.logger.debug("Failed to run %s: %s", " ".join(args), exc)
            return None
        if not result.ok:
            return None
        return result.stdout.strip()


__all__ = [
    "BranchInspector",
    "CURRENT_BRANCH_COMMAND",
    "REMOTE_BRANCHES_COMMAND",
    "UPSTREAM_COMMAND",
]
