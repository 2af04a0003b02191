"""Git hook dispatch across Node, Python and .NET tooling."""

from __future__ import annotations

import os
import sys
from typing import Dict, List, Mapping, Optional, Sequence

from ..config import MonohooksConfig
from ..git.branch import BranchInspector
from ..git.changes import ChangeSource
from ..logging import get_logger
from ..models import HookKind, HookRunSummary, StepOutcome, ValidationMode
from ..process import CommandError, CommandRunner, ExecutableLookup, find_executable, run_command
from .classifier import LanguageClassifier
from .venv import PythonEnvironment

PRE_PUSH_ORDER: Sequence[str] = ("node", "python", "dotnet")

_LANGUAGE_LABELS = {"node": "JavaScript", "python": "Python", "dotnet": ".NET"}


class HookError(RuntimeError):
    """Raised when a hook cannot run to completion for internal reasons."""

    def __init__(self, message: str, exit_code: int = 1) -> None:
        super().__init__(message)
        self.exit_code = exit_code or 1


class HookDispatcher:
    """Decides which language steps a hook runs and runs them in order."""

    def __init__(
        self,
        config: MonohooksConfig,
        *,
        changes: ChangeSource | None = None,
        branches: BranchInspector | None = None,
        classifier: LanguageClassifier | None = None,
        environment: PythonEnvironment | None = None,
        runner: CommandRunner | None = None,
        which: ExecutableLookup | None = None,
        platform: str = sys.platform,
        base_env: Optional[Mapping[str, str]] = None,
    ) -> None:
        self.config = config
        self.root = config.root
        self._runner = runner or run_command
        self._which = which or find_executable
        self.changes = changes or ChangeSource(runner=self._runner)
        self.branches = branches or BranchInspector(
            self._runner,
            base_branches=config.hooks.base_branches,
            fallback_bases=config.hooks.fallback_bases,
        )
        self.classifier = classifier or LanguageClassifier()
        self.environment = environment or PythonEnvironment(
            self.root,
            config.python,
            platform=platform,
            runner=self._runner,
            which=self._which,
        )
        self._base_env = base_env
        self.logger = get_logger("hooks.dispatcher")

    def dispatch(self, kind: HookKind, files: Sequence[str] | None = None) -> HookRunSummary:
        """Run ``kind`` against ``files`` (read from Git when omitted)."""
        self.logger.info("Executing %s hook...", kind.value)
        try:
            paths = list(files) if files is not None else self.changes.files_for(kind, self.root)
        except (CommandError, OSError) as exc:
            raise HookError(f"Error reading changed files: {exc}") from exc

        classification = self.classifier.classify(paths)
        self.logger.debug(
            "Classified %d files: %s",
            len(classification.files),
            ", ".join(classification.languages) or "(none)",
        )
        summary = HookRunSummary(kind=kind, classification=classification)

        try:
            if kind is HookKind.PRE_COMMIT:
                self._pre_commit(summary)
            elif kind is HookKind.POST_MERGE:
                self._post_merge(summary, paths)
            else:
                self._pre_push(summary)
        except OSError as exc:
            raise HookError(f"Error in {kind.value} hook: {exc}") from exc

        if summary.exit_code == 0:
            self.logger.info("%s hook completed successfully", kind.value)
        return summary

    # ------------------------------------------------------------------
    # Hook kinds

    def _pre_commit(self, summary: HookRunSummary) -> None:
        var_name = self.config.python.env_var
        if summary.classification.has("python"):
            self.logger.info("Python files detected, setting up Python environment...")
            try:
                self.environment.ensure()
            except CommandError as exc:
                raise HookError(str(exc), exc.returncode) from exc
        bin_dir = self.environment.bin_dir
        summary.env = {var_name: bin_dir}

        child_env = self._child_env(summary.env)
        self.logger.info("Running staged file checks...")
        self._run_step(summary, "staged", self.config.hooks.staged_command, env=child_env)

    def _post_merge(self, summary: HookRunSummary, paths: Sequence[str]) -> None:
        self.logger.info("Checking for dependency changes...")
        families = self.classifier.manifest_families(paths)
        for family in families:
            command = self.config.hooks.install.get(family)
            if not command:
                continue
            label = _LANGUAGE_LABELS.get(family, family)
            self.logger.info("%s dependencies changed, installing packages...", label)
            outcome = self._run_step(summary, f"install:{family}", command)
            if outcome.returncode != 0:
                self.logger.error(
                    "%s dependency install failed with status %d", label, outcome.returncode
                )

    def _pre_push(self, summary: HookRunSummary) -> None:
        languages = [lang for lang in PRE_PUSH_ORDER if summary.classification.has(lang)]
        if not languages:
            self.logger.info("No Node, Python or .NET changes; nothing to test")
            return

        mode = self.branches.detect(self.root)
        summary.mode = mode
        if mode.affected:
            self.logger.info("Mode: affected projects only (%s -> %s)", mode.branch, mode.base)
        else:
            self.logger.info("Mode: all projects (branch %s)", mode.branch)

        self.logger.info("Running tests before pushing...")
        for language in languages:
            label = _LANGUAGE_LABELS[language]
            command = self.config.hooks.test.get(language)
            if not command:
                # Node checks always run; Python and .NET need tagged projects in scope.
                if language != "node" and not self._has_tagged_projects(language, mode):
                    self.logger.info("No %s projects in scope; skipping %s tests", label, label)
                    continue
                command = self._test_command(language, mode)
            self.logger.info("Running %s tests...", label)
            outcome = self._run_step(summary, f"test:{language}", command)
            if outcome.returncode != 0:
                self.logger.error("%s tests failed with status %d", label, outcome.returncode)
                return

    # ------------------------------------------------------------------
    # Helpers

    def _test_command(self, language: str, mode: ValidationMode) -> List[str]:
        nx = list(self.config.nx.command)
        target = f"--target={self.config.hooks.test_target}"
        projects = f"--projects=tag:{language}"
        if mode.affected:
            return [*nx, "affected", f"--base={mode.base}", "--head=HEAD", target, projects]
        return [*nx, "run-many", target, projects]

    def _has_tagged_projects(self, language: str, mode: ValidationMode) -> bool:
        """Ask Nx whether any ``tag:<language>`` project is in scope for ``mode``."""
        command = [*self.config.nx.command, "show", "projects"]
        if mode.affected:
            command += ["--affected", f"--base={mode.base}", "--head=HEAD"]
        command.append(f"--projects=tag:{language}")
        # Without Nx the answer is unknown; let the test step report the missing tool.
        if self._which(command[0]) is None:
            return True
        try:
            result = self._runner(command, cwd=self.root, capture_output=True)
        except OSError as exc:
            self.logger.debug("Could not list %s projects: %s", language, exc)
            return True
        return result.ok and bool(result.stdout.strip())

    def _child_env(self, overrides: Mapping[str, str]) -> Dict[str, str]:
        base = self._base_env if self._base_env is not None else os.environ
        env = dict(base)
        env.update(overrides)
        return env

    def _run_step(
        self,
        summary: HookRunSummary,
        name: str,
        command: Sequence[str],
        *,
        env: Optional[Mapping[str, str]] = None,
    ) -> StepOutcome:
        if self._which(command[0]) is None:
            self.logger.warning("%s is not on PATH; skipping %s step", command[0], name)
            outcome = StepOutcome(name=name, command=tuple(command), skipped=True)
            summary.steps.append(outcome)
            return outcome

        self.logger.debug("Executing: %s", " ".join(command))
        result = self._runner(list(command), cwd=self.root, env=env, capture_output=False)
        outcome = StepOutcome(name=name, command=tuple(command), returncode=result.returncode)
        summary.steps.append(outcome)
        return outcome


__all__ = ["HookDispatcher", "HookError", "PRE_PUSH_ORDER"]
