"""Virtual environment provisioning for Python hook tooling."""

from __future__ import annotations

import ntpath
import posixpath
import sys
from pathlib import Path

from ..config import PythonSettings
from ..logging import get_logger
from ..process import CommandError, CommandRunner, ExecutableLookup, find_executable, run_command


class PythonEnvironment:
    """Resolves and lazily creates the workspace virtual environment."""

    def __init__(
        self,
        root: Path,
        settings: PythonSettings | None = None,
        *,
        platform: str = sys.platform,
        runner: CommandRunner | None = None,
        which: ExecutableLookup | None = None,
    ) -> None:
        self.root = root
        self.settings = settings or PythonSettings()
        self.platform = platform
        self._runner = runner or run_command
        self._which = which or find_executable
        self.logger = get_logger("hooks.venv")

    @property
    def venv_path(self) -> Path:
        return self.root / self.settings.venv_dir

    @property
    def bin_dir(self) -> str:
        """Binary directory of the venv using the target platform's separators."""
        if self.platform == "win32":
            return ntpath.join(str(self.venv_path), "Scripts")
        return posixpath.join(self.venv_path.as_posix(), "bin")

    @property
    def python_executable(self) -> Path:
        if self.platform == "win32":
            return self.venv_path / "Scripts" / "python.exe"
        return self.venv_path / "bin" / "python"

    def exists(self) -> bool:
        """A venv counts only once its interpreter is in place."""
        return self.python_executable.is_file()

    def ensure(self) -> bool:
        """Create the venv if absent. Returns True when it exists afterwards."""
        if self.exists():
            self.logger.debug("Virtual environment already present at %s", self.venv_path)
            return True

        interpreter = self.settings.resolve_interpreter(self.platform)
        if self._which(interpreter) is None:
            self.logger.warning(
                "%s is not on PATH; Python hook tooling will run without a virtual environment",
                interpreter,
            )
            return False

        self.logger.info("Creating Python virtual environment at %s", self.venv_path)
        result = self._runner(
            [interpreter, "-m", "venv", str(self.venv_path)],
            cwd=self.root,
            capture_output=False,
        )
        if not result.ok:
            raise CommandError(result, "Failed to create Python virtual environment")
        return True


__all__ = ["PythonEnvironment"]
