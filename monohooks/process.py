"""Subprocess helpers shared by hooks, repair and the safe runner."""

from __future__ import annotations

import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Mapping, Optional, Sequence, TextIO


@dataclass(frozen=True)
class CommandResult:
    """Exit status and captured output of a delegated process."""

    args: Sequence[str]
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    @property
    def output(self) -> str:
        return f"{self.stdout}{self.stderr}"


class CommandError(RuntimeError):
    """Raised when a delegated command exits with a non-zero status."""

    def __init__(self, result: CommandResult, message: str | None = None) -> None:
        self.result = result
        command = " ".join(result.args)
        super().__init__(message or f"`{command}` exited with status {result.returncode}")

    @property
    def returncode(self) -> int:
        return self.result.returncode


CommandRunner = Callable[..., CommandResult]
ExecutableLookup = Callable[[str], Optional[str]]


def run_command(
    args: Sequence[str],
    *,
    cwd: Path,
    env: Mapping[str, str] | None = None,
    capture_output: bool = False,
    stream: TextIO | None = None,
) -> CommandResult:
    """Run a command once and report its exit status without raising on failure.

    With ``stream`` the merged stdout/stderr is copied to it line by line as the
    process runs and is also returned in ``stdout``.
    """
    argv = list(args)
    if not argv:
        raise ValueError("Cannot run an empty command")
    # Resolve through PATH/PATHEXT so `npx` finds `npx.cmd` on Windows.
    resolved = shutil.which(argv[0], path=(env or {}).get("PATH"))
    if resolved:
        argv[0] = resolved
    if stream is not None:
        return _run_streaming(argv, tuple(args), cwd=cwd, env=env, stream=stream)
    completed = subprocess.run(
        argv,
        cwd=str(cwd),
        env=dict(env) if env is not None else None,
        check=False,
        text=True,
        capture_output=capture_output,
    )
    return CommandResult(
        args=tuple(args),
        returncode=completed.returncode,
        stdout=(completed.stdout or "") if capture_output else "",
        stderr=(completed.stderr or "") if capture_output else "",
    )


def _run_streaming(
    argv: List[str],
    args: Sequence[str],
    *,
    cwd: Path,
    env: Mapping[str, str] | None,
    stream: TextIO,
) -> CommandResult:
    lines: List[str] = []
    with subprocess.Popen(
        argv,
        cwd=str(cwd),
        env=dict(env) if env is not None else None,
        stdout=subprocess.PIPE,
        stderr=subprocess.STDOUT,
        text=True,
        bufsize=1,
    ) as process:
        for line in process.stdout or ():
            lines.append(line)
            stream.write(line)
            stream.flush()
        returncode = process.wait()
    return CommandResult(args=args, returncode=returncode, stdout="".join(lines))


def find_executable(name: str) -> Optional[str]:
    """Return the resolved path for ``name`` or None when it is not on PATH."""
    return shutil.which(name)


__all__ = [
    "CommandError",
    "CommandResult",
    "CommandRunner",
    "ExecutableLookup",
    "find_executable",
    "run_command",
]
