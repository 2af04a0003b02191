"""Configuration loading for monohooks (.monohooks.yml)."""

from __future__ import annotations

import shlex
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

CONFIG_FILENAME = ".monohooks.yml"

DEFAULT_NX_VERSION = "22.0.1"

DEFAULT_EMPTY_MARKERS = (
    "No projects found",
    "No projects matched",
    "No projects were found",
)


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class PythonSettings:
    """Virtual environment settings used by the pre-commit hook."""

    venv_dir: str = ".venv"
    interpreter: Optional[str] = None
    env_var: str = "PYTHON_ENV"

    def resolve_interpreter(self, platform: str = sys.platform) -> str:
        if self.interpreter:
            return self.interpreter
        return "python" if platform == "win32" else "python3"


@dataclass
class HookSettings:
    """Commands delegated to by the hook dispatcher."""

    directory: str = ".husky"
    staged_command: List[str] = field(default_factory=lambda: ["npx", "lint-staged"])
    install: Dict[str, List[str]] = field(
        default_factory=lambda: {
            "node": ["npm", "install"],
            "python": ["npm", "run", "py:install-packages"],
            "dotnet": ["dotnet", "restore"],
        }
    )
    # Per-language pre-push overrides; languages without one run the Nx test target.
    test: Dict[str, List[str]] = field(default_factory=dict)
    test_target: str = "test"
    base_branches: List[str] = field(default_factory=lambda: ["main", "dev", "test"])
    fallback_bases: List[str] = field(
        default_factory=lambda: ["origin/dev", "origin/test", "origin/main"]
    )


@dataclass
class NxSettings:
    """Nx invocation settings for repair, tagging and run-many."""

    command: List[str] = field(default_factory=lambda: ["npx", "nx"])
    version: str = DEFAULT_NX_VERSION
    reinstall: List[str] = field(
        default_factory=lambda: ["npm", "install", "nx@latest", "--save-dev"]
    )


@dataclass
class SafeRunSettings:
    """Failure policy for the safe run-many wrapper."""

    tolerate_empty: bool = True
    empty_markers: List[str] = field(default_factory=lambda: list(DEFAULT_EMPTY_MARKERS))


@dataclass
class MonohooksConfig:
    """Represents the settings defined in .monohooks.yml."""

    root: Path
    python: PythonSettings = field(default_factory=PythonSettings)
    hooks: HookSettings = field(default_factory=HookSettings)
    nx: NxSettings = field(default_factory=NxSettings)
    safe_run: SafeRunSettings = field(default_factory=SafeRunSettings)


def load_config(config_path: Path) -> MonohooksConfig:
    """Load configuration from disk, falling back to defaults when absent."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return MonohooksConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    config = MonohooksConfig(root=root)

    python_data = _as_dict(data.get("python"))
    if python_data:
        config.python = PythonSettings(
            venv_dir=_as_str(python_data.get("venv_dir")) or config.python.venv_dir,
            interpreter=_as_str(python_data.get("interpreter")),
            env_var=_as_str(python_data.get("env_var")) or config.python.env_var,
        )

    hooks_data = _as_dict(data.get("hooks"))
    if hooks_data:
        defaults = HookSettings()
        config.hooks = HookSettings(
            directory=_as_str(hooks_data.get("directory")) or defaults.directory,
            staged_command=_as_command(hooks_data.get("staged_command")) or defaults.staged_command,
            install=_merge_commands(defaults.install, hooks_data.get("install")),
            test=_merge_commands(defaults.test, hooks_data.get("test")),
            test_target=_as_str(hooks_data.get("test_target")) or defaults.test_target,
            base_branches=_as_str_list(hooks_data.get("base_branches")) or defaults.base_branches,
            fallback_bases=_as_str_list(hooks_data.get("fallback_bases"))
            or defaults.fallback_bases,
        )

    nx_data = _as_dict(data.get("nx"))
    if nx_data:
        defaults_nx = NxSettings()
        config.nx = NxSettings(
            command=_as_command(nx_data.get("command")) or defaults_nx.command,
            version=_as_str(nx_data.get("version")) or defaults_nx.version,
            reinstall=_as_command(nx_data.get("reinstall")) or defaults_nx.reinstall,
        )

    safe_run_data = _as_dict(data.get("safe_run"))
    if safe_run_data:
        tolerate = _as_bool(safe_run_data.get("tolerate_empty"))
        markers = _as_str_list(safe_run_data.get("empty_markers"))
        config.safe_run = SafeRunSettings(
            tolerate_empty=True if tolerate is None else tolerate,
            empty_markers=markers or list(DEFAULT_EMPTY_MARKERS),
        )

    return config


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    if config_path.name != CONFIG_FILENAME:
        return (config_path.parent / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Any:
    text = path.read_text(encoding="utf-8-sig")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded if loaded is not None else {}


def _merge_commands(defaults: Dict[str, List[str]], value: Any) -> Dict[str, List[str]]:
    merged = {name: list(command) for name, command in defaults.items()}
    for name, raw in _as_dict(value).items():
        command = _as_command(raw)
        if command:
            merged[str(name)] = command
    return merged


def _as_command(value: Any) -> List[str]:
    if isinstance(value, str):
        return shlex.split(value)
    if isinstance(value, list):
        return [str(item) for item in value if isinstance(item, (str, int, float))]
    return []


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    if isinstance(value, bool):
        return None
    return str(value) if isinstance(value, (str, int, float)) else None


def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1", "on"}:
            return True
        if lowered in {"false", "no", "0", "off"}:
            return False
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, list):
        return [str(item) for item in value if isinstance(item, (str, int, float))]
    return []


__all__ = [
    "CONFIG_FILENAME",
    "ConfigError",
    "HookSettings",
    "MonohooksConfig",
    "NxSettings",
    "PythonSettings",
    "SafeRunSettings",
    "load_config",
]
