"""Repair and sync of Nx workspace metadata files."""

from __future__ import annotations

import copy
import json
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

from ..config import DEFAULT_NX_VERSION, MonohooksConfig
from ..logging import get_logger
from ..process import CommandResult, CommandRunner, ExecutableLookup, find_executable, run_command
from .encoding import read_text, write_preserving_encoding

NX_JSON = "nx.json"
NX_DIR = ".nx"
PROJECT_GRAPH = f"{NX_DIR}/project-graph.json"
CACHE_DIR = f"{NX_DIR}/cache"
CLOUD_ENV = f"{NX_DIR}/nx-cloud.env"
WORKSPACE_JSON = "workspace.json"
NX_BAT = "nx.bat"

MINIMAL_PROJECT_GRAPH: Dict[str, Any] = {"nodes": {}, "dependencies": {}, "version": "6.0"}

CLOUD_ENV_CONTENT = "# Nx Cloud Environment Variables\n"

NX_BAT_MARKER = "node_modules\\.bin\\nx %*"
NX_BAT_CONTENT = (
    "@echo off\r\n"
    "rem NX wrapper for Windows\r\n"
    "rem This script executes NX commands directly using the local NX installation\r\n"
    "\r\n"
    f"{NX_BAT_MARKER}\r\n"
)

logger = get_logger("repair.nx")

_TARGET_OPTIONS = {
    "lintTargetName": "lint",
    "formatTargetName": "format",
    "testTargetName": "test",
    "buildTargetName": "build",
    "serveTargetName": "serve",
}


class RepairError(RuntimeError):
    """Raised when the Nx installation cannot be verified or reinstalled."""


@dataclass(frozen=True)
class PluginEntry:
    """One element of the ``plugins`` list in nx.json.

    ``name`` is the identity key: the bare string, or the ``plugin`` field of an
    object entry. Entries without a recognisable name keep ``name`` as None.
    """

    name: Optional[str]
    payload: Any

    @classmethod
    def from_json(cls, value: Any) -> "PluginEntry":
        if isinstance(value, str):
            return cls(name=value, payload=value)
        if isinstance(value, dict) and isinstance(value.get("plugin"), str):
            return cls(name=value["plugin"], payload=value)
        return cls(name=None, payload=value)

    def to_json(self) -> Any:
        return copy.deepcopy(self.payload)


REQUIRED_PLUGINS: Tuple[PluginEntry, ...] = tuple(
    PluginEntry.from_json(payload)
    for payload in (
        {"plugin": "@nx/dotnet", "options": dict(_TARGET_OPTIONS)},
        {
            "plugin": "@nx/js/typescript",
            "options": {
                "typecheck": {"targetName": "typecheck"},
                "build": {"targetName": "build", "configName": "tsconfig.lib.json"},
            },
        },
        {"plugin": "@nx/eslint/plugin", "options": {"targetName": "lint"}},
        {"plugin": "@nxlv/python", "options": dict(_TARGET_OPTIONS)},
    )
)

_SECTION_ORDER: Tuple[str, ...] = ("plugins", "installation", "projects")


@dataclass
class NxJsonDocument:
    """Typed view of nx.json that keeps unknown keys and their order."""

    plugins: Optional[List[PluginEntry]] = None
    installation: Optional[Dict[str, Any]] = None
    projects: Optional[Dict[str, Any]] = None
    extras: Dict[str, Any] = field(default_factory=dict)
    key_order: List[str] = field(default_factory=list)

    @classmethod
    def parse(cls, text: str) -> "NxJsonDocument":
        """Deserialize nx.json text. Raises ValueError when it is not a JSON object."""
        data = json.loads(text)
        if not isinstance(data, dict):
            raise ValueError("nx.json root must be an object")

        document = cls(key_order=list(data.keys()))
        for key, value in data.items():
            if key == "plugins":
                if isinstance(value, list):
                    document.plugins = [PluginEntry.from_json(item) for item in value]
                else:
                    logger.warning("nx.json 'plugins' is not a list; resetting it")
            elif key in ("installation", "projects"):
                if isinstance(value, dict):
                    setattr(document, key, value)
                else:
                    logger.warning("nx.json '%s' is not an object; resetting it", key)
            else:
                document.extras[key] = value
        return document

    def ensure_sections(self, version: str = DEFAULT_NX_VERSION) -> List[str]:
        """Fill in missing top-level sections and return the names that were added."""
        added: List[str] = []
        if self.plugins is None:
            self.plugins = []
            added.append("plugins")
        if self.installation is None:
            self.installation = {"version": version}
            added.append("installation")
        if self.projects is None:
            self.projects = {}
            added.append("projects")
        return added

    def plugin_names(self) -> List[str]:
        return [entry.name for entry in self.plugins or [] if entry.name is not None]

    def add_missing_plugins(self, required: Sequence[PluginEntry]) -> List[str]:
        """Append required plugins whose name is not already present anywhere."""
        if self.plugins is None:
            self.plugins = []
        known = set(self.plugin_names())
        added: List[str] = []
        for entry in required:
            if entry.name in known:
                continue
            self.plugins.append(entry)
            known.add(entry.name)
            added.append(entry.name or "")
        return added

    def to_dict(self) -> Dict[str, Any]:
        sections = {
            "plugins": [entry.to_json() for entry in self.plugins] if self.plugins is not None else None,
            "installation": self.installation,
            "projects": self.projects,
        }
        result: Dict[str, Any] = {}
        for key in self.key_order:
            if key in sections:
                if sections[key] is not None:
                    result[key] = sections[key]
            elif key in self.extras:
                result[key] = self.extras[key]
        for key in _SECTION_ORDER:
            if key not in result and sections[key] is not None:
                result[key] = sections[key]
        for key, value in self.extras.items():
            if key not in result:
                result[key] = value
        return result

    def dumps(self) -> str:
        return json.dumps(self.to_dict(), indent=2, ensure_ascii=False) + "\n"


@dataclass
class RepairReport:
    """Actions taken by a repair pass, in order."""

    entries: List[Tuple[str, str]] = field(default_factory=list)
    added_plugins: List[str] = field(default_factory=list)
    nx_version: Optional[str] = None

    def record(self, path: str, action: str) -> None:
        self.entries.append((path, action))

    def action_for(self, path: str) -> Optional[str]:
        for recorded, action in self.entries:
            if recorded == path:
                return action
        return None


class NxRepairer:
    """Brings nx.json and the .nx cache scaffolding into a usable state."""

    def __init__(
        self,
        config: MonohooksConfig,
        *,
        runner: CommandRunner | None = None,
        which: ExecutableLookup | None = None,
        platform: str = sys.platform,
        required_plugins: Sequence[PluginEntry] = REQUIRED_PLUGINS,
    ) -> None:
        self.config = config
        self.root = config.root
        self.platform = platform
        self.required_plugins = tuple(required_plugins)
        self._runner = runner or run_command
        self._which = which or find_executable
        self.logger = logger

    def repair(self, *, verify: bool = True) -> RepairReport:
        """Run a full repair pass. Safe to repeat."""
        self.logger.info("Starting Nx repair in %s", self.root)
        report = RepairReport()

        self.sync_nx_json(report)
        self._ensure_directory(NX_DIR, report)
        self.reset_project_graph(report)
        self._ensure_directory(CACHE_DIR, report)
        self._ensure_file(CLOUD_ENV, CLOUD_ENV_CONTENT, report)
        self._ensure_file(
            WORKSPACE_JSON,
            json.dumps({"version": 2, "projects": {}}, indent=2) + "\n",
            report,
        )
        if self.platform == "win32":
            self.sync_nx_bat(report)

        if verify:
            self.verify_installation(report)

        self.logger.info("Nx repair completed successfully")
        return report

    # ------------------------------------------------------------------
    # Individual artifacts

    def sync_nx_json(self, report: RepairReport) -> NxJsonDocument:
        path = self.root / NX_JSON
        existed = path.exists()
        document = self._load_nx_json(path)

        added_sections = document.ensure_sections(self.config.nx.version)
        if added_sections:
            self.logger.debug("Added nx.json sections: %s", ", ".join(added_sections))
        added = document.add_missing_plugins(self.required_plugins)
        for name in added:
            self.logger.info("Adding missing plugin: %s", name)
        report.added_plugins.extend(added)

        changed = write_preserving_encoding(path, document.dumps())
        report.record(NX_JSON, _action(existed, changed))
        return document

    def reset_project_graph(self, report: RepairReport) -> None:
        path = self.root / PROJECT_GRAPH
        existed = path.exists()
        content = json.dumps(MINIMAL_PROJECT_GRAPH, indent=2) + "\n"
        changed = write_preserving_encoding(path, content)
        report.record(PROJECT_GRAPH, _action(existed, changed))

    def sync_nx_bat(self, report: RepairReport) -> None:
        path = self.root / NX_BAT
        if path.exists() and NX_BAT_MARKER in read_text(path):
            report.record(NX_BAT, "unchanged")
            return
        existed = path.exists()
        write_preserving_encoding(path, NX_BAT_CONTENT)
        report.record(NX_BAT, _action(existed, True))

    def verify_installation(self, report: RepairReport) -> None:
        """Check ``nx --version``; reinstall once when the check fails."""
        self.logger.info("Verifying Nx installation...")
        version_command = [*self.config.nx.command, "--version"]
        result = self._try_run(version_command, capture_output=True)
        if result is not None and result.ok:
            report.nx_version = result.stdout.strip() or None
            self.logger.info("Nx is installed: %s", report.nx_version or "(unknown version)")
            report.record("nx", "verified")
            return

        self.logger.warning("Error verifying Nx. Trying to reinstall Nx...")
        reinstall = list(self.config.nx.reinstall)
        outcome = self._try_run(reinstall, capture_output=False)
        if outcome is None or not outcome.ok:
            status = "not found" if outcome is None else f"status {outcome.returncode}"
            raise RepairError(f"Failed to reinstall Nx (`{' '.join(reinstall)}` {status})")
        self.logger.info("Reinstalled Nx")
        report.record("nx", "reinstalled")

    # ------------------------------------------------------------------
    # Helpers

    def _load_nx_json(self, path: Path) -> NxJsonDocument:
        if not path.exists():
            return NxJsonDocument()
        try:
            document = NxJsonDocument.parse(read_text(path))
        except (OSError, UnicodeDecodeError, ValueError) as exc:
            self.logger.warning("Error reading nx.json (%s), creating a new one", exc)
            return NxJsonDocument()
        self.logger.debug("Found existing nx.json")
        return document

    def _ensure_directory(self, relative: str, report: RepairReport) -> None:
        path = self.root / relative
        if path.is_dir():
            report.record(relative, "unchanged")
            return
        path.mkdir(parents=True, exist_ok=True)
        self.logger.info("Created %s directory", relative)
        report.record(relative, "created")

    def _ensure_file(self, relative: str, content: str, report: RepairReport) -> None:
        path = self.root / relative
        if path.exists():
            report.record(relative, "unchanged")
            return
        write_preserving_encoding(path, content)
        self.logger.info("Created %s", relative)
        report.record(relative, "created")

    def _try_run(self, command: Sequence[str], *, capture_output: bool) -> Optional[CommandResult]:
        if self._which(command[0]) is None:
            self.logger.debug("%s is not on PATH", command[0])
            return None
        try:
            return self._runner(list(command), cwd=self.root, capture_output=capture_output)
        except OSError as exc:
            self.logger.debug("Failed to start %s: %s", command[0], exc)
            return None


def _action(existed: bool, changed: bool) -> str:
    if not existed:
        return "created"
    return "updated" if changed else "unchanged"


__all__ = [
    "NxJsonDocument",
    "NxRepairer",
    "PluginEntry",
    "REQUIRED_PLUGINS",
    "RepairError",
    "RepairReport",
]
