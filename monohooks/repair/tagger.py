"""Tags Nx projects by language so tag selectors resolve."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence

from ..config import MonohooksConfig
from ..logging import get_logger
from ..process import CommandRunner, run_command
from .encoding import read_text, write_preserving_encoding

_NODE_EXECUTORS: Sequence[str] = (
    "@nx/node",
    "@nx/express",
    "@nx/next",
    "@nx/react",
    "@nx/web",
    "@nx/js",
    "@nx/jest",
    "@nx/eslint",
)

_FRAMEWORK_TAGS: Mapping[str, Sequence[tuple[str, Sequence[str]]]] = {
    "node": (
        ("@nx/express", ("express", "api")),
        ("@nx/next", ("next", "client")),
        ("@nx/react", ("react", "client")),
    ),
    "python": (
        ("fastapi", ("fastapi", "api")),
        ("django", ("django", "api")),
    ),
    "dotnet": (
        ("webapi", ("webapi", "api")),
        ("blazor", ("blazor", "client")),
    ),
}


@dataclass
class TaggingResult:
    processed: int = 0
    tagged: List[str] = field(default_factory=list)
    undetected: List[str] = field(default_factory=list)


def _executors(project: Mapping[str, Any]) -> str:
    targets = project.get("targets")
    if not isinstance(targets, dict):
        return ""
    found = []
    for target in targets.values():
        if isinstance(target, dict) and isinstance(target.get("executor"), str):
            found.append(target["executor"])
    return " ".join(found)


def detect_language(project: Mapping[str, Any]) -> Optional[str]:
    """Return ``node``, ``python`` or ``dotnet`` based on target executors."""
    executors = _executors(project)
    if any(name in executors for name in _NODE_EXECUTORS):
        return "node"
    if "@nxlv/python" in executors:
        return "python"
    if "@nx/dotnet" in executors:
        return "dotnet"
    return None


def tags_for(project: Mapping[str, Any], language: str) -> List[str]:
    """Language tag first, then framework tags, then ``lib`` or ``service``."""
    executors = _executors(project)
    tags = [language]
    for needle, extra in _FRAMEWORK_TAGS.get(language, ()):
        if needle in executors:
            tags.extend(extra)
    tags.append("lib" if project.get("projectType") == "library" else "service")
    return tags


class ProjectTagger:
    """Adds missing language tags to each project's project.json."""

    def __init__(self, config: MonohooksConfig, *, runner: CommandRunner | None = None) -> None:
        self.config = config
        self.root = config.root
        self._runner = runner or run_command
        self.logger = get_logger("repair.tagger")

    def run(self) -> TaggingResult:
        result = TaggingResult()
        for name in self.list_projects():
            project = self.show_project(name)
            if project is None:
                continue
            result.processed += 1
            language = detect_language(project)
            if language is None:
                self.logger.warning("Could not detect language for %s", name)
                result.undetected.append(name)
                continue
            if self.apply_tags(name, project, tags_for(project, language)):
                result.tagged.append(name)
        self.logger.info(
            "Auto-tagging complete: processed %d projects, tagged %d",
            result.processed,
            len(result.tagged),
        )
        return result

    def list_projects(self) -> List[str]:
        payload = self._nx_json(["show", "projects", "--json"])
        if not isinstance(payload, list):
            return []
        return [item for item in payload if isinstance(item, str)]

    def show_project(self, name: str) -> Optional[Dict[str, Any]]:
        payload = self._nx_json(["show", "project", name, "--json"])
        return payload if isinstance(payload, dict) else None

    def apply_tags(self, name: str, project: Mapping[str, Any], tags: Sequence[str]) -> bool:
        project_root = project.get("root")
        if not isinstance(project_root, str):
            self.logger.warning("Project %s has no root; skipping", name)
            return False
        path = self.root / project_root / "project.json"
        if not path.exists():
            self.logger.warning("project.json not found for %s at %s", name, path)
            return False

        try:
            data = json.loads(read_text(path))
        except (OSError, UnicodeDecodeError, ValueError) as exc:
            self.logger.warning("Error reading %s: %s", path, exc)
            return False
        if not isinstance(data, dict):
            self.logger.warning("%s does not contain a JSON object; skipping", path)
            return False

        existing = data.get("tags")
        current = [tag for tag in existing if isinstance(tag, str)] if isinstance(existing, list) else []
        missing = [tag for tag in tags if tag not in current]
        if not missing:
            return False

        data["tags"] = list(existing) + missing if isinstance(existing, list) else missing
        write_preserving_encoding(path, json.dumps(data, indent=2, ensure_ascii=False) + "\n")
        self.logger.info("Tagged %s: %s", name, ", ".join(tags))
        return True

    def _nx_json(self, args: Sequence[str]) -> Any:
        command = [*self.config.nx.command, *args]
        try:
            result = self._runner(command, cwd=self.root, capture_output=True)
        except OSError as exc:
            self.logger.error("Error running %s: %s", " ".join(command), exc)
            return None
        if not result.ok:
            self.logger.error("`%s` failed: %s", " ".join(command), result.stderr.strip())
            return None
        try:
            return json.loads(result.stdout)
        except ValueError as exc:
            self.logger.error("Unexpected output from `%s`: %s", " ".join(command), exc)
            return None


__all__ = ["ProjectTagger", "TaggingResult", "detect_language", "tags_for"]
