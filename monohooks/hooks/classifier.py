"""Suffix-based language classification for changed files."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, Pattern, Sequence, Tuple

from ..models import LANGUAGE_TAGS, LanguageClassification


@dataclass(frozen=True)
class SuffixRule:
    """Associates a language tag with the file suffixes that signal it."""

    language: str
    suffixes: Sequence[str]

    def matches(self, path: str) -> bool:
        return any(path.endswith(suffix) for suffix in self.suffixes)


@dataclass(frozen=True)
class ManifestRule:
    """Dependency manifest family watched by the post-merge hook."""

    family: str
    suffixes: Sequence[str] = ()
    pattern: Pattern[str] | None = None

    def matches(self, path: str) -> bool:
        normalized = path.replace("\\", "/")
        if any(normalized.endswith(suffix) for suffix in self.suffixes):
            return True
        if self.pattern is not None:
            return bool(self.pattern.search(normalized))
        return False


class LanguageClassifier:
    """Maps a set of paths to the language buckets they touch.

    Classification is multi-label: ``.csproj`` marks both ``dotnet`` and
    ``xml``.
    """

    _RULES: Sequence[SuffixRule] = (
        SuffixRule("python", (".py", ".pyx", ".pxd", ".pxi", ".pyi", ".ipynb")),
        SuffixRule("node", (".js", ".jsx", ".ts", ".tsx")),
        SuffixRule("dotnet", (".cs", ".vb", ".csproj", ".fsproj", ".sqlproj")),
        SuffixRule("sql", (".sql",)),
        SuffixRule("yaml", (".yml", ".yaml")),
        SuffixRule("xml", (".xml", ".csproj", ".sqlproj")),
        SuffixRule("json", (".json",)),
        SuffixRule("markdown", (".md",)),
    )

    _MANIFEST_RULES: Sequence[ManifestRule] = (
        ManifestRule("node", suffixes=("package.json", "package-lock.json", "yarn.lock")),
        ManifestRule("python", pattern=re.compile(r"requirements.*\.txt$")),
        ManifestRule("dotnet", suffixes=(".csproj", ".fsproj", ".vbproj")),
    )

    def classify(self, paths: Iterable[str]) -> LanguageClassification:
        files = tuple(path.strip() for path in paths if path and path.strip())
        present = {tag: False for tag in LANGUAGE_TAGS}
        for path in files:
            for rule in self._RULES:
                if rule.matches(path):
                    present[rule.language] = True
        return LanguageClassification(present=present, files=files)

    def manifest_families(self, paths: Iterable[str]) -> Tuple[str, ...]:
        """Return manifest families touched by ``paths`` in a fixed order."""
        files = [path.strip() for path in paths if path and path.strip()]
        return tuple(
            rule.family
            for rule in self._MANIFEST_RULES
            if any(rule.matches(path) for path in files)
        )


__all__ = ["LanguageClassifier", "ManifestRule", "SuffixRule"]
