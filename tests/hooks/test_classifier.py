"""Tests for suffix-based language classification."""

from __future__ import annotations

import pytest

from monohooks.hooks.classifier import LanguageClassifier


@pytest.mark.parametrize(
    "paths",
    [
        ["apps/x/src/y.py"],
        ["README.md", "libs/util/__init__.py"],
        ["notebooks/explore.ipynb", "web/app.ts"],
        ["stubs/pkg.pyi"],
    ],
)
def test_python_present_when_python_suffix_staged(paths: list[str]) -> None:
    classification = LanguageClassifier().classify(paths)

    assert classification.has("python") is True


@pytest.mark.parametrize(
    "paths",
    [
        [],
        ["README.md"],
        ["apps/web/src/main.tsx", "package.json"],
        ["python.txt", "docs/py/guide.md"],
    ],
)
def test_python_absent_without_python_suffix(paths: list[str]) -> None:
    classification = LanguageClassifier().classify(paths)

    assert classification.has("python") is False


def test_classification_is_multi_label() -> None:
    classification = LanguageClassifier().classify(["apps/api/Api.csproj"])

    assert classification.has("dotnet")
    assert classification.has("xml")
    assert not classification.has("node")
    assert classification.languages == ["dotnet", "xml"]


def test_classification_reports_every_bucket() -> None:
    classification = LanguageClassifier().classify(
        [
            "db/schema.sql",
            ".github/workflows/ci.yml",
            "nx.json",
            "docs/index.md",
            "web/index.js",
            "   ",
        ]
    )

    assert classification.languages == ["node", "sql", "yaml", "json", "markdown"]
    assert classification.files == (
        "db/schema.sql",
        ".github/workflows/ci.yml",
        "nx.json",
        "docs/index.md",
        "web/index.js",
    )


def test_manifest_families_follow_fixed_order() -> None:
    classifier = LanguageClassifier()

    families = classifier.manifest_families(
        [
            "apps/api/Api.fsproj",
            "services/ml/requirements-dev.txt",
            "yarn.lock",
        ]
    )

    assert families == ("node", "python", "dotnet")


def test_manifest_families_match_requirements_anywhere_in_path() -> None:
    classifier = LanguageClassifier()

    assert classifier.manifest_families(["requirements.txt"]) == ("python",)
    assert classifier.manifest_families(["requirements/base.txt"]) == ("python",)
    assert classifier.manifest_families(["services/ml/dev-requirements.txt"]) == ("python",)
    assert classifier.manifest_families(["apps\\svc\\requirements_test.txt"]) == ("python",)
    assert classifier.manifest_families(["docs/requirements.md"]) == ()
    assert classifier.manifest_families(["src/index.ts"]) == ()
