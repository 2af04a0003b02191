"""Tests for Git hook wrapper installation."""

from __future__ import annotations

import os
import stat

import pytest

from monohooks.hooks.installer import HookInstaller, render_hook
from monohooks.models import HookKind
from tests._fixtures.workspace_builder import WorkspaceBuilder


def test_install_writes_wrapper_per_hook(workspace: WorkspaceBuilder) -> None:
    installer = HookInstaller(workspace.config(), platform="linux")

    written = installer.install()

    assert [path.name for path in written] == ["pre-commit", "post-merge", "pre-push"]
    content = (workspace.path() / ".husky" / "pre-push").read_text(encoding="utf-8")
    assert content.startswith("#!/usr/bin/env sh\n")
    assert content.rstrip().endswith("monohooks hook pre-push")


@pytest.mark.skipif(os.name == "nt", reason="POSIX permission bits")
def test_install_marks_wrappers_executable(workspace: WorkspaceBuilder) -> None:
    HookInstaller(workspace.config(), platform="linux").install()

    mode = (workspace.path() / ".husky" / "post-merge").stat().st_mode
    assert mode & stat.S_IXUSR


def test_install_is_idempotent(workspace: WorkspaceBuilder) -> None:
    installer = HookInstaller(workspace.config(), platform="linux")
    installer.install()
    first = workspace.read_bytes(".husky/pre-commit")

    installer.install()

    assert workspace.read_bytes(".husky/pre-commit") == first
    assert first.decode("utf-8") == render_hook(HookKind.PRE_COMMIT)


def test_install_honours_configured_directory(workspace: WorkspaceBuilder) -> None:
    workspace.write({".monohooks.yml": "hooks:\n  directory: .githooks\n"})

    HookInstaller(workspace.config(), platform="win32").install()

    assert (workspace.path() / ".githooks" / "pre-commit").exists()
    assert not (workspace.path() / ".husky").exists()
