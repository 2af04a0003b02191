"""Git plumbing used by the hooks."""

from .branch import BranchInspector
from .changes import ChangeSource

__all__ = ["BranchInspector", "ChangeSource"]
