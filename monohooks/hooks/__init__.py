"""Hook dispatch, classification and installation."""

from .classifier import LanguageClassifier
from .dispatcher import HookDispatcher, HookError
from .installer import HookInstaller
from .venv import PythonEnvironment

__all__ = [
    "HookDispatcher",
    "HookError",
    "HookInstaller",
    "LanguageClassifier",
    "PythonEnvironment",
]
