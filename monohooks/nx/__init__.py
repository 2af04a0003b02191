"""Nx command wrappers."""

from .safe_run import RunManyArgs, SafeRunner, parse_run_many_args

__all__ = ["RunManyArgs", "SafeRunner", "parse_run_many_args"]
