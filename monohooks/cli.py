"""CLI entrypoints for monohooks commands."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from .config import ConfigError, MonohooksConfig, load_config
from .hooks import HookDispatcher, HookError, HookInstaller
from .logging import configure_logging, get_logger
from .models import HookKind
from .nx import SafeRunner
from .repair import NxRepairer, ProjectTagger, RepairError

_PASSTHROUGH_COMMAND = "run-many"
_GLOBAL_VALUE_OPTIONS = ("--root", "--log-file")


def _add_verbose_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    kwargs: dict[str, object] = {
        "action": "store_true",
        "help": "Increase log verbosity for troubleshooting.",
    }
    if suppress_default:
        kwargs["default"] = argparse.SUPPRESS
    else:
        kwargs["default"] = False
    parser.add_argument(
        "-v",
        "--verbose",
        **kwargs,
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="monohooks",
        description="Dispatch Git hooks and keep Nx workspace metadata healthy.",
    )
    _add_verbose_option(parser)
    parser.add_argument(
        "--root",
        default=".",
        help="Path to the workspace root (defaults to current directory).",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        help="Also append DEBUG-level logs to this file.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    hook_parser = subparsers.add_parser(
        "hook",
        help="Run the checks for a Git hook based on the changed files.",
    )
    _add_verbose_option(hook_parser, suppress_default=True)
    hook_parser.add_argument(
        "kind",
        choices=[kind.value for kind in HookKind],
        help="Hook being executed.",
    )

    repair_parser = subparsers.add_parser(
        "repair",
        help="Create or repair nx.json and the .nx cache scaffolding.",
    )
    _add_verbose_option(repair_parser, suppress_default=True)
    repair_parser.add_argument(
        "--skip-verify",
        action="store_true",
        help="Do not run the Nx version check after repairing files.",
    )

    subparsers.add_parser(
        _PASSTHROUGH_COMMAND,
        help="Run `nx run-many` and treat an empty project selection as success.",
        description="All arguments after run-many are passed to `nx run-many` unchanged.",
    )

    install_parser = subparsers.add_parser(
        "install-hooks",
        help="Write Git hook wrappers that call `monohooks hook`.",
    )
    _add_verbose_option(install_parser, suppress_default=True)

    tag_parser = subparsers.add_parser(
        "tag-projects",
        help="Tag Nx projects with their language based on target executors.",
    )
    _add_verbose_option(tag_parser, suppress_default=True)

    return parser


def _command_index(args: Sequence[str]) -> Optional[int]:
    """Position of the subcommand, skipping global options and their values."""
    index = 0
    while index < len(args):
        arg = args[index]
        if arg in _GLOBAL_VALUE_OPTIONS:
            index += 2
        elif arg.startswith("-"):
            index += 1
        else:
            return index
    return None


def _split_passthrough(argv: Sequence[str]) -> Tuple[List[str], List[str]]:
    """Separate our own options from arguments destined for ``nx run-many``."""
    args = list(argv)
    index = _command_index(args)
    if index is None or args[index] != _PASSTHROUGH_COMMAND:
        return args, []
    passthrough = args[index + 1 :]
    if passthrough[:1] == ["--"]:
        passthrough = passthrough[1:]
    return args[: index + 1], passthrough


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for monohooks commands."""
    own_args, passthrough = _split_passthrough(sys.argv[1:] if argv is None else argv)
    parser = _build_parser()
    args = parser.parse_args(own_args)

    try:
        configure_logging(verbose=bool(args.verbose), log_file=args.log_file)
    except OSError as exc:
        parser.exit(1, f"Unable to open log file: {exc}\n")
    logger = get_logger("cli")

    try:
        config = load_config(Path(args.root))
    except ConfigError as exc:
        parser.exit(1, f"{exc}\n")

    if args.command == "hook":
        _run_hook(parser, config, HookKind.parse(args.kind))
    elif args.command == "repair":
        try:
            report = NxRepairer(config).repair(verify=not args.skip_verify)
        except RepairError as exc:
            logger.error("%s", exc)
            parser.exit(1, f"monohooks repair failed: {exc}\n")
        except OSError as exc:
            parser.exit(1, f"monohooks repair failed: {exc}\n")
        for path, action in report.entries:
            print(f"{action:>11}  {path}")
    elif args.command == _PASSTHROUGH_COMMAND:
        try:
            code = SafeRunner(config).run(passthrough)
        except OSError as exc:
            logger.error("Unable to run nx run-many: %s", exc)
            parser.exit(1)
        if code:
            parser.exit(code)
    elif args.command == "install-hooks":
        try:
            installed = HookInstaller(config).install()
        except OSError as exc:
            logger.error("Unable to write hook wrappers: %s", exc)
            parser.exit(1, f"monohooks install-hooks failed: {exc}\n")
        for path in installed:
            print(f"Installed {_relativize(path, config)}")
    elif args.command == "tag-projects":
        try:
            result = ProjectTagger(config).run()
        except OSError as exc:
            logger.error("Unable to tag projects: %s", exc)
            parser.exit(1, f"monohooks tag-projects failed: {exc}\n")
        print(f"Processed: {result.processed} projects")
        print(f"Tagged: {len(result.tagged)} projects")
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


def _run_hook(parser: argparse.ArgumentParser, config: MonohooksConfig, kind: HookKind) -> None:
    logger = get_logger("cli")
    try:
        summary = HookDispatcher(config).dispatch(kind)
    except HookError as exc:
        logger.error("Error in %s hook: %s", kind.value, exc)
        parser.exit(exc.exit_code)
    except Exception as exc:  # pragma: no cover - hooks must fail closed
        logger.exception("Error in %s hook: %s", kind.value, exc)
        parser.exit(1)
    if summary.exit_code:
        parser.exit(summary.exit_code, f"{kind.value} hook failed\n")


def _relativize(path: Path, config: MonohooksConfig) -> str:
    try:
        return str(path.relative_to(config.root))
    except ValueError:
        return str(path)


if __name__ == "__main__":
    main(sys.argv[1:])
