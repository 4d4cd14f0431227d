"""Command-line interface.

Subcommands::

    confgen generate --in config.toml --out internal/config/config.go
    confgen watch    --in config.toml --out internal/config/config.go
    confgen diff     config.dev.toml config.prod.toml
    confgen version
"""

from __future__ import annotations

import argparse
import asyncio
import os
import platform
import shutil
import signal
import sys
from pathlib import Path

from pydantic import ValidationError

from confgen import __version__
from confgen.config import GenerateOptions, WatchOptions
from confgen.diff import diff_files, format_json, format_text
from confgen.errors import ConfgenError
from confgen.generator.emitter import EmissionMode
from confgen.pipeline import generate_from_file
from confgen.utils import (
    LOG_LEVEL_ENV,
    console,
    parse_file_size,
    print_error,
    print_success,
    print_summary_table,
    print_warning,
    setup_logging,
)
from confgen.watcher import watch


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------


def _add_generate_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--in", "-i",
        dest="input_file",
        default="config.toml",
        help="Input TOML file (default: config.toml)",
    )
    parser.add_argument(
        "--out", "-o",
        dest="output_file",
        required=True,
        help="Output Go file",
    )
    parser.add_argument(
        "--pkg", "-p",
        dest="package_name",
        default="",
        help="Package name (inferred from the output path if omitted)",
    )
    parser.add_argument(
        "--no-env",
        action="store_true",
        help="Disable CONFIG_* environment variable overrides",
    )
    parser.add_argument(
        "--max-file-size",
        default="1MB",
        help="Maximum size of file: references, e.g. 512KB, 10MB (default: 1MB)",
    )
    parser.add_argument(
        "--mode",
        choices=[m.value for m in EmissionMode],
        default=EmissionMode.STATIC.value,
        help="'static' bakes values in; 'getter' emits runtime env lookups (default: static)",
    )
    parser.add_argument(
        "--gofmt",
        action="store_true",
        help="Run the output through gofmt when it is installed",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="confgen",
        description="Type-safe Go configuration code from TOML files",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  confgen generate --in config.toml --out config/config.go\n"
            "  confgen generate --in app.toml --out pkg/appcfg/config.go --pkg appcfg\n"
            "  confgen generate --in config.toml --out config.go --mode getter\n"
            "  confgen watch --in config.toml --out config/config.go --debounce 200\n"
            "  confgen diff config.dev.toml config.prod.toml --format json\n"
        ),
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help=f"Logging level (default: ${LOG_LEVEL_ENV} or WARNING)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    generate = subparsers.add_parser("generate", help="Generate Go code from a TOML file")
    _add_generate_arguments(generate)

    watch_parser = subparsers.add_parser(
        "watch", help="Watch a TOML file and regenerate on changes"
    )
    _add_generate_arguments(watch_parser)
    watch_parser.add_argument(
        "--debounce",
        type=int,
        default=100,
        help="Milliseconds to wait after the last change before regenerating (default: 100)",
    )

    diff = subparsers.add_parser("diff", help="Compare two TOML files")
    diff.add_argument("file1")
    diff.add_argument("file2")
    diff.add_argument(
        "--keys-only",
        action="store_true",
        help="Show only the keys that differ, not their values",
    )
    diff.add_argument(
        "--format",
        choices=["text", "json"],
        default="text",
        help="Output format (default: text)",
    )

    subparsers.add_parser("version", help="Print version information")
    return parser


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


def _options_from_args(args: argparse.Namespace) -> GenerateOptions:
    try:
        max_file_size = parse_file_size(args.max_file_size)
    except ValueError as exc:
        raise ConfgenError(f"invalid --max-file-size: {exc}") from exc
    return GenerateOptions(
        input_file=Path(args.input_file),
        output_file=Path(args.output_file),
        package_name=args.package_name,
        enable_env=not args.no_env,
        max_file_size=max_file_size,
        mode=args.mode,
        format_source=args.gofmt,
    )


def _cmd_generate(args: argparse.Namespace) -> None:
    options = _options_from_args(args)
    if options.format_source and shutil.which("gofmt") is None:
        print_warning("gofmt not found on PATH; writing unformatted output")
    written = generate_from_file(options)
    print_success(f"Generated {written}")
    print_summary_table(
        {
            "Input": str(options.input_file),
            "Output": str(written),
            "Package": options.resolved_package_name,
            "Mode": options.mode.value,
            "Env overrides": "on" if options.enable_env else "off",
        },
        title="confgen generate",
    )


async def _watch_until_signalled(options: GenerateOptions, watch_options: WatchOptions) -> None:
    stop_event = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, stop_event.set)
        except (NotImplementedError, RuntimeError):
            # No signal handlers on this platform; KeyboardInterrupt still stops asyncio.run.
            pass
    await watch(options, stop_event, watch_options)


def _cmd_watch(args: argparse.Namespace) -> None:
    options = _options_from_args(args)
    watch_options = WatchOptions(debounce_ms=args.debounce)
    console.print(f"Watching [cyan]{options.input_file}[/cyan] (press Ctrl+C to stop)")
    try:
        asyncio.run(_watch_until_signalled(options, watch_options))
    except KeyboardInterrupt:
        pass
    console.print("Stopped watching")


def _cmd_diff(args: argparse.Namespace) -> None:
    report = diff_files(args.file1, args.file2)
    if args.format == "json":
        text = format_json(report)
    else:
        text = format_text(report, keys_only=args.keys_only)
    # Differences are not an error; exit status stays 0.
    console.print(text, markup=False, highlight=False, emoji=False, soft_wrap=True, end="")


def _cmd_version(args: argparse.Namespace) -> None:
    console.print(f"confgen {__version__}")
    console.print(f"  python:   {platform.python_version()}")
    console.print(f"  platform: {sys.platform}/{platform.machine()}")


_COMMANDS = {
    "generate": _cmd_generate,
    "watch": _cmd_watch,
    "diff": _cmd_diff,
    "version": _cmd_version,
}


# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for ``confgen`` and ``python -m confgen``."""
    parser = build_parser()
    args = parser.parse_args(argv)

    level = args.log_level
    if level is None and args.command == "watch" and not os.environ.get(LOG_LEVEL_ENV):
        level = "INFO"
    setup_logging(level)

    try:
        _COMMANDS[args.command](args)
    except ConfgenError as exc:
        print_error(f"Error: {exc}")
        sys.exit(1)
    except ValidationError as exc:
        print_error(f"Invalid options: {exc}")
        sys.exit(1)


if __name__ == "__main__":
    main()
