"""CLI entrypoints for cpp2cs commands."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List, Optional, Tuple

from .config import ConfigError, load_config
from .converter import ConversionError, Converter
from .logging import configure_logging

_SOURCE_SUFFIXES = (".h", ".cpp")


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
        prog="cpp2cs",
        description="Translate paired C++ headers and sources into structurally equivalent C#.",
    )
    _add_verbose_option(parser)
    parser.add_argument("--log-file", type=Path, help="Also write the log to this file.")
    subparsers = parser.add_subparsers(dest="command")

    convert_parser = subparsers.add_parser(
        "convert",
        help="Convert a C++ source tree (or selected files of it) to C#.",
    )
    _add_verbose_option(convert_parser, suppress_default=True)
    convert_parser.add_argument("source_dir", nargs="?", help="Directory containing .h/.cpp files.")
    convert_parser.add_argument(
        "targets",
        nargs="*",
        help="Optional comma-separated file names and/or an output directory.",
    )
    convert_parser.add_argument(
        "--config",
        type=Path,
        help="Path to a .cpp2cs.yml file (defaults to the one in the source directory).",
    )
    return parser


def split_targets(targets: List[str]) -> Tuple[Optional[List[str]], Optional[Path]]:
    """Interpret the positionals after the source directory.

    Two values are files then output directory. A single value is a file list when it
    holds a comma or names a .h/.cpp file, otherwise it is the output directory.
    """
    if not targets:
        return None, None
    if len(targets) >= 2:
        return _file_list(targets[0]), Path(targets[1])
    value = targets[0]
    if "," in value or value.lower().endswith(_SOURCE_SUFFIXES):
        return _file_list(value), None
    return None, Path(value)


def _file_list(value: str) -> List[str]:
    return [name.strip() for name in value.split(",") if name.strip()]


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for cpp2cs commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command != "convert" or not args.source_dir:
        parser.print_usage()
        return

    configure_logging(verbose=bool(args.verbose), log_file=args.log_file)

    source_dir = Path(args.source_dir)
    try:
        config = load_config(args.config if args.config else source_dir)
    except ConfigError as exc:
        parser.exit(1, f"{exc}\n")

    files, output_dir = split_targets(list(args.targets))
    converter = Converter(config)
    try:
        if files is None:
            result = converter.convert_directory(source_dir, output_dir)
        else:
            result = converter.convert_selected(source_dir, files, output_dir)
    except ConversionError as exc:
        parser.exit(1, f"{exc}\n")
    except OSError as exc:
        parser.exit(1, f"cpp2cs convert failed: {exc}\nRun with --verbose for more details.\n")

    print(f"Converted {len(result.written)} file(s) into {_relativize(result.output_dir)}")
    if result.warnings:
        print(f"{len(result.warnings)} warning(s); see the log for details")


def _relativize(path: Path | None) -> str:
    if path is None:
        return ""
    try:
        return str(path.resolve().relative_to(Path.cwd()))
    except ValueError:
        return str(path)


if __name__ == "__main__":
    main(sys.argv[1:])
