"""CLI parser behaviour tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from cpp2cs.cli import _build_parser, main, split_targets


def test_cli_accepts_verbose_before_command() -> None:
    parser = _build_parser()
    args = parser.parse_args(["--verbose", "convert", "src"])
    assert args.verbose is True
    assert args.command == "convert"
    assert args.source_dir == "src"


def test_cli_accepts_verbose_after_command() -> None:
    parser = _build_parser()
    args = parser.parse_args(["convert", "src", "--verbose"])
    assert args.verbose is True
    assert args.targets == []


def test_cli_accepts_targets_and_config() -> None:
    parser = _build_parser()
    args = parser.parse_args(["convert", "src", "A.h,A.cpp", "out", "--config", "custom.yml"])
    assert args.targets == ["A.h,A.cpp", "out"]
    assert args.config == Path("custom.yml")


@pytest.mark.parametrize(
    ("targets", "expected"),
    [
        ([], (None, None)),
        (["out"], (None, Path("out"))),
        (["Sample.h"], (["Sample.h"], None)),
        (["Sample.h, Sample.cpp"], (["Sample.h", "Sample.cpp"], None)),
        (["Sample.h,Sample.cpp", "out"], (["Sample.h", "Sample.cpp"], Path("out"))),
    ],
)
def test_split_targets(targets, expected) -> None:
    assert split_targets(targets) == expected


def test_main_without_source_prints_usage(capsys) -> None:
    main([])

    assert "usage: cpp2cs" in capsys.readouterr().out


def test_main_exits_when_source_dir_is_missing(tmp_path: Path, capsys) -> None:
    with pytest.raises(SystemExit) as excinfo:
        main(["convert", str(tmp_path / "missing")])

    assert excinfo.value.code == 1
    assert "Source directory not found" in capsys.readouterr().err


def test_main_reports_invalid_config(source_tree, capsys) -> None:
    source_tree.write({".cpp2cs.yml": "line_ending: cr\n"})

    with pytest.raises(SystemExit) as excinfo:
        main(["convert", str(source_tree.path())])

    assert excinfo.value.code == 1
    assert "line_ending must be one of" in capsys.readouterr().err


def test_main_converts_into_output_directory(source_tree, tmp_path: Path, capsys) -> None:
    source_tree.write(
        {
            "Sample.h": """
            class CSample
            {
            public:
                void Run();
            };
            """,
            "Sample.cpp": """
            #include "Sample.h"

            void CSample::Run()
            {
            }
            """,
        }
    )
    output_dir = tmp_path / "out"

    main(["convert", str(source_tree.path()), str(output_dir)])

    assert (output_dir / "Sample.cs").is_file()
    assert "Converted 1 file(s)" in capsys.readouterr().out
