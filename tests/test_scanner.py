"""Tests for cpp2cs.scanner."""

from __future__ import annotations

from pathlib import Path

import pytest

from cpp2cs.scanner import SourceScanner, build_rules


def _write(path: Path, content: str = "") -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


def _names(paths, root: Path) -> list[str]:
    return [path.relative_to(root.resolve()).as_posix() for path in paths]


def test_scan_splits_headers_and_sources_in_sorted_order(tmp_path: Path) -> None:
    _write(tmp_path / "b" / "Zeta.h")
    _write(tmp_path / "Alpha.h")
    _write(tmp_path / "Alpha.cpp")
    _write(tmp_path / "b" / "Beta.CPP")
    _write(tmp_path / "readme.txt")
    _write(tmp_path / ".git" / "Hidden.h")
    _write(tmp_path / "Debug" / "Build.cpp")

    found = SourceScanner().scan(tmp_path)

    assert _names(found.headers, tmp_path) == ["Alpha.h", "b/Zeta.h"]
    assert _names(found.sources, tmp_path) == ["Alpha.cpp", "b/Beta.CPP"]
    assert len(found) == 4


def test_exclude_patterns_and_skipped_output(tmp_path: Path) -> None:
    _write(tmp_path / "Keep.h")
    _write(tmp_path / "third_party" / "Lib.h")
    _write(tmp_path / "tests" / "Mock.cpp")
    _write(tmp_path / "gen" / "Auto.cpp")
    _write(tmp_path / "converted" / "Old.h")

    scanner = SourceScanner(["third_party/", "tests/Mock.cpp", "Auto*"])
    found = scanner.scan(tmp_path, skip=[tmp_path / "converted"])

    assert _names(found.headers, tmp_path) == ["Keep.h"]
    assert found.sources == []


def test_directory_only_rule_ignores_files() -> None:
    (rule,) = build_rules(["build/"])

    assert rule.matches("build", is_dir=True) is True
    assert rule.matches("build", is_dir=False) is False
    assert build_rules(["", "  "]) == []


def test_scan_rejects_missing_root(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        SourceScanner().scan(tmp_path / "missing")


def test_select_skips_missing_and_unsupported_files(tmp_path: Path, caplog) -> None:
    _write(tmp_path / "Sample.h")
    _write(tmp_path / "Sample.cpp")
    _write(tmp_path / "notes.txt")

    with caplog.at_level("WARNING", logger="cpp2cs.scanner"):
        found = SourceScanner().select(tmp_path, ["Sample.cpp", " Sample.h ", "Missing.cpp", "notes.txt", ""])

    assert _names(found.headers, tmp_path) == ["Sample.h"]
    assert _names(found.sources, tmp_path) == ["Sample.cpp"]
    assert "File 'Missing.cpp' not found" in caplog.text
    assert "Unsupported file type '.txt'" in caplog.text
