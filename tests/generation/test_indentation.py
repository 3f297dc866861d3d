"""Tests for cpp2cs.generation.indentation and the line writer."""

from __future__ import annotations

import pytest

from cpp2cs.generation.indentation import (
    INDENT_UNIT,
    IndentLevel,
    collapse_blank_lines,
    detect_indent,
    reindent,
)
from cpp2cs.generation.writer import CodeWriter


@pytest.mark.parametrize("baseline", [0, 2, 8, 13])
@pytest.mark.parametrize("level", [IndentLevel.TYPE, IndentLevel.MEMBER, IndentLevel.BODY])
def test_reindent_homes_block_at_target_level(baseline: int, level: int) -> None:
    pad = " " * baseline
    text = f"{pad}if (x)\n{pad}{{\n\n{pad}    y();   \n{pad}}}"

    lines = reindent(text, level)

    widths = [len(line) - len(line.lstrip(" ")) for line in lines if line]
    assert min(widths) == level * INDENT_UNIT
    assert lines[3] == " " * (level * INDENT_UNIT + 4) + "y();"
    assert lines[2] == " " * (level * INDENT_UNIT)
    assert all(line.strip() or line == " " * (level * INDENT_UNIT) for line in lines)


def test_reindent_collapses_blank_runs_and_trims_edges() -> None:
    lines = reindent("\n\n    a\n\n  \n\n    b\n\n", 1)

    assert lines == ["    a", "    ", "    b"]


def test_reindent_interior_blank_line_takes_target_indent() -> None:
    assert reindent("a();\n\nb();", 3) == ["            a();", " " * 12, "            b();"]


def test_reindent_expands_tabs() -> None:
    assert reindent("\tx\n\t\ty", 1) == ["    x", "        y"]


def test_detect_indent_uses_minimum_of_non_blank_lines() -> None:
    assert detect_indent("  a\n\n    b\n") == 2
    assert detect_indent("") == 0


def test_collapse_blank_lines_normalizes_whitespace_lines() -> None:
    assert collapse_blank_lines(["a", "  ", "", "b", "\t"]) == ["a", "", "b", ""]
    assert collapse_blank_lines(["a", "", "  ", "b"], blank="    ") == ["a", "    ", "b"]


def test_writer_blank_never_duplicates_or_leads() -> None:
    writer = CodeWriter()
    writer.blank()
    writer.line("a", 1)
    writer.blank()
    writer.blank()
    writer.line("b", 1)
    writer.blank()

    assert writer.render() == "    a\n\n    b\n"


def test_writer_shift_moves_nested_levels_only() -> None:
    writer = CodeWriter(shift=-1)
    writer.line("namespace X;")
    writer.line("class A", IndentLevel.TYPE)
    writer.line("int x;", IndentLevel.MEMBER)
    writer.block("  y();", IndentLevel.BODY)

    assert writer.render("\r\n") == "namespace X;\r\nclass A\r\n    int x;\r\n        y();\r\n"
