"""Tests for cpp2cs.parsing.defines."""

from __future__ import annotations

import pytest

from cpp2cs.parsing.defines import build_define, infer_type, normalize_value, split_define


def test_split_define_returns_name_value_and_comment() -> None:
    assert split_define("#define MAX_COUNT 10 // limit") == ("MAX_COUNT", "10", "// limit")
    assert split_define("  #  define NAME _T(\"a//b\")") == ("NAME", '_T("a//b")', "")


@pytest.mark.parametrize(
    "line",
    [
        "#define SAMPLE_H",
        "#define MAX(a, b) ((a) > (b) ? (a) : (b))",
        "#include <afx.h>",
    ],
)
def test_guards_and_function_like_macros_are_skipped(line: str) -> None:
    assert split_define(line) is None


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("'x'", "char"),
        ("_T('x')", "char"),
        ('"abc"', "string"),
        ('_T("abc")', "string"),
        ('_("abc")', "string"),
        ("42", "int"),
        ("-7", "int"),
        ("0x1F", "int"),
        ("42L", "long"),
        ("3.14", "double"),
        ("2D", "double"),
        ("TRUE", "bool"),
        ("NOTOK", "bool"),
        ("OTHER_DEFINE + 1", "int"),
    ],
)
def test_infer_type(value: str, expected: str) -> None:
    assert infer_type(value) == expected


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ('_T("abc")', '"abc"'),
        ("_T('x')", "'x'"),
        ("YES", "true"),
        ("OK", "true"),
        ("NOTOK", "false"),
        ("FALSE", "false"),
        ("10", "10"),
    ],
)
def test_normalize_value(value: str, expected: str) -> None:
    assert normalize_value(value) == expected


def test_source_define_renders_as_private_constant() -> None:
    define = build_define("#define MAX 10 // limit", origin_file="Sample", from_header=False)

    assert define is not None
    assert define.access == "private"
    assert define.to_csharp() == "private const int MAX = 10; // limit"


def test_header_define_renders_as_internal_constant() -> None:
    define = build_define('#define TITLE _T("Sample")', origin_file="Sample", from_header=True)

    assert define is not None
    assert define.to_csharp() == 'internal const string TITLE = "Sample";'
    assert define.to_csharp("public") == 'public const string TITLE = "Sample";'
