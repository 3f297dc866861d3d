"""Recognition of object-like ``#define`` directives and their C# constant typing."""

from __future__ import annotations

import re
from typing import List, Optional, Tuple

from ..models import DefineModel
from ..textutil import split_trailing_comment

_DEFINE = re.compile(r"^\s*#\s*define\s+(?P<name>\w+)(?P<params>\()?(?P<rest>.*)$")
_CHAR_MACRO = re.compile(r"^_T\(\s*('(?:\\.|[^'])*')\s*\)$")
_STRING_MACRO = re.compile(r'^_T?\(\s*("(?:\\.|[^"])*")\s*\)$')
_CHAR_LITERAL = re.compile(r"^'(?:\\.|[^'])*'$")
_STRING_LITERAL = re.compile(r'^"(?:\\.|[^"])*"$')
_INT_LITERAL = re.compile(r"^[-+]?(?:0[xX][0-9a-fA-F]+|\d+)[uU]?$")
_LONG_LITERAL = re.compile(r"^[-+]?(?:0[xX][0-9a-fA-F]+|\d+)[uU]?[lL]{1,2}$")
_DOUBLE_LITERAL = re.compile(r"^[-+]?(?:\d+\.\d*|\.\d+|\d+)(?:[eE][-+]?\d+)?[dD]?$")

_TRUE_WORDS = {"TRUE", "YES", "OK", "true"}
_FALSE_WORDS = {"FALSE", "NO", "NOTOK", "false"}


def split_define(line: str) -> Optional[Tuple[str, str, str]]:
    """Return ``(name, value, trailing_comment)`` for an object-like define.

    Function-like macros and valueless defines (include guards) yield ``None``.
    """
    match = _DEFINE.match(line)
    if not match or match.group("params"):
        return None
    value, comment = split_trailing_comment(match.group("rest"))
    value = value.strip()
    if not value:
        return None
    return match.group("name"), value, comment


def infer_type(value: str) -> str:
    """Infer the C# type of a define value."""
    value = value.strip()
    if _CHAR_MACRO.match(value) or _CHAR_LITERAL.match(value):
        return "char"
    if _STRING_MACRO.match(value) or _STRING_LITERAL.match(value):
        return "string"
    if value in _TRUE_WORDS or value in _FALSE_WORDS:
        return "bool"
    if _INT_LITERAL.match(value):
        return "int"
    if _LONG_LITERAL.match(value):
        return "long"
    if _DOUBLE_LITERAL.match(value):
        return "double"
    # Expressions and references to other defines are treated as integral constants.
    return "int"


def normalize_value(value: str) -> str:
    """Strip ``_T()``/``_()`` wrappers and map boolean words to C# literals."""
    value = value.strip()
    for pattern in (_CHAR_MACRO, _STRING_MACRO):
        match = pattern.match(value)
        if match:
            return match.group(1)
    if value in _TRUE_WORDS:
        return "true"
    if value in _FALSE_WORDS:
        return "false"
    return value


def build_define(
    line: str,
    *,
    origin_file: str,
    from_header: bool,
    preceding_comments: Optional[List[str]] = None,
    position: int = 0,
) -> Optional[DefineModel]:
    parts = split_define(line)
    if parts is None:
        return None
    name, value, comment = parts
    return DefineModel(
        name=name,
        value=value,
        cs_type=infer_type(value),
        cs_value=normalize_value(value),
        origin_file=origin_file,
        from_header=from_header,
        preceding_comments=list(preceding_comments or []),
        trailing_comment=comment,
        position=position,
    )


__all__ = ["build_define", "infer_type", "normalize_value", "split_define"]
