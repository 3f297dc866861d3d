"""Static C++ to C# type-name lookup and literal conversion."""

from __future__ import annotations

import re
from typing import Dict, Mapping, Optional

# C++ primitive names that C# spells the same way. Domain types (CString, agrint, ...)
# are kept verbatim for a later, hand-written compatibility layer.
_PRIMITIVES: Dict[str, str] = {
    "bool": "bool",
    "char": "char",
    "double": "double",
    "float": "float",
    "int": "int",
    "long": "long",
    "short": "short",
    "void": "void",
}

_TEXT_MACRO = re.compile(r"\b_T?\(\s*(\"(?:\\.|[^\"\\])*\"|'(?:\\.|[^'\\])*')\s*\)")
_LITERAL = re.compile(r"(\"(?:\\.|[^\"\\\n])*\"|'(?:\\.|[^'\\\n])*')")
_WORDS = {"NULL": "null", "nullptr": "null", "TRUE": "true", "FALSE": "false"}
_WORD = re.compile(r"\b(NULL|nullptr|TRUE|FALSE)\b")


class TypeMapper:
    """Maps type names and rewrites C++-only literals in values and bodies."""

    def __init__(self, overrides: Optional[Mapping[str, str]] = None) -> None:
        self.table: Dict[str, str] = dict(_PRIMITIVES)
        if overrides:
            self.table.update(overrides)

    def map_type(self, type_text: str) -> str:
        """C# spelling of a C++ type; pointer and reference markers and a leading ``const`` drop."""
        type_text = type_text.strip()
        if not type_text:
            return "void"
        if type_text.startswith("const "):
            type_text = type_text[len("const ") :].strip()
        type_text = type_text.rstrip("*&").strip()
        if type_text in self.table:
            return self.table[type_text]
        return re.sub(r"[A-Za-z_][\w:]*", lambda m: self.table.get(m.group(0), m.group(0)), type_text)

    def convert_value(self, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        return self.convert_body(value.strip())

    def convert_body(self, text: str) -> str:
        """Strip ``_T()`` wrappers and spell NULL/TRUE/FALSE the C# way outside literals."""
        text = _TEXT_MACRO.sub(lambda m: m.group(1), text)
        parts = _LITERAL.split(text)
        # Odd indices are string or char literals.
        for index in range(0, len(parts), 2):
            parts[index] = _WORD.sub(lambda m: _WORDS[m.group(1)], parts[index])
        return "".join(parts)


__all__ = ["TypeMapper"]
