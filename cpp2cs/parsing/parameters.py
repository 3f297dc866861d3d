"""Parameter list tokenizer and component extractor.

C++ parameter lists in the legacy code base carry comments in every imaginable
position, span several lines and disagree on spacing between header and source.
Parsing happens in two steps:

1. :func:`split_parameter_blocks` scans the raw list once and cuts it into blocks at
   top-level commas, deciding which block a trailing comment belongs to.
2. :func:`extract_components` turns each block into a :class:`ParameterModel` with a
   canonical signature that is stable across spacing and ``const`` placement.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Optional, Tuple

from ..models import CommentPosition, ParameterComment, ParameterModel

_MODIFIERS = {"*", "&", "const"}
# A lone builtin keyword is a type, never a parameter name.
_BUILTIN_TYPE_WORDS = {
    "bool",
    "char",
    "double",
    "float",
    "int",
    "long",
    "short",
    "signed",
    "unsigned",
    "void",
    "wchar_t",
}
_CONST_WORD = re.compile(r"\bconst\b")
_TEMPLATE_SPACING = re.compile(r"\s*([<>,])\s*")
_WHITESPACE = re.compile(r"\s+")


@dataclass(frozen=True)
class ParameterBlock:
    """Raw text of one parameter, including the comments that belong to it."""

    raw_text: str
    index: int
    starts_on_new_line: bool
    leading_indent: int


def split_parameter_blocks(text: str) -> List[ParameterBlock]:
    """Split the text between a method's parentheses into parameter blocks."""
    if not text or not text.strip():
        return []

    blocks: List[ParameterBlock] = []
    current: List[str] = []
    length = len(text)

    in_line_comment = False
    in_block_comment = False
    quote = ""
    escape_next = False
    paren_depth = 0
    angle_depth = 0

    starts_on_new_line = False
    leading_indent = 0
    seen_content = False

    i = 0
    while i < length:
        ch = text[i]
        nxt = text[i + 1] if i + 1 < length else ""

        if ch == "\n":
            current.append(ch)
            in_line_comment = False
            if not seen_content:
                starts_on_new_line = True
            i += 1
            continue

        if quote:
            current.append(ch)
            if escape_next:
                escape_next = False
            elif ch == "\\":
                escape_next = True
            elif ch == quote:
                quote = ""
            i += 1
            continue

        if ch in "\"'" and not in_block_comment and not in_line_comment:
            quote = ch
            current.append(ch)
            i += 1
            continue

        if in_line_comment:
            current.append(ch)
            i += 1
            continue

        if not in_block_comment and ch == "/" and nxt == "/":
            in_line_comment = True
            current.append(ch)
            i += 1
            continue

        if in_block_comment:
            current.append(ch)
            if ch == "*" and nxt == "/":
                current.append(nxt)
                in_block_comment = False
                i += 2
            else:
                i += 1
            continue

        if ch == "/" and nxt == "*":
            in_block_comment = True
            current.append(ch)
            i += 1
            continue

        if ch in "()<>":
            if ch == "(":
                paren_depth += 1
            elif ch == ")":
                paren_depth = max(0, paren_depth - 1)
            elif ch == "<":
                angle_depth += 1
            else:
                angle_depth = max(0, angle_depth - 1)
            current.append(ch)
            i += 1
            continue

        if not seen_content and ch in " \t":
            if starts_on_new_line:
                leading_indent += 1
            current.append(ch)
            i += 1
            continue

        if not seen_content and ch != "\r":
            seen_content = True

        if ch == "," and paren_depth == 0 and angle_depth == 0:
            trailing, next_index, consumed_newline = _claim_trailing_comment(text, i + 1)
            current.append(trailing)
            block_text = "".join(current)
            if block_text.strip():
                blocks.append(
                    ParameterBlock(block_text, len(blocks), starts_on_new_line, leading_indent)
                )
            current = []
            starts_on_new_line = consumed_newline
            leading_indent = 0
            seen_content = False
            i = next_index
            continue

        current.append(ch)
        i += 1

    final_text = "".join(current)
    if final_text.strip():
        blocks.append(ParameterBlock(final_text, len(blocks), starts_on_new_line, leading_indent))
    return blocks


def _claim_trailing_comment(text: str, start: int) -> Tuple[str, int, bool]:
    """Decide how much of the text after a separator comma belongs to the previous block.

    Returns the claimed text, the index where scanning resumes and whether a newline
    was consumed. A line comment always belongs to the previous parameter. A block
    comment belongs to it only when nothing but whitespace follows up to the newline.
    """
    length = len(text)
    index = start
    while index < length and text[index] in " \t":
        index += 1

    if text.startswith("//", index):
        end = text.find("\n", index)
        if end < 0:
            return text[start:], length, False
        return text[start : end + 1], end + 1, True

    if text.startswith("/*", index):
        close = text.find("*/", index + 2)
        after = length if close < 0 else close + 2
        scan = after
        while scan < length:
            ch = text[scan]
            if ch == "\n":
                return text[start : scan + 1], scan + 1, True
            if ch not in " \t\r":
                # Comment introduces the next parameter.
                return "", start, False
            scan += 1
        return text[start:after], after, False

    return "", start, False


def extract_components(block: ParameterBlock) -> ParameterModel:
    """Convert one parameter block into a structured parameter."""
    cleaned, prefix, suffix = _extract_comments(block.raw_text)
    type_text, name, default_value, is_array = _parse_type_name_default(cleaned)

    type_tokens = tokenize_parameter(type_text)
    is_const = "const" in type_tokens
    is_pointer = "*" in type_text
    is_reference = "&" in type_text and "&&" not in type_text

    base_type = _CONST_WORD.sub("", type_text).replace("&", "").replace("*", "")
    base_type = _WHITESPACE.sub(" ", base_type).strip()
    if is_array:
        base_type += "[]"

    return ParameterModel(
        base_type=base_type,
        name=name,
        is_const=is_const,
        is_pointer=is_pointer,
        is_reference=is_reference,
        default_value=default_value,
        comments=prefix + suffix,
        canonical_signature=canonical_signature(type_text),
        has_line_break=block.starts_on_new_line,
        original_indent=block.leading_indent,
        original_text=f"{type_text} {name}" if name else type_text,
    )


def parse_parameters(text: str) -> List[ParameterModel]:
    """Parse a whole parameter list; ``(void)`` yields no parameters."""
    parameters = [extract_components(block) for block in split_parameter_blocks(text)]
    if len(parameters) == 1 and not parameters[0].name and parameters[0].base_type == "void":
        if not parameters[0].is_pointer:
            return []
    return parameters


def _extract_comments(
    text: str,
) -> Tuple[str, List[ParameterComment], List[ParameterComment]]:
    prefix: List[ParameterComment] = []
    suffix: List[ParameterComment] = []
    cleaned: List[str] = []
    comment: List[str] = []

    in_line_comment = False
    in_block_comment = False
    quote = ""
    seen_content = False

    i = 0
    length = len(text)
    while i < length:
        ch = text[i]
        nxt = text[i + 1] if i + 1 < length else ""

        if in_line_comment:
            comment.append(ch)
            if ch == "\n":
                suffix.append(ParameterComment("".join(comment).strip(), CommentPosition.SUFFIX))
                comment = []
                in_line_comment = False
            i += 1
            continue

        if in_block_comment:
            comment.append(ch)
            if ch == "*" and nxt == "/":
                comment.append(nxt)
                position = CommentPosition.SUFFIX if seen_content else CommentPosition.PREFIX
                target = suffix if seen_content else prefix
                target.append(ParameterComment("".join(comment).strip(), position))
                comment = []
                in_block_comment = False
                i += 2
            else:
                i += 1
            continue

        if quote:
            cleaned.append(ch)
            if ch == "\\" and nxt:
                cleaned.append(nxt)
                i += 2
                continue
            if ch == quote:
                quote = ""
            i += 1
            continue

        if ch == "/" and nxt == "/":
            in_line_comment = True
            comment.append(ch)
            i += 1
            continue

        if ch == "/" and nxt == "*":
            in_block_comment = True
            comment.append(ch)
            i += 1
            continue

        if ch in {'"', "'"}:
            quote = ch
        if ch not in " \t\n\r,":
            seen_content = True
        cleaned.append(ch)
        i += 1

    if comment and (in_line_comment or in_block_comment):
        position = CommentPosition.SUFFIX if in_line_comment or seen_content else CommentPosition.PREFIX
        target = suffix if position is CommentPosition.SUFFIX else prefix
        target.append(ParameterComment("".join(comment).strip(), position))

    return "".join(cleaned), prefix, suffix


def _parse_type_name_default(text: str) -> Tuple[str, str, Optional[str], bool]:
    text = text.rstrip(", \t\n\r")
    default_value: Optional[str] = None
    equals = _find_default_separator(text)
    if equals >= 0:
        default_value = text[equals + 1 :].strip()
        text = text[:equals].strip()
    type_text, name, is_array = _split_type_and_name(text)
    return type_text, name, default_value, is_array


def _find_default_separator(text: str) -> int:
    depth = 0
    quote = ""
    for index, ch in enumerate(text):
        if quote:
            if ch == quote:
                quote = ""
            continue
        if ch in {'"', "'"}:
            quote = ch
        elif ch in "(<[":
            depth += 1
        elif ch in ")>]":
            depth -= 1
        elif ch == "=" and depth == 0:
            return index
    return -1


def _split_type_and_name(text: str) -> Tuple[str, str, bool]:
    text = text.strip()
    if not text:
        return "", "", False

    tokens = tokenize_parameter(text)
    if not tokens:
        return text, "", False
    if tokens[-1] in _MODIFIERS:
        return text, "", False

    name_index = -1
    for index in range(len(tokens) - 1, -1, -1):
        token = tokens[index]
        if _is_array_token(token) or token in _MODIFIERS:
            continue
        name_index = index
        break

    is_array = any(_is_array_token(token) for token in tokens)
    if name_index <= 0 or tokens[name_index] in _BUILTIN_TYPE_WORDS or "<" in tokens[name_index]:
        # Only a type is present, e.g. ``int`` or ``unsigned long`` in a declaration.
        type_tokens = [t for t in tokens if not _is_array_token(t)]
        return join_type_tokens(type_tokens), "", is_array

    name = tokens[name_index]
    type_tokens = [
        token
        for index, token in enumerate(tokens)
        if index != name_index and not _is_array_token(token)
    ]
    return join_type_tokens(type_tokens), name, is_array


def _is_array_token(token: str) -> bool:
    return token.startswith("[") and token.endswith("]")


def tokenize_parameter(text: str) -> List[str]:
    """Split a declaration into tokens; ``*``/``&`` stand alone, templates stay whole."""
    tokens: List[str] = []
    current: List[str] = []
    angle_depth = 0
    in_array = False

    def flush() -> None:
        if current:
            tokens.append("".join(current))
            current.clear()

    for ch in text:
        if ch == "[" and angle_depth == 0:
            flush()
            in_array = True
            current.append(ch)
            continue
        if in_array:
            current.append(ch)
            if ch == "]":
                flush()
                in_array = False
            continue
        if ch == "<":
            angle_depth += 1
            current.append(ch)
            continue
        if ch == ">":
            angle_depth = max(0, angle_depth - 1)
            current.append(ch)
            continue
        if angle_depth > 0:
            current.append(ch)
            continue
        if ch.isspace():
            flush()
            continue
        if ch in "*&":
            flush()
            tokens.append(ch)
            continue
        current.append(ch)
    flush()
    return tokens


def join_type_tokens(tokens: List[str]) -> str:
    """Join type tokens with no space before or after ``*`` and ``&``."""
    parts: List[str] = []
    for index, token in enumerate(tokens):
        if index > 0 and token not in {"*", "&"} and tokens[index - 1] not in {"*", "&"}:
            parts.append(" ")
        parts.append(token)
    return "".join(parts).strip()


def normalize_type(text: str) -> str:
    """Canonical spacing for a free-standing type such as a return type."""
    return join_type_tokens(tokenize_parameter(text))


def canonical_signature(type_text: str) -> str:
    """Matching key for a parameter type: ``const`` first, then the type, then ``*``/``&`` in order.

    Every marker is kept, so ``char*`` and ``char**`` key differently.
    """
    tokens = tokenize_parameter(type_text)
    normalized: List[str] = []
    if "const" in tokens:
        normalized.append("const")
    for token in tokens:
        if token in _MODIFIERS:
            continue
        normalized.append(_TEMPLATE_SPACING.sub(r"\1", token))
    markers = "".join(token for token in tokens if token in {"*", "&"})
    if markers:
        normalized.append(markers)
    return " ".join(normalized)


__all__ = [
    "ParameterBlock",
    "canonical_signature",
    "extract_components",
    "join_type_tokens",
    "normalize_type",
    "parse_parameters",
    "split_parameter_blocks",
    "tokenize_parameter",
]
