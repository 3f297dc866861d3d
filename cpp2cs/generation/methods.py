"""Rendering of method signatures and bodies.

Signatures stay on one line unless a parameter carries a positioned comment. Then each
parameter gets its own line: prefix comments first, suffix comments after, and the
separating comma lands before a ``//`` suffix but after a ``/* */`` one so the comment
never swallows it.
"""

from __future__ import annotations

from typing import List, Optional, Sequence

from ..models import MethodModel, ParameterModel
from .indentation import IndentLevel
from .types import TypeMapper
from .writer import CodeWriter

CONSTRUCTOR_PLACEHOLDER = "// TODO: Initialize members"
METHOD_PLACEHOLDER = ("// TODO: Implementation not found", "throw new NotImplementedException();")


def parameter_text(parameter: ParameterModel, mapper: TypeMapper, index: int = 0) -> str:
    """One C# parameter without its comments."""
    modifier = ""
    if parameter.is_pointer and not parameter.is_const:
        modifier = "out "
    elif parameter.is_reference and not parameter.is_const:
        modifier = "ref "
    name = parameter.name or f"arg{index}"
    text = f"{modifier}{mapper.map_type(parameter.base_type)} {name}"
    if parameter.default_value:
        text += f" = {mapper.convert_value(parameter.default_value)}"
    return text


def has_positioned_comments(parameters: Sequence[ParameterModel]) -> bool:
    return any(p.comments for p in parameters)


def signature_lines(head: str, parameters: Sequence[ParameterModel], mapper: TypeMapper) -> List[str]:
    """Render ``head(params)``; continuation lines are returned with a leading tab marker.

    Lines starting with ``"\\t"`` belong one level deeper than the signature itself.
    """
    if not has_positioned_comments(parameters):
        joined = ", ".join(parameter_text(p, mapper, i) for i, p in enumerate(parameters))
        return [f"{head}({joined})"]

    lines = [f"{head}("]
    last = len(parameters) - 1
    for index, parameter in enumerate(parameters):
        text = parameter_text(parameter, mapper, index)
        for comment in parameter.prefix_comments:
            if comment.is_line_comment:
                lines.append("\t" + comment.text)
            else:
                text = f"{comment.text} {text}"
        line_suffix = [c.text for c in parameter.suffix_comments if c.is_line_comment]
        block_suffix = [c.text for c in parameter.suffix_comments if not c.is_line_comment]
        if block_suffix:
            text += " " + " ".join(block_suffix)
        closing = ")" if index == last else ","
        if line_suffix:
            if index == last:
                lines.append("\t" + f"{text} {' '.join(line_suffix)}")
                lines.append(")")
                continue
            text += f"{closing} {' '.join(line_suffix)}"
        else:
            text += closing
        lines.append("\t" + text)
    return lines


def method_head(method: MethodModel, mapper: TypeMapper, owner_name: str, *, interface: bool = False) -> str:
    if method.is_destructor:
        return f"~{owner_name}"
    name = owner_name if method.is_constructor else method.name
    if interface:
        return f"{mapper.map_type(method.return_type)} {name}"
    modifiers = [method.visibility.value]
    if method.is_static:
        modifiers.append("static")
    elif method.is_virtual:
        modifiers.append("virtual")
    if method.is_constructor:
        return f"{' '.join(modifiers)} {name}"
    return f"{' '.join(modifiers)} {mapper.map_type(method.return_type)} {name}"


def write_signature(writer: CodeWriter, lines: Sequence[str], level: int, suffix: str = "") -> None:
    for index, text in enumerate(lines):
        if index == len(lines) - 1:
            text += suffix
        if text.startswith("\t"):
            writer.line(text[1:], level + 1)
        else:
            writer.line(text, level)


def body_source(method: MethodModel) -> Optional[str]:
    if method.body is not None:
        return method.body
    if method.has_inline_body:
        return method.inline_body
    return None


def write_body(
    writer: CodeWriter, method: MethodModel, mapper: TypeMapper, level: int, body: Optional[str] = None
) -> None:
    """Write ``{ ... }`` for ``method``; placeholders stand in for missing bodies."""
    body = body if body is not None else body_source(method)
    writer.line("{", level)
    for initializer in method.initializers:
        writer.line(f"{initializer.name} = {mapper.convert_value(initializer.value)};", level + 1)
    if body is not None:
        if body.strip():
            writer.block(mapper.convert_body(body), level + 1)
    elif method.is_constructor:
        if not method.initializers:
            writer.line(CONSTRUCTOR_PLACEHOLDER, level + 1)
    else:
        writer.lines(METHOD_PLACEHOLDER, level + 1)
    writer.line("}", level)


def render_method(
    writer: CodeWriter,
    method: MethodModel,
    mapper: TypeMapper,
    owner_name: str,
    level: int = IndentLevel.MEMBER,
) -> None:
    for marker in (method.source_region_start, method.header_region_start):
        if marker:
            writer.blank()
            writer.line(marker, level)
            writer.line()
    writer.lines(method.header_comments, level)
    writer.lines(method.source_comments, level)

    lines = signature_lines(method_head(method, mapper, owner_name), method.parameters, mapper)
    body = body_source(method)
    if (
        len(lines) == 1
        and method.body is None
        and method.has_inline_body
        and "\n" not in body
        and not method.initializers
    ):
        inline = mapper.convert_body(body.strip())
        writer.line(f"{lines[0]} {{ {inline} }}" if inline else f"{lines[0]} {{ }}", level)
    else:
        write_signature(writer, lines, level)
        write_body(writer, method, mapper, level)

    for marker in (method.header_region_end, method.source_region_end):
        if marker:
            writer.blank()
            writer.line(marker, level)


__all__ = [
    "CONSTRUCTOR_PLACEHOLDER",
    "METHOD_PLACEHOLDER",
    "body_source",
    "has_positioned_comments",
    "method_head",
    "parameter_text",
    "render_method",
    "signature_lines",
    "write_body",
    "write_signature",
]
