"""Rendering of data members."""

from __future__ import annotations

from typing import List, Optional

from ..models import MemberModel
from .indentation import IndentLevel
from .types import TypeMapper
from .writer import CodeWriter


def member_declaration(member: MemberModel, mapper: TypeMapper) -> str:
    """The C# declaration line of ``member`` without indentation or comments."""
    initializer = mapper.convert_value(member.initializer)
    is_array = member.is_array or bool(initializer and initializer.startswith("{"))
    member_type = mapper.map_type(member.type)

    modifiers: List[str] = [member.visibility.value]
    if member.is_const and initializer is not None and not is_array:
        # C# constants are implicitly static.
        modifiers.append("const")
    else:
        if member.is_static:
            modifiers.append("static")
        if member.is_const:
            modifiers.append("readonly")

    value: Optional[str] = initializer
    if is_array:
        if value is None and member.array_size:
            value = f"new {member_type}[{member.array_size}]"
        member_type += "[]"

    declaration = f"{' '.join(modifiers)} {member_type} {member.name}"
    if value is not None:
        declaration += f" = {value}"
    return declaration + ";"


def render_member(writer: CodeWriter, member: MemberModel, mapper: TypeMapper, level: int = IndentLevel.MEMBER) -> None:
    if member.region_start:
        writer.blank()
        writer.line(member.region_start, level)
        writer.line()
    writer.lines(member.preceding_comments, level)

    declaration = member_declaration(member, mapper)
    comment_first, _, comment_rest = member.trailing_comment.partition("\n")
    first, _, rest = declaration.partition("\n")
    if rest:
        # A multi-line brace initializer keeps its own layout; the comment follows it.
        writer.line(first, level)
        writer.block(rest + (f" {comment_first}" if comment_first else ""), level)
    else:
        writer.line(f"{declaration} {comment_first}" if comment_first else declaration, level)
    if comment_rest:
        writer.block(comment_rest, level + 1)

    if member.region_end:
        writer.blank()
        writer.line(member.region_end, level)


__all__ = ["member_declaration", "render_member"]
