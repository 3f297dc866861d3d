"""Header model builder.

Scans a C++ header with a small state machine. Outside a type the scanner collects
``#define`` directives and looks for ``class``/``struct``/``typedef struct`` heads;
inside a type it handles one construct per step (access label, region marker, method
declaration or definition, data member) until the type's closing brace.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Optional, Set

from ..attribution import choose_define_owner
from ..logging import get_logger
from ..models import (
    DefineModel,
    HeaderModel,
    MemberInitializer,
    MemberModel,
    MethodModel,
    StructVariant,
    TypeKind,
    TypeModel,
    Visibility,
)
from ..textutil import (
    find_matching,
    line_of,
    mask_code,
    normalize_block,
    normalize_newlines,
    read_source,
    split_top_level,
    split_trailing_comment,
)
from .comments import collect_preceding_comments, extract_banner_comments
from .defines import build_define, split_define
from .parameters import normalize_type, parse_parameters

_TYPE_KEYWORD = re.compile(r"[ \t]*(?P<typedef>typedef\s+)?(?P<kind>class|struct)\b")
_DECLSPEC = re.compile(r"__declspec\s*\(\s*(\w+)\s*\)")
_BASE_SPLIT = re.compile(r"(?<!:):(?!:)")
_BASE_QUALIFIERS = {"public", "private", "protected", "virtual"}
_CLOSE_TAIL = re.compile(r"\s*(?P<name>\w+)?\s*;")
_ACCESS = re.compile(r"^(?P<label>public|private|protected)\s*:(?!:)")
_REGION = re.compile(r"^#\s*(?:pragma\s+)?(?P<kind>region|endregion)\b\s*(?P<name>.*)$")
_PURE_VIRTUAL = re.compile(r"\)\s*(?:const\s*)?(?:override\s*)?=\s*0\s*;")
_SKIPPED_KEYWORDS = ("friend", "using", "typedef", "template", "static_assert")
_MACRO_LINE = re.compile(r"^[A-Z_][A-Z0-9_]*\s*\([^;{]*\)\s*;?$")
_NESTED_TYPE = re.compile(r"^(?:typedef\s+)?(?:class|struct|union|enum)\b")
_METHOD_KEYWORDS = {
    "virtual",
    "static",
    "inline",
    "explicit",
    "friend",
    "__inline",
    "__forceinline",
    "afx_msg",
}
_CONST_TAIL = re.compile(r"^\s*const\b")
_PURE_TAIL = re.compile(r"=\s*0\s*$")
_DEFAULTED_TAIL = re.compile(r"=\s*default\s*$")
_DELETED_TAIL = re.compile(r"=\s*delete\s*$")
_INITIALIZER = re.compile(r"^\s*(?P<name>[\w:]+)\s*[({](?P<value>.*)[)}]\s*$", re.DOTALL)
_MEMBER = re.compile(
    r"^(?P<quals>(?:(?:static|const|mutable|volatile)\s+)*)"
    r"(?P<type>(?:(?:unsigned|signed|long|short)\s+)*[\w:]+(?:\s*<.*>)?(?:\s+const\b)?(?:\s*[*&]+)?)"
    r"\s*(?P<name>\w+)\s*"
    r"(?:\[\s*(?P<size>[^\]]*?)\s*\])?\s*"
    r"(?:=\s*(?P<value>.+?))?\s*;$",
    re.DOTALL,
)

_VISIBILITY = {
    "public": Visibility.PUBLIC,
    "protected": Visibility.PROTECTED,
    "private": Visibility.PRIVATE,
}


class ScanState(Enum):
    OUTSIDE_TYPE = "outside"
    INSIDE_TYPE = "inside"


@dataclass
class _OpenType:
    model: TypeModel
    body_end: int
    is_typedef: bool
    visibility: Visibility
    pending_region: str = ""
    last_item: Optional[object] = None


@dataclass
class _TypeHead:
    kind: str
    name: str
    is_typedef: bool
    is_exported: bool
    base_names: List[str] = field(default_factory=list)


class HeaderParser:
    """Builds a :class:`HeaderModel` from header text."""

    def __init__(self) -> None:
        self._logger = get_logger("parsing.header")

    def parse_file(self, path: Path) -> HeaderModel:
        return self.parse(read_source(path), str(path))

    def parse(self, text: str, path: str = "") -> HeaderModel:
        scan = _HeaderScan(normalize_newlines(text), path, self._logger)
        return scan.run()


class _HeaderScan:
    def __init__(self, text: str, path: str, logger) -> None:
        self.text = text
        self.masked = mask_code(text)
        self.lines = text.split("\n")
        self.path = path
        self.stem = Path(path).stem if path else ""
        self.logger = logger
        self.claimed: Set[int] = set()
        self.types: List[TypeModel] = []
        self.defines: List[DefineModel] = []
        self.state = ScanState.OUTSIDE_TYPE
        self.current: Optional[_OpenType] = None
        self.order = 0

    def run(self) -> HeaderModel:
        banner, banner_lines = extract_banner_comments(self.lines)
        self.claimed.update(banner_lines)

        pos = 0
        length = len(self.text)
        while pos < length:
            current = self.current
            if self.state is ScanState.INSIDE_TYPE and current is not None:
                if pos >= current.body_end:
                    pos = self._close_type(current)
                    continue
                pos = self._inside(current, pos)
            else:
                pos = self._outside(pos)

        if self.current is not None:
            self.logger.warning("%s: type %s is missing its closing brace", self.stem, self.current.model.name)
            self._finish_type(self.current, closing_name=None)

        model = HeaderModel(path=self.path, stem=self.stem, types=self.types, banner_comments=banner)
        model.defines = list(self.defines)
        owner = choose_define_owner(self.types, self.stem)
        if owner is not None:
            owner.header_defines.extend(self.defines)
            owner.header_defines.sort(key=lambda define: define.position)
        elif self.defines:
            self.logger.debug("%s: no type can own %d define(s)", self.stem, len(self.defines))
        return model

    # Helpers -----------------------------------------------------------------

    def _line_end(self, pos: int, limit: Optional[int] = None) -> int:
        end = self.text.find("\n", pos)
        if end < 0:
            end = len(self.text)
        if limit is not None:
            end = min(end, limit)
        return end

    def _after_statement(self, end: int, limit: Optional[int] = None) -> int:
        """Resume after ``end``; skip the rest of the line when only ``;`` or blanks remain."""
        line_end = self._line_end(end, limit)
        rest = self.masked[end:line_end]
        if not rest.replace(";", "").strip():
            return line_end + 1 if limit is None or line_end < limit else line_end
        return end

    def _statement_end(self, pos: int, limit: int) -> int:
        """Index of the ``;`` or closing ``}`` that ends the statement starting at ``pos``."""
        paren = brace = 0
        for index in range(pos, limit):
            ch = self.masked[index]
            if ch == "(":
                paren += 1
            elif ch == ")":
                paren -= 1
            elif ch == "{":
                brace += 1
            elif ch == "}":
                brace -= 1
                if brace == 0 and paren == 0:
                    return index
            elif ch == ";" and paren == 0 and brace == 0:
                return index
        return limit - 1

    # Outside a type ------------------------------------------------------------

    def _outside(self, pos: int) -> int:
        line_end = self._line_end(pos)
        segment = self.text[pos:line_end]
        masked = self.masked[pos:line_end]
        stripped = segment.strip()
        if not masked.strip():
            return line_end + 1

        line_index = line_of(self.text, pos)
        if stripped.startswith("#"):
            if split_define(segment) is not None:
                comments, _ = collect_preceding_comments(self.lines, line_index, self.claimed)
                define = build_define(
                    segment,
                    origin_file=self.stem,
                    from_header=True,
                    preceding_comments=comments,
                    position=pos,
                )
                if define is not None:
                    self.defines.append(define)
            return line_end + 1

        head = self._match_type_head(pos)
        if head is not None:
            type_head, open_brace = head
            self._open_type(type_head, line_index, open_brace)
            return open_brace + 1

        brace = masked.find("{")
        if brace >= 0 and not re.match(r"^\s*(namespace\b|extern\s+\"C\")", segment):
            close = find_matching(self.masked, pos + brace)
            if close < 0:
                return len(self.text)
            self.logger.debug("%s: skipping block at line %d", self.stem, line_index + 1)
            return self._after_statement(close + 1)
        return line_end + 1

    def _match_type_head(self, pos: int) -> Optional[tuple]:
        match = _TYPE_KEYWORD.match(self.masked, pos)
        if not match:
            return None
        brace = self.masked.find("{", pos)
        semicolon = self.masked.find(";", pos)
        if brace < 0 or (0 <= semicolon < brace):
            return None
        head_text = self.masked[pos:brace]
        if "(" in _DECLSPEC.sub("", head_text):
            # A function returning a struct, not a type definition.
            return None
        is_exported = "dllexport" in _DECLSPEC.findall(head_text)
        head = _DECLSPEC.sub(" ", head_text)
        head = re.sub(r"^\s*(?:typedef\s+)?(?:class|struct)\b", " ", head)
        parts = _BASE_SPLIT.split(head, 1)
        name_part = parts[0]
        bases_part = parts[1] if len(parts) > 1 else ""
        identifiers = [token for token in re.findall(r"\w+", name_part) if token != "final"]
        base_names: List[str] = []
        for base in bases_part.split(","):
            words = [word for word in base.split() if word not in _BASE_QUALIFIERS]
            if words:
                base_names.append(" ".join(words))
        return (
            _TypeHead(
                kind=match.group("kind"),
                name=identifiers[-1] if identifiers else "",
                is_typedef=bool(match.group("typedef")),
                is_exported=is_exported,
                base_names=base_names,
            ),
            brace,
        )

    def _open_type(self, head: _TypeHead, line_index: int, open_brace: int) -> None:
        close = find_matching(self.masked, open_brace)
        if close < 0:
            close = len(self.text)
        body = self.masked[open_brace + 1 : close]
        kind = TypeKind.STRUCT if head.kind == "struct" else TypeKind.CLASS
        if kind is TypeKind.CLASS and _PURE_VIRTUAL.search(body):
            kind = TypeKind.INTERFACE

        variant = None
        if kind is TypeKind.STRUCT:
            if head.is_typedef:
                variant = StructVariant.TYPEDEF_TAG if head.name else StructVariant.TYPEDEF
            else:
                variant = StructVariant.SIMPLE

        comments, _ = collect_preceding_comments(self.lines, line_index, self.claimed)
        model = TypeModel(
            name=head.name,
            kind=kind,
            is_exported=head.is_exported,
            base_names=head.base_names,
            preceding_comments=comments,
            header_file=self.stem,
            struct_variant=variant,
        )
        self.current = _OpenType(
            model=model,
            body_end=close,
            is_typedef=head.is_typedef,
            visibility=model.default_visibility,
        )
        self.state = ScanState.INSIDE_TYPE

    def _close_type(self, current: _OpenType) -> int:
        tail_start = current.body_end + 1
        match = _CLOSE_TAIL.match(self.masked, tail_start)
        closing_name = match.group("name") if match else None
        self._finish_type(current, closing_name if current.is_typedef else None)
        self.current = None
        self.state = ScanState.OUTSIDE_TYPE
        if match:
            return self._after_statement(match.end())
        return self._after_statement(tail_start)

    def _finish_type(self, current: _OpenType, closing_name: Optional[str]) -> None:
        model = current.model
        if closing_name:
            # typedef struct [Tag] { ... } Name;
            model.name = closing_name
        if not model.name:
            self.logger.warning("%s: dropping anonymous type without a name", self.stem)
            return
        for method in model.methods:
            method.owner = model.name
            if not method.return_type and not method.is_destructor and method.name == model.name:
                method.is_constructor = True
        self.types.append(model)

    # Inside a type ---------------------------------------------------------------

    def _inside(self, current: _OpenType, pos: int) -> int:
        limit = current.body_end
        line_end = self._line_end(pos, limit)
        segment = self.text[pos:line_end]
        masked = self.masked[pos:line_end]
        masked_stripped = masked.strip()
        if not masked_stripped:
            return line_end + 1 if line_end < limit else limit

        stripped = segment.strip()
        line_index = line_of(self.text, pos)
        lead = len(masked) - len(masked.lstrip())
        start = pos + lead

        if stripped.startswith("#"):
            self._directive(current, stripped, line_index, pos)
            return line_end + 1 if line_end < limit else limit

        access = _ACCESS.match(masked_stripped)
        if access:
            current.visibility = _VISIBILITY[access.group("label")]
            return start + access.end()

        first_word = re.match(r"[~\w]+", masked_stripped)
        word = first_word.group(0) if first_word else ""
        if word in _SKIPPED_KEYWORDS:
            if word == "template":
                return line_end + 1 if line_end < limit else limit
            end = self._statement_end(start, limit)
            return self._after_statement(end + 1, limit)

        if _NESTED_TYPE.match(masked_stripped):
            end = self._statement_end(start, limit)
            self.logger.debug("%s: skipping nested type at line %d", self.stem, line_index + 1)
            tail = _CLOSE_TAIL.match(self.masked, end + 1) if self.masked[end] == "}" else None
            return self._after_statement(tail.end() if tail else end + 1, limit)

        is_own_constructor = bool(current.model.name) and masked_stripped.startswith(
            current.model.name
        )
        if _MACRO_LINE.match(masked_stripped) and not is_own_constructor:
            self.logger.debug("%s: macro skipped: %s", self.stem, stripped)
            return line_end + 1 if line_end < limit else limit

        end = self._statement_end(start, limit)
        statement = self.masked[start : end + 1]
        paren = statement.find("(")
        if paren >= 0 and "=" not in statement[:paren]:
            method = self._parse_method(current, start, end + 1, line_index)
            if method is not None:
                self._attach_region(current, method)
                current.model.methods.append(method)
                current.last_item = method
            return self._after_statement(end + 1, limit)

        semicolon = self.masked.find(";", start, limit)
        if semicolon >= 0:
            member, end = self._parse_member(current, start, semicolon, line_index)
            if member is not None:
                self._attach_region(current, member)
                current.model.members.append(member)
                current.last_item = member
            return self._after_statement(end, limit)

        self.logger.warning(
            "%s: unparseable construct in %s dropped: %s", self.stem, current.model.name, stripped
        )
        return line_end + 1 if line_end < limit else limit

    def _directive(self, current: _OpenType, stripped: str, line_index: int, pos: int) -> None:
        region = _REGION.match(stripped)
        if region:
            name = region.group("name").strip()
            marker = f"//#{region.group('kind')}" + (f" {name}" if name else "")
            if region.group("kind") == "region":
                current.pending_region = marker
            elif current.last_item is not None:
                if isinstance(current.last_item, MethodModel):
                    current.last_item.header_region_end = marker
                else:
                    current.last_item.region_end = marker
            return
        if split_define(stripped) is not None:
            comments, _ = collect_preceding_comments(self.lines, line_index, self.claimed)
            define = build_define(
                stripped,
                origin_file=self.stem,
                from_header=True,
                preceding_comments=comments,
                position=pos,
            )
            if define is not None:
                current.model.header_defines.append(define)
            return
        self.logger.debug("%s: ignoring directive %s", self.stem, stripped)

    def _attach_region(self, current: _OpenType, item) -> None:
        if not current.pending_region:
            return
        if isinstance(item, MethodModel):
            item.header_region_start = current.pending_region
        else:
            item.region_start = current.pending_region
        current.pending_region = ""

    def _next_order(self) -> int:
        self.order += 1
        return self.order

    def _parse_method(
        self, current: _OpenType, start: int, end: int, line_index: int
    ) -> Optional[MethodModel]:
        text = self.text[start:end]
        masked = self.masked[start:end]
        open_paren = masked.find("(")
        close_paren = find_matching(masked, open_paren)
        if close_paren < 0:
            self.logger.warning("%s: unbalanced declaration dropped: %s", self.stem, text.strip())
            return None

        head = _DECLSPEC.sub(" ", masked[:open_paren])
        if "operator" in head:
            self.logger.debug("%s: operator overload skipped: %s", self.stem, text.strip())
            return None
        words = head.split()
        is_virtual = "virtual" in words
        is_static = "static" in words
        head_tokens = [word for word in words if word not in _METHOD_KEYWORDS]
        if not head_tokens:
            return None
        declaration = " ".join(head_tokens)
        name_match = re.search(r"(~?[A-Za-z_]\w*)\s*$", declaration)
        if not name_match:
            self.logger.warning("%s: cannot find method name in: %s", self.stem, text.strip())
            return None
        name = name_match.group(1)
        return_type = declaration[: name_match.start()].strip()
        # Drop a redundant Owner:: qualification on the name.
        return_type = re.sub(r"\b\w+\s*::\s*$", "", return_type).strip()
        return_type = normalize_type(return_type) if return_type else ""

        is_destructor = name.startswith("~")
        if not return_type and not is_destructor and name != current.model.name:
            self.logger.debug("%s: macro-like line skipped: %s", self.stem, text.strip())
            return None

        tail_masked = masked[close_paren + 1 :]
        tail_text = text[close_paren + 1 :]
        brace = tail_masked.find("{")
        head_tail = tail_masked[:brace] if brace >= 0 else tail_masked.rstrip().rstrip(";")
        if _DELETED_TAIL.search(head_tail.strip()):
            return None

        initializers: List[MemberInitializer] = []
        init_split = _BASE_SPLIT.split(head_tail, 1)
        if len(init_split) == 2 and brace >= 0:
            offset = len(init_split[0]) + 1
            init_text = tail_text[offset:brace]
            initializers = parse_initializers(init_text)
            head_tail = init_split[0]

        method = MethodModel(
            name=name,
            return_type=return_type,
            parameters=parse_parameters(text[open_paren + 1 : close_paren]),
            visibility=current.visibility,
            is_static=is_static,
            is_virtual=is_virtual,
            is_const=bool(_CONST_TAIL.match(head_tail)),
            is_pure_virtual=bool(_PURE_TAIL.search(head_tail.strip())),
            is_destructor=is_destructor,
            is_constructor=not return_type and not is_destructor,
            initializers=initializers,
            owner=current.model.name,
            origin_file=self.stem,
            order_index=self._next_order(),
            position=start,
        )
        method.header_comments, _ = collect_preceding_comments(self.lines, line_index, self.claimed)

        if brace >= 0:
            close_brace = find_matching(tail_masked, brace)
            inner = tail_text[brace + 1 : close_brace if close_brace >= 0 else len(tail_text)]
            method.inline_body, method.body_indent = normalize_block(inner)
            method.has_inline_body = True
            method.target_file = self.stem
        elif _DEFAULTED_TAIL.search(head_tail.strip()):
            method.has_inline_body = True
            method.target_file = self.stem
        return method

    def _parse_member(self, current: _OpenType, start: int, semicolon: int, line_index: int):
        code = self.text[start : semicolon + 1]
        code = re.sub(r"\s+", " ", split_trailing_comment(code)[0]).strip()
        end, trailing = self._trailing_comment(semicolon + 1)
        match = _MEMBER.match(code)
        if not match:
            self.logger.warning(
                "%s: unparseable member in %s dropped: %s", self.stem, current.model.name, code
            )
            return None, end
        quals = match.group("quals").split()
        raw_type = match.group("type")
        is_const = "const" in quals or bool(re.search(r"\bconst\b", raw_type))
        member_type = normalize_type(re.sub(r"\bconst\b", " ", raw_type))
        size = match.group("size")
        member = MemberModel(
            type=member_type,
            name=match.group("name"),
            visibility=current.visibility,
            is_static="static" in quals,
            is_const=is_const,
            is_array=size is not None,
            array_size=(size or "").strip(),
            initializer=match.group("value").strip() if match.group("value") else None,
            trailing_comment=trailing,
            order_index=self._next_order(),
        )
        member.preceding_comments, _ = collect_preceding_comments(
            self.lines, line_index, self.claimed
        )
        return member, end

    def _trailing_comment(self, pos: int):
        """Claim a ``//`` or ``/* */`` comment that follows a declaration on its line."""
        line_end = self._line_end(pos)
        rest = self.text[pos:line_end]
        stripped = rest.lstrip()
        if stripped.startswith("//"):
            return line_end, stripped.rstrip()
        if stripped.startswith("/*"):
            comment_start = pos + (len(rest) - len(stripped))
            close = self.text.find("*/", comment_start + 2)
            close = len(self.text) if close < 0 else close + 2
            first, _, others = self.text[comment_start:close].partition("\n")
            comment = first.rstrip()
            if others:
                # Continuation lines keep their layout relative to each other.
                continuation, _ = normalize_block(others)
                comment += "\n" + continuation
            for index in range(line_of(self.text, comment_start), line_of(self.text, close) + 1):
                self.claimed.add(index)
            return close, comment
        return pos, ""


def parse_initializers(text: str) -> List[MemberInitializer]:
    """Parse ``a(1), b{2}`` into member initializers."""
    initializers: List[MemberInitializer] = []
    for part in split_top_level(text, ",", angles=False):
        match = _INITIALIZER.match(part)
        if match:
            value = " ".join(match.group("value").split())
            initializers.append(MemberInitializer(match.group("name"), value))
    return initializers


__all__ = ["HeaderParser", "ScanState", "parse_initializers"]
