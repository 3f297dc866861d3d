"""Source model builder.

Extracts everything a ``.cpp`` file contributes at file scope: ``Owner::Method``
implementations, free (local) functions, embedded struct definitions, out-of-line
static initializers, defines, region markers and the file banner. Each construct is
found by its own narrowly scoped pass over comment-masked text; afterwards all
constructs are re-sorted by their textual position so the passes' independent
discovery order never leaks into the output.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Set, Tuple

from ..logging import get_logger
from ..models import MethodModel, SourceModel, StaticInitModel, TypeModel, Visibility
from ..textutil import (
    find_matching,
    line_of,
    mask_code,
    normalize_block,
    normalize_newlines,
    read_source,
)
from .comments import collect_preceding_comments, extract_banner_comments
from .defines import build_define, split_define
from .header import HeaderParser, parse_initializers
from .parameters import normalize_type, parse_parameters

# Primary pass: single-line head, parameter list without nested parentheses.
_IMPLEMENTATION = re.compile(
    r"^[ \t]*(?P<head>(?:[\w:<>,*&~ \t]*?[ \t*&])?)"
    r"(?P<owner>\w+)\s*::\s*(?P<name>~?\w+)\s*"
    r"\((?P<params>[^()]*)\)\s*(?P<const>const\b)?\s*(?P<init>:[^{;]*)?\{",
    re.MULTILINE,
)
# Recovery pass: any scoped name followed by "(" at file scope.
_SCOPED_NAME = re.compile(r"(?P<owner>\w+)\s*::\s*(?P<name>~?\w+)\s*\(")
_FREE_FUNCTION = re.compile(r"^[ \t]*(?P<head>[\w:<>,*& \t]*?)(?<![:\w~])(?P<name>[A-Za-z_]\w*)\s*\(", re.MULTILINE)
_STATIC_INIT = re.compile(
    r"^[ \t]*(?:(?P<const>const)\s+)?(?:(?P<type>[\w:<>]+(?:\s*[*&])?)\s+)?"
    r"(?P<owner>\w+)\s*::\s*(?P<name>\w+)\s*(?P<array>\[\s*(?P<size>\w*)\s*\])?\s*"
    r"=\s*(?P<value>[^;]+);",
    re.MULTILINE,
)
_EMBEDDED_TYPE = re.compile(r"^[ \t]*(?:typedef\s+)?(?:struct|class)\b[^;{()]*\{", re.MULTILINE)
_SCOPE_BLOCK = re.compile(r"\b(?:namespace\b[^{;]*|extern\s+\"\s*\"\s*)\{")
_REGION = re.compile(r"^[ \t]*#\s*(?:pragma\s+)?(?P<kind>region|endregion)\b[ \t]*(?P<name>[^\n]*)$", re.MULTILINE)
_DEFINE_LINE = re.compile(r"^[ \t]*#\s*define\b[^\n]*$", re.MULTILINE)
_TAIL = re.compile(r"\s*(?P<const>const\b)?\s*(?P<init>:[^{;]*)?\{")
_NOT_FUNCTIONS = {
    "if",
    "for",
    "while",
    "switch",
    "return",
    "catch",
    "sizeof",
    "defined",
    "namespace",
    "else",
    "do",
}
_HEAD_KEYWORDS = {"static", "inline", "virtual", "extern", "__inline", "__forceinline"}


@dataclass
class _Region:
    kind: str
    marker: str
    position: int


class SourceParser:
    """Builds a :class:`SourceModel` from implementation file text."""

    def __init__(self) -> None:
        self._logger = get_logger("parsing.source")
        self._header_parser = HeaderParser()

    def parse_file(self, path: Path) -> SourceModel:
        return self.parse(read_source(path), str(path))

    def parse(self, text: str, path: str = "") -> SourceModel:
        scan = _SourceScan(normalize_newlines(text), path, self._logger, self._header_parser)
        return scan.run()


class _SourceScan:
    def __init__(self, text: str, path: str, logger, header_parser: HeaderParser) -> None:
        self.text = text
        self.masked = mask_code(text)
        self.lines = text.split("\n")
        self.path = path
        self.stem = Path(path).stem if path else ""
        self.logger = logger
        self.header_parser = header_parser
        self.claimed_lines: Set[int] = set()
        self.claimed_spans: List[Tuple[int, int]] = []
        self.depth = self._depth_map()

    def run(self) -> SourceModel:
        banner, banner_lines = extract_banner_comments(self.lines)
        self.claimed_lines.update(banner_lines)
        model = SourceModel(path=self.path, stem=self.stem, banner_comments=banner)

        model.defines = self._defines()
        model.structs = self._embedded_types()
        methods = self._primary_pass()
        seen = {method.identity for method in methods}
        for method in self._recovery_pass():
            if method.identity in seen:
                continue
            seen.add(method.identity)
            methods.append(method)
        model.methods = methods
        model.local_methods = self._free_functions(model.structs)
        model.static_inits = self._static_inits()

        self._assign_order(model)
        self._assign_regions(model.methods + model.local_methods)
        return model

    # Structure -------------------------------------------------------------------

    def _depth_map(self) -> List[int]:
        """Brace depth before each offset; namespace and extern "C" braces do not count."""
        ignored: Set[int] = set()
        for match in _SCOPE_BLOCK.finditer(self.masked):
            open_brace = match.end() - 1
            close = find_matching(self.masked, open_brace)
            ignored.add(open_brace)
            if close >= 0:
                ignored.add(close)
        depths: List[int] = []
        depth = 0
        for index, ch in enumerate(self.masked):
            depths.append(depth)
            if index in ignored:
                continue
            if ch == "{":
                depth += 1
            elif ch == "}":
                depth = max(0, depth - 1)
        depths.append(depth)
        return depths

    def _at_file_scope(self, offset: int) -> bool:
        return self.depth[offset] == 0

    def _is_claimed(self, offset: int) -> bool:
        return any(start <= offset < end for start, end in self.claimed_spans)

    def _comments_for(self, offset: int) -> Tuple[List[str], int]:
        return collect_preceding_comments(self.lines, line_of(self.text, offset), self.claimed_lines)

    def _body(self, open_brace: int) -> Tuple[str, int, int]:
        close = find_matching(self.masked, open_brace)
        if close < 0:
            self.logger.warning("%s: unterminated body at line %d", self.stem, line_of(self.text, open_brace) + 1)
            close = len(self.text)
        body, indent = normalize_block(self.text[open_brace + 1 : close])
        return body, indent, close

    # Passes ----------------------------------------------------------------------

    def _primary_pass(self) -> List[MethodModel]:
        methods: List[MethodModel] = []
        for match in _IMPLEMENTATION.finditer(self.masked):
            head = match.group("head")
            head_start = match.start("head") if head else match.start("owner")
            if not self._at_file_scope(head_start) or self._is_claimed(head_start):
                continue
            if not head.strip():
                head, head_start = self._head_above(match.start("owner"))
            open_paren = self.masked.index("(", match.end("name"))
            close_paren = match.end("params")
            init_text = self.text[match.start("init") + 1 : match.end("init")] if match.group("init") else ""
            method = self._build_method(
                head=head,
                owner=match.group("owner"),
                name=match.group("name"),
                params=self.text[open_paren + 1 : close_paren],
                is_const=bool(match.group("const")),
                init_text=init_text,
                start=head_start,
                open_brace=match.end() - 1,
            )
            methods.append(method)
        return methods

    def _recovery_pass(self) -> List[MethodModel]:
        """Find implementations the primary pattern misses: nested parentheses in the
        parameter list, or a return type on the line above the scoped name."""
        methods: List[MethodModel] = []
        for match in _SCOPED_NAME.finditer(self.masked):
            start = match.start("owner")
            if not self._at_file_scope(start) or self._is_claimed(start):
                continue
            if start >= 2 and self.masked[start - 2 : start] == "::":
                continue
            open_paren = match.end() - 1
            close_paren = find_matching(self.masked, open_paren)
            if close_paren < 0:
                continue
            tail = _TAIL.match(self.masked, close_paren + 1)
            if not tail:
                continue
            head_start = self._statement_start(start)
            head = self.masked[head_start:start]
            if "=" in head or "(" in head:
                continue
            init_text = self.text[tail.start("init") + 1 : tail.end("init")] if tail.group("init") else ""
            method = self._build_method(
                head=head,
                owner=match.group("owner"),
                name=match.group("name"),
                params=self.text[open_paren + 1 : close_paren],
                is_const=bool(tail.group("const")),
                init_text=init_text,
                start=head_start if head.strip() else start,
                open_brace=tail.end() - 1,
            )
            methods.append(method)
        return methods

    def _head_above(self, offset: int) -> Tuple[str, int]:
        """Return type written on the line(s) above a scoped name, if any."""
        start = self._statement_start(offset)
        head = self.masked[start:offset]
        if not head.strip() or "=" in head or "(" in head:
            return "", offset
        return head, start

    def _statement_start(self, offset: int) -> int:
        """Offset of the first non-blank character after the previous statement boundary."""
        cursor = offset
        while cursor > 0:
            ch = self.masked[cursor - 1]
            if ch in ";{}":
                break
            if ch == "\n":
                line_start = self.masked.rfind("\n", 0, cursor - 1) + 1
                if self.masked[line_start:cursor - 1].lstrip().startswith("#"):
                    break
            cursor -= 1
        while cursor < offset and self.masked[cursor].isspace():
            cursor += 1
        return cursor

    def _build_method(
        self,
        *,
        head: str,
        owner: str,
        name: str,
        params: str,
        is_const: bool,
        init_text: str,
        start: int,
        open_brace: int,
    ) -> MethodModel:
        words = [word for word in head.split() if word not in _HEAD_KEYWORDS]
        return_type = normalize_type(" ".join(words)) if words else ""
        body, indent, close = self._body(open_brace)
        self.claimed_spans.append((start, close + 1))
        comments, comment_indent = self._comments_for(start)
        is_destructor = name.startswith("~")
        return MethodModel(
            name=name,
            return_type=return_type,
            parameters=parse_parameters(params),
            is_const=is_const,
            is_constructor=not is_destructor and name == owner and not return_type,
            is_destructor=is_destructor,
            initializers=parse_initializers(init_text) if init_text.strip() else [],
            body=body,
            body_indent=indent,
            owner=owner,
            target_file=self.stem,
            origin_file=self.stem,
            position=start,
            source_comments=comments,
            source_comment_indent=comment_indent,
        )

    def _free_functions(self, structs: List[TypeModel]) -> List[MethodModel]:
        struct_names = {struct.name: struct for struct in structs}
        functions: List[MethodModel] = []
        for match in _FREE_FUNCTION.finditer(self.masked):
            name = match.group("name")
            start = match.start("head") if match.group("head").strip() else match.start("name")
            if name in _NOT_FUNCTIONS or not self._at_file_scope(match.start("name")):
                continue
            if self._is_claimed(match.start("name")):
                continue
            open_paren = match.end() - 1
            close_paren = find_matching(self.masked, open_paren)
            if close_paren < 0:
                continue
            tail = _TAIL.match(self.masked, close_paren + 1)
            if not tail or tail.group("init"):
                continue
            head_words = [w for w in match.group("head").split() if w not in _HEAD_KEYWORDS]
            if not head_words:
                struct = struct_names.get(name)
                if struct is None:
                    self.logger.debug("%s: ownerless constructor-shaped %s skipped", self.stem, name)
                    continue
                # Constructor of a struct defined earlier in this file.
                method = self._build_method(
                    head="",
                    owner=name,
                    name=name,
                    params=self.text[open_paren + 1 : close_paren],
                    is_const=False,
                    init_text="",
                    start=start,
                    open_brace=tail.end() - 1,
                )
                method.is_constructor = True
                method.visibility = Visibility.PUBLIC
                struct.methods.append(method)
                continue
            method = self._build_method(
                head=" ".join(head_words),
                owner="",
                name=name,
                params=self.text[open_paren + 1 : close_paren],
                is_const=bool(tail.group("const")),
                init_text="",
                start=start,
                open_brace=tail.end() - 1,
            )
            method.is_local = True
            method.is_static = True
            method.visibility = Visibility.PRIVATE
            functions.append(method)
        return functions

    def _embedded_types(self) -> List[TypeModel]:
        types: List[TypeModel] = []
        for match in _EMBEDDED_TYPE.finditer(self.masked):
            if not self._at_file_scope(match.start()):
                continue
            open_brace = match.end() - 1
            close = find_matching(self.masked, open_brace)
            if close < 0:
                continue
            semicolon = self.masked.find(";", close)
            end = len(self.text) if semicolon < 0 else semicolon + 1
            snippet = self.text[match.start() : end]
            parsed = self.header_parser.parse(snippet, self.path)
            comments, _ = self._comments_for(match.start())
            for struct in parsed.types:
                struct.header_file = self.stem
                struct.preceding_comments = comments or struct.preceding_comments
                for method in struct.methods:
                    method.position = match.start() + method.position
                    method.target_file = self.stem
                types.append(struct)
            self.claimed_spans.append((match.start(), end))
            for index in range(line_of(self.text, match.start()), line_of(self.text, end) + 1):
                self.claimed_lines.add(index)
        return types

    def _static_inits(self) -> List[StaticInitModel]:
        inits: List[StaticInitModel] = []
        for match in _STATIC_INIT.finditer(self.masked):
            start = match.start("owner") if not match.group("type") else match.start("type")
            if not self._at_file_scope(start) or self._is_claimed(start):
                continue
            value, _ = normalize_block(self.text[match.start("value") : match.end("value")])
            inits.append(
                StaticInitModel(
                    owner=match.group("owner"),
                    name=match.group("name"),
                    value=value,
                    type=normalize_type(match.group("type")) if match.group("type") else "auto",
                    is_const=bool(match.group("const")),
                    is_array=bool(match.group("array")) or value.startswith("{"),
                    array_size=match.group("size") or "",
                    position=start,
                )
            )
        return inits

    def _defines(self):
        defines = []
        for match in _DEFINE_LINE.finditer(self.masked):
            if not self._at_file_scope(match.start()):
                continue
            line = self.text[match.start() : match.end()]
            if split_define(line) is None:
                continue
            comments, _ = self._comments_for(match.start())
            define = build_define(
                line,
                origin_file=self.stem,
                from_header=False,
                preceding_comments=comments,
                position=match.start(),
            )
            if define is not None:
                defines.append(define)
        return defines

    # Ordering ------------------------------------------------------------------

    def _assign_order(self, model: SourceModel) -> None:
        constructs: List[Tuple[int, object]] = []
        constructs.extend((m.position, m) for m in model.methods)
        constructs.extend((m.position, m) for m in model.local_methods)
        constructs.extend((i.position, i) for i in model.static_inits)
        for struct in model.structs:
            constructs.extend((m.position, m) for m in struct.methods)
        constructs.sort(key=lambda item: item[0])
        for index, (_, construct) in enumerate(constructs, start=1):
            if isinstance(construct, MethodModel):
                construct.order_index = index
        model.methods.sort(key=lambda m: m.position)
        model.local_methods.sort(key=lambda m: m.position)
        model.static_inits.sort(key=lambda i: i.position)

    def _assign_regions(self, methods: List[MethodModel]) -> None:
        if not methods:
            return
        ordered = sorted(methods, key=lambda m: m.position)
        regions: List[_Region] = []
        for match in _REGION.finditer(self.masked):
            if not self._at_file_scope(match.start()):
                continue
            name = self.text[match.start("name") : match.end("name")].strip()
            marker = f"#{match.group('kind')}" + (f" {name}" if name else "")
            regions.append(_Region(match.group("kind"), marker, match.start()))
        for region in regions:
            if region.kind == "region":
                following = [m for m in ordered if m.position > region.position]
                if following:
                    following[0].source_region_start = region.marker
            else:
                preceding = [m for m in ordered if m.position < region.position]
                if preceding:
                    preceding[-1].source_region_end = region.marker


def implementation_owner_order(model: SourceModel) -> List[str]:
    """Owners in the order their first implementation appears in the file."""
    order: Dict[str, int] = {}
    for method in sorted(model.methods, key=lambda m: m.position):
        if method.owner and method.owner not in order:
            order[method.owner] = method.position
    return list(order)


__all__ = ["SourceParser", "implementation_owner_order"]
