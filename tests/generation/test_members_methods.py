"""Tests for member and method rendering."""

from __future__ import annotations

from cpp2cs.generation.members import member_declaration, render_member
from cpp2cs.generation.methods import (
    CONSTRUCTOR_PLACEHOLDER,
    method_head,
    parameter_text,
    render_method,
    signature_lines,
)
from cpp2cs.generation.types import TypeMapper
from cpp2cs.generation.writer import CodeWriter
from cpp2cs.models import MemberInitializer, MemberModel, MethodModel, Visibility
from cpp2cs.parsing.parameters import parse_parameters

MAPPER = TypeMapper()


def _render_method(method: MethodModel, owner: str = "CSample") -> list[str]:
    writer = CodeWriter()
    render_method(writer, method, MAPPER, owner, 2)
    return writer.render().splitlines()


def test_type_mapper_drops_pointer_markers_and_applies_overrides() -> None:
    mapper = TypeMapper({"CString": "string", "agrint": "int"})

    assert mapper.map_type("CString*") == "string"
    assert mapper.map_type("const CString&") == "string"
    assert mapper.map_type("agrint") == "int"
    assert mapper.map_type("CList<CString>") == "CList<string>"
    assert mapper.map_type("") == "void"
    assert mapper.map_type("CAgrMT") == "CAgrMT"


def test_type_mapper_converts_literals_outside_strings() -> None:
    body = 'if (p == NULL) return _T("NULL");\nm_ok = TRUE;'

    assert MAPPER.convert_body(body) == 'if (p == null) return "NULL";\nm_ok = true;'
    assert MAPPER.convert_value("nullptr") == "null"
    assert MAPPER.convert_value(None) is None


def test_member_declarations() -> None:
    plain = MemberModel(type="int", name="m_count")
    constant = MemberModel(type="int", name="s_limit", is_static=True, is_const=True, initializer="5")
    readonly = MemberModel(type="int", name="m_id", is_const=True)
    array = MemberModel(type="CString", name="m_names", is_array=True, array_size="4")
    initialized = MemberModel(
        type="CString",
        name="s_names",
        visibility=Visibility.PUBLIC,
        is_static=True,
        is_const=True,
        is_array=True,
        initializer='{ _T("a"), _T("b") }',
    )

    assert member_declaration(plain, MAPPER) == "private int m_count;"
    assert member_declaration(constant, MAPPER) == "private const int s_limit = 5;"
    assert member_declaration(readonly, MAPPER) == "private readonly int m_id;"
    assert member_declaration(array, MAPPER) == "private CString[] m_names = new CString[4];"
    assert member_declaration(initialized, MAPPER) == (
        'public static readonly CString[] s_names = { "a", "b" };'
    )


def test_render_member_with_comments_and_region() -> None:
    member = MemberModel(
        type="int",
        name="m_count",
        visibility=Visibility.PROTECTED,
        preceding_comments=["// item count"],
        trailing_comment="// never negative",
        region_start="//#region Data",
        region_end="//#endregion",
    )
    writer = CodeWriter()
    writer.line("{", 1)

    render_member(writer, member, MAPPER, 2)

    assert writer.render().splitlines() == [
        "    {",
        "",
        "        //#region Data",
        "",
        "        // item count",
        "        protected int m_count; // never negative",
        "",
        "        //#endregion",
    ]


def test_parameter_modifiers_names_and_defaults() -> None:
    table, text, label, unnamed, flag = parse_parameters(
        "CAgrMT* table, CString& text, const CString& label = _T(\"x\"), int, bool flag = FALSE"
    )

    assert parameter_text(table, MAPPER, 0) == "out CAgrMT table"
    assert parameter_text(text, MAPPER, 1) == "ref CString text"
    assert parameter_text(label, MAPPER, 2) == 'CString label = "x"'
    assert parameter_text(unnamed, MAPPER, 3) == "int arg3"
    assert parameter_text(flag, MAPPER, 4) == "bool flag = false"


def test_signature_without_comments_stays_on_one_line() -> None:
    parameters = parse_parameters("int a,\n    bool b")

    assert signature_lines("public void Run", parameters, MAPPER) == ["public void Run(int a, bool b)"]


def test_comma_goes_before_line_comment_and_after_block_comment() -> None:
    parameters = parse_parameters("int a, // first\n    bool b /* second */,\n    int c")

    assert signature_lines("public void Run", parameters, MAPPER) == [
        "public void Run(",
        "\tint a, // first",
        "\tbool b /* second */,",
        "\tint c)",
    ]


def test_last_parameter_line_comment_moves_parenthesis() -> None:
    parameters = parse_parameters("/* in */ int a,\n    bool b // last")

    assert signature_lines("public void Run", parameters, MAPPER) == [
        "public void Run(",
        "\t/* in */ int a,",
        "\tbool b // last",
        ")",
    ]


def test_method_heads() -> None:
    ctor = MethodModel(name="CSample", is_constructor=True, visibility=Visibility.PUBLIC)
    dtor = MethodModel(name="~CSample", is_destructor=True, is_virtual=True)
    create = MethodModel(name="Create", return_type="CSample*", is_static=True, visibility=Visibility.PUBLIC)
    hook = MethodModel(name="OnChange", return_type="void", is_virtual=True, visibility=Visibility.PROTECTED)

    assert method_head(ctor, MAPPER, "CSample") == "public CSample"
    assert method_head(dtor, MAPPER, "CSample") == "~CSample"
    assert method_head(create, MAPPER, "CSample") == "public static CSample Create"
    assert method_head(hook, MAPPER, "CSample") == "protected virtual void OnChange"


def test_missing_bodies_render_placeholders() -> None:
    save = MethodModel(name="Save", return_type="bool", visibility=Visibility.PUBLIC)
    ctor = MethodModel(name="CSample", is_constructor=True, visibility=Visibility.PUBLIC)

    assert _render_method(save) == [
        "        public bool Save()",
        "        {",
        "            // TODO: Implementation not found",
        "            throw new NotImplementedException();",
        "        }",
    ]
    assert _render_method(ctor)[2] == "            " + CONSTRUCTOR_PLACEHOLDER


def test_initializers_become_leading_assignments() -> None:
    ctor = MethodModel(
        name="CSample",
        is_constructor=True,
        visibility=Visibility.PUBLIC,
        initializers=[MemberInitializer("m_count", "0"), MemberInitializer("m_ptr", "NULL")],
        body="Init();",
    )

    assert _render_method(ctor) == [
        "        public CSample()",
        "        {",
        "            m_count = 0;",
        "            m_ptr = null;",
        "            Init();",
        "        }",
    ]


def test_single_line_inline_body_stays_inline() -> None:
    getter = MethodModel(
        name="GetCount",
        return_type="int",
        visibility=Visibility.PUBLIC,
        has_inline_body=True,
        inline_body="return m_count;",
    )

    assert _render_method(getter) == ["        public int GetCount() { return m_count; }"]


def test_body_keeps_relative_indentation_and_regions() -> None:
    method = MethodModel(
        name="Apply",
        return_type="void",
        visibility=Visibility.PUBLIC,
        body="if (m_ok)\n{\n    Run();\n}",
        source_comments=["// Applies the change"],
        source_region_start="#region Actions",
        source_region_end="#endregion",
    )

    assert _render_method(method) == [
        "        #region Actions",
        "",
        "        // Applies the change",
        "        public void Apply()",
        "        {",
        "            if (m_ok)",
        "            {",
        "                Run();",
        "            }",
        "        }",
        "",
        "        #endregion",
    ]
