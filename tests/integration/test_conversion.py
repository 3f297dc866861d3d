"""End-to-end conversions over temporary source trees."""

from __future__ import annotations

from tests._fixtures.source_tree import SourceTreeBuilder

SAMPLE_H = """
class __declspec(dllexport) CSample
{
public:
    CSample();
    int GetCount() const { return m_count; }
    void SetValue(int value, bool notify);
private:
    int m_count;
};
"""

SAMPLE_CPP = """
#include "Sample.h"

void CSample::SetValue(int newValue, bool shouldNotify)
{
    m_count = newValue;
}
"""


def test_header_and_source_become_one_class(source_tree: SourceTreeBuilder) -> None:
    source_tree.write({"Sample.h": SAMPLE_H, "Sample.cpp": SAMPLE_CPP})

    result = source_tree.convert()

    assert [path.name for path in result.written] == ["Sample.cs"]
    assert source_tree.output("Sample.cs") == (
        "namespace Generated_Sample\n"
        "{\n"
        "    public class CSample\n"
        "    {\n"
        "        private int m_count;\n"
        "\n"
        "        public CSample()\n"
        "        {\n"
        "            // TODO: Initialize members\n"
        "        }\n"
        "\n"
        "        public int GetCount() { return m_count; }\n"
        "\n"
        "        public void SetValue(int newValue, bool shouldNotify)\n"
        "        {\n"
        "            m_count = newValue;\n"
        "        }\n"
        "    }\n"
        "}\n"
    )


def test_output_directory_is_not_rescanned(source_tree: SourceTreeBuilder) -> None:
    source_tree.write({"Sample.h": SAMPLE_H, "Sample.cpp": SAMPLE_CPP})

    first = source_tree.convert()
    second = source_tree.convert()

    assert first.contents == second.contents


def test_partial_class_split_across_files(source_tree: SourceTreeBuilder) -> None:
    source_tree.write(
        {
            "Sample.h": """
            class CSample
            {
            public:
                void Load();
                void Save();
            private:
                int m_state;
            };
            """,
            "Sample.cpp": """
            #include "Sample.h"

            void CSample::Load()
            {
                m_state = 1;
            }
            """,
            "SampleIO.cpp": """
            #include "Sample.h"

            void CSample::Save()
            {
                m_state = 2;
            }
            """,
        }
    )

    result = source_tree.convert()

    assert sorted(path.name for path in result.written) == ["Sample.cs", "SampleIO.cs"]
    main = source_tree.output("Sample.cs")
    fragment = source_tree.output("SampleIO.cs")
    assert "internal partial class CSample" in main
    assert "private int m_state;" in main
    assert "public void Load()" in main
    assert "Save" not in main
    assert fragment.startswith("namespace Generated_Sample\n")
    assert "internal partial class CSample" in fragment
    assert "m_state = 2;" in fragment
    assert "private int m_state;" not in fragment


def test_interface_defines_and_extensions(source_tree: SourceTreeBuilder) -> None:
    source_tree.write(
        {
            "ISample.h": """
            #define SAMPLE_VERSION 2

            // Sample contract
            class __declspec(dllexport) ISample
            {
            public:
                // Gets the count
                virtual int GetCount() const = 0;
                virtual void Reset(int mode = 0) = 0;
                static ISample* GetInstance();
            };
            """,
            "Sample.h": """
            #include "ISample.h"

            class CSample : public ISample
            {
            public:
                int GetCount() const;
                void Reset(int mode);
            };
            """,
            "Sample.cpp": """
            #include "Sample.h"

            ISample* ISample::GetInstance(){ return new CSample(); }

            int CSample::GetCount() const
            {
                return SAMPLE_VERSION;
            }

            void CSample::Reset(int mode)
            {
            }
            """,
        }
    )

    result = source_tree.convert()

    assert sorted(path.name for path in result.written) == ["ISample.cs", "Sample.cs", "SampleDefines.cs"]

    interface = source_tree.output("ISample.cs")
    assert "using static" not in interface
    assert "    // Sample contract\n    [Create(typeof(CSample))]\n    public interface ISample\n" in interface
    assert "        // Gets the count\n        int GetCount();\n\n        void Reset(int mode = 0);\n" in interface
    assert "    public static class ISampleExtensions\n" in interface
    assert "        public static ISample GetInstance(this ISample sample)\n" in interface
    assert "            return new CSample();\n" in interface

    assert source_tree.output("SampleDefines.cs") == (
        "namespace Generated_ISample\n"
        "{\n"
        "    public static class SampleDefines\n"
        "    {\n"
        "        public const int SAMPLE_VERSION = 2;\n"
        "    }\n"
        "}\n"
    )

    implementation = source_tree.output("Sample.cs")
    assert implementation.startswith("using static Generated_ISample.SampleDefines;\n\nnamespace Generated_Sample\n")
    assert "    internal class CSample : ISample\n" in implementation
    assert "            return SAMPLE_VERSION;\n" in implementation
    assert "        public void Reset(int mode)\n        {\n        }\n" in implementation


def test_configured_namespace_usings_and_crlf(source_tree: SourceTreeBuilder) -> None:
    source_tree.write(
        {
            ".cpp2cs.yml": """
            namespace: Legacy.Port
            file_scoped_namespace: true
            usings:
              - System
            line_ending: crlf
            output_subdir: cs
            """,
            "Sample.h": SAMPLE_H,
            "Sample.cpp": SAMPLE_CPP,
        }
    )

    source_tree.convert()

    raw = (source_tree.path() / "cs" / "Sample.cs").read_bytes()
    assert b"\n" not in raw.replace(b"\r\n", b"")
    lines = raw.decode("utf-8").split("\r\n")
    assert lines[:5] == ["using System;", "", "namespace Legacy.Port;", "", "public class CSample"]
    assert "    private int m_count;" in lines


def test_banner_and_source_comments_survive(source_tree: SourceTreeBuilder) -> None:
    source_tree.write(
        {
            "Sample.h": SAMPLE_H,
            "Sample.cpp": """
            // Copyright Acme
            #include "Sample.h"

            // Stores the new value
            void CSample::SetValue(int newValue, bool shouldNotify)
            {
                m_count = newValue; // keep
            }
            """,
        }
    )

    source_tree.convert()

    output = source_tree.output("Sample.cs")
    assert output.startswith("// Copyright Acme\n\nnamespace Generated_Sample\n")
    assert "        // Stores the new value\n        public void SetValue(" in output
    assert "            m_count = newValue; // keep\n" in output


def test_selected_files_only(source_tree: SourceTreeBuilder) -> None:
    source_tree.write(
        {
            "Sample.h": SAMPLE_H,
            "Sample.cpp": SAMPLE_CPP,
            "Other.h": """
            class COther
            {
            public:
                void Run();
            };
            """,
        }
    )

    result = source_tree.convert(names=["Sample.h", "Sample.cpp", "Missing.cpp"])

    assert [path.name for path in result.written] == ["Sample.cs"]


def test_header_only_type_gets_placeholders_and_warning(source_tree: SourceTreeBuilder, tmp_path) -> None:
    source_tree.write(
        {
            "Store.h": """
            class CStore
            {
            public:
                bool Save();
            };
            """
        }
    )
    output_dir = tmp_path / "out"

    result = source_tree.convert(output_dir=output_dir)

    assert len(result.warnings) == 1
    assert "header-only" in result.warnings[0]
    output = source_tree.output("Store.cs", output_dir)
    assert "            throw new NotImplementedException();\n" in output


def test_protected_interface_method_is_not_part_of_the_contract(source_tree: SourceTreeBuilder) -> None:
    source_tree.write(
        {
            "ISample.h": """
            class ISample
            {
            public:
                virtual void Run() = 0;
            protected:
                virtual void Hidden() = 0;
            };
            """
        }
    )

    source_tree.convert()

    output = source_tree.output("ISample.cs")
    assert "        void Run();\n" in output
    assert "Hidden" not in output
