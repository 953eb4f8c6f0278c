"""
Unit tests for parsing, loading and import resolution
"""
import os

import pytest

from markdownlang.core.Exceptions import (
    MalformedProgramError,
    MissingInputError,
    ProgramError,
    SourceNotFoundError,
)
from markdownlang.programs.base import INLINE_SOURCE
from markdownlang.programs.loader import check_required_inputs, load, parse_source, resolve_import

FIZZBUZZ = """---
name: fizzbuzz
description: Classic FizzBuzz problem solver
input:
  type: object
  properties:
    start:
      type: integer
      minimum: 1
    end:
      type: integer
      minimum: 1
  required: [start, end]
output:
  type: object
  properties:
    results:
      type: array
      items:
        type: string
---

# FizzBuzz

For each number from {{ .start }} to {{ .end }}:
- If divisible by 15, output "FizzBuzz"
- Otherwise, output the number as a string
"""

EXAMPLES_DIR = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "examples")


class TestParseSource:
    """Tests for parse_source()"""

    def test_parses_frontmatter_and_body(self):
        program = parse_source(FIZZBUZZ)
        assert program.name == "fizzbuzz"
        assert program.description == "Classic FizzBuzz problem solver"
        assert program.input_schema.required == ["start", "end"]
        assert program.input_schema.properties["start"].extras == {"minimum": 1}
        assert program.output_schema.properties["results"].items_schema == {"type": "string"}
        assert program.imports == ()
        assert program.source == INLINE_SOURCE
        assert program.body.startswith("# FizzBuzz")
        assert program.body.endswith('output the number as a string')

    def test_source_path_is_recorded(self):
        assert parse_source(FIZZBUZZ, "/x/fizzbuzz.mdlang").source == "/x/fizzbuzz.mdlang"

    def test_imports_are_kept_in_order(self):
        source = FIZZBUZZ.replace("---\n\n# FizzBuzz", "imports:\n  - ./b.mdlang\n  - ./a.mdlang\n---\n\n# FizzBuzz")
        assert parse_source(source).imports == ("./b.mdlang", "./a.mdlang")

    def test_empty_imports_list(self):
        source = FIZZBUZZ.replace("---\n\n# FizzBuzz", "imports: []\n---\n\n# FizzBuzz")
        assert parse_source(source).imports == ()

    def test_empty_body(self):
        source = "---\nname: n\ndescription: d\ninput: {type: object}\noutput: {type: object}\n---\n"
        assert parse_source(source).body == ""

    def test_leading_whitespace_is_ignored(self):
        assert parse_source("\n\n  " + FIZZBUZZ).name == "fizzbuzz"

    def test_body_may_contain_delimiter(self):
        source = "---\nname: n\ndescription: d\ninput: {}\noutput: {}\n---\nabove\n---\nbelow"
        assert parse_source(source).body == "above\n---\nbelow"

    @pytest.mark.parametrize("missing", ["name", "description", "input", "output"])
    def test_missing_required_field(self, missing):
        fields = {
            "name": "name: n",
            "description": "description: d",
            "input": "input: {type: object}",
            "output": "output: {type: object}",
        }
        del fields[missing]
        source = "---\n" + "\n".join(fields.values()) + "\n---\nbody"
        with pytest.raises(MalformedProgramError) as info:
            parse_source(source, "/p/prog.mdlang")
        message = str(info.value)
        assert f'"{missing}"' in message
        assert "/p/prog.mdlang" in message

    @pytest.mark.parametrize(
        "source",
        [
            "",
            "no frontmatter here",
            "name: n\n---\nbody",
            "---\nname: n\ndescription: d\n",
        ],
    )
    def test_delimiters_required(self, source):
        with pytest.raises(MalformedProgramError):
            parse_source(source)

    def test_invalid_yaml(self):
        with pytest.raises(MalformedProgramError, match="YAML"):
            parse_source("---\nname: [unclosed\n---\nbody")

    def test_frontmatter_must_be_mapping(self):
        with pytest.raises(MalformedProgramError):
            parse_source("---\n- a\n- b\n---\nbody")

    def test_imports_must_be_list(self):
        source = "---\nname: n\ndescription: d\ninput: {}\noutput: {}\nimports: ./a.mdlang\n---\n"
        with pytest.raises(MalformedProgramError, match="imports"):
            parse_source(source)

    def test_schema_must_be_mapping(self):
        source = "---\nname: n\ndescription: d\ninput: a string\noutput: {}\n---\n"
        with pytest.raises(MalformedProgramError, match="input_schema"):
            parse_source(source)


class TestLoad:
    """Tests for load() and resolve_import()"""

    def test_load_reads_and_records_absolute_path(self, tmp_path):
        path = tmp_path / "fizzbuzz.mdlang"
        path.write_text(FIZZBUZZ, encoding="utf-8")
        program = load(str(path))
        assert program.name == "fizzbuzz"
        assert program.source == str(path.resolve())

    def test_relative_to_working_directory(self, tmp_path, monkeypatch):
        (tmp_path / "fizzbuzz.mdlang").write_text(FIZZBUZZ, encoding="utf-8")
        monkeypatch.chdir(tmp_path)
        assert load("fizzbuzz.mdlang").name == "fizzbuzz"

    def test_relative_to_base_dir(self, tmp_path):
        sub = tmp_path / "lib"
        sub.mkdir()
        (sub / "fizzbuzz.mdlang").write_text(FIZZBUZZ, encoding="utf-8")
        assert load("./fizzbuzz.mdlang", base_dir=str(sub)).source == str((sub / "fizzbuzz.mdlang").resolve())

    def test_missing_file(self, tmp_path):
        with pytest.raises(SourceNotFoundError) as info:
            load(str(tmp_path / "nope.mdlang"))
        assert isinstance(info.value, FileNotFoundError)
        assert isinstance(info.value, ProgramError)

    def test_directory_is_not_a_program(self, tmp_path):
        with pytest.raises(SourceNotFoundError):
            load(str(tmp_path))

    @pytest.mark.parametrize("reference", ["", "   ", None])
    def test_empty_reference(self, reference):
        with pytest.raises(SourceNotFoundError):
            load(reference)

    def test_undecodable_file(self, tmp_path):
        path = tmp_path / "binary.mdlang"
        path.write_bytes(b"---\nname: \xff\xfe\n---\n")
        with pytest.raises(MalformedProgramError):
            load(str(path))

    def test_rereads_on_every_call(self, tmp_path):
        path = tmp_path / "p.mdlang"
        path.write_text(FIZZBUZZ, encoding="utf-8")
        assert load(str(path)).name == "fizzbuzz"
        path.write_text(FIZZBUZZ.replace("name: fizzbuzz", "name: buzzfizz"), encoding="utf-8")
        assert load(str(path)).name == "buzzfizz"

    def test_resolve_import_relative_to_importer(self, write_program, tmp_path, monkeypatch):
        write_program("pkg/child.mdlang", "child")
        parent = load(write_program("pkg/parent.mdlang", "parent", imports=["./child.mdlang"]))
        monkeypatch.chdir(tmp_path)
        assert resolve_import(parent, "./child.mdlang").name == "child"

    def test_resolve_import_falls_back_to_working_directory(self, write_program, tmp_path, monkeypatch):
        write_program("progs/child.mdlang", "child")
        parent = load(write_program("progs/parent.mdlang", "parent", imports=["progs/child.mdlang"]))
        monkeypatch.chdir(tmp_path)
        child = resolve_import(parent, "progs/child.mdlang")
        assert child.name == "child"
        assert child.source == str(tmp_path / "progs" / "child.mdlang")

    def test_resolve_import_prefers_importer_directory(self, write_program, tmp_path, monkeypatch):
        write_program("lib/child.mdlang", "near")
        write_program("child.mdlang", "far")
        parent = load(write_program("lib/parent.mdlang", "parent", imports=["child.mdlang"]))
        monkeypatch.chdir(tmp_path)
        assert resolve_import(parent, "child.mdlang").name == "near"

    def test_resolve_import_missing_everywhere(self, write_program, tmp_path, monkeypatch):
        parent = load(write_program("lib/parent.mdlang", "parent", imports=["ghost.mdlang"]))
        monkeypatch.chdir(tmp_path)
        with pytest.raises(SourceNotFoundError):
            resolve_import(parent, "ghost.mdlang")

    def test_resolve_import_from_inline_program_uses_cwd(self, write_program, tmp_path, monkeypatch):
        write_program("child.mdlang", "child")
        monkeypatch.chdir(tmp_path)
        parent = parse_source("---\nname: p\ndescription: d\ninput: {}\noutput: {}\n---\n")
        assert resolve_import(parent, "child.mdlang").name == "child"

    @pytest.mark.skipif(not os.path.isdir(EXAMPLES_DIR), reason="examples directory not present")
    def test_bundled_examples_parse(self):
        names = sorted(n for n in os.listdir(EXAMPLES_DIR) if n.endswith(".mdlang"))
        assert names
        for name in names:
            load(os.path.join(EXAMPLES_DIR, name))


class TestCheckRequiredInputs:
    """Tests for check_required_inputs()"""

    def test_all_present(self):
        check_required_inputs(parse_source(FIZZBUZZ), {"start": 1, "end": 15})

    def test_missing_field_named(self):
        with pytest.raises(MissingInputError) as info:
            check_required_inputs(parse_source(FIZZBUZZ), {"start": 1})
        message = str(info.value)
        assert '"end"' in message
        assert "start, end" in message

    def test_no_required_list(self):
        program = parse_source("---\nname: p\ndescription: d\ninput: {type: object}\noutput: {}\n---\n")
        check_required_inputs(program, {})
