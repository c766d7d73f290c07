import pytest

from patchvision.core.grammars import GrammarRegistry, TokenizeError, default_registry


def test_go_tokens_ignore_spacing(go):
    compact = [t.key for t in go.significant_tokens("x:=1")]
    spaced = [t.key for t in go.significant_tokens("x := 1")]
    assert compact == spaced == [("ident", "x"), ("op", ":="), ("number", "1")]


def test_go_token_offsets_index_the_text(go):
    text = "if ok {\n\treturn 0x1F\n}"
    for tok in go.tokenize(text):
        assert text[tok.start:tok.end] == tok.text
    assert ("keyword", "return") in [t.key for t in go.tokenize(text)]


def test_go_multiline_tokens(go):
    raw = [t for t in go.tokenize("var s = `a\nb`") if t.kind == "raw_string"][0]
    assert go.spans_lines(raw)
    block = [t for t in go.tokenize("/* a\n b */ x") if t.kind == "comment"][0]
    assert go.spans_lines(block)
    line = [t for t in go.tokenize("// one line\nx") if t.kind == "comment"][0]
    assert not go.spans_lines(line)


def test_go_illegal_input(go):
    with pytest.raises(TokenizeError):
        go.tokenize("x := @")
    with pytest.raises(TokenizeError):
        go.tokenize("/* never closed")


def test_go_well_formed(go):
    assert go.is_well_formed("package main\n\nfunc main() {}\n")
    assert not go.is_well_formed("package main\n\nfunc main() {\n")


def test_go_header_comments_stop_at_first_declaration(go):
    src = (
        "// Code generated by x. DO NOT EDIT.\n\n"
        "package foo\n\n"
        "import \"fmt\"\n\n"
        "func f() { /* generate */ }\n"
    )
    assert go.header_comments(src) == ["Code generated by x. DO NOT EDIT."]


def test_go_header_scan_ignores_broken_body(go):
    assert go.header_comments("package foo\n// gen\nfunc f() { @ }\n") == ["gen"]


def test_go_header_that_does_not_tokenize(go):
    assert go.header_comments("// generated\npackage foo\n@@@\n") == []


def test_python_tokens(python):
    keys = [t.key for t in python.significant_tokens("x=1", fragment=True)]
    assert keys == [("NAME", "x"), ("OP", "="), ("NUMBER", "1")]


def test_python_fragment_may_stop_inside_brackets(python):
    tokens = python.tokenize("foo(a,\n", fragment=True)
    assert tokens[0].key == ("NAME", "foo")
    with pytest.raises(TokenizeError):
        python.tokenize("foo(a,\n")


def test_python_indented_fragment(python):
    keys = [t.key for t in python.significant_tokens("    return x\n", fragment=True)]
    assert keys == [("NAME", "return"), ("NAME", "x")]


def test_python_triple_quoted_string_spans_lines(python):
    doc = [t for t in python.tokenize('x = """a\nb"""\n') if t.kind == "STRING"][0]
    assert python.spans_lines(doc)


def test_python_well_formed(python):
    assert python.is_well_formed("def f():\n    pass\n")
    assert not python.is_well_formed("def f(:\n")


def test_python_header_comments(python):
    src = (
        '"""Generated by protoc.  DO NOT EDIT!"""\n'
        "import os\n\n"
        "def f():\n"
        "    # generate\n"
        "    pass\n"
    )
    assert python.header_comments(src) == ["Generated by protoc.  DO NOT EDIT!"]


def test_python_header_collects_leading_comments(python):
    src = "# -*- coding: utf-8 -*-\n# Generated file\nimport os\nx = 1\n# later\n"
    assert python.header_comments(src) == ["-*- coding: utf-8 -*-", "Generated file"]


def test_registry_lookup_by_extension():
    registry = default_registry()
    assert registry.for_path("cmd/main.go").name == "go"
    assert registry.for_path("pkg/mod.PY").name == "python"
    assert registry.for_path("README.md") is None
    assert registry.names() == ["go", "python"]


def test_registry_overrides_and_disabled():
    registry = default_registry(extensions={"gotmpl": "go"}, disabled=["python"])
    assert registry.for_path("page.gotmpl").name == "go"
    assert registry.for_path("mod.py") is None
    assert registry.get("python") is None


def test_registry_unknown_grammar_name():
    registry = GrammarRegistry()
    registry.map_extension(".rs", "rust")
    assert registry.for_path("lib.rs") is None
