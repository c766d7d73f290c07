import pytest

from patchvision.core.errors import InternalInvariantError
from patchvision.core.match_ladder import (
    MatchLadder,
    MatchSpec,
    MatchStatus,
    MatchTier,
    count_occurrences,
)

GO_SOURCE = "package main\n\nfunc main() {\n\tx:=1\n\t_ = x\n}\n"

GO_IF = "package main\n\nfunc main() {\n\tif ok {\n\t\trun( 1 )\n\t}\n}\n"


# ---------------------------------------------------------------------------
# Tier 1: exact
# ---------------------------------------------------------------------------

def test_exact_unique_match():
    doc = "alpha\nbeta\ngamma\n"
    outcome = MatchLadder().find(doc, "beta")
    assert outcome.status is MatchStatus.FOUND
    assert outcome.spec.tier is MatchTier.EXACT
    assert (outcome.spec.offset, outcome.spec.length) == (6, 4)
    assert outcome.spec.matched_text(doc) == "beta"


def test_exact_ambiguous_stops_the_ladder(python):
    # The token tier would not rescue this either; ambiguity is final.
    outcome = MatchLadder().find("x = 1\nx = 1\n", "x = 1", "x = 2", python)
    assert outcome.status is MatchStatus.AMBIGUOUS
    assert outcome.spec is None


def test_exact_counts_overlapping_occurrences():
    assert count_occurrences("aaa", "aa") == (2, 0)
    assert MatchLadder().find("aaa", "aa").status is MatchStatus.AMBIGUOUS


def test_nothing_found():
    assert MatchLadder().find("abc", "xyz").status is MatchStatus.NOT_FOUND


def test_empty_old_text_is_an_invariant_violation():
    with pytest.raises(InternalInvariantError):
        MatchLadder().find("abc", "")


# ---------------------------------------------------------------------------
# Tier 2: dedent
# ---------------------------------------------------------------------------

def test_missing_indentation_lands_on_the_lines_real_span():
    doc = "\tfoo()\n"
    outcome = MatchLadder().find(doc, "foo()\n")
    assert outcome.found
    assert (outcome.spec.offset, outcome.spec.length) == (1, 6)


def test_dedent_recovers_uniformly_shifted_block():
    doc = "func main() {\n\tif ok {\n\t\trun()\n\t\tstop()\n\t}\n}\n"
    old = "if ok {\n\trun()\n\tstop()\n}\n"
    new = "if ok {\n\trun()\n}\n"
    outcome = MatchLadder().find(doc, old, new)
    assert outcome.found
    spec = outcome.spec
    assert spec.tier is MatchTier.DEDENT
    assert spec.offset == 15
    assert spec.matched_text(doc) == "if ok {\n\t\trun()\n\t\tstop()\n\t}\n"
    # The replacement is shifted by the same delta.
    assert spec.replacement == "if ok {\n\t\trun()\n\t}\n"


def test_dedent_with_competing_deltas_is_not_found():
    doc = "if a {\n\tx()\n}\nif a {\n\t\tx()\n}\n"
    outcome = MatchLadder().find(doc, "if a {\n      x()")
    assert outcome.status is MatchStatus.NOT_FOUND


def test_dedent_probe_matching_twice_is_not_found():
    doc = "\tfoo(1)\n\tbar()\n\tfoo(1)\n\tbar()\n"
    outcome = MatchLadder().find(doc, "  foo(1)\n  bar()")
    assert outcome.status is MatchStatus.NOT_FOUND


def test_dedent_anchors_on_first_non_blank_line():
    doc = "a\n\n  foo\n  bar\n"
    outcome = MatchLadder().find(doc, "\nfoo\nbar\n", "\nfoo\nbaz\n")
    assert outcome.found
    spec = outcome.spec
    assert spec.tier is MatchTier.DEDENT
    assert spec.offset == 2
    assert spec.matched_text(doc) == "\n  foo\n  bar\n"
    assert spec.replacement == "\n  foo\n  baz\n"


# ---------------------------------------------------------------------------
# Tier 3: whitespace, bounded by grammar validity
# ---------------------------------------------------------------------------

def test_whitespace_match_ignores_surrounding_whitespace(go):
    old = "if ok {  \n  run( 1 )\n}"
    new = "if ok {\n  run( 2 )\n}"
    outcome = MatchLadder().find(GO_IF, old, new, go)
    assert outcome.found
    spec = outcome.spec
    assert spec.tier is MatchTier.WHITESPACE
    assert spec.matched_text(GO_IF) == "\tif ok {\n\t\trun( 1 )\n\t}"
    assert spec.replacement == "\tif ok {\n\t  run( 2 )\n\t}"


def test_whitespace_match_needs_a_grammar():
    ladder = MatchLadder(tiers=["exact", "dedent", "whitespace"])
    outcome = ladder.find(GO_IF, "if ok {  \n  run( 1 )\n}", "x")
    assert outcome.status is MatchStatus.NOT_FOUND


def test_whitespace_match_refuses_to_break_a_valid_document(go):
    ladder = MatchLadder(tiers=["exact", "dedent", "whitespace"])
    outcome = ladder.find(GO_IF, "if ok {  \n  run( 1 )\n}", "if ok {\n  run( 2 )\n", go)
    assert outcome.status is MatchStatus.NOT_FOUND


def test_whitespace_match_skips_lines_inside_block_comments(go):
    doc = "package main\n\n/* note\n   keep */\nvar x = 1\n"
    ladder = MatchLadder(tiers=["exact", "dedent", "whitespace"])
    outcome = ladder.find(doc, "/* note\n keep */\nvar x = 1", "var x = 2", go)
    assert outcome.status is MatchStatus.NOT_FOUND


def test_whitespace_match_refuses_edits_to_a_document_that_does_not_parse(go):
    doc = GO_IF + "\nvar = \n"
    ladder = MatchLadder(tiers=["exact", "dedent", "whitespace"])
    old = "if ok {  \n  run( 1 )\n}"
    assert ladder.find(doc, old, "if ok {\n  run( 1 )\n", go).status is MatchStatus.NOT_FOUND
    assert ladder.find(doc, old, "if ok {\n  run( 2 )\n}", go).status is MatchStatus.NOT_FOUND


def test_whitespace_match_needs_new_text(go):
    ladder = MatchLadder(tiers=["exact", "dedent", "whitespace"])
    assert ladder.find(GO_IF, "if ok {  \n  run( 1 )\n}", None, go).status is MatchStatus.NOT_FOUND


# ---------------------------------------------------------------------------
# Tier 4: tokens
# ---------------------------------------------------------------------------

def test_token_match_despite_spacing(go):
    outcome = MatchLadder().find(GO_SOURCE, "x := 1", "x := 2", go)
    assert outcome.found
    spec = outcome.spec
    assert spec.tier is MatchTier.TOKENS
    assert spec.matched_text(GO_SOURCE) == "x:=1"
    assert spec.offset == GO_SOURCE.index("x:=1")
    assert spec.replacement == "x := 2"


def test_token_match_in_python(python):
    doc = "def f():\n    return foo(a,b)\n"
    outcome = MatchLadder().find(doc, "return foo(a, b)", None, python)
    assert outcome.found
    assert outcome.spec.tier is MatchTier.TOKENS
    assert outcome.spec.matched_text(doc) == "return foo(a,b)"


def test_token_match_needs_a_grammar():
    assert MatchLadder().find(GO_SOURCE, "x := 1", "x := 2").status is MatchStatus.NOT_FOUND


def test_token_match_must_be_unique(go):
    doc = "package main\n\nvar a = f(1)\nvar b = f(1)\n"
    assert MatchLadder().find(doc, "f( 1 )", "f(2)", go).status is MatchStatus.NOT_FOUND


def test_token_match_trims_shared_line_ending_from_replacement(go):
    outcome = MatchLadder().find(GO_SOURCE, "x := 1\n", "x := 2\n", go)
    assert outcome.spec.replacement == "x := 2"


# ---------------------------------------------------------------------------
# Tier 5: first-line trim
# ---------------------------------------------------------------------------

def test_first_line_trim_drops_unchanged_first_line():
    doc = "// helper\nfunc helper() int {\n\treturn 1\n}\n"
    old = "  // stale comment\nfunc helper() int {\n\treturn 1\n}"
    new = "// stale comment\nfunc helper() int {\n\treturn 2\n}"
    outcome = MatchLadder().find(doc, old, new)
    assert outcome.found
    spec = outcome.spec
    assert spec.tier is MatchTier.TRIM
    assert spec.offset == len("// helper\n")
    assert spec.replacement == "func helper() int {\n\treturn 2\n}"
    assert spec.tier.suppresses_capture
    assert not spec.tier.adjusts_capture


def test_first_line_trim_requires_identical_first_lines():
    doc = "// helper\nfunc helper() int {\n\treturn 1\n}\n"
    old = "// stale\nfunc helper() int {\n\treturn 1\n}"
    new = "// fresh\nfunc helper() int {\n\treturn 2\n}"
    assert MatchLadder().find(doc, old, new).status is MatchStatus.NOT_FOUND


# ---------------------------------------------------------------------------
# Configuration and spans
# ---------------------------------------------------------------------------

def test_tier_order_is_fixed():
    assert MatchLadder(tiers=["trim", "exact"]).tiers == [MatchTier.EXACT, MatchTier.TRIM]
    assert MatchLadder().tiers == list(MatchTier)
    assert [t.level for t in MatchTier] == [1, 2, 3, 4, 5]


def test_disabled_tier_is_skipped(go):
    ladder = MatchLadder(tiers=["exact", "dedent", "whitespace", "trim"])
    assert ladder.find(GO_SOURCE, "x := 1", "x := 2", go).status is MatchStatus.NOT_FOUND


def test_minimized_span_covers_only_the_change():
    spec = MatchSpec(1, 4, MatchTier.EXACT, "bXde")
    small = spec.minimized("abcdef")
    assert (small.offset, small.length, small.replacement) == (2, 1, "X")


def test_minimized_pure_insertion():
    spec = MatchSpec(0, 3, MatchTier.EXACT, "abXc")
    small = spec.minimized("abc")
    assert (small.offset, small.length, small.replacement) == (2, 0, "X")
