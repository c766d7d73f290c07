from patchvision.core.errors import ReindentPrefixMismatchError
from patchvision.core.operations import Reindent
from patchvision.core.reindent import apply_reindent, reindent


def test_strip_removes_prefix_and_leaves_empty_lines():
    assert reindent("  a\n\n  b\n", strip="  ", add="") == "a\n\nb\n"


def test_strip_is_a_precondition():
    try:
        reindent("a\n", strip="  ", add="")
    except ReindentPrefixMismatchError as e:
        assert e.line == "a"
        assert e.prefix == "  "
        assert "'a'" in str(e)
    else:
        assert False, "Expected ReindentPrefixMismatchError"


def test_add_preserves_terminal_newline_or_its_absence():
    assert reindent("a\nb", add="\t") == "\ta\n\tb"
    assert reindent("a\nb\n", add="\t") == "\ta\n\tb\n"
    assert reindent("a\n\n\nb", add="  ") == "  a\n\n\n  b"


def test_strip_then_add_keeps_relative_indentation():
    assert reindent("    x\n      y\n", strip="    ", add="\t") == "\tx\n\t  y\n"


def test_whitespace_only_line_is_not_empty():
    try:
        reindent("  a\n \n", strip="  ")
    except ReindentPrefixMismatchError as e:
        assert e.line == " "
    else:
        assert False, "Expected ReindentPrefixMismatchError"


def test_apply_reindent():
    assert apply_reindent("  x", None) == "  x"
    assert apply_reindent("  x\n  y", Reindent(strip="  ", add="")) == "x\ny"
    assert apply_reindent("", Reindent(strip="  ", add="\t")) == ""


def test_reindent_mismatch_is_structural():
    assert ReindentPrefixMismatchError("a", "  ").structural
