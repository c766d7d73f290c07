from pathlib import Path

from patchvision.ui import colors
from patchvision.utils.ansi_utils import colorize_diff, has_ansi
from patchvision.utils.diff_utils import diff_stats, render_diff, unified_diff
from patchvision.utils.path_utils import is_safe_path, resolve_base_dir, resolve_target


def test_unified_diff_headers_and_stats():
    diff = unified_diff("a\nb\n", "a\nc\nd\n", "x.txt")
    assert diff.startswith("--- a/x.txt\n+++ b/x.txt\n")
    assert diff_stats(diff) == "+2 -1"


def test_unified_diff_marks_missing_final_newline():
    diff = unified_diff("a\n", "a\nb", "x.txt")
    assert diff.endswith("+b\n\\ No newline at end of file\n")


def test_identical_content_has_empty_diff():
    assert unified_diff("same\n", "same\n", "x.txt") == ""
    assert diff_stats("") == "+0 -0"


def test_colorize_diff():
    diff = unified_diff("a\n", "b\n", "x.txt")
    colored = render_diff(diff)
    assert colors.colorize("+b", colors.DIFF_ADDED_FG) + "\n" in colored
    assert colors.colorize("-a", colors.DIFF_REMOVED_FG) + "\n" in colored
    assert render_diff(diff, color=False) == diff


def test_colorize_diff_leaves_escape_sequences_alone():
    diff = unified_diff("a\n", "\x1b[31mred\x1b[0m\n", "x.txt")
    assert has_ansi(diff)
    assert colorize_diff(diff) == diff


def test_resolve_base_dir_priority(tmp_path):
    cli = tmp_path / "cli"
    conf = tmp_path / "conf"
    assert resolve_base_dir(str(cli), str(conf)) == cli.resolve()
    assert resolve_base_dir(None, str(conf)) == conf.resolve()
    assert resolve_base_dir(None, None, cwd=tmp_path) == tmp_path.resolve()


def test_resolve_target_and_sandbox(tmp_path):
    base = tmp_path.resolve()
    assert resolve_target(base, "a/b.txt") == base / "a" / "b.txt"
    assert resolve_target(base, str(base / "c.txt")) == base / "c.txt"
    assert is_safe_path(base, base)
    assert is_safe_path(base, base / "a" / "b.txt")
    assert not is_safe_path(base, resolve_target(base, "../escape.txt"))
    assert not is_safe_path(base / "a", Path(base / "ab"))
