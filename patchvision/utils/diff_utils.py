"""
Unified diff rendering for patch responses.
"""

import difflib
from typing import List

from patchvision.utils.ansi_utils import colorize_diff


def unified_diff(old: str, new: str, path: str, context: int = 3) -> str:
    """
    Unified diff between two versions of one file.

    Lines keep their endings; a missing final newline is marked the way
    diff(1) marks it.
    """
    old_lines = old.splitlines(keepends=True)
    new_lines = new.splitlines(keepends=True)
    out: List[str] = []
    for line in difflib.unified_diff(
        old_lines,
        new_lines,
        fromfile=f"a/{path}",
        tofile=f"b/{path}",
        n=context,
    ):
        if line.endswith("\n"):
            out.append(line)
        else:
            out.append(line + "\n\\ No newline at end of file\n")
    return "".join(out)


def diff_stats(diff: str) -> str:
    added = removed = 0
    for line in diff.splitlines():
        if line.startswith("+++") or line.startswith("---"):
            continue
        if line.startswith("+"):
            added += 1
        elif line.startswith("-"):
            removed += 1
    return f"+{added} -{removed}"


def render_diff(diff: str, color: bool = True) -> str:
    return colorize_diff(diff) if color else diff
