"""
ANSI Code Utilities

Colouring of unified diff output for terminals.
"""

import re

from patchvision.ui import colors

# Full ANSI sequences: \x1b[ followed by digits/semicolons and command char
ANSI_RE = re.compile(r"\x1b\[[0-9;]*[a-zA-Z]")


def has_ansi(text: str) -> bool:
    return bool(ANSI_RE.search(text))


def colorize_diff(diff: str) -> str:
    """
    Color a unified diff line by line.

    Diffs of content that already carries escape sequences are returned
    unchanged, so the file's own codes are never mixed with ours.
    """
    if not diff or has_ansi(diff):
        return diff
    out = []
    for line in diff.splitlines(keepends=True):
        body = line.rstrip("\n")
        end = line[len(body):]
        if line.startswith("+++") or line.startswith("---"):
            out.append(colors.colorize(body, colors.DIFF_HEADER_FG) + end)
        elif line.startswith("@@"):
            out.append(colors.colorize(body, colors.DIFF_HUNK_FG) + end)
        elif line.startswith("+"):
            out.append(colors.colorize(body, colors.DIFF_ADDED_FG) + end)
        elif line.startswith("-"):
            out.append(colors.colorize(body, colors.DIFF_REMOVED_FG) + end)
        else:
            out.append(line)
    return "".join(out)
