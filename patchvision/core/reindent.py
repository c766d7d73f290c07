"""Line-prefix rewrite applied to replacement text before it is inserted."""

from __future__ import annotations

from typing import Optional

from patchvision.core.errors import ReindentPrefixMismatchError
from patchvision.core.operations import Reindent


def reindent(text: str, strip: str = "", add: str = "") -> str:
    """
    Strip ``strip`` from, then prepend ``add`` to, every non-empty line.

    Stripping is a precondition: the first non-empty line without the prefix
    raises ReindentPrefixMismatchError naming that line. Empty lines are left
    alone, so the line count and the presence of a final newline never change.
    """
    lines = text.split("\n")

    for i, line in enumerate(lines):
        if line == "":
            continue
        if not line.startswith(strip):
            raise ReindentPrefixMismatchError(line, strip)
        lines[i] = line[len(strip):]

    for i, line in enumerate(lines):
        if line == "":
            continue
        lines[i] = add + line

    return "\n".join(lines)


def apply_reindent(text: str, adjustment: Optional[Reindent]) -> str:
    if adjustment is None:
        return text
    return reindent(text, adjustment.strip, adjustment.add)
