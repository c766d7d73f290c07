"""
Edit Buffer

Accumulates edits against one immutable original text and materializes the
result in a single pass. Every edit is expressed in the coordinates of the
original text, regardless of the order the edits were registered in, so
operations of one batch never see each other's output.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional

from patchvision.core.errors import InternalInvariantError, OverlapConflictError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PendingEdit:
    """Replace ``original[offset:offset + length]`` with ``text``."""

    offset: int
    length: int
    text: str
    label: str
    seq: int
    exclusive: bool = False

    @property
    def end(self) -> int:
        return self.offset + self.length

    def describe(self) -> str:
        return f"{self.label} [{self.offset},{self.end})"


class EditBuffer:
    def __init__(self, original: str):
        self.original = original
        self._edits: List[PendingEdit] = []

    def __len__(self) -> int:
        return len(self._edits)

    @property
    def edits(self) -> List[PendingEdit]:
        return list(self._edits)

    def register_edit(
        self,
        offset: int,
        length: int,
        replacement: str,
        *,
        label: Optional[str] = None,
        exclusive: bool = False,
    ) -> PendingEdit:
        """
        Record a pending edit.

        ``exclusive`` marks an edit that may not coexist with any other edit
        in the buffer (a whole-document overwrite).
        """
        if offset < 0 or length < 0 or offset + length > len(self.original):
            raise InternalInvariantError(
                f"edit span [{offset},{offset + length}) outside document of length {len(self.original)}",
                operation=label,
            )
        edit = PendingEdit(
            offset=offset,
            length=length,
            text=replacement,
            label=label or f"edit {len(self._edits) + 1}",
            seq=len(self._edits),
            exclusive=exclusive,
        )
        self._edits.append(edit)
        return edit

    def insert(self, offset: int, text: str, *, label: Optional[str] = None) -> PendingEdit:
        return self.register_edit(offset, 0, text, label=label)

    def replace(
        self,
        offset: int,
        length: int,
        text: str,
        *,
        label: Optional[str] = None,
        exclusive: bool = False,
    ) -> PendingEdit:
        return self.register_edit(offset, length, text, label=label, exclusive=exclusive)

    def check_overlaps(self) -> None:
        """Raise OverlapConflictError for the first pair of intersecting edits."""
        for edit in self._edits:
            if edit.exclusive and len(self._edits) > 1:
                other = next(e for e in self._edits if e is not edit)
                first, second = sorted((edit, other), key=lambda e: e.seq)
                raise OverlapConflictError(first.describe(), second.describe())

        previous: Optional[PendingEdit] = None
        for edit in self._sorted():
            # Insertions sitting exactly on a boundary never conflict.
            if previous is not None and edit.offset < previous.end:
                raise OverlapConflictError(previous.describe(), edit.describe())
            if previous is None or edit.end >= previous.end:
                previous = edit

    def materialize(self) -> str:
        self.check_overlaps()
        out: List[str] = []
        cursor = 0
        for edit in self._sorted():
            out.append(self.original[cursor:edit.offset])
            out.append(edit.text)
            cursor = edit.end
        out.append(self.original[cursor:])
        logger.debug(f"Materialized {len(self._edits)} edits")
        return "".join(out)

    def _sorted(self) -> List[PendingEdit]:
        # At equal offsets insertions come first, then registration order.
        return sorted(self._edits, key=lambda e: (e.offset, e.length > 0, e.seq))
