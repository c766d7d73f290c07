"""
Batch Editing Engine for PatchVision.

A batch is a list of operations against one file. All operations see the
same immutable snapshot of the document, and the batch either commits as a
whole or is rejected as a whole:

  - Structural errors (malformed request, clipboard miss, reindent mismatch,
    missing file) stop resolution immediately.
  - Matching errors (not found, ambiguous) are collected so one rejection
    reports every failing operation at once.
  - Overlapping edits are detected after all operations resolved.

The engine is content-centric: it operates on strings and returns new
strings, leaving filesystem I/O to SafePatchEngine. The only state that
outlives a batch is the clipboard store.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Union

from patchvision.core.clipboard import ClipboardStore
from patchvision.core.edit_buffer import EditBuffer
from patchvision.core.errors import (
    AmbiguousMatchError,
    EditingError,
    FileMissingError,
    InputMalformedError,
    InternalInvariantError,
    NoMatchError,
    OverlapConflictError,
    UnsupportedOperationError,
)
from patchvision.core.grammars.base import Grammar
from patchvision.core.match_ladder import MatchLadder, MatchStatus
from patchvision.core.operations import OperationKind, PatchOperation
from patchvision.core.reindent import apply_reindent

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ClipboardAdjustment:
    """A clipboard whose content differs from the caller's old text."""

    name: str
    text: str
    operation: str

    def describe(self) -> str:
        return f"clipboard {self.name!r} adjusted to the text actually matched by {self.operation}:\n{self.text}"


@dataclass
class EditPlan:
    """Outcome of the resolve phase: pending edits or the errors that block them."""

    document: str
    buffer: EditBuffer
    notes: List[ClipboardAdjustment] = field(default_factory=list)
    errors: List[EditingError] = field(default_factory=list)
    aborted: bool = False

    @property
    def ok(self) -> bool:
        return not self.errors

    def materialize(self) -> str:
        if self.errors:
            raise InternalInvariantError("cannot materialize a plan that has errors")
        return self.buffer.materialize()


@dataclass(frozen=True)
class Committed:
    content: str
    notes: List[ClipboardAdjustment] = field(default_factory=list)


@dataclass(frozen=True)
class Rejected:
    errors: List[EditingError]
    notes: List[ClipboardAdjustment] = field(default_factory=list)

    def message(self) -> str:
        return "\n\n".join(str(e) for e in self.errors)


BatchResult = Union[Committed, Rejected]


class EditingEngine:
    """
    Resolves batches of operations against a document snapshot.

    The clipboard store is owned by the engine (or shared by the caller) and
    survives every batch, including rejected ones.
    """

    def __init__(
        self,
        clipboard: Optional[ClipboardStore] = None,
        ladder: Optional[MatchLadder] = None,
    ):
        self.clipboard = clipboard if clipboard is not None else ClipboardStore()
        self.ladder = ladder if ladder is not None else MatchLadder()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def run(
        self,
        document: Optional[str],
        operations: Sequence[PatchOperation],
        grammar: Optional[Grammar] = None,
    ) -> BatchResult:
        """Resolve and, when nothing failed, materialize one batch."""
        plan = self.resolve(document, operations, grammar)
        if not plan.ok:
            return Rejected(list(plan.errors), list(plan.notes))
        return Committed(plan.materialize(), list(plan.notes))

    def resolve(
        self,
        document: Optional[str],
        operations: Sequence[PatchOperation],
        grammar: Optional[Grammar] = None,
    ) -> EditPlan:
        """
        Resolve every operation against ``document`` without touching disk.

        ``document`` is None when the target file does not exist; only
        operations that can create a file are then allowed.
        """
        plan = EditPlan(document=document or "", buffer=EditBuffer(document or ""))

        if document is None:
            for i, op in enumerate(operations):
                label = self._label(i, op)
                try:
                    if not self._kind_of(op, label).creates_file:
                        raise FileMissingError(
                            "file does not exist; only prepend_bof, append_eof and overwrite can create it",
                            operation=label,
                        )
                except EditingError as e:
                    plan.errors.append(e)
                    plan.aborted = True
                    return plan

        for i, op in enumerate(operations):
            label = self._label(i, op)
            try:
                self._resolve_operation(plan, op, label, grammar)
            except EditingError as e:
                if e.operation is None:
                    e.operation = label
                plan.errors.append(e)
                if e.structural:
                    logger.debug(f"Aborting batch at {label}: {e.message}")
                    plan.aborted = True
                    return plan

        if not plan.errors:
            try:
                plan.buffer.check_overlaps()
            except OverlapConflictError as e:
                plan.errors.append(e)

        return plan

    # ------------------------------------------------------------------
    # Per-operation resolution
    # ------------------------------------------------------------------
    @staticmethod
    def _label(index: int, op: PatchOperation) -> str:
        kind = op.kind.value if isinstance(op.kind, OperationKind) else op.kind
        return f"operation {index + 1} ({kind})"

    @staticmethod
    def _kind_of(op: PatchOperation, label: str) -> OperationKind:
        try:
            return OperationKind(op.kind)
        except ValueError:
            raise UnsupportedOperationError(f"unsupported operation {op.kind!r}", operation=label) from None

    def _resolve_operation(
        self,
        plan: EditPlan,
        op: PatchOperation,
        label: str,
        grammar: Optional[Grammar],
    ) -> None:
        kind = self._kind_of(op, label)
        new_text = op.new_text

        if op.capture_to:
            if kind is not OperationKind.REPLACE or not op.old_text:
                raise InputMalformedError("toClipboard requires a replace operation with non-empty oldText")
            self.clipboard.capture(op.capture_to, op.old_text)
        if op.source_from:
            new_text = self.clipboard.retrieve(op.source_from)
        new_text = apply_reindent(new_text, op.reindent)

        document = plan.document
        buffer = plan.buffer
        if kind is OperationKind.PREPEND_BOF:
            buffer.insert(0, new_text, label=label)
        elif kind is OperationKind.APPEND_EOF:
            buffer.insert(len(document), new_text, label=label)
        elif kind is OperationKind.OVERWRITE:
            buffer.replace(0, len(document), new_text, label=label, exclusive=True)
        else:
            self._resolve_replace(plan, op, new_text, label, grammar)

    def _resolve_replace(
        self,
        plan: EditPlan,
        op: PatchOperation,
        new_text: str,
        label: str,
        grammar: Optional[Grammar],
    ) -> None:
        if not op.old_text:
            raise InputMalformedError("replace requires non-empty oldText")

        outcome = self.ladder.find(plan.document, op.old_text, new_text, grammar)
        if outcome.status is MatchStatus.AMBIGUOUS:
            raise AmbiguousMatchError(op.old_text, operation=label)
        if outcome.status is MatchStatus.NOT_FOUND:
            raise NoMatchError(op.old_text, operation=label)

        spec = outcome.spec
        if spec is None:
            raise InternalInvariantError("match reported without a span", operation=label)

        if op.capture_to and spec.tier.adjusts_capture:
            actual = spec.matched_text(plan.document)
            self.clipboard.capture(op.capture_to, actual)
            plan.notes.append(ClipboardAdjustment(op.capture_to, actual, label))

        if new_text == op.old_text:
            logger.debug(f"{label} leaves the text unchanged, nothing to register")
            return

        edit = spec.minimized(plan.document)
        if edit.length == 0 and not edit.replacement:
            return
        plan.buffer.replace(edit.offset, edit.length, edit.replacement or "", label=label)
