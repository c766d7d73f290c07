"""
Core match-and-apply engine.

Pure, I/O-free pieces: the match ladder, clipboard store, reindent
transform, edit buffer and batch orchestrator. File access lives in
patchvision.core.safe_patch_engine.
"""

from patchvision.core.clipboard import ClipboardStore
from patchvision.core.edit_buffer import EditBuffer, PendingEdit
from patchvision.core.editing_engine import (
    BatchResult,
    ClipboardAdjustment,
    Committed,
    EditingEngine,
    EditPlan,
    Rejected,
)
from patchvision.core.errors import EditingError
from patchvision.core.match_ladder import MatchLadder, MatchOutcome, MatchSpec, MatchStatus, MatchTier
from patchvision.core.operations import OperationKind, PatchOperation, PatchRequest, Reindent
from patchvision.core.reindent import reindent

__all__ = [
    "BatchResult",
    "ClipboardAdjustment",
    "ClipboardStore",
    "Committed",
    "EditBuffer",
    "EditingEngine",
    "EditingError",
    "EditPlan",
    "MatchLadder",
    "MatchOutcome",
    "MatchSpec",
    "MatchStatus",
    "MatchTier",
    "OperationKind",
    "PatchOperation",
    "PatchRequest",
    "PendingEdit",
    "Rejected",
    "Reindent",
    "reindent",
]
