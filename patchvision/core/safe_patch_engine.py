import logging
import threading
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from patchvision.config.settings import EngineSettings
from patchvision.core.autogen import AutogenDetector
from patchvision.core.clipboard import ClipboardStore
from patchvision.core.editing_engine import ClipboardAdjustment, EditingEngine, Rejected
from patchvision.core.errors import DeadlineExceededError, EditingError, InputMalformedError
from patchvision.core.grammars.registry import GrammarRegistry, default_registry
from patchvision.core.match_ladder import MatchLadder
from patchvision.core.operations import PatchRequest
from patchvision.core.request_normalizer import RequestNormalizer
from patchvision.services.file_service import FileService
from patchvision.utils.diff_utils import diff_stats, unified_diff
from patchvision.utils.path_utils import is_safe_path, resolve_base_dir, resolve_target

logger = logging.getLogger(__name__)


@dataclass
class DisplayData:
    """What a UI needs to render the change."""

    path: str
    old_content: str
    new_content: str
    diff: str


@dataclass
class PatchResponse:
    path: str
    committed: bool
    errors: List[EditingError] = field(default_factory=list)
    notes: List[ClipboardAdjustment] = field(default_factory=list)
    generated: bool = False
    diff: str = ""
    old_content: Optional[str] = None
    new_content: Optional[str] = None
    written: bool = False
    dry_run: bool = False

    @property
    def created(self) -> bool:
        return self.committed and self.old_content is None

    @property
    def changed(self) -> bool:
        return self.committed and self.new_content != self.old_content

    @property
    def display(self) -> Optional[DisplayData]:
        if not self.committed:
            return None
        return DisplayData(self.path, self.old_content or "", self.new_content or "", self.diff)

    def to_text(self) -> str:
        lines: List[str] = []
        if not self.committed:
            lines.append(f"Patch to {self.path} rejected; nothing was written.")
            for error in self.errors:
                lines.append("")
                lines.append(f"Error: {error}")
        elif self.dry_run:
            lines.append(f"Dry run: {self.path} would be {'created' if self.created else 'patched'} ({diff_stats(self.diff)}).")
        elif not self.changed:
            lines.append(f"No changes to {self.path}; the edits leave it as it is.")
        elif self.created:
            lines.append(f"Created {self.path} ({diff_stats(self.diff)}).")
        else:
            lines.append(f"Patched {self.path} ({diff_stats(self.diff)}).")

        for note in self.notes:
            lines.append("")
            lines.append(f"Note: {note.describe()}")

        if self.generated:
            lines.append("")
            lines.append(
                f"Warning: {self.path} appears to be autogenerated; "
                "edit its generator instead or the change may be overwritten."
            )

        if self.committed and self.diff:
            lines.append("")
            lines.append(self.diff.rstrip("\n"))
        return "\n".join(lines)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "path": self.path,
            "status": "committed" if self.committed else "rejected",
            "written": self.written,
            "dry_run": self.dry_run,
            "generated": self.generated,
            "errors": [str(e) for e in self.errors],
            "clipboard_notes": [{"name": n.name, "text": n.text, "operation": n.operation} for n in self.notes],
            "diff": self.diff,
        }


class SafePatchEngine:
    """
    Safe Patch Engine

    - One read and at most one write per batch
    - Atomic writes, created parents, preserved file modes
    - Optional sandbox (never leaves the working directory)
    - Batches on one instance are serialized; the clipboard store lives as
      long as the instance
    """

    def __init__(
        self,
        working_dir: Optional[Union[str, Path]] = None,
        settings: Optional[EngineSettings] = None,
        file_service: Optional[FileService] = None,
        grammars: Optional[GrammarRegistry] = None,
        clipboard: Optional[ClipboardStore] = None,
    ):
        self.settings = settings or EngineSettings()
        self.project_root = resolve_base_dir(
            cli_arg=str(working_dir) if working_dir is not None else None,
            config_val=self.settings.working_dir,
        )
        self.cwd = self.project_root

        self.files = file_service or FileService(self.settings.file_mode, self.settings.dir_mode)
        self.grammars = grammars or default_registry(
            self.settings.grammar_extensions, self.settings.disabled_grammars
        )
        self.autogen = AutogenDetector(self.settings.header_phrases, self.settings.generated_markers)
        self.normalizer = RequestNormalizer()
        self._engine = EditingEngine(clipboard, MatchLadder(self.settings.tiers))
        self._lock = threading.Lock()

    @property
    def clipboard(self) -> ClipboardStore:
        return self._engine.clipboard

    # -----------------------------------------------------------
    # PATH VALIDATION
    # -----------------------------------------------------------

    def _validate_path(self, file_path: Union[str, Path]) -> Path:
        """
        Resolve file_path against the current directory. With the sandbox
        enabled the result must stay inside the working directory.
        """
        path = resolve_target(self.cwd, file_path)
        if self.settings.sandbox and not is_safe_path(self.project_root, path):
            raise InputMalformedError(f"Sandbox Violation: {path} outside workspace root")
        return path

    @staticmethod
    def _check_deadline(deadline: Optional[float], stage: str) -> None:
        if deadline is not None and time.monotonic() > deadline:
            raise DeadlineExceededError(f"deadline passed before {stage}")

    # -----------------------------------------------------------
    # APPLY
    # -----------------------------------------------------------

    def apply(
        self,
        request: Union[PatchRequest, Dict[str, Any], str, bytes],
        *,
        deadline: Optional[float] = None,
        dry_run: Optional[bool] = None,
    ) -> PatchResponse:
        """
        Apply one batch request.

        Args:
            request: PatchRequest, or a raw dict/JSON payload
            deadline: time.monotonic() value after which the batch is rejected
            dry_run: Resolve and diff without writing (defaults to settings)

        Returns:
            PatchResponse; failures are reported in it, never raised
        """
        if dry_run is None:
            dry_run = self.settings.dry_run
        with self._lock:
            return self._apply_locked(request, deadline, dry_run)

    def _apply_locked(
        self,
        request: Union[PatchRequest, Dict[str, Any], str, bytes],
        deadline: Optional[float],
        dry_run: bool,
    ) -> PatchResponse:
        display_path = request.path if isinstance(request, PatchRequest) else _raw_path(request)
        notes: List[ClipboardAdjustment] = []
        try:
            if not isinstance(request, PatchRequest):
                request = self.normalizer.normalize(request)
            display_path = request.path
            path = self._validate_path(request.path)

            self._check_deadline(deadline, "reading")
            original = self.files.read(path)
            grammar = self.grammars.for_path(path)

            result = self._engine.run(original, request.operations, grammar)
            notes = result.notes
            if isinstance(result, Rejected):
                logger.info(f"Rejected patch to {path}: {len(result.errors)} error(s)")
                return PatchResponse(display_path, False, errors=result.errors, notes=result.notes)

            new_content = result.content
            generated = self.autogen.is_generated(original if original is not None else new_content, grammar)
            if generated:
                logger.warning(f"{path} appears to be autogenerated")

            diff = unified_diff(original or "", new_content, display_path)
            written = False
            if not dry_run and (original is None or new_content != original):
                self._check_deadline(deadline, "writing")
                self.files.write(path, new_content)
                written = True
                logger.info(f"Patched {path} ({diff_stats(diff)})")

            return PatchResponse(
                display_path,
                True,
                notes=result.notes,
                generated=generated,
                diff=diff,
                old_content=original,
                new_content=new_content,
                written=written,
                dry_run=dry_run,
            )
        except EditingError as e:
            logger.info(f"Rejected patch to {display_path}: {e}")
            return PatchResponse(display_path, False, errors=[e], notes=notes)

    def apply_many(self, requests: List[Union[PatchRequest, Dict[str, Any], str]], **kwargs: Any) -> List[PatchResponse]:
        return [self.apply(r, **kwargs) for r in requests]


def _raw_path(request: Any) -> str:
    if isinstance(request, dict) and isinstance(request.get("path"), str):
        return request["path"]
    return "<unknown>"
