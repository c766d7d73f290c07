"""
Clipboard Store

Named text slots that survive across batches for the lifetime of the engine
that owns them. Used to move or copy code between edits without the agent
retyping it.
"""

import logging
import threading
from typing import Dict, List

from patchvision.core.errors import ClipboardMissError, InputMalformedError

logger = logging.getLogger("PatchVision.Clipboard")


class ClipboardStore:
    """
    Mapping from clipboard name to captured text.

    - Last write wins.
    - Never cleared implicitly; ``clear()`` exists for callers that want it.
    - Guarded by a lock so one store can be shared by several engines.
    """

    def __init__(self):
        self._clips: Dict[str, str] = {}
        self._lock = threading.Lock()

    def capture(self, name: str, text: str) -> None:
        if not name:
            raise InputMalformedError("clipboard name cannot be empty")
        with self._lock:
            self._clips[name] = text
        logger.debug(f"Captured {len(text)} chars into clipboard {name!r}")

    def retrieve(self, name: str) -> str:
        with self._lock:
            try:
                return self._clips[name]
            except KeyError:
                raise ClipboardMissError(name) from None

    def names(self) -> List[str]:
        with self._lock:
            return sorted(self._clips)

    def clear(self) -> None:
        with self._lock:
            self._clips.clear()

    def __contains__(self, name: object) -> bool:
        with self._lock:
            return name in self._clips

    def __len__(self) -> int:
        with self._lock:
            return len(self._clips)
