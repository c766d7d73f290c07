"""
File Service

Reads a patch target once and writes the result once. Content is exchanged
as text decoded with UTF-8 ``surrogateescape``, so bytes that are not valid
UTF-8 survive a read/write cycle unchanged.
"""

import logging
import os
import stat
import tempfile
from pathlib import Path
from typing import Optional, Union

from patchvision.core.errors import IOFailureError

logger = logging.getLogger("PatchVision.FileService")

ENCODING = "utf-8"
ERRORS = "surrogateescape"

DEFAULT_FILE_MODE = 0o600
DEFAULT_DIR_MODE = 0o700


def decode(data: bytes) -> str:
    return data.decode(ENCODING, ERRORS)


def encode(text: str) -> bytes:
    return text.encode(ENCODING, ERRORS)


class FileService:
    """
    Service class for patch target I/O.

    Provides:
    - Reads that report a missing file as None instead of an error
    - Atomic writes (temp file in the same directory + os.replace)
    - Parent directory creation
    - Mode preservation for existing files
    """

    def __init__(self, file_mode: int = DEFAULT_FILE_MODE, dir_mode: int = DEFAULT_DIR_MODE):
        """
        Initialize file service.

        Args:
            file_mode: Permission bits for files this service creates
            dir_mode: Permission bits for directories this service creates
        """
        self.file_mode = file_mode
        self.dir_mode = dir_mode

    def read(self, path: Union[str, Path]) -> Optional[str]:
        """
        Read file content.

        Args:
            path: Absolute file path

        Returns:
            Decoded content, or None if the file does not exist

        Raises:
            IOFailureError: If the path exists but cannot be read
        """
        p = Path(path)
        try:
            data = p.read_bytes()
        except FileNotFoundError:
            logger.debug(f"File not found: {p}")
            return None
        except OSError as e:
            logger.error(f"Failed to read {p}: {e}")
            raise IOFailureError(f"failed to read {p}: {e}") from e
        return decode(data)

    def write(self, path: Union[str, Path], content: str) -> None:
        """
        Atomically replace the file with content.

        Args:
            path: Absolute file path
            content: Text as returned by read() or produced by the engine

        Raises:
            IOFailureError: If directories or the file cannot be written
        """
        p = Path(path)
        try:
            mode = stat.S_IMODE(p.stat().st_mode)
        except FileNotFoundError:
            mode = self.file_mode
        except OSError as e:
            raise IOFailureError(f"failed to stat {p}: {e}") from e

        try:
            p.parent.mkdir(mode=self.dir_mode, parents=True, exist_ok=True)
        except OSError as e:
            logger.error(f"Failed to create {p.parent}: {e}")
            raise IOFailureError(f"failed to create directory {p.parent}: {e}") from e

        try:
            fd, tmp_name = tempfile.mkstemp(dir=p.parent, prefix=f".{p.name}.", suffix=".tmp")
        except OSError as e:
            raise IOFailureError(f"failed to create temporary file next to {p}: {e}") from e
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(encode(content))
                f.flush()
                os.fsync(f.fileno())
            os.chmod(tmp_name, mode)
            os.replace(tmp_name, p)
        except OSError as e:
            logger.error(f"Failed to write {p}: {e}")
            try:
                os.unlink(tmp_name)
            except FileNotFoundError:
                pass
            raise IOFailureError(f"failed to write {p}: {e}") from e
        logger.debug(f"File written: {p}")

    def exists(self, path: Union[str, Path]) -> bool:
        return Path(path).exists()
