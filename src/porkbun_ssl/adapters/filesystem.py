"""
Filesystem adapter — write certificate material to local paths.

Adapter layer — implements the FilePersister port.

Every file may contain a private key, so files are always left with mode
0600, and any directory this adapter creates gets 0700. Existing
directories are not touched. Writes truncate in place: no temp file, no
rename, no rollback.
"""

from __future__ import annotations

import os
from pathlib import Path

import structlog
from railway import ErrorCode
from railway.result import Result

log = structlog.get_logger()

FILE_MODE = 0o600
DIRECTORY_MODE = 0o700


class LocalFilePersister:
    """
    Persist text files with owner-only permissions.

    All OSErrors are caught at this adapter boundary via Result.from_computation().
    """

    def save(self, path: str | Path, content: str) -> Result[Path]:
        """Write content to path, creating missing parents. Returns the path written."""
        target = Path(path)
        return Result.from_computation(
            lambda: self._write(target, content),
            ErrorCode.IO_ERROR,
            f"Failed to write {target}",
        )

    def _write(self, path: Path, content: str) -> Path:
        self._ensure_parents(path)
        fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, FILE_MODE)
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            fh.write(content)
        # O_CREAT's mode only applies to new files.
        os.chmod(path, FILE_MODE)
        log.debug("file.written", path=str(path), size=len(content))
        return path

    @staticmethod
    def _ensure_parents(path: Path) -> None:
        """Create missing ancestors one by one so each gets DIRECTORY_MODE."""
        for parent in reversed(path.parents):
            if not parent.exists():
                parent.mkdir(mode=DIRECTORY_MODE, exist_ok=True)
