"""
Temporary workspaces for synthesized projects.

Each workspace is an exclusively-owned directory. Cleanup deletes it
synchronously; if that fails the path is queued on a process-wide list that
an ``atexit`` hook drains, best-effort, at interpreter shutdown.
"""
from __future__ import annotations

import atexit
import logging
import shutil
import tempfile
import threading
from pathlib import Path
from typing import List, Optional

from java_builder.errors import WorkspaceCreationError

logger = logging.getLogger(__name__)

_pending_cleanup: List[Path] = []
_pending_lock = threading.Lock()
_hook_installed = False


def _drain_pending_cleanup() -> None:
    with _pending_lock:
        paths = list(_pending_cleanup)
        _pending_cleanup.clear()
    for path in paths:
        shutil.rmtree(path, ignore_errors=True)


def schedule_delete_on_exit(path: Path) -> None:
    """Queue *path* for recursive deletion when the interpreter exits."""
    global _hook_installed
    with _pending_lock:
        if not _hook_installed:
            atexit.register(_drain_pending_cleanup)
            _hook_installed = True
        if path not in _pending_cleanup:
            _pending_cleanup.append(path)


def pending_cleanup() -> List[Path]:
    """Paths currently queued for deletion at exit."""
    with _pending_lock:
        return list(_pending_cleanup)


class TemporaryWorkspace:
    """A temporary directory tree holding one synthesized project."""

    def __init__(self, path: Path):
        self.path = path
        self.cleaned = False

    @classmethod
    def create(cls, parent: Optional[Path] = None, prefix: str = "java") -> TemporaryWorkspace:
        """
        Create a fresh, empty workspace directory.

        Raises
        ------
        WorkspaceCreationError
            If the directory cannot be created.
        """
        try:
            if parent is not None:
                parent.mkdir(parents=True, exist_ok=True)
            path = Path(tempfile.mkdtemp(prefix=prefix, dir=parent))
        except OSError as e:
            raise WorkspaceCreationError(f"Could not create temporary directory: {e}") from e
        logger.debug("Created workspace %s", path)
        return cls(path)

    def cleanup(self) -> bool:
        """
        Delete the workspace. Returns True if it is gone now, False if
        deletion was deferred to process exit.
        """
        if self.cleaned:
            return True
        self.cleaned = True
        if not self.path.exists():
            return True
        try:
            shutil.rmtree(self.path)
        except OSError as e:
            logger.warning("Could not delete %s (%s); deleting on exit", self.path, e)
            schedule_delete_on_exit(self.path)
            return False
        logger.debug("Cleaned up workspace %s", self.path)
        return True

    def __enter__(self) -> TemporaryWorkspace:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.cleanup()

    def __repr__(self) -> str:
        return f"TemporaryWorkspace({str(self.path)!r})"
