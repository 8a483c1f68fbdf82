"""
Sync Status Engine

Classifies a repository/system file pair by existence, content hash and
modification time.

Author: Tron Project
License: MIT
"""

from enum import Enum
from pathlib import Path
from typing import Optional

from ..utils.filesystem import FileSystem, LocalFileSystem
from ..utils.logger import get_logger

logger = get_logger(__name__)


class SyncStatus(Enum):
    """Relationship between the repository copy and the system copy."""
    SYNCED = "synced"
    REPO_NEWER = "repo_newer"
    SYSTEM_NEWER = "system_newer"
    CONFLICT = "conflict"
    REPO_MISSING = "repo_missing"
    SYSTEM_MISSING = "system_missing"
    BOTH_MISSING = "both_missing"

    @property
    def label(self) -> str:
        return _LABELS[self]

    @property
    def style(self) -> str:
        """Rich style used when displaying the status."""
        return _STYLES[self]


_LABELS = {
    SyncStatus.SYNCED: "✓ synced",
    SyncStatus.REPO_NEWER: "→ repo newer",
    SyncStatus.SYSTEM_NEWER: "← system newer",
    SyncStatus.CONFLICT: "⚡ conflict",
    SyncStatus.REPO_MISSING: "? repo missing",
    SyncStatus.SYSTEM_MISSING: "? system missing",
    SyncStatus.BOTH_MISSING: "✗ both missing",
}

_STYLES = {
    SyncStatus.SYNCED: "green",
    SyncStatus.REPO_NEWER: "cyan",
    SyncStatus.SYSTEM_NEWER: "yellow",
    SyncStatus.CONFLICT: "red",
    SyncStatus.REPO_MISSING: "red",
    SyncStatus.SYSTEM_MISSING: "magenta",
    SyncStatus.BOTH_MISSING: "red",
}


class SyncStatusEngine:
    """
    Computes the SyncStatus of a file pair.

    Content equality wins over timestamps: files that hash the same are
    SYNCED however their modification times compare. Differing files are
    ordered by modification time; a tie, or a file whose content or
    timestamp can't be read, is a CONFLICT. Nothing here raises.
    """

    def __init__(self, fs: Optional[FileSystem] = None):
        """
        Initialize the engine.

        Args:
            fs: Filesystem to inspect (defaults to the local disk)
        """
        self.fs = fs or LocalFileSystem()

    def classify(self, repo_path: Path, system_path: Path) -> SyncStatus:
        """
        Classify a repository/system pair.

        Args:
            repo_path: Absolute path of the repository copy
            system_path: Absolute path of the system copy

        Returns:
            The single status holding for the pair right now
        """
        repo_exists = self.fs.exists(repo_path)
        system_exists = self.fs.exists(system_path)

        if not repo_exists and not system_exists:
            return SyncStatus.BOTH_MISSING
        if not repo_exists:
            return SyncStatus.REPO_MISSING
        if not system_exists:
            return SyncStatus.SYSTEM_MISSING

        repo_hash = self._hash(repo_path)
        system_hash = self._hash(system_path)

        if repo_hash is None or system_hash is None:
            return SyncStatus.CONFLICT

        if repo_hash == system_hash:
            return SyncStatus.SYNCED

        repo_mtime = self._mtime(repo_path)
        system_mtime = self._mtime(system_path)

        if repo_mtime is None or system_mtime is None:
            return SyncStatus.CONFLICT
        if repo_mtime > system_mtime:
            return SyncStatus.REPO_NEWER
        if system_mtime > repo_mtime:
            return SyncStatus.SYSTEM_NEWER
        return SyncStatus.CONFLICT

    def _hash(self, path: Path) -> Optional[str]:
        try:
            return self.fs.file_hash(path)
        except OSError as e:
            logger.warning(f"Could not hash {path}: {e}")
            return None

    def _mtime(self, path: Path) -> Optional[float]:
        try:
            return self.fs.mtime(path)
        except OSError as e:
            logger.warning(f"Could not read modification time of {path}: {e}")
            return None


def classify(repo_path: Path, system_path: Path, fs: Optional[FileSystem] = None) -> SyncStatus:
    """
    Convenience function to classify a single pair.

    Args:
        repo_path: Absolute path of the repository copy
        system_path: Absolute path of the system copy
        fs: Filesystem to inspect (defaults to the local disk)

    Returns:
        SyncStatus of the pair
    """
    return SyncStatusEngine(fs).classify(repo_path, system_path)
