"""
Filesystem Abstraction

The status engine, the sync executor and the orchestrator never touch
the disk directly; they go through a FileSystem. LocalFileSystem works on
real paths, MemoryFileSystem keeps files in a dict with an explicit clock
so that modification-time ordering is deterministic.

Author: Tron Project
License: MIT
"""

import hashlib
import os
from dataclasses import dataclass
from pathlib import Path, PurePath
from typing import Dict, Optional, Set

from .file_ops import calculate_file_hash, copy_file, get_file_size
from .logger import get_logger

logger = get_logger(__name__)


class FileSystem:
    """
    Interface used by the sync core.

    Reads never raise for a missing path: ``exists`` answers that
    question and the remaining readers are only called on existing files.
    Failures while reading an existing file are reported as OSError.
    """

    def exists(self, path: Path) -> bool:
        raise NotImplementedError

    def read_bytes(self, path: Path) -> bytes:
        raise NotImplementedError

    def read_text(self, path: Path) -> str:
        """Read a file as UTF-8, replacing undecodable bytes."""
        return self.read_bytes(path).decode("utf-8", errors="replace")

    def file_hash(self, path: Path) -> str:
        """SHA-256 hex digest of the full content."""
        return hashlib.sha256(self.read_bytes(path)).hexdigest()

    def mtime(self, path: Path) -> float:
        raise NotImplementedError

    def size(self, path: Path) -> int:
        raise NotImplementedError

    def copy_file(self, source: Path, destination: Path) -> None:
        """Create the destination's parents and copy source bytes over it."""
        raise NotImplementedError


class LocalFileSystem(FileSystem):
    """FileSystem backed by the real disk."""

    def exists(self, path: Path) -> bool:
        return os.path.exists(path)

    def read_bytes(self, path: Path) -> bytes:
        return Path(path).read_bytes()

    def file_hash(self, path: Path) -> str:
        return calculate_file_hash(path, algorithm="sha256")

    def mtime(self, path: Path) -> float:
        return os.stat(path).st_mtime

    def size(self, path: Path) -> int:
        return get_file_size(path)

    def copy_file(self, source: Path, destination: Path) -> None:
        copy_file(source, destination)


@dataclass
class MemoryFile:
    """A file held by MemoryFileSystem."""
    data: bytes
    mtime: float
    readable: bool = True


class MemoryFileSystem(FileSystem):
    """
    In-memory FileSystem with a manual clock.

    Every write stamps the file with the current clock value and then
    advances the clock by one tick, so later writes are strictly newer.
    Files can be marked unreadable and paths can be made read-only to
    exercise error handling.
    """

    def __init__(self, start_time: float = 1_000_000.0, tick: float = 1.0):
        self.files: Dict[PurePath, MemoryFile] = {}
        self.read_only: Set[PurePath] = set()
        self.clock = start_time
        self.tick = tick
        self.copies = 0

    @staticmethod
    def _key(path) -> PurePath:
        return PurePath(path)

    def _now(self) -> float:
        now = self.clock
        self.clock += self.tick
        return now

    def write(self, path, data, mtime: Optional[float] = None) -> None:
        """Create or overwrite a file; text is stored as UTF-8."""
        if isinstance(data, str):
            data = data.encode("utf-8")
        stamp = self._now() if mtime is None else mtime
        self.files[self._key(path)] = MemoryFile(data=bytes(data), mtime=stamp)

    def set_mtime(self, path, mtime: float) -> None:
        self._get(path).mtime = mtime

    def set_unreadable(self, path) -> None:
        self._get(path).readable = False

    def set_read_only(self, path) -> None:
        """Reject any later write to this exact path."""
        self.read_only.add(self._key(path))

    def remove(self, path) -> None:
        self.files.pop(self._key(path), None)

    def _get(self, path) -> MemoryFile:
        try:
            return self.files[self._key(path)]
        except KeyError:
            raise FileNotFoundError(f"File not found: {path}")

    def exists(self, path: Path) -> bool:
        key = self._key(path)
        if key in self.files:
            return True
        # Directories exist implicitly as parents of stored files
        return any(key in stored.parents for stored in self.files)

    def read_bytes(self, path: Path) -> bytes:
        entry = self._get(path)
        if not entry.readable:
            raise PermissionError(f"Permission denied: {path}")
        return entry.data

    def mtime(self, path: Path) -> float:
        return self._get(path).mtime

    def size(self, path: Path) -> int:
        return len(self._get(path).data)

    def copy_file(self, source: Path, destination: Path) -> None:
        data = self.read_bytes(source)
        key = self._key(destination)
        if key not in self.files and self.exists(destination):
            raise IsADirectoryError(f"Destination is a directory: {destination}")
        if key in self.read_only:
            raise PermissionError(f"Permission denied: {destination}")
        self.write(destination, data)
        self.copies += 1
        logger.debug(f"Copied (memory): {source} -> {destination}")
