"""
Orchestrator

Command-level operations over the configured entries: status reports,
listing, batch deploy/backup, diffs and per-entry details.

Author: Tron Project
License: MIT
"""

from collections import Counter
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Sequence, Tuple

from ..config.schema import TronConfig
from ..sync_engine.diff import DiffLine, diff_lines
from ..sync_engine.executor import BatchResult, Direction, SyncExecutor
from ..utils.filesystem import FileSystem, LocalFileSystem
from ..utils.logger import get_logger
from .paths import PathEnvironment, ResolvedConfig, resolve_configs
from .sync_status import SyncStatus, SyncStatusEngine

logger = get_logger(__name__)


def _decode(data: bytes) -> str:
    return data.decode("utf-8", errors="replace")


@dataclass
class StatusReport:
    """Statuses of the entries matching a category filter."""
    rows: List[Tuple[ResolvedConfig, SyncStatus]] = field(default_factory=list)
    total: int = 0
    synced: int = 0


@dataclass
class EntryDetails:
    """Paths, status and sizes of one entry."""
    config: ResolvedConfig
    status: SyncStatus
    repo_size: Optional[int] = None
    system_size: Optional[int] = None


@dataclass
class DiffResult:
    """A diff between the two copies of an entry, in display order."""
    config: ResolvedConfig
    left_path: Path
    right_path: Path
    left_label: str
    right_label: str
    left_data: bytes
    right_data: bytes

    @property
    def identical(self) -> bool:
        """True only when both copies are byte-for-byte equal."""
        return self.left_data == self.right_data

    @property
    def left_text(self) -> str:
        return _decode(self.left_data)

    @property
    def right_text(self) -> str:
        return _decode(self.right_data)

    def lines(self) -> Iterator[DiffLine]:
        """Diff lines; empty when the copies are identical."""
        if self.identical:
            return iter(())
        return diff_lines(self.left_text, self.right_text)


class Orchestrator:
    """
    Main orchestrator for Tron.

    Resolves the configured entries once and runs every command against
    that list through the status engine and the sync executor.
    """

    def __init__(
        self,
        config: TronConfig,
        fs: Optional[FileSystem] = None,
        env: Optional[PathEnvironment] = None
    ):
        """
        Initialize orchestrator.

        Args:
            config: Loaded configuration
            fs: Filesystem to work on (defaults to the local disk)
            env: Directories used for path expansion (defaults to the current user's)
        """
        self.config = config
        self.fs = fs or LocalFileSystem()
        self.status_engine = SyncStatusEngine(self.fs)
        self.executor = SyncExecutor(self.fs, self.status_engine)
        self.configs: List[ResolvedConfig] = resolve_configs(config, env)

        logger.debug(f"Orchestrator initialized with {len(self.configs)} entries")

    def filter(self, category: Optional[str] = None) -> List[ResolvedConfig]:
        """Entries in a category, or all of them."""
        if category is None:
            return list(self.configs)
        return [c for c in self.configs if c.category == category]

    def select(self, names: Sequence[str] = (), category: Optional[str] = None) -> List[ResolvedConfig]:
        """
        Pick the entries a batch command works on.

        Explicit names take precedence over the category filter; with
        neither, every entry is selected. Configuration order is kept.

        Args:
            names: Entry names
            category: Category filter used when no names are given

        Returns:
            Selected entries
        """
        if names:
            known = {c.name for c in self.configs}
            for name in names:
                if name not in known:
                    logger.warning(f"Config '{name}' not found")
            wanted = set(names)
            return [c for c in self.configs if c.name in wanted]
        return self.filter(category)

    def find(self, name: str) -> ResolvedConfig:
        """
        Look up an entry by name.

        Raises:
            ValueError: If no entry has that name
        """
        for config in self.configs:
            if config.name == name:
                return config
        raise ValueError(f"Config '{name}' not found")

    def classify(self, config: ResolvedConfig) -> SyncStatus:
        return self.status_engine.classify(config.repo_path, config.system_path)

    def status_report(self, category: Optional[str] = None, outdated: bool = False) -> StatusReport:
        """
        Classify every entry in a category.

        Args:
            category: Category filter
            outdated: Leave SYNCED entries out of the rows

        Returns:
            StatusReport; ``total`` and ``synced`` count the whole filtered
            set even when rows are suppressed
        """
        report = StatusReport()
        for config in self.filter(category):
            status = self.classify(config)
            report.total += 1
            if status == SyncStatus.SYNCED:
                report.synced += 1
                if outdated:
                    continue
            report.rows.append((config, status))
        return report

    def list_entries(self, category: Optional[str] = None) -> List[ResolvedConfig]:
        return self.filter(category)

    @staticmethod
    def as_json(configs: Sequence[ResolvedConfig]) -> List[Dict[str, str]]:
        """JSON-serializable view of resolved entries."""
        return [
            {
                "name": c.name,
                "category": c.category,
                "repo_path": str(c.repo_path),
                "system_path": str(c.system_path),
            }
            for c in configs
        ]

    def deploy(
        self,
        names: Sequence[str] = (),
        category: Optional[str] = None,
        dry_run: bool = False,
        force: bool = False
    ) -> BatchResult:
        """Copy repository files to the system for the selected entries."""
        return self.executor.run_batch(
            self.select(names, category), Direction.DEPLOY, dry_run=dry_run, force=force
        )

    def backup(
        self,
        names: Sequence[str] = (),
        category: Optional[str] = None,
        dry_run: bool = False,
        force: bool = False
    ) -> BatchResult:
        """Copy system files into the repository for the selected entries."""
        return self.executor.run_batch(
            self.select(names, category), Direction.BACKUP, dry_run=dry_run, force=force
        )

    def diff(self, name: str, reverse: bool = False) -> DiffResult:
        """
        Diff the two copies of an entry.

        By default the system copy is the left side and the repository
        copy the right side, so the diff reads as the change a deploy
        would make. ``reverse`` swaps the sides. A missing or unreadable
        file diffs as empty text.

        Raises:
            ValueError: If no entry has that name
        """
        config = self.find(name)

        left = (config.system_path, "system")
        right = (config.repo_path, "repo")
        if reverse:
            left, right = right, left

        return DiffResult(
            config=config,
            left_path=left[0],
            right_path=right[0],
            left_label=left[1],
            right_label=right[1],
            left_data=self._read_bytes(left[0]),
            right_data=self._read_bytes(right[0]),
        )

    def show(self, name: str) -> EntryDetails:
        """
        Paths, status and file sizes of an entry.

        Raises:
            ValueError: If no entry has that name
        """
        config = self.find(name)
        return EntryDetails(
            config=config,
            status=self.classify(config),
            repo_size=self._size(config.repo_path),
            system_size=self._size(config.system_path),
        )

    def categories(self) -> List[Tuple[str, int]]:
        """Categories with their entry counts, sorted by name."""
        counts = Counter(c.category for c in self.configs)
        return sorted(counts.items())

    def _read_bytes(self, path: Path) -> bytes:
        if not self.fs.exists(path):
            return b""
        try:
            return self.fs.read_bytes(path)
        except OSError as e:
            logger.warning(f"Could not read {path}: {e}")
            return b""

    def _size(self, path: Path) -> Optional[int]:
        if not self.fs.exists(path):
            return None
        try:
            return self.fs.size(path)
        except OSError as e:
            logger.warning(f"Could not stat {path}: {e}")
            return None
