"""
Sync Executor

Performs directed copies between the repository and the system:
deploy (repository -> system) and backup (system -> repository).
Each copy is gated on the pair's SyncStatus and the force/dry-run flags.

Author: Tron Project
License: MIT
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Iterable, List, Optional

from ..core.paths import ResolvedConfig
from ..core.sync_status import SyncStatus, SyncStatusEngine
from ..utils.filesystem import FileSystem, LocalFileSystem
from ..utils.logger import get_logger

logger = get_logger(__name__)


class Direction(Enum):
    """Which copy is the source."""
    DEPLOY = "deploy"
    BACKUP = "backup"

    @property
    def source_label(self) -> str:
        return "repo" if self is Direction.DEPLOY else "system"

    @property
    def destination_label(self) -> str:
        return "system" if self is Direction.DEPLOY else "repo"

    def source(self, config: ResolvedConfig) -> Path:
        return config.repo_path if self is Direction.DEPLOY else config.system_path

    def destination(self, config: ResolvedConfig) -> Path:
        return config.system_path if self is Direction.DEPLOY else config.repo_path


class Decision(Enum):
    """What the decision table says to do with a pair."""
    SKIP_SYNCED = "skip_synced"
    SKIP_SOURCE_MISSING = "skip_source_missing"
    SKIP_DESTINATION_NEWER = "skip_destination_newer"
    COPY = "copy"
    FORCE_COPY = "force_copy"


# Decision per status for each direction. Every SyncStatus must appear.
_DECISION_TABLE = {
    Direction.DEPLOY: {
        SyncStatus.SYNCED: Decision.SKIP_SYNCED,
        SyncStatus.REPO_MISSING: Decision.SKIP_SOURCE_MISSING,
        SyncStatus.BOTH_MISSING: Decision.SKIP_SOURCE_MISSING,
        SyncStatus.SYSTEM_NEWER: Decision.SKIP_DESTINATION_NEWER,
        SyncStatus.REPO_NEWER: Decision.COPY,
        SyncStatus.CONFLICT: Decision.COPY,
        SyncStatus.SYSTEM_MISSING: Decision.COPY,
    },
    Direction.BACKUP: {
        SyncStatus.SYNCED: Decision.SKIP_SYNCED,
        SyncStatus.SYSTEM_MISSING: Decision.SKIP_SOURCE_MISSING,
        SyncStatus.BOTH_MISSING: Decision.SKIP_SOURCE_MISSING,
        SyncStatus.REPO_NEWER: Decision.SKIP_DESTINATION_NEWER,
        SyncStatus.SYSTEM_NEWER: Decision.COPY,
        SyncStatus.CONFLICT: Decision.COPY,
        SyncStatus.REPO_MISSING: Decision.COPY,
    },
}


class SyncAction(Enum):
    """Outcome of syncing one entry."""
    COPIED = "copied"
    WOULD_COPY = "would_copy"
    ALREADY_SYNCED = "already_synced"
    SOURCE_MISSING = "source_missing"
    DESTINATION_NEWER = "destination_newer"
    FAILED = "failed"


@dataclass
class SyncOutcome:
    """Result of a deploy or backup of a single entry."""
    config: ResolvedConfig
    direction: Direction
    status: SyncStatus
    action: SyncAction
    source: Path
    destination: Path
    error_message: Optional[str] = None

    @property
    def copied(self) -> bool:
        return self.action == SyncAction.COPIED

    @property
    def failed(self) -> bool:
        return self.action == SyncAction.FAILED

    @property
    def skipped(self) -> bool:
        return self.action in (
            SyncAction.ALREADY_SYNCED,
            SyncAction.SOURCE_MISSING,
            SyncAction.DESTINATION_NEWER,
        )

    @property
    def message(self) -> str:
        """Human readable description of the outcome."""
        name = self.config.name
        if self.action == SyncAction.COPIED:
            return name
        if self.action == SyncAction.WOULD_COPY:
            return f"{self.source} -> {self.destination}"
        if self.action == SyncAction.ALREADY_SYNCED:
            return f"{name} (already synced)"
        if self.action == SyncAction.SOURCE_MISSING:
            return f"{name} ({self.direction.source_label} file missing: {self.source})"
        if self.action == SyncAction.DESTINATION_NEWER:
            return f"{name} ({self.direction.destination_label} newer, use --force to overwrite)"
        return f"{name} (failed: {self.error_message})"

    def __repr__(self) -> str:
        return f"SyncOutcome(name={self.config.name}, action={self.action.value})"


@dataclass
class BatchResult:
    """Per-entry outcomes of a batch deploy or backup."""
    direction: Direction
    dry_run: bool = False
    outcomes: List[SyncOutcome] = field(default_factory=list)

    @property
    def copied(self) -> int:
        return sum(1 for o in self.outcomes if o.copied)

    @property
    def skipped(self) -> int:
        return sum(1 for o in self.outcomes if o.skipped)

    @property
    def failed(self) -> int:
        return sum(1 for o in self.outcomes if o.failed)

    @property
    def has_failures(self) -> bool:
        return self.failed > 0

    def summary(self) -> str:
        verb = "would copy" if self.dry_run else "copied"
        copies = sum(1 for o in self.outcomes if o.action in (SyncAction.COPIED, SyncAction.WOULD_COPY))
        return f"{copies} {verb}, {self.skipped} skipped, {self.failed} failed"


class SyncExecutor:
    """
    Directed copy between the two sides of each entry.

    Features:
    - Status-gated copies (synced and missing-source entries are skipped)
    - Refuses to overwrite a newer destination unless forced
    - Dry-run mode that reports without touching the filesystem
    - Batches that record a result per entry and never stop early
    """

    def __init__(self, fs: Optional[FileSystem] = None, status_engine: Optional[SyncStatusEngine] = None):
        """
        Initialize the executor.

        Args:
            fs: Filesystem to copy on (defaults to the local disk)
            status_engine: Engine used to classify pairs (defaults to one on ``fs``)
        """
        self.fs = fs or LocalFileSystem()
        self.status_engine = status_engine or SyncStatusEngine(self.fs)

    @staticmethod
    def decide(status: SyncStatus, direction: Direction, force: bool = False) -> Decision:
        """
        Apply the decision table.

        Args:
            status: Current status of the pair
            direction: Deploy or backup
            force: Overwrite a newer destination

        Returns:
            Decision for the pair

        Raises:
            ValueError: If the status has no entry in the table
        """
        try:
            decision = _DECISION_TABLE[direction][status]
        except KeyError:
            raise ValueError(f"No {direction.value} decision for status {status!r}")

        if decision == Decision.SKIP_DESTINATION_NEWER and force:
            return Decision.FORCE_COPY
        return decision

    def sync(
        self,
        config: ResolvedConfig,
        direction: Direction,
        dry_run: bool = False,
        force: bool = False
    ) -> SyncOutcome:
        """
        Deploy or back up a single entry.

        I/O errors raised by the copy are caught and reported as a FAILED
        outcome.

        Args:
            config: Resolved entry
            direction: Deploy or backup
            dry_run: Report what would happen without copying
            force: Overwrite a newer destination

        Returns:
            SyncOutcome describing what happened
        """
        status = self.status_engine.classify(config.repo_path, config.system_path)
        decision = self.decide(status, direction, force)
        source = direction.source(config)
        destination = direction.destination(config)

        def outcome(action: SyncAction, error: Optional[str] = None) -> SyncOutcome:
            return SyncOutcome(
                config=config,
                direction=direction,
                status=status,
                action=action,
                source=source,
                destination=destination,
                error_message=error,
            )

        if decision == Decision.SKIP_SYNCED:
            logger.debug(f"{config.name}: already synced")
            return outcome(SyncAction.ALREADY_SYNCED)

        if decision == Decision.SKIP_SOURCE_MISSING:
            logger.info(f"{config.name}: {direction.source_label} file missing: {source}")
            return outcome(SyncAction.SOURCE_MISSING)

        if decision == Decision.SKIP_DESTINATION_NEWER:
            logger.info(f"{config.name}: {direction.destination_label} is newer, skipping")
            return outcome(SyncAction.DESTINATION_NEWER)

        if decision == Decision.FORCE_COPY:
            logger.warning(f"{config.name}: overwriting newer {direction.destination_label} copy (forced)")

        if dry_run:
            logger.info(f"{config.name}: would copy {source} -> {destination}")
            return outcome(SyncAction.WOULD_COPY)

        try:
            self.fs.copy_file(source, destination)
        except OSError as e:
            logger.error(f"Failed to copy {source} to {destination}: {e}")
            return outcome(SyncAction.FAILED, f"Failed to copy {source} to {destination}: {e}")

        logger.info(f"{config.name}: copied {source} -> {destination}")
        return outcome(SyncAction.COPIED)

    def deploy(self, config: ResolvedConfig, dry_run: bool = False, force: bool = False) -> SyncOutcome:
        """Copy the repository file to the system."""
        return self.sync(config, Direction.DEPLOY, dry_run=dry_run, force=force)

    def backup(self, config: ResolvedConfig, dry_run: bool = False, force: bool = False) -> SyncOutcome:
        """Copy the system file into the repository."""
        return self.sync(config, Direction.BACKUP, dry_run=dry_run, force=force)

    def run_batch(
        self,
        configs: Iterable[ResolvedConfig],
        direction: Direction,
        dry_run: bool = False,
        force: bool = False
    ) -> BatchResult:
        """
        Sync entries one after another.

        A skip or failure on one entry never stops the entries after it.

        Args:
            configs: Entries to process, in order
            direction: Deploy or backup
            dry_run: Report what would happen without copying
            force: Overwrite newer destinations

        Returns:
            BatchResult with one outcome per entry
        """
        result = BatchResult(direction=direction, dry_run=dry_run)
        for config in configs:
            result.outcomes.append(self.sync(config, direction, dry_run=dry_run, force=force))

        logger.info(f"{direction.value} finished: {result.summary()}")
        return result
