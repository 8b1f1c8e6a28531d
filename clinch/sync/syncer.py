"""Sync ingested deployments into the registry."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from clinch.errors import InvalidRecordError, NameConflictError
from clinch.registry.local_registry import ContractRegistry
from clinch.registry.models import ContractRecord
from clinch.sync.foundry import FoundryIngestor

logger = logging.getLogger(__name__)


@dataclass
class SyncConflict:
    record: ContractRecord
    existing: ContractRecord
    suggested_name: str


@dataclass
class SyncReport:
    """Result of syncing one transcript."""

    transcript: Path
    synced: list[ContractRecord] = field(default_factory=list)
    aliases: list[tuple[ContractRecord, ContractRecord]] = field(default_factory=list)
    conflicts: list[SyncConflict] = field(default_factory=list)
    invalid: list[tuple[ContractRecord, str]] = field(default_factory=list)

    @property
    def candidates(self) -> int:
        return len(self.synced) + len(self.conflicts) + len(self.invalid)

    def summary(self) -> str:
        parts = [f"Added {len(self.synced)} contract(s)"]
        if self.aliases:
            parts.append(f"{len(self.aliases)} alias(es)")
        if self.conflicts:
            parts.append(f"{len(self.conflicts)} name conflict(s) skipped")
        if self.invalid:
            parts.append(f"{len(self.invalid)} invalid record(s) skipped")
        return ", ".join(parts)


def sync_from_foundry(
    registry: ContractRegistry,
    transcript_path: str | Path,
    ingestor: FoundryIngestor | None = None,
) -> SyncReport:
    """Ingest a broadcast transcript and register every acceptable record.

    Name conflicts and invalid records are skipped and reported; the rest of
    the batch still goes through.

    Raises:
        OSError: If the registry could not be saved. Records synced before
            the failure stay saved.
    """
    ingestor = ingestor or FoundryIngestor(registry.config)
    report = SyncReport(transcript=Path(transcript_path))

    for candidate in ingestor.ingest(transcript_path):
        try:
            result = registry.add_record(candidate)
        except NameConflictError as e:
            logger.warning("Skipping %s: %s", candidate.name, e)
            report.conflicts.append(SyncConflict(candidate, e.existing, e.suggested_name))
            continue
        except InvalidRecordError as e:
            logger.warning("Skipping %s: %s", candidate.name, e)
            report.invalid.append((candidate, str(e)))
            continue

        report.synced.append(result.record)
        if result.is_alias:
            report.aliases.append((result.record, result.alias_of))

    return report
