"""Conflict resolution for incoming contract records.

A candidate is classified against the current collection, in this order:

1. Name conflict: the name is taken (case-insensitive) on any network. The
   candidate is rejected and a network-specific name is suggested.
2. Alias: the name is free but the (address, network) pair is already
   registered. The candidate is accepted as a separate record.
3. Fresh: neither applies.

Candidates are normalized before comparison and before storage.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum

from clinch.registry.models import ContractRecord


class Outcome(Enum):
    FRESH = "fresh"
    ALIAS = "alias"
    NAME_CONFLICT = "name_conflict"


@dataclass
class Resolution:
    """Classification of one candidate against the registry."""

    outcome: Outcome
    record: ContractRecord  # The normalized candidate
    existing: ContractRecord | None = None  # Clashing record or alias target
    suggested_name: str = ""

    @property
    def accepted(self) -> bool:
        return self.outcome is not Outcome.NAME_CONFLICT

    @property
    def is_alias(self) -> bool:
        return self.outcome is Outcome.ALIAS


def normalize(record: ContractRecord) -> ContractRecord:
    """Return a copy with trimmed name and lower-cased address and network."""
    return replace(
        record,
        name=record.name.strip(),
        address=record.address.strip().lower(),
        network=record.network.strip().lower(),
    )


def suggest_name(name: str, network: str) -> str:
    return f"{name.strip()}_{network.strip()}".upper()


def find_name_conflict(
    name: str,
    records: list[ContractRecord],
    ignore: ContractRecord | None = None,
) -> ContractRecord | None:
    """Find a record already using ``name``, skipping ``ignore`` (by identity)."""
    key = name.strip().lower()
    for record in records:
        if record is ignore:
            continue
        if record.key == key:
            return record
    return None


def find_aliases(candidate: ContractRecord, records: list[ContractRecord]) -> list[ContractRecord]:
    """All records pointing at the same address on the same network."""
    return [r for r in records if r.same_instance(candidate)]


def resolve(candidate: ContractRecord, records: list[ContractRecord]) -> Resolution:
    """Classify ``candidate`` against ``records`` without mutating either."""
    candidate = normalize(candidate)

    clash = find_name_conflict(candidate.name, records)
    if clash is not None:
        return Resolution(
            outcome=Outcome.NAME_CONFLICT,
            record=candidate,
            existing=clash,
            suggested_name=suggest_name(candidate.name, candidate.network),
        )

    aliases = find_aliases(candidate, records)
    if aliases:
        return Resolution(outcome=Outcome.ALIAS, record=candidate, existing=aliases[0])

    return Resolution(outcome=Outcome.FRESH, record=candidate)
