"""Local file-based contract registry.

Every operation reloads the registry, mutates the in-memory list and saves
the whole collection back atomically. Nothing is cached between calls; the
file on disk is the only source of truth.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, replace
from pathlib import Path

from clinch.config import ClinchConfig
from clinch.errors import ContractNotFoundError, InvalidRecordError, NameConflictError
from clinch.registry import query as q
from clinch.registry.models import ContractRecord, DeploymentStats, NetworkStats, SearchQuery
from clinch.registry.resolver import Resolution, find_name_conflict, normalize, resolve, suggest_name
from clinch.registry.store import RegistryStore
from clinch.registry.vault import AbiVault
from clinch.utils.validator import (
    is_valid_address,
    is_valid_name,
    is_valid_network,
    validate_contract,
)

logger = logging.getLogger(__name__)


@dataclass
class AddResult:
    """Outcome of a successful add."""

    record: ContractRecord
    resolution: Resolution
    abi_requested: bool = False

    @property
    def is_alias(self) -> bool:
        return self.resolution.is_alias

    @property
    def alias_of(self) -> ContractRecord | None:
        return self.resolution.existing if self.resolution.is_alias else None

    @property
    def abi_failed(self) -> bool:
        return self.abi_requested and not self.record.abi


class ContractRegistry:
    """File-based registry of deployed contracts."""

    def __init__(self, config: ClinchConfig):
        self.config = config
        self.store = RegistryStore(config)
        self.vault = AbiVault(config)

    def add(
        self,
        name: str,
        address: str,
        network: str,
        verified: bool = False,
        abi_source: str | Path | None = None,
        deployed_at: int | None = None,
        tx_hash: str | None = None,
    ) -> AddResult:
        """Register a contract by hand.

        The ABI file, if given, is copied into the vault only after the name
        has been checked; a failed copy leaves the record without an ABI.

        Raises:
            InvalidRecordError: If name, address or network is invalid.
            NameConflictError: If the name is already taken.
            OSError: If the registry could not be saved.
        """
        issues = validate_contract(name, address, network)
        if issues:
            raise InvalidRecordError("; ".join(issues))

        record = ContractRecord(
            name=name,
            address=address,
            network=network,
            verified=verified,
            tx_hash=tx_hash,
            deployed_at=deployed_at if deployed_at is not None else int(time.time()),
        )

        records = self.store.load()
        resolution = self._check(record, records)
        record = resolution.record

        if abi_source:
            record.abi = self.vault.capture(abi_source, record.name, record.address)

        records.append(record)
        self.store.save(records)
        return AddResult(record=record, resolution=resolution, abi_requested=bool(abi_source))

    def add_record(self, record: ContractRecord) -> AddResult:
        """Register an already-built record (from ingestion) as-is after normalization.

        An artifact ABI carried on the record is written to the vault only
        once the record has been accepted.

        Raises:
            InvalidRecordError: If the record's identifying fields are invalid.
            NameConflictError: If the name is already taken.
            OSError: If the registry could not be saved.
        """
        issues = validate_contract(record.name, record.address, record.network)
        if issues:
            raise InvalidRecordError("; ".join(issues))

        records = self.store.load()
        resolution = self._check(record, records)
        accepted = resolution.record

        abi_requested = accepted.abi_document is not None
        if abi_requested:
            accepted.abi = self.vault.store(accepted.abi_document, accepted.name, accepted.address)
            accepted.abi_document = None

        records.append(accepted)
        self.store.save(records)
        return AddResult(record=accepted, resolution=resolution, abi_requested=abi_requested)

    def get(self, name: str) -> ContractRecord | None:
        """Get a contract by name (case-insensitive)."""
        return q.find_by_name(self.store.load(), name)

    def require(self, name: str) -> ContractRecord:
        record = self.get(name)
        if record is None:
            raise ContractNotFoundError(name)
        return record

    def update(
        self,
        name: str,
        *,
        new_name: str | None = None,
        address: str | None = None,
        network: str | None = None,
        verified: bool | None = None,
        abi_source: str | Path | None = None,
    ) -> ContractRecord:
        """Merge the supplied fields into an existing record.

        Fields left as None are untouched. A rename must not collide with
        any other record.

        Raises:
            ContractNotFoundError: If no record has that name.
            NameConflictError: If ``new_name`` is taken by another record.
            InvalidRecordError: If nothing to update, or a new value is invalid.
            OSError: If the registry could not be saved.
        """
        if all(v is None for v in (new_name, address, network, verified, abi_source)):
            raise InvalidRecordError("No updates specified")

        records = self.store.load()
        current = q.find_by_name(records, name)
        if current is None:
            raise ContractNotFoundError(name)

        updates: dict = {}
        if new_name is not None:
            if not is_valid_name(new_name):
                raise InvalidRecordError(
                    f"Invalid name {new_name!r}: use letters, digits, '_', '-' or '.'"
                )
            new_name = new_name.strip()
            clash = find_name_conflict(new_name, records, ignore=current)
            if clash is not None:
                raise NameConflictError(
                    new_name, clash, suggest_name(new_name, network or current.network)
                )
            updates["name"] = new_name
        if address is not None:
            if not is_valid_address(address):
                raise InvalidRecordError(f"Invalid address {address!r}")
            updates["address"] = address
        if network is not None:
            if not is_valid_network(network):
                raise InvalidRecordError(f"Invalid network {network!r}")
            updates["network"] = network
        if verified is not None:
            updates["verified"] = verified

        merged = normalize(replace(current, **updates))

        if abi_source:
            reference = self.vault.capture(abi_source, merged.name, merged.address)
            if reference:
                merged.abi = reference

        if merged == current:
            return current

        records[_index_of(records, current)] = merged
        self.store.save(records)
        return merged

    def delete(self, name: str) -> ContractRecord:
        """Remove a contract and, best-effort, its vault ABI file.

        Raises:
            ContractNotFoundError: If no record has that name.
            OSError: If the registry could not be saved.
        """
        records = self.store.load()
        record = q.find_by_name(records, name)
        if record is None:
            raise ContractNotFoundError(name)

        del records[_index_of(records, record)]
        self.store.save(records)

        if record.abi and not any(r.abi == record.abi for r in records):
            self.vault.remove(record.abi)
        return record

    def search(self, query: SearchQuery) -> list[ContractRecord]:
        return q.apply_query(self.store.load(), query)

    def list_all(self) -> list[ContractRecord]:
        return self.store.load()

    def aliases_of(self, name: str) -> list[ContractRecord]:
        """Other names registered for the same address and network."""
        records = self.store.load()
        record = q.find_by_name(records, name)
        if record is None:
            raise ContractNotFoundError(name)
        return [r for r in records if r is not record and r.same_instance(record)]

    def networks(self) -> dict[str, NetworkStats]:
        return q.network_stats(self.store.load())

    def by_address(self, address: str, network: str = "") -> list[ContractRecord]:
        """Every name registered for an address, optionally on one network."""
        return q.find_by_address(self.store.load(), address, network=network)

    def stats(self) -> DeploymentStats:
        return q.deployment_stats(self.store.load())

    def _check(self, record: ContractRecord, records: list[ContractRecord]) -> Resolution:
        resolution = resolve(record, records)
        if not resolution.accepted:
            raise NameConflictError(
                resolution.record.name, resolution.existing, resolution.suggested_name
            )
        if resolution.is_alias:
            logger.info(
                'Address %s is already registered as "%s" on %s; registering "%s" as an alias',
                resolution.record.address,
                resolution.existing.name,
                resolution.record.network,
                resolution.record.name,
            )
        return resolution

def _index_of(records: list[ContractRecord], record: ContractRecord) -> int:
    for i, candidate in enumerate(records):
        if candidate is record:
            return i
    raise ContractNotFoundError(record.name)
