"""Filtering, sorting and statistics over a loaded contract list.

All functions are pure and return new lists; the input order is the
registry's insertion order.
"""

from __future__ import annotations

from clinch.registry.models import (
    ContractRecord,
    DeploymentStats,
    NetworkStats,
    SearchQuery,
)

SORT_KEYS = ("name", "date")


def filter_records(
    records: list[ContractRecord],
    network: str = "",
    verified: bool | None = None,
) -> list[ContractRecord]:
    results = records
    if network:
        wanted = network.strip().lower()
        results = [r for r in results if r.network == wanted]
    if verified is not None:
        results = [r for r in results if r.verified is verified]
    return list(results)


def search_records(records: list[ContractRecord], text: str) -> list[ContractRecord]:
    """Case-insensitive substring match on name or address."""
    if not text:
        return list(records)
    needle = text.strip().lower()
    return [r for r in records if needle in r.name.lower() or needle in r.address.lower()]


def sort_records(
    records: list[ContractRecord],
    by: str = "name",
    descending: bool = False,
) -> list[ContractRecord]:
    if by == "name":
        return sorted(records, key=lambda r: r.name.lower(), reverse=descending)
    if by == "date":
        return sorted(records, key=lambda r: r.deployed_at, reverse=descending)
    raise ValueError(f"Unknown sort key {by!r}. Must be one of: {SORT_KEYS}")


def apply_query(records: list[ContractRecord], query: SearchQuery) -> list[ContractRecord]:
    results = search_records(records, query.text)
    results = filter_records(results, network=query.network, verified=query.verified)
    if query.sort_by:
        results = sort_records(results, by=query.sort_by, descending=query.descending)
    return results


def find_by_name(records: list[ContractRecord], name: str) -> ContractRecord | None:
    key = name.strip().lower()
    for record in records:
        if record.key == key:
            return record
    return None


def find_by_address(
    records: list[ContractRecord],
    address: str,
    network: str = "",
) -> list[ContractRecord]:
    """Every record for an address; more than one means aliases."""
    wanted = address.strip().lower()
    matches = [r for r in records if r.address.lower() == wanted]
    return filter_records(matches, network=network)


def network_stats(records: list[ContractRecord]) -> dict[str, NetworkStats]:
    """Per-network totals, in order of first appearance."""
    stats: dict[str, NetworkStats] = {}
    for record in records:
        entry = stats.setdefault(record.network, NetworkStats(network=record.network))
        entry.total += 1
        if record.verified:
            entry.verified += 1
    return stats


def deployment_stats(records: list[ContractRecord]) -> DeploymentStats:
    stats = DeploymentStats()
    for record in records:
        stats.total += 1
        if record.verified:
            stats.verified += 1
        else:
            stats.unverified += 1
        stats.by_network[record.network] = stats.by_network.get(record.network, 0) + 1
    return stats
