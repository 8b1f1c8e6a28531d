"""Validator — predicates over contract names, addresses and networks.

These are pure checks; callers decide whether a failure rejects the input
or only warns about it.
"""

from __future__ import annotations

import re

from clinch.utils.networks import known_networks

ADDRESS_PATTERN = re.compile(r"^0x[a-fA-F0-9]{40}$")
NETWORK_PATTERN = re.compile(r"^[a-z0-9][a-z0-9_-]*$")
NAME_PATTERN = re.compile(r"^[A-Za-z0-9_][A-Za-z0-9_.-]*$")


def is_valid_address(address) -> bool:
    """Check for a ``0x``-prefixed 20-byte hex address (surrounding whitespace allowed)."""
    if not isinstance(address, str):
        return False
    return bool(ADDRESS_PATTERN.match(address.strip()))


def is_valid_network(network) -> bool:
    """Check that a network is a usable identifier (``mainnet``, ``chain-84532``)."""
    if not isinstance(network, str):
        return False
    return bool(NETWORK_PATTERN.match(network.strip().lower()))


def is_known_network(network, extra: dict[int, str] | None = None) -> bool:
    """Check whether a network name appears in the chain id table."""
    if not isinstance(network, str):
        return False
    name = network.strip().lower()
    return name in known_networks(extra) or bool(re.match(r"^chain-\d+$", name))


def is_valid_name(name) -> bool:
    """Names double as vault filenames, so no path separators or spaces."""
    if not isinstance(name, str):
        return False
    return bool(NAME_PATTERN.match(name.strip()))


def validate_contract(name, address, network) -> list[str]:
    """Validate the identifying fields of a contract.

    Returns a list of issues found. Empty list means valid.
    """
    issues: list[str] = []

    if not is_valid_name(name):
        issues.append(
            f"Invalid name {name!r}: use letters, digits, '_', '-' or '.'"
        )
    if not is_valid_address(address):
        issues.append(f"Invalid address {address!r}: expected 0x followed by 40 hex characters")
    if not is_valid_network(network):
        issues.append(f"Invalid network {network!r}")

    return issues
