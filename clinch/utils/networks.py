"""Chain id to network name mapping."""

from __future__ import annotations

# EVM chain ids seen in Foundry broadcast folders
CHAIN_NETWORKS: dict[int, str] = {
    1: "mainnet",
    5: "goerli",  # deprecated testnet
    10: "optimism",
    137: "polygon",
    8453: "base",
    31337: "anvil",  # local Anvil node
    42161: "arbitrum",
    11155111: "sepolia",
}


def network_name(chain_id, extra: dict[int, str] | None = None) -> str:
    """Return the human-readable network name for a chain id.

    Unknown ids map to ``chain-<id>`` and a missing id to ``chain-unknown``;
    this never raises.

    >>> network_name(1)
    'mainnet'
    >>> network_name(999999)
    'chain-999999'
    """
    if chain_id is None or chain_id == "":
        return "chain-unknown"

    try:
        key = int(chain_id)
    except (TypeError, ValueError):
        return f"chain-{chain_id}"

    if extra and key in extra:
        return extra[key]
    return CHAIN_NETWORKS.get(key, f"chain-{key}")


def known_networks(extra: dict[int, str] | None = None) -> set[str]:
    """All network names that have a chain id mapping."""
    names = set(CHAIN_NETWORKS.values())
    if extra:
        names.update(extra.values())
    return names
