"""Registry data models — contract records, search queries, and statistics."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class ContractRecord:
    """A single deployed contract instance in the registry."""

    # Identity
    name: str
    address: str
    network: str

    verified: bool = False
    abi: str | None = None  # Relative to the registry dir, e.g. abis/Token-0x5fbd.json

    # Deployment
    tx_hash: str | None = None
    deployed_at: int = 0  # Unix seconds
    deployer: str | None = None  # Transaction originator, ingestion only

    # Build-artifact ABI awaiting the vault; never persisted
    abi_document: list | None = field(default=None, repr=False, compare=False)

    @property
    def key(self) -> str:
        """Case-insensitive lookup key for the name."""
        return self.name.strip().lower()

    def same_instance(self, other: ContractRecord) -> bool:
        """True when both records point at one on-chain contract (aliases)."""
        return (
            self.address.strip().lower() == other.address.strip().lower()
            and self.network.strip().lower() == other.network.strip().lower()
        )


@dataclass
class SearchQuery:
    """Query for searching the registry."""

    text: str = ""  # Substring of name or address
    network: str = ""
    verified: bool | None = None
    sort_by: str = ""  # "name", "date" or "" for insertion order
    descending: bool = False


@dataclass
class NetworkStats:
    """Contract counts for a single network."""

    network: str
    total: int = 0
    verified: int = 0

    @property
    def unverified(self) -> int:
        return self.total - self.verified


@dataclass
class DeploymentStats:
    total: int = 0
    verified: int = 0
    unverified: int = 0
    by_network: dict[str, int] = field(default_factory=dict)


def record_to_dict(record: ContractRecord) -> dict:
    """Serialize a record with a fixed key order; unset optional fields are omitted."""
    data = {
        "name": record.name,
        "address": record.address,
        "network": record.network,
        "verified": record.verified,
    }
    if record.abi:
        data["abi"] = record.abi
    if record.tx_hash:
        data["txHash"] = record.tx_hash
    data["deployedAt"] = record.deployed_at
    if record.deployer:
        data["deployer"] = record.deployer
    return data


def dict_to_record(data: dict) -> ContractRecord:
    """Build a record from its stored form.

    Raises:
        KeyError: If name, address or network is missing.
        TypeError, ValueError: If a field has an unusable type.
    """
    if not isinstance(data, dict):
        raise TypeError(f"Expected an object, got {type(data).__name__}")

    for key in ("name", "address", "network"):
        if not isinstance(data[key], str):
            raise TypeError(f"Field '{key}' must be a string")

    return ContractRecord(
        name=data["name"],
        address=data["address"],
        network=data["network"],
        verified=bool(data.get("verified", False)),
        abi=data.get("abi") or None,
        tx_hash=data.get("txHash") or None,
        deployed_at=int(data.get("deployedAt") or 0),
        deployer=data.get("deployer") or None,
    )
