"""Foundry broadcast ingestion.

Parses ``broadcast/<Script>/<chain>/run-latest.json`` into candidate
contract records. Only ``CREATE`` transactions with a contract name become
candidates. For each one the chain id is mapped to a network name, the
matching receipt supplies the transaction hash, the ABI is loaded from
``out/<Name>.sol/<Name>.json`` when it exists, and the record is scanned
for leaked keys before it is returned. The ABI stays on the candidate until
the registry accepts it; only then is it written to the vault.

Ingestion never raises: an unreadable transcript yields no records.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from clinch.config import ClinchConfig
from clinch.registry.models import ContractRecord
from clinch.security.leak_scanner import leaked_fields
from clinch.utils.networks import network_name

logger = logging.getLogger(__name__)

BROADCAST_FILE = "run-latest.json"

# Timestamps at or above this are milliseconds (seconds reach it in year 5138)
MILLISECONDS_THRESHOLD = 10**11


def normalize_timestamp(value) -> int:
    """Convert a transcript timestamp (seconds or milliseconds) to Unix seconds."""
    try:
        timestamp = int(value)
    except (TypeError, ValueError):
        return 0
    if timestamp >= MILLISECONDS_THRESHOLD:
        return timestamp // 1000
    return timestamp


def find_latest_broadcast(config: ClinchConfig) -> Path | None:
    """Return the most recently written ``run-latest.json`` under the broadcast dir."""
    broadcast_dir = config.broadcast_path
    if not broadcast_dir.is_dir():
        logger.warning("No broadcast folder found at %s", broadcast_dir)
        return None

    candidates = []
    for script_dir in broadcast_dir.iterdir():
        if not script_dir.is_dir():
            continue
        for chain_dir in script_dir.iterdir():
            run_latest = chain_dir / BROADCAST_FILE
            if chain_dir.is_dir() and run_latest.is_file():
                candidates.append(run_latest)

    if not candidates:
        logger.warning("No %s found under %s", BROADCAST_FILE, broadcast_dir)
        return None

    return max(candidates, key=lambda p: p.stat().st_mtime)


class FoundryIngestor:
    """Turns a Foundry broadcast transcript into registry records."""

    def __init__(self, config: ClinchConfig):
        self.config = config

    def ingest(self, transcript_path: str | Path) -> list[ContractRecord]:
        """Parse a transcript into records that are safe to register."""
        path = Path(transcript_path)
        try:
            with open(path) as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError, UnicodeDecodeError) as e:
            logger.error("Error parsing broadcast %s: %s", path, e)
            return []

        if not isinstance(data, dict) or not isinstance(data.get("transactions"), list):
            logger.error("Error parsing broadcast %s: no transactions list", path)
            return []

        network = network_name(data.get("chain"), extra=self.config.networks)
        deployed_at = normalize_timestamp(data.get("timestamp"))
        receipts = _index_receipts(data.get("receipts"))

        records = []
        for tx in data["transactions"]:
            if not _is_creation(tx):
                continue

            record = self._build_record(tx, network, deployed_at, receipts)
            if record is None:
                continue

            leaks = leaked_fields(record)
            if leaks:
                logger.warning(
                    "Skipping %s due to security concerns: %s looks like a private key",
                    record.name,
                    ", ".join(leaks),
                )
                continue

            record.abi_document = load_artifact_abi(self.config, record.name)
            records.append(record)

        return records

    def _build_record(self, tx: dict, network: str, deployed_at: int, receipts: dict) -> ContractRecord | None:
        name = str(tx["contractName"]).strip()
        address = tx.get("contractAddress")
        if not isinstance(address, str) or not address.strip():
            logger.warning("Skipping %s: transaction has no contract address", name)
            return None

        tx_hash = tx.get("hash")
        receipt = receipts.get(tx_hash) if isinstance(tx_hash, str) else None

        return ContractRecord(
            name=name,
            address=address.strip().lower(),
            network=network,
            verified=False,
            tx_hash=receipt["transactionHash"] if receipt else None,
            deployed_at=deployed_at,
            deployer=_deployer(tx),
        )


def load_artifact_abi(config: ClinchConfig, contract_name: str):
    """Read the ``abi`` field from Foundry's build artifact, or None."""
    artifact = config.foundry_out_path / f"{contract_name}.sol" / f"{contract_name}.json"
    try:
        with open(artifact) as f:
            data = json.load(f)
    except FileNotFoundError:
        logger.warning("Could not find artifact for %s at %s", contract_name, artifact)
        return None
    except (OSError, json.JSONDecodeError, UnicodeDecodeError) as e:
        logger.warning("Could not read artifact %s: %s", artifact, e)
        return None

    abi = data.get("abi") if isinstance(data, dict) else None
    if abi is None:
        logger.warning("No 'abi' key in %s", artifact)
    return abi


def _is_creation(tx) -> bool:
    return (
        isinstance(tx, dict)
        and tx.get("transactionType") == "CREATE"
        and bool(tx.get("contractName"))
    )


def _index_receipts(receipts) -> dict[str, dict]:
    index = {}
    for receipt in receipts if isinstance(receipts, list) else []:
        if isinstance(receipt, dict) and isinstance(receipt.get("transactionHash"), str):
            index.setdefault(receipt["transactionHash"], receipt)
    return index


def _deployer(tx: dict) -> str | None:
    """The transaction originator: ``deployer`` or the nested ``transaction.from``."""
    deployer = tx.get("deployer")
    if deployer is None and isinstance(tx.get("transaction"), dict):
        deployer = tx["transaction"].get("from")
    return deployer if isinstance(deployer, str) else None
