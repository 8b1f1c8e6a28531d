"""Tests for the command-line interface."""

import json
import tempfile
from pathlib import Path

from click.testing import CliRunner

from clinch.cli import main

ADDR_A = "0x5FbDB2315678afecb367f032d93F642f64180aa3"
ADDR_B = "0xe7f1725E7734CE288F8367e1Bb143E90bb3F0512"


def _run(root: str, *args, input=None):
    return CliRunner().invoke(main, ["--root", root, *args], input=input)


def _contracts(root: str) -> list[dict]:
    return json.loads((Path(root) / ".clinch" / "contracts.json").read_text())


def test_init():
    with tempfile.TemporaryDirectory() as tmpdir:
        result = _run(tmpdir, "init")
        assert result.exit_code == 0
        assert (Path(tmpdir) / ".clinch" / "abis").is_dir()
        assert _contracts(tmpdir) == []

        result = _run(tmpdir, "init")
        assert "already initialized" in result.output


def test_add_list_show():
    with tempfile.TemporaryDirectory() as tmpdir:
        result = _run(tmpdir, "add", "Token", ADDR_A, "anvil", "--verified")
        assert result.exit_code == 0, result.output
        assert _contracts(tmpdir)[0]["verified"] is True

        result = _run(tmpdir, "list")
        assert result.exit_code == 0
        assert "Registry (1 contracts)" in result.output

        result = _run(tmpdir, "show", "token")
        assert result.exit_code == 0
        assert ADDR_A.lower() in result.output


def test_add_conflict_exits_non_zero():
    with tempfile.TemporaryDirectory() as tmpdir:
        _run(tmpdir, "add", "Token", ADDR_A, "anvil")
        result = _run(tmpdir, "add", "TOKEN", ADDR_B, "sepolia")

        assert result.exit_code == 1
        assert "TOKEN_SEPOLIA" in result.output
        assert len(_contracts(tmpdir)) == 1


def test_add_alias():
    with tempfile.TemporaryDirectory() as tmpdir:
        _run(tmpdir, "add", "Token", ADDR_A, "anvil")
        result = _run(tmpdir, "add", "TokenProxy", ADDR_A, "anvil")

        assert result.exit_code == 0
        assert "Alias detected" in result.output
        assert len(_contracts(tmpdir)) == 2


def test_add_invalid_address():
    with tempfile.TemporaryDirectory() as tmpdir:
        result = _run(tmpdir, "add", "Token", "0x1234", "anvil")
        assert result.exit_code == 1
        assert not (Path(tmpdir) / ".clinch" / "contracts.json").exists()


def test_show_missing():
    with tempfile.TemporaryDirectory() as tmpdir:
        result = _run(tmpdir, "show", "Missing")
        assert result.exit_code == 1
        assert "not found" in result.output


def test_update_and_find():
    with tempfile.TemporaryDirectory() as tmpdir:
        _run(tmpdir, "add", "Token", ADDR_A, "anvil")
        result = _run(tmpdir, "update", "Token", "--verified", "--network", "Sepolia")
        assert result.exit_code == 0, result.output

        record = _contracts(tmpdir)[0]
        assert record["verified"] is True
        assert record["network"] == "sepolia"
        assert record["address"] == ADDR_A.lower()

        result = _run(tmpdir, "find", "tok", "--network", "sepolia")
        assert result.exit_code == 0
        assert "Found 1 contract(s)" in result.output

        result = _run(tmpdir, "update", "Token")
        assert result.exit_code == 1


def test_delete_with_confirmation():
    with tempfile.TemporaryDirectory() as tmpdir:
        _run(tmpdir, "add", "Token", ADDR_A, "anvil")

        result = _run(tmpdir, "delete", "Token", input="n\n")
        assert "cancelled" in result.output
        assert len(_contracts(tmpdir)) == 1

        result = _run(tmpdir, "remove", "token", "--force")
        assert result.exit_code == 0
        assert _contracts(tmpdir) == []

        result = _run(tmpdir, "delete", "Token", "--force")
        assert result.exit_code == 1


def test_networks():
    with tempfile.TemporaryDirectory() as tmpdir:
        _run(tmpdir, "add", "Token", ADDR_A, "anvil", "--verified")
        _run(tmpdir, "add", "Vault", ADDR_B, "sepolia")

        result = _run(tmpdir, "networks")
        assert result.exit_code == 0
        assert "anvil" in result.output
        assert "sepolia" in result.output
        assert "Total: 2 contract(s), 1 verified, 1 unverified" in result.output


def test_find_by_address_lists_aliases():
    with tempfile.TemporaryDirectory() as tmpdir:
        _run(tmpdir, "add", "Token", ADDR_A, "anvil")
        _run(tmpdir, "add", "TokenProxy", ADDR_A, "anvil")
        _run(tmpdir, "add", "Vault", ADDR_B, "anvil")

        result = _run(tmpdir, "find", "--address", ADDR_A.upper().replace("0X", "0x"))
        assert result.exit_code == 0
        assert "Found 2 contract(s)" in result.output

        result = _run(tmpdir, "find", "--address", ADDR_A, "--network", "sepolia")
        assert "No contracts found" in result.output


def test_sync_from_broadcast():
    with tempfile.TemporaryDirectory() as tmpdir:
        broadcast = Path(tmpdir) / "broadcast" / "Deploy.s.sol" / "1" / "run-latest.json"
        broadcast.parent.mkdir(parents=True)
        broadcast.write_text(
            json.dumps(
                {
                    "chain": 1,
                    "timestamp": 1700000000000,
                    "transactions": [
                        {
                            "hash": "0x" + "aa" * 32,
                            "transactionType": "CREATE",
                            "contractName": "Token",
                            "contractAddress": ADDR_A,
                        }
                    ],
                    "receipts": [{"transactionHash": "0x" + "aa" * 32}],
                }
            )
        )

        result = _run(tmpdir, "sync")
        assert result.exit_code == 0, result.output
        record = _contracts(tmpdir)[0]
        assert record["network"] == "mainnet"
        assert record["txHash"] == "0x" + "aa" * 32
        assert record["deployedAt"] == 1700000000


def test_sync_without_broadcast():
    with tempfile.TemporaryDirectory() as tmpdir:
        result = _run(tmpdir, "sync")
        assert result.exit_code == 1
        assert "Could not find a broadcast file" in result.output
