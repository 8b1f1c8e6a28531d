"""ABI vault — managed copies of contract interface definitions.

Files are named ``<name>-<address[:6]>.json`` so capturing the same contract
again overwrites the same file. References stored on records are relative
to the registry directory (``abis/Token-0x5fbd.json``).

Every operation here fails soft: an ABI that cannot be captured is reported
and the caller carries on without it.
"""

from __future__ import annotations

import errno
import json
import logging
import shutil
from pathlib import Path

from clinch.config import ClinchConfig

logger = logging.getLogger(__name__)


class AbiVault:
    """Copies ABI files into the registry's vault directory."""

    def __init__(self, config: ClinchConfig):
        self.config = config
        self.vault_dir = config.vault_path

    def filename_for(self, name: str, address: str) -> str:
        return f"{name.strip()}-{address.strip()[:6].lower()}.json"

    def reference_for(self, name: str, address: str) -> str:
        return f"{self.config.abi_dir}/{self.filename_for(name, address)}"

    def resolve_path(self, reference: str) -> Path:
        """Absolute path for a stored ``abi`` reference."""
        return self.config.registry_path / reference

    def capture(self, source_path: str | Path, name: str, address: str) -> str | None:
        """Copy a user-supplied ABI file into the vault.

        Relative source paths are resolved against the project root.
        Returns the vault reference, or None if the file could not be copied.
        """
        source = Path(source_path)
        if not source.is_absolute():
            source = self.config.root / source

        reference = self.reference_for(name, address)
        try:
            self.vault_dir.mkdir(parents=True, exist_ok=True)
            shutil.copyfile(source, self.resolve_path(reference))
        except OSError as e:
            _report_failure(e, source)
            return None

        logger.debug("Captured ABI %s -> %s", source, reference)
        return reference

    def store(self, abi, name: str, address: str) -> str | None:
        """Write an already-loaded ABI document into the vault.

        Returns the vault reference, or None if it could not be written.
        """
        reference = self.reference_for(name, address)
        destination = self.resolve_path(reference)
        try:
            self.vault_dir.mkdir(parents=True, exist_ok=True)
            destination.write_text(json.dumps(abi, indent=2) + "\n", encoding="utf-8")
        except (OSError, TypeError, ValueError) as e:
            logger.warning("Failed to store ABI for %s at %s: %s", name, destination, e)
            return None
        return reference

    def remove(self, reference: str | None) -> bool:
        """Delete a vault file. Failure is logged, never raised."""
        if not reference:
            return False

        path = self.resolve_path(reference)
        try:
            path.unlink()
        except OSError as e:
            logger.info(
                "Could not delete ABI file %s (it may have been moved or already deleted): %s",
                reference,
                e.strerror or e,
            )
            return False

        logger.debug("ABI file %s cleaned up", reference)
        return True


def _report_failure(error: OSError, source: Path) -> None:
    if error.errno == errno.ENOENT:
        logger.warning(
            "ABI file not found: %s (compile first with 'forge build' or check the path)",
            source,
        )
    elif error.errno in (errno.EACCES, errno.EPERM):
        logger.warning("Permission denied reading ABI file: %s", source)
    else:
        logger.warning("Failed to capture ABI from %s: %s", source, error)
