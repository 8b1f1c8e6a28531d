"""Registry store — durable load/save of the contract list.

The whole collection lives in one JSON array. Saves go through a ``.tmp``
sibling that is renamed over the canonical file, so a reader never sees a
half-written registry. There is no locking: one interactive user, one
process.
"""

from __future__ import annotations

import json
import logging
import os
import shutil

from clinch.config import ClinchConfig
from clinch.registry.models import ContractRecord, dict_to_record, record_to_dict

logger = logging.getLogger(__name__)


class RegistryStore:
    """Loads and atomically saves the registry file."""

    TEMP_SUFFIX = ".tmp"
    CORRUPT_SUFFIX = ".corrupt"

    def __init__(self, config: ClinchConfig):
        self.config = config
        self.path = config.contracts_path
        self.temp_path = self.path.with_name(self.path.name + self.TEMP_SUFFIX)
        self._corrupt = False

    def load(self) -> list[ContractRecord]:
        """Read the registry.

        Never raises: a missing file is an empty registry, and an unreadable
        or malformed one is reported and treated as empty.
        """
        self._corrupt = False
        if not self.path.exists():
            return []

        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            return self._reject(f"invalid JSON: {e}")
        except OSError as e:
            logger.warning("Could not read registry %s: %s", self.path, e)
            return []

        if not isinstance(data, list):
            return self._reject("expected a list of contracts")

        records = []
        for i, item in enumerate(data):
            try:
                records.append(dict_to_record(item))
            except (KeyError, TypeError, ValueError) as e:
                return self._reject(f"entry {i + 1} is malformed ({e})")
        return records

    def save(self, records: list[ContractRecord]) -> None:
        """Replace the registry with ``records``.

        Raises:
            OSError: If the registry could not be written. The canonical file
                is left untouched in that case.
        """
        self.path.parent.mkdir(parents=True, exist_ok=True)
        if self._corrupt:
            self._preserve_corrupt()

        payload = json.dumps([record_to_dict(r) for r in records], indent=2) + "\n"
        try:
            self.temp_path.write_text(payload, encoding="utf-8")
            os.replace(self.temp_path, self.path)
        except OSError:
            try:
                self.temp_path.unlink(missing_ok=True)
            except OSError:
                logger.debug("Could not remove temp file %s", self.temp_path)
            raise

        self._corrupt = False
        logger.debug("Saved %d contract(s) to %s", len(records), self.path)

    def init(self) -> bool:
        """Create the registry directory, vault and an empty registry file.

        Returns True if anything was created.
        """
        created = False
        for directory in (self.config.registry_path, self.config.vault_path):
            if not directory.exists():
                directory.mkdir(parents=True)
                created = True
        if not self.path.exists():
            self.save([])
            created = True
        return created

    def _reject(self, reason: str) -> list[ContractRecord]:
        logger.warning("Registry file %s is corrupt (%s); treating it as empty", self.path, reason)
        self._corrupt = True
        return []

    def _preserve_corrupt(self) -> None:
        """Keep a copy of an unreadable registry before it is overwritten."""
        backup = self.path.with_name(self.path.name + self.CORRUPT_SUFFIX)
        if not self.path.exists():
            return
        shutil.copy2(self.path, backup)
        logger.warning("Previous unreadable registry preserved at %s", backup)