"""Secret-leak scanner.

A raw private key is 64 hex characters; an address is 40. Deployment
transcripts occasionally carry a key where only an address was expected
(a misconfigured signer), so ingestion drops any record whose address-length
fields are key-length. Transaction and receipt hashes are also 64 hex
characters and are never scanned.
"""

from __future__ import annotations

import re

KEY_PATTERN = re.compile(r"^[a-fA-F0-9]{64}$")

# Fields that must hold an address, never anything key-shaped
SCANNED_FIELDS = ("deployer", "address")


def looks_like_key(value) -> bool:
    """Return True when ``value`` is shaped like a raw private key."""
    if not isinstance(value, str):
        return False
    if value[:2] in ("0x", "0X"):
        value = value[2:]
    return bool(KEY_PATTERN.match(value))


def leaked_fields(record) -> list[str]:
    """Names of the scanned fields on ``record`` that look like a private key."""
    return [name for name in SCANNED_FIELDS if looks_like_key(getattr(record, name, None))]


def has_leak(record) -> bool:
    return bool(leaked_fields(record))
