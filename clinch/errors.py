"""Errors raised by registry operations."""

from __future__ import annotations


class ClinchError(Exception):
    """Base class for all clinch errors."""


class ConfigError(ClinchError):
    """The project configuration file could not be read."""


class InvalidRecordError(ClinchError):
    """A contract record failed validation before it reached the registry."""


class ContractNotFoundError(ClinchError):
    """No contract with the given name exists in the registry."""

    def __init__(self, name: str):
        super().__init__(f'Contract "{name}" not found')
        self.name = name


class NameConflictError(ClinchError):
    """The name is already taken by another contract (case-insensitive)."""

    def __init__(self, name: str, existing, suggested_name: str):
        super().__init__(
            f'The name "{name}" is already taken '
            f"(points to {existing.address} on {existing.network})"
        )
        self.name = name
        self.existing = existing
        self.suggested_name = suggested_name
