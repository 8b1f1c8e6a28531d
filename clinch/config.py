"""Project configuration.

Every component receives a ``ClinchConfig`` at construction time instead of
deriving paths from the current working directory, so tests can point
separate instances at separate temporary roots.

An optional ``clinch.yaml`` at the project root may override the defaults::

    registry_dir: .clinch
    foundry_out: out
    broadcast_dir: broadcast
    git_push: false
    networks:
      84532: base-sepolia
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

import yaml

from clinch.errors import ConfigError

logger = logging.getLogger(__name__)

CONFIG_FILE = "clinch.yaml"

_PATH_KEYS = ("registry_dir", "registry_file", "abi_dir", "foundry_out", "broadcast_dir")


@dataclass
class ClinchConfig:
    """Paths and options for a single project root."""

    root: Path
    registry_dir: str = ".clinch"
    registry_file: str = "contracts.json"
    abi_dir: str = "abis"
    foundry_out: str = "out"
    broadcast_dir: str = "broadcast"
    networks: dict[int, str] = field(default_factory=dict)  # extra chain id -> name
    git_push: bool = False

    def __post_init__(self):
        self.root = Path(self.root)

    @property
    def registry_path(self) -> Path:
        """Directory holding the registry file and the ABI vault."""
        return self.root / self.registry_dir

    @property
    def contracts_path(self) -> Path:
        return self.registry_path / self.registry_file

    @property
    def vault_path(self) -> Path:
        return self.registry_path / self.abi_dir

    @property
    def foundry_out_path(self) -> Path:
        return self.root / self.foundry_out

    @property
    def broadcast_path(self) -> Path:
        return self.root / self.broadcast_dir


def load_config(root: str | Path | None = None) -> ClinchConfig:
    """Build the configuration for ``root`` (default: current directory).

    Reads ``clinch.yaml`` from the root when present. Unknown keys are
    ignored.

    Raises:
        ConfigError: If the config file exists but is not a valid mapping.
    """
    root_path = Path(root) if root is not None else Path.cwd()
    config = ClinchConfig(root=root_path)

    config_file = root_path / CONFIG_FILE
    if not config_file.exists():
        return config

    try:
        with open(config_file) as f:
            data = yaml.safe_load(f) or {}
    except (yaml.YAMLError, OSError) as e:
        raise ConfigError(f"Invalid config file {config_file}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Invalid config file {config_file}: expected a mapping")

    for key in _PATH_KEYS:
        if data.get(key):
            setattr(config, key, str(data[key]))

    if "git_push" in data:
        config.git_push = bool(data["git_push"])

    networks = data.get("networks") or {}
    if not isinstance(networks, dict):
        raise ConfigError(f"Invalid config file {config_file}: 'networks' must be a mapping")
    for chain_id, name in networks.items():
        try:
            config.networks[int(chain_id)] = str(name).strip().lower()
        except (TypeError, ValueError):
            logger.warning("Ignoring network entry with non-numeric chain id: %r", chain_id)

    return config
