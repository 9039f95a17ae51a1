"""Vault configuration."""

from .loader import config_from_dict, load_config
from .schema import AssetSettings, Config, SimulationSettings, VaultSettings

__all__ = [
    "AssetSettings",
    "Config",
    "SimulationSettings",
    "VaultSettings",
    "config_from_dict",
    "load_config",
]
