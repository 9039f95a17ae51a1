"""Configuration loader from YAML."""

import os
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from .schema import Config

CONFIG_ENV_VAR = "YIELDVAULT_CONFIG"
DEFAULTS_PATH = Path(__file__).parent / "defaults.yaml"


def load_config(yaml_path: Optional[Union[str, Path]] = None) -> Config:
    """
    Load vault configuration from YAML.

    Resolution order: explicit path, then $YIELDVAULT_CONFIG, then the
    packaged defaults.yaml.

    Args:
        yaml_path: Path to YAML file

    Returns:
        Validated Config

    Raises:
        ValueError: If the file is empty or not a mapping
        pydantic.ValidationError: If values fail schema validation
    """
    if yaml_path is None:
        yaml_path = os.environ.get(CONFIG_ENV_VAR) or DEFAULTS_PATH

    with open(yaml_path, 'r') as f:
        data = yaml.safe_load(f)

    if not isinstance(data, dict):
        raise ValueError(f"Config file {yaml_path} must contain a mapping, got {type(data).__name__}")

    return config_from_dict(data)


def config_from_dict(data: Dict[str, Any]) -> Config:
    """Create config from dictionary."""
    return Config.from_dict(data)
