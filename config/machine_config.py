"""
Machine Configuration
=====================
JSON configuration load/save and factories for machine, optimizer and
nesting settings. Missing keys fall back to the dataclass defaults.
"""

import json
import logging
from pathlib import Path
from typing import Dict, Any

from core.exceptions import ConfigurationError
from core.models import MachineSettings, OptimizerSettings
from nesting.models import NestingSettings
from config.settings import CONFIG_PATH

logger = logging.getLogger(__name__)

CONFIG_DIR = Path(__file__).parent
DEFAULT_CONFIG_PATH = CONFIG_DIR / "default_config.json"


def load_config(config_path: str = None) -> Dict[str, Any]:
    """
    Load configuration from a JSON file.

    Args:
        config_path: Path to config file (default: settings.CONFIG_PATH)

    Returns:
        Configuration dictionary

    Raises:
        ConfigurationError: Missing file or malformed JSON
    """
    path = Path(config_path) if config_path is not None else Path(CONFIG_PATH)

    if not path.exists():
        raise ConfigurationError(f"Config file not found: {path}", path=str(path))

    try:
        with open(path, 'r', encoding='utf-8') as f:
            config = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Malformed config file: {e}", path=str(path)) from e

    if not isinstance(config, dict):
        raise ConfigurationError("Config root must be an object", path=str(path))

    logger.debug(f"Loaded config: {path}")
    return config


def save_config(config: Dict[str, Any], config_path: str = None):
    """
    Save configuration to a JSON file.

    Args:
        config: Configuration dictionary
        config_path: Target path (default: settings.CONFIG_PATH)
    """
    path = Path(config_path) if config_path is not None else Path(CONFIG_PATH)

    with open(path, 'w', encoding='utf-8') as f:
        json.dump(config, f, indent=4)

    logger.info(f"Saved config: {path}")


def create_machine_settings_from_config(config: Dict[str, Any] = None) -> MachineSettings:
    """
    Create MachineSettings from a configuration dictionary.

    Args:
        config: Configuration dict (loads default if None)

    Returns:
        Validated MachineSettings
    """
    if config is None:
        config = load_config()

    machine = MachineSettings.from_dict(config.get('machine', {}))
    machine.validate()
    return machine


def create_optimizer_settings_from_config(config: Dict[str, Any] = None) -> OptimizerSettings:
    """Create OptimizerSettings from a configuration dictionary (loads default if None)."""
    if config is None:
        config = load_config()

    return OptimizerSettings.from_dict(config.get('optimizer', {}))


def create_nesting_settings_from_config(config: Dict[str, Any] = None) -> NestingSettings:
    """
    Create NestingSettings from a configuration dictionary.

    Args:
        config: Configuration dict (loads default if None)

    Returns:
        Validated NestingSettings
    """
    if config is None:
        config = load_config()

    nesting = NestingSettings.from_dict(config.get('nesting', {}))
    nesting.validate()
    return nesting


__all__ = [
    'load_config',
    'save_config',
    'create_machine_settings_from_config',
    'create_optimizer_settings_from_config',
    'create_nesting_settings_from_config',
    'DEFAULT_CONFIG_PATH',
]
