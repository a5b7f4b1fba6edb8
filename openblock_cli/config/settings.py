"""
User settings stored in ``~/.openblockrc``.

The file is a YAML mapping (plain JSON files written by older releases
load unchanged, since JSON is valid YAML). Environment variables override
the file for the companion-service address and registry URL.
"""

import logging
import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from openblock_cli.core.directory import get_settings_file
from openblock_cli.core.exceptions import SettingsError

logger = logging.getLogger(__name__)

CONFIG_KEYS = [
    "github-token",
    "registry",
    "service-host",
    "service-port",
    "dev-service-port",
]

DEFAULT_SERVICE_HOST = "localhost"
DEFAULT_SERVICE_PORT = 20111
DEFAULT_DEV_SERVICE_PORT = 20112

ENV_OVERRIDES = {
    "registry": "OPENBLOCK_REGISTRY",
    "service-host": "OPENBLOCK_SERVICE_HOST",
}


def read_settings(settings_file: Optional[Path] = None) -> Dict[str, Any]:
    """
    Read the settings file.

    A missing file yields an empty mapping.

    Raises:
        SettingsError: If the file exists but cannot be parsed
    """
    settings_file = settings_file or get_settings_file()

    if not settings_file.exists():
        logger.debug(f"Settings file not found (optional): {settings_file}")
        return {}

    try:
        with open(settings_file, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise SettingsError(f"Invalid settings in {settings_file}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise SettingsError(f"Settings file {settings_file} must contain a mapping")

    return data


def write_settings(settings: Dict[str, Any], settings_file: Optional[Path] = None):
    """
    Write the settings file, readable by the current user only.

    Raises:
        SettingsError: If the file cannot be written
    """
    settings_file = settings_file or get_settings_file()

    try:
        with open(settings_file, "w", encoding="utf-8") as f:
            yaml.safe_dump(settings, f, default_flow_style=False, sort_keys=True)
        if sys.platform != "win32":
            os.chmod(settings_file, 0o600)
    except OSError as e:
        raise SettingsError(f"Failed to write config file: {e}") from e


def get_setting(key: str, settings_file: Optional[Path] = None) -> Optional[Any]:
    """Get one setting value (None if unset)."""
    return read_settings(settings_file).get(key)


def set_setting(key: str, value: Any, settings_file: Optional[Path] = None):
    """
    Set one setting value.

    Raises:
        SettingsError: If key is not a known setting
    """
    if key not in CONFIG_KEYS:
        raise SettingsError(
            f"Unknown configuration key: {key}. Valid keys: {', '.join(CONFIG_KEYS)}"
        )

    settings = read_settings(settings_file)
    settings[key] = value
    write_settings(settings, settings_file)


def delete_setting(key: str, settings_file: Optional[Path] = None):
    """Remove one setting (no-op if unset)."""
    settings = read_settings(settings_file)
    if settings.pop(key, None) is not None:
        write_settings(settings, settings_file)


def list_settings(settings_file: Optional[Path] = None) -> Dict[str, Any]:
    """Return all settings."""
    return read_settings(settings_file)


@dataclass
class ServiceSettings:
    """Resolved companion-service address and registry URL."""

    host: str = DEFAULT_SERVICE_HOST
    port: int = DEFAULT_SERVICE_PORT
    dev_port: int = DEFAULT_DEV_SERVICE_PORT
    registry_url: Optional[str] = None


def load_service_settings(settings_file: Optional[Path] = None) -> ServiceSettings:
    """
    Resolve service settings from the settings file and environment.

    Environment variables take precedence over the file.
    """
    settings = read_settings(settings_file)

    for key, env_var in ENV_OVERRIDES.items():
        if os.environ.get(env_var):
            settings[key] = os.environ[env_var]

    try:
        return ServiceSettings(
            host=str(settings.get("service-host") or DEFAULT_SERVICE_HOST),
            port=int(settings.get("service-port") or DEFAULT_SERVICE_PORT),
            dev_port=int(settings.get("dev-service-port") or DEFAULT_DEV_SERVICE_PORT),
            registry_url=settings.get("registry") or None,
        )
    except (TypeError, ValueError) as e:
        raise SettingsError(f"Invalid service port in settings: {e}") from e
