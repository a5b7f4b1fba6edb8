"""
Configuration for openblock-cli: project package.json and user settings.
"""

from .project import load_package_json, get_openblock_config
from .settings import (
    CONFIG_KEYS,
    ServiceSettings,
    load_service_settings,
    get_setting,
    set_setting,
    delete_setting,
    list_settings,
)

__all__ = [
    "load_package_json",
    "get_openblock_config",
    "CONFIG_KEYS",
    "ServiceSettings",
    "load_service_settings",
    "get_setting",
    "set_setting",
    "delete_setting",
    "list_settings",
]
