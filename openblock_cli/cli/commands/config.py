"""
Config command implementation.

Manages user settings stored in ~/.openblockrc.
"""

import logging

from openblock_cli.cli.utils import mask_token, print_error
from openblock_cli.config.settings import (
    CONFIG_KEYS,
    delete_setting,
    get_setting,
    list_settings,
    set_setting,
)
from openblock_cli.core.exceptions import SettingsError

logger = logging.getLogger(__name__)

SECRET_KEYS = ("github-token",)


def _display(key: str, value) -> str:
    return mask_token(value) if key in SECRET_KEYS else str(value)


def run(args) -> int:
    """
    Run the config command.

    Args:
        args: Parsed command-line arguments with:
            - action: get, set, delete or list
            - key: Setting name
            - value: Setting value (for set)

    Returns:
        Exit code (0 for success)
    """
    try:
        if args.action == "list":
            return _list()

        if not args.key:
            print_error(
                f"key is required for {args.action} action",
                f"Available keys: {', '.join(CONFIG_KEYS)}",
            )
            return 1

        if args.action == "get":
            value = get_setting(args.key)
            if value is None:
                print(f"{args.key}: (not set)")
            else:
                print(f"{args.key}: {_display(args.key, value)}")
            return 0

        if args.action == "set":
            if args.value is None:
                print_error(
                    "value is required for set action",
                    "Usage: openblock-cli config set <key> <value>",
                )
                return 1
            set_setting(args.key, args.value)
            print(f"{args.key} has been set")
            return 0

        delete_setting(args.key)
        print(f"{args.key} has been deleted")
        return 0

    except SettingsError as e:
        print_error(str(e))
        return 1


def _list() -> int:
    settings = list_settings()
    if not settings:
        print("(no configuration set)")
        return 0

    for key, value in settings.items():
        print(f"{key}: {_display(key, value)}")
    return 0
