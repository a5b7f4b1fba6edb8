"""
Project configuration loading.

A plugin project declares its OpenBlock metadata inside ``package.json``
under the ``openblock`` key.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Union

from openblock_cli.core.exceptions import ProjectConfigError

logger = logging.getLogger(__name__)

PACKAGE_JSON = "package.json"


def load_package_json(project_dir: Union[str, Path]) -> Dict[str, Any]:
    """
    Load a project's package.json.

    Raises:
        ProjectConfigError: If the file is missing or not a JSON object
    """
    package_json_path = Path(project_dir) / PACKAGE_JSON

    if not package_json_path.is_file():
        raise ProjectConfigError("package.json not found")

    logger.debug(f"Loading project configuration from {package_json_path}")

    try:
        with open(package_json_path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ProjectConfigError(f"Invalid JSON in {package_json_path}: {e}") from e

    if not isinstance(data, dict):
        raise ProjectConfigError(f"{package_json_path} must contain a JSON object")

    return data


def get_openblock_config(project_dir: Union[str, Path]) -> Dict[str, Any]:
    """
    Get the ``openblock`` section of package.json (empty if absent).

    Raises:
        ProjectConfigError: If package.json is missing/malformed or the
            section is not an object
    """
    config = load_package_json(project_dir).get("openblock") or {}

    if not isinstance(config, dict):
        raise ProjectConfigError("package.json 'openblock' field must be an object")

    return config
