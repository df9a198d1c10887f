"""
YAML loader utility for PhaseNav.

Loads settings overrides and curriculum catalogs from YAML files.
"""

from pathlib import Path
from typing import Any
import yaml


def load_yaml(file_path: Path) -> dict[str, Any]:
    """
    Load a YAML mapping from disk.

    Args:
        file_path: Path to the .yaml file

    Returns:
        Parsed mapping (empty dict for an empty file)

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If the document root is not a mapping
        yaml.YAMLError: If YAML parsing fails
    """
    if not file_path.exists():
        raise FileNotFoundError(f"YAML file not found: {file_path}")

    with open(file_path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f)

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"Expected a mapping at the root of {file_path}")
    return data


def dump_yaml(data: dict[str, Any], file_path: Path) -> None:
    """Write a mapping as YAML, creating parent directories."""
    file_path.parent.mkdir(parents=True, exist_ok=True)
    with open(file_path, "w", encoding="utf-8") as f:
        yaml.safe_dump(data, f, allow_unicode=True, sort_keys=False)
