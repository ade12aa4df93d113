"""
Workbook serialization utilities.

Provides JSON serialization and deserialization for workbook configurations.
The serialized format includes versioning for forward compatibility. It
contains formulas and is meant for server-side persistence only.
"""

import json
from typing import Any, Dict

from calcvault.spreadsheet.model import WorkbookConfig

# Current serialization format version
SERIALIZATION_VERSION = "1.0"


def serialize(config: WorkbookConfig) -> Dict[str, Any]:
    """Serialize a workbook configuration to a JSON-serializable dictionary.

    Raises:
        TypeError: If config is not a WorkbookConfig instance

    Example:
        >>> data = serialize(DEFAULT_WORKBOOK)
        >>> assert data["version"] == "1.0"
        >>> assert "workbook" in data
    """
    if not isinstance(config, WorkbookConfig):
        raise TypeError(f"Expected WorkbookConfig, got {type(config)}")

    return {
        "version": SERIALIZATION_VERSION,
        "workbook": config.to_dict(),
    }


def deserialize(data: Dict[str, Any]) -> WorkbookConfig:
    """Deserialize a workbook configuration from a dictionary.

    Raises:
        ValueError: If data is missing required fields, has an unsupported
            version, or describes an invalid workbook
        TypeError: If data is not a dictionary
    """
    if not isinstance(data, dict):
        raise TypeError(f"Expected dict, got {type(data)}")

    if "version" not in data:
        raise ValueError("Serialized workbook must have 'version' field")
    if "workbook" not in data:
        raise ValueError("Serialized workbook must have 'workbook' field")

    version = data["version"]
    if version != SERIALIZATION_VERSION:
        raise ValueError(
            f"Unsupported serialization version: {version}. "
            f"Expected {SERIALIZATION_VERSION}"
        )

    try:
        return WorkbookConfig.from_dict(data["workbook"])
    except KeyError as e:
        raise ValueError(f"Missing required field in workbook: {e}") from e


def to_json(config: WorkbookConfig, **kwargs) -> str:
    """Serialize a workbook configuration to a JSON string.

    Args:
        config: The workbook configuration
        **kwargs: Additional arguments to pass to json.dumps (e.g., indent=2)
    """
    return json.dumps(serialize(config), **kwargs)


def from_json(json_str: str) -> WorkbookConfig:
    """Deserialize a workbook configuration from a JSON string.

    Raises:
        ValueError: If JSON is invalid or the workbook structure is invalid
    """
    if not isinstance(json_str, str):
        raise TypeError(f"Expected str, got {type(json_str)}")

    try:
        data = json.loads(json_str)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON: {e}") from e

    return deserialize(data)
