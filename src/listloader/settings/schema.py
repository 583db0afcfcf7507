"""Schema helpers for loader settings."""

from __future__ import annotations

from copy import deepcopy
from typing import Any

from jsonschema import Draft202012Validator

from ..config import (
    DEFAULT_COLLABORATOR_TIMEOUT_SEC,
    DEFAULT_REFRESH_RATE_SEC,
)

SETTINGS_SCHEMA: dict[str, Any] = {
    "$id": "listloader/settings.schema.json",
    "type": "object",
    "required": ["schema"],
    "properties": {
        "schema": {"const": "listloader/settings@1"},
        "page_size": {"type": ["integer", "null"], "minimum": 1},
        "refresh_rate": {"type": "number", "minimum": 0},
        "chunk_limit": {"type": ["integer", "null"], "minimum": 1},
        "collaborator_timeout": {"type": ["number", "null"], "exclusiveMinimum": 0},
    },
    "additionalProperties": False,
}

DEFAULT_SETTINGS: dict[str, Any] = {
    "schema": "listloader/settings@1",
    "page_size": None,
    "refresh_rate": DEFAULT_REFRESH_RATE_SEC,
    "chunk_limit": None,
    "collaborator_timeout": DEFAULT_COLLABORATOR_TIMEOUT_SEC,
}

_validator = Draft202012Validator(SETTINGS_SCHEMA)


def merge_with_defaults(data: dict[str, Any] | None) -> dict[str, Any]:
    """Merge *data* with :data:`DEFAULT_SETTINGS` and validate the result."""

    merged = deepcopy(DEFAULT_SETTINGS)
    if data:
        for key, value in data.items():
            merged[key] = value
    _validator.validate(merged)
    return merged


def validate_settings(data: dict[str, Any]) -> None:
    """Validate *data* against the settings schema."""

    _validator.validate(data)


__all__ = ["DEFAULT_SETTINGS", "SETTINGS_SCHEMA", "merge_with_defaults", "validate_settings"]
