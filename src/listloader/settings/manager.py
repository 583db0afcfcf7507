"""Loader settings: construction, validation and JSON file loading."""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Mapping, Optional

from jsonschema import ValidationError

from ..config import DEFAULT_COLLABORATOR_TIMEOUT_SEC, DEFAULT_REFRESH_RATE_SEC
from ..errors import SettingsLoadError, SettingsValidationError
from .schema import DEFAULT_SETTINGS, merge_with_defaults, validate_settings


@dataclass(frozen=True)
class LoaderSettings:
    """Configuration surface of a loader instance.

    ``page_size`` is fixed for the lifetime of the loader; ``None`` disables
    pagination.  ``collaborator_timeout`` bounds each fetch/store wait in
    seconds, ``None`` waits forever.
    """

    page_size: Optional[int] = None
    refresh_rate: float = DEFAULT_REFRESH_RATE_SEC
    chunk_limit: Optional[int] = None
    collaborator_timeout: Optional[float] = DEFAULT_COLLABORATOR_TIMEOUT_SEC

    def __post_init__(self) -> None:
        try:
            validate_settings(self._payload())
        except ValidationError as exc:
            raise SettingsValidationError(exc.message) from exc

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any] | None) -> "LoaderSettings":
        try:
            merged = merge_with_defaults(dict(data) if data else None)
        except ValidationError as exc:
            raise SettingsValidationError(exc.message) from exc
        merged.pop("schema")
        return cls(**merged)

    def to_mapping(self) -> dict[str, Any]:
        return self._payload()

    def _payload(self) -> dict[str, Any]:
        payload = {"schema": DEFAULT_SETTINGS["schema"]}
        payload.update(asdict(self))
        return payload


def load_settings(path: Path) -> LoaderSettings:
    """Load settings from the JSON file at *path*, using defaults if it is missing."""

    if not path.exists():
        return LoaderSettings()
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        raise SettingsLoadError(f"Cannot read settings from {path}: {exc}") from exc
    if not isinstance(payload, dict):
        raise SettingsLoadError(f"Settings file {path} must contain a JSON object")
    return LoaderSettings.from_mapping(payload)


__all__ = ["LoaderSettings", "load_settings"]
