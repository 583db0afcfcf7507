"""Default configuration values for listloader."""

from __future__ import annotations

from typing import Final

# Window size used for cursor arithmetic when pagination is disabled; keeps
# ``(page + 1) * window`` within a signed 64-bit integer.
UNBOUNDED_WINDOW: Final[int] = (2**63 - 1) // 10

# Chunk size used by chunk-aware loaders when no page size is configured.
DEFAULT_CHUNK_SIZE: Final[int] = 2**15 - 1

# Minimum number of seconds between two "outdated" refreshes.
DEFAULT_REFRESH_RATE_SEC: Final[float] = 60.0

# ``None`` means collaborator calls are awaited without a bound.
DEFAULT_COLLABORATOR_TIMEOUT_SEC: Final[float | None] = None

ITEMS_THREAD_PREFIX: Final[str] = "listloader-items"
SERIAL_THREAD_PREFIX: Final[str] = "listloader-serial"
CONTROL_THREAD_PREFIX: Final[str] = "listloader-control"
ITEMS_MAX_WORKERS: Final[int] = 4
