"""Device-local key/value storage.

Mirrors the browser ``localStorage`` API (``get_item``, ``set_item``,
``remove_item``) on top of the SQLite ``storage_entries`` table. Values are
plain strings; callers serialize their own data.
"""

from __future__ import annotations

import logging

from sqlalchemy.exc import SQLAlchemyError

from resume_builder.data.db import get_session
from resume_builder.data.models import StorageEntry

logger = logging.getLogger(__name__)

__all__ = ["MAX_VALUE_BYTES", "LocalStorage", "StorageError"]

# Per-value quota, in UTF-8 bytes.
MAX_VALUE_BYTES = 5 * 1024 * 1024


class StorageError(RuntimeError):
    """Raised when local storage cannot be read or written."""


class LocalStorage:
    """String key/value store persisted on this device."""

    def __init__(self, max_value_bytes: int = MAX_VALUE_BYTES) -> None:
        self.max_value_bytes = max_value_bytes

    def get_item(self, key: str) -> str | None:
        """Return the value stored under *key*, or None if absent.

        Raises:
            StorageError: If the backing database cannot be read.
        """
        try:
            with get_session() as session:
                entry = session.get(StorageEntry, key)
                return entry.value if entry is not None else None
        except (SQLAlchemyError, OSError) as exc:
            raise StorageError(f"Failed to read {key!r}: {exc}") from exc

    def set_item(self, key: str, value: str) -> None:
        """Store *value* under *key*, replacing any previous value.

        Raises:
            StorageError: If the value exceeds the quota or the write fails.
        """
        size = len(value.encode("utf-8"))
        if size > self.max_value_bytes:
            raise StorageError(
                f"Quota exceeded for {key!r}: {size} bytes > {self.max_value_bytes} bytes"
            )

        try:
            with get_session() as session:
                entry = session.get(StorageEntry, key)
                if entry is None:
                    session.add(StorageEntry(key=key, value=value))
                else:
                    entry.value = value
        except (SQLAlchemyError, OSError) as exc:
            raise StorageError(f"Failed to write {key!r}: {exc}") from exc

        logger.debug("Stored %d bytes under %s", size, key)

    def remove_item(self, key: str) -> None:
        """Delete *key* if present.

        Raises:
            StorageError: If the backing database cannot be written.
        """
        try:
            with get_session() as session:
                entry = session.get(StorageEntry, key)
                if entry is not None:
                    session.delete(entry)
        except (SQLAlchemyError, OSError) as exc:
            raise StorageError(f"Failed to remove {key!r}: {exc}") from exc
