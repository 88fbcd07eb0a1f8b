"""ORM model for the local key/value store.

Each row holds one string value under a unique key, the same contract the
browser's ``localStorage`` offers: the resume document blob and the theme
preference live in separate rows.
"""

from __future__ import annotations

from datetime import UTC, datetime

from sqlalchemy import DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from resume_builder.data.db import Base


class StorageEntry(Base):
    """A single persisted key/value pair.

    Attributes:
        key: Unique storage key, e.g. ``resume_builder_data_v1``.
        value: Stored string (JSON blob or plain text).
        updated_at: UTC timestamp of the last write.
    """

    __tablename__ = "storage_entries"

    key: Mapped[str] = mapped_column(String(255), primary_key=True)
    value: Mapped[str] = mapped_column(Text, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(UTC),
        onupdate=lambda: datetime.now(UTC),
    )
