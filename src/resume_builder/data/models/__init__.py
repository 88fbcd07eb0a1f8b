"""ORM models package for database tables.

- StorageEntry: key/value pairs backing the device-local storage

All models inherit from the shared Base declarative class defined in data.db.
"""

from resume_builder.data.db import Base
from resume_builder.data.models.storage_entry import StorageEntry

__all__ = ["Base", "StorageEntry"]
