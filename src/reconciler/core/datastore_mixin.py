#!/usr/bin/env python3
"""
DataStore Mixin - Common metadata behaviour for file-backed stores.

Subclasses implement the small set of primitive queries; the mixin derives
age and a status dictionary for the CLI from them.
"""

from abc import abstractmethod
from datetime import datetime
from pathlib import Path
from typing import Any


class DataStoreMixin:
    """
    Mixin providing common DataStore functionality.

    Subclasses must implement:
    - exists() -> bool
    - last_modified() -> datetime | None
    - item_count() -> int | None
    - size_bytes() -> int | None
    - summary_text() -> str
    """

    @staticmethod
    def _file_mtime(path: Path) -> datetime | None:
        """Modification time of a file, or None when it does not exist."""
        if not path.exists():
            return None
        return datetime.fromtimestamp(path.stat().st_mtime)

    @staticmethod
    def _file_size(path: Path) -> int | None:
        if not path.exists():
            return None
        return path.stat().st_size

    @abstractmethod
    def exists(self) -> bool:
        """Check if data exists in storage."""
        ...

    @abstractmethod
    def last_modified(self) -> datetime | None:
        """Get timestamp of most recent data modification."""
        ...

    @abstractmethod
    def item_count(self) -> int | None:
        """Get count of items/records in stored data."""
        ...

    @abstractmethod
    def size_bytes(self) -> int | None:
        """Get total storage size in bytes."""
        ...

    @abstractmethod
    def summary_text(self) -> str:
        """Get human-readable summary of current data state."""
        ...

    def age_days(self) -> int | None:
        """
        Get age of data in days since last modification.

        Returns:
            Number of days since last modification, or None if data doesn't exist
        """
        last_mod = self.last_modified()
        if last_mod is None:
            return None
        return (datetime.now() - last_mod).days

    def status(self) -> dict[str, Any]:
        """Collect the store's metadata into one dictionary for display."""
        last_mod = self.last_modified()
        return {
            "exists": self.exists(),
            "last_modified": last_mod.isoformat(timespec="seconds") if last_mod else None,
            "age_days": self.age_days(),
            "item_count": self.item_count(),
            "size_bytes": self.size_bytes(),
            "summary": self.summary_text(),
        }
