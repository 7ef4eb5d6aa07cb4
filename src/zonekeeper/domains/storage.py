"""File-backed storage for the domain collections.

Active domains are kept as a JSON array, pending and removed domains as
plain line-delimited text files.

Active storage file format (domains.json):
    [
        {
            "name": "example.com",
            "nameservers_correct": true,
            "last_checked": "2024-01-15T10:30:00+00:00"
        }
    ]

Every save overwrites the whole collection. The content is written to a
sibling temporary file first and renamed into place, so a crash mid-write
leaves the previous file intact.
"""

from __future__ import annotations

import asyncio
import json
import os
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

import structlog

logger = structlog.get_logger()


def _utc_now() -> datetime:
    """Return current UTC datetime."""
    return datetime.now(UTC)


@dataclass
class DomainRecord:
    """A domain that has been onboarded and is periodically re-verified."""

    name: str
    nameservers_correct: bool = True
    last_checked: datetime = field(default_factory=_utc_now)

    def copy(self) -> DomainRecord:
        """Return an independent copy of this record."""
        return replace(self)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "name": self.name,
            "nameservers_correct": self.nameservers_correct,
            "last_checked": self.last_checked.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> DomainRecord:
        """Create from dictionary (JSON deserialization)."""
        last_checked = data.get("last_checked")
        checked_at = datetime.fromisoformat(last_checked) if last_checked else _utc_now()
        if checked_at.tzinfo is None:
            checked_at = checked_at.replace(tzinfo=UTC)
        return cls(
            name=data["name"],
            nameservers_correct=data.get("nameservers_correct", False),
            last_checked=checked_at,
        )


def _atomic_write(path: Path, content: str) -> None:
    tmp_path = path.with_name(f".{path.name}.tmp")
    tmp_path.write_text(content, encoding="utf-8")
    os.replace(tmp_path, path)


class ActiveDomainStore:
    """JSON file storage for the active domain collection."""

    def __init__(self, storage_path: str | Path = "domains.json") -> None:
        """Initialize active domain store.

        Args:
            storage_path: Path to the JSON storage file.
        """
        self.storage_path = Path(storage_path)

    async def load(self) -> list[DomainRecord]:
        """Load all records. A missing or unreadable file yields an empty list."""
        if not self.storage_path.exists():
            return []

        try:
            content = await asyncio.to_thread(self.storage_path.read_text, encoding="utf-8")
            data = json.loads(content) if content.strip() else []
            return [DomainRecord.from_dict(item) for item in data]
        except (OSError, json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
            logger.error(
                "Failed to load active domains",
                path=str(self.storage_path),
                error=str(e),
            )
            return []

    async def save(self, records: list[DomainRecord]) -> bool:
        """Overwrite the stored collection.

        Returns:
            True if the file was written, False if the write failed.
        """
        content = json.dumps([record.to_dict() for record in records], indent=2)
        try:
            await asyncio.to_thread(_atomic_write, self.storage_path, content)
        except OSError as e:
            logger.error(
                "Failed to save active domains",
                path=str(self.storage_path),
                error=str(e),
            )
            return False
        return True


class NameListStore:
    """Line-delimited text storage for a list of domain names.

    Used for both the pending and the removed collections. Order is preserved
    and duplicates are kept.
    """

    def __init__(self, storage_path: str | Path) -> None:
        self.storage_path = Path(storage_path)

    async def load(self) -> list[str]:
        """Load all names. A missing or unreadable file yields an empty list."""
        if not self.storage_path.exists():
            return []

        try:
            content = await asyncio.to_thread(self.storage_path.read_text, encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            logger.error(
                "Failed to load domain list",
                path=str(self.storage_path),
                error=str(e),
            )
            return []

        return [line for line in content.splitlines() if line]

    async def save(self, names: list[str]) -> bool:
        """Overwrite the stored list, one name per line.

        Returns:
            True if the file was written, False if the write failed.
        """
        content = "".join(f"{name}\n" for name in names)
        try:
            await asyncio.to_thread(_atomic_write, self.storage_path, content)
        except OSError as e:
            logger.error(
                "Failed to save domain list",
                path=str(self.storage_path),
                error=str(e),
            )
            return False
        return True
