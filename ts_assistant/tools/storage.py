"""
Append-only JSON collections for committed leads, tickets and bookings.

Each collection is a single JSON array on disk. Reads never raise: a missing
or corrupt file reads as an empty collection. Appends are a load-push-write
cycle serialised by a per-collection lock, and the rewrite goes through a
temporary file so a crash never leaves a half-written array behind.
"""

import asyncio
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Protocol, Union

from ts_assistant.config import StorageConfig, settings
from ts_assistant.schemas.session_schema import Domain

logger = logging.getLogger(__name__)

StoredRecord = dict[str, Any]


class RecordStore(Protocol):
    """Persistence contract consumed by the slot-filling flows."""

    async def load_all(self) -> list[StoredRecord]: ...

    async def append_one(self, record: StoredRecord) -> bool: ...


class JsonRecordStore:
    """One JSON array file, safe for concurrent appends within one event loop."""

    def __init__(self, path: Union[str, Path]) -> None:
        self.path = Path(path)
        self._lock = asyncio.Lock()

    def __repr__(self) -> str:
        return f"JsonRecordStore({str(self.path)!r})"

    def _read(self) -> list[StoredRecord]:
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return []
        except OSError:
            logger.warning("Could not read %s, treating it as empty", self.path, exc_info=True)
            return []
        try:
            data = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Corrupt JSON in %s, treating it as empty", self.path)
            return []
        if not isinstance(data, list):
            logger.warning("Expected a JSON array in %s, got %s", self.path, type(data).__name__)
            return []
        return [item for item in data if isinstance(item, dict)]

    def _write(self, records: list[StoredRecord]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(records, handle, ensure_ascii=False, indent=2)
            os.replace(tmp_name, self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    async def load_all(self) -> list[StoredRecord]:
        return await asyncio.to_thread(self._read)

    async def append_one(self, record: StoredRecord) -> bool:
        """Append one record; returns False (and logs) if the write failed."""
        async with self._lock:
            records = await asyncio.to_thread(self._read)
            records.append(record)
            try:
                await asyncio.to_thread(self._write, records)
            except (OSError, TypeError, ValueError):
                logger.exception("Failed to append record to %s", self.path)
                return False
        logger.debug("Appended record to %s (%d total)", self.path, len(records))
        return True


def build_stores(config: StorageConfig = settings.storage) -> dict[Domain, JsonRecordStore]:
    """Create the leads / tickets / bookings collections under the data directory."""
    base = Path(config.data_dir)
    return {
        Domain.LEAD: JsonRecordStore(base / config.leads_file),
        Domain.SUPPORT: JsonRecordStore(base / config.tickets_file),
        Domain.SCHEDULE: JsonRecordStore(base / config.bookings_file),
    }
