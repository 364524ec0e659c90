"""In-memory store with optional JSON snapshot persistence."""

import asyncio
import logging
from datetime import datetime
from typing import Callable, Dict, List, Optional

from ..exceptions import ShortcodeConflictError, SnapshotError, StorageError
from .base import RecordMutator, URLStoreBase
from .models import StoreStats, URLRecord, utc_now
from .snapshot import SnapshotFile


class InMemoryURLStore(URLStoreBase):
    """Process-wide shortcode -> record mapping.

    All mutations run under one ``asyncio.Lock``. Records are immutable, so
    lock-free reads always see a whole record. After every mutation the
    current records are captured under the lock and written to the snapshot
    outside it; a generation counter keeps an older capture from
    overwriting a newer one.
    """

    def __init__(
        self,
        snapshot: Optional[SnapshotFile] = None,
        clock: Optional[Callable[[], datetime]] = None,
        logger: Optional[logging.Logger] = None,
    ):
        """Initialize the store.

        Args:
            snapshot: Optional snapshot file; None keeps data in memory only
            clock: Optional clock returning aware UTC datetimes
            logger: Optional logger instance
        """
        self.snapshot = snapshot
        self.clock = clock or utc_now
        self.logger = logger or logging.getLogger(__name__)

        self._records: Dict[str, URLRecord] = {}
        self._lock = asyncio.Lock()
        self._write_lock = asyncio.Lock()
        self._generation = 0
        self._written_generation = 0
        self._last_flush_ok = True

    async def load(self) -> int:
        if not self.snapshot:
            self.logger.info("Snapshot persistence disabled, starting with empty store")
            return 0

        try:
            records = await self.snapshot.read()
        except SnapshotError as e:
            self.logger.error(f"Failed to load snapshot, starting with empty store: {e}")
            return 0
        except StorageError as e:
            self.logger.error(f"Snapshot unavailable, starting with empty store: {e}")
            return 0

        if records is None:
            self.logger.info(f"No snapshot found at {self.snapshot.path}, starting with empty store")
            return 0

        async with self._lock:
            self._records = {record.shortcode: record for record in records}
            count = len(self._records)

        self.logger.info(f"Loaded {count} URLs from {self.snapshot.path}")
        return count

    async def put(self, record: URLRecord, overwrite: bool = True) -> bool:
        async with self._lock:
            if not overwrite and record.shortcode in self._records:
                raise ShortcodeConflictError(
                    details=["The requested shortcode is already in use"],
                )
            self._records[record.shortcode] = record
            capture = self._capture()

        self.logger.debug(f"Stored URL: {record.shortcode}")
        return await self._persist(capture)

    async def get(self, shortcode: str) -> Optional[URLRecord]:
        record = self._records.get(shortcode)
        if record is None:
            self.logger.debug(f"Shortcode not found: {shortcode}")
        return record

    async def exists(self, shortcode: str) -> bool:
        return shortcode in self._records

    async def list_all(self) -> List[URLRecord]:
        return list(self._records.values())

    async def update(self, shortcode: str, record: URLRecord) -> bool:
        async with self._lock:
            if shortcode not in self._records:
                return False
            self._records[shortcode] = record
            capture = self._capture()

        return await self._persist(capture)

    async def modify(self, shortcode: str, mutator: RecordMutator) -> Optional[URLRecord]:
        async with self._lock:
            current = self._records.get(shortcode)
            if current is None:
                return None
            updated = mutator(current)
            self._records[shortcode] = updated
            capture = self._capture()

        await self._persist(capture)
        return updated

    async def delete(self, shortcode: str) -> bool:
        async with self._lock:
            if self._records.pop(shortcode, None) is None:
                return False
            capture = self._capture()

        self.logger.info(f"Deleted URL: {shortcode}")
        await self._persist(capture)
        return True

    async def sweep_expired(self, now: Optional[datetime] = None) -> int:
        now = now or self.clock()

        async with self._lock:
            expired = [code for code, record in self._records.items() if record.is_expired(now)]
            for code in expired:
                del self._records[code]
            capture = self._capture() if expired else None

        if capture is not None:
            self.logger.info(f"Removed {len(expired)} expired URLs")
            await self._persist(capture)
        return len(expired)

    async def stats(self, now: Optional[datetime] = None) -> StoreStats:
        now = now or self.clock()
        records = list(self._records.values())

        active = sum(1 for record in records if not record.is_expired(now))
        return StoreStats(
            total=len(records),
            active=active,
            expired=len(records) - active,
            total_clicks=sum(record.click_count for record in records),
        )

    async def flush(self) -> bool:
        async with self._lock:
            capture = self._capture()
        return await self._persist(capture)

    async def close(self) -> None:
        if self.snapshot and self._generation > self._written_generation:
            await self.flush()
        self.logger.info("Store closed")

    async def health_check(self) -> bool:
        return self._last_flush_ok

    def _capture(self):
        """Snapshot of current records; must be called with ``_lock`` held."""
        self._generation += 1
        return self._generation, list(self._records.values())

    async def _persist(self, capture) -> bool:
        if not self.snapshot:
            return True

        generation, records = capture
        async with self._write_lock:
            if generation <= self._written_generation:
                # A newer capture already reached disk
                return True
            try:
                await self.snapshot.write(records)
            except StorageError as e:
                self.logger.error(f"Snapshot flush failed, continuing from memory: {e}")
                self._last_flush_ok = False
                return False

            self._written_generation = generation
            self._last_flush_ok = True

        self.logger.debug(f"Saved {len(records)} URLs to {self.snapshot.path}")
        return True
