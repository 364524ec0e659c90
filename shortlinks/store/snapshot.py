"""JSON snapshot file for the in-memory store.

The snapshot is a JSON array of record objects, rewritten wholesale on each
flush through a temporary file and ``os.replace`` so a crash mid-write
leaves the previous snapshot intact.
"""

import asyncio
import json
import logging
import os
import tempfile
from typing import List, Optional, Sequence

from ..exceptions import SnapshotError, StorageError
from .models import URLRecord


class SnapshotFile:
    """Reads and writes the record snapshot."""

    def __init__(
        self,
        path: str,
        timeout_seconds: float = 5.0,
        logger: Optional[logging.Logger] = None,
    ):
        """Initialize snapshot file.

        Args:
            path: Snapshot file path
            timeout_seconds: Upper bound for a single read or write
            logger: Optional logger instance
        """
        self.path = path
        self.timeout_seconds = timeout_seconds
        self.logger = logger or logging.getLogger(__name__)

    async def read(self) -> Optional[List[URLRecord]]:
        """Read the snapshot.

        Returns:
            Records, or None if the file does not exist

        Raises:
            SnapshotError: If the file content is malformed
            StorageError: If the file cannot be read in time
        """
        try:
            return await asyncio.wait_for(
                asyncio.to_thread(self._read_sync),
                timeout=self.timeout_seconds,
            )
        except asyncio.TimeoutError as e:
            raise StorageError(f"Timed out reading snapshot {self.path}") from e

    async def write(self, records: Sequence[URLRecord]) -> None:
        """Serialize and write the snapshot off the event loop.

        Args:
            records: Records to persist

        Raises:
            StorageError: If serialization or the write fails or times out
        """
        try:
            await asyncio.wait_for(
                asyncio.to_thread(self._write_sync, records),
                timeout=self.timeout_seconds,
            )
        except asyncio.TimeoutError as e:
            raise StorageError(f"Timed out writing snapshot {self.path}") from e
        except (OSError, TypeError, ValueError) as e:
            raise StorageError(f"Failed to write snapshot {self.path}: {e}") from e

    def _read_sync(self) -> Optional[List[URLRecord]]:
        if not os.path.exists(self.path):
            return None

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise SnapshotError(f"Snapshot {self.path} is not valid JSON: {e}") from e
        except OSError as e:
            raise StorageError(f"Failed to read snapshot {self.path}: {e}") from e

        if not isinstance(data, list):
            raise SnapshotError(f"Snapshot {self.path} must contain a JSON array")

        records = []
        for index, item in enumerate(data):
            try:
                records.append(URLRecord.from_dict(item))
            except (KeyError, TypeError, ValueError, AttributeError) as e:
                self.logger.warning(f"Skipping malformed snapshot entry #{index}: {e}")
        return records

    def _write_sync(self, records: Sequence[URLRecord]) -> None:
        payload = json.dumps([record.to_dict() for record in records], indent=2, ensure_ascii=False)

        directory = os.path.dirname(os.path.abspath(self.path))
        os.makedirs(directory, exist_ok=True)

        fd, tmp_path = tempfile.mkstemp(prefix=".urls-", suffix=".tmp", dir=directory)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, self.path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise
