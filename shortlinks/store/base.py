"""Abstract base class for URL record stores."""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Callable, List, Optional

from .models import StoreStats, URLRecord


RecordMutator = Callable[[URLRecord], URLRecord]


class URLStoreBase(ABC):
    """Keyed storage of ``URLRecord`` objects by shortcode.

    Implementations must serialize mutations (put, update, modify, delete,
    sweep_expired) and let reads observe only whole records.
    """

    @abstractmethod
    async def load(self) -> int:
        """Hydrate the store from durable storage.

        Returns:
            Number of records loaded
        """
        pass

    @abstractmethod
    async def put(self, record: URLRecord, overwrite: bool = True) -> bool:
        """Insert or overwrite a record by shortcode.

        Args:
            record: Record to store
            overwrite: When False, an existing key is a conflict

        Returns:
            False only if persisting the change failed

        Raises:
            ShortcodeConflictError: If overwrite is False and the key exists
        """
        pass

    @abstractmethod
    async def get(self, shortcode: str) -> Optional[URLRecord]:
        """Get a record by shortcode.

        Args:
            shortcode: The shortcode to lookup

        Returns:
            The record if found, None otherwise
        """
        pass

    @abstractmethod
    async def exists(self, shortcode: str) -> bool:
        """Check if a shortcode is taken.

        Args:
            shortcode: The shortcode to check

        Returns:
            True if exists, False otherwise
        """
        pass

    @abstractmethod
    async def list_all(self) -> List[URLRecord]:
        """List every record at call time (a copy, not a live view)."""
        pass

    @abstractmethod
    async def update(self, shortcode: str, record: URLRecord) -> bool:
        """Replace an existing record.

        Args:
            shortcode: Key of the record to replace
            record: New record version

        Returns:
            True if replaced, False if the key is absent or persisting failed
        """
        pass

    @abstractmethod
    async def modify(self, shortcode: str, mutator: RecordMutator) -> Optional[URLRecord]:
        """Atomically read, transform and replace a record.

        Exceptions raised by ``mutator`` propagate and leave the record
        unchanged.

        Args:
            shortcode: Key of the record to modify
            mutator: Function returning the new record version

        Returns:
            The new record, or None if the key is absent
        """
        pass

    @abstractmethod
    async def delete(self, shortcode: str) -> bool:
        """Delete a record.

        Args:
            shortcode: The shortcode to delete

        Returns:
            True if deleted, False if not found
        """
        pass

    @abstractmethod
    async def sweep_expired(self, now: Optional[datetime] = None) -> int:
        """Delete every expired record.

        Args:
            now: Reference time (defaults to the store clock)

        Returns:
            Number of records removed
        """
        pass

    @abstractmethod
    async def stats(self, now: Optional[datetime] = None) -> StoreStats:
        """Aggregate counts computed at call time."""
        pass

    @abstractmethod
    async def flush(self) -> bool:
        """Persist the current state.

        Returns:
            True if persisted (or persistence is disabled)
        """
        pass

    @abstractmethod
    async def close(self) -> None:
        """Flush and release resources."""
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        """Check if the store is healthy.

        Returns:
            True if healthy, False otherwise
        """
        pass
