"""Business logic service for URL shortener."""

import logging
from datetime import datetime
from typing import Any, Awaitable, Callable, Dict, Optional

from .common.validators import DEFAULT_VALIDITY_MINUTES, validate_url, validate_validity
from .exceptions import (
    ErrorKind,
    InvalidInputError,
    ShortcodeConflictError,
    ShortcodeExpiredError,
    ShortcodeNotFoundError,
    ShortenerError,
    StorageError,
)
from .results import ServiceResult
from .shortcode import ShortCodeGenerator
from .store.base import URLStoreBase
from .store.models import ClickContext, URLRecord, format_timestamp, utc_now


class URLShortenerService:
    """Service layer for URL shortening business logic.

    Every public operation returns a ``ServiceResult``; validation and lookup
    failures never escape as exceptions.
    """

    def __init__(
        self,
        store: URLStoreBase,
        short_code_generator: Optional[ShortCodeGenerator] = None,
        base_url: str = "http://localhost:5000",
        path_prefix: str = "",
        logger: Optional[logging.Logger] = None,
        clock: Optional[Callable[[], datetime]] = None,
        production: bool = False,
        max_generation_attempts: int = 10,
        default_validity_minutes: int = DEFAULT_VALIDITY_MINUTES,
    ):
        """Initialize URL shortener service.

        Args:
            store: Record store
            short_code_generator: Optional short code generator
            base_url: Base URL for short links
            path_prefix: Optional path prefix for short links
            logger: Optional logger
            clock: Optional clock returning aware UTC datetimes
            production: Reject localhost and private network targets
            max_generation_attempts: Default-length attempts before escalating
            default_validity_minutes: Validity used when none is requested
        """
        self.store = store
        self.generator = short_code_generator or ShortCodeGenerator()
        self.base_url = base_url
        self.path_prefix = path_prefix
        self.logger = logger or logging.getLogger(__name__)
        self.clock = clock or utc_now
        self.production = production
        self.max_generation_attempts = max_generation_attempts
        self.default_validity_minutes = default_validity_minutes

    def short_link(self, shortcode: str) -> str:
        """Public link for a shortcode: base URL, optional path prefix, code."""
        base = self.base_url.rstrip("/")
        prefix = self.path_prefix.strip("/")
        if prefix:
            return f"{base}/{prefix}/{shortcode}"
        return f"{base}/{shortcode}"

    async def create_short_url(
        self,
        original_url: Any,
        validity: Any = None,
        custom_shortcode: Any = None,
    ) -> ServiceResult:
        """Create a new short URL.

        Validation short-circuits by category: URL, then validity, then the
        custom shortcode. Each failure reports every reason in its category.

        Args:
            original_url: The original long URL (https is assumed when no protocol)
            validity: Optional validity in minutes
            custom_shortcode: Optional caller-chosen shortcode

        Returns:
            Result with shortLink, expiry, shortcode and originalUrl
        """
        return await self._run(
            "create_short_url",
            lambda: self._create(original_url, validity, custom_shortcode),
        )

    async def get_statistics(self, shortcode: Any) -> ServiceResult:
        """Get the statistics view of a short URL.

        Args:
            shortcode: The short code to lookup

        Returns:
            Result with the statistics view
        """
        return await self._run("get_statistics", lambda: self._statistics(shortcode))

    async def handle_redirect(self, shortcode: Any, click_context: Optional[ClickContext] = None) -> ServiceResult:
        """Resolve a short code and record the click.

        Args:
            shortcode: The short code being visited
            click_context: Referrer, user agent and IP of the visit

        Returns:
            Result with originalUrl, clickRecord and totalClicks
        """
        return await self._run("handle_redirect", lambda: self._redirect(shortcode, click_context))

    async def list_all(self) -> ServiceResult:
        """List statistics views for every stored URL."""
        return await self._run("list_all", self._list_all)

    async def delete_short_url(self, shortcode: Any) -> ServiceResult:
        """Delete a short URL.

        Args:
            shortcode: The short code to delete

        Returns:
            Result with the deleted shortcode
        """
        return await self._run("delete_short_url", lambda: self._delete(shortcode))

    async def deactivate(self, shortcode: Any) -> ServiceResult:
        """Soft-deactivate a short URL without touching its expiry.

        Args:
            shortcode: The short code to deactivate

        Returns:
            Result with the updated statistics view
        """
        return await self._run("deactivate", lambda: self._deactivate(shortcode))

    async def get_store_statistics(self) -> ServiceResult:
        """Get service-wide totals."""
        return await self._run("get_store_statistics", self._store_statistics)

    async def run_cleanup(self) -> Dict[str, int]:
        """Remove expired URLs.

        Best-effort: failures are logged and reported as zero removals.

        Returns:
            Dictionary with removedCount
        """
        self.logger.info("Starting cleanup of expired URLs")
        try:
            removed = await self.store.sweep_expired(self.clock())
        except Exception:
            self.logger.exception("Cleanup of expired URLs failed")
            return {"removedCount": 0}

        self.logger.info(f"Cleanup done: {removed} URLs removed")
        return {"removedCount": removed}

    async def health_check(self) -> Dict[str, bool]:
        """Perform health check.

        Returns:
            Dictionary with health status
        """
        try:
            store_healthy = await self.store.health_check()
        except Exception:
            self.logger.exception("Store health check failed")
            store_healthy = False

        return {
            "store": store_healthy,
            "overall": store_healthy,
        }

    async def close(self) -> None:
        """Flush and close the store."""
        await self.store.close()

    async def _run(self, operation: str, action: Callable[[], Awaitable[Any]]) -> ServiceResult:
        try:
            return ServiceResult.ok(await action())
        except ShortenerError as e:
            log = self.logger.error if isinstance(e, StorageError) else self.logger.warning
            log(f"{operation} failed: {e.message} ({'; '.join(e.details)})")
            return ServiceResult.from_exception(e)
        except Exception:
            self.logger.exception(f"Unexpected error in {operation}")
            return ServiceResult.fail(
                ErrorKind.INTERNAL,
                "Internal server error",
                ["An unexpected error occurred"],
            )

    def _require_shortcode(self, shortcode: Any) -> str:
        normalized = self.generator.normalize(shortcode)
        if normalized is None:
            raise InvalidInputError(
                "Invalid shortcode",
                ["Shortcode is required and must be a string"],
            )
        return normalized

    async def _get_existing(self, shortcode: str) -> URLRecord:
        record = await self.store.get(shortcode)
        if record is None:
            raise ShortcodeNotFoundError(details=["The requested shortcode does not exist"])
        return record

    async def _create(self, original_url: Any, validity: Any, custom_shortcode: Any) -> Dict[str, Any]:
        self.logger.info(f"Creating short URL for: {original_url}")

        normalized_url, errors = validate_url(original_url, production=self.production)
        if errors:
            raise InvalidInputError("Invalid URL", errors)

        minutes, errors = validate_validity(validity, default=self.default_validity_minutes)
        if errors:
            raise InvalidInputError("Invalid validity period", errors)

        if custom_shortcode:
            is_valid, errors = self.generator.validate_custom(custom_shortcode)
            if not is_valid:
                raise InvalidInputError("Invalid custom shortcode", errors)

            shortcode = self.generator.normalize(custom_shortcode)
            if await self.store.exists(shortcode):
                raise ShortcodeConflictError(details=["The requested shortcode is already in use"])
            is_custom = True
        else:
            shortcode = await self.generator.generate_unique(
                self.store.exists,
                max_attempts=self.max_generation_attempts,
            )
            is_custom = False

        record = URLRecord.create(
            shortcode=shortcode,
            original_url=normalized_url,
            validity_minutes=minutes,
            custom_shortcode=is_custom,
            now=self.clock(),
        )

        # Custom codes must not silently replace a record created concurrently
        if not await self.store.put(record, overwrite=not is_custom):
            # The record is live in memory; only the snapshot lags behind
            self.logger.warning(f"Short URL {shortcode} created but snapshot flush failed")

        short_link = self.short_link(shortcode)
        self.logger.info(f"Created short URL: {short_link} -> {normalized_url}")

        return {
            "shortLink": short_link,
            "expiry": format_timestamp(record.expires_at),
            "shortcode": shortcode,
            "originalUrl": record.original_url,
        }

    async def _statistics(self, shortcode: Any) -> Dict[str, Any]:
        code = self._require_shortcode(shortcode)
        record = await self._get_existing(code)

        stats = record.get_stats(self.clock(), self.short_link(code))
        self.logger.info(f"Stats for {code}: {stats['clickCount']} clicks")
        return stats

    async def _redirect(self, shortcode: Any, click_context: Optional[ClickContext]) -> Dict[str, Any]:
        code = self._require_shortcode(shortcode)
        record = await self._get_existing(code)

        if record.is_expired(self.clock()):
            raise ShortcodeExpiredError(details=["This shortened URL has expired and is no longer valid"])

        recorded = []

        def record_click(current: URLRecord) -> URLRecord:
            # Expiry can pass between the lookup above and taking the store lock
            now = self.clock()
            if current.is_expired(now):
                raise ShortcodeExpiredError(details=["This shortened URL has expired and is no longer valid"])
            updated, click = current.add_click(click_context, now)
            recorded.append(click)
            return updated

        updated = await self.store.modify(code, record_click)
        if updated is None:
            # Swept between lookup and click
            raise ShortcodeNotFoundError(details=["The requested shortcode does not exist"])

        self.logger.info(f"Click tracked: {code} ({updated.click_count} total), redirecting to {updated.original_url}")
        return {
            "originalUrl": updated.original_url,
            "clickRecord": recorded[0].to_dict(),
            "totalClicks": updated.click_count,
        }

    async def _list_all(self):
        now = self.clock()
        records = await self.store.list_all()
        self.logger.info(f"Retrieved {len(records)} URLs")
        return [record.get_stats(now, self.short_link(record.shortcode)) for record in records]

    async def _delete(self, shortcode: Any) -> Dict[str, Any]:
        code = self._require_shortcode(shortcode)
        if not await self.store.delete(code):
            raise ShortcodeNotFoundError(details=["The requested shortcode does not exist"])
        return {"shortcode": code}

    async def _deactivate(self, shortcode: Any) -> Dict[str, Any]:
        code = self._require_shortcode(shortcode)
        updated = await self.store.modify(code, lambda current: current.deactivate())
        if updated is None:
            raise ShortcodeNotFoundError(details=["The requested shortcode does not exist"])

        self.logger.info(f"Deactivated short URL: {code}")
        return updated.get_stats(self.clock(), self.short_link(code))

    async def _store_statistics(self) -> Dict[str, Any]:
        stats = await self.store.stats(self.clock())
        self.logger.info(f"Stats: {stats.total} total, {stats.active} active, {stats.expired} expired")
        return stats.to_dict()
