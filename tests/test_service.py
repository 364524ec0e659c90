"""Tests for service layer."""

import asyncio

import pytest

from shortlinks.exceptions import ErrorKind
from shortlinks.service import URLShortenerService
from shortlinks.store.memory import InMemoryURLStore
from shortlinks.store.models import ClickContext
from shortlinks.store.snapshot import SnapshotFile


class TestCreateShortURL:
    """Test short URL creation."""

    @pytest.mark.asyncio
    async def test_create_short_url(self, service, sample_urls):
        """Test creating short URL."""
        result = await service.create_short_url(sample_urls[0])

        assert result.success
        assert result.data["originalUrl"] == sample_urls[0]
        assert result.data["shortLink"] == f"http://testserver/{result.data['shortcode']}"
        assert len(result.data["shortcode"]) == 6
        assert result.data["expiry"] == "2025-01-01T12:30:00.000Z"

    @pytest.mark.asyncio
    async def test_protocol_defaults_to_https(self, service):
        result = await service.create_short_url("example.com/a")

        assert result.success
        assert result.data["originalUrl"] == "https://example.com/a"

        stats = await service.get_statistics(result.data["shortcode"])
        assert stats.data["validityMinutes"] == 30
        assert stats.data["clickCount"] == 0
        assert stats.data["isActive"] is True
        assert stats.data["customShortcode"] is False

    @pytest.mark.asyncio
    async def test_create_with_custom_code(self, service, sample_urls):
        """Test creating with custom code."""
        result = await service.create_short_url(sample_urls[0], validity=120, custom_shortcode="  test123 ")

        assert result.success
        assert result.data["shortcode"] == "test123"
        assert result.data["expiry"] == "2025-01-01T14:00:00.000Z"

        stats = await service.get_statistics("test123")
        assert stats.data["customShortcode"] is True

    @pytest.mark.asyncio
    async def test_create_duplicate_custom_code(self, service, sample_urls):
        """Test duplicate custom code rejection."""
        first = await service.create_short_url(sample_urls[0], custom_shortcode="abc123")
        second = await service.create_short_url(sample_urls[1], custom_shortcode="abc123")

        assert first.success
        assert not second.success
        assert second.error_kind == ErrorKind.CONFLICT
        assert second.error == "Shortcode already exists"

        stats = await service.get_statistics("abc123")
        assert stats.data["originalUrl"] == sample_urls[0]

    @pytest.mark.asyncio
    async def test_invalid_custom_code_reports_all_errors(self, service, sample_urls):
        result = await service.create_short_url(sample_urls[0], custom_shortcode="ab!")

        assert result.error_kind == ErrorKind.INVALID_INPUT
        assert result.error == "Invalid custom shortcode"
        assert len(result.details) == 2

    @pytest.mark.asyncio
    async def test_reserved_custom_code(self, service, sample_urls):
        result = await service.create_short_url(sample_urls[0], custom_shortcode="admin")

        assert result.error_kind == ErrorKind.INVALID_INPUT
        assert "Shortcode cannot be a reserved word" in result.details

    @pytest.mark.asyncio
    async def test_invalid_url(self, service, store):
        """Test invalid URL handling."""
        result = await service.create_short_url("not a url")

        assert not result.success
        assert result.error_kind == ErrorKind.INVALID_INPUT
        assert result.error == "Invalid URL"
        assert await store.list_all() == []

    @pytest.mark.asyncio
    async def test_url_errors_short_circuit(self, service):
        result = await service.create_short_url("javascript:alert(1)", validity=-5, custom_shortcode="a!")

        assert result.error == "Invalid URL"
        assert "URL contains potentially unsafe protocol" in result.details

    @pytest.mark.asyncio
    async def test_invalid_validity(self, service, sample_urls):
        for validity in (0, -1, 525601, "abc", 1.5):
            result = await service.create_short_url(sample_urls[0], validity=validity)
            assert result.error_kind == ErrorKind.INVALID_INPUT
            assert result.error == "Invalid validity period"

    @pytest.mark.asyncio
    async def test_validity_bounds(self, service, sample_urls):
        assert (await service.create_short_url(sample_urls[0], validity=1)).success
        assert (await service.create_short_url(sample_urls[0], validity=525600)).success
        assert (await service.create_short_url(sample_urls[0], validity="45")).success

    @pytest.mark.asyncio
    async def test_generated_codes_are_unique(self, service, sample_urls):
        codes = set()
        for _ in range(200):
            result = await service.create_short_url(sample_urls[0])
            codes.add(result.data["shortcode"])

        assert len(codes) == 200

    @pytest.mark.asyncio
    async def test_production_rejects_private_hosts(self, store, short_code_generator, clock, logger):
        service = URLShortenerService(
            store=store,
            short_code_generator=short_code_generator,
            logger=logger,
            clock=clock,
            production=True,
        )

        result = await service.create_short_url("http://localhost:3000/admin")

        assert result.error_kind == ErrorKind.INVALID_INPUT
        assert "Localhost and internal URLs are not allowed in production" in result.details

    @pytest.mark.asyncio
    async def test_path_prefix(self, store, clock, logger):
        service = URLShortenerService(store=store, base_url="https://sho.rt/", path_prefix="/s/", logger=logger, clock=clock)

        result = await service.create_short_url("https://example.com", custom_shortcode="docs")

        assert result.data["shortLink"] == "https://sho.rt/s/docs"

    def test_short_link_joins_base_and_prefix(self, store, logger):
        plain = URLShortenerService(store=store, base_url="https://example.com/", logger=logger)
        prefixed = URLShortenerService(store=store, base_url="https://example.com", path_prefix="s/", logger=logger)

        assert plain.short_link("abc123") == "https://example.com/abc123"
        assert prefixed.short_link("abc123") == "https://example.com/s/abc123"

    @pytest.mark.asyncio
    async def test_snapshot_failure_does_not_fail_create(self, tmp_path, short_code_generator, clock, logger):
        # A directory at the snapshot path makes every flush fail
        target = tmp_path / "blocked"
        target.mkdir()
        (target / "child").write_text("x")
        store = InMemoryURLStore(snapshot=SnapshotFile(str(target), logger=logger), clock=clock, logger=logger)
        service = URLShortenerService(
            store=store,
            short_code_generator=short_code_generator,
            base_url="http://testserver",
            logger=logger,
            clock=clock,
        )

        created = await service.create_short_url("https://example.com", custom_shortcode="abc123")

        assert created.success
        assert created.data["shortLink"] == "http://testserver/abc123"
        assert (await service.handle_redirect("abc123")).success
        assert await service.health_check() == {"store": False, "overall": False}


class TestRedirect:
    """Redirect and click tracking."""

    @pytest.mark.asyncio
    async def test_redirect_records_click(self, service, sample_urls):
        await service.create_short_url(sample_urls[0], custom_shortcode="abc123")

        result = await service.handle_redirect(
            "abc123",
            ClickContext(referrer="https://news.example", user_agent="pytest", ip_address="8.8.8.8"),
        )

        assert result.success
        assert result.data["originalUrl"] == sample_urls[0]
        assert result.data["totalClicks"] == 1
        assert result.data["clickRecord"]["referrer"] == "https://news.example"
        assert result.data["clickRecord"]["geoLocation"] == "New York, US"

    @pytest.mark.asyncio
    async def test_clicks_accumulate(self, service, sample_urls):
        await service.create_short_url(sample_urls[0], custom_shortcode="abc123")

        for _ in range(3):
            await service.handle_redirect("abc123")

        stats = await service.get_statistics("abc123")
        assert stats.data["clickCount"] == 3
        assert len(stats.data["clicks"]) == 3
        assert stats.data["clicks"][0]["referrer"] == "Direct"
        assert stats.data["clicks"][0]["geoLocation"] == "Local/Localhost"

    @pytest.mark.asyncio
    async def test_concurrent_clicks_are_not_lost(self, service, sample_urls):
        await service.create_short_url(sample_urls[0], custom_shortcode="abc123")

        results = await asyncio.gather(*(service.handle_redirect("abc123") for _ in range(25)))

        assert all(r.success for r in results)
        stats = await service.get_statistics("abc123")
        assert stats.data["clickCount"] == 25

    @pytest.mark.asyncio
    async def test_redirect_unknown(self, service):
        result = await service.handle_redirect("nonexistent")

        assert result.error_kind == ErrorKind.NOT_FOUND
        assert result.error == "Shortcode not found"

    @pytest.mark.asyncio
    async def test_redirect_expired(self, service, sample_urls, clock):
        await service.create_short_url(sample_urls[0], validity=1, custom_shortcode="abc123")

        clock.advance(seconds=61)
        result = await service.handle_redirect("abc123")

        assert result.error_kind == ErrorKind.EXPIRED
        assert result.error == "URL has expired"

        stats = await service.get_statistics("abc123")
        assert stats.data["clickCount"] == 0
        assert stats.data["isExpired"] is True
        assert stats.data["isActive"] is False

    @pytest.mark.asyncio
    async def test_expiry_rechecked_when_click_is_applied(self, service, store, sample_urls, clock, monkeypatch):
        await service.create_short_url(sample_urls[0], validity=1, custom_shortcode="abc123")
        original_modify = store.modify

        async def modify_after_expiry(shortcode, mutator):
            # Expiry passes between the lookup and taking the store lock
            clock.advance(seconds=61)
            return await original_modify(shortcode, mutator)

        monkeypatch.setattr(store, "modify", modify_after_expiry)

        result = await service.handle_redirect("abc123")

        assert result.error_kind == ErrorKind.EXPIRED
        monkeypatch.undo()
        stats = await service.get_statistics("abc123")
        assert stats.data["clickCount"] == 0
        assert stats.data["clicks"] == []

    @pytest.mark.asyncio
    async def test_record_swept_before_click_is_not_found(self, service, store, sample_urls, monkeypatch):
        await service.create_short_url(sample_urls[0], custom_shortcode="abc123")
        original_get = store.get

        async def get_then_delete(shortcode):
            record = await original_get(shortcode)
            await store.delete(shortcode)
            return record

        monkeypatch.setattr(store, "get", get_then_delete)

        result = await service.handle_redirect("abc123")

        assert result.error_kind == ErrorKind.NOT_FOUND
        assert not await store.exists("abc123")

    @pytest.mark.asyncio
    async def test_redirect_at_exact_expiry_succeeds(self, service, sample_urls, clock):
        await service.create_short_url(sample_urls[0], validity=1, custom_shortcode="abc123")

        clock.advance(minutes=1)
        result = await service.handle_redirect("abc123")

        assert result.success

    @pytest.mark.asyncio
    async def test_deactivated_still_redirects(self, service, sample_urls):
        await service.create_short_url(sample_urls[0], custom_shortcode="abc123")

        deactivated = await service.deactivate("abc123")
        assert deactivated.data["isActive"] is False

        result = await service.handle_redirect("abc123")
        assert result.success

    @pytest.mark.asyncio
    async def test_missing_shortcode(self, service):
        for value in (None, "", "   ", 42):
            result = await service.handle_redirect(value)
            assert result.error_kind == ErrorKind.INVALID_INPUT
            assert result.details == ["Shortcode is required and must be a string"]


class TestManagement:
    """Listing, deletion, statistics and cleanup."""

    @pytest.mark.asyncio
    async def test_get_statistics_not_found(self, service):
        result = await service.get_statistics("nonexistent")
        assert result.error_kind == ErrorKind.NOT_FOUND

    @pytest.mark.asyncio
    async def test_list_all(self, service, sample_urls):
        for url in sample_urls:
            await service.create_short_url(url)

        result = await service.list_all()

        assert result.success
        assert sorted(item["originalUrl"] for item in result.data) == sorted(sample_urls)

    @pytest.mark.asyncio
    async def test_delete(self, service, sample_urls):
        await service.create_short_url(sample_urls[0], custom_shortcode="abc123")

        assert (await service.delete_short_url("abc123")).data == {"shortcode": "abc123"}
        assert (await service.delete_short_url("abc123")).error_kind == ErrorKind.NOT_FOUND
        assert (await service.handle_redirect("abc123")).error_kind == ErrorKind.NOT_FOUND

    @pytest.mark.asyncio
    async def test_deactivate_not_found(self, service):
        result = await service.deactivate("missing")
        assert result.error_kind == ErrorKind.NOT_FOUND

    @pytest.mark.asyncio
    async def test_store_statistics(self, service, sample_urls, clock):
        await service.create_short_url(sample_urls[0], validity=1, custom_shortcode="short1")
        await service.create_short_url(sample_urls[1], validity=60, custom_shortcode="long01")
        await service.handle_redirect("long01")

        clock.advance(minutes=2)
        result = await service.get_store_statistics()

        assert result.data == {"totalUrls": 2, "activeUrls": 1, "expiredUrls": 1, "totalClicks": 1}

    @pytest.mark.asyncio
    async def test_cleanup_is_idempotent(self, service, sample_urls, clock):
        await service.create_short_url(sample_urls[0], validity=1, custom_shortcode="short1")
        await service.create_short_url(sample_urls[1], validity=60, custom_shortcode="long01")

        clock.advance(minutes=2)

        assert await service.run_cleanup() == {"removedCount": 1}
        assert await service.run_cleanup() == {"removedCount": 0}
        assert (await service.get_statistics("short1")).error_kind == ErrorKind.NOT_FOUND
        assert (await service.get_statistics("long01")).success

    @pytest.mark.asyncio
    async def test_cleanup_swallows_store_errors(self, service, store, monkeypatch):
        async def broken(now=None):
            raise RuntimeError("disk on fire")

        monkeypatch.setattr(store, "sweep_expired", broken)

        assert await service.run_cleanup() == {"removedCount": 0}

    @pytest.mark.asyncio
    async def test_unexpected_error_is_internal(self, service, store, monkeypatch):
        async def broken(shortcode):
            raise RuntimeError("boom")

        monkeypatch.setattr(store, "get", broken)

        result = await service.get_statistics("abc123")

        assert result.error_kind == ErrorKind.INTERNAL
        assert result.error == "Internal server error"
        assert result.details == ["An unexpected error occurred"]

    @pytest.mark.asyncio
    async def test_health_check(self, service):
        """Test health check."""
        health = await service.health_check()

        assert health == {"store": True, "overall": True}
