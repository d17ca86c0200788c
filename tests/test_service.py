"""Tests for service layer."""

import asyncio
import logging
import re
from datetime import timedelta

import pytest

from shortener.database.models import ShortURL
from shortener.errors import (
    GenerationExhaustedError,
    InvalidInputError,
    InvalidShortCodeError,
    InvalidURLError,
    ShortCodeAlreadyExistsError,
    ShortURLExpiredError,
    ShortURLNotFoundError,
    StorageError,
)
from shortener.service import (
    DEFAULT_PAGE_SIZE,
    MAX_PAGE_SIZE,
    URLShortenerService,
    normalize_pagination,
)

from fakes import SequenceGenerator


class TestCreateShortURL:
    """Test short URL creation."""

    @pytest.mark.asyncio
    async def test_create_short_url(self, service, store, sample_urls, clock):
        """Test creating short URL."""
        short_url = await service.create_short_url(sample_urls[0])

        assert short_url.id is not None
        assert re.fullmatch(r"[A-Za-z0-9]{7}", short_url.short_code)
        assert short_url.original_url == sample_urls[0]
        assert short_url.created_at == clock.now
        assert short_url.expires_at is None
        assert short_url.access_count == 0
        assert store.stored(short_url.short_code).original_url == sample_urls[0]

    @pytest.mark.asyncio
    async def test_create_with_custom_code(self, service, store, sample_urls):
        """Test creating with custom code skips the existence probe."""
        short_url = await service.create_short_url(sample_urls[0], custom_code="my-link")

        assert short_url.short_code == "my-link"
        assert "short_code_exists" not in store.calls

    @pytest.mark.asyncio
    async def test_create_duplicate_custom_code(self, service, store, sample_urls):
        """Test duplicate custom code rejection leaves the first record intact."""
        await service.create_short_url(sample_urls[0], custom_code="duplicate")

        with pytest.raises(ShortCodeAlreadyExistsError):
            await service.create_short_url(sample_urls[1], custom_code="duplicate")

        assert store.stored("duplicate").original_url == sample_urls[0]

    @pytest.mark.asyncio
    async def test_invalid_url(self, service, store):
        """Test invalid URL rejection."""
        with pytest.raises(InvalidURLError):
            await service.create_short_url("not-a-url")

        assert store.calls == []

    @pytest.mark.asyncio
    async def test_invalid_custom_code(self, service, sample_urls):
        """Test invalid custom code rejection."""
        with pytest.raises(InvalidShortCodeError):
            await service.create_short_url(sample_urls[0], custom_code="ab")

        with pytest.raises(InvalidShortCodeError):
            await service.create_short_url(sample_urls[0], custom_code="bad code!")

    @pytest.mark.asyncio
    async def test_invalid_url_checked_before_custom_code(self, service):
        """Test that URL errors win when both inputs are bad."""
        with pytest.raises(InvalidURLError):
            await service.create_short_url("ftp://example.com", custom_code="!")

    @pytest.mark.asyncio
    async def test_empty_custom_code_generates(self, service, sample_urls):
        """Test that an empty custom code means 'generate one'."""
        short_url = await service.create_short_url(sample_urls[0], custom_code="")

        assert len(short_url.short_code) == 7

    @pytest.mark.asyncio
    async def test_ttl_sets_expiry(self, service, sample_urls, clock):
        """Test TTL handling."""
        short_url = await service.create_short_url(sample_urls[0], ttl_seconds=3600)

        assert short_url.expires_at == clock.now + timedelta(seconds=3600)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("ttl", [None, 0, -5])
    async def test_no_ttl_never_expires(self, service, sample_urls, ttl):
        """Test that a missing or non-positive TTL means no expiry."""
        short_url = await service.create_short_url(sample_urls[0], ttl_seconds=ttl)

        assert short_url.expires_at is None

    @pytest.mark.asyncio
    async def test_default_ttl(self, store, short_code_generator, logger, clock, sample_urls):
        """Test that the configured default TTL applies when none is given."""
        service = URLShortenerService(
            db=store,
            short_code_generator=short_code_generator,
            logger=logger,
            default_ttl_seconds=60,
            clock=clock,
        )

        defaulted = await service.create_short_url(sample_urls[0], ttl_seconds=0)
        explicit = await service.create_short_url(sample_urls[1], ttl_seconds=10)

        assert defaulted.expires_at == clock.now + timedelta(seconds=60)
        assert explicit.expires_at == clock.now + timedelta(seconds=10)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("ttl", [10**12, 10**20])
    async def test_ttl_past_datetime_range_is_rejected(self, service, store, sample_urls, ttl):
        """Test that a TTL pushing the expiry past year 9999 is invalid input."""
        with pytest.raises(InvalidInputError):
            await service.create_short_url(sample_urls[0], ttl_seconds=ttl)

        assert "create_short_url" not in store.calls


class TestCollisions:
    """Test generated code collision handling."""

    @pytest.mark.asyncio
    async def test_retries_after_collision(self, store, logger, clock, sample_urls):
        """Test that a taken code is skipped."""
        store.add(ShortURL(short_code="taken01", original_url=sample_urls[0], created_at=clock.now))
        generator = SequenceGenerator(["taken01", "fresh01"])
        service = URLShortenerService(db=store, short_code_generator=generator, logger=logger, clock=clock)

        short_url = await service.create_short_url(sample_urls[1])

        assert short_url.short_code == "fresh01"
        assert generator.generated == ["taken01", "fresh01"]

    @pytest.mark.asyncio
    async def test_generation_exhausted(self, store, logger, clock, sample_urls):
        """Test giving up after the attempt budget."""
        store.add(ShortURL(short_code="taken01", original_url=sample_urls[0], created_at=clock.now))
        generator = SequenceGenerator(["taken01"] * 10)
        service = URLShortenerService(
            db=store,
            short_code_generator=generator,
            logger=logger,
            max_collision_attempts=3,
            clock=clock,
        )

        with pytest.raises(GenerationExhaustedError):
            await service.create_short_url(sample_urls[1])

        assert len(generator.generated) == 3
        assert "create_short_url" not in store.calls

    @pytest.mark.asyncio
    async def test_insert_race_surfaces_as_already_exists(self, store, logger, clock, sample_urls):
        """Test that two creators picking the same free code can't both win."""
        generator = SequenceGenerator(["samecode", "samecode"])
        service = URLShortenerService(db=store, short_code_generator=generator, logger=logger, clock=clock)

        results = await asyncio.gather(
            service.create_short_url(sample_urls[0]),
            service.create_short_url(sample_urls[1]),
            return_exceptions=True,
        )

        created = [r for r in results if isinstance(r, ShortURL)]
        rejected = [r for r in results if isinstance(r, ShortCodeAlreadyExistsError)]
        assert len(created) == 1
        assert len(rejected) == 1


class TestRedirect:
    """Test redirect resolution."""

    @pytest.mark.asyncio
    async def test_resolve_counts_access(self, service, store, sample_urls, clock):
        """Test that each redirect increments the count by one."""
        created = await service.create_short_url(sample_urls[0])

        first = await service.resolve_redirect(created.short_code)
        clock.advance(5)
        second = await service.resolve_redirect(created.short_code)

        assert first.original_url == sample_urls[0]
        assert first.access_count == 1
        assert second.access_count == 2
        assert second.last_accessed == clock.now
        assert store.stored(created.short_code).access_count == 2

    @pytest.mark.asyncio
    async def test_resolve_not_found(self, service):
        """Test redirecting an unknown code."""
        with pytest.raises(ShortURLNotFoundError):
            await service.resolve_redirect("nonexistent")

    @pytest.mark.asyncio
    async def test_resolve_expired(self, service, store, sample_urls, clock):
        """Test that expired URLs don't redirect and aren't counted."""
        created = await service.create_short_url(sample_urls[0], ttl_seconds=1)
        clock.advance(2)

        with pytest.raises(ShortURLExpiredError):
            await service.resolve_redirect(created.short_code)

        assert store.stored(created.short_code).access_count == 0
        assert "record_access" not in store.calls

    @pytest.mark.asyncio
    async def test_resolve_at_expiry_instant(self, service, sample_urls, clock):
        """Test that a URL still redirects at its exact expiry time."""
        created = await service.create_short_url(sample_urls[0], ttl_seconds=1)
        clock.advance(1)

        short_url = await service.resolve_redirect(created.short_code)
        assert short_url.access_count == 1

    @pytest.mark.asyncio
    async def test_access_tracking_is_best_effort(self, service, store, sample_urls, caplog):
        """Test that a failed count update still redirects."""
        created = await service.create_short_url(sample_urls[0])
        store.fail_with["record_access"] = StorageError()

        with caplog.at_level(logging.ERROR):
            short_url = await service.resolve_redirect(created.short_code)

        assert short_url.original_url == sample_urls[0]
        assert short_url.access_count == 0
        assert "Failed to update access count" in caplog.text

    @pytest.mark.asyncio
    async def test_deleted_between_lookup_and_count(self, service, store, sample_urls):
        """Test a row vanishing before its access is recorded."""
        created = await service.create_short_url(sample_urls[0])

        async def vanish(url_id, accessed_at):
            return None

        store.record_access = vanish

        short_url = await service.resolve_redirect(created.short_code)
        assert short_url.access_count == 0

    @pytest.mark.asyncio
    async def test_concurrent_redirects_lose_no_counts(self, service, store, sample_urls):
        """Test that simultaneous redirects all get counted."""
        created = await service.create_short_url(sample_urls[0])

        await asyncio.gather(*(service.resolve_redirect(created.short_code) for _ in range(100)))

        assert store.stored(created.short_code).access_count == 100


class TestMetadataAndDeletion:
    """Test metadata lookup, existence and deletion."""

    @pytest.mark.asyncio
    async def test_get_url_info(self, service, sample_urls):
        """Test that metadata matches what was created."""
        created = await service.create_short_url(sample_urls[0], custom_code="info-code")

        info = await service.get_url_info("info-code")

        assert info.id == created.id
        assert info.original_url == sample_urls[0]
        assert info.access_count == 0

    @pytest.mark.asyncio
    async def test_get_url_info_has_no_side_effects(self, service, store, sample_urls):
        """Test that metadata reads don't count as accesses."""
        await service.create_short_url(sample_urls[0], custom_code="info-code")

        await service.get_url_info("info-code")
        await service.get_url_info("info-code")

        assert store.stored("info-code").access_count == 0
        assert "record_access" not in store.calls

    @pytest.mark.asyncio
    async def test_get_url_info_ignores_expiry(self, service, sample_urls, clock):
        """Test that expired records still report metadata."""
        created = await service.create_short_url(sample_urls[0], ttl_seconds=1)
        clock.advance(10)

        info = await service.get_url_info(created.short_code)

        assert info.expires_at == created.expires_at
        assert info.is_expired(clock.now)

    @pytest.mark.asyncio
    async def test_get_url_info_not_found(self, service):
        """Test metadata for an unknown code."""
        with pytest.raises(ShortURLNotFoundError):
            await service.get_url_info("nonexistent")

    @pytest.mark.asyncio
    async def test_delete(self, service, sample_urls):
        """Test deletion removes the record."""
        created = await service.create_short_url(sample_urls[0])

        await service.delete_short_url(created.short_code)

        with pytest.raises(ShortURLNotFoundError):
            await service.resolve_redirect(created.short_code)

    @pytest.mark.asyncio
    async def test_delete_not_found(self, service):
        """Test deleting an unknown code."""
        with pytest.raises(ShortURLNotFoundError):
            await service.delete_short_url("nonexistent")


class TestListing:
    """Test paginated listing."""

    @pytest.mark.parametrize("limit, offset, expected", [
        (None, None, (DEFAULT_PAGE_SIZE, 0)),
        (0, 0, (DEFAULT_PAGE_SIZE, 0)),
        (-3, -1, (DEFAULT_PAGE_SIZE, 0)),
        (1, 5, (1, 5)),
        (MAX_PAGE_SIZE, 0, (MAX_PAGE_SIZE, 0)),
        (MAX_PAGE_SIZE + 1, 0, (MAX_PAGE_SIZE, 0)),
    ])
    def test_normalize_pagination(self, limit, offset, expected):
        """Test limit and offset clamping."""
        assert normalize_pagination(limit, offset) == expected

    @pytest.mark.asyncio
    async def test_list_newest_first(self, service, sample_urls, clock):
        """Test ordering and total count."""
        codes = []
        for url in sample_urls:
            codes.append((await service.create_short_url(url)).short_code)
            clock.advance(1)

        page = await service.list_urls()

        assert [u.short_code for u in page.urls] == list(reversed(codes))
        assert page.total == 3
        assert page.limit == DEFAULT_PAGE_SIZE
        assert page.offset == 0

    @pytest.mark.asyncio
    async def test_list_window(self, service, sample_urls, clock):
        """Test that total is independent of the window."""
        for url in sample_urls:
            await service.create_short_url(url)
            clock.advance(1)

        page = await service.list_urls(limit=1, offset=1)

        assert len(page.urls) == 1
        assert page.urls[0].original_url == sample_urls[1]
        assert page.total == 3

        page = await service.list_urls(limit=10, offset=10)
        assert page.urls == []
        assert page.total == 3


class TestCleanupAndHealth:
    """Test expired URL cleanup and health reporting."""

    @pytest.mark.asyncio
    async def test_cleanup_expired(self, service, store, sample_urls, clock):
        """Test that only expired records are removed."""
        permanent = await service.create_short_url(sample_urls[0])
        short_lived = await service.create_short_url(sample_urls[1], ttl_seconds=1)
        long_lived = await service.create_short_url(sample_urls[2], ttl_seconds=3600)
        clock.advance(2)

        deleted = await service.cleanup_expired()

        assert deleted == 1
        assert store.stored(short_lived.short_code) is None
        assert store.stored(permanent.short_code) is not None
        assert store.stored(long_lived.short_code) is not None

    @pytest.mark.asyncio
    async def test_cleanup_with_explicit_time(self, service, sample_urls, clock):
        """Test cleanup against a supplied reference time."""
        await service.create_short_url(sample_urls[0], ttl_seconds=60)

        assert await service.cleanup_expired(clock.now + timedelta(seconds=30)) == 0
        assert await service.cleanup_expired(clock.now + timedelta(seconds=61)) == 1

    @pytest.mark.asyncio
    async def test_health_check(self, service, store):
        """Test health check."""
        assert await service.health_check() == {"database": True, "overall": True}

        store.healthy = False
        assert await service.health_check() == {"database": False, "overall": False}

    @pytest.mark.asyncio
    async def test_close(self, service, store):
        """Test closing the service closes the store."""
        await service.close()
        assert store.closed
