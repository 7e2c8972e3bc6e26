"""Tests for the request cache."""
import asyncio
import pytest
from storefront.content.cache import QueryKey, RequestCache


class CountingFetcher:
    def __init__(self, value="result", delay=0.01, fail=False):
        self.value = value
        self.delay = delay
        self.fail = fail
        self.calls = 0

    async def __call__(self):
        self.calls += 1
        await asyncio.sleep(self.delay)
        if self.fail:
            raise RuntimeError("fetch failed")
        return f"{self.value}-{self.calls}"


def test_query_key_is_order_independent():
    assert QueryKey.build("q", {"a": 1, "b": 2}) == QueryKey.build("q", {"b": 2, "a": 1})
    assert QueryKey.build("q", {"a": 1}) != QueryKey.build("q", {"a": 2})
    assert QueryKey.build("q", {"slug": "hat"}).param("slug") == "hat"


def test_concurrent_requests_share_one_fetch(clock):
    cache = RequestCache(dedupe_interval=2.0, clock=clock)
    fetcher = CountingFetcher()
    key = QueryKey.build("all-products")

    async def scenario():
        return await asyncio.gather(
            cache.get_or_fetch(key, fetcher, revalidate=300),
            cache.get_or_fetch(key, fetcher, revalidate=300),
        )

    first, second = asyncio.run(scenario())
    assert fetcher.calls == 1
    assert first == second == "result-1"


def test_different_params_fetch_separately(clock):
    cache = RequestCache(dedupe_interval=2.0, clock=clock)
    fetcher = CountingFetcher()

    async def scenario():
        await asyncio.gather(
            cache.get_or_fetch(QueryKey.build("product-by-slug", {"slug": "a"}), fetcher, revalidate=300),
            cache.get_or_fetch(QueryKey.build("product-by-slug", {"slug": "b"}), fetcher, revalidate=300),
        )

    asyncio.run(scenario())
    assert fetcher.calls == 2


def test_value_reused_within_lifetime_and_refetched_after(clock):
    cache = RequestCache(dedupe_interval=2.0, clock=clock)
    fetcher = CountingFetcher()
    key = QueryKey.build("featured-products")

    assert asyncio.run(cache.get_or_fetch(key, fetcher, revalidate=600)) == "result-1"
    clock.advance(599)
    assert asyncio.run(cache.get_or_fetch(key, fetcher, revalidate=600)) == "result-1"
    clock.advance(2)
    assert asyncio.run(cache.get_or_fetch(key, fetcher, revalidate=600)) == "result-2"
    assert fetcher.calls == 2


def test_no_store_queries_only_dedupe_within_window(clock):
    cache = RequestCache(dedupe_interval=2.0, clock=clock)
    fetcher = CountingFetcher()
    key = QueryKey.build("search-products", {"searchTerm": "hat"})

    asyncio.run(cache.get_or_fetch(key, fetcher, revalidate=None, dedupe_interval=1.0))
    clock.advance(0.5)
    asyncio.run(cache.get_or_fetch(key, fetcher, revalidate=None, dedupe_interval=1.0))
    assert fetcher.calls == 1

    clock.advance(1.0)
    asyncio.run(cache.get_or_fetch(key, fetcher, revalidate=None, dedupe_interval=1.0))
    assert fetcher.calls == 2


def test_failures_are_not_cached(clock):
    cache = RequestCache(dedupe_interval=2.0, clock=clock)
    fetcher = CountingFetcher(fail=True)
    key = QueryKey.build("all-products")

    with pytest.raises(RuntimeError):
        asyncio.run(cache.get_or_fetch(key, fetcher, revalidate=300))
    assert key not in cache

    fetcher.fail = False
    assert asyncio.run(cache.get_or_fetch(key, fetcher, revalidate=300)) == "result-2"
    assert fetcher.calls == 2


def test_concurrent_waiters_all_see_failure(clock):
    cache = RequestCache(dedupe_interval=2.0, clock=clock)
    fetcher = CountingFetcher(fail=True)
    key = QueryKey.build("all-products")

    async def scenario():
        return await asyncio.gather(
            cache.get_or_fetch(key, fetcher),
            cache.get_or_fetch(key, fetcher),
            return_exceptions=True
        )

    results = asyncio.run(scenario())
    assert fetcher.calls == 1
    assert all(isinstance(r, RuntimeError) for r in results)


def test_invalidate_by_predicate(clock):
    cache = RequestCache(dedupe_interval=2.0, clock=clock)
    fetcher = CountingFetcher()

    async def scenario():
        for slug in ("a", "b"):
            await cache.get_or_fetch(QueryKey.build("product-by-slug", {"slug": slug}), fetcher, revalidate=300)
        await cache.get_or_fetch(QueryKey.build("all-products"), fetcher, revalidate=300)

    asyncio.run(scenario())
    assert len(cache) == 3

    removed = cache.invalidate(lambda key: key.param("slug") == "a")
    assert removed == 1
    assert len(cache) == 2
    assert QueryKey.build("product-by-slug", {"slug": "a"}) not in cache

    cache.clear()
    assert len(cache) == 0


def test_expired_entries_are_pruned_on_insert(clock):
    cache = RequestCache(dedupe_interval=1.0, clock=clock)
    fetcher = CountingFetcher(delay=0)

    async def scenario():
        for i in range(50):
            await cache.get_or_fetch(QueryKey.build("search-products", {"searchTerm": f"term-{i}"}), fetcher)
            clock.advance(5)

    asyncio.run(scenario())
    assert len(cache) == 1


def test_live_entries_survive_pruning(clock):
    cache = RequestCache(dedupe_interval=1.0, clock=clock)
    fetcher = CountingFetcher(delay=0)
    catalog_key = QueryKey.build("all-products")

    async def scenario():
        await cache.get_or_fetch(catalog_key, fetcher, revalidate=300)
        clock.advance(5)
        await cache.get_or_fetch(QueryKey.build("search-products", {"searchTerm": "hat"}), fetcher)

    asyncio.run(scenario())
    assert catalog_key in cache
    assert len(cache) == 2
