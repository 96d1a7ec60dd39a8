"""Tests for the prefetching article cache."""

from __future__ import annotations

import asyncio

import pytest

from wiki_explorer.cache import ArticleCache
from wiki_explorer.core.errors import FetchError
from wiki_explorer.core.types import Article, ArticleKind


def _article(title: str) -> Article:
    return Article(title=title, extract=f"{title} extract", page_url=f"https://en.wikipedia.org/wiki/{title}")


class _FakeFetcher:
    """Numbers articles by call order; optional per-call gates and failures."""

    def __init__(self, related_titles: list[str] | None = None):
        self.random_calls = 0
        self.related_calls: list[str] = []
        self.related_titles = list(related_titles or [])
        self.gates: list[asyncio.Event] = []
        self.fail_random_calls: set[int] = set()

    async def fetch_random_article(self) -> Article:
        self.random_calls += 1
        n = self.random_calls
        if self.gates:
            await self.gates.pop(0).wait()
        if n in self.fail_random_calls:
            raise FetchError("https://en.wikipedia.org/api/rest_v1/page/random/summary", 503)
        return _article(f"Random {n}")

    async def fetch_related_article(self, source_title: str) -> Article:
        self.related_calls.append(source_title)
        if self.related_titles:
            return _article(self.related_titles.pop(0))
        return _article(f"Related to {source_title} {len(self.related_calls)}")


class _PassthroughProcessor:
    def __init__(self):
        self.processed: list[str] = []

    async def process_article(self, raw: Article) -> Article:
        self.processed.append(raw.title)
        return raw


async def _settle(rounds: int = 20) -> None:
    for _ in range(rounds):
        await asyncio.sleep(0)


def test_miss_fetches_then_refill_buffers_one_random():
    fetcher = _FakeFetcher()
    processor = _PassthroughProcessor()

    async def scenario():
        cache = ArticleCache(fetcher, processor, capacity=2)
        first = await cache.get_next_article("random")
        assert first.title == "Random 1"
        await cache.wait_for_refills()
        assert cache.status().size == 1

        second = await cache.get_next_article("random")
        # Served from the buffer; the new refill has not run yet.
        assert second.title == "Random 2"
        assert fetcher.random_calls == 2
        await cache.wait_for_refills()
        assert fetcher.random_calls == 3
        assert cache.status().size == 1

    asyncio.run(scenario())
    assert processor.processed == ["Random 1", "Random 2", "Random 3"]


def test_buffer_hit_does_not_wait_on_refill():
    fetcher = _FakeFetcher()

    async def scenario():
        cache = ArticleCache(fetcher, _PassthroughProcessor())
        cache.initialize_cache()
        await cache.wait_for_refills()

        gate = asyncio.Event()
        fetcher.gates = [gate]
        article = await asyncio.wait_for(cache.get_next_article(ArticleKind.RANDOM), timeout=1)
        assert article.title == "Random 1"
        await _settle()
        assert cache.status().is_refilling
        gate.set()
        await cache.wait_for_refills()
        assert not cache.status().is_refilling
        assert cache.status().size == 1

    asyncio.run(scenario())


def test_entries_are_never_served_twice_and_capacity_holds():
    fetcher = _FakeFetcher()

    async def scenario():
        cache = ArticleCache(fetcher, _PassthroughProcessor(), capacity=2)
        cache.initialize_cache()
        titles = []
        for _ in range(6):
            await cache.wait_for_refills()
            assert cache.status().size <= 2
            titles.append((await cache.get_next_article("random")).title)
            assert cache.status().size <= 2
        return titles

    titles = asyncio.run(scenario())
    assert len(set(titles)) == len(titles)


def test_related_miss_then_refill_buffers_random_and_related():
    fetcher = _FakeFetcher(related_titles=["Cephalopod", "Squid"])

    async def scenario():
        cache = ArticleCache(fetcher, _PassthroughProcessor(), capacity=2)
        article = await cache.get_next_article("related", "Octopus")
        assert article.title == "Cephalopod"
        await cache.wait_for_refills()
        assert cache.status().size == 2
        assert fetcher.related_calls == ["Octopus", "Octopus"]

        again = await cache.get_next_article("related", "Octopus")
        assert again.title == "Squid"
        # Served from the buffer, no new related fetch on the waiting path.
        assert fetcher.related_calls == ["Octopus", "Octopus"]

        random_article = await cache.get_next_article("random")
        assert random_article.title == "Random 1"
        await cache.wait_for_refills()

    asyncio.run(scenario())


def test_related_request_does_not_match_other_source_or_random_entry():
    fetcher = _FakeFetcher()

    async def scenario():
        cache = ArticleCache(fetcher, _PassthroughProcessor(), capacity=2)
        await cache.get_next_article("related", "Octopus")
        await cache.wait_for_refills()
        assert cache.status().size == 2

        article = await cache.get_next_article("related", "Squid")
        assert article.title == "Related to Squid 3"
        await cache.wait_for_refills()

    asyncio.run(scenario())


def test_related_refill_for_new_source_evicts_entries_of_previous_source():
    fetcher = _FakeFetcher()

    async def scenario():
        cache = ArticleCache(fetcher, _PassthroughProcessor(), capacity=2)
        await cache.get_next_article("related", "Octopus")
        await cache.wait_for_refills()
        await cache.get_next_article("random")
        await cache.wait_for_refills()
        assert cache.status().size == 2

        first = await cache.get_next_article("related", "Squid")
        await cache.wait_for_refills()
        assert cache.status().size == 2

        second = await cache.get_next_article("related", "Squid")
        return first, second

    first, second = asyncio.run(scenario())
    assert first.title == "Related to Squid 3"
    # Served from the buffer.
    assert second.title == "Related to Squid 4"
    assert fetcher.related_calls == ["Octopus", "Octopus", "Squid", "Squid"]


def test_refill_respects_capacity_of_one():
    fetcher = _FakeFetcher()

    async def scenario():
        cache = ArticleCache(fetcher, _PassthroughProcessor(), capacity=1)
        await cache.get_next_article("related", "Octopus")
        await cache.wait_for_refills()
        assert cache.status().size == 1
        assert fetcher.related_calls == ["Octopus"]

    asyncio.run(scenario())


def test_initialize_twice_runs_a_single_refill():
    fetcher = _FakeFetcher()

    async def scenario():
        cache = ArticleCache(fetcher, _PassthroughProcessor())
        cache.initialize_cache()
        cache.initialize_cache()
        await cache.wait_for_refills()
        assert cache.status().size == 1

    asyncio.run(scenario())
    assert fetcher.random_calls == 1


def test_clear_discards_result_of_in_flight_refill():
    fetcher = _FakeFetcher()

    async def scenario():
        cache = ArticleCache(fetcher, _PassthroughProcessor())
        await cache.get_next_article("random")
        stale_gate = asyncio.Event()
        fetcher.gates = [stale_gate]
        await _settle()
        assert cache.status().is_refilling

        cache.clear_cache()
        assert cache.status().size == 0
        assert not cache.status().is_refilling

        fresh = await cache.get_next_article("random")
        assert fresh.title == "Random 3"

        stale_gate.set()
        await cache.wait_for_refills()
        served = await cache.get_next_article("random")
        await cache.wait_for_refills()
        return served

    served = asyncio.run(scenario())
    assert served.title == "Random 4"


def test_stale_refill_does_not_release_flag_of_newer_refill():
    fetcher = _FakeFetcher()

    async def scenario():
        cache = ArticleCache(fetcher, _PassthroughProcessor())
        old_gate, new_gate = asyncio.Event(), asyncio.Event()

        fetcher.gates = [old_gate]
        cache.initialize_cache()
        await _settle()
        cache.clear_cache()

        fetcher.gates = [new_gate]
        cache.initialize_cache()
        await _settle()
        assert cache.status().is_refilling

        old_gate.set()
        await _settle()
        assert cache.status().is_refilling
        assert cache.status().size == 0

        new_gate.set()
        await cache.wait_for_refills()
        assert not cache.status().is_refilling
        return await cache.get_next_article("random")

    article = asyncio.run(scenario())
    assert article.title == "Random 2"


def test_refill_scheduled_before_clear_never_runs_after_it():
    fetcher = _FakeFetcher()

    async def scenario():
        cache = ArticleCache(fetcher, _PassthroughProcessor())
        cache.initialize_cache()
        cache.clear_cache()
        await cache.wait_for_refills()
        assert cache.status().size == 0

    asyncio.run(scenario())
    assert fetcher.random_calls == 0


def test_refill_failure_is_swallowed_and_next_call_fetches():
    fetcher = _FakeFetcher()
    fetcher.fail_random_calls = {2}

    async def scenario():
        cache = ArticleCache(fetcher, _PassthroughProcessor())
        await cache.get_next_article("random")
        await cache.wait_for_refills()
        assert cache.status().size == 0
        assert not cache.status().is_refilling

        article = await cache.get_next_article("random")
        await cache.wait_for_refills()
        return article

    article = asyncio.run(scenario())
    assert article.title == "Random 3"


def test_failed_random_prefetch_still_attempts_related():
    fetcher = _FakeFetcher(related_titles=["Cephalopod", "Squid"])
    fetcher.fail_random_calls = {1}

    async def scenario():
        cache = ArticleCache(fetcher, _PassthroughProcessor())
        await cache.get_next_article("related", "Octopus")
        await cache.wait_for_refills()
        assert cache.status().size == 1
        return await cache.get_next_article("related", "Octopus")

    article = asyncio.run(scenario())
    assert article.title == "Squid"


def test_waiting_path_failure_propagates():
    fetcher = _FakeFetcher()
    fetcher.fail_random_calls = {1}

    async def scenario():
        cache = ArticleCache(fetcher, _PassthroughProcessor())
        await cache.get_next_article("random")

    with pytest.raises(FetchError):
        asyncio.run(scenario())


def test_related_requires_source_title():
    async def scenario():
        cache = ArticleCache(_FakeFetcher(), _PassthroughProcessor())
        await cache.get_next_article(ArticleKind.RELATED)

    with pytest.raises(ValueError, match="related_to"):
        asyncio.run(scenario())


def test_capacity_must_be_positive():
    with pytest.raises(ValueError):
        ArticleCache(_FakeFetcher(), _PassthroughProcessor(), capacity=0)
