"""
Prefetching article cache.

Keeps a small buffer of fully processed articles so the next article can be
served without waiting on Wikipedia or the summarizer. Each serve schedules a
background refill. Only one refill runs at a time, and a refill never inserts
into a buffer that was cleared after it was scheduled.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Protocol

from .core.types import Article, ArticleKind, CacheEntry, CacheStatus
from .logging_utils import get_logger, log_event


class ArticleSource(Protocol):
    async def fetch_random_article(self) -> Article: ...

    async def fetch_related_article(self, source_title: str) -> Article: ...


class ArticleEnricher(Protocol):
    async def process_article(self, raw: Article) -> Article: ...


class ArticleCache:
    """Serves enriched articles from a bounded prefetch buffer.

    Attributes:
        fetcher: Source of raw random and related articles
        processor: Turns raw articles into enriched ones
        capacity: Maximum number of buffered articles
    """

    def __init__(
        self,
        fetcher: ArticleSource,
        processor: ArticleEnricher,
        capacity: int = 2,
        logger: logging.Logger | None = None,
    ):
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self.fetcher = fetcher
        self.processor = processor
        self.capacity = capacity
        self._logger = logger or get_logger("cache")
        self._buffer: list[CacheEntry] = []
        self._refilling = False
        # Advanced by clear_cache(); a refill only runs and inserts within the generation it was scheduled in.
        self._generation = 0
        self._tasks: set[asyncio.Task] = set()

    async def get_next_article(
        self,
        kind: ArticleKind | str = ArticleKind.RANDOM,
        related_to: str | None = None,
    ) -> Article:
        """Return the next article of the requested kind.

        A buffered match is returned immediately. Otherwise the article is
        fetched and processed while the caller waits. Either way a background
        refill is scheduled afterwards.

        Raises:
            ValueError: If kind is RELATED and related_to is empty
            FetchError: If the fetch fails on the waiting path
        """
        kind = ArticleKind(kind)
        if kind is ArticleKind.RELATED and not related_to:
            raise ValueError("related_to is required for related articles")
        if kind is ArticleKind.RANDOM:
            related_to = None

        entry = self._take(kind, related_to)
        if entry is not None:
            log_event(
                self._logger,
                "Serving article from cache",
                logging.DEBUG,
                event="cache_hit",
                kind=kind.value,
                title=entry.article.title,
            )
            self._schedule_refill(kind, related_to)
            return entry.article

        log_event(self._logger, "Article not cached, fetching", logging.DEBUG, event="cache_miss", kind=kind.value)
        article = await self._fetch_and_process(kind, related_to)
        self._schedule_refill(kind, related_to)
        return article

    def initialize_cache(self) -> None:
        """Start warming the buffer with a random article. Safe to call repeatedly."""
        log_event(self._logger, "Initializing article cache", logging.DEBUG, event="cache_init")
        self._schedule_refill(ArticleKind.RANDOM, None)

    def clear_cache(self) -> None:
        """Empty the buffer and release the refill flag.

        Refills already waiting on the network keep running, but their results
        are discarded.
        """
        log_event(
            self._logger,
            "Clearing article cache",
            logging.DEBUG,
            event="cache_clear",
            dropped=len(self._buffer),
        )
        self._buffer = []
        self._refilling = False
        self._generation += 1

    def status(self) -> CacheStatus:
        return CacheStatus(size=len(self._buffer), is_refilling=self._refilling)

    async def wait_for_refills(self) -> None:
        """Wait until every background refill scheduled so far has finished."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks))

    async def cancel_refills(self) -> None:
        """Abort background refills. Only for shutdown, when no further serves follow."""
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)

    def _take(self, kind: ArticleKind, related_to: str | None) -> CacheEntry | None:
        for idx, entry in enumerate(self._buffer):
            if entry.matches(kind, related_to):
                return self._buffer.pop(idx)
        return None

    def _has(self, kind: ArticleKind, related_to: str | None) -> bool:
        return any(entry.matches(kind, related_to) for entry in self._buffer)

    def _schedule_refill(self, kind: ArticleKind, related_to: str | None) -> None:
        task = asyncio.get_running_loop().create_task(self._refill(kind, related_to, self._generation))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _fetch_and_process(self, kind: ArticleKind, related_to: str | None) -> Article:
        if kind is ArticleKind.RELATED and related_to:
            raw = await self.fetcher.fetch_related_article(related_to)
        else:
            raw = await self.fetcher.fetch_random_article()
        return await self.processor.process_article(raw)

    def _evict_related_except(self, related_to: str | None) -> None:
        kept = [
            entry
            for entry in self._buffer
            if entry.kind is not ArticleKind.RELATED or entry.related_to == related_to
        ]
        if len(kept) == len(self._buffer):
            return
        log_event(
            self._logger,
            "Evicting related articles for other sources",
            logging.DEBUG,
            event="cache_evict",
            related_to=related_to,
            dropped=len(self._buffer) - len(kept),
        )
        self._buffer = kept

    async def _refill(self, kind: ArticleKind, related_to: str | None, generation: int) -> None:
        if generation != self._generation:
            return
        if kind is ArticleKind.RELATED:
            # Only the current source keeps buffered related entries.
            self._evict_related_except(related_to)
        if self._refilling or len(self._buffer) >= self.capacity:
            return
        self._refilling = True
        log_event(self._logger, "Refill start", logging.DEBUG, event="refill_start", kind=kind.value)
        try:
            if not self._has(ArticleKind.RANDOM, None):
                await self._prefetch_one(generation, ArticleKind.RANDOM, None)

            if (
                kind is ArticleKind.RELATED
                and generation == self._generation
                and len(self._buffer) < self.capacity
                and not self._has(ArticleKind.RELATED, related_to)
            ):
                await self._prefetch_one(generation, ArticleKind.RELATED, related_to)
        finally:
            # After a clear the flag belongs to the new generation.
            if generation == self._generation:
                self._refilling = False

    async def _prefetch_one(self, generation: int, kind: ArticleKind, related_to: str | None) -> None:
        try:
            article = await self._fetch_and_process(kind, related_to)
        except Exception as exc:  # noqa: BLE001
            log_event(
                self._logger,
                "Prefetch failed",
                logging.WARNING,
                event="refill_failed",
                kind=kind.value,
                related_to=related_to,
                error=f"{type(exc).__name__}: {exc}",
            )
            return

        if generation != self._generation or len(self._buffer) >= self.capacity:
            log_event(
                self._logger,
                "Discarding stale prefetch",
                logging.DEBUG,
                event="refill_discard",
                kind=kind.value,
                title=article.title,
            )
            return
        self._buffer.append(CacheEntry(article=article, kind=kind, related_to=related_to))
        log_event(
            self._logger,
            "Prefetched article",
            logging.DEBUG,
            event="refill_insert",
            kind=kind.value,
            title=article.title,
            size=len(self._buffer),
        )
