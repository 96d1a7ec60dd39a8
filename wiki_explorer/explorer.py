"""
Application wiring.

Builds the HTTP client, summarization provider, fetcher, processor and
article cache from an AppConfig and owns their lifecycle.
"""

from __future__ import annotations

import logging
import random

from .cache import ArticleCache
from .config import AppConfig
from .core.types import Article, ArticleKind
from .fetch.client import WikipediaClient
from .fetch.fetcher import ContentFetcher
from .fetch.sections import extract_related_links
from .logging_utils import get_logger
from .processor import ArticleProcessor
from .summarize.providers.base import SummaryProvider
from .summarize.providers.factory import create_provider
from .summarize.tracing import flush, setup_langfuse


class Explorer:
    """One explorer session: a single article cache plus its collaborators.

    Use as an async context manager so background refills are drained and
    network clients are closed on exit.

    Example:
        async with Explorer.from_config(cfg) as explorer:
            article = await explorer.next_article()
    """

    def __init__(
        self,
        cfg: AppConfig,
        client: WikipediaClient,
        provider: SummaryProvider,
        rng: random.Random | None = None,
        logger: logging.Logger | None = None,
    ):
        self.cfg = cfg
        self.client = client
        self.provider = provider
        self.logger = logger or get_logger()
        self.fetcher = ContentFetcher(
            client,
            rng=rng,
            logger=get_logger("fetch"),
            random_retries=cfg.wikipedia.random_retries,
        )
        self.processor = ArticleProcessor(
            self.fetcher.fetch_article_html,
            provider,
            cfg.processing,
            cfg.summary,
            logger=get_logger("processor"),
        )
        self.cache = ArticleCache(
            self.fetcher,
            self.processor,
            capacity=cfg.cache.capacity,
            logger=get_logger("cache"),
        )

    @classmethod
    def from_config(cls, cfg: AppConfig) -> Explorer:
        setup_langfuse(cfg.langfuse)
        provider = create_provider(cfg.provider, cfg.summary, cfg.logging, get_logger("llm"))
        return cls(cfg, WikipediaClient(cfg.wikipedia), provider)

    async def __aenter__(self) -> Explorer:
        if self.cfg.cache.warm_on_start:
            self.cache.initialize_cache()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        self.cache.clear_cache()
        await self.cache.cancel_refills()
        await self.provider.aclose()
        await self.client.aclose()
        flush()

    async def next_article(self, related_to: str | None = None) -> Article:
        """Next random article, or an article related to `related_to` when given."""
        if related_to:
            return await self.cache.get_next_article(ArticleKind.RELATED, related_to)
        return await self.cache.get_next_article(ArticleKind.RANDOM)

    async def related_topics(self, article: Article) -> list[str]:
        return await self.processor.related_topics(article)

    def related_links(self, article: Article, limit: int = 15) -> list[str]:
        return extract_related_links(article, limit)
