"""
Random and related article discovery.

Related articles are discovered through a fallback chain:
1. outbound links of the source page
2. members of the source page's first category
3. a random article

The chain only ever fails when the final random fetch fails.
"""

from __future__ import annotations

import logging
import random

from ..core.errors import FetchError, NotFoundError
from ..core.types import Article
from ..logging_utils import get_logger, log_event
from .client import WikipediaClient


def _normalize_title(title: str) -> str:
    return title.replace("_", " ").strip().casefold()


def is_candidate_title(title: str, source_title: str) -> bool:
    """Return True if `title` may be offered as related to `source_title`.

    Namespaced pages (File:, Category:, Help:, ...), "List of" pages and
    the source page itself are never candidates.
    """
    if not title or ":" in title:
        return False
    if title.lower().startswith("list of"):
        return False
    return _normalize_title(title) != _normalize_title(source_title)


class ContentFetcher:
    """Fetches raw (unenriched) articles from Wikipedia.

    Attributes:
        client: Wikipedia API client
        random_retries: Extra random draws when a fallback collides with the source
    """

    def __init__(
        self,
        client: WikipediaClient,
        rng: random.Random | None = None,
        logger: logging.Logger | None = None,
        random_retries: int = 3,
    ):
        self.client = client
        self.random_retries = random_retries
        self._rng = rng or random.Random()
        self._logger = logger or get_logger("fetch")

    async def fetch_random_article(self) -> Article:
        """Fetch a random article summary.

        Raises:
            FetchError: On network failure or non-success status; not retried
        """
        payload = await self.client.get_random_summary()
        article = Article.from_summary(payload)
        log_event(self._logger, "Fetched random article", logging.DEBUG, event="fetch_random", title=article.title)
        return article

    async def fetch_article_html(self, title: str) -> str:
        return await self.client.get_html(title)

    async def fetch_related_article(self, source_title: str) -> Article:
        """Fetch an article related to `source_title`.

        Never returns an article titled `source_title`. Falls back to a random
        article when link and category traversal yield nothing usable.

        Raises:
            FetchError: Only when the random fallback itself fails
        """
        try:
            candidate = await self._discover_candidate(source_title)
            payload = await self.client.get_summary(candidate)
            article = Article.from_summary(payload)
            if _normalize_title(article.title) != _normalize_title(source_title):
                log_event(
                    self._logger,
                    "Fetched related article",
                    logging.DEBUG,
                    event="fetch_related",
                    source=source_title,
                    title=article.title,
                )
                return article
            log_event(
                self._logger,
                "Related candidate resolved to source",
                logging.DEBUG,
                event="related_redirect_to_source",
                source=source_title,
                candidate=candidate,
            )
        except (FetchError, NotFoundError) as exc:
            log_event(
                self._logger,
                "Related discovery failed, falling back to random",
                logging.INFO,
                event="related_fallback",
                source=source_title,
                error=str(exc),
            )
        return await self._fetch_random_excluding(source_title)

    async def _discover_candidate(self, source_title: str) -> str:
        links = [
            title
            for title in await self.client.get_links(source_title)
            if is_candidate_title(title, source_title)
        ]
        if links:
            return self._rng.choice(links)

        categories = await self.client.get_categories(source_title)
        if not categories:
            raise NotFoundError(f"No links or categories for {source_title!r}")
        members = [
            title
            for title in await self.client.get_category_members(categories[0])
            if ":" not in title and _normalize_title(title) != _normalize_title(source_title)
        ]
        if not members:
            raise NotFoundError(f"No usable members in {categories[0]!r}")
        return self._rng.choice(members)

    async def _fetch_random_excluding(self, source_title: str) -> Article:
        for _ in range(self.random_retries + 1):
            article = await self.fetch_random_article()
            if _normalize_title(article.title) != _normalize_title(source_title):
                return article
        raise FetchError(
            "page/random/summary",
            None,
            f"Random fallback kept returning {source_title!r}",
        )
