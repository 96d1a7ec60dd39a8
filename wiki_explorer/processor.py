"""
Article enrichment: full HTML -> sections -> per-section summaries.

Processing degrades instead of failing. If the markup cannot be fetched or
parsed, the raw article is returned unchanged; if one section cannot be
summarized, that section is kept without a summary.
"""

from __future__ import annotations

import asyncio
from dataclasses import replace
import logging
import re
from typing import Awaitable, Callable

from .config import ProcessingConfig, SummaryConfig
from .core.types import Article, Section
from .fetch.sections import parse_article_html
from .logging_utils import get_logger, log_event
from .summarize.providers.base import SummaryProvider


HtmlFetcher = Callable[[str], Awaitable[str]]


class ArticleProcessor:
    """Turns raw article summaries into enriched articles.

    Attributes:
        fetch_html: Coroutine function returning the full HTML for a title
        summarizer: Strategy used to summarize sections and suggest topics
    """

    def __init__(
        self,
        fetch_html: HtmlFetcher,
        summarizer: SummaryProvider,
        cfg: ProcessingConfig | None = None,
        summary_cfg: SummaryConfig | None = None,
        logger: logging.Logger | None = None,
    ):
        self.fetch_html = fetch_html
        self.summarizer = summarizer
        self.cfg = cfg or ProcessingConfig()
        self.summary_cfg = summary_cfg or SummaryConfig()
        self._skip_re = re.compile(self.cfg.skip_sections_pattern, re.IGNORECASE)
        self._logger = logger or get_logger("processor")

    async def process_article(self, raw: Article) -> Article:
        """Enrich `raw` with summarized sections.

        Returns:
            A new enriched Article, or `raw` itself if the markup could not be
            fetched or parsed
        """
        try:
            html = await self.fetch_html(raw.title)
            sections = parse_article_html(html, self.cfg.max_sections, self._skip_re)
        except Exception as exc:  # noqa: BLE001
            log_event(
                self._logger,
                "Article processing failed; serving unenriched article",
                logging.WARNING,
                event="process_failed",
                title=raw.title,
                error=f"{type(exc).__name__}: {exc}",
            )
            return raw

        summarized = await asyncio.gather(
            *(self._summarize_section(raw.title, idx, section) for idx, section in enumerate(sections))
        )
        log_event(
            self._logger,
            "Article processed",
            logging.DEBUG,
            event="process_complete",
            title=raw.title,
            sections=len(summarized),
            summarized=sum(1 for s in summarized if s.summary is not None),
        )
        return replace(raw, sections=tuple(summarized))

    async def _summarize_section(self, title: str, index: int, section: Section) -> Section:
        try:
            summary = await self.summarizer.summarize_text(section.content)
        except Exception as exc:  # noqa: BLE001
            log_event(
                self._logger,
                "Section summary failed",
                logging.WARNING,
                event="section_summary_failed",
                title=title,
                section=section.title,
                index=index,
                error=f"{type(exc).__name__}: {exc}",
            )
            return section
        return replace(section, summary=summary)

    async def related_topics(self, article: Article) -> list[str]:
        """Suggest topics related to `article`; returns [] on failure."""
        try:
            return await self.summarizer.generate_topics(article.title, self.topic_source_text(article))
        except Exception as exc:  # noqa: BLE001
            log_event(
                self._logger,
                "Topic generation failed",
                logging.WARNING,
                event="topics_failed",
                title=article.title,
                error=f"{type(exc).__name__}: {exc}",
            )
            return []

    def topic_source_text(self, article: Article) -> str:
        """Text used for topic suggestion: the extract plus the first three sections."""
        text = article.extract or ""
        if article.sections:
            parts = [s.summary or s.content[:200] for s in article.sections[:3]]
            text = f"{text} {' '.join(parts)}"
        return text[: self.summary_cfg.topic_source_chars]
