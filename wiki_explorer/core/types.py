"""
Core data types for the Wikipedia explorer.

This module defines the fundamental data structures used throughout the app:
- ArticleKind: Which fetch strategy produced (or should produce) an article
- Article: Article summary, optionally enriched with summarized sections
- CacheEntry: Buffered article tagged with the request that produced it
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ArticleKind(str, Enum):
    """Fetch strategy for an article request."""

    RANDOM = "random"
    RELATED = "related"


@dataclass(frozen=True)
class Thumbnail:
    """Lead image of an article as returned by the summary endpoint."""

    source: str
    width: int
    height: int


@dataclass(frozen=True)
class Section:
    """A single content section of an article.

    Attributes:
        title: The section heading text
        content: Rendered HTML of the section paragraphs
        original_content: Unprocessed HTML, kept for link extraction
        summary: Short summary of the section, or None if summarization failed
    """

    title: str
    content: str
    original_content: str
    summary: str | None = None


@dataclass(frozen=True)
class Article:
    """An encyclopedia article.

    A raw article (straight from the summary endpoint) has no sections;
    an enriched article carries up to a fixed number of summarized sections.

    Attributes:
        title: The article title
        extract: Plain-text lead extract
        page_url: Canonical desktop page URL
        thumbnail: Optional lead image
        sections: Ordered sections, empty for an unenriched article
    """

    title: str
    extract: str
    page_url: str
    thumbnail: Thumbnail | None = None
    sections: tuple[Section, ...] = field(default_factory=tuple)

    @property
    def is_enriched(self) -> bool:
        return bool(self.sections)

    @classmethod
    def from_summary(cls, payload: dict[str, Any]) -> Article:
        """Build an Article from a REST `page/summary` response payload."""
        title = payload.get("title") or "Unknown Title"
        page_url = (
            payload.get("content_urls", {})
            .get("desktop", {})
            .get("page", "https://en.wikipedia.org")
        )
        thumbnail = None
        thumb = payload.get("thumbnail")
        if isinstance(thumb, dict) and thumb.get("source"):
            thumbnail = Thumbnail(
                source=thumb["source"],
                width=int(thumb.get("width") or 0),
                height=int(thumb.get("height") or 0),
            )
        return cls(
            title=title,
            extract=payload.get("extract") or "",
            page_url=page_url,
            thumbnail=thumbnail,
        )


@dataclass(frozen=True)
class CacheEntry:
    """A buffered article tagged with the request kind that produced it.

    Entries compare by kind and related title only, never by content.
    """

    article: Article = field(compare=False)
    kind: ArticleKind
    related_to: str | None = None

    def matches(self, kind: ArticleKind, related_to: str | None = None) -> bool:
        if self.kind is not kind:
            return False
        if kind is ArticleKind.RANDOM:
            return True
        return self.related_to == related_to


@dataclass(frozen=True)
class CacheStatus:
    """Point-in-time view of the article buffer."""

    size: int
    is_refilling: bool
