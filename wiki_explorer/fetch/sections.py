"""
Article HTML section parsing with BeautifulSoup.

Turns the Parsoid HTML returned by `page/html/{title}` into an ordered list
of sections, and pulls outbound article links back out of section markup.
"""

from __future__ import annotations

import re
from urllib.parse import unquote

from bs4 import BeautifulSoup

from ..core.errors import ProcessingError
from ..core.types import Article, Section


_HEADINGS = ["h2", "h3"]
_SPACE_BEFORE_PUNCT_RE = re.compile(r"\s+([.,;:!?)])")


def parse_article_html(
    html: str,
    max_sections: int = 5,
    skip_pattern: str | re.Pattern[str] | None = None,
) -> list[Section]:
    """Extract content sections from article HTML.

    Walks h2/h3 headings in document order. A section's content is the inner
    HTML of the paragraphs after its heading, up to the next heading. Sections
    without paragraph text, or whose title matches `skip_pattern`, are dropped.

    Args:
        html: Full article HTML
        max_sections: Maximum number of sections returned
        skip_pattern: Regex (matched case-insensitively) of section titles to drop

    Returns:
        At most `max_sections` sections, in document order

    Raises:
        ProcessingError: If `html` is not a string
    """
    if not isinstance(html, str):
        raise ProcessingError(f"Expected HTML string, got {type(html).__name__}")
    if isinstance(skip_pattern, str):
        skip_pattern = re.compile(skip_pattern, re.IGNORECASE)

    soup = BeautifulSoup(html, "html.parser")
    sections: list[Section] = []
    for heading in soup.find_all(_HEADINGS):
        if len(sections) >= max_sections:
            break
        title = heading.get_text(" ", strip=True)
        if skip_pattern is not None and skip_pattern.search(title):
            continue
        content = " ".join(_paragraphs_after(heading)).strip()
        if content:
            sections.append(Section(title=title, content=content, original_content=content))
    return sections


def _paragraphs_after(heading) -> list[str]:
    """Collect inner HTML of <p> elements following `heading` until the next heading.

    Parsoid wraps each heading in its own <section> (or a div.mw-heading), so
    the walk follows document order rather than only direct siblings.
    """
    chunks: list[str] = []
    for element in heading.find_all_next(True):
        if element.name in _HEADINGS:
            break
        if element.name == "p":
            inner = element.decode_contents().strip()
            if inner:
                chunks.append(inner)
    return chunks


def extract_related_links(article: Article, limit: int = 15) -> list[str]:
    """Return unique article titles linked from the article's sections.

    Only `/wiki/Title` and `./Title` hrefs are considered. Anchors, namespaced
    pages, the article itself and titles of two characters or fewer are skipped.
    """
    links: list[str] = []
    seen: set[str] = set()
    own = article.title.casefold()
    for section in article.sections:
        soup = BeautifulSoup(section.original_content or section.content, "html.parser")
        for anchor in soup.find_all("a", href=True):
            title = _title_from_href(anchor["href"])
            if not title or not anchor.get_text(strip=True):
                continue
            if ":" in title or "#" in title or len(title) <= 2:
                continue
            key = title.casefold()
            if key == own or key in seen:
                continue
            seen.add(key)
            links.append(title)
            if len(links) >= limit:
                return links
    return links


def _title_from_href(href: str) -> str | None:
    href = href.strip()
    if href.startswith("#"):
        return None
    if "/wiki/" in href:
        tail = href.split("/wiki/", 1)[1]
    elif href.startswith("./"):
        tail = href[2:]
    else:
        return None
    tail = tail.split("?", 1)[0]
    if not tail:
        return None
    return unquote(tail).replace("_", " ").strip()


def html_to_text(html: str) -> str:
    """Convert an HTML fragment to whitespace-normalized plain text."""
    soup = BeautifulSoup(html or "", "html.parser")
    for tag in soup(["script", "style", "sup"]):
        tag.decompose()
    text = re.sub(r"\s+", " ", soup.get_text(" ")).strip()
    return _SPACE_BEFORE_PUNCT_RE.sub(r"\1", text)
