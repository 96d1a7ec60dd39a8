"""
Local heuristic summarization used when no LLM credential is configured.

Summaries are the first few sentences of the section text; topics are
capitalised phrases and frequent long words pulled from the article text.
"""

from __future__ import annotations

from collections import Counter
import re

from ...config import SummaryConfig
from ...fetch.sections import html_to_text
from .base import SummaryProvider


_SENTENCE_SPLIT_RE = re.compile(r"[.!?]+")
_PHRASE_RE = re.compile(r"\b[A-Z][a-zA-Z\-]+(?:\s+(?:of|the|and|de|von)?\s*[A-Z][a-zA-Z\-]+)*\b")
_WORD_RE = re.compile(r"\b[a-zA-Z]{6,}\b")

STOPWORDS = {
    "a", "an", "and", "are", "as", "at", "be", "by", "for", "from", "he", "her",
    "his", "in", "is", "it", "its", "of", "on", "or", "she", "that", "the",
    "their", "there", "these", "they", "this", "to", "was", "were", "which",
    "while", "with", "after", "also", "although", "because", "before",
    "between", "during", "however", "including", "other", "since", "through",
    "under", "until", "where", "whose", "within", "without", "would", "about",
    "became", "known", "first", "later", "several", "called", "being", "among",
    "around", "wikipedia", "article", "section", "references",
}


def truncate_to_sentences(text: str, max_sentences: int = 3) -> str:
    """Keep the first `max_sentences` sentences of `text`, with HTML tags removed.

    Example:
        >>> truncate_to_sentences("<b>One</b>. Two! Three? Four.", 2)
        'One. Two.'
    """
    sentences = [s.strip() for s in _SENTENCE_SPLIT_RE.split(html_to_text(text)) if s.strip()]
    if not sentences:
        return ""
    return ". ".join(sentences[:max_sentences]) + "."


def _trim_stopwords(phrase: str) -> str:
    words = phrase.split()
    while words and words[0].casefold() in STOPWORDS:
        words.pop(0)
    while words and words[-1].casefold() in STOPWORDS:
        words.pop()
    return " ".join(words)


def extract_keywords(title: str, text: str, limit: int = 6) -> list[str]:
    """Pick likely related topics from article text.

    Multi-word capitalised phrases rank first, then single capitalised
    phrases, then frequent long words. Words of the title are excluded.
    """
    clean = html_to_text(text)
    title_words = {w.casefold() for w in re.findall(r"\w+", title)}

    def _usable(phrase: str) -> bool:
        words = [w.casefold() for w in re.findall(r"\w+", phrase)]
        if not words or phrase.casefold() == title.casefold():
            return False
        if all(w in STOPWORDS for w in words):
            return False
        return not set(words) <= title_words

    phrases: Counter[str] = Counter()
    first_seen: dict[str, int] = {}
    for idx, match in enumerate(_PHRASE_RE.finditer(clean)):
        phrase = _trim_stopwords(match.group(0))
        if not _usable(phrase):
            continue
        phrases[phrase] += 1
        first_seen.setdefault(phrase, idx)

    ranked = sorted(
        phrases,
        key=lambda p: (-(len(p.split()) > 1), -phrases[p], first_seen[p]),
    )

    topics: list[str] = []
    seen: set[str] = set()
    for phrase in ranked:
        key = phrase.casefold()
        if key in seen:
            continue
        seen.add(key)
        topics.append(phrase)
        if len(topics) >= limit:
            return topics

    words = Counter(
        w.casefold()
        for w in _WORD_RE.findall(clean)
        if w.casefold() not in STOPWORDS and w.casefold() not in title_words
    )
    for word, _ in words.most_common():
        if word in seen:
            continue
        seen.add(word)
        topics.append(word.capitalize())
        if len(topics) >= limit:
            break
    return topics


class HeuristicProvider(SummaryProvider):
    """Summarizer that never touches the network."""

    name = "heuristic"

    def __init__(self, summary_cfg: SummaryConfig | None = None):
        self.summary_cfg = summary_cfg or SummaryConfig()

    async def summarize_text(self, text: str) -> str:
        return truncate_to_sentences(text, self.summary_cfg.max_sentences)

    async def generate_topics(self, title: str, text: str) -> list[str]:
        return extract_keywords(title, text, self.summary_cfg.max_topics)
