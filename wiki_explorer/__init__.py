"""
Wiki Explorer - random and related Wikipedia articles with AI section summaries.

Articles are fetched from the Wikipedia REST API, split into sections,
summarized (by an LLM when an API key is configured, heuristically otherwise)
and served through a small prefetch cache so the next article is usually
ready before it is requested.

Main entry point is the CLI via `wiki-explorer explore`.

Example:
    $ wiki-explorer show --related Octopus
"""

__all__ = [
    "__version__",
    "Article",
    "ArticleCache",
    "ArticleKind",
    "ArticleProcessor",
    "ContentFetcher",
    "Explorer",
]
__version__ = "0.1.0"

from .cache import ArticleCache
from .core.types import Article, ArticleKind
from .explorer import Explorer
from .fetch.fetcher import ContentFetcher
from .processor import ArticleProcessor
