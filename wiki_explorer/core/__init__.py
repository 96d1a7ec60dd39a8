"""
Core domain models and errors.

This package contains data types and exceptions that are
independent of any specific fetch or summarization backend.
"""

from .errors import ExplorerError, FetchError, NotFoundError, ProcessingError
from .types import Article, ArticleKind, CacheEntry, CacheStatus, Section, Thumbnail

__all__ = [
    "Article",
    "ArticleKind",
    "CacheEntry",
    "CacheStatus",
    "Section",
    "Thumbnail",
    "ExplorerError",
    "FetchError",
    "NotFoundError",
    "ProcessingError",
]
