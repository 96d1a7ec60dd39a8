"""
Wikipedia fetching and HTML section parsing.

This package handles HTTP access to the Wikipedia APIs, random and
related article discovery, and section extraction from article HTML.
"""

from .client import WikipediaClient, build_http_client, encode_title
from .fetcher import ContentFetcher, is_candidate_title
from .sections import extract_related_links, html_to_text, parse_article_html

__all__ = [
    "WikipediaClient",
    "build_http_client",
    "encode_title",
    "ContentFetcher",
    "is_candidate_title",
    "extract_related_links",
    "html_to_text",
    "parse_article_html",
]
