"""
Async HTTP client for the Wikipedia REST and Action APIs.

All network errors and non-success statuses are translated to FetchError
at this boundary, so callers never see httpx exceptions.
"""

from __future__ import annotations

from typing import Any
from urllib.parse import quote

import httpx

from ..config import WikipediaConfig
from ..core.errors import FetchError


def encode_title(title: str) -> str:
    """Encode an article title for use as a REST path segment.

    Example:
        >>> encode_title("AC/DC (band)")
        'AC%2FDC_%28band%29'
    """
    return quote(title.strip().replace(" ", "_"), safe="")


def build_http_client(cfg: WikipediaConfig) -> httpx.AsyncClient:
    """Create the shared AsyncClient used for Wikipedia requests."""
    return httpx.AsyncClient(
        timeout=cfg.timeout_seconds,
        headers={"User-Agent": cfg.user_agent, "Accept": "application/json"},
        follow_redirects=True,
        trust_env=cfg.trust_env,
    )


class WikipediaClient:
    """Thin async wrapper over the Wikipedia endpoints the explorer uses.

    Attributes:
        cfg: Wikipedia API configuration
    """

    def __init__(self, cfg: WikipediaConfig, http: httpx.AsyncClient | None = None):
        self.cfg = cfg
        self._owns_http = http is None
        self._http = http or build_http_client(cfg)

    async def aclose(self) -> None:
        if self._owns_http:
            await self._http.aclose()

    async def get_random_summary(self) -> dict[str, Any]:
        resp = await self._get(f"{self.cfg.rest_base_url}/page/random/summary")
        return _json(resp)

    async def get_summary(self, title: str) -> dict[str, Any]:
        resp = await self._get(f"{self.cfg.rest_base_url}/page/summary/{encode_title(title)}")
        return _json(resp)

    async def get_html(self, title: str) -> str:
        resp = await self._get(
            f"{self.cfg.rest_base_url}/page/html/{encode_title(title)}",
            headers={"Accept": "text/html"},
        )
        return resp.text

    async def get_links(self, title: str) -> list[str]:
        """Return titles of main-namespace pages linked from `title`."""
        page = await self._query_page(
            {
                "titles": title,
                "prop": "links",
                "plnamespace": 0,
                "pllimit": self.cfg.link_limit,
            }
        )
        return [item["title"] for item in page.get("links", []) if item.get("title")]

    async def get_categories(self, title: str) -> list[str]:
        """Return the visible categories `title` is listed in, in API order."""
        page = await self._query_page(
            {
                "titles": title,
                "prop": "categories",
                "clshow": "!hidden",
                "cllimit": self.cfg.category_limit,
            }
        )
        return [item["title"] for item in page.get("categories", []) if item.get("title")]

    async def get_category_members(self, category: str) -> list[str]:
        """Return titles of main-namespace members of `category`."""
        data = await self._query(
            {
                "list": "categorymembers",
                "cmtitle": category,
                "cmnamespace": 0,
                "cmlimit": self.cfg.category_member_limit,
            }
        )
        members = data.get("query", {}).get("categorymembers", [])
        return [item["title"] for item in members if item.get("title")]

    async def _query_page(self, params: dict[str, Any]) -> dict[str, Any]:
        data = await self._query(params)
        pages = data.get("query", {}).get("pages", [])
        if not pages or pages[0].get("missing"):
            return {}
        return pages[0]

    async def _query(self, params: dict[str, Any]) -> dict[str, Any]:
        query = {"action": "query", "format": "json", "formatversion": 2}
        query.update(params)
        resp = await self._get(self.cfg.action_api_url, params=query)
        return _json(resp)

    async def _get(
        self,
        url: str,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> httpx.Response:
        try:
            resp = await self._http.get(url, params=params, headers=headers)
        except httpx.HTTPError as exc:
            raise FetchError(url, None, f"{type(exc).__name__}: {exc}") from exc
        if not resp.is_success:
            raise FetchError(url, resp.status_code)
        return resp


def _json(resp: httpx.Response) -> dict[str, Any]:
    try:
        data = resp.json()
    except ValueError as exc:
        raise FetchError(str(resp.url), resp.status_code, "Invalid JSON response") from exc
    if not isinstance(data, dict):
        raise FetchError(str(resp.url), resp.status_code, "Unexpected JSON payload")
    return data
