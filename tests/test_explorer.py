"""End-to-end explorer session against a mocked Wikipedia."""

from __future__ import annotations

import asyncio
import random

import httpx

from wiki_explorer.config import AppConfig
from wiki_explorer.explorer import Explorer
from wiki_explorer.fetch.client import WikipediaClient
from wiki_explorer.summarize.providers.heuristic import HeuristicProvider

ARTICLE_HTML = """
<section><p>Lead.</p></section>
<section><h2>Biology</h2>
<p>It has eight arms. It is <a href="./Cephalopod_intelligence">clever</a>. It can open jars. It hides.</p>
</section>
<section><h2>References</h2><p>Citation.</p></section>
"""


class _FakeWikipedia:
    def __init__(self):
        self.random_calls = 0
        self.paths: list[str] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        self.paths.append(path)
        if path.endswith("/page/random/summary"):
            self.random_calls += 1
            return httpx.Response(200, json=_summary(f"Random {self.random_calls}"))
        if "/page/summary/" in path:
            title = path.rsplit("/", 1)[-1].replace("_", " ")
            return httpx.Response(200, json=_summary(title))
        if "/page/html/" in path:
            return httpx.Response(200, text=ARTICLE_HTML)
        if path == "/w/api.php" and request.url.params.get("prop") == "links":
            return httpx.Response(
                200,
                json={"query": {"pages": [{"title": "x", "links": [{"ns": 0, "title": "Squid"}]}]}},
            )
        return httpx.Response(404)


def _summary(title: str) -> dict:
    return {
        "title": title,
        "extract": f"{title} lives in the Pacific Ocean.",
        "content_urls": {"desktop": {"page": f"https://en.wikipedia.org/wiki/{title.replace(' ', '_')}"}},
    }


def test_explorer_serves_enriched_random_then_related_articles():
    wiki = _FakeWikipedia()
    cfg = AppConfig()
    cfg.cache.warm_on_start = False

    async def scenario():
        http = httpx.AsyncClient(transport=httpx.MockTransport(wiki))
        client = WikipediaClient(cfg.wikipedia, http=http)
        try:
            async with Explorer(cfg, client, HeuristicProvider(cfg.summary), rng=random.Random(3)) as explorer:
                first = await explorer.next_article()
                related = await explorer.next_article(related_to=first.title)
                topics = await explorer.related_topics(related)
                links = explorer.related_links(related)
                await explorer.cache.wait_for_refills()
                status = explorer.cache.status()
            return first, related, topics, links, status
        finally:
            await http.aclose()

    first, related, topics, links, status = asyncio.run(scenario())

    assert first.title == "Random 1"
    assert [s.title for s in first.sections] == ["Biology"]
    assert first.sections[0].summary == "It has eight arms. It is clever. It can open jars."
    assert related.title == "Squid"
    assert related.is_enriched
    assert "Pacific Ocean" in topics
    assert links == ["Cephalopod intelligence"]
    assert status.size <= cfg.cache.capacity
    assert not status.is_refilling


def test_explorer_warms_cache_on_enter():
    wiki = _FakeWikipedia()
    cfg = AppConfig()

    async def scenario():
        http = httpx.AsyncClient(transport=httpx.MockTransport(wiki))
        client = WikipediaClient(cfg.wikipedia, http=http)
        try:
            async with Explorer(cfg, client, HeuristicProvider(cfg.summary)) as explorer:
                await explorer.cache.wait_for_refills()
                warmed = explorer.cache.status()
                article = await explorer.next_article()
            return warmed, article
        finally:
            await http.aclose()

    warmed, article = asyncio.run(scenario())

    assert warmed.size == 1
    assert article.title == "Random 1"


def test_explorer_close_discards_buffer():
    wiki = _FakeWikipedia()
    cfg = AppConfig()

    async def scenario():
        http = httpx.AsyncClient(transport=httpx.MockTransport(wiki))
        explorer = Explorer(cfg, WikipediaClient(cfg.wikipedia, http=http), HeuristicProvider())
        try:
            await explorer.__aenter__()
            await explorer.cache.wait_for_refills()
            await explorer.aclose()
            return explorer.cache.status()
        finally:
            await http.aclose()

    status = asyncio.run(scenario())

    assert status.size == 0
    assert not status.is_refilling


def test_from_config_without_api_key_uses_heuristic_provider(monkeypatch):
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)

    explorer = Explorer.from_config(AppConfig())
    try:
        assert isinstance(explorer.provider, HeuristicProvider)
        assert explorer.cache.capacity == 2
    finally:
        asyncio.run(explorer.aclose())
