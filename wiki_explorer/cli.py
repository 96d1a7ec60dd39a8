"""
Command-line interface for the Wikipedia explorer.

Uses Typer to provide `show` (print one article) and `explore` (interactive
browsing backed by the prefetch cache). Supports loading .env files for API
key configuration.
"""

from __future__ import annotations

import asyncio
from pathlib import Path

from dotenv import load_dotenv
from rich.console import Console
from rich.prompt import Prompt
import typer

from .config import AppConfig, load_config
from .core.errors import ExplorerError
from .core.types import Article
from .explorer import Explorer
from .logging_utils import get_logger, setup_logging
from .renderer import render_article

app = typer.Typer(add_completion=False)
console = Console()

_CHOICES = {"n": "next", "r": "related", "b": "back", "q": "quit"}


def _build_config(config: Path | None, api_key: str | None, log_level: str | None) -> AppConfig:
    load_dotenv()
    cfg = load_config(str(config) if config else None)
    if api_key:
        cfg.provider.api_key = api_key
    if log_level:
        cfg.logging.level = log_level
    setup_logging(cfg.logging)
    return cfg


@app.command()
def show(
    related: str | None = typer.Option(None, "--related", "-r", help="Show an article related to this title."),
    config: Path | None = typer.Option(None, "--config", "-c", exists=True, readable=True),
    api_key: str | None = typer.Option(None, "--api-key", envvar="OPENAI_API_KEY", help="LLM API key."),
    log_level: str | None = typer.Option(None, "--log-level", help="Logging level."),
):
    """Print one enriched article (random, or related to a title)."""
    cfg = _build_config(config, api_key, log_level)
    cfg.cache.warm_on_start = False
    try:
        asyncio.run(_show(cfg, related))
    except ExplorerError as exc:
        console.print(f"[red]Failed to load article:[/red] {exc}")
        raise typer.Exit(code=1) from exc


@app.command()
def explore(
    config: Path | None = typer.Option(None, "--config", "-c", exists=True, readable=True),
    api_key: str | None = typer.Option(None, "--api-key", envvar="OPENAI_API_KEY", help="LLM API key."),
    log_level: str | None = typer.Option(None, "--log-level", help="Logging level."),
):
    """Browse random and related articles interactively."""
    cfg = _build_config(config, api_key, log_level)
    asyncio.run(_explore(cfg))


async def _show(cfg: AppConfig, related: str | None) -> None:
    async with Explorer.from_config(cfg) as explorer:
        with console.status("Loading article..."):
            article = await explorer.next_article(related)
            topics = await explorer.related_topics(article)
        render_article(console, article, topics, explorer.related_links(article))


async def _explore(cfg: AppConfig) -> None:
    history: list[Article] = []
    current: Article | None = None
    async with Explorer.from_config(cfg) as explorer:
        current = await _load(explorer)
        while True:
            if current is not None:
                topics = await explorer.related_topics(current)
                render_article(console, current, topics, explorer.related_links(current))
            # Prompt in a worker thread so background refills keep running.
            choice = await asyncio.to_thread(
                Prompt.ask,
                "[n]ext, [r]elated, [b]ack, [q]uit",
                choices=list(_CHOICES),
                default="n",
                console=console,
            )
            action = _CHOICES[choice]
            if action == "quit":
                break
            if action == "back":
                if not history:
                    console.print("[yellow]No previous article[/yellow]")
                    continue
                current = history.pop()
                # Buffered "related" entries belong to the article we left.
                explorer.cache.clear_cache()
                continue
            related_to = current.title if action == "related" and current is not None else None
            article = await _load(explorer, related_to)
            if article is None:
                continue
            if current is not None:
                history.append(current)
            current = article


async def _load(explorer: Explorer, related_to: str | None = None) -> Article | None:
    try:
        with console.status("Loading article..."):
            return await explorer.next_article(related_to)
    except ExplorerError as exc:
        get_logger("cli").warning("Failed to load article: %s", exc)
        console.print("[red]Failed to load article[/red]")
        return None


if __name__ == "__main__":
    app()
