"""Terminal rendering of enriched articles with rich."""

from __future__ import annotations

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from .core.types import Article
from .fetch.sections import html_to_text


def render_article(
    console: Console,
    article: Article,
    topics: list[str] | None = None,
    links: list[str] | None = None,
) -> None:
    """Print an article panel followed by its sections, topics and links."""
    header = Text()
    header.append(article.extract or "(no extract)")
    header.append("\n\n")
    header.append(article.page_url, style="link " + article.page_url)
    console.print(Panel(header, title=f"[bold]{article.title}[/bold]", expand=True))

    for section in article.sections:
        body = section.summary or html_to_text(section.content)
        label = "summary" if section.summary else "text"
        console.print(
            Panel(
                Text(body),
                title=section.title,
                subtitle=f"[dim]{label}[/dim]",
                title_align="left",
            )
        )

    blocks = []
    if topics:
        blocks.append(Text("Related topics: ", style="bold").append(", ".join(topics), style="cyan"))
    if links:
        blocks.append(Text("Linked articles: ", style="bold").append(", ".join(links), style="green"))
    if blocks:
        console.print(Group(*blocks))
