from rich.console import Console

from wiki_explorer.core.types import Article, Section
from wiki_explorer.renderer import render_article


def _console() -> Console:
    return Console(record=True, width=100, color_system=None)


def test_render_article_prints_summary_or_plain_text():
    article = Article(
        title="Octopus",
        extract="An octopus has eight arms.",
        page_url="https://en.wikipedia.org/wiki/Octopus",
        sections=(
            Section(title="Biology", content="<p>Long <b>text</b>.</p>", original_content="", summary="Short."),
            Section(title="Habitat", content="<p>Seas <b>everywhere</b>.</p>", original_content=""),
        ),
    )
    console = _console()

    render_article(console, article, topics=["Squid", "Nautilus"], links=["Cephalopod"])
    text = console.export_text()

    assert "Octopus" in text
    assert "An octopus has eight arms." in text
    assert "Short." in text
    assert "Long text" not in text
    assert "Seas everywhere" in text
    assert "Related topics: Squid, Nautilus" in text
    assert "Linked articles: Cephalopod" in text


def test_render_article_without_sections_or_topics():
    article = Article(title="Moon", extract="", page_url="https://en.wikipedia.org/wiki/Moon")
    console = _console()

    render_article(console, article)
    text = console.export_text()

    assert "Moon" in text
    assert "(no extract)" in text
    assert "Related topics" not in text
