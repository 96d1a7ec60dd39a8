"""Prompt loading and rendering helpers for summarization providers."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path


_PROMPT_DIR = Path(__file__).resolve().parent.parent / "prompts"


@lru_cache(maxsize=None)
def _load_template(name: str) -> str:
    path = _PROMPT_DIR / f"{name}.md"
    return path.read_text(encoding="utf-8").strip()


def _render_template(name: str, **values: str) -> str:
    template = _load_template(name)
    return template.format(**values)


def build_system_prompt() -> str:
    return _load_template("system")


def build_section_prompt(text: str, max_chars: int) -> str:
    return _render_template("summarize_section", content=text[:max_chars])


def build_topics_prompt(title: str, text: str, max_topics: int, max_chars: int) -> str:
    return _render_template(
        "related_topics",
        title=title,
        max_topics=str(max_topics),
        content=text[:max_chars],
    )
