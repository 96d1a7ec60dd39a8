"""
Abstract base class for summarization providers.

New providers should inherit from SummaryProvider and implement
the summarize_text and generate_topics methods.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


class SummaryProvider(ABC):
    """Abstract base class for summarization strategies.

    Concrete implementations are the LLM-backed OpenAICompatibleProvider and
    the local HeuristicProvider used when no API credential is configured.
    """

    name: str = "base"

    @abstractmethod
    async def summarize_text(self, text: str) -> str:
        """Condense a section of article text.

        Args:
            text: Section text, possibly containing inline HTML

        Returns:
            A short plain-text summary
        """
        raise NotImplementedError

    @abstractmethod
    async def generate_topics(self, title: str, text: str) -> list[str]:
        """Suggest related topics for an article.

        Args:
            title: The article title
            text: Representative article text

        Returns:
            Topic titles, never including `title` itself
        """
        raise NotImplementedError

    async def aclose(self) -> None:
        """Release any network resources held by the provider."""
        return None
