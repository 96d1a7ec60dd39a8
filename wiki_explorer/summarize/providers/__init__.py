from .base import SummaryProvider
from .factory import available_providers, create_provider
from .heuristic import HeuristicProvider, extract_keywords, truncate_to_sentences
from .openai_compatible import OpenAICompatibleProvider

__all__ = [
    "SummaryProvider",
    "HeuristicProvider",
    "OpenAICompatibleProvider",
    "available_providers",
    "create_provider",
    "extract_keywords",
    "truncate_to_sentences",
]
