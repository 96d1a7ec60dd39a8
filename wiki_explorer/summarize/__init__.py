"""Section summarization, topic suggestion and tracing."""

from .providers import (
    HeuristicProvider,
    OpenAICompatibleProvider,
    SummaryProvider,
    available_providers,
    create_provider,
)
from .tracing import flush, record_span_error, set_span_output, setup_langfuse, start_span

__all__ = [
    "SummaryProvider",
    "HeuristicProvider",
    "OpenAICompatibleProvider",
    "available_providers",
    "create_provider",
    "setup_langfuse",
    "flush",
    "start_span",
    "set_span_output",
    "record_span_error",
]
