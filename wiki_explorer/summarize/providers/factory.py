"""Provider factory: resolves the summarization strategy once at startup."""

from __future__ import annotations

import logging

import httpx

from ...config import LoggingConfig, ProviderConfig, SummaryConfig, get_api_key
from ...logging_utils import get_logger
from .base import SummaryProvider
from .heuristic import HeuristicProvider
from .openai_compatible import OpenAICompatibleProvider


ProviderBuilder = type[SummaryProvider]

_PROVIDER_REGISTRY: dict[str, ProviderBuilder] = {
    "openai": OpenAICompatibleProvider,
    "openai_compatible": OpenAICompatibleProvider,
    "openai-compatible": OpenAICompatibleProvider,
    "heuristic": HeuristicProvider,
}


def available_providers() -> list[str]:
    """Return the set of registered provider names."""
    return sorted(_PROVIDER_REGISTRY.keys())


def create_provider(
    provider_cfg: ProviderConfig,
    summary_cfg: SummaryConfig,
    log_cfg: LoggingConfig,
    llm_logger: logging.Logger | None = None,
    http: httpx.AsyncClient | None = None,
) -> SummaryProvider:
    """Build a provider instance from runtime config.

    Without an API key the heuristic provider is returned whatever the
    configured name, so a missing credential never surfaces as an error.

    Raises:
        ValueError: If the configured provider name is unknown
    """
    name = provider_cfg.name.lower().strip()
    builder = _PROVIDER_REGISTRY.get(name)
    if builder is None:
        supported = ", ".join(available_providers())
        raise ValueError(f"Unsupported provider: {provider_cfg.name}. Supported: {supported}")
    if builder is HeuristicProvider:
        return HeuristicProvider(summary_cfg)
    api_key = get_api_key(provider_cfg)
    if not api_key:
        get_logger("llm").info("No API key configured; using heuristic summaries")
        return HeuristicProvider(summary_cfg)
    return builder(provider_cfg, summary_cfg, api_key, log_cfg, llm_logger, http)
