"""
Configuration management using YAML files and dataclasses.

This module defines all configuration dataclasses and provides loading
from YAML files with defaults. Configuration sections:
- WikipediaConfig: Wikipedia REST/Action API settings
- ProcessingConfig: Section extraction settings
- SummaryConfig: Summarization and topic generation settings
- ProviderConfig: LLM provider settings
- CacheConfig: Article prefetch buffer settings
- LoggingConfig: Logging behavior
- LangfuseConfig: Langfuse tracing settings
- AppConfig: Root configuration container
"""

from __future__ import annotations

from dataclasses import dataclass, field
import os
from typing import Any

import yaml


@dataclass
class WikipediaConfig:
    """Configuration for the Wikipedia APIs.

    Attributes:
        rest_base_url: Base URL of the REST API (summary, random, html)
        action_api_url: URL of the Action API (links, categories)
        timeout_seconds: HTTP request timeout
        trust_env: Whether to respect system proxy settings
        user_agent: HTTP User-Agent header string
        link_limit: Maximum outbound links requested per page (pllimit)
        category_limit: Maximum categories requested per page (cllimit)
        category_member_limit: Maximum members requested per category (cmlimit)
        random_retries: Extra random draws when a fallback collides with the source title
    """

    rest_base_url: str = "https://en.wikipedia.org/api/rest_v1"
    action_api_url: str = "https://en.wikipedia.org/w/api.php"
    timeout_seconds: float = 15.0
    trust_env: bool = True
    user_agent: str = "wiki-explorer/0.1 (https://github.com/; python httpx)"
    link_limit: int = 500
    category_limit: int = 10
    category_member_limit: int = 100
    random_retries: int = 3


@dataclass
class ProcessingConfig:
    """Configuration for article section extraction.

    Attributes:
        max_sections: Maximum number of sections kept per article
        skip_sections_pattern: Case-insensitive regex of section titles to drop
    """

    max_sections: int = 5
    skip_sections_pattern: str = (
        r"^(References|External links|See also|Notes|Further reading|Bibliography|Sources)$"
    )


@dataclass
class SummaryConfig:
    """Configuration for summarization and topic generation.

    Attributes:
        max_sentences: Sentences kept by the heuristic summarizer
        max_chars: Maximum characters of section text sent to the LLM
        max_topics: Maximum number of related topics returned
        topic_source_chars: Maximum characters of article text used for topics
    """

    max_sentences: int = 3
    max_chars: int = 4000
    max_topics: int = 6
    topic_source_chars: int = 1000


@dataclass
class ProviderConfig:
    """Configuration for the summarization provider.

    Attributes:
        name: Provider name ("openai" or "heuristic")
        model: Chat-completion model identifier
        base_url: Base URL for the chat-completion API
        api_key_env: Environment variable name containing the API key
        api_key: Optional inline API key (overrides env var)
        trust_env: Whether to respect system proxy settings for API requests
        temperature: Sampling temperature for summaries
        max_tokens: Maximum tokens per summary
        timeout_seconds: Request timeout for the provider API
    """

    name: str = "openai"
    model: str = "gpt-4o-mini"
    base_url: str = "https://api.openai.com/v1"
    api_key_env: str = "OPENAI_API_KEY"
    api_key: str | None = None
    trust_env: bool = True
    temperature: float = 0.3
    max_tokens: int = 150
    timeout_seconds: float = 30.0


@dataclass
class CacheConfig:
    """Configuration for the article prefetch buffer.

    Attributes:
        capacity: Maximum number of ready articles held in memory
        warm_on_start: Whether to start prefetching a random article on startup
    """

    capacity: int = 2
    warm_on_start: bool = True


@dataclass
class LoggingConfig:
    """Configuration for logging behavior.

    Attributes:
        level: Logging level ("DEBUG", "INFO", "WARNING", "ERROR")
        console: Whether to log to console
        file: Whether to log to file
        format: Log file format ("jsonl" or "plain")
        filename: Path of the log file
        llm_log_detail: LLM log detail level ("summary_only", "response_only", "prompt_response")
        llm_log_redaction: Redaction mode for LLM logs ("none", "redact_content", "redact_urls")
    """

    level: str = "WARNING"
    console: bool = True
    file: bool = False
    format: str = "jsonl"
    filename: str = "wiki_explorer.jsonl"
    llm_log_detail: str = "response_only"
    llm_log_redaction: str = "none"


@dataclass
class LangfuseConfig:
    """Configuration for Langfuse tracing.

    Attributes:
        enabled: Whether to enable Langfuse tracing
        public_key: Langfuse public key (optional)
        secret_key: Langfuse secret key (optional)
        host: Langfuse host URL (optional)
        redaction: Redaction mode for prompt/response payloads
        max_text_chars: Maximum characters for prompt/response payloads
    """

    enabled: bool = False
    public_key: str | None = None
    secret_key: str | None = None
    host: str | None = None
    redaction: str = "none"
    max_text_chars: int = 20000


@dataclass
class AppConfig:
    """Root configuration container aggregating all config sections."""

    wikipedia: WikipediaConfig = field(default_factory=WikipediaConfig)
    processing: ProcessingConfig = field(default_factory=ProcessingConfig)
    summary: SummaryConfig = field(default_factory=SummaryConfig)
    provider: ProviderConfig = field(default_factory=ProviderConfig)
    cache: CacheConfig = field(default_factory=CacheConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    langfuse: LangfuseConfig = field(default_factory=LangfuseConfig)


_SECTIONS: dict[str, type] = {
    "wikipedia": WikipediaConfig,
    "processing": ProcessingConfig,
    "summary": SummaryConfig,
    "provider": ProviderConfig,
    "cache": CacheConfig,
    "logging": LoggingConfig,
    "langfuse": LangfuseConfig,
}


def load_config(path: str | None) -> AppConfig:
    """Load configuration from a YAML file with defaults."""
    if not path:
        return AppConfig()

    with open(path, "r", encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}

    return _merge_config(AppConfig(), raw)


def _merge_config(base: AppConfig, raw: dict[str, Any]) -> AppConfig:
    """Merge raw YAML config into base AppConfig.

    Unknown sections and unknown keys within a section are ignored.
    """
    data = _asdict(base)
    for key, value in raw.items():
        if key not in data or not isinstance(value, dict):
            continue
        known = data[key]
        known.update({k: v for k, v in value.items() if k in known})
    return _fromdict(data)


def _asdict(cfg: AppConfig) -> dict[str, dict[str, Any]]:
    """Convert AppConfig to nested dictionary."""
    return {name: dict(vars(getattr(cfg, name))) for name in _SECTIONS}


def _fromdict(data: dict[str, dict[str, Any]]) -> AppConfig:
    """Reconstruct AppConfig from nested dictionary."""
    return AppConfig(**{name: cls(**data[name]) for name, cls in _SECTIONS.items()})


def get_api_key(cfg: ProviderConfig) -> str | None:
    """Get API key from inline config or environment variable."""
    if cfg.api_key:
        return cfg.api_key
    return os.getenv(cfg.api_key_env) or None
