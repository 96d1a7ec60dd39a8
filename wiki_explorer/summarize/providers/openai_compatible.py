"""
OpenAI-compatible chat-completion provider.

Works against any endpoint exposing `POST {base_url}/chat/completions` with
bearer authentication. Every call degrades to the local heuristic result
when the API fails or returns unusable output.
"""

from __future__ import annotations

import json
import logging
from typing import Any

import httpx

from ...config import LoggingConfig, ProviderConfig, SummaryConfig
from ...fetch.sections import html_to_text
from ...logging_utils import get_logger, log_event, redact_text, truncate_text
from ..prompts import build_section_prompt, build_system_prompt, build_topics_prompt
from ..tracing import record_span_error, set_span_output, start_span
from .base import SummaryProvider
from .heuristic import HeuristicProvider


class OpenAICompatibleProvider(SummaryProvider):
    """Chat-completion backed summarizer with heuristic fallback."""

    name = "openai"

    def __init__(
        self,
        cfg: ProviderConfig,
        summary_cfg: SummaryConfig,
        api_key: str | None,
        log_cfg: LoggingConfig,
        llm_logger: logging.Logger | None = None,
        http: httpx.AsyncClient | None = None,
    ):
        """Initialize the provider.

        Args:
            cfg: Provider configuration (model, base URL, etc.)
            summary_cfg: Summarization settings
            api_key: Bearer credential for the API
            log_cfg: Logging configuration for LLM response logging
            llm_logger: Logger for LLM interactions
            http: Optional shared AsyncClient (created on demand otherwise)

        Raises:
            ValueError: If api_key is empty
        """
        if not api_key:
            raise ValueError("Missing OpenAI API key")
        self.cfg = cfg
        self.summary_cfg = summary_cfg
        self.api_key = api_key
        self.log_cfg = log_cfg
        self.llm_logger = llm_logger or get_logger("llm")
        self.fallback = HeuristicProvider(summary_cfg)
        self._owns_http = http is None
        self._http = http

    async def summarize_text(self, text: str) -> str:
        prompt = build_section_prompt(html_to_text(text), self.summary_cfg.max_chars)
        messages = [
            {"role": "system", "content": build_system_prompt()},
            {"role": "user", "content": prompt},
        ]
        with start_span(
            "openai.summarize_section",
            kind="llm",
            input_value=prompt,
            attributes={"llm.model": self.cfg.model, "llm.provider": self.name},
        ) as span:
            try:
                content = await self._complete(messages, self.cfg.max_tokens, self.cfg.temperature)
                set_span_output(span, content)
            except httpx.HTTPError as exc:
                record_span_error(span, exc)
                self._log_llm_response("llm_summary", "provider_error", str(exc), prompt)
                return await self.fallback.summarize_text(text)
            except json.JSONDecodeError as exc:
                record_span_error(span, exc)
                self._log_llm_response("llm_summary", "parse_error", str(exc), prompt)
                return await self.fallback.summarize_text(text)

        self._log_llm_response("llm_summary", "ok", content, prompt)
        if not content.strip():
            return await self.fallback.summarize_text(text)
        return content.strip()

    async def generate_topics(self, title: str, text: str) -> list[str]:
        prompt = build_topics_prompt(
            title,
            html_to_text(text),
            self.summary_cfg.max_topics,
            self.summary_cfg.topic_source_chars,
        )
        messages = [{"role": "user", "content": prompt}]
        content = ""
        with start_span(
            "openai.related_topics",
            kind="llm",
            input_value=prompt,
            attributes={"llm.model": self.cfg.model, "llm.provider": self.name, "article.title": title},
        ) as span:
            try:
                content = await self._complete(messages, 200, 0.7)
                set_span_output(span, content)
                items = _parse_json_array(content)
            except httpx.HTTPError as exc:
                record_span_error(span, exc)
                self._log_llm_response("llm_topics", "provider_error", str(exc), prompt)
                return await self.fallback.generate_topics(title, text)
            except json.JSONDecodeError as exc:
                record_span_error(span, exc)
                self._log_llm_response("llm_topics", "parse_error", content, prompt)
                return await self.fallback.generate_topics(title, text)

        self._log_llm_response("llm_topics", "ok", content, prompt)
        topics: list[str] = []
        for item in items:
            topic = str(item).strip()
            if topic and topic.casefold() != title.casefold() and topic not in topics:
                topics.append(topic)
        return topics[: self.summary_cfg.max_topics]

    async def aclose(self) -> None:
        if self._owns_http and self._http is not None:
            await self._http.aclose()
            self._http = None

    async def _complete(self, messages: list[dict[str, str]], max_tokens: int, temperature: float) -> str:
        """Make a chat-completion request and return the first choice's text.

        Raises:
            httpx.HTTPError: If the request fails or returns a non-success status
            json.JSONDecodeError: If the response body is not JSON
        """
        payload = {
            "model": self.cfg.model,
            "messages": messages,
            "max_tokens": max_tokens,
            "temperature": temperature,
        }
        resp = await self._client().post(
            f"{self.cfg.base_url.rstrip('/')}/chat/completions",
            headers={"Authorization": f"Bearer {self.api_key}"},
            json=payload,
        )
        resp.raise_for_status()
        return _extract_text(resp.json())

    def _client(self) -> httpx.AsyncClient:
        if self._http is None:
            self._http = httpx.AsyncClient(
                timeout=self.cfg.timeout_seconds,
                trust_env=self.cfg.trust_env,
            )
        return self._http

    def _log_llm_response(self, event: str, status: str, content: str, prompt: str) -> None:
        detail = self.log_cfg.llm_log_detail
        redaction = self.log_cfg.llm_log_redaction
        payload: dict[str, Any] = {"event": event, "status": status, "model": self.cfg.model}
        if detail == "prompt_response":
            payload["raw_prompt"] = truncate_text(redact_text(prompt, redaction))
        if detail != "summary_only":
            payload["raw_response"] = truncate_text(redact_text(content or "", redaction))
        level = logging.DEBUG if status == "ok" else logging.WARNING
        log_event(self.llm_logger, "LLM response", level, **payload)


def _extract_text(data: dict[str, Any]) -> str:
    """Return the message content of the first choice, or '' if absent."""
    try:
        return data["choices"][0]["message"]["content"] or ""
    except (KeyError, IndexError, TypeError):
        return ""


def _parse_json_array(content: str) -> list[Any]:
    """Parse a JSON array from model output, tolerating code fences and chatter.

    Raises:
        json.JSONDecodeError: If no JSON array can be found
    """
    text = (content or "").strip()
    if text.startswith("```"):
        lines = [line for line in text.splitlines() if not line.strip().startswith("```")]
        text = "\n".join(lines).strip()
    try:
        data = json.loads(text)
    except json.JSONDecodeError:
        start = text.find("[")
        end = text.rfind("]")
        if start == -1 or end <= start:
            raise json.JSONDecodeError("No JSON array found", text, 0) from None
        data = json.loads(text[start : end + 1])
    if isinstance(data, dict):
        data = data.get("topics", [])
    if not isinstance(data, list):
        raise json.JSONDecodeError("Expected a JSON array", text, 0)
    return data
