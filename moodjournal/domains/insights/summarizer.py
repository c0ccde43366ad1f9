"""AI summarizer: RapidAPI provider clients behind one ordered fallback.

The providers are plain HTTP clients over ``requests``. Which ones run, and
in what order, is decided once from configuration by :func:`build_summarizer`
and the result is injected into the app; nothing here reads the environment.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence

import requests

from moodjournal.core.errors import SummarizerError, SummarizerMalformed, SummarizerUnavailable
from moodjournal.domains.insights.prompt import SYSTEM_PROMPT

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 30.0


@dataclass(frozen=True)
class Completion:
    text: str
    prompt_tokens: Optional[int] = None
    response_tokens: Optional[int] = None
    total_tokens: Optional[int] = None


@dataclass(frozen=True)
class Attempt:
    """Outcome of one provider call, handed to the usage recorder."""

    provider: str
    endpoint: str
    success: bool
    response_time_ms: int
    user_id: Optional[int] = None
    completion: Optional[Completion] = None
    error: Optional[str] = None


UsageRecorder = Callable[[Attempt], None]


class ProviderClient:
    """One RapidAPI-hosted model. Subclasses shape the body and parse the reply."""

    name = "provider"
    host = ""
    path = "/"

    def __init__(self, api_key: str, *, timeout: float = DEFAULT_TIMEOUT_SECONDS) -> None:
        self.api_key = api_key
        self.timeout = timeout

    @property
    def url(self) -> str:
        return f"https://{self.host}{self.path}"

    @property
    def endpoint(self) -> str:
        return f"{self.host}{self.path}"

    def build_body(self, prompt: str) -> Any:
        raise NotImplementedError

    def parse_reply(self, data: Any) -> Completion:
        raise NotImplementedError

    def complete(self, prompt: str) -> Completion:
        """
        Send one prompt to the provider.

        Raises:
            SummarizerUnavailable: missing key, transport failure or HTTP error status
            SummarizerMalformed: the reply is not JSON or carries no text
        """
        if not self.api_key:
            raise SummarizerUnavailable(f"{self.name}: RAPIDAPI_KEY is not configured")
        headers = {
            "x-rapidapi-key": self.api_key,
            "x-rapidapi-host": self.host,
            "Content-Type": "application/json",
        }
        try:
            resp = requests.post(self.url, json=self.build_body(prompt), headers=headers, timeout=self.timeout)
            resp.raise_for_status()
        except requests.RequestException as exc:
            raise SummarizerUnavailable(f"{self.name} request failed: {exc}") from exc
        try:
            data = resp.json()
        except ValueError as exc:
            raise SummarizerMalformed(f"{self.name} returned a non-JSON body") from exc
        return self.parse_reply(data)


class ChatGPTClient(ProviderClient):
    name = "chatgpt"
    host = "chatgpt-api8.p.rapidapi.com"

    def build_body(self, prompt: str) -> List[Dict[str, str]]:
        return [
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "user", "content": prompt},
        ]

    def parse_reply(self, data: Any) -> Completion:
        text = data.get("text") if isinstance(data, dict) else None
        if not isinstance(text, str) or not text.strip():
            raise SummarizerMalformed(f"{self.name} reply has no text")
        return Completion(text=text.strip())


class GeminiClient(ProviderClient):
    name = "gemini"
    host = "gemini-pro-ai.p.rapidapi.com"

    def build_body(self, prompt: str) -> Dict[str, Any]:
        return {"contents": [{"role": "user", "parts": [{"text": prompt}]}]}

    def parse_reply(self, data: Any) -> Completion:
        try:
            text = data["candidates"][0]["content"]["parts"][0]["text"]
        except (KeyError, IndexError, TypeError) as exc:
            raise SummarizerMalformed(f"{self.name} reply has no candidates") from exc
        if not isinstance(text, str) or not text.strip():
            raise SummarizerMalformed(f"{self.name} reply has no text")
        usage = data.get("usageMetadata")
        if not isinstance(usage, dict):
            usage = {}
        return Completion(
            text=text.strip(),
            prompt_tokens=usage.get("promptTokenCount"),
            response_tokens=usage.get("candidatesTokenCount"),
            total_tokens=usage.get("totalTokenCount"),
        )


PROVIDERS = {
    ChatGPTClient.name: ChatGPTClient,
    GeminiClient.name: GeminiClient,
}


class FallbackSummarizer:
    """Try each provider once, in order, and return the first text produced."""

    def __init__(self, providers: Sequence[ProviderClient], recorder: Optional[UsageRecorder] = None) -> None:
        if not providers:
            raise ValueError("at least one provider is required")
        self.providers = list(providers)
        self.recorder = recorder

    @property
    def provider_names(self) -> List[str]:
        return [p.name for p in self.providers]

    def summarize(self, prompt: str, *, user_id: Optional[int] = None) -> str:
        failures: List[SummarizerError] = []
        for provider in self.providers:
            started = time.monotonic()
            try:
                completion = provider.complete(prompt)
            except SummarizerError as exc:
                self._record(provider, user_id, started, error=exc)
                logger.warning("AI provider %s failed: %s", provider.name, exc.message)
                failures.append(exc)
                continue
            self._record(provider, user_id, started, completion=completion)
            return completion.text

        detail = "; ".join(f.message for f in failures)
        if all(isinstance(f, SummarizerMalformed) for f in failures):
            raise SummarizerMalformed(f"all AI providers returned malformed replies: {detail}")
        raise SummarizerUnavailable(f"all AI providers failed: {detail}")

    def _record(
        self,
        provider: ProviderClient,
        user_id: Optional[int],
        started: float,
        *,
        completion: Optional[Completion] = None,
        error: Optional[SummarizerError] = None,
    ) -> None:
        if self.recorder is None:
            return
        self.recorder(
            Attempt(
                provider=provider.name,
                endpoint=provider.endpoint,
                success=error is None,
                response_time_ms=int((time.monotonic() - started) * 1000),
                user_id=user_id,
                completion=completion,
                error=error.message if error else None,
            )
        )


def build_summarizer(config: Mapping[str, Any], recorder: Optional[UsageRecorder] = None) -> FallbackSummarizer:
    """Primary provider plus one distinct fallback, from app config."""
    if recorder is None:
        from moodjournal.domains.insights.usage import record_attempt

        recorder = record_attempt

    names: List[str] = []
    for key in ("AI_PROVIDER", "AI_FALLBACK_PROVIDER"):
        name = (config.get(key) or "").strip().lower()
        if not name or name == "none" or name in names:
            continue
        if name not in PROVIDERS:
            raise ValueError(f"unknown AI provider {name!r}; expected one of {sorted(PROVIDERS)}")
        names.append(name)
    if not names:
        names.append(ChatGPTClient.name)

    api_key = config.get("RAPIDAPI_KEY") or ""
    timeout = float(config.get("AI_TIMEOUT_SECONDS") or DEFAULT_TIMEOUT_SECONDS)
    return FallbackSummarizer([PROVIDERS[n](api_key, timeout=timeout) for n in names], recorder)
