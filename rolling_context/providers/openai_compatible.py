"""OpenAICompatibleProvider: chat completions over httpx, plain and streamed.

Works with the OpenAI API or any server exposing /v1/chat/completions.
"""

from __future__ import annotations

import json
import os
from collections.abc import Iterator

import httpx

from ..types import LLMProviderError, ProviderConfig


class OpenAICompatibleProvider:
    """Completion service backed by an OpenAI-compatible chat completions API."""

    def __init__(
        self,
        config: ProviderConfig | None = None,
        api_key: str | None = None,
        organization: str | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.config = config or ProviderConfig()
        self.base_url = self.config.base_url.rstrip("/")
        self.model = self.config.model
        self.api_key = api_key or os.environ.get(self.config.api_key_env, "")
        self.organization = organization or os.environ.get(self.config.organization_env, "")
        self._transport = transport
        self.last_usage: dict = {}  # populated after each complete() call
        if not self.api_key:
            raise LLMProviderError(
                f"No API key. Set {self.config.api_key_env} or pass --api-key.",
                provider="openai",
            )

    def _headers(self) -> dict:
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.api_key}",
        }
        if self.organization:
            headers["OpenAI-Organization"] = self.organization
        return headers

    def _payload(self, messages: list[dict], max_tokens: int, stream: bool) -> dict:
        payload = {
            "model": self.model,
            "messages": messages,
            "max_tokens": max_tokens,
        }
        if self.config.temperature is not None:
            payload["temperature"] = self.config.temperature
        if stream:
            payload["stream"] = True
        return payload

    def _client(self) -> httpx.Client:
        return httpx.Client(timeout=self.config.timeout, transport=self._transport)

    def complete(self, messages: list[dict], max_tokens: int) -> str:
        """Send a chat completion request and return the message text."""
        url = f"{self.base_url}/chat/completions"
        payload = self._payload(messages, max_tokens, stream=False)

        try:
            with self._client() as client:
                response = client.post(url, headers=self._headers(), json=payload)
        except httpx.HTTPError as e:
            raise LLMProviderError(f"HTTP error: {e}", provider="openai") from e

        if response.status_code != 200:
            raise LLMProviderError(
                f"HTTP {response.status_code}: {response.text}",
                provider="openai",
                status_code=response.status_code,
            )

        data = response.json()
        self.last_usage = data.get("usage", {})
        choices = data.get("choices", [])
        if choices:
            return choices[0].get("message", {}).get("content") or ""
        return ""

    def stream(self, messages: list[dict], max_tokens: int) -> Iterator[str]:
        """Yield text delta chunks from a streamed chat completion."""
        url = f"{self.base_url}/chat/completions"
        payload = self._payload(messages, max_tokens, stream=True)

        try:
            with self._client() as client:
                with client.stream("POST", url, headers=self._headers(), json=payload) as resp:
                    if resp.status_code != 200:
                        resp.read()
                        raise LLMProviderError(
                            f"HTTP {resp.status_code}: {resp.text}",
                            provider="openai",
                            status_code=resp.status_code,
                        )

                    for line in resp.iter_lines():
                        if not line.startswith("data: "):
                            continue
                        data_str = line[6:]
                        if data_str == "[DONE]":
                            break
                        try:
                            event = json.loads(data_str)
                        except json.JSONDecodeError:
                            continue

                        if "error" in event:
                            error = event["error"]
                            if isinstance(error, dict):
                                error = error.get("message", "Unknown error")
                            raise LLMProviderError(str(error), provider="openai")
                        choices = event.get("choices") or [{}]
                        content = choices[0].get("delta", {}).get("content")
                        if content:
                            yield content
        except httpx.HTTPError as e:
            raise LLMProviderError(f"HTTP error: {e}", provider="openai") from e
