"""Thin async client for the Ollama ``/api/generate`` endpoint."""

from __future__ import annotations

import logging
from typing import Any, Optional

import httpx

from ..core.config import GenerationConfig
from .errors import UpstreamError

__all__ = ["OllamaClient"]

logger = logging.getLogger(__name__)

_GENERATE_PATH = "/api/generate"


class OllamaClient:
    """Send one non-streaming completion request per call.

    ``transport`` lets callers (tests, mostly) swap the network for an
    ``httpx.MockTransport``.
    """

    def __init__(
        self,
        *,
        base_url: str,
        model: str,
        temperature: float = 0.7,
        max_tokens: int = 2000,
        timeout: float = 120.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.timeout = timeout
        self._transport = transport

    @classmethod
    def from_config(
        cls,
        config: GenerationConfig,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> "OllamaClient":
        return cls(
            base_url=config.base_url,
            model=config.model,
            temperature=config.temperature,
            max_tokens=config.max_tokens,
            timeout=float(config.request_timeout_seconds),
            transport=transport,
        )

    def build_payload(self, prompt: str) -> dict[str, Any]:
        return {
            "model": self.model,
            "prompt": prompt,
            "stream": False,
            "options": {
                "temperature": self.temperature,
                "num_predict": self.max_tokens,
            },
        }

    async def generate(self, prompt: str) -> str:
        """Return the raw ``response`` text for ``prompt``.

        Any transport failure, non-2xx status or body without a string
        ``response`` field raises :class:`UpstreamError`.
        """

        url = f"{self.base_url}{_GENERATE_PATH}"
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self._transport
            ) as client:
                resp = await client.post(url, json=self.build_payload(prompt))
        except httpx.HTTPError as exc:
            logger.error(
                "Ollama request failed",
                extra={"url": url, "error": f"{type(exc).__name__}: {exc}"},
            )
            raise UpstreamError(f"Ollama unreachable at {url}: {exc}") from exc

        if resp.is_error:
            logger.error(
                "Ollama API error",
                extra={"status": resp.status_code, "body": resp.text[:2000]},
            )
            raise UpstreamError(
                f"Ollama returned HTTP {resp.status_code}",
                status_code=resp.status_code,
                body=resp.text,
            )

        try:
            data = resp.json()
        except ValueError as exc:
            logger.error(
                "Ollama returned a non-JSON body",
                extra={"body": resp.text[:2000]},
            )
            raise UpstreamError("Ollama returned a non-JSON body") from exc
        text = data.get("response") if isinstance(data, dict) else None
        if not isinstance(text, str):
            logger.error(
                "Ollama body has no response text",
                extra={"body": resp.text[:2000]},
            )
            raise UpstreamError("Ollama body has no 'response' field")
        logger.debug(
            "Ollama response received",
            extra={"model": self.model, "chars": len(text)},
        )
        return text
