"""Question sources for the quiz controller.

``QuizApiClient`` talks to the ``/generate-quiz`` proxy; ``DirectGenerator``
skips the proxy and calls the model service in-process.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Protocol

import httpx
from pydantic import ValidationError

from ..core.config import GenerationConfig
from ..generator import GenerationError, OllamaClient, generate_quiz
from ..models import Question
from ..server.schemas import QuizResponse

__all__ = ["QuizGenerator", "QuizApiClient", "DirectGenerator"]

logger = logging.getLogger(__name__)


class QuizGenerator(Protocol):
    async def generate(self, topic: str) -> List[Question]: ...


class QuizApiClient:
    """POST topics to a running proxy and validate what comes back."""

    def __init__(
        self,
        base_url: str,
        *,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        # No timeout by default: generation can legitimately take minutes.
        self.timeout = timeout
        self._transport = transport

    async def generate(self, topic: str) -> List[Question]:
        url = f"{self.base_url}/generate-quiz"
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self._transport
            ) as client:
                resp = await client.post(url, json={"topic": topic})
        except httpx.HTTPError as exc:
            logger.error(
                "Quiz proxy unreachable",
                extra={"url": url, "error": repr(exc)},
            )
            raise GenerationError(f"Quiz proxy unreachable at {url}") from exc

        if resp.is_error:
            detail = _error_text(resp)
            logger.error(
                "Quiz proxy returned an error",
                extra={"status": resp.status_code, "detail": detail},
            )
            raise GenerationError(detail, public_message=detail)

        try:
            parsed = QuizResponse.model_validate_json(resp.content)
        except ValidationError as exc:
            logger.error(
                "Quiz proxy returned an unexpected body",
                extra={"body": resp.text[:2000]},
            )
            raise GenerationError("Quiz proxy returned an invalid body") from exc
        return [item.to_question() for item in parsed.questions]


def _error_text(resp: httpx.Response) -> str:
    try:
        data = resp.json()
    except ValueError:
        data = None
    if isinstance(data, dict) and isinstance(data.get("error"), str):
        return data["error"]
    return "Failed to generate quiz"


class DirectGenerator:
    """Generate questions in-process through an :class:`OllamaClient`."""

    def __init__(self, client: OllamaClient, *, question_count: int = 5):
        self.client = client
        self.question_count = question_count

    @classmethod
    def from_config(cls, config: GenerationConfig) -> "DirectGenerator":
        return cls(
            OllamaClient.from_config(config),
            question_count=config.question_count,
        )

    async def generate(self, topic: str) -> List[Question]:
        return await generate_quiz(
            topic,
            client=self.client,
            question_count=self.question_count,
        )
