from __future__ import annotations

import asyncio

import httpx
import pytest

from ai_quiz.core.config import default_config
from ai_quiz.generator import (
    InvalidInputError,
    OllamaClient,
    ParseError,
    UpstreamError,
    build_quiz_prompt,
    generate_quiz,
    validate_topic,
)
from fixtures import RecordingOllama, quiz_text


def _client(ollama: RecordingOllama, **kwargs) -> OllamaClient:
    return OllamaClient(
        base_url="http://ollama.test/",
        model="llama3.2:3b",
        transport=ollama.transport,
        **kwargs,
    )


def test_prompt_is_deterministic_and_embeds_requirements():
    prompt = build_quiz_prompt("Photosynthesis")
    assert prompt == build_quiz_prompt("Photosynthesis")
    assert '"Photosynthesis"' in prompt
    assert "exactly 5 questions" in prompt
    assert "exactly 4 options" in prompt
    assert "correctAnswer" in prompt
    assert "no markdown formatting, no code blocks" in prompt


def test_prompt_honours_question_count():
    assert "exactly 3 questions" in build_quiz_prompt("X", question_count=3)


def test_build_payload_matches_generate_contract():
    client = OllamaClient(
        base_url="http://ollama.test",
        model="m",
        temperature=0.5,
        max_tokens=123,
    )
    assert client.build_payload("hi") == {
        "model": "m",
        "prompt": "hi",
        "stream": False,
        "options": {"temperature": 0.5, "num_predict": 123},
    }


def test_from_config_uses_generation_settings():
    config = default_config().generation
    client = OllamaClient.from_config(config)
    assert client.base_url == "http://localhost:11434"
    assert client.model == "llama3.2:3b"
    assert client.max_tokens == 2000
    assert client.timeout == 120.0


def test_generate_posts_once_and_returns_response_text():
    ollama = RecordingOllama(["model text"])
    text = asyncio.run(_client(ollama).generate("prompt"))
    assert text == "model text"
    assert len(ollama.requests) == 1
    request = ollama.requests[0]
    assert request.method == "POST"
    assert str(request.url) == "http://ollama.test/api/generate"
    assert ollama.payload()["stream"] is False


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(500, text="model not found"),
        httpx.Response(200, text="not json"),
        httpx.Response(200, json={"done": True}),
        httpx.ConnectError("refused"),
    ],
)
def test_generate_failures_raise_upstream_error(response):
    ollama = RecordingOllama([response])
    with pytest.raises(UpstreamError) as excinfo:
        asyncio.run(_client(ollama).generate("prompt"))
    assert excinfo.value.public_message == "Failed to generate quiz from Ollama"


def test_upstream_error_keeps_status_and_body():
    ollama = RecordingOllama([httpx.Response(404, text="no such model")])
    with pytest.raises(UpstreamError) as excinfo:
        asyncio.run(_client(ollama).generate("prompt"))
    assert excinfo.value.upstream_status == 404
    assert excinfo.value.body == "no such model"
    assert excinfo.value.status_code == 500


def test_validate_topic():
    assert validate_topic("  Rust  ") == "Rust"
    for bad in (None, "", "   ", 42):
        with pytest.raises(InvalidInputError):
            validate_topic(bad)


def test_generate_quiz_end_to_end():
    ollama = RecordingOllama([quiz_text(5, fenced=True)])
    questions = asyncio.run(generate_quiz(" Astronomy ", client=_client(ollama)))
    assert len(questions) == 5
    assert '"Astronomy"' in ollama.payload()["prompt"]


def test_generate_quiz_rejects_blank_topic_before_network():
    ollama = RecordingOllama(["unused"])
    with pytest.raises(InvalidInputError):
        asyncio.run(generate_quiz("  ", client=_client(ollama)))
    assert ollama.requests == []


def test_generate_quiz_parse_failure_is_not_retried():
    ollama = RecordingOllama(["no json here"])
    with pytest.raises(ParseError):
        asyncio.run(generate_quiz("Astronomy", client=_client(ollama)))
    assert len(ollama.requests) == 1
