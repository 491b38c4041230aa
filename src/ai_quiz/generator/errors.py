"""Failure taxonomy for quiz generation."""

from __future__ import annotations

__all__ = [
    "GenerationError",
    "InvalidInputError",
    "UpstreamError",
    "ParseError",
    "SchemaError",
]


class GenerationError(RuntimeError):
    """Base class for anything that stops a quiz from being generated.

    ``public_message`` is safe to show to whoever called the proxy; the
    exception text itself may carry diagnostics and is only logged.
    """

    public_message = "Internal server error"
    status_code = 500

    def __init__(self, message: str = "", *, public_message: str | None = None):
        super().__init__(message or self.public_message)
        if public_message is not None:
            self.public_message = public_message


class InvalidInputError(GenerationError):
    """The topic was missing, blank or not a string."""

    public_message = "Topic is required"
    status_code = 400


class UpstreamError(GenerationError):
    """The model service was unreachable or answered with a failure."""

    public_message = "Failed to generate quiz from Ollama"

    def __init__(
        self,
        message: str = "",
        *,
        status_code: int | None = None,
        body: str = "",
    ):
        super().__init__(message)
        self.upstream_status = status_code
        self.body = body


class ParseError(GenerationError):
    """The model output could not be read as JSON at all."""

    public_message = "Failed to parse quiz data from Ollama response"


class SchemaError(GenerationError):
    """The model output parsed but lacks a usable question list."""

    public_message = "Invalid quiz structure from Ollama"
