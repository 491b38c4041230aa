"""FastAPI proxy between quiz clients and the local model service."""

from __future__ import annotations

import logging
from typing import Optional

import httpx
from fastapi import APIRouter, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .. import __version__
from ..core.config import AppConfig, default_config
from ..generator import (
    GenerationError,
    InvalidInputError,
    OllamaClient,
    generate_quiz,
)
from .schemas import ErrorResponse, QuestionModel, QuizResponse

logger = logging.getLogger(__name__)

router = APIRouter()


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=message).model_dump(),
    )


@router.get("/")
async def root(request: Request) -> dict:
    """Service banner."""
    return {
        "service": "AI Quiz proxy",
        "status": "running",
        "version": __version__,
        "endpoints": {
            "health": "/health",
            "generate": "POST /generate-quiz",
            "docs": "/docs",
        },
    }


@router.get("/health")
async def health_check(request: Request) -> dict:
    return {"status": "healthy", "model": request.app.state.client.model}


@router.post(
    "/generate-quiz",
    response_model=QuizResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def generate_quiz_route(request: Request):
    """Generate a quiz for ``{"topic": ...}``.

    The body is read by hand so a missing or malformed topic yields the
    400 contract instead of FastAPI's 422 validation payload.
    """
    try:
        payload = await request.json()
    except ValueError:
        payload = None
    topic = payload.get("topic") if isinstance(payload, dict) else None

    config: AppConfig = request.app.state.config
    try:
        questions = await generate_quiz(
            topic,
            client=request.app.state.client,
            question_count=config.generation.question_count,
        )
    except InvalidInputError as exc:
        return _error(exc.status_code, exc.public_message)
    except GenerationError as exc:
        logger.warning(
            "Quiz generation failed",
            extra={"error_type": type(exc).__name__, "detail": str(exc)},
        )
        return _error(exc.status_code, exc.public_message)
    except Exception:
        logger.exception("Unexpected error generating quiz")
        return _error(500, "Internal server error")

    return QuizResponse(
        questions=[QuestionModel.from_question(q) for q in questions]
    )


def create_app(
    config: Optional[AppConfig] = None,
    *,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> FastAPI:
    """Build the proxy app.

    ``transport`` is handed to the Ollama client; tests pass an
    ``httpx.MockTransport`` here.
    """

    resolved = config or default_config()
    app = FastAPI(title="AI Quiz proxy", version=__version__)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.state.config = resolved
    app.state.client = OllamaClient.from_config(
        resolved.generation, transport=transport
    )
    app.include_router(router)
    return app
