from .client import OllamaClient
from .errors import (
    GenerationError,
    InvalidInputError,
    ParseError,
    SchemaError,
    UpstreamError,
)
from .prompt import build_quiz_prompt
from .sanitizer import (
    ParsedQuestions,
    ParseFailure,
    SchemaFailure,
    coerce_question,
    parse_model_output,
    sanitize_questions,
    strip_code_fences,
)
from .service import generate_quiz, validate_topic

__all__ = [
    "OllamaClient",
    "GenerationError",
    "InvalidInputError",
    "ParseError",
    "SchemaError",
    "UpstreamError",
    "build_quiz_prompt",
    "ParsedQuestions",
    "ParseFailure",
    "SchemaFailure",
    "coerce_question",
    "parse_model_output",
    "sanitize_questions",
    "strip_code_fences",
    "generate_quiz",
    "validate_topic",
]
