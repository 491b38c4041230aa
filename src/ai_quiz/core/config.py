"""Configuration management for ai-quiz.

Settings come from three layers: built-in defaults, an optional TOML file in
the workspace, and environment variables (``.env`` is honoured). The result
is a tree of frozen dataclasses validated up front so the server and the
front end never see a half-valid value.
"""

from __future__ import annotations

import copy
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, MutableMapping, Optional

try:  # Python 3.11+
    import tomllib
except ModuleNotFoundError as exc:  # pragma: no cover - should never happen
    raise RuntimeError("Python 3.11+ required for tomllib support") from exc

from dotenv import load_dotenv

from . import workspace as workspace_mod

CONFIG_FILENAME = "ai_quiz.toml"
CONFIG_PATH_ENV = "AI_QUIZ_CONFIG"

# Environment variable -> dotted config key.
ENV_OVERRIDES: Mapping[str, str] = {
    "OLLAMA_BASE_URL": "generation.base_url",
    "OLLAMA_MODEL": "generation.model",
    "AI_QUIZ_API_URL": "server.api_url",
}


class ConfigError(RuntimeError):
    """Raised when configuration parsing or validation fails."""


@dataclass(frozen=True)
class GenerationConfig:
    base_url: str
    model: str
    temperature: float
    max_tokens: int
    request_timeout_seconds: int
    question_count: int


@dataclass(frozen=True)
class ServerConfig:
    host: str
    port: int
    api_url: str


@dataclass(frozen=True)
class QuizConfig:
    countdown_seconds: int
    share_url: Optional[str]


@dataclass(frozen=True)
class LoggingConfig:
    level: str
    verbose: bool


@dataclass(frozen=True)
class AppConfig:
    generation: GenerationConfig
    server: ServerConfig
    quiz: QuizConfig
    logging: LoggingConfig


@dataclass(frozen=True)
class LoadResult:
    """Resolved configuration plus the workspace it was loaded from."""

    config: AppConfig
    layout: workspace_mod.WorkspaceLayout
    config_path: Optional[Path]

    @property
    def saved_quizzes_path(self) -> Path:
        return self.layout.path_for("quizzes") / "saved_quizzes.json"


def _merge_dict(
    base: MutableMapping[str, Any],
    override: Mapping[str, Any],
    *,
    path: str = "",
) -> None:
    for key, value in override.items():
        dotted = f"{path}{key}"
        if key not in base:
            raise ConfigError(f"Unknown configuration key '{dotted}'.")
        base_value = base[key]
        if isinstance(base_value, MutableMapping):
            if not isinstance(value, Mapping):
                raise ConfigError(
                    "Expected table for '{0}', found {1}.".format(
                        dotted,
                        type(value).__name__,
                    )
                )
            _merge_dict(base_value, value, path=f"{dotted}.")
        else:
            base[key] = value


def _apply_env(tree: MutableMapping[str, Any], env: Mapping[str, str]) -> None:
    for name, dotted in ENV_OVERRIDES.items():
        raw = env.get(name)
        if raw is None or not raw.strip():
            continue
        section, key = dotted.split(".", 1)
        tree[section][key] = raw.strip()


def _require_positive_int(value: Any, *, field: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ConfigError(f"'{field}' must be a positive integer.")
    return value


def _require_bool(value: Any, *, field: str) -> bool:
    if not isinstance(value, bool):
        raise ConfigError(f"'{field}' must be a boolean.")
    return value


def _require_float_range(
    value: Any, *, field: str, min_value: float, max_value: float
) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigError(f"'{field}' must be a number.")
    number = float(value)
    if not (min_value <= number <= max_value):
        raise ConfigError(
            f"'{field}' must be between {min_value} and {max_value}."
        )
    return number


def _require_string(value: Any, *, field: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ConfigError(f"'{field}' must be a non-empty string.")
    return value.strip()


def _require_url(value: Any, *, field: str) -> str:
    url = _require_string(value, field=field)
    if not url.startswith(("http://", "https://")):
        raise ConfigError(f"'{field}' must be an http(s) URL.")
    return url.rstrip("/")


def _coerce_optional_string(value: Any, *, field: str) -> Optional[str]:
    if value is None or value == "":
        return None
    if not isinstance(value, str):
        raise ConfigError(f"'{field}' must be a string when set.")
    return value.strip() or None


def _build_generation(section: Mapping[str, Any]) -> GenerationConfig:
    return GenerationConfig(
        base_url=_require_url(
            section.get("base_url"), field="generation.base_url"
        ),
        model=_require_string(section.get("model"), field="generation.model"),
        temperature=_require_float_range(
            section.get("temperature"),
            field="generation.temperature",
            min_value=0.0,
            max_value=2.0,
        ),
        max_tokens=_require_positive_int(
            section.get("max_tokens"), field="generation.max_tokens"
        ),
        request_timeout_seconds=_require_positive_int(
            section.get("request_timeout_seconds"),
            field="generation.request_timeout_seconds",
        ),
        question_count=_require_positive_int(
            section.get("question_count"), field="generation.question_count"
        ),
    )


def _build_server(section: Mapping[str, Any]) -> ServerConfig:
    port = _require_positive_int(section.get("port"), field="server.port")
    if port > 65535:
        raise ConfigError("'server.port' must be at most 65535.")
    return ServerConfig(
        host=_require_string(section.get("host"), field="server.host"),
        port=port,
        api_url=_require_url(section.get("api_url"), field="server.api_url"),
    )


def _build_quiz(section: Mapping[str, Any]) -> QuizConfig:
    return QuizConfig(
        countdown_seconds=_require_positive_int(
            section.get("countdown_seconds"), field="quiz.countdown_seconds"
        ),
        share_url=_coerce_optional_string(
            section.get("share_url"), field="quiz.share_url"
        ),
    )


def _build_logging(section: Mapping[str, Any]) -> LoggingConfig:
    level = _require_string(section.get("level"), field="logging.level").upper()
    allowed = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
    if level not in allowed:
        raise ConfigError(
            "logging.level must be one of "
            "DEBUG, INFO, WARNING, ERROR, CRITICAL."
        )
    verbose = _require_bool(section.get("verbose"), field="logging.verbose")
    return LoggingConfig(level=level, verbose=verbose)


def build_config(tree: Mapping[str, Any]) -> AppConfig:
    """Validate a fully merged tree into an :class:`AppConfig`."""

    return AppConfig(
        generation=_build_generation(tree["generation"]),
        server=_build_server(tree["server"]),
        quiz=_build_quiz(tree["quiz"]),
        logging=_build_logging(tree["logging"]),
    )


def _load_toml(path: Path) -> Mapping[str, Any]:
    try:
        with path.open("rb") as fh:
            return tomllib.load(fh)
    except FileNotFoundError as exc:
        raise ConfigError(f"Config file not found: {path}") from exc
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"Failed to parse config TOML: {exc}") from exc


def load_config(
    *,
    config_path: Optional[Path] = None,
    env: Optional[Mapping[str, str]] = None,
    workspace_path: Optional[Path] = None,
) -> LoadResult:
    """Load configuration applying env > TOML > defaults precedence.

    A missing default config file is fine; a missing file that was asked for
    explicitly (argument or ``AI_QUIZ_CONFIG``) is an error.
    """

    if env is None:
        load_dotenv()
        env = os.environ

    try:
        layout = workspace_mod.ensure_workspace(env=env, path=workspace_path)
    except workspace_mod.WorkspaceError as exc:
        raise ConfigError(str(exc)) from exc

    explicit = config_path
    if explicit is None and env.get(CONFIG_PATH_ENV):
        explicit = Path(env[CONFIG_PATH_ENV])
    if explicit is not None:
        requested = explicit.expanduser().resolve()
    else:
        requested = layout.path_for("config") / CONFIG_FILENAME

    tree = default_tree()
    loaded_path: Optional[Path] = None
    if requested.exists() or explicit is not None:
        parsed = _load_toml(requested)
        _merge_dict(tree, parsed)
        loaded_path = requested
    _apply_env(tree, env)

    return LoadResult(
        config=build_config(tree),
        layout=layout,
        config_path=loaded_path,
    )


def default_tree() -> Dict[str, Any]:
    """Return a copy of the default configuration tree."""

    return copy.deepcopy(_DEFAULTS)


def default_config() -> AppConfig:
    return build_config(default_tree())


def config_template() -> str:
    """Return the TOML template recommended for new installs."""

    return _CONFIG_TEMPLATE.strip() + "\n"


def write_template(
    path: Path, *, overwrite: bool = False, mode: int = 0o600
) -> Path:
    """Write the default template to ``path``."""

    path.parent.mkdir(parents=True, exist_ok=True)
    if path.exists() and not overwrite:
        raise ConfigError(f"Config already exists: {path}")
    path.write_text(config_template(), encoding="utf-8")
    try:
        path.chmod(mode)
    except PermissionError:
        pass
    return path


_DEFAULTS: Dict[str, Any] = {
    "generation": {
        "base_url": "http://localhost:11434",
        "model": "llama3.2:3b",
        "temperature": 0.7,
        "max_tokens": 2000,
        "request_timeout_seconds": 120,
        "question_count": 5,
    },
    "server": {
        "host": "127.0.0.1",
        "port": 8000,
        "api_url": "http://127.0.0.1:8000",
    },
    "quiz": {
        "countdown_seconds": 300,
        "share_url": None,
    },
    "logging": {
        "level": "INFO",
        "verbose": False,
    },
}


_CONFIG_TEMPLATE = """
# ai-quiz configuration

[generation]
# Ollama endpoint and model (OLLAMA_BASE_URL / OLLAMA_MODEL override these)
base_url = "http://localhost:11434"
model = "llama3.2:3b"
# Sampling temperature (0.0-2.0) and output cap passed as num_predict
temperature = 0.7
max_tokens = 2000
request_timeout_seconds = 120
question_count = 5

[server]
host = "127.0.0.1"
port = 8000
# Where `ai-quiz play` reaches the proxy (AI_QUIZ_API_URL overrides)
api_url = "http://127.0.0.1:8000"

[quiz]
# Seconds on the clock for every play-through
countdown_seconds = 300
# Link appended to shared results copied to the clipboard
# share_url = "https://example.com/quiz"

[logging]
level = "INFO"
verbose = false
"""
