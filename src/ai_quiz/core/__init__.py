"""Core shared helpers for ai-quiz subcommands."""

from __future__ import annotations

from .config import (
    AppConfig,
    ConfigError,
    LoadResult,
    default_config,
    load_config,
    write_template,
)
from .logging import JsonLogFormatter, configure_logger
from .workspace import (
    WORKSPACE_ENV,
    WorkspaceError,
    WorkspaceLayout,
    describe_layout,
    ensure_workspace,
)

__all__ = [
    "AppConfig",
    "ConfigError",
    "LoadResult",
    "default_config",
    "load_config",
    "write_template",
    "configure_logger",
    "JsonLogFormatter",
    "ensure_workspace",
    "describe_layout",
    "WorkspaceLayout",
    "WorkspaceError",
    "WORKSPACE_ENV",
]
