"""Runtime settings read from the environment, plus grammar registry."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Annotated, Any

from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode


class Settings(BaseSettings):
    """Reads from .env file and ``STRUCTLIT_``-prefixed environment variables."""

    # Logging
    log_level: str = "WARNING"

    # Loader
    go_binary: str = "go"
    work_dir: Path | None = None
    build_tags: Annotated[list[str], NoDecode] = []
    load_timeout_seconds: int = 300

    # Analysis
    walk_max_concurrency: int = 4

    @field_validator("build_tags", mode="before")
    @classmethod
    def _parse_tags(cls, v: Any) -> Any:
        """Accept comma-separated string or JSON array."""
        if isinstance(v, str):
            return [s.strip() for s in v.split(",") if s.strip()]
        return v

    @field_validator("walk_max_concurrency")
    @classmethod
    def _validate_concurrency(cls, v: int) -> int:
        if v < 1:
            raise ValueError(
                "walk_max_concurrency must be at least 1"
            )
        return v

    @field_validator("log_level")
    @classmethod
    def _validate_level(cls, v: str) -> str:
        level = v.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"unknown log level: {v}")
        return level

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "env_prefix": "STRUCTLIT_",
        "extra": "ignore",
    }


# Grammar module name → import path for tree-sitter grammars
GRAMMAR_MODULES: dict[str, str] = {
    "go": "tree_sitter_go",
}
