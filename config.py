from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path


def load_env_file(path: Path) -> None:
    """Load KEY=VALUE pairs from *path* into ``os.environ`` (no extra dependency needed)."""
    if not path.is_file():
        return
    for line in path.read_text().splitlines():
        line = line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, _, value = line.partition("=")
        key, value = key.strip(), value.strip().strip('"').strip("'")
        if value and key not in os.environ:  # don't override existing env vars
            os.environ[key] = value


load_env_file(Path.cwd() / ".env")
load_env_file(Path(__file__).resolve().parent / ".env")


def _api_key_from_env() -> str:
    return os.getenv("OPENROUTER_API_KEY") or os.getenv("LLM_API_KEY", "")


def _optional_int(name: str) -> int | None:
    raw = os.getenv(name)
    return int(raw) if raw else None


@dataclass(frozen=True)
class Settings:
    """Application-wide settings resolved from environment variables."""

    # LLM
    llm_api_key: str = field(default_factory=_api_key_from_env)
    llm_api_base: str = field(
        default_factory=lambda: os.getenv(
            "LLM_API_BASE", "https://openrouter.ai/api/v1"
        )
    )
    llm_model: str = field(
        default_factory=lambda: os.getenv("LLM_MODEL", "openai/gpt-oss-20b")
    )
    llm_timeout: int = field(default_factory=lambda: int(os.getenv("LLM_TIMEOUT", "30")))
    llm_max_tokens: int | None = field(default_factory=lambda: _optional_int("LLM_MAX_TOKENS"))

    # Retry policy for the transport
    retry_max_attempts: int = field(
        default_factory=lambda: int(os.getenv("RETRY_MAX_ATTEMPTS", "3"))
    )
    retry_base_delay: float = field(
        default_factory=lambda: float(os.getenv("RETRY_BASE_DELAY", "1.0"))
    )

    # Context budget (characters)
    max_context_chars: int = field(
        default_factory=lambda: int(os.getenv("MAX_CONTEXT_CHARS", "8000"))
    )
    per_file_max_chars: int = field(
        default_factory=lambda: int(os.getenv("PER_FILE_MAX_CHARS", "2000"))
    )

    # Relevance cut-offs
    keyword_match_limit: int = field(
        default_factory=lambda: int(os.getenv("KEYWORD_MATCH_LIMIT", "3"))
    )
    continuity_window: int = field(
        default_factory=lambda: int(os.getenv("CONTINUITY_WINDOW", "4"))
    )
    history_limit: int = field(
        default_factory=lambda: int(os.getenv("HISTORY_LIMIT", "20"))
    )

    # Project scan
    scan_max_depth: int = field(
        default_factory=lambda: int(os.getenv("SCAN_MAX_DEPTH", "5"))
    )
    max_file_size: int = field(
        default_factory=lambda: int(os.getenv("MAX_FILE_SIZE", str(1024 * 1024)))
    )

    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "WARNING"))

    @property
    def is_valid_api_key(self) -> bool:
        key = self.llm_api_key.strip()
        return len(key) > 10 and key.startswith("sk-")


def get_settings() -> Settings:
    return Settings()
