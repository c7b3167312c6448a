"""Configuration management -- reads from environment with sensible defaults."""

import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

from scout import __version__

load_dotenv()


def _env_bool(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Settings:
    """Centralised settings read once from env vars.

    The pipeline never reads ``settings`` itself; it is handed a ``Settings``
    instance through its ``SearchContext``.  Use ``dataclasses.replace`` to
    derive per-run variations.
    """

    # --- Grounding ---------------------------------------------------------
    grounding_provider: str = field(
        default_factory=lambda: os.getenv("GROUNDING_PROVIDER", "gemini").strip().lower()
    )
    gemini_api_key: str = field(default_factory=lambda: os.getenv("GEMINI_API_KEY", ""))
    gemini_model: str = field(
        default_factory=lambda: os.getenv("GEMINI_MODEL", "gemini-2.5-flash")
    )
    tavily_api_key: str = field(default_factory=lambda: os.getenv("TAVILY_API_KEY", ""))

    # --- Query translation (optional) -------------------------------------
    openai_api_key: str = field(default_factory=lambda: os.getenv("OPENAI_API_KEY", ""))
    translation_model: str = field(
        default_factory=lambda: os.getenv("OPENAI_TRANSLATION_MODEL", "gpt-5-mini")
    )

    # --- Concurrency / retry -----------------------------------------------
    grounding_concurrency: int = field(
        default_factory=lambda: int(os.getenv("GROUNDING_CONCURRENCY", "4"))
    )
    fetch_concurrency: int = field(
        default_factory=lambda: int(os.getenv("FETCH_CONCURRENCY", "5"))
    )
    grounding_timeout: float = field(
        default_factory=lambda: float(os.getenv("GROUNDING_TIMEOUT", "60"))
    )
    fetch_timeout: float = field(default_factory=lambda: float(os.getenv("FETCH_TIMEOUT", "15")))
    grounding_max_attempts: int = field(
        default_factory=lambda: int(os.getenv("GROUNDING_MAX_ATTEMPTS", "3"))
    )
    fetch_max_attempts: int = field(
        default_factory=lambda: int(os.getenv("FETCH_MAX_ATTEMPTS", "2"))
    )
    backoff_base: float = field(default_factory=lambda: float(os.getenv("BACKOFF_BASE", "0.5")))
    backoff_max: float = field(default_factory=lambda: float(os.getenv("BACKOFF_MAX", "8")))

    # --- Fetching ----------------------------------------------------------
    max_response_bytes: int = field(
        default_factory=lambda: int(os.getenv("MAX_RESPONSE_BYTES", "10000000"))
    )
    max_fetch_urls: int = field(default_factory=lambda: int(os.getenv("MAX_FETCH_URLS", "10")))
    allow_private_hosts: bool = field(default_factory=lambda: _env_bool("ALLOW_PRIVATE_HOSTS"))
    user_agent: str = field(
        default_factory=lambda: os.getenv("USER_AGENT", f"scout/{__version__}")
    )

    # --- Results -----------------------------------------------------------
    snippet_chars: int = field(default_factory=lambda: int(os.getenv("SNIPPET_CHARS", "500")))

    # --- Logging -----------------------------------------------------------
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))
    log_file: str = field(default_factory=lambda: os.getenv("LOG_FILE", ""))
    run_log_file: str = field(default_factory=lambda: os.getenv("RUN_LOG_FILE", ""))

    # --- Guardrails --------------------------------------------------------
    max_query_length: int = field(
        default_factory=lambda: int(os.getenv("MAX_QUERY_LENGTH", "500"))
    )


# Module-level instance for the CLI and logging defaults.
settings = Settings()
