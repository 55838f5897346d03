"""Costeo AI configuration settings.

Loads configuration from environment variables with sensible defaults.
Secrets are loaded via config.secrets (environment or .env file).
"""

import os
from typing import Optional
from dataclasses import dataclass, field
from dotenv import load_dotenv

# Load .env file for local development (model, limits, feature flags, etc.)
load_dotenv()


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ("1", "true", "yes", "on")


def _env_optional_int(name: str) -> Optional[int]:
    value = os.getenv(name)
    return int(value) if value else None


@dataclass
class Settings:
    """Application settings loaded from environment variables.

    Note: The OpenAI key should be accessed via the config.secrets module.
    The openai_api_key property is provided for convenience and delegates to it.

    The direct-call ceiling and the condensation chunk size are independent
    knobs; neither is derived from the other.
    """

    # LLM Configuration (non-secrets)
    llm_model: str = field(default_factory=lambda: os.getenv("OPENAI_MODEL", "gpt-4o-mini"))
    llm_temperature: float = field(default_factory=lambda: float(os.getenv("LLM_TEMPERATURE", "0.2")))
    llm_timeout_seconds: float = field(default_factory=lambda: float(os.getenv("LLM_TIMEOUT_SECONDS", "120")))
    llm_max_tokens: Optional[int] = field(default_factory=lambda: _env_optional_int("LLM_MAX_TOKENS"))

    # Source size policy (characters)
    max_source_chars: int = field(default_factory=lambda: int(os.getenv("MAX_SOURCE_CHARS", "250000")))
    direct_max_chars: int = field(default_factory=lambda: int(os.getenv("DIRECT_MAX_CHARS", "12000")))

    # Condensation (large inputs)
    condensation_enabled: bool = field(default_factory=lambda: _env_bool("CONDENSATION_ENABLED", "true"))
    condense_chunk_chars: int = field(default_factory=lambda: int(os.getenv("CONDENSE_CHUNK_CHARS", "9000")))
    condense_concurrency: int = field(default_factory=lambda: int(os.getenv("CONDENSE_CONCURRENCY", "4")))

    # Catalogs
    catalog_sample_size: int = field(default_factory=lambda: int(os.getenv("CATALOG_SAMPLE_SIZE", "50")))
    search_limit: int = field(default_factory=lambda: int(os.getenv("SEARCH_LIMIT", "20")))

    # HTTP
    port: int = field(default_factory=lambda: int(os.getenv("PORT", "10000")))
    max_upload_mb: int = field(default_factory=lambda: int(os.getenv("MAX_UPLOAD_MB", "12")))

    # Logging
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))

    # Internal: cached secret value (use openai_api_key property instead)
    _openai_api_key: Optional[str] = field(default=None, repr=False)

    @property
    def openai_api_key(self) -> Optional[str]:
        """Get OpenAI API key from the secrets module."""
        if self._openai_api_key is None:
            from config.secrets import get_openai_api_key
            self._openai_api_key = get_openai_api_key()
        return self._openai_api_key

    @property
    def max_content_length(self) -> int:
        """Maximum request body size in bytes."""
        return self.max_upload_mb * 1024 * 1024

    def validate(self) -> None:
        """Validate settings are coherent.

        The OpenAI key is not required: without it the service still serves
        catalogs and saved costings, and estimation answers 503.

        Raises:
            ValueError: If a limit is not positive.
        """
        for name in (
            "max_source_chars",
            "direct_max_chars",
            "condense_chunk_chars",
            "condense_concurrency",
            "catalog_sample_size",
            "search_limit",
        ):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be positive")
        if self.llm_timeout_seconds <= 0:
            raise ValueError("llm_timeout_seconds must be positive")


# Singleton settings instance
settings = Settings()
