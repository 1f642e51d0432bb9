"""
config.py — Central settings for the SOP-to-Quiz pipeline
==========================================================
All configuration is loaded from environment variables / .env file.
Copy .env.example → .env and fill in your values.

Provider selection (highest available tier wins):
  1. Azure OpenAI  — AZURE_OPENAI_ENDPOINT and AZURE_OPENAI_API_KEY are real values
  2. OpenAI        — OPENAI_API_KEY is a real value
  3. mock          — neither configured, or FORCE_MOCK_MODE=true; the generator
                     returns the built-in fallback questions
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

# Load .env into os.environ (no-op if already set, safe to call multiple times)
load_dotenv(override=False)


MAX_UPLOAD_BYTES = 10 * 1024 * 1024   # 10 MiB, the limit uploads are validated against


# ─── Helpers ────────────────────────────────────────────────────────────────

def _is_placeholder(value: str) -> bool:
    """Return True if the value looks like an unfilled template placeholder."""
    return not value or "<" in value or value.startswith("your-") or value == "PLACEHOLDER"


# ─── Azure OpenAI ────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class AzureOpenAIConfig:
    endpoint:    str
    api_key:     str
    deployment:  str
    api_version: str

    @property
    def is_configured(self) -> bool:
        """True when both endpoint and key are real (non-placeholder) values."""
        return (
            bool(self.endpoint)
            and bool(self.api_key)
            and not _is_placeholder(self.endpoint)
            and not _is_placeholder(self.api_key)
        )


# ─── OpenAI ──────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class OpenAIConfig:
    api_key:  str
    model:    str
    base_url: str   # empty → SDK default

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key) and not _is_placeholder(self.api_key)


# ─── Question generation ─────────────────────────────────────────────────────

@dataclass(frozen=True)
class GenerationConfig:
    temperature:       float = 0.7
    max_tokens:        int   = 2000
    prompt_char_limit: int   = 3000   # only this much document text reaches the model
    max_questions:     int   = 20
    timeout_s:         float = 60.0


# ─── App-level settings ──────────────────────────────────────────────────────

@dataclass(frozen=True)
class AppConfig:
    force_mock_mode:  bool
    log_level:        str
    max_upload_bytes: int = MAX_UPLOAD_BYTES
    min_text_chars:   int = 50


# ─── Master settings object ──────────────────────────────────────────────────

@dataclass(frozen=True)
class Settings:
    azure:      AzureOpenAIConfig
    openai:     OpenAIConfig
    generation: GenerationConfig
    app:        AppConfig

    @property
    def live_mode(self) -> bool:
        """True when some model provider is configured and FORCE_MOCK_MODE is false."""
        return (
            (self.azure.is_configured or self.openai.is_configured)
            and not self.app.force_mock_mode
        )

    @property
    def provider(self) -> str:
        """"azure_openai" | "openai" | "mock"."""
        if not self.live_mode:
            return "mock"
        return "azure_openai" if self.azure.is_configured else "openai"

    def status_summary(self) -> dict[str, str]:
        """Return a dict of service → status badge for the UI."""
        def badge(ok: bool) -> str:
            return "🟢 Live" if ok else "⚪ Not configured"

        return {
            "Azure OpenAI":   badge(self.azure.is_configured),
            "OpenAI":         badge(self.openai.is_configured),
            "Active provider": self.provider,
        }


def get_settings() -> Settings:
    """Load all configuration from environment variables."""
    _str   = lambda k, d="": os.getenv(k, d).strip()
    _int   = lambda k, d=0: int(os.getenv(k, str(d)) or d)
    _float = lambda k, d=0.0: float(os.getenv(k, str(d)) or d)
    _bool  = lambda k, d=False: os.getenv(k, str(d)).lower() in ("1", "true", "yes")

    return Settings(
        azure=AzureOpenAIConfig(
            endpoint    = _str("AZURE_OPENAI_ENDPOINT").rstrip("/"),
            api_key     = _str("AZURE_OPENAI_API_KEY"),
            deployment  = _str("AZURE_OPENAI_DEPLOYMENT", "gpt-4o"),
            api_version = _str("AZURE_OPENAI_API_VERSION", "2024-12-01-preview"),
        ),
        openai=OpenAIConfig(
            api_key  = _str("OPENAI_API_KEY"),
            model    = _str("OPENAI_MODEL", "gpt-3.5-turbo"),
            base_url = _str("OPENAI_BASE_URL").rstrip("/"),
        ),
        generation=GenerationConfig(
            temperature       = _float("QUIZ_TEMPERATURE", 0.7),
            max_tokens        = _int("QUIZ_MAX_TOKENS", 2000),
            prompt_char_limit = _int("QUIZ_PROMPT_CHAR_LIMIT", 3000),
            max_questions     = _int("QUIZ_MAX_QUESTIONS", 20),
            timeout_s         = _float("QUIZ_TIMEOUT_S", 60.0),
        ),
        app=AppConfig(
            force_mock_mode  = _bool("FORCE_MOCK_MODE", False),
            log_level        = _str("LOG_LEVEL", "INFO").upper(),
            max_upload_bytes = _int("MAX_UPLOAD_BYTES", MAX_UPLOAD_BYTES),
            min_text_chars   = _int("MIN_TEXT_CHARS", 50),
        ),
    )
