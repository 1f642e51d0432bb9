"""
llm_client.py — Text-generation client
======================================
The generator only needs "one prompt in, one text reply out".  That contract
is the TextGenerationClient protocol; OpenAIChatClient implements it over the
``openai`` SDK for both Azure OpenAI and OpenAI, and test code passes any
object with a matching ``complete`` method.

Provider selection mirrors config.Settings.provider:
  1. Azure OpenAI  — AzureOpenAI(azure_endpoint, api_key, api_version),
                     model = deployment name
  2. OpenAI        — OpenAI(api_key, base_url), model = OPENAI_MODEL
  3. mock          — build_text_client() returns None; the generator answers
                     with the fallback question set

SDK exceptions are translated into the GenerationError family so nothing
above this module imports ``openai``.
"""

from __future__ import annotations

import logging
from typing import Any, Optional, Protocol, runtime_checkable

import openai
from openai import AzureOpenAI, OpenAI

from sop_quiz.config import GenerationConfig, Settings, get_settings
from sop_quiz.errors import (
    AuthenticationFailed,
    GenerationError,
    GenerationFailed,
    RateLimited,
    ServiceUnavailable,
)

logger = logging.getLogger(__name__)


@runtime_checkable
class TextGenerationClient(Protocol):
    """Anything that can turn a prompt into a text reply."""

    def complete(self, prompt: str, system: str) -> str: ...


def classify_openai_error(exc: Exception, provider: str = "") -> GenerationError:
    """Translate an ``openai`` SDK exception into a GenerationError subclass."""
    if isinstance(exc, GenerationError):
        return exc
    if isinstance(exc, openai.RateLimitError):
        return RateLimited("API rate limit exceeded.", provider, exc)
    if isinstance(exc, (openai.AuthenticationError, openai.PermissionDeniedError)):
        return AuthenticationFailed("API authentication failed.", provider, exc)
    if isinstance(exc, openai.APITimeoutError):
        return ServiceUnavailable("Request to the generation service timed out.", provider, exc)
    if isinstance(exc, (openai.InternalServerError, openai.APIConnectionError,
                        ConnectionError, TimeoutError)):
        return ServiceUnavailable("Generation service unavailable.", provider, exc)
    if isinstance(exc, openai.APIStatusError) and exc.status_code >= 500:
        return ServiceUnavailable(
            f"Generation service returned HTTP {exc.status_code}.", provider, exc,
        )
    return GenerationFailed(f"Question generation failed: {exc}", provider, exc)


class OpenAIChatClient:
    """
    Chat-completions client over an ``openai`` SDK instance.

    ``sdk_client`` is an AzureOpenAI or OpenAI object (or a stand-in exposing
    ``chat.completions.create``).  One ``complete`` call is one request; the
    SDK's own retries are disabled so a failure surfaces immediately.
    """

    def __init__(
        self,
        sdk_client: Any,
        model: str,
        provider: str,
        config: Optional[GenerationConfig] = None,
    ) -> None:
        self._client  = sdk_client
        self.model    = model
        self.provider = provider
        self._cfg     = config or GenerationConfig()

    @classmethod
    def from_settings(cls, settings: Settings) -> "OpenAIChatClient":
        """Build the client for the highest configured provider tier."""
        gen = settings.generation
        if settings.azure.is_configured:
            sdk = AzureOpenAI(
                azure_endpoint=settings.azure.endpoint,
                api_key=settings.azure.api_key,
                api_version=settings.azure.api_version,
                timeout=gen.timeout_s,
                max_retries=0,
            )
            return cls(sdk, settings.azure.deployment, "azure_openai", gen)
        if settings.openai.is_configured:
            sdk = OpenAI(
                api_key=settings.openai.api_key,
                base_url=settings.openai.base_url or None,
                timeout=gen.timeout_s,
                max_retries=0,
            )
            return cls(sdk, settings.openai.model, "openai", gen)
        raise EnvironmentError(
            "No text-generation provider configured. Set AZURE_OPENAI_ENDPOINT + "
            "AZURE_OPENAI_API_KEY (Azure) or OPENAI_API_KEY (OpenAI)."
        )

    def complete(self, prompt: str, system: str) -> str:
        """Send one system + user message pair and return the reply text."""
        logger.info("Requesting quiz questions from %s (model=%s, %d prompt chars)",
                    self.provider, self.model, len(prompt))
        try:
            response = self._client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": system},
                    {"role": "user",   "content": prompt},
                ],
                temperature=self._cfg.temperature,
                max_tokens=self._cfg.max_tokens,
            )
        except openai.OpenAIError as exc:
            raise classify_openai_error(exc, self.provider) from exc

        content = response.choices[0].message.content if response.choices else None
        if not content or not content.strip():
            raise GenerationFailed("No content generated.", self.provider)
        return content


def build_text_client(settings: Optional[Settings] = None) -> Optional[OpenAIChatClient]:
    """Return a live client, or None in mock mode."""
    settings = settings or get_settings()
    if not settings.live_mode:
        logger.info("No live provider (mode=%s); fallback questions will be used", settings.provider)
        return None
    return OpenAIChatClient.from_settings(settings)
