"""
generator.py — Question Generator
=================================
Document text in, GenerationResult out.  One prompt, one model call, one
parse; no retries.

  text ──► build_prompt() ──► client.complete() ──► parse_questions()
                                     │                    │
                              GenerationError        empty list
                                     └────────┬───────────┘
                                              ▼
                                   fallback_result(failure)

``generate`` never raises for generation problems: every failure becomes the
fixed three-question fallback set with ``is_fallback=True`` and the failure
kind, so the caller decides how loudly to warn the user.
"""

from __future__ import annotations

import logging
from typing import Optional

from sop_quiz.config import GenerationConfig, Settings, get_settings
from sop_quiz.errors import (
    AuthenticationFailed,
    GenerationError,
    RateLimited,
    ServiceUnavailable,
)
from sop_quiz.llm_client import TextGenerationClient, build_text_client, classify_openai_error
from sop_quiz.models import GenerationFailure, GenerationResult, Question
from sop_quiz.parser import parse_questions
from sop_quiz.prompts import SYSTEM_PROMPT, build_prompt

logger = logging.getLogger(__name__)


# ─── Fallback question set ───────────────────────────────────────────────────
# (question, options, correct_index)

FALLBACK_QUESTIONS: tuple[tuple[str, tuple[str, ...], int], ...] = (
    ("What is the main topic of the document?",
     ("Technical specifications", "Business strategy", "Project management", "Customer service"),
     0),
    ("Which section contains the most important information?",
     ("Introduction", "Methodology", "Results", "Conclusion"),
     2),
    ("What is the primary goal mentioned in the document?",
     ("Increase efficiency", "Reduce costs", "Improve quality", "Expand market share"),
     0),
)


def fallback_questions() -> list[Question]:
    return [
        Question(question=q, options=list(opts), correct_answer=idx)
        for q, opts, idx in FALLBACK_QUESTIONS
    ]


def fallback_result(failure: GenerationFailure, detail: str = "", raw_reply: str = "") -> GenerationResult:
    """The fixed fallback QuestionSet tagged with why it was used."""
    return GenerationResult(
        questions=fallback_questions(),
        is_fallback=True,
        failure=failure,
        detail=detail,
        raw_reply=raw_reply,
    )


def _failure_kind(error: GenerationError) -> GenerationFailure:
    if isinstance(error, RateLimited):
        return GenerationFailure.RATE_LIMITED
    if isinstance(error, AuthenticationFailed):
        return GenerationFailure.AUTHENTICATION_FAILED
    if isinstance(error, ServiceUnavailable):
        return GenerationFailure.SERVICE_UNAVAILABLE
    return GenerationFailure.GENERATION_FAILED


# ─── Generator ───────────────────────────────────────────────────────────────

class QuizGenerator:
    """
    Generates a QuestionSet for one document's text.

    Usage::

        generator = QuizGenerator(client=my_client)
        result    = generator.generate(text)
        if result.is_fallback:
            warn(result.user_message)

    ``client`` is any TextGenerationClient; ``None`` means no provider is
    available and every call returns the fallback set.
    """

    def __init__(
        self,
        client: Optional[TextGenerationClient] = None,
        config: Optional[GenerationConfig] = None,
    ) -> None:
        self.client = client
        self._cfg   = config or GenerationConfig()

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "QuizGenerator":
        settings = settings or get_settings()
        return cls(client=build_text_client(settings), config=settings.generation)

    @property
    def config(self) -> GenerationConfig:
        return self._cfg

    def generate(self, text: str) -> GenerationResult:
        """Prompt the model once and parse its reply; fall back on any failure."""
        if self.client is None:
            logger.warning("No text-generation client configured; returning fallback questions")
            return fallback_result(
                GenerationFailure.GENERATION_FAILED, "No text-generation client configured.",
            )

        prompt = build_prompt(text, self._cfg.prompt_char_limit, self._cfg.max_questions)
        try:
            reply = self.client.complete(prompt, SYSTEM_PROMPT)
        except Exception as exc:  # noqa: BLE001
            error = classify_openai_error(exc)
            logger.warning("Question generation failed (%s): %s", error.code, error.message)
            return fallback_result(_failure_kind(error), error.message)

        if not isinstance(reply, str) or not reply.strip():
            logger.warning("Model returned an empty reply; returning fallback questions")
            return fallback_result(GenerationFailure.GENERATION_FAILED, "No content generated.")

        logger.debug("Raw model reply: %s", reply[:500])
        questions = parse_questions(reply)
        if not questions:
            logger.warning("Model reply contained no usable questions; returning fallback questions")
            return fallback_result(
                GenerationFailure.NO_QUESTIONS_PARSED,
                "No valid questions could be parsed from the model reply.",
                raw_reply=reply,
            )

        logger.info("Generated %d question(s)", len(questions))
        return GenerationResult(questions=questions, raw_reply=reply)


def generate_questions(text: str, client: Optional[TextGenerationClient] = None) -> GenerationResult:
    """
    One-shot helper: generate questions for ``text``.

    Without an explicit client the provider configured in the environment is
    used (or none, in mock mode).
    """
    if client is not None:
        return QuizGenerator(client=client).generate(text)
    return QuizGenerator.from_settings().generate(text)
