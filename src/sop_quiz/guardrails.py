"""
guardrails.py – Upload, text and QuestionSet guardrails
=======================================================
Validation checks that wrap each stage of the SOP-to-Quiz pipeline.

Guardrail levels
----------------
BLOCK   – Hard-stop: the pipeline does not proceed.
WARN    – Soft-stop: the pipeline proceeds with a visible warning.
INFO    – Advisory: informational note logged in the run trace.

Guards implemented
------------------
Upload guards (before TextExtractor):
  Q-01  File is not empty
  Q-02  File size within max_upload_bytes (10 MiB by default)
  Q-03  Declared type is PDF, DOCX, XLSX or plain text

Text guards (after TextExtractor):
  Q-04  Enough text to write questions about (min_text_chars, default 50)
  Q-05  Text longer than the prompt limit is truncated for the model

QuestionSet guards (after QuizGenerator):
  Q-06  QuestionSet is not empty
  Q-07  Every question has text, ≥2 options and an in-range answer
  Q-08  No duplicate question texts
  Q-09  Fallback content is flagged to the user
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from sop_quiz.config import Settings, get_settings
from sop_quiz.errors import UnsupportedFormat
from sop_quiz.extractor import detect_document_type
from sop_quiz.models import GenerationResult


# ─── Enums & data models ─────────────────────────────────────────────────────

class GuardrailLevel(str, Enum):
    BLOCK = "BLOCK"
    WARN  = "WARN"
    INFO  = "INFO"


@dataclass
class GuardrailViolation:
    code:    str
    level:   GuardrailLevel
    message: str
    field:   str = ""   # which input triggered the violation


@dataclass
class GuardrailResult:
    passed:     bool
    violations: list[GuardrailViolation] = field(default_factory=list)

    @property
    def blocked(self) -> bool:
        return any(v.level == GuardrailLevel.BLOCK for v in self.violations)

    @property
    def warnings(self) -> list[GuardrailViolation]:
        return [v for v in self.violations if v.level == GuardrailLevel.WARN]

    @property
    def infos(self) -> list[GuardrailViolation]:
        return [v for v in self.violations if v.level == GuardrailLevel.INFO]

    @property
    def codes(self) -> list[str]:
        return [v.code for v in self.violations]

    def summary(self) -> str:
        if not self.violations:
            return "✅ All guardrails passed."
        icons = {GuardrailLevel.BLOCK: "🚫", GuardrailLevel.WARN: "⚠️", GuardrailLevel.INFO: "ℹ️"}
        return "\n".join(f"{icons[v.level]} [{v.code}] {v.message}" for v in self.violations)


def _result(violations: list[GuardrailViolation]) -> GuardrailResult:
    return GuardrailResult(
        passed=not any(v.level == GuardrailLevel.BLOCK for v in violations),
        violations=violations,
    )


# ─── Stage guards ────────────────────────────────────────────────────────────

class UploadGuardrails:
    """Q-01 – Q-03: Validates an upload before any parsing happens."""

    def __init__(self, max_upload_bytes: int) -> None:
        self.max_upload_bytes = max_upload_bytes

    def check(self, size: int, filename: str, content_type: Optional[str] = None) -> GuardrailResult:
        violations: list[GuardrailViolation] = []

        # Q-01 Empty file
        if size <= 0:
            violations.append(GuardrailViolation(
                code="Q-01", level=GuardrailLevel.BLOCK, field="file",
                message=f"'{filename}' is empty.",
            ))

        # Q-02 Size limit
        if size > self.max_upload_bytes:
            limit_mb = self.max_upload_bytes // (1024 * 1024)
            violations.append(GuardrailViolation(
                code="Q-02", level=GuardrailLevel.BLOCK, field="file",
                message=f"File too large! Maximum size is {limit_mb}MB",
            ))

        # Q-03 Supported type
        try:
            detect_document_type(filename, content_type)
        except UnsupportedFormat as exc:
            violations.append(GuardrailViolation(
                code="Q-03", level=GuardrailLevel.BLOCK, field="content_type",
                message=exc.message,
            ))

        return _result(violations)


class TextGuardrails:
    """Q-04 – Q-05: Checks the extracted text before prompting."""

    def __init__(self, min_text_chars: int, prompt_char_limit: int) -> None:
        self.min_text_chars    = min_text_chars
        self.prompt_char_limit = prompt_char_limit

    def check(self, text: str) -> GuardrailResult:
        violations: list[GuardrailViolation] = []

        # Q-04 Too little text
        length = len(text.strip())
        if length < self.min_text_chars:
            violations.append(GuardrailViolation(
                code="Q-04", level=GuardrailLevel.WARN, field="text",
                message=(
                    f"Document has only {length} characters of text "
                    f"(<{self.min_text_chars}). Questions may be generic."
                ),
            ))

        # Q-05 Truncation
        if len(text) > self.prompt_char_limit:
            violations.append(GuardrailViolation(
                code="Q-05", level=GuardrailLevel.INFO, field="text",
                message=(
                    f"Only the first {self.prompt_char_limit} of {len(text)} characters "
                    "are sent to the model."
                ),
            ))

        return _result(violations)


class QuestionSetGuardrails:
    """
    Q-06 – Q-09: Validates a GenerationResult before it is shown.

    QuizGenerator never returns an empty set and Question validates its own
    shape, so Q-06 and Q-07 only fire for results built elsewhere: a
    substituted generator, or questions made with ``model_construct``.
    """

    def check(self, result: GenerationResult) -> GuardrailResult:
        violations: list[GuardrailViolation] = []
        questions = result.questions

        # Q-06 Non-empty
        if not questions:
            violations.append(GuardrailViolation(
                code="Q-06", level=GuardrailLevel.BLOCK, field="questions",
                message="No questions were produced.",
            ))

        # Q-07 Question shape
        for i, q in enumerate(questions, start=1):
            if (
                not q.question.strip()
                or len(q.options) < 2
                or not 0 <= q.correct_answer < len(q.options)
            ):
                violations.append(GuardrailViolation(
                    code="Q-07", level=GuardrailLevel.BLOCK, field=f"questions[{i - 1}]",
                    message=(
                        f"Question {i} is malformed ({len(q.options)} options, "
                        f"correct answer index {q.correct_answer})."
                    ),
                ))

        # Q-08 Duplicate texts
        seen: set[str] = set()
        dups: list[str] = []
        for q in questions:
            key = " ".join(q.question.lower().split())
            if key in seen and q.question not in dups:
                dups.append(q.question)
            seen.add(key)
        if dups:
            violations.append(GuardrailViolation(
                code="Q-08", level=GuardrailLevel.WARN, field="questions",
                message=f"Duplicate questions detected: {dups}.",
            ))

        # Q-09 Fallback
        if result.is_fallback:
            violations.append(GuardrailViolation(
                code="Q-09", level=GuardrailLevel.WARN, field="questions",
                message=result.user_message,
            ))

        return _result(violations)


# ─── Convenience façade ───────────────────────────────────────────────────────

class GuardrailsPipeline:
    """
    Single entry-point that runs all applicable guardrails for a given pipeline stage.

    Usage::

        gp = GuardrailsPipeline()

        # Stage 1 – upload
        result = gp.check_upload(len(data), filename, content_type)

        # Stage 2 – after extraction
        result = gp.check_text(text)

        # Stage 3 – after generation
        result = gp.check_questions(generation_result)
    """

    def __init__(self, settings: Optional[Settings] = None):
        settings = settings or get_settings()
        self.upload_guard   = UploadGuardrails(settings.app.max_upload_bytes)
        self.text_guard     = TextGuardrails(
            settings.app.min_text_chars, settings.generation.prompt_char_limit,
        )
        self.question_guard = QuestionSetGuardrails()

    def check_upload(self, size: int, filename: str, content_type: Optional[str] = None) -> GuardrailResult:
        return self.upload_guard.check(size, filename, content_type)

    def check_text(self, text: str) -> GuardrailResult:
        return self.text_guard.check(text)

    def check_questions(self, result: GenerationResult) -> GuardrailResult:
        return self.question_guard.check(result)

    def merge(self, *results: GuardrailResult) -> GuardrailResult:
        """Merge multiple GuardrailResult objects into one."""
        all_v = []
        for r in results:
            all_v.extend(r.violations)
        return _result(all_v)
