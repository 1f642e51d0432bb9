"""
Data models for the SOP-to-Quiz pipeline.

Question is a frozen pydantic model so the schema invariants (non-empty text,
at least two options, in-range answer index) are checked once at
construction; nothing downstream can hold a malformed Question.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


# ─── Enumerations ────────────────────────────────────────────────────────────

class DocumentType(str, Enum):
    """Document formats the Text Extractor understands."""
    PDF  = "pdf"
    DOCX = "docx"
    XLSX = "xlsx"
    TXT  = "txt"

    @property
    def mime_type(self) -> str:
        return MIME_TYPES[self]


MIME_TYPES: dict[DocumentType, str] = {
    DocumentType.PDF:  "application/pdf",
    DocumentType.DOCX: "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    DocumentType.XLSX: "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    DocumentType.TXT:  "text/plain",
}


class GenerationFailure(str, Enum):
    """Why a GenerationResult holds fallback content."""
    RATE_LIMITED          = "rate_limited"
    AUTHENTICATION_FAILED = "authentication_failed"
    SERVICE_UNAVAILABLE   = "service_unavailable"
    GENERATION_FAILED     = "generation_failed"
    NO_QUESTIONS_PARSED   = "no_questions_parsed"


# Banner text shown next to fallback questions, keyed by failure kind.
FALLBACK_NOTICE = "These generic questions are not based on your document."

FAILURE_MESSAGES: dict[GenerationFailure, str] = {
    GenerationFailure.RATE_LIMITED: (
        "API rate limit exceeded. Try again in a few minutes or use a different API key."
    ),
    GenerationFailure.AUTHENTICATION_FAILED: (
        "API authentication failed. Please check your API key configuration."
    ),
    GenerationFailure.SERVICE_UNAVAILABLE: (
        "The question generation service is currently unavailable. Please try again later."
    ),
    GenerationFailure.GENERATION_FAILED: (
        "Question generation failed; using fallback questions."
    ),
    GenerationFailure.NO_QUESTIONS_PARSED: (
        "The generated reply contained no usable questions; using fallback questions."
    ),
}


# ─── Question ────────────────────────────────────────────────────────────────

class Question(BaseModel):
    """A single multiple-choice quiz item."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    question:       str
    options:        list[str] = Field(min_length=2)
    correct_answer: int       = Field(alias="correctAnswer", ge=0,
                                      description="0-based index into options")

    @field_validator("question")
    @classmethod
    def _question_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("question text must not be empty")
        return v

    @model_validator(mode="after")
    def _answer_in_range(self) -> "Question":
        if self.correct_answer >= len(self.options):
            raise ValueError(
                f"correctAnswer {self.correct_answer} out of range for "
                f"{len(self.options)} options"
            )
        return self

    @property
    def correct_option(self) -> str:
        return self.options[self.correct_answer]


# ─── Generation result ───────────────────────────────────────────────────────

@dataclass
class GenerationResult:
    """QuestionSet for one document plus an explicit fallback signal."""
    questions:   list[Question]
    is_fallback: bool = False
    failure:     Optional[GenerationFailure] = None
    detail:      str = ""
    raw_reply:   str = field(default="", repr=False)

    @property
    def user_message(self) -> str:
        """Warning banner for fallback content; empty for real output."""
        if not self.is_fallback:
            return ""
        reason = FAILURE_MESSAGES.get(
            self.failure or GenerationFailure.GENERATION_FAILED,
            FAILURE_MESSAGES[GenerationFailure.GENERATION_FAILED],
        )
        return f"{reason} {FALLBACK_NOTICE}"

    def __len__(self) -> int:
        return len(self.questions)
