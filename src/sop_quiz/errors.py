"""
errors.py — Exception hierarchy for the SOP-to-Quiz pipeline
=============================================================
Two families, matching the two pipeline stages:

  ExtractionError   raised by the Text Extractor and surfaced to the caller
                    as-is (the caller re-prompts, e.g. for manual text paste).
  GenerationError   raised by the text-generation client layer only; the
                    QuizGenerator always catches these and degrades to the
                    fallback QuestionSet.

Every error carries a stable ``code`` so UI layers can pick a banner without
matching on message text.
"""

from __future__ import annotations

from typing import Any, Optional


class QuizPipelineError(Exception):
    """Base class for every error raised by this package."""

    code: str = "QUIZ_PIPELINE_ERROR"

    def __init__(
        self,
        message: str,
        details: Optional[dict[str, Any]] = None,
        code: Optional[str] = None,
    ) -> None:
        self.message = message
        self.details = details or {}
        if code:
            self.code = code
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.details:
            result["details"] = self.details
        return result


# ─── Extraction ──────────────────────────────────────────────────────────────

class ExtractionError(QuizPipelineError):
    """Text could not be produced from the uploaded document."""

    code = "EXTRACTION_ERROR"


class UnsupportedFormat(ExtractionError):
    """Declared file type is not PDF, DOCX, XLSX or plain text."""

    code = "UNSUPPORTED_FORMAT"

    def __init__(self, declared_type: Any, message: Optional[str] = None) -> None:
        super().__init__(
            message or (
                f"Unsupported file type '{declared_type}'. "
                "Please upload PDF, DOCX, XLSX or TXT files only."
            ),
            details={"declared_type": str(declared_type)},
        )


class NoTextContent(ExtractionError):
    """Extraction succeeded but produced no usable text."""

    code = "NO_TEXT_CONTENT"

    def __init__(self, document_type: Any, message: Optional[str] = None) -> None:
        super().__init__(
            message or f"No text content found in {str(document_type).upper()}.",
            details={"document_type": str(document_type)},
        )


class ExtractionFailed(ExtractionError):
    """Format-specific decode error: corrupt file, bad encoding, etc."""

    code = "EXTRACTION_FAILED"

    def __init__(
        self,
        document_type: Any,
        message: str,
        original_error: Optional[Exception] = None,
    ) -> None:
        details = {"document_type": str(document_type)}
        if original_error is not None:
            details["original_error"] = str(original_error)
        super().__init__(message, details=details)


# ─── Generation ──────────────────────────────────────────────────────────────

class GenerationError(QuizPipelineError):
    """The text-generation service call did not produce a usable reply."""

    code = "GENERATION_ERROR"

    def __init__(
        self,
        message: str,
        provider: str = "",
        original_error: Optional[Exception] = None,
    ) -> None:
        details: dict[str, Any] = {}
        if provider:
            details["provider"] = provider
        if original_error is not None:
            details["original_error"] = str(original_error)
        super().__init__(message, details=details)


class RateLimited(GenerationError):
    code = "RATE_LIMITED"


class AuthenticationFailed(GenerationError):
    code = "AUTHENTICATION_FAILED"


class ServiceUnavailable(GenerationError):
    code = "SERVICE_UNAVAILABLE"


class GenerationFailed(GenerationError):
    code = "GENERATION_FAILED"


# ─── Pipeline ────────────────────────────────────────────────────────────────

class UploadRejected(QuizPipelineError):
    """A BLOCK-level guardrail stopped the pipeline before generation."""

    code = "UPLOAD_REJECTED"

    def __init__(self, guardrail_result: Any) -> None:
        self.guardrail_result = guardrail_result
        blocking = [v for v in guardrail_result.violations if v.level.value == "BLOCK"]
        message = blocking[0].message if blocking else "Upload rejected by guardrails."
        super().__init__(
            message,
            details={"violations": [f"{v.code}: {v.message}" for v in blocking]},
        )
