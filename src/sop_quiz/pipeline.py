"""
pipeline.py — SOP-to-Quiz orchestrator
======================================
Runs one uploaded document through every stage and records a RunTrace.

  Stage             Component              On problem
  ───────────────   ────────────────────   ─────────────────────────────────
  upload            UploadGuardrails       BLOCK → UploadRejected
  extract           extract_text()         ExtractionError propagates
  text_check        TextGuardrails         WARN / INFO only, recorded
  generate          QuizGenerator          never raises; fallback flagged
  question_check    QuestionSetGuardrails  BLOCK → UploadRejected

Usage::

    pipeline = SopQuizPipeline()
    result   = pipeline.process_upload(data, "leave-policy.pdf", "application/pdf")
    for q in result.questions:
        ...
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from sop_quiz.config import Settings, get_settings
from sop_quiz.errors import ExtractionError, UploadRejected
from sop_quiz.extractor import detect_document_type, extract_text
from sop_quiz.generator import QuizGenerator
from sop_quiz.guardrails import GuardrailResult, GuardrailsPipeline
from sop_quiz.models import GenerationResult, Question
from sop_quiz.pipeline_trace import PipelineStep, RunTrace, StageClock, new_trace

logger = logging.getLogger(__name__)


def derive_title(filename: str, text: str = "") -> str:
    """
    Title for a quiz: the first line of the document when it reads like a
    heading (4–49 characters), else the filename without its extension.
    """
    first_line = text.strip().split("\n", 1)[0].strip() if text else ""
    if 3 < len(first_line) < 50:
        return first_line
    stem = Path(filename).stem
    return stem[:1].upper() + stem[1:]


@dataclass
class PipelineResult:
    title:      str
    text:       str
    generation: GenerationResult
    guardrails: GuardrailResult
    trace:      RunTrace

    @property
    def questions(self) -> list[Question]:
        return self.generation.questions

    @property
    def is_fallback(self) -> bool:
        return self.generation.is_fallback


def _warnings(result: GuardrailResult) -> list[str]:
    return [f"[{v.code}] {v.message}" for v in result.violations if v.level.value != "BLOCK"]


class SopQuizPipeline:
    """Extract → guard → generate → guard, for one upload at a time."""

    def __init__(
        self,
        generator: Optional[QuizGenerator] = None,
        settings: Optional[Settings] = None,
        guardrails: Optional[GuardrailsPipeline] = None,
    ) -> None:
        self.settings   = settings or get_settings()
        self.generator  = generator or QuizGenerator.from_settings(self.settings)
        self.guardrails = guardrails or GuardrailsPipeline(self.settings)

    @property
    def mode(self) -> str:
        if self.generator.client is None:
            return "mock"
        return getattr(self.generator.client, "provider", self.settings.provider)

    def process_upload(
        self,
        data: bytes,
        filename: str,
        content_type: Optional[str] = None,
    ) -> PipelineResult:
        """
        Turn one uploaded file into a QuestionSet.

        Raises:
            UploadRejected   – a BLOCK-level guardrail fired (size, type, empty set …).
            ExtractionError  – the document could not be read or holds no text.
        """
        trace = new_trace(filename, self.mode)
        clock = StageClock()

        # ── Stage 1: upload guardrails ───────────────────────────────────────
        start = clock.start()
        upload_check = self.guardrails.check_upload(len(data), filename, content_type)
        trace.append(PipelineStep(
            step_id        = "upload",
            step_name      = "Upload Guardrails",
            start_ms       = start,
            duration_ms    = clock.elapsed(),
            status         = "failed" if upload_check.blocked else "success",
            input_summary  = f"'{filename}' ({len(data)} bytes, type={content_type or 'unknown'})",
            output_summary = upload_check.summary(),
            warnings       = _warnings(upload_check),
        ))
        if upload_check.blocked:
            logger.warning("Upload %r rejected: %s", filename, upload_check.codes)
            raise UploadRejected(upload_check)

        # ── Stage 2: text extraction ─────────────────────────────────────────
        doc_type = detect_document_type(filename, content_type)
        start = clock.start()
        try:
            text = extract_text(data, doc_type)
        except ExtractionError as exc:
            trace.append(PipelineStep(
                step_id        = "extract",
                step_name      = "Text Extractor",
                start_ms       = start,
                duration_ms    = clock.elapsed(),
                status         = "failed",
                input_summary  = f"{doc_type.value.upper()} document",
                output_summary = exc.message,
                detail         = exc.to_dict(),
            ))
            logger.warning("Extraction failed for %r (%s): %s", filename, exc.code, exc.message)
            raise
        trace.append(PipelineStep(
            step_id        = "extract",
            step_name      = "Text Extractor",
            start_ms       = start,
            duration_ms    = clock.elapsed(),
            status         = "success",
            input_summary  = f"{doc_type.value.upper()} document",
            output_summary = f"{len(text)} characters extracted",
            detail         = {"document_type": doc_type.value, "chars": len(text)},
        ))

        # ── Stage 3: text guardrails ─────────────────────────────────────────
        start = clock.start()
        text_check = self.guardrails.check_text(text)
        title = derive_title(filename, text)
        trace.append(PipelineStep(
            step_id        = "text_check",
            step_name      = "Text Guardrails",
            start_ms       = start,
            duration_ms    = clock.elapsed(),
            status         = "success",
            input_summary  = f"{len(text)} characters",
            output_summary = text_check.summary(),
            decisions      = [f"Title: {title}"],
            warnings       = _warnings(text_check),
        ))

        # ── Stage 4: question generation ─────────────────────────────────────
        start = clock.start()
        generation = self.generator.generate(text)
        trace.append(PipelineStep(
            step_id        = "generate",
            step_name      = "Question Generator",
            start_ms       = start,
            duration_ms    = clock.elapsed(),
            status         = "fallback" if generation.is_fallback else "success",
            input_summary  = f"{min(len(text), self.generator.config.prompt_char_limit)} "
                             "characters of document text",
            output_summary = f"{len(generation)} question(s)"
                             + (" (fallback)" if generation.is_fallback else ""),
            decisions      = [f"Failure kind: {generation.failure.value}"] if generation.failure else [],
            warnings       = [generation.detail] if generation.is_fallback and generation.detail else [],
            detail         = {"mode": trace.mode, "is_fallback": generation.is_fallback},
        ))

        # ── Stage 5: QuestionSet guardrails ──────────────────────────────────
        start = clock.start()
        question_check = self.guardrails.check_questions(generation)
        trace.append(PipelineStep(
            step_id        = "question_check",
            step_name      = "QuestionSet Guardrails",
            start_ms       = start,
            duration_ms    = clock.elapsed(),
            status         = "failed" if question_check.blocked else "success",
            input_summary  = f"{len(generation)} question(s)",
            output_summary = question_check.summary(),
            warnings       = _warnings(question_check),
        ))
        if question_check.blocked:
            logger.warning("QuestionSet for %r rejected: %s", filename, question_check.codes)
            raise UploadRejected(question_check)

        merged = self.guardrails.merge(upload_check, text_check, question_check)
        logger.info("Processed %r in %.1f ms: %d question(s), fallback=%s",
                    filename, trace.total_ms, len(generation), generation.is_fallback)
        return PipelineResult(
            title      = title,
            text       = text,
            generation = generation,
            guardrails = merged,
            trace      = trace,
        )
