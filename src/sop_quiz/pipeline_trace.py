"""
pipeline_trace.py — Lightweight audit log for pipeline runs
===========================================================
Every stage of SopQuizPipeline emits a PipelineStep record; the steps of one
upload are collected into a RunTrace that the CLI prints with ``--json`` and
that callers may persist alongside the QuestionSet.

Data model
----------
  PipelineStep   One stage's contribution: timing, status, decisions, warnings.
  RunTrace       Full trace for a single upload; ordered list of PipelineSteps.

Key fields
----------
  PipelineStep.status       "success" | "fallback" | "failed" | "skipped"
  PipelineStep.duration_ms  Wall-clock milliseconds for that stage
  PipelineStep.decisions    Human-readable list of choices the stage made
  PipelineStep.warnings     Guardrail warnings and other non-fatal issues
  PipelineStep.detail       Arbitrary extra dict for stage-specific metadata
  RunTrace.mode             "mock" | "azure_openai" | "openai"
  RunTrace.total_ms         End-to-end pipeline wall time
"""

from __future__ import annotations

import datetime
import time
import uuid
from dataclasses import asdict, dataclass, field
from typing import Any, Optional


@dataclass
class PipelineStep:
    """One stage's contribution inside a pipeline run."""
    step_id:        str
    step_name:      str
    start_ms:       float            # ms relative to run start
    duration_ms:    float
    status:         str              # "success" | "fallback" | "failed" | "skipped"
    input_summary:  str
    output_summary: str
    decisions:      list[str] = field(default_factory=list)
    warnings:       list[str] = field(default_factory=list)
    detail:         dict[str, Any] = field(default_factory=dict)


@dataclass
class RunTrace:
    """Full trace for a single upload."""
    run_id:    str
    filename:  str
    timestamp: str
    mode:      str
    total_ms:  float = 0.0
    steps:     list[PipelineStep] = field(default_factory=list)

    def append(self, step: PipelineStep) -> None:
        self.steps.append(step)
        self.total_ms = max(self.total_ms, step.start_ms + step.duration_ms)

    def step(self, step_id: str) -> Optional[PipelineStep]:
        return next((s for s in self.steps if s.step_id == step_id), None)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def new_trace(filename: str, mode: str) -> RunTrace:
    return RunTrace(
        run_id    = str(uuid.uuid4())[:8].upper(),
        filename  = filename,
        timestamp = datetime.datetime.now().strftime("%Y-%m-%d %H:%M:%S"),
        mode      = mode,
    )


class StageClock:
    """Measures stage offsets and durations against one run start."""

    def __init__(self) -> None:
        self._t0 = time.perf_counter()
        self._stage_start = self._t0

    def start(self) -> float:
        self._stage_start = time.perf_counter()
        return round((self._stage_start - self._t0) * 1000, 2)

    def elapsed(self) -> float:
        return round((time.perf_counter() - self._stage_start) * 1000, 2)
