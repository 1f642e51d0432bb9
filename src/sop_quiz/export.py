"""Plain-data and clipboard renderings of a QuestionSet."""

from __future__ import annotations

from typing import Any, Iterable

from sop_quiz.models import Question


def questions_to_records(questions: Iterable[Question]) -> list[dict[str, Any]]:
    """JSON-ready dicts using the UI keys ``question`` / ``options`` / ``correctAnswer``."""
    return [q.model_dump(by_alias=True) for q in questions]


def format_questions_text(questions: Iterable[Question]) -> str:
    """
    Human-readable block for copying into another tool::

        Question 1: What color is the sky?
        Options:
        1. Red
        2. Blue (Correct)
    """
    blocks = []
    for k, q in enumerate(questions, start=1):
        lines = [f"Question {k}: {q.question}", "Options:"]
        for i, option in enumerate(q.options):
            marker = " (Correct)" if i == q.correct_answer else ""
            lines.append(f"{i + 1}. {option}{marker}")
        blocks.append("\n".join(lines))
    return "\n\n".join(blocks)
