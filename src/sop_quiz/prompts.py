"""
prompts.py — Prompt construction for the Question Generator
============================================================
The model sees one system message and one user message.  Only the first
``char_limit`` characters of the document reach the model; a trailing
``...`` marks a truncated document.

The reply layout requested here is the layout ``sop_quiz.parser`` reads:

    Question 1: <text>
    A) <option>
    B) <option>
    C) <option>
    D) <option>
    Correct Answer: B
"""

from __future__ import annotations

import textwrap

SYSTEM_PROMPT = (
    "You are a helpful assistant that generates quiz questions based on provided "
    "content. Return the questions in a structured format. Generate as many "
    "questions as possible (up to 20) based on the content's depth and complexity."
)

_GUIDELINES = textwrap.dedent("""
    Guidelines:
    1. Questions should test understanding of key concepts
    2. Each question must have exactly 4 options
    3. Mark the correct answer clearly
    4. Use simple, professional language
    5. Focus on important information from the document
    6. Questions should be based on the actual content provided
    7. Generate as many questions as possible (up to {max_questions}) based on the content
    8. Cover different aspects and sections of the document
    9. Include both basic and advanced level questions
""").strip()

_FORMAT = textwrap.dedent("""
    Format every question exactly like this:
    Question 1: <question text>
    A) <option>
    B) <option>
    C) <option>
    D) <option>
    Correct Answer: <letter>
""").strip()


def truncate_for_prompt(text: str, char_limit: int = 3000) -> str:
    """First ``char_limit`` characters of ``text``, with ``...`` appended if cut."""
    if len(text) <= char_limit:
        return text
    return text[:char_limit] + "..."


def build_prompt(text: str, char_limit: int = 3000, max_questions: int = 20) -> str:
    """Return the user message asking for up to ``max_questions`` MCQs about ``text``."""
    header = (
        "You are a quiz generator assistant for corporate training.\n\n"
        f"Based on the following document content, create up to {max_questions} "
        "multiple-choice questions (MCQs) with 4 options each (A–D) and clearly "
        "mark the correct answer."
    )
    return "\n\n".join([
        header,
        _GUIDELINES.format(max_questions=max_questions),
        _FORMAT,
        "Here is the document content:\n" + truncate_for_prompt(text, char_limit),
    ])
