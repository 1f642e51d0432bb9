"""
parser.py — Model-reply parser
==============================
Turns the free-form text a language model returns into validated Question
objects with a single pass over the lines.

Each trimmed, non-blank line is classified in priority order:

  QUESTION   "Question 3: ..."  or  "3. What ..."  (numeral, dot, capital)
  OPTION     "A) ...", "b. ...", "C: ..."          (letter A-D, delimiter, space)
  ANSWER     anything containing "answer:"          (covers "Correct answer:")
  OTHER      ignored

The parser state decides what each line does:

  state               QUESTION                 OPTION                 ANSWER
  ------------------  -----------------------  ---------------------  ----------
  SEEKING_QUESTION    open → COLLECTING        ignore                 ignore
  COLLECTING_OPTIONS  flush, open              append → AWAITING      set answer
  AWAITING_ANSWER     flush, open → COLLECTING append                 set answer

End of input flushes the open draft.  A flushed draft becomes a Question only
if it has text, at least two options and an answer line that maps inside the
option list; anything else is dropped and logged.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from pydantic import ValidationError

from sop_quiz.models import Question

logger = logging.getLogger(__name__)


class ParserState(Enum):
    SEEKING_QUESTION   = "seeking_question"
    COLLECTING_OPTIONS = "collecting_options"
    AWAITING_ANSWER    = "awaiting_answer"


class LineKind(Enum):
    QUESTION = "question"
    OPTION   = "option"
    ANSWER   = "answer"
    OTHER    = "other"


_QUESTION_LABELED  = re.compile(r"^Question\s*\d+\s*:\s*(.*)$")
_QUESTION_NUMBERED = re.compile(r"^\d+\.\s*([A-Z].*)$")
_OPTION            = re.compile(r"^[A-Da-d][).:]\s+(.*)$")
_ANSWER            = re.compile(r"answer:\s*(.*)$", re.IGNORECASE)
_LEADING_LETTER    = re.compile(r"^[A-Da-d]")
_ANY_UPPER_LETTER  = re.compile(r"[ABCD]")


def classify_line(line: str) -> tuple[LineKind, str]:
    """Return the kind of a trimmed line and its payload text."""
    match = _QUESTION_LABELED.match(line) or _QUESTION_NUMBERED.match(line)
    if match:
        return LineKind.QUESTION, match.group(1).strip()
    match = _OPTION.match(line)
    if match:
        return LineKind.OPTION, match.group(1).strip()
    match = _ANSWER.search(line)
    if match:
        return LineKind.ANSWER, match.group(1).strip()
    return LineKind.OTHER, line


def answer_index_from_text(answer_text: str) -> int:
    """
    Map the text after "answer:" to a 0-based option index.

    A leading letter A-D (either case) wins; otherwise the first uppercase
    A/B/C/D anywhere in the text; otherwise 0.
    """
    if _LEADING_LETTER.match(answer_text):
        return ord(answer_text[0].upper()) - ord("A")
    match = _ANY_UPPER_LETTER.search(answer_text)
    if match:
        return ord(match.group(0)) - ord("A")
    return 0


@dataclass
class _Draft:
    text:    str
    options: list[str] = field(default_factory=list)
    answer:  Optional[int] = None

    def to_question(self) -> Optional[Question]:
        if self.answer is None:
            logger.warning("Dropping question without an answer line: %r", self.text[:80])
            return None
        try:
            return Question(question=self.text, options=self.options, correct_answer=self.answer)
        except ValidationError as exc:
            logger.warning("Dropping malformed question %r: %s",
                           self.text[:80], exc.errors()[0]["msg"])
            return None


def parse_questions(content: str) -> list[Question]:
    """Parse a model reply into Questions, in reply order."""
    questions: list[Question] = []
    state = ParserState.SEEKING_QUESTION
    draft: Optional[_Draft] = None

    def flush() -> None:
        if draft is not None:
            question = draft.to_question()
            if question is not None:
                questions.append(question)

    for raw_line in content.splitlines():
        line = raw_line.strip()
        if not line:
            continue
        kind, payload = classify_line(line)

        if kind is LineKind.QUESTION:
            flush()
            draft = _Draft(text=payload)
            state = ParserState.COLLECTING_OPTIONS
        elif state is ParserState.SEEKING_QUESTION:
            continue
        elif kind is LineKind.OPTION:
            draft.options.append(payload)
            state = ParserState.AWAITING_ANSWER
        elif kind is LineKind.ANSWER:
            draft.answer = answer_index_from_text(payload)

    flush()
    logger.debug("Parsed %d question(s) from %d characters of reply", len(questions), len(content))
    return questions
