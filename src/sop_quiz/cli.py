"""
cli.py – Command-line front end for the SOP-to-Quiz pipeline

Run:
    sop-quiz leave-policy.pdf
    sop-quiz handbook.docx --json > quiz.json
    python -m sop_quiz notes.txt --plain

Requires:
    .env file with AZURE_OPENAI_ENDPOINT + AZURE_OPENAI_API_KEY or OPENAI_API_KEY
    for live questions; without one the built-in fallback questions are shown.
    See .env.example for format.

Exit codes:
    0  questions generated from the document
    1  fallback questions returned (generation failed or parsed nothing)
    2  upload rejected or text extraction failed
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from rich import box
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from sop_quiz import __version__
from sop_quiz.config import get_settings
from sop_quiz.errors import ExtractionError, UploadRejected
from sop_quiz.export import format_questions_text, questions_to_records
from sop_quiz.pipeline import PipelineResult, SopQuizPipeline

console = Console()

EXIT_OK       = 0
EXIT_FALLBACK = 1
EXIT_ERROR    = 2

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


# ─── Display helpers ─────────────────────────────────────────────────────────

def show_result(result: PipelineResult) -> None:
    """Render the QuestionSet and guardrail notes as rich panels."""
    console.print()
    console.rule(f"[bold magenta]{result.title}[/bold magenta]")
    console.print()

    if result.is_fallback:
        console.print(Panel(
            f"[bold]{result.generation.user_message}[/bold]",
            title="[bold]Fallback questions[/bold]",
            border_style="yellow",
        ))

    table = Table(box=box.ROUNDED, show_header=True, header_style="bold cyan", padding=(0, 1))
    table.add_column("#",        style="dim", no_wrap=True)
    table.add_column("Question", style="white")
    table.add_column("Options")
    for k, q in enumerate(result.questions, start=1):
        options = "\n".join(
            f"[bold green]{chr(65 + i)}. {opt} ✓[/bold green]" if i == q.correct_answer
            else f"{chr(65 + i)}. {opt}"
            for i, opt in enumerate(q.options)
        )
        table.add_row(str(k), q.question, options)
    console.print(Panel(table, title=f"[bold]{len(result.questions)} question(s)[/bold]",
                        border_style="blue"))

    notes = [v for v in result.guardrails.violations if v.code != "Q-09"]
    if notes:
        console.print(Panel(
            "\n".join(f"[{v.code}] {v.message}" for v in notes),
            title="[bold]Guardrail notes[/bold]",
            border_style="cyan",
        ))

    console.print(f"[dim]Run {result.trace.run_id} • mode={result.trace.mode} • "
                  f"{result.trace.total_ms:.0f} ms[/dim]")


def result_payload(result: PipelineResult) -> dict:
    return {
        "title":       result.title,
        "is_fallback": result.is_fallback,
        "failure":     result.generation.failure.value if result.generation.failure else None,
        "message":     result.generation.user_message,
        "questions":   questions_to_records(result.questions),
        "guardrails":  [
            {"code": v.code, "level": v.level.value, "message": v.message}
            for v in result.guardrails.violations
        ],
        "trace":       result.trace.to_dict(),
    }


def _configure_logging(level: str) -> None:
    level = level.upper()
    logging.basicConfig(
        level=level if level in LOG_LEVELS else "INFO",
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), rich_tracebacks=True)],
    )
    if level not in LOG_LEVELS:
        logging.getLogger(__name__).warning("Unknown log level %r, using INFO", level)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sop-quiz",
        description="Generate a multiple-choice quiz from an SOP document (PDF, DOCX, XLSX or TXT).",
    )
    parser.add_argument("file", type=Path, help="document to turn into a quiz")
    parser.add_argument("--type", dest="content_type", default=None,
                        help="MIME type or extension; defaults to the file's extension")
    output = parser.add_mutually_exclusive_group()
    output.add_argument("--json", action="store_true", help="print questions and trace as JSON")
    output.add_argument("--plain", action="store_true", help="print questions in copy-paste text form")
    parser.add_argument("--log-level", default=None, type=str.upper, choices=LOG_LEVELS,
                        help="logging level (default: LOG_LEVEL or INFO)")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


# ─── Main ────────────────────────────────────────────────────────────────────

def main(argv: Optional[Sequence[str]] = None) -> int:
    args     = build_parser().parse_args(argv)
    settings = get_settings()
    _configure_logging(args.log_level or settings.app.log_level)

    try:
        data = args.file.read_bytes()
    except OSError as e:
        console.print(f"[bold red]Cannot read file:[/bold red] {e}")
        return EXIT_ERROR

    try:
        result = SopQuizPipeline(settings=settings).process_upload(
            data, args.file.name, args.content_type,
        )
    except UploadRejected as e:
        console.print(f"[bold red]Upload rejected:[/bold red] {e.message}")
        return EXIT_ERROR
    except ExtractionError as e:
        console.print(f"[bold red]Could not extract text:[/bold red] {e.message}")
        console.print("[dim]Paste the document text into a .txt file and retry.[/dim]")
        return EXIT_ERROR
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted.[/yellow]")
        return EXIT_ERROR

    if args.json:
        print(json.dumps(result_payload(result), indent=2, ensure_ascii=False))
    elif args.plain:
        print(format_questions_text(result.questions))
    else:
        show_result(result)

    return EXIT_FALLBACK if result.is_fallback else EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
