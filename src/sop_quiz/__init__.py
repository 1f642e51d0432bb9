"""
sop_quiz — SOP document to multiple-choice quiz pipeline
========================================================
Package containing the text extractor, question generator and parser,
guardrails, configuration, and the command-line front end.

Module map
----------
  models.py          Question (pydantic), GenerationResult, DocumentType,
                     GenerationFailure and the fallback banner texts.
  config.py          Settings loaded from .env; Azure OpenAI / OpenAI / mock.
  errors.py          ExtractionError and GenerationError families.
  extractor.py       extract_text(): PDF, DOCX, XLSX and plain text → text.
  prompts.py         System prompt and build_prompt() with 3000-char cut-off.
  parser.py          Line-classifying state machine: reply text → Questions.
  llm_client.py      TextGenerationClient protocol + openai SDK implementation.
  generator.py       QuizGenerator: prompt → one model call → parse → fallback.
  guardrails.py      Q-01..Q-09 upload / text / QuestionSet guardrails.
  pipeline_trace.py  PipelineStep / RunTrace audit log.
  pipeline.py        SopQuizPipeline orchestrator + derive_title().
  export.py          JSON records and copy-paste text of a QuestionSet.
  cli.py             `sop-quiz` command (rich output, --json, --plain).

Pipeline order
--------------
  GuardrailsPipeline [Q-01..Q-03] → extract_text()
  → GuardrailsPipeline [Q-04..Q-05] → QuizGenerator
  → GuardrailsPipeline [Q-06..Q-09] → caller persists / displays
"""
__version__ = "0.1.0"
