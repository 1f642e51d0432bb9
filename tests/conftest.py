"""
Shared pytest fixtures for the SOP-to-Quiz test suite.
All fixtures use mock mode — no model credentials required.
Factory helpers live in tests/factories.py so they can be imported
directly by test modules as well as being used here.
"""
import sys
import os

_tests_dir = os.path.dirname(__file__)
_src_dir   = os.path.join(_tests_dir, "..", "src")
for _p in (_tests_dir, _src_dir):
    if _p not in sys.path:
        sys.path.insert(0, _p)

# Force mock mode: tests never call a model endpoint
os.environ["FORCE_MOCK_MODE"] = "true"
os.environ.setdefault("AZURE_OPENAI_ENDPOINT", "<placeholder>")
os.environ.setdefault("AZURE_OPENAI_API_KEY",  "<placeholder>")
os.environ.setdefault("OPENAI_API_KEY",        "<placeholder>")


import pytest

from factories import FakeClient, make_docx, make_pdf, make_reply, make_xlsx, SOP_TEXT

from sop_quiz.config import get_settings
from sop_quiz.generator import QuizGenerator
from sop_quiz.guardrails import GuardrailsPipeline
from sop_quiz.pipeline import SopQuizPipeline


# ─── pytest fixtures ──────────────────────────────────────────────────────────

@pytest.fixture
def settings():
    return get_settings()


@pytest.fixture
def sop_text():
    return SOP_TEXT


@pytest.fixture
def good_client():
    return FakeClient(reply=make_reply(3))


@pytest.fixture
def pdf_bytes():
    return make_pdf(["Leave Policy", "Employees accrue annual leave monthly."])


@pytest.fixture
def docx_bytes():
    return make_docx(["Leave Policy", "Employees accrue annual leave monthly."])


@pytest.fixture
def xlsx_bytes():
    return make_xlsx({"Steps": [["Step", "Owner"], [1, "Manager approves leave"]]})


@pytest.fixture
def pipeline_with(settings):
    """Build a SopQuizPipeline around a given fake client."""
    def _build(client):
        return SopQuizPipeline(
            generator=QuizGenerator(client=client, config=settings.generation),
            settings=settings,
            guardrails=GuardrailsPipeline(settings),
        )
    return _build
