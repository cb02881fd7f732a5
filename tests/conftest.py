"""
Shared test setup: a throwaway SQLite database and stub Gemini clients.
Zero network calls.
"""
import os
import tempfile

_DB_DIR = tempfile.mkdtemp(prefix="wordmath-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_DB_DIR, 'test.db')}"
os.environ.pop("GEMINI_API_KEY", None)
os.environ.pop("GEMINI_MODELS", None)

import pytest  # noqa: E402

import models  # noqa: E402,F401
from db import Base, engine  # noqa: E402
from deps.ai import get_ai_client  # noqa: E402
from main import app  # noqa: E402


class StubClient:
    """
    Stand-in for GeminiClient.

    `script` maps model name -> list of outcomes consumed one call at a time;
    an outcome is a string to return or an Exception to raise. Models with no
    script left raise. Every call is recorded in `calls`.
    """

    def __init__(self, script=None, default=None):
        self.script = {k: list(v) for k, v in (script or {}).items()}
        self.default = default
        self.calls = []

    def generate(self, model, prompt, *, json_mode=False, temperature=None, max_output_tokens=None):
        self.calls.append({"model": model, "prompt": prompt, "json_mode": json_mode})
        queue = self.script.get(model)
        if queue:
            outcome = queue.pop(0)
        elif self.default is not None:
            outcome = self.default
        else:
            outcome = RuntimeError(f"{model} unavailable")
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    def list_models(self):
        return {"models": [{"name": "models/gemini-2.5-flash"}]}

    def models_called(self):
        return [c["model"] for c in self.calls]


@pytest.fixture(autouse=True, scope="session")
def _schema():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def clean_db():
    with engine.begin() as conn:
        for table in reversed(Base.metadata.sorted_tables):
            conn.execute(table.delete())
    yield


@pytest.fixture
def use_ai():
    """Install a stub client for the request; returns a setter."""

    def _install(stub):
        app.dependency_overrides[get_ai_client] = lambda: stub
        return stub

    yield _install
    app.dependency_overrides.pop(get_ai_client, None)
