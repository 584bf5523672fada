import os
import sys
import tempfile
from types import SimpleNamespace

import pytest

# Configuration is read at import time, so point it at scratch files first.
_TMP_DIR = tempfile.mkdtemp(prefix="vocab-drill-tests-")
os.environ["VOCAB_DRILL_DB"] = os.path.join(_TMP_DIR, "drill.db")
os.environ["VOCAB_DRILL_LOG_FILE"] = os.path.join(_TMP_DIR, "drill.log")
os.environ.pop("GEMINI_API_KEY", None)
os.environ.pop("VOCAB_DRILL_REQUIRED_WINS", None)
os.environ.pop("VOCAB_DRILL_SPACING_BUFFER", None)
os.environ.pop("VOCAB_DRILL_BANDS", None)

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from scheduler import PracticeItem


class FakeModels:
    """Stands in for ``genai.Client().models``; replays canned responses."""

    def __init__(self, responses):
        self.responses = list(responses)
        self.calls = []

    def generate_content(self, model, contents, config=None):
        self.calls.append({"model": model, "contents": contents, "config": config})
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return SimpleNamespace(text=response)


class FakeGenai:
    def __init__(self, *responses):
        self.models = FakeModels(responses)


class FakeTranslator:
    def __init__(self, fail=False):
        self.fail = fail
        self.requests = []

    def translate(self, text):
        self.requests.append(text)
        if self.fail:
            raise RuntimeError("service down")
        return f"HE[{text}]"


@pytest.fixture
def fake_genai():
    return FakeGenai


@pytest.fixture
def translator():
    return FakeTranslator()


@pytest.fixture
def failing_translator():
    return FakeTranslator(fail=True)


@pytest.fixture
def make_item():
    def _make(item_id="w-1", prompt="dog", answer="כלב", **kwargs):
        return PracticeItem(id=item_id, prompt=prompt, answer=answer, **kwargs)

    return _make
