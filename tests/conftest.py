import sys
import os
from types import SimpleNamespace

import pytest

# Add backend/ to path so tests can import backend modules directly
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "backend"))

# Add scripts/ to path so the import CLI can be tested directly
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "scripts"))


class FakeCompletions:
    """Stands in for client.chat.completions; records calls, returns a canned reply."""

    def __init__(self, content=None, exc=None):
        self.content = content
        self.exc = exc
        self.calls = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.exc is not None:
            raise self.exc
        message = SimpleNamespace(content=self.content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


@pytest.fixture()
def fake_openai():
    """Factory: fake_openai(content=..., exc=...) -> (client, completions)."""
    def _make(content=None, exc=None):
        completions = FakeCompletions(content, exc)
        return SimpleNamespace(chat=SimpleNamespace(completions=completions)), completions
    return _make
