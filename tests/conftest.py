"""Shared fixtures for the CemtrAS test suite."""

import pytest

from cemtras.ai.base import TextCompletionProvider
from cemtras.ai.prompts.schemas import InstructionPayload
from cemtras.db.kv_store import InMemoryKeyValueStore

STRUCTURED_REPLY = """**Problem Statement**
Kiln shell temperature is rising near the burning zone.

**Analysis**
- Coating loss at 28-32 m from the outlet
- Shell scanner shows 380 °C hot spots

**Solution / Recommendation**
- Reduce kiln feed by 5%
- Adjust burner pipe position

**Best Practices / Safety Notes**
- Keep shell cooling fans running
- Log scanner readings every shift"""


class FakeProvider(TextCompletionProvider):
    """Provider double that records payloads and returns a canned reply."""

    def __init__(self, reply: str = STRUCTURED_REPLY) -> None:
        self.reply = reply
        self.error: Exception | None = None
        self.calls: list[InstructionPayload] = []

    async def generate(self, payload: InstructionPayload) -> str:
        self.calls.append(payload)
        if self.error is not None:
            raise self.error
        return self.reply


@pytest.fixture
def store():
    """Create an empty in-memory key-value store."""
    return InMemoryKeyValueStore()


@pytest.fixture
def fake_provider():
    return FakeProvider()
