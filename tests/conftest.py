from __future__ import annotations

from typing import Sequence

import pytest

from research_writer.models.agent_schemas import ChatMessage, LLMResponse


class FakeGateway:
    """Scripted stand-in for LLMGateway.

    ``complete`` returns the scripted replies in order and repeats the last
    one once the script runs out. ``generate`` answers tool calls with
    ``tool_reply``. Every call is recorded.
    """

    def __init__(self, replies: Sequence[str], tool_reply: str = "tool output") -> None:
        self.replies = list(replies)
        self.tool_reply = tool_reply
        self.complete_calls: list[tuple[str, list[ChatMessage]]] = []
        self.generate_calls: list[tuple[str, str]] = []

    async def complete(self, system_prompt: str, messages: Sequence[ChatMessage]) -> LLMResponse:
        self.complete_calls.append((system_prompt, list(messages)))
        idx = min(len(self.complete_calls), len(self.replies)) - 1
        return LLMResponse(text=self.replies[idx], provider="fake", model="fake-1")

    async def generate(self, system_prompt: str, user_text: str) -> LLMResponse:
        self.generate_calls.append((system_prompt, user_text))
        return LLMResponse(text=self.tool_reply, provider="fake", model="fake-1")


@pytest.fixture
def fake_gateway():
    return FakeGateway


@pytest.fixture(autouse=True)
def _reset_config_cache():
    """Reset the module-level models.yaml cache around each test."""
    import research_writer.config as cfg

    cfg._models_config_cache = None
    yield
    cfg._models_config_cache = None
