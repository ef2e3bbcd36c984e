from typing import Any, AsyncIterator, List, Sequence
from unittest.mock import AsyncMock, MagicMock

import pytest
from openai import AsyncOpenAI

from scene_agent.agent_core import (
    AssistantMessage,
    BaseMessage,
    ChatResult,
    GenericLLM,
    ToolExecutionEngine,
    ToolRegistry,
    UserMessage,
)
from scene_agent.scene import InMemoryScene, build_scene_registry


class ScriptedLLM(GenericLLM[str]):
    """Replays canned replies in order and records every prompt it received."""

    def __init__(self, replies: Sequence[str], chunk_size: int = 0) -> None:
        super().__init__(max_retries=0, base_retry_delay=0.0)
        self.replies = list(replies)
        self.prompts: List[str] = []
        self.chunk_size = chunk_size

    def _next(self, user_prompt: str) -> str:
        self.prompts.append(user_prompt)
        return self.replies.pop(0)

    async def _chat_impl(self, history: List[BaseMessage], user_prompt: str) -> ChatResult[str]:
        reply = self._next(user_prompt)
        new_history = [*history, UserMessage(content=user_prompt), AssistantMessage(content=reply)]
        return ChatResult(content=reply, history=new_history, raw=reply)

    async def stream_chat(self, history: List[BaseMessage], user_prompt: str) -> AsyncIterator[str]:
        reply = self._next(user_prompt)
        size = self.chunk_size or len(reply) or 1
        for start in range(0, len(reply), size):
            yield reply[start : start + size]


@pytest.fixture
def scene() -> InMemoryScene:
    return InMemoryScene()


@pytest.fixture
def registry() -> ToolRegistry:
    return build_scene_registry()


@pytest.fixture
def engine(registry: ToolRegistry) -> ToolExecutionEngine:
    return ToolExecutionEngine(registry)


@pytest.fixture
def mock_openai_client() -> Any:
    client = MagicMock(spec=AsyncOpenAI)
    client.chat = MagicMock()
    client.chat.completions = MagicMock()
    client.chat.completions.create = AsyncMock()
    return client


@pytest.fixture
def scripted_llm() -> type:
    return ScriptedLLM
