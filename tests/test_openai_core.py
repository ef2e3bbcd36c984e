import pytest
from unittest.mock import MagicMock
from openai.types.chat import ChatCompletion, ChatCompletionMessage
from openai.types.chat.chat_completion import Choice
from typing import Any, List

from scene_agent.agent_core import AssistantMessage, SystemMessage, UserMessage
from scene_agent.llm_impl.openai_api.core import GenericOpenAI


def _response(content: Any) -> Any:
    mock_message = MagicMock(spec=ChatCompletionMessage)
    mock_message.content = content

    mock_choice = MagicMock(spec=Choice)
    mock_choice.message = mock_message
    mock_choice.finish_reason = "stop"

    mock_response = MagicMock(spec=ChatCompletion)
    mock_response.choices = [mock_choice]
    return mock_response


def _chunk(content: Any) -> Any:
    chunk = MagicMock()
    chunk.choices = [MagicMock()]
    chunk.choices[0].delta.content = content
    return chunk


class _Stream:
    def __init__(self, chunks: List[Any]) -> None:
        self._chunks = iter(chunks)

    def __aiter__(self) -> "_Stream":
        return self

    async def __anext__(self) -> Any:
        try:
            return next(self._chunks)
        except StopIteration:
            raise StopAsyncIteration


@pytest.mark.asyncio
async def test_generic_openai_initialization(mock_openai_client: Any) -> None:
    openai_llm = GenericOpenAI(client=mock_openai_client, model_name="gpt-4", sys_instruction="You are a helper.")
    assert openai_llm.model == "gpt-4"
    assert openai_llm.client == mock_openai_client
    assert openai_llm.sys_instruction == "You are a helper."


@pytest.mark.asyncio
async def test_ask_method(mock_openai_client: Any) -> None:
    mock_openai_client.chat.completions.create.return_value = _response("Hello world")
    openai_llm = GenericOpenAI(client=mock_openai_client, model_name="gpt-4", sys_instruction="You are a helper.")

    response = await openai_llm.ask("Hello")

    assert response.content == "Hello world"
    call_args = mock_openai_client.chat.completions.create.call_args
    assert call_args.kwargs["model"] == "gpt-4"
    assert "tools" not in call_args.kwargs
    # the messages list is extended in place with the reply
    assert call_args.kwargs["messages"] == [
        {"role": "system", "content": "You are a helper."},
        {"role": "user", "content": "Hello"},
        {"role": "assistant", "content": "Hello world"},
    ]


@pytest.mark.asyncio
async def test_chat_method_returns_generic_history(mock_openai_client: Any) -> None:
    mock_openai_client.chat.completions.create.return_value = _response("Chat response")
    openai_llm = GenericOpenAI(client=mock_openai_client, model_name="gpt-4", sys_instruction="You are a helper.")

    response = await openai_llm.chat([], "Hi")

    assert response.content == "Chat response"
    assert [type(m) for m in response.history] == [SystemMessage, UserMessage, AssistantMessage]
    assert response.history[2].content == "Chat response"


@pytest.mark.asyncio
async def test_existing_system_message_is_not_duplicated(mock_openai_client: Any) -> None:
    mock_openai_client.chat.completions.create.return_value = _response("ok")
    openai_llm = GenericOpenAI(client=mock_openai_client, model_name="gpt-4", sys_instruction="Default.")

    response = await openai_llm.chat([SystemMessage(content="Tool catalog.")], "Hi")

    messages = mock_openai_client.chat.completions.create.call_args.kwargs["messages"]
    assert [m["role"] for m in messages] == ["system", "user", "assistant"]
    assert messages[0]["content"] == "Tool catalog."
    assert len(response.history) == 3


@pytest.mark.asyncio
async def test_empty_choices(mock_openai_client: Any) -> None:
    empty = MagicMock(spec=ChatCompletion)
    empty.choices = []
    mock_openai_client.chat.completions.create.return_value = empty
    openai_llm = GenericOpenAI(client=mock_openai_client, model_name="gpt-4")

    response = await openai_llm.chat([], "Hi")

    assert response.content == ""
    assert [type(m) for m in response.history] == [UserMessage]


@pytest.mark.asyncio
async def test_stream_chat_yields_deltas(mock_openai_client: Any) -> None:
    mock_openai_client.chat.completions.create.return_value = _Stream(
        [_chunk("[TOOL:save"), _chunk(None), _chunk("_scene]\n[/TOOL]"), _chunk(" Saved.")]
    )
    openai_llm = GenericOpenAI(client=mock_openai_client, model_name="gpt-4", sys_instruction="sys")

    chunks = [chunk async for chunk in openai_llm.stream_chat([], "Save")]

    assert chunks == ["[TOOL:save", "_scene]\n[/TOOL]", " Saved."]
    assert mock_openai_client.chat.completions.create.call_args.kwargs["stream"] is True
