from openai import AsyncOpenAI
from openai.types.chat import ChatCompletion
from typing import Any, AsyncIterator, Dict, Iterable, List, Optional, cast
from scene_agent.agent_core import GenericLLM
from scene_agent.agent_core.base.base import ChatResult
from scene_agent.agent_core.logger import get_logger
from scene_agent.agent_core.messages.models import (
    BaseMessage,
    UserMessage,
    AssistantMessage,
    SystemMessage,
)

logger = get_logger(__name__)


class GenericOpenAI(GenericLLM[ChatCompletion]):
    """
    Implementation of GenericLLM for OpenAI's chat completion models.

    The model is used as a plain text completer: tool calls travel in-band in
    the response text and are parsed and executed by the agent core, so no
    function-calling schema is sent to the API.
    """

    def __init__(
        self,
        client: AsyncOpenAI,
        model_name: str,
        sys_instruction: str = "",
        temp: float = 1.0,
        max_tokens: int = 3000,
        max_retries: int = 3,
        base_retry_delay: float = 1.0,
    ):
        """
        Initializes the GenericOpenAI LLM wrapper.

        Args:
            client: The initialized AsyncOpenAI client.
            model_name: The identifier for the OpenAI model to use (e.g., 'gpt-4o').
            sys_instruction: System instruction used when the history does not start with one.
            temp: The temperature for text generation, controlling randomness.
            max_tokens: The maximum number of tokens to generate in the response.
            max_retries: Retries for transient API errors.
            base_retry_delay: Initial delay in seconds between retries, doubled on each attempt.
        """
        super().__init__(max_retries=max_retries, base_retry_delay=base_retry_delay)
        self.model: str = model_name
        self.sys_instruction = sys_instruction
        self.temperature = temp
        self.max_tokens = max_tokens
        self.client: AsyncOpenAI = client

    async def _chat_impl(self, history: List[BaseMessage], user_prompt: str) -> ChatResult[ChatCompletion]:
        """
        Processes a single turn of a chat conversation.

        Args:
            history: A list of `BaseMessage` objects representing the conversation history.
            user_prompt: The current message from the user.

        Returns:
            ChatResult[ChatCompletion]: The reply text, the updated history including the
            prompt and the reply, and the raw ChatCompletion object.
        """
        messages = self._build_messages(history, user_prompt)

        logger.debug(f"Sending request to OpenAI model: {self.model} ({len(messages)} messages)")
        response = await self.client.chat.completions.create(
            model=self.model,
            messages=cast(Iterable[Any], messages),
            temperature=self.temperature,
            max_tokens=self.max_tokens,
        )

        if response.choices and response.choices[0].message.content:
            messages.append({"role": "assistant", "content": response.choices[0].message.content})
        else:
            logger.warning("OpenAI response contained no message content.")

        return self._build_response(response, messages)

    async def stream_chat(self, history: List[BaseMessage], user_prompt: str) -> AsyncIterator[str]:
        """
        Streams the reply as text deltas.

        Args:
            history: The conversation history (provider-agnostic format).
            user_prompt: The user's input message.

        Yields:
            Non-empty content deltas in arrival order.
        """
        messages = self._build_messages(history, user_prompt)

        logger.debug(f"Opening stream to OpenAI model: {self.model}")
        stream = await self.client.chat.completions.create(
            model=self.model,
            messages=cast(Iterable[Any], messages),
            temperature=self.temperature,
            max_tokens=self.max_tokens,
            stream=True,
        )
        async for chunk in stream:
            if not chunk.choices:
                continue
            delta = chunk.choices[0].delta.content
            if delta:
                yield delta

    def _build_messages(self, history: List[BaseMessage], user_prompt: str) -> List[Dict[str, Any]]:
        messages = self._convert_history(history)
        if self.sys_instruction and not any(m["role"] == "system" for m in messages):
            messages.insert(0, {"role": "system", "content": self.sys_instruction})
        messages.append({"role": "user", "content": user_prompt})
        return messages

    @staticmethod
    def _convert_history(history: List[BaseMessage]) -> List[Dict[str, Any]]:
        """
        Converts generic BaseMessage history to OpenAI specific dictionary history.

        Args:
            history: List of BaseMessage objects.

        Returns:
            List of OpenAI message dictionaries.
        """
        openai_history = []
        for msg in history:
            if isinstance(msg, UserMessage):
                openai_history.append({"role": "user", "content": msg.content})
            elif isinstance(msg, AssistantMessage):
                openai_history.append({"role": "assistant", "content": msg.content})
            elif isinstance(msg, SystemMessage):
                openai_history.append({"role": "system", "content": msg.content})
        return openai_history

    @staticmethod
    def _build_response(response: ChatCompletion, history: List[Dict[str, Any]]) -> ChatResult[ChatCompletion]:
        """
        Constructs the final ChatResult object from the raw API response and chat history.

        Args:
            response: The ChatCompletion from the model.
            history: The chat history list.

        Returns:
            ChatResult[ChatCompletion]: The structured response containing text, history, and raw response.
        """
        if response.choices:
            message_content = response.choices[0].message.content or ""
        else:
            message_content = ""

        generic_history = GenericOpenAI._convert_to_generic_history(history)
        return ChatResult(content=message_content, history=generic_history, raw=response)

    @staticmethod
    def _convert_to_generic_history(history: List[Dict[str, Any]]) -> List[BaseMessage]:
        """
        Converts OpenAI specific dictionary history to generic BaseMessage history.

        Messages without content are skipped.

        Args:
            history: List of OpenAI message dictionaries.

        Returns:
            List of BaseMessage objects.
        """
        generic_history: List[BaseMessage] = []
        for msg in history:
            role = msg.get("role")
            content: Optional[str] = msg.get("content")
            if not content:
                continue

            if role == "user":
                generic_history.append(UserMessage(content=content))
            elif role == "assistant":
                generic_history.append(AssistantMessage(content=content))
            elif role == "system":
                generic_history.append(SystemMessage(content=content))
        return generic_history
