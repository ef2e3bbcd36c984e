"""Scene Agent - tool orchestration core for an in-editor 3D scene assistant."""

from .agent_core import (
    AgentConfig,
    AutoContinueController,
    ChatSession,
    CompletionHeuristic,
    ConversationContext,
    GenericLLM,
    ChatResult,
    ToolCallParser,
    ToolExecutionEngine,
    ToolRegistry,
    ToolResult,
    ToolRole,
    TurnStatus,
    TurnSummary,
)
from .llm_impl import GenericOpenAI

__all__ = [
    "AgentConfig",
    "AutoContinueController",
    "ChatSession",
    "CompletionHeuristic",
    "ConversationContext",
    "GenericLLM",
    "ChatResult",
    "ToolCallParser",
    "ToolExecutionEngine",
    "ToolRegistry",
    "ToolResult",
    "ToolRole",
    "TurnStatus",
    "TurnSummary",
    "GenericOpenAI",
]
