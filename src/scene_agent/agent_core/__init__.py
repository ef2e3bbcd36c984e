"""Public exports for the agent orchestration core."""

from .base import GenericLLM, ChatResult
from .config import AgentConfig
from .context import ConversationContext, EntityRef
from .exceptions import (
    AgentCoreError,
    ToolRegistrationError,
    ToolNotFoundError,
    ToolExecutionError,
    ToolValidationError,
    GuardRailViolation,
    ReportFinalizedError,
    AgentStateError,
    ModelUnavailableError,
)
from .host import EntityState, HostEnvironment
from .logger import get_logger, setup_logging
from .messages import BaseMessage, UserMessage, AssistantMessage, SystemMessage
from .tools import (
    ToolDefinition,
    ParameterSpec,
    ToolRole,
    ToolCall,
    ToolResult,
    ToolRegistry,
    ToolCallParser,
    ParseResult,
    GuardRailValidator,
    GuardRailWarning,
    PlausibleRange,
    PostCheck,
    ToolGuard,
    CancellationToken,
    ExecutionReport,
    ProgressEvent,
    ProgressPhase,
    ReportEntry,
    ToolExecutionEngine,
)
from .orchestration import (
    AutoContinueController,
    ChatSession,
    CompletionHeuristic,
    CompletionVerdict,
    ControllerState,
    ReasonCode,
    TurnState,
    TurnStatus,
    TurnSummary,
)

__all__ = [
    "GenericLLM",
    "ChatResult",
    "AgentConfig",
    "ConversationContext",
    "EntityRef",
    "AgentCoreError",
    "ToolRegistrationError",
    "ToolNotFoundError",
    "ToolExecutionError",
    "ToolValidationError",
    "GuardRailViolation",
    "ReportFinalizedError",
    "AgentStateError",
    "ModelUnavailableError",
    "EntityState",
    "HostEnvironment",
    "get_logger",
    "setup_logging",
    "BaseMessage",
    "UserMessage",
    "AssistantMessage",
    "SystemMessage",
    "ToolDefinition",
    "ParameterSpec",
    "ToolRole",
    "ToolCall",
    "ToolResult",
    "ToolRegistry",
    "ToolCallParser",
    "ParseResult",
    "GuardRailValidator",
    "GuardRailWarning",
    "PlausibleRange",
    "PostCheck",
    "ToolGuard",
    "CancellationToken",
    "ExecutionReport",
    "ProgressEvent",
    "ProgressPhase",
    "ReportEntry",
    "ToolExecutionEngine",
    "AutoContinueController",
    "ChatSession",
    "CompletionHeuristic",
    "CompletionVerdict",
    "ControllerState",
    "ReasonCode",
    "TurnState",
    "TurnStatus",
    "TurnSummary",
]
