from .models import ToolDefinition, ParameterSpec, ToolRole, SourceSpan, ToolCall, ToolResult
from .registry import ToolRegistry
from .parsing import ToolCallParser, ParseResult
from .guard_rails import GuardRailValidator, GuardRailWarning, PlausibleRange, PostCheck, ToolGuard
from .execution import (
    CancellationToken,
    ExecutionReport,
    ProgressEvent,
    ProgressPhase,
    ReportEntry,
    ToolExecutionEngine,
)

__all__ = [
    "ToolDefinition",
    "ParameterSpec",
    "ToolRole",
    "SourceSpan",
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
]
