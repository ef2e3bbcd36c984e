"""Tool-related data models."""

from .models import ToolDefinition, ParameterSpec, ToolRole
from .tool_call import SourceSpan, ToolCall, ToolResult

__all__ = ["ToolDefinition", "ParameterSpec", "ToolRole", "SourceSpan", "ToolCall", "ToolResult"]
