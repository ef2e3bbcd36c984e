"""Data models for parsed tool calls and their outcomes."""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional

from pydantic import BaseModel, Field


@dataclass(frozen=True)
class SourceSpan:
    """Half-open character range ``[start, end)`` of a tool block in the raw model output."""

    start: int
    end: int

    def slice(self, text: str) -> str:
        return text[self.start : self.end]


@dataclass(frozen=True)
class ToolCall:
    """Represents a single tool invocation parsed from model output.

    Arguments keep their source order and are exposed read-only.
    """

    name: str
    arguments: Mapping[str, str] = field(default_factory=dict)
    raw_span: Optional[SourceSpan] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "arguments", MappingProxyType(dict(self.arguments)))


class ToolResult(BaseModel):
    """
    Outcome of a single tool call.

    Attributes:
        success: Whether the operation succeeded.
        message: Human readable outcome (or the failure reason).
        side_effect: Optional structured payload, e.g. ``{"entity": "Player", "kind": "gameobject",
                     "action": "created"}``.
        warnings: Soft problems detected around the call (guard rails, post verification).
    """

    success: bool
    message: str = ""
    side_effect: Optional[Dict[str, Any]] = None
    warnings: List[str] = Field(default_factory=list)

    @classmethod
    def ok(cls, message: str, **side_effect: Any) -> "ToolResult":
        return cls(success=True, message=message, side_effect=side_effect or None)

    @classmethod
    def fail(cls, message: str) -> "ToolResult":
        return cls(success=False, message=message)

    @property
    def has_warnings(self) -> bool:
        return bool(self.warnings)

    def with_warnings(self, warnings: List[str]) -> "ToolResult":
        if not warnings:
            return self
        return self.model_copy(update={"warnings": [*self.warnings, *warnings]})

    def compact(self, width: int = 80) -> str:
        """First non-empty line of the message, shortened to ``width`` characters."""
        lines = [line.strip() for line in self.message.splitlines() if line.strip()]
        first = lines[0] if lines else ""
        return first if len(first) <= width else first[: width - 3] + "..."
