"""Extraction of tool calls from raw model output."""

from .parser import ToolCallParser, ParseResult, OPEN_TAG_PREFIX, CLOSE_TAG

__all__ = ["ToolCallParser", "ParseResult", "OPEN_TAG_PREFIX", "CLOSE_TAG"]
