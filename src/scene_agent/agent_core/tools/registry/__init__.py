"""Central registry of the tools the agent may invoke."""

from .base import ToolRegistry

__all__ = ["ToolRegistry"]
