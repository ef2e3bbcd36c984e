"""Turn orchestration: completion detection, continuation prompts and the controller."""

from .completion import CompletionHeuristic, CompletionRule, CompletionVerdict, ReasonCode, ends_with_terminal
from .controller import AutoContinueController, ControllerState, TurnStatus, TurnSummary
from .prompts import build_continuation_prompt, build_initial_prompt, build_system_instruction
from .session import ChatSession, TurnState
from .streaming import PreviewEvent, StreamPreview

__all__ = [
    "CompletionHeuristic",
    "CompletionRule",
    "CompletionVerdict",
    "ReasonCode",
    "ends_with_terminal",
    "AutoContinueController",
    "ControllerState",
    "TurnStatus",
    "TurnSummary",
    "build_continuation_prompt",
    "build_initial_prompt",
    "build_system_instruction",
    "ChatSession",
    "TurnState",
    "PreviewEvent",
    "StreamPreview",
]
