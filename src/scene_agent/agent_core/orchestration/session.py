"""Chat session state owned by one editor conversation."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from ..context import ConversationContext
from ..messages import BaseMessage
from ..tools.execution import ExecutionReport
from ..tools.parsing import ParseResult
from .completion import CompletionVerdict


@dataclass
class TurnState:
    """
    One model round-trip with its execution and assessment.

    Attributes:
        turn_index: 0 for the user's request, 1.. for auto-continuations.
        max_auto_continues: Continuation budget in effect for the turn.
        prompt: Prompt sent to the model.
        raw_response_text: Full model response.
        parse: Parse of the response.
        report: Execution report, None if the turn was cancelled before execution.
        verdict: Completion verdict, None if the turn was not assessed.
    """

    turn_index: int
    max_auto_continues: int
    prompt: str
    raw_response_text: str = ""
    parse: Optional[ParseResult] = None
    report: Optional[ExecutionReport] = None
    verdict: Optional[CompletionVerdict] = None


@dataclass
class ChatSession:
    """
    State shared by the turns of one conversation.

    Sessions never share their context; each editor chat owns one.

    Attributes:
        context: Recently touched entities.
        history: Provider-agnostic message history sent to the model.
        transcript: Append-only record of turns. Entries are removed only by explicit user deletion.
    """

    context: ConversationContext = field(default_factory=ConversationContext)
    history: List[BaseMessage] = field(default_factory=list)
    transcript: List[TurnState] = field(default_factory=list)

    def record(self, turn: TurnState) -> None:
        self.transcript.append(turn)

    def delete_turn(self, index: int) -> TurnState:
        """Remove a turn from the transcript at the user's request.

        Raises:
            IndexError: If no turn exists at ``index``.
        """
        return self.transcript.pop(index)

    def clear(self) -> None:
        """Start over: forget history, transcript and recent entities."""
        self.context.clear()
        self.history.clear()
        self.transcript.clear()
