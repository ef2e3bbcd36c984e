"""Auto-continue controller: drives a user request to completion."""

from __future__ import annotations

from contextlib import aclosing
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, FrozenSet, List, Optional

from ..base import GenericLLM
from ..config import AgentConfig
from ..context import ConversationContext
from ..exceptions import AgentStateError, ModelUnavailableError
from ..host import HostEnvironment
from ..messages import AssistantMessage, SystemMessage, UserMessage
from ..tools.execution import CancellationToken, ExecutionReport, ProgressSink, ReportEntry, ToolExecutionEngine
from ..tools.parsing import ToolCallParser
from ..logger import get_logger
from .completion import CompletionHeuristic
from .prompts import build_continuation_prompt, build_initial_prompt, build_system_instruction
from .session import ChatSession, TurnState
from .streaming import PreviewSink, StreamPreview

logger = get_logger(__name__)


class ControllerState(str, Enum):
    AWAITING_MODEL = "awaiting_model"
    EXECUTING = "executing"
    ASSESSING = "assessing"
    CONTINUING = "continuing"
    DONE = "done"


_TRANSITIONS: Dict[ControllerState, FrozenSet[ControllerState]] = {
    ControllerState.AWAITING_MODEL: frozenset({ControllerState.EXECUTING, ControllerState.DONE}),
    ControllerState.EXECUTING: frozenset({ControllerState.ASSESSING, ControllerState.DONE}),
    ControllerState.ASSESSING: frozenset({ControllerState.CONTINUING, ControllerState.DONE}),
    ControllerState.CONTINUING: frozenset({ControllerState.AWAITING_MODEL}),
    ControllerState.DONE: frozenset({ControllerState.AWAITING_MODEL}),
}


class TurnStatus(str, Enum):
    COMPLETE = "complete"
    NEEDS_USER_INPUT = "needs_user_input"
    CANCELLED = "cancelled"


@dataclass
class TurnSummary:
    """
    Result of one user request, covering the first turn and every auto-continuation.

    Attributes:
        request: The user's request.
        status: How the request ended. ``NEEDS_USER_INPUT`` means the continuation
                budget ran out while the work still looked incomplete.
        turns: The turns in order.
    """

    request: str
    status: TurnStatus
    turns: List[TurnState] = field(default_factory=list)

    @property
    def budget_exhausted(self) -> bool:
        return self.status is TurnStatus.NEEDS_USER_INPUT

    @property
    def final_text(self) -> str:
        return self.turns[-1].raw_response_text if self.turns else ""

    @property
    def reports(self) -> List[ExecutionReport]:
        return [t.report for t in self.turns if t.report is not None]

    @property
    def entries(self) -> List[ReportEntry]:
        return [entry for report in self.reports for entry in report]

    @property
    def audit(self) -> List[ReportEntry]:
        """Every failed or warned entry of every turn, repeats included."""
        return [entry for report in self.reports for entry in report.problems]

    def render(self) -> str:
        lines = [f"Status: {self.status.value} after {len(self.turns)} turn(s)."]
        for turn in self.turns:
            if turn.report is None or not len(turn.report):
                continue
            lines.append(f"Turn {turn.turn_index + 1}:")
            lines.extend(f"  {line}" for line in turn.report.summary_lines())
        if self.audit:
            lines.append(f"{len(self.audit)} problem(s) occurred during this request:")
            lines.extend(f"  - {e.tool_name}: {e.result.compact()}" for e in self.audit)
        return "\n".join(lines)


class AutoContinueController:
    """
    Runs model turns until the work looks complete or the continuation budget is spent.

    Each turn: the model answers, the tool calls in its answer are parsed and
    executed, and the completion heuristic assesses the result. An incomplete
    turn triggers a continuation prompt tailored to the reasons, at most
    ``max_auto_continues`` times per request.
    """

    def __init__(
        self,
        llm: GenericLLM[Any],
        engine: ToolExecutionEngine,
        host: HostEnvironment,
        *,
        session: Optional[ChatSession] = None,
        config: Optional[AgentConfig] = None,
        heuristic: Optional[CompletionHeuristic] = None,
        parser: Optional[ToolCallParser] = None,
        progress_sink: Optional[ProgressSink] = None,
        preview_sink: Optional[PreviewSink] = None,
    ) -> None:
        """Initialize the controller.

        Args:
            llm: Completion provider.
            engine: Executes parsed tool calls; its registry supplies the tool catalog.
            host: The environment tools act on.
            session: Conversation state. A fresh session is created when omitted.
            config: Runtime configuration. Defaults to ``AgentConfig()``.
            heuristic: Completion rules.
            parser: Tool call parser.
            progress_sink: Receives tool progress events.
            preview_sink: Receives stream preview events in streaming mode.
        """
        self.config = config or AgentConfig()
        self.llm = llm
        self.engine = engine
        self.host = host
        self.session = session or ChatSession(context=ConversationContext(self.config.recent_entity_capacity))
        self.parser = parser or ToolCallParser()
        self.heuristic = heuristic or CompletionHeuristic(parser=self.parser)
        self.progress_sink = progress_sink
        self.preview_sink = preview_sink
        self._state = ControllerState.AWAITING_MODEL

    @property
    def state(self) -> ControllerState:
        return self._state

    def _transition(self, target: ControllerState) -> None:
        if target not in _TRANSITIONS[self._state]:
            msg = f"Illegal controller transition {self._state.value} -> {target.value}."
            logger.error(msg)
            raise AgentStateError(msg)
        logger.debug(f"Controller: {self._state.value} -> {target.value}")
        self._state = target

    async def run(self, user_request: str, cancel: Optional[CancellationToken] = None) -> TurnSummary:
        """Handle one user request.

        Args:
            user_request: The natural-language request.
            cancel: Optional token; checked between streamed chunks, after each model call
                    and between tool calls.

        Returns:
            The summary of all turns the request took.

        Raises:
            ModelUnavailableError: If the completion provider fails.
            AgentStateError: If a request is already running on this controller.
        """
        if self._state is ControllerState.DONE:
            self._transition(ControllerState.AWAITING_MODEL)
        elif self._state is not ControllerState.AWAITING_MODEL:
            raise AgentStateError(f"A request is already running (state: {self._state.value}).")

        if not self.session.history:
            self.session.history.append(SystemMessage(content=build_system_instruction(self.engine.registry)))

        try:
            return await self._run_turns(user_request, cancel)
        except BaseException:
            if self._state is not ControllerState.DONE:
                logger.debug(f"Controller: {self._state.value} -> done (request aborted)")
                self._state = ControllerState.DONE
            raise

    async def _run_turns(self, user_request: str, cancel: Optional[CancellationToken]) -> TurnSummary:
        max_continues = self.config.max_auto_continues
        prompt = build_initial_prompt(user_request, self.session.context)
        turns: List[TurnState] = []
        turn_index = 0

        while True:
            turn = TurnState(turn_index=turn_index, max_auto_continues=max_continues, prompt=prompt)
            turns.append(turn)
            self.session.record(turn)

            turn.raw_response_text = await self._complete(prompt, cancel)
            if cancel is not None and cancel.cancelled:
                logger.info("Request cancelled after the model call.")
                self._transition(ControllerState.DONE)
                return TurnSummary(user_request, TurnStatus.CANCELLED, turns)

            self._transition(ControllerState.EXECUTING)
            turn.parse = self.parser.parse(turn.raw_response_text)
            turn.report = await self.engine.execute(
                turn.parse.calls,
                self.host,
                context=self.session.context,
                sink=self.progress_sink,
                cancel=cancel,
            )
            if turn.report.cancelled:
                logger.info(f"Request cancelled with {len(turn.report.pending)} tool call(s) pending.")
                self._transition(ControllerState.DONE)
                return TurnSummary(user_request, TurnStatus.CANCELLED, turns)

            self._transition(ControllerState.ASSESSING)
            turn.verdict = self.heuristic.assess(turn.raw_response_text, turn.report, turn.parse)
            if turn.verdict.complete:
                self._transition(ControllerState.DONE)
                return TurnSummary(user_request, TurnStatus.COMPLETE, turns)

            if turn_index >= max_continues:
                logger.warning(
                    f"Continuation budget of {max_continues} exhausted; still incomplete "
                    f"({', '.join(r.name for r in turn.verdict.reasons)})."
                )
                self._transition(ControllerState.DONE)
                return TurnSummary(user_request, TurnStatus.NEEDS_USER_INPUT, turns)

            self._transition(ControllerState.CONTINUING)
            prompt = build_continuation_prompt(
                turn.verdict, turn.report, self.engine.validator, self.session.context, self.heuristic
            )
            turn_index += 1
            logger.info(f"Auto-continue {turn_index}/{max_continues}.")
            self._transition(ControllerState.AWAITING_MODEL)

    async def _complete(self, prompt: str, cancel: Optional[CancellationToken] = None) -> str:
        """Get the model's reply, single-shot or streamed.

        A streamed reply stops early when ``cancel`` fires between chunks.

        Raises:
            ModelUnavailableError: Wrapping any provider failure.
        """
        try:
            if not self.config.streaming:
                result = await self.llm.chat(self.session.history, prompt)
                self.session.history = list(result.history)
                return result.content

            preview = StreamPreview(self.parser, self.preview_sink)
            async with aclosing(self.llm.stream_chat(self.session.history, prompt)) as stream:
                async for chunk in stream:
                    await preview.feed(chunk)
                    if cancel is not None and cancel.cancelled:
                        logger.info(f"Stream stopped after {len(preview.text)} characters.")
                        break
            text = preview.text
            self.session.history.extend([UserMessage(content=prompt), AssistantMessage(content=text)])
            return text
        except Exception as exc:
            msg = f"Completion provider failed: {exc}"
            logger.error(msg)
            raise ModelUnavailableError(msg) from exc
