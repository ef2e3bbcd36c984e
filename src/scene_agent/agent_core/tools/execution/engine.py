"""Sequential tool execution engine."""

from __future__ import annotations

import asyncio
import inspect
import time
from typing import TYPE_CHECKING, Any, Dict, Iterable, List, Optional

from pydantic import ValidationError

from ..guard_rails import GuardRailValidator
from ..models import ToolCall, ToolDefinition, ToolResult, ToolRole
from ..schema import normalize_argument_keys
from ...exceptions import ToolExecutionError
from ...logger import get_logger
from .cancellation import CancellationToken
from .progress import ProgressEvent, ProgressPhase, ProgressSink, emit, summarize_arguments
from .report import ExecutionReport, ReportEntry

if TYPE_CHECKING:
    from ...context import ConversationContext
    from ...host import HostEnvironment
    from ..registry import ToolRegistry

logger = get_logger(__name__)


class ToolExecutionEngine:
    """Runs parsed tool calls one after another against a host.

    Every call produces exactly one report entry, in parse order. Unknown tools,
    invalid arguments, guard-rail violations and faulting handlers become failed
    results; the remaining calls still run.
    """

    def __init__(
        self,
        registry: "ToolRegistry",
        validator: Optional[GuardRailValidator] = None,
        *,
        tool_timeout: float = 180.0,
        args_summary_limit: int = 100,
    ) -> None:
        """Initialize the engine.

        Args:
            registry: Registry used to resolve tool definitions.
            validator: Guard-rail validator. Defaults to the guards declared in the registry.
            tool_timeout: Timeout in seconds for coroutine handlers.
            args_summary_limit: Maximum length of a value in progress summaries.
        """
        self._registry = registry
        self._validator = validator if validator is not None else GuardRailValidator.from_registry(registry)
        self._tool_timeout = tool_timeout
        self._args_summary_limit = args_summary_limit
        self._lock = asyncio.Lock()

    @property
    def validator(self) -> GuardRailValidator:
        return self._validator

    @property
    def registry(self) -> "ToolRegistry":
        return self._registry

    async def execute(
        self,
        calls: Iterable[ToolCall],
        host: "HostEnvironment",
        *,
        context: Optional["ConversationContext"] = None,
        sink: Optional[ProgressSink] = None,
        cancel: Optional[CancellationToken] = None,
    ) -> ExecutionReport:
        """Execute the calls strictly in order.

        Args:
            calls: Parsed tool calls.
            host: The environment the tools act on.
            context: Conversation context used for reference resolution and updated
                     with the entities each call touched.
            sink: Receives a ``start`` event before and a ``success``/``failure`` event
                  after every call.
            cancel: Checked before each call. A running handler is never interrupted.

        Returns:
            The finalized execution report.
        """
        pending = list(calls)
        report = ExecutionReport(total=len(pending))

        async with self._lock:
            logger.info(f"Executing {len(pending)} tool call(s).")
            for index, call in enumerate(pending):
                if cancel is not None and cancel.cancelled:
                    logger.info(f"Execution cancelled before call {index + 1}/{len(pending)} ('{call.name}').")
                    report.finalize(cancelled=True, pending=pending[index:])
                    return report

                report.append(await self._run_call(index, len(pending), call, host, context, sink))

            report.finalize()
        return report

    async def _run_call(
        self,
        index: int,
        total: int,
        call: ToolCall,
        host: "HostEnvironment",
        context: Optional["ConversationContext"],
        sink: Optional[ProgressSink],
    ) -> ReportEntry:
        summary = summarize_arguments(call.name, call.arguments, self._args_summary_limit)
        await emit(sink, ProgressEvent(ProgressPhase.START, call.name, summary, index, total))

        started = time.perf_counter()
        definition = self._registry.resolve(call.name)
        if definition is None:
            msg = f"Tool '{call.name}' not found in registry."
            logger.warning(msg)
            result = ToolResult.fail(msg)
            roles = ToolRole.NONE
        else:
            roles = definition.roles
            try:
                result = await self._execute_resolved(definition, call, host, context)
            except Exception as exc:
                msg = str(exc) or type(exc).__name__
                logger.warning(f"Tool '{call.name}' failed: {msg} ({type(exc).__name__})")
                result = ToolResult.fail(msg)
        elapsed_ms = (time.perf_counter() - started) * 1000.0

        if context is not None:
            context.update_from_result(result)

        phase = ProgressPhase.SUCCESS if result.success else ProgressPhase.FAILURE
        logger.info(f"Tool '{call.name}' {phase.value} in {elapsed_ms:.1f} ms.")
        await emit(sink, ProgressEvent(phase, call.name, summary, index, total, elapsed_ms, result.compact()))
        return ReportEntry(index=index, call=call, result=result, elapsed_ms=elapsed_ms, roles=roles)

    async def _execute_resolved(
        self,
        definition: ToolDefinition,
        call: ToolCall,
        host: "HostEnvironment",
        context: Optional["ConversationContext"],
    ) -> ToolResult:
        arguments = normalize_argument_keys(call.arguments, definition.parameter_keys)
        if context is not None:
            self._resolve_references(definition, arguments, host, context)

        pre_warnings = self._validator.validate(definition.name, arguments)
        blocking = [w.message for w in pre_warnings if w.blocking]
        if blocking:
            logger.warning(f"Skipping '{definition.name}': {len(blocking)} hard guard-rail violation(s).")
            return ToolResult.fail(" ".join(blocking))
        warnings = [w.message for w in pre_warnings]

        if definition.args_model is not None:
            try:
                handler_args: Dict[str, Any] = definition.args_model(**arguments).model_dump()
            except ValidationError as validation_error:
                msg = f"Argument validation failed: {validation_error}"
                logger.warning(f"Validation error for '{definition.name}': {msg}")
                return ToolResult.fail(msg).with_warnings(warnings)
        else:
            handler_args = dict(arguments)

        logger.debug(f"Executing tool '{definition.name}'...")
        result = await self._invoke(definition, handler_args, host)

        if result.success:
            warnings.extend(self._verify(definition, arguments, host))
        return result.with_warnings(warnings)

    async def _invoke(self, definition: ToolDefinition, arguments: Dict[str, Any], host: "HostEnvironment") -> ToolResult:
        """Call the handler; coroutine handlers are awaited with the configured timeout.

        Raises:
            ToolExecutionError: If a coroutine handler times out.
        """
        outcome = definition(arguments, host)
        if inspect.isawaitable(outcome):
            try:
                outcome = await asyncio.wait_for(outcome, timeout=self._tool_timeout)
            except asyncio.TimeoutError as exc:
                msg = f"Tool execution timed out after {self._tool_timeout} seconds."
                raise ToolExecutionError(msg) from exc
        return _as_result(definition.name, outcome)

    def _verify(self, definition: ToolDefinition, arguments: Dict[str, Any], host: "HostEnvironment") -> List[str]:
        entity = self._validator.target_entity(definition.name, arguments)
        if entity is None:
            return []
        try:
            state = host.query_entity(entity)
        except Exception as exc:
            msg = f"'{definition.name}': could not re-read '{entity}' after execution: {exc}"
            logger.warning(msg)
            return [msg]
        return [w.message for w in self._validator.verify(definition.name, arguments, state)]

    @staticmethod
    def _resolve_references(
        definition: ToolDefinition,
        arguments: Dict[str, Any],
        host: "HostEnvironment",
        context: "ConversationContext",
    ) -> None:
        for key in definition.entity_keys:
            value = arguments.get(key)
            if not isinstance(value, str):
                continue
            resolved = context.resolve_reference(value)
            if resolved is None or resolved == value:
                continue
            # an entity literally named "it" wins over the pronoun
            if host.query_entity(value) is not None:
                continue
            logger.info(f"Resolved '{key}: {value}' to '{resolved}' for '{definition.name}'.")
            arguments[key] = resolved


def _as_result(tool_name: str, outcome: Any) -> ToolResult:
    if isinstance(outcome, ToolResult):
        return outcome
    if outcome is None:
        return ToolResult.ok(f"{tool_name} completed.")
    if isinstance(outcome, bool):
        return ToolResult(success=outcome, message=f"{tool_name} {'completed' if outcome else 'failed'}.")
    return ToolResult.ok(str(outcome))
