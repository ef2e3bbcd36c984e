"""Progress events emitted while a turn executes."""

from __future__ import annotations

import inspect
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Mapping, Optional, Union

from ...logger import get_logger

logger = get_logger(__name__)

_VECTOR_KEYS = ("x", "y", "z")
_TARGET_KEYS = ("gameobject_name", "name", "camera_name")


class ProgressPhase(str, Enum):
    START = "start"
    SUCCESS = "success"
    FAILURE = "failure"


@dataclass(frozen=True)
class ProgressEvent:
    """
    One observable step of tool execution.

    Attributes:
        phase: ``start`` before the call runs, ``success``/``failure`` once it finished.
        tool_name: Name of the tool.
        args_summary: Short rendering of the arguments.
        index: Zero-based position of the call in the turn.
        total: Number of calls in the turn.
        elapsed_ms: Time spent on the call, 0 for ``start``.
        message: Compact result message for finished calls.
    """

    phase: ProgressPhase
    tool_name: str
    args_summary: str
    index: int
    total: int
    elapsed_ms: float = 0.0
    message: str = ""


ProgressSink = Callable[[ProgressEvent], Union[None, Awaitable[None]]]


async def emit(sink: Optional[ProgressSink], event: ProgressEvent) -> None:
    """Deliver an event to the sink, awaiting it when it is a coroutine.

    A failing sink is logged and otherwise ignored; presentation problems must not
    change the outcome of a turn.
    """
    if sink is None:
        return
    try:
        outcome = sink(event)
        if inspect.isawaitable(outcome):
            await outcome
    except Exception:
        logger.error(f"Progress sink failed on {event.phase.value} event for '{event.tool_name}'.", exc_info=True)


def summarize_arguments(tool_name: str, arguments: Mapping[str, Any], limit: int = 100) -> str:
    """Render arguments for a progress line.

    Transform-style calls render as ``Player → (0, 1.8, 0)``; anything else shows
    its first two ``key: value`` pairs with long values shortened.

    Args:
        tool_name: Name of the tool, used in log output only.
        arguments: Arguments of the call.
        limit: Maximum characters per value.

    Returns:
        The summary text, ``()`` for calls without arguments.
    """
    if not arguments:
        return "()"

    if all(k in arguments for k in _VECTOR_KEYS):
        target = next((arguments[k] for k in _TARGET_KEYS if k in arguments), None)
        if target is not None:
            vector = ", ".join(str(arguments[k]) for k in _VECTOR_KEYS)
            return f"{target} → ({vector})"

    pairs = []
    for key, value in list(arguments.items())[:2]:
        text = " ".join(str(value).split())
        if len(text) > limit:
            text = text[:limit] + "..."
        pairs.append(f"{key}: {text}")
    logger.debug(f"Summarized {len(arguments)} argument(s) for '{tool_name}'.")
    return ", ".join(pairs)
