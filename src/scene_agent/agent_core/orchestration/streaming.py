"""Live preview of tool calls while a response is still streaming."""

from __future__ import annotations

import inspect
from dataclasses import dataclass
from typing import Awaitable, Callable, List, Optional, Tuple, Union

from ..tools.parsing import ParseResult, ToolCallParser
from ..logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class PreviewEvent:
    """
    Snapshot of the tool calls visible in the partial response.

    Attributes:
        tool_names: Names of the closed tool blocks seen so far.
        new_tool_names: Names that appeared since the previous event.
        unclosed_tag: Whether a block is currently open.
        text_length: Length of the accumulated text.
    """

    tool_names: Tuple[str, ...]
    new_tool_names: Tuple[str, ...]
    unclosed_tag: bool
    text_length: int


PreviewSink = Callable[[PreviewEvent], Union[None, Awaitable[None]]]


class StreamPreview:
    """
    Accumulates streamed chunks and re-parses the buffer after each one.

    Preview parses are best-effort and never executed; the final text is parsed
    again by the controller once the stream ends.
    """

    def __init__(self, parser: Optional[ToolCallParser] = None, sink: Optional[PreviewSink] = None) -> None:
        self._parser = parser or ToolCallParser()
        self._sink = sink
        self._chunks: List[str] = []
        self._last: ParseResult = ParseResult()

    @property
    def text(self) -> str:
        return "".join(self._chunks)

    @property
    def last_parse(self) -> ParseResult:
        return self._last

    async def feed(self, chunk: str) -> Optional[PreviewEvent]:
        """Add a chunk and emit a preview event when the visible tool calls changed.

        Returns:
            The emitted event, or None when nothing changed.
        """
        if not chunk:
            return None
        self._chunks.append(chunk)

        parse = self._parser.parse(self.text)
        previous = self._last
        self._last = parse
        if len(parse) == len(previous) and parse.unclosed_tag == previous.unclosed_tag:
            return None

        names = tuple(parse.tool_names)
        event = PreviewEvent(
            tool_names=names,
            new_tool_names=names[len(previous) :],
            unclosed_tag=parse.unclosed_tag,
            text_length=len(self.text),
        )
        await self._emit(event)
        return event

    async def _emit(self, event: PreviewEvent) -> None:
        if self._sink is None:
            return
        try:
            outcome = self._sink(event)
            if inspect.isawaitable(outcome):
                await outcome
        except Exception:
            logger.error("Preview sink failed.", exc_info=True)
