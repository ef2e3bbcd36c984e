"""Parser for the delimiter-tagged tool call syntax embedded in model output.

Wire format::

    [TOOL:create_gameobject]
    name: Player
    parent: World
    [/TOOL]

A block ends at the literal closing delimiter, so a value can never contain
``[/TOOL]``. An opening tag at the start of a line inside a block means the
block was never closed. Values of verbatim keys (script bodies) run unchanged
up to the delimiter, including lines that look like ``key: value`` or even
another opening tag.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Iterable, List, Optional, Tuple

from ..models import SourceSpan, ToolCall
from ...logger import get_logger

logger = get_logger(__name__)

OPEN_TAG_PREFIX = "[TOOL"
CLOSE_TAG = "[/TOOL]"

_OPEN_TAG = re.compile(r"\[TOOL(?::([^\]\n]*))?\]")
_LINE_OPEN_TAG = re.compile(r"^\s*\[TOOL(?::[^\]\n]*)?\]")
_KEY_LINE = re.compile(r"^\s*([A-Za-z_][A-Za-z0-9_]*)\s*:(.*)$")

DEFAULT_VERBATIM_KEYS: FrozenSet[str] = frozenset({"script_content", "scriptContent", "code", "content", "body"})


@dataclass(frozen=True)
class ParseResult:
    """
    Outcome of parsing one model response.

    Attributes:
        calls: Well-formed tool calls in source order.
        unclosed_tag: True when a block was opened but never closed. Calls after that
                      point are not recovered.
        narrative: The response text with every closed tool block removed, plus the
                   text preceding an unclosed block.
    """

    calls: Tuple[ToolCall, ...] = field(default_factory=tuple)
    unclosed_tag: bool = False
    narrative: str = ""

    def __len__(self) -> int:
        return len(self.calls)

    @property
    def tool_names(self) -> List[str]:
        return [call.name for call in self.calls]


class ToolCallParser:
    """
    Tolerant parser for ``[TOOL:name] ... [/TOOL]`` blocks.

    Parsing never raises. Argument keys are kept as written; checking them
    against a tool's schema is the registry's job.
    """

    def __init__(self, verbatim_keys: Optional[Iterable[str]] = None) -> None:
        """Initialize the parser.

        Args:
            verbatim_keys: Keys whose value is the verbatim remainder of the block.
                           Defaults to the usual script-body keys.
        """
        self._verbatim_keys = frozenset(verbatim_keys) if verbatim_keys is not None else DEFAULT_VERBATIM_KEYS

    def parse(self, text: str) -> ParseResult:
        """Extract every closed tool block from ``text``.

        Args:
            text: Raw model output, possibly partial while streaming.

        Returns:
            The parsed calls, the unclosed-tag flag and the narrative text.
        """
        calls: List[ToolCall] = []
        narrative: List[str] = []
        unclosed = False
        position = 0

        while True:
            match = _OPEN_TAG.search(text, position)
            if match is None:
                narrative.append(text[position:])
                break

            narrative.append(text[position : match.start()])
            close_index = text.find(CLOSE_TAG, match.end())
            if close_index == -1 or self._is_interrupted(text[match.end() : close_index]):
                unclosed = True
                logger.debug(f"Unclosed tool tag at offset {match.start()}; keeping {len(calls)} parsed call(s).")
                break

            span = SourceSpan(match.start(), close_index + len(CLOSE_TAG))
            call = self._build_call(match.group(1), text[match.end() : close_index], span)
            if call is not None:
                calls.append(call)
            position = span.end

        return ParseResult(calls=tuple(calls), unclosed_tag=unclosed, narrative="".join(narrative))

    def _is_interrupted(self, body: str) -> bool:
        """Whether a line of ``body`` opens another tag before any verbatim key starts."""
        for index, line in enumerate(body.split("\n")):
            key = _KEY_LINE.match(line)
            if key and key.group(1) in self._verbatim_keys:
                return False
            if index > 0 and _LINE_OPEN_TAG.match(line):
                return True
        return False

    def _build_call(self, tag_name: Optional[str], body: str, span: SourceSpan) -> Optional[ToolCall]:
        lines = [line.rstrip("\r") for line in body.split("\n")]
        name = (tag_name or "").strip()

        if not name:
            # Bare [TOOL] tag: the first non-empty line names the tool.
            while lines and not lines[0].strip():
                lines.pop(0)
            if not lines:
                logger.debug(f"Skipping empty tool block at offset {span.start}.")
                return None
            name = lines.pop(0).strip()

        return ToolCall(name=name, arguments=self._parse_arguments(lines), raw_span=span)

    def _parse_arguments(self, lines: List[str]) -> Dict[str, str]:
        arguments: Dict[str, str] = {}
        current: Optional[str] = None

        for index, line in enumerate(lines):
            match = _KEY_LINE.match(line)
            if match:
                key, inline = match.group(1), match.group(2)
                if key in self._verbatim_keys:
                    arguments[key] = self._verbatim_value(inline, lines[index + 1 :])
                    return arguments
                arguments[key] = inline.strip()
                current = key
            elif line.strip():
                if current is None:
                    logger.debug(f"Ignoring stray line in tool block: {line.strip()[:60]!r}")
                    continue
                previous = arguments[current]
                arguments[current] = f"{previous}\n{line.rstrip()}" if previous else line.strip()

        return arguments

    @staticmethod
    def _verbatim_value(inline: str, rest: List[str]) -> str:
        head = inline[1:] if inline.startswith(" ") else inline
        value_lines = ([head] if head.strip() else []) + rest
        return "\n".join(value_lines).strip("\n").rstrip()
