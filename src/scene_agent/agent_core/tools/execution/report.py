"""Execution report built while a turn's tool calls run."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, List, Sequence, Tuple

from ..models import ToolCall, ToolResult, ToolRole
from ...exceptions import ReportFinalizedError


@dataclass(frozen=True)
class ReportEntry:
    """
    One executed tool call.

    Attributes:
        index: Position of the call in parse order.
        call: The parsed call.
        result: Its outcome.
        elapsed_ms: Time spent on the call.
        roles: Roles of the resolved tool, ``NONE`` for unknown tools.
    """

    index: int
    call: ToolCall
    result: ToolResult
    elapsed_ms: float
    roles: ToolRole = ToolRole.NONE

    @property
    def tool_name(self) -> str:
        return self.call.name

    @property
    def succeeded(self) -> bool:
        return self.result.success

    @property
    def has_warnings(self) -> bool:
        return self.result.has_warnings

    def has_role(self, role: ToolRole) -> bool:
        return bool(self.roles & role)


class ExecutionReport:
    """
    Ordered results of one turn, one entry per executed call.

    Entries are appended in parse order while the turn runs. Once finalized the
    report is read-only.
    """

    def __init__(self, total: int = 0) -> None:
        self.total = total
        self._entries: List[ReportEntry] = []
        self._finalized = False
        self.cancelled = False
        self.pending: Tuple[ToolCall, ...] = ()

    def append(self, entry: ReportEntry) -> None:
        if self._finalized:
            raise ReportFinalizedError("Execution report is finalized and cannot be modified.")
        if entry.index != len(self._entries):
            raise ValueError(f"Report entry index {entry.index} out of order (expected {len(self._entries)}).")
        self._entries.append(entry)

    def finalize(self, cancelled: bool = False, pending: Sequence[ToolCall] = ()) -> None:
        if self._finalized:
            raise ReportFinalizedError("Execution report is already finalized.")
        self.cancelled = cancelled
        self.pending = tuple(pending)
        self._finalized = True

    @property
    def finalized(self) -> bool:
        return self._finalized

    @property
    def entries(self) -> Tuple[ReportEntry, ...]:
        return tuple(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[ReportEntry]:
        return iter(tuple(self._entries))

    def __getitem__(self, index: int) -> ReportEntry:
        return self._entries[index]

    @property
    def failures(self) -> List[ReportEntry]:
        return [e for e in self._entries if not e.succeeded]

    @property
    def warned(self) -> List[ReportEntry]:
        return [e for e in self._entries if e.has_warnings]

    @property
    def problems(self) -> List[ReportEntry]:
        """Entries that failed or carry warnings, in execution order."""
        return [e for e in self._entries if not e.succeeded or e.has_warnings]

    @property
    def has_problems(self) -> bool:
        return any(not e.succeeded or e.has_warnings for e in self._entries)

    @property
    def tool_names(self) -> List[str]:
        return [e.tool_name for e in self._entries]

    def any_with_role(self, role: ToolRole) -> bool:
        return any(e.has_role(role) for e in self._entries)

    def summary_lines(self) -> List[str]:
        """One line per entry, e.g. ``1. set_position ✅ Moved 'Player' (0.004s)``."""
        lines = []
        for entry in self._entries:
            icon = "❌" if not entry.succeeded else ("⚠️" if entry.has_warnings else "✅")
            lines.append(
                f"{entry.index + 1}. {entry.tool_name} {icon} {entry.result.compact()} ({entry.elapsed_ms / 1000:.3f}s)"
            )
            lines.extend(f"   ⚠ {warning}" for warning in entry.result.warnings)
        if self.cancelled:
            lines.append(f"Cancelled with {len(self.pending)} call(s) not executed.")
        return lines
