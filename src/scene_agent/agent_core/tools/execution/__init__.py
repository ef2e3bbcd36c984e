"""Sequential execution of parsed tool calls against the host."""

from .cancellation import CancellationToken
from .engine import ToolExecutionEngine
from .progress import ProgressEvent, ProgressPhase, ProgressSink, summarize_arguments
from .report import ExecutionReport, ReportEntry

__all__ = [
    "CancellationToken",
    "ToolExecutionEngine",
    "ProgressEvent",
    "ProgressPhase",
    "ProgressSink",
    "summarize_arguments",
    "ExecutionReport",
    "ReportEntry",
]
