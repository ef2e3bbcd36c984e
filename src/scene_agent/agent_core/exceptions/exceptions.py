"""
Custom exception classes for the scene agent core.

Most failures inside a turn are recovered as data: a malformed tool tag sets a
parser flag, an unknown tool or a faulting handler becomes a failed ToolResult.
The exceptions below cover the paths that must surface to the caller
(registration mistakes, provider outages, misuse of finalized state) and are
also used internally as message carriers before being folded into results.
"""


class AgentCoreError(Exception):
    """Base exception for all agent core errors."""

    pass


class ToolRegistrationError(AgentCoreError):
    """Raised when a tool cannot be registered (duplicate name, frozen registry)."""

    pass


class ToolNotFoundError(AgentCoreError):
    """Raised by explicit lookups when a requested tool is not in the registry."""

    pass


class ToolExecutionError(AgentCoreError):
    """Raised when a tool fails during execution (timeout, bad return value)."""

    pass


class ToolValidationError(AgentCoreError):
    """Raised when a tool definition or its parameters are invalid."""

    pass


class GuardRailViolation(AgentCoreError):
    """Raised when an argument falls outside its hard plausible range.

    Attributes:
        tool_name: Tool whose argument was rejected.
        parameter: Offending argument key.
        value: The rejected value.
        hard_range: The inclusive range the value had to fall into.
    """

    def __init__(self, tool_name: str, parameter: str, value: float, hard_range: tuple[float, float]):
        self.tool_name = tool_name
        self.parameter = parameter
        self.value = value
        self.hard_range = hard_range
        low, high = hard_range
        super().__init__(
            f"Guard rail violation in '{tool_name}': {parameter}={value:g} is outside the allowed range "
            f"[{low:g}, {high:g}]."
        )


class ReportFinalizedError(AgentCoreError):
    """Raised when an execution report is modified after finalization."""

    pass


class AgentStateError(AgentCoreError):
    """Raised on an illegal state transition of the auto-continue controller."""

    pass


class ModelUnavailableError(AgentCoreError):
    """Raised when the completion provider fails or times out. Fatal for the current turn."""

    pass
