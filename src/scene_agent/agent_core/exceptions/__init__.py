"""Export the exception hierarchy used across parsing, execution and orchestration."""

from .exceptions import (
    AgentCoreError,
    ToolRegistrationError,
    ToolNotFoundError,
    ToolExecutionError,
    ToolValidationError,
    GuardRailViolation,
    ReportFinalizedError,
    AgentStateError,
    ModelUnavailableError,
)

__all__ = [
    "AgentCoreError",
    "ToolRegistrationError",
    "ToolNotFoundError",
    "ToolExecutionError",
    "ToolValidationError",
    "GuardRailViolation",
    "ReportFinalizedError",
    "AgentStateError",
    "ModelUnavailableError",
]
