from enum import Flag, auto
from typing import Any, Callable, List, Optional, Type

from pydantic import BaseModel, Field

from ..guard_rails.ranges import ToolGuard


class ToolRole(Flag):
    """Traits of a tool that the completion heuristic reasons about."""

    NONE = 0
    CREATE = auto()
    """Creates a new top-level entity that must eventually be persisted."""
    PERSIST = auto()
    """Saves the host state (the "save" class of tool)."""
    SCRIPT = auto()
    """Creates a script asset."""
    CONFIGURE = auto()
    """Places or configures an existing entity."""
    QUERY = auto()
    """Reads host state without side effects."""


class ParameterSpec(BaseModel):
    """
    Declared argument of a tool.

    Attributes:
        key: Argument name as it appears in the wire syntax.
        type: Human readable type name (``str``, ``float`` ...).
        required: Whether the argument must be supplied.
        description: Description shown to the model in the tool catalog.
    """

    key: str
    type: str = "str"
    required: bool = True
    description: str = ""


class ToolDefinition(BaseModel):
    """
    Represents the definition of a tool the agent may invoke.

    Attributes:
        name: The unique name of the tool.
        description: A brief description of what the tool does.
        handler: Callable ``handler(arguments, host) -> ToolResult`` implementing the tool.
        parameters: Declared parameters of the tool.
        args_model: Optional Pydantic model used for validating and coercing the
                    string arguments before they reach the handler.
        roles: Traits of the tool used by completion detection.
        guard: Optional plausibility rules checked before and after execution.
        entity_keys: Argument keys naming existing entities; their values may be
                     pronoun references ("it", "that script") resolved from context.
    """

    name: str
    description: str
    handler: Callable
    parameters: List[ParameterSpec] = Field(default_factory=list)
    args_model: Optional[Type[BaseModel]] = None
    roles: ToolRole = ToolRole.NONE
    guard: Optional[ToolGuard] = None
    entity_keys: List[str] = Field(default_factory=list)

    @property
    def parameter_keys(self) -> List[str]:
        return [p.key for p in self.parameters]

    def has_role(self, role: ToolRole) -> bool:
        return bool(self.roles & role)

    def describe(self) -> str:
        """Render this tool as a catalog entry for the system prompt."""
        lines = [f"### {self.name}", f"**Description:** {self.description}"]
        if self.parameters:
            params = ", ".join(
                f"{p.key} ({p.type}{'' if p.required else ', optional'})" for p in self.parameters
            )
            lines.append(f"**Parameters:** {params}")
        else:
            lines.append("**Parameters:** None")
        return "\n".join(lines)

    def __call__(self, arguments: Any, host: Any) -> Any:
        return self.handler(arguments, host)
