"""Protocol describing the minimal surface the agent core needs from a host."""

from __future__ import annotations

from typing import Any, List, Mapping, Optional, Protocol, Tuple, runtime_checkable

from pydantic import BaseModel, Field

from ..tools.models import ToolResult

Vector3 = Tuple[float, float, float]


class EntityState(BaseModel):
    """
    Snapshot of a host entity, used by post-execution verification.

    Attributes:
        identifier: Unique name of the entity in the host.
        kind: Entity kind (``gameobject``, ``camera``, ``script`` ...).
        parent: Identifier of the parent entity, None for top-level entities.
        position: Local position.
        rotation: Local euler rotation in degrees.
        scale: Local scale.
        components: Names of attached components.
        scripts: Names of attached scripts.
        properties: Additional host-specific values.
    """

    identifier: str
    kind: str = "gameobject"
    parent: Optional[str] = None
    position: Vector3 = (0.0, 0.0, 0.0)
    rotation: Vector3 = (0.0, 0.0, 0.0)
    scale: Vector3 = (1.0, 1.0, 1.0)
    components: List[str] = Field(default_factory=list)
    scripts: List[str] = Field(default_factory=list)
    properties: dict[str, Any] = Field(default_factory=dict)


@runtime_checkable
class HostEnvironment(Protocol):
    """
    The mutable environment tools operate on (a scene graph).

    The engine assumes exclusive single-writer access for the duration of a turn.
    Failed operations are surfaced to the caller, never retried at this layer.
    """

    def invoke(self, tool_name: str, arguments: Mapping[str, Any]) -> ToolResult:
        """Perform the named operation."""
        ...

    def query_entity(self, identifier: str) -> Optional[EntityState]:
        """Return the current state of an entity, or None when it does not exist."""
        ...

    def persist(self) -> bool:
        """Save the host state. Returns True on success."""
        ...
