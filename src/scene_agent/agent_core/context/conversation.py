"""Conversation context: recently created and modified entities.

The context is owned by a chat session and passed explicitly to the engine and
to prompt construction, so concurrent sessions never share it.
"""

from __future__ import annotations

import re
from collections import deque
from dataclasses import dataclass
from typing import Deque, List, Optional

from ..tools.models import ToolResult
from ..logger import get_logger

logger = get_logger(__name__)

DEFAULT_CAPACITY = 10

_REFERENCE = re.compile(
    r"^(?:it|this|that|(?:the last|the new|the previous|this|that|the)\s+(?P<noun>[a-z][a-z ]*?))[.!]?$"
)

# noun -> entity kind; None matches any non-script entity
_NOUN_KINDS = {
    "one": "*",
    "object": None,
    "gameobject": None,
    "game object": None,
    "entity": None,
    "script": "script",
    "camera": "camera",
}


@dataclass(frozen=True)
class EntityRef:
    """An entity touched by a tool call."""

    identifier: str
    kind: str = "gameobject"
    action: str = "modified"


class ConversationContext:
    """
    Bounded, ordered memory of recently touched entities.

    Attributes:
        last_created: Most recently created entity.
        last_modified: Most recently modified entity.
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY) -> None:
        self.capacity = capacity
        self.last_created: Optional[EntityRef] = None
        self.last_modified: Optional[EntityRef] = None
        self._recent: Deque[EntityRef] = deque(maxlen=capacity)

    @property
    def recent(self) -> List[EntityRef]:
        """Recently touched entities, oldest first."""
        return list(self._recent)

    def __len__(self) -> int:
        return len(self._recent)

    def record(self, ref: EntityRef) -> None:
        """Remember an entity. A repeated identifier moves to the newest position."""
        if ref.action == "deleted":
            self._forget(ref.identifier)
            return

        self._recent = deque((r for r in self._recent if r.identifier != ref.identifier), maxlen=self.capacity)
        self._recent.append(ref)
        if ref.action == "created":
            self.last_created = ref
        else:
            self.last_modified = ref

    def update_from_result(self, result: ToolResult) -> Optional[EntityRef]:
        """Record the entity a successful result reports in its side effect.

        Args:
            result: The tool result. Failed results and results without an
                    ``entity`` side effect are ignored.

        Returns:
            The recorded reference, if any.
        """
        if not result.success or not result.side_effect:
            return None
        identifier = result.side_effect.get("entity")
        if not identifier:
            return None

        ref = EntityRef(
            identifier=str(identifier),
            kind=str(result.side_effect.get("kind", "gameobject")),
            action=str(result.side_effect.get("action", "modified")),
        )
        self.record(ref)
        logger.debug(f"Context updated: {ref.action} {ref.kind} '{ref.identifier}'.")
        return ref

    def resolve_reference(self, text: str) -> Optional[str]:
        """Resolve a pronoun-style reference like "it" or "that script".

        Args:
            text: The argument value to interpret.

        Returns:
            The identifier of the matching recent entity, or None when the text is not
            a reference or nothing matches.
        """
        match = _REFERENCE.match(text.strip().lower())
        if match is None:
            return None

        noun = match.group("noun")
        if noun is None:
            kind: Optional[str] = "*"
        elif noun in _NOUN_KINDS:
            kind = _NOUN_KINDS[noun]
        else:
            return None

        for ref in reversed(self._recent):
            if kind == "*" or ref.kind == kind or (kind is None and ref.kind != "script"):
                return ref.identifier
        return None

    def to_prompt_block(self) -> str:
        """Describe recent entities for injection into a prompt. Empty when nothing is known."""
        if not self._recent:
            return ""
        lines = ["Recently touched entities (newest last):"]
        lines.extend(f"- {ref.identifier} ({ref.kind}, {ref.action})" for ref in self._recent)
        if self.last_created is not None:
            lines.append(f"Last created: {self.last_created.identifier}")
        if self.last_modified is not None:
            lines.append(f"Last modified: {self.last_modified.identifier}")
        return "\n".join(lines)

    def clear(self) -> None:
        self._recent.clear()
        self.last_created = None
        self.last_modified = None

    def _forget(self, identifier: str) -> None:
        self._recent = deque((r for r in self._recent if r.identifier != identifier), maxlen=self.capacity)
        if self.last_created is not None and self.last_created.identifier == identifier:
            self.last_created = None
        if self.last_modified is not None and self.last_modified.identifier == identifier:
            self.last_modified = None
