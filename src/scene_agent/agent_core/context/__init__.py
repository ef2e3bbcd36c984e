"""Rolling memory of the entities a chat session touched."""

from .conversation import ConversationContext, EntityRef

__all__ = ["ConversationContext", "EntityRef"]
