"""Reference scene host and its default toolset."""

from .host import InMemoryScene, PRIMITIVE_TYPES
from .tools import build_scene_registry

__all__ = ["InMemoryScene", "PRIMITIVE_TYPES", "build_scene_registry"]
