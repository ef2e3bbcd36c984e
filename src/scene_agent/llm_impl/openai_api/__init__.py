from .core import GenericOpenAI

__all__ = ["GenericOpenAI"]
