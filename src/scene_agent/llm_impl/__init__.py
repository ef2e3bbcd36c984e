from .openai_api import GenericOpenAI

__all__ = ["GenericOpenAI"]
