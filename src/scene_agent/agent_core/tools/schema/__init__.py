"""Tool argument schema generation and key normalization."""

from .tool_param_factory import ToolParameterFactory, FieldTuple
from .aliases import normalize_argument_keys, to_camel_case, to_snake_case

__all__ = ["ToolParameterFactory", "FieldTuple", "normalize_argument_keys", "to_camel_case", "to_snake_case"]
