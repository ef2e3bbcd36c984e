import inspect
from typing import Any, Union, get_origin, Annotated, get_args
from pydantic import Field, BaseModel, ConfigDict
from pydantic.fields import FieldInfo

from ...exceptions import ToolValidationError
from ..models import ParameterSpec
from ...logger import get_logger

logger = get_logger(__name__)


class FieldTuple(BaseModel):
    """Ensures, that the dynamic model field definition is correctly typed for Pydantic's create_model."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    annotation: Any
    field: FieldInfo


class ToolParameterFactory:
    """Capsules the extraction and validation of single handler parameters for pydantic"""

    @classmethod
    def build_field_tuple(cls, param_name: str, param: inspect.Parameter, tool_name: str) -> FieldTuple:
        """Creates the tuple of (annotation, FieldInfo) for a single handler parameter.

        Args:
            param_name: The name of the parameter.
            param: The inspect.Parameter object.
            tool_name: The name of the tool for error reporting.

        Returns:
            A FieldTuple containing the type annotation and Pydantic Field configuration.
        """

        annotation = param.annotation
        description = cls._extract_description(annotation=annotation, param_name=param_name, tool_name=tool_name)

        pydantic_default = param.default if param.default != inspect.Parameter.empty else ...

        return FieldTuple(annotation=annotation, field=Field(default=pydantic_default, description=description))

    @classmethod
    def build_parameter_spec(cls, param_name: str, param: inspect.Parameter, tool_name: str) -> ParameterSpec:
        """Describe a handler parameter for the tool catalog."""
        description = cls._extract_description(annotation=param.annotation, param_name=param_name, tool_name=tool_name)
        return ParameterSpec(
            key=param_name,
            type=cls._type_name(param.annotation),
            required=param.default is inspect.Parameter.empty,
            description=description,
        )

    @staticmethod
    def _extract_description(annotation: Any, param_name: str, tool_name: str) -> str:
        """Every tool parameter needs 'Annotated[<class>, Field(description='...')] = ...' as its annotation.

        Args:
            annotation: The type annotation to inspect.
            param_name: The name of the parameter being checked.
            tool_name: The name of the tool for error reporting.

        Raises:
            ToolValidationError: If the parameter is missing a Pydantic Field description.
        """

        if get_origin(annotation) is Annotated:
            for metadata in get_args(annotation):
                if isinstance(metadata, FieldInfo) and metadata.description:
                    return metadata.description

        msg = (
            f"Parameter '{param_name}' in tool '{tool_name}' is missing a description.\n"
            f"Usage: {param_name}: Annotated[Type, Field(description='...')] = ..."
        )
        logger.error(msg)
        raise ToolValidationError(msg)

    @staticmethod
    def _type_name(annotation: Any) -> str:
        if get_origin(annotation) is Annotated:
            annotation = get_args(annotation)[0]
        if get_origin(annotation) is Union:
            members = [a for a in get_args(annotation) if a is not type(None)]
            if len(members) == 1:
                annotation = members[0]
        return getattr(annotation, "__name__", str(annotation))
