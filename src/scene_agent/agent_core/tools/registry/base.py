"""Tool registry and helper utilities."""

import inspect
from typing import Any, Callable, Dict, List, Optional, Sequence, Union, cast, overload

from pydantic import create_model

from ..models import ParameterSpec, ToolDefinition, ToolRole
from ..guard_rails import ToolGuard
from ..parsing import CLOSE_TAG
from ..schema import ToolParameterFactory
from ...exceptions import ToolNotFoundError, ToolRegistrationError, ToolValidationError
from ...logger import get_logger

logger = get_logger(__name__)

_HOST_PARAMETER = "host"
_ENTITY_KEY_NAMES = ("parent", "target")


class ToolRegistry:
    """
    A central registry to manage and access all tools available to the agent.

    Registration happens once at startup. After ``freeze()`` the registry is
    read-only: every tool the agent may invoke has exactly one definition and
    nothing is added at runtime.
    """

    def __init__(self) -> None:
        """Initialize the ToolRegistry."""
        self.tools: Dict[str, ToolDefinition] = {}
        self._frozen = False

    @property
    def frozen(self) -> bool:
        return self._frozen

    def freeze(self) -> "ToolRegistry":
        """Close the registry for further registration.

        Returns:
            The registry itself, for chaining.
        """
        self._frozen = True
        logger.info(f"Tool registry frozen with {len(self.tools)} tool(s).")
        return self

    def register(
        self,
        name_or_tool: Union[str, ToolDefinition, Callable],
        description: Optional[str] = None,
        handler: Optional[Callable] = None,
        parameters: Optional[Sequence[ParameterSpec]] = None,
        *,
        roles: ToolRole = ToolRole.NONE,
        guard: Optional[ToolGuard] = None,
        entity_keys: Optional[Sequence[str]] = None,
    ) -> ToolDefinition:
        """
        Register a new tool.

        A tool can be registered by providing a `ToolDefinition` directly, by providing
        the individual components (name, description, handler, parameters), or by
        providing a function whose signature is ``func(host, **typed_args)`` so the
        definition is generated from it.

        Args:
            name_or_tool: Either a `ToolDefinition` object, the name of the tool (str), or a Callable.
            description: A brief description of what the tool does. Required if `name_or_tool` is a
                         string and parameters are provided.
            handler: For string registration, ``handler(arguments, host) -> ToolResult`` (explicit
                     parameters) or a ``func(host, **typed_args)`` (generated parameters).
            parameters: Declared parameters. If None, they are inferred from `handler`.
            roles: Traits used by completion detection.
            guard: Plausible ranges and post-execution check for the tool.
            entity_keys: Argument keys naming existing entities.

        Returns:
            The registered definition.

        Raises:
            ToolRegistrationError: If the registry is frozen, arguments are missing or the tool
                                   already exists.
        """
        if self._frozen:
            msg = "Tool registry is frozen; tools can only be registered at startup."
            logger.error(msg)
            raise ToolRegistrationError(msg)

        if isinstance(name_or_tool, ToolDefinition):
            tool = name_or_tool
        elif callable(name_or_tool):
            tool = self._generate_tool_definition(
                name_or_tool, description=description, roles=roles, guard=guard, entity_keys=entity_keys
            )
        else:
            # name_or_tool is a string (name)
            if handler is None:
                raise ToolRegistrationError("If passing name as string, handler is required.")

            if parameters is None:
                tool = self._generate_tool_definition(
                    handler,
                    name=name_or_tool,
                    description=description,
                    roles=roles,
                    guard=guard,
                    entity_keys=entity_keys,
                )
            else:
                if description is None:
                    raise ToolRegistrationError("If passing name and parameters, description is required.")
                params = list(parameters)
                tool = ToolDefinition(
                    name=name_or_tool,
                    description=description,
                    handler=handler,
                    parameters=params,
                    roles=roles,
                    guard=guard,
                    entity_keys=list(entity_keys) if entity_keys is not None else _default_entity_keys(params),
                )

        if tool.name in self.tools:
            msg = f"Tool '{tool.name}' is already registered."
            logger.error(msg)
            raise ToolRegistrationError(msg)

        self.tools[tool.name] = tool
        logger.info(f"Successfully registered tool: '{tool.name}'")
        return tool

    def unregister(self, tool_name: str) -> None:
        """Unregister a tool from the registry before it is frozen.

        Args:
            tool_name: The name of the tool to remove.

        Raises:
            ToolRegistrationError: If the registry is frozen.
            ToolNotFoundError: If the tool does not exist in the registry.
        """
        if self._frozen:
            raise ToolRegistrationError("Tool registry is frozen; tools cannot be removed.")
        if tool_name in self.tools:
            del self.tools[tool_name]
            logger.info(f"Successfully unregistered tool: '{tool_name}'")
        else:
            raise ToolNotFoundError(f"Tool '{tool_name}' not found in the registry.")

    @overload
    def tool(self, func: Callable) -> Callable: ...

    @overload
    def tool(
        self,
        func: None = None,
        *,
        roles: ToolRole = ToolRole.NONE,
        guard: Optional[ToolGuard] = None,
        entity_keys: Optional[Sequence[str]] = None,
    ) -> Callable[[Callable], Callable]: ...

    def tool(
        self,
        func: Optional[Callable] = None,
        *,
        roles: ToolRole = ToolRole.NONE,
        guard: Optional[ToolGuard] = None,
        entity_keys: Optional[Sequence[str]] = None,
    ) -> Any:
        """A decorator to turn a ``func(host, **typed_args)`` into an agent tool.

        Usable bare (``@registry.tool``) or with options
        (``@registry.tool(roles=ToolRole.CREATE)``).

        Returns:
            The original function, after registering it as a tool.
        """

        def decorator(f: Callable) -> Callable:
            self.register(f, roles=roles, guard=guard, entity_keys=entity_keys)
            return f

        if func is not None:
            return decorator(func)
        return decorator

    def resolve(self, name: str) -> Optional[ToolDefinition]:
        """Look a tool up by name.

        Returns:
            The definition, or None when no tool has that name. A missing tool is an
            expected outcome handled by the caller, not an error.
        """
        return self.tools.get(name)

    def get(self, name: str) -> ToolDefinition:
        """Strict lookup.

        Raises:
            ToolNotFoundError: If the tool does not exist.
        """
        tool = self.resolve(name)
        if tool is None:
            raise ToolNotFoundError(f"Tool '{name}' not found in the registry.")
        return tool

    def __contains__(self, name: object) -> bool:
        return name in self.tools

    def __len__(self) -> int:
        return len(self.tools)

    @property
    def names(self) -> List[str]:
        return list(self.tools)

    def with_role(self, role: ToolRole) -> List[ToolDefinition]:
        return [tool for tool in self.tools.values() if tool.has_role(role)]

    def describe(self) -> str:
        """Render the tool catalog together with the call syntax, for the system prompt."""
        lines = [
            "# Available Tools",
            "",
            "To use a tool, write a block like this in your response:",
            "```",
            "[TOOL:tool_name]",
            "param1: value1",
            "param2: value2",
            CLOSE_TAG,
            "```",
            "Multi-line values such as script_content run verbatim up to the closing tag and must not contain "
            f"the text {CLOSE_TAG}.",
            "Tools run in the order they appear. Use several blocks in one response when a task needs several steps.",
            "",
            "## Tools:",
        ]
        for tool in self.tools.values():
            lines.append("")
            lines.append(tool.describe())
        return "\n".join(lines)

    def _generate_tool_definition(
        self,
        func: Callable,
        name: Optional[str] = None,
        description: Optional[str] = None,
        roles: ToolRole = ToolRole.NONE,
        guard: Optional[ToolGuard] = None,
        entity_keys: Optional[Sequence[str]] = None,
    ) -> ToolDefinition:
        """Generate a ToolDefinition from a ``func(host, **typed_args)`` callable.

        Args:
            func: The function to generate a definition for.
            name: Optional name override for the tool.
            description: Optional description override for the tool.
            roles: Traits used by completion detection.
            guard: Plausibility rules for the tool.
            entity_keys: Argument keys naming existing entities. Defaults to keys
                         ending in ``_name`` plus ``parent``/``target``.

        Returns:
            A ToolDefinition object containing the tool's metadata and argument model.

        Raises:
            ToolValidationError: If the function is missing a docstring or parameter descriptions.
        """

        tool_name = name or func.__name__
        if description is None:
            description = self._get_docstring_from_func(func, tool_name)

        signature = inspect.signature(func)
        fields: Dict[str, Any] = {}
        parameters: List[ParameterSpec] = []
        for param_name, param in signature.parameters.items():
            if param_name == _HOST_PARAMETER:
                continue
            ft = ToolParameterFactory.build_field_tuple(param_name=param_name, param=param, tool_name=tool_name)
            fields[param_name] = (ft.annotation, ft.field)
            parameters.append(ToolParameterFactory.build_parameter_spec(param_name, param, tool_name))

        # create_model expects **field_definitions: Any
        args_model = create_model(f"{tool_name}Args", **cast(Dict[str, Any], fields))

        takes_host = _HOST_PARAMETER in signature.parameters

        def handler(arguments: Dict[str, Any], host: Any) -> Any:
            if takes_host:
                return func(host, **arguments)
            return func(**arguments)

        return ToolDefinition(
            name=tool_name,
            description=description,
            handler=handler,
            parameters=parameters,
            args_model=args_model,
            roles=roles,
            guard=guard,
            entity_keys=list(entity_keys) if entity_keys is not None else _default_entity_keys(parameters),
        )

    @staticmethod
    def _get_docstring_from_func(func: Callable, tool_name: str) -> str:
        doc = inspect.getdoc(func)
        if not doc:
            msg = f"Tool '{tool_name}' missing docstring. The model needs a description of what the tool does."
            logger.error(msg)
            raise ToolValidationError(msg)
        return doc


def _default_entity_keys(parameters: Sequence[ParameterSpec]) -> List[str]:
    return [p.key for p in parameters if p.key.endswith("_name") or p.key in _ENTITY_KEY_NAMES]
