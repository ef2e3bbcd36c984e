import pytest
from typing import Annotated, Any, Dict, Optional
from pydantic import Field

from scene_agent.agent_core import ToolDefinition, ToolRegistry, ToolResult, ToolRole
from scene_agent.agent_core.exceptions import ToolNotFoundError, ToolRegistrationError, ToolValidationError
from scene_agent.agent_core.tools.models import ParameterSpec


def test_registry_tool_decorator() -> None:
    registry = ToolRegistry()

    @registry.tool
    def my_tool(host: Any, x: Annotated[int, Field(description="An integer")]) -> int:
        """My tool description."""
        return x * 2

    assert "my_tool" in registry
    tool_def = registry.tools["my_tool"]
    assert tool_def.description == "My tool description."
    assert tool_def.parameter_keys == ["x"]
    assert tool_def({"x": 2}, host=None) == 4


def test_decorator_with_roles_and_entity_keys() -> None:
    registry = ToolRegistry()

    @registry.tool(roles=ToolRole.CREATE | ToolRole.CONFIGURE)
    def spawn(
        host: Any,
        name: Annotated[str, Field(description="Name")],
        parent: Annotated[Optional[str], Field(description="Parent")] = None,
        target_name: Annotated[Optional[str], Field(description="Target")] = None,
    ) -> None:
        """Spawn something."""

    tool_def = registry.get("spawn")
    assert tool_def.has_role(ToolRole.CREATE)
    assert tool_def.has_role(ToolRole.CONFIGURE)
    assert not tool_def.has_role(ToolRole.PERSIST)
    assert tool_def.entity_keys == ["parent", "target_name"]
    assert [p.required for p in tool_def.parameters] == [True, False, False]
    assert tool_def.parameters[1].type == "str"


def test_handler_without_host_parameter() -> None:
    registry = ToolRegistry()

    @registry.tool
    def add(a: Annotated[int, Field(description="a")], b: Annotated[int, Field(description="b")]) -> int:
        """Add numbers."""
        return a + b

    assert registry.get("add")({"a": 1, "b": 2}, host=object()) == 3


def test_args_model_coerces_strings() -> None:
    registry = ToolRegistry()

    @registry.tool
    def move(host: Any, y: Annotated[float, Field(description="height")]) -> None:
        """Move."""

    args_model = registry.get("move").args_model
    assert args_model is not None
    assert args_model(y="1.8").model_dump() == {"y": 1.8}


def test_register_explicit_definition_and_parameters() -> None:
    registry = ToolRegistry()

    def handler(arguments: Dict[str, Any], host: Any) -> ToolResult:
        return ToolResult.ok(f"saved {arguments}")

    definition = ToolDefinition(name="save", description="Save.", handler=handler, roles=ToolRole.PERSIST)
    registry.register(definition)
    registry.register(
        "delete",
        "Delete an object.",
        handler,
        [ParameterSpec(key="gameobject_name", description="Object")],
    )

    assert registry.resolve("save") is definition
    assert registry.get("delete").entity_keys == ["gameobject_name"]
    assert registry.names == ["save", "delete"]
    assert [t.name for t in registry.with_role(ToolRole.PERSIST)] == ["save"]


def test_register_string_requires_handler_and_description() -> None:
    registry = ToolRegistry()

    with pytest.raises(ToolRegistrationError, match="handler is required"):
        registry.register("x")

    with pytest.raises(ToolRegistrationError, match="description is required"):
        registry.register("x", handler=lambda arguments, host: None, parameters=[])


def test_duplicate_registration_raises() -> None:
    registry = ToolRegistry()

    @registry.tool
    def dup(host: Any) -> None:
        """First."""

    with pytest.raises(ToolRegistrationError, match="already registered"):

        @registry.tool
        def dup(host: Any) -> None:  # noqa: F811
            """Second."""


def test_frozen_registry_rejects_changes() -> None:
    registry = ToolRegistry()

    @registry.tool
    def a(host: Any) -> None:
        """A."""

    assert registry.freeze() is registry
    assert registry.frozen

    with pytest.raises(ToolRegistrationError, match="frozen"):

        @registry.tool
        def b(host: Any) -> None:
            """B."""

    with pytest.raises(ToolRegistrationError, match="frozen"):
        registry.unregister("a")
    assert len(registry) == 1


def test_resolve_unknown_returns_none_and_get_raises() -> None:
    registry = ToolRegistry()

    assert registry.resolve("nope") is None
    with pytest.raises(ToolNotFoundError):
        registry.get("nope")
    with pytest.raises(ToolNotFoundError):
        registry.unregister("nope")


def test_unregister_before_freeze() -> None:
    registry = ToolRegistry()

    @registry.tool
    def temp(host: Any) -> None:
        """Temp."""

    registry.unregister("temp")
    assert "temp" not in registry


def test_registry_missing_docstring() -> None:
    registry = ToolRegistry()
    with pytest.raises(ToolValidationError, match="missing docstring"):

        @registry.tool
        def no_doc_tool(host: Any, x: Annotated[int, Field(description="desc")]) -> None:
            pass


def test_registry_missing_param_description() -> None:
    registry = ToolRegistry()
    with pytest.raises(ToolValidationError, match="missing a description"):

        @registry.tool
        def bad_tool(host: Any, x: int) -> None:
            """Doc."""


def test_describe_lists_syntax_and_catalog(registry: ToolRegistry) -> None:
    text = registry.describe()

    assert "[TOOL:tool_name]" in text
    assert "[/TOOL]" in text
    assert "### set_camera_height" in text
    assert "**Parameters:** height (float), camera_name (str, optional)" in text
    assert "### save_scene" in text
    assert "**Parameters:** None" in text


def test_scene_registry_is_frozen_with_roles(registry: ToolRegistry) -> None:
    assert registry.frozen
    assert registry.get("save_scene").has_role(ToolRole.PERSIST)
    assert registry.get("create_script").has_role(ToolRole.SCRIPT)
    assert registry.get("create_script").entity_keys == []
    assert registry.get("create_gameobject").entity_keys == ["parent"]
    assert registry.get("set_camera_height").guard is not None
