"""Default scene toolset.

Each tool forwards to the host under its own name. The functions only declare
the typed signature the model sees; the host performs the operation.
"""

from typing import Annotated, Optional

from pydantic import Field

from scene_agent.agent_core import HostEnvironment, ToolRegistry, ToolResult, ToolRole
from scene_agent.agent_core.tools.guard_rails import (
    CAMERA_HEIGHT,
    FIELD_OF_VIEW,
    PostCheck,
    ToolGuard,
    position_ranges,
    rotation_ranges,
    scale_ranges,
)

_VECTOR = ("x", "y", "z")


def _vector_check(attribute: str) -> PostCheck:
    return PostCheck(entity_key="gameobject_name", fields={k: (attribute, i) for i, k in enumerate(_VECTOR)})


def create_gameobject(
    host: HostEnvironment,
    name: Annotated[str, Field(description="Unique name of the new GameObject.")],
    parent: Annotated[Optional[str], Field(description="Name of the parent object. Omit for a top-level object.")] = None,
) -> ToolResult:
    """Create an empty GameObject."""
    return host.invoke("create_gameobject", {"name": name, "parent": parent})


def create_primitive(
    host: HostEnvironment,
    name: Annotated[str, Field(description="Unique name of the new object.")],
    primitive_type: Annotated[str, Field(description="cube, sphere, capsule, cylinder, plane or quad.")] = "cube",
    parent: Annotated[Optional[str], Field(description="Name of the parent object. Omit for a top-level object.")] = None,
) -> ToolResult:
    """Create a primitive shape with mesh and collider."""
    return host.invoke("create_primitive", {"name": name, "primitive_type": primitive_type, "parent": parent})


def create_camera(
    host: HostEnvironment,
    name: Annotated[str, Field(description="Unique name of the new camera.")],
    field_of_view: Annotated[float, Field(description="Vertical field of view in degrees.")] = 60.0,
    parent: Annotated[Optional[str], Field(description="Name of the parent object, e.g. a player body.")] = None,
) -> ToolResult:
    """Create a camera."""
    return host.invoke("create_camera", {"name": name, "field_of_view": field_of_view, "parent": parent})


def set_position(
    host: HostEnvironment,
    gameobject_name: Annotated[str, Field(description="Object to move.")],
    x: Annotated[float, Field(description="X position in metres.")],
    y: Annotated[float, Field(description="Y position in metres (up).")],
    z: Annotated[float, Field(description="Z position in metres.")],
) -> ToolResult:
    """Set the local position of an object."""
    return host.invoke("set_position", {"gameobject_name": gameobject_name, "x": x, "y": y, "z": z})


def set_rotation(
    host: HostEnvironment,
    gameobject_name: Annotated[str, Field(description="Object to rotate.")],
    x: Annotated[float, Field(description="Rotation around X in degrees.")],
    y: Annotated[float, Field(description="Rotation around Y in degrees.")],
    z: Annotated[float, Field(description="Rotation around Z in degrees.")],
) -> ToolResult:
    """Set the local euler rotation of an object."""
    return host.invoke("set_rotation", {"gameobject_name": gameobject_name, "x": x, "y": y, "z": z})


def set_scale(
    host: HostEnvironment,
    gameobject_name: Annotated[str, Field(description="Object to scale.")],
    x: Annotated[float, Field(description="Scale factor on X.")],
    y: Annotated[float, Field(description="Scale factor on Y.")],
    z: Annotated[float, Field(description="Scale factor on Z.")],
) -> ToolResult:
    """Set the local scale of an object."""
    return host.invoke("set_scale", {"gameobject_name": gameobject_name, "x": x, "y": y, "z": z})


def set_parent(
    host: HostEnvironment,
    gameobject_name: Annotated[str, Field(description="Object to re-parent.")],
    parent: Annotated[Optional[str], Field(description="New parent. Omit to move the object to the scene root.")] = None,
) -> ToolResult:
    """Change the parent of an object."""
    return host.invoke("set_parent", {"gameobject_name": gameobject_name, "parent": parent})


def set_camera_height(
    host: HostEnvironment,
    height: Annotated[float, Field(description="Eye height in metres, about 1.6-1.8 for a standing person.")],
    camera_name: Annotated[str, Field(description="Camera to move.")] = "Main Camera",
) -> ToolResult:
    """Set the height of a (first-person) camera."""
    return host.invoke("set_camera_height", {"camera_name": camera_name, "height": height})


def set_field_of_view(
    host: HostEnvironment,
    field_of_view: Annotated[float, Field(description="Vertical field of view in degrees.")],
    camera_name: Annotated[str, Field(description="Camera to change.")] = "Main Camera",
) -> ToolResult:
    """Set the field of view of a camera."""
    return host.invoke("set_field_of_view", {"camera_name": camera_name, "field_of_view": field_of_view})


def add_component(
    host: HostEnvironment,
    gameobject_name: Annotated[str, Field(description="Object to extend.")],
    component_type: Annotated[str, Field(description="Component type, e.g. Rigidbody or BoxCollider.")],
) -> ToolResult:
    """Add a built-in component to an object."""
    return host.invoke("add_component", {"gameobject_name": gameobject_name, "component_type": component_type})


def create_script(
    host: HostEnvironment,
    script_name: Annotated[str, Field(description="Class and file name of the script.")],
    script_content: Annotated[str, Field(description="Complete source code. Must be the last key in the block.")],
) -> ToolResult:
    """Create a script asset."""
    return host.invoke("create_script", {"script_name": script_name, "script_content": script_content})


def attach_script(
    host: HostEnvironment,
    gameobject_name: Annotated[str, Field(description="Object to attach the script to.")],
    script_name: Annotated[str, Field(description="Name of an existing script.")],
) -> ToolResult:
    """Attach an existing script to an object."""
    return host.invoke("attach_script", {"gameobject_name": gameobject_name, "script_name": script_name})


def create_and_attach_script(
    host: HostEnvironment,
    gameobject_name: Annotated[str, Field(description="Object to attach the script to.")],
    script_name: Annotated[str, Field(description="Class and file name of the script.")],
    script_content: Annotated[str, Field(description="Complete source code. Must be the last key in the block.")],
) -> ToolResult:
    """Create a script asset and attach it to an object in one step."""
    created = host.invoke("create_script", {"script_name": script_name, "script_content": script_content})
    if not created.success:
        return created
    attached = host.invoke("attach_script", {"gameobject_name": gameobject_name, "script_name": script_name})
    if not attached.success:
        return ToolResult.fail(f"{created.message} Attaching failed: {attached.message}")
    return ToolResult.ok(
        f"{created.message} {attached.message}", entity=script_name, kind="script", action="created"
    )


def delete_gameobject(
    host: HostEnvironment,
    gameobject_name: Annotated[str, Field(description="Object to delete, together with its children.")],
) -> ToolResult:
    """Delete an object and its children."""
    return host.invoke("delete_gameobject", {"gameobject_name": gameobject_name})


def get_scene_info(host: HostEnvironment) -> ToolResult:
    """List the objects in the scene as a hierarchy."""
    return host.invoke("get_scene_info", {})


def get_gameobject_info(
    host: HostEnvironment,
    gameobject_name: Annotated[str, Field(description="Object to inspect.")],
) -> ToolResult:
    """Show transform, components and scripts of an object."""
    return host.invoke("get_gameobject_info", {"gameobject_name": gameobject_name})


def save_scene(host: HostEnvironment) -> ToolResult:
    """Save the scene."""
    if host.persist():
        return ToolResult.ok("Scene saved.")
    return ToolResult.fail("Saving the scene failed.")


def build_scene_registry(freeze: bool = True) -> ToolRegistry:
    """Register the default scene toolset.

    Args:
        freeze: Close the registry after registration.

    Returns:
        The populated registry.
    """
    registry = ToolRegistry()
    registry.register(create_gameobject, roles=ToolRole.CREATE)
    registry.register(create_primitive, roles=ToolRole.CREATE)
    registry.register(
        create_camera,
        roles=ToolRole.CREATE,
        guard=ToolGuard(ranges=[FIELD_OF_VIEW]),
    )
    registry.register(
        set_position,
        roles=ToolRole.CONFIGURE,
        guard=ToolGuard(ranges=position_ranges(), post_check=_vector_check("position")),
    )
    registry.register(
        set_rotation,
        roles=ToolRole.CONFIGURE,
        guard=ToolGuard(ranges=rotation_ranges(), post_check=_vector_check("rotation")),
    )
    registry.register(
        set_scale,
        roles=ToolRole.CONFIGURE,
        guard=ToolGuard(ranges=scale_ranges(), post_check=_vector_check("scale")),
    )
    registry.register(set_parent, roles=ToolRole.CONFIGURE)
    registry.register(
        set_camera_height,
        roles=ToolRole.CONFIGURE,
        guard=ToolGuard(
            ranges=[CAMERA_HEIGHT],
            post_check=PostCheck(
                entity_key="camera_name", fields={"height": ("position", 1)}, default_entity="Main Camera"
            ),
        ),
    )
    registry.register(set_field_of_view, roles=ToolRole.CONFIGURE, guard=ToolGuard(ranges=[FIELD_OF_VIEW]))
    registry.register(add_component, roles=ToolRole.CONFIGURE)
    registry.register(create_script, roles=ToolRole.SCRIPT, entity_keys=[])
    registry.register(attach_script, roles=ToolRole.CONFIGURE)
    registry.register(
        create_and_attach_script, roles=ToolRole.SCRIPT | ToolRole.CONFIGURE, entity_keys=["gameobject_name"]
    )
    registry.register(delete_gameobject)
    registry.register(get_scene_info, roles=ToolRole.QUERY)
    registry.register(get_gameobject_info, roles=ToolRole.QUERY)
    registry.register(save_scene, roles=ToolRole.PERSIST)

    if freeze:
        registry.freeze()
    return registry
