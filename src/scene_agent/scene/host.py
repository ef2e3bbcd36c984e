"""Dict-backed scene graph implementing the host protocol."""

from __future__ import annotations

from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from scene_agent.agent_core import EntityState, ToolResult
from scene_agent.agent_core.logger import get_logger

logger = get_logger(__name__)

PRIMITIVE_TYPES = ("cube", "sphere", "capsule", "cylinder", "plane", "quad")

_PRIMITIVE_COLLIDERS = {
    "cube": "BoxCollider",
    "sphere": "SphereCollider",
    "capsule": "CapsuleCollider",
    "cylinder": "CapsuleCollider",
    "plane": "MeshCollider",
    "quad": "MeshCollider",
}


class InMemoryScene:
    """
    A minimal scene graph held in memory.

    Used as the host for tests and the CLI example. Entities are keyed by their
    unique name. Scripts are stored as entities of kind ``script`` with their
    source in ``properties["source"]``.

    Attributes:
        position_limit: When set, every position component is clamped to
                        ``[-position_limit, position_limit]``, mimicking hosts that
                        silently clamp out-of-bounds values.
        save_count: Number of successful ``persist`` calls.
        dirty: Whether there are unsaved changes.
    """

    def __init__(self, with_defaults: bool = True, position_limit: Optional[float] = None) -> None:
        self._entities: Dict[str, EntityState] = {}
        self.position_limit = position_limit
        self.save_count = 0
        self.dirty = False
        self._operations: Dict[str, Callable[[Mapping[str, Any]], ToolResult]] = {
            "create_gameobject": self._create_gameobject,
            "create_primitive": self._create_primitive,
            "create_camera": self._create_camera,
            "set_position": self._set_position,
            "set_rotation": self._set_rotation,
            "set_scale": self._set_scale,
            "set_parent": self._set_parent,
            "set_camera_height": self._set_camera_height,
            "set_field_of_view": self._set_field_of_view,
            "add_component": self._add_component,
            "create_script": self._create_script,
            "attach_script": self._attach_script,
            "delete_gameobject": self._delete_gameobject,
            "get_scene_info": self._get_scene_info,
            "get_gameobject_info": self._get_gameobject_info,
        }

        if with_defaults:
            self._entities["Main Camera"] = EntityState(
                identifier="Main Camera",
                kind="camera",
                position=(0.0, 1.0, -10.0),
                components=["Transform", "Camera", "AudioListener"],
                properties={"field_of_view": 60.0},
            )
            self._entities["Directional Light"] = EntityState(
                identifier="Directional Light",
                kind="light",
                position=(0.0, 3.0, 0.0),
                rotation=(50.0, -30.0, 0.0),
                components=["Transform", "Light"],
            )

    @property
    def operations(self) -> List[str]:
        return list(self._operations)

    def __contains__(self, identifier: object) -> bool:
        return identifier in self._entities

    def __len__(self) -> int:
        return len(self._entities)

    def invoke(self, tool_name: str, arguments: Mapping[str, Any]) -> ToolResult:
        """Perform a scene operation.

        Args:
            tool_name: Name of the operation.
            arguments: Typed arguments of the operation.

        Returns:
            The outcome. Missing entities and unknown operations are failed results.
        """
        operation = self._operations.get(tool_name)
        if operation is None:
            return ToolResult.fail(f"Scene does not support operation '{tool_name}'.")
        logger.debug(f"Scene operation '{tool_name}' with {dict(arguments)}")
        return operation(arguments)

    def query_entity(self, identifier: str) -> Optional[EntityState]:
        entity = self._entities.get(identifier)
        return entity.model_copy(deep=True) if entity is not None else None

    def persist(self) -> bool:
        self.save_count += 1
        self.dirty = False
        logger.info(f"Scene saved ({len(self._entities)} entities).")
        return True

    def children_of(self, identifier: str) -> List[str]:
        return [e.identifier for e in self._entities.values() if e.parent == identifier]

    def _create_gameobject(self, arguments: Mapping[str, Any]) -> ToolResult:
        return self._create(str(arguments["name"]), "gameobject", arguments.get("parent"), ["Transform"])

    def _create_primitive(self, arguments: Mapping[str, Any]) -> ToolResult:
        primitive = str(arguments.get("primitive_type", "cube")).lower()
        if primitive not in PRIMITIVE_TYPES:
            return ToolResult.fail(
                f"Unknown primitive type '{primitive}'. Expected one of: {', '.join(PRIMITIVE_TYPES)}."
            )
        components = ["Transform", "MeshFilter", "MeshRenderer", _PRIMITIVE_COLLIDERS[primitive]]
        return self._create(str(arguments["name"]), "gameobject", arguments.get("parent"), components)

    def _create_camera(self, arguments: Mapping[str, Any]) -> ToolResult:
        result = self._create(str(arguments["name"]), "camera", arguments.get("parent"), ["Transform", "Camera"])
        if result.success:
            self._entities[str(arguments["name"])].properties["field_of_view"] = float(
                arguments.get("field_of_view") or 60.0
            )
        return result

    def _create(self, name: str, kind: str, parent: Optional[str], components: List[str]) -> ToolResult:
        if not name:
            return ToolResult.fail("A name is required.")
        if name in self._entities:
            return ToolResult.fail(f"An object named '{name}' already exists.")
        if parent and parent not in self._entities:
            return ToolResult.fail(f"Parent '{parent}' not found.")

        self._entities[name] = EntityState(identifier=name, kind=kind, parent=parent or None, components=components)
        self.dirty = True
        where = f" under '{parent}'" if parent else ""
        return ToolResult.ok(f"Created {kind} '{name}'{where}.", entity=name, kind=kind, action="created", parent=parent)

    def _set_position(self, arguments: Mapping[str, Any]) -> ToolResult:
        entity, error = self._lookup(arguments.get("gameobject_name"))
        if entity is None:
            return error
        position = self._vector(arguments)
        if self.position_limit is not None:
            limit = self.position_limit
            position = (
                max(-limit, min(limit, position[0])),
                max(-limit, min(limit, position[1])),
                max(-limit, min(limit, position[2])),
            )
        entity.position = position
        return self._modified(entity, f"Moved '{entity.identifier}' to {_fmt(position)}.")

    def _set_rotation(self, arguments: Mapping[str, Any]) -> ToolResult:
        entity, error = self._lookup(arguments.get("gameobject_name"))
        if entity is None:
            return error
        entity.rotation = self._vector(arguments)
        return self._modified(entity, f"Rotated '{entity.identifier}' to {_fmt(entity.rotation)}.")

    def _set_scale(self, arguments: Mapping[str, Any]) -> ToolResult:
        entity, error = self._lookup(arguments.get("gameobject_name"))
        if entity is None:
            return error
        entity.scale = self._vector(arguments)
        return self._modified(entity, f"Scaled '{entity.identifier}' to {_fmt(entity.scale)}.")

    def _set_parent(self, arguments: Mapping[str, Any]) -> ToolResult:
        entity, error = self._lookup(arguments.get("gameobject_name"))
        if entity is None:
            return error
        parent = arguments.get("parent") or None
        if parent is not None:
            if parent not in self._entities:
                return ToolResult.fail(f"Parent '{parent}' not found.")
            if parent == entity.identifier or self._is_descendant(parent, entity.identifier):
                return ToolResult.fail(f"Cannot parent '{entity.identifier}' under its own descendant '{parent}'.")
        entity.parent = parent
        self.dirty = True
        target = f"'{parent}'" if parent else "the scene root"
        return ToolResult.ok(
            f"Parented '{entity.identifier}' to {target}.",
            entity=entity.identifier,
            kind=entity.kind,
            action="modified",
            parent=parent,
        )

    def _set_camera_height(self, arguments: Mapping[str, Any]) -> ToolResult:
        entity, error = self._lookup(arguments.get("camera_name") or "Main Camera")
        if entity is None:
            return error
        if entity.kind != "camera":
            return ToolResult.fail(f"'{entity.identifier}' is not a camera.")
        x, _, z = entity.position
        height = float(arguments["height"])
        if self.position_limit is not None:
            height = max(-self.position_limit, min(self.position_limit, height))
        entity.position = (x, height, z)
        return self._modified(entity, f"Camera '{entity.identifier}' height set to {height:g}.")

    def _set_field_of_view(self, arguments: Mapping[str, Any]) -> ToolResult:
        entity, error = self._lookup(arguments.get("camera_name") or "Main Camera")
        if entity is None:
            return error
        if entity.kind != "camera":
            return ToolResult.fail(f"'{entity.identifier}' is not a camera.")
        entity.properties["field_of_view"] = float(arguments["field_of_view"])
        return self._modified(entity, f"Camera '{entity.identifier}' field of view set to {arguments['field_of_view']}.")

    def _add_component(self, arguments: Mapping[str, Any]) -> ToolResult:
        entity, error = self._lookup(arguments.get("gameobject_name"))
        if entity is None:
            return error
        component = str(arguments["component_type"])
        if component in entity.components:
            return ToolResult.fail(f"'{entity.identifier}' already has a {component}.")
        entity.components.append(component)
        return self._modified(entity, f"Added {component} to '{entity.identifier}'.")

    def _create_script(self, arguments: Mapping[str, Any]) -> ToolResult:
        name = str(arguments["script_name"])
        source = str(arguments.get("script_content") or "")
        if not source.strip():
            return ToolResult.fail(f"Script '{name}' has no content.")
        if name in self._entities:
            return ToolResult.fail(f"An asset named '{name}' already exists.")
        self._entities[name] = EntityState(identifier=name, kind="script", properties={"source": source})
        self.dirty = True
        lines = len(source.splitlines())
        return ToolResult.ok(f"Created script '{name}' ({lines} lines).", entity=name, kind="script", action="created")

    def _attach_script(self, arguments: Mapping[str, Any]) -> ToolResult:
        entity, error = self._lookup(arguments.get("gameobject_name"))
        if entity is None:
            return error
        script = str(arguments["script_name"])
        stored = self._entities.get(script)
        if stored is None or stored.kind != "script":
            return ToolResult.fail(f"Script '{script}' not found.")
        if script in entity.scripts:
            return ToolResult.fail(f"'{entity.identifier}' already has script '{script}'.")
        entity.scripts.append(script)
        return self._modified(entity, f"Attached '{script}' to '{entity.identifier}'.")

    def _delete_gameobject(self, arguments: Mapping[str, Any]) -> ToolResult:
        entity, error = self._lookup(arguments.get("gameobject_name"))
        if entity is None:
            return error
        removed = [entity.identifier]
        index = 0
        while index < len(removed):
            removed.extend(self.children_of(removed[index]))
            index += 1
        for identifier in removed:
            del self._entities[identifier]
        self.dirty = True
        extra = f" and {len(removed) - 1} child object(s)" if len(removed) > 1 else ""
        return ToolResult.ok(
            f"Deleted '{entity.identifier}'{extra}.", entity=entity.identifier, kind=entity.kind, action="deleted"
        )

    def _get_scene_info(self, arguments: Mapping[str, Any]) -> ToolResult:
        lines = [f"Scene has {len(self._entities)} entities{' (unsaved changes)' if self.dirty else ''}:"]
        lines.extend(self._describe_tree(None, 1))
        scripts = [e.identifier for e in self._entities.values() if e.kind == "script"]
        if scripts:
            lines.append(f"Scripts: {', '.join(scripts)}")
        return ToolResult.ok("\n".join(lines))

    def _get_gameobject_info(self, arguments: Mapping[str, Any]) -> ToolResult:
        entity, error = self._lookup(arguments.get("gameobject_name"))
        if entity is None:
            return error
        lines = [
            f"'{entity.identifier}' ({entity.kind})",
            f"parent: {entity.parent or '-'}",
            f"position: {_fmt(entity.position)}",
            f"rotation: {_fmt(entity.rotation)}",
            f"scale: {_fmt(entity.scale)}",
            f"components: {', '.join(entity.components) or '-'}",
            f"scripts: {', '.join(entity.scripts) or '-'}",
        ]
        return ToolResult.ok("\n".join(lines))

    def _describe_tree(self, parent: Optional[str], depth: int) -> List[str]:
        lines = []
        for entity in self._entities.values():
            if entity.kind == "script" or entity.parent != parent:
                continue
            lines.append(f"{'  ' * depth}- {entity.identifier} ({entity.kind}) at {_fmt(entity.position)}")
            lines.extend(self._describe_tree(entity.identifier, depth + 1))
        return lines

    def _lookup(self, identifier: Any) -> Tuple[Optional[EntityState], ToolResult]:
        entity = self._entities.get(str(identifier)) if identifier else None
        if entity is None or entity.kind == "script":
            return None, ToolResult.fail(f"GameObject '{identifier}' not found.")
        return entity, ToolResult.ok("")

    def _modified(self, entity: EntityState, message: str) -> ToolResult:
        self.dirty = True
        return ToolResult.ok(message, entity=entity.identifier, kind=entity.kind, action="modified", parent=entity.parent)

    def _is_descendant(self, identifier: str, ancestor: str) -> bool:
        current = self._entities.get(identifier)
        while current is not None and current.parent is not None:
            if current.parent == ancestor:
                return True
            current = self._entities.get(current.parent)
        return False

    @staticmethod
    def _vector(arguments: Mapping[str, Any]) -> Tuple[float, float, float]:
        return float(arguments["x"]), float(arguments["y"]), float(arguments["z"])


def _fmt(vector: Tuple[float, float, float]) -> str:
    return "(" + ", ".join(f"{v:g}" for v in vector) + ")"
