from scene_agent.agent_core import HostEnvironment
from scene_agent.scene import InMemoryScene


def test_scene_satisfies_host_protocol(scene):
    assert isinstance(scene, HostEnvironment)
    assert "Main Camera" in scene
    assert len(scene) == 2
    assert len(InMemoryScene(with_defaults=False)) == 0


def test_create_reports_side_effect(scene):
    result = scene.invoke("create_primitive", {"name": "Floor", "primitive_type": "Plane"})

    assert result.success
    assert result.side_effect == {"entity": "Floor", "kind": "gameobject", "action": "created", "parent": None}
    assert "MeshCollider" in scene.query_entity("Floor").components
    assert scene.dirty


def test_create_rejects_duplicates_and_unknown_parents(scene):
    scene.invoke("create_gameobject", {"name": "Player"})

    assert scene.invoke("create_gameobject", {"name": "Player"}).message == "An object named 'Player' already exists."
    assert scene.invoke("create_gameobject", {"name": "Hat", "parent": "Nobody"}).message == "Parent 'Nobody' not found."
    assert not scene.invoke("create_primitive", {"name": "Blob", "primitive_type": "torus"}).success


def test_unknown_operation_fails(scene):
    result = scene.invoke("explode", {})
    assert not result.success
    assert "explode" in result.message


def test_missing_entity_message(scene):
    result = scene.invoke("set_position", {"gameobject_name": "Ghost", "x": 0, "y": 0, "z": 0})
    assert result.message == "GameObject 'Ghost' not found."


def test_query_returns_a_copy(scene):
    snapshot = scene.query_entity("Main Camera")
    snapshot.components.append("Bogus")

    assert "Bogus" not in scene.query_entity("Main Camera").components
    assert scene.query_entity("Nobody") is None


def test_position_is_clamped_to_limit():
    scene = InMemoryScene(position_limit=100)
    scene.invoke("create_gameobject", {"name": "Rock"})

    scene.invoke("set_position", {"gameobject_name": "Rock", "x": 500, "y": -500, "z": 3})

    assert scene.query_entity("Rock").position == (100.0, -100.0, 3.0)


def test_camera_height_keeps_horizontal_position(scene):
    result = scene.invoke("set_camera_height", {"height": 2.5})

    assert result.success
    assert scene.query_entity("Main Camera").position == (0.0, 2.5, -10.0)
    assert not scene.invoke("set_camera_height", {"camera_name": "Directional Light", "height": 1}).success


def test_parent_cycle_is_rejected(scene):
    scene.invoke("create_gameobject", {"name": "Car"})
    scene.invoke("create_gameobject", {"name": "Wheel", "parent": "Car"})

    result = scene.invoke("set_parent", {"gameobject_name": "Car", "parent": "Wheel"})

    assert not result.success
    assert scene.query_entity("Car").parent is None
    assert scene.invoke("set_parent", {"gameobject_name": "Wheel", "parent": None}).success
    assert scene.query_entity("Wheel").parent is None


def test_delete_removes_descendants(scene):
    scene.invoke("create_gameobject", {"name": "Car"})
    scene.invoke("create_gameobject", {"name": "Wheel", "parent": "Car"})
    scene.invoke("create_gameobject", {"name": "Bolt", "parent": "Wheel"})

    result = scene.invoke("delete_gameobject", {"gameobject_name": "Car"})

    assert result.message == "Deleted 'Car' and 2 child object(s)."
    assert result.side_effect["action"] == "deleted"
    assert scene.children_of("Car") == []
    assert "Bolt" not in scene


def test_scripts_are_stored_and_attached(scene):
    scene.invoke("create_gameobject", {"name": "Player"})

    assert not scene.invoke("create_script", {"script_name": "Empty", "script_content": "  "}).success
    created = scene.invoke("create_script", {"script_name": "Mover", "script_content": "class Mover {}\n// end"})
    assert created.message == "Created script 'Mover' (2 lines)."

    assert scene.invoke("attach_script", {"gameobject_name": "Player", "script_name": "Mover"}).success
    assert not scene.invoke("attach_script", {"gameobject_name": "Player", "script_name": "Mover"}).success
    assert not scene.invoke("attach_script", {"gameobject_name": "Player", "script_name": "Missing"}).success
    # scripts are not game objects
    assert not scene.invoke("set_position", {"gameobject_name": "Mover", "x": 0, "y": 0, "z": 0}).success
    assert scene.query_entity("Player").scripts == ["Mover"]


def test_info_operations(scene):
    scene.invoke("create_gameobject", {"name": "Car"})
    scene.invoke("create_gameobject", {"name": "Wheel", "parent": "Car"})
    scene.invoke("add_component", {"gameobject_name": "Car", "component_type": "Rigidbody"})

    info = scene.invoke("get_scene_info", {}).message
    assert info.startswith("Scene has 4 entities (unsaved changes):")
    assert "    - Wheel (gameobject) at (0, 0, 0)" in info

    details = scene.invoke("get_gameobject_info", {"gameobject_name": "Car"}).message
    assert "components: Transform, Rigidbody" in details


def test_persist_clears_dirty_flag(scene):
    scene.invoke("create_gameobject", {"name": "Player"})

    assert scene.persist() is True
    assert scene.save_count == 1
    assert not scene.dirty
