from scene_agent.agent_core import ConversationContext, EntityRef, ToolResult


def _created(name: str, kind: str = "gameobject") -> ToolResult:
    return ToolResult.ok(f"Created {name}", entity=name, kind=kind, action="created")


def test_update_from_result_tracks_created_and_modified() -> None:
    context = ConversationContext()

    context.update_from_result(_created("Player"))
    context.update_from_result(ToolResult.ok("Moved", entity="Floor", action="modified"))

    assert context.last_created == EntityRef("Player", "gameobject", "created")
    assert context.last_modified == EntityRef("Floor", "gameobject", "modified")
    assert [r.identifier for r in context.recent] == ["Player", "Floor"]


def test_failed_results_and_missing_entities_are_ignored() -> None:
    context = ConversationContext()

    assert context.update_from_result(ToolResult.fail("nope")) is None
    assert context.update_from_result(ToolResult.ok("info")) is None
    assert len(context) == 0


def test_capacity_evicts_oldest() -> None:
    context = ConversationContext(capacity=10)

    for i in range(12):
        context.update_from_result(_created(f"Obj{i}"))

    assert len(context) == 10
    assert context.recent[0].identifier == "Obj2"
    assert context.recent[-1].identifier == "Obj11"


def test_repeated_entity_moves_to_newest() -> None:
    context = ConversationContext()
    context.update_from_result(_created("A"))
    context.update_from_result(_created("B"))

    context.update_from_result(ToolResult.ok("Moved", entity="A", action="modified"))

    assert [r.identifier for r in context.recent] == ["B", "A"]
    assert context.recent[-1].action == "modified"


def test_deleted_entity_is_forgotten() -> None:
    context = ConversationContext()
    context.update_from_result(_created("A"))

    context.update_from_result(ToolResult.ok("Deleted", entity="A", action="deleted"))

    assert len(context) == 0
    assert context.last_created is None
    assert context.resolve_reference("it") is None


def test_resolve_pronouns_and_kinds() -> None:
    context = ConversationContext()
    context.update_from_result(_created("Player"))
    context.update_from_result(_created("PlayerMovement", kind="script"))
    context.update_from_result(_created("Eye", kind="camera"))

    assert context.resolve_reference("it") == "Eye"
    assert context.resolve_reference("That") == "Eye"
    assert context.resolve_reference("that script") == "PlayerMovement"
    assert context.resolve_reference("the last script.") == "PlayerMovement"
    assert context.resolve_reference("the camera") == "Eye"
    assert context.resolve_reference("the object") == "Eye"
    assert context.resolve_reference("the last one") == "Eye"


def test_object_reference_skips_scripts() -> None:
    context = ConversationContext()
    context.update_from_result(_created("Player"))
    context.update_from_result(_created("Mover", kind="script"))

    assert context.resolve_reference("the object") == "Player"


def test_non_references_are_not_resolved() -> None:
    context = ConversationContext()
    context.update_from_result(_created("Player"))

    assert context.resolve_reference("Player") is None
    assert context.resolve_reference("the dragon") is None
    assert context.resolve_reference("iterate") is None


def test_prompt_block_and_clear() -> None:
    context = ConversationContext()
    assert context.to_prompt_block() == ""

    context.update_from_result(_created("Player"))
    block = context.to_prompt_block()
    assert "- Player (gameobject, created)" in block
    assert "Last created: Player" in block

    context.clear()
    assert context.to_prompt_block() == ""
    assert context.last_created is None
