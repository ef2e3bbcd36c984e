import pytest

from scene_agent.agent_core.tools.parsing import ToolCallParser


def test_parses_blocks_in_source_order_with_narrative() -> None:
    text = (
        "Let me set things up.\n"
        "[TOOL:create_gameobject]\nname: Player\n[/TOOL]\n"
        "Now the floor.\n"
        "[TOOL:create_primitive]\nname: Floor\nprimitive_type: plane\n[/TOOL]\n"
        "Done."
    )

    result = ToolCallParser().parse(text)

    assert result.tool_names == ["create_gameobject", "create_primitive"]
    assert dict(result.calls[0].arguments) == {"name": "Player"}
    assert dict(result.calls[1].arguments) == {"name": "Floor", "primitive_type": "plane"}
    assert not result.unclosed_tag
    assert "[TOOL" not in result.narrative
    assert "Now the floor." in result.narrative
    assert result.narrative.rstrip().endswith("Done.")


def test_argument_order_is_preserved() -> None:
    text = "[TOOL:set_position]\ngameobject_name: Player\nz: 3\nx: 1\ny: 2\n[/TOOL]"

    call = ToolCallParser().parse(text).calls[0]

    assert list(call.arguments) == ["gameobject_name", "z", "x", "y"]


def test_raw_span_covers_the_block() -> None:
    text = "intro [TOOL:save_scene]\n[/TOOL] outro"

    call = ToolCallParser().parse(text).calls[0]

    assert call.raw_span is not None
    assert call.raw_span.slice(text) == "[TOOL:save_scene]\n[/TOOL]"


def test_single_line_block() -> None:
    result = ToolCallParser().parse('"Creating..." [TOOL:create_x] name: Foo [/TOOL]')

    assert result.tool_names == ["create_x"]
    assert result.calls[0].arguments["name"] == "Foo"


def test_bare_tag_takes_name_from_first_line() -> None:
    result = ToolCallParser().parse("[TOOL]\nsave_scene\n[/TOOL]")

    assert result.tool_names == ["save_scene"]
    assert dict(result.calls[0].arguments) == {}


def test_empty_bare_block_is_skipped() -> None:
    result = ToolCallParser().parse("[TOOL]\n\n[/TOOL] text")

    assert len(result) == 0
    assert not result.unclosed_tag


def test_unclosed_block_keeps_earlier_calls() -> None:
    text = "[TOOL:create_gameobject]\nname: A\n[/TOOL]\n[TOOL:create_gameobject]\nname: B\n"

    result = ToolCallParser().parse(text)

    assert result.tool_names == ["create_gameobject"]
    assert result.unclosed_tag


def test_missing_close_tag_before_next_block_stops_parsing() -> None:
    text = (
        "[TOOL:create_gameobject]\nname: Floor\n[/TOOL]\n"
        "[TOOL:create_gameobject]\nname: A\n"
        "[TOOL:delete_gameobject]\ngameobject_name: B\n[/TOOL]\nDone."
    )

    result = ToolCallParser().parse(text)

    assert result.tool_names == ["create_gameobject"]
    assert result.calls[0].arguments == {"name": "Floor"}
    assert result.unclosed_tag
    assert "delete_gameobject" not in result.narrative


def test_open_tag_inside_a_script_body_stays_verbatim() -> None:
    source = "// emits\n[TOOL:save_scene]\nDebug.Log(1);"
    text = f"[TOOL:create_script]\nscript_name: Logger\nscript_content: {source}\n[/TOOL]"

    result = ToolCallParser().parse(text)

    assert not result.unclosed_tag
    assert result.tool_names == ["create_script"]
    assert result.calls[0].arguments["script_content"] == source


def test_script_content_is_captured_verbatim() -> None:
    source = (
        "using UnityEngine;\n"
        "public class Mover : MonoBehaviour {\n"
        "    public float speed: 3;\n"
        "    void Update() { }\n"
        "}"
    )
    text = f"[TOOL:create_script]\nscript_name: Mover\nscript_content: {source}\n[/TOOL]"

    call = ToolCallParser().parse(text).calls[0]

    assert call.arguments["script_name"] == "Mover"
    assert call.arguments["script_content"] == source
    assert "speed" not in call.arguments


def test_verbatim_value_starting_on_next_line() -> None:
    text = "[TOOL:create_script]\nscript_name: A\nscript_content:\n  line one\n  line two\n[/TOOL]"

    call = ToolCallParser().parse(text).calls[0]

    assert call.arguments["script_content"] == "  line one\n  line two"


def test_multiline_value_continues_previous_key() -> None:
    text = "[TOOL:note]\nmessage: first line\nsecond line\nlevel: info\n[/TOOL]"

    call = ToolCallParser().parse(text).calls[0]

    assert call.arguments["message"] == "first line\nsecond line"
    assert call.arguments["level"] == "info"


def test_unknown_keys_are_preserved_and_case_sensitive() -> None:
    text = "[TOOL:Create_GameObject]\nName: A\nname: b\nextra_flag: yes\n[/TOOL]"

    call = ToolCallParser().parse(text).calls[0]

    assert call.name == "Create_GameObject"
    assert dict(call.arguments) == {"Name": "A", "name": "b", "extra_flag": "yes"}


def test_custom_verbatim_keys() -> None:
    text = "[TOOL:write]\nbody: a: 1\nb: 2\n[/TOOL]"

    default = ToolCallParser().parse(text).calls[0]
    custom = ToolCallParser(verbatim_keys=()).parse(text).calls[0]

    assert default.arguments["body"] == "a: 1\nb: 2"
    assert dict(custom.arguments) == {"body": "a: 1", "b": "2"}


def test_no_blocks_returns_whole_text_as_narrative() -> None:
    result = ToolCallParser().parse("Just talking.")

    assert len(result) == 0
    assert result.narrative == "Just talking."
    assert not result.unclosed_tag


def test_parse_never_raises_on_garbage() -> None:
    for text in ["", "[/TOOL]", "[TOOL:", "[TOOL:]\n[/TOOL]", "[[TOOL:x]]]\n:\n[/TOOL]"]:
        ToolCallParser().parse(text)


def test_tool_call_arguments_are_read_only() -> None:
    call = ToolCallParser().parse("[TOOL:a]\nx: 1\n[/TOOL]").calls[0]

    with pytest.raises(TypeError):
        call.arguments["x"] = "2"  # type: ignore[index]
