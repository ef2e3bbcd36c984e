from typing import Any, List

import pytest

from scene_agent.agent_core import ConversationContext, ToolCall, ToolExecutionEngine
from scene_agent.agent_core.orchestration import (
    CompletionHeuristic,
    CompletionVerdict,
    PreviewEvent,
    ReasonCode,
    StreamPreview,
    build_continuation_prompt,
    build_initial_prompt,
    build_system_instruction,
)
from scene_agent.agent_core.orchestration.prompts import ERROR_DIRECTIVE, FINISH_DIRECTIVE
from scene_agent.scene import InMemoryScene


def _call(tool_name: str, /, **arguments: Any) -> ToolCall:
    return ToolCall(name=tool_name, arguments={k: str(v) for k, v in arguments.items()})


def test_system_instruction_lists_tools(registry):
    instruction = build_system_instruction(registry, preamble="Be brief.")

    assert instruction.startswith("Be brief.\n\n")
    assert "save_scene" in instruction
    assert "create_gameobject" in instruction


def test_initial_prompt_without_context_is_the_request():
    assert build_initial_prompt("Add a cube.") == "Add a cube."
    assert build_initial_prompt("Add a cube.", ConversationContext()) == "Add a cube."


@pytest.mark.asyncio
async def test_checklist_prompt_layout(engine: ToolExecutionEngine, scene: InMemoryScene) -> None:
    context = ConversationContext()
    report = await engine.execute([_call("create_gameobject", name="Player")], scene, context=context)
    verdict = CompletionVerdict(
        complete=False, reasons=(ReasonCode.ENTITY_NOT_PERSISTED, ReasonCode.SINGLE_TOOL_CALL)
    )

    prompt = build_continuation_prompt(verdict, report, engine.validator, context)
    sections = prompt.split("\n\n")

    assert sections[0] == "[Auto-continue]"
    assert sections[1].startswith("Checklist:\n- [ ] ")
    assert sections[1].count("- [ ]") == 2
    assert sections[2].startswith("Results of your previous tool calls:\n1. create_gameobject")
    assert sections[3].startswith("Recently touched entities")
    assert sections[-1] == FINISH_DIRECTIVE
    assert ERROR_DIRECTIVE not in prompt


@pytest.mark.asyncio
async def test_error_prompt_replaces_checklist(engine: ToolExecutionEngine, scene: InMemoryScene) -> None:
    report = await engine.execute(
        [_call("set_scale", gameobject_name="Ghost", x=1, y=1, z=1), _call("save_scene")], scene
    )
    verdict = CompletionHeuristic().assess("Scaled it.", report)

    prompt = build_continuation_prompt(verdict, report, engine.validator)

    assert verdict.has(ReasonCode.ERRORS_OR_WARNINGS)
    assert ERROR_DIRECTIVE in prompt
    assert "- set_scale failed: GameObject 'Ghost' not found." in prompt
    assert "Plausible value ranges:\n- " in prompt
    assert "Checklist:" not in prompt
    assert prompt.endswith(FINISH_DIRECTIVE)


@pytest.mark.asyncio
async def test_error_prompt_without_validator_omits_range_table(
    engine: ToolExecutionEngine, scene: InMemoryScene
) -> None:
    report = await engine.execute([_call("delete_gameobject", gameobject_name="Ghost")], scene)
    verdict = CompletionHeuristic().assess("Deleted.", report)

    prompt = build_continuation_prompt(verdict, report)

    assert "Plausible value ranges" not in prompt


@pytest.mark.asyncio
async def test_preview_emits_only_on_change() -> None:
    events: List[PreviewEvent] = []
    preview = StreamPreview(sink=events.append)

    chunks = ["I will add it. ", "[TOOL:create_game", "object]\nname: Box\n", "[/TOOL]", " Done", "."]
    returned = [await preview.feed(chunk) for chunk in chunks]

    assert [e is not None for e in returned] == [False, False, True, True, False, False]
    assert events[0].unclosed_tag and events[0].tool_names == ()
    assert events[1].tool_names == ("create_gameobject",)
    assert events[1].new_tool_names == ("create_gameobject",)
    assert not events[1].unclosed_tag
    assert preview.text == "".join(chunks)
    assert preview.last_parse.tool_names == ["create_gameobject"]


@pytest.mark.asyncio
async def test_preview_ignores_empty_chunks_and_sink_errors() -> None:
    def broken_sink(event: PreviewEvent) -> None:
        raise RuntimeError("display gone")

    preview = StreamPreview(sink=broken_sink)

    assert await preview.feed("") is None
    event = await preview.feed("[TOOL:save_scene]\n[/TOOL]")

    assert event is not None
    assert event.tool_names == ("save_scene",)


@pytest.mark.asyncio
async def test_preview_awaits_async_sink() -> None:
    seen: List[PreviewEvent] = []

    async def sink(event: PreviewEvent) -> None:
        seen.append(event)

    preview = StreamPreview(sink=sink)
    await preview.feed("[TOOL:save_scene]\n[/TOOL]")

    assert len(seen) == 1
    assert seen[0].text_length == len("[TOOL:save_scene]\n[/TOOL]")
