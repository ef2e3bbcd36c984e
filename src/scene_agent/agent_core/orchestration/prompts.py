"""Prompt construction for the first and the continuation turns."""

from __future__ import annotations

from typing import List, Optional

from ..context import ConversationContext
from ..tools.execution import ExecutionReport
from ..tools.guard_rails import GuardRailValidator
from ..tools.registry import ToolRegistry
from .completion import CompletionHeuristic, CompletionVerdict

SYSTEM_PREAMBLE = (
    "You are an assistant embedded in a 3D scene editor. You change the scene only by calling tools.\n"
    "Work through the whole request in one response: call every tool the request needs, in order.\n"
    "Save the scene after creating new top-level objects. Attach or configure scripts after creating them.\n"
    "Keep the explanation short and finish your response with a complete sentence."
)

FINISH_DIRECTIVE = (
    "Finish the remaining work now. Do not re-explain or repeat steps that already succeeded; "
    "only issue the tool calls that are still needed."
)

ERROR_DIRECTIVE = "⚠️ The previous attempt had errors or warnings. Verify the affected values before proceeding."


def build_system_instruction(registry: ToolRegistry, preamble: str = SYSTEM_PREAMBLE) -> str:
    """Combine the behavioral preamble with the tool catalog of the registry."""
    return f"{preamble}\n\n{registry.describe()}"


def build_initial_prompt(user_request: str, context: Optional[ConversationContext] = None) -> str:
    """Prefix the user request with what the session touched recently."""
    block = context.to_prompt_block() if context is not None else ""
    if not block:
        return user_request
    return f"{block}\n\n{user_request}"


def build_continuation_prompt(
    verdict: CompletionVerdict,
    report: ExecutionReport,
    validator: Optional[GuardRailValidator] = None,
    context: Optional[ConversationContext] = None,
    heuristic: Optional[CompletionHeuristic] = None,
) -> str:
    """Build the follow-up prompt for an incomplete turn.

    When the turn had failures or warnings the prompt leads with them, naming each
    failing tool and its message, followed by the plausible-range table. Otherwise
    it lists one checklist item per reason the turn was judged incomplete.

    Args:
        verdict: The verdict of the turn being continued.
        report: The execution report of that turn.
        validator: Source of the plausible-range table.
        context: Conversation context injected as a recent-entities block.
        heuristic: Source of the checklist wording. Defaults to the standard rules.

    Returns:
        The prompt text.
    """
    heuristic = heuristic or CompletionHeuristic()
    sections: List[str] = ["[Auto-continue]"]

    if verdict.had_errors:
        problems = [ERROR_DIRECTIVE]
        for entry in report.problems:
            if not entry.succeeded:
                problems.append(f"- {entry.tool_name} failed: {entry.result.message}")
            for warning in entry.result.warnings:
                problems.append(f"- {entry.tool_name} warning: {warning}")
        sections.append("\n".join(problems))

        table = validator.range_table() if validator is not None else ""
        if table:
            sections.append(f"Plausible value ranges:\n{table}")
    else:
        checklist = heuristic.checklist(verdict.reasons)
        if checklist:
            sections.append("Checklist:\n" + "\n".join(f"- [ ] {item}" for item in checklist))

    if len(report):
        sections.append("Results of your previous tool calls:\n" + "\n".join(report.summary_lines()))

    if context is not None:
        block = context.to_prompt_block()
        if block:
            sections.append(block)

    sections.append(FINISH_DIRECTIVE)
    return "\n\n".join(sections)
