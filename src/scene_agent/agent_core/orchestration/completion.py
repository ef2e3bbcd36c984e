"""Heuristic completion detection for a finished turn.

Models routinely stop halfway: they announce five steps and run one, or they
create an object and never save the scene. Each rule below recognizes one such
pattern. Any rule that fires marks the turn incomplete, and the reason codes
are kept so the continuation prompt can address them specifically.
"""

from __future__ import annotations

import re
import unicodedata
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Callable, List, Optional, Sequence, Tuple

from ..tools.execution import ExecutionReport
from ..tools.models import ToolRole
from ..tools.parsing import CLOSE_TAG, ParseResult, ToolCallParser
from ..logger import get_logger

logger = get_logger(__name__)

MIN_CALLS_FOR_PLAN = 3

_TERMINAL_CHARS = ".!?…"
_CLOSING_WRAPPERS = "\"'”’)]}*_`"
_CODE_FENCE = "```"

_PROMISE = re.compile(
    r"\b(?:i['’]ll|i will|i am going to|i['’]m going to|let me|let['’]s|next,?\s+i(?:['’]ll| will)?)\s+"
    r"(?:now\s+|also\s+|then\s+)?(?:create|add|make|build|set up|generate|write|place|attach|spawn|configure)\b",
    re.IGNORECASE,
)
_SCRIPT_MENTION = re.compile(
    r"\b(?:generat\w*|writ\w*|creat\w*|wrote)\b[^.\n]{0,40}?\bscript\b",
    re.IGNORECASE,
)
_PLAN_STEP = re.compile(r"^\s*(?:\d+[.)]|step\s+\d+[:.])\s+\S", re.IGNORECASE | re.MULTILINE)


class ReasonCode(IntEnum):
    """Why a turn was judged incomplete."""

    UNTERMINATED_TEXT = 1
    UNCLOSED_TOOL_TAG = 2
    PROMISED_ACTION = 3
    SCRIPT_NOT_CREATED = 4
    PLAN_UNDER_EXECUTED = 5
    ENTITY_NOT_PERSISTED = 6
    SCRIPT_NOT_CONFIGURED = 7
    ERRORS_OR_WARNINGS = 8
    SINGLE_TOOL_CALL = 9


@dataclass(frozen=True)
class CompletionInput:
    """Everything a rule may look at."""

    text: str
    parse: ParseResult
    report: ExecutionReport


@dataclass(frozen=True)
class CompletionRule:
    """
    One independently testable completion rule.

    Attributes:
        code: Reason code reported when the rule fires.
        predicate: Returns True when the turn looks incomplete.
        checklist: Instruction used in continuation prompts when the rule fired.
    """

    code: ReasonCode
    predicate: Callable[[CompletionInput], bool]
    checklist: str


@dataclass(frozen=True)
class CompletionVerdict:
    complete: bool
    reasons: Tuple[ReasonCode, ...] = field(default_factory=tuple)

    def has(self, code: ReasonCode) -> bool:
        return code in self.reasons

    @property
    def had_errors(self) -> bool:
        return ReasonCode.ERRORS_OR_WARNINGS in self.reasons


def ends_with_terminal(text: str) -> bool:
    """Whether ``text`` ends like a finished sentence.

    Accepts sentence punctuation, a closing code fence, a closing tool tag and a
    trailing symbol such as an emoji, after stripping closing quotes and brackets.
    """
    stripped = text.rstrip()
    if not stripped:
        return False
    if stripped.endswith(CLOSE_TAG) or stripped.endswith(_CODE_FENCE):
        return True

    stripped = stripped.rstrip(_CLOSING_WRAPPERS + "\ufe0f\u200d").rstrip()
    if not stripped:
        return False
    last = stripped[-1]
    return last in _TERMINAL_CHARS or unicodedata.category(last) == "So"


def _unterminated(data: CompletionInput) -> bool:
    if data.parse.unclosed_tag:
        return False
    return not ends_with_terminal(data.text)


def _unclosed_tag(data: CompletionInput) -> bool:
    return data.parse.unclosed_tag


def _promised_action(data: CompletionInput) -> bool:
    return len(data.report) < MIN_CALLS_FOR_PLAN and _PROMISE.search(data.parse.narrative) is not None


def _script_not_created(data: CompletionInput) -> bool:
    if _SCRIPT_MENTION.search(data.parse.narrative) is None:
        return False
    return not data.report.any_with_role(ToolRole.SCRIPT)


def _plan_under_executed(data: CompletionInput) -> bool:
    return len(data.report) < MIN_CALLS_FOR_PLAN and len(_PLAN_STEP.findall(data.parse.narrative)) >= 2


def _entity_not_persisted(data: CompletionInput) -> bool:
    last_created = -1
    last_persisted = -1
    for entry in data.report:
        if entry.has_role(ToolRole.PERSIST):
            last_persisted = entry.index
        if entry.succeeded and entry.has_role(ToolRole.CREATE):
            side_effect = entry.result.side_effect or {}
            if side_effect.get("parent") is None:
                last_created = entry.index
    return last_created > last_persisted


def _script_not_configured(data: CompletionInput) -> bool:
    last_script = -1
    last_configured = -1
    for entry in data.report:
        if entry.succeeded and entry.has_role(ToolRole.SCRIPT):
            last_script = entry.index
        if entry.has_role(ToolRole.CONFIGURE):
            last_configured = entry.index
    return last_script > last_configured


def _errors_or_warnings(data: CompletionInput) -> bool:
    return data.report.has_problems


def _single_tool_call(data: CompletionInput) -> bool:
    return len(data.report) == 1


DEFAULT_RULES: Tuple[CompletionRule, ...] = (
    CompletionRule(ReasonCode.UNTERMINATED_TEXT, _unterminated, "Your last response was cut off. Complete it."),
    CompletionRule(
        ReasonCode.UNCLOSED_TOOL_TAG,
        _unclosed_tag,
        f"A tool block was not closed. Repeat that call with a closing {CLOSE_TAG} tag.",
    ),
    CompletionRule(
        ReasonCode.PROMISED_ACTION, _promised_action, "You announced actions you did not perform. Perform them now."
    ),
    CompletionRule(
        ReasonCode.SCRIPT_NOT_CREATED,
        _script_not_created,
        "You described a script but did not create it. Create it with the script tool.",
    ),
    CompletionRule(
        ReasonCode.PLAN_UNDER_EXECUTED,
        _plan_under_executed,
        "Your plan lists more steps than you executed. Execute the remaining steps.",
    ),
    CompletionRule(
        ReasonCode.ENTITY_NOT_PERSISTED,
        _entity_not_persisted,
        "New objects were created but the scene was not saved. Save it.",
    ),
    CompletionRule(
        ReasonCode.SCRIPT_NOT_CONFIGURED,
        _script_not_configured,
        "A script was created but not attached or configured. Place or configure it.",
    ),
    CompletionRule(
        ReasonCode.ERRORS_OR_WARNINGS,
        _errors_or_warnings,
        "Some tool calls failed or produced warnings. Fix them.",
    ),
    CompletionRule(
        ReasonCode.SINGLE_TOOL_CALL,
        _single_tool_call,
        "Only one tool call ran. Check whether the request needs more steps and run them.",
    ),
)


class CompletionHeuristic:
    """
    Decides whether a turn finished the user's request.

    Rules are evaluated independently; the verdict lists every rule that fired,
    in reason-code order.
    """

    def __init__(self, rules: Optional[Sequence[CompletionRule]] = None, parser: Optional[ToolCallParser] = None):
        self.rules: Tuple[CompletionRule, ...] = tuple(rules) if rules is not None else DEFAULT_RULES
        self._parser = parser or ToolCallParser()

    def assess(self, text: str, report: ExecutionReport, parse: Optional[ParseResult] = None) -> CompletionVerdict:
        """Assess a finished turn.

        Args:
            text: The raw model response of the turn.
            report: The finalized execution report of the turn.
            parse: The parse of ``text``, if already available.

        Returns:
            A verdict listing the reasons the turn looks incomplete, empty when complete.
        """
        data = CompletionInput(text=text, parse=parse if parse is not None else self._parser.parse(text), report=report)
        reasons = tuple(sorted(rule.code for rule in self.rules if rule.predicate(data)))
        if reasons:
            logger.info(f"Turn incomplete: {', '.join(r.name for r in reasons)}")
        else:
            logger.debug("Turn assessed complete.")
        return CompletionVerdict(complete=not reasons, reasons=reasons)

    def checklist(self, reasons: Sequence[ReasonCode]) -> List[str]:
        by_code = {rule.code: rule.checklist for rule in self.rules}
        return [by_code[code] for code in reasons if code in by_code]
