"""Guard-rail validation of tool arguments before and after execution.

Schema validation catches type errors; it does not catch a model that meant
``1.9`` and wrote ``19``. Those decimal-point slips are only visible against a
plausible range for the quantity, which is what this module checks.
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING, Any, Dict, List, Mapping, Optional

from pydantic import BaseModel

from ...exceptions import GuardRailViolation
from ...logger import get_logger
from .ranges import PlausibleRange, ToolGuard

if TYPE_CHECKING:
    from ...host import EntityState
    from ..registry import ToolRegistry

logger = get_logger(__name__)

_SHIFT_FACTORS = (0.1, 0.01, 10.0)


class GuardRailWarning(BaseModel):
    """
    A plausibility problem found around a tool call.

    Attributes:
        tool_name: Tool the warning belongs to.
        parameter: Argument key involved, if any.
        message: Human readable description, surfaced in the ToolResult.
        blocking: True when the call must not execute (hard range violation).
    """

    tool_name: str
    parameter: Optional[str] = None
    message: str
    blocking: bool = False

    def __str__(self) -> str:
        return self.message


class GuardRailValidator:
    """
    Checks tool arguments against plausible ranges and verifies host state after execution.
    """

    def __init__(self, guards: Optional[Dict[str, ToolGuard]] = None) -> None:
        self._guards: Dict[str, ToolGuard] = dict(guards or {})

    @classmethod
    def from_registry(cls, registry: "ToolRegistry") -> "GuardRailValidator":
        """Collect the guards declared on every tool of a registry."""
        return cls({name: tool.guard for name, tool in registry.tools.items() if tool.guard is not None})

    def register(self, tool_name: str, guard: ToolGuard) -> None:
        self._guards[tool_name] = guard

    def guard_for(self, tool_name: str) -> Optional[ToolGuard]:
        return self._guards.get(tool_name)

    def validate(self, tool_name: str, arguments: Mapping[str, Any]) -> List[GuardRailWarning]:
        """Check proposed arguments before execution.

        Args:
            tool_name: Name of the tool about to run.
            arguments: Arguments as parsed (string values are converted where numeric).

        Returns:
            Soft warnings for values outside their typical range and blocking warnings
            for values outside their hard range. Non-numeric values are left to schema
            validation.
        """
        guard = self._guards.get(tool_name)
        if guard is None:
            return []

        warnings: List[GuardRailWarning] = []
        for rule in guard.ranges:
            value = _as_float(arguments.get(rule.parameter))
            if value is None:
                continue

            if not rule.in_hard(value):
                violation = GuardRailViolation(tool_name, rule.parameter, value, rule.hard)
                logger.warning(str(violation))
                warnings.append(
                    GuardRailWarning(tool_name=tool_name, parameter=rule.parameter, message=str(violation), blocking=True)
                )
            elif not rule.in_typical(value):
                msg = (
                    f"'{tool_name}': {rule.parameter}={value:g} is outside the typical range "
                    f"[{rule.typical[0]:g}, {rule.typical[1]:g}]"
                )
                if rule.label:
                    msg += f" for {rule.label}"
                msg += "." + _decimal_shift_hint(value, rule)
                logger.info(msg)
                warnings.append(GuardRailWarning(tool_name=tool_name, parameter=rule.parameter, message=msg))

        return warnings

    def verify(
        self, tool_name: str, arguments: Mapping[str, Any], post_state: Optional["EntityState"]
    ) -> List[GuardRailWarning]:
        """Compare the host state after execution with what was requested.

        Args:
            tool_name: Name of the tool that ran.
            arguments: Arguments the tool ran with.
            post_state: The affected entity as re-read from the host, or None if it
                        could not be found.

        Returns:
            Warnings for clamped or unapplied values, implausible stored values and
            entities that vanished.
        """
        guard = self._guards.get(tool_name)
        if guard is None or guard.post_check is None:
            return []

        check = guard.post_check
        entity = self.target_entity(tool_name, arguments)
        if post_state is None:
            msg = f"'{tool_name}': entity '{entity}' could not be re-read after execution."
            logger.warning(msg)
            return [GuardRailWarning(tool_name=tool_name, message=msg)]

        warnings: List[GuardRailWarning] = []
        for key, (attribute, component) in check.fields.items():
            requested = _as_float(arguments.get(key))
            if requested is None:
                continue

            actual = _read_component(post_state, attribute, component)
            if actual is None:
                msg = f"'{tool_name}': '{entity}' has no readable {attribute} to verify {key}."
                warnings.append(GuardRailWarning(tool_name=tool_name, parameter=key, message=msg))
                continue

            if abs(actual - requested) > check.tolerance:
                msg = (
                    f"'{tool_name}': requested {key}={requested:g} on '{entity}' but the host reports "
                    f"{actual:g} (clamped or not applied)."
                )
                logger.warning(msg)
                warnings.append(GuardRailWarning(tool_name=tool_name, parameter=key, message=msg))

            rule = guard.range_for(key)
            if rule is not None and not rule.in_typical(actual):
                msg = (
                    f"'{tool_name}': '{entity}' now stores {key}={actual:g}, outside the typical range "
                    f"[{rule.typical[0]:g}, {rule.typical[1]:g}]." + _decimal_shift_hint(actual, rule)
                )
                warnings.append(GuardRailWarning(tool_name=tool_name, parameter=key, message=msg))

        return warnings

    def target_entity(self, tool_name: str, arguments: Mapping[str, Any]) -> Optional[str]:
        """Identifier of the entity a post check should re-read, if the tool has one."""
        guard = self._guards.get(tool_name)
        if guard is None or guard.post_check is None:
            return None
        check = guard.post_check
        value = arguments.get(check.entity_key)
        return str(value) if value not in (None, "") else check.default_entity

    def range_table(self) -> str:
        """Render all plausible ranges as a bullet list for prompts."""
        lines = []
        for tool_name in sorted(self._guards):
            for rule in self._guards[tool_name].ranges:
                lines.append(f"- {tool_name}.{rule.describe()}")
        return "\n".join(lines)


def _as_float(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(str(value).strip().rstrip("fF"))
    except ValueError:
        return None


def _read_component(state: Any, attribute: str, component: Optional[int]) -> Optional[float]:
    raw = getattr(state, attribute, None)
    if raw is None:
        return None
    if component is not None:
        try:
            raw = raw[component]
        except (IndexError, TypeError):
            return None
    value = _as_float(raw)
    if value is None or math.isnan(value):
        return None
    return value


def _decimal_shift_hint(value: float, rule: PlausibleRange) -> str:
    for factor in _SHIFT_FACTORS:
        candidate = round(value * factor, 6)
        if rule.in_typical(candidate):
            return f" Possible decimal-point slip: did you mean {candidate:g}?"
    return ""
