"""Plausible-range tables for spatial tool arguments.

The numbers below are tuned to a metre-based, Y-up scene convention. A host
with different spatial conventions needs its own table.
"""

from typing import Dict, List, Optional, Sequence, Tuple

from pydantic import BaseModel, Field, model_validator


class PlausibleRange(BaseModel):
    """
    Plausibility rule for one numeric argument.

    Attributes:
        parameter: Argument key the rule applies to.
        typical: Inclusive range of values that look intentional. Values outside
                 produce a soft warning.
        hard: Inclusive range of values the host may accept at all. Values outside
              block execution.
        label: Short description of the quantity, used in messages.
    """

    parameter: str
    typical: Tuple[float, float]
    hard: Tuple[float, float]
    label: str = ""

    @model_validator(mode="after")
    def _check_bounds(self) -> "PlausibleRange":
        t_low, t_high = self.typical
        h_low, h_high = self.hard
        if not (h_low <= t_low <= t_high <= h_high):
            raise ValueError(
                f"Typical range {self.typical} of '{self.parameter}' must lie within hard range {self.hard}."
            )
        return self

    def in_typical(self, value: float) -> bool:
        return self.typical[0] <= value <= self.typical[1]

    def in_hard(self, value: float) -> bool:
        return self.hard[0] <= value <= self.hard[1]

    def describe(self) -> str:
        text = (
            f"{self.parameter}: typical [{self.typical[0]:g}, {self.typical[1]:g}], "
            f"hard [{self.hard[0]:g}, {self.hard[1]:g}]"
        )
        return f"{text} ({self.label})" if self.label else text


class PostCheck(BaseModel):
    """
    Describes how to re-read the result of a tool from the host.

    Attributes:
        entity_key: Argument naming the affected entity.
        fields: Maps an argument key to ``(attribute, component_index)`` on the
                re-read entity state. ``component_index`` is None for scalar attributes.
        default_entity: Entity to re-read when ``entity_key`` was not supplied.
        tolerance: Allowed absolute difference between requested and stored values.
    """

    entity_key: str
    fields: Dict[str, Tuple[str, Optional[int]]] = Field(default_factory=dict)
    default_entity: Optional[str] = None
    tolerance: float = 1e-3


class ToolGuard(BaseModel):
    """Range rules and post-execution check attached to one tool."""

    ranges: List[PlausibleRange] = Field(default_factory=list)
    post_check: Optional[PostCheck] = None

    def range_for(self, parameter: str) -> Optional[PlausibleRange]:
        for rule in self.ranges:
            if rule.parameter == parameter:
                return rule
        return None


POSITION_TYPICAL = (-10.0, 10.0)
POSITION_HARD = (-100.0, 100.0)
SCALE_TYPICAL = (0.1, 10.0)
SCALE_HARD = (0.01, 100.0)
ROTATION_TYPICAL = (-360.0, 360.0)
ROTATION_HARD = (-3600.0, 3600.0)

CAMERA_HEIGHT = PlausibleRange(
    parameter="height", typical=(0.5, 3.0), hard=POSITION_HARD, label="first-person camera height"
)
FIELD_OF_VIEW = PlausibleRange(parameter="field_of_view", typical=(30.0, 110.0), hard=(1.0, 179.0), label="degrees")


def position_ranges(keys: Sequence[str] = ("x", "y", "z")) -> List[PlausibleRange]:
    return [PlausibleRange(parameter=k, typical=POSITION_TYPICAL, hard=POSITION_HARD, label="position") for k in keys]


def scale_ranges(keys: Sequence[str] = ("x", "y", "z")) -> List[PlausibleRange]:
    return [PlausibleRange(parameter=k, typical=SCALE_TYPICAL, hard=SCALE_HARD, label="scale factor") for k in keys]


def rotation_ranges(keys: Sequence[str] = ("x", "y", "z")) -> List[PlausibleRange]:
    return [
        PlausibleRange(parameter=k, typical=ROTATION_TYPICAL, hard=ROTATION_HARD, label="euler degrees") for k in keys
    ]
