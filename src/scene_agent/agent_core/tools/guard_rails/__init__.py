"""Plausibility checks on tool arguments and on the host state they produce."""

from .ranges import (
    PlausibleRange,
    PostCheck,
    ToolGuard,
    CAMERA_HEIGHT,
    FIELD_OF_VIEW,
    position_ranges,
    rotation_ranges,
    scale_ranges,
)
from .validator import GuardRailValidator, GuardRailWarning

__all__ = [
    "PlausibleRange",
    "PostCheck",
    "ToolGuard",
    "CAMERA_HEIGHT",
    "FIELD_OF_VIEW",
    "position_ranges",
    "rotation_ranges",
    "scale_ranges",
    "GuardRailValidator",
    "GuardRailWarning",
]
