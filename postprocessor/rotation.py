"""
Rotation axis suppression
=========================
The C axis only moves when the tool's symmetry makes the new angle
physically different from the last one.
"""

from typing import Optional

from core.models import Tool, ToolShape

# Angles closer than this are the same position (degrees)
ANGLE_TOLERANCE = 0.1

# Period used when the tool is not in the table
UNKNOWN_TOOL_PERIOD = 360.0


def is_equivalent_angle(angle: float, reference: float, period: float,
                        tolerance: float = ANGLE_TOLERANCE) -> bool:
    """True when angle and reference differ by a multiple of period"""
    if period <= 0:
        return True
    diff = (angle - reference) % period
    return diff <= tolerance or diff >= period - tolerance


def needs_c_word(tool: Optional[Tool], angle: float, last_c: Optional[float],
                 tool_changed: bool) -> bool:
    """
    Whether a strike line carries the C word.

    Circle tools never do. Other tools do on the first strike after a tool
    change, and whenever the angle is not equivalent to the last emitted C.
    """
    if tool is not None and tool.shape == ToolShape.CIRCLE:
        return False
    if tool_changed or last_c is None:
        return True
    period = tool.symmetry_period if tool is not None else UNKNOWN_TOOL_PERIOD
    return not is_equivalent_angle(angle, last_c, period)
