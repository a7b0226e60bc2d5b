"""
Geometry Transform - Rotated extents and tool outlines
======================================================
"""

import math
from typing import List, NamedTuple, Tuple

from ..models.tools import ToolShape, index_tools
from .entities import Point
from .measure import rotate_point


class RotatedExtents(NamedTuple):
    """Extents of a rotated part; (ox, oy) moves its origin into the positive quadrant"""
    width: float
    height: float
    ox: float
    oy: float


class PhysicalExtents(NamedTuple):
    width: float
    height: float
    offset_x: float
    offset_y: float


def transform_point(p: Tuple[float, float], x: float, y: float, rotation: float) -> Point:
    """Rotate about the origin, then translate by (x, y)."""
    r = rotate_point(p, rotation)
    return Point(x + r.x, y + r.y)


def get_rotated_rect_vertices(x: float, y: float, w: float, h: float,
                              rotation: float) -> List[Point]:
    """Corners of a w x h rectangle anchored at (x, y), rotated about the anchor."""
    rad = math.radians(rotation)
    c = math.cos(rad)
    s = math.sin(rad)
    return [
        Point(x, y),
        Point(x + w * c, y + w * s),
        Point(x + w * c - h * s, y + w * s + h * c),
        Point(x - h * s, y + h * c),
    ]


def _rotated_footprint(w: float, h: float, angle: float) -> Tuple[float, float]:
    rad = math.radians(angle)
    c = abs(math.cos(rad))
    s = abs(math.sin(rad))
    return w * c + h * s, w * s + h * c


def _tool_local_outline(tool) -> List[Tuple[float, float]]:
    """Characteristic outline points of a die, centred on the origin."""
    w, h = tool.footprint
    shape = tool.shape

    if shape == ToolShape.CIRCLE:
        r = w / 2.0
        return [(r * math.cos(math.radians(a)), r * math.sin(math.radians(a)))
                for a in range(0, 360, 45)]

    if shape in (ToolShape.SQUARE, ToolShape.RECTANGLE):
        return [(-w / 2, -h / 2), (w / 2, -h / 2), (w / 2, h / 2), (-w / 2, h / 2)]

    if shape == ToolShape.OBLONG:
        if w >= h:
            r = h / 2.0
            flank = w / 2.0 - r
            return [(-flank, -r), (flank, -r), (w / 2.0, 0.0),
                    (flank, r), (-flank, r), (-w / 2.0, 0.0)]
        r = w / 2.0
        flank = h / 2.0 - r
        return [(r, -flank), (r, flank), (0.0, h / 2.0),
                (-r, flank), (-r, -flank), (0.0, -h / 2.0)]

    if shape == ToolShape.SPECIAL:
        if tool.custom_outline:
            return [(float(p[0]), float(p[1])) for p in tool.custom_outline]
        return [(-w / 2, -h / 2), (w / 2, -h / 2), (w / 2, h / 2), (-w / 2, h / 2)]

    raise TypeError(f"Unsupported tool shape: {shape}")


def get_tool_corners(tool, x: float, y: float, rotation: float) -> List[Point]:
    """
    Outline test points of a die struck at (x, y).

    Args:
        tool: Die definition
        x, y: Strike centre
        rotation: Strike rotation in degrees

    Returns:
        Points rotated by the strike rotation and translated to the strike
    """
    return [transform_point(p, x, y, rotation) for p in _tool_local_outline(tool)]


def get_rotated_extents(part, rotation: float, tools) -> RotatedExtents:
    """
    Extents of a part rotated about its origin, including die footprints.

    Args:
        part: Part (geometry width/height, punches)
        rotation: Placement rotation in degrees
        tools: Tool table; strikes with unknown tools are ignored

    Returns:
        RotatedExtents(width, height, ox, oy)
    """
    lookup = index_tools(tools)
    corners = get_rotated_rect_vertices(0.0, 0.0, part.geometry.width,
                                        part.geometry.height, rotation)
    min_x = min(p.x for p in corners)
    max_x = max(p.x for p in corners)
    min_y = min(p.y for p in corners)
    max_y = max(p.y for p in corners)

    for punch in part.punches:
        tool = lookup.get(punch.tool_id)
        if tool is None:
            continue
        w, h = tool.footprint
        eff_w, eff_h = _rotated_footprint(w, h, punch.rotation + rotation)
        r = rotate_point((punch.x, punch.y), rotation)
        min_x = min(min_x, r.x - eff_w / 2)
        max_x = max(max_x, r.x + eff_w / 2)
        min_y = min(min_y, r.y - eff_h / 2)
        max_y = max(max_y, r.y + eff_h / 2)

    return RotatedExtents(max_x - min_x, max_y - min_y, -min_x, -min_y)


def calculate_part_physical_extents(part, tools) -> PhysicalExtents:
    """Unrotated part extents grown by die footprints that overhang the outline."""
    lookup = index_tools(tools)
    min_x, min_y = 0.0, 0.0
    max_x, max_y = part.geometry.width, part.geometry.height

    for punch in part.punches:
        tool = lookup.get(punch.tool_id)
        if tool is None:
            continue
        w, h = tool.footprint
        eff_w, eff_h = _rotated_footprint(w, h, punch.rotation)
        min_x = min(min_x, punch.x - eff_w / 2)
        max_x = max(max_x, punch.x + eff_w / 2)
        min_y = min(min_y, punch.y - eff_h / 2)
        max_y = max(max_y, punch.y + eff_h / 2)

    return PhysicalExtents(max_x - min_x, max_y - min_y, -min_x, -min_y)
