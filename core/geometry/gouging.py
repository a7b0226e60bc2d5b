"""
Geometry Gouging - Tool placement validation
============================================
A die corner that ends up inside the material is acceptable only when it
sits on the boundary: within a tolerance band of the segment being punched
or of any other contour segment. The band widens near contour vertices,
where dies legitimately reach into fillets and corners.
"""

import math
from typing import List, Optional, Tuple

from .entities import PartGeometry
from .measure import denormalize, distance, distance_sq
from .predicates import is_point_inside
from .topology import Segment
from .transform import get_tool_corners

EDGE_TOLERANCE = 0.5
VERTEX_TOLERANCE = 2.5
VERTEX_RADIUS = 5.0


def distance_to_segment(p: Tuple[float, float], seg: Segment) -> float:
    """
    Distance from a point to a contour segment.

    Arcs measure radial distance to their circle. Degenerate segments
    (zero length, zero radius) are infinitely far.
    """
    if seg.is_arc:
        if not seg.radius or seg.radius <= 0 or seg.center is None:
            return math.inf
        return abs(distance(p, seg.center) - seg.radius)

    a, b = seg.p1, seg.p2
    l2 = distance_sq(a, b)
    if l2 == 0:
        return math.inf
    t = ((p[0] - a.x) * (b.x - a.x) + (p[1] - a.y) * (b.y - a.y)) / l2
    t = max(0.0, min(1.0, t))
    return distance(p, (a.x + t * (b.x - a.x), a.y + t * (b.y - a.y)))


def _corner_tolerance(corner, segments: List[Segment]) -> float:
    r2 = VERTEX_RADIUS * VERTEX_RADIUS
    for seg in segments:
        if distance_sq(corner, seg.p1) < r2 or distance_sq(corner, seg.p2) < r2:
            return VERTEX_TOLERANCE
    return EDGE_TOLERANCE


def is_tool_gouging(tool, x: float, y: float, rotation: float,
                    geometry: PartGeometry, current_segment: Segment,
                    all_segments: Optional[List[Segment]] = None) -> bool:
    """
    Check whether a strike cuts into material it should not.

    Args:
        tool: Die definition
        x, y: Strike centre in normalized part coordinates
        rotation: Strike rotation in degrees
        geometry: Part outline (raw coordinates, used for containment)
        current_segment: Segment being punched
        all_segments: Every contour segment (enables vertex widening and
            the any-other-segment rule)

    Returns:
        True if some die corner lies inside the material away from the boundary
    """
    if geometry is None or not geometry.entities:
        return False

    segments = all_segments or []
    for corner in get_tool_corners(tool, x, y, rotation):
        if not is_point_inside(denormalize(corner, geometry.bbox), geometry):
            continue

        tol = _corner_tolerance(corner, segments)
        if distance_to_segment(corner, current_segment) <= tol:
            continue

        touching = any(
            distance_to_segment(corner, seg) <= tol
            for seg in segments if seg is not current_segment
        )
        if not touching:
            return True

    return False
