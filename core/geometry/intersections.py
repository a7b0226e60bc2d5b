"""
Geometry Intersections - Segment vs outline tests
=================================================
Exact line/line, line/circle and line/arc tests. Line/line uses an open
parameter interval so segments that merely touch at an endpoint are not
reported.
"""

import math
from typing import Iterable, Tuple

from .entities import (
    Point, LineEntity, ArcEntity, CircleEntity, PolylineEntity, angle_in_sweep,
)

# Open interval for line/line parameters
T_MIN = 0.01
T_MAX = 0.99

# Bounding box prefilter margin for arcs and circles
BBOX_PAD = 0.1


def segment_intersects_circle(p1: Tuple[float, float], p2: Tuple[float, float],
                              center: Tuple[float, float], radius: float) -> bool:
    """
    True if the segment enters the circle's interior.

    An endpoint strictly inside counts; otherwise the closest point of the
    segment must lie strictly inside (with a small tolerance).
    """
    if radius <= 0:
        return False
    r2 = radius * radius
    d1 = (p1[0] - center[0]) ** 2 + (p1[1] - center[1]) ** 2
    d2 = (p2[0] - center[0]) ** 2 + (p2[1] - center[1]) ** 2
    if d1 < r2 or d2 < r2:
        return True

    lx = p2[0] - p1[0]
    ly = p2[1] - p1[1]
    len_sq = lx * lx + ly * ly
    if len_sq == 0:
        return False
    t = ((center[0] - p1[0]) * lx + (center[1] - p1[1]) * ly) / len_sq
    if t < 0 or t > 1:
        return False
    closest_x = p1[0] + t * lx
    closest_y = p1[1] + t * ly
    dist_sq = (closest_x - center[0]) ** 2 + (closest_y - center[1]) ** 2
    return dist_sq < r2 - 0.0001


def segment_intersects_arc(p1: Tuple[float, float], p2: Tuple[float, float],
                           center: Tuple[float, float], radius: float,
                           start_angle: float, end_angle: float) -> bool:
    """True if the segment crosses the circle on the arc's sweep."""
    if not segment_intersects_circle(p1, p2, center, radius):
        return False

    dx = p1[0] - center[0]
    dy = p1[1] - center[1]
    vx = p2[0] - p1[0]
    vy = p2[1] - p1[1]
    a = vx * vx + vy * vy
    if a == 0:
        return False
    b = 2 * (dx * vx + dy * vy)
    c = dx * dx + dy * dy - radius * radius
    det = b * b - 4 * a * c
    if det < 0:
        return False

    sqrt_det = math.sqrt(det)
    for t in ((-b - sqrt_det) / (2 * a), (-b + sqrt_det) / (2 * a)):
        if 0 <= t <= 1:
            ix = p1[0] + t * vx
            iy = p1[1] + t * vy
            angle = math.degrees(math.atan2(iy - center[1], ix - center[0]))
            if angle_in_sweep(angle, start_angle, end_angle):
                return True
    return False


def arcs_cross(c1: Tuple[float, float], r1: float, start1: float, end1: float,
               c2: Tuple[float, float], r2: float, start2: float, end2: float) -> bool:
    """True if two arcs cross. Tangent circles never cross."""
    dx = c2[0] - c1[0]
    dy = c2[1] - c1[1]
    d = math.hypot(dx, dy)
    if d == 0 or d >= r1 + r2 or d <= abs(r1 - r2):
        return False
    a = (d * d + r1 * r1 - r2 * r2) / (2 * d)
    h_sq = r1 * r1 - a * a
    if h_sq <= 0:
        return False
    h = math.sqrt(h_sq)
    bx = c1[0] + a * dx / d
    by = c1[1] + a * dy / d
    for sign in (1.0, -1.0):
        ix = bx - sign * h * dy / d
        iy = by + sign * h * dx / d
        on_first = angle_in_sweep(math.degrees(math.atan2(iy - c1[1], ix - c1[0])), start1, end1)
        on_second = angle_in_sweep(math.degrees(math.atan2(iy - c2[1], ix - c2[0])), start2, end2)
        if on_first and on_second:
            return True
    return False


def segments_cross(p1: Tuple[float, float], p2: Tuple[float, float],
                   a: Tuple[float, float], b: Tuple[float, float],
                   t_min: float = T_MIN, t_max: float = T_MAX) -> bool:
    """Line/line crossing strictly inside both parameter ranges. Parallel lines never cross."""
    denominator = (p2[0] - p1[0]) * (b[1] - a[1]) - (p2[1] - p1[1]) * (b[0] - a[0])
    if denominator == 0:
        return False
    r = ((p1[1] - a[1]) * (b[0] - a[0]) - (p1[0] - a[0]) * (b[1] - a[1])) / denominator
    s = ((p1[1] - a[1]) * (p2[0] - p1[0]) - (p1[0] - a[0]) * (p2[1] - p1[1])) / denominator
    return t_min < r < t_max and t_min < s < t_max


def _outside_pad(p1, p2, center: Point, radius: float) -> bool:
    min_x = min(p1[0], p2[0]) - BBOX_PAD
    max_x = max(p1[0], p2[0]) + BBOX_PAD
    min_y = min(p1[1], p2[1]) - BBOX_PAD
    max_y = max(p1[1], p2[1]) + BBOX_PAD
    return (center.x + radius < min_x or center.x - radius > max_x or
            center.y + radius < min_y or center.y - radius > max_y)


def segment_intersects_geometry(p1: Tuple[float, float], p2: Tuple[float, float],
                                entities: Iterable) -> bool:
    """
    Check whether segment p1-p2 cuts any outline entity.

    Args:
        p1, p2: Segment endpoints in raw part coordinates
        entities: Outline primitives

    Returns:
        True on the first intersecting entity
    """
    for entity in entities:
        if isinstance(entity, LineEntity):
            if segments_cross(p1, p2, entity.start, entity.end):
                return True
        elif isinstance(entity, PolylineEntity):
            for a, b in entity.edges():
                if segments_cross(p1, p2, a, b):
                    return True
        elif isinstance(entity, ArcEntity):
            if _outside_pad(p1, p2, entity.center, entity.radius):
                continue
            if segment_intersects_arc(p1, p2, entity.center, entity.radius,
                                      entity.start_angle, entity.end_angle):
                return True
        elif isinstance(entity, CircleEntity):
            if _outside_pad(p1, p2, entity.center, entity.radius):
                continue
            if segment_intersects_circle(p1, p2, entity.center, entity.radius):
                return True
        else:
            raise TypeError(f"Unsupported entity: {type(entity).__name__}")
    return False
