"""
Geometry Predicates - Point containment
=======================================
Ray-casting parity test over the exact outline primitives. Arcs and circles
are intersected analytically, never approximated by chords.
"""

import math
from typing import Tuple

from .entities import (
    Point, PartGeometry, LineEntity, ArcEntity, CircleEntity, PolylineEntity,
    angle_in_sweep,
)


def ray_intersects_segment(p: Tuple[float, float],
                           a: Tuple[float, float],
                           b: Tuple[float, float]) -> bool:
    """True if the horizontal ray from p towards +X crosses segment a-b."""
    if (a[1] > p[1]) != (b[1] > p[1]):
        intersect_x = a[0] + (p[1] - a[1]) * (b[0] - a[0]) / (b[1] - a[1])
        return intersect_x > p[0]
    return False


def _circle_crossings(p: Tuple[float, float], center: Point, radius: float):
    """X coordinates where the ray's supporting line meets the circle, right of p."""
    if radius <= 0:
        return []
    dy = p[1] - center.y
    if abs(dy) > radius:
        return []
    dx = math.sqrt(radius * radius - dy * dy)
    return [ix for ix in (center.x - dx, center.x + dx) if ix > p[0]]


def _count_crossings(p: Tuple[float, float], entity) -> int:
    if isinstance(entity, PolylineEntity):
        return sum(1 for a, b in entity.edges() if ray_intersects_segment(p, a, b))
    if isinstance(entity, LineEntity):
        return 1 if ray_intersects_segment(p, entity.start, entity.end) else 0
    if isinstance(entity, CircleEntity):
        return len(_circle_crossings(p, entity.center, entity.radius))
    if isinstance(entity, ArcEntity):
        count = 0
        for ix in _circle_crossings(p, entity.center, entity.radius):
            angle = math.degrees(math.atan2(p[1] - entity.center.y, ix - entity.center.x))
            if angle_in_sweep(angle, entity.start_angle, entity.end_angle):
                count += 1
        return count
    raise TypeError(f"Unsupported entity: {type(entity).__name__}")


def is_point_inside(point: Tuple[float, float], geometry: PartGeometry) -> bool:
    """
    Check whether a point lies inside the part material.

    Points outside the geometry bounding box are rejected immediately.

    Args:
        point: Point in raw (denormalized) part coordinates
        geometry: Part outline

    Returns:
        True for an odd number of ray crossings
    """
    if geometry is None or not geometry.entities:
        return False
    if not geometry.bbox.contains(Point(point[0], point[1])):
        return False

    crossings = 0
    for entity in geometry.entities:
        crossings += _count_crossings(point, entity)
    return crossings % 2 == 1


def is_point_in_rectangle(point: Tuple[float, float], rect_x: float, rect_y: float,
                          width: float, height: float, rotation: float) -> bool:
    """Point inside a rectangle anchored at (rect_x, rect_y) and rotated about that anchor."""
    dx = point[0] - rect_x
    dy = point[1] - rect_y
    rad = math.radians(-rotation)
    local_x = dx * math.cos(rad) - dy * math.sin(rad)
    local_y = dx * math.sin(rad) + dy * math.cos(rad)
    return 0 <= local_x <= width and 0 <= local_y <= height
