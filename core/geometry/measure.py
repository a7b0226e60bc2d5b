"""
Geometry Measure - Distances, areas and normalization
=====================================================
"""

import math
from typing import List, Sequence, Tuple

from .entities import Point, BBox, angle_in_sweep


def distance_sq(p1: Tuple[float, float], p2: Tuple[float, float]) -> float:
    """Squared Euclidean distance"""
    dx = p2[0] - p1[0]
    dy = p2[1] - p1[1]
    return dx * dx + dy * dy


def distance(p1: Tuple[float, float], p2: Tuple[float, float]) -> float:
    """Euclidean distance"""
    return math.sqrt(distance_sq(p1, p2))


def normalize(p: Tuple[float, float], bbox: BBox) -> Point:
    """Express a raw point relative to the bbox minimum."""
    return Point(p[0] - bbox.min_x, p[1] - bbox.min_y)


def denormalize(p: Tuple[float, float], bbox: BBox) -> Point:
    """Inverse of normalize()"""
    return Point(p[0] + bbox.min_x, p[1] + bbox.min_y)


def polygon_area(points: Sequence[Tuple[float, float]]) -> float:
    """
    Unsigned polygon area (shoelace formula).

    Args:
        points: Vertices in order, closing vertex optional

    Returns:
        Area, 0.0 for fewer than three vertices
    """
    n = len(points)
    if n < 3:
        return 0.0
    area = 0.0
    for i in range(n):
        x1, y1 = points[i]
        x2, y2 = points[(i + 1) % n]
        area += x1 * y2 - x2 * y1
    return abs(area) / 2.0


def polygon_center(points: Sequence[Tuple[float, float]]) -> Point:
    """Vertex average (not the area centroid)"""
    if not points:
        return Point(0.0, 0.0)
    n = len(points)
    return Point(sum(p[0] for p in points) / n, sum(p[1] for p in points) / n)


def point_segment_distance(p: Tuple[float, float],
                           a: Tuple[float, float],
                           b: Tuple[float, float]) -> float:
    """Distance from a point to a segment (clamped projection)."""
    dx = b[0] - a[0]
    dy = b[1] - a[1]
    len_sq = dx * dx + dy * dy
    if len_sq == 0:
        return distance(p, a)
    t = ((p[0] - a[0]) * dx + (p[1] - a[1]) * dy) / len_sq
    t = max(0.0, min(1.0, t))
    return distance(p, (a[0] + t * dx, a[1] + t * dy))


def segment_distance(a1: Tuple[float, float], a2: Tuple[float, float],
                     b1: Tuple[float, float], b2: Tuple[float, float]) -> float:
    """Minimum distance between two non-crossing segments."""
    return min(
        point_segment_distance(a1, b1, b2),
        point_segment_distance(a2, b1, b2),
        point_segment_distance(b1, a1, a2),
        point_segment_distance(b2, a1, a2),
    )


def rotate_point(p: Tuple[float, float], angle_deg: float,
                 origin: Tuple[float, float] = (0.0, 0.0)) -> Point:
    """Rotate a point counter-clockwise about an origin."""
    rad = math.radians(angle_deg)
    c = math.cos(rad)
    s = math.sin(rad)
    x = p[0] - origin[0]
    y = p[1] - origin[1]
    return Point(origin[0] + x * c - y * s, origin[1] + x * s + y * c)


def points_bbox(points: List[Tuple[float, float]]) -> BBox:
    return BBox.from_points(points)


# ============================================================
# Arc distances
# ============================================================

def arc_point(center: Tuple[float, float], radius: float, angle_deg: float) -> Point:
    """Point on a circle at an angle"""
    rad = math.radians(angle_deg)
    return Point(center[0] + radius * math.cos(rad), center[1] + radius * math.sin(rad))


def point_arc_distance(p: Tuple[float, float], center: Tuple[float, float], radius: float,
                       start_angle: float, end_angle: float) -> float:
    """
    Exact distance from a point to a counter-clockwise arc.

    Radial when the point's direction lies on the sweep, otherwise the
    nearer arc endpoint.
    """
    d = distance(p, center)
    if d == 0:
        return radius
    angle = math.degrees(math.atan2(p[1] - center[1], p[0] - center[0]))
    if angle_in_sweep(angle, start_angle, end_angle):
        return abs(d - radius)
    return min(distance(p, arc_point(center, radius, start_angle)),
               distance(p, arc_point(center, radius, end_angle)))


def segment_arc_distance(a: Tuple[float, float], b: Tuple[float, float],
                         center: Tuple[float, float], radius: float,
                         start_angle: float, end_angle: float) -> float:
    """
    Minimum distance between a segment and an arc that do not cross.

    Besides the four endpoint pairs, an interior minimum can only sit where
    the arc's radius is normal to the segment.
    """
    best = min(
        point_arc_distance(a, center, radius, start_angle, end_angle),
        point_arc_distance(b, center, radius, start_angle, end_angle),
        point_segment_distance(arc_point(center, radius, start_angle), a, b),
        point_segment_distance(arc_point(center, radius, end_angle), a, b),
    )
    vx = b[0] - a[0]
    vy = b[1] - a[1]
    length = math.hypot(vx, vy)
    if length == 0:
        return best
    nx = -vy / length
    ny = vx / length
    for sign in (1.0, -1.0):
        q = (center[0] + sign * radius * nx, center[1] + sign * radius * ny)
        if not angle_in_sweep(math.degrees(math.atan2(sign * ny, sign * nx)),
                              start_angle, end_angle):
            continue
        t = ((q[0] - a[0]) * vx + (q[1] - a[1]) * vy) / (length * length)
        if 0.0 <= t <= 1.0:
            best = min(best, abs((q[0] - a[0]) * nx + (q[1] - a[1]) * ny))
    return best


def arc_arc_distance(c1: Tuple[float, float], r1: float, start1: float, end1: float,
                     c2: Tuple[float, float], r2: float, start2: float, end2: float) -> float:
    """Minimum distance between two arcs that do not cross."""
    best = min(
        point_arc_distance(arc_point(c1, r1, start1), c2, r2, start2, end2),
        point_arc_distance(arc_point(c1, r1, end1), c2, r2, start2, end2),
        point_arc_distance(arc_point(c2, r2, start2), c1, r1, start1, end1),
        point_arc_distance(arc_point(c2, r2, end2), c1, r1, start1, end1),
    )
    d = distance(c1, c2)
    if d == 0:
        return best
    # interior minima lie on the line through both centres
    angle = math.degrees(math.atan2(c2[1] - c1[1], c2[0] - c1[0]))
    for a1 in (angle, angle + 180.0):
        if not angle_in_sweep(a1, start1, end1):
            continue
        for a2 in (angle, angle + 180.0):
            if angle_in_sweep(a2, start2, end2):
                best = min(best, distance(arc_point(c1, r1, a1), arc_point(c2, r2, a2)))
    return best
