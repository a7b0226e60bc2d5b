"""
Geometry Collision - Part vs part overlap
=========================================
Used by the irregular packer. Parts are compared through their normalized
outline edges placed at a world position and rotation. Arcs stay arcs:
crossings and clearances are measured against the true curve.
"""

import math
from typing import Dict, List, NamedTuple, Optional, Tuple

from .entities import BBox, Point
from .intersections import arcs_cross, segment_intersects_arc, segments_cross
from .measure import (
    arc_arc_distance, arc_point, denormalize, rotate_point, segment_arc_distance,
    segment_distance,
)
from .predicates import is_point_inside
from .topology import get_geometry_from_entities
from .transform import get_rotated_rect_vertices, transform_point

# Maximum chord sagitta when an arc has to become straight segments (mm)
CHORD_TOLERANCE = 0.001


class OutlineEdge(NamedTuple):
    """Straight edge, or counter-clockwise arc when center is set"""
    p1: Point
    p2: Point
    center: Optional[Point] = None
    radius: float = 0.0
    start_angle: float = 0.0
    end_angle: float = 0.0

    @property
    def is_arc(self) -> bool:
        return self.center is not None


SegmentCache = Dict[str, List[OutlineEdge]]


def part_outline_edges(part, cache: Optional[SegmentCache] = None) -> List[OutlineEdge]:
    """Normalized outline of a part, cached by part id."""
    if cache is not None and part.id in cache:
        return cache[part.id]
    processed = get_geometry_from_entities(part.geometry)
    result: List[OutlineEdge] = []
    if processed is not None:
        for seg in processed.segments:
            if seg.is_arc and seg.center is not None and seg.radius:
                result.append(OutlineEdge(seg.p1, seg.p2, seg.center, seg.radius,
                                          seg.start_angle, seg.end_angle))
            else:
                result.append(OutlineEdge(seg.p1, seg.p2))
    if cache is not None:
        cache[part.id] = result
    return result


def flatten_arc(center: Tuple[float, float], radius: float, start_angle: float,
                end_angle: float, tolerance: float = CHORD_TOLERANCE) -> List[Point]:
    """
    Points along an arc whose chords stay within tolerance of the curve.

    Args:
        center, radius: Circle of the arc
        start_angle, end_angle: Counter-clockwise sweep in degrees
        tolerance: Maximum sagitta of one chord

    Returns:
        Points from the start to the end of the arc, both included
    """
    sweep = (end_angle - start_angle) % 360.0 or 360.0
    if tolerance >= radius:
        step = 90.0
    else:
        step = math.degrees(2.0 * math.acos(1.0 - tolerance / radius))
    steps = max(1, int(math.ceil(sweep / step)))
    return [arc_point(center, radius, start_angle + sweep * i / steps) for i in range(steps + 1)]


def part_outline_segments(part, tolerance: float = CHORD_TOLERANCE) -> List[Tuple[Point, Point]]:
    """Normalized outline as straight segments, arcs flattened to the chord tolerance."""
    result: List[Tuple[Point, Point]] = []
    for edge in part_outline_edges(part):
        if not edge.is_arc:
            result.append((edge.p1, edge.p2))
            continue
        points = flatten_arc(edge.center, edge.radius, edge.start_angle, edge.end_angle,
                             tolerance)
        result.extend(zip(points, points[1:]))
    return result


def placed_bbox(part, pos: Tuple[float, float], rotation: float) -> BBox:
    """World bbox of a part's outline rectangle at a placement"""
    return BBox.from_points(get_rotated_rect_vertices(
        pos[0], pos[1], part.geometry.width, part.geometry.height, rotation))


def _place(edge: OutlineEdge, pos, rotation) -> OutlineEdge:
    p1 = transform_point(edge.p1, pos[0], pos[1], rotation)
    p2 = transform_point(edge.p2, pos[0], pos[1], rotation)
    if not edge.is_arc:
        return OutlineEdge(p1, p2)
    return OutlineEdge(p1, p2, transform_point(edge.center, pos[0], pos[1], rotation),
                       edge.radius, edge.start_angle + rotation, edge.end_angle + rotation)


def _edges_cross(a: OutlineEdge, b: OutlineEdge) -> bool:
    if a.is_arc and b.is_arc:
        return arcs_cross(a.center, a.radius, a.start_angle, a.end_angle,
                          b.center, b.radius, b.start_angle, b.end_angle)
    if a.is_arc:
        a, b = b, a
    if b.is_arc:
        return segment_intersects_arc(a.p1, a.p2, b.center, b.radius,
                                      b.start_angle, b.end_angle)
    return segments_cross(a.p1, a.p2, b.p1, b.p2, 0.0, 1.0)


def _edge_distance(a: OutlineEdge, b: OutlineEdge) -> float:
    if a.is_arc and b.is_arc:
        return arc_arc_distance(a.center, a.radius, a.start_angle, a.end_angle,
                                b.center, b.radius, b.start_angle, b.end_angle)
    if a.is_arc:
        a, b = b, a
    if b.is_arc:
        return segment_arc_distance(a.p1, a.p2, b.center, b.radius,
                                    b.start_angle, b.end_angle)
    return segment_distance(a.p1, a.p2, b.p1, b.p2)


def _any_inside(points: List[Point], target, pos, rotation) -> bool:
    for pt in points:
        local = rotate_point((pt.x - pos[0], pt.y - pos[1]), -rotation)
        if is_point_inside(denormalize(local, target.geometry.bbox), target.geometry):
            return True
    return False


def do_parts_intersect(part_a, pos_a: Tuple[float, float], rot_a: float,
                       part_b, pos_b: Tuple[float, float], rot_b: float,
                       margin: float = 0.0,
                       cache: Optional[SegmentCache] = None) -> bool:
    """
    Check whether two placed parts overlap or come closer than margin.

    Args:
        part_a, part_b: Parts (normalized outlines)
        pos_a, pos_b: World position of each part's origin
        rot_a, rot_b: Rotation of each part about its origin
        margin: Required clearance between outlines
        cache: Optional per-part edge cache

    Returns:
        True on overlap, containment, or clearance below margin
    """
    box_a = placed_bbox(part_a, pos_a, rot_a).expanded(margin)
    if not box_a.overlaps(placed_bbox(part_b, pos_b, rot_b)):
        return False

    edges_a = [_place(e, pos_a, rot_a) for e in part_outline_edges(part_a, cache)]
    edges_b = [_place(e, pos_b, rot_b) for e in part_outline_edges(part_b, cache)]
    if not edges_a or not edges_b:
        return False

    for ea in edges_a:
        for eb in edges_b:
            if _edges_cross(ea, eb):
                return True

    if _any_inside([e.p1 for e in edges_a], part_b, pos_b, rot_b):
        return True
    if _any_inside([e.p1 for e in edges_b], part_a, pos_a, rot_a):
        return True

    if margin > 0:
        for ea in edges_a:
            for eb in edges_b:
                if _edge_distance(ea, eb) < margin:
                    return True

    return False
