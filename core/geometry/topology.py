"""
Geometry Topology - Normalized segments and closed loops
========================================================
Converts part entities into a normalized segment list (relative to the bbox
minimum) and finds closed loops in it. The loop with the largest polygon
area is the outer contour; all other loops are holes or features.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Set

from .entities import (
    Point, BBox, PartGeometry, LineEntity, ArcEntity, CircleEntity, PolylineEntity,
)
from .measure import normalize, polygon_area, polygon_center

logger = logging.getLogger(__name__)


class SegmentType(Enum):
    LINE = "line"
    ARC = "arc"


@dataclass
class Segment:
    """
    One normalized contour edge.

    Arc segments also carry radius, centre and their counter-clockwise
    sweep (degrees) so they can be handled analytically.
    """
    p1: Point
    p2: Point
    type: SegmentType = SegmentType.LINE
    radius: Optional[float] = None
    center: Optional[Point] = None
    start_angle: Optional[float] = None
    end_angle: Optional[float] = None
    source: object = None

    @property
    def is_arc(self) -> bool:
        return self.type == SegmentType.ARC


@dataclass
class ClosedLoop:
    vertices: List[Point]
    segment_indices: List[int]

    @property
    def area(self) -> float:
        return polygon_area(self.vertices)


@dataclass
class ShapeCenter:
    """Centre of a hole or internal feature"""
    point: Point
    rotation: float = 0.0


@dataclass
class ProcessedGeometry:
    vertices: List[Point] = field(default_factory=list)
    segments: List[Segment] = field(default_factory=list)
    bbox: BBox = field(default_factory=BBox)
    hole_centers: List[ShapeCenter] = field(default_factory=list)


def vertex_key(p: Point) -> str:
    """Adjacency key, coordinates rounded to 3 decimals"""
    return f"{p.x:.3f},{p.y:.3f}"


# ============================================================
# Loops
# ============================================================

def _walk_component(segments: List[Segment], component: List[int]) -> List[Point]:
    """Vertices of a component in boundary order (greedy edge walk)."""
    remaining = list(component)
    ordered: List[Point] = []
    seen: Set[str] = set()

    def add(p: Point):
        k = vertex_key(p)
        if k not in seen:
            seen.add(k)
            ordered.append(p)

    while remaining:
        first = segments[remaining.pop(0)]
        add(first.p1)
        current = first.p2
        add(current)
        while True:
            key = vertex_key(current)
            nxt = None
            for idx in remaining:
                s = segments[idx]
                if vertex_key(s.p1) == key:
                    nxt, current = idx, s.p2
                    break
                if vertex_key(s.p2) == key:
                    nxt, current = idx, s.p1
                    break
            if nxt is None:
                break
            remaining.remove(nxt)
            add(current)
    return ordered


def find_closed_loops(segments: List[Segment]) -> List[ClosedLoop]:
    """
    Find closed loops among segments.

    Segments are connected through shared (rounded) endpoints. A connected
    component is a closed loop when every vertex has even degree and it
    has more than two distinct vertices.

    Args:
        segments: Normalized segments

    Returns:
        List of ClosedLoop, in order of each component's first segment
    """
    adjacency: Dict[str, List[int]] = {}
    for i, s in enumerate(segments):
        for k in (vertex_key(s.p1), vertex_key(s.p2)):
            adjacency.setdefault(k, []).append(i)

    visited: Set[int] = set()
    loops: List[ClosedLoop] = []

    for start_idx in range(len(segments)):
        if start_idx in visited:
            continue

        component = [start_idx]
        visited.add(start_idx)
        stack = [start_idx]
        while stack:
            s = segments[stack.pop()]
            for k in (vertex_key(s.p1), vertex_key(s.p2)):
                for n_idx in adjacency.get(k, []):
                    if n_idx not in visited:
                        visited.add(n_idx)
                        component.append(n_idx)
                        stack.append(n_idx)

        degrees: Dict[str, int] = {}
        for idx in component:
            s = segments[idx]
            for k in (vertex_key(s.p1), vertex_key(s.p2)):
                degrees[k] = degrees.get(k, 0) + 1

        if all(d % 2 == 0 for d in degrees.values()) and len(degrees) > 2:
            component.sort()
            loops.append(ClosedLoop(
                vertices=_walk_component(segments, component),
                segment_indices=component
            ))

    return loops


def _outer_loop_index(loops: List[ClosedLoop]) -> int:
    max_area = -1.0
    outer = -1
    for i, loop in enumerate(loops):
        area = loop.area
        if area > max_area:
            max_area = area
            outer = i
    return outer


def get_outer_loop_indices(segments: List[Segment]) -> Set[int]:
    """Segment indices of the largest-area closed loop (empty when there is none)."""
    loops = find_closed_loops(segments)
    idx = _outer_loop_index(loops)
    return set(loops[idx].segment_indices) if idx >= 0 else set()


# ============================================================
# Entities -> Segments
# ============================================================

def _arc_segment(center: Point, radius: float, start: float, end: float,
                 bbox: BBox, source) -> Segment:
    arc = ArcEntity(center, radius, start, end)
    return Segment(
        p1=normalize(arc.start_point, bbox),
        p2=normalize(arc.end_point, bbox),
        type=SegmentType.ARC,
        radius=radius,
        center=normalize(center, bbox),
        start_angle=start,
        end_angle=end,
        source=source
    )


def get_geometry_from_entities(geometry: PartGeometry) -> Optional[ProcessedGeometry]:
    """
    Build the normalized, query-ready form of a part outline.

    Args:
        geometry: Part outline in raw coordinates

    Returns:
        ProcessedGeometry, or None when the geometry has no entities
    """
    if geometry is None or not geometry.entities:
        return None

    bbox = geometry.bbox
    vertices: List[Point] = []
    segments: List[Segment] = []

    for entity in geometry.entities:
        if isinstance(entity, LineEntity):
            p1 = normalize(entity.start, bbox)
            p2 = normalize(entity.end, bbox)
            vertices.extend([p1, p2])
            segments.append(Segment(p1, p2, source=entity))

        elif isinstance(entity, PolylineEntity):
            if len(entity.vertices) < 2:
                continue
            points = [normalize(v, bbox) for v in entity.vertices]
            vertices.extend(points)
            for i in range(len(points) - 1):
                segments.append(Segment(points[i], points[i + 1], source=entity))
            if entity.closed:
                segments.append(Segment(points[-1], points[0], source=entity))

        elif isinstance(entity, ArcEntity):
            if entity.radius <= 0:
                continue
            seg = _arc_segment(entity.center, entity.radius, entity.start_angle,
                               entity.end_angle, bbox, entity)
            vertices.extend([seg.p1, seg.p2])
            segments.append(seg)

        elif isinstance(entity, CircleEntity):
            if entity.radius <= 0:
                continue
            for q in range(4):
                seg = _arc_segment(entity.center, entity.radius, q * 90.0, (q + 1) * 90.0,
                                   bbox, entity)
                vertices.append(seg.p1)
                segments.append(seg)

        else:
            raise TypeError(f"Unsupported entity: {type(entity).__name__}")

    centers = [
        ShapeCenter(normalize(e.center, bbox), 0.0)
        for e in geometry.entities if isinstance(e, CircleEntity)
    ]

    loops = find_closed_loops(segments)
    outer = _outer_loop_index(loops)
    for i, loop in enumerate(loops):
        if i == outer:
            continue
        # circle centres are already listed
        if all(isinstance(segments[j].source, CircleEntity) for j in loop.segment_indices):
            continue
        lb = BBox.from_points(loop.vertices)
        rotation = 90.0 if lb.height > lb.width else 0.0
        centers.append(ShapeCenter(polygon_center(loop.vertices), rotation))

    logger.debug(f"Processed geometry: {len(segments)} segments, {len(loops)} loops")

    return ProcessedGeometry(vertices=vertices, segments=segments, bbox=bbox,
                             hole_centers=centers)
