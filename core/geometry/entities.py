"""
Geometry Entities - Part outline primitives
===========================================
Closed set of outline primitives (LINE, ARC, CIRCLE, LWPOLYLINE) plus the
part geometry container. Every kernel query dispatches over these four
classes explicitly; anything else is a programming error.
"""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import List, NamedTuple, Union, Dict, Any, Iterable


class EntityType(Enum):
    """Outline primitive types (DXF naming)"""
    LINE = "LINE"
    ARC = "ARC"
    CIRCLE = "CIRCLE"
    LWPOLYLINE = "LWPOLYLINE"


class Point(NamedTuple):
    """2-D coordinate"""
    x: float
    y: float

    def to_dict(self) -> Dict[str, float]:
        return {'x': self.x, 'y': self.y}

    @classmethod
    def from_dict(cls, data) -> 'Point':
        if isinstance(data, (list, tuple)):
            return cls(float(data[0]), float(data[1]))
        return cls(float(data.get('x', 0.0)), float(data.get('y', 0.0)))


def angle_in_sweep(angle_deg: float, start_deg: float, end_deg: float) -> bool:
    """
    Check whether an angle lies on a counter-clockwise sweep start -> end.

    Args:
        angle_deg: Tested angle (any range)
        start_deg, end_deg: Sweep limits in degrees

    Returns:
        True if the angle lies on the sweep (limits inclusive)
    """
    s = start_deg % 360.0
    e = end_deg % 360.0
    if e <= s and end_deg != start_deg:
        e += 360.0
    a = angle_deg % 360.0
    if a < s:
        a += 360.0
    return s <= a <= e


@dataclass
class BBox:
    """Axis-aligned bounding box"""
    min_x: float = 0.0
    min_y: float = 0.0
    max_x: float = 0.0
    max_y: float = 0.0

    @property
    def width(self) -> float:
        return self.max_x - self.min_x

    @property
    def height(self) -> float:
        return self.max_y - self.min_y

    def contains(self, p: Point) -> bool:
        return self.min_x <= p.x <= self.max_x and self.min_y <= p.y <= self.max_y

    def expanded(self, margin: float) -> 'BBox':
        return BBox(self.min_x - margin, self.min_y - margin,
                    self.max_x + margin, self.max_y + margin)

    def overlaps(self, other: 'BBox') -> bool:
        return (self.min_x <= other.max_x and self.max_x >= other.min_x and
                self.min_y <= other.max_y and self.max_y >= other.min_y)

    @classmethod
    def from_points(cls, points: Iterable[Point]) -> 'BBox':
        pts = list(points)
        if not pts:
            return cls()
        xs = [p[0] for p in pts]
        ys = [p[1] for p in pts]
        return cls(min(xs), min(ys), max(xs), max(ys))

    def union(self, other: 'BBox') -> 'BBox':
        return BBox(min(self.min_x, other.min_x), min(self.min_y, other.min_y),
                    max(self.max_x, other.max_x), max(self.max_y, other.max_y))

    def to_dict(self) -> Dict[str, float]:
        return {'min_x': self.min_x, 'min_y': self.min_y,
                'max_x': self.max_x, 'max_y': self.max_y}

    @classmethod
    def from_dict(cls, data: Dict) -> 'BBox':
        return cls(
            min_x=data.get('min_x', 0.0),
            min_y=data.get('min_y', 0.0),
            max_x=data.get('max_x', 0.0),
            max_y=data.get('max_y', 0.0)
        )


# ============================================================
# Primitives
# ============================================================

@dataclass
class LineEntity:
    start: Point
    end: Point

    @property
    def entity_type(self) -> EntityType:
        return EntityType.LINE

    def bounds(self) -> BBox:
        return BBox.from_points([self.start, self.end])

    def to_dict(self) -> Dict[str, Any]:
        return {'type': 'LINE', 'start': self.start.to_dict(), 'end': self.end.to_dict()}


@dataclass
class ArcEntity:
    """Counter-clockwise arc, angles in degrees"""
    center: Point
    radius: float
    start_angle: float
    end_angle: float

    @property
    def entity_type(self) -> EntityType:
        return EntityType.ARC

    def point_at(self, angle_deg: float) -> Point:
        rad = math.radians(angle_deg)
        return Point(self.center.x + self.radius * math.cos(rad),
                     self.center.y + self.radius * math.sin(rad))

    @property
    def start_point(self) -> Point:
        return self.point_at(self.start_angle)

    @property
    def end_point(self) -> Point:
        return self.point_at(self.end_angle)

    def contains_angle(self, angle_deg: float) -> bool:
        return angle_in_sweep(angle_deg, self.start_angle, self.end_angle)

    def bounds(self) -> BBox:
        points = [self.start_point, self.end_point]
        for axis_angle in (0.0, 90.0, 180.0, 270.0):
            if self.contains_angle(axis_angle):
                points.append(self.point_at(axis_angle))
        return BBox.from_points(points)

    def to_dict(self) -> Dict[str, Any]:
        return {'type': 'ARC', 'center': self.center.to_dict(), 'radius': self.radius,
                'start_angle': self.start_angle, 'end_angle': self.end_angle}


@dataclass
class CircleEntity:
    center: Point
    radius: float

    @property
    def entity_type(self) -> EntityType:
        return EntityType.CIRCLE

    def bounds(self) -> BBox:
        r = self.radius
        return BBox(self.center.x - r, self.center.y - r, self.center.x + r, self.center.y + r)

    def to_dict(self) -> Dict[str, Any]:
        return {'type': 'CIRCLE', 'center': self.center.to_dict(), 'radius': self.radius}


@dataclass
class PolylineEntity:
    vertices: List[Point] = field(default_factory=list)
    closed: bool = False

    @property
    def entity_type(self) -> EntityType:
        return EntityType.LWPOLYLINE

    def edges(self) -> List[tuple]:
        """Edges as (p1, p2) pairs, including the closing edge when closed."""
        v = self.vertices
        result = [(v[i], v[i + 1]) for i in range(len(v) - 1)]
        if self.closed and len(v) > 1:
            result.append((v[-1], v[0]))
        return result

    def bounds(self) -> BBox:
        return BBox.from_points(self.vertices)

    def to_dict(self) -> Dict[str, Any]:
        return {'type': 'LWPOLYLINE', 'vertices': [v.to_dict() for v in self.vertices],
                'closed': self.closed}


CurveEntity = Union[LineEntity, ArcEntity, CircleEntity, PolylineEntity]


def entity_from_dict(data: Dict[str, Any]) -> CurveEntity:
    """Build an outline primitive from its dict form."""
    kind = str(data.get('type', '')).upper()
    if kind == 'LINE':
        return LineEntity(Point.from_dict(data['start']), Point.from_dict(data['end']))
    if kind == 'ARC':
        return ArcEntity(Point.from_dict(data['center']), float(data['radius']),
                         float(data['start_angle']), float(data['end_angle']))
    if kind == 'CIRCLE':
        return CircleEntity(Point.from_dict(data['center']), float(data['radius']))
    if kind in ('LWPOLYLINE', 'POLYLINE'):
        return PolylineEntity([Point.from_dict(v) for v in data.get('vertices', [])],
                              bool(data.get('closed', False)))
    raise ValueError(f"Unknown entity type: {data.get('type')!r}")


# ============================================================
# Part Geometry
# ============================================================

@dataclass
class PartGeometry:
    """
    Flat-pattern outline of a part.

    Entities stay in their source coordinates; `bbox` locates them, and
    `width`/`height` are the bbox extents.
    """
    width: float
    height: float
    entities: List[CurveEntity] = field(default_factory=list)
    bbox: BBox = field(default_factory=BBox)
    path: str = ""

    @classmethod
    def from_entities(cls, entities: List[CurveEntity], path: str = "") -> 'PartGeometry':
        """Build geometry and compute its bounding box from the entities."""
        bbox = None
        for entity in entities:
            b = entity.bounds()
            bbox = b if bbox is None else bbox.union(b)
        bbox = bbox or BBox()
        return cls(width=bbox.width, height=bbox.height, entities=list(entities),
                   bbox=bbox, path=path)

    @classmethod
    def rectangle(cls, width: float, height: float) -> 'PartGeometry':
        """Closed rectangular outline with its lower-left corner at the origin."""
        outline = PolylineEntity(
            [Point(0.0, 0.0), Point(width, 0.0), Point(width, height), Point(0.0, height)],
            closed=True
        )
        return cls.from_entities([outline])

    def to_dict(self) -> Dict[str, Any]:
        return {
            'width': self.width,
            'height': self.height,
            'entities': [e.to_dict() for e in self.entities],
            'bbox': self.bbox.to_dict(),
            'path': self.path
        }

    @classmethod
    def from_dict(cls, data: Dict) -> 'PartGeometry':
        entities = [entity_from_dict(e) for e in data.get('entities', [])]
        if 'bbox' not in data:
            return cls.from_entities(entities, path=data.get('path', ''))
        bbox = BBox.from_dict(data['bbox'])
        return cls(
            width=data.get('width', bbox.width),
            height=data.get('height', bbox.height),
            entities=entities,
            bbox=bbox,
            path=data.get('path', '')
        )
