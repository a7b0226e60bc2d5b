"""
Geometry Kernel
===============
Pure geometric primitives and topology queries over part outlines.

Usage:
    from core.geometry import PartGeometry, is_point_inside, get_geometry_from_entities

    processed = get_geometry_from_entities(part.geometry)
    outer = get_outer_loop_indices(processed.segments)
"""

from .entities import (
    EntityType,
    Point,
    BBox,
    LineEntity,
    ArcEntity,
    CircleEntity,
    PolylineEntity,
    CurveEntity,
    PartGeometry,
    angle_in_sweep,
    entity_from_dict,
)
from .measure import (
    distance,
    distance_sq,
    normalize,
    denormalize,
    polygon_area,
    polygon_center,
    point_segment_distance,
    segment_distance,
    rotate_point,
    arc_point,
    point_arc_distance,
    segment_arc_distance,
    arc_arc_distance,
)
from .predicates import (
    ray_intersects_segment,
    is_point_inside,
    is_point_in_rectangle,
)
from .intersections import (
    segment_intersects_circle,
    segment_intersects_arc,
    segment_intersects_geometry,
    segments_cross,
    arcs_cross,
)
from .topology import (
    SegmentType,
    Segment,
    ClosedLoop,
    ShapeCenter,
    ProcessedGeometry,
    find_closed_loops,
    get_outer_loop_indices,
    get_geometry_from_entities,
)
from .transform import (
    RotatedExtents,
    PhysicalExtents,
    transform_point,
    get_rotated_rect_vertices,
    get_tool_corners,
    get_rotated_extents,
    calculate_part_physical_extents,
)
from .gouging import (
    distance_to_segment,
    is_tool_gouging,
)
from .collision import (
    OutlineEdge,
    SegmentCache,
    part_outline_edges,
    flatten_arc,
    part_outline_segments,
    placed_bbox,
    do_parts_intersect,
)

__all__ = [
    # Entities
    'EntityType',
    'Point',
    'BBox',
    'LineEntity',
    'ArcEntity',
    'CircleEntity',
    'PolylineEntity',
    'CurveEntity',
    'PartGeometry',
    'angle_in_sweep',
    'entity_from_dict',
    # Measure
    'distance',
    'distance_sq',
    'normalize',
    'denormalize',
    'polygon_area',
    'polygon_center',
    'point_segment_distance',
    'segment_distance',
    'rotate_point',
    'arc_point',
    'point_arc_distance',
    'segment_arc_distance',
    'arc_arc_distance',
    # Predicates
    'ray_intersects_segment',
    'is_point_inside',
    'is_point_in_rectangle',
    # Intersections
    'segment_intersects_circle',
    'segment_intersects_arc',
    'segment_intersects_geometry',
    'segments_cross',
    'arcs_cross',
    # Topology
    'SegmentType',
    'Segment',
    'ClosedLoop',
    'ShapeCenter',
    'ProcessedGeometry',
    'find_closed_loops',
    'get_outer_loop_indices',
    'get_geometry_from_entities',
    # Transform
    'RotatedExtents',
    'PhysicalExtents',
    'transform_point',
    'get_rotated_rect_vertices',
    'get_tool_corners',
    'get_rotated_extents',
    'calculate_part_physical_extents',
    # Gouging
    'distance_to_segment',
    'is_tool_gouging',
    # Collision
    'OutlineEdge',
    'SegmentCache',
    'part_outline_edges',
    'flatten_arc',
    'part_outline_segments',
    'placed_bbox',
    'do_parts_intersect',
]
