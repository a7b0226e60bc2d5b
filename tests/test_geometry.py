"""
Geometry kernel tests: containment, loops, intersections, extents, collision, gouging.
"""

import math

import pytest
from shapely.geometry import Polygon

from core.geometry import (
    ArcEntity, CircleEntity, LineEntity, PartGeometry, Point, PolylineEntity,
    angle_in_sweep, calculate_part_physical_extents, do_parts_intersect,
    find_closed_loops, get_geometry_from_entities, get_outer_loop_indices,
    get_rotated_extents, get_tool_corners, is_point_in_rectangle, is_point_inside,
    distance_to_segment, is_tool_gouging, polygon_area, segment_intersects_circle,
    segment_intersects_geometry, segments_cross,
)
from core.models import Part, PlacedTool
from nesting.models import PlacedPart
from nesting.validation import placed_part_polygon


def square(size=100.0, origin=(0.0, 0.0)):
    x, y = origin
    return PolylineEntity([Point(x, y), Point(x + size, y), Point(x + size, y + size),
                           Point(x, y + size)], closed=True)


def disk_part(part_id='DISK', radius=100.0):
    """Full circle part; its centre sits at (radius, radius) in the part frame"""
    geometry = PartGeometry.from_entities([CircleEntity(Point(radius, radius), radius)])
    return Part(id=part_id, name=part_id, geometry=geometry)


NOTCHED = PolylineEntity([
    Point(0, 0), Point(100, 0), Point(100, 100), Point(60, 100),
    Point(60, 60), Point(40, 60), Point(40, 100), Point(0, 100),
], closed=True)


# ============================================================
# Containment
# ============================================================

def test_point_inside_square():
    geometry = PartGeometry.from_entities([square()])
    assert is_point_inside((50, 50), geometry)
    assert not is_point_inside((150, 50), geometry)
    assert not is_point_inside((50, -1), geometry)


def test_point_in_circular_hole_is_outside_material():
    geometry = PartGeometry.from_entities([square(), CircleEntity(Point(50, 50), 10)])
    assert not is_point_inside((50, 50), geometry)
    assert is_point_inside((50, 75), geometry)
    assert is_point_inside((20, 20), geometry)


def test_point_in_notch_is_outside_material():
    geometry = PartGeometry.from_entities([NOTCHED])
    assert not is_point_inside((50, 80), geometry)
    assert is_point_inside((50, 30), geometry)
    assert is_point_inside((80, 90), geometry)


def test_zero_radius_circle_never_contains():
    geometry = PartGeometry.from_entities([CircleEntity(Point(10, 10), 0.0)])
    assert not is_point_inside((10, 10), geometry)


def test_arc_half_disc_containment():
    # Upper half disc: arc 0..180 closed by its diameter
    geometry = PartGeometry.from_entities([
        ArcEntity(Point(0, 0), 10, 0, 180),
        LineEntity(Point(-10, 0), Point(10, 0)),
    ])
    assert is_point_inside((0, 5), geometry)
    assert not is_point_inside((9, 9), geometry)


def test_point_in_rotated_rectangle():
    assert is_point_in_rectangle((5, 5), 0, 0, 10, 10, 0)
    # 10 x 2 rectangle rotated to stand upright
    assert is_point_in_rectangle((-1, 5), 0, 0, 10, 2, 90)
    assert not is_point_in_rectangle((5, 1), 0, 0, 10, 2, 90)


# ============================================================
# Sweep / bounds
# ============================================================

def test_angle_in_sweep_wraps_through_zero():
    assert angle_in_sweep(0, 350, 10)
    assert angle_in_sweep(355, 350, 10)
    assert not angle_in_sweep(180, 350, 10)
    assert angle_in_sweep(90, 0, 180)
    assert not angle_in_sweep(270, 0, 180)


def test_arc_bounds_include_axis_extremes():
    bounds = ArcEntity(Point(0, 0), 10, 0, 180).bounds()
    assert bounds.max_y == pytest.approx(10)
    assert bounds.min_x == pytest.approx(-10)
    assert bounds.max_x == pytest.approx(10)
    assert bounds.min_y == pytest.approx(0)


# ============================================================
# Loops
# ============================================================

def test_outer_loop_is_square_regardless_of_order():
    geometry = PartGeometry.from_entities([CircleEntity(Point(50, 50), 10), square()])
    processed = get_geometry_from_entities(geometry)

    loops = find_closed_loops(processed.segments)
    assert len(loops) == 2

    # circle quarter arcs first, square edges after
    assert get_outer_loop_indices(processed.segments) == {4, 5, 6, 7}


def test_outer_loop_with_square_listed_first():
    geometry = PartGeometry.from_entities([square(), square(20, (40, 40))])
    processed = get_geometry_from_entities(geometry)
    assert get_outer_loop_indices(processed.segments) == {0, 1, 2, 3}


def test_loop_area_matches_reference_polygon():
    processed = get_geometry_from_entities(PartGeometry.from_entities([NOTCHED]))
    loops = find_closed_loops(processed.segments)
    assert len(loops) == 1

    reference = Polygon([(p.x, p.y) for p in NOTCHED.vertices])
    assert loops[0].area == pytest.approx(reference.area)
    assert loops[0].area == pytest.approx(9200.0)


def test_loop_from_unordered_lines():
    lines = [
        LineEntity(Point(0, 0), Point(10, 0)),
        LineEntity(Point(10, 10), Point(0, 10)),
        LineEntity(Point(10, 0), Point(10, 10)),
        LineEntity(Point(0, 10), Point(0, 0)),
    ]
    processed = get_geometry_from_entities(PartGeometry.from_entities(lines))
    loops = find_closed_loops(processed.segments)
    assert len(loops) == 1
    assert loops[0].area == pytest.approx(100.0)


def test_open_polyline_has_no_loop():
    open_line = PolylineEntity([Point(0, 0), Point(10, 0), Point(10, 10)], closed=False)
    processed = get_geometry_from_entities(PartGeometry.from_entities([open_line]))
    assert find_closed_loops(processed.segments) == []
    assert get_outer_loop_indices(processed.segments) == set()


def test_hole_centers():
    slot = PolylineEntity([Point(40, 20), Point(60, 20), Point(60, 60), Point(40, 60)],
                          closed=True)
    geometry = PartGeometry.from_entities([square(), CircleEntity(Point(20, 80), 5), slot])
    processed = get_geometry_from_entities(geometry)

    centers = [(round(c.point.x, 6), round(c.point.y, 6), c.rotation)
               for c in processed.hole_centers]
    assert (20.0, 80.0, 0.0) in centers
    assert (50.0, 40.0, 90.0) in centers
    assert len(centers) == 2


def test_empty_geometry_processes_to_none():
    assert get_geometry_from_entities(PartGeometry(0, 0)) is None


def test_polygon_area_degenerate():
    assert polygon_area([(0, 0), (1, 1)]) == 0.0


# ============================================================
# Intersections
# ============================================================

def test_segments_cross():
    assert segments_cross((0, 0), (10, 10), (0, 10), (10, 0))
    assert not segments_cross((0, 0), (10, 0), (0, 5), (10, 5))
    # touching at an endpoint is outside the open parameter range
    assert not segments_cross((0, 0), (10, 0), (10, 0), (10, 10))


def test_segment_intersects_circle():
    assert segment_intersects_circle((-20, 0), (20, 0), (0, 0), 5)
    assert not segment_intersects_circle((-20, 10), (20, 10), (0, 0), 5)
    assert not segment_intersects_circle((-20, 0), (20, 0), (0, 0), 0)


def test_segment_intersects_geometry():
    entities = [square(), CircleEntity(Point(50, 50), 10)]
    assert segment_intersects_geometry((-10, 50), (30, 50), entities)
    assert segment_intersects_geometry((30, 50), (45, 50), entities)
    assert not segment_intersects_geometry((10, 10), (20, 20), entities)


# ============================================================
# Tools and extents
# ============================================================

def test_square_tool_corners_rotated(tools):
    corners = get_tool_corners(tools['SQ20'], 100, 100, 45)
    assert len(corners) == 4
    half_diagonal = math.hypot(10, 10)
    for c in corners:
        assert math.hypot(c.x - 100, c.y - 100) == pytest.approx(half_diagonal)
    assert max(c.x for c in corners) == pytest.approx(100 + half_diagonal)


def test_circle_tool_has_eight_corners(tools):
    corners = get_tool_corners(tools['RND10'], 0, 0, 0)
    assert len(corners) == 8
    assert all(math.hypot(c.x, c.y) == pytest.approx(5) for c in corners)


def test_rotated_extents_of_rectangle(rect_part):
    part = rect_part('P', 200, 100)
    ext = get_rotated_extents(part, 90, {})
    assert ext.width == pytest.approx(100)
    assert ext.height == pytest.approx(200)
    assert ext.ox == pytest.approx(100)
    assert ext.oy == pytest.approx(0, abs=1e-9)


def test_rotated_extents_include_overhanging_punch(rect_part, tools):
    part = rect_part('P', 200, 100, punches=[PlacedTool('p1', 'SQ20', 0, 50)])
    ext = get_rotated_extents(part, 0, tools)
    assert ext.width == pytest.approx(210)
    assert ext.ox == pytest.approx(10)

    physical = calculate_part_physical_extents(part, tools)
    assert physical.width == pytest.approx(210)
    assert physical.offset_x == pytest.approx(10)


def test_rotated_extents_ignore_unknown_tool(rect_part):
    part = rect_part('P', 200, 100, punches=[PlacedTool('p1', 'NOPE', 0, 50)])
    ext = get_rotated_extents(part, 0, {})
    assert ext.width == pytest.approx(200)


# ============================================================
# Collision
# ============================================================

def test_overlapping_parts_intersect(rect_part):
    a = rect_part('A', 100, 100)
    assert do_parts_intersect(a, (0, 0), 0, a, (50, 30), 0)
    assert not do_parts_intersect(a, (0, 0), 0, a, (200, 0), 0)


def test_margin_makes_close_parts_collide(rect_part):
    a = rect_part('A', 100, 100)
    assert do_parts_intersect(a, (0, 0), 0, a, (105, 0), 0, margin=10)
    assert not do_parts_intersect(a, (0, 0), 0, a, (105, 0), 0, margin=3)
    assert not do_parts_intersect(a, (0, 0), 0, a, (110, 0), 0, margin=10)


def test_contained_part_collides(rect_part):
    big = rect_part('BIG', 100, 100)
    small = rect_part('SMALL', 10, 10)
    assert do_parts_intersect(big, (0, 0), 0, small, (45, 45), 0)
    assert do_parts_intersect(small, (45, 45), 0, big, (0, 0), 0)


def test_rotated_part_collision(rect_part):
    a = rect_part('A', 200, 100)
    # rotated 90 about its origin it occupies x in [-100, 0]
    assert do_parts_intersect(a, (0, 0), 90, a, (-150, 50), 0)
    assert not do_parts_intersect(a, (0, 0), 90, a, (10, 0), 0)


def test_collision_cache_is_filled(rect_part):
    a = rect_part('A', 100, 100)
    cache = {}
    do_parts_intersect(a, (0, 0), 0, a, (50, 0), 0, cache=cache)
    assert 'A' in cache
    assert len(cache['A']) == 4


def _on_ray(center, distance, angle_deg):
    rad = math.radians(angle_deg)
    return (center[0] + distance * math.cos(rad), center[1] + distance * math.sin(rad))


def test_clearance_to_disk_is_measured_on_the_arc(rect_part):
    disk = disk_part()
    small = rect_part('SQ', 20, 20)
    # lower-left corner 4.5 outside the circle, halfway between the quarter marks
    corner = _on_ray((100, 100), 104.5, 7.5)

    assert do_parts_intersect(disk, (0, 0), 0, small, corner, 0, margin=5.0)
    assert not do_parts_intersect(disk, (0, 0), 0, small, corner, 0, margin=4.0)


def test_edge_cutting_into_disk_collides(rect_part):
    disk = disk_part()
    plate = rect_part('PLATE', 50, 200)
    # plate rotated 7.5 deg, its near edge 99.5 from the disk centre at mid-length
    rad = math.radians(7.5)
    edge_dir = (-math.sin(rad), math.cos(rad))

    def origin_at(gap):
        foot = _on_ray((100, 100), gap, 7.5)
        return (foot[0] - 100 * edge_dir[0], foot[1] - 100 * edge_dir[1])

    assert do_parts_intersect(disk, (0, 0), 0, plate, origin_at(99.5), 7.5)
    assert not do_parts_intersect(disk, (0, 0), 0, plate, origin_at(100.5), 7.5)
    assert do_parts_intersect(disk, (0, 0), 0, plate, origin_at(100.5), 7.5, margin=1.0)

    overlap = placed_part_polygon(disk, PlacedPart('d', 'DISK', 0, 0)).intersection(
        placed_part_polygon(plate, PlacedPart('p', 'PLATE', *origin_at(99.5), rotation=7.5)))
    assert overlap.area == pytest.approx(6.66, abs=0.05)


def test_disks_collide_by_arc_crossing_and_clearance():
    a = disk_part('A')
    b = disk_part('B')
    assert do_parts_intersect(a, (0, 0), 0, b, (199, 0), 0)
    assert not do_parts_intersect(a, (0, 0), 0, b, (201, 0), 0)
    assert do_parts_intersect(a, (0, 0), 0, b, (201, 0), 0, margin=2.0)
    assert not do_parts_intersect(a, (0, 0), 0, b, (201, 0), 0, margin=0.5)


def test_disk_outline_keeps_exact_arcs():
    cache = {}
    do_parts_intersect(disk_part(), (0, 0), 0, disk_part(), (150, 0), 0, cache=cache)
    assert len(cache['DISK']) == 4
    assert all(edge.is_arc and edge.radius == 100 for edge in cache['DISK'])


# ============================================================
# Gouging
# ============================================================

def _bottom_edge(geometry):
    processed = get_geometry_from_entities(geometry)
    return processed.segments[0], processed.segments


def test_tool_reaching_into_material_gouges(tools):
    geometry = PartGeometry.rectangle(100, 50)
    bottom, segments = _bottom_edge(geometry)
    assert is_tool_gouging(tools['SQ20'], 50, 5, 0, geometry, bottom, segments)


def test_tool_on_edge_does_not_gouge(tools):
    geometry = PartGeometry.rectangle(100, 50)
    bottom, segments = _bottom_edge(geometry)
    assert not is_tool_gouging(tools['SQ20'], 50, -10, 0, geometry, bottom, segments)


def test_empty_geometry_never_gouges(tools):
    geometry = PartGeometry(0, 0)
    bottom, _ = _bottom_edge(PartGeometry.rectangle(10, 10))
    assert not is_tool_gouging(tools['SQ20'], 0, 0, 0, geometry, bottom)


def test_corner_depth_is_tolerated_near_a_vertex_only(tools):
    geometry = PartGeometry.rectangle(100, 50)
    bottom, segments = _bottom_edge(geometry)
    # one die corner 1.5 into the material
    assert not is_tool_gouging(tools['SQ20'], -8.5, -8.5, 0, geometry, bottom, segments)
    assert is_tool_gouging(tools['SQ20'], 50, -8.5, 0, geometry, bottom, segments)


def test_corner_on_another_edge_does_not_gouge(tools):
    geometry = PartGeometry.rectangle(100, 50)
    bottom, segments = _bottom_edge(geometry)
    # corners 0.3 inside the right edge, far from the bottom edge and from vertices
    assert not is_tool_gouging(tools['SQ20'], 109.7, 25, 0, geometry, bottom, segments)
    assert is_tool_gouging(tools['SQ20'], 109.7, 25, 0, geometry, bottom)


def test_arc_segment_distance_is_radial(tools):
    geometry = PartGeometry.from_entities([CircleEntity(Point(50, 50), 50)])
    segments = get_geometry_from_entities(geometry).segments
    quarter = segments[0]

    assert distance_to_segment(_on_ray((50, 50), 49.7, 45), quarter) == pytest.approx(0.3)
    assert distance_to_segment(_on_ray((50, 50), 50.4, 45), quarter) == pytest.approx(0.4)

    # the inward corner of a round die sits 0.3 and 1.5 inside the circle
    x, y = _on_ray((50, 50), 54.7, 45)
    assert not is_tool_gouging(tools['RND10'], x, y, 0, geometry, quarter, segments)
    x, y = _on_ray((50, 50), 53.5, 45)
    assert is_tool_gouging(tools['RND10'], x, y, 0, geometry, quarter, segments)
