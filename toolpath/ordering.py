"""
Work unit ordering
==================
Travel order of the work units inside one tool group.

Every strategy takes the running head position as an explicit Cursor and
leaves it on the last committed strike, so groups are ordered strictly one
after the other.

Strategies:
- shortest_path: greedy nearest start-or-end, reversing a unit when its end is nearer
- band_scan: column (x-axis) or row (y-axis) bands with singleton clustering
- contour_snake: tight bands, alternating direction, forced unit direction
"""

import logging
from typing import Dict, List, Sequence, Tuple

from config.settings import BAND_TOLERANCE, CLUSTER_DISTANCE, CONTOUR_BAND_TOLERANCE
from core.geometry import Point, distance_sq
from core.models import AnglePriority, PathOptimization
from .models import WorkUnit

logger = logging.getLogger(__name__)

# Angular slack when classifying strike orientation (degrees)
ANGLE_TOLERANCE = 0.1

X, Y = 0, 1


class Cursor:
    """Running head position"""

    def __init__(self, x: float = 0.0, y: float = 0.0):
        self.position = Point(x, y)

    def move_to(self, point: Tuple[float, float]) -> None:
        self.position = Point(point[0], point[1])

    def __repr__(self) -> str:
        return f"Cursor({self.position.x:.3f}, {self.position.y:.3f})"


def _commit(unit: WorkUnit, cursor: Cursor, out: List[WorkUnit]) -> None:
    out.append(unit)
    cursor.move_to(unit.end)


def _scan_axes(mode: PathOptimization) -> Tuple[int, int]:
    """(scan axis, cross axis) for a band scan"""
    return (X, Y) if mode == PathOptimization.X_AXIS else (Y, X)


def is_horizontal(rotation: float) -> bool:
    r = rotation % 180
    return r <= ANGLE_TOLERANCE or r >= 180 - ANGLE_TOLERANCE


def is_near_vertical(rotation: float) -> bool:
    return 45 <= rotation % 180 < 135


# ============================================================
# Shortest path
# ============================================================

def order_shortest_path(units: Sequence[WorkUnit], cursor: Cursor) -> List[WorkUnit]:
    """
    Greedy nearest-neighbour over unit endpoints.

    Ties go to the earlier unit, and to its start over its end.
    """
    remaining = list(units)
    ordered: List[WorkUnit] = []
    while remaining:
        best_index, best_dist, best_reverse = 0, float('inf'), False
        for i, unit in enumerate(remaining):
            d_start = distance_sq(cursor.position, unit.start)
            if d_start < best_dist:
                best_index, best_dist, best_reverse = i, d_start, False
            d_end = distance_sq(cursor.position, unit.end)
            if d_end < best_dist:
                best_index, best_dist, best_reverse = i, d_end, True

        unit = remaining.pop(best_index)
        if best_reverse and not unit.is_singleton:
            unit = unit.reversed()
        _commit(unit, cursor, ordered)
    return ordered


# ============================================================
# Band scan
# ============================================================

def cluster_singletons(units: Sequence[WorkUnit], max_distance: float,
                       scan: int = X, cross: int = Y) -> List[WorkUnit]:
    """
    Merge single strikes lying within max_distance of each other.

    Connected groups become one unit chained nearest-neighbour from the
    member lowest on the cross axis (then the scan axis). The merged unit
    takes the place of its first member; other units are kept as they are.
    """
    single_idx = [i for i, u in enumerate(units) if u.is_singleton]
    limit = max_distance * max_distance

    component_of: Dict[int, int] = {}
    components: List[List[int]] = []
    for i in single_idx:
        if i in component_of:
            continue
        comp = [i]
        component_of[i] = len(components)
        stack = [i]
        while stack:
            current = units[stack.pop()].start
            for j in single_idx:
                if j not in component_of and distance_sq(current, units[j].start) <= limit:
                    component_of[j] = len(components)
                    comp.append(j)
                    stack.append(j)
        components.append(sorted(comp))

    merged: Dict[int, WorkUnit] = {}
    for comp in components:
        if len(comp) == 1:
            continue
        first = min(comp, key=lambda k: (units[k].start[cross], units[k].start[scan], k))
        chain = [first]
        left = [k for k in comp if k != first]
        while left:
            tail = units[chain[-1]].start
            nxt = min(left, key=lambda k: (distance_sq(tail, units[k].start), k))
            left.remove(nxt)
            chain.append(nxt)
        merged[comp[0]] = WorkUnit([units[k].ops[0] for k in chain],
                                   key=f"cluster:{units[first].key}")

    result = []
    for i, unit in enumerate(units):
        if i in component_of:
            comp = components[component_of[i]]
            if len(comp) > 1:
                if i == comp[0]:
                    result.append(merged[i])
                continue
        result.append(unit)
    if merged:
        logger.debug(f"Clustered {sum(len(u.ops) for u in merged.values())} strikes "
                     f"into {len(merged)} clusters")
    return result


def make_bands(units: Sequence[WorkUnit], scan: int, tolerance: float) -> List[List[WorkUnit]]:
    """
    Split units into bands along the scan axis.

    A unit joins the current band while its centroid is within tolerance of
    the band's first (anchor) unit. Bands come out in ascending scan order,
    members in ascending cross order.
    """
    cross = Y if scan == X else X
    ordered = sorted(enumerate(units),
                     key=lambda iu: (iu[1].centroid[scan], iu[1].centroid[cross], iu[0]))
    bands: List[List[WorkUnit]] = []
    anchor = 0.0
    for _, unit in ordered:
        c = unit.centroid[scan]
        if bands and c - anchor <= tolerance:
            bands[-1].append(unit)
        else:
            bands.append([unit])
            anchor = c
    for band in bands:
        band.sort(key=lambda u: u.centroid[cross])
    return bands


def _band_distance(band: List[WorkUnit], cursor: Cursor) -> float:
    return min(distance_sq(cursor.position, band[0].start),
               distance_sq(cursor.position, band[-1].end))


def order_band_scan(units: Sequence[WorkUnit], cursor: Cursor, scan: int = X,
                    tolerance: float = BAND_TOLERANCE) -> List[WorkUnit]:
    """Band-by-band travel starting from the band end nearer the head"""
    bands = make_bands(units, scan, tolerance)
    if not bands:
        return []
    if _band_distance(bands[-1], cursor) < _band_distance(bands[0], cursor):
        bands.reverse()

    ordered: List[WorkUnit] = []
    for band in bands:
        if distance_sq(cursor.position, band[-1].end) < distance_sq(cursor.position, band[0].start):
            band = list(reversed(band))
        for unit in band:
            if (not unit.is_singleton and
                    distance_sq(cursor.position, unit.end) < distance_sq(cursor.position, unit.start)):
                unit = unit.reversed()
            _commit(unit, cursor, ordered)
    return ordered


def order_by_axis(units: Sequence[WorkUnit], cursor: Cursor, mode: PathOptimization,
                  angle_priority: AnglePriority = AnglePriority.HORIZONTAL_FIRST,
                  tolerance: float = BAND_TOLERANCE,
                  cluster_distance: float = CLUSTER_DISTANCE) -> List[WorkUnit]:
    """
    Band scan with singleton clustering, one orientation class at a time.

    Args:
        units: Work units of one tool group
        cursor: Head position, updated
        mode: X_AXIS (column bands) or Y_AXIS (row bands)
        angle_priority: Which orientation class is punched first
        tolerance: Band width
        cluster_distance: Singleton merge distance
    """
    scan, cross = _scan_axes(mode)
    units = cluster_singletons(units, cluster_distance, scan, cross)
    horizontal = [u for u in units if is_horizontal(u.rotation)]
    vertical = [u for u in units if not is_horizontal(u.rotation)]
    classes = ((horizontal, vertical) if angle_priority == AnglePriority.HORIZONTAL_FIRST
               else (vertical, horizontal))

    ordered: List[WorkUnit] = []
    for members in classes:
        ordered.extend(order_band_scan(members, cursor, scan, tolerance))
    return ordered


# ============================================================
# Contour snake
# ============================================================

def _force_direction(unit: WorkUnit, axis: int, ascending: bool) -> WorkUnit:
    if unit.is_singleton:
        return unit
    rising = unit.end[axis] >= unit.start[axis]
    return unit if rising == ascending else unit.reversed()


def _snake(bands: List[List[WorkUnit]], cursor: Cursor, axis: int,
           out: List[WorkUnit]) -> None:
    for k, band in enumerate(bands):
        ascending = k % 2 == 0
        members = sorted(band, key=lambda u: u.centroid[axis], reverse=not ascending)
        for unit in members:
            _commit(_force_direction(unit, axis, ascending), cursor, out)


def order_contour_snake(units: Sequence[WorkUnit], cursor: Cursor,
                        angle_priority: AnglePriority = AnglePriority.HORIZONTAL_FIRST,
                        tolerance: float = CONTOUR_BAND_TOLERANCE) -> List[WorkUnit]:
    """
    Strict snake for contour tools.

    Near-vertical strikes: column bands left to right, even columns bottom
    to top, odd columns top to bottom. Near-horizontal strikes: row bands
    top to bottom, even rows left to right, odd rows right to left. Each
    nibble run is turned to run the way its band runs.
    """
    vertical = [u for u in units if is_near_vertical(u.rotation)]
    horizontal = [u for u in units if not is_near_vertical(u.rotation)]

    ordered: List[WorkUnit] = []
    passes = ('horizontal', 'vertical')
    if angle_priority == AnglePriority.VERTICAL_FIRST:
        passes = ('vertical', 'horizontal')
    for name in passes:
        if name == 'vertical':
            _snake(make_bands(vertical, X, tolerance), cursor, Y, ordered)
        else:
            rows = list(reversed(make_bands(horizontal, Y, tolerance)))
            _snake(rows, cursor, X, ordered)
    return ordered
