"""
Sheet clearance validation
==========================
Independent check of a packed sheet with shapely: every pair of placed
outlines must keep the required spacing.
"""

import logging
from typing import List, NamedTuple

from shapely import affinity
from shapely.geometry import LineString, Polygon, box
from shapely.ops import polygonize, unary_union

from core.geometry import part_outline_segments
from core.models import index_parts
from .models import NestResultSheet, PlacedPart

logger = logging.getLogger(__name__)


class ClearanceViolation(NamedTuple):
    first_id: str
    second_id: str
    distance: float


def part_polygon(part) -> Polygon:
    """
    Outer outline of a part as a polygon in its normalized frame.

    Arcs are flattened to a chord tolerance and vertices snapped to 1e-6 so
    adjacent arcs share their endpoints. Holes are not subtracted; falls back
    to the bbox rectangle when the outline does not close.
    """
    lines = []
    for a, b in part_outline_segments(part):
        a = (round(a[0], 6), round(a[1], 6))
        b = (round(b[0], 6), round(b[1], 6))
        if a != b:
            lines.append(LineString([a, b]))
    polygons = list(polygonize(lines))
    if not polygons:
        return box(0.0, 0.0, part.geometry.width, part.geometry.height)
    merged = unary_union(polygons)
    if merged.geom_type == 'MultiPolygon':
        merged = max(merged.geoms, key=lambda g: g.area)
    return Polygon(merged.exterior)


def placed_part_polygon(part, placed: PlacedPart) -> Polygon:
    """Part outline rotated about its origin and moved to its sheet position"""
    poly = affinity.rotate(part_polygon(part), placed.rotation, origin=(0.0, 0.0))
    return affinity.translate(poly, placed.x, placed.y)


def check_sheet_clearance(sheet: NestResultSheet, parts, tools=None,
                          spacing: float = 0.0,
                          tolerance: float = 1e-6) -> List[ClearanceViolation]:
    """
    Find placed parts closer than the spacing.

    Args:
        sheet: Packed sheet
        parts: Part table (list or dict by id)
        tools: Tool table (punch footprints are not part of the outline)
        spacing: Required clearance between outlines
        tolerance: Floating point slack

    Returns:
        Violating pairs (placed part ids and their distance)
    """
    lookup = index_parts(parts)
    shapes = []
    for placed in sheet.placed_parts:
        part = lookup.get(placed.part_id)
        if part is None:
            logger.warning(f"Unknown part on sheet {sheet.id}: {placed.part_id}")
            continue
        shapes.append((placed.id, placed_part_polygon(part, placed)))

    violations: List[ClearanceViolation] = []
    for i in range(len(shapes)):
        for j in range(i + 1, len(shapes)):
            id_a, poly_a = shapes[i]
            id_b, poly_b = shapes[j]
            dist = 0.0 if poly_a.intersects(poly_b) else poly_a.distance(poly_b)
            if dist < spacing - tolerance or poly_a.intersection(poly_b).area > tolerance:
                violations.append(ClearanceViolation(id_a, id_b, dist))

    if violations:
        logger.warning(f"Sheet {sheet.id}: {len(violations)} clearance violations")
    return violations


def parts_outside_sheet(sheet: NestResultSheet, parts, margin: float = 0.0,
                        tolerance: float = 1e-6) -> List[str]:
    """Placed part ids whose outline leaves the sheet area inside the margin"""
    lookup = index_parts(parts)
    frame = box(margin - tolerance, margin - tolerance,
                sheet.width - margin + tolerance, sheet.height - margin + tolerance)
    outside = []
    for placed in sheet.placed_parts:
        part = lookup.get(placed.part_id)
        if part is not None and not frame.contains(placed_part_polygon(part, placed)):
            outside.append(placed.id)
    return outside
