"""
Sheet DXF export
================
Writes a packed sheet: the sheet frame, the packing area inside the margins
and every placed outline transformed to sheet coordinates.
"""

import logging
from typing import Optional

import ezdxf

from core.geometry import (
    ArcEntity, CircleEntity, LineEntity, PolylineEntity, normalize, transform_point,
)
from core.models import index_parts
from .models import NestResultSheet, NestingSettings, PlacedPart

logger = logging.getLogger(__name__)

LAYER_SHEET = "SHEET"
LAYER_MARGIN = "MARGIN"
LAYER_PARTS = "PARTS"


def _to_sheet(p, part, placed: PlacedPart):
    local = normalize(p, part.geometry.bbox)
    w = transform_point(local, placed.x, placed.y, placed.rotation)
    return (w.x, w.y)


def add_placed_part(msp, part, placed: PlacedPart) -> int:
    """
    Add one placed outline to a modelspace.

    Returns:
        Number of entities written
    """
    attribs = {'layer': LAYER_PARTS, 'color': 3}
    count = 0
    for entity in part.geometry.entities:
        if isinstance(entity, LineEntity):
            msp.add_line(_to_sheet(entity.start, part, placed),
                         _to_sheet(entity.end, part, placed), dxfattribs=attribs)
        elif isinstance(entity, PolylineEntity):
            msp.add_lwpolyline([_to_sheet(v, part, placed) for v in entity.vertices],
                               close=entity.closed, dxfattribs=attribs)
        elif isinstance(entity, CircleEntity):
            msp.add_circle(_to_sheet(entity.center, part, placed), entity.radius,
                           dxfattribs=attribs)
        elif isinstance(entity, ArcEntity):
            msp.add_arc(_to_sheet(entity.center, part, placed), entity.radius,
                        entity.start_angle + placed.rotation,
                        entity.end_angle + placed.rotation, dxfattribs=attribs)
        else:
            raise TypeError(f"Unsupported entity: {type(entity).__name__}")
        count += 1
    return count


def export_sheet_dxf(sheet: NestResultSheet, parts, path: str,
                     settings: Optional[NestingSettings] = None) -> str:
    """
    Export a packed sheet to DXF.

    Args:
        sheet: Packed sheet
        parts: Part table (list or dict by id)
        path: Output file
        settings: When given, the margin frame is drawn too

    Returns:
        Path of the written file
    """
    lookup = index_parts(parts)
    doc = ezdxf.new()
    doc.layers.add(LAYER_SHEET, color=7)
    doc.layers.add(LAYER_MARGIN, color=1)
    doc.layers.add(LAYER_PARTS, color=3)
    msp = doc.modelspace()

    msp.add_lwpolyline([(0, 0), (sheet.width, 0), (sheet.width, sheet.height), (0, sheet.height)],
                       close=True, dxfattribs={'layer': LAYER_SHEET})

    if settings is not None:
        left = settings.sheet_margin_left
        bottom = settings.sheet_margin_bottom
        right = sheet.width - settings.sheet_margin_right
        top = sheet.height - settings.sheet_margin_top
        msp.add_lwpolyline([(left, bottom), (right, bottom), (right, top), (left, top)],
                           close=True, dxfattribs={'layer': LAYER_MARGIN})

    written = 0
    for placed in sheet.placed_parts:
        part = lookup.get(placed.part_id)
        if part is None:
            logger.warning(f"Unknown part on sheet {sheet.id}: {placed.part_id}")
            continue
        written += add_placed_part(msp, part, placed)

    doc.saveas(path)
    logger.info(f"Saved: {path} ({written} entities)")
    return str(path)
