"""
Strike expansion
================
Turns every placed part's punch list into sheet-coordinate strikes.
"""

import logging
from typing import Dict, List

import numpy as np

from core.models import Part, Tool
from nesting.models import NestResultSheet, PlacedPart
from .models import PunchOp

logger = logging.getLogger(__name__)


def rotation_matrix(angle_deg: float) -> np.ndarray:
    """2x2 counter-clockwise rotation"""
    a = np.radians(angle_deg)
    c, s = np.cos(a), np.sin(a)
    return np.array([[c, -s], [s, c]])


def expand_placed_part(part: Part, placed: PlacedPart, tools: Dict[str, Tool]) -> List[PunchOp]:
    """
    Strikes of one placed part in sheet coordinates.

    Punch points are rotated about the part origin by the placement rotation
    and moved to the placement position.
    """
    if not part.punches:
        return []

    local = np.array([[p.x, p.y] for p in part.punches], dtype=float)
    world = local @ rotation_matrix(placed.rotation).T + np.array([placed.x, placed.y])

    ops = []
    for punch, (wx, wy) in zip(part.punches, world):
        tool = tools.get(punch.tool_id)
        if tool is None:
            logger.debug(f"Unknown tool {punch.tool_id} on {placed.id}, station 0")
        ops.append(PunchOp(
            tool_id=punch.tool_id,
            station_code=tool.station_code if tool else 0,
            x=float(wx),
            y=float(wy),
            rotation=(punch.rotation + placed.rotation) % 360,
            line_id=f"{placed.id}:{punch.line_id}" if punch.line_id else None,
            composite_id=f"{placed.id}_{punch.id}",
            source_punch_id=punch.id,
            placed_part_id=placed.id
        ))
    return ops


def expand_sheet(sheet: NestResultSheet, parts: Dict[str, Part],
                 tools: Dict[str, Tool]) -> List[List[PunchOp]]:
    """
    Strikes of every placed part, one list per placed part in sheet order.

    Placed parts whose part id is unknown are skipped.
    """
    per_part = []
    for placed in sheet.placed_parts:
        part = parts.get(placed.part_id)
        if part is None:
            logger.warning(f"Unknown part on sheet {sheet.id}: {placed.part_id}, skipped")
            continue
        per_part.append(expand_placed_part(part, placed, tools))
    return per_part
