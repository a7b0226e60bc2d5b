"""
Path Optimizer
==============
Orders the strikes of one packed sheet into a punching sequence.

Pipeline:
1. expand placed parts' punches into sheet coordinates
2. group by tool (or by placed part, then tool) in tool-change order
3. build work units (nibble runs stay together)
4. order units per group with the configured strategy
5. flag tool changes and flatten

Usage:
    from toolpath import optimize

    ops = optimize(sheet, parts, tools, OptimizerSettings())
"""

import logging
import time
from typing import Dict, List, Optional

from core.events import EventType, publish_event
from core.models import (
    OptimizerSettings, PathOptimization, StartCorner, index_parts, index_tools,
)
from nesting.models import NestResultSheet
from .expansion import expand_sheet
from .grouping import build_work_units, sequence_groups
from .models import PunchOp, ToolGroup
from .ordering import Cursor, order_by_axis, order_contour_snake, order_shortest_path

logger = logging.getLogger(__name__)


def start_cursor(sheet: NestResultSheet, corner: StartCorner) -> Cursor:
    """Head position before the first strike"""
    positions = {
        StartCorner.TOP_LEFT: (0.0, sheet.height),
        StartCorner.TOP_RIGHT: (sheet.width, sheet.height),
        StartCorner.BOTTOM_LEFT: (0.0, 0.0),
        StartCorner.BOTTOM_RIGHT: (sheet.width, 0.0),
    }
    return Cursor(*positions[corner])


def order_group(group: ToolGroup, cursor: Cursor, settings: OptimizerSettings) -> List[PunchOp]:
    """Ordered strikes of one tool group; the cursor ends on the last one"""
    units = build_work_units(group.ops)
    if group.is_contour:
        ordered = order_contour_snake(units, cursor, settings.angle_priority)
    elif settings.path_optimization == PathOptimization.SHORTEST_PATH:
        ordered = order_shortest_path(units, cursor)
    else:
        ordered = order_by_axis(units, cursor, settings.path_optimization,
                                settings.angle_priority)
    return [op for unit in ordered for op in unit.ops]


def optimize(sheet: NestResultSheet, parts, tools,
             settings: Optional[OptimizerSettings] = None) -> List[PunchOp]:
    """
    Punching sequence for one sheet.

    Args:
        sheet: Packed sheet
        parts: Part table (list or dict by id)
        tools: Tool table (list or dict by id)
        settings: Optimizer settings (defaults when omitted)

    Returns:
        Strikes in punching order; the first strike of each new tool
        carries is_tool_change
    """
    settings = settings or OptimizerSettings()
    part_lookup = index_parts(parts)
    tool_lookup: Dict = index_tools(tools)
    start_time = time.time()

    per_part = expand_sheet(sheet, part_lookup, tool_lookup)
    groups = sequence_groups(per_part, tool_lookup, settings.tool_sequence)
    cursor = start_cursor(sheet, settings.start_corner)

    result: List[PunchOp] = []
    tool_changes = 0
    for group in groups:
        ordered = order_group(group, cursor, settings)
        if not ordered:
            continue
        if not result or result[-1].tool_id != ordered[0].tool_id:
            ordered[0].is_tool_change = True
            tool_changes += 1
        logger.debug(f"Tool {group.tool_id}: {len(ordered)} strikes")
        result.extend(ordered)

    elapsed = time.time() - start_time
    logger.info(f"Sheet {sheet.id}: {len(result)} strikes ordered, "
                f"{tool_changes} tool changes ({elapsed:.2f}s)")
    publish_event(EventType.TOOLPATH_OPTIMIZED,
                  {'sheet_id': sheet.id, 'strikes': len(result), 'tool_changes': tool_changes},
                  source=__name__)
    return result
