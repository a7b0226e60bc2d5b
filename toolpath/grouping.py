"""
Tool grouping
=============
Strikes grouped per tool, groups in tool-change order:
punch-type class (Starting, General, Contour, Finishing, unknown tools last),
then station number, then multi-tool slot, then first appearance.
"""

import logging
from typing import Dict, Iterable, List

from core.models import PunchType, Tool, ToolSequence, UNKNOWN_TOOL_RANK
from .models import PunchOp, ToolGroup, WorkUnit

logger = logging.getLogger(__name__)


def group_by_tool(ops: Iterable[PunchOp], tools: Dict[str, Tool]) -> List[ToolGroup]:
    """Group strikes by tool id and sort the groups in tool-change order"""
    groups: Dict[str, ToolGroup] = {}
    for op in ops:
        group = groups.get(op.tool_id)
        if group is None:
            tool = tools.get(op.tool_id)
            if tool is None:
                logger.warning(f"Unknown tool id {op.tool_id}: ordered last")
                group = ToolGroup(op.tool_id, rank=UNKNOWN_TOOL_RANK, first_seen=len(groups))
            else:
                group = ToolGroup(
                    op.tool_id,
                    rank=tool.punch_type.rank,
                    station_number=tool.station_number,
                    mt_index=tool.mt_index,
                    first_seen=len(groups),
                    is_contour=tool.punch_type == PunchType.CONTOUR
                )
            groups[op.tool_id] = group
        group.ops.append(op)

    return sorted(groups.values(), key=lambda g: g.order_key)


def sequence_groups(per_part_ops: List[List[PunchOp]], tools: Dict[str, Tool],
                    sequence: ToolSequence) -> List[ToolGroup]:
    """
    Tool groups for a whole sheet.

    Args:
        per_part_ops: Strikes per placed part, in sheet order
        tools: Tool table by id
        sequence: GLOBAL_STATION groups across the sheet; PART_BY_PART
            finishes one placed part before the next

    Returns:
        Tool groups in punching order
    """
    if sequence == ToolSequence.PART_BY_PART:
        groups = []
        for ops in per_part_ops:
            groups.extend(group_by_tool(ops, tools))
        return groups
    return group_by_tool((op for ops in per_part_ops for op in ops), tools)


def build_work_units(ops: List[PunchOp]) -> List[WorkUnit]:
    """
    Work units of one tool group.

    Strikes sharing a line id form one unit in their listed order; the
    others become units of one. Units keep first-appearance order.
    """
    units: List[WorkUnit] = []
    by_line: Dict[str, WorkUnit] = {}
    for op in ops:
        if op.line_id:
            unit = by_line.get(op.line_id)
            if unit is None:
                unit = WorkUnit([], key=op.line_id)
                by_line[op.line_id] = unit
                units.append(unit)
            unit.ops.append(op)
        else:
            units.append(WorkUnit([op], key=op.composite_id))
    return units
