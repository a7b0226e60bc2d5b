"""
Path Optimizer
==============
Punching sequence of a packed sheet: tool-change order and travel order.

Usage:
    from toolpath import optimize, estimate_cycle_time

    ops = optimize(sheet, parts, tools, settings)
    estimate = estimate_cycle_time(ops, machine)
"""

from .models import PunchOp, WorkUnit, ToolGroup
from .expansion import rotation_matrix, expand_placed_part, expand_sheet
from .grouping import group_by_tool, sequence_groups, build_work_units
from .ordering import (
    Cursor,
    order_shortest_path,
    cluster_singletons,
    make_bands,
    order_band_scan,
    order_by_axis,
    order_contour_snake,
)
from .optimizer import start_cursor, order_group, optimize
from .motion import (
    TravelStats,
    CycleTimeEstimate,
    segment_time_trapezoid,
    travel_stats,
    estimate_cycle_time,
)
from .summary import ToolUsage, sheet_tool_summary

__all__ = [
    # Models
    'PunchOp',
    'WorkUnit',
    'ToolGroup',
    # Expansion / grouping
    'rotation_matrix',
    'expand_placed_part',
    'expand_sheet',
    'group_by_tool',
    'sequence_groups',
    'build_work_units',
    # Ordering
    'Cursor',
    'order_shortest_path',
    'cluster_singletons',
    'make_bands',
    'order_band_scan',
    'order_by_axis',
    'order_contour_snake',
    # Optimizer
    'start_cursor',
    'order_group',
    'optimize',
    # Motion / summary
    'TravelStats',
    'CycleTimeEstimate',
    'segment_time_trapezoid',
    'travel_stats',
    'estimate_cycle_time',
    'ToolUsage',
    'sheet_tool_summary',
]
