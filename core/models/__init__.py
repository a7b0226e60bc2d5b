"""
Core Models
===========
Tool, part, machine and optimizer data models.
"""

from .tools import (
    ToolShape,
    PunchType,
    Tool,
    PlacedTool,
    ToolTable,
    UNKNOWN_TOOL_RANK,
    index_tools,
    parse_enum,
    require_fields,
)
from .machine import (
    MachineSettings,
    OptimizerSettings,
    ToolSequence,
    PathOptimization,
    StartCorner,
    AnglePriority,
)
from .parts import (
    NestingConstraints,
    Part,
    ScheduledPart,
    index_parts,
)

__all__ = [
    # Tools
    'ToolShape',
    'PunchType',
    'Tool',
    'PlacedTool',
    'ToolTable',
    'UNKNOWN_TOOL_RANK',
    'index_tools',
    'parse_enum',
    'require_fields',
    # Machine / optimizer
    'MachineSettings',
    'OptimizerSettings',
    'ToolSequence',
    'PathOptimization',
    'StartCorner',
    'AnglePriority',
    # Parts
    'NestingConstraints',
    'Part',
    'ScheduledPart',
    'index_parts',
]
