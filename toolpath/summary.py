"""
Sheet tooling summary
=====================
Hit counts per tool for one sheet, in turret order.
"""

from dataclasses import dataclass
from typing import Dict, List, Sequence

from core.models import index_tools
from .models import PunchOp


@dataclass
class ToolUsage:
    tool_id: str
    name: str
    station_code: int
    station_number: int
    mt_index: int
    hits: int
    known: bool = True

    def to_dict(self) -> Dict:
        return {
            'tool_id': self.tool_id,
            'name': self.name,
            'station_code': self.station_code,
            'station_number': self.station_number,
            'mt_index': self.mt_index,
            'hits': self.hits,
            'known': self.known,
        }


def sheet_tool_summary(ops: Sequence[PunchOp], tools) -> List[ToolUsage]:
    """
    Tools used by a sequence with their hit counts.

    Args:
        ops: Strikes of one sheet
        tools: Tool table (list or dict by id)

    Returns:
        One entry per tool id, sorted by (station number, MT index, name);
        unknown tool ids are listed with known=False
    """
    lookup = index_tools(tools)
    counts: Dict[str, int] = {}
    for op in ops:
        counts[op.tool_id] = counts.get(op.tool_id, 0) + 1

    usage = []
    for tool_id, hits in counts.items():
        tool = lookup.get(tool_id)
        if tool is None:
            usage.append(ToolUsage(tool_id, tool_id, 0, 0, 0, hits, known=False))
        else:
            usage.append(ToolUsage(tool_id, tool.name, tool.station_code,
                                   tool.station_number, tool.mt_index, hits))
    usage.sort(key=lambda u: (u.station_number, u.mt_index, u.name))
    return usage
