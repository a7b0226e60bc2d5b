"""
Toolpath Models
===============
Strikes in sheet coordinates and the units they are ordered in.
"""

from dataclasses import dataclass, field, replace
from typing import Dict, List, Optional

from core.geometry import Point


@dataclass
class PunchOp:
    """One strike in sheet coordinates"""
    tool_id: str
    station_code: int
    x: float
    y: float
    rotation: float
    is_tool_change: bool = False
    line_id: Optional[str] = None
    composite_id: str = ""
    source_punch_id: str = ""
    placed_part_id: str = ""

    @property
    def point(self) -> Point:
        return Point(self.x, self.y)

    def to_dict(self) -> Dict:
        return {
            'tool_id': self.tool_id,
            'station_code': self.station_code,
            'x': self.x,
            'y': self.y,
            'rotation': self.rotation,
            'is_tool_change': self.is_tool_change,
            'line_id': self.line_id,
            'composite_id': self.composite_id,
            'source_punch_id': self.source_punch_id,
            'placed_part_id': self.placed_part_id,
        }

    @classmethod
    def from_dict(cls, data: Dict) -> 'PunchOp':
        return cls(
            tool_id=data['tool_id'],
            station_code=int(data.get('station_code', 0)),
            x=float(data['x']),
            y=float(data['y']),
            rotation=float(data.get('rotation', 0.0)),
            is_tool_change=bool(data.get('is_tool_change', False)),
            line_id=data.get('line_id'),
            composite_id=data.get('composite_id', ""),
            source_punch_id=data.get('source_punch_id', ""),
            placed_part_id=data.get('placed_part_id', "")
        )


@dataclass
class WorkUnit:
    """
    Strikes travelled as one block.

    A nibble run (shared line id) or a cluster keeps its members together;
    only its direction may change. A single strike is a unit of one.
    """
    ops: List[PunchOp]
    key: str = ""

    @property
    def start(self) -> Point:
        return self.ops[0].point

    @property
    def end(self) -> Point:
        return self.ops[-1].point

    @property
    def centroid(self) -> Point:
        n = len(self.ops)
        return Point(sum(op.x for op in self.ops) / n, sum(op.y for op in self.ops) / n)

    @property
    def rotation(self) -> float:
        return self.ops[0].rotation

    @property
    def is_singleton(self) -> bool:
        return len(self.ops) == 1

    def reversed(self) -> 'WorkUnit':
        return replace(self, ops=list(reversed(self.ops)))


@dataclass
class ToolGroup:
    """Strikes of one tool, in the order they will be punched"""
    tool_id: str
    ops: List[PunchOp] = field(default_factory=list)
    rank: int = 0
    station_number: int = 0
    mt_index: int = 0
    first_seen: int = 0
    is_contour: bool = False

    @property
    def order_key(self):
        return (self.rank, self.station_number, self.mt_index, self.first_seen)
