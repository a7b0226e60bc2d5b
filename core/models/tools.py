"""
Tool Models - Punch dies and strikes
====================================
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, List, Optional, Tuple, Union, Mapping

from ..exceptions import ConfigurationError, RequiredFieldError


class ToolShape(Enum):
    CIRCLE = "circle"
    SQUARE = "square"
    RECTANGLE = "rectangle"
    OBLONG = "oblong"
    SPECIAL = "special"


class PunchType(Enum):
    """Punch-type priority class, in tool-change order"""
    STARTING = "starting"
    GENERAL = "general"
    CONTOUR = "contour"
    FINISHING = "finishing"

    @property
    def rank(self) -> int:
        return _PUNCH_TYPE_RANK[self]


_PUNCH_TYPE_RANK = {
    PunchType.STARTING: 0,
    PunchType.GENERAL: 1,
    PunchType.CONTOUR: 2,
    PunchType.FINISHING: 3,
}

# Rank given to strikes whose tool is not in the tool table
UNKNOWN_TOOL_RANK = len(_PUNCH_TYPE_RANK)


def parse_enum(enum_cls, value, field_name: str = None):
    """
    Parse an enum from its value or name.

    Raises:
        ConfigurationError: Unknown literal
    """
    if isinstance(value, enum_cls):
        return value
    for member in enum_cls:
        if value == member.value or str(value).upper().replace('-', '_') == member.name:
            return member
    raise ConfigurationError(
        f"Unknown {field_name or enum_cls.__name__} value: {value!r}"
    )


def require_fields(data: Dict, entity_type: str, *fields: str) -> None:
    """Raise RequiredFieldError for the first field missing from a record"""
    for name in fields:
        if data.get(name) is None:
            raise RequiredFieldError(name, entity_type)


@dataclass
class Tool:
    """
    Punch die.

    width/height are the die dimensions along its local X/Y axes; circles
    use width as the diameter. custom_outline holds SPECIAL die vertices
    relative to the die centre.
    """
    id: str
    name: str
    shape: ToolShape
    width: float
    height: float = 0.0
    punch_type: PunchType = PunchType.GENERAL
    station_number: int = 0
    mt_index: int = 0
    default_rotation: float = 0.0
    custom_outline: List[Tuple[float, float]] = field(default_factory=list)

    @property
    def station_code(self) -> int:
        """T code: multi-tool sub-slots map to 20 + index"""
        if self.mt_index and self.mt_index > 0:
            return 20 + self.mt_index
        return self.station_number

    @property
    def symmetry_period(self) -> float:
        """Rotation period in degrees (0 = rotation-invariant)"""
        if self.shape == ToolShape.CIRCLE:
            return 0.0
        if self.shape == ToolShape.SQUARE:
            return 90.0
        if self.shape in (ToolShape.RECTANGLE, ToolShape.OBLONG):
            return 180.0
        if self.shape == ToolShape.SPECIAL:
            return 360.0
        raise TypeError(f"Unsupported tool shape: {self.shape}")

    @property
    def footprint(self) -> Tuple[float, float]:
        """Unrotated (width, height); circles and squares are width x width"""
        if self.shape in (ToolShape.CIRCLE, ToolShape.SQUARE):
            return self.width, self.width
        return self.width, self.height

    def to_dict(self) -> Dict:
        return {
            'id': self.id,
            'name': self.name,
            'shape': self.shape.value,
            'width': self.width,
            'height': self.height,
            'punch_type': self.punch_type.value,
            'station_number': self.station_number,
            'mt_index': self.mt_index,
            'default_rotation': self.default_rotation,
            'custom_outline': [list(p) for p in self.custom_outline],
        }

    @classmethod
    def from_dict(cls, data: Dict) -> 'Tool':
        require_fields(data, 'Tool', 'id')
        return cls(
            id=str(data['id']),
            name=data.get('name', str(data['id'])),
            shape=parse_enum(ToolShape, data.get('shape', 'circle'), 'shape'),
            width=float(data.get('width', 0.0)),
            height=float(data.get('height', data.get('width', 0.0))),
            punch_type=parse_enum(PunchType, data.get('punch_type', 'general'), 'punch_type'),
            station_number=int(data.get('station_number', 0)),
            mt_index=int(data.get('mt_index', 0)),
            default_rotation=float(data.get('default_rotation', 0.0)),
            custom_outline=[(float(p[0]), float(p[1])) for p in data.get('custom_outline', [])]
        )


@dataclass
class PlacedTool:
    """One strike on a part, in the part's normalized frame"""
    id: str
    tool_id: str
    x: float
    y: float
    rotation: float = 0.0
    line_id: Optional[str] = None

    def to_dict(self) -> Dict:
        result = {
            'id': self.id,
            'tool_id': self.tool_id,
            'x': self.x,
            'y': self.y,
            'rotation': self.rotation,
        }
        if self.line_id is not None:
            result['line_id'] = self.line_id
        return result

    @classmethod
    def from_dict(cls, data: Dict) -> 'PlacedTool':
        require_fields(data, 'PlacedTool', 'id', 'tool_id')
        return cls(
            id=str(data['id']),
            tool_id=str(data['tool_id']),
            x=float(data.get('x', 0.0)),
            y=float(data.get('y', 0.0)),
            rotation=float(data.get('rotation', 0.0)),
            line_id=data.get('line_id')
        )


ToolTable = Union[Mapping[str, Tool], Iterable[Tool]]


def index_tools(tools: Optional[ToolTable]) -> Dict[str, Tool]:
    """Tool lookup by id from a mapping or a list"""
    if tools is None:
        return {}
    if isinstance(tools, Mapping):
        return dict(tools)
    return {t.id: t for t in tools}
