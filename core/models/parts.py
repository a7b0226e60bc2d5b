"""
Part Models
===========
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from ..geometry.entities import PartGeometry
from .tools import PlacedTool, require_fields


@dataclass
class NestingConstraints:
    """Rotation and common-line permissions of a part"""
    allow_0_180: bool = True
    allow_90_270: bool = True
    initial_rotation: float = 0.0
    common_line: bool = False

    def allowed_rotations(self) -> List[float]:
        """Allowed placement rotations: 0, 180 with allow_0_180, 90/270 with allow_90_270"""
        rotations = [0.0]
        if self.allow_0_180:
            rotations.append(180.0)
        if self.allow_90_270:
            rotations.extend([90.0, 270.0])
        return rotations

    def to_dict(self) -> Dict:
        return {
            'allow_0_180': self.allow_0_180,
            'allow_90_270': self.allow_90_270,
            'initial_rotation': self.initial_rotation,
            'common_line': self.common_line,
        }

    @classmethod
    def from_dict(cls, data: Dict) -> 'NestingConstraints':
        return cls(
            allow_0_180=bool(data.get('allow_0_180', True)),
            allow_90_270=bool(data.get('allow_90_270', True)),
            initial_rotation=float(data.get('initial_rotation', 0.0)),
            common_line=bool(data.get('common_line', False))
        )


@dataclass
class Part:
    """Manufacturable flat part with its strike list"""
    id: str
    name: str
    geometry: PartGeometry
    punches: List[PlacedTool] = field(default_factory=list)
    nesting: NestingConstraints = field(default_factory=NestingConstraints)

    def to_dict(self) -> Dict:
        return {
            'id': self.id,
            'name': self.name,
            'geometry': self.geometry.to_dict(),
            'punches': [p.to_dict() for p in self.punches],
            'nesting': self.nesting.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Dict) -> 'Part':
        require_fields(data, 'Part', 'id')
        if 'geometry' in data:
            geometry = PartGeometry.from_dict(data['geometry'])
        else:
            require_fields(data, 'Part', 'width', 'height')
            geometry = PartGeometry.rectangle(float(data['width']), float(data['height']))
        return cls(
            id=str(data['id']),
            name=data.get('name', str(data['id'])),
            geometry=geometry,
            punches=[PlacedTool.from_dict(p) for p in data.get('punches', [])],
            nesting=NestingConstraints.from_dict(data.get('nesting', {}))
        )


@dataclass
class ScheduledPart:
    """Packing request; nesting overrides the part's own constraints when set"""
    part_id: str
    quantity: int = 1
    nesting: Optional[NestingConstraints] = None

    def to_dict(self) -> Dict:
        result = {'part_id': self.part_id, 'quantity': self.quantity}
        if self.nesting is not None:
            result['nesting'] = self.nesting.to_dict()
        return result

    @classmethod
    def from_dict(cls, data: Dict) -> 'ScheduledPart':
        require_fields(data, 'ScheduledPart', 'part_id')
        nesting = data.get('nesting')
        return cls(
            part_id=str(data['part_id']),
            quantity=int(data.get('quantity', 1)),
            nesting=NestingConstraints.from_dict(nesting) if nesting is not None else None
        )


def index_parts(parts) -> Dict[str, Part]:
    """Part lookup by id from a mapping or a list"""
    if parts is None:
        return {}
    if isinstance(parts, dict):
        return dict(parts)
    return {p.id: p for p in parts}
