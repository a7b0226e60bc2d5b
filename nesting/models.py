"""
Nesting Models
==============
Stock sheets, nesting settings, pack items and packed-sheet results.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

from config.settings import NESTING_GRID_STEP
from core.exceptions import InvalidFieldValueError
from core.models import parse_enum, require_fields


class SheetUtilizationStrategy(Enum):
    FIRST_ONLY = "first-only"
    LISTED_ORDER = "listed-order"
    SELECTED_ONLY = "selected-only"
    SMALLEST_FIRST = "smallest-first"
    BEST_FIT = "best-fit"
    AUTO_CALCULATION = "auto-calculation"


@dataclass
class SheetStock:
    """Raw sheet; quantity is advisory and never decremented here"""
    id: str
    width: float
    height: float
    quantity: int = 1
    material: str = ""
    thickness: float = 0.0
    use_in_nesting: bool = True
    cost: float = 0.0

    @property
    def area(self) -> float:
        return self.width * self.height

    def to_dict(self) -> Dict:
        return {
            'id': self.id,
            'width': self.width,
            'height': self.height,
            'quantity': self.quantity,
            'material': self.material,
            'thickness': self.thickness,
            'use_in_nesting': self.use_in_nesting,
            'cost': self.cost,
        }

    @classmethod
    def from_dict(cls, data: Dict) -> 'SheetStock':
        require_fields(data, 'SheetStock', 'id', 'width', 'height')
        return cls(
            id=str(data['id']),
            width=float(data['width']),
            height=float(data['height']),
            quantity=int(data.get('quantity', 1)),
            material=data.get('material', ''),
            thickness=float(data.get('thickness', 0.0)),
            use_in_nesting=bool(data.get('use_in_nesting', True)),
            cost=float(data.get('cost', 0.0))
        )


@dataclass
class NestingSettings:
    """Sheet supply, margins, spacing and packing strategy"""
    available_sheets: List[SheetStock] = field(default_factory=list)
    part_spacing_x: float = 5.0
    part_spacing_y: float = 5.0
    sheet_margin_top: float = 10.0
    sheet_margin_bottom: float = 10.0
    sheet_margin_left: float = 10.0
    sheet_margin_right: float = 10.0
    clamp_positions: List[float] = field(default_factory=list)
    utilization_strategy: SheetUtilizationStrategy = SheetUtilizationStrategy.LISTED_ORDER
    use_common_line: bool = False
    nest_as_rectangle: bool = False
    grid_step: float = NESTING_GRID_STEP
    group_identical_sheets: bool = False

    @property
    def spacing(self) -> float:
        """Clearance used by the irregular packer"""
        return max(self.part_spacing_x, self.part_spacing_y)

    def effective_size(self, sheet: SheetStock):
        """Packing area (width, height) inside the margins"""
        return (sheet.width - self.sheet_margin_left - self.sheet_margin_right,
                sheet.height - self.sheet_margin_top - self.sheet_margin_bottom)

    def validate(self) -> None:
        """
        Raises:
            InvalidFieldValueError: Negative spacing/margins, bad step, bad sheets
        """
        for name in ('part_spacing_x', 'part_spacing_y', 'sheet_margin_top',
                     'sheet_margin_bottom', 'sheet_margin_left', 'sheet_margin_right'):
            value = getattr(self, name)
            if value < 0:
                raise InvalidFieldValueError(name, value, "must be >= 0")
        if self.grid_step <= 0:
            raise InvalidFieldValueError('grid_step', self.grid_step, "must be > 0")
        for sheet in self.available_sheets:
            if sheet.width <= 0 or sheet.height <= 0:
                raise InvalidFieldValueError('sheet', sheet.id, "size must be > 0")
            if sheet.quantity < 0:
                raise InvalidFieldValueError('quantity', sheet.quantity,
                                             f"sheet {sheet.id} quantity must be >= 0")
            w, h = self.effective_size(sheet)
            if w <= 0 or h <= 0:
                raise InvalidFieldValueError('sheet_margin', sheet.id,
                                             "margins consume the whole sheet")

    def to_dict(self) -> Dict:
        return {
            'available_sheets': [s.to_dict() for s in self.available_sheets],
            'part_spacing_x': self.part_spacing_x,
            'part_spacing_y': self.part_spacing_y,
            'sheet_margin_top': self.sheet_margin_top,
            'sheet_margin_bottom': self.sheet_margin_bottom,
            'sheet_margin_left': self.sheet_margin_left,
            'sheet_margin_right': self.sheet_margin_right,
            'clamp_positions': list(self.clamp_positions),
            'utilization_strategy': self.utilization_strategy.value,
            'use_common_line': self.use_common_line,
            'nest_as_rectangle': self.nest_as_rectangle,
            'grid_step': self.grid_step,
            'group_identical_sheets': self.group_identical_sheets,
        }

    @classmethod
    def from_dict(cls, data: Dict) -> 'NestingSettings':
        defaults = cls()
        return cls(
            available_sheets=[SheetStock.from_dict(s) for s in data.get('available_sheets', [])],
            part_spacing_x=float(data.get('part_spacing_x', defaults.part_spacing_x)),
            part_spacing_y=float(data.get('part_spacing_y', defaults.part_spacing_y)),
            sheet_margin_top=float(data.get('sheet_margin_top', defaults.sheet_margin_top)),
            sheet_margin_bottom=float(data.get('sheet_margin_bottom', defaults.sheet_margin_bottom)),
            sheet_margin_left=float(data.get('sheet_margin_left', defaults.sheet_margin_left)),
            sheet_margin_right=float(data.get('sheet_margin_right', defaults.sheet_margin_right)),
            clamp_positions=[float(c) for c in data.get('clamp_positions', [])],
            utilization_strategy=parse_enum(
                SheetUtilizationStrategy,
                data.get('utilization_strategy', defaults.utilization_strategy.value),
                'utilization_strategy'
            ),
            use_common_line=bool(data.get('use_common_line', False)),
            nest_as_rectangle=bool(data.get('nest_as_rectangle', False)),
            grid_step=float(data.get('grid_step', defaults.grid_step)),
            group_identical_sheets=bool(data.get('group_identical_sheets', False))
        )


# ============================================================
# Packing
# ============================================================

@dataclass
class PackItem:
    """One part instance waiting to be packed (extents at rotation 0)"""
    uid: str
    part_id: str
    name: str
    width: float
    height: float
    offset_x: float
    offset_y: float
    allowed_rotations: List[float]
    has_common_line: bool = False
    preferred_rotation: Optional[float] = None

    @property
    def area(self) -> float:
        return self.width * self.height

    @property
    def aspect_ratio(self) -> float:
        return self.width / self.height if self.height else 0.0


@dataclass
class Placement:
    """
    Packer result, relative to the packing area.

    (x, y) is the lower-left corner of the rotated extents; the part origin
    sits at (x + ox, y + oy).
    """
    x: float
    y: float
    rotation: float
    ox: float
    oy: float
    width: float
    height: float

    @property
    def origin(self):
        return self.x + self.ox, self.y + self.oy


# ============================================================
# Results
# ============================================================

@dataclass
class PlacedPart:
    """Part instance on a sheet; (x, y) is the part origin in sheet coordinates"""
    id: str
    part_id: str
    x: float
    y: float
    rotation: float = 0.0

    def to_dict(self) -> Dict:
        return {
            'id': self.id,
            'part_id': self.part_id,
            'x': self.x,
            'y': self.y,
            'rotation': self.rotation,
        }

    @classmethod
    def from_dict(cls, data: Dict) -> 'PlacedPart':
        return cls(
            id=str(data['id']),
            part_id=str(data['part_id']),
            x=float(data.get('x', 0.0)),
            y=float(data.get('y', 0.0)),
            rotation=float(data.get('rotation', 0.0))
        )


@dataclass
class NestResultSheet:
    """Packed sheet layout"""
    id: str
    sheet_name: str
    stock_sheet_id: str
    width: float
    height: float
    material: str = ""
    thickness: float = 0.0
    placed_parts: List[PlacedPart] = field(default_factory=list)
    used_area: float = 0.0
    scrap_percentage: float = 100.0
    part_count: int = 0
    quantity: int = 1

    def layout_signature(self):
        """Identity of the layout, used to group identical sheets"""
        return (self.stock_sheet_id, tuple(
            (p.part_id, round(p.x, 6), round(p.y, 6), round(p.rotation, 6))
            for p in self.placed_parts
        ))

    def to_dict(self) -> Dict:
        return {
            'id': self.id,
            'sheet_name': self.sheet_name,
            'stock_sheet_id': self.stock_sheet_id,
            'width': self.width,
            'height': self.height,
            'material': self.material,
            'thickness': self.thickness,
            'placed_parts': [p.to_dict() for p in self.placed_parts],
            'used_area': self.used_area,
            'scrap_percentage': self.scrap_percentage,
            'part_count': self.part_count,
            'quantity': self.quantity,
        }

    @classmethod
    def from_dict(cls, data: Dict) -> 'NestResultSheet':
        placed = [PlacedPart.from_dict(p) for p in data.get('placed_parts', [])]
        return cls(
            id=str(data['id']),
            sheet_name=data.get('sheet_name', str(data['id'])),
            stock_sheet_id=str(data.get('stock_sheet_id', '')),
            width=float(data['width']),
            height=float(data['height']),
            material=data.get('material', ''),
            thickness=float(data.get('thickness', 0.0)),
            placed_parts=placed,
            used_area=float(data.get('used_area', 0.0)),
            scrap_percentage=float(data.get('scrap_percentage', 100.0)),
            part_count=int(data.get('part_count', len(placed))),
            quantity=int(data.get('quantity', 1))
        )


@dataclass
class UnplacedItem:
    uid: str
    part_id: str
    name: str
    reason: str

    def to_dict(self) -> Dict:
        return {'uid': self.uid, 'part_id': self.part_id, 'name': self.name,
                'reason': self.reason}


@dataclass
class NestingProgress:
    """Intermediate snapshot: sheets completed so far, 0-100 progress, status"""
    sheets: List[NestResultSheet]
    progress: float
    status: str
    unplaced: List[UnplacedItem] = field(default_factory=list)


@dataclass
class NestingRun:
    """Final result of a nesting run"""
    sheets: List[NestResultSheet] = field(default_factory=list)
    unplaced: List[UnplacedItem] = field(default_factory=list)
    progress: float = 0.0
    cancelled: bool = False

    @property
    def total_parts(self) -> int:
        return sum(s.part_count * s.quantity for s in self.sheets)

    def to_dict(self) -> Dict:
        return {
            'sheets': [s.to_dict() for s in self.sheets],
            'unplaced': [u.to_dict() for u in self.unplaced],
            'progress': self.progress,
            'cancelled': self.cancelled,
        }
