"""
Rectangle Packer
================
Free-rectangle packer (MaxRects-style guillotine split) working on the items'
rotated extents. Scoring is best short-side fit: the smaller leftover
dimension of the free rectangle.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional

from core.geometry import get_rotated_extents
from ..models import PackItem, Placement
from .base import NestingPacker

logger = logging.getLogger(__name__)

# Free rectangles this thin are dropped
MIN_FREE_SIZE = 1.0


@dataclass
class FreeRect:
    x: float
    y: float
    w: float
    h: float

    def intersects(self, other: 'FreeRect') -> bool:
        return (self.x < other.x + other.w and self.x + self.w > other.x and
                self.y < other.y + other.h and self.y + self.h > other.y)


class RectanglePacker(NestingPacker):
    """
    Packs items as rectangles.

    Spacing is added on the left/bottom side of an item except where it
    touches the packing-area origin; with common-line cutting enabled and
    a common-line eligible item, no spacing is added at all.
    """

    def __init__(self, sheet_w: float, sheet_h: float, spacing_x: float, spacing_y: float,
                 use_common_line: bool, parts: Dict, tools: Dict):
        super().__init__(sheet_w, sheet_h)
        self.spacing_x = spacing_x
        self.spacing_y = spacing_y
        self.use_common_line = use_common_line
        self.parts = parts
        self.tools = tools
        self.free_rects: List[FreeRect] = [FreeRect(0.0, 0.0, sheet_w, sheet_h)]

    def _padding(self, rect: FreeRect, item: PackItem):
        if self.use_common_line and item.has_common_line:
            return 0.0, 0.0
        sx = 0.0 if rect.x == 0 else self.spacing_x
        sy = 0.0 if rect.y == 0 else self.spacing_y
        return sx, sy

    def find_position(self, item: PackItem) -> Optional[Placement]:
        rotations = [0.0]
        if 90.0 in item.allowed_rotations or 270.0 in item.allowed_rotations:
            rotations.append(90.0)

        best_score = float('inf')
        best = None

        for rect in self.free_rects:
            for rot in rotations:
                cur_w, cur_h = (item.height, item.width) if rot == 90.0 else (item.width, item.height)
                sx, sy = self._padding(rect, item)
                eff_w = cur_w + sx
                eff_h = cur_h + sy

                if eff_w <= rect.w and eff_h <= rect.h:
                    score = min(rect.w - eff_w, rect.h - eff_h)
                    if score < best_score:
                        best_score = score
                        best = (rect, rot, sx, sy)

        if best is None:
            return None

        rect, rot, sx, sy = best
        part = self.parts.get(item.part_id)
        if part is not None:
            ext = get_rotated_extents(part, rot, self.tools)
            ox, oy, width, height = ext.ox, ext.oy, ext.width, ext.height
        else:
            ox, oy = 0.0, 0.0
            width, height = (item.height, item.width) if rot == 90.0 else (item.width, item.height)

        return Placement(
            x=rect.x + sx,
            y=rect.y + sy,
            rotation=rot,
            ox=ox,
            oy=oy,
            width=width,
            height=height
        )

    def place_item(self, item: PackItem, placement: Placement) -> None:
        self._placed.append((item, placement))
        used = FreeRect(placement.x, placement.y, placement.width, placement.height)

        next_free: List[FreeRect] = []
        for f in self.free_rects:
            if not f.intersects(used):
                next_free.append(f)
                continue
            if used.x > f.x:
                next_free.append(FreeRect(f.x, f.y, used.x - f.x, f.h))
            if used.x + used.w < f.x + f.w:
                next_free.append(FreeRect(used.x + used.w, f.y, (f.x + f.w) - (used.x + used.w), f.h))
            if used.y > f.y:
                next_free.append(FreeRect(f.x, f.y, f.w, used.y - f.y))
            if used.y + used.h < f.y + f.h:
                next_free.append(FreeRect(f.x, used.y + used.h, f.w, (f.y + f.h) - (used.y + used.h)))

        self.free_rects = [r for r in next_free if r.w > MIN_FREE_SIZE and r.h > MIN_FREE_SIZE]
        logger.debug(f"Placed {item.uid} at ({placement.x:.1f}, {placement.y:.1f}) "
                     f"rot {placement.rotation:.0f}, {len(self.free_rects)} free rects")
