"""
Complex Packer
==============
Irregular first-fit packer. Candidate origins are scanned on a fixed grid
(X outer, rotation middle, Y inner) and each candidate is tested against
every placed part with the exact outline collision query, using the larger
of the X/Y spacings as clearance.
"""

import logging
import math
from typing import Dict, Optional

from core.geometry import SegmentCache, do_parts_intersect, get_rotated_extents
from ..models import PackItem, Placement
from ..scoring import rotation_candidates
from .base import NestingPacker, PositionSearch

logger = logging.getLogger(__name__)

EPS = 1e-9


class ComplexPacker(NestingPacker):

    def __init__(self, sheet_w: float, sheet_h: float, spacing_x: float, spacing_y: float,
                 parts: Dict, tools: Dict, grid_step: float = 5.0, yield_every: float = 50.0):
        super().__init__(sheet_w, sheet_h)
        self.spacing = max(spacing_x, spacing_y)
        self.parts = parts
        self.tools = tools
        self.grid_step = grid_step
        self.yield_every = yield_every
        self._segment_cache: SegmentCache = {}

    def _collides(self, part, origin, rotation: float) -> bool:
        for placed_item, placed in self._placed:
            placed_part = self.parts.get(placed_item.part_id)
            if placed_part is None:
                continue
            if do_parts_intersect(part, origin, rotation,
                                  placed_part, placed.origin, placed.rotation,
                                  self.spacing, self._segment_cache):
                return True
        return False

    def iter_find_position(self, item: PackItem) -> PositionSearch:
        """
        Scan for the first collision-free position.

        Yields the current X every `yield_every` units of X scanned; returns
        the Placement or None.
        """
        part = self.parts.get(item.part_id)
        if part is None:
            logger.warning(f"Part definition not found for {item.uid}")
            return None

        step = self.grid_step
        rotations = rotation_candidates(item)
        extents = {rot: get_rotated_extents(part, rot, self.tools) for rot in rotations}
        columns_per_yield = max(1, int(round(self.yield_every / step)))
        n_columns = int(math.floor((self.sheet_w - step) / step + EPS))

        for i in range(n_columns + 1):
            x = i * step
            if i % columns_per_yield == 0:
                yield x

            for rot in rotations:
                ext = extents[rot]
                if x + ext.width > self.sheet_w + EPS:
                    continue

                n_rows = int(math.floor((self.sheet_h - ext.height) / step + EPS))
                for j in range(n_rows + 1):
                    y = j * step
                    origin = (x + ext.ox, y + ext.oy)
                    if not self._collides(part, origin, rot):
                        return Placement(x=x, y=y, rotation=rot, ox=ext.ox, oy=ext.oy,
                                         width=ext.width, height=ext.height)

        return None

    def place_item(self, item: PackItem, placement: Placement) -> None:
        self._placed.append((item, placement))
        logger.debug(f"Placed {item.uid} at ({placement.x:.1f}, {placement.y:.1f}) "
                     f"rot {placement.rotation:.0f}")
