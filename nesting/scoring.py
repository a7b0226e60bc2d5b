"""
Pack item preparation
=====================
Expands scheduled quantities into individual pack items, largest first.
"""

import logging
from typing import List

from core.geometry import get_rotated_extents
from core.models import ScheduledPart, index_parts, index_tools
from .models import PackItem

logger = logging.getLogger(__name__)


def prepare_pack_items(scheduled_parts: List[ScheduledPart], parts, tools) -> List[PackItem]:
    """
    Build the packing queue.

    Args:
        scheduled_parts: Packing requests
        parts: Part table (list or dict by id)
        tools: Tool table (list or dict by id)

    Returns:
        Pack items stable-sorted by descending extents area
    """
    part_lookup = index_parts(parts)
    tool_lookup = index_tools(tools)
    items: List[PackItem] = []

    for sp in scheduled_parts:
        part = part_lookup.get(sp.part_id)
        if part is None:
            logger.warning(f"Scheduled part not found: {sp.part_id}")
            continue
        if sp.quantity <= 0:
            continue

        constraints = sp.nesting or part.nesting
        ext0 = get_rotated_extents(part, 0.0, tool_lookup)
        allowed = constraints.allowed_rotations()
        preferred = constraints.initial_rotation % 360.0

        for n in range(1, sp.quantity + 1):
            items.append(PackItem(
                uid=f"{sp.part_id}#{n}",
                part_id=sp.part_id,
                name=part.name,
                width=ext0.width,
                height=ext0.height,
                offset_x=ext0.ox,
                offset_y=ext0.oy,
                allowed_rotations=list(allowed),
                has_common_line=constraints.common_line,
                preferred_rotation=preferred
            ))

    items.sort(key=lambda it: it.area, reverse=True)
    logger.debug(f"Prepared {len(items)} pack items from {len(scheduled_parts)} requests")
    return items


def rotation_candidates(item: PackItem) -> List[float]:
    """Preferred rotation first (when allowed), then the remaining allowed rotations"""
    result = list(item.allowed_rotations)
    if item.preferred_rotation is not None and item.preferred_rotation in result:
        result.remove(item.preferred_rotation)
        result.insert(0, item.preferred_rotation)
    return result
