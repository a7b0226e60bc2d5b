"""
Stock sheet selection
=====================
Chooses the sheet size opened next. AUTO_CALCULATION trial-packs the
remaining items' padded bounding boxes on every eligible sheet with rectpack
and keeps the sheet that takes the most item area.
"""

import logging
from typing import List, Optional

import rectpack

from core.exceptions import NoStockSheetError
from .models import NestingSettings, PackItem, SheetStock, SheetUtilizationStrategy

logger = logging.getLogger(__name__)

SCALE = 20  # 0.05 mm precision for the integer rectpack packer


def eligible_sheets(settings: NestingSettings) -> List[SheetStock]:
    """Sheets marked for nesting with stock left, in listed order"""
    return [s for s in settings.available_sheets if s.use_in_nesting and s.quantity > 0]


def trial_pack_area(sheet: SheetStock, items: List[PackItem],
                    settings: NestingSettings) -> float:
    """
    Item area rectpack manages to fit on one sheet.

    Args:
        sheet: Candidate stock sheet
        items: Remaining pack items
        settings: Margins and spacing

    Returns:
        Sum of the packed items' extents area
    """
    eff_w, eff_h = settings.effective_size(sheet)
    if eff_w <= 0 or eff_h <= 0 or not items:
        return 0.0

    packer = rectpack.newPacker(
        mode=rectpack.PackingMode.Offline,
        pack_algo=rectpack.MaxRectsBssf,
        rotation=True,
        sort_algo=rectpack.SORT_AREA
    )
    # Spacing is added on every item and the bin, so edge items get no padding
    packer.add_bin(int((eff_w + settings.part_spacing_x) * SCALE),
                   int((eff_h + settings.part_spacing_y) * SCALE))
    for i, item in enumerate(items):
        packer.add_rect(int(round((item.width + settings.part_spacing_x) * SCALE)),
                        int(round((item.height + settings.part_spacing_y) * SCALE)),
                        rid=i)
    packer.pack()

    return sum(items[rect[5]].area for rect in packer.rect_list())


def select_stock_sheet(settings: NestingSettings,
                       items: Optional[List[PackItem]] = None,
                       required: bool = False) -> Optional[SheetStock]:
    """
    Pick the next stock sheet according to the utilization strategy.

    Args:
        settings: Nesting settings with the sheet supply
        items: Remaining items (used by AUTO_CALCULATION)
        required: Raise instead of returning None

    Returns:
        SheetStock or None when no sheet is eligible

    Raises:
        NoStockSheetError: required=True and no sheet is eligible
    """
    sheets = eligible_sheets(settings)
    strategy = settings.utilization_strategy

    if not sheets:
        if required:
            raise NoStockSheetError(strategy.value)
        return None

    if strategy == SheetUtilizationStrategy.SMALLEST_FIRST:
        return sorted(sheets, key=lambda s: s.area)[0]

    if strategy == SheetUtilizationStrategy.AUTO_CALCULATION and items:
        best = sheets[0]
        best_area = -1.0
        for sheet in sheets:
            area = trial_pack_area(sheet, items, settings)
            logger.debug(f"Auto calculation: {sheet.id} packs {area:.0f} mm2")
            if area > best_area:
                best_area = area
                best = sheet
        return best

    # FIRST_ONLY, LISTED_ORDER, SELECTED_ONLY and BEST_FIT (first eligible sheet)
    return sheets[0]
