"""
Nesting Engine - Multi-sheet packing with progress streaming
============================================================
Packs the item queue sheet by sheet. Progress is exposed as a generator of
NestingProgress snapshots: one per placed item, one per completed sheet and
periodic heartbeats while the irregular packer scans. The caller may stop
consuming at any time; the generator holds no resources.

NestingEngine wraps the generator with a stop flag and a progress callback
for hosts that prefer a blocking call.
"""

import logging
import threading
import time
from typing import Callable, Dict, Generator, List, Optional

from config.settings import NESTING_YIELD_EVERY
from core.events import EventType, publish_event
from core.models import ScheduledPart, index_parts, index_tools
from .models import (
    NestingSettings, NestResultSheet, NestingProgress, NestingRun,
    PackItem, PlacedPart, SheetStock, UnplacedItem,
)
from .packers import NestingPacker, RectanglePacker, ComplexPacker
from .scoring import prepare_pack_items
from .stock import eligible_sheets, select_stock_sheet

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[NestingProgress], None]


def create_packer(stock: SheetStock, settings: NestingSettings,
                  parts: Dict, tools: Dict) -> NestingPacker:
    """Packer for the packing area of one stock sheet"""
    eff_w, eff_h = settings.effective_size(stock)
    if settings.nest_as_rectangle:
        return RectanglePacker(eff_w, eff_h, settings.part_spacing_x, settings.part_spacing_y,
                               settings.use_common_line, parts, tools)
    return ComplexPacker(eff_w, eff_h, settings.part_spacing_x, settings.part_spacing_y,
                         parts, tools, grid_step=settings.grid_step,
                         yield_every=NESTING_YIELD_EVERY)


def _fill_sheet(packer: NestingPacker, items: List[PackItem]):
    """
    Try every item on one sheet.

    Yields heartbeats (float) while scanning and each placed PackItem;
    returns the packer.
    """
    for item in items:
        placement = yield from packer.iter_find_position(item)
        if placement is not None:
            packer.place_item(item, placement)
            yield item
    return packer


def build_result_sheet(stock: SheetStock, packer: NestingPacker, settings: NestingSettings,
                       sheet_no: int) -> NestResultSheet:
    """Sheet record from a filled packer; positions become sheet coordinates of part origins."""
    sheet_id = f"sheet-{sheet_no}"
    placed_items = packer.placed_items
    used_area = sum(item.area for item, _ in placed_items)
    used_pct = used_area / stock.area * 100.0 if stock.area > 0 else 0.0

    placed_parts = [
        PlacedPart(
            id=f"{sheet_id}-p{k}",
            part_id=item.part_id,
            x=placement.x + settings.sheet_margin_left + placement.ox,
            y=placement.y + settings.sheet_margin_bottom + placement.oy,
            rotation=placement.rotation
        )
        for k, (item, placement) in enumerate(placed_items, start=1)
    ]

    return NestResultSheet(
        id=sheet_id,
        sheet_name=f"Sheet {sheet_no}",
        stock_sheet_id=stock.id,
        width=stock.width,
        height=stock.height,
        material=stock.material,
        thickness=stock.thickness,
        placed_parts=placed_parts,
        used_area=used_pct,
        scrap_percentage=100.0 - used_pct,
        part_count=len(placed_parts),
        quantity=1
    )


def nesting_generator(scheduled_parts: List[ScheduledPart], parts, tools,
                      settings: NestingSettings) -> Generator[NestingProgress, None, None]:
    """
    Pack scheduled parts onto stock sheets.

    Args:
        scheduled_parts: Packing requests
        parts: Part table (list or dict by id)
        tools: Tool table (list or dict by id)
        settings: Nesting settings

    Yields:
        NestingProgress snapshots; the last one carries the final sheets and
        the unplaced items with status "Finished"
    """
    part_lookup = index_parts(parts)
    tool_lookup = index_tools(tools)

    items = prepare_pack_items(scheduled_parts, part_lookup, tool_lookup)
    total = len(items)
    packed_count = 0
    completed: List[NestResultSheet] = []
    unplaced: List[UnplacedItem] = []
    remaining = list(items)
    sheet_no = 0

    def percent() -> float:
        return packed_count / total * 100.0 if total else 100.0

    def snapshot(status: str) -> NestingProgress:
        return NestingProgress(sheets=list(completed), progress=percent(),
                               status=status, unplaced=list(unplaced))

    def skip(item: PackItem, reason: str) -> None:
        unplaced.append(UnplacedItem(item.uid, item.part_id, item.name, reason))
        publish_event(EventType.NESTING_ITEM_SKIPPED,
                      {'uid': item.uid, 'part_id': item.part_id, 'reason': reason},
                      source=__name__)

    start_time = time.time()
    logger.info(f"Nesting started: {total} items, strategy "
                f"{settings.utilization_strategy.value}, "
                f"{'rectangle' if settings.nest_as_rectangle else 'irregular'} packer")
    publish_event(EventType.NESTING_STARTED,
                  {'items': total, 'strategy': settings.utilization_strategy.value},
                  source=__name__)

    while remaining:
        stock = select_stock_sheet(settings, remaining)
        if stock is None:
            logger.warning(f"No stock sheet available, {len(remaining)} items left unplaced")
            for item in remaining:
                skip(item, "no stock sheet available")
            remaining = []
            break

        # Selected sheet first, then the other eligible sheets in listed order
        candidates = [stock] + [s for s in eligible_sheets(settings) if s is not stock]
        packer = None
        for candidate in candidates:
            packer = create_packer(candidate, settings, part_lookup, tool_lookup)
            search = _fill_sheet(packer, remaining)
            while True:
                try:
                    event = next(search)
                except StopIteration:
                    break
                if isinstance(event, PackItem):
                    packed_count += 1
                    yield snapshot(f"Placing: {event.name}")
                else:
                    yield snapshot(f"Scanning {candidate.id}: x={event:.0f}")
            if packer.placed_items:
                stock = candidate
                break
            logger.debug(f"Nothing fits on stock sheet {candidate.id}")

        if packer is None or not packer.placed_items:
            for item in remaining:
                logger.warning(f"Item does not fit any stock sheet: {item.uid} "
                               f"({item.width:.1f}x{item.height:.1f})")
                skip(item, "does not fit any stock sheet")
            remaining = []
            break

        packed_uids = {item.uid for item, _ in packer.placed_items}
        remaining = [it for it in remaining if it.uid not in packed_uids]

        sheet_no += 1
        sheet = build_result_sheet(stock, packer, settings, sheet_no)

        if (settings.group_identical_sheets and completed and
                completed[-1].layout_signature() == sheet.layout_signature()):
            completed[-1].quantity += 1
            sheet_no -= 1
            logger.debug(f"Sheet repeats {completed[-1].id}, quantity {completed[-1].quantity}")
        else:
            completed.append(sheet)

        logger.info(f"Sheet #{len(completed)} ready: {sheet.part_count} parts, "
                    f"{sheet.used_area:.1f}% used")
        publish_event(EventType.NESTING_SHEET_COMPLETED,
                      {'sheet_id': completed[-1].id, 'parts': sheet.part_count,
                       'used_area': sheet.used_area, 'quantity': completed[-1].quantity},
                      source=__name__)
        yield snapshot(f"Sheet #{len(completed)} ready")

    elapsed = time.time() - start_time
    logger.info(f"Nesting finished in {elapsed:.1f}s: {len(completed)} sheets, "
                f"{packed_count}/{total} placed, {len(unplaced)} unplaced")
    publish_event(EventType.NESTING_FINISHED,
                  {'sheets': len(completed), 'placed': packed_count,
                   'unplaced': len(unplaced)},
                  source=__name__)
    yield snapshot("Finished")


class NestingEngine:
    """
    Blocking nesting runner.

    Usage:
        engine = NestingEngine(parts, tools, settings)
        run = engine.run(scheduled, callback=lambda p: print(p.progress))
    """

    def __init__(self, parts, tools, settings: NestingSettings):
        self.parts = index_parts(parts)
        self.tools = index_tools(tools)
        self.settings = settings
        self.result: Optional[NestingRun] = None

        self.stop_flag = threading.Event()

    def run(self, scheduled_parts: List[ScheduledPart],
            callback: Optional[ProgressCallback] = None) -> NestingRun:
        """
        Run nesting to completion or until stop() is called.

        Args:
            scheduled_parts: Packing requests
            callback: Called with every progress snapshot

        Returns:
            NestingRun with the sheets completed so far
        """
        self.settings.validate()
        self.stop_flag.clear()

        run = NestingRun()
        progress = nesting_generator(scheduled_parts, self.parts, self.tools, self.settings)
        try:
            for snap in progress:
                run.sheets = snap.sheets
                run.unplaced = snap.unplaced
                run.progress = snap.progress
                if callback:
                    callback(snap)
                if self.stop_flag.is_set():
                    run.cancelled = True
                    logger.info("Nesting stopped")
                    break
        finally:
            progress.close()

        self.result = run
        return run

    def stop(self) -> None:
        """Stop nesting after the next snapshot"""
        self.stop_flag.set()


def run_nesting(scheduled_parts: List[ScheduledPart], parts, tools,
                settings: NestingSettings) -> NestingRun:
    """Run nesting without progress reporting"""
    return NestingEngine(parts, tools, settings).run(scheduled_parts)
