"""
Nesting engine tests: packing results, determinism, spacing, stock selection.
"""

import pytest

from core.events import EventBus, EventType
from core.exceptions import InvalidFieldValueError, NoStockSheetError
from core.models import NestingConstraints, ScheduledPart
from nesting import (
    NestingEngine, PackItem, RectanglePacker, SheetStock, SheetUtilizationStrategy,
    check_sheet_clearance, nesting_generator, parts_outside_sheet, prepare_pack_items,
    rotation_candidates, run_nesting, select_stock_sheet,
)


def _item(uid, width, height):
    return PackItem(uid, uid, uid, width, height, 0.0, 0.0, [0.0, 90.0])


# ============================================================
# Item preparation
# ============================================================

def test_pack_items_have_stable_uids_and_area_order(rect_part):
    parts = [rect_part('SMALL', 50, 50), rect_part('BIG', 200, 100)]
    scheduled = [ScheduledPart('SMALL', 2), ScheduledPart('BIG', 1), ScheduledPart('GHOST', 3)]

    items = prepare_pack_items(scheduled, parts, {})

    assert [it.uid for it in items] == ['BIG#1', 'SMALL#1', 'SMALL#2']
    assert items[0].width == 200 and items[0].height == 100


def test_scheduled_constraints_override_part(rect_part):
    part = rect_part('P', 100, 50)
    scheduled = [ScheduledPart('P', 1, NestingConstraints(allow_90_270=False))]
    items = prepare_pack_items(scheduled, [part], {})
    assert items[0].allowed_rotations == [0.0, 180.0]


def test_rotation_candidates_prefer_allowed_initial_rotation():
    item = _item('A', 10, 10)
    item.allowed_rotations = [0.0, 180.0, 90.0, 270.0]
    item.preferred_rotation = 90.0
    assert rotation_candidates(item) == [90.0, 0.0, 180.0, 270.0]

    item.allowed_rotations = [0.0, 180.0]
    assert rotation_candidates(item) == [0.0, 180.0]


# ============================================================
# Packing
# ============================================================

def test_end_to_end_four_rectangles_on_one_sheet(rect_part, sheet_settings):
    part = rect_part('P', 200, 100, nesting=NestingConstraints(allow_0_180=False))
    settings = sheet_settings(1000, 500, part_spacing_x=10, part_spacing_y=10)

    run = run_nesting([ScheduledPart('P', 4)], [part], {}, settings)

    assert len(run.sheets) == 1
    assert run.unplaced == []
    sheet = run.sheets[0]
    assert sheet.part_count == 4
    assert sheet.used_area == pytest.approx(16.0)
    assert sheet.scrap_percentage == pytest.approx(84.0)

    ys = sorted(p.y for p in sheet.placed_parts)
    assert ys == pytest.approx([10.0, 120.0, 230.0, 340.0])
    assert all(p.x == pytest.approx(10.0) for p in sheet.placed_parts)
    assert check_sheet_clearance(sheet, [part], spacing=10) == []
    assert parts_outside_sheet(sheet, [part], margin=10) == []


def test_nesting_is_deterministic(rect_part, sheet_settings):
    parts = [rect_part('A', 300, 120), rect_part('B', 150, 150), rect_part('C', 80, 40)]
    scheduled = [ScheduledPart('A', 2), ScheduledPart('B', 2), ScheduledPart('C', 3)]
    settings = sheet_settings(800, 400, grid_step=10)

    first = run_nesting(scheduled, parts, {}, settings)
    second = run_nesting(scheduled, parts, {}, settings)

    assert [s.to_dict() for s in first.sheets] == [s.to_dict() for s in second.sheets]


def test_rectangle_packer_keeps_spacing(rect_part, sheet_settings):
    part = rect_part('P', 200, 100)
    settings = sheet_settings(500, 500, part_spacing_x=5, part_spacing_y=5,
                              sheet_margin_top=0, sheet_margin_bottom=0,
                              sheet_margin_left=0, sheet_margin_right=0,
                              nest_as_rectangle=True)

    run = run_nesting([ScheduledPart('P', 2)], [part], {}, settings)

    placed = run.sheets[0].placed_parts
    assert (placed[0].x, placed[0].y) == (0.0, 0.0)
    assert (placed[1].x, placed[1].y) == (205.0, 0.0)
    assert check_sheet_clearance(run.sheets[0], [part], spacing=5) == []


def test_rectangle_packer_rejects_oversized_item(rect_part):
    packer = RectanglePacker(100, 100, 5, 5, False, {}, {})
    assert packer.find_position(_item('X', 150, 50)) is None


def test_clearance_check_reports_overlap(rect_part):
    from nesting import NestResultSheet, PlacedPart

    part = rect_part('P', 100, 100)
    sheet = NestResultSheet('sheet-1', 'Sheet 1', 'stock', 500, 500, placed_parts=[
        PlacedPart('a', 'P', 0, 0), PlacedPart('b', 'P', 50, 50),
    ])
    violations = check_sheet_clearance(sheet, [part], spacing=5)
    assert len(violations) == 1
    assert violations[0].first_id == 'a' and violations[0].second_id == 'b'


def test_unplaceable_item_is_reported(rect_part, sheet_settings):
    parts = [rect_part('HUGE', 600, 600), rect_part('SMALL', 100, 100)]
    settings = sheet_settings(500, 500, nest_as_rectangle=True)
    skipped = []
    EventBus().subscribe(EventType.NESTING_ITEM_SKIPPED, skipped.append)

    run = run_nesting([ScheduledPart('HUGE', 1), ScheduledPart('SMALL', 1)],
                      parts, {}, settings)

    assert len(run.sheets) == 1
    assert run.sheets[0].placed_parts[0].part_id == 'SMALL'
    assert [u.uid for u in run.unplaced] == ['HUGE#1']
    assert run.unplaced[0].reason == "does not fit any stock sheet"
    assert len(skipped) == 1
    assert skipped[0].data == {'uid': 'HUGE#1', 'part_id': 'HUGE',
                               'reason': "does not fit any stock sheet"}


def test_no_stock_leaves_everything_unplaced(rect_part):
    from nesting import NestingSettings

    skipped = []
    EventBus().subscribe(EventType.NESTING_ITEM_SKIPPED, skipped.append)

    run = run_nesting([ScheduledPart('P', 2)], [rect_part('P', 10, 10)], {},
                      NestingSettings())
    assert run.sheets == []
    assert [u.reason for u in run.unplaced] == ["no stock sheet available"] * 2
    assert [e.data['uid'] for e in skipped] == ['P#1', 'P#2']
    assert all(e.data['reason'] == "no stock sheet available" for e in skipped)


def test_grid_step_defaults_to_environment_setting():
    from config.settings import NESTING_GRID_STEP
    from nesting import NestingSettings

    assert NestingSettings().grid_step == NESTING_GRID_STEP


def test_identical_sheets_are_grouped(rect_part, sheet_settings):
    part = rect_part('P', 450, 450)
    settings = sheet_settings(500, 500, sheet_margin_top=0, sheet_margin_bottom=0,
                              sheet_margin_left=0, sheet_margin_right=0,
                              nest_as_rectangle=True, group_identical_sheets=True)

    run = run_nesting([ScheduledPart('P', 3)], [part], {}, settings)

    assert len(run.sheets) == 1
    assert run.sheets[0].quantity == 3
    assert run.total_parts == 3


def test_progress_snapshots_end_with_finished(rect_part, sheet_settings):
    part = rect_part('P', 100, 100)
    snapshots = list(nesting_generator([ScheduledPart('P', 3)], [part], {},
                                       sheet_settings(500, 500)))
    assert snapshots[-1].status == "Finished"
    assert snapshots[-1].progress == pytest.approx(100.0)
    assert len(snapshots) >= 4


def test_engine_stop_cancels_run(rect_part, sheet_settings):
    part = rect_part('P', 100, 100)
    engine = NestingEngine([part], {}, sheet_settings(500, 500))

    run = engine.run([ScheduledPart('P', 5)], callback=lambda snap: engine.stop())

    assert run.cancelled
    assert engine.result is run


def test_sheet_completed_event_published(rect_part, sheet_settings):
    completed = []
    EventBus().subscribe(EventType.NESTING_SHEET_COMPLETED, completed.append)
    run_nesting([ScheduledPart('P', 1)], [rect_part('P', 100, 100)], {},
                sheet_settings(500, 500, nest_as_rectangle=True))
    assert len(completed) == 1
    assert completed[0].data['sheet_id'] == 'sheet-1'


def test_invalid_settings_raise(rect_part, sheet_settings):
    settings = sheet_settings(500, 500, part_spacing_x=-1)
    engine = NestingEngine([rect_part('P', 10, 10)], {}, settings)
    with pytest.raises(InvalidFieldValueError):
        engine.run([ScheduledPart('P', 1)])


# ============================================================
# Stock selection
# ============================================================

def _two_sheet_settings(sheet_settings, strategy):
    settings = sheet_settings(utilization_strategy=strategy)
    settings.available_sheets = [SheetStock('big', 1000, 1000), SheetStock('small', 300, 300)]
    return settings


def test_smallest_first_picks_smallest_sheet(sheet_settings):
    settings = _two_sheet_settings(sheet_settings, SheetUtilizationStrategy.SMALLEST_FIRST)
    assert select_stock_sheet(settings).id == 'small'


def test_listed_order_and_best_fit_pick_first_sheet(sheet_settings):
    for strategy in (SheetUtilizationStrategy.LISTED_ORDER, SheetUtilizationStrategy.BEST_FIT):
        settings = _two_sheet_settings(sheet_settings, strategy)
        assert select_stock_sheet(settings).id == 'big'


def test_auto_calculation_picks_sheet_packing_most_area(sheet_settings):
    settings = _two_sheet_settings(sheet_settings, SheetUtilizationStrategy.AUTO_CALCULATION)
    settings.available_sheets.reverse()
    items = [_item(f'I{i}', 200, 200) for i in range(4)]
    assert select_stock_sheet(settings, items).id == 'big'


def test_unused_sheets_are_not_eligible(sheet_settings):
    settings = sheet_settings()
    settings.available_sheets[0].use_in_nesting = False
    assert select_stock_sheet(settings) is None
    with pytest.raises(NoStockSheetError):
        select_stock_sheet(settings, required=True)
