"""
Nesting Engine
==============
Packs scheduled parts onto stock sheets.

Usage:
    from nesting import NestingEngine, NestingSettings

    engine = NestingEngine(parts, tools, settings)
    run = engine.run(scheduled_parts, callback=on_progress)
"""

from .models import (
    SheetUtilizationStrategy,
    SheetStock,
    NestingSettings,
    PackItem,
    Placement,
    PlacedPart,
    NestResultSheet,
    UnplacedItem,
    NestingProgress,
    NestingRun,
)
from .scoring import prepare_pack_items, rotation_candidates
from .stock import eligible_sheets, select_stock_sheet, trial_pack_area
from .packers import NestingPacker, RectanglePacker, ComplexPacker
from .engine import (
    create_packer,
    build_result_sheet,
    nesting_generator,
    NestingEngine,
    run_nesting,
)
from .validation import (
    ClearanceViolation,
    part_polygon,
    placed_part_polygon,
    check_sheet_clearance,
    parts_outside_sheet,
)
from .dxf_export import export_sheet_dxf

__all__ = [
    # Models
    'SheetUtilizationStrategy',
    'SheetStock',
    'NestingSettings',
    'PackItem',
    'Placement',
    'PlacedPart',
    'NestResultSheet',
    'UnplacedItem',
    'NestingProgress',
    'NestingRun',
    # Preparation / stock
    'prepare_pack_items',
    'rotation_candidates',
    'eligible_sheets',
    'select_stock_sheet',
    'trial_pack_area',
    # Packers
    'NestingPacker',
    'RectanglePacker',
    'ComplexPacker',
    # Engine
    'create_packer',
    'build_result_sheet',
    'nesting_generator',
    'NestingEngine',
    'run_nesting',
    # Validation / export
    'ClearanceViolation',
    'part_polygon',
    'placed_part_polygon',
    'check_sheet_clearance',
    'parts_outside_sheet',
    'export_sheet_dxf',
]
