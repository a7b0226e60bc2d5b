"""
Program Emitter
===============
Plain-text turret punch program from an ordered strike list.

Layout:
    %
    O0001 (FILENAME)
    (SHEET 2500.0X1250.0 DC01 S=1.50)
    (QTY 1)
    (DATE 2026-01-31)
    (CLAMPS Z1=300.0 Z2=1000.0)
    (T05 RND10 CIRCLE 10.00X10.00 HITS=12)
    G90 G21
    T05 X100.000 Y200.000
    X120.000 Y200.000
    G70 Y140.000
    G70 X500.000
    X500.000 Y10.000
    M30
    %
"""

import logging
from datetime import date as date_type
from pathlib import Path
from typing import List, Optional, Sequence, Union

from core.events import EventType, publish_event
from core.exceptions import ProgramNumberError
from core.models import MachineSettings, index_tools
from nesting.models import NestResultSheet
from toolpath.models import PunchOp
from toolpath.summary import sheet_tool_summary
from .formatting import comment, fmt_number, normalize_angle, program_line, strike_line
from .rotation import needs_c_word
from .safety import crosses_clamp_zone, safety_move_lines

logger = logging.getLogger(__name__)

PROGRAM_NUMBER_MIN = 1
PROGRAM_NUMBER_MAX = 9999


def header_lines(program_number: int, filename: str, clamp_positions: Sequence[float],
                 ops: Sequence[PunchOp], sheet: Optional[NestResultSheet] = None,
                 tools=None, date: Union[date_type, str, None] = None) -> List[str]:
    """Program start, sheet comments, clamp summary and tool list"""
    lines = ['%', program_line(program_number, filename)]

    if sheet is not None:
        lines.append(comment(f"SHEET {sheet.width:.1f}X{sheet.height:.1f} "
                             f"{sheet.material} S={sheet.thickness:.2f}"))
        lines.append(comment(f"QTY {sheet.quantity}"))

    day = date or date_type.today()
    lines.append(comment(f"DATE {day.isoformat() if hasattr(day, 'isoformat') else day}"))

    if clamp_positions:
        zones = ' '.join(f"Z{i}={x:.1f}" for i, x in enumerate(clamp_positions, start=1))
        lines.append(comment(f"CLAMPS {zones}"))

    lookup = index_tools(tools)
    known = [u for u in sheet_tool_summary(ops, lookup) if u.known]
    for usage in sorted(known, key=lambda u: (u.station_code, u.name)):
        tool = lookup[usage.tool_id]
        w, h = tool.footprint
        lines.append(comment(f"T{usage.station_code:02d} {tool.name} {tool.shape.name} "
                             f"{w:.2f}X{h:.2f} HITS={usage.hits}"))

    lines.append('G90 G21')
    return lines


def emit(ops: Sequence[PunchOp], machine: MachineSettings, clamp_positions: Sequence[float],
         program_number: int, filename: str = "", sheet: Optional[NestResultSheet] = None,
         tools=None, date: Union[date_type, str, None] = None) -> str:
    """
    Build the program text.

    Args:
        ops: Strikes in punching order
        machine: Machine limits (travel, clamp zones)
        clamp_positions: Clamp X positions
        program_number: O number, 1..9999
        filename: Program name in the O line
        sheet: Sheet for the SHEET/QTY comments
        tools: Tool table for the tool list and rotation symmetry
        date: Date comment (today when omitted)

    Returns:
        Program text, newline terminated

    Raises:
        ProgramNumberError: program_number outside 1..9999
    """
    if not PROGRAM_NUMBER_MIN <= program_number <= PROGRAM_NUMBER_MAX:
        raise ProgramNumberError(program_number)

    lookup = index_tools(tools)
    lines = header_lines(program_number, filename, clamp_positions, ops, sheet, lookup, date)

    last_pos = None
    last_c: Optional[float] = None
    safety_moves = 0
    out_of_travel = 0

    for op in ops:
        tool = lookup.get(op.tool_id)
        target = (op.x, op.y)

        if not machine.in_travel(op.x, op.y):
            out_of_travel += 1
            logger.warning(f"Strike outside machine travel: X{fmt_number(op.x)} "
                           f"Y{fmt_number(op.y)} ({op.composite_id})")

        if last_pos is not None and crosses_clamp_zone(last_pos, target, machine,
                                                       clamp_positions):
            lines.extend(safety_move_lines(last_pos, target, machine))
            safety_moves += 1

        c = None
        if needs_c_word(tool, op.rotation, last_c, op.is_tool_change):
            c = normalize_angle(op.rotation)
            last_c = c

        lines.append(strike_line(op.x, op.y, c,
                                 station_code=op.station_code if op.is_tool_change else None))
        last_pos = target

    lines.extend(['M30', '%'])

    logger.info(f"Program O{program_number:04d}: {len(ops)} strikes, "
                f"{safety_moves} safety moves, {len(lines)} lines")
    if out_of_travel:
        logger.warning(f"Program O{program_number:04d}: {out_of_travel} strikes outside travel")
    publish_event(EventType.PROGRAM_EMITTED,
                  {'program_number': program_number, 'filename': filename,
                   'strikes': len(ops), 'safety_moves': safety_moves},
                  source=__name__)
    return '\n'.join(lines) + '\n'


def save_program(text: str, path) -> str:
    """Write program text; returns the path"""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding='ascii', errors='replace')
    logger.info(f"Saved: {path}")
    return str(path)
