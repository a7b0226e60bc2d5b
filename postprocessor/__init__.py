"""
Program Emitter
===============
Turret punch program text from an ordered strike list.

Usage:
    from postprocessor import emit, save_program

    text = emit(ops, machine, clamps, program_number=1, filename="JOB1",
                sheet=sheet, tools=tools)
    save_program(text, "out/JOB1.nc")
"""

from .formatting import (
    fmt_number,
    normalize_angle,
    comment,
    program_line,
    coordinate_words,
    strike_line,
    safety_y_line,
    safety_x_line,
)
from .safety import crosses_clamp_zone, safety_move_lines
from .rotation import is_equivalent_angle, needs_c_word
from .emitter import header_lines, emit, save_program

__all__ = [
    # Formatting
    'fmt_number',
    'normalize_angle',
    'comment',
    'program_line',
    'coordinate_words',
    'strike_line',
    'safety_y_line',
    'safety_x_line',
    # Safety / rotation
    'crosses_clamp_zone',
    'safety_move_lines',
    'is_equivalent_angle',
    'needs_c_word',
    # Emitter
    'header_lines',
    'emit',
    'save_program',
]
