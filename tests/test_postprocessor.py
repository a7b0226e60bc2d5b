"""
Program emitter tests: header, C-axis suppression, clamp safety moves, number formats.
"""

import pytest

from core.events import EventBus, EventType
from core.exceptions import ProgramNumberError
from core.models import MachineSettings
from nesting.models import NestResultSheet
from postprocessor import (
    crosses_clamp_zone, emit, fmt_number, needs_c_word, normalize_angle, save_program,
    strike_line,
)
from toolpath import PunchOp


def strike(tool_id, x, y, rotation=0.0, change=False, station=3):
    return PunchOp(tool_id, station, x, y, rotation, is_tool_change=change,
                   composite_id=f"{tool_id}@{x},{y}")


def body(text):
    """Lines between the G90 line and M30"""
    lines = text.splitlines()
    return lines[lines.index('G90 G21') + 1:lines.index('M30')]


# ============================================================
# Formatting
# ============================================================

def test_fmt_number_has_no_negative_zero():
    assert fmt_number(-0.0001) == "0.000"
    assert fmt_number(-1.5) == "-1.500"
    assert fmt_number(12.34567) == "12.346"


def test_normalize_angle():
    assert normalize_angle(-90) == pytest.approx(270.0)
    assert normalize_angle(360) == 0.0
    assert normalize_angle(450) == pytest.approx(90.0)


def test_strike_line_forms():
    assert strike_line(1, 2) == "X1.000 Y2.000"
    assert strike_line(1, 2, 90, station_code=7) == "T07 X1.000 Y2.000 C90.00"


# ============================================================
# C axis
# ============================================================

def test_circle_tool_never_gets_c(tools):
    assert not needs_c_word(tools['RND10'], 0, None, True)
    assert not needs_c_word(tools['RND10'], 360, 0, False)


def test_square_tool_c_period_is_90(tools):
    sq = tools['SQ20']
    assert needs_c_word(sq, 0, None, False)
    assert not needs_c_word(sq, 90, 0, False)
    assert not needs_c_word(sq, 270, 0, False)
    assert needs_c_word(sq, 45, 0, False)


def test_rectangle_tool_c_period_is_180(tools):
    rect = tools['RECT50']
    assert not needs_c_word(rect, 180, 0, False)
    assert needs_c_word(rect, 90, 0, False)


def test_tool_change_always_emits_c(tools):
    assert needs_c_word(tools['SQ20'], 0, 0, True)


def test_unknown_tool_uses_full_turn_period():
    assert needs_c_word(None, 180, 0, False)
    assert not needs_c_word(None, 360, 0, False)


def test_repeated_angle_suppressed_in_program(tools):
    ops = [strike('SQ20', 10, 10, 0, change=True), strike('SQ20', 30, 10, 90),
           strike('SQ20', 50, 10, 45)]
    text = emit(ops, MachineSettings(), [], 1, tools=tools, date='2026-01-31')
    assert body(text) == [
        "T03 X10.000 Y10.000 C0.00",
        "X30.000 Y10.000",
        "X50.000 Y10.000 C45.00",
    ]


# ============================================================
# Clamp safety
# ============================================================

def test_move_into_clamp_dead_zone_is_split(tools):
    ops = [strike('SQ20', 0, 100, change=True), strike('SQ20', 500, 10)]
    text = emit(ops, MachineSettings(), [300], 1, tools=tools, date='2026-01-31')
    assert body(text) == [
        "T03 X0.000 Y100.000 C0.00",
        "G70 Y140.000",
        "G70 X500.000",
        "X500.000 Y10.000",
    ]


def test_safety_move_from_above_safe_y_skips_raise(tools):
    ops = [strike('SQ20', 600, 200, change=True), strike('SQ20', 250, 10)]
    text = emit(ops, MachineSettings(), [300], 1, tools=tools, date='2026-01-31')
    assert body(text)[1:] == ["G70 X250.000", "X250.000 Y10.000"]


def test_moves_clear_of_clamps_need_no_safety():
    machine = MachineSettings()
    assert not crosses_clamp_zone((0, 100), (500, 50), machine, [300])
    assert not crosses_clamp_zone((600, 10), (800, 10), machine, [300])
    assert crosses_clamp_zone((390, 10), (380, 30), machine, [300])


def test_first_strike_never_gets_safety_lines(tools):
    text = emit([strike('SQ20', 300, 0, change=True)], MachineSettings(), [300], 1,
                tools=tools, date='2026-01-31')
    assert body(text) == ["T03 X300.000 Y0.000 C0.00"]


# ============================================================
# Program
# ============================================================

def test_full_program_text(tools):
    sheet = NestResultSheet('sheet-1', 'Sheet 1', 'stock', 1000, 500,
                            material='DC01', thickness=1.5, quantity=2)
    ops = [
        strike('SQ20', 100, 200, change=True, station=3),
        strike('RND10', 120, 200, change=True, station=5),
        strike('RND10', 140, 200, station=5),
    ]

    text = emit(ops, MachineSettings(), [300, 1000], 1, "JOB-sheet-1",
                sheet=sheet, tools=tools, date="2026-01-31")

    assert text == (
        "%\n"
        "O0001 (JOB-sheet-1)\n"
        "(SHEET 1000.0X500.0 DC01 S=1.50)\n"
        "(QTY 2)\n"
        "(DATE 2026-01-31)\n"
        "(CLAMPS Z1=300.0 Z2=1000.0)\n"
        "(T03 SQ20 SQUARE 20.00X20.00 HITS=1)\n"
        "(T05 RND10 CIRCLE 10.00X10.00 HITS=2)\n"
        "G90 G21\n"
        "T03 X100.000 Y200.000 C0.00\n"
        "T05 X120.000 Y200.000\n"
        "X140.000 Y200.000\n"
        "M30\n"
        "%\n"
    )


@pytest.mark.parametrize("number", [0, 10000, -1])
def test_program_number_out_of_range(number):
    with pytest.raises(ProgramNumberError):
        emit([], MachineSettings(), [], number)


def test_program_number_upper_bound_is_accepted():
    text = emit([], MachineSettings(), [], 9999, "EMPTY", date="2026-01-31")
    assert text.splitlines()[1] == "O9999 (EMPTY)"
    assert text.endswith("M30\n%\n")


def test_unknown_tool_has_no_header_line(tools):
    ops = [strike('XX', 10, 10, change=True, station=0)]
    text = emit(ops, MachineSettings(), [], 1, tools=tools, date="2026-01-31")
    assert "XX" not in "\n".join(line for line in text.splitlines() if line.startswith('('))
    assert body(text) == ["T00 X10.000 Y10.000 C0.00"]


def test_emitted_event_published(tools):
    received = []
    EventBus().subscribe(EventType.PROGRAM_EMITTED, received.append)
    emit([strike('SQ20', 10, 10, change=True)], MachineSettings(), [], 12, "P12",
         tools=tools, date="2026-01-31")
    assert received[0].data['program_number'] == 12
    assert received[0].data['strikes'] == 1


def test_save_program_creates_directories(tmp_path):
    path = save_program("%\nM30\n%\n", tmp_path / "out" / "JOB.nc")
    assert (tmp_path / "out" / "JOB.nc").read_text() == "%\nM30\n%\n"
    assert path.endswith("JOB.nc")
