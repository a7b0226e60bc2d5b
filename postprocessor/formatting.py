"""
Program text formatting
=======================
Number and line formats of the punch program. The output is diffed by
downstream tools, so every format here is fixed.
"""

from typing import Optional

from config.settings import PROGRAM_DECIMALS


def fmt_number(value: float, decimals: int = PROGRAM_DECIMALS) -> str:
    """Fixed-point number without a negative zero"""
    text = f"{value:.{decimals}f}"
    if text.startswith('-') and float(text) == 0:
        text = text[1:]
    return text


def normalize_angle(angle: float) -> float:
    """Angle in [0, 360)"""
    a = angle % 360.0
    return 0.0 if a >= 360.0 - 1e-9 else a


def comment(text: str) -> str:
    """Comment line; parentheses inside the text are dropped"""
    return f"({str(text).replace('(', '').replace(')', '')})"


def program_line(program_number: int, filename: str) -> str:
    return f"O{program_number:04d} {comment(filename)}"


def coordinate_words(x: float, y: float, c: Optional[float] = None) -> str:
    words = f"X{fmt_number(x)} Y{fmt_number(y)}"
    if c is not None:
        words += f" C{fmt_number(normalize_angle(c), 2)}"
    return words


def strike_line(x: float, y: float, c: Optional[float] = None,
                station_code: Optional[int] = None) -> str:
    """Strike line; a station code makes it the tool-change form"""
    words = coordinate_words(x, y, c)
    if station_code is not None:
        return f"T{station_code:02d} {words}"
    return words


def safety_y_line(y: float) -> str:
    return f"G70 Y{fmt_number(y)}"


def safety_x_line(x: float) -> str:
    return f"G70 X{fmt_number(x)}"
