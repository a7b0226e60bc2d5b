"""
Clamp safety moves
==================
A head move that dips into the dead zone near a clamp is split into
Y raise, X move, then the strike line.
"""

from typing import List, Sequence, Tuple

from core.models import MachineSettings
from .formatting import safety_x_line, safety_y_line


def crosses_clamp_zone(start: Tuple[float, float], end: Tuple[float, float],
                       machine: MachineSettings, clamp_positions: Sequence[float]) -> bool:
    """
    True when the move reaches the dead zone over a clamp's protection zone.

    The move's Y extent must not stay entirely above dead_zone_y, and its X
    extent must overlap clamp +- clamp_protection_zone_x of some clamp.
    """
    if min(start[1], end[1]) > machine.dead_zone_y:
        return False
    x_lo, x_hi = min(start[0], end[0]), max(start[0], end[0])
    zone = machine.clamp_protection_zone_x
    return any(x_lo <= clamp + zone and x_hi >= clamp - zone for clamp in clamp_positions)


def safety_move_lines(start: Tuple[float, float], end: Tuple[float, float],
                      machine: MachineSettings) -> List[str]:
    """Lines placed before the strike line; the strike line makes the final Y move"""
    lines = []
    if start[1] < machine.safe_y:
        lines.append(safety_y_line(machine.safe_y))
    lines.append(safety_x_line(end[0]))
    return lines
