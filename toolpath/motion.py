"""
Motion estimate - travel statistics and cycle time of a punching sequence.

Every head move between strikes starts and ends at rest, so each one is a
trapezoidal (or triangular when short) velocity profile:
acceleration -> cruise at max slew speed -> deceleration.

Informational only; the controller's own kinematics decide the real time.
"""

import math
from dataclasses import dataclass
from typing import Dict, Optional, Sequence, Tuple

from core.geometry import distance
from core.models import MachineSettings
from .models import PunchOp


@dataclass
class TravelStats:
    """Head travel of one sequence"""
    rapid_length_mm: float = 0.0
    moves: int = 0
    hits: int = 0
    tool_changes: int = 0
    longest_move_mm: float = 0.0

    def to_dict(self) -> Dict:
        return {
            'rapid_length_mm': round(self.rapid_length_mm, 3),
            'moves': self.moves,
            'hits': self.hits,
            'tool_changes': self.tool_changes,
            'longest_move_mm': round(self.longest_move_mm, 3),
        }


@dataclass
class CycleTimeEstimate:
    travel_s: float = 0.0
    hit_s: float = 0.0
    tool_change_s: float = 0.0

    @property
    def total_s(self) -> float:
        return self.travel_s + self.hit_s + self.tool_change_s

    def to_dict(self) -> Dict:
        return {
            'travel_s': round(self.travel_s, 3),
            'hit_s': round(self.hit_s, 3),
            'tool_change_s': round(self.tool_change_s, 3),
            'total_s': round(self.total_s, 3),
        }


def segment_time_trapezoid(length: float, v_start: float, v_end: float,
                           v_max: float, a_max: float) -> float:
    """
    Time for a single move using a trapezoidal profile.

    Args:
        length: Move length [mm]
        v_start: Entry velocity [mm/s]
        v_end: Exit velocity [mm/s]
        v_max: Maximum velocity [mm/s]
        a_max: Maximum acceleration [mm/s^2]

    Returns:
        Time to traverse the move [s]
    """
    if length <= 0:
        return 0.0

    if a_max <= 0:
        return length / max(1e-9, v_max)

    # Peak velocity (triangular when the cruise speed is never reached)
    v_peak_sq = a_max * length + 0.5 * (v_start**2 + v_end**2)
    v_peak = min(v_max, math.sqrt(max(0.0, v_peak_sq)))

    t1 = max(0.0, (v_peak - v_start) / a_max)
    s1 = max(0.0, (v_peak**2 - v_start**2) / (2 * a_max))

    t3 = max(0.0, (v_peak - v_end) / a_max)
    s3 = max(0.0, (v_peak**2 - v_end**2) / (2 * a_max))

    s2 = max(0.0, length - s1 - s3)
    t2 = s2 / max(1e-9, v_peak)

    return t1 + t2 + t3


def m_min_to_mm_s(v_m_min: float) -> float:
    """Convert m/min to mm/s."""
    return v_m_min * 1000.0 / 60.0


def turret_index_time(machine: MachineSettings) -> float:
    """Half a turret revolution [s]"""
    if machine.turret_rotation_speed <= 0:
        return 0.0
    return 0.5 * 60.0 / machine.turret_rotation_speed


def travel_stats(ops: Sequence[PunchOp],
                 start: Optional[Tuple[float, float]] = None) -> TravelStats:
    """
    Travel statistics of a sequence.

    Args:
        ops: Strikes in punching order
        start: Head position before the first strike; the first move is
            not counted when omitted
    """
    stats = TravelStats(hits=len(ops),
                        tool_changes=sum(1 for op in ops if op.is_tool_change))
    previous = start
    for op in ops:
        if previous is not None:
            d = distance(previous, (op.x, op.y))
            if d > 0:
                stats.moves += 1
                stats.rapid_length_mm += d
                stats.longest_move_mm = max(stats.longest_move_mm, d)
        previous = (op.x, op.y)
    return stats


def estimate_cycle_time(ops: Sequence[PunchOp], machine: MachineSettings,
                        start: Optional[Tuple[float, float]] = None) -> CycleTimeEstimate:
    """
    Estimated cycle time of a sequence.

    Each move is a stop-to-stop trapezoid at the machine's slew speed and
    acceleration; each strike costs hit_time_s; each tool change costs half
    a turret revolution.
    """
    v_max = m_min_to_mm_s(machine.max_slew_speed)
    estimate = CycleTimeEstimate()
    previous = start
    for op in ops:
        if previous is not None:
            d = distance(previous, (op.x, op.y))
            estimate.travel_s += segment_time_trapezoid(d, 0.0, 0.0, v_max, machine.max_accel)
        previous = (op.x, op.y)
        if op.is_tool_change:
            estimate.tool_change_s += turret_index_time(machine)
    estimate.hit_s = len(ops) * machine.hit_time_s
    return estimate
