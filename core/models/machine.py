"""
Machine and Optimizer Settings
==============================
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict

from ..exceptions import InvalidFieldValueError
from .tools import parse_enum


@dataclass
class MachineSettings:
    """
    Physical limits of the turret punch.

    Speeds: max_slew_speed in m/min, turret_rotation_speed in RPM,
    max_accel in mm/s^2, hit_time_s per strike.
    """
    name: str = "Generic turret punch"
    x_travel_min: float = 0.0
    x_travel_max: float = 2500.0
    y_travel_min: float = 0.0
    y_travel_max: float = 1250.0
    clamp_protection_zone_x: float = 100.0
    clamp_protection_zone_y: float = 100.0
    dead_zone_y: float = 40.0
    max_slew_speed: float = 100.0
    turret_rotation_speed: float = 30.0
    max_accel: float = 10000.0
    hit_time_s: float = 0.25

    @property
    def safe_y(self) -> float:
        """Y height clearing the clamp zone"""
        return self.dead_zone_y + self.clamp_protection_zone_y

    def in_travel(self, x: float, y: float) -> bool:
        return (self.x_travel_min <= x <= self.x_travel_max and
                self.y_travel_min <= y <= self.y_travel_max)

    def validate(self) -> None:
        if self.x_travel_max <= self.x_travel_min:
            raise InvalidFieldValueError('x_travel_max', self.x_travel_max,
                                         "must exceed x_travel_min")
        if self.y_travel_max <= self.y_travel_min:
            raise InvalidFieldValueError('y_travel_max', self.y_travel_max,
                                         "must exceed y_travel_min")
        for name in ('clamp_protection_zone_x', 'clamp_protection_zone_y', 'hit_time_s'):
            if getattr(self, name) < 0:
                raise InvalidFieldValueError(name, getattr(self, name), "must be >= 0")
        for name in ('max_slew_speed', 'max_accel'):
            if getattr(self, name) <= 0:
                raise InvalidFieldValueError(name, getattr(self, name), "must be > 0")

    def to_dict(self) -> Dict:
        return {
            'name': self.name,
            'x_travel_min': self.x_travel_min,
            'x_travel_max': self.x_travel_max,
            'y_travel_min': self.y_travel_min,
            'y_travel_max': self.y_travel_max,
            'clamp_protection_zone_x': self.clamp_protection_zone_x,
            'clamp_protection_zone_y': self.clamp_protection_zone_y,
            'dead_zone_y': self.dead_zone_y,
            'max_slew_speed': self.max_slew_speed,
            'turret_rotation_speed': self.turret_rotation_speed,
            'max_accel': self.max_accel,
            'hit_time_s': self.hit_time_s,
        }

    @classmethod
    def from_dict(cls, data: Dict) -> 'MachineSettings':
        defaults = cls()
        return cls(**{
            key: data.get(key, getattr(defaults, key))
            for key in defaults.to_dict()
        })


# ============================================================
# Optimizer Settings
# ============================================================

class ToolSequence(Enum):
    GLOBAL_STATION = "global-station"
    PART_BY_PART = "part-by-part"


class PathOptimization(Enum):
    SHORTEST_PATH = "shortest-path"
    X_AXIS = "x-axis"
    Y_AXIS = "y-axis"


class StartCorner(Enum):
    TOP_LEFT = "top-left"
    TOP_RIGHT = "top-right"
    BOTTOM_LEFT = "bottom-left"
    BOTTOM_RIGHT = "bottom-right"


class AnglePriority(Enum):
    HORIZONTAL_FIRST = "0-90"
    VERTICAL_FIRST = "90-0"


@dataclass
class OptimizerSettings:
    """Travel-order heuristic tuning"""
    tool_sequence: ToolSequence = ToolSequence.GLOBAL_STATION
    path_optimization: PathOptimization = PathOptimization.SHORTEST_PATH
    start_corner: StartCorner = StartCorner.TOP_LEFT
    angle_priority: AnglePriority = AnglePriority.HORIZONTAL_FIRST

    def to_dict(self) -> Dict:
        return {
            'tool_sequence': self.tool_sequence.value,
            'path_optimization': self.path_optimization.value,
            'start_corner': self.start_corner.value,
            'angle_priority': self.angle_priority.value,
        }

    @classmethod
    def from_dict(cls, data: Dict) -> 'OptimizerSettings':
        return cls(
            tool_sequence=parse_enum(ToolSequence, data.get('tool_sequence', 'global-station'),
                                     'tool_sequence'),
            path_optimization=parse_enum(PathOptimization,
                                         data.get('path_optimization', 'shortest-path'),
                                         'path_optimization'),
            start_corner=parse_enum(StartCorner, data.get('start_corner', 'top-left'),
                                    'start_corner'),
            angle_priority=parse_enum(AnglePriority, data.get('angle_priority', '0-90'),
                                      'angle_priority')
        )
