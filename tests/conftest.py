"""
Shared fixtures: rectangular parts, a small tool table, nesting settings.
"""

import pytest

from core.events import EventBus
from core.geometry import PartGeometry
from core.models import NestingConstraints, Part, PlacedTool, PunchType, Tool, ToolShape
from nesting.models import NestingSettings, SheetStock


@pytest.fixture(autouse=True)
def fresh_event_bus():
    EventBus.reset()
    yield
    EventBus.reset()


@pytest.fixture
def rect_part():
    """Factory: rectangular part with its lower-left corner at the origin"""
    def make(part_id, width, height, punches=None, nesting=None):
        return Part(
            id=part_id,
            name=part_id,
            geometry=PartGeometry.rectangle(width, height),
            punches=punches or [],
            nesting=nesting or NestingConstraints()
        )
    return make


@pytest.fixture
def tools():
    return {
        'RND10': Tool('RND10', 'RND10', ToolShape.CIRCLE, 10.0,
                      punch_type=PunchType.GENERAL, station_number=5),
        'SQ20': Tool('SQ20', 'SQ20', ToolShape.SQUARE, 20.0,
                     punch_type=PunchType.STARTING, station_number=3),
        'RECT50': Tool('RECT50', 'RECT50X5', ToolShape.RECTANGLE, 50.0, 5.0,
                       punch_type=PunchType.CONTOUR, station_number=8),
        'OB8': Tool('OB8', 'OB8X20', ToolShape.OBLONG, 20.0, 8.0,
                    punch_type=PunchType.GENERAL, station_number=7, mt_index=2),
    }


@pytest.fixture
def sheet_settings():
    """Factory: settings with one stock sheet"""
    def make(width=1000.0, height=500.0, **overrides):
        params = dict(
            available_sheets=[SheetStock('stock', width, height, quantity=10,
                                         material='DC01', thickness=1.5)],
        )
        params.update(overrides)
        return NestingSettings(**params)
    return make


@pytest.fixture
def punch():
    """Factory: strike on a part"""
    def make(punch_id, tool_id, x, y, rotation=0.0, line_id=None):
        return PlacedTool(punch_id, tool_id, x, y, rotation, line_id)
    return make
