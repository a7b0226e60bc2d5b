#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
TurretCAM Core Module
=====================
Shared components: errors, event bus, data models and the geometry kernel.
"""

# Exceptions
from core.exceptions import (
    TurretCamError,
    ValidationError,
    RequiredFieldError,
    InvalidFieldValueError,
    ConfigurationError,
    NestingError,
    NoStockSheetError,
    ProgramEmissionError,
    ProgramNumberError,
)

# Events
from core.events import (
    EventType,
    Event,
    EventBus,
    EventHandler,
    create_event,
    get_event_bus,
    publish_event,
    setup_event_logging,
)

# Models
from core.models import (
    ToolShape,
    PunchType,
    Tool,
    PlacedTool,
    NestingConstraints,
    Part,
    ScheduledPart,
    MachineSettings,
    OptimizerSettings,
)

# Geometry
from core.geometry import (
    Point,
    PartGeometry,
    is_point_inside,
    segment_intersects_geometry,
    is_tool_gouging,
    find_closed_loops,
    get_outer_loop_indices,
    get_geometry_from_entities,
)

__all__ = [
    # Exceptions
    'TurretCamError',
    'ValidationError',
    'RequiredFieldError',
    'InvalidFieldValueError',
    'ConfigurationError',
    'NestingError',
    'NoStockSheetError',
    'ProgramEmissionError',
    'ProgramNumberError',
    # Events
    'EventType',
    'Event',
    'EventBus',
    'EventHandler',
    'create_event',
    'get_event_bus',
    'publish_event',
    'setup_event_logging',
    # Models
    'ToolShape',
    'PunchType',
    'Tool',
    'PlacedTool',
    'NestingConstraints',
    'Part',
    'ScheduledPart',
    'MachineSettings',
    'OptimizerSettings',
    # Geometry
    'Point',
    'PartGeometry',
    'is_point_inside',
    'segment_intersects_geometry',
    'is_tool_gouging',
    'find_closed_loops',
    'get_outer_loop_indices',
    'get_geometry_from_entities',
]

__version__ = '1.0.0'
