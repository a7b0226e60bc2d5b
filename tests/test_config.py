"""
Configuration tests: default file, factories, malformed input.
"""

import json

import pytest

from config.machine_config import (
    DEFAULT_CONFIG_PATH,
    create_machine_settings_from_config,
    create_nesting_settings_from_config,
    create_optimizer_settings_from_config,
    load_config,
    save_config,
)
from core.exceptions import ConfigurationError, InvalidFieldValueError, RequiredFieldError
from core.models import (
    AnglePriority, MachineSettings, Part, PathOptimization, PlacedTool, ScheduledPart,
    StartCorner, Tool, ToolSequence,
)
from nesting.models import SheetStock, SheetUtilizationStrategy


def test_default_config_builds_all_settings():
    config = load_config(str(DEFAULT_CONFIG_PATH))

    machine = create_machine_settings_from_config(config)
    optimizer = create_optimizer_settings_from_config(config)
    nesting = create_nesting_settings_from_config(config)

    assert machine.safe_y == pytest.approx(140.0)
    assert optimizer.tool_sequence == ToolSequence.GLOBAL_STATION
    assert optimizer.path_optimization == PathOptimization.SHORTEST_PATH
    assert optimizer.start_corner == StartCorner.TOP_LEFT
    assert optimizer.angle_priority == AnglePriority.HORIZONTAL_FIRST
    assert nesting.clamp_positions == [300.0, 1000.0, 2000.0]
    assert nesting.utilization_strategy == SheetUtilizationStrategy.LISTED_ORDER
    assert nesting.available_sheets[0].material == 'DC01'


def test_empty_sections_fall_back_to_defaults():
    machine = create_machine_settings_from_config({})
    assert machine.max_slew_speed == MachineSettings().max_slew_speed
    assert create_nesting_settings_from_config({}).available_sheets == []


def test_missing_config_file(tmp_path):
    with pytest.raises(ConfigurationError) as exc_info:
        load_config(str(tmp_path / "nope.json"))
    assert exc_info.value.code == 'CONFIGURATION_ERROR'


def test_malformed_config_file(tmp_path):
    path = tmp_path / "bad.json"
    path.write_text("{not json", encoding='utf-8')
    with pytest.raises(ConfigurationError):
        load_config(str(path))


def test_config_root_must_be_object(tmp_path):
    path = tmp_path / "list.json"
    path.write_text("[1, 2]", encoding='utf-8')
    with pytest.raises(ConfigurationError):
        load_config(str(path))


def test_unknown_enum_literal_is_rejected():
    with pytest.raises(ConfigurationError):
        create_optimizer_settings_from_config({'optimizer': {'start_corner': 'middle'}})


def test_enum_accepts_member_name():
    optimizer = create_optimizer_settings_from_config(
        {'optimizer': {'path_optimization': 'X_AXIS', 'angle_priority': '90-0'}}
    )
    assert optimizer.path_optimization == PathOptimization.X_AXIS
    assert optimizer.angle_priority == AnglePriority.VERTICAL_FIRST


def test_save_and_reload(tmp_path):
    config = load_config(str(DEFAULT_CONFIG_PATH))
    config['machine']['dead_zone_y'] = 55.0
    path = tmp_path / "saved.json"

    save_config(config, str(path))

    reloaded = load_config(str(path))
    assert reloaded == config
    assert create_machine_settings_from_config(reloaded).safe_y == pytest.approx(155.0)


def test_invalid_machine_travel_rejected():
    with pytest.raises(InvalidFieldValueError) as exc_info:
        create_machine_settings_from_config({'machine': {'x_travel_max': -5}})
    assert exc_info.value.details['field'] == 'x_travel_max'


def test_invalid_nesting_margins_rejected():
    config = {'nesting': {
        'sheet_margin_left': 600, 'sheet_margin_right': 600,
        'available_sheets': [{'id': 's', 'width': 1000, 'height': 500}],
    }}
    with pytest.raises(InvalidFieldValueError):
        create_nesting_settings_from_config(config)


def test_tool_from_dict_defaults():
    tool = Tool.from_dict({'id': 'T1', 'shape': 'square', 'width': 20})
    assert tool.name == 'T1'
    assert tool.footprint == (20.0, 20.0)
    assert tool.symmetry_period == 90.0

    with pytest.raises(ConfigurationError):
        Tool.from_dict({'id': 'T2', 'shape': 'hexagon', 'width': 20})


def test_default_config_is_valid_json():
    with open(DEFAULT_CONFIG_PATH, encoding='utf-8') as f:
        assert isinstance(json.load(f), dict)


@pytest.mark.parametrize("build, record, field", [
    (Tool.from_dict, {'shape': 'circle', 'width': 10}, 'id'),
    (PlacedTool.from_dict, {'id': 'h1', 'x': 5}, 'tool_id'),
    (Part.from_dict, {'width': 10, 'height': 10}, 'id'),
    (Part.from_dict, {'id': 'P', 'width': 10}, 'height'),
    (ScheduledPart.from_dict, {'quantity': 2}, 'part_id'),
    (SheetStock.from_dict, {'id': 's', 'width': 1000}, 'height'),
])
def test_missing_required_field(build, record, field):
    with pytest.raises(RequiredFieldError) as exc_info:
        build(record)
    assert exc_info.value.code == 'REQUIRED_FIELD'
    assert exc_info.value.details == {'field': field}
