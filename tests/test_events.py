"""
Event bus tests: priorities, unsubscribe, handler isolation, global handlers.
"""

import logging

from core.events import (
    Event, EventBus, EventType, create_event, publish_event, setup_event_logging,
)


def test_event_bus_is_a_singleton():
    assert EventBus() is EventBus()


def test_higher_priority_handler_runs_first():
    order = []
    bus = EventBus()
    bus.subscribe(EventType.NESTING_STARTED, lambda e: order.append('low'))
    bus.subscribe(EventType.NESTING_STARTED, lambda e: order.append('high'), priority=10)

    publish_event(EventType.NESTING_STARTED, {'items': 1})

    assert order == ['high', 'low']


def test_unsubscribe_removes_handler():
    received = []
    bus = EventBus()
    bus.subscribe(EventType.PROGRAM_EMITTED, received.append)

    assert bus.unsubscribe(EventType.PROGRAM_EMITTED, received.append)
    assert not bus.unsubscribe(EventType.NESTING_FINISHED, received.append)
    publish_event(EventType.PROGRAM_EMITTED, {})

    assert received == []


def test_failing_handler_does_not_block_others(caplog):
    received = []

    def broken(event):
        raise RuntimeError("handler failed")

    bus = EventBus()
    bus.subscribe(EventType.TOOLPATH_OPTIMIZED, broken, priority=5)
    bus.subscribe(EventType.TOOLPATH_OPTIMIZED, received.append)

    with caplog.at_level(logging.ERROR, logger='core.events'):
        publish_event(EventType.TOOLPATH_OPTIMIZED, {'strikes': 3})

    assert len(received) == 1
    assert "handler failed" in caplog.text


def test_event_logging_sees_every_event(caplog):
    setup_event_logging()

    with caplog.at_level(logging.INFO, logger='core.events'):
        publish_event(EventType.NESTING_FINISHED, {'sheets': 2}, source='nesting.engine')

    assert "nesting.finished" in caplog.text
    assert "Source: nesting.engine" in caplog.text


def test_event_to_dict():
    event = create_event(EventType.NESTING_ITEM_SKIPPED, {'uid': 'P#1'}, source='test')
    data = event.to_dict()

    assert isinstance(event, Event)
    assert data['type'] == 'nesting.item_skipped'
    assert data['data'] == {'uid': 'P#1'}
    assert data['correlation_id'] == event.event_id
    assert data['source'] == 'test'
