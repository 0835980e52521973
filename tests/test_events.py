"""
Unit tests for the EventManager class.

Tests cover event subscription, unsubscription, emission, thread safety,
and error handling scenarios.
"""

import pytest
import threading
from unittest.mock import Mock
from camswitch.events import EventManager, EventType


class TestEventManager:
    """Test cases for the EventManager class."""

    def setup_method(self):
        """Set up a fresh EventManager for each test."""
        self.event_manager = EventManager()

    def test_initialization(self):
        """Test that EventManager initializes with empty subscriber lists."""
        for event_type in EventType:
            assert self.event_manager.get_subscriber_count(event_type.value) == 0

    def test_subscribe_valid_event_type(self):
        """Test subscribing to valid event types."""
        callback = Mock()

        for event_type in EventType:
            self.event_manager.subscribe(event_type.value, callback)
            assert self.event_manager.get_subscriber_count(event_type.value) == 1

    def test_subscribe_invalid_event_type(self):
        """Test that subscribing to invalid event type raises ValueError."""
        with pytest.raises(ValueError, match="Invalid event type 'on_connect'"):
            self.event_manager.subscribe("on_connect", Mock())

    def test_subscribe_non_callable(self):
        """Test that subscribing non-callable raises TypeError."""
        with pytest.raises(TypeError, match="Callback must be callable"):
            self.event_manager.subscribe(EventType.ON_SELECT.value, "not_callable")

    def test_subscribe_duplicate_callback(self):
        """Test that subscribing the same callback twice doesn't create duplicates."""
        callback = Mock()
        event_type = EventType.ON_ACTIVATE.value

        self.event_manager.subscribe(event_type, callback)
        self.event_manager.subscribe(event_type, callback)

        assert self.event_manager.get_subscriber_count(event_type) == 1

    def test_unsubscribe_existing_callback(self):
        callback = Mock()
        event_type = EventType.ON_SELECT.value
        self.event_manager.subscribe(event_type, callback)

        self.event_manager.unsubscribe(event_type, callback)

        assert self.event_manager.get_subscriber_count(event_type) == 0

    def test_unsubscribe_non_existing_callback(self):
        """Unsubscribing an unknown callback is a no-op."""
        self.event_manager.unsubscribe(EventType.ON_SELECT.value, Mock())

        assert self.event_manager.get_subscriber_count(EventType.ON_SELECT.value) == 0

    def test_unsubscribe_invalid_event_type(self):
        with pytest.raises(ValueError, match="Invalid event type"):
            self.event_manager.unsubscribe("invalid_event", Mock())

    def test_emit_without_data(self):
        callback = Mock()
        self.event_manager.subscribe(EventType.ON_CATALOG_CHANGE.value, callback)

        self.event_manager.emit(EventType.ON_CATALOG_CHANGE.value)

        callback.assert_called_once_with()

    def test_emit_with_data(self):
        callback = Mock()
        self.event_manager.subscribe(EventType.ON_ACTIVATE.value, callback)

        self.event_manager.emit(EventType.ON_ACTIVATE.value, "device")

        callback.assert_called_once_with("device")

    def test_emit_empty_catalog_is_passed_through(self):
        """An empty tuple is data, not a missing argument."""
        callback = Mock()
        self.event_manager.subscribe(EventType.ON_CATALOG_CHANGE.value, callback)

        self.event_manager.emit(EventType.ON_CATALOG_CHANGE.value, ())

        callback.assert_called_once_with(())

    def test_emit_invalid_event_type(self):
        with pytest.raises(ValueError, match="Invalid event type"):
            self.event_manager.emit("invalid_event")

    def test_emit_with_callback_exception(self, caplog):
        """A failing callback is logged and the others still run."""
        failing = Mock(side_effect=RuntimeError("callback failed"))
        working = Mock()
        event_type = EventType.ON_SELECT.value
        self.event_manager.subscribe(event_type, failing)
        self.event_manager.subscribe(event_type, working)

        self.event_manager.emit(event_type, "device")

        failing.assert_called_once_with("device")
        working.assert_called_once_with("device")
        assert "Error in event callback for on_select" in caplog.text

    def test_multiple_event_types(self):
        select_callback = Mock()
        activate_callback = Mock()
        self.event_manager.subscribe(EventType.ON_SELECT.value, select_callback)
        self.event_manager.subscribe(EventType.ON_ACTIVATE.value, activate_callback)

        self.event_manager.emit(EventType.ON_SELECT.value, "a")

        select_callback.assert_called_once_with("a")
        activate_callback.assert_not_called()

    def test_get_subscriber_count_invalid_event_type(self):
        with pytest.raises(ValueError):
            self.event_manager.get_subscriber_count("invalid_event")

    def test_clear_subscribers_specific_event(self):
        callback = Mock()
        self.event_manager.subscribe(EventType.ON_SELECT.value, callback)
        self.event_manager.subscribe(EventType.ON_ACTIVATE.value, callback)

        self.event_manager.clear_subscribers(EventType.ON_SELECT.value)

        assert self.event_manager.get_subscriber_count(EventType.ON_SELECT.value) == 0
        assert self.event_manager.get_subscriber_count(EventType.ON_ACTIVATE.value) == 1

    def test_clear_subscribers_all_events(self):
        callback = Mock()
        for event_type in EventType:
            self.event_manager.subscribe(event_type.value, callback)

        self.event_manager.clear_subscribers()

        for event_type in EventType:
            assert self.event_manager.get_subscriber_count(event_type.value) == 0

    def test_clear_subscribers_invalid_event_type(self):
        with pytest.raises(ValueError):
            self.event_manager.clear_subscribers("invalid_event")


class TestEventManagerThreadSafety:
    """Test cases for concurrent use of the EventManager."""

    def setup_method(self):
        self.event_manager = EventManager()

    def test_concurrent_subscribe_unsubscribe(self):
        callbacks = [Mock() for _ in range(20)]
        event_type = EventType.ON_SELECT.value

        def subscribe_all():
            for callback in callbacks:
                self.event_manager.subscribe(event_type, callback)

        def unsubscribe_half():
            for callback in callbacks[:10]:
                self.event_manager.unsubscribe(event_type, callback)

        subscriber = threading.Thread(target=subscribe_all)
        subscriber.start()
        subscriber.join()

        threads = [threading.Thread(target=unsubscribe_half) for _ in range(3)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert self.event_manager.get_subscriber_count(event_type) == 10

    def test_concurrent_emit_operations(self):
        lock = threading.Lock()
        calls = []

        def callback(data):
            with lock:
                calls.append(data)

        self.event_manager.subscribe(EventType.ON_ACTIVATE.value, callback)

        threads = [
            threading.Thread(target=self.event_manager.emit, args=(EventType.ON_ACTIVATE.value, i))
            for i in range(10)
        ]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert sorted(calls) == list(range(10))

    def test_subscribe_during_emit(self):
        """Callbacks may subscribe others without deadlocking."""
        late = Mock()

        def subscribing_callback(data):
            self.event_manager.subscribe(EventType.ON_SELECT.value, late)

        self.event_manager.subscribe(EventType.ON_SELECT.value, subscribing_callback)

        self.event_manager.emit(EventType.ON_SELECT.value, "first")
        late.assert_not_called()

        self.event_manager.emit(EventType.ON_SELECT.value, "second")
        late.assert_called_once_with("second")


class TestEventType:
    """Test cases for the EventType enumeration."""

    def test_event_type_values(self):
        assert EventType.ON_CATALOG_CHANGE.value == "on_catalog_change"
        assert EventType.ON_SELECT.value == "on_select"
        assert EventType.ON_ACTIVATE.value == "on_activate"
        assert EventType.ON_ACTIVATION_FAILED.value == "on_activation_failed"

    def test_event_type_completeness(self):
        assert len(EventType) == 4
