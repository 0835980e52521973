"""
Unit tests for ActiveSelector and Cursor.

Tests cover cycling with wraparound, cursor restoration after catalog
replacement, lookup by id, name and index, binder failures and the events
emitted for each outcome.
"""

import threading
from unittest.mock import Mock

import pytest

from camswitch.events import EventManager
from camswitch.models import ClassifiedDevice, Facing
from camswitch.selector import ActiveSelector, Cursor, SelectionResult, SelectionStatus

from conftest import RecordingBinder, bluetooth, built_in, usb


def classified(record, name, display_name=None):
    return ClassifiedDevice(record, name, display_name or name)


@pytest.fixture
def phone_catalog():
    return [
        classified(built_in("0", Facing.FRONT), "Front Camera"),
        classified(built_in("1", Facing.BACK), "Main Camera"),
        classified(built_in("2", Facing.BACK), "Wide Camera"),
        classified(usb(7), "USB Camera 1", "Desk Cam"),
        classified(bluetooth("AA:BB:CC:DD:EE:FF"), "Bluetooth Camera 1"),
    ]


@pytest.fixture
def events():
    return EventManager()


@pytest.fixture
def selector(binder, events, phone_catalog):
    instance = ActiveSelector(binder, events)
    instance.set_catalog(phone_catalog)
    return instance


class TestCursor:
    """Test cases for the Cursor helper."""

    def test_step_wraps_forward_and_backward(self):
        cursor = Cursor()

        assert cursor.step(-1, 3) == 2
        assert cursor.step(1, 3) == 0

    def test_restore_resets_out_of_range_index(self):
        cursor = Cursor(5)

        cursor.restore(3)

        assert cursor.index == 0

    def test_restore_keeps_valid_index(self):
        cursor = Cursor(2)

        cursor.restore(3)

        assert cursor.index == 2

    def test_step_restores_before_moving(self):
        cursor = Cursor(7)

        assert cursor.step(1, 3) == 1

    def test_move_to_rejects_out_of_range(self):
        cursor = Cursor(1)

        assert not cursor.move_to(3, 3)
        assert not cursor.move_to(-1, 3)
        assert cursor.index == 1

    def test_repr(self):
        assert repr(Cursor(2)) == "Cursor(index=2)"


class TestCycling:
    """Test cases for next and previous."""

    def test_initial_state(self, selector, binder):
        assert selector.index == 0
        assert selector.current().id == "0"
        assert binder.bound == []

    def test_set_catalog_does_not_activate(self, binder, phone_catalog):
        selector = ActiveSelector(binder)
        selector.set_catalog(phone_catalog)

        assert binder.bound == []

    def test_next_activates_following_device(self, selector, binder):
        result = selector.select_next()

        assert result.status is SelectionStatus.ACTIVATED
        assert result.ok
        assert result.device.id == "1"
        assert binder.bound == [("1", Facing.BACK)]

    def test_previous_wraps_to_last(self, selector):
        result = selector.select_previous()

        assert result.device.id == "bt_AA:BB:CC:DD:EE:FF"
        assert selector.index == 4

    def test_next_wraps_to_first(self, selector):
        for _ in range(4):
            selector.select_next()

        result = selector.select_next()

        assert result.device.id == "0"
        assert selector.index == 0

    def test_full_cycle_returns_to_start(self, selector):
        for _ in range(len(selector.catalog)):
            selector.select_next()

        assert selector.index == 0

    def test_next_then_previous_is_identity(self, selector):
        selector.select_next()
        selector.select_next()

        selector.select_next()
        selector.select_previous()

        assert selector.index == 2

    def test_cycling_passes_over_unsupported_devices(self, selector, binder):
        statuses = [selector.select_next().status for _ in range(5)]

        assert statuses == [
            SelectionStatus.ACTIVATED,
            SelectionStatus.ACTIVATED,
            SelectionStatus.UNSUPPORTED_SOURCE,
            SelectionStatus.UNSUPPORTED_SOURCE,
            SelectionStatus.ACTIVATED,
        ]
        assert binder.bound_ids == ["1", "2", "0"]

    def test_unsupported_source_still_moves_cursor(self, selector):
        result = selector.select_by_index(3)

        assert result.status is SelectionStatus.UNSUPPORTED_SOURCE
        assert result.moved
        assert not result.ok
        assert selector.current().id == "usb_7"

    def test_single_device_cycles_to_itself(self, binder):
        selector = ActiveSelector(binder)
        selector.set_catalog([classified(built_in("0", Facing.FRONT), "Front Camera")])

        assert selector.select_next().device.id == "0"
        assert selector.select_previous().device.id == "0"
        assert binder.bound_ids == ["0", "0"]


class TestEmptyCatalog:
    """Test cases for an empty catalog."""

    def test_navigation_reports_empty_catalog(self, binder):
        selector = ActiveSelector(binder)

        assert selector.select_next().status is SelectionStatus.EMPTY_CATALOG
        assert selector.select_previous().status is SelectionStatus.EMPTY_CATALOG
        assert selector.activate_current().status is SelectionStatus.EMPTY_CATALOG
        assert binder.bound == []

    def test_no_active_device(self, binder):
        selector = ActiveSelector(binder)

        assert selector.current() is None
        assert selector.index is None

    def test_lookups_on_empty_catalog(self, binder):
        selector = ActiveSelector(binder)

        assert selector.select_by_id("0").status is SelectionStatus.NOT_FOUND
        assert selector.select_by_name("Front").status is SelectionStatus.NOT_FOUND
        assert selector.select_by_index(0).status is SelectionStatus.INDEX_OUT_OF_RANGE


class TestCatalogReplacement:
    """Test cases for cursor restoration."""

    def test_cursor_kept_when_still_in_range(self, selector, phone_catalog):
        selector.select_by_index(2)

        selector.set_catalog(phone_catalog[:3])

        assert selector.index == 2

    def test_cursor_reset_when_catalog_shrinks(self, selector, phone_catalog):
        selector.select_by_index(4)

        selector.set_catalog(phone_catalog[:2])

        assert selector.index == 0
        assert selector.current().id == "0"

    def test_cursor_restored_after_catalog_becomes_empty(self, selector, phone_catalog):
        selector.select_by_index(3)
        selector.set_catalog([])
        assert selector.index is None

        selector.set_catalog(phone_catalog)

        assert selector.index == 0

    def test_catalog_is_copied(self, selector, phone_catalog):
        phone_catalog.clear()

        assert len(selector.catalog) == 5


class TestLookup:
    """Test cases for select_by_id, select_by_name and select_by_index."""

    def test_select_by_id(self, selector, binder):
        result = selector.select_by_id("2")

        assert result.status is SelectionStatus.ACTIVATED
        assert selector.index == 2
        assert binder.bound == [("2", Facing.BACK)]

    def test_select_by_unknown_id_leaves_cursor(self, selector, binder):
        selector.select_by_index(1)

        result = selector.select_by_id("9")

        assert result.status is SelectionStatus.NOT_FOUND
        assert not result.moved
        assert selector.index == 1
        assert binder.bound_ids == ["1"]

    def test_select_by_name_matches_substring_of_display_name(self, selector):
        result = selector.select_by_name("Desk")

        assert result.device.id == "usb_7"

    def test_select_by_name_ignores_default_name_when_overridden(self, selector):
        assert selector.select_by_name("USB Camera").status is SelectionStatus.NOT_FOUND

    def test_select_by_name_picks_first_match(self, selector):
        assert selector.select_by_name("Camera").device.id == "0"

    def test_select_by_name_is_case_sensitive(self, selector):
        assert selector.select_by_name("wide").status is SelectionStatus.NOT_FOUND

    def test_select_by_index(self, selector):
        assert selector.select_by_index(1).device.id == "1"

    @pytest.mark.parametrize("index", [-1, 5, 42])
    def test_select_by_index_out_of_range(self, selector, index):
        result = selector.select_by_index(index)

        assert result.status is SelectionStatus.INDEX_OUT_OF_RANGE
        assert selector.index == 0


class TestActivationFailure:
    """Test cases for binder failures."""

    def test_failure_keeps_cursor_on_requested_device(self, phone_catalog):
        binder = RecordingBinder(fail_ids={"1"})
        selector = ActiveSelector(binder)
        selector.set_catalog(phone_catalog)

        result = selector.select_next()

        assert result.status is SelectionStatus.ACTIVATION_FAILED
        assert result.device.id == "1"
        assert "busy" in str(result.error)
        assert selector.index == 1

    def test_cycling_continues_after_failure(self, phone_catalog):
        binder = RecordingBinder(fail_ids={"1"})
        selector = ActiveSelector(binder)
        selector.set_catalog(phone_catalog)

        selector.select_next()
        result = selector.select_next()

        assert result.status is SelectionStatus.ACTIVATED
        assert result.device.id == "2"

    def test_retry_after_failure(self, phone_catalog):
        binder = RecordingBinder(fail_ids={"1"})
        selector = ActiveSelector(binder)
        selector.set_catalog(phone_catalog)
        selector.select_next()

        binder.fail_ids.clear()
        result = selector.activate_current()

        assert result.status is SelectionStatus.ACTIVATED
        assert binder.bound_ids == ["1"]

    def test_any_binder_exception_is_reported(self, phone_catalog):
        binder = Mock()
        binder.bind.side_effect = OSError("No such device")
        selector = ActiveSelector(binder)
        selector.set_catalog(phone_catalog)

        result = selector.select_by_index(0)

        assert result.status is SelectionStatus.ACTIVATION_FAILED
        assert isinstance(result.error, OSError)


class TestSelectionEvents:
    """Test cases for events emitted by the selector."""

    def test_catalog_change_event(self, binder, events, phone_catalog):
        received = []
        events.subscribe("on_catalog_change", received.append)
        selector = ActiveSelector(binder, events)

        selector.set_catalog(phone_catalog)

        assert received == [tuple(phone_catalog)]

    def test_select_and_activate_events(self, selector, events):
        selected, activated = [], []
        events.subscribe("on_select", selected.append)
        events.subscribe("on_activate", activated.append)

        selector.select_next()

        assert [d.id for d in selected] == ["1"]
        assert [d.id for d in activated] == ["1"]

    def test_unsupported_source_emits_select_only(self, selector, events):
        selected, activated = [], []
        events.subscribe("on_select", selected.append)
        events.subscribe("on_activate", activated.append)

        selector.select_by_index(4)

        assert [d.id for d in selected] == ["bt_AA:BB:CC:DD:EE:FF"]
        assert activated == []

    def test_activation_failed_event_carries_result(self, events, phone_catalog):
        failures = []
        events.subscribe("on_activation_failed", failures.append)
        selector = ActiveSelector(RecordingBinder(fail_ids={"0"}), events)
        selector.set_catalog(phone_catalog)

        selector.activate_current()

        assert len(failures) == 1
        assert isinstance(failures[0], SelectionResult)
        assert failures[0].device.id == "0"

    def test_no_events_when_nothing_moves(self, selector, events):
        callback = Mock()
        events.subscribe("on_select", callback)

        selector.select_by_id("missing")
        selector.select_by_index(9)

        callback.assert_not_called()

    def test_callbacks_run_outside_the_lock(self, selector, events):
        """A callback running on another thread can use the selector."""
        seen = []

        def on_activate(device):
            worker = threading.Thread(target=lambda: seen.append(selector.current().id))
            worker.start()
            worker.join(timeout=2)

        events.subscribe("on_activate", on_activate)

        selector.select_next()

        assert seen == ["1"]

    def test_selector_without_event_manager(self, binder, phone_catalog):
        selector = ActiveSelector(binder)
        selector.set_catalog(phone_catalog)

        assert selector.select_next().ok


class TestConcurrentNavigation:
    """Test cases for navigation from several threads."""

    def test_concurrent_steps_keep_cursor_consistent(self, selector, binder):
        def cycle():
            for _ in range(50):
                selector.select_next()

        threads = [threading.Thread(target=cycle) for _ in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        # 200 steps over five devices land back on the start
        assert selector.index == 0
        assert len(binder.bound) == 120
