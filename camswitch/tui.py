"""
Terminal User Interface for camswitch using the Textual framework.

This module provides an interactive switcher: the discovered cameras in
switching order, the active one highlighted, and previous/next navigation.
"""

import logging
from datetime import datetime
from typing import Optional

from textual.app import App, ComposeResult
from textual.containers import Container, Horizontal, Vertical
from textual.widgets import Button, DataTable, Footer, Header, Static
from textual import events
from textual.css.query import NoMatches

from .backends import CamSwitchError
from .logging_config import CamSwitchLogger
from .manager import CameraSwitcher
from .models import ClassifiedDevice
from .selector import SelectionResult, SelectionStatus

logger = logging.getLogger(__name__)


def describe_selection(result: SelectionResult) -> str:
    """Turn a selection result into a status bar message."""
    device = result.device
    if result.status is SelectionStatus.ACTIVATED:
        return f"Switched to: {device.display_name}"
    if result.status is SelectionStatus.UNSUPPORTED_SOURCE:
        return f"{device.display_name} requires special setup"
    if result.status is SelectionStatus.ACTIVATION_FAILED:
        return f"Error starting {device.display_name}: {result.error}"
    if result.status is SelectionStatus.EMPTY_CATALOG:
        return "No cameras found"
    if result.status is SelectionStatus.INDEX_OUT_OF_RANGE:
        return "No camera at that position"
    return "Camera not found"


class DeviceTable(DataTable):
    """Custom DataTable widget for displaying the camera catalog."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.cursor_type = "row"
        self.zebra_stripes = True

        self.add_column("", width=3)
        self.add_column("Name", width=24)
        self.add_column("Default", width=20)
        self.add_column("Source", width=10)
        self.add_column("ID", width=22)

    def show_catalog(self, devices, active_index: Optional[int]) -> None:
        self.clear()
        for index, device in enumerate(devices):
            marker = "▶" if index == active_index else ""
            self.add_row(marker, device.display_name, device.default_name, device.source.value, device.id)
        if active_index is not None:
            self.move_cursor(row=active_index)


class StatusBar(Static):
    """Status bar showing the outcome of the last action."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.update_status("Initializing...")

    def update_status(self, message: str):
        """Update the status message."""
        timestamp = datetime.now().strftime("%H:%M:%S")
        self.update(f"[dim]{timestamp}[/dim] {message}")


class CamSwitchTUI(App):
    """
    Main TUI application for switching cameras.

    The first camera is activated on start.
    ``r`` runs a new discovery pass and keeps the cursor where it was when
    the catalog still reaches it.
    """

    CSS = """
    .main-container {
        height: 1fr;
        margin: 1;
    }

    .current {
        height: 1;
        padding: 0 1;
        color: $text;
    }

    .device-table {
        height: 1fr;
        border: solid $primary;
        margin-bottom: 1;
    }

    .controls {
        height: 3;
        background: $surface;
    }

    .status-bar {
        dock: bottom;
        height: 1;
        background: $surface;
        color: $text;
        padding: 0 1;
    }
    """

    TITLE = "camswitch"
    SUB_TITLE = "Switch between cameras"

    def __init__(self, names_path: Optional[str] = None, switcher: Optional[CameraSwitcher] = None, **kwargs):
        super().__init__(**kwargs)
        self.names_path = names_path
        self.switcher = switcher
        self._debug_logging = False

    def compose(self) -> ComposeResult:
        yield Header(show_clock=True)

        with Container(classes="main-container"):
            with Vertical():
                yield Static("Current: -", id="current-camera", classes="current")
                yield DeviceTable(id="device-table", classes="device-table")

                with Horizontal(classes="controls"):
                    yield Button("◀ Previous", id="prev-btn")
                    yield Button("Next ▶", id="next-btn")
                    yield Button("Refresh", id="refresh-btn", variant="primary")
                    yield Button("Quit", id="quit-btn", variant="error")

        yield StatusBar(classes="status-bar", id="status-bar")
        yield Footer()

    async def on_mount(self) -> None:
        """Create the switcher and activate the first camera."""
        try:
            if self.switcher is None:
                self.switcher = CameraSwitcher(names_path=self.names_path)
            self.switcher.on("on_activation_failed", self._on_activation_failed)
            self._discover(activate=True)
        except CamSwitchError as e:
            logger.error(f"Failed to initialize TUI: {e}")
            self._update_status(f"Error: {e.message}")

    async def on_unmount(self) -> None:
        if self.switcher:
            self.switcher.close()

    async def on_button_pressed(self, event: Button.Pressed) -> None:
        """Handle button press events."""
        if event.button.id == "prev-btn":
            self.show_previous()
        elif event.button.id == "next-btn":
            self.show_next()
        elif event.button.id == "refresh-btn":
            self._discover()
        elif event.button.id == "quit-btn":
            self.exit()

    async def on_key(self, event: events.Key) -> None:
        """Handle key press events."""
        if event.key in ("p", "left"):
            self.show_previous()
        elif event.key in ("n", "right"):
            self.show_next()
        elif event.key == "r":
            self._discover()
        elif event.key == "d":
            self._toggle_debug_logging()
        elif event.key == "q":
            self.exit()

    async def on_data_table_row_selected(self, event: DataTable.RowSelected) -> None:
        if self.switcher and event.cursor_row != self.switcher.selector.index:
            self._apply(self.switcher.select_by_index(event.cursor_row))

    def show_previous(self) -> None:
        if self.switcher:
            self._apply(self.switcher.select_previous())

    def show_next(self) -> None:
        if self.switcher:
            self._apply(self.switcher.select_next())

    def _discover(self, activate: bool = False) -> None:
        if self.switcher is None:
            return
        result = self.switcher.discover(activate=activate)
        self._refresh_view()

        if result.empty:
            self._update_status("No cameras found")
        elif result.warnings:
            sources = ", ".join(w.source or "unknown" for w in result.warnings)
            self._update_status(f"Found {len(result.devices)} camera(s); unavailable: {sources}")
        elif activate:
            current = self.switcher.current()
            self._update_status(f"Current: {current.display_name}")
        else:
            self._update_status(f"Found {len(result.devices)} camera(s)")

    def _apply(self, result: SelectionResult) -> None:
        self._refresh_view()
        self._update_status(describe_selection(result))

    def _refresh_view(self) -> None:
        current: Optional[ClassifiedDevice] = self.switcher.current()
        try:
            self.query_one("#device-table", DeviceTable).show_catalog(
                self.switcher.devices, self.switcher.selector.index
            )
            label = current.display_name if current else "No cameras found"
            self.query_one("#current-camera", Static).update(f"Current: {label}")
        except NoMatches:
            # Widgets are not mounted yet
            pass

    def _toggle_debug_logging(self) -> None:
        self._debug_logging = not self._debug_logging
        CamSwitchLogger.set_level("DEBUG" if self._debug_logging else "WARNING")
        self._update_status(f"Debug logging {'on' if self._debug_logging else 'off'}")

    def _update_status(self, message: str) -> None:
        try:
            self.query_one("#status-bar", StatusBar).update_status(message)
        except NoMatches:
            # Status bar might not be available yet
            pass

    def _on_activation_failed(self, result: SelectionResult) -> None:
        logger.warning(f"Activation failed for {result.device.id}: {result.error}")


def run_tui(names_path: Optional[str] = None) -> None:
    """
    Run the camswitch TUI application.

    Args:
        names_path: Optional custom path for the camera name store
    """
    app = CamSwitchTUI(names_path=names_path)
    app.run()
