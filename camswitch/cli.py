"""
Command-line interface for camswitch.

This module provides CLI commands for listing cameras, managing their display
names and activating one of them using the camswitch library API.
"""

import json
import sys
from typing import Optional

import click

from .backends import CamSwitchError
from .logging_config import setup_logging
from .manager import CameraSwitcher
from .selector import SelectionStatus


FAILED_SELECTIONS = {
    SelectionStatus.NOT_FOUND: "No camera matches {target}.",
    SelectionStatus.INDEX_OUT_OF_RANGE: "No camera at index {target}.",
    SelectionStatus.EMPTY_CATALOG: "No cameras found.",
}

names_path_option = click.option(
    '--names-path',
    type=click.Path(dir_okay=False),
    help='Custom path for the camera name store'
)


def _report_warnings(result) -> None:
    for warning in result.warnings:
        click.echo(f"Warning: {warning.message}", err=True)


@click.group()
@click.version_option(version="0.1.0")
@click.option(
    '--log-level',
    type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR'], case_sensitive=False),
    default='WARNING',
    help='Console and file log level'
)
@click.option(
    '--log-file',
    type=click.Path(dir_okay=False),
    help='Log file path (defaults to ~/.camswitch/camswitch.log)'
)
def cli(log_level: str, log_file: Optional[str]):
    """
    camswitch - discover cameras, name them, and switch between them.

    Built-in lenses, USB video devices and paired Bluetooth cameras are
    listed together; names you choose persist across runs.
    """
    setup_logging(log_level=log_level, log_file=log_file)


@cli.command(name='list')
@names_path_option
@click.option(
    '--format',
    'output_format',
    type=click.Choice(['table', 'json']),
    default='table',
    help='Output format for the camera list'
)
@click.option(
    '--sequential',
    is_flag=True,
    help='Query device sources one after another'
)
def list_cameras(names_path: Optional[str], output_format: str, sequential: bool):
    """
    Discover cameras and list them in switching order.
    """
    try:
        switcher = CameraSwitcher(names_path=names_path, parallel_discovery=not sequential)
        result = switcher.discover()
    except CamSwitchError as e:
        click.echo(f"Camera discovery failed: {e}", err=True)
        sys.exit(1)

    _report_warnings(result)

    if result.empty:
        click.echo("No cameras found.", err=True)
        sys.exit(1)

    if output_format == 'json':
        device_data = [
            {
                'index': index,
                'id': device.id,
                'display_name': device.display_name,
                'default_name': device.default_name,
                'source': device.source.value,
                'facing': device.facing.value,
                'focal_length_mm': device.record.focal_length_mm,
                'label': device.record.label,
            }
            for index, device in enumerate(result.devices)
        ]
        click.echo(json.dumps(device_data, indent=2))
        return

    click.echo(f"Found {len(result.devices)} camera(s):\n")
    click.echo(f"{'#':<3} {'ID':<22} {'Source':<10} {'Name':<24} {'Default':<20}")
    click.echo("-" * 82)
    for index, device in enumerate(result.devices):
        marker = "*" if device.has_override else " "
        click.echo(
            f"{index:<3} {device.id:<22} {device.source.value:<10} "
            f"{device.display_name + marker:<24} {device.default_name:<20}"
        )
    click.echo("\n* custom name")


@cli.command()
@names_path_option
@click.argument('device_id')
@click.argument('name')
def rename(names_path: Optional[str], device_id: str, name: str):
    """
    Give DEVICE_ID a custom display NAME.

    A blank name, or the device's default name, removes the custom name.
    """
    try:
        switcher = CameraSwitcher(names_path=names_path)
        switcher.discover()
        display_name = switcher.rename(device_id, name)
    except CamSwitchError as e:
        click.echo(f"Rename failed: {e}", err=True)
        sys.exit(1)

    click.echo(f"{device_id} is now shown as: {display_name}")


@cli.command()
@names_path_option
@click.argument('device_id', required=False)
@click.option('--all', 'reset_all', is_flag=True, help='Remove every custom name')
def reset(names_path: Optional[str], device_id: Optional[str], reset_all: bool):
    """
    Restore the default name of DEVICE_ID, or of every camera with --all.
    """
    if not reset_all and not device_id:
        raise click.UsageError("Give a DEVICE_ID or --all")

    try:
        switcher = CameraSwitcher(names_path=names_path)
        if reset_all:
            switcher.reset_all()
            click.echo("All camera names reset to defaults.")
            return
        switcher.discover()
        default_name = switcher.reset(device_id)
    except CamSwitchError as e:
        click.echo(f"Reset failed: {e}", err=True)
        sys.exit(1)

    click.echo(f"{device_id} is now shown as: {default_name}")


@cli.command()
@names_path_option
def names(names_path: Optional[str]):
    """
    Show the display name of every known camera.

    Cameras that are not connected right now are listed when a custom name
    is stored for them.
    """
    try:
        switcher = CameraSwitcher(names_path=names_path)
        result = switcher.discover()
        entries = switcher.name_entries()
    except CamSwitchError as e:
        click.echo(f"Error listing camera names: {e}", err=True)
        sys.exit(1)

    _report_warnings(result)

    if not entries:
        click.echo("No cameras found and no custom names stored.")
        return

    discovered = {device.id for device in result.devices}
    click.echo(f"{'ID':<22} {'Name':<24} {'Default':<20} {'Seen':<5}")
    click.echo("-" * 74)
    for entry in entries:
        seen = "yes" if entry.device_id in discovered else "no"
        click.echo(f"{entry.device_id:<22} {entry.name:<24} {entry.default_name:<20} {seen:<5}")


@cli.command()
@names_path_option
@click.argument('target')
@click.option(
    '--by',
    type=click.Choice(['id', 'name', 'index']),
    default='id',
    help='How TARGET identifies the camera'
)
def activate(names_path: Optional[str], target: str, by: str):
    """
    Discover cameras and activate the one matching TARGET.
    """
    try:
        switcher = CameraSwitcher(names_path=names_path)
    except CamSwitchError as e:
        click.echo(f"Camera discovery failed: {e}", err=True)
        sys.exit(1)

    with switcher:
        result = switcher.discover()
        _report_warnings(result)

        if by == 'index':
            try:
                index = int(target)
            except ValueError:
                raise click.BadParameter(f"'{target}' is not an index", param_hint='TARGET')
            selection = switcher.select_by_index(index)
        elif by == 'name':
            selection = switcher.select_by_name(target)
        else:
            selection = switcher.select_by_id(target)

        if result.empty:
            selection_status = SelectionStatus.EMPTY_CATALOG
        else:
            selection_status = selection.status

        if selection_status in FAILED_SELECTIONS:
            click.echo(FAILED_SELECTIONS[selection_status].format(target=target), err=True)
            sys.exit(1)

        device = selection.device
        if selection_status is SelectionStatus.ACTIVATION_FAILED:
            click.echo(f"Could not activate {device.display_name}: {selection.error}", err=True)
            sys.exit(1)

        if selection_status is SelectionStatus.UNSUPPORTED_SOURCE:
            click.echo(f"Selected {device.display_name} ({device.source.value}); it requires special setup for live capture.")
        else:
            click.echo(f"Switched to: {device.display_name}")


@cli.command()
@names_path_option
def switch(names_path: Optional[str]):
    """
    Launch the interactive camera switcher.
    """
    try:
        from .tui import run_tui
    except ImportError as e:
        click.echo(f"TUI dependencies not available: {e}", err=True)
        click.echo("Install with: pip install 'camswitch[tui]'", err=True)
        sys.exit(1)

    try:
        run_tui(names_path=names_path)
    except CamSwitchError as e:
        click.echo(f"Switcher error: {e}", err=True)
        sys.exit(1)


def main(args=None):
    """Main entry point for the CLI."""
    cli(args)


if __name__ == '__main__':
    main()
