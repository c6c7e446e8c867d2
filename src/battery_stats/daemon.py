#!/usr/bin/env python3
"""
Battery Stats Daemon.
Watches the UPower battery and systemd sleep notifications and prints
power consumption statistics for every change.
"""

import argparse
import signal
import sys

import gi
gi.require_version("GLib", "2.0")
from gi.repository import GLib

from .bus import (
    BatteryNotFoundError,
    MultipleBatteriesError,
    SLEEP_INTERFACE,
    find_battery,
    get_bus,
    get_device_properties,
    subscribe_battery_properties,
    subscribe_sleep_events,
)
from .events import EventInbox, PropertiesEvent, SleepEvent
from .monitor import BatteryMonitor


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="battery-stats",
        description="Print battery power consumption statistics from UPower.",
    )
    parser.add_argument(
        "--session",
        action="store_true",
        help="use the session bus instead of the system bus (for a mock UPower)",
    )
    return parser


def start(bus, inbox: EventInbox) -> str:
    """
    Hook both event sources up to the inbox and feed the initial snapshot.

    Returns:
        Object path of the watched battery
    """
    subscribe_sleep_events(
        bus, lambda stage, operation, extra: inbox.put(SleepEvent(stage, operation, extra))
    )
    print(f"Watching {SLEEP_INTERFACE} for sleep events", flush=True)

    battery_path = find_battery(bus)

    # Subscribe before the snapshot; signals are only dispatched once the
    # main loop runs, so the snapshot is always handled first
    subscribe_battery_properties(
        bus, battery_path, lambda changed: inbox.put(PropertiesEvent(changed))
    )
    inbox.put(PropertiesEvent(get_device_properties(bus, battery_path)))
    return battery_path


def main(argv=None):
    """Entry point for the battery stats daemon."""
    args = build_parser().parse_args(argv)

    inbox = EventInbox(BatteryMonitor())

    try:
        bus = get_bus(session=args.session)
        start(bus, inbox)
    except BatteryNotFoundError:
        print("No battery found")
        sys.exit(0)
    except MultipleBatteriesError:
        print("Multiple batteries not supported yet")
        sys.exit(1)
    except GLib.Error as e:
        print(f"D-Bus error: {e.message}", file=sys.stderr)
        sys.exit(1)

    loop = GLib.MainLoop()
    for signum in (signal.SIGINT, signal.SIGTERM):
        GLib.unix_signal_add(GLib.PRIORITY_DEFAULT, signum, loop.quit)
    loop.run()


if __name__ == "__main__":
    main()
