#!/usr/bin/env python3
"""
systemd-sleep hook.
Installed in /usr/lib/systemd/system-sleep/, systemd runs it as
"<hook> pre|post suspend|hibernate|hybrid-sleep|suspend-then-hibernate"
around every sleep. It forwards the transition to the daemon as a D-Bus
signal.
"""

import argparse
import os
import sys

import gi
gi.require_version("GLib", "2.0")
from gi.repository import GLib

from .bus import emit_sleep_event, get_bus


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="battery-stats-sleep-hook",
        description="Forward a systemd-sleep transition to battery-stats.",
    )
    parser.add_argument("stage", help="pre or post")
    parser.add_argument("operation", help="suspend, hibernate, hybrid-sleep, ...")
    parser.add_argument(
        "extra",
        nargs="?",
        default=None,
        help="extra action (default: $SYSTEMD_SLEEP_ACTION)",
    )
    return parser


def parse_args(argv=None, environ=None):
    """Parse hook arguments, filling extra from the systemd environment."""
    if environ is None:
        environ = os.environ
    args = build_parser().parse_args(argv)
    if args.extra is None:
        args.extra = environ.get("SYSTEMD_SLEEP_ACTION", "")
    return args


def main(argv=None):
    """Entry point for the sleep hook."""
    args = parse_args(argv)

    try:
        bus = get_bus()
        emit_sleep_event(bus, args.stage, args.operation, args.extra)
    except GLib.Error as e:
        print(f"Error sending sleep event: {e.message}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
