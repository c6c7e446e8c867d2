"""
Battery Stats - Battery power consumption statistics from UPower.

This package provides:
- Instantaneous and per-cycle average power from battery energy readings
- Sleep-time energy accounting via a systemd-sleep hook
- A daemon that watches the UPower battery over D-Bus
"""

__version__ = "1.0.0"

from .monitor import (
    BatteryMonitor,
    BatteryState,
    PowerState,
    Sample,
    Stat,
    SystemClock,
    SAMPLE_WINDOW,
)
from .stats import (
    CapacityBounds,
    format_rate,
    format_rel_time,
    PERCENT_PER_HOUR_THRESHOLD,
)
from .events import (
    EventInbox,
    PropertiesEvent,
    SleepEvent,
    process_battery_properties,
)

__all__ = [
    "BatteryMonitor",
    "BatteryState",
    "PowerState",
    "Sample",
    "Stat",
    "SystemClock",
    "SAMPLE_WINDOW",
    "CapacityBounds",
    "format_rate",
    "format_rel_time",
    "PERCENT_PER_HOUR_THRESHOLD",
    "EventInbox",
    "PropertiesEvent",
    "SleepEvent",
    "process_battery_properties",
]
