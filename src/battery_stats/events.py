"""
Event handling - turns sleep signals and UPower property payloads into
BatteryMonitor calls, one event at a time.
"""

from collections import deque
from dataclasses import dataclass, field
from typing import Any, Mapping

from .monitor import BatteryMonitor, BatteryState

# UPower Device.State values
UPOWER_STATE_MAP = {
    1: BatteryState.CHARGING,
    2: BatteryState.DISCHARGING,
    4: BatteryState.IDLE,  # fully charged
    5: BatteryState.IDLE,  # pending charge
}


@dataclass(frozen=True)
class SleepEvent:
    """A systemd-sleep transition as sent by the sleep hook."""

    stage: str
    operation: str
    extra: str = ""


@dataclass(frozen=True)
class PropertiesEvent:
    """A full or partial set of UPower battery properties."""

    properties: Mapping[str, Any] = field(default_factory=dict)


def process_sleep_event(monitor: BatteryMonitor, event: SleepEvent):
    """Only suspend is tracked; other operations and stages are ignored."""
    if event.operation != "suspend":
        return

    if event.stage == "pre":
        monitor.enter_suspend()
    elif event.stage == "post":
        monitor.exit_suspend()


def process_battery_properties(monitor: BatteryMonitor, properties: Mapping[str, Any]):
    """
    Apply UPower battery properties to the monitor.

    State goes first so that an Energy value in the same payload lands in
    the freshly reset cycle. The capacity limits are only taken when both
    are present.
    """
    if "State" in properties:
        battery_state = UPOWER_STATE_MAP.get(int(properties["State"]))
        if battery_state is not None:
            monitor.set_battery_state(battery_state)

    if "EnergyEmpty" in properties and "EnergyFull" in properties:
        monitor.set_battery_limits(
            float(properties["EnergyEmpty"]),
            float(properties["EnergyFull"]),
        )

    if "Energy" in properties:
        monitor.update_energy(float(properties["Energy"]))


def dispatch(monitor: BatteryMonitor, event):
    if isinstance(event, SleepEvent):
        process_sleep_event(monitor, event)
    elif isinstance(event, PropertiesEvent):
        process_battery_properties(monitor, event.properties)
    else:
        raise TypeError(f"Unknown event type: {type(event).__name__}")


class EventInbox:
    """
    Ordered inbox shared by the sleep and battery event sources.

    Every event is handled to completion before the next one starts.
    Events put while another is being handled are queued behind it.
    """

    def __init__(self, monitor: BatteryMonitor):
        self.monitor = monitor
        self._pending = deque()
        self._draining = False

    def put(self, event):
        self._pending.append(event)
        if self._draining:
            return

        self._draining = True
        try:
            while self._pending:
                dispatch(self.monitor, self._pending.popleft())
        finally:
            self._draining = False

    def __len__(self):
        return len(self._pending)
