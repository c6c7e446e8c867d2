import pytest

from battery_stats.events import (
    EventInbox,
    PropertiesEvent,
    SleepEvent,
    dispatch,
    process_battery_properties,
)
from battery_stats.monitor import BatteryState

from helpers import report_lines


class RecordingMonitor:
    """Stands in for BatteryMonitor and records the calls it gets."""

    def __init__(self):
        self.calls = []

    def enter_suspend(self):
        self.calls.append(("enter_suspend",))

    def exit_suspend(self):
        self.calls.append(("exit_suspend",))

    def set_battery_state(self, state):
        self.calls.append(("set_battery_state", state))

    def set_battery_limits(self, empty, full):
        self.calls.append(("set_battery_limits", empty, full))

    def update_energy(self, energy):
        self.calls.append(("update_energy", energy))


@pytest.mark.parametrize(
    "value,state",
    [
        (1, BatteryState.CHARGING),
        (2, BatteryState.DISCHARGING),
        (4, BatteryState.IDLE),
        (5, BatteryState.IDLE),
    ],
)
def test_state_mapping(value, state):
    monitor = RecordingMonitor()
    process_battery_properties(monitor, {"State": value})
    assert monitor.calls == [("set_battery_state", state)]


@pytest.mark.parametrize("value", [0, 3, 6])
def test_other_states_are_ignored(value):
    monitor = RecordingMonitor()
    process_battery_properties(monitor, {"State": value})
    assert monitor.calls == []


def test_processing_order_within_payload():
    monitor = RecordingMonitor()
    process_battery_properties(
        monitor,
        {"Energy": 42.0, "EnergyFull": 60.0, "State": 2, "EnergyEmpty": 0.0},
    )
    assert monitor.calls == [
        ("set_battery_state", BatteryState.DISCHARGING),
        ("set_battery_limits", 0.0, 60.0),
        ("update_energy", 42.0),
    ]


def test_limits_need_both_values():
    monitor = RecordingMonitor()
    process_battery_properties(monitor, {"EnergyEmpty": 0.0})
    process_battery_properties(monitor, {"EnergyFull": 60.0})
    assert monitor.calls == []


def test_unknown_keys_are_ignored():
    monitor = RecordingMonitor()
    process_battery_properties(monitor, {"Percentage": 50.0, "Model": "X", "Type": 2})
    assert monitor.calls == []


def test_energy_in_state_payload_lands_in_new_cycle(monitor_out, clock):
    monitor, out = monitor_out
    monitor.update_energy(80.0)
    clock.advance(3600)

    process_battery_properties(monitor, {"State": 1, "Energy": 81.0})

    assert monitor.first_sample.energy == 81.0
    assert [s.energy for s in monitor.samples] == [81.0]
    assert report_lines(out)[-1] == " - 81.00 Wh"


@pytest.mark.parametrize(
    "event,calls",
    [
        (SleepEvent("pre", "suspend"), [("enter_suspend",)]),
        (SleepEvent("post", "suspend", "low-battery"), [("exit_suspend",)]),
        (SleepEvent("pre", "hibernate"), []),
        (SleepEvent("post", "suspend-then-hibernate"), []),
        (SleepEvent("during", "suspend"), []),
    ],
)
def test_sleep_events(event, calls):
    monitor = RecordingMonitor()
    dispatch(monitor, event)
    assert monitor.calls == calls


def test_dispatch_rejects_unknown_events():
    with pytest.raises(TypeError):
        dispatch(RecordingMonitor(), object())


def test_inbox_handles_events_in_order():
    monitor = RecordingMonitor()
    inbox = EventInbox(monitor)
    inbox.put(PropertiesEvent({"State": 2}))
    inbox.put(SleepEvent("pre", "suspend"))
    inbox.put(PropertiesEvent({"Energy": 10.0}))

    assert monitor.calls == [
        ("set_battery_state", BatteryState.DISCHARGING),
        ("enter_suspend",),
        ("update_energy", 10.0),
    ]
    assert len(inbox) == 0


def test_inbox_queues_events_put_while_handling():
    monitor = RecordingMonitor()
    inbox = EventInbox(monitor)

    def enter_suspend():
        monitor.calls.append(("enter_suspend",))
        inbox.put(PropertiesEvent({"Energy": 5.0}))
        # Not handled until the current event is done
        assert monitor.calls[-1] == ("enter_suspend",)
        monitor.calls.append(("enter_suspend done",))

    monitor.enter_suspend = enter_suspend
    inbox.put(SleepEvent("pre", "suspend"))

    assert monitor.calls == [
        ("enter_suspend",),
        ("enter_suspend done",),
        ("update_energy", 5.0),
    ]


def test_inbox_drives_real_monitor(monitor_out, clock):
    monitor, out = monitor_out
    inbox = EventInbox(monitor)
    inbox.put(PropertiesEvent({"State": 2, "EnergyEmpty": 0.0, "EnergyFull": 100.0, "Energy": 80.0}))
    clock.advance(3600)
    inbox.put(PropertiesEvent({"Energy": 78.0}))
    inbox.put(SleepEvent("pre", "suspend"))
    inbox.put(PropertiesEvent({"Energy": 77.0}))

    assert report_lines(out) == [
        " - Battery discharging",
        " - 80.00 Wh (80.00%)",
        " (+1h) - 78.00 Wh (78.00%) / Rate -2.00 W (-2.0%/hr) / Avg -2.00 W (-2.0%/hr)",
        " (+1h) - Going to sleep",
    ]
