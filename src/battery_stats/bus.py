"""
D-Bus plumbing - UPower battery discovery, property and sleep signal
subscriptions, and the sleep signal emitted by the systemd-sleep hook.
"""

import gi
gi.require_version("Gio", "2.0")
from gi.repository import Gio, GLib

# UPower
UPOWER_SERVICE = "org.freedesktop.UPower"
UPOWER_PATH = "/org/freedesktop/UPower"
UPOWER_INTERFACE = "org.freedesktop.UPower"
UPOWER_DEVICE_INTERFACE = "org.freedesktop.UPower.Device"
PROPERTIES_INTERFACE = "org.freedesktop.DBus.Properties"
DEVICE_TYPE_BATTERY = 2

# Sleep notifications sent by the systemd-sleep hook
SLEEP_OBJECT_PATH = "/BatteryStats"
SLEEP_INTERFACE = "BatteryStats.Sleep"
SLEEP_SIGNAL = "SystemdSleepEvent"


class BatteryStatsError(Exception):
    """Base class for battery-stats errors."""


class BatteryNotFoundError(BatteryStatsError):
    """UPower reports no battery device."""


class MultipleBatteriesError(BatteryStatsError):
    """UPower reports more than one battery device."""


def get_bus(session: bool = False) -> Gio.DBusConnection:
    """Connect to the system bus, or the session bus for testing."""
    bus_type = Gio.BusType.SESSION if session else Gio.BusType.SYSTEM
    return Gio.bus_get_sync(bus_type, None)


def _call(bus, path, interface, method, args=None, reply_type=None):
    reply = bus.call_sync(
        UPOWER_SERVICE,
        path,
        interface,
        method,
        args,
        GLib.VariantType.new(reply_type) if reply_type else None,
        Gio.DBusCallFlags.NONE,
        -1,
        None,
    )
    return reply.unpack()


def enumerate_devices(bus) -> list:
    """Object paths of all UPower devices."""
    (devices,) = _call(bus, UPOWER_PATH, UPOWER_INTERFACE, "EnumerateDevices", reply_type="(ao)")
    return list(devices)


def get_device_property(bus, path: str, name: str):
    (value,) = _call(
        bus,
        path,
        PROPERTIES_INTERFACE,
        "Get",
        GLib.Variant("(ss)", (UPOWER_DEVICE_INTERFACE, name)),
        "(v)",
    )
    return value


def get_device_properties(bus, path: str) -> dict:
    """Snapshot of every UPower.Device property of a device."""
    (properties,) = _call(
        bus,
        path,
        PROPERTIES_INTERFACE,
        "GetAll",
        GLib.Variant("(s)", (UPOWER_DEVICE_INTERFACE,)),
        "(a{sv})",
    )
    return properties


def find_battery(bus) -> str:
    """
    Find the single battery device known to UPower.

    Returns:
        Object path of the battery

    Raises:
        BatteryNotFoundError: no device has the battery type
        MultipleBatteriesError: more than one device has the battery type
    """
    battery_path = None
    for path in enumerate_devices(bus):
        if get_device_property(bus, path, "Type") != DEVICE_TYPE_BATTERY:
            continue

        print(f"Found battery at {path}", flush=True)
        if battery_path is not None:
            raise MultipleBatteriesError(f"{battery_path} and {path} are both batteries")
        battery_path = path

    if battery_path is None:
        raise BatteryNotFoundError("UPower has no battery device")
    return battery_path


def subscribe_battery_properties(bus, path: str, callback) -> int:
    """
    Call callback(changed_properties) on every PropertiesChanged signal
    for the battery device.
    """

    def on_signal(connection, sender, object_path, interface, signal, parameters, *user_data):
        _interface_name, changed, _invalidated = parameters.unpack()
        callback(changed)

    return bus.signal_subscribe(
        UPOWER_SERVICE,
        PROPERTIES_INTERFACE,
        "PropertiesChanged",
        path,
        UPOWER_DEVICE_INTERFACE,
        Gio.DBusSignalFlags.NONE,
        on_signal,
    )


def subscribe_sleep_events(bus, callback) -> int:
    """Call callback(stage, operation, extra) on every sleep hook signal."""

    def on_signal(connection, sender, object_path, interface, signal, parameters, *user_data):
        stage, operation, extra = parameters.unpack()
        callback(stage, operation, extra)

    return bus.signal_subscribe(
        None,
        SLEEP_INTERFACE,
        SLEEP_SIGNAL,
        SLEEP_OBJECT_PATH,
        None,
        Gio.DBusSignalFlags.NONE,
        on_signal,
    )


def emit_sleep_event(bus, stage: str, operation: str, extra: str = ""):
    """Broadcast a sleep transition and wait until it has been sent."""
    bus.emit_signal(
        None,
        SLEEP_OBJECT_PATH,
        SLEEP_INTERFACE,
        SLEEP_SIGNAL,
        GLib.Variant("(sss)", (stage, operation, extra)),
    )
    bus.flush_sync(None)
