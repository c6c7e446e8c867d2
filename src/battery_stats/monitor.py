"""
Battery Monitor - Power accounting over UPower energy readings.
Tracks charge cycles and suspend intervals, and prints one report line
per event with instantaneous, average and sleep-time power figures.
"""

import enum
import sys
import time
from collections import deque
from dataclasses import dataclass
from typing import Optional

from .stats import (
    CapacityBounds,
    format_energy,
    format_energy_delta,
    format_rate,
    format_rel_time,
    format_timestamp,
    hours_between,
)

# Readings kept for instantaneous rate (current + previous)
SAMPLE_WINDOW = 2


class PowerState(enum.Enum):
    AWAKE = "awake"
    SUSPENDED = "suspended"
    # Not produced by any sleep event yet
    HIBERNATING = "hibernating"


class BatteryState(enum.Enum):
    CHARGING = "charging"
    DISCHARGING = "discharging"
    IDLE = "idle"


class Stat(enum.Flag):
    """Sections to include in a report line."""

    NONE = 0
    ENERGY = enum.auto()
    RATE = enum.auto()
    AVERAGE_RATE = enum.auto()
    REL_ENERGY = enum.auto()


class SystemClock:
    """Wall clock for rate math and display, monotonic clock for elapsed time."""

    def time(self) -> float:
        return time.time()

    def monotonic(self) -> float:
        return time.monotonic()


@dataclass(frozen=True)
class Sample:
    """One energy reading stamped with both clocks."""

    time: float
    monotonic: float
    energy: float


class BatteryMonitor:
    """
    Sequential reducer for battery and sleep events.

    - Keeps the last two readings for instantaneous rate
    - Keeps the first reading of the charge cycle for average rate
    - Subtracts energy used while suspended from the average
    - Drops readings that arrive while the system is going to sleep
    """

    def __init__(self, out=None, clock=None):
        self._out = out if out is not None else sys.stdout
        self._clock = clock if clock is not None else SystemClock()

        # Capacity bounds, known once UPower has reported both limits
        self._bounds: Optional[CapacityBounds] = None

        # Charge cycle state
        self._first_sample: Optional[Sample] = None
        self._samples = deque(maxlen=SAMPLE_WINDOW)
        self._suspend_energy = 0.0

        # Power state
        self._power_state = PowerState.AWAKE
        self._suspend_entered_at: Optional[float] = None
        self._report_suspend_stats = False

    @property
    def bounds(self) -> Optional[CapacityBounds]:
        return self._bounds

    @property
    def first_sample(self) -> Optional[Sample]:
        return self._first_sample

    @property
    def samples(self) -> tuple:
        return tuple(self._samples)

    @property
    def suspend_energy(self) -> float:
        return self._suspend_energy

    @property
    def power_state(self) -> PowerState:
        return self._power_state

    @property
    def report_suspend_stats(self) -> bool:
        return self._report_suspend_stats

    def is_suspended(self) -> bool:
        return self._suspend_entered_at is not None

    def enter_suspend(self):
        """Record the start of a sleep interval."""
        if self._power_state is not PowerState.AWAKE:
            return

        self._suspend_entered_at = self._clock.time()
        self._power_state = PowerState.SUSPENDED
        self.report("Going to sleep")

    def exit_suspend(self):
        """Close the sleep interval and flag the next reading for sleep stats."""
        if self._suspend_entered_at is None:
            return

        suspend_time = self._clock.time() - self._suspend_entered_at

        self._suspend_entered_at = None
        self._power_state = PowerState.AWAKE
        self._report_suspend_stats = True
        self.report(f"Resumed from {format_rel_time(suspend_time)} sleep")

    def set_battery_state(self, battery_state: BatteryState):
        """
        Apply a charge state report from UPower.

        Charging and discharging start a new cycle every time they are
        reported, even when the state has not changed. Idle keeps the
        current cycle so short idle blips don't wipe the averages.
        """
        if battery_state is BatteryState.IDLE:
            self.report("Battery idle")
            return

        self._first_sample = None
        self._samples.clear()
        self._suspend_energy = 0.0

        if battery_state is BatteryState.CHARGING:
            self.report("Battery charging")
        elif battery_state is BatteryState.DISCHARGING:
            self.report("Battery discharging")

    def set_battery_limits(self, empty: float, full: float):
        """Set the energy levels (Wh) used to derive percentages."""
        if full == empty:
            # No usable span, percentages stay hidden
            self._bounds = None
            return
        self._bounds = CapacityBounds(empty=empty, full=full)

    def update_energy(self, energy: float):
        """
        Record an energy reading in Wh.

        Readings between the suspend and resume notifications are dropped:
        there is no telling whether they were taken before the hardware
        went to sleep or after it woke up, and the latter would skew the
        rates more the longer the sleep lasted.
        """
        if self.is_suspended():
            return

        sample = Sample(
            time=self._clock.time(),
            monotonic=self._clock.monotonic(),
            energy=energy,
        )

        if self._first_sample is None:
            self._first_sample = sample

        self._samples.append(sample)

        if self._report_suspend_stats:
            if len(self._samples) > 1:
                self._suspend_energy += energy - self._samples[-2].energy
            self.report("Sleep energy use", Stat.REL_ENERGY | Stat.RATE)
            self._report_suspend_stats = False
        else:
            self.report("", Stat.ENERGY | Stat.RATE | Stat.AVERAGE_RATE)

    def format_line(self, msg: str = "", flags: Stat = Stat.NONE) -> str:
        """Build a report line for the current state."""
        line = format_timestamp(self._clock.time())

        if self._first_sample is not None:
            run_time = format_rel_time(self._clock.monotonic() - self._first_sample.monotonic)
            if run_time:
                line += f" (+{run_time})"

        if msg:
            line += f" - {msg}"

        if not self._samples:
            return line

        current = self._samples[-1]
        previous = self._samples[-2] if len(self._samples) > 1 else None

        if flags & Stat.ENERGY:
            line += " - " + format_energy(current.energy, self._bounds)

        if flags & Stat.REL_ENERGY and previous is not None:
            line += " - " + format_energy_delta(current.energy - previous.energy, self._bounds)

        if flags & Stat.RATE and previous is not None:
            # Wall clock, same basis as the printed timestamps
            hours = hours_between(current.time, previous.time)
            if hours != 0:
                line += " / Rate " + format_rate(current.energy - previous.energy, hours, self._bounds)

        if flags & Stat.AVERAGE_RATE and self._first_sample is not None and previous is not None:
            # Monotonic clock, a wall clock step mid-cycle must not skew the average
            awake_energy = current.energy - self._first_sample.energy - self._suspend_energy
            hours = hours_between(current.monotonic, self._first_sample.monotonic)
            if hours != 0:
                line += " / Avg " + format_rate(awake_energy, hours, self._bounds)

        return line

    def report(self, msg: str = "", flags: Stat = Stat.NONE):
        """Write a report line to the output sink."""
        print(self.format_line(msg, flags), file=self._out, flush=True)
