"""
Rate computation and report formatting helpers.
Turns energy deltas and time spans into Watts and %/hr or %/day strings.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

SECONDS_PER_HOUR = 3600.0

# Below this absolute %/hr the rate is shown as %/day instead
PERCENT_PER_HOUR_THRESHOLD = 1.0

# Local time, whole seconds, with zone abbreviation
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S %Z"


@dataclass(frozen=True)
class CapacityBounds:
    """Energy levels (Wh) the battery reports as empty and full."""

    empty: float
    full: float

    @property
    def span(self) -> float:
        return self.full - self.empty

    def percent(self, energy: float) -> float:
        """Absolute charge percentage for an energy level."""
        return 100 * (energy - self.empty) / self.span

    def percent_delta(self, energy_diff: float) -> float:
        """Percentage of the usable span covered by an energy delta."""
        return 100 * energy_diff / self.span


def hours_between(later: float, earlier: float) -> float:
    """Elapsed hours between two timestamps given in seconds."""
    return (later - earlier) / SECONDS_PER_HOUR


def watts(energy_diff: float, hours: float) -> float:
    return energy_diff / hours


def percent_per_hour(energy_diff: float, hours: float, bounds: CapacityBounds) -> float:
    return bounds.percent_delta(energy_diff) / hours


def format_percent_rate(pct_per_hour: float) -> str:
    """
    Format a charge rate for display.

    Slow rates are unreadable as %/hr, so anything under the threshold is
    scaled up to %/day.
    """
    if abs(pct_per_hour) >= PERCENT_PER_HOUR_THRESHOLD:
        return f"({pct_per_hour:.1f}%/hr)"
    return f"({pct_per_hour * 24:.1f}%/day)"


def format_rate(energy_diff: float, hours: float, bounds: Optional[CapacityBounds] = None) -> str:
    """
    Format the power drawn over an interval.

    Args:
        energy_diff: Energy change in Wh (negative = discharging)
        hours: Length of the interval in hours, must be non-zero
        bounds: Capacity bounds, if known, to add a percentage rate

    Returns:
        String like "-2.00 W (-2.0%/hr)"
    """
    output = f"{watts(energy_diff, hours):.2f} W"
    if bounds is not None:
        output += " " + format_percent_rate(percent_per_hour(energy_diff, hours, bounds))
    return output


def format_energy(energy: float, bounds: Optional[CapacityBounds] = None) -> str:
    output = f"{energy:.2f} Wh"
    if bounds is not None:
        output += f" ({bounds.percent(energy):.2f}%)"
    return output


def format_energy_delta(energy_diff: float, bounds: Optional[CapacityBounds] = None) -> str:
    output = f"{energy_diff:+.2f} Wh"
    if bounds is not None:
        output += f" ({bounds.percent_delta(energy_diff):+.2f}%)"
    return output


def format_rel_time(seconds: float) -> str:
    """
    Format a duration as a compact "1h2m3s" string.

    Zero components are left out and durations under one second give an
    empty string.
    """
    total = int(seconds)
    if total <= 0:
        return ""

    hours, rest = divmod(total, 3600)
    mins, secs = divmod(rest, 60)

    output = ""
    if hours > 0:
        output += f"{hours}h"
    if mins > 0:
        output += f"{mins}m"
    if secs > 0:
        output += f"{secs}s"
    return output


def format_timestamp(wall_time: float) -> str:
    """Local wall-clock timestamp for the start of a report line."""
    return datetime.fromtimestamp(int(wall_time)).astimezone().strftime(TIMESTAMP_FORMAT)
