import io
import re

from battery_stats.monitor import BatteryMonitor

TIMESTAMP_RE = re.compile(r"^\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2} \S*")


class FakeClock:
    """Clock pair that only moves when told to."""

    def __init__(self, wall=1_700_000_000.0, mono=1_000.0):
        self.wall = wall
        self.mono = mono

    def time(self):
        return self.wall

    def monotonic(self):
        return self.mono

    def advance(self, seconds, mono=None):
        self.wall += seconds
        self.mono += seconds if mono is None else mono


def make_monitor(clock=None):
    out = io.StringIO()
    return BatteryMonitor(out=out, clock=clock or FakeClock()), out


def report_lines(out):
    """Report lines with the leading timestamp removed."""
    return [TIMESTAMP_RE.sub("", line, count=1) for line in out.getvalue().splitlines()]
