"""Wall-clock helpers"""
import time
from typing import Callable

Clock = Callable[[], int]


def now_ms() -> int:
    """
    Current wall-clock time in epoch milliseconds.

    Timer anchors are written by one device and read by others, so this is the
    local wall clock rather than a monotonic one. Clock skew between devices is
    not compensated.
    """
    return time.time_ns() // 1_000_000
