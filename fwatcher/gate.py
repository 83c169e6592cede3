"""
Rate gate for fwatcher.

The gate lets at most one action through per interval. Triggers that arrive
while it is cooling down are dropped, never queued or replayed.
"""

from typing import Optional


class IntervalGate:
    """
    Two-state rate limiter (idle, or cooling since the last action).

    Attributes:
        interval (float): Minimum number of seconds between two actions.
        last_action (float or None): Monotonic time of the last accepted action.
    """

    def __init__(self, interval: float = 1.0):
        self.interval = interval
        self.last_action: Optional[float] = None

    @property
    def idle(self) -> bool:
        return self.last_action is None

    def should_act(self, now: float) -> bool:
        """
        Check whether an action at ``now`` is allowed.

        Args:
            now (float): Current monotonic time in seconds.

        Returns:
            bool: True when idle or when the interval has elapsed.
        """
        if self.last_action is None:
            return True
        return now - self.last_action >= self.interval

    def record_action(self, now: float) -> None:
        """Start a new cooldown at ``now``."""
        self.last_action = now
