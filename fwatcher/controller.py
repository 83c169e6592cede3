"""
Watch controller for fwatcher.

The controller consumes change events from a single loop, keeps those that
pass the pattern filter and the interval gate, and restarts the command for
each of them.
"""

import logging
import time
from typing import Callable, Optional

from rich.console import Console

from fwatcher.config import WatchConfig
from fwatcher.errors import SpawnError, WatchSourceError
from fwatcher.events import ChangeEvent, WatchSource
from fwatcher.gate import IntervalGate
from fwatcher.patterns import PatternFilter
from fwatcher.supervisor import ProcessSupervisor, default_launcher

logger = logging.getLogger(__name__)


class WatchController:
    """
    Orchestrates pattern filtering, rate gating and process restarts.

    Attributes:
        config: Immutable watch settings.
        source: Watch source delivering ChangeEvent values.
        filter: Include/exclude pattern filter.
        gate: Interval gate.
        supervisor: Process supervisor.
        console: Rich console used for the per-trigger notice.
    """

    def __init__(
        self,
        config: WatchConfig,
        source: Optional[WatchSource] = None,
        launcher: Callable = default_launcher,
        clock: Callable[[], float] = time.monotonic,
        console: Optional[Console] = None,
    ):
        self.config = config
        self.clock = clock
        self.filter = PatternFilter(config.includes, config.excludes)
        self.gate = IntervalGate(config.interval)
        self.supervisor = ProcessSupervisor(
            config.command, restart_policy=config.restart, launcher=launcher, clock=clock
        )
        self.source = source if source is not None else WatchSource(config.directories)
        self.console = console if console is not None else Console()
        self.watching = False

    def _restart(self, now: float) -> bool:
        try:
            self.supervisor.restart(now)
        except SpawnError as e:
            logger.error("%s", e)
            return False
        return True

    def start(self) -> None:
        """
        Register the watch targets and run the command once.

        Raises:
            WatchRegistrationError: If a directory cannot be watched. Nothing is spawned.
        """
        self.source.start()
        now = self.clock()
        self._restart(now)
        self.gate.record_action(now)
        self.watching = True

    def handle_event(self, event: ChangeEvent) -> bool:
        """
        Process one change event.

        Returns:
            bool: True if the event caused a restart.
        """
        if not event.actionable:
            return False
        if not self.filter.is_relevant(event.path):
            return False

        now = self.clock()
        if not self.gate.should_act(now):
            logger.debug("Suppressed %s (within %ss interval)", event.path, self.gate.interval)
            return False

        self.gate.record_action(now)
        self.console.print(f"Modified: {event.path}", markup=False, highlight=False)
        self._restart(now)
        return True

    def run(self) -> int:
        """
        Start, then process events until the watch source fails or the user interrupts.

        Returns:
            int: 0 after an interrupt, 1 after a watch source error.

        Raises:
            WatchRegistrationError: If startup fails.
        """
        self.start()
        status = 0
        try:
            for event in self.source:
                self.handle_event(event)
        except WatchSourceError as e:
            logger.error("Watch error: %s", e)
            status = 1
        except KeyboardInterrupt:
            logger.info("Interrupted, stopping.")
        finally:
            self.watching = False
            self.source.stop()
            self.supervisor.shutdown()
        return status
