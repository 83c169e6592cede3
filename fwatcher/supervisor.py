"""
Process supervisor for fwatcher.

Owns the single child process handle. A restart optionally signals the
previous child (without waiting for it to exit) and always spawns a new one
that inherits the controller's stdin, stdout and stderr.
"""

import logging
import time
from typing import Any, Callable, Optional, Sequence

import psutil

from fwatcher.errors import SpawnError

logger = logging.getLogger(__name__)


def default_launcher(argv: Sequence[str]) -> psutil.Popen:
    """Start ``argv`` with inherited stdio and return its process handle."""
    return psutil.Popen(list(argv))


class ProcessSupervisor:
    """
    Spawn/kill lifecycle of the watched command.

    Attributes:
        command: Program and arguments to run.
        restart_policy: When True, the previous child is terminated on restart.
        launcher: Callable taking the argv and returning a handle with ``terminate()``.
        clock: Monotonic time source.
    """

    def __init__(
        self,
        command: Sequence[str],
        restart_policy: bool = False,
        launcher: Callable[[Sequence[str]], Any] = default_launcher,
        clock: Callable[[], float] = time.monotonic,
    ):
        if not command:
            raise ValueError("command must contain at least the executable")
        self.command = tuple(command)
        self.restart_policy = restart_policy
        self.launcher = launcher
        self.clock = clock
        self._handle: Optional[Any] = None
        self._last_spawn: Optional[float] = None

    @property
    def active(self) -> Optional[Any]:
        """Handle of the most recently spawned child, or None."""
        return self._handle

    @property
    def last_spawn(self) -> Optional[float]:
        return self._last_spawn

    def _terminate(self, handle) -> None:
        # Fire and forget: the old child may still be exiting when the new one starts.
        try:
            handle.terminate()
            logger.debug("Sent termination signal to pid %s", getattr(handle, "pid", "?"))
        except (psutil.NoSuchProcess, ProcessLookupError) as e:
            logger.debug("Previous process already gone: %s", e)
        except OSError as e:
            logger.warning("Failed to terminate previous process: %s", e)

    def restart(self, now: Optional[float] = None):
        """
        Optionally kill the previous child, then spawn a new one.

        Args:
            now (float, optional): Spawn timestamp; taken from the clock when omitted.

        Returns:
            The new process handle.

        Raises:
            SpawnError: If the command could not be started. No process is
                considered active afterwards.
        """
        previous, self._handle = self._handle, None
        if previous is not None and self.restart_policy:
            self._terminate(previous)

        self._last_spawn = self.clock() if now is None else now
        try:
            self._handle = self.launcher(self.command)
        except OSError as e:
            raise SpawnError(f"Failed to start {' '.join(self.command)}: {e}") from e

        logger.debug("Spawned %s (pid %s)", self.command[0], getattr(self._handle, "pid", "?"))
        return self._handle

    def shutdown(self) -> None:
        """Best-effort kill of the active child, only when the restart policy is on."""
        if self._handle is not None and self.restart_policy:
            self._terminate(self._handle)
        self._handle = None
