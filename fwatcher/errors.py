"""
Error types raised by fwatcher.

Configuration and registration errors are fatal and surface before the
watch loop starts. Spawn errors are logged and the loop keeps going. Watch
source errors end the loop.
"""


class FwatcherError(Exception):
    """Base class for all fwatcher errors."""

    pass


class ConfigurationError(FwatcherError):
    """Exception raised for a bad pattern, a missing command or a bad config file."""

    pass


class WatchRegistrationError(FwatcherError):
    """Exception raised when a directory cannot be registered for watching."""

    pass


class SpawnError(FwatcherError):
    """Exception raised when the child process could not be started."""

    pass


class WatchSourceError(FwatcherError):
    """Exception raised when the change event source fails or is closed."""

    pass
