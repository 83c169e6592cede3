"""
fwatcher: run a command whenever watched files change.

Provides both a CLI and library API for watching directories, filtering
change events with glob patterns and (re)launching a command.
"""

__version__ = "0.3.0"

from fwatcher.config import WatchConfig
from fwatcher.controller import WatchController
from fwatcher.errors import (ConfigurationError, FwatcherError, SpawnError,
                             WatchRegistrationError, WatchSourceError)
from fwatcher.events import ChangeEvent, EventKind, WatchSource
from fwatcher.gate import IntervalGate
from fwatcher.patterns import PatternFilter, compile_patterns, is_relevant
from fwatcher.supervisor import ProcessSupervisor

__all__ = [
    "ChangeEvent",
    "ConfigurationError",
    "EventKind",
    "FwatcherError",
    "IntervalGate",
    "PatternFilter",
    "ProcessSupervisor",
    "SpawnError",
    "WatchConfig",
    "WatchController",
    "WatchRegistrationError",
    "WatchSource",
    "WatchSourceError",
    "compile_patterns",
    "is_relevant",
]
