import os
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

import toml
import yaml

from fwatcher.errors import ConfigurationError
from fwatcher.patterns import DEFAULT_PATTERNS

DEFAULT_CONFIG_FILENAME = "fwatcher.toml"
DEFAULT_CONFIG_PATH = os.path.join(".", DEFAULT_CONFIG_FILENAME)
ENV_CONFIG_DIR_VAR = "FWATCHER_CONFIG_DIR"
DEFAULT_DIRECTORIES = (".",)
DEFAULT_INTERVAL = 1.0


@dataclass(frozen=True)
class WatchConfig:
    """
    Immutable watch settings, built once at startup.

    Attributes:
        command: Program and arguments to run.
        directories: Directories watched recursively.
        includes: Include glob patterns.
        excludes: Exclude glob patterns.
        interval: Minimum number of seconds between two runs.
        restart: Whether a running child is terminated before the next run.
    """

    command: Tuple[str, ...]
    directories: Tuple[str, ...] = DEFAULT_DIRECTORIES
    includes: Tuple[str, ...] = DEFAULT_PATTERNS
    excludes: Tuple[str, ...] = ()
    interval: float = DEFAULT_INTERVAL
    restart: bool = False

    @classmethod
    def create(
        cls,
        command: Sequence[str],
        directories: Optional[Sequence[str]] = None,
        includes: Optional[Sequence[str]] = None,
        excludes: Optional[Sequence[str]] = None,
        interval: Optional[float] = None,
        restart: bool = False,
    ) -> "WatchConfig":
        """
        Build a validated config, filling in defaults for empty values.

        Raises:
            ConfigurationError: If the command is empty or the interval is invalid.
        """
        if not command:
            raise ConfigurationError("No command to execute")
        if interval is None:
            interval = DEFAULT_INTERVAL
        try:
            interval = float(interval)
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"Invalid interval: {interval!r}") from e
        if interval < 0:
            raise ConfigurationError(f"Interval must not be negative: {interval}")

        return cls(
            command=tuple(str(c) for c in command),
            directories=tuple(directories or DEFAULT_DIRECTORIES),
            includes=tuple(includes or DEFAULT_PATTERNS),
            excludes=tuple(excludes or ()),
            interval=interval,
            restart=bool(restart),
        )


def _read_config_file(config_path):
    with open(config_path, "r") as f:
        if config_path.endswith((".yaml", ".yml")):
            return yaml.safe_load(f) or {}
        return toml.load(f)


def load_config(cli_config_path=None):
    """
    Load optional settings from a TOML (or YAML) file.

    Precedence:
      1. cli_config_path if provided (must exist).
      2. Environment variable FWATCHER_CONFIG_DIR (looking for fwatcher.toml).
      3. ./fwatcher.toml.
    Missing files in 2 and 3 are not an error.

    Returns:
        dict: The configuration settings, empty when no file was found.

    Raises:
        ConfigurationError: If the explicit file is missing or any file is invalid.
    """
    if cli_config_path:
        config_path = cli_config_path
        if not os.path.exists(config_path):
            raise ConfigurationError(f"Configuration file not found: {config_path}")
    elif os.environ.get(ENV_CONFIG_DIR_VAR):
        config_path = os.path.join(os.environ[ENV_CONFIG_DIR_VAR], DEFAULT_CONFIG_FILENAME)
    else:
        config_path = DEFAULT_CONFIG_PATH

    if not os.path.exists(config_path):
        return {}

    try:
        config_data = _read_config_file(config_path)
    except (OSError, toml.TomlDecodeError, yaml.YAMLError) as e:
        raise ConfigurationError(f"Error loading configuration {config_path}: {e}") from e

    if not isinstance(config_data, dict):
        raise ConfigurationError(f"Configuration {config_path} must be a table/mapping")
    config_data["__config_path__"] = config_path
    return config_data


def build_watch_config(
    cfg,
    command=(),
    directories=(),
    patterns=(),
    exclude_patterns=(),
    interval=None,
    restart=False,
):
    """
    Merge command-line values over the ``[watch]`` table of a loaded config.

    Args:
        cfg (dict): Settings returned by load_config.
        command, directories, patterns, exclude_patterns: Values from the command
            line; empty means "not given".
        interval (float, optional): Value from the command line.
        restart (bool): Command-line flag; it can only switch the policy on.

    Returns:
        WatchConfig: The validated configuration.
    """
    watch = cfg.get("watch", {}) or {}
    file_command = watch.get("command") or ()
    if isinstance(file_command, str):
        file_command = file_command.split()

    return WatchConfig.create(
        command=tuple(command) or tuple(file_command),
        directories=tuple(directories) or tuple(watch.get("directories") or ()),
        includes=tuple(patterns) or tuple(watch.get("patterns") or ()),
        excludes=tuple(exclude_patterns) or tuple(watch.get("exclude_patterns") or ()),
        interval=interval if interval is not None else watch.get("interval"),
        restart=restart or bool(watch.get("restart", False)),
    )
