import signal
import sys

import click

from fwatcher import __version__
from fwatcher import config
from fwatcher.controller import WatchController
from fwatcher.errors import ConfigurationError, WatchRegistrationError
from fwatcher.logger import setup_logger

EXIT_CONFIG_ERROR = 1
EXIT_WATCH_REGISTRATION_ERROR = 2

USAGE_HINT = "run `fwatcher -h` to get the usage."

CONTEXT_SETTINGS = {
    "help_option_names": ["-h", "--help"],
    # Everything after the command belongs to the command.
    "allow_interspersed_args": False,
}


def _terminate_on_sigterm(signum, frame):
    sys.exit(128 + signum)


@click.command(context_settings=CONTEXT_SETTINGS)
@click.version_option(__version__, "-v", "--version", prog_name="fwatcher", message="%(prog)s %(version)s")
@click.option("--restart", "-r", is_flag=True, help="Kill the running command before starting it again.")
@click.option("--directory", "-d", "directories", multiple=True, metavar="<dir>", help="Watch directory, default to current directory.")
@click.option("--pattern", "-p", "patterns", multiple=True, metavar="<pattern>", help='Watch file glob pattern, default to "*".')
@click.option("--exclude-pattern", "--exclude_pattern", "-P", "exclude_patterns", multiple=True, metavar="<exclude_pattern>", help="Exclude file glob pattern.")
@click.option("--interval", "-i", type=float, default=None, metavar="<second>", help="Minimum seconds between two runs, default to 1.")
@click.option("--config", "-c", "config_path", default=None, help="Path to configuration TOML or YAML file.")
@click.option("--debug", is_flag=True, help="Enable debug logging.")
@click.option("--log-file", default=None, help="Also write logs to this file.")
@click.argument("command", nargs=-1, type=click.UNPROCESSED)
@click.pass_context
def main(ctx, restart, directories, patterns, exclude_patterns, interval, config_path, debug, log_file, command):
    """
    Run CMD, and run it again whenever a watched file changes.
    """
    try:
        cfg = config.load_config(config_path)
    except ConfigurationError as e:
        click.echo(f"Error loading configuration: {e}", err=True)
        ctx.exit(EXIT_CONFIG_ERROR)

    log_cfg = cfg.get("logging", {}) or {}
    level = "DEBUG" if debug else log_cfg.get("level", "INFO")
    logger = setup_logger(level=level, log_file=log_file or log_cfg.get("file"))

    try:
        watch_config = config.build_watch_config(
            cfg,
            command=command,
            directories=directories,
            patterns=patterns,
            exclude_patterns=exclude_patterns,
            interval=interval,
            restart=restart,
        )
        controller = WatchController(watch_config)
    except ConfigurationError as e:
        click.echo(f"Error: {e}", err=True)
        if not command:
            click.echo(ctx.get_usage(), err=True)
        else:
            click.echo(USAGE_HINT, err=True)
        ctx.exit(EXIT_CONFIG_ERROR)

    if "__config_path__" in cfg:
        logger.debug("Using config from: %s", cfg["__config_path__"])

    signal.signal(signal.SIGTERM, _terminate_on_sigterm)
    try:
        status = controller.run()
    except WatchRegistrationError as e:
        logger.error("%s", e)
        ctx.exit(EXIT_WATCH_REGISTRATION_ERROR)
    ctx.exit(status)


def run(argv=None):
    """
    Console entry point. Argument errors exit with status 1.

    Args:
        argv (list, optional): Arguments, defaults to sys.argv[1:].

    Returns:
        int: Exit status.
    """
    try:
        rv = main.main(args=argv, prog_name="fwatcher", standalone_mode=False)
    except click.ClickException as e:
        e.show()
        click.echo(USAGE_HINT, err=True)
        return EXIT_CONFIG_ERROR
    except click.exceptions.Abort:
        return EXIT_CONFIG_ERROR
    return rv if isinstance(rv, int) else 0


def entry():
    sys.exit(run())


if __name__ == "__main__":
    entry()
