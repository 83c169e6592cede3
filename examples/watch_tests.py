"""
Run pytest whenever a Python file under src/ changes.

Equivalent to:
    fwatcher -d src -p "**/*.py" -P "**/.git/**" -i 1 pytest
"""

import sys

from fwatcher import WatchConfig, WatchController, WatchRegistrationError
from fwatcher.logger import setup_logger


def main():
    setup_logger(level="INFO")
    config = WatchConfig.create(
        command=["pytest"],
        directories=["src"],
        includes=["**/*.py"],
        excludes=["**/.git/**"],
        interval=1.0,
        restart=False,
    )
    try:
        return WatchController(config).run()
    except WatchRegistrationError as e:
        print(f"Can not watch: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
