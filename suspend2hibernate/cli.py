# Copyright (c) 2022 Daniel Pereira
#
# SPDX-License-Identifier: Apache-2.0

import sys
import logging
from argparse import ArgumentParser
from . import __version__
from .app import App
from .config import load_config
from .errors import Suspend2HibernateFatalError

logger = logging.getLogger(__name__)


def main():
    """
    suspend2hibernate suspends the system for a fixed time and then hibernates it.

    It works around laptops that fail to switch from suspend to hibernate by themselves: whenever
    the system wakes up too early with the lid closed it is put back to sleep for the remaining
    time, on AC power it keeps suspending, and once on battery it hibernates.

    Close the lid right after starting it. Opening the lid ends the session.
    """

    parser = ArgumentParser(description=main.__doc__)
    parser.add_argument("-c", "--config-file", help="user config file path")
    parser.add_argument(
        "-d", "--duration", type=int, help="seconds to suspend before hibernating"
    )
    parser.add_argument("-l", "--log-file", help="file the session log is appended to")
    parser.add_argument("--version", action="version", version=__version__)
    parser.add_argument(
        "--verbose", action="store_true", help="increase the log verbosity"
    )

    args = parser.parse_args()

    try:
        config = load_config(
            config_file=args.config_file,
            suspend_duration=args.duration,
            log_file=args.log_file,
        )
        return App(config=config, verbose=args.verbose).start()
    except Suspend2HibernateFatalError as err:
        logging.basicConfig(format="[%(levelname)s] %(message)s")
        logger.critical("Fatal error: %s", err)
        return 1


if __name__ == "__main__":
    sys.exit(main())
