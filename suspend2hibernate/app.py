# Copyright (c) 2022 Daniel Pereira
#
# SPDX-License-Identifier: Apache-2.0

import asyncio
import logging
import signal
from .config import Config
from .clock import SessionClock
from .power_state import PowerStateReader
from .suspend import SuspendPrimitive, ScreenLocker
from .engine import DecisionEngine
from .errors import Suspend2HibernateFatalError

logger = logging.getLogger(__name__)

class App:
    """
    Orchestrate the application functionality into a single unit.

    Instantiate then hit `start()` to have a session running. It returns once the session is over.
    """
    def __init__(self, config: Config, verbose: bool = False):
        self.config = config
        self.verbose = verbose
        self.primitive = None

    def setup_logging(self):
        """
        Setup the global application logging. Everything goes to stderr as well as appended to the
        log file, the latter with timestamps so that a whole night can be reviewed afterwards.
        """
        log_level = "DEBUG" if self.verbose else "INFO"
        log_format = "[%(levelname)s] [%(filename)s:%(funcName)s():L%(lineno)d] %(message)s"

        stream_handler = logging.StreamHandler()
        stream_handler.setFormatter(logging.Formatter(log_format))

        try:
            file_handler = logging.FileHandler(self.config.log_file, mode="a", encoding="utf-8")
        except OSError as err:
            raise Suspend2HibernateFatalError(
                f"Unable to open log file '{self.config.log_file}': {err}"
            ) from err
        file_handler.setFormatter(logging.Formatter(f"%(asctime)s {log_format}"))

        logging.basicConfig(level=log_level, handlers=[stream_handler, file_handler], force=True)

    def create_engine(self) -> DecisionEngine:
        """
        Instantiate the session and all collaborators of the decision engine
        """
        clock = SessionClock()
        self.primitive = SuspendPrimitive()
        return DecisionEngine(
            session=clock.start(self.config.suspend_duration),
            clock=clock,
            power=PowerStateReader(),
            primitive=self.primitive,
            locker=ScreenLocker(),
        )

    async def run(self):
        """
        Runs the session until the engine is done, or until we receive a SIGINT or SIGTERM
        """
        engine = self.create_engine()
        loop = asyncio.get_running_loop()
        task = loop.create_task(engine.run())

        for sig in [signal.SIGINT, signal.SIGTERM]:
            loop.add_signal_handler(sig, task.cancel)

        try:
            await task
        except asyncio.CancelledError:
            logger.info("Session interrupted in state %s", engine.state.name)
        finally:
            for sig in [signal.SIGINT, signal.SIGTERM]:
                loop.remove_signal_handler(sig)
            if self.primitive:
                await self.primitive.dbus.disconnect()

        return engine.state

    def start(self) -> int:
        """
        Sets up logging and runs a whole session. Every way a session can end is a success.
        """
        self.setup_logging()
        asyncio.run(self.run())
        logger.info("Session finished")
        return 0
