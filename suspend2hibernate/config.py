# Copyright (c) 2022 Daniel Pereira
#
# SPDX-License-Identifier: Apache-2.0

import os
import logging
from dataclasses import dataclass, replace
from importlib.util import spec_from_loader, module_from_spec
from importlib.machinery import SourceFileLoader
from .errors import Suspend2HibernateFatalError

logger = logging.getLogger(__name__)

DEFAULT_SUSPEND_DURATION = 10800
DEFAULT_LOG_FILE = "/tmp/suspend2hibernate.log"


@dataclass(frozen=True)
class Config:
    """
    Everything a user can tune: how long to stay suspended before hibernating, and where the
    session log goes.
    """

    suspend_duration: int = DEFAULT_SUSPEND_DURATION
    log_file: str = DEFAULT_LOG_FILE

    def __post_init__(self):
        if (
            isinstance(self.suspend_duration, bool)
            or not isinstance(self.suspend_duration, int)
            or self.suspend_duration <= 0
        ):
            raise Suspend2HibernateFatalError(
                f"Suspend duration must be a positive number of seconds, got {self.suspend_duration!r}"
            )

        if not self.log_file:
            raise Suspend2HibernateFatalError("Log file path can't be empty")


def default_config_file_path() -> str:
    config_home = os.environ.get("XDG_CONFIG_HOME", os.path.expanduser("~/.config"))
    return f"{config_home}/suspend2hibernate/config.py"


def load_config_file(config_file: str | None = None) -> Config:
    """
    Loads the user config file, a Python file that may define `SUSPEND_DURATION` and `LOG_FILE`.

    When no file is given, the default location is tried and silently skipped if it doesn't exist.
    A file passed explicitly must exist.
    """
    explicit = config_file is not None
    config_file = config_file or default_config_file_path()

    if not os.path.isfile(config_file):
        if explicit:
            raise Suspend2HibernateFatalError(f"Config file not found at '{config_file}'")
        return Config()

    try:
        loader = SourceFileLoader("suspend2hibernate_config", config_file)
        mod = module_from_spec(spec_from_loader(loader.name, loader))
        loader.exec_module(mod)
    except Exception as err:
        raise Suspend2HibernateFatalError(
            f"Unable to load config file '{config_file}': {err}"
        ) from err

    logger.debug("Loaded config file %s", config_file)
    return Config(
        suspend_duration=getattr(mod, "SUSPEND_DURATION", DEFAULT_SUSPEND_DURATION),
        log_file=getattr(mod, "LOG_FILE", DEFAULT_LOG_FILE),
    )


def load_config(
    config_file: str | None = None,
    suspend_duration: int | None = None,
    log_file: str | None = None,
) -> Config:
    """
    Builds the final config. Command line values win over the config file, which wins over the
    defaults.
    """
    config = load_config_file(config_file)

    overrides = {}
    if suspend_duration is not None:
        overrides["suspend_duration"] = suspend_duration
    if log_file is not None:
        overrides["log_file"] = log_file

    return replace(config, **overrides)
