# Copyright (c) 2022 Daniel Pereira
#
# SPDX-License-Identifier: Apache-2.0

import asyncio
import logging
from enum import Enum
from dataclasses import dataclass
from .utils.process import cmd
from .utils.dbus_client import DBusClient, DBusClientError, SystemDBusClient

logger = logging.getLogger(__name__)

# Time given to the screen locker to draw itself before the system goes down
LOCK_SETTLE_SECONDS = 2


class SleepMode(Enum):
    """The low-power state to enter"""

    SUSPEND = "suspend"
    HIBERNATE = "hibernate"


@dataclass(frozen=True)
class SuspendRequest:
    mode: SleepMode
    duration: int | None = None

    def __post_init__(self):
        if self.mode == SleepMode.SUSPEND and (self.duration is None or self.duration <= 0):
            raise ValueError(f"Suspend requires a positive duration, got {self.duration!r}")
        if self.mode == SleepMode.HIBERNATE and self.duration is not None:
            raise ValueError("Hibernate does not take a duration")

    @classmethod
    def suspend(cls, duration: int) -> "SuspendRequest":
        return cls(SleepMode.SUSPEND, duration)

    @classmethod
    def hibernate(cls) -> "SuspendRequest":
        return cls(SleepMode.HIBERNATE)

    def __str__(self):
        if self.mode == SleepMode.SUSPEND:
            return f"suspend for {self.duration} seconds"
        return "hibernate"


class ScreenLocker:
    """
    Locks the desktop session. Called right before every suspend or hibernate.
    """

    def __init__(self, settle_seconds: float = LOCK_SETTLE_SECONDS, sleep: callable = asyncio.sleep):
        self.settle_seconds = settle_seconds
        self.sleep = sleep

    async def lock(self):
        await cmd("xdg-screensaver", "lock")
        await self.sleep(self.settle_seconds)


class SuspendPrimitive:
    """
    Puts the machine in a low-power state. Suspending only returns once it is running again.

    `systemctl suspend` returns before the system actually sleeps, so suspend goes through
    `rtcwake` instead, which arms the RTC wake timer and blocks until resume. Hibernation is
    requested from systemd-logind.

    Hibernation does not block: logind accepts the request and returns before the system goes down,
    just like `systemctl hibernate`, so callers must not rely on it returning only after resume.

    Nothing here checks whether the machine really slept. A rejected command simply returns early,
    and it's up to the caller to notice that not enough time has passed.
    """

    LOGIND_BUS_NAME = "org.freedesktop.login1"
    LOGIND_PATH = "/org/freedesktop/login1"
    LOGIND_MANAGER = "org.freedesktop.login1.Manager"

    def __init__(self, dbus: DBusClient | None = None, use_sudo: bool = True):
        self.dbus = dbus or SystemDBusClient()
        self.use_sudo = use_sudo

    async def enter(self, request: SuspendRequest):
        match request.mode:
            case SleepMode.SUSPEND:
                await self.suspend(request.duration)
            case SleepMode.HIBERNATE:
                await self.hibernate()

    async def suspend(self, duration: int):
        args = ["rtcwake", "-m", "mem", "--date", f"+{duration}sec"]
        if self.use_sudo:
            args.insert(0, "sudo")

        result = await cmd(*args)
        if result["rc"] != 0:
            logger.warning("rtcwake failed, the system may not have suspended")

    async def hibernate(self):
        try:
            await self.dbus.call_method(
                self.LOGIND_BUS_NAME,
                self.LOGIND_PATH,
                self.LOGIND_MANAGER,
                "Hibernate",
                "b",
                [False],
            )
        except DBusClientError as err:
            logger.warning("Hibernate request was rejected: %s", err)
