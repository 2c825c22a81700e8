# Copyright (c) 2022 Daniel Pereira
#
# SPDX-License-Identifier: Apache-2.0

import math
import asyncio
import logging
from enum import Enum
from datetime import datetime
from dataclasses import dataclass
from .clock import Session, SessionClock
from .power_state import LidState, PowerStateReader
from .suspend import SleepMode, SuspendRequest, SuspendPrimitive, ScreenLocker

logger = logging.getLogger(__name__)

# Hardware takes a moment to report the lid and battery properly after resuming
POST_WAKE_SETTLE_SECONDS = 5

# Pause at the top of every retry after a premature wake
RETRY_SETTLE_SECONDS = 1


class State(Enum):
    """The states of a suspend-then-hibernate session"""

    START = "start"
    EMERGENCY_HIBERNATE = "emergency-hibernate"
    INITIAL_SUSPEND = "initial-suspend"
    RETRY_LOOP = "retry-loop"
    AC_CHECK = "ac-check"
    HIBERNATE_DECISION = "hibernate-decision"
    END = "end"


@dataclass(frozen=True)
class Wake:
    """
    What we know after the machine comes back: how long it was actually gone. A suspend that
    returns before its timer is an early wake, which is the only way a failed suspend shows up.
    """

    request: SuspendRequest
    slept: float

    @property
    def early(self) -> bool:
        return self.request.mode == SleepMode.SUSPEND and self.slept < self.request.duration


class DecisionEngine:
    """
    Drives a session from start to end: suspend for the whole duration, put the system back to
    sleep whenever it wakes too soon, keep suspending while on wall power and finally hibernate
    once running on battery.

    The lid and the battery are read again at every decision, and an open lid always ends the
    session right away, since it means someone is using the laptop.
    """

    def __init__(
        self,
        session: Session,
        clock: SessionClock,
        power: PowerStateReader,
        primitive: SuspendPrimitive,
        locker: ScreenLocker,
        sleep: callable = asyncio.sleep,
        post_wake_settle: float = POST_WAKE_SETTLE_SECONDS,
        retry_settle: float = RETRY_SETTLE_SECONDS,
    ):
        self.session = session
        self.clock = clock
        self.power = power
        self.primitive = primitive
        self.locker = locker
        self.sleep = sleep
        self.post_wake_settle = post_wake_settle
        self.retry_settle = retry_settle
        self.state = State.START
        self.wakes: list[Wake] = []
        self.handlers = {
            State.START: self.start,
            State.EMERGENCY_HIBERNATE: self.emergency_hibernate,
            State.INITIAL_SUSPEND: self.initial_suspend,
            State.RETRY_LOOP: self.retry_loop,
            State.AC_CHECK: self.ac_check,
            State.HIBERNATE_DECISION: self.hibernate_decision,
        }

    async def run(self) -> State:
        """
        Runs the state machine until it reaches END and returns the final state
        """
        self.log_date()
        logger.info("Starting session of %d seconds", self.session.total_duration)

        while self.state != State.END:
            next_state = await self.handlers[self.state]()
            logger.info("%s -> %s", self.state.name, next_state.name)
            self.state = next_state

        return self.state

    def log_date(self):
        logger.info("Current time: %s", datetime.now().strftime("%a %d %b %Y %H:%M:%S"))

    async def enter(self, request: SuspendRequest) -> Wake:
        """
        Locks the screen and puts the machine to sleep, then waits for the hardware to settle once
        it is back.
        """
        logger.info("Going to %s", request)
        await self.locker.lock()

        before = self.clock.elapsed(self.session)
        await self.primitive.enter(request)
        wake = Wake(
            request=request,
            slept=self.clock.elapsed(self.session) - before,
        )
        self.wakes.append(wake)

        if wake.early:
            logger.warning(
                "Woke up early after %d of %d seconds", wake.slept, request.duration
            )
        else:
            logger.info("Back from %s after %d seconds", request.mode.value, wake.slept)

        await self.sleep(self.post_wake_settle)
        return wake

    async def lid_closed(self) -> bool:
        return await self.power.lid_state() == LidState.CLOSED

    async def start(self) -> State:
        battery = await self.power.battery()
        logger.info("Battery at %d%% (%s)", battery.percentage, battery.status.value)

        if battery.low and battery.discharging:
            logger.warning("Low battery detected, going straight to hibernate")
            return State.EMERGENCY_HIBERNATE

        return State.INITIAL_SUSPEND

    async def emergency_hibernate(self) -> State:
        # A hibernation that fails here is not retried
        await self.enter(SuspendRequest.hibernate())
        logger.info("Finished hibernate, exiting now")
        return State.END

    async def initial_suspend(self) -> State:
        await self.enter(SuspendRequest.suspend(self.session.total_duration))
        self.log_date()
        return State.RETRY_LOOP

    async def retry_loop(self) -> State:
        if self.clock.expired(self.session):
            self.log_date()
            return State.AC_CHECK

        await self.sleep(self.retry_settle)
        logger.info("Inside the suspend loop, the system woke up prematurely")

        if not await self.lid_closed():
            logger.info("Lid is open, leaving the suspend loop")
            return State.END

        remaining = math.ceil(self.clock.remaining(self.session))
        if remaining <= 0:
            return State.RETRY_LOOP

        await self.enter(SuspendRequest.suspend(remaining))
        return State.RETRY_LOOP

    async def ac_check(self) -> State:
        if await self.power.battery_discharging():
            return State.HIBERNATE_DECISION

        self.log_date()
        if not await self.lid_closed():
            logger.info("Lid is open while on AC power, not doing anything else")
            return State.END

        logger.info(
            "Lid closed and on AC power (or full battery), suspending for %d seconds",
            self.session.total_duration,
        )
        await self.enter(SuspendRequest.suspend(self.session.total_duration))
        return State.AC_CHECK

    async def hibernate_decision(self) -> State:
        if not await self.lid_closed():
            logger.info("Lid is open, not doing anything else")
            return State.END

        logger.info("Lid is closed, waiting %d seconds", self.post_wake_settle)
        await self.sleep(self.post_wake_settle)
        self.log_date()
        logger.info("Time to go into hibernate now")
        await self.enter(SuspendRequest.hibernate())
        return State.END
