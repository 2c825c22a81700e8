# Copyright (c) 2022 Daniel Pereira
#
# SPDX-License-Identifier: Apache-2.0

import time
from dataclasses import dataclass


def boottime() -> float:
    """
    Seconds on a clock that never jumps backwards and keeps counting while the system is
    suspended, unlike `time.monotonic()` on Linux.
    """
    if hasattr(time, "CLOCK_BOOTTIME"):
        return time.clock_gettime(time.CLOCK_BOOTTIME)
    return time.time()


@dataclass(frozen=True)
class Session:
    """
    A single away period. Created once when the process starts and never changed afterwards.
    """

    start_time: float
    total_duration: int

    @property
    def deadline(self) -> float:
        return self.start_time + self.total_duration


class SessionClock:
    """
    Tracks how much of a session has already passed, including the time spent asleep.
    """

    def __init__(self, now: callable = boottime):
        self.now = now

    def start(self, total_duration: int) -> Session:
        return Session(start_time=self.now(), total_duration=total_duration)

    def elapsed(self, session: Session) -> float:
        return self.now() - session.start_time

    def remaining(self, session: Session) -> float:
        return max(0, session.total_duration - self.elapsed(session))

    def expired(self, session: Session) -> bool:
        return self.elapsed(session) >= session.total_duration
