"""Pytest configuration and fixtures"""

import pytest

from suspend2hibernate.clock import SessionClock
from suspend2hibernate.engine import DecisionEngine
from suspend2hibernate.power_state import BatteryState, BatteryStatus, LidState
from suspend2hibernate.suspend import SleepMode


class FakeClock:
    """Time source that only moves when told to"""

    def __init__(self, now: float = 1_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


class FakePower:
    """Lid and battery readings that tests can change between wakes"""

    def __init__(self, lid=LidState.CLOSED, percentage=50, status=BatteryStatus.DISCHARGING):
        self.lid = lid
        self.percentage = percentage
        self.status = status

    async def lid_state(self):
        return self.lid

    async def battery(self):
        return BatteryState(percentage=self.percentage, status=self.status)

    async def battery_discharging(self):
        return (await self.battery()).discharging


class FakePrimitive:
    """
    Records every request and moves the clock forward as if the machine slept.

    `wakes` lists how many seconds each consecutive call sleeps before waking up; once exhausted
    a suspend lasts its full duration and a hibernate takes no time. `hooks` maps a call index to
    a function run right after that call, to change the hardware state.
    """

    MAX_CALLS = 100

    def __init__(self, clock: FakeClock, wakes=None, hooks=None):
        self.clock = clock
        self.wakes = list(wakes or [])
        self.hooks = hooks or {}
        self.requests = []
        self.elapsed_at_request = []

    async def enter(self, request):
        assert len(self.requests) < self.MAX_CALLS, "engine did not terminate"
        index = len(self.requests)
        self.requests.append(request)
        self.elapsed_at_request.append(self.clock.now)

        if self.wakes:
            self.clock.advance(self.wakes.pop(0))
        elif request.mode == SleepMode.SUSPEND:
            self.clock.advance(request.duration)

        if index in self.hooks:
            self.hooks[index]()

    @property
    def modes(self):
        return [request.mode for request in self.requests]

    @property
    def summary(self):
        return [
            ("S", request.duration) if request.mode == SleepMode.SUSPEND else ("H", None)
            for request in self.requests
        ]


class FakeLocker:
    def __init__(self):
        self.locks = 0

    async def lock(self):
        self.locks += 1


class FakeSleep:
    """Replacement for asyncio.sleep that records delays, optionally advancing the clock"""

    def __init__(self, clock: FakeClock | None = None):
        self.clock = clock
        self.delays = []

    async def __call__(self, seconds):
        self.delays.append(seconds)
        if self.clock:
            self.clock.advance(seconds)


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def power():
    return FakePower()


@pytest.fixture
def locker():
    return FakeLocker()


@pytest.fixture
def make_engine(fake_clock, power, locker):
    """Builds an engine around the fakes; returns the engine and its primitive"""

    def factory(total_duration=10800, wakes=None, hooks=None, sleep=None):
        clock = SessionClock(now=fake_clock)
        primitive = FakePrimitive(fake_clock, wakes=wakes, hooks=hooks)
        engine = DecisionEngine(
            session=clock.start(total_duration),
            clock=clock,
            power=power,
            primitive=primitive,
            locker=locker,
            sleep=sleep or FakeSleep(),
        )
        return engine, primitive

    return factory
