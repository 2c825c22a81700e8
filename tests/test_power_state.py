"""Tests for reading lid and battery state from procfs/sysfs."""

import pytest

from suspend2hibernate.power_state import (
    BatteryState,
    BatteryStatus,
    LidState,
    PowerStateReader,
)


@pytest.fixture
def sysfs(tmp_path):
    lid_root = tmp_path / "lid"
    power_supply_root = tmp_path / "power_supply"
    (lid_root / "LID0").mkdir(parents=True)
    power_supply_root.mkdir()
    reader = PowerStateReader(lid_root=lid_root, power_supply_root=power_supply_root)
    return reader, lid_root / "LID0" / "state", power_supply_root


def add_battery(power_supply_root, name="BAT0", capacity="50\n", status="Discharging\n"):
    battery = power_supply_root / name
    battery.mkdir()
    if capacity is not None:
        (battery / "capacity").write_text(capacity)
    if status is not None:
        (battery / "status").write_text(status)
    return battery


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "content, expected",
    [
        ("state:      closed\n", LidState.CLOSED),
        ("state:      open\n", LidState.OPEN),
        ("state:      garbage\n", LidState.OPEN),
        ("", LidState.OPEN),
    ],
)
async def test_lid_state(sysfs, content, expected):
    reader, lid_file, _ = sysfs
    lid_file.write_text(content)

    assert await reader.lid_state() == expected


@pytest.mark.asyncio
async def test_missing_lid_fails_open(sysfs):
    reader, _, _ = sysfs

    assert await reader.lid_state() == LidState.OPEN


@pytest.mark.asyncio
async def test_lid_state_is_read_fresh_every_time(sysfs):
    reader, lid_file, _ = sysfs
    lid_file.write_text("state:      closed\n")
    assert await reader.lid_state() == LidState.CLOSED
    assert await reader.lid_state() == LidState.CLOSED

    lid_file.write_text("state:      open\n")
    assert await reader.lid_state() == LidState.OPEN


@pytest.mark.asyncio
async def test_battery_readings(sysfs):
    reader, _, power_supply_root = sysfs
    add_battery(power_supply_root, capacity="42\n", status="Discharging\n")

    assert await reader.battery_percentage() == 42
    assert await reader.battery_status() == BatteryStatus.DISCHARGING
    assert await reader.battery_discharging() is True
    assert await reader.battery() == BatteryState(42, BatteryStatus.DISCHARGING)


@pytest.mark.asyncio
async def test_battery_readings_are_idempotent(sysfs):
    reader, _, power_supply_root = sysfs
    add_battery(power_supply_root, capacity="77\n", status="Charging\n")

    assert [await reader.battery_percentage() for _ in range(3)] == [77, 77, 77]
    assert [await reader.battery_discharging() for _ in range(3)] == [False, False, False]


@pytest.mark.asyncio
async def test_first_battery_is_used(sysfs):
    reader, _, power_supply_root = sysfs
    add_battery(power_supply_root, name="BAT1", capacity="90\n")
    add_battery(power_supply_root, name="BAT0", capacity="30\n")

    assert await reader.battery_percentage() == 30


@pytest.mark.asyncio
async def test_missing_battery_reports_full_and_not_discharging(sysfs):
    reader, _, power_supply_root = sysfs
    (power_supply_root / "AC").mkdir()

    assert await reader.battery_percentage() == 100
    assert await reader.battery_status() == BatteryStatus.UNKNOWN
    assert await reader.battery_discharging() is False


@pytest.mark.asyncio
async def test_unreadable_battery_files_fall_back_to_full(sysfs):
    reader, _, power_supply_root = sysfs
    add_battery(power_supply_root, capacity="n/a\n", status=None)

    assert await reader.battery_percentage() == 100
    assert await reader.battery_status() == BatteryStatus.UNKNOWN


@pytest.mark.asyncio
async def test_capacity_is_clamped(sysfs):
    reader, _, power_supply_root = sysfs
    add_battery(power_supply_root, capacity="104\n")

    assert await reader.battery_percentage() == 100


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("Discharging\n", BatteryStatus.DISCHARGING),
        ("Charging", BatteryStatus.CHARGING),
        ("Not charging", BatteryStatus.NOT_CHARGING),
        ("Full", BatteryStatus.FULL),
        ("Unknown", BatteryStatus.UNKNOWN),
        ("Exploding", BatteryStatus.UNKNOWN),
    ],
)
def test_battery_status_parse(raw, expected):
    assert BatteryStatus.parse(raw) == expected


@pytest.mark.parametrize(
    "percentage, status, discharging",
    [
        (50, BatteryStatus.DISCHARGING, True),
        (94, BatteryStatus.DISCHARGING, True),
        (95, BatteryStatus.DISCHARGING, False),
        (100, BatteryStatus.DISCHARGING, False),
        (50, BatteryStatus.NOT_CHARGING, False),
        (50, BatteryStatus.CHARGING, False),
        (100, BatteryStatus.FULL, False),
        (5, BatteryStatus.UNKNOWN, False),
    ],
)
def test_battery_state_discharging(percentage, status, discharging):
    assert BatteryState(percentage, status).discharging is discharging


def test_battery_state_low():
    assert BatteryState(9, BatteryStatus.DISCHARGING).low
    assert not BatteryState(10, BatteryStatus.DISCHARGING).low


@pytest.mark.asyncio
async def test_battery_without_capacity_is_skipped(sysfs):
    reader, _, power_supply_root = sysfs
    add_battery(power_supply_root, name="BAT0", capacity=None, status=None)
    add_battery(power_supply_root, name="BAT1", capacity="8\n", status="Discharging\n")

    assert await reader.battery_percentage() == 8
    assert await reader.battery_status() == BatteryStatus.DISCHARGING
    assert await reader.battery_discharging() is True
