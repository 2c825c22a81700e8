# Copyright (c) 2022 Daniel Pereira
#
# SPDX-License-Identifier: Apache-2.0

import asyncio
import logging
from enum import Enum
from pathlib import Path
from dataclasses import dataclass
from concurrent.futures import ThreadPoolExecutor

logger = logging.getLogger(__name__)

# Below this level a discharging battery skips suspend and hibernates right away
LOW_BATTERY_PERCENTAGE = 10

# Some laptops report "Discharging" while on AC with a full battery as part of their over-charging
# protection, so anything at or above this level is never considered discharging.
FULL_BATTERY_PERCENTAGE = 95


class LidState(Enum):
    """Position of the laptop lid"""

    OPEN = "open"
    CLOSED = "closed"


class BatteryStatus(Enum):
    """The current status of the battery, as reported by the kernel power supply class"""

    NOT_CHARGING = "Not charging"
    CHARGING = "Charging"
    DISCHARGING = "Discharging"
    UNKNOWN = "Unknown"
    FULL = "Full"

    @classmethod
    def parse(cls, value: str) -> "BatteryStatus":
        """
        Maps a raw status string to a BatteryStatus. Anything we don't know about is UNKNOWN, which
        is never treated as discharging.
        """
        try:
            return cls(value.strip())
        except ValueError:
            return cls.UNKNOWN


@dataclass(frozen=True)
class BatteryState:
    percentage: int
    status: BatteryStatus

    @property
    def discharging(self) -> bool:
        return (
            self.status == BatteryStatus.DISCHARGING
            and self.percentage < FULL_BATTERY_PERCENTAGE
        )

    @property
    def low(self) -> bool:
        return self.percentage < LOW_BATTERY_PERCENTAGE


class PowerStateReader:
    """
    Queries the lid position and the battery state straight from procfs and sysfs.

    Every query reads the hardware again, nothing is cached, and whenever a signal can't be read
    we fall back to the safe answer: an open lid and a full battery on wall power.
    """

    def __init__(
        self,
        lid_device: str = "LID0",
        lid_root: str | Path = "/proc/acpi/button/lid",
        power_supply_root: str | Path = "/sys/class/power_supply",
    ):
        self.lid_state_file = Path(lid_root) / lid_device / "state"
        self.power_supply_root = Path(power_supply_root)

    async def run_blocking_io(self, callback: callable) -> any:
        """
        Python asyncio does not natively support regular files, so in order to avoid blocking
        functions in the loop, use this to spawn a separate thread to run blocking operations.
        """
        with ThreadPoolExecutor(max_workers=1) as executor:
            return await asyncio.get_running_loop().run_in_executor(executor, callback)

    async def lid_state(self) -> LidState:
        """
        Get the current lid position. The file content looks like `state:      closed`.
        """

        def lid_content():
            """Blocking I/O that reads the ACPI lid button state"""
            try:
                return self.lid_state_file.read_text("utf-8")
            except (OSError, UnicodeDecodeError) as err:
                logger.warning("Unable to read lid state from %s: %s", self.lid_state_file, err)
                return None

        content = await self.run_blocking_io(lid_content)
        if content is not None and content.strip().endswith("closed"):
            return LidState.CLOSED

        if content is not None and not content.strip().endswith("open"):
            logger.warning("Unexpected lid state %r, assuming it is open", content.strip())

        return LidState.OPEN

    def find_battery_file(self, name: str) -> Path | None:
        """
        Finds `name` (i.e. `capacity`) on the first battery device that has it. It could be BAT0 or
        BAT1 depending on the hardware.
        """
        files = sorted(self.power_supply_root.glob(f"BAT*/{name}"))
        return files[0] if files else None

    async def battery_percentage(self) -> int:
        """
        Get the current battery level. Systems without a battery report a full one.
        """

        def battery_capacity():
            """Blocking I/O that gets the battery capacity"""
            capacity_file = self.find_battery_file("capacity")
            if capacity_file is None:
                logger.info("Failed to locate a battery, reporting a full one")
                return 100

            try:
                capacity = int(capacity_file.read_text("utf-8").strip())
            except (OSError, ValueError) as err:
                logger.warning("Unable to read battery capacity from %s: %s", capacity_file, err)
                return 100

            return max(0, min(100, capacity))

        return await self.run_blocking_io(battery_capacity)

    async def battery_status(self) -> BatteryStatus:
        """
        Get the current battery status (Not Charging, Charging, Discharging, Unknown, Full)
        """

        def battery_status():
            """Blocking I/O that gets the battery status"""
            status_file = self.find_battery_file("status")
            if status_file is None:
                return BatteryStatus.UNKNOWN.value

            try:
                return status_file.read_text("utf-8")
            except (OSError, UnicodeDecodeError) as err:
                logger.warning("Unable to read battery status from %s: %s", status_file, err)
                return BatteryStatus.UNKNOWN.value

        return BatteryStatus.parse(await self.run_blocking_io(battery_status))

    async def battery(self) -> BatteryState:
        return BatteryState(
            percentage=await self.battery_percentage(),
            status=await self.battery_status(),
        )

    async def battery_discharging(self) -> bool:
        """
        True only when the battery is draining and is not (nearly) full
        """
        return (await self.battery()).discharging
