# Copyright (c) 2022 Daniel Pereira
#
# SPDX-License-Identifier: Apache-2.0 AND MIT

import logging

from dbus_next import Message
from dbus_next.aio import MessageBus
from dbus_next.constants import BusType, MessageType

logger = logging.getLogger(__package__)


class DBusClientError(Exception):
    """
    Base error class for DBus related exceptions
    """


class DBusClient:
    """
    Base DBus client class
    """

    def __init__(self, bus_type: BusType):
        self.bus_type = bus_type
        self.bus = None

    async def connect(self) -> None:
        """
        Connects to DBus allowing this instance to call methods
        """
        if self.bus:
            return

        try:
            self.bus = await MessageBus(bus_type=self.bus_type).connect()
        except Exception as err:
            raise DBusClientError("Unable to connect to dbus.") from err

    async def disconnect(self) -> None:
        """
        Disconnects from an existing DBus connection.
        """
        if self.bus:
            self.bus.disconnect()
            self.bus = None

    # pylint: disable-next=too-many-arguments
    async def call_method(
        self,
        destination: str,
        path: str,
        interface: str,
        member: str,
        signature: str,
        body: any,
    ) -> any:
        """
        Calls any available DBus method and return its value
        """
        if isinstance(body, str):
            body = [body]

        await self.connect()

        msg = await self.bus.call(
            Message(
                message_type=MessageType.METHOD_CALL,
                destination=destination,
                interface=interface,
                path=path,
                member=member,
                signature=signature,
                body=body,
            )
        )

        if msg is None:
            raise DBusClientError(f"No reply from dbus calling {interface}.{member}")
        if msg.message_type != MessageType.METHOD_RETURN:
            raise DBusClientError(f"Unable to call method on dbus: {msg.error_name}")

        match len(msg.body):
            case 0:
                return None
            case 1:
                return msg.body[0]
            case _:
                return msg.body


class SystemDBusClient(DBusClient):
    """
    System DBus client
    """

    def __init__(self):
        super().__init__(BusType.SYSTEM)
