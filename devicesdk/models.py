"""Data exchanged between a device service and its protocol drivers."""

from __future__ import annotations

import abc
import logging
import queue
from dataclasses import dataclass, field
from typing import Any, Mapping, Sequence

from devicesdk.commandvalue import CommandValue, ValueType


@dataclass
class AsyncValues:
    """Readings pushed by a driver asynchronously for one device."""

    device_name: str
    command_values: list[CommandValue] = field(default_factory=list)


@dataclass
class CommandRequest:
    """A request for a driver to read or write one device resource."""

    device_resource_name: str
    attributes: dict[str, str] = field(default_factory=dict)
    type: ValueType = ValueType.STRING


@dataclass
class Reading:
    """A single reading carried by an Event."""

    name: str
    value: str = ""
    binary_value: bytes = b""
    device: str = ""
    id: str = ""
    pushed: int = 0
    created: int = 0
    origin: int = 0
    modified: int = 0


@dataclass
class Event:
    """A set of readings from one device, with its optional encoded form."""

    device: str
    readings: list[Reading] = field(default_factory=list)
    id: str = ""
    pushed: int = 0
    created: int = 0
    origin: int = 0
    modified: int = 0
    encoded_event: bytes = b""

    def has_binary_value(self) -> bool:
        """True if any reading carries a binary payload."""
        return any(reading.binary_value for reading in self.readings)


class ProtocolDriver(abc.ABC):
    """Device-specific logic used by a device service to talk to devices."""

    @abc.abstractmethod
    def initialize(
        self, logger: logging.Logger, async_queue: queue.Queue[AsyncValues] | None
    ) -> None:
        """Perform protocol-specific set-up.

        ``async_queue`` receives AsyncValues pushed outside of read requests,
        or is None when asynchronous readings are disabled.
        """

    @abc.abstractmethod
    def handle_read_commands(
        self,
        device_name: str,
        protocols: Mapping[str, Mapping[str, Any]],
        reqs: Sequence[CommandRequest],
    ) -> list[CommandValue]:
        """Read the resources named by ``reqs`` and return their values."""

    @abc.abstractmethod
    def handle_write_commands(
        self,
        device_name: str,
        protocols: Mapping[str, Mapping[str, Any]],
        reqs: Sequence[CommandRequest],
        params: Sequence[CommandValue],
    ) -> None:
        """Write ``params`` to the resources named by ``reqs``."""

    @abc.abstractmethod
    def stop(self, force: bool) -> None:
        """Shut down gracefully, or immediately when ``force`` is true."""


class ProtocolDiscovery(abc.ABC):
    """Implemented by drivers that support dynamic device discovery."""

    @abc.abstractmethod
    def discover(self) -> Any:
        """Run discovery synchronously and return the devices found."""