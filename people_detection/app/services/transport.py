"""Bus transports used to signal the microcontroller."""
from __future__ import annotations

import fcntl
import logging
import os
from typing import List, Optional

from ..errors import ConfigurationError, TransportError, TransportWriteError

LOGGER = logging.getLogger(__name__)

# From linux/i2c-dev.h
I2C_SLAVE = 0x0703


class BusTransport:
    """Byte transport towards the microcontroller."""

    def open(self) -> None:
        raise NotImplementedError

    def write(self, payload: bytes) -> int:
        raise NotImplementedError

    def close(self) -> None:
        raise NotImplementedError

    def __enter__(self) -> "BusTransport":
        self.open()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


class I2CTransport(BusTransport):
    """Linux i2c-dev transport writing raw bytes to a single target address."""

    def __init__(self, device: str, address: int) -> None:
        self.device = device
        self.address = address
        self._fd: Optional[int] = None

    @property
    def is_open(self) -> bool:
        return self._fd is not None

    def open(self) -> None:
        try:
            fd = os.open(self.device, os.O_RDWR)
        except OSError as exc:
            raise TransportError(f"Failed to open the I2C bus {self.device}: {exc}") from exc
        try:
            fcntl.ioctl(fd, I2C_SLAVE, self.address)
        except OSError as exc:
            os.close(fd)
            raise TransportError(
                f"Failed to acquire bus access to target 0x{self.address:02x} on {self.device}: {exc}"
            ) from exc
        self._fd = fd
        LOGGER.info("I2C bus %s opened for target 0x%02x", self.device, self.address)

    def write(self, payload: bytes) -> int:
        if self._fd is None:
            raise TransportWriteError(f"I2C bus {self.device} is not open")
        try:
            written = os.write(self._fd, payload)
        except OSError as exc:
            raise TransportWriteError(f"Failed to write to the I2C bus: {exc}") from exc
        if written != len(payload):
            raise TransportWriteError(f"Short write to the I2C bus ({written}/{len(payload)} bytes)")
        return written

    def close(self) -> None:
        if self._fd is None:
            return
        os.close(self._fd)
        self._fd = None
        LOGGER.info("I2C bus %s closed", self.device)


class SimulatedTransport(BusTransport):
    """Logs payloads instead of touching hardware."""

    def __init__(self) -> None:
        self.sent: List[bytes] = []

    def open(self) -> None:
        LOGGER.info("[I2C Simulation] Initializing I2C interface")

    def write(self, payload: bytes) -> int:
        LOGGER.info("[I2C Simulation] Sending message: %s", payload.decode("utf-8", errors="replace"))
        self.sent.append(payload)
        return len(payload)

    def close(self) -> None:
        LOGGER.info("[I2C Simulation] Closing I2C interface")


def build_transport(kind: str, device: str, address: int) -> BusTransport:
    """Return the transport selected in configuration."""

    if kind == "i2c":
        return I2CTransport(device, address)
    if kind == "simulated":
        return SimulatedTransport()
    raise ConfigurationError(f"Unknown transport '{kind}'")
