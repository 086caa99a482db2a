from __future__ import annotations

import asyncio
import logging
from socket import gaierror
from typing import Optional

import serial
import serial_asyncio
from serial.tools import list_ports

from .constants import RFXTRX_BAUDRATE
from .exceptions import (
    DeviceWithSerialNotFoundError,
    RFXtrxConnectionError,
    RFXtrxIOError,
    RFXtrxSerialPortError,
)

logger = logging.getLogger(__name__)


def find_port_by_serial_number(serial_number: str) -> str:
    """Return the device path of the USB serial port with the given serial number."""
    try:
        ports = list_ports.comports()
    except (OSError, serial.SerialException) as exc:
        raise RFXtrxSerialPortError(f"Could not enumerate serial ports: {exc}") from exc

    logger.debug("Searching for serial %s in serial ports", serial_number)
    for port in ports:
        logger.debug("Checking for serial (%s) in %s", serial_number, port.device)
        # Only USB ports carry a vid and a serial number
        if port.vid is not None and port.serial_number == serial_number:
            return port.device
    raise DeviceWithSerialNotFoundError(serial_number)


class BaseTransport:
    """Minimal asynchronous byte-stream interface shared by all transports."""

    async def __aenter__(self) -> "BaseTransport":  # pragma: no cover
        await self.open()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:  # pragma: no cover
        await self.close()

    async def open(self) -> None:  # pragma: no cover - interface
        raise NotImplementedError

    async def close(self) -> None:  # pragma: no cover - interface
        raise NotImplementedError

    async def write(self, data: bytes) -> None:  # pragma: no cover - interface
        raise NotImplementedError

    async def read_exactly(self, size: int) -> bytes:  # pragma: no cover - interface
        raise NotImplementedError

    def closed(self) -> bool:  # pragma: no cover - interface
        """Returns True if the transport is closed, False otherwise."""
        raise NotImplementedError


class StreamTransport(BaseTransport):
    """Common read/write logic for transports built on asyncio streams."""

    def __init__(self) -> None:
        self._reader: Optional[asyncio.StreamReader] = None
        self._writer: Optional[asyncio.StreamWriter] = None

    def closed(self) -> bool:
        return self._writer is None

    async def close(self) -> None:
        if self._writer:
            writer = self._writer
            self._writer = None
            self._reader = None
            writer.close()
            try:
                await writer.wait_closed()
            except (OSError, serial.SerialException) as exc:
                logger.debug("Error while closing %s: %s", self, exc)
            logger.info("%s closed.", type(self).__name__)

    async def write(self, data: bytes) -> None:
        if not self._writer:
            raise RFXtrxIOError(f"{type(self).__name__} is not open")
        try:
            self._writer.write(data)
            await self._writer.drain()
        except (OSError, serial.SerialException) as exc:
            raise RFXtrxIOError(f"Write failed: {exc}") from exc

    async def read_exactly(self, size: int) -> bytes:
        if not self._reader:
            raise RFXtrxIOError(f"{type(self).__name__} is not open")
        try:
            return await self._reader.readexactly(size)
        except asyncio.IncompleteReadError as exc:
            raise RFXtrxIOError(
                f"Connection closed after {len(exc.partial)} of {size} bytes"
            ) from exc
        except (OSError, serial.SerialException) as exc:
            raise RFXtrxIOError(f"Read failed: {exc}") from exc


class SerialTransport(StreamTransport):
    """Serial transport at 38400 baud, 8N1, no flow control."""

    def __init__(self, port: str, baudrate: int = RFXTRX_BAUDRATE):
        super().__init__()
        self.port = port
        self.baudrate = baudrate

    async def open(self) -> None:
        try:
            self._reader, self._writer = await serial_asyncio.open_serial_connection(
                url=self.port,
                baudrate=self.baudrate,
                bytesize=serial.EIGHTBITS,
                parity=serial.PARITY_NONE,
                stopbits=serial.STOPBITS_ONE,
                xonxoff=False,
                rtscts=False,
            )
        except (OSError, serial.SerialException) as exc:
            raise RFXtrxSerialPortError(f"Could not open {self.port}: {exc}") from exc
        logger.info("SerialTransport opened %s at %s baud", self.port, self.baudrate)

    @classmethod
    def from_serial_number(cls, serial_number: str, baudrate: int = RFXTRX_BAUDRATE) -> "SerialTransport":
        return cls(find_port_by_serial_number(serial_number), baudrate=baudrate)

    def __repr__(self) -> str:
        return f"SerialTransport(port={self.port!r})"


class TCPTransport(StreamTransport):
    """Transport for a device exported over the network, e.g. with ser2net."""

    def __init__(self, host: str, port: int):
        super().__init__()
        self.host = host
        self.port = port

    async def open(self) -> None:
        try:
            self._reader, self._writer = await asyncio.open_connection(self.host, self.port)
        except (OSError, gaierror) as exc:
            raise RFXtrxConnectionError(str(exc)) from exc
        logger.info("TCPTransport connected to %s:%s", self.host, self.port)

    def __repr__(self) -> str:
        return f"TCPTransport(host={self.host!r}, port={self.port})"
