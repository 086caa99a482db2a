import asyncio
import logging
from typing import Callable, Dict, List, Optional

import pytest
import pytest_asyncio

from rfx_protocols import PacketHeader, PacketType
from rfxtrx.controller import RFXtrxController
from rfxtrx.exceptions import RFXtrxIOError
from rfxtrx.parser import encode_frame
from rfxtrx.transport import BaseTransport


class FakeTransport(BaseTransport):
    """In-memory byte stream standing in for the serial port."""

    def __init__(self) -> None:
        self._buffer = bytearray()
        self._data_event = asyncio.Event()
        self._is_open = False
        self._eof = False
        self.written: List[bytes] = []
        self.on_write: Optional[Callable[[bytes], None]] = None
        self.close_calls = 0

    async def open(self) -> None:
        self._is_open = True

    async def close(self) -> None:
        self.close_calls += 1
        self._is_open = False
        self.feed_eof()

    def closed(self) -> bool:
        return not self._is_open

    async def write(self, data: bytes) -> None:
        if not self._is_open:
            raise RFXtrxIOError("FakeTransport is not open")
        self.written.append(bytes(data))
        if self.on_write:
            self.on_write(bytes(data))

    async def read_exactly(self, size: int) -> bytes:
        while len(self._buffer) < size:
            if self._eof:
                raise RFXtrxIOError(f"Connection closed after {len(self._buffer)} of {size} bytes")
            self._data_event.clear()
            await self._data_event.wait()
        data = bytes(self._buffer[:size])
        del self._buffer[:size]
        return data

    def feed(self, data: bytes) -> None:
        self._buffer += data
        self._data_event.set()

    def feed_eof(self) -> None:
        self._eof = True
        self._data_event.set()


def interface_reply(seqnbr: int, body: bytes, sub_type: int = 0x00) -> bytes:
    return encode_frame(PacketHeader(PacketType.INTERFACE_MESSAGE, sub_type, seqnbr), body)


STATUS_BODY = bytes([0x02, 0x53, 0x01, 0x00, 0x00, 0x20, 0x01])
TEMP_HUM_FRAME = bytes([0x0A, 0x52, 0x01, 0x00, 0xAB, 0xCD, 0x00, 0xFA, 0x32, 0x02, 0x79])


class FakeDevice:
    """Answers control frames written to a FakeTransport like the real device does."""

    def __init__(self, transport: FakeTransport) -> None:
        self.transport = transport
        self.replies: Dict[int, Optional[bytes]] = {
            0x00: None,  # reset: no reply
            0x02: STATUS_BODY,
            0x03: bytes([0x03]),
            0x06: bytes([0x06]),
        }
        self.received: List[bytes] = []
        transport.on_write = self._on_write

    def _on_write(self, frame: bytes) -> None:
        self.received.append(frame)
        seqnbr, cmd = frame[3], frame[4]
        if cmd == 0x07:
            self.transport.feed(interface_reply(seqnbr, b"Copyright RFXCOM", sub_type=0x07))
            return
        body = self.replies.get(cmd)
        if body is not None:
            self.transport.feed(interface_reply(seqnbr, body))


@pytest.fixture
def logger():
    return logging.getLogger("rfxtrx.tests")


@pytest.fixture
def fake_transport():
    return FakeTransport()


@pytest.fixture
def fake_device(fake_transport):
    return FakeDevice(fake_transport)


@pytest_asyncio.fixture
async def controller(fake_transport, fake_device):
    """An opened controller talking to a FakeDevice."""
    ctrl = RFXtrxController(transport=fake_transport, reset_wait=0)
    async with ctrl:
        yield ctrl
