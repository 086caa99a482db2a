"""Length-prefixed frame codec shared by both directions of the link."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Optional, Tuple

from rfx_protocols import NotEnoughDataError, PacketHeader, PacketType, UnknownPacketTypeError

from ..constants import HEADER_LEN, MAX_FRAME_SIZE

if TYPE_CHECKING:
    from ..transport import BaseTransport

logger = logging.getLogger(__name__)


def encode_frame(header: PacketHeader, payload: bytes = b"") -> bytes:
    """Build ``[len, type, subtype, seqnbr, payload...]``.

    The length byte counts everything after itself; callers only assemble
    the payload.
    """
    frame = bytearray(1)  # placeholder for the length byte
    frame += header.to_bytes()
    frame += payload
    if len(frame) > MAX_FRAME_SIZE:
        raise ValueError(f"Frame of {len(frame)} bytes exceeds {MAX_FRAME_SIZE} bytes")
    frame[0] = len(frame) - 1
    return bytes(frame)


def parse_header(data: bytes) -> Tuple[PacketHeader, bytes]:
    """Split a frame (without its length byte) into header and body."""
    if len(data) < HEADER_LEN:
        raise NotEnoughDataError(received=len(data), expected=HEADER_LEN)
    try:
        packet_type = PacketType(data[0])
    except ValueError:
        raise UnknownPacketTypeError(data[0]) from None
    header = PacketHeader(packet_type=packet_type, sub_type=data[1], seqnbr=data[2])
    logger.debug(
        "Received PacketType: %s sub_type: 0x%02X, seqnbr: 0x%02X",
        packet_type.name,
        header.sub_type,
        header.seqnbr,
    )
    return header, bytes(data[HEADER_LEN:])


async def read_frame(transport: "BaseTransport") -> Optional[bytes]:
    """Read one frame from ``transport``.

    Returns ``None`` for an idle marker (length byte zero), otherwise the
    ``len`` bytes following the length byte. Short reads propagate as
    transport errors.
    """
    size = (await transport.read_exactly(1))[0]
    if size == 0:
        return None
    data = await transport.read_exactly(size)
    logger.debug("Received %d bytes, %s", size, data.hex(" "))
    return data
