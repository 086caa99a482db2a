"""Common packet header shared by both directions of the wire protocol."""

from __future__ import annotations

from dataclasses import dataclass

from .protocol_data import PacketType


@dataclass(frozen=True, slots=True)
class PacketHeader:
    """Type, sub-type and sequence number following the length byte."""

    packet_type: PacketType
    sub_type: int
    seqnbr: int

    def to_bytes(self) -> bytes:
        return bytes((int(self.packet_type), self.sub_type & 0xFF, self.seqnbr & 0xFF))


@dataclass(frozen=True, slots=True)
class NotParsed:
    """Sensor frame of a known type that has no registered decoder."""

    header: PacketHeader
    payload: bytes
