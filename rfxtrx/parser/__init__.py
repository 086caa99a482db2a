"""Entry point for RFXtrx frame decoding."""

from __future__ import annotations

import logging

from rfx_protocols import PacketType, RFXProtocols

from ..types import ParsedFrame, Plane
from .base import encode_frame, parse_header, read_frame
from .interface import InterfaceCommandCode, InterfaceMessageSubType, parse_interface_message


class PacketParser:
    """Decodes a frame and decides which plane it belongs to.

    Interface messages (packet type 0x01) go to the interface plane. Every
    other known packet type is handed to the sensor decoder table and goes
    to the sensor plane.
    """

    def __init__(
        self,
        protocols: RFXProtocols | None = None,
        logger: logging.Logger | None = None,
    ):
        self.protocols = protocols or RFXProtocols()
        self.logger = logger or logging.getLogger(__name__)

    def parse_frame(self, data: bytes) -> ParsedFrame:
        header, body = parse_header(data)
        if header.packet_type is PacketType.INTERFACE_MESSAGE:
            return ParsedFrame(Plane.INTERFACE, parse_interface_message(header, body))
        return ParsedFrame(Plane.SENSOR, self.protocols.decode(header, body))


__all__ = [
    "InterfaceCommandCode",
    "InterfaceMessageSubType",
    "PacketParser",
    "encode_frame",
    "parse_header",
    "read_frame",
]
