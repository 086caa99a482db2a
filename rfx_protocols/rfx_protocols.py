from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Optional

from .exceptions import DecoderError, RFXProtocolError
from .packet import NotParsed, PacketHeader
from .protocol_data import PacketType
from .sensors import decode_hum, decode_temp, decode_temp_hum

Decoder = Callable[[PacketHeader, bytes], Any]

DEFAULT_DECODERS: Dict[PacketType, Decoder] = {
    PacketType.TEMP: decode_temp,
    PacketType.HUM: decode_hum,
    PacketType.TEMP_HUM: decode_temp_hum,
}


class RFXProtocols:
    """Decoder table for sensor-plane packets.

    Maps a packet type to a decoder. Packet types without a decoder are
    returned as ``NotParsed`` so the caller still sees the raw body.
    """

    def __init__(self, logger: Optional[logging.Logger] = None) -> None:
        self.logger = logger or logging.getLogger(__name__)
        self._decoders: Dict[PacketType, Decoder] = dict(DEFAULT_DECODERS)

    def register_decoder(self, packet_type: PacketType, decoder: Decoder) -> None:
        """Register or replace the decoder for ``packet_type``."""
        if not callable(decoder):
            raise TypeError(f"Decoder for {packet_type!r} is not callable")
        self._decoders[PacketType(packet_type)] = decoder

    def has_decoder(self, packet_type: PacketType) -> bool:
        return packet_type in self._decoders

    def get_decoder_list(self) -> Dict[PacketType, Decoder]:
        return dict(self._decoders)

    def decode(self, header: PacketHeader, body: bytes) -> Any:
        decoder = self._decoders.get(header.packet_type)
        if decoder is None:
            self.logger.debug("No decoder for %s, passing body through", header.packet_type.name)
            return NotParsed(header=header, payload=bytes(body))
        try:
            return decoder(header, bytes(body))
        except RFXProtocolError:
            raise
        except Exception as exc:
            raise DecoderError(int(header.packet_type), exc) from exc
