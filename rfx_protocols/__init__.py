from .exceptions import DecoderError, NotEnoughDataError, RFXProtocolError, UnknownPacketTypeError
from .packet import NotParsed, PacketHeader
from .protocol_data import (
    PROTOCOL_MASKS,
    PacketType,
    ProtocolMask,
    Protocols1,
    Protocols2,
    Protocols3,
    Protocols4,
)
from .rfx_protocols import RFXProtocols
from .sensors import Hum, Temp, TempHum

__all__ = [
    "DecoderError",
    "Hum",
    "NotEnoughDataError",
    "NotParsed",
    "PROTOCOL_MASKS",
    "PacketHeader",
    "PacketType",
    "ProtocolMask",
    "Protocols1",
    "Protocols2",
    "Protocols3",
    "Protocols4",
    "RFXProtocolError",
    "RFXProtocols",
    "Temp",
    "TempHum",
    "UnknownPacketTypeError",
]
