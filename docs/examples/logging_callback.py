import logging
from dataclasses import dataclass

from rfx_protocols import PacketHeader, PacketType, RFXProtocols

logging.basicConfig(level=logging.DEBUG)


@dataclass(frozen=True)
class Rain:
    id: int
    rain_rate: int
    rssi: int


def decode_rain(header: PacketHeader, body: bytes) -> Rain:
    return Rain(id=(body[0] << 8) | body[1], rain_rate=(body[2] << 8) | body[3], rssi=body[-1] & 0x0F)


sd = RFXProtocols(logger=logging.getLogger("rain"))
sd.register_decoder(PacketType.RAIN, decode_rain)

header = PacketHeader(PacketType.RAIN, 0x01, 0x00)
print(sd.decode(header, bytes.fromhex("1a2b000a0000000059")))
