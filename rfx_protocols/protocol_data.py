"""Fixed device tables: packet types and the four protocol masks."""

from __future__ import annotations

from enum import IntEnum, IntFlag
from typing import Type, TypeVar


class PacketType(IntEnum):
    """First byte after the length prefix of every frame."""

    INTERFACE_CONTROL = 0x00
    INTERFACE_MESSAGE = 0x01
    REC_XMIT_MESSAGE = 0x02
    UNDECODED = 0x03
    LIGHTING1 = 0x10
    LIGHTING2 = 0x11
    LIGHTING3 = 0x12
    LIGHTING4 = 0x13
    LIGHTING5 = 0x14
    LIGHTING6 = 0x15
    CHIME = 0x16
    FAN = 0x17
    CURTAIN = 0x18
    BLINDS = 0x19
    RFY = 0x1A
    HOME_CONFORT = 0x1B
    FUNKBUS = 0x1E
    HUNTER = 0x1F
    SECURITY1 = 0x20
    SECURITY2 = 0x21
    CAMERA = 0x28
    REMOTE = 0x30
    THERMOSTAT1 = 0x40
    THERMOSTAT2 = 0x41
    THERMOSTAT3 = 0x42
    THERMOSTAT4 = 0x43
    RADIATOR1 = 0x48
    BBQ = 0x4E
    TEMP_RAIN = 0x4F
    TEMP = 0x50
    HUM = 0x51
    TEMP_HUM = 0x52
    BARO = 0x53
    TEMP_HUM_BARO = 0x54
    RAIN = 0x55
    WIND = 0x56
    UV = 0x57
    DATE_TIME = 0x58
    CURRENT = 0x59
    ENERGY = 0x5A
    CURRENT_ENERGY = 0x5B
    POWER = 0x5C
    WEIGHT = 0x5D
    GAS = 0x5E
    WATER = 0x5F
    CART_ELECTRONIC = 0x60
    ASYNC_PORT = 0x61
    ASYNC_DATA = 0x62
    RFX_SENSOR = 0x70
    RFX_METER = 0x71
    FS20 = 0x72
    WEATHER = 0x76
    SOLAR = 0x77
    RAW = 0x7F


_M = TypeVar("_M", bound="ProtocolMask")


class ProtocolMask(IntFlag):
    """Common behaviour of the four one-byte protocol bitmaps."""

    @classmethod
    def from_bits_truncate(cls: Type[_M], value: int) -> _M:
        """Build a mask from a raw byte, dropping bits without a member."""
        known = 0
        for member in cls.__members__.values():
            known |= int(member)
        return cls(value & known)

    @property
    def bits(self) -> int:
        return int(self) & 0xFF


class Protocols1(ProtocolMask):
    AE = 1 << 0  # AE Blyss
    RUBICSON = 1 << 1  # Rubicson, Lacrosse, Banggood
    FINEOFFSET = 1 << 2  # Fineoffset, Viking
    LIGHTING4 = 1 << 3  # PT2262 and compatible
    RSL = 1 << 4  # RSL, Revolt
    SX = 1 << 5  # ByronSX, Selectplus
    IMAGINTRONIX = 1 << 6  # Imagintronix, Opus
    UNDECODED = 1 << 7


class Protocols2(ProtocolMask):
    MERTIK = 1 << 0
    LWRF = 1 << 1  # AD LightwaveRF
    HIDEKI = 1 << 2
    LACROSSE = 1 << 3
    LEGRAND = 1 << 4
    MSG4_RESERVED_5 = 1 << 5
    BLINDST0 = 1 << 6  # Rollertrol, Hasta new
    BLINDST1 = 1 << 7


class Protocols3(ProtocolMask):
    X10 = 1 << 0
    ARC = 1 << 1
    AC = 1 << 2
    HEEU = 1 << 3  # HomeEasy EU
    MEIANTECH = 1 << 4  # Meiantech, Atlantic
    OREGON = 1 << 5
    ATI = 1 << 6
    VISONIC = 1 << 7


class Protocols4(ProtocolMask):
    KEELOQ = 1 << 0
    HC = 1 << 1  # HomeConfort
    MSG6_RESERVED_2 = 1 << 2
    MSG6_RESERVED_3 = 1 << 3
    MSG6_RESERVED_4 = 1 << 4
    MSG6_RESERVED_5 = 1 << 5
    MCZ = 1 << 6
    FUNKBUS = 1 << 7


PROTOCOL_MASKS = (Protocols1, Protocols2, Protocols3, Protocols4)
