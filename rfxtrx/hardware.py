"""
Hardware definitions for the RFXtrx transceiver family.
"""
from enum import IntEnum
from dataclasses import dataclass
from typing import Dict

from .exceptions import UnknownHardwareTypeError


class Frequency(IntEnum):
    """Receiver/transceiver band reported in the status reply and set with set_mode."""
    TRX_TYPE_310 = 0x50
    TRX_TYPE_315 = 0x51
    REC_TYPE_43392 = 0x52
    TRX_TYPE_43392 = 0x53  # default
    REC_TYPE_43342 = 0x54
    TRX_TYPE_868 = 0x55
    REC_TYPE_43450 = 0x5F

    @classmethod
    def default(cls) -> "Frequency":
        return cls.TRX_TYPE_43392


@dataclass(frozen=True)
class FrequencyConfig:
    """Description of a transceiver band."""
    name: str
    mhz: float
    can_transmit: bool


FREQUENCY_CONFIGS: Dict[Frequency, FrequencyConfig] = {
    Frequency.TRX_TYPE_310: FrequencyConfig("RFXtrx 310 MHz", 310.0, True),
    Frequency.TRX_TYPE_315: FrequencyConfig("RFXtrx 315 MHz", 315.0, True),
    Frequency.REC_TYPE_43392: FrequencyConfig("RFXrec 433.92 MHz", 433.92, False),
    Frequency.TRX_TYPE_43392: FrequencyConfig("RFXtrx 433.92 MHz", 433.92, True),
    Frequency.REC_TYPE_43342: FrequencyConfig("RFXrec 433.42 MHz", 433.42, False),
    Frequency.TRX_TYPE_868: FrequencyConfig("RFXtrx 868 MHz", 868.0, True),
    Frequency.REC_TYPE_43450: FrequencyConfig("RFXrec 434.50 MHz", 434.50, False),
}


def get_frequency(value: int) -> Frequency:
    """Map a raw frequency byte, raising UnknownHardwareTypeError when unmapped."""
    try:
        return Frequency(value)
    except ValueError:
        raise UnknownHardwareTypeError(value) from None


def get_frequency_config(frequency: Frequency) -> FrequencyConfig:
    return FREQUENCY_CONFIGS[frequency]


def parse_frequency(name: str) -> Frequency:
    """Resolve a frequency given by member name (``TRX_TYPE_868``) or by hex/decimal value."""
    key = name.strip().upper()
    if key in Frequency.__members__:
        return Frequency[key]
    try:
        return Frequency(int(key, 0))
    except ValueError:
        raise ValueError(f"Unknown frequency: {name}") from None
