"""Shared dataclasses for the RFXtrx driver."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, List, Sequence, Union

from rfx_protocols import (
    PROTOCOL_MASKS,
    Hum,
    NotParsed,
    Protocols1,
    Protocols2,
    Protocols3,
    Protocols4,
    Temp,
    TempHum,
)

from .hardware import Frequency


@dataclass(frozen=True, slots=True)
class EnabledProtocols:
    """The four protocol masks as stored on the device."""

    protos_1: Protocols1 = field(default_factory=lambda: Protocols1(0))
    protos_2: Protocols2 = field(default_factory=lambda: Protocols2(0))
    protos_3: Protocols3 = field(default_factory=lambda: Protocols3(0))
    protos_4: Protocols4 = field(default_factory=lambda: Protocols4(0))

    @classmethod
    def from_bytes(cls, data: Sequence[int]) -> "EnabledProtocols":
        """Build from the four mask bytes of a status reply. Undefined bits are dropped."""
        if len(data) != 4:
            raise ValueError(f"Expected 4 protocol bytes, got {len(data)}")
        return cls(
            Protocols1.from_bits_truncate(data[0]),
            Protocols2.from_bits_truncate(data[1]),
            Protocols3.from_bits_truncate(data[2]),
            Protocols4.from_bits_truncate(data[3]),
        )

    @classmethod
    def from_names(cls, names: Iterable[str]) -> "EnabledProtocols":
        """Build from flag names such as ``["OREGON", "KEELOQ"]``, case-insensitive."""
        masks = [mask(0) for mask in PROTOCOL_MASKS]
        for raw in names:
            name = raw.strip().upper()
            if not name:
                continue
            for index, mask in enumerate(PROTOCOL_MASKS):
                if name in mask.__members__:
                    masks[index] |= mask[name]
                    break
            else:
                raise ValueError(f"Unknown protocol: {raw}")
        return cls(*masks)

    def to_bytes(self) -> bytes:
        return bytes((self.protos_1.bits, self.protos_2.bits, self.protos_3.bits, self.protos_4.bits))

    def names(self) -> List[str]:
        enabled = []
        for flags in (self.protos_1, self.protos_2, self.protos_3, self.protos_4):
            enabled.extend(m.name for m in type(flags) if m in flags)
        return enabled


@dataclass(frozen=True, slots=True)
class Status:
    """Reply to a get-status command."""

    frequency: Frequency
    fw_version: int
    enabled_protocols: EnabledProtocols


@dataclass(frozen=True, slots=True)
class SetModeAck:
    pass


@dataclass(frozen=True, slots=True)
class ReceiverStartedAck:
    pass


@dataclass(frozen=True, slots=True)
class SaveAck:
    pass


@dataclass(frozen=True, slots=True)
class WrongCommand:
    """The device rejected the last control frame."""

    command: int


InterfaceMessage = Union[Status, SetModeAck, ReceiverStartedAck, SaveAck, WrongCommand]
ProtocolMessage = Union[TempHum, Temp, Hum, NotParsed]


class Plane(Enum):
    """Destination queue of a decoded inbound frame."""

    INTERFACE = "interface"
    SENSOR = "sensor"


@dataclass(frozen=True, slots=True)
class ParsedFrame:
    plane: Plane
    message: Union[InterfaceMessage, ProtocolMessage]


@dataclass(frozen=True, slots=True)
class RFXtrxInfo:
    """Information about the hardware, as returned by get_status."""

    frequency: Frequency
    enabled_protocols: EnabledProtocols
    fw_version: int = 0
