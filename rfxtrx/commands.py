import logging
from dataclasses import dataclass, field

from rfx_protocols import PacketHeader, PacketType, Protocols1, Protocols2, Protocols3, Protocols4

from .hardware import Frequency
from .parser import InterfaceCommandCode, encode_frame

logger = logging.getLogger(__name__)

# Sub-type of every InterfaceControl frame
INTERFACE_COMMAND_SUBTYPE = 0x00

EXTRA_LEN = 7


@dataclass(frozen=True)
class InterfaceCommand:
    """
    A control frame sent to the RFXtrx device.

    All control frames share one 13 byte layout after the length byte:
    header (3), cmd (1), frequency (1), xmitpwr (1), 7 extra bytes.
    """
    seqnbr: int
    cmd: InterfaceCommandCode
    frequency: int = 0
    xmitpwr: int = 0
    extra: bytes = field(default=bytes(EXTRA_LEN))

    def __post_init__(self):
        if len(self.extra) != EXTRA_LEN:
            raise ValueError(f"extra must be {EXTRA_LEN} bytes, got {len(self.extra)}")

    @property
    def header(self) -> PacketHeader:
        return PacketHeader(
            packet_type=PacketType.INTERFACE_CONTROL,
            sub_type=INTERFACE_COMMAND_SUBTYPE,
            seqnbr=self.seqnbr & 0xFF,
        )

    @property
    def expects_reply(self) -> bool:
        """Every command except reset is answered on the interface plane."""
        return self.cmd is not InterfaceCommandCode.RESET

    def to_bytes(self) -> bytes:
        payload = bytes((int(self.cmd), self.frequency & 0xFF, self.xmitpwr & 0xFF)) + self.extra
        return encode_frame(self.header, payload)

    @classmethod
    def reset(cls, seqnbr: int) -> 'InterfaceCommand':
        """Reset the receiver. The device stays silent for a while afterwards."""
        return cls(seqnbr=seqnbr, cmd=InterfaceCommandCode.RESET)

    @classmethod
    def get_status(cls, seqnbr: int) -> 'InterfaceCommand':
        return cls(seqnbr=seqnbr, cmd=InterfaceCommandCode.STATUS)

    @classmethod
    def start_receiver(cls, seqnbr: int) -> 'InterfaceCommand':
        return cls(seqnbr=seqnbr, cmd=InterfaceCommandCode.START_RECEIVER)

    @classmethod
    def save(cls, seqnbr: int) -> 'InterfaceCommand':
        """Persist the current mode in the device's flash."""
        return cls(seqnbr=seqnbr, cmd=InterfaceCommandCode.SAVE)

    @classmethod
    def set_mode(
        cls,
        seqnbr: int,
        frequency: Frequency,
        protos_1: Protocols1,
        protos_2: Protocols2,
        protos_3: Protocols3,
        protos_4: Protocols4,
    ) -> 'InterfaceCommand':
        """Select the band and the enabled protocol masks."""
        extra = bytes((protos_1.bits, protos_2.bits, protos_3.bits, protos_4.bits, 0, 0, 0))
        return cls(
            seqnbr=seqnbr,
            cmd=InterfaceCommandCode.SET_MODE,
            frequency=int(frequency),
            extra=extra,
        )
