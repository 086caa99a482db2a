"""Errors raised while decoding sensor-plane packets."""


class RFXProtocolError(Exception):
    """Base class for per-frame decode failures."""


class NotEnoughDataError(RFXProtocolError):
    """Raised when a packet body is shorter than its decoder requires."""

    def __init__(self, received: int, expected: int) -> None:
        super().__init__(f"Expected {expected} bytes, received {received} bytes.")
        self.received = received
        self.expected = expected


class UnknownPacketTypeError(RFXProtocolError):
    """Raised when the packet type byte has no registered mapping."""

    def __init__(self, value: int) -> None:
        super().__init__(f"Unknown packet type: 0x{value:02X}")
        self.value = value


class DecoderError(RFXProtocolError):
    """Raised when a registered decoder fails on a packet body."""

    def __init__(self, packet_type: int, reason: Exception) -> None:
        super().__init__(f"Decoder for packet type 0x{packet_type:02X} failed: {reason!r}")
        self.packet_type = packet_type
        self.reason = reason
