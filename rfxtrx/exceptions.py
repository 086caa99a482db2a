"""Custom exception hierarchy for the RFXtrx433 driver."""

from rfx_protocols.exceptions import DecoderError, NotEnoughDataError, RFXProtocolError, UnknownPacketTypeError


class RFXtrxError(Exception):
    """Base class for all RFXtrx-specific errors."""


class DeviceWithSerialNotFoundError(RFXtrxError):
    """Raised when no USB serial port carries the requested serial number."""

    def __init__(self, serial: str) -> None:
        super().__init__(f"No device with serial number {serial} found")
        self.serial = serial


class RFXtrxShutdownError(RFXtrxError):
    """Raised when the link worker stopped while a reply was awaited."""

    def __init__(self, message: str = "System was shutdown during operation") -> None:
        super().__init__(message)


class RFXtrxChannelError(RFXtrxError):
    """Raised when a frame cannot be queued because the outbound channel is closed."""


class UnexpectedMessageError(RFXtrxError):
    """Raised when a control operation receives a reply of the wrong shape."""


class RFXtrxCommandTimeout(RFXtrxError):
    """Raised when a reply does not arrive within the configured timeout."""


class RFXtrxConnectionError(RFXtrxError):
    """Raised when a transport cannot be opened or is unexpectedly closed."""


class RFXtrxSerialPortError(RFXtrxConnectionError):
    """Raised when the serial port cannot be enumerated or opened."""


class RFXtrxIOError(RFXtrxConnectionError):
    """Raised on read or write failures of an open transport."""


class RFXtrxParserError(RFXtrxError, RFXProtocolError):
    """Raised when an inbound frame cannot be decoded. Never fatal for the link."""


class UnknownSubPacketTypeError(RFXtrxParserError):
    def __init__(self, packet_type: int, sub_type: int) -> None:
        super().__init__(f"Unknown subtype 0x{sub_type:02X} for packet type 0x{int(packet_type):02X}")
        self.packet_type = packet_type
        self.sub_type = sub_type


class UnknownInterfaceMessageCommandError(RFXtrxParserError):
    def __init__(self, command: int) -> None:
        super().__init__(f"Unknown interface message command: 0x{command:02X}")
        self.command = command


class UnknownHardwareTypeError(RFXtrxParserError):
    def __init__(self, value: int) -> None:
        super().__init__(f"Unknown hardware type: 0x{value:02X}")
        self.value = value


class UnsupportedInterfaceMessageError(RFXtrxParserError):
    """Raised for interface replies that are valid on the wire but not handled here."""

    def __init__(self, sub_type: int, command: int | None = None) -> None:
        detail = f"sub type 0x{sub_type:02X}"
        if command is not None:
            detail += f", command 0x{command:02X}"
        super().__init__(f"Unsupported interface message ({detail})")
        self.sub_type = sub_type
        self.command = command


__all__ = [
    "DecoderError",
    "DeviceWithSerialNotFoundError",
    "NotEnoughDataError",
    "RFXtrxChannelError",
    "RFXtrxCommandTimeout",
    "RFXtrxConnectionError",
    "RFXtrxError",
    "RFXtrxIOError",
    "RFXtrxParserError",
    "RFXtrxSerialPortError",
    "RFXtrxShutdownError",
    "UnexpectedMessageError",
    "UnknownHardwareTypeError",
    "UnknownInterfaceMessageCommandError",
    "UnknownPacketTypeError",
    "UnknownSubPacketTypeError",
    "UnsupportedInterfaceMessageError",
]
