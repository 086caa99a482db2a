"""A Python library to control an RFXtrx433 transceiver."""

from .commands import InterfaceCommand
from .controller import RFXtrxController
from .hardware import Frequency
from .transport import SerialTransport, TCPTransport, find_port_by_serial_number
from .types import EnabledProtocols, RFXtrxInfo

__all__ = [
    "EnabledProtocols",
    "Frequency",
    "InterfaceCommand",
    "RFXtrxController",
    "RFXtrxInfo",
    "SerialTransport",
    "TCPTransport",
    "find_port_by_serial_number",
]
