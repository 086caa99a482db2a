"""Decoder for interface-plane replies (packet type 0x01)."""

from __future__ import annotations

import logging
from enum import IntEnum

from rfx_protocols import NotEnoughDataError, PacketHeader, PacketType

from ..exceptions import (
    UnknownInterfaceMessageCommandError,
    UnknownSubPacketTypeError,
    UnsupportedInterfaceMessageError,
)
from ..hardware import get_frequency
from ..types import (
    EnabledProtocols,
    InterfaceMessage,
    ReceiverStartedAck,
    SaveAck,
    SetModeAck,
    Status,
    WrongCommand,
)

logger = logging.getLogger(__name__)

STATUS_BODY_LEN = 7


class InterfaceMessageSubType(IntEnum):
    INTERFACE_RESPONSE = 0x00
    UNKNOWN_RFY_REMOTE = 0x01
    EXT_ERROR = 0x02
    RFY_REMOTE_LIST = 0x03
    ASA_REMOTE_LIST = 0x04
    REC_STARTED = 0x07
    INTERFACE_WRONG_COMMAND = 0xFF


class InterfaceCommandCode(IntEnum):
    """Command byte of a control frame, echoed back in interface responses."""

    RESET = 0x00
    STATUS = 0x02
    SET_MODE = 0x03
    SAVE = 0x06
    START_RECEIVER = 0x07


def parse_interface_message(header: PacketHeader, body: bytes) -> InterfaceMessage:
    try:
        sub_type = InterfaceMessageSubType(header.sub_type)
    except ValueError:
        raise UnknownSubPacketTypeError(PacketType.INTERFACE_MESSAGE, header.sub_type) from None

    if sub_type is InterfaceMessageSubType.REC_STARTED:
        return ReceiverStartedAck()

    if not body:
        raise NotEnoughDataError(received=0, expected=1)

    if sub_type is InterfaceMessageSubType.INTERFACE_WRONG_COMMAND:
        logger.warning("Device rejected command 0x%02X", body[0])
        return WrongCommand(command=body[0])

    if sub_type is not InterfaceMessageSubType.INTERFACE_RESPONSE:
        raise UnsupportedInterfaceMessageError(sub_type=header.sub_type)

    try:
        cmd = InterfaceCommandCode(body[0])
    except ValueError:
        raise UnknownInterfaceMessageCommandError(body[0]) from None
    logger.debug("Received InterfaceMessage sub_type: %s cmd: %s", sub_type.name, cmd.name)

    if cmd is InterfaceCommandCode.STATUS:
        if len(body) < STATUS_BODY_LEN:
            raise NotEnoughDataError(received=len(body), expected=STATUS_BODY_LEN)
        return Status(
            frequency=get_frequency(body[1]),
            fw_version=body[2],
            enabled_protocols=EnabledProtocols.from_bytes(body[3:7]),
        )
    if cmd is InterfaceCommandCode.SET_MODE:
        return SetModeAck()
    if cmd is InterfaceCommandCode.SAVE:
        return SaveAck()
    if cmd is InterfaceCommandCode.RESET:
        raise UnsupportedInterfaceMessageError(sub_type=header.sub_type, command=int(cmd))
    raise UnknownInterfaceMessageCommandError(body[0])
