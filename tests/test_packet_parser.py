import pytest

from rfx_protocols import DecoderError, NotParsed, PacketType, RFXProtocols, TempHum, UnknownPacketTypeError
from rfxtrx.hardware import Frequency
from rfxtrx.parser import PacketParser
from rfxtrx.types import Plane, Status

from conftest import STATUS_BODY, TEMP_HUM_FRAME, interface_reply


@pytest.fixture
def parser():
    return PacketParser()


def test_temp_hum_goes_to_sensor_plane(parser):
    parsed = parser.parse_frame(TEMP_HUM_FRAME[1:])
    assert parsed.plane is Plane.SENSOR
    assert isinstance(parsed.message, TempHum)
    assert parsed.message.id == 0xABCD


def test_status_goes_to_interface_plane(parser):
    parsed = parser.parse_frame(interface_reply(0x01, STATUS_BODY)[1:])
    assert parsed.plane is Plane.INTERFACE
    assert isinstance(parsed.message, Status)
    assert parsed.message.frequency is Frequency.TRX_TYPE_43392


def test_other_known_type_goes_to_sensor_plane_unparsed(parser):
    parsed = parser.parse_frame(bytes([0x56, 0x01, 0x09, 0xAA, 0xBB]))
    assert parsed.plane is Plane.SENSOR
    assert isinstance(parsed.message, NotParsed)
    assert parsed.message.header.packet_type is PacketType.WIND
    assert parsed.message.header.seqnbr == 0x09
    assert parsed.message.payload == bytes([0xAA, 0xBB])


def test_interface_control_echo_is_sensor_plane(parser):
    parsed = parser.parse_frame(bytes([0x00, 0x00, 0x01, 0x02]))
    assert parsed.plane is Plane.SENSOR


def test_unknown_type_raises(parser):
    with pytest.raises(UnknownPacketTypeError):
        parser.parse_frame(bytes([0x05, 0x00, 0x00]))


def test_uses_given_protocol_table():
    protocols = RFXProtocols()
    protocols.register_decoder(PacketType.RAIN, lambda hdr, body: "rain")
    parser = PacketParser(protocols=protocols)
    assert parser.parse_frame(bytes([0x55, 0x02, 0x00])).message == "rain"


def test_failing_plugged_decoder_raises_decoder_error():
    protocols = RFXProtocols()
    protocols.register_decoder(PacketType.RAIN, lambda hdr, body: (body[0] << 8) | body[1])
    parser = PacketParser(protocols=protocols)
    with pytest.raises(DecoderError) as excinfo:
        parser.parse_frame(bytes([0x55, 0x02, 0x00]))
    assert excinfo.value.packet_type == PacketType.RAIN
    assert isinstance(excinfo.value.__cause__, IndexError)
