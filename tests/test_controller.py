import asyncio

import pytest

from rfx_protocols import Protocols1, Protocols2, Protocols3, Protocols4, TempHum
from rfxtrx.controller import RFXtrxController
from rfxtrx.exceptions import (
    RFXtrxChannelError,
    RFXtrxCommandTimeout,
    RFXtrxIOError,
    RFXtrxShutdownError,
    UnexpectedMessageError,
)
from rfxtrx.hardware import Frequency
from rfxtrx.types import EnabledProtocols, RFXtrxInfo

from conftest import TEMP_HUM_FRAME, FakeDevice, FakeTransport, interface_reply


@pytest.mark.asyncio
async def test_open_and_close(fake_transport):
    controller = RFXtrxController(transport=fake_transport)
    async with controller:
        assert not fake_transport.closed()
        assert controller.is_running
    assert fake_transport.closed()
    assert not controller.is_running


@pytest.mark.asyncio
async def test_reset_sends_frame_and_sleeps(fake_transport, fake_device, mocker):
    sleep = mocker.patch("rfxtrx.controller.asyncio.sleep", new=mocker.AsyncMock())
    controller = RFXtrxController(transport=fake_transport)
    async with controller:
        await controller.reset()
        sleep.assert_awaited_once_with(1.0)
        # let the link worker write the queued frame
        await controller.get_status()
    assert fake_device.received[0] == bytes([0x0D, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0])


@pytest.mark.asyncio
async def test_get_status(controller):
    info = await controller.get_status()
    assert info == RFXtrxInfo(
        frequency=Frequency.TRX_TYPE_43392,
        enabled_protocols=EnabledProtocols(Protocols1(0), Protocols2(0), Protocols3.OREGON, Protocols4.KEELOQ),
        fw_version=1,
    )


@pytest.mark.asyncio
async def test_get_status_unexpected_reply(controller, fake_device):
    fake_device.replies[0x02] = bytes([0x03])
    with pytest.raises(UnexpectedMessageError):
        await controller.get_status()
    # the session stays usable
    fake_device.replies[0x02] = bytes([0x02, 0x55, 0x02, 0, 0, 0, 0])
    assert (await controller.get_status()).frequency is Frequency.TRX_TYPE_868


@pytest.mark.asyncio
async def test_get_status_wrong_command(controller, fake_transport, fake_device):
    fake_transport.on_write = lambda frame: fake_transport.feed(interface_reply(frame[3], bytes([frame[4]]), sub_type=0xFF))
    with pytest.raises(UnexpectedMessageError):
        await controller.get_status()


@pytest.mark.asyncio
async def test_start_receiver_rejected(controller, fake_transport):
    fake_transport.on_write = lambda frame: fake_transport.feed(interface_reply(frame[3], bytes([frame[4]]), sub_type=0xFF))
    with pytest.raises(UnexpectedMessageError, match="START_RECEIVER"):
        await controller.start_receiver()


@pytest.mark.asyncio
async def test_start_receiver(controller, fake_device):
    await controller.start_receiver()
    assert fake_device.received[-1][4] == 0x07


@pytest.mark.asyncio
async def test_set_mode_sends_set_mode_then_save(controller, fake_device):
    await controller.set_mode(
        Frequency.default(), Protocols1(0), Protocols2(0), Protocols3.X10, Protocols4(0)
    )
    assert fake_device.received == [
        bytes([0x0D, 0x00, 0x00, 0x00, 0x03, 0x53, 0x00, 0x00, 0x00, 0x01, 0x00, 0x00, 0x00, 0x00]),
        bytes([0x0D, 0x00, 0x00, 0x01, 0x06, 0x00, 0x00, 0x00, 0x00, 0x00, 0x00, 0x00, 0x00, 0x00]),
    ]


@pytest.mark.asyncio
async def test_sequence_number_advances_per_operation(controller):
    await controller.reset()
    assert controller.seqnbr == 1
    await controller.get_status()
    assert controller.seqnbr == 2
    await controller.start_receiver()
    assert controller.seqnbr == 3
    await controller.set_mode()
    assert controller.seqnbr == 5


@pytest.mark.asyncio
async def test_sequence_number_wraps(controller, fake_device):
    controller.seqnbr = 0xFF
    await controller.get_status()
    await controller.get_status()
    assert [frame[3] for frame in fake_device.received] == [0xFF, 0x00]


@pytest.mark.asyncio
async def test_read_message(controller, fake_transport):
    fake_transport.feed(TEMP_HUM_FRAME)
    message = await asyncio.wait_for(controller.read_message(), timeout=1)
    assert isinstance(message, TempHum)
    assert message.temp == pytest.approx(25.0)


@pytest.mark.asyncio
async def test_sensor_messages_do_not_disturb_control_replies(controller, fake_transport, fake_device):
    def reply_after_sensor_frames(frame):
        fake_transport.feed(TEMP_HUM_FRAME)
        FakeDevice._on_write(fake_device, frame)
        fake_transport.feed(TEMP_HUM_FRAME)

    fake_transport.on_write = reply_after_sensor_frames
    info = await controller.get_status()
    assert info.frequency is Frequency.TRX_TYPE_43392
    assert isinstance(await controller.read_message(), TempHum)
    assert isinstance(await controller.read_message(), TempHum)


@pytest.mark.asyncio
async def test_read_message_shutdown_on_link_failure(controller, fake_transport):
    fake_transport.feed(TEMP_HUM_FRAME)
    fake_transport.feed_eof()
    # buffered messages drain before the shutdown surfaces
    assert isinstance(await asyncio.wait_for(controller.read_message(), timeout=1), TempHum)
    with pytest.raises(RFXtrxShutdownError):
        await asyncio.wait_for(controller.read_message(), timeout=1)


@pytest.mark.asyncio
async def test_pending_reply_shutdown_on_link_failure(controller, fake_transport):
    fake_transport.on_write = lambda frame: fake_transport.feed_eof()
    with pytest.raises(RFXtrxShutdownError):
        await asyncio.wait_for(controller.get_status(), timeout=1)
    with pytest.raises(RFXtrxShutdownError):
        await controller.start_receiver()


@pytest.mark.asyncio
async def test_operations_after_close_fail(fake_transport, fake_device):
    controller = RFXtrxController(transport=fake_transport)
    async with controller:
        pass
    with pytest.raises(RFXtrxChannelError):
        await controller.get_status()
    with pytest.raises(RFXtrxShutdownError):
        await controller.read_message()


@pytest.mark.asyncio
async def test_operations_before_open_fail(fake_transport):
    controller = RFXtrxController(transport=fake_transport)
    with pytest.raises(RFXtrxChannelError):
        await controller.start_receiver()


@pytest.mark.asyncio
async def test_command_timeout(fake_transport):
    controller = RFXtrxController(transport=fake_transport, timeout=0.05)
    async with controller:
        with pytest.raises(RFXtrxCommandTimeout):
            await controller.get_status()


@pytest.mark.asyncio
async def test_concurrent_control_calls_are_serialised(controller, fake_device):
    first, second = await asyncio.gather(controller.get_status(), controller.get_status())
    assert first == second
    assert [frame[3] for frame in fake_device.received] == [0, 1]


@pytest.mark.asyncio
async def test_close_while_plane_is_full(fake_transport, fake_device, mocker):
    mocker.patch("rfxtrx.controller.MESSAGE_QUEUE_LEN", 1)
    controller = RFXtrxController(transport=fake_transport)
    await controller.open()
    fake_transport.feed(TEMP_HUM_FRAME * 3)
    await asyncio.sleep(0.01)
    await asyncio.wait_for(controller.close(), timeout=1)
    assert fake_transport.closed()


@pytest.mark.asyncio
async def test_wait_closed_reraises_link_error(fake_transport):
    controller = RFXtrxController(transport=fake_transport)
    await controller.open()
    fake_transport.feed(bytes([0x04]))
    fake_transport.feed_eof()
    with pytest.raises(RFXtrxIOError):
        await asyncio.wait_for(controller.wait_closed(), timeout=1)
    await controller.close()


def test_from_serial_number(mocker):
    mocker.patch("rfxtrx.controller.find_port_by_serial_number", return_value="/dev/ttyUSB3")
    controller = RFXtrxController.from_serial_number("A1B2C3")
    assert controller.transport.port == "/dev/ttyUSB3"
    assert controller.transport.baudrate == 38400


@pytest.mark.asyncio
async def test_late_reply_is_not_taken_by_next_command(fake_transport, fake_device, caplog):
    fake_device.replies[0x02] = None
    controller = RFXtrxController(transport=fake_transport, timeout=0.05, reset_wait=0)
    async with controller:
        with pytest.raises(RFXtrxCommandTimeout):
            await controller.get_status()
        # the device answers after the caller gave up
        fake_transport.feed(interface_reply(0, bytes([0x02, 0x53, 0x01, 0, 0, 0, 0])))
        await asyncio.sleep(0.01)

        fake_device.replies[0x02] = bytes([0x02, 0x55, 0x02, 0, 0, 0, 0])
        info = await controller.get_status()
    assert info.frequency is Frequency.TRX_TYPE_868
    assert info.fw_version == 2
    assert "Discarding stale interface message" in caplog.text


@pytest.mark.asyncio
async def test_pending_read_message_fails_on_close(fake_transport):
    controller = RFXtrxController(transport=fake_transport)
    await controller.open()
    reader = asyncio.create_task(controller.read_message())
    await asyncio.sleep(0.01)
    assert not reader.done()
    await controller.close()
    with pytest.raises(RFXtrxShutdownError):
        await asyncio.wait_for(reader, timeout=1)


def test_reset_wait_below_device_minimum_warns(fake_transport, caplog):
    RFXtrxController(transport=fake_transport, reset_wait=0.1)
    assert "below the 0.5 s the device needs" in caplog.text


@pytest.mark.asyncio
async def test_reset_reads_no_reply(controller, fake_device):
    await controller.reset()
    assert controller._interface_queue.empty()
    info = await controller.get_status()
    assert [frame[4] for frame in fake_device.received] == [0x00, 0x02]
    assert info.frequency is Frequency.TRX_TYPE_43392
