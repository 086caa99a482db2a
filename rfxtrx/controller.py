import asyncio
import logging
from typing import Any, Optional, TypeVar

from rfx_protocols import Protocols1, Protocols2, Protocols3, Protocols4

from .commands import InterfaceCommand
from .constants import MESSAGE_QUEUE_LEN, RFXTRX_RESET_MIN_WAIT, RFXTRX_RESET_WAIT
from .exceptions import (
    RFXtrxChannelError,
    RFXtrxCommandTimeout,
    RFXtrxShutdownError,
    UnexpectedMessageError,
)
from .hardware import Frequency
from .link import LinkWorker
from .parser import PacketParser
from .transport import BaseTransport, SerialTransport, find_port_by_serial_number
from .types import InterfaceMessage, ProtocolMessage, RFXtrxInfo, Status, WrongCommand

_T = TypeVar("_T")


class RFXtrxController:
    """Session facade for an RFXtrx433 device.

    Holds the outbound queue, the interface-plane and sensor-plane queues and
    the sequence counter. Opening the controller opens the transport and
    spawns the link worker, which owns the transport from then on. Control
    operations are serialised; ``read_message`` may run concurrently with
    them.
    """

    def __init__(
        self,
        transport: BaseTransport,
        parser: Optional[PacketParser] = None,
        logger: Optional[logging.Logger] = None,
        timeout: Optional[float] = None,
        reset_wait: float = RFXTRX_RESET_WAIT,
    ) -> None:
        self.transport = transport
        self.parser = parser or PacketParser()
        self.logger = logger or logging.getLogger(__name__)
        self.timeout = timeout
        self.reset_wait = reset_wait
        if reset_wait < RFXTRX_RESET_MIN_WAIT:
            self.logger.warning(
                "reset_wait of %.2f s is below the %.1f s the device needs after a reset",
                reset_wait,
                RFXTRX_RESET_MIN_WAIT,
            )

        self.seqnbr = 0
        self._outbound: asyncio.Queue[Optional[bytes]] = asyncio.Queue()
        self._interface_queue: asyncio.Queue[InterfaceMessage] = asyncio.Queue(maxsize=MESSAGE_QUEUE_LEN)
        self._sensor_queue: asyncio.Queue[ProtocolMessage] = asyncio.Queue(maxsize=MESSAGE_QUEUE_LEN)
        self._receivers_closed = asyncio.Event()
        self._command_lock = asyncio.Lock()
        self._worker_task: Optional[asyncio.Task[None]] = None
        self._outbound_closed = False

    @classmethod
    def from_serial_port(cls, port: str, **kwargs: Any) -> "RFXtrxController":
        """Controller for a tty such as /dev/ttyUSB0. Open it with ``async with``."""
        return cls(SerialTransport(port), **kwargs)

    @classmethod
    def from_serial_number(cls, serial_number: str, **kwargs: Any) -> "RFXtrxController":
        """Controller for the USB device carrying ``serial_number``."""
        return cls.from_serial_port(find_port_by_serial_number(serial_number), **kwargs)

    async def __aenter__(self) -> "RFXtrxController":
        await self.open()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    @property
    def is_running(self) -> bool:
        return self._worker_task is not None and not self._worker_task.done()

    async def open(self) -> None:
        """Open the transport and spawn the link worker."""
        if self._worker_task is not None:
            raise RuntimeError("Controller was already opened")
        if self.transport.closed():
            await self.transport.open()
        worker = LinkWorker(
            transport=self.transport,
            outbound=self._outbound,
            interface_queue=self._interface_queue,
            sensor_queue=self._sensor_queue,
            receivers_closed=self._receivers_closed,
            parser=self.parser,
            logger=self.logger,
        )
        self._worker_task = asyncio.create_task(worker.run(), name="rfxtrx-link")

    async def close(self) -> None:
        """Close the outbound channel and wait for the link worker to stop."""
        if not self._outbound_closed:
            self._outbound_closed = True
            self._outbound.put_nowait(None)
        self._receivers_closed.set()
        if self._worker_task is None:
            await self.transport.close()
            return
        try:
            await self._worker_task
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            self.logger.debug("Link worker had stopped with %s", exc)

    async def wait_closed(self) -> None:
        """Wait for the link worker to stop, re-raising the error it stopped with."""
        if self._worker_task is not None:
            await self._worker_task

    def _next_seqnbr(self) -> int:
        n = self.seqnbr
        self.seqnbr = (self.seqnbr + 1) & 0xFF
        return n

    def _send(self, command: InterfaceCommand) -> None:
        if self._outbound_closed:
            raise RFXtrxChannelError("Outbound channel is closed")
        if self._worker_task is None:
            raise RFXtrxChannelError("Controller is not open")
        if self._worker_task.done():
            raise RFXtrxShutdownError()
        self._outbound.put_nowait(command.to_bytes())

    async def _receive(self, queue: "asyncio.Queue[_T]") -> _T:
        """Take the next message from ``queue``; Shutdown once it is drained and the worker is gone."""
        if not queue.empty():
            return queue.get_nowait()
        if self._worker_task is None or self._worker_task.done():
            raise RFXtrxShutdownError()

        get_task = asyncio.create_task(queue.get())
        try:
            await asyncio.wait({get_task, self._worker_task}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            if not get_task.done():
                get_task.cancel()
        if get_task.done() and not get_task.cancelled():
            return get_task.result()
        if not queue.empty():
            return queue.get_nowait()
        raise RFXtrxShutdownError()

    async def _await_reply(self, queue: "asyncio.Queue[_T]") -> _T:
        if self.timeout is None:
            return await self._receive(queue)
        try:
            return await asyncio.wait_for(self._receive(queue), timeout=self.timeout)
        except asyncio.TimeoutError:
            raise RFXtrxCommandTimeout(f"No reply within {self.timeout} s") from None

    def _drain_stale_replies(self) -> None:
        # Anything already queued belongs to an earlier, timed out request
        while not self._interface_queue.empty():
            stale = self._interface_queue.get_nowait()
            self.logger.warning("Discarding stale interface message %r", stale)

    async def _command(self, command: InterfaceCommand) -> Optional[InterfaceMessage]:
        self._drain_stale_replies()
        self._send(command)
        if not command.expects_reply:
            return None
        reply = await self._await_reply(self._interface_queue)
        self.logger.debug("Received reply to %s (seqnbr %d): %r", command.cmd.name, command.seqnbr, reply)
        if isinstance(reply, WrongCommand):
            raise UnexpectedMessageError(f"Device rejected {command.cmd.name} (seqnbr {command.seqnbr})")
        return reply

    async def reset(self) -> None:
        """Send a reset to the device and wait until it is ready again. No reply is read."""
        async with self._command_lock:
            await self._command(InterfaceCommand.reset(self._next_seqnbr()))
            self.logger.debug("Sleeping %.1f s after sending reset", self.reset_wait)
            await asyncio.sleep(self.reset_wait)

    async def get_status(self) -> RFXtrxInfo:
        """Query frequency, firmware version and enabled protocols."""
        async with self._command_lock:
            self.logger.debug("Sending get_status")
            reply = await self._command(InterfaceCommand.get_status(self._next_seqnbr()))
        if not isinstance(reply, Status):
            raise UnexpectedMessageError(f"Expected status response, received {reply!r}")
        return RFXtrxInfo(
            frequency=reply.frequency,
            enabled_protocols=reply.enabled_protocols,
            fw_version=reply.fw_version,
        )

    async def start_receiver(self) -> None:
        """Start the receiver and wait for the confirmation."""
        async with self._command_lock:
            self.logger.debug("Sending start_receiver")
            await self._command(InterfaceCommand.start_receiver(self._next_seqnbr()))

    async def set_mode(
        self,
        frequency: Frequency = Frequency.TRX_TYPE_43392,
        protos_1: Protocols1 = Protocols1(0),
        protos_2: Protocols2 = Protocols2(0),
        protos_3: Protocols3 = Protocols3(0),
        protos_4: Protocols4 = Protocols4(0),
    ) -> None:
        """Set frequency and enabled protocols, then save them on the device."""
        async with self._command_lock:
            self.logger.debug("Sending set_mode")
            await self._command(
                InterfaceCommand.set_mode(
                    self._next_seqnbr(), frequency, protos_1, protos_2, protos_3, protos_4
                )
            )
            self.logger.debug("Sending save")
            await self._command(InterfaceCommand.save(self._next_seqnbr()))

    async def read_message(self) -> ProtocolMessage:
        """Wait for the next sensor message. Blocks until one arrives or the link stops."""
        message = await self._receive(self._sensor_queue)
        self.logger.debug("read_message: received %r", message)
        return message
