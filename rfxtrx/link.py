"""The link worker: sole owner of the transport once the controller is open."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Optional, Set

from rfx_protocols import RFXProtocolError

from .parser import PacketParser, read_frame
from .transport import BaseTransport
from .types import InterfaceMessage, Plane, ProtocolMessage


class LinkWorker:
    """Multiplexes one transport between outbound control frames and inbound frames.

    Each loop iteration waits for whichever comes first: an outbound frame
    on ``outbound`` or the next inbound frame from the transport. Outbound
    frames are written whole. Inbound frames are decoded and put on exactly
    one of ``interface_queue`` or ``sensor_queue``. Decode errors are logged
    and the frame dropped.

    ``run`` returns normally when ``None`` is taken from ``outbound`` or
    when ``receivers_closed`` is set before a decoded frame could be
    delivered. It raises when the transport fails.
    """

    def __init__(
        self,
        transport: BaseTransport,
        outbound: "asyncio.Queue[Optional[bytes]]",
        interface_queue: "asyncio.Queue[InterfaceMessage]",
        sensor_queue: "asyncio.Queue[ProtocolMessage]",
        receivers_closed: asyncio.Event,
        parser: Optional[PacketParser] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.transport = transport
        self.outbound = outbound
        self.interface_queue = interface_queue
        self.sensor_queue = sensor_queue
        self.receivers_closed = receivers_closed
        self.parser = parser or PacketParser()
        self.logger = logger or logging.getLogger(__name__)

    async def run(self) -> None:
        read_task: Optional[asyncio.Task[Optional[bytes]]] = None
        send_task: Optional[asyncio.Task[Optional[bytes]]] = None
        try:
            while True:
                # The read task survives iterations so a frame is never cut in half
                if read_task is None:
                    read_task = asyncio.create_task(read_frame(self.transport), name="rfxtrx-read")
                if send_task is None:
                    send_task = asyncio.create_task(self.outbound.get(), name="rfxtrx-outbound")

                done, _ = await asyncio.wait({read_task, send_task}, return_when=asyncio.FIRST_COMPLETED)

                if send_task in done:
                    frame = send_task.result()
                    send_task = None
                    if frame is None:
                        self.logger.info("Outbound channel closed, link worker stopping")
                        return
                    self.logger.debug("Sending %s", frame.hex(" "))
                    await self.transport.write(frame)

                if read_task in done:
                    data = read_task.result()
                    read_task = None
                    if data is None:
                        continue
                    if not await self._dispatch(data):
                        self.logger.info("Receivers closed, link worker stopping")
                        return
        except asyncio.CancelledError:
            raise
        except Exception:
            self.logger.error("Link worker terminated", exc_info=True)
            raise
        finally:
            await self._cancel({read_task, send_task})
            await self.transport.close()

    async def _dispatch(self, data: bytes) -> bool:
        """Decode ``data`` and deliver it. Returns False once the receivers are gone."""
        try:
            parsed = self.parser.parse_frame(data)
        except RFXProtocolError as exc:
            self.logger.error("Parsing error %s (frame %s)", exc, data.hex(" "))
            return True

        queue: asyncio.Queue[Any]
        if parsed.plane is Plane.INTERFACE:
            queue = self.interface_queue
        else:
            queue = self.sensor_queue
        return await self._deliver(queue, parsed.message)

    async def _deliver(self, queue: "asyncio.Queue[Any]", message: Any) -> bool:
        """Put ``message`` on ``queue``, waiting for room unless the receivers go away."""
        if self.receivers_closed.is_set():
            return False
        if not queue.full():
            queue.put_nowait(message)
            return True

        put_task = asyncio.create_task(queue.put(message))
        closed_task = asyncio.create_task(self.receivers_closed.wait())
        try:
            await asyncio.wait({put_task, closed_task}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            await self._cancel({put_task, closed_task})
        return put_task.done() and not put_task.cancelled()

    @staticmethod
    async def _cancel(tasks: Set[Optional["asyncio.Task[Any]"]]) -> None:
        pending = []
        for task in tasks:
            if task is None:
                continue
            if task.done():
                if not task.cancelled():
                    task.exception()  # mark as retrieved
            else:
                task.cancel()
                pending.append(task)
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
