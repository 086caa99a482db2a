import asyncio

from rfxtrx import RFXtrxController, TCPTransport


async def main():
    # Device shared over the network, e.g. by ser2net
    async with TCPTransport(host="192.168.1.100", port=10001) as transport:
        async with RFXtrxController(transport=transport, timeout=5.0) as controller:
            await controller.reset()
            await controller.start_receiver()
            message = await controller.read_message()
            print(message)

asyncio.run(main())
