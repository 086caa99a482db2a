import asyncio

from rfxtrx import RFXtrxController


async def main():
    # Serial connection (USB)
    async with RFXtrxController.from_serial_port("/dev/ttyUSB0") as controller:
        await controller.reset()
        info = await controller.get_status()
        print(f"Frequency: {info.frequency.name}, firmware: {info.fw_version}")

        await controller.start_receiver()
        while True:
            print(await controller.read_message())

asyncio.run(main())
