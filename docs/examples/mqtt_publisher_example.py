import asyncio
import os

from rfxtrx import RFXtrxController
from rfxtrx.mqtt import MqttPublisher

os.environ.setdefault("MQTT_HOST", "localhost")
os.environ.setdefault("MQTT_TOPIC", "rfxtrx")


async def main():
    async with MqttPublisher() as publisher:
        async with RFXtrxController.from_serial_port("/dev/ttyUSB0") as controller:
            await controller.reset()
            await publisher.publish_status(await controller.get_status())
            await controller.start_receiver()
            while True:
                # Published to rfxtrx/messages/<type>
                await publisher.publish(await controller.read_message())

asyncio.run(main())
