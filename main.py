import argparse
import asyncio
import logging
import os
import sys
from contextlib import AsyncExitStack
from typing import Optional

from dotenv import load_dotenv

from rfxtrx.controller import RFXtrxController
from rfxtrx.exceptions import RFXtrxConnectionError, RFXtrxError
from rfxtrx.hardware import Frequency, get_frequency_config, parse_frequency
from rfxtrx.mqtt import MqttPublisher
from rfxtrx.transport import SerialTransport, TCPTransport, find_port_by_serial_number
from rfxtrx.types import EnabledProtocols


def initialize_logging(log_level_str: str):
    """Configures the root logger from a level name such as ``DEBUG``."""
    level = getattr(logging, log_level_str.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )
    logging.getLogger().setLevel(level)


logger = logging.getLogger("main")


def build_transport(args: argparse.Namespace):
    if args.serial:
        logger.info("Using serial port %s", args.serial)
        return SerialTransport(port=args.serial)
    if args.serial_number:
        port = find_port_by_serial_number(args.serial_number)
        logger.info("Found device %s on %s", args.serial_number, port)
        return SerialTransport(port=port)
    if args.tcp:
        logger.info("Connecting to %s:%s", args.tcp, args.port)
        return TCPTransport(host=args.tcp, port=args.port)
    return None


async def _configure(controller: RFXtrxController, args: argparse.Namespace, publisher: Optional[MqttPublisher]):
    await controller.reset()

    info = await controller.get_status()
    logger.info(
        "Device status: %s (%s), firmware=%d, protocols=%s",
        get_frequency_config(info.frequency).name,
        info.frequency.name,
        info.fw_version,
        ",".join(info.enabled_protocols.names()) or "-",
    )

    if args.protocols is not None:
        protocols = EnabledProtocols.from_names(args.protocols.split(","))
        frequency = parse_frequency(args.frequency) if args.frequency else info.frequency
        logger.info("Setting mode: frequency=%s, protocols=%s", frequency.name, ",".join(protocols.names()) or "-")
        await controller.set_mode(
            frequency,
            protocols.protos_1,
            protocols.protos_2,
            protocols.protos_3,
            protocols.protos_4,
        )
        info = await controller.get_status()

    if publisher:
        await publisher.publish_status(info)

    await controller.start_receiver()
    logger.info("Receiver started")


async def _read_loop(controller: RFXtrxController, publisher: Optional[MqttPublisher]):
    while True:
        message = await controller.read_message()
        logger.info("Received message %r", message)
        if publisher:
            await publisher.publish(message)


async def _async_run(args: argparse.Namespace):
    transport = build_transport(args)
    if not transport:
        logger.error(
            "No transport configured. Use --serial, --serial-number or --tcp, "
            "or set RFXTRX_SERIAL_PORT / RFXTRX_SERIAL_NUMBER / RFXTRX_TCP_HOST."
        )
        sys.exit(1)

    controller = RFXtrxController(transport=transport, timeout=args.command_timeout)

    async with AsyncExitStack() as stack:
        await stack.enter_async_context(controller)

        publisher: Optional[MqttPublisher] = None
        if args.mqtt_host:
            publisher = await stack.enter_async_context(MqttPublisher())

            async def handle_command(command: str, payload: str) -> None:
                if command == "get_status":
                    await publisher.publish_status(await controller.get_status())
                elif command == "start_receiver":
                    await controller.start_receiver()
                else:
                    logger.warning("Unknown MQTT command: %s", command)

            publisher.register_command_callback(handle_command)

        await _configure(controller, args, publisher)

        tasks = [asyncio.create_task(_read_loop(controller, publisher), name="rfxtrx-read-loop")]
        if publisher:
            tasks.append(asyncio.create_task(publisher.command_listener(), name="rfxtrx-mqtt-commands"))
        try:
            await asyncio.wait_for(asyncio.gather(*tasks), timeout=args.timeout)
        except asyncio.TimeoutError:
            logger.info("Timeout of %s s reached, stopping.", args.timeout)
        finally:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)


def main():
    # .env is loaded first, CLI arguments override it
    load_dotenv()

    default_serial_port = os.environ.get("RFXTRX_SERIAL_PORT")
    default_serial_number = os.environ.get("RFXTRX_SERIAL_NUMBER")
    default_tcp_host = os.environ.get("RFXTRX_TCP_HOST")
    default_tcp_port = int(os.environ.get("RFXTRX_TCP_PORT", 10001))
    default_protocols = os.environ.get("RFXTRX_PROTOCOLS")
    default_frequency = os.environ.get("RFXTRX_FREQUENCY")
    default_mqtt_host = os.environ.get("MQTT_HOST")
    default_log_level = os.environ.get("LOG_LEVEL", "INFO")

    parser = argparse.ArgumentParser(description="RFXtrx433 receiver")

    group = parser.add_mutually_exclusive_group(required=False)
    group.add_argument("--serial", default=default_serial_port, help="Serial port, e.g. /dev/ttyUSB0")
    group.add_argument("--serial-number", default=default_serial_number, help="USB serial number of the device")
    group.add_argument("--tcp", default=default_tcp_host, help="Host of a serial-to-network bridge")
    parser.add_argument("--port", type=int, default=default_tcp_port, help=f"TCP port (default: {default_tcp_port})")

    parser.add_argument(
        "--protocols",
        default=default_protocols,
        help="Comma separated protocols to enable, e.g. FINEOFFSET,OREGON. Leaves the device mode untouched if omitted.",
    )
    parser.add_argument(
        "--frequency",
        default=default_frequency,
        help=f"Frequency used with --protocols (default: current device setting, e.g. {Frequency.TRX_TYPE_43392.name})",
    )
    parser.add_argument("--mqtt-host", default=default_mqtt_host, help="Publish messages to this MQTT broker (MQTT_* variables configure the rest)")
    parser.add_argument("--log-level", default=default_log_level, choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"])
    parser.add_argument("--command-timeout", type=float, default=None, help="Seconds to wait for each device reply")
    parser.add_argument("--timeout", type=float, default=None, help="Stop after N seconds")

    args = parser.parse_args()
    initialize_logging(args.log_level)
    if args.mqtt_host:
        os.environ["MQTT_HOST"] = args.mqtt_host

    try:
        asyncio.run(_async_run(args))
    except KeyboardInterrupt:
        logger.info("Stopped by KeyboardInterrupt.")
    except RFXtrxConnectionError as e:
        logger.error("Connection error: %s", e)
        sys.exit(1)
    except (RFXtrxError, ValueError) as e:
        logger.error("%s", e)
        sys.exit(1)


if __name__ == "__main__":
    main()
