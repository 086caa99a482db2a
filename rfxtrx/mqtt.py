import asyncio
import json
import logging
import os
from dataclasses import asdict, is_dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Optional

import aiomqtt as mqtt
import paho.mqtt.client as paho_mqtt  # topic_matches_sub

from rfx_protocols import NotParsed

from .types import ProtocolMessage, RFXtrxInfo


def _to_jsonable(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.name
    if isinstance(value, (bytes, bytearray)):
        return value.hex()
    if isinstance(value, dict):
        return {k: _to_jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_to_jsonable(v) for v in value]
    return value


class MqttPublisher:
    """Publishes sensor messages and device status to an MQTT broker and listens for commands."""

    def __init__(self, logger: Optional[logging.Logger] = None) -> None:
        self.logger = logger or logging.getLogger(__name__)
        self.client: Optional[mqtt.Client] = None  # Will be set in __aenter__

        self.mqtt_host = os.environ.get("MQTT_HOST", "localhost")
        self.mqtt_port = int(os.environ.get("MQTT_PORT", 1883))
        self.mqtt_topic = os.environ.get("MQTT_TOPIC", "rfxtrx")
        self.mqtt_username = os.environ.get("MQTT_USERNAME")
        self.mqtt_password = os.environ.get("MQTT_PASSWORD")

        self.command_callback: Optional[Callable[[str, str], Awaitable[None]]] = None
        self.command_topic = f"{self.mqtt_topic}/commands/#"

    async def __aenter__(self) -> "MqttPublisher":
        self.logger.debug("Initializing MQTT client...")

        if self.mqtt_username and self.mqtt_password:
            self.client = mqtt.Client(
                hostname=self.mqtt_host,
                port=self.mqtt_port,
                username=self.mqtt_username,
                password=self.mqtt_password,
            )
        else:
            self.client = mqtt.Client(
                hostname=self.mqtt_host,
                port=self.mqtt_port,
            )
        try:
            await self.client.__aenter__()
            self.logger.info("Connected to MQTT broker %s:%s", self.mqtt_host, self.mqtt_port)
            return self
        except Exception:
            self.client = None
            self.logger.error("Could not connect to MQTT broker %s:%s", self.mqtt_host, self.mqtt_port, exc_info=True)
            raise

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        if self.client:
            self.logger.info("Disconnecting from MQTT broker...")
            await self.client.__aexit__(exc_type, exc_val, exc_tb)
            self.client = None
            self.logger.info("Disconnected from MQTT broker.")

    async def is_connected(self) -> bool:
        return self.client is not None

    def register_command_callback(self, callback: Callable[[str, str], Awaitable[None]]) -> None:
        """Registers the coroutine called with (command_name, payload) for incoming commands."""
        self.command_callback = callback

    async def command_listener(self) -> None:
        """Listens on the command topic and dispatches to the registered callback."""
        if not self.client:
            self.logger.error("MQTT client is not connected. Cannot start command listener.")
            return

        self.logger.info("Subscribing to %s", self.command_topic)
        try:
            await self.client.subscribe(self.command_topic)
            async for message in self.client.messages:
                topic_str = str(message.topic)
                if not paho_mqtt.topic_matches_sub(self.command_topic, topic_str):
                    continue
                await self._handle_command(topic_str, message.payload)
        except mqtt.MqttError:
            self.logger.warning("Command listener stopped due to MQTT error (e.g. disconnect).")
        except asyncio.CancelledError:
            self.logger.info("Command listener task cancelled.")
            raise

    async def _handle_command(self, topic: str, raw_payload: Any) -> None:
        if isinstance(raw_payload, (bytes, bytearray)):
            payload = raw_payload.decode("utf-8", errors="replace")
        else:
            payload = "" if raw_payload is None else str(raw_payload)
        self.logger.debug("Received MQTT message on %s: %s", topic, payload)

        if not self.command_callback:
            return
        # Topic structure: <topic>/commands/<command>
        parts = topic.split("/")
        cmd_index = parts.index("commands")
        if len(parts) <= cmd_index + 1 or not parts[cmd_index + 1]:
            self.logger.warning("Received command on generic command topic without specific command: %s", topic)
            return
        try:
            await self.command_callback(parts[cmd_index + 1], payload)
        except Exception:
            self.logger.exception("Error executing MQTT command %s", parts[cmd_index + 1])

    @staticmethod
    def message_topic(message: ProtocolMessage) -> str:
        """Sub topic for a sensor message, e.g. ``messages/TempHum`` or ``messages/WIND`` when not parsed."""
        if isinstance(message, NotParsed):
            return f"messages/{message.header.packet_type.name}"
        return f"messages/{type(message).__name__}"

    @staticmethod
    def message_to_json(message: Any) -> str:
        """Serializes a sensor message or RFXtrxInfo dataclass to JSON."""
        if not is_dataclass(message):
            raise TypeError(f"Cannot serialize {type(message).__name__}")
        message_dict = asdict(message)
        if isinstance(message, RFXtrxInfo):
            message_dict["enabled_protocols"] = message.enabled_protocols.names()
        message_dict["type"] = type(message).__name__
        return json.dumps(_to_jsonable(message_dict))

    async def publish_simple(self, subtopic: str, payload: str, retain: bool = False) -> None:
        """Publishes a plain string payload to a subtopic of the main topic."""
        if not self.client:
            self.logger.warning("Attempted to publish without an active MQTT client.")
            return
        topic = f"{self.mqtt_topic}/{subtopic}"
        try:
            await self.client.publish(topic, payload, retain=retain)
            self.logger.debug("Published simple message to %s: %s", topic, payload)
        except mqtt.MqttError:
            self.logger.error("Failed to publish simple message to %s", topic, exc_info=True)

    async def publish(self, message: ProtocolMessage) -> None:
        """Publishes a sensor message."""
        await self.publish_simple(self.message_topic(message), self.message_to_json(message))

    async def publish_status(self, info: RFXtrxInfo) -> None:
        await self.publish_simple("status", self.message_to_json(info), retain=True)
