"""Decoders for sensor-plane packets.

Every decoder takes the packet header and the body that follows it and
returns a frozen dataclass. Bodies may be longer than required; trailing
bytes are ignored.
"""

from __future__ import annotations

from dataclasses import dataclass

from .helpers import battery_and_rssi, require_length, sensor_id, signed_tenths
from .packet import PacketHeader


@dataclass(frozen=True, slots=True)
class TempHum:
    """Temperature and humidity sensor reading."""

    id: int
    temp: float
    humidity: int
    humidity_status: int
    battery_level: int
    rssi: int


@dataclass(frozen=True, slots=True)
class Temp:
    """Temperature-only sensor reading."""

    id: int
    temp: float
    battery_level: int
    rssi: int


@dataclass(frozen=True, slots=True)
class Hum:
    """Humidity-only sensor reading."""

    id: int
    humidity: int
    humidity_status: int
    battery_level: int
    rssi: int


def decode_temp_hum(header: PacketHeader, body: bytes) -> TempHum:
    require_length(body, 7)
    battery_level, rssi = battery_and_rssi(body[6])
    return TempHum(
        id=sensor_id(body[0], body[1]),
        temp=signed_tenths(body[2], body[3]),
        humidity=body[4],
        humidity_status=body[5],
        battery_level=battery_level,
        rssi=rssi,
    )


def decode_temp(header: PacketHeader, body: bytes) -> Temp:
    require_length(body, 5)
    battery_level, rssi = battery_and_rssi(body[4])
    return Temp(
        id=sensor_id(body[0], body[1]),
        temp=signed_tenths(body[2], body[3]),
        battery_level=battery_level,
        rssi=rssi,
    )


def decode_hum(header: PacketHeader, body: bytes) -> Hum:
    require_length(body, 5)
    battery_level, rssi = battery_and_rssi(body[4])
    return Hum(
        id=sensor_id(body[0], body[1]),
        humidity=body[2],
        humidity_status=body[3],
        battery_level=battery_level,
        rssi=rssi,
    )
