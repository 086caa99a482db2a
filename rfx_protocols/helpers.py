"""Byte-level helpers shared by the sensor decoders."""

from __future__ import annotations

from typing import Tuple

from .exceptions import NotEnoughDataError


def require_length(body: bytes, expected: int) -> None:
    """Raise NotEnoughDataError when ``body`` holds fewer than ``expected`` bytes."""
    if len(body) < expected:
        raise NotEnoughDataError(received=len(body), expected=expected)


def sensor_id(high: int, low: int) -> int:
    """Big-endian 16 bit sensor id."""
    return (high << 8) | low


def signed_tenths(high: int, low: int) -> float:
    """Decode a sign-magnitude value in tenths.

    Bit 7 of ``high`` is the sign, the remaining 15 bits the magnitude.
    ``0x00 0xFA`` is 25.0, ``0x80 0x0A`` is -1.0.
    """
    magnitude = ((high & 0x7F) << 8) | low
    if high & 0x80:
        magnitude = -magnitude
    return magnitude / 10.0


def battery_and_rssi(value: int) -> Tuple[int, int]:
    """Split the trailing status byte into (battery_level, rssi)."""
    return value >> 4, value & 0x0F
