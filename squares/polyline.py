"""Route helpers: encoded polylines and stored start/end locations."""

from __future__ import annotations

import json


def _read_value(encoded: str, index: int) -> tuple[int, int]:
    """Read one zig-zag varint starting at *index*; return (value, next_index)."""
    shift = 0
    result = 0
    while True:
        byte = ord(encoded[index]) - 63
        index += 1
        result |= (byte & 0x1F) << shift
        shift += 5
        if byte < 0x20:
            break
    value = ~(result >> 1) if result & 1 else result >> 1
    return value, index


def decode_polyline(encoded: str | None, precision: int = 5) -> list[tuple[float, float]]:
    """Decode an encoded polyline into (lat, lng) pairs.

    A truncated string yields the points decoded before the break.
    """
    if not encoded:
        return []

    factor = 10**precision
    points: list[tuple[float, float]] = []
    index = 0
    lat = lng = 0
    while index < len(encoded):
        try:
            d_lat, index = _read_value(encoded, index)
            d_lng, index = _read_value(encoded, index)
        except IndexError:
            break
        lat += d_lat
        lng += d_lng
        points.append((lat / factor, lng / factor))
    return points


def parse_lnglat(text: str | None) -> tuple[float, float] | None:
    """Parse a stored start/end location into (lat, lng).

    Accepts the attribute-value form ``[{"N": "37.7"}, {"N": "-122.4"}]`` and a
    plain ``[37.7, -122.4]`` list. Returns ``None`` when neither fits.
    """
    if not text:
        return None
    try:
        coordinates = json.loads(text)
    except ValueError:
        return None
    if not isinstance(coordinates, list) or len(coordinates) < 2:
        return None

    values = []
    for item in coordinates[:2]:
        if isinstance(item, dict):
            item = item.get("N")
        try:
            values.append(float(item))
        except (TypeError, ValueError):
            return None
    return values[0], values[1]


def route_bounds(points: list[tuple[float, float]]) -> tuple[float, float, float, float] | None:
    """Return (min_lat, min_lng, max_lat, max_lng), or ``None`` for no points."""
    if not points:
        return None
    lats = [p[0] for p in points]
    lngs = [p[1] for p in points]
    return min(lats), min(lngs), max(lats), max(lngs)
