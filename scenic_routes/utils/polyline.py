"""Encoded polyline helpers (Google polyline algorithm, precision 1e5)."""

PRECISION = 1e5


def _encode_value(value: int) -> str:
    value = ~(value << 1) if value < 0 else value << 1
    chunks = []
    while value >= 0x20:
        chunks.append(chr((0x20 | (value & 0x1F)) + 63))
        value >>= 5
    chunks.append(chr(value + 63))
    return "".join(chunks)


def _read_value(encoded: str, index: int) -> tuple[int, int]:
    """Read one signed value starting at ``index``; returns (value, next index)."""
    result = 0
    shift = 0
    while True:
        chunk = ord(encoded[index]) - 63
        index += 1
        result |= (chunk & 0x1F) << shift
        shift += 5
        if chunk < 0x20:
            break
    value = ~(result >> 1) if result & 1 else result >> 1
    return value, index


def decode_polyline(encoded: str) -> list[tuple[float, float]]:
    """Decode a polyline string into (lat, lng) pairs."""
    points = []
    index = 0
    lat = lng = 0
    while index < len(encoded):
        d_lat, index = _read_value(encoded, index)
        d_lng, index = _read_value(encoded, index)
        lat += d_lat
        lng += d_lng
        points.append((lat / PRECISION, lng / PRECISION))
    return points


def encode_polyline(points: list[tuple[float, float]]) -> str:
    """Encode (lat, lng) pairs into a polyline string."""
    parts = []
    previous = (0, 0)
    for lat, lng in points:
        current = (round(lat * PRECISION), round(lng * PRECISION))
        parts.append(_encode_value(current[0] - previous[0]))
        parts.append(_encode_value(current[1] - previous[1]))
        previous = current
    return "".join(parts)


def combine_polylines(polylines: list[str]) -> str:
    """Merge consecutive polylines whose ends touch into a single polyline."""
    segments = [p for p in polylines if p]
    if len(segments) <= 1:
        return segments[0] if segments else ""

    merged: list[tuple[float, float]] = []
    for segment in segments:
        points = decode_polyline(segment)
        # Later segments start where the previous one ended
        merged.extend(points[1:] if merged else points)
    return encode_polyline(merged)
