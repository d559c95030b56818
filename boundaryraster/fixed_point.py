"""Fixed-point coordinate codec (1e-7 degree resolution).

Degrees are stored as ``round(degrees * 10_000_000)``.  Rounding is
half-away-from-zero so that the same input always produces the same bytes,
independent of platform rounding modes.  At this scale a full longitude
range (±1.8e9) still fits a signed 32 bit integer.
"""

import math

import numpy as np

from .constants import FIXED_POINT_SCALE, MAX_LATITUDE, MAX_LONGITUDE
from .exceptions import RangeError


def _round_half_away(value: float) -> int:
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


def encode(degrees: float, limit: float = MAX_LONGITUDE) -> int:
    """Encode a degree value as a fixed-point integer.

    The domain is checked on the encoded value, so float noise below half a
    unit past the limit (e.g. from clipping at 180°) is accepted.  Raises
    RangeError if the value is not finite or encodes beyond ``±limit``.
    """
    if not math.isfinite(degrees):
        raise RangeError(f"{degrees!r} is not a finite coordinate")
    fixed = _round_half_away(degrees * FIXED_POINT_SCALE)
    if abs(fixed) > limit * FIXED_POINT_SCALE:
        raise RangeError(f"{degrees!r} is outside [-{limit}, {limit}]")
    return fixed


def decode(value: int) -> float:
    """Decode a fixed-point integer back to degrees."""
    return value / FIXED_POINT_SCALE


def encode_lon(lon: float) -> int:
    return encode(lon, MAX_LONGITUDE)


def encode_lat(lat: float) -> int:
    return encode(lat, MAX_LATITUDE)


def encode_point(lon: float, lat: float) -> tuple:
    """Encode a (lon, lat) pair."""
    return encode_lon(lon), encode_lat(lat)


def encode_ring(coords) -> list[tuple[int, int]]:
    """Encode the coordinates of a closed ring, leaving out the closing point.

    *coords* is anything numpy can turn into an ``(n, 2)`` array, typically
    ``ring.coords`` of a shapely LinearRing.  Rings are stored open, so the
    last point is dropped when it repeats the first.
    """
    arr = np.asarray(coords, dtype=np.float64)
    if arr.size == 0:
        return []
    arr = arr[:, :2]
    if len(arr) > 1 and np.array_equal(arr[0], arr[-1]):
        arr = arr[:-1]

    if not np.all(np.isfinite(arr)):
        raise RangeError("ring contains non-finite coordinates")

    scaled = arr * FIXED_POINT_SCALE
    rounded = np.sign(scaled) * np.floor(np.abs(scaled) + 0.5)
    lon, lat = rounded[:, 0], rounded[:, 1]
    if (np.abs(lon).max() > MAX_LONGITUDE * FIXED_POINT_SCALE
            or np.abs(lat).max() > MAX_LATITUDE * FIXED_POINT_SCALE):
        raise RangeError(
            f"ring coordinates outside the encodable domain: "
            f"lon [{arr[:, 0].min()}, {arr[:, 0].max()}], "
            f"lat [{arr[:, 1].min()}, {arr[:, 1].max()}]")
    fixed = rounded.astype(np.int64)
    return [(int(x), int(y)) for x, y in fixed]
