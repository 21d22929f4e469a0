"""Zoom-dependent grid precision and result limits for map aggregation."""

import math

# (exclusive upper zoom bound, grid cells per degree)
PRECISION_STEPS: list[tuple[float, int]] = [
    (5, 1),        # ~111 km
    (8, 10),       # ~11.1 km
    (11, 100),     # ~1.1 km
    (14, 1_000),   # ~110 m
]
MAX_PRECISION = 100_000  # ~1.1 m

MIN_LIMIT = 1_000
MAX_LIMIT = 15_000


def precision_factor(zoom: float) -> int:
    """Grid cells per degree for a zoom level. Non-decreasing in zoom."""
    for upper, factor in PRECISION_STEPS:
        if zoom < upper:
            return factor
    return MAX_PRECISION


def adaptive_limit(zoom: float) -> int:
    """Maximum number of buckets returned for a zoom level, within [MIN_LIMIT, MAX_LIMIT]."""
    if zoom < 5:
        base = 500
    elif zoom < 10:
        base = 2_000
    else:
        base = 5_000
    return max(MIN_LIMIT, min(base, MAX_LIMIT))


def grid_cell(lat: float, lng: float, factor: int) -> tuple[int, int]:
    """Integer grid cell containing a coordinate.

    Python counterpart of the SQL ``grid_floor`` used by the aggregation
    query; both floor toward negative infinity.
    """
    return math.floor(lat * factor), math.floor(lng * factor)


def snap(lat: float, lng: float, factor: int) -> tuple[float, float]:
    """Bucket anchor for a coordinate, as reported for map points.

    e.g. (13.756, 100.502) -> (13.0, 100.0) at factor 1.
    """
    cell_lat, cell_lng = grid_cell(lat, lng, factor)
    return cell_lat / factor, cell_lng / factor


def bucket_key(factor: int, cell_lat: int, cell_lng: int) -> str:
    """Stable identifier for a bucket; unchanged as long as the grid is."""
    return f"{factor}:{cell_lat}:{cell_lng}"
