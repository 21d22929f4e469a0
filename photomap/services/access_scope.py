"""Access scope and eligibility predicates shared by the map and timeline queries.

Read access is resolved by joining photos through ``album_members`` rather
than loading the user's album ids first, so the query always sees the
current membership and never pulls id lists into memory.
"""

import math
from dataclasses import dataclass
from datetime import datetime, timezone

from sqlalchemy.sql.elements import ColumnElement
from sqlmodel import col, select

from photomap.models.album import AlbumMember
from photomap.models.photo import Photo


@dataclass(frozen=True)
class Bounds:
    """Map viewport bounding box in degrees."""

    min_lat: float
    max_lat: float
    min_lng: float
    max_lng: float

    def __post_init__(self):
        values = (self.min_lat, self.max_lat, self.min_lng, self.max_lng)
        if not all(math.isfinite(v) for v in values):
            raise ValueError("bounds must be finite numbers")
        if self.min_lat > self.max_lat or self.min_lng > self.max_lng:
            raise ValueError("bounds minimum exceeds maximum")
        if self.min_lat < -90 or self.max_lat > 90:
            raise ValueError("latitude outside [-90, 90]")


def scoped_select(user_id: str, *columns):
    """SELECT ``columns`` from photos the user can read (any role)."""
    return (
        select(*columns)
        .select_from(Photo)
        .join(AlbumMember, col(AlbumMember.album_id) == col(Photo.album_id))
        .where(col(AlbumMember.user_id) == user_id)
    )


def active_filters() -> list[ColumnElement[bool]]:
    return [col(Photo.status) == "active"]


def geotagged_filters() -> list[ColumnElement[bool]]:
    """Photos with both coordinates that have not been soft-deleted."""
    return [
        col(Photo.latitude).is_not(None),
        col(Photo.longitude).is_not(None),
        *active_filters(),
    ]


def bounds_filters(bounds: Bounds) -> list[ColumnElement[bool]]:
    return [
        col(Photo.latitude).between(bounds.min_lat, bounds.max_lat),
        col(Photo.longitude).between(bounds.min_lng, bounds.max_lng),
    ]


def time_filters(
    start_date: datetime | None = None,
    end_date: datetime | None = None,
) -> list[ColumnElement[bool]]:
    """Inclusive capture-date window; either side may be open."""
    filters = []
    if start_date is not None:
        filters.append(col(Photo.taken_at) >= to_storage_time(start_date))
    if end_date is not None:
        filters.append(col(Photo.taken_at) <= to_storage_time(end_date))
    return filters


def to_storage_time(value: datetime) -> datetime:
    """Stored timestamps are naive UTC; convert aware inputs to match."""
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def isoformat(value: datetime | None) -> str | None:
    """ISO-8601 string in UTC, or None."""
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.isoformat()
