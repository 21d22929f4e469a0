"""Map service - zoom-adaptive point aggregation and viewport listings."""

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime

from sqlalchemy import and_, func
from sqlmodel import Session, col, select

from photomap.models.album import Album
from photomap.models.photo import Photo
from photomap.services.access_scope import (
    Bounds,
    bounds_filters,
    geotagged_filters,
    scoped_select,
    time_filters,
)
from photomap.services.precision import adaptive_limit, bucket_key, precision_factor
from photomap.utils.sql import grid_floor

logger = logging.getLogger(__name__)

THUMBS_PER_POINT = 3


@dataclass
class MapPoint:
    id: str
    lat: float
    lng: float
    count: int
    most_recent_date: datetime | None
    key: str
    thumb_keys: list[str] = field(default_factory=list)


@dataclass
class ViewportPhoto:
    id: str
    lat: float
    lng: float
    thumb_key: str | None
    display_key: str | None
    taken_at: datetime | None
    filename: str
    width: int | None
    height: int | None
    album_id: str
    album_title: str


@dataclass
class ViewportPage:
    photos: list[ViewportPhoto]
    total: int


@dataclass
class DateRange:
    min: datetime | None
    max: datetime | None


def get_points(
    session: Session,
    user_id: str,
    bounds: Bounds,
    zoom: float,
    start_date: datetime | None = None,
    end_date: datetime | None = None,
) -> list[MapPoint]:
    """Group the user's geotagged photos in the viewport into grid buckets.

    Buckets come back largest first and are capped at ``adaptive_limit(zoom)``.
    The order of buckets with equal counts is whatever the database yields.
    Each bucket carries up to three thumbnail keys, newest capture first with
    undated photos last.
    """
    factor = precision_factor(zoom)
    limit = adaptive_limit(zoom)

    predicates = [
        *geotagged_filters(),
        *bounds_filters(bounds),
        *time_filters(start_date, end_date),
    ]

    # One row per eligible photo with its grid cell
    cells = (
        scoped_select(
            user_id,
            col(Photo.id).label("id"),
            col(Photo.taken_at).label("taken_at"),
            col(Photo.thumb_key).label("thumb_key"),
            grid_floor(col(Photo.latitude) * factor).label("cell_lat"),
            grid_floor(col(Photo.longitude) * factor).label("cell_lng"),
        )
        .where(and_(*predicates))
        .cte("cells")
    )

    count = func.count().label("c")
    buckets = (
        select(
            cells.c.cell_lat,
            cells.c.cell_lng,
            count,
            func.min(cells.c.id).label("id"),
            func.max(cells.c.taken_at).label("d"),
        )
        .select_from(cells)
        .group_by(cells.c.cell_lat, cells.c.cell_lng)
        .order_by(count.desc())
        .limit(limit)
        .cte("buckets")
    )

    rank = func.row_number().over(
        partition_by=(cells.c.cell_lat, cells.c.cell_lng),
        order_by=(cells.c.taken_at.desc().nulls_last(), cells.c.id),
    ).label("rn")
    ranked = (
        select(cells.c.cell_lat, cells.c.cell_lng, cells.c.thumb_key, rank)
        .select_from(cells)
        .where(cells.c.thumb_key.is_not(None))
        .cte("ranked")
    )

    query = (
        select(
            buckets.c.cell_lat,
            buckets.c.cell_lng,
            buckets.c.c,
            buckets.c.id,
            buckets.c.d,
            ranked.c.thumb_key,
        )
        .select_from(buckets)
        .outerjoin(
            ranked,
            and_(
                ranked.c.cell_lat == buckets.c.cell_lat,
                ranked.c.cell_lng == buckets.c.cell_lng,
                ranked.c.rn <= THUMBS_PER_POINT,
            ),
        )
        .order_by(buckets.c.c.desc(), ranked.c.rn)
    )

    started = time.perf_counter()
    rows = session.exec(query).all()
    logger.debug(
        "map points user=%s zoom=%s factor=%d rows=%d in %.1fms",
        user_id, zoom, factor, len(rows), (time.perf_counter() - started) * 1000,
    )

    points: dict[tuple[int, int], MapPoint] = {}
    for cell_lat, cell_lng, c, rep_id, newest, thumb_key in rows:
        point = points.get((cell_lat, cell_lng))
        if point is None:
            point = MapPoint(
                id=rep_id,
                lat=cell_lat / factor,
                lng=cell_lng / factor,
                count=c,
                most_recent_date=newest,
                key=bucket_key(factor, cell_lat, cell_lng),
            )
            points[(cell_lat, cell_lng)] = point
        if thumb_key is not None:
            point.thumb_keys.append(thumb_key)

    return list(points.values())


def _viewport_filters(bounds: Bounds) -> list:
    return [*geotagged_filters(), *bounds_filters(bounds)]


def _fetch_viewport_rows(
    session: Session,
    user_id: str,
    bounds: Bounds,
    offset: int,
    limit: int,
) -> list[ViewportPhoto]:
    query = (
        scoped_select(
            user_id,
            Photo.id,
            Photo.latitude,
            Photo.longitude,
            Photo.thumb_key,
            Photo.display_key,
            Photo.taken_at,
            Photo.original_filename,
            Photo.width,
            Photo.height,
            Photo.album_id,
            Album.title,
        )
        .join(Album, col(Album.id) == col(Photo.album_id))
        .where(*_viewport_filters(bounds))
        .order_by(col(Photo.taken_at).desc().nulls_last(), col(Photo.id))
        .offset(offset)
        .limit(limit)
    )
    return [
        ViewportPhoto(
            id=row[0],
            lat=row[1],
            lng=row[2],
            thumb_key=row[3] or row[4],
            display_key=row[4] or row[3],
            taken_at=row[5],
            filename=row[6],
            width=row[7],
            height=row[8],
            album_id=row[9],
            album_title=row[10],
        )
        for row in session.exec(query).all()
    ]


def _count_viewport(session: Session, user_id: str, bounds: Bounds) -> int:
    query = scoped_select(user_id, func.count()).where(*_viewport_filters(bounds))
    return session.exec(query).one()


def get_photos_in_viewport(
    session: Session,
    user_id: str,
    bounds: Bounds,
    offset: int = 0,
    limit: int = 20,
) -> ViewportPage:
    """Individual photos in the viewport, newest first, plus the total match count.

    The count runs on its own session in parallel with the page query, so the
    two reflect the data at slightly different moments.
    """
    if offset < 0:
        raise ValueError("offset must be >= 0")
    if limit < 1:
        raise ValueError("limit must be >= 1")

    def count_in_own_session() -> int:
        with Session(session.get_bind()) as count_session:
            return _count_viewport(count_session, user_id, bounds)

    with ThreadPoolExecutor(max_workers=1) as pool:
        total_future = pool.submit(count_in_own_session)
        photos = _fetch_viewport_rows(session, user_id, bounds, offset, limit)
        total = total_future.result()

    return ViewportPage(photos=photos, total=total)


def get_date_range(session: Session, user_id: str) -> DateRange:
    """Earliest and latest capture date of the user's geotagged photos.

    Both ends are None when no eligible photo has a capture date.
    """
    query = scoped_select(
        user_id,
        func.min(Photo.taken_at),
        func.max(Photo.taken_at),
    ).where(*geotagged_filters(), col(Photo.taken_at).is_not(None))
    earliest, latest = session.exec(query).one()
    return DateRange(min=earliest, max=latest)
