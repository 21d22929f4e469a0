"""Timeline service - reverse chronological listing of every photo the user can read."""

from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import and_, func, or_
from sqlmodel import Session, col

from photomap.models.album import Album
from photomap.models.photo import Photo
from photomap.services.access_scope import active_filters, isoformat, scoped_select, to_storage_time
from photomap.utils.sql import year_month


@dataclass
class TimelinePhoto:
    id: str
    album_id: str
    album_title: str
    thumb_key: str | None
    display_key: str | None
    width: int | None
    height: int | None
    date: datetime  # taken_at, or created_at for undated photos


@dataclass
class TimelinePage:
    photos: list[TimelinePhoto]
    next_cursor: str | None
    has_more: bool
    month_counts: dict[str, int] | None = None


def encode_cursor(date: datetime, photo_id: str) -> str:
    return f"{isoformat(date)}_{photo_id}"


def decode_cursor(cursor: str) -> tuple[datetime, str]:
    """Split ``"<iso timestamp>_<photo id>"``. Raises ValueError if malformed."""
    stamp, sep, photo_id = cursor.partition("_")
    if not sep or not photo_id:
        raise ValueError(f"malformed cursor: {cursor!r}")
    return to_storage_time(datetime.fromisoformat(stamp)), photo_id


def get_month_counts(session: Session, user_id: str) -> dict[str, int]:
    """Photo count per 'YYYY-MM' of the effective date."""
    month = year_month(func.coalesce(Photo.taken_at, Photo.created_at)).label("month")
    query = (
        scoped_select(user_id, month, func.count())
        .where(*active_filters())
        .group_by(month)
    )
    return {m: n for m, n in session.exec(query).all() if m}


def get_timeline(
    session: Session,
    user_id: str,
    cursor: str | None = None,
    limit: int = 50,
) -> TimelinePage:
    """Fetch photos in reverse chronological order with cursor pagination.

    Undated photos sort by upload time. Month counts are only computed for
    the first page.
    """
    effective = func.coalesce(Photo.taken_at, Photo.created_at)
    predicates = list(active_filters())
    if cursor:
        cursor_date, cursor_id = decode_cursor(cursor)
        predicates.append(
            or_(
                effective < cursor_date,
                and_(effective == cursor_date, col(Photo.id) < cursor_id),
            )
        )

    query = (
        scoped_select(user_id, Photo, Album.title)
        .join(Album, col(Album.id) == col(Photo.album_id))
        .where(*predicates)
        .order_by(effective.desc(), col(Photo.id).desc())
        .limit(limit + 1)  # Fetch one extra to determine has_more
    )
    rows = list(session.exec(query).all())

    has_more = len(rows) > limit
    rows = rows[:limit]

    photos = [
        TimelinePhoto(
            id=p.id,
            album_id=p.album_id,
            album_title=title,
            thumb_key=p.thumb_key,
            display_key=p.display_key,
            width=p.width,
            height=p.height,
            date=p.taken_at or p.created_at,
        )
        for p, title in rows
    ]

    next_cursor = None
    if has_more and photos:
        last = photos[-1]
        next_cursor = encode_cursor(last.date, last.id)

    return TimelinePage(
        photos=photos,
        next_cursor=next_cursor,
        has_more=has_more,
        month_counts=None if cursor else get_month_counts(session, user_id),
    )
