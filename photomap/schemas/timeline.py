"""Timeline response schemas."""

from typing import Optional

from photomap.schemas.map import CamelModel


class TimelinePhotoResponse(CamelModel):
    id: str
    album_id: str
    album_title: str
    thumb_key: Optional[str]
    display_key: Optional[str]
    width: Optional[int]
    height: Optional[int]
    date_taken: str


class TimelineResponse(CamelModel):
    photos: list[TimelinePhotoResponse]
    next_cursor: Optional[str]
    has_more: bool
    month_counts: Optional[dict[str, int]] = None
