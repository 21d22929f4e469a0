"""Photo model."""

import secrets
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import Index
from sqlmodel import Field, SQLModel

from photomap.utils.sql import UTCNaiveDateTime


class Photo(SQLModel, table=True):
    __tablename__ = "photos"
    __table_args__ = (
        # Access scope first, then space, then time
        Index("idx_photos_album_geo_time", "album_id", "latitude", "longitude", "taken_at"),
    )

    id: str = Field(default_factory=lambda: f"pho_{secrets.token_hex(4)}", primary_key=True)
    album_id: str = Field(foreign_key="albums.id", index=True)
    uploader_id: Optional[str] = Field(default=None, foreign_key="users.id")
    original_filename: str
    mime_type: str = "image/jpeg"
    width: Optional[int] = None
    height: Optional[int] = None
    taken_at: Optional[datetime] = Field(default=None, index=True, sa_type=UTCNaiveDateTime)
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    thumb_key: Optional[str] = None  # opaque storage key
    display_key: Optional[str] = None  # opaque storage key
    status: str = Field(default="active")  # 'active' | 'deleted'
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc), sa_type=UTCNaiveDateTime
    )
