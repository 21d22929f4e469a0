"""Album and membership models."""

import secrets
from datetime import datetime, timezone

from sqlalchemy import CheckConstraint, Index
from sqlmodel import Field, SQLModel

from photomap.utils.sql import UTCNaiveDateTime

ALBUM_ROLES = ("viewer", "editor", "owner")


class Album(SQLModel, table=True):
    __tablename__ = "albums"

    id: str = Field(default_factory=lambda: f"alb_{secrets.token_hex(4)}", primary_key=True)
    owner_id: str = Field(foreign_key="users.id", index=True)
    title: str
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc), sa_type=UTCNaiveDateTime
    )


class AlbumMember(SQLModel, table=True):
    """Access grant: any row gives the user read access to the album's photos.

    The composite primary key keeps one grant per (user, album) pair.
    """

    __tablename__ = "album_members"
    __table_args__ = (
        Index("idx_album_members_user_album", "user_id", "album_id"),
        CheckConstraint(
            "role IN (" + ", ".join(f"'{r}'" for r in ALBUM_ROLES) + ")",
            name="ck_album_members_role",
        ),
    )

    user_id: str = Field(foreign_key="users.id", primary_key=True)
    album_id: str = Field(foreign_key="albums.id", primary_key=True, index=True)
    role: str = Field(default="viewer")
    joined_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc), sa_type=UTCNaiveDateTime
    )
