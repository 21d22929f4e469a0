"""Photomap Database Models."""

from photomap.models.user import User
from photomap.models.album import Album, AlbumMember
from photomap.models.photo import Photo

__all__ = [
    "User",
    "Album",
    "AlbumMember",
    "Photo",
]
