"""Shared fixtures: isolated data dir, seeded users/albums/photos, auth headers."""

import itertools
import os
import tempfile

# Setup environment for testing (before photomap.config is imported)
os.environ["PHOTOMAP_DATA_DIR"] = tempfile.mkdtemp()
os.environ["PHOTOMAP_DB_PATH"] = os.path.join(os.environ["PHOTOMAP_DATA_DIR"], "test.db")
os.environ["PHOTOMAP_JWT_SECRET"] = "test-secret"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import delete
from sqlmodel import Session

from photomap.database import engine, init_db
from photomap.main import app
from photomap.models import Album, AlbumMember, Photo, User
from photomap.utils.security import create_access_token

_seq = itertools.count(1)


@pytest.fixture(scope="session", autouse=True)
def _schema():
    init_db()


@pytest.fixture
def session():
    with Session(engine) as session:
        yield session
    with Session(engine) as cleanup:
        for model in (Photo, AlbumMember, Album, User):
            cleanup.connection().execute(delete(model))
        cleanup.commit()


@pytest.fixture
def client(session):
    with TestClient(app) as client:
        yield client


@pytest.fixture
def make_user(session):
    def _make(name: str = "tester") -> User:
        n = next(_seq)
        user = User(email=f"{name}{n}@example.com", name=name)
        session.add(user)
        session.commit()
        session.refresh(user)
        return user
    return _make


@pytest.fixture
def make_album(session):
    def _make(owner: User, title: str = "Trip", members: list[tuple[User, str]] | None = None) -> Album:
        album = Album(owner_id=owner.id, title=title)
        session.add(album)
        session.add(AlbumMember(user_id=owner.id, album_id=album.id, role="owner"))
        for user, role in members or []:
            session.add(AlbumMember(user_id=user.id, album_id=album.id, role=role))
        session.commit()
        session.refresh(album)
        return album
    return _make


@pytest.fixture
def make_photo(session):
    def _make(album: Album, lat: float | None = 13.75, lng: float | None = 100.5, commit: bool = True, **kwargs) -> Photo:
        n = next(_seq)
        kwargs.setdefault("original_filename", f"IMG_{n:04d}.jpg")
        kwargs.setdefault("thumb_key", f"thumbs/{n}.webp")
        photo = Photo(album_id=album.id, latitude=lat, longitude=lng, **kwargs)
        session.add(photo)
        if commit:
            session.commit()
            session.refresh(photo)
        return photo
    return _make


@pytest.fixture
def auth_headers():
    def _headers(user: User) -> dict:
        return {"Authorization": f"Bearer {create_access_token(user.id)}"}
    return _headers
