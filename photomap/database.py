"""SQLite engine, schema creation and the request session dependency."""

import logging

from sqlalchemy import event
from sqlmodel import SQLModel, Session, create_engine

from photomap.config import settings

# Registers every table on SQLModel.metadata
import photomap.models  # noqa: F401

logger = logging.getLogger(__name__)

engine = create_engine(
    f"sqlite:///{settings.db_path}",
    echo=settings.debug,
    connect_args={"check_same_thread": False},
)


@event.listens_for(engine, "connect")
def _sqlite_pragmas(dbapi_connection, connection_record):
    # foreign_keys is per connection; WAL lets the viewport count read
    # alongside the page query on a second connection.
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA synchronous=NORMAL")
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def init_db() -> None:
    SQLModel.metadata.create_all(engine)
    logger.info("Database ready at %s", settings.db_path)


def get_session():
    """FastAPI dependency: one session per request."""
    with Session(engine) as session:
        yield session
