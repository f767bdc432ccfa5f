from collections.abc import Generator
from contextlib import contextmanager
from datetime import UTC, datetime

from sqlalchemy import DateTime, Engine, Integer, Text, create_engine
from sqlalchemy.orm import DeclarativeBase, Session, mapped_column

from weddingapi.config import get_config

_database_engine = None


class UnexpectedDatabaseError(Exception):
    pass


def get_engine() -> Engine:
    global _database_engine  # noqa: PLW0603
    if not _database_engine:
        config = get_config()
        _database_engine = create_engine(config.database_url, pool_pre_ping=True)
    return _database_engine


@contextmanager
def get_session() -> Generator[Session, None, None]:
    with Session(get_engine()) as session:
        try:
            yield session
            session.commit()
        except Exception as error:
            session.rollback()
            raise UnexpectedDatabaseError from error


def migrate_database() -> None:
    """Create any tables that don't exist yet, existing tables are left alone."""
    Base.metadata.create_all(get_engine())


class Base(DeclarativeBase):
    pass


class WeddingRegistration(Base):
    __tablename__ = "wedding_registration"

    id = mapped_column(Integer(), primary_key=True, autoincrement=True)
    name = mapped_column(Text(), nullable=True)
    amount = mapped_column(Integer(), nullable=False)
    food = mapped_column(Text(), nullable=False, default="")
    track_suggestion = mapped_column(Text(), nullable=True)
    spotify_id = mapped_column(Text(), nullable=True)
    other = mapped_column(Text(), nullable=True)
    created = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(tz=UTC)
    )

    def __repr__(self) -> str:
        return (
            f"WeddingRegistration("
            f"{self.id=}, "
            f"{self.created=}, "
            f"{self.name=}, "
            f"{self.amount=}, "
            f"{self.food=}, "
            f"{self.spotify_id=}"
            f")"
        )
