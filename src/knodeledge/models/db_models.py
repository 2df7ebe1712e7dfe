"""SQLAlchemy database models for the kNODEledge document store.

Every record lives in one table as a JSON document keyed by its collection
path and id, e.g. collection="projects/p1/chapters", id="c1". Nested
collections are plain path prefixes; nothing cascades at the SQL level.
"""
import datetime
from typing import Optional

from sqlalchemy import Column, DateTime, Index, String, Text, create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from knodeledge.config import config

# Create base class for SQLAlchemy models
Base = declarative_base()


class DBDocument(Base):
    """Database model for one document."""

    __tablename__ = "documents"
    collection = Column(String(1024), primary_key=True)
    id = Column(String(255), primary_key=True)
    data = Column(Text, nullable=False)
    created_at = Column(DateTime, nullable=False)
    updated_at = Column(DateTime, nullable=False)

    __table_args__ = (Index("ix_documents_collection", "collection"),)

    def __repr__(self) -> str:
        """Return string representation of document."""
        return f"<Document(collection='{self.collection}', id='{self.id}')>"


def init_db(db_url: Optional[str] = None) -> Engine:
    """Create an engine and the documents table.

    File databases get WAL journaling; in-memory databases share one
    connection so every session sees the same data.
    """
    url = db_url or config.get_db_url()

    if url == "sqlite://" or ":memory:" in url:
        engine = create_engine(
            url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    else:
        engine = create_engine(
            url,
            pool_size=5,
            max_overflow=10,
            pool_timeout=30,
            pool_pre_ping=True,
        )

        @event.listens_for(engine, "connect")
        def set_sqlite_pragma(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA journal_mode=WAL")
            cursor.execute("PRAGMA synchronous=NORMAL")
            cursor.close()

    Base.metadata.create_all(engine)
    return engine


def get_session_factory(engine: Engine) -> sessionmaker:
    """Create a session factory for the given engine."""
    return sessionmaker(bind=engine, expire_on_commit=False)


def naive_utc(value: datetime.datetime) -> datetime.datetime:
    """Strip tzinfo after converting to UTC, the form SQLite stores."""
    if value.tzinfo is not None:
        value = value.astimezone(datetime.timezone.utc).replace(tzinfo=None)
    return value
