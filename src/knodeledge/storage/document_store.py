"""Document store backed by SQLAlchemy.

A small Firestore-like API over the documents table: whole-document reads
and writes keyed by (collection path, id), unordered listing, write batches
that commit atomically, and a SERVER_TIMESTAMP sentinel replaced with the
commit time. Missing documents raise DocumentNotFoundError; every other
database failure is wrapped in StorageError so callers can tell them apart.
"""
import datetime
import json
import logging
import uuid
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Tuple

from sqlalchemy import select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from knodeledge.exceptions import DocumentNotFoundError, ErrorCode, StorageError
from knodeledge.models.db_models import DBDocument, get_session_factory, init_db, naive_utc
from knodeledge.models.schema import ensure_timezone_aware, utc_now

logger = logging.getLogger(__name__)


class _ServerTimestamp:
    """Sentinel replaced with the commit time when a write is applied."""

    def __repr__(self) -> str:
        return "SERVER_TIMESTAMP"


SERVER_TIMESTAMP = _ServerTimestamp()

_TIMESTAMP_KEY = "$timestamp"


def _encode(value: Any) -> Any:
    if isinstance(value, datetime.datetime):
        return {_TIMESTAMP_KEY: ensure_timezone_aware(value).isoformat()}
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def _decode(obj: Dict[str, Any]) -> Any:
    if len(obj) == 1 and _TIMESTAMP_KEY in obj:
        return datetime.datetime.fromisoformat(obj[_TIMESTAMP_KEY])
    return obj


def _resolve_timestamps(value: Any, now: datetime.datetime) -> Any:
    if value is SERVER_TIMESTAMP:
        return now
    if isinstance(value, dict):
        return {k: _resolve_timestamps(v, now) for k, v in value.items()}
    if isinstance(value, list):
        return [_resolve_timestamps(v, now) for v in value]
    return value


def join_path(*segments: str) -> str:
    """Join collection path segments: join_path("projects", pid, "chapters")."""
    return "/".join(segments)


@dataclass
class Document:
    """A snapshot of one stored document."""

    collection: str
    id: str
    data: Dict[str, Any] = field(default_factory=dict)

    def get(self, key: str, default: Any = None) -> Any:
        return self.data.get(key, default)


@dataclass
class _Write:
    kind: str
    collection: str
    id: str
    data: Optional[Dict[str, Any]] = None


class WriteBatch:
    """Writes collected here are applied in one transaction on commit."""

    def __init__(self) -> None:
        self._writes: List[_Write] = []

    def __len__(self) -> int:
        return len(self._writes)

    def create(self, collection: str, id: str, data: Dict[str, Any]) -> "WriteBatch":
        """Create a document; the commit fails if it already exists."""
        self._writes.append(_Write("create", collection, id, dict(data)))
        return self

    def set(self, collection: str, id: str, data: Dict[str, Any]) -> "WriteBatch":
        """Create or overwrite a document."""
        self._writes.append(_Write("set", collection, id, dict(data)))
        return self

    def update(self, collection: str, id: str, fields: Dict[str, Any]) -> "WriteBatch":
        """Overwrite top-level fields; the commit fails if the document is absent."""
        self._writes.append(_Write("update", collection, id, dict(fields)))
        return self

    def delete(self, collection: str, id: str) -> "WriteBatch":
        """Delete a document; deleting an absent document is a no-op."""
        self._writes.append(_Write("delete", collection, id))
        return self

    @property
    def writes(self) -> Tuple[_Write, ...]:
        return tuple(self._writes)


class DocumentStore:
    """Document store over a SQLAlchemy engine.

    The store is created once at startup and handed to every repository.
    """

    def __init__(self, engine: Optional[Engine] = None):
        """Initialize the store.

        Args:
            engine: SQLAlchemy engine. If None, one is created from config.
        """
        self.engine = engine or init_db()
        self.session_factory = get_session_factory(self.engine)
        logger.info("DocumentStore initialized")

    def close(self) -> None:
        """Release pooled connections."""
        self.engine.dispose()

    @staticmethod
    def new_id() -> str:
        """Generate an id for a document that is about to be created."""
        return uuid.uuid4().hex[:20]

    # ========== Reads ==========

    def get(self, collection: str, id: str) -> Document:
        """Read one document.

        Raises:
            DocumentNotFoundError: If the document does not exist.
            StorageError: If the database fails.
        """
        with self._session("get", collection) as session:
            row = session.get(DBDocument, (collection, id))
            if row is None:
                raise DocumentNotFoundError(collection, id)
            return self._row_to_document(row)

    def get_all(self, collection: str, ids: List[str]) -> List[Document]:
        """Read several documents of one collection, in the order of ids."""
        if not ids:
            return []
        with self._session("get_all", collection) as session:
            rows = session.execute(
                select(DBDocument).where(
                    DBDocument.collection == collection, DBDocument.id.in_(ids)
                )
            ).scalars().all()
            by_id = {row.id: row for row in rows}
            missing = [i for i in ids if i not in by_id]
            if missing:
                raise DocumentNotFoundError(collection, missing[0])
            return [self._row_to_document(by_id[i]) for i in ids]

    def list(self, collection: str, limit: Optional[int] = None) -> List[Document]:
        """List the documents directly inside a collection, in no particular order."""
        with self._session("list", collection) as session:
            query = select(DBDocument).where(DBDocument.collection == collection)
            if limit is not None:
                query = query.limit(limit)
            rows = session.execute(query).scalars().all()
            return [self._row_to_document(row) for row in rows]

    def list_descendants(self, collection: str, id: str) -> List[Document]:
        """List every document in the sub-collections of a document."""
        prefix = join_path(collection, id) + "/"
        with self._session("list_descendants", collection) as session:
            rows = session.execute(
                select(DBDocument).where(DBDocument.collection.startswith(prefix, autoescape=True))
            ).scalars().all()
            return [self._row_to_document(row) for row in rows]

    # ========== Writes ==========

    def create(self, collection: str, id: str, data: Dict[str, Any]) -> None:
        self.commit(WriteBatch().create(collection, id, data))

    def set(self, collection: str, id: str, data: Dict[str, Any]) -> None:
        self.commit(WriteBatch().set(collection, id, data))

    def update(self, collection: str, id: str, fields: Dict[str, Any]) -> None:
        self.commit(WriteBatch().update(collection, id, fields))

    def delete(self, collection: str, id: str) -> None:
        self.commit(WriteBatch().delete(collection, id))

    @contextmanager
    def batch(self) -> Iterator[WriteBatch]:
        """Collect writes and commit them together when the block exits.

        Nothing is written if the block raises.

        Example:
            with store.batch() as batch:
                batch.create("projects/p1/chapters", cid, {...})
                batch.update("projects", "p1", {"chapterIds": ids})
        """
        batch = WriteBatch()
        yield batch
        self.commit(batch)

    def commit(self, batch: WriteBatch) -> None:
        """Apply every write of a batch in one transaction.

        Raises:
            DocumentNotFoundError: If an update targets an absent document.
            StorageError: If a create targets an existing document or the
                database fails. No write of the batch is applied.
        """
        if not len(batch):
            return
        now = utc_now()
        with self._session("commit", None) as session:
            for write in batch.writes:
                self._apply(session, write, now)
            session.commit()
        logger.debug("Committed batch of %d writes", len(batch))

    # ========== Helpers ==========

    @contextmanager
    def _session(self, operation: str, collection: Optional[str]) -> Iterator[Session]:
        session = self.session_factory()
        try:
            yield session
        except SQLAlchemyError as e:
            session.rollback()
            logger.error("Document store %s failed: %s", operation, e)
            raise StorageError(
                f"Document store {operation} failed",
                operation=operation,
                path=collection,
                original_error=e,
            ) from e
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def _apply(self, session: Session, write: _Write, now: datetime.datetime) -> None:
        row = session.get(DBDocument, (write.collection, write.id))

        if write.kind == "delete":
            if row is not None:
                session.delete(row)
            return

        data = _resolve_timestamps(write.data or {}, now)

        if write.kind == "create" and row is not None:
            raise StorageError(
                f"Document '{write.collection}/{write.id}' already exists",
                operation="create",
                path=write.collection,
                code=ErrorCode.STORAGE_FAILED,
            )
        if write.kind == "update":
            if row is None:
                raise DocumentNotFoundError(write.collection, write.id)
            merged = self._decode_data(row.data)
            merged.update(data)
            data = merged

        encoded = json.dumps(data, default=_encode, ensure_ascii=False)
        if row is None:
            session.add(
                DBDocument(
                    collection=write.collection,
                    id=write.id,
                    data=encoded,
                    created_at=naive_utc(now),
                    updated_at=naive_utc(now),
                )
            )
        else:
            row.data = encoded
            row.updated_at = naive_utc(now)
        # Later writes in the same batch must see this one.
        session.flush()

    @staticmethod
    def _decode_data(text: str) -> Dict[str, Any]:
        return json.loads(text, object_hook=_decode)

    def _row_to_document(self, row: DBDocument) -> Document:
        return Document(collection=row.collection, id=row.id, data=self._decode_data(row.data))


def delete_tree(store: DocumentStore, batch: WriteBatch, collection: str, id: str) -> None:
    """Queue deletion of a document and everything under it."""
    for doc in store.list_descendants(collection, id):
        batch.delete(doc.collection, doc.id)
    batch.delete(collection, id)
