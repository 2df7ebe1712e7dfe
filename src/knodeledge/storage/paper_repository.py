"""Repository for papers, the flat text of a chapter."""
import logging
from typing import Any, Dict

from knodeledge.exceptions import (
    DocumentNotFoundError,
    NotFoundError,
    ReadFailureError,
    StorageError,
    WriteFailureError,
)
from knodeledge.models.records import PaperEntry, PaperWithoutAutofieldEntry
from knodeledge.storage.base import Repository, papers_path
from knodeledge.storage.document_store import SERVER_TIMESTAMP, Document

logger = logging.getLogger(__name__)


def paper_document(entry: PaperWithoutAutofieldEntry) -> Dict[str, Any]:
    """Data of a new paper document."""
    return {
        "content": entry.content,
        "createdAt": SERVER_TIMESTAMP,
        "updatedAt": SERVER_TIMESTAMP,
    }


class PaperRepository(Repository):
    """Repository for papers.

    A paper shares its id with its chapter and lives under
    projects/{pid}/papers. Every operation checks project ownership and that
    the chapter exists.
    """

    def fetch_paper(self, user_id: str, project_id: str, chapter_id: str) -> PaperEntry:
        """Get the paper of a chapter."""
        self._fetch_owned_project(user_id, project_id)
        self._fetch_chapter(project_id, chapter_id)
        return self._document_to_entry(self._fetch_paper(project_id, chapter_id), user_id)

    def insert_paper(
        self,
        user_id: str,
        project_id: str,
        chapter_id: str,
        entry: PaperWithoutAutofieldEntry,
    ) -> PaperEntry:
        """Create the paper of a chapter."""
        self._fetch_owned_project(user_id, project_id)
        self._fetch_chapter(project_id, chapter_id)

        try:
            self.store.create(papers_path(project_id), chapter_id, paper_document(entry))
        except StorageError as e:
            raise WriteFailureError(f"failed to create paper: {e.message}") from e

        logger.info(f"Created paper: {chapter_id}")
        return self._reload(project_id, chapter_id, user_id)

    def update_paper(
        self,
        user_id: str,
        project_id: str,
        chapter_id: str,
        entry: PaperWithoutAutofieldEntry,
    ) -> PaperEntry:
        """Replace the content of a chapter's paper."""
        self._fetch_owned_project(user_id, project_id)
        self._fetch_chapter(project_id, chapter_id)
        self._fetch_paper(project_id, chapter_id)

        try:
            self.store.update(
                papers_path(project_id),
                chapter_id,
                {"content": entry.content, "updatedAt": SERVER_TIMESTAMP},
            )
        except StorageError as e:
            raise WriteFailureError(f"failed to update paper: {e.message}") from e

        logger.info(f"Updated paper: {chapter_id}")
        return self._reload(project_id, chapter_id, user_id)

    def _fetch_paper(self, project_id: str, chapter_id: str) -> Document:
        try:
            return self.store.get(papers_path(project_id), chapter_id)
        except DocumentNotFoundError:
            raise NotFoundError("paper not found")
        except StorageError as e:
            raise ReadFailureError(f"failed to fetch paper: {e.message}") from e

    def _reload(self, project_id: str, chapter_id: str, user_id: str) -> PaperEntry:
        try:
            doc = self.store.get(papers_path(project_id), chapter_id)
        except StorageError as e:
            raise ReadFailureError(f"failed to fetch paper: {e.message}") from e
        return self._document_to_entry(doc, user_id)

    @staticmethod
    def _document_to_entry(doc: Document, user_id: str) -> PaperEntry:
        """Convert a stored paper document to an entry."""
        return PaperEntry(
            content=doc.get("content", ""),
            user_id=user_id,
            created_at=doc.get("createdAt"),
            updated_at=doc.get("updatedAt"),
        )
