"""Repository for chapters and their order within a project.

Chapters are stored one document each under projects/{pid}/chapters, but a
chapter's number is not stored on it: it is 1 + the chapter's index in the
parent project's chapterIds list. Every mutation that changes the order
rewrites that list in the same write batch as the chapter write, so the list
and the chapter documents never diverge.
"""
import logging
from typing import Dict, List, Optional, Tuple

from knodeledge.exceptions import (
    InvalidArgumentError,
    ReadFailureError,
    StorageError,
    WriteFailureError,
)
from knodeledge.models.records import (
    ChapterEntry,
    ChapterWithoutAutofieldEntry,
    PaperWithoutAutofieldEntry,
    SectionEntry,
)
from knodeledge.storage.base import (
    PROJECT_COLLECTION,
    Repository,
    chapters_path,
    papers_path,
)
from knodeledge.storage.document_store import SERVER_TIMESTAMP, Document, delete_tree
from knodeledge.storage.paper_repository import paper_document

logger = logging.getLogger(__name__)

TOO_SMALL_NUMBER_MESSAGE = "chapter number is too small"
TOO_LARGE_NUMBER_MESSAGE = "chapter number is too large"
DEFICIENT_IDS_MESSAGE = "chapterIds have deficient elements"
EXCESSIVE_IDS_MESSAGE = "chapterIds have excessive elements"


class ChapterRepository(Repository):
    """Repository for chapters."""

    def fetch_project_chapters(self, user_id: str, project_id: str) -> Dict[str, ChapterEntry]:
        """Get every chapter of a project, keyed by chapter ID.

        Raises:
            NotFoundError: If the project is absent or not the user's.
            ReadFailureError: If chapterIds and the chapter documents disagree.
        """
        project = self._fetch_owned_project(user_id, project_id)
        positions = {chapter_id: i for i, chapter_id in enumerate(self._chapter_ids(project))}

        try:
            documents = self.store.list(chapters_path(project_id))
        except StorageError as e:
            raise ReadFailureError(f"failed to fetch chapters: {e.message}") from e

        entries: Dict[str, ChapterEntry] = {}
        for doc in documents:
            if doc.id not in positions:
                raise ReadFailureError(DEFICIENT_IDS_MESSAGE)
            entries[doc.id] = self._document_to_entry(doc, positions[doc.id] + 1, user_id)

        if len(entries) < len(self._chapter_ids(project)):
            raise ReadFailureError(EXCESSIVE_IDS_MESSAGE)
        return entries

    def fetch_chapter(self, user_id: str, project_id: str, chapter_id: str) -> ChapterEntry:
        """Get one chapter with its computed number."""
        project = self._fetch_owned_project(user_id, project_id)
        doc = self._fetch_chapter(project_id, chapter_id)
        return self._document_to_entry(
            doc, self._position_of(project, chapter_id) + 1, user_id
        )

    def insert_chapter(
        self,
        user_id: str,
        project_id: str,
        entry: ChapterWithoutAutofieldEntry,
        paper: Optional[PaperWithoutAutofieldEntry] = None,
    ) -> Tuple[str, ChapterEntry]:
        """Create a chapter at position entry.number, shifting later chapters.

        When paper is given the chapter's paper is created in the same batch.

        Returns:
            (chapter_id, stored entry)

        Raises:
            NotFoundError: If the project is absent or not the user's.
            InvalidArgumentError: If number is below 1 or exceeds the chapter
                count + 1.
            WriteFailureError: If the batch could not be committed.
        """
        project = self._fetch_owned_project(user_id, project_id)
        chapter_ids = self._chapter_ids(project)

        if entry.number < 1:
            raise InvalidArgumentError(TOO_SMALL_NUMBER_MESSAGE)
        if entry.number > len(chapter_ids) + 1:
            raise InvalidArgumentError(TOO_LARGE_NUMBER_MESSAGE)

        chapter_id = self.store.new_id()
        chapter_ids.insert(entry.number - 1, chapter_id)

        try:
            with self.store.batch() as batch:
                batch.create(
                    chapters_path(project_id),
                    chapter_id,
                    {
                        "name": entry.name,
                        "sections": [],
                        "createdAt": SERVER_TIMESTAMP,
                        "updatedAt": SERVER_TIMESTAMP,
                    },
                )
                batch.update(PROJECT_COLLECTION, project_id, {"chapterIds": chapter_ids})
                if paper is not None:
                    batch.create(papers_path(project_id), chapter_id, paper_document(paper))
        except StorageError as e:
            raise WriteFailureError(f"failed to create chapter: {e.message}") from e

        logger.info(f"Created chapter: {chapter_id} at {entry.number} in project {project_id}")
        return chapter_id, self._reload(project_id, chapter_id, entry.number, user_id)

    def update_chapter(
        self,
        user_id: str,
        project_id: str,
        chapter_id: str,
        entry: ChapterWithoutAutofieldEntry,
    ) -> ChapterEntry:
        """Rename a chapter and move it to position entry.number.

        chapterIds is only rewritten when the position actually changes.

        Raises:
            NotFoundError: If the project or chapter is absent.
            InvalidArgumentError: If number is below 1 or exceeds the chapter
                count.
            ReadFailureError: If chapter_id is missing from chapterIds.
            WriteFailureError: If the batch could not be committed.
        """
        project = self._fetch_owned_project(user_id, project_id)
        chapter_ids = self._chapter_ids(project)

        if entry.number < 1:
            raise InvalidArgumentError(TOO_SMALL_NUMBER_MESSAGE)
        if entry.number > len(chapter_ids):
            raise InvalidArgumentError(TOO_LARGE_NUMBER_MESSAGE)

        self._fetch_chapter(project_id, chapter_id)
        current = self._position_of(project, chapter_id)
        target = entry.number - 1

        try:
            with self.store.batch() as batch:
                batch.update(
                    chapters_path(project_id),
                    chapter_id,
                    {"name": entry.name, "updatedAt": SERVER_TIMESTAMP},
                )
                if current != target:
                    chapter_ids.pop(current)
                    chapter_ids.insert(target, chapter_id)
                    batch.update(PROJECT_COLLECTION, project_id, {"chapterIds": chapter_ids})
        except StorageError as e:
            raise WriteFailureError(f"failed to update chapter: {e.message}") from e

        logger.info(f"Updated chapter: {chapter_id}")
        return self._reload(project_id, chapter_id, entry.number, user_id)

    def update_chapter_sections(
        self,
        user_id: str,
        project_id: str,
        chapter_id: str,
        sections: List[SectionEntry],
    ) -> ChapterEntry:
        """Replace the section summaries of a chapter."""
        project = self._fetch_owned_project(user_id, project_id)
        self._fetch_chapter(project_id, chapter_id)
        number = self._position_of(project, chapter_id) + 1

        try:
            self.store.update(
                chapters_path(project_id),
                chapter_id,
                {
                    "sections": [{"id": s.id, "name": s.name} for s in sections],
                    "updatedAt": SERVER_TIMESTAMP,
                },
            )
        except StorageError as e:
            raise WriteFailureError(f"failed to update chapter sections: {e.message}") from e

        logger.info(f"Updated sections of chapter: {chapter_id} ({len(sections)} sections)")
        return self._reload(project_id, chapter_id, number, user_id)

    def delete_chapter(self, user_id: str, project_id: str, chapter_id: str) -> None:
        """Delete a chapter with its paper and graphs, and drop it from chapterIds."""
        project = self._fetch_owned_project(user_id, project_id)
        self._fetch_chapter(project_id, chapter_id)
        chapter_ids = self._chapter_ids(project)
        chapter_ids.pop(self._position_of(project, chapter_id))

        try:
            with self.store.batch() as batch:
                delete_tree(self.store, batch, chapters_path(project_id), chapter_id)
                batch.delete(papers_path(project_id), chapter_id)
                batch.update(PROJECT_COLLECTION, project_id, {"chapterIds": chapter_ids})
        except StorageError as e:
            raise WriteFailureError(f"failed to delete chapter: {e.message}") from e

        logger.info(f"Deleted chapter: {chapter_id} from project {project_id}")

    def _position_of(self, project: Document, chapter_id: str) -> int:
        chapter_ids = self._chapter_ids(project)
        if chapter_id not in chapter_ids:
            raise ReadFailureError(DEFICIENT_IDS_MESSAGE)
        return chapter_ids.index(chapter_id)

    def _reload(self, project_id: str, chapter_id: str, number: int, user_id: str) -> ChapterEntry:
        try:
            doc = self.store.get(chapters_path(project_id), chapter_id)
        except StorageError as e:
            raise ReadFailureError(f"failed to fetch chapter: {e.message}") from e
        return self._document_to_entry(doc, number, user_id)

    @staticmethod
    def _document_to_entry(doc: Document, number: int, user_id: str) -> ChapterEntry:
        """Convert a stored chapter document to an entry."""
        return ChapterEntry(
            name=doc.get("name", ""),
            number=number,
            sections=[
                SectionEntry(id=s.get("id", ""), name=s.get("name", ""))
                for s in doc.get("sections") or []
            ],
            user_id=user_id,
            created_at=doc.get("createdAt"),
            updated_at=doc.get("updatedAt"),
        )
