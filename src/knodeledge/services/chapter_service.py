"""Service for managing chapters."""
import logging
from typing import List

from knodeledge.models.records import (
    ChapterEntry,
    ChapterWithoutAutofieldEntry,
    PaperWithoutAutofieldEntry,
)
from knodeledge.models.schema import Chapter, ChapterWithoutAutofield
from knodeledge.services.base import repository_errors, to_entity
from knodeledge.storage.chapter_repository import ChapterRepository

logger = logging.getLogger(__name__)


class ChapterService:
    """Service for managing chapters.

    A chapter is always created together with its empty paper, in one write.
    """

    def __init__(self, chapter_repository: ChapterRepository):
        self.chapter_repository = chapter_repository

    def list_chapters(self, user_id: str, project_id: str) -> List[Chapter]:
        """Chapters of a project ordered by number."""
        with repository_errors("list chapters"):
            entries = self.chapter_repository.fetch_project_chapters(user_id, project_id)

        chapters = [self._to_entity(cid, entry) for cid, entry in entries.items()]
        chapters.sort(key=lambda c: c.number)
        return chapters

    def create_chapter(
        self, user_id: str, project_id: str, chapter: ChapterWithoutAutofield
    ) -> Chapter:
        with repository_errors("create chapter"):
            chapter_id, entry = self.chapter_repository.insert_chapter(
                user_id,
                project_id,
                self._to_entry(chapter),
                paper=PaperWithoutAutofieldEntry(content=""),
            )

        logger.debug(f"Created chapter {chapter_id} with an empty paper")
        return self._to_entity(chapter_id, entry)

    def update_chapter(
        self,
        user_id: str,
        project_id: str,
        chapter_id: str,
        chapter: ChapterWithoutAutofield,
    ) -> Chapter:
        with repository_errors("update chapter"):
            entry = self.chapter_repository.update_chapter(
                user_id, project_id, chapter_id, self._to_entry(chapter)
            )
        return self._to_entity(chapter_id, entry)

    def delete_chapter(self, user_id: str, project_id: str, chapter_id: str) -> None:
        with repository_errors("delete chapter"):
            self.chapter_repository.delete_chapter(user_id, project_id, chapter_id)

    @staticmethod
    def _to_entry(chapter: ChapterWithoutAutofield) -> ChapterWithoutAutofieldEntry:
        return ChapterWithoutAutofieldEntry(name=chapter.name, number=chapter.number)

    @staticmethod
    def _to_entity(chapter_id: str, entry: ChapterEntry) -> Chapter:
        return to_entity(
            Chapter,
            id=chapter_id,
            name=entry.name,
            number=entry.number,
            sections=[s.model_dump() for s in entry.sections],
            created_at=entry.created_at,
            updated_at=entry.updated_at,
        )
