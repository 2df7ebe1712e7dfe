"""Service for managing papers."""
from knodeledge.models.records import PaperEntry, PaperWithoutAutofieldEntry
from knodeledge.models.schema import Paper, PaperWithoutAutofield
from knodeledge.services.base import repository_errors, to_entity
from knodeledge.storage.paper_repository import PaperRepository


class PaperService:
    def __init__(self, repository: PaperRepository):
        self.repository = repository

    def find_paper(self, user_id: str, project_id: str, chapter_id: str) -> Paper:
        with repository_errors("find paper"):
            entry = self.repository.fetch_paper(user_id, project_id, chapter_id)
        return self._to_entity(chapter_id, entry)

    def update_paper(
        self,
        user_id: str,
        project_id: str,
        chapter_id: str,
        paper: PaperWithoutAutofield,
    ) -> Paper:
        with repository_errors("update paper"):
            entry = self.repository.update_paper(
                user_id,
                project_id,
                chapter_id,
                PaperWithoutAutofieldEntry(content=paper.content),
            )
        return self._to_entity(chapter_id, entry)

    @staticmethod
    def _to_entity(paper_id: str, entry: PaperEntry) -> Paper:
        return to_entity(
            Paper,
            id=paper_id,
            content=entry.content,
            created_at=entry.created_at,
            updated_at=entry.updated_at,
        )
