"""Service for managing projects."""
import logging
from typing import List

from knodeledge.models.records import ProjectEntry, ProjectWithoutAutofieldEntry
from knodeledge.models.schema import Project, ProjectWithoutAutofield
from knodeledge.services.base import repository_errors, to_entity
from knodeledge.storage.project_repository import ProjectRepository

logger = logging.getLogger(__name__)


class ProjectService:
    """Service for managing projects."""

    def __init__(self, repository: ProjectRepository):
        self.repository = repository

    def list_projects(self, user_id: str) -> List[Project]:
        """Projects authored by the user, least recently updated first."""
        with repository_errors("list projects"):
            entries = self.repository.fetch_projects(user_id)

        projects = [self._to_entity(pid, entry) for pid, entry in entries.items()]
        projects.sort(key=lambda p: p.updated_at)
        return projects

    def find_project(self, user_id: str, project_id: str) -> Project:
        with repository_errors("find project"):
            entry = self.repository.fetch_project(user_id, project_id)
        return self._to_entity(project_id, entry)

    def create_project(self, user_id: str, project: ProjectWithoutAutofield) -> Project:
        with repository_errors("create project"):
            project_id, entry = self.repository.insert_project(
                user_id, self._to_entry(project)
            )
        return self._to_entity(project_id, entry)

    def update_project(
        self, user_id: str, project_id: str, project: ProjectWithoutAutofield
    ) -> Project:
        with repository_errors("update project"):
            entry = self.repository.update_project(
                user_id, project_id, self._to_entry(project)
            )
        return self._to_entity(project_id, entry)

    def delete_project(self, user_id: str, project_id: str) -> None:
        with repository_errors("delete project"):
            self.repository.delete_project(user_id, project_id)

    @staticmethod
    def _to_entry(project: ProjectWithoutAutofield) -> ProjectWithoutAutofieldEntry:
        return ProjectWithoutAutofieldEntry(
            name=project.name, description=project.description
        )

    @staticmethod
    def _to_entity(project_id: str, entry: ProjectEntry) -> Project:
        return to_entity(
            Project,
            id=project_id,
            name=entry.name,
            description=entry.description,
            author_id=entry.user_id,
            created_at=entry.created_at,
            updated_at=entry.updated_at,
        )
