"""Repository for project storage and retrieval."""
import logging
from typing import Dict, Tuple

from knodeledge.exceptions import (
    ReadFailureError,
    StorageError,
    WriteFailureError,
)
from knodeledge.models.records import ProjectEntry, ProjectWithoutAutofieldEntry
from knodeledge.storage.base import PROJECT_COLLECTION, Repository
from knodeledge.storage.document_store import SERVER_TIMESTAMP, Document, delete_tree

logger = logging.getLogger(__name__)


class ProjectRepository(Repository):
    """Repository for projects.

    Projects live at the top level of the store. Besides name and
    description each project carries the author's user id and the ordered
    chapterIds list maintained by ChapterRepository.
    """

    def fetch_projects(self, user_id: str) -> Dict[str, ProjectEntry]:
        """Get every project authored by a user, keyed by project ID."""
        try:
            documents = self.store.list(PROJECT_COLLECTION)
        except StorageError as e:
            raise ReadFailureError(f"failed to fetch projects: {e.message}") from e

        return {
            doc.id: self._document_to_entry(doc)
            for doc in documents
            if doc.get("userId") == user_id
        }

    def fetch_project(self, user_id: str, project_id: str) -> ProjectEntry:
        """Get one project.

        Raises:
            NotFoundError: If the project is absent or authored by someone else.
        """
        return self._document_to_entry(self._fetch_owned_project(user_id, project_id))

    def insert_project(
        self, user_id: str, entry: ProjectWithoutAutofieldEntry
    ) -> Tuple[str, ProjectEntry]:
        """Create a project with an empty chapter list.

        Returns:
            (project_id, stored entry)
        """
        project_id = self.store.new_id()
        try:
            self.store.create(
                PROJECT_COLLECTION,
                project_id,
                {
                    "name": entry.name,
                    "description": entry.description,
                    "userId": user_id,
                    "chapterIds": [],
                    "createdAt": SERVER_TIMESTAMP,
                    "updatedAt": SERVER_TIMESTAMP,
                },
            )
        except StorageError as e:
            raise WriteFailureError(f"failed to create project: {e.message}") from e

        logger.info(f"Created project: {project_id}")
        return project_id, self._reload(project_id)

    def update_project(
        self, user_id: str, project_id: str, entry: ProjectWithoutAutofieldEntry
    ) -> ProjectEntry:
        """Replace the name and description of a project."""
        self._fetch_owned_project(user_id, project_id)

        try:
            self.store.update(
                PROJECT_COLLECTION,
                project_id,
                {
                    "name": entry.name,
                    "description": entry.description,
                    "updatedAt": SERVER_TIMESTAMP,
                },
            )
        except StorageError as e:
            raise WriteFailureError(f"failed to update project: {e.message}") from e

        logger.info(f"Updated project: {project_id}")
        return self._reload(project_id)

    def delete_project(self, user_id: str, project_id: str) -> None:
        """Delete a project together with its chapters, graphs and papers."""
        self._fetch_owned_project(user_id, project_id)

        try:
            with self.store.batch() as batch:
                delete_tree(self.store, batch, PROJECT_COLLECTION, project_id)
        except StorageError as e:
            raise WriteFailureError(f"failed to delete project: {e.message}") from e

        logger.info(f"Deleted project: {project_id}")

    def _reload(self, project_id: str) -> ProjectEntry:
        try:
            return self._document_to_entry(self.store.get(PROJECT_COLLECTION, project_id))
        except StorageError as e:
            raise ReadFailureError(f"failed to fetch project: {e.message}") from e

    @staticmethod
    def _document_to_entry(doc: Document) -> ProjectEntry:
        """Convert a stored project document to an entry."""
        return ProjectEntry(
            name=doc.get("name", ""),
            description=doc.get("description", ""),
            user_id=doc.get("userId", ""),
            created_at=doc.get("createdAt"),
            updated_at=doc.get("updatedAt"),
        )
