"""Base repository and collection layout."""
import logging
from typing import List

from knodeledge.exceptions import (
    DocumentNotFoundError,
    NotFoundError,
    ReadFailureError,
    StorageError,
)
from knodeledge.storage.document_store import Document, DocumentStore, join_path

logger = logging.getLogger(__name__)

PROJECT_COLLECTION = "projects"
CHAPTER_COLLECTION = "chapters"
GRAPH_COLLECTION = "graphs"
PAPER_COLLECTION = "papers"


def chapters_path(project_id: str) -> str:
    return join_path(PROJECT_COLLECTION, project_id, CHAPTER_COLLECTION)


def graphs_path(project_id: str, chapter_id: str) -> str:
    return join_path(chapters_path(project_id), chapter_id, GRAPH_COLLECTION)


def papers_path(project_id: str) -> str:
    return join_path(PROJECT_COLLECTION, project_id, PAPER_COLLECTION)


class Repository:
    """Base class for repositories over the document store.

    Every operation starts by loading the parent project and checking that
    the caller authored it. A missing project and a project owned by someone
    else raise the same NotFoundError.
    """

    def __init__(self, store: DocumentStore):
        self.store = store

    def _fetch_owned_project(self, user_id: str, project_id: str) -> Document:
        try:
            project = self.store.get(PROJECT_COLLECTION, project_id)
        except DocumentNotFoundError:
            raise NotFoundError("project not found")
        except StorageError as e:
            raise ReadFailureError(f"failed to fetch project: {e.message}") from e

        if project.get("userId") != user_id:
            raise NotFoundError("project not found")
        return project

    def _fetch_chapter(self, project_id: str, chapter_id: str) -> Document:
        try:
            return self.store.get(chapters_path(project_id), chapter_id)
        except DocumentNotFoundError:
            raise NotFoundError("chapter not found")
        except StorageError as e:
            raise ReadFailureError(f"failed to fetch chapter: {e.message}") from e

    @staticmethod
    def _chapter_ids(project: Document) -> List[str]:
        """The project's chapter order; a missing array counts as empty."""
        return list(project.get("chapterIds") or [])
