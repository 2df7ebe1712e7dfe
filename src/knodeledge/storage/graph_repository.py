"""Repository for graphs, the per-section knowledge-graph nodes of a chapter."""
import logging
from typing import Any, Dict, List, Optional, Tuple

from knodeledge.exceptions import (
    DocumentNotFoundError,
    NotFoundError,
    ReadFailureError,
    StorageError,
    WriteFailureError,
)
from knodeledge.models.records import (
    ChapterEntry,
    GraphChildEntry,
    GraphContentEntry,
    GraphEntry,
    GraphWithoutAutofieldEntry,
)
from knodeledge.storage.base import Repository, graphs_path
from knodeledge.storage.chapter_repository import ChapterRepository
from knodeledge.storage.document_store import SERVER_TIMESTAMP, Document, DocumentStore

logger = logging.getLogger(__name__)


def _children_to_data(children: List[GraphChildEntry]) -> List[Dict[str, Any]]:
    return [child.model_dump() for child in children]


class GraphRepository(Repository):
    """Repository for graphs.

    A graph's id is the id of the section it renders and its name is kept in
    the chapter's section summary, so most operations go through
    ChapterRepository first.
    """

    def __init__(
        self, store: DocumentStore, chapter_repository: Optional[ChapterRepository] = None
    ):
        super().__init__(store)
        self.chapter_repository = chapter_repository or ChapterRepository(store)

    def graph_exists(self, user_id: str, project_id: str, chapter_id: str) -> bool:
        """Whether the chapter has any graph yet."""
        self.chapter_repository.fetch_chapter(user_id, project_id, chapter_id)
        try:
            documents = self.store.list(graphs_path(project_id, chapter_id), limit=1)
        except StorageError as e:
            raise ReadFailureError(f"failed to fetch graphs: {e.message}") from e
        return len(documents) > 0

    def fetch_graph(
        self, user_id: str, project_id: str, chapter_id: str, graph_id: str
    ) -> GraphEntry:
        """Get one graph.

        Raises:
            NotFoundError: If the project, chapter, graph or the graph's
                section summary is absent.
        """
        chapter = self.chapter_repository.fetch_chapter(user_id, project_id, chapter_id)
        doc = self._fetch_graph(project_id, chapter_id, graph_id)
        return self._document_to_entry(doc, self._section_name(chapter, graph_id), user_id)

    def insert_graphs(
        self,
        user_id: str,
        project_id: str,
        chapter_id: str,
        entries: List[GraphWithoutAutofieldEntry],
    ) -> Tuple[List[str], List[GraphEntry]]:
        """Create one graph per entry in a single batch.

        Returns:
            (graph_ids, stored entries), both parallel to entries.
        """
        self.chapter_repository.fetch_chapter(user_id, project_id, chapter_id)
        collection = graphs_path(project_id, chapter_id)
        graph_ids = [self.store.new_id() for _ in entries]

        try:
            with self.store.batch() as batch:
                for graph_id, entry in zip(graph_ids, entries):
                    batch.create(
                        collection,
                        graph_id,
                        {
                            "paragraph": entry.paragraph,
                            "children": _children_to_data(entry.children),
                            "createdAt": SERVER_TIMESTAMP,
                            "updatedAt": SERVER_TIMESTAMP,
                        },
                    )
        except StorageError as e:
            raise WriteFailureError(f"failed to insert graphs: {e.message}") from e

        try:
            documents = self.store.get_all(collection, graph_ids)
        except StorageError as e:
            raise ReadFailureError(f"failed to fetch created graphs: {e.message}") from e

        logger.info(f"Created {len(graph_ids)} graphs in chapter {chapter_id}")
        return graph_ids, [
            self._document_to_entry(doc, entry.name, user_id)
            for doc, entry in zip(documents, entries)
        ]

    def update_graph_content(
        self,
        user_id: str,
        project_id: str,
        chapter_id: str,
        graph_id: str,
        entry: GraphContentEntry,
    ) -> GraphEntry:
        """Replace the paragraph and children of a graph."""
        chapter = self.chapter_repository.fetch_chapter(user_id, project_id, chapter_id)
        name = self._section_name(chapter, graph_id)
        self._fetch_graph(project_id, chapter_id, graph_id)

        try:
            self.store.update(
                graphs_path(project_id, chapter_id),
                graph_id,
                {
                    "paragraph": entry.paragraph,
                    "children": _children_to_data(entry.children),
                    "updatedAt": SERVER_TIMESTAMP,
                },
            )
        except StorageError as e:
            raise WriteFailureError(f"failed to update graph: {e.message}") from e

        logger.info(f"Updated graph: {graph_id}")
        return self._document_to_entry(
            self._fetch_graph(project_id, chapter_id, graph_id), name, user_id
        )

    def delete_graph(
        self, user_id: str, project_id: str, chapter_id: str, graph_id: str
    ) -> None:
        """Delete a graph. The chapter's section summary is left to the caller."""
        self.chapter_repository.fetch_chapter(user_id, project_id, chapter_id)
        self._fetch_graph(project_id, chapter_id, graph_id)

        try:
            self.store.delete(graphs_path(project_id, chapter_id), graph_id)
        except StorageError as e:
            raise WriteFailureError(f"failed to delete graph: {e.message}") from e

        logger.info(f"Deleted graph: {graph_id}")

    def _fetch_graph(self, project_id: str, chapter_id: str, graph_id: str) -> Document:
        try:
            return self.store.get(graphs_path(project_id, chapter_id), graph_id)
        except DocumentNotFoundError:
            raise NotFoundError("graph not found")
        except StorageError as e:
            raise ReadFailureError(f"failed to fetch graph: {e.message}") from e

    @staticmethod
    def _section_name(chapter: ChapterEntry, graph_id: str) -> str:
        for section in chapter.sections:
            if section.id == graph_id:
                return section.name
        raise NotFoundError("graph not found")

    @staticmethod
    def _document_to_entry(doc: Document, name: str, user_id: str) -> GraphEntry:
        """Convert a stored graph document to an entry."""
        return GraphEntry(
            name=name,
            paragraph=doc.get("paragraph", ""),
            children=[
                GraphChildEntry.model_validate(child) for child in doc.get("children") or []
            ],
            user_id=user_id,
            created_at=doc.get("createdAt"),
            updated_at=doc.get("updatedAt"),
        )
