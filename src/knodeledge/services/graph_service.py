"""Service for managing graphs."""
import logging
from typing import List

from knodeledge.exceptions import InvalidArgumentError
from knodeledge.models.records import (
    GraphContentEntry,
    GraphEntry,
    GraphWithoutAutofieldEntry,
    SectionEntry,
)
from knodeledge.models.schema import Graph, GraphContent, SectionWithoutAutofield
from knodeledge.services.base import repository_errors, to_entity
from knodeledge.storage.chapter_repository import ChapterRepository
from knodeledge.storage.graph_repository import GraphRepository

logger = logging.getLogger(__name__)


class GraphService:
    """Service for managing graphs.

    Graph names live in the chapter's section summaries, so creating and
    deleting graphs also rewrites those summaries.
    """

    def __init__(
        self,
        graph_repository: GraphRepository,
        chapter_repository: ChapterRepository,
    ):
        self.graph_repository = graph_repository
        self.chapter_repository = chapter_repository

    def find_graph(
        self, user_id: str, project_id: str, chapter_id: str, graph_id: str
    ) -> Graph:
        with repository_errors("find graph"):
            entry = self.graph_repository.fetch_graph(
                user_id, project_id, chapter_id, graph_id
            )
        return self._to_entity(graph_id, entry)

    def update_graph(
        self,
        user_id: str,
        project_id: str,
        chapter_id: str,
        graph_id: str,
        content: GraphContent,
    ) -> Graph:
        """Replace the paragraph and children of a graph."""
        with repository_errors("update graph"):
            entry = self.graph_repository.update_graph_content(
                user_id,
                project_id,
                chapter_id,
                graph_id,
                GraphContentEntry.model_validate(content.model_dump()),
            )
        return self._to_entity(graph_id, entry)

    def delete_graph(
        self, user_id: str, project_id: str, chapter_id: str, graph_id: str
    ) -> None:
        """Delete a graph, then drop its summary from the chapter."""
        with repository_errors("delete graph"):
            self.graph_repository.delete_graph(user_id, project_id, chapter_id, graph_id)
            chapter = self.chapter_repository.fetch_chapter(user_id, project_id, chapter_id)
            self.chapter_repository.update_chapter_sections(
                user_id,
                project_id,
                chapter_id,
                [s for s in chapter.sections if s.id != graph_id],
            )

    def sectionalize_graph(
        self,
        user_id: str,
        project_id: str,
        chapter_id: str,
        sections: List[SectionWithoutAutofield],
    ) -> List[Graph]:
        """Turn a chapter into one graph per section.

        Raises:
            InvalidArgumentError: If the chapter already has graphs.
        """
        with repository_errors("sectionalize graph"):
            if self.graph_repository.graph_exists(user_id, project_id, chapter_id):
                raise InvalidArgumentError("graph already exists")

            graph_ids, entries = self.graph_repository.insert_graphs(
                user_id,
                project_id,
                chapter_id,
                [
                    GraphWithoutAutofieldEntry(
                        name=section.name, paragraph=section.content, children=[]
                    )
                    for section in sections
                ],
            )
            self.chapter_repository.update_chapter_sections(
                user_id,
                project_id,
                chapter_id,
                [
                    SectionEntry(id=graph_id, name=entry.name)
                    for graph_id, entry in zip(graph_ids, entries)
                ],
            )

        logger.info(f"Sectionalized chapter {chapter_id} into {len(graph_ids)} graphs")
        return [
            self._to_entity(graph_id, entry)
            for graph_id, entry in zip(graph_ids, entries)
        ]

    @staticmethod
    def _to_entity(graph_id: str, entry: GraphEntry) -> Graph:
        return to_entity(
            Graph,
            id=graph_id,
            name=entry.name,
            paragraph=entry.paragraph,
            children=[child.model_dump() for child in entry.children],
            created_at=entry.created_at,
            updated_at=entry.updated_at,
        )
