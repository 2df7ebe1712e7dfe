"""Graph use cases."""
import logging
from typing import Any, Dict, Optional

from knodeledge.config import config
from knodeledge.models import values
from knodeledge.models.schema import GraphContent
from knodeledge.models.validators import (
    graph_children_depth,
    validate_graph_children,
    validate_section_list,
)
from knodeledge.observability import traced
from knodeledge.services.graph_service import GraphService
from knodeledge.usecases.base import (
    graph_to_dict,
    has_error,
    request_list,
    request_text,
    service_errors,
    validation_error,
)

logger = logging.getLogger(__name__)


class GraphUseCase:
    """Use cases for graphs.

    Graph children arrive as an untrusted tree and are always validated in
    full. Trees deeper than max_graph_depth are rejected as well: the top
    level message names the limit and the items still mirror every node.
    """

    def __init__(self, service: GraphService, max_graph_depth: Optional[int] = None):
        self.service = service
        self.max_graph_depth = (
            config.max_graph_depth if max_graph_depth is None else max_graph_depth
        )

    @traced("find_graph")
    def find_graph(self, request: Dict[str, Any]) -> Dict[str, Any]:
        user_id, user_id_msg = values.check(
            values.validate_user_id, request_text(request, "user", "id")
        )
        project_id, project_id_msg = values.check(
            values.validate_project_id, request_text(request, "project", "id")
        )
        chapter_id, chapter_id_msg = values.check(
            values.validate_chapter_id, request_text(request, "chapter", "id")
        )
        section_id, section_id_msg = values.check(
            values.validate_section_id, request_text(request, "section", "id")
        )
        if has_error(user_id_msg, project_id_msg, chapter_id_msg, section_id_msg):
            raise validation_error(
                {
                    "user": {"id": user_id_msg},
                    "project": {"id": project_id_msg},
                    "chapter": {"id": chapter_id_msg},
                    "section": {"id": section_id_msg},
                }
            )

        with service_errors():
            graph = self.service.find_graph(user_id, project_id, chapter_id, section_id)
        return {"graph": graph_to_dict(graph)}

    @traced("update_graph")
    def update_graph(self, request: Dict[str, Any]) -> Dict[str, Any]:
        user_id, user_id_msg = values.check(
            values.validate_user_id, request_text(request, "user", "id")
        )
        project_id, project_id_msg = values.check(
            values.validate_project_id, request_text(request, "project", "id")
        )
        chapter_id, chapter_id_msg = values.check(
            values.validate_chapter_id, request_text(request, "chapter", "id")
        )
        graph_id, graph_id_msg = values.check(
            values.validate_graph_id, request_text(request, "graph", "id")
        )
        paragraph, paragraph_msg = values.check(
            values.validate_graph_paragraph, request_text(request, "graph", "paragraph")
        )

        raw_children = request_list(request, "graph", "children")
        children, children_errors, children_ok = validate_graph_children(raw_children)
        depth = graph_children_depth(raw_children)
        if depth > self.max_graph_depth:
            logger.warning(f"Rejected graph children nested {depth} levels deep")
            children_errors = children_errors.model_copy(
                update={
                    "message": (
                        f"graph children must be nested at most {self.max_graph_depth} "
                        f"levels, but got {depth} levels"
                    )
                }
            )
            children_ok = False

        if has_error(user_id_msg, project_id_msg, chapter_id_msg, graph_id_msg, paragraph_msg) \
                or not children_ok:
            raise validation_error(
                {
                    "user": {"id": user_id_msg},
                    "project": {"id": project_id_msg},
                    "chapter": {"id": chapter_id_msg},
                    "graph": {
                        "id": graph_id_msg,
                        "paragraph": paragraph_msg,
                        "children": children_errors.to_dict(),
                    },
                }
            )

        content = GraphContent.model_construct(paragraph=paragraph, children=children)
        with service_errors():
            graph = self.service.update_graph(
                user_id, project_id, chapter_id, graph_id, content
            )
        return {"graph": graph_to_dict(graph)}

    @traced("delete_graph")
    def delete_graph(self, request: Dict[str, Any]) -> None:
        user_id, user_id_msg = values.check(
            values.validate_user_id, request_text(request, "user", "id")
        )
        project_id, project_id_msg = values.check(
            values.validate_project_id, request_text(request, "project", "id")
        )
        chapter_id, chapter_id_msg = values.check(
            values.validate_chapter_id, request_text(request, "chapter", "id")
        )
        graph_id, graph_id_msg = values.check(
            values.validate_graph_id, request_text(request, "graph", "id")
        )
        if has_error(user_id_msg, project_id_msg, chapter_id_msg, graph_id_msg):
            raise validation_error(
                {
                    "user": {"id": user_id_msg},
                    "project": {"id": project_id_msg},
                    "chapter": {"id": chapter_id_msg},
                    "graph": {"id": graph_id_msg},
                }
            )

        with service_errors():
            self.service.delete_graph(user_id, project_id, chapter_id, graph_id)

    @traced("sectionalize_graph")
    def sectionalize_graph(self, request: Dict[str, Any]) -> Dict[str, Any]:
        user_id, user_id_msg = values.check(
            values.validate_user_id, request_text(request, "user", "id")
        )
        project_id, project_id_msg = values.check(
            values.validate_project_id, request_text(request, "project", "id")
        )
        chapter_id, chapter_id_msg = values.check(
            values.validate_chapter_id, request_text(request, "chapter", "id")
        )
        raw_sections = request.get("sections") if isinstance(request, dict) else None
        if not isinstance(raw_sections, (list, tuple)):
            raw_sections = []
        sections, sections_errors, sections_ok = validate_section_list(raw_sections)

        if has_error(user_id_msg, project_id_msg, chapter_id_msg) or not sections_ok:
            raise validation_error(
                {
                    "user": {"id": user_id_msg},
                    "project": {"id": project_id_msg},
                    "chapter": {"id": chapter_id_msg},
                    "sections": sections_errors.model_dump(),
                }
            )

        with service_errors():
            graphs = self.service.sectionalize_graph(
                user_id, project_id, chapter_id, sections
            )
        return {"graphs": [graph_to_dict(g) for g in graphs]}
