"""Paper use cases."""
from typing import Any, Dict

from knodeledge.models import values
from knodeledge.models.schema import Paper, PaperWithoutAutofield
from knodeledge.observability import traced
from knodeledge.services.paper_service import PaperService
from knodeledge.usecases.base import (
    has_error,
    request_text,
    service_errors,
    validation_error,
)


def _paper_to_dict(paper: Paper) -> Dict[str, Any]:
    return {"id": paper.id, "content": paper.content}


class PaperUseCase:
    def __init__(self, service: PaperService):
        self.service = service

    @traced("find_paper")
    def find_paper(self, request: Dict[str, Any]) -> Dict[str, Any]:
        user_id, user_id_msg = values.check(
            values.validate_user_id, request_text(request, "user", "id")
        )
        project_id, project_id_msg = values.check(
            values.validate_project_id, request_text(request, "project", "id")
        )
        chapter_id, chapter_id_msg = values.check(
            values.validate_chapter_id, request_text(request, "chapter", "id")
        )
        if has_error(user_id_msg, project_id_msg, chapter_id_msg):
            raise validation_error(
                {
                    "user": {"id": user_id_msg},
                    "project": {"id": project_id_msg},
                    "chapter": {"id": chapter_id_msg},
                }
            )

        with service_errors():
            paper = self.service.find_paper(user_id, project_id, chapter_id)
        return {"paper": _paper_to_dict(paper)}

    @traced("update_paper")
    def update_paper(self, request: Dict[str, Any]) -> Dict[str, Any]:
        user_id, user_id_msg = values.check(
            values.validate_user_id, request_text(request, "user", "id")
        )
        project_id, project_id_msg = values.check(
            values.validate_project_id, request_text(request, "project", "id")
        )
        paper_id, paper_id_msg = values.check(
            values.validate_paper_id, request_text(request, "paper", "id")
        )
        content, content_msg = values.check(
            values.validate_paper_content, request_text(request, "paper", "content")
        )
        if has_error(user_id_msg, project_id_msg, paper_id_msg, content_msg):
            raise validation_error(
                {
                    "user": {"id": user_id_msg},
                    "project": {"id": project_id_msg},
                    "paper": {"id": paper_id_msg, "content": content_msg},
                }
            )

        paper = PaperWithoutAutofield.model_construct(content=content)
        with service_errors():
            updated = self.service.update_paper(user_id, project_id, paper_id, paper)
        return {"paper": _paper_to_dict(updated)}
