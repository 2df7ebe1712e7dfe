"""Chapter use cases."""
from typing import Any, Dict

from knodeledge.models import values
from knodeledge.models.schema import ChapterWithoutAutofield
from knodeledge.observability import traced
from knodeledge.services.chapter_service import ChapterService
from knodeledge.usecases.base import (
    chapter_to_dict,
    has_error,
    request_text,
    request_value,
    service_errors,
    validation_error,
)


class ChapterUseCase:
    def __init__(self, service: ChapterService):
        self.service = service

    @traced("list_chapters")
    def list_chapters(self, request: Dict[str, Any]) -> Dict[str, Any]:
        user_id, user_id_msg = values.check(
            values.validate_user_id, request_text(request, "user", "id")
        )
        project_id, project_id_msg = values.check(
            values.validate_project_id, request_text(request, "project", "id")
        )
        if has_error(user_id_msg, project_id_msg):
            raise validation_error(
                {"user": {"id": user_id_msg}, "project": {"id": project_id_msg}}
            )

        with service_errors():
            chapters = self.service.list_chapters(user_id, project_id)
        return {"chapters": [chapter_to_dict(c) for c in chapters]}

    @traced("create_chapter")
    def create_chapter(self, request: Dict[str, Any]) -> Dict[str, Any]:
        user_id, user_id_msg = values.check(
            values.validate_user_id, request_text(request, "user", "id")
        )
        project_id, project_id_msg = values.check(
            values.validate_project_id, request_text(request, "project", "id")
        )
        name, name_msg = values.check(
            values.validate_chapter_name, request_text(request, "chapter", "name")
        )
        number, number_msg = values.check(
            values.validate_chapter_number, request_value(request, "chapter", "number", 0)
        )
        if has_error(user_id_msg, project_id_msg, name_msg, number_msg):
            raise validation_error(
                {
                    "user": {"id": user_id_msg},
                    "project": {"id": project_id_msg},
                    "chapter": {"name": name_msg, "number": number_msg},
                }
            )

        chapter = ChapterWithoutAutofield.model_construct(name=name, number=number)
        with service_errors():
            created = self.service.create_chapter(user_id, project_id, chapter)
        return {"chapter": chapter_to_dict(created)}

    @traced("update_chapter")
    def update_chapter(self, request: Dict[str, Any]) -> Dict[str, Any]:
        user_id, user_id_msg = values.check(
            values.validate_user_id, request_text(request, "user", "id")
        )
        project_id, project_id_msg = values.check(
            values.validate_project_id, request_text(request, "project", "id")
        )
        chapter_id, chapter_id_msg = values.check(
            values.validate_chapter_id, request_text(request, "chapter", "id")
        )
        name, name_msg = values.check(
            values.validate_chapter_name, request_text(request, "chapter", "name")
        )
        number, number_msg = values.check(
            values.validate_chapter_number, request_value(request, "chapter", "number", 0)
        )
        if has_error(user_id_msg, project_id_msg, chapter_id_msg, name_msg, number_msg):
            raise validation_error(
                {
                    "user": {"id": user_id_msg},
                    "project": {"id": project_id_msg},
                    "chapter": {
                        "id": chapter_id_msg,
                        "name": name_msg,
                        "number": number_msg,
                    },
                }
            )

        chapter = ChapterWithoutAutofield.model_construct(name=name, number=number)
        with service_errors():
            updated = self.service.update_chapter(user_id, project_id, chapter_id, chapter)
        return {"chapter": chapter_to_dict(updated)}

    @traced("delete_chapter")
    def delete_chapter(self, request: Dict[str, Any]) -> None:
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
            self.service.delete_chapter(user_id, project_id, chapter_id)
