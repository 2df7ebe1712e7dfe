"""Project use cases."""
from typing import Any, Dict

from knodeledge.models import values
from knodeledge.models.schema import Project, ProjectWithoutAutofield
from knodeledge.observability import traced
from knodeledge.services.project_service import ProjectService
from knodeledge.usecases.base import (
    has_error,
    request_text,
    service_errors,
    validation_error,
)


def _project_to_dict(project: Project) -> Dict[str, Any]:
    return {
        "id": project.id,
        "name": project.name,
        "description": project.description,
    }


class ProjectUseCase:
    def __init__(self, service: ProjectService):
        self.service = service

    @traced("list_projects")
    def list_projects(self, request: Dict[str, Any]) -> Dict[str, Any]:
        user_id, user_id_msg = values.check(
            values.validate_user_id, request_text(request, "user", "id")
        )
        if user_id_msg:
            raise validation_error({"user": {"id": user_id_msg}})

        with service_errors():
            projects = self.service.list_projects(user_id)
        return {"projects": [_project_to_dict(p) for p in projects]}

    @traced("find_project")
    def find_project(self, request: Dict[str, Any]) -> Dict[str, Any]:
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
            project = self.service.find_project(user_id, project_id)
        return {"project": _project_to_dict(project)}

    @traced("create_project")
    def create_project(self, request: Dict[str, Any]) -> Dict[str, Any]:
        user_id, user_id_msg = values.check(
            values.validate_user_id, request_text(request, "user", "id")
        )
        name, name_msg = values.check(
            values.validate_project_name, request_text(request, "project", "name")
        )
        description, description_msg = values.check(
            values.validate_project_description,
            request_text(request, "project", "description"),
        )
        if has_error(user_id_msg, name_msg, description_msg):
            raise validation_error(
                {
                    "user": {"id": user_id_msg},
                    "project": {"name": name_msg, "description": description_msg},
                }
            )

        project = ProjectWithoutAutofield.model_construct(name=name, description=description)
        with service_errors():
            created = self.service.create_project(user_id, project)
        return {"project": _project_to_dict(created)}

    @traced("update_project")
    def update_project(self, request: Dict[str, Any]) -> Dict[str, Any]:
        user_id, user_id_msg = values.check(
            values.validate_user_id, request_text(request, "user", "id")
        )
        project_id, project_id_msg = values.check(
            values.validate_project_id, request_text(request, "project", "id")
        )
        name, name_msg = values.check(
            values.validate_project_name, request_text(request, "project", "name")
        )
        description, description_msg = values.check(
            values.validate_project_description,
            request_text(request, "project", "description"),
        )
        if has_error(user_id_msg, project_id_msg, name_msg, description_msg):
            raise validation_error(
                {
                    "user": {"id": user_id_msg},
                    "project": {
                        "id": project_id_msg,
                        "name": name_msg,
                        "description": description_msg,
                    },
                }
            )

        project = ProjectWithoutAutofield.model_construct(name=name, description=description)
        with service_errors():
            updated = self.service.update_project(user_id, project_id, project)
        return {"project": _project_to_dict(updated)}

    @traced("delete_project")
    def delete_project(self, request: Dict[str, Any]) -> None:
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
            self.service.delete_project(user_id, project_id)
