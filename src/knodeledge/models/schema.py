"""Domain entities and error models for the kNODEledge backend.

Entities are pydantic models whose field validators delegate to
knodeledge.models.values, so an entity that exists is always valid. Error
models mirror the shape of the request they describe: one message per field
(empty string when the field is valid) and nested items for lists.
"""

import datetime
from datetime import timezone
from typing import Any, Dict, Iterable, List, Optional

from pydantic import BaseModel, Field, field_validator

from knodeledge.models import values

DUPLICATED_CHILD_NAME_TEMPLATE = (
    "names of children must be unique, but got '{}' duplicated"
)


def utc_now() -> datetime.datetime:
    """Get current UTC time as timezone-aware datetime."""
    return datetime.datetime.now(timezone.utc)


def ensure_timezone_aware(dt_value: datetime.datetime) -> datetime.datetime:
    """Ensure a datetime is timezone-aware, treating naive datetimes as UTC.

    SQLite drops tzinfo, so datetimes read back from the store are naive.
    """
    if dt_value is None:
        return utc_now()
    if dt_value.tzinfo is None:
        return dt_value.replace(tzinfo=timezone.utc)
    return dt_value


def find_duplicated_name(names: Iterable[str]) -> Optional[str]:
    """Return the first name seen twice in iteration order, or None."""
    seen = set()
    for name in names:
        if name in seen:
            return name
        seen.add(name)
    return None


def validate_unique_children(children: List["GraphChild"]) -> List["GraphChild"]:
    """Raise ValueError when two siblings share a name."""
    duplicated = find_duplicated_name(child.name for child in children)
    if duplicated is not None:
        raise ValueError(DUPLICATED_CHILD_NAME_TEMPLATE.format(duplicated))
    return children


class Timestamped(BaseModel):
    """Mixin for records carrying store-assigned timestamps."""

    created_at: datetime.datetime = Field(
        default_factory=utc_now, description="When the record was created (UTC)"
    )
    updated_at: datetime.datetime = Field(
        default_factory=utc_now, description="When the record was last updated (UTC)"
    )

    @field_validator("created_at", "updated_at")
    @classmethod
    def validate_timestamps(cls, v: datetime.datetime) -> datetime.datetime:
        return ensure_timezone_aware(v)


# =============================================================================
# Projects
# =============================================================================


class ProjectWithoutAutofield(BaseModel):
    """Project fields supplied by the user."""

    name: str = Field(..., description="Project name")
    description: str = Field(default="", description="Project description")

    model_config = {"validate_assignment": True, "extra": "forbid"}

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        return values.validate_project_name(v)

    @field_validator("description")
    @classmethod
    def validate_description(cls, v: str) -> str:
        return values.validate_project_description(v)


class Project(Timestamped):
    """A project owning an ordered list of chapters."""

    id: str = Field(..., description="Store-assigned project ID")
    name: str = Field(..., description="Project name")
    description: str = Field(default="", description="Project description")
    author_id: str = Field(..., description="ID of the owning user")

    model_config = {"validate_assignment": True, "extra": "forbid"}

    @field_validator("id")
    @classmethod
    def validate_id(cls, v: str) -> str:
        return values.validate_project_id(v)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        return values.validate_project_name(v)

    @field_validator("description")
    @classmethod
    def validate_description(cls, v: str) -> str:
        return values.validate_project_description(v)

    @field_validator("author_id")
    @classmethod
    def validate_author_id(cls, v: str) -> str:
        return values.validate_user_id(v)

    def authored_by(self, user_id: str) -> bool:
        return self.author_id == user_id


# =============================================================================
# Chapters and sections
# =============================================================================


class SectionOfChapter(BaseModel):
    """Name-only pointer from a chapter to one of its sections."""

    id: str
    name: str

    model_config = {"validate_assignment": True, "extra": "forbid"}

    @field_validator("id")
    @classmethod
    def validate_id(cls, v: str) -> str:
        return values.validate_section_id(v)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        return values.validate_section_name(v)


class ChapterWithoutAutofield(BaseModel):
    """Chapter fields supplied by the user. number is the target position."""

    name: str
    number: int

    model_config = {"validate_assignment": True, "extra": "forbid"}

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        return values.validate_chapter_name(v)

    @field_validator("number")
    @classmethod
    def validate_number(cls, v: int) -> int:
        return values.validate_chapter_number(v)


class Chapter(Timestamped):
    """A chapter. Its number is derived from the project's chapter order."""

    id: str = Field(..., description="Store-assigned chapter ID")
    name: str = Field(..., description="Chapter name")
    number: int = Field(..., description="1-based position within the project")
    sections: List[SectionOfChapter] = Field(default_factory=list)

    model_config = {"validate_assignment": True, "extra": "forbid"}

    @field_validator("id")
    @classmethod
    def validate_id(cls, v: str) -> str:
        return values.validate_chapter_id(v)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        return values.validate_chapter_name(v)

    @field_validator("number")
    @classmethod
    def validate_number(cls, v: int) -> int:
        return values.validate_chapter_number(v)


class SectionWithoutAutofield(BaseModel):
    """One section of a sectionalize request."""

    name: str
    content: str = ""

    model_config = {"validate_assignment": True, "extra": "forbid"}

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        return values.validate_section_name(v)

    @field_validator("content")
    @classmethod
    def validate_content(cls, v: str) -> str:
        return values.validate_section_content(v)


# =============================================================================
# Graphs
# =============================================================================


class GraphChild(BaseModel):
    """A node of the recursive children tree of a graph."""

    name: str = Field(..., description="Name of the related concept")
    relation: str = Field(default="", description="Label of the relation")
    description: str = Field(default="", description="Description of the relation")
    children: List["GraphChild"] = Field(default_factory=list)

    model_config = {"validate_assignment": True, "extra": "forbid"}

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        return values.validate_graph_name(v)

    @field_validator("relation")
    @classmethod
    def validate_relation(cls, v: str) -> str:
        return values.validate_graph_relation(v)

    @field_validator("description")
    @classmethod
    def validate_description(cls, v: str) -> str:
        return values.validate_graph_description(v)

    @field_validator("children")
    @classmethod
    def validate_children(cls, v: List["GraphChild"]) -> List["GraphChild"]:
        return validate_unique_children(v)


class GraphContent(BaseModel):
    """Replaceable content of a graph."""

    paragraph: str = ""
    children: List[GraphChild] = Field(default_factory=list)

    model_config = {"validate_assignment": True, "extra": "forbid"}

    @field_validator("paragraph")
    @classmethod
    def validate_paragraph(cls, v: str) -> str:
        return values.validate_graph_paragraph(v)

    @field_validator("children")
    @classmethod
    def validate_children(cls, v: List[GraphChild]) -> List[GraphChild]:
        return validate_unique_children(v)


class Graph(Timestamped):
    """A section rendered as a knowledge-graph node. Its id is the section id."""

    id: str = Field(..., description="Section ID")
    name: str = Field(..., description="Section name")
    paragraph: str = Field(default="", description="Paragraph text")
    children: List[GraphChild] = Field(default_factory=list)

    model_config = {"validate_assignment": True, "extra": "forbid"}

    @field_validator("id")
    @classmethod
    def validate_id(cls, v: str) -> str:
        return values.validate_graph_id(v)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        return values.validate_graph_name(v)

    @field_validator("paragraph")
    @classmethod
    def validate_paragraph(cls, v: str) -> str:
        return values.validate_graph_paragraph(v)

    @field_validator("children")
    @classmethod
    def validate_children(cls, v: List[GraphChild]) -> List[GraphChild]:
        return validate_unique_children(v)


# =============================================================================
# Papers
# =============================================================================


class PaperWithoutAutofield(BaseModel):
    content: str = ""

    model_config = {"validate_assignment": True, "extra": "forbid"}

    @field_validator("content")
    @classmethod
    def validate_content(cls, v: str) -> str:
        return values.validate_paper_content(v)


class Paper(Timestamped):
    """A chapter's flat paper text. Its id is the chapter id."""

    id: str
    content: str = ""

    model_config = {"validate_assignment": True, "extra": "forbid"}

    @field_validator("id")
    @classmethod
    def validate_id(cls, v: str) -> str:
        return values.validate_paper_id(v)

    @field_validator("content")
    @classmethod
    def validate_content(cls, v: str) -> str:
        return values.validate_paper_content(v)


# =============================================================================
# Error models
# =============================================================================


class GraphChildrenError(BaseModel):
    """Errors of one children list: a level message plus one item per child."""

    message: str = ""
    items: List["GraphChildError"] = Field(default_factory=list)

    def has_error(self) -> bool:
        pending = [self]
        while pending:
            level = pending.pop()
            if level.message:
                return True
            for item in level.items:
                if item.name or item.relation or item.description:
                    return True
                pending.append(item.children)
        return False

    def to_dict(self) -> Dict[str, Any]:
        """Plain dict of the whole error tree, built without recursion."""
        root: Dict[str, Any] = {"message": self.message, "items": []}
        pending = [(self, root)]
        while pending:
            level, out = pending.pop()
            for item in level.items:
                children: Dict[str, Any] = {"message": item.children.message, "items": []}
                out["items"].append(
                    {
                        "name": item.name,
                        "relation": item.relation,
                        "description": item.description,
                        "children": children,
                    }
                )
                pending.append((item.children, children))
        return root


class GraphChildError(BaseModel):
    """Errors of one child node, including the errors of its own children."""

    name: str = ""
    relation: str = ""
    description: str = ""
    children: GraphChildrenError = Field(default_factory=GraphChildrenError)

    def has_error(self) -> bool:
        return bool(self.name or self.relation or self.description) or self.children.has_error()


class SectionWithoutAutofieldError(BaseModel):
    name: str = ""
    content: str = ""

    def has_error(self) -> bool:
        return bool(self.name or self.content)


class SectionWithoutAutofieldListError(BaseModel):
    message: str = ""
    items: List[SectionWithoutAutofieldError] = Field(default_factory=list)

    def has_error(self) -> bool:
        return bool(self.message) or any(item.has_error() for item in self.items)


GraphChild.model_rebuild()
GraphChildrenError.model_rebuild()
