"""Record models exchanged between repositories and services.

Records carry stored values as-is, without the domain rules. Services turn
them into entities (knodeledge.models.schema), which is where stored data
that breaks a rule is detected.
"""
import datetime
from typing import List

from pydantic import BaseModel, Field


class ProjectWithoutAutofieldEntry(BaseModel):
    name: str
    description: str = ""


class ProjectEntry(BaseModel):
    name: str
    description: str = ""
    user_id: str
    created_at: datetime.datetime
    updated_at: datetime.datetime


class SectionEntry(BaseModel):
    """Section summary stored on a chapter."""

    id: str
    name: str


class ChapterWithoutAutofieldEntry(BaseModel):
    name: str
    number: int


class ChapterEntry(BaseModel):
    name: str
    number: int
    sections: List[SectionEntry] = Field(default_factory=list)
    user_id: str
    created_at: datetime.datetime
    updated_at: datetime.datetime


class GraphChildEntry(BaseModel):
    name: str
    relation: str = ""
    description: str = ""
    children: List["GraphChildEntry"] = Field(default_factory=list)


class GraphWithoutAutofieldEntry(BaseModel):
    name: str
    paragraph: str = ""
    children: List[GraphChildEntry] = Field(default_factory=list)


class GraphContentEntry(BaseModel):
    paragraph: str = ""
    children: List[GraphChildEntry] = Field(default_factory=list)


class GraphEntry(BaseModel):
    name: str
    paragraph: str = ""
    children: List[GraphChildEntry] = Field(default_factory=list)
    user_id: str
    created_at: datetime.datetime
    updated_at: datetime.datetime


class PaperWithoutAutofieldEntry(BaseModel):
    content: str = ""


class PaperEntry(BaseModel):
    content: str = ""
    user_id: str
    created_at: datetime.datetime
    updated_at: datetime.datetime


GraphChildEntry.model_rebuild()
