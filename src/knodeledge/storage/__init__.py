"""Storage layer for the kNODEledge backend."""

from knodeledge.storage.base import Repository
from knodeledge.storage.chapter_repository import ChapterRepository
from knodeledge.storage.document_store import DocumentStore
from knodeledge.storage.graph_repository import GraphRepository
from knodeledge.storage.paper_repository import PaperRepository
from knodeledge.storage.project_repository import ProjectRepository

__all__ = [
    "Repository",
    "DocumentStore",
    "ProjectRepository",
    "ChapterRepository",
    "GraphRepository",
    "PaperRepository",
]
