"""Common test fixtures for the kNODEledge backend."""

import pytest

from knodeledge.models.db_models import init_db
from knodeledge.models.records import ProjectWithoutAutofieldEntry
from knodeledge.observability import metrics
from knodeledge.services.chapter_service import ChapterService
from knodeledge.services.graph_service import GraphService
from knodeledge.services.paper_service import PaperService
from knodeledge.services.project_service import ProjectService
from knodeledge.storage.chapter_repository import ChapterRepository
from knodeledge.storage.document_store import DocumentStore
from knodeledge.storage.graph_repository import GraphRepository
from knodeledge.storage.paper_repository import PaperRepository
from knodeledge.storage.project_repository import ProjectRepository

USER_ID = "user-1"
OTHER_USER_ID = "user-2"


@pytest.fixture
def engine():
    """In-memory SQLite engine with the documents table."""
    engine = init_db("sqlite://")
    yield engine
    engine.dispose()


@pytest.fixture
def store(engine):
    return DocumentStore(engine)


@pytest.fixture(autouse=True)
def _reset_metrics():
    metrics.reset()
    yield


@pytest.fixture
def project_repository(store):
    return ProjectRepository(store)


@pytest.fixture
def chapter_repository(store):
    return ChapterRepository(store)


@pytest.fixture
def paper_repository(store):
    return PaperRepository(store)


@pytest.fixture
def graph_repository(store, chapter_repository):
    return GraphRepository(store, chapter_repository)


@pytest.fixture
def project_service(project_repository):
    return ProjectService(project_repository)


@pytest.fixture
def chapter_service(chapter_repository):
    return ChapterService(chapter_repository)


@pytest.fixture
def paper_service(paper_repository):
    return PaperService(paper_repository)


@pytest.fixture
def graph_service(graph_repository, chapter_repository):
    return GraphService(graph_repository, chapter_repository)


@pytest.fixture
def project_id(project_repository):
    """A project owned by USER_ID with no chapters."""
    project_id, _ = project_repository.insert_project(
        USER_ID, ProjectWithoutAutofieldEntry(name="Project", description="")
    )
    return project_id
