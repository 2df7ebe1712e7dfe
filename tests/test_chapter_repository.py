"""Tests for ChapterRepository and the chapter ordering it maintains."""
import pytest

from knodeledge.exceptions import (
    ErrorCode,
    InvalidArgumentError,
    NotFoundError,
    ReadFailureError,
)
from knodeledge.models.records import (
    ChapterWithoutAutofieldEntry,
    PaperWithoutAutofieldEntry,
    SectionEntry,
)
from knodeledge.storage.base import PROJECT_COLLECTION, chapters_path, graphs_path, papers_path

USER_ID = "user-1"
OTHER_USER_ID = "user-2"


def entry(name, number):
    return ChapterWithoutAutofieldEntry(name=name, number=number)


def chapter_ids(store, project_id):
    return store.get(PROJECT_COLLECTION, project_id).get("chapterIds")


def names_in_order(chapter_repository, project_id):
    chapters = chapter_repository.fetch_project_chapters(USER_ID, project_id)
    return [c.name for c in sorted(chapters.values(), key=lambda c: c.number)]


class TestInsertChapter:
    """Tests for ChapterRepository.insert_chapter()."""

    def test_insert_into_empty_project(self, chapter_repository, store, project_id):
        chapter_id, created = chapter_repository.insert_chapter(
            USER_ID, project_id, entry("Chapter One", 1)
        )

        assert created.name == "Chapter One"
        assert created.number == 1
        assert created.sections == []
        assert created.user_id == USER_ID
        assert chapter_ids(store, project_id) == [chapter_id]

    def test_insert_then_read_round_trip(self, chapter_repository, project_id):
        chapter_id, created = chapter_repository.insert_chapter(
            USER_ID, project_id, entry("Chapter One", 1)
        )

        chapters = chapter_repository.fetch_project_chapters(USER_ID, project_id)

        assert chapters[chapter_id].name == "Chapter One"
        assert chapters[chapter_id].number == 1
        assert chapters[chapter_id].created_at == created.created_at

    def test_insert_in_middle_shifts_later_chapters(self, chapter_repository, store, project_id):
        a, _ = chapter_repository.insert_chapter(USER_ID, project_id, entry("A", 1))
        c, _ = chapter_repository.insert_chapter(USER_ID, project_id, entry("C", 2))
        b, _ = chapter_repository.insert_chapter(USER_ID, project_id, entry("B", 2))

        assert chapter_ids(store, project_id) == [a, b, c]
        chapters = chapter_repository.fetch_project_chapters(USER_ID, project_id)
        assert [chapters[i].number for i in (a, b, c)] == [1, 2, 3]

    def test_insert_with_paper_writes_both(self, chapter_repository, store, project_id):
        chapter_id, _ = chapter_repository.insert_chapter(
            USER_ID, project_id, entry("A", 1), paper=PaperWithoutAutofieldEntry(content="")
        )

        paper = store.get(papers_path(project_id), chapter_id)
        assert paper.get("content") == ""
        assert chapter_ids(store, project_id) == [chapter_id]

    def test_insert_at_front(self, chapter_repository, project_id):
        chapter_repository.insert_chapter(USER_ID, project_id, entry("B", 1))
        chapter_repository.insert_chapter(USER_ID, project_id, entry("A", 1))
        assert names_in_order(chapter_repository, project_id) == ["A", "B"]

    def test_number_past_end_plus_one_is_rejected(self, chapter_repository, store, project_id):
        chapter_repository.insert_chapter(USER_ID, project_id, entry("A", 1))

        with pytest.raises(InvalidArgumentError) as exc_info:
            chapter_repository.insert_chapter(USER_ID, project_id, entry("C", 3))

        assert exc_info.value.message == "chapter number is too large"
        assert exc_info.value.code == ErrorCode.INVALID_ARGUMENT
        assert len(chapter_ids(store, project_id)) == 1
        assert len(store.list(chapters_path(project_id))) == 1

    @pytest.mark.parametrize("number", [0, -1])
    def test_number_below_one_is_rejected(self, chapter_repository, store, project_id, number):
        for position, name in enumerate(["A", "B", "C"], start=1):
            chapter_repository.insert_chapter(USER_ID, project_id, entry(name, position))
        before = chapter_ids(store, project_id)

        with pytest.raises(InvalidArgumentError) as exc_info:
            chapter_repository.insert_chapter(USER_ID, project_id, entry("X", number))

        assert exc_info.value.message == "chapter number is too small"
        assert chapter_ids(store, project_id) == before
        assert len(store.list(chapters_path(project_id))) == 3

    def test_missing_chapter_ids_counts_as_empty(self, chapter_repository, store):
        store.create(PROJECT_COLLECTION, "legacy", {"name": "Old", "userId": USER_ID})

        chapter_id, created = chapter_repository.insert_chapter(
            USER_ID, "legacy", entry("A", 1)
        )

        assert created.number == 1
        assert chapter_ids(store, "legacy") == [chapter_id]

    def test_other_users_project_is_not_found(self, chapter_repository, project_id):
        with pytest.raises(NotFoundError) as exc_info:
            chapter_repository.insert_chapter(OTHER_USER_ID, project_id, entry("A", 1))
        assert exc_info.value.message == "project not found"

    def test_missing_project_is_not_found(self, chapter_repository):
        with pytest.raises(NotFoundError) as exc_info:
            chapter_repository.insert_chapter(USER_ID, "missing", entry("A", 1))
        assert exc_info.value.message == "project not found"


class TestUpdateChapter:
    """Tests for ChapterRepository.update_chapter()."""

    @pytest.fixture
    def three_chapters(self, chapter_repository, project_id):
        ids = []
        for number, name in enumerate(["A", "B", "C"], start=1):
            chapter_id, _ = chapter_repository.insert_chapter(
                USER_ID, project_id, entry(name, number)
            )
            ids.append(chapter_id)
        return ids

    def test_rename_in_place_leaves_chapter_ids_untouched(
        self, chapter_repository, store, project_id, three_chapters
    ):
        a, b, c = three_chapters
        before = store.get(PROJECT_COLLECTION, project_id)

        updated = chapter_repository.update_chapter(USER_ID, project_id, b, entry("B2", 2))

        after = store.get(PROJECT_COLLECTION, project_id)
        assert updated.name == "B2"
        assert updated.number == 2
        assert after.data == before.data

    def test_move_forward(self, chapter_repository, store, project_id, three_chapters):
        a, b, c = three_chapters

        updated = chapter_repository.update_chapter(USER_ID, project_id, a, entry("A", 3))

        assert updated.number == 3
        assert chapter_ids(store, project_id) == [b, c, a]

    def test_move_backward(self, chapter_repository, store, project_id, three_chapters):
        a, b, c = three_chapters

        chapter_repository.update_chapter(USER_ID, project_id, c, entry("C", 1))

        assert chapter_ids(store, project_id) == [c, a, b]
        assert names_in_order(chapter_repository, project_id) == ["C", "A", "B"]

    def test_number_past_end_is_rejected(self, chapter_repository, project_id, three_chapters):
        with pytest.raises(InvalidArgumentError) as exc_info:
            chapter_repository.update_chapter(
                USER_ID, project_id, three_chapters[0], entry("A", 4)
            )
        assert exc_info.value.message == "chapter number is too large"

    @pytest.mark.parametrize("number", [0, -1])
    def test_number_below_one_is_rejected(
        self, chapter_repository, store, project_id, three_chapters, number
    ):
        with pytest.raises(InvalidArgumentError) as exc_info:
            chapter_repository.update_chapter(
                USER_ID, project_id, three_chapters[2], entry("C", number)
            )

        assert exc_info.value.message == "chapter number is too small"
        assert chapter_ids(store, project_id) == three_chapters
        assert names_in_order(chapter_repository, project_id) == ["A", "B", "C"]

    def test_missing_chapter_is_not_found(self, chapter_repository, project_id, three_chapters):
        with pytest.raises(NotFoundError) as exc_info:
            chapter_repository.update_chapter(USER_ID, project_id, "missing", entry("X", 1))
        assert exc_info.value.message == "chapter not found"

    def test_chapter_missing_from_ids_is_read_failure(
        self, chapter_repository, store, project_id, three_chapters
    ):
        store.create(chapters_path(project_id), "stray", {"name": "Stray", "sections": []})

        with pytest.raises(ReadFailureError) as exc_info:
            chapter_repository.update_chapter(USER_ID, project_id, "stray", entry("Stray", 1))
        assert exc_info.value.message == "chapterIds have deficient elements"


class TestFetchProjectChapters:
    """Tests for ChapterRepository.fetch_project_chapters()."""

    def test_empty_project(self, chapter_repository, project_id):
        assert chapter_repository.fetch_project_chapters(USER_ID, project_id) == {}

    def test_chapter_document_not_in_ids_is_deficient(self, chapter_repository, store, project_id):
        chapter_repository.insert_chapter(USER_ID, project_id, entry("A", 1))
        store.create(chapters_path(project_id), "stray", {"name": "Stray", "sections": []})

        with pytest.raises(ReadFailureError) as exc_info:
            chapter_repository.fetch_project_chapters(USER_ID, project_id)
        assert exc_info.value.message == "chapterIds have deficient elements"

    def test_id_without_document_is_excessive(self, chapter_repository, store, project_id):
        chapter_id, _ = chapter_repository.insert_chapter(USER_ID, project_id, entry("A", 1))
        store.update(PROJECT_COLLECTION, project_id, {"chapterIds": [chapter_id, "ghost"]})

        with pytest.raises(ReadFailureError) as exc_info:
            chapter_repository.fetch_project_chapters(USER_ID, project_id)
        assert exc_info.value.message == "chapterIds have excessive elements"

    def test_other_user_is_not_found(self, chapter_repository, project_id):
        with pytest.raises(NotFoundError):
            chapter_repository.fetch_project_chapters(OTHER_USER_ID, project_id)


class TestSectionsAndDelete:
    def test_update_chapter_sections(self, chapter_repository, project_id):
        chapter_id, _ = chapter_repository.insert_chapter(USER_ID, project_id, entry("A", 1))

        updated = chapter_repository.update_chapter_sections(
            USER_ID,
            project_id,
            chapter_id,
            [SectionEntry(id="s1", name="Intro"), SectionEntry(id="s2", name="Body")],
        )

        assert [(s.id, s.name) for s in updated.sections] == [("s1", "Intro"), ("s2", "Body")]
        fetched = chapter_repository.fetch_chapter(USER_ID, project_id, chapter_id)
        assert [s.name for s in fetched.sections] == ["Intro", "Body"]

    def test_delete_removes_chapter_paper_graphs_and_id(
        self, chapter_repository, store, project_id
    ):
        a, _ = chapter_repository.insert_chapter(USER_ID, project_id, entry("A", 1))
        b, _ = chapter_repository.insert_chapter(USER_ID, project_id, entry("B", 2))
        store.create(papers_path(project_id), a, {"content": ""})
        store.create(graphs_path(project_id, a), "g1", {"paragraph": ""})

        chapter_repository.delete_chapter(USER_ID, project_id, a)

        assert chapter_ids(store, project_id) == [b]
        assert store.list(papers_path(project_id)) == []
        assert store.list(graphs_path(project_id, a)) == []
        chapters = chapter_repository.fetch_project_chapters(USER_ID, project_id)
        assert chapters[b].number == 1

    def test_delete_missing_chapter_is_not_found(self, chapter_repository, project_id):
        with pytest.raises(NotFoundError):
            chapter_repository.delete_chapter(USER_ID, project_id, "missing")
