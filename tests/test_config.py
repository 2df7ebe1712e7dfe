"""Tests for configuration, observability and the command line entry point."""
import json
import logging

import pytest

from knodeledge import main as cli
from knodeledge.config import KnodeledgeConfig, config
from knodeledge.exceptions import UseCaseError, UseCaseErrorKind
from knodeledge.models.records import ChapterWithoutAutofieldEntry, ProjectWithoutAutofieldEntry
from knodeledge.observability import UseCaseMetrics, configure_logging, metrics, traced
from knodeledge.storage.base import PROJECT_COLLECTION
from knodeledge.storage.chapter_repository import ChapterRepository
from knodeledge.storage.document_store import DocumentStore
from knodeledge.storage.project_repository import ProjectRepository


class TestConfig:
    def test_env_overrides(self, monkeypatch, tmp_path):
        monkeypatch.setenv("KNODELEDGE_BASE_DIR", str(tmp_path))
        monkeypatch.setenv("KNODELEDGE_MAX_GRAPH_DEPTH", "8")
        monkeypatch.setenv("KNODELEDGE_IN_MEMORY_DB", "true")

        cfg = KnodeledgeConfig()

        assert cfg.base_dir == tmp_path
        assert cfg.max_graph_depth == 8
        assert cfg.get_db_url() == "sqlite://"

    def test_file_database_url_is_under_base_dir(self, monkeypatch, tmp_path):
        monkeypatch.setenv("KNODELEDGE_BASE_DIR", str(tmp_path))
        monkeypatch.setenv("KNODELEDGE_IN_MEMORY_DB", "false")
        monkeypatch.setenv("KNODELEDGE_DATABASE_PATH", "db/test.db")

        url = KnodeledgeConfig().get_db_url()

        assert url == f"sqlite:///{tmp_path / 'db' / 'test.db'}"
        assert (tmp_path / "db").is_dir()

    def test_non_positive_depth_is_rejected(self, monkeypatch):
        monkeypatch.setenv("KNODELEDGE_MAX_GRAPH_DEPTH", "0")
        with pytest.raises(ValueError):
            KnodeledgeConfig()

    def test_unknown_log_level_falls_back_to_info(self, monkeypatch):
        monkeypatch.setenv("KNODELEDGE_LOG_LEVEL", "chatty")
        assert KnodeledgeConfig().log_level == "INFO"


class TestObservability:
    def test_metrics_count_outcomes_per_operation(self):
        collector = UseCaseMetrics()
        collector.record("find_paper", "ok", 1.0)
        collector.record("find_paper", "not found", 3.0)

        snapshot = collector.snapshot()["find_paper"]

        assert snapshot == {
            "calls": 2,
            "outcomes": {"ok": 1, "not found": 1},
            "avg_duration_ms": 2.0,
        }

    def test_traced_counts_use_case_error_kind(self):
        @traced("finding")
        def finding(request):
            raise UseCaseError.with_message(UseCaseErrorKind.NOT_FOUND, "project not found")

        with pytest.raises(UseCaseError):
            finding({"project": {"id": "p1"}})

        assert metrics.snapshot()["finding"]["outcomes"] == {"not found": 1}

    def test_traced_counts_other_errors_as_unexpected(self):
        @traced("failing")
        def failing(request):
            raise RuntimeError("nope")

        with pytest.raises(RuntimeError):
            failing({"project": {"id": "p1"}})

        assert metrics.snapshot()["failing"]["outcomes"] == {"unexpected": 1}

    def test_configure_logging_does_not_duplicate_handlers(self, tmp_path):
        logger = logging.getLogger("knodeledge")
        try:
            configure_logging(tmp_path, console=False)
            configure_logging(tmp_path, console=False)

            assert len(logger.handlers) == 1
            assert (tmp_path / "knodeledge.log").exists()
        finally:
            for handler in list(logger.handlers):
                handler.close()
                logger.removeHandler(handler)


class TestMain:
    @pytest.fixture
    def database(self, monkeypatch, tmp_path):
        monkeypatch.setattr(config, "base_dir", tmp_path)
        monkeypatch.setattr(config, "in_memory_db", False)
        monkeypatch.setattr(config, "database_path", tmp_path / "cli.db")
        monkeypatch.setattr(config, "log_dir", tmp_path / "logs")
        yield tmp_path / "cli.db"
        logger = logging.getLogger("knodeledge")
        for handler in list(logger.handlers):
            handler.close()
            logger.removeHandler(handler)

    def seed(self):
        store = DocumentStore()
        project_id, _ = ProjectRepository(store).insert_project(
            "u1", ProjectWithoutAutofieldEntry(name="P")
        )
        ChapterRepository(store).insert_chapter(
            "u1", project_id, ChapterWithoutAutofieldEntry(name="C", number=1)
        )
        return store, project_id

    def test_init_db(self, database):
        assert cli.main(["init-db"]) == 0
        assert database.exists()
        assert (database.parent / "logs" / "knodeledge.log").exists()

    def test_list_chapters(self, database, capsys):
        store, project_id = self.seed()
        store.close()

        code = cli.main(["list-chapters", "--user", "u1", "--project", project_id])

        assert code == 0
        output = json.loads(capsys.readouterr().out)
        assert [c["name"] for c in output["chapters"]] == ["C"]
        log_text = (database.parent / "logs" / "knodeledge.log").read_text(encoding="utf-8")
        assert "list_chapters: {'calls': 1, 'outcomes': {'ok': 1}" in log_text

    def test_check_integrity_fails_on_excessive_ids(self, database, capsys):
        store, project_id = self.seed()
        ids = store.get(PROJECT_COLLECTION, project_id).get("chapterIds")
        store.update(PROJECT_COLLECTION, project_id, {"chapterIds": ids + ["ghost"]})
        store.close()

        code = cli.main(["check-integrity", "--user", "u1", "--project", project_id])

        assert code == 1
        output = json.loads(capsys.readouterr().out)
        assert output == {"ok": False, "error": "chapterIds have excessive elements"}
