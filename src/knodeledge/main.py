#!/usr/bin/env python
"""Command line entry point for the kNODEledge backend."""
import argparse
import json
import logging
import os
import sys
from pathlib import Path
from typing import List, Optional

from knodeledge import __version__
from knodeledge.config import config
from knodeledge.exceptions import KnodeledgeError, ReadFailureError, UseCaseError
from knodeledge.models.db_models import init_db
from knodeledge.observability import configure_logging, metrics
from knodeledge.services.chapter_service import ChapterService
from knodeledge.storage.chapter_repository import ChapterRepository
from knodeledge.storage.document_store import DocumentStore
from knodeledge.usecases.chapter import ChapterUseCase


def parse_args(argv: Optional[List[str]] = None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(description="kNODEledge backend")
    parser.add_argument("--version", action="version", version=__version__)
    parser.add_argument(
        "--database-path",
        help="SQLite database file path",
        type=str,
        default=os.environ.get("KNODELEDGE_DATABASE_PATH")
    )
    parser.add_argument(
        "--log-level",
        help="Logging level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        default=config.log_level
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("init-db", help="Create the document table")

    for name, help_text in (
        ("list-chapters", "Print the chapters of a project as JSON"),
        ("check-integrity", "Check chapterIds against the chapter documents"),
    ):
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument("--user", required=True, help="ID of the project author")
        sub.add_argument("--project", required=True, help="Project ID")

    return parser.parse_args(argv)


def update_config(args):
    """Update the global config with command line arguments."""
    if args.database_path:
        config.database_path = Path(args.database_path)


def _list_chapters(store: DocumentStore, args) -> int:
    usecase = ChapterUseCase(
        ChapterService(ChapterRepository(store))
    )
    try:
        response = usecase.list_chapters(
            {"user": {"id": args.user}, "project": {"id": args.project}}
        )
    except UseCaseError as e:
        print(json.dumps(e.to_dict(), ensure_ascii=False, indent=2))
        return 1
    print(json.dumps(response, ensure_ascii=False, indent=2))
    return 0


def _check_integrity(store: DocumentStore, args) -> int:
    try:
        chapters = ChapterRepository(store).fetch_project_chapters(args.user, args.project)
    except ReadFailureError as e:
        print(json.dumps({"ok": False, "error": e.message}))
        return 1
    except KnodeledgeError as e:
        print(json.dumps({"ok": False, "error": e.message}))
        return 2
    print(json.dumps({"ok": True, "chapters": len(chapters)}))
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Run one command against the configured database."""
    args = parse_args(argv)
    update_config(args)

    log_level = getattr(logging, args.log_level.upper(), logging.INFO)
    try:
        configure_logging(log_dir=config.log_dir, level=log_level, console=True)
    except OSError as e:
        # Fall back to basic console logging if file logging fails
        logging.basicConfig(level=log_level)
        logging.getLogger(__name__).warning(f"Failed to configure file logging: {e}")

    logger = logging.getLogger(__name__)

    try:
        logger.info(f"Using SQLite database: {config.get_db_url()}")
        engine = init_db()
    except Exception as e:
        logger.error(f"Failed to initialize database: {e}")
        return 1

    if args.command == "init-db":
        logger.info("Database initialized")
        engine.dispose()
        return 0

    store = DocumentStore(engine)
    try:
        if args.command == "list-chapters":
            return _list_chapters(store, args)
        return _check_integrity(store, args)
    finally:
        store.close()
        for operation, counts in metrics.snapshot().items():
            logger.info(f"{operation}: {counts}")


if __name__ == "__main__":
    sys.exit(main())
