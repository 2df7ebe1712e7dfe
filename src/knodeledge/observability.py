"""Logging setup and use case tracing.

Every use case method is wrapped with @traced. A traced call is logged at
DEBUG with a short correlation id and its outcome is counted in the
process-wide ``metrics``: "ok" when it returns, the UseCaseError kind
("not found", "invalid argument", ...) when it fails the usual way, and
"unexpected" for anything else.
"""
import functools
import logging
import time
import uuid
from collections import Counter
from logging.handlers import RotatingFileHandler
from pathlib import Path
from threading import Lock
from typing import Any, Callable, Dict, Optional, TypeVar, Union

from knodeledge.exceptions import UseCaseError

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s - %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%dT%H:%M:%S%z"
LOG_FILE_NAME = "knodeledge.log"

OUTCOME_OK = "ok"
OUTCOME_UNEXPECTED = "unexpected"

F = TypeVar("F", bound=Callable[..., Any])


def configure_logging(
    log_dir: Union[str, Path],
    level: int = logging.INFO,
    console: bool = True,
    max_bytes: int = 5 * 1024 * 1024,
    backup_count: int = 3,
) -> Path:
    """Send the knodeledge loggers to a rotating file under log_dir.

    Repeated calls reuse the handlers already attached, so running several
    commands in one process never duplicates log lines.

    Args:
        log_dir: Directory for knodeledge.log; created when missing
        level: Level for the package logger and its handlers
        console: Also write to stderr
        max_bytes: Size at which the log file is rotated
        backup_count: Rotated files to keep

    Returns:
        The log directory
    """
    log_path = Path(log_dir)
    log_path.mkdir(parents=True, exist_ok=True)

    package_logger = logging.getLogger("knodeledge")
    package_logger.setLevel(level)
    attached = package_logger.handlers

    handlers = []
    if not any(isinstance(h, RotatingFileHandler) for h in attached):
        handlers.append(
            RotatingFileHandler(
                log_path / LOG_FILE_NAME,
                maxBytes=max_bytes,
                backupCount=backup_count,
                encoding="utf-8",
            )
        )
    if console and not any(type(h) is logging.StreamHandler for h in attached):
        handlers.append(logging.StreamHandler())

    formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)
    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        package_logger.addHandler(handler)

    package_logger.debug(f"Logging to {log_path / LOG_FILE_NAME}")
    return log_path


class UseCaseMetrics:
    """Per-operation call outcomes and time spent, kept in memory."""

    def __init__(self):
        self._outcomes: Dict[str, Counter] = {}
        self._duration_ms: Dict[str, float] = {}
        self._lock = Lock()

    def record(self, operation: str, outcome: str, duration_ms: float) -> None:
        with self._lock:
            self._outcomes.setdefault(operation, Counter())[outcome] += 1
            self._duration_ms[operation] = self._duration_ms.get(operation, 0.0) + duration_ms

    def snapshot(self) -> Dict[str, Dict[str, Any]]:
        """Outcome counts and average duration, keyed by operation.

        Example:
            {"list_chapters": {"calls": 2, "outcomes": {"ok": 1, "not found": 1},
                               "avg_duration_ms": 1.7}}
        """
        with self._lock:
            result = {}
            for operation, outcomes in self._outcomes.items():
                calls = sum(outcomes.values())
                result[operation] = {
                    "calls": calls,
                    "outcomes": dict(outcomes),
                    "avg_duration_ms": round(self._duration_ms[operation] / calls, 2),
                }
            return result

    def reset(self) -> None:
        with self._lock:
            self._outcomes.clear()
            self._duration_ms.clear()


metrics = UseCaseMetrics()


def _request_context(args: tuple, kwargs: Dict[str, Any]) -> str:
    """Record ids named in a use case request, for log lines."""
    request = kwargs.get("request")
    if request is None:
        request = next((a for a in args if isinstance(a, dict)), None)
    if not isinstance(request, dict):
        return ""

    ids = []
    for key in ("project", "chapter", "graph"):
        part = request.get(key)
        if isinstance(part, dict) and part.get("id"):
            ids.append(f"{key}_id={part['id']}")
    return ", ".join(ids)


def traced(operation: Optional[str] = None) -> Callable[[F], F]:
    """Log a use case call and count its outcome in ``metrics``.

    Example:
        @traced("create_chapter")
        def create_chapter(self, request: Dict[str, Any]) -> Dict[str, Any]:
            ...
    """
    def decorator(func: F) -> F:
        name = operation or func.__name__

        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            correlation_id = uuid.uuid4().hex[:8]
            logger.debug(f"[{correlation_id}] START {name} ({_request_context(args, kwargs)})")
            start = time.perf_counter()
            outcome = OUTCOME_UNEXPECTED
            try:
                result = func(*args, **kwargs)
                outcome = OUTCOME_OK
                return result
            except UseCaseError as e:
                outcome = e.kind.value
                raise
            finally:
                duration_ms = (time.perf_counter() - start) * 1000
                metrics.record(name, outcome, duration_ms)
                logger.debug(f"[{correlation_id}] END {name} ({duration_ms:.2f}ms) [{outcome}]")

        return wrapper  # type: ignore
    return decorator
